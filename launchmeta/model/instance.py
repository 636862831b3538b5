from typing import List

from pydantic import Field

from . import MetaBase


class InstanceConfiguration(MetaBase):
    """What is left once an instance is acquired: the runtime to start and the arguments to pass it."""

    instance_name: str = Field(alias="instanceName")
    runtime_path: str = Field(alias="runtimePath")
    arguments: List[str]


class Account(MetaBase):
    display_name: str = Field(alias="displayName")
    uuid: str
    access_token: str = Field(alias="accessToken")
