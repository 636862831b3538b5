from datetime import datetime
from typing import Annotated, Optional, List, Dict, Iterator, Union, Literal, Tuple

from pydantic import ConfigDict, Field, RootModel, field_validator

from ..common import replace_old_launchermeta_url
from .enum import StrEnum
from .downloadable import AssetDownload, RuntimeFileDownload
from . import (
    MetaBase,
    MojangArtifactBase,
    MojangAssets,
    MojangLogging,
    MojangRules,
    Library,
)

DEFAULT_JAVA_MAJOR = 8  # By default, we should recommend Java 8 if we don't know better
DEFAULT_JAVA_NAME = "jre-legacy"
LEGACY_JVM_ARGUMENTS = ["-Djava.library.path=${natives_directory}", "-cp", "${classpath}"]

"""
Mojang index files look like this:
{
    "latest": {
        "release": "1.20.1",
        "snapshot": "23w31a"
    },
    "versions": [
        ...
        {
            "id": "1.20.1",
            "type": "release",
            "url": "https://piston-meta.mojang.com/v1/packages/715ccf3330885e75b205124f09f8712542cbe7e0/1.20.1.json",
            "time": "2023-06-12T13:33:07+00:00",
            "releaseTime": "2023-06-12T13:25:51+00:00",
            "sha1": "715ccf3330885e75b205124f09f8712542cbe7e0",
            "complianceLevel": 1
        },
        ...
    ]
}
"""


class MojangLatestVersion(MetaBase):
    release: str
    snapshot: str


class MojangIndexEntry(MetaBase):
    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        return replace_old_launchermeta_url(v)

    id: str
    release_time: Optional[datetime] = Field(None, alias="releaseTime")
    time: Optional[datetime] = None
    type: Optional[str] = None
    url: str
    sha1: Optional[str] = None
    compliance_level: Optional[int] = Field(None, alias="complianceLevel")


class MojangIndex(MetaBase):
    latest: Optional[MojangLatestVersion] = None
    versions: List[MojangIndexEntry]


class MojangIndexWrap:
    def __init__(self, index: MojangIndex):
        self.index = index
        self.latest = index.latest
        self.versions = dict((x.id, x) for x in index.versions)


class JarType(StrEnum):
    Client = "client"
    Server = "server"


class ConditionalArgument(MetaBase):
    rules: MojangRules
    value: Union[str, List[str]]

    @property
    def values(self) -> List[str]:
        if isinstance(self.value, str):
            return [self.value]
        return list(self.value)


Argument = Union[str, ConditionalArgument]


class MojangArguments(MetaBase):
    game: List[Argument] = Field(default_factory=list)
    jvm: List[Argument] = Field(default_factory=list)


class JavaVersion(MetaBase):
    component: str = DEFAULT_JAVA_NAME
    major_version: int = Field(DEFAULT_JAVA_MAJOR, alias="majorVersion")


class MojangJavaIndexAvailability(MetaBase):
    group: int
    progress: int


class MojangJavaIndexManifest(MetaBase):
    sha1: str
    size: int
    url: str


class MojangJavaIndexVersion(MetaBase):
    name: str
    released: datetime


class MojangJavaRuntime(MetaBase):
    availability: Optional[MojangJavaIndexAvailability] = None
    manifest: MojangJavaIndexManifest
    version: MojangJavaIndexVersion


class MojangJavaIndexEntry(RootModel[Dict[str, List[MojangJavaRuntime]]]):
    model_config = ConfigDict(frozen=True)

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.root)

    def __getitem__(self, item) -> List[MojangJavaRuntime]:
        return self.root[item]

    def get(self, item) -> Optional[List[MojangJavaRuntime]]:
        return self.root.get(item)


class JavaIndex(RootModel[Dict[str, MojangJavaIndexEntry]]):
    """platform key (linux, mac-os-arm64, windows-x64, ...) -> component name -> runtimes"""

    model_config = ConfigDict(frozen=True)

    def __iter__(self) -> Iterator[str]:  # type: ignore[override]
        return iter(self.root)

    def __getitem__(self, item) -> MojangJavaIndexEntry:
        return self.root[item]

    def __contains__(self, item) -> bool:
        return item in self.root


class RuntimeFileDownloads(MetaBase):
    raw: MojangArtifactBase
    lzma: Optional[MojangArtifactBase] = None


class RuntimeFile(MetaBase):
    type: Literal["file"]
    executable: bool = False
    downloads: RuntimeFileDownloads

    def to_downloadable(self, path: str) -> RuntimeFileDownload:
        return RuntimeFileDownload(
            name=path,
            url=self.downloads.raw.url,
            sha1=self.downloads.raw.sha1 or "",
            executable=self.executable,
        )


class RuntimeDirectory(MetaBase):
    type: Literal["directory"]


class RuntimeLink(MetaBase):
    type: Literal["link"]
    target: str


RuntimeEntry = Annotated[Union[RuntimeFile, RuntimeDirectory, RuntimeLink], Field(discriminator="type")]


class JavaRuntimeManifest(MetaBase):
    """
    {
        "files": {
            "bin": {"type": "directory"},
            "bin/java": {"type": "file", "executable": true, "downloads": {"raw": {...}, "lzma": {...}}},
            "bin/javac": {"type": "link", "target": "java"}
        }
    }
    """
    files: Dict[str, RuntimeEntry]

    def entries(self) -> Iterator[Tuple[str, RuntimeEntry]]:
        return iter(self.files.items())


class AssetObject(MetaBase):
    hash: str
    size: int

    def to_downloadable(self, name: str) -> AssetDownload:
        return AssetDownload(name=name, sha1=self.hash)


class AssetIndex(MetaBase):
    objects: Dict[str, AssetObject]
    map_to_resources: Optional[bool] = None
    virtual: Optional[bool] = None

    def downloads(self) -> List[AssetDownload]:
        # several logical names may share one object
        seen = {}
        for name, obj in self.objects.items():
            seen.setdefault(obj.hash, obj.to_downloadable(name))
        return list(seen.values())


class MojangVersion(MetaBase):
    id: str
    type: Optional[str] = None
    arguments: Optional[MojangArguments] = None
    asset_index: Optional[MojangAssets] = Field(None, alias="assetIndex")
    assets: Optional[str] = None
    downloads: Dict[str, MojangArtifactBase] = Field(default_factory=dict)
    libraries: List[Library] = Field(default_factory=list)
    main_class: str = Field(alias="mainClass")
    minecraft_arguments: Optional[str] = Field(None, alias="minecraftArguments")
    minimum_launcher_version: Optional[int] = Field(None, alias="minimumLauncherVersion")
    release_time: Optional[datetime] = Field(None, alias="releaseTime")
    time: Optional[datetime] = None
    logging: Optional[Dict[str, MojangLogging]] = None
    compliance_level: Optional[int] = Field(None, alias="complianceLevel")
    java_version: JavaVersion = Field(default_factory=JavaVersion, alias="javaVersion")

    def launch_arguments(self) -> MojangArguments:
        """
        Versions before 1.13 only carry a flat minecraftArguments string and expect the
        launcher to supply the JVM arguments itself.
        """
        if self.arguments is not None:
            return self.arguments
        game: List[Argument] = []
        if self.minecraft_arguments:
            game = list(self.minecraft_arguments.split())
        return MojangArguments(game=game, jvm=list(LEGACY_JVM_ARGUMENTS))

    @property
    def client_logging(self) -> Optional[MojangLogging]:
        return (self.logging or {}).get("client")
