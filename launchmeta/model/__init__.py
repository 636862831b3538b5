from typing import Optional, List, Dict, Iterator

import pydantic
from pydantic import ConfigDict, Field, RootModel, field_validator

from ..common import replace_old_launchermeta_url
from ..platform import Platform
from .downloadable import LibraryDownload, ClassifierDownload
from .types import GradleSpecifier


class MetaBase(pydantic.BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    def dump_json(self) -> str:
        return self.model_dump_json(exclude_none=True, by_alias=True, indent=4)

    def write(self, file_path):
        with open(file_path, "w", encoding="utf-8") as f:
            f.write(self.dump_json())


class MojangArtifactBase(MetaBase):
    sha1: Optional[str] = None
    size: Optional[int] = None
    url: str


class MojangAssets(MojangArtifactBase):
    @field_validator("url")
    @classmethod
    def validate_url(cls, v):
        return replace_old_launchermeta_url(v)

    id: str
    total_size: Optional[int] = Field(None, alias="totalSize")


class MojangArtifact(MojangArtifactBase):
    path: Optional[str] = None


class MojangLibraryExtractRules(MetaBase):
    """
            "extract": {
                "exclude": [
                    "META-INF/"
                ]
            }
    """
    exclude: List[str] = Field(default_factory=list)


class MojangLibraryDownloads(MetaBase):
    artifact: Optional[MojangArtifact] = None
    classifiers: Optional[Dict[str, MojangArtifact]] = None


class MojangRule(MetaBase):
    """
            "rules": [
                {
                    "action": "allow"
                },
                {
                    "action": "disallow",
                    "os": {
                        "name": "osx"
                    }
                }
            ]

    Action and os keys are checked when the rule is evaluated, anything else is rejected here.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")

    action: str
    os: Optional[Dict[str, str]] = None
    features: Optional[Dict[str, bool]] = None


class MojangRules(RootModel[List[MojangRule]]):
    model_config = ConfigDict(frozen=True)

    def __iter__(self) -> Iterator[MojangRule]:  # type: ignore[override]
        return iter(self.root)

    def __getitem__(self, item) -> MojangRule:
        return self.root[item]

    def __len__(self):
        return len(self.root)


class MojangLoggingFile(MojangArtifactBase):
    id: str


class MojangLogging(MetaBase):
    argument: str
    file: MojangLoggingFile
    type: Optional[str] = None


class Library(MetaBase):
    name: Optional[GradleSpecifier] = None
    downloads: Optional[MojangLibraryDownloads] = None
    natives: Optional[Dict[str, str]] = None
    extract: Optional[MojangLibraryExtractRules] = None
    rules: Optional[MojangRules] = None

    def artifact_download(self) -> Optional[LibraryDownload]:
        if self.downloads is None or self.downloads.artifact is None:
            return None
        artifact = self.downloads.artifact
        relative_path = artifact.path
        if relative_path is None and self.name is not None:
            relative_path = self.name.path()
        if relative_path is None:
            return None
        return LibraryDownload(
            name=str(self.name) if self.name else relative_path,
            url=artifact.url,
            sha1=artifact.sha1 or "",
            relative_path=relative_path,
        )

    def classifier_key(self, platform: Platform) -> Optional[str]:
        """
        The classifier this library wants on `platform`, e.g. "natives-windows-64" for
        {"windows": "natives-windows-${arch}"}.
        """
        if not self.natives:
            return None
        key = self.natives.get(platform.natives_os_name)
        if key is None:
            return None
        return key.replace("${arch}", platform.arch_bits)

    def classifier_download(self, key: str) -> Optional[ClassifierDownload]:
        if self.downloads is None or not self.downloads.classifiers:
            return None
        artifact = self.downloads.classifiers.get(key)
        if artifact is None:
            return None
        relative_path = artifact.path
        if relative_path is None and self.name is not None:
            relative_path = self.name.with_classifier(key).path()
        if relative_path is None:
            return None
        exclude = tuple(self.extract.exclude) if self.extract else ()
        return ClassifierDownload(
            name=f"{self.name}:{key}" if self.name else relative_path,
            url=artifact.url,
            sha1=artifact.sha1 or "",
            relative_path=relative_path,
            exclude=exclude,
        )
