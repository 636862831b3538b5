from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Protocol, Tuple, runtime_checkable

from ..common.mojang import RESOURCES_URL


@runtime_checkable
class Downloadable(Protocol):
    """Anything remote with a verifiable hash and a destination below some base directory."""

    @property
    def name(self) -> str: ...

    @property
    def url(self) -> str: ...

    @property
    def sha1(self) -> str: ...

    def path(self, base_dir: Path) -> Path: ...


def join_relative(base_dir: Path, relative_path: str) -> Path:
    return Path(base_dir).joinpath(*PurePosixPath(relative_path).parts)


@dataclass(frozen=True)
class LibraryDownload:
    name: str
    url: str
    sha1: str
    relative_path: str

    def path(self, base_dir: Path) -> Path:
        return join_relative(base_dir, self.relative_path)


@dataclass(frozen=True)
class ClassifierDownload:
    """A platform native variant of a library, extracted into the instance after download."""

    name: str
    url: str
    sha1: str
    relative_path: str
    exclude: Tuple[str, ...] = field(default=())

    def path(self, base_dir: Path) -> Path:
        return join_relative(base_dir, self.relative_path)


@dataclass(frozen=True)
class AssetDownload:
    name: str
    sha1: str

    @property
    def url(self) -> str:
        return RESOURCES_URL % (self.sha1[:2], self.sha1)

    def path(self, base_dir: Path) -> Path:
        return Path(base_dir) / self.sha1[:2] / self.sha1


@dataclass(frozen=True)
class RuntimeFileDownload:
    name: str
    url: str
    sha1: str
    executable: bool = False

    def path(self, base_dir: Path) -> Path:
        return join_relative(base_dir, self.name)
