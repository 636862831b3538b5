import logging
import os
import threading
from pathlib import Path
from typing import List, Optional, Type, TypeVar

import pydantic

from .common import Layout, byteshash, default_session, file_matches_hash
from .common.http import download_bytes
from .common.java import JAVA_MANIFEST_FILE, JAVA_MANIFEST_URL
from .common.mojang import VERSION_MANIFEST_FILE, VERSION_MANIFEST_URL
from .errors import (
    DecodeError,
    InvalidDownloadError,
    LocalIOError,
    ManifestParseError,
    MissingRuntimeComponentError,
    ResourceNotReadyError,
    VersionNotFoundError,
)
from .model import MojangAssets, MojangLogging
from .model.mojang import (
    AssetIndex,
    JarType,
    JavaIndex,
    JavaRuntimeManifest,
    MojangIndex,
    MojangIndexEntry,
    MojangIndexWrap,
    MojangJavaRuntime,
    MojangVersion,
)
from .platform import Platform, java_manifest_key

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=pydantic.BaseModel)


def parse_manifest(model: Type[T], data: bytes, source: str) -> T:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"{source} is not valid UTF-8: {e}") from e
    try:
        return model.model_validate_json(text)
    except pydantic.ValidationError as e:
        raise ManifestParseError(f"Failed to parse {source}: {e}") from e


def read_file(path: Path) -> bytes:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as e:
        raise LocalIOError(f"Failed to read {path}: {e}") from e


def write_file(path: Path, data: bytes):
    try:
        os.makedirs(path.parent, exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise LocalIOError(f"Failed to write {path}: {e}") from e


class ManifestClient:
    """
    Owns the version manifest of this session and resolves every manifest and primary
    artifact hanging off it.

    The version manifest is shared state: it is only swapped while holding `lock`, and
    callers that need it to stay put for a whole sequence of operations hold `lock` too.
    """

    def __init__(self, layout: Layout, session=None, platform: Optional[Platform] = None):
        self.layout = layout
        self.session = session if session is not None else default_session()
        self.platform = platform or Platform.current()
        self.lock = threading.RLock()
        self._index: Optional[MojangIndexWrap] = None

    @property
    def loaded(self) -> bool:
        return self._index is not None

    def load_version_manifest(self, url: str = VERSION_MANIFEST_URL) -> MojangIndexWrap:
        logger.info("Downloading version manifest")
        data = download_bytes(self.session, url)
        index = MojangIndexWrap(parse_manifest(MojangIndex, data, url))
        with self.lock:
            write_file(self.layout.versions_dir / VERSION_MANIFEST_FILE, data)
            self._index = index
        logger.info("Loaded %d versions", len(index.versions))
        return index

    def refresh(self) -> MojangIndexWrap:
        return self.load_version_manifest()

    def _require_index(self) -> MojangIndexWrap:
        if self._index is None:
            raise ResourceNotReadyError("Trying to access the version manifest but it is not downloaded yet.")
        return self._index

    def version_ids(self, show_snapshots: bool = False) -> List[str]:
        """Ids in manifest order. Snapshots, old_beta and old_alpha only when asked for."""
        index = self._require_index()
        return [
            entry.id
            for entry in index.index.versions
            if show_snapshots or entry.type == "release"
        ]

    def get_version_entry(self, version_id: str) -> MojangIndexEntry:
        index = self._require_index()
        entry = index.versions.get(version_id)
        if entry is None:
            raise VersionNotFoundError(version_id)
        return entry

    def fetch_verified(self, url: str, path: Path, expected: Optional[str], name: str,
                       refresh: bool = False) -> bytes:
        """
        Returns the bytes at `path` when they hash to `expected`, otherwise downloads `url`,
        checks it against `expected` and caches it at `path`.

        Without an expected hash any cached copy is taken as is, unless `refresh` is set.
        """
        if not refresh:
            if file_matches_hash(path, expected) or (not expected and path.is_file()):
                logger.info("Loading %s from disk.", name)
                return read_file(path)

        logger.info("Requesting %s from %s", name, url)
        data = download_bytes(self.session, url)
        if expected:
            actual = byteshash(data)
            if actual != expected:
                err = f"Error downloading {name}, invalid hash (expected {expected}, got {actual})."
                logger.error(err)
                raise InvalidDownloadError(err)
        write_file(path, data)
        return data

    def fetch_version(self, version_id: str) -> MojangVersion:
        entry = self.get_version_entry(version_id)
        path = self.layout.version_file(version_id)
        data = self.fetch_verified(entry.url, path, entry.sha1, f"version `{version_id}`")
        return parse_manifest(MojangVersion, data, str(path))

    def fetch_game_jar(self, version: MojangVersion, jar_type: JarType = JarType.Client) -> Path:
        download = version.downloads.get(jar_type.value)
        if download is None:
            raise ManifestParseError(f"Version {version.id} has no {jar_type} download")
        path = self.layout.versions_dir / version.id / f"{jar_type}.jar"
        self.fetch_verified(download.url, path, download.sha1, f"{version.id} {jar_type} jar")
        return path

    def fetch_java_index(self, url: str = JAVA_MANIFEST_URL, refresh: bool = False) -> JavaIndex:
        path = self.layout.root / JAVA_MANIFEST_FILE
        data = self.fetch_verified(url, path, None, "java version manifest", refresh)
        return parse_manifest(JavaIndex, data, str(path))

    def select_java_runtime(self, index: JavaIndex, component: str) -> MojangJavaRuntime:
        key = java_manifest_key(self.platform)
        runtimes = index[key].get(component) if key in index else None
        if not runtimes:
            err = MissingRuntimeComponentError(component, key)
            logger.error("%s", err)
            raise err
        return runtimes[0]

    def fetch_java_runtime_manifest(self, runtime: MojangJavaRuntime) -> JavaRuntimeManifest:
        name = runtime.version.name
        path = self.layout.java_dir / f"{name}.json"
        data = self.fetch_verified(
            runtime.manifest.url, path, runtime.manifest.sha1, f"java runtime manifest {name}"
        )
        return parse_manifest(JavaRuntimeManifest, data, str(path))

    def fetch_logging_config(self, logging_config: MojangLogging) -> Path:
        """Downloads a logging configuration into logging/<id>."""
        file = logging_config.file
        path = self.layout.logging_dir / file.id
        self.fetch_verified(file.url, path, file.sha1, f"logging configuration {file.id}")
        return path

    def fetch_asset_index(self, asset_index: MojangAssets) -> AssetIndex:
        path = self.layout.asset_indexes_dir / f"{asset_index.id}.json"
        data = self.fetch_verified(asset_index.url, path, asset_index.sha1, f"asset index {asset_index.id}")
        return parse_manifest(AssetIndex, data, str(path))
