import logging
import os
import time
from pathlib import Path
from typing import List, Optional, Tuple

from .common.java import EXECUTABLE_MODE, JAVA_EXECUTABLES
from .download import BatchResult, HashVerifiedDownloader, verify_hash, write_bytes
from .errors import LocalIOError
from .model.downloadable import RuntimeFileDownload, join_relative
from .model.mojang import JavaRuntimeManifest, RuntimeDirectory, RuntimeFile, RuntimeLink
from .platform import Platform

logger = logging.getLogger(__name__)


class RuntimeMaterializer:
    """
    Turns a java runtime manifest into a directory tree.

    Directories are created first, then files are downloaded, then links are made. Links
    resolve their target relative to their own parent directory, so everything they point
    to must exist by then.
    """

    def __init__(self, downloader: HashVerifiedDownloader, platform: Optional[Platform] = None):
        self.downloader = downloader
        self.platform = platform or Platform.current()
        self.last_batch: Optional[BatchResult] = None

    def materialize(self, manifest: JavaRuntimeManifest, base_dir: Path) -> Path:
        base_dir = Path(base_dir)
        directories: List[str] = []
        files: List[RuntimeFileDownload] = []
        links: List[Tuple[str, str]] = []
        for path, entry in manifest.entries():
            if isinstance(entry, RuntimeDirectory):
                directories.append(path)
            elif isinstance(entry, RuntimeFile):
                files.append(entry.to_downloadable(path))
            elif isinstance(entry, RuntimeLink):
                links.append((path, entry.target))
            else:
                raise TypeError(f"Unknown runtime entry {entry!r}")

        self.create_directories(base_dir, directories)

        logger.info("Downloading all java files.")
        start = time.monotonic()
        self.last_batch = self.downloader.fetch_all(files, base_dir, self._write_runtime_file(base_dir))
        logger.info("Downloaded java in %dms - %s", (time.monotonic() - start) * 1000, self.last_batch)

        self.create_links(base_dir, links)

        java_path = self.java_executable(base_dir, files)
        logger.info("Using java path: %s", java_path)
        return java_path

    def create_directories(self, base_dir: Path, directories: List[str]):
        try:
            os.makedirs(base_dir, exist_ok=True)
            for directory in directories:
                os.makedirs(join_relative(base_dir, directory), exist_ok=True)
        except OSError as e:
            raise LocalIOError(f"Failed to create runtime directory: {e}") from e

    def _write_runtime_file(self, base_dir: Path):
        chmod = self.platform.supports_posix_permissions

        def on_success(data: bytes, item: RuntimeFileDownload):
            verify_hash(data, item)
            path = item.path(base_dir)
            write_bytes(path, data)
            if chmod and item.executable:
                try:
                    os.chmod(path, EXECUTABLE_MODE)
                except OSError as e:
                    raise LocalIOError(f"Failed to mark {path} executable: {e}") from e

        return on_success

    def create_links(self, base_dir: Path, links: List[Tuple[str, str]]):
        for path, target in links:
            to = join_relative(base_dir, path)
            if os.path.lexists(to):
                continue
            try:
                source = (to.parent / target).resolve(strict=True)
                if source.is_dir():
                    logger.debug("Creating symlink between %s and %s", source, to)
                    os.symlink(source, to, target_is_directory=True)
                else:
                    logger.debug("Creating hard link between %s and %s", source, to)
                    os.link(source, to)
            except OSError as e:
                raise LocalIOError(f"Failed to link {path} -> {target}: {e}") from e

    def java_executable(self, base_dir: Path, files: List[RuntimeFileDownload]) -> Path:
        candidates = [
            f.name for f in files
            if any(f.name == exe or f.name.endswith("/" + exe) for exe in JAVA_EXECUTABLES)
        ]
        if not candidates:
            return base_dir / "bin" / "java"
        return join_relative(base_dir, min(candidates, key=len))
