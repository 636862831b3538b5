import logging
import os
import shutil
import zipfile
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional

from .errors import NativeExtractionError
from .model.downloadable import ClassifierDownload

logger = logging.getLogger(__name__)


def enclosed_name(name: str) -> Optional[PurePosixPath]:
    """The entry name as a relative path, or None when it would escape the output directory."""
    path = PurePosixPath(name.replace("\\", "/"))
    if path.is_absolute() or ".." in path.parts or not path.parts:
        return None
    return path


def is_excluded(path: PurePosixPath, exclude: Iterable[str]) -> bool:
    for exclusion in exclude:
        prefix = PurePosixPath(exclusion).parts
        if prefix and path.parts[:len(prefix)] == prefix:
            return True
    return False


class NativeExtractor:
    """
    Unpacks native classifier jars into an instance's natives directory.

    The first archive that cannot be read or copied aborts the rest; whatever was extracted
    before that stays where it is.
    """

    def __init__(self, libraries_dir: Path):
        self.libraries_dir = Path(libraries_dir)

    def extract(self, classifiers: List[ClassifierDownload], natives_dir: Path) -> List[Path]:
        natives_dir = Path(natives_dir)
        written: List[Path] = []
        logger.debug("Extracting natives for %d classifiers", len(classifiers))
        for classifier in classifiers:
            archive_path = classifier.path(self.libraries_dir)
            try:
                with zipfile.ZipFile(archive_path) as archive:
                    written.extend(self._extract_archive(archive, classifier, natives_dir))
            except (OSError, zipfile.BadZipFile) as e:
                raise NativeExtractionError(f"Failed to extract {classifier.name} from {archive_path}: {e}") from e
        return written

    def _extract_archive(self, archive: zipfile.ZipFile, classifier: ClassifierDownload, natives_dir: Path):
        for info in archive.infolist():
            if info.is_dir():
                continue
            name = enclosed_name(info.filename)
            if name is None:
                logger.warning("Skipping unsafe entry %s in %s", info.filename, classifier.name)
                continue
            if is_excluded(name, classifier.exclude):
                logger.debug("Excluding %s", info.filename)
                continue
            path = natives_dir.joinpath(*name.parts)
            os.makedirs(path.parent, exist_ok=True)
            logger.debug("Copy from %s to %s", info.filename, path)
            with archive.open(info) as src, open(path, "wb") as dst:
                shutil.copyfileobj(src, dst)
            yield path
