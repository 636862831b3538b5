import concurrent.futures
import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from .common import DOWNLOAD_WORKERS, artifact_session, byteshash
from .common.http import download_bytes
from .errors import AcquisitionError, HashMismatchError, ItemHandlerError, LocalIOError
from .model.downloadable import Downloadable

logger = logging.getLogger(__name__)

OnSuccess = Callable[[bytes, Downloadable], None]


@dataclass
class BatchResult:
    fetched: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    failures: Dict[str, AcquisitionError] = field(default_factory=dict)

    @property
    def mismatched(self) -> List[str]:
        return [name for name, err in self.failures.items() if isinstance(err, HashMismatchError)]

    @property
    def ok(self) -> bool:
        return not self.failures

    def __str__(self):
        return (
            f"{len(self.fetched)} fetched, {len(self.skipped)} already present, "
            f"{len(self.failures)} failed ({len(self.mismatched)} hash mismatches)"
        )


def verify_hash(data: bytes, item: Downloadable):
    actual = byteshash(data)
    if actual != item.sha1:
        raise HashMismatchError(item.name, item.sha1, actual)


def write_bytes(path: Path, data: bytes):
    try:
        with open(path, "wb") as f:
            f.write(data)
    except OSError as e:
        raise LocalIOError(f"Failed to write {path}: {e}") from e


def verify_and_write(base_dir: Path) -> OnSuccess:
    """The default callback: check the SHA-1 of the fetched bytes, then persist them."""

    def on_success(data: bytes, item: Downloadable):
        verify_hash(data, item)
        write_bytes(item.path(base_dir), data)

    return on_success


class HashVerifiedDownloader:
    """
    Fetches batches of `Downloadable` items with a fixed number of requests in flight.

    Items whose destination already exists are trusted as they are and never requested.
    Failures of single items are logged and collected in the `BatchResult`, they never stop
    the rest of the batch.
    """

    def __init__(self, session=None, max_workers: int = DOWNLOAD_WORKERS):
        self.session = session if session is not None else artifact_session()
        self.max_workers = max_workers

    def fetch_all(
        self,
        items: Sequence[Downloadable],
        base_dir: Path,
        on_success: Optional[OnSuccess] = None,
    ) -> BatchResult:
        base_dir = Path(base_dir)
        if on_success is None:
            on_success = verify_and_write(base_dir)

        result = BatchResult()
        pending = []
        for item in items:
            if item.path(base_dir).exists():
                result.skipped.append(item.name)
            else:
                pending.append(item)

        if not pending:
            return result

        start = time.monotonic()
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self._fetch_single, item, base_dir, on_success): item
                for item in pending
            }
            for future in concurrent.futures.as_completed(futures):
                item = futures[future]
                try:
                    future.result()
                except AcquisitionError as e:
                    logger.error("Failed to download %s: %s", item.name, e)
                    result.failures[item.name] = e
                else:
                    result.fetched.append(item.name)

        logger.debug("Batch of %d finished in %dms", len(pending), (time.monotonic() - start) * 1000)
        return result

    def _fetch_single(self, item: Downloadable, base_dir: Path, on_success: OnSuccess):
        path = item.path(base_dir)
        logger.debug("Downloading file %s", item.name)
        try:
            os.makedirs(path.parent, exist_ok=True)
        except OSError as e:
            raise LocalIOError(f"Failed to create {path.parent}: {e}") from e
        data = download_bytes(self.session, item.url)
        try:
            on_success(data, item)
        except AcquisitionError:
            raise
        except Exception as e:
            raise ItemHandlerError(f"Failed to handle {item.name}: {e!r}") from e
