import hashlib
import os
import os.path
from pathlib import Path
from urllib.parse import urlparse

import requests
from cachecontrol import CacheControl  # type: ignore
from cachecontrol.caches import FileCache  # type: ignore
from requests.adapters import HTTPAdapter

from .mojang import (
    VERSIONS_DIR,
    LIBRARIES_DIR,
    ASSETS_DIR,
    ASSET_INDEXES_DIR,
    ASSET_OBJECTS_DIR,
    LOGGING_DIR,
    INSTANCES_DIR,
)
from .java import JAVA_DIR

LAUNCHER_NAME = "launchmeta"
LAUNCHER_VERSION = "1.0.0"
USER_TYPE = "msa"

DOWNLOAD_WORKERS = 8


def data_path():
    if "LAUNCHMETA_DATA_DIR" in os.environ:
        return os.environ["LAUNCHMETA_DATA_DIR"]
    return "data"


def cache_path():
    if "LAUNCHMETA_CACHE_DIR" in os.environ:
        return os.environ["LAUNCHMETA_CACHE_DIR"]
    return "cache"


class Layout:
    """
    Canonical on-disk layout below the application data root:

        versions/<id>.json
        versions/<id>/{client|server}.jar
        libraries/<relative-path>
        java/<runtime-name>/...
        assets/indexes/<id>.json
        assets/objects/<hash[0:2]>/<hash>
        logging/<config-id>
        instances/<name>/
    """

    def __init__(self, root=None):
        self.root = Path(root if root is not None else data_path())

    @property
    def versions_dir(self) -> Path:
        return self.root / VERSIONS_DIR

    @property
    def libraries_dir(self) -> Path:
        return self.root / LIBRARIES_DIR

    @property
    def java_dir(self) -> Path:
        return self.root / JAVA_DIR

    @property
    def assets_dir(self) -> Path:
        return self.root / ASSETS_DIR

    @property
    def asset_indexes_dir(self) -> Path:
        return self.root / ASSET_INDEXES_DIR

    @property
    def asset_objects_dir(self) -> Path:
        return self.root / ASSET_OBJECTS_DIR

    @property
    def logging_dir(self) -> Path:
        return self.root / LOGGING_DIR

    @property
    def instances_dir(self) -> Path:
        return self.root / INSTANCES_DIR

    def version_file(self, version_id: str) -> Path:
        return self.versions_dir / f"{version_id}.json"

    def instance_dir(self, name: str) -> Path:
        return self.instances_dir / name

    def __repr__(self):
        return f"Layout('{self.root}')"


def replace_old_launchermeta_url(url: str):
    o = urlparse(url)
    if o.netloc == "launchermeta.mojang.com":
        return o._replace(netloc="piston-meta.mojang.com").geturl()

    return url


def default_session():
    forever_cache = FileCache(os.path.join(cache_path(), "http_cache"), forever=True)
    sess = CacheControl(requests.Session(), forever_cache)

    sess.headers.update({"User-Agent": f"{LAUNCHER_NAME}/{LAUNCHER_VERSION}"})

    return sess


def artifact_session():
    # artifacts are content addressed and verified on disk, no need for the http cache
    sess = requests.Session()
    adapter = HTTPAdapter(pool_connections=DOWNLOAD_WORKERS, pool_maxsize=DOWNLOAD_WORKERS)
    sess.mount("https://", adapter)
    sess.mount("http://", adapter)

    sess.headers.update({"User-Agent": f"{LAUNCHER_NAME}/{LAUNCHER_VERSION}"})

    return sess


def filehash(filename, hashtype=hashlib.sha1, blocksize=65536):
    hashtype = hashtype()
    with open(filename, "rb") as f:
        for block in iter(lambda: f.read(blocksize), b""):
            hashtype.update(block)
    return hashtype.hexdigest()


def byteshash(data: bytes, hashtype=hashlib.sha1):
    return hashtype(data).hexdigest()


def file_matches_hash(path, expected) -> bool:
    """True when `path` exists and its SHA-1 equals `expected`."""
    if not expected or not os.path.isfile(path):
        return False
    try:
        return filehash(path) == expected
    except OSError:
        return False
