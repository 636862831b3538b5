import hashlib
import io
import json
import threading
import zipfile

import pytest
import requests

from launchmeta.common import Layout
from launchmeta.platform import Platform

LINUX = Platform(os_name="linux", arch="x86_64", path_separator=":")
LINUX_32 = Platform(os_name="linux", arch="x86", path_separator=":")
WINDOWS = Platform(os_name="windows", arch="x86_64", path_separator=";")
MACOS_ARM = Platform(os_name="macos", arch="aarch64", path_separator=":")


def sha1(data: bytes) -> str:
    return hashlib.sha1(data).hexdigest()


def as_bytes(content) -> bytes:
    if isinstance(content, bytes):
        return content
    if isinstance(content, str):
        return content.encode("utf-8")
    return json.dumps(content).encode("utf-8")


def zip_bytes(entries) -> bytes:
    """entries: name -> bytes, a name ending in / becomes a directory entry"""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w") as z:
        for name, data in entries.items():
            if name.endswith("/"):
                z.writestr(zipfile.ZipInfo(name), b"")
            else:
                z.writestr(name, data)
    return buf.getvalue()


class FakeResponse:
    def __init__(self, url: str, content: bytes, status_code: int = 200):
        self.url = url
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error for url: {self.url}", response=self)


class FakeSession:
    """Serves canned bodies by url and remembers every url it was asked for."""

    def __init__(self, routes=None):
        self.routes = {}
        self.requested = []
        self._lock = threading.Lock()
        for url, content in (routes or {}).items():
            self.add(url, content)

    def add(self, url: str, content, status_code: int = 200):
        self.routes[url] = (as_bytes(content), status_code)
        return url

    def get(self, url, **kwargs):
        with self._lock:
            self.requested.append(url)
        if url not in self.routes:
            raise requests.ConnectionError(f"No route to {url}")
        content, status_code = self.routes[url]
        return FakeResponse(url, content, status_code)


@pytest.fixture
def layout(tmp_path):
    return Layout(tmp_path / "data")


@pytest.fixture
def session():
    return FakeSession()
