import json

import pytest

from launchmeta.common.java import JAVA_MANIFEST_URL
from launchmeta.common.mojang import VERSION_MANIFEST_URL
from launchmeta.errors import (
    DecodeError,
    InvalidDownloadError,
    ManifestParseError,
    MissingRuntimeComponentError,
    ResourceNotReadyError,
    VersionNotFoundError,
)
from launchmeta.manifest import ManifestClient
from launchmeta.model import MojangAssets, MojangLogging
from launchmeta.model.mojang import JarType, JavaIndex

from .conftest import LINUX, MACOS_ARM, FakeSession, sha1

VERSION_URL = "https://piston-meta.mojang.com/v1/packages/abc/1.20.1.json"
VERSION_BODY = json.dumps(
    {
        "id": "1.20.1",
        "type": "release",
        "mainClass": "net.minecraft.client.main.Main",
        "downloads": {"client": {"sha1": sha1(b"client jar"), "size": 10, "url": "https://example.com/client.jar"}},
    }
).encode()


def version_manifest(version_sha1=None):
    return {
        "latest": {"release": "1.20.1", "snapshot": "23w31a"},
        "versions": [
            {"id": "23w31a", "type": "snapshot", "url": "https://example.com/23w31a.json", "sha1": "1" * 40},
            {"id": "1.20.1", "type": "release", "url": VERSION_URL, "sha1": version_sha1 or sha1(VERSION_BODY)},
            {"id": "b1.7.3", "type": "old_beta", "url": "https://example.com/b1.7.3.json", "sha1": "2" * 40},
        ],
    }


@pytest.fixture
def client(layout, session):
    session.add(VERSION_MANIFEST_URL, version_manifest())
    session.add(VERSION_URL, VERSION_BODY)
    session.add("https://example.com/client.jar", b"client jar")
    return ManifestClient(layout, session, LINUX)


class TestManifestClient:
    def test_manifest_must_be_loaded_first(self, client) -> None:
        assert not client.loaded
        with pytest.raises(ResourceNotReadyError):
            client.fetch_version("1.20.1")
        with pytest.raises(ResourceNotReadyError):
            client.version_ids()

    def test_load_persists_the_version_manifest(self, client, layout) -> None:
        index = client.load_version_manifest()

        assert client.loaded
        assert index.latest.release == "1.20.1"
        assert (layout.versions_dir / "version_manifest_v2.json").is_file()

    def test_fetch_version_downloads_verifies_and_caches(self, client, layout, session) -> None:
        client.load_version_manifest()

        version = client.fetch_version("1.20.1")

        assert version.id == "1.20.1"
        assert VERSION_URL in session.requested
        assert layout.version_file("1.20.1").read_bytes() == VERSION_BODY

    def test_unknown_version_is_not_found(self, client) -> None:
        client.load_version_manifest()

        with pytest.raises(VersionNotFoundError) as exc_info:
            client.fetch_version("9.9.9")

        assert exc_info.value.version_id == "9.9.9"

    def test_cached_version_is_reused(self, client, session) -> None:
        client.load_version_manifest()
        client.fetch_version("1.20.1")
        requests_before = len(session.requested)

        client.fetch_version("1.20.1")

        assert len(session.requested) == requests_before

    def test_corrupted_cache_is_downloaded_again(self, client, layout, session) -> None:
        client.load_version_manifest()
        path = layout.version_file("1.20.1")
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"{\"id\": \"1.20.1\", \"mainCl")

        version = client.fetch_version("1.20.1")

        assert version.main_class == "net.minecraft.client.main.Main"
        assert session.requested.count(VERSION_URL) == 1
        assert path.read_bytes() == VERSION_BODY

    def test_hash_mismatch_is_an_invalid_download(self, layout) -> None:
        session = FakeSession({VERSION_MANIFEST_URL: version_manifest("f" * 40), VERSION_URL: VERSION_BODY})
        client = ManifestClient(layout, session, LINUX)
        client.load_version_manifest()

        with pytest.raises(InvalidDownloadError):
            client.fetch_version("1.20.1")

        assert not layout.version_file("1.20.1").exists()

    def test_cached_copy_without_known_hash_is_reused(self, layout) -> None:
        manifest = version_manifest()
        del manifest["versions"][1]["sha1"]
        session = FakeSession({VERSION_MANIFEST_URL: manifest, VERSION_URL: VERSION_BODY})
        client = ManifestClient(layout, session, LINUX)
        client.load_version_manifest()

        client.fetch_version("1.20.1")
        version = client.fetch_version("1.20.1")

        assert version.id == "1.20.1"
        assert session.requested.count(VERSION_URL) == 1

    def test_logging_config_hash_mismatch_is_an_invalid_download(self, layout) -> None:
        session = FakeSession({"https://example.com/client-1.12.xml": b"<Configuration/>"})
        logging_config = MojangLogging.model_validate(
            {
                "argument": "-Dlog4j.configurationFile=${path}",
                "file": {"id": "client-1.12.xml", "sha1": sha1(b"other"), "url": "https://example.com/client-1.12.xml"},
                "type": "log4j2-xml",
            }
        )

        with pytest.raises(InvalidDownloadError):
            ManifestClient(layout, session, LINUX).fetch_logging_config(logging_config)

        assert not (layout.logging_dir / "client-1.12.xml").exists()

    def test_asset_index_hash_mismatch_is_an_invalid_download(self, layout) -> None:
        session = FakeSession({"https://example.com/5.json": {"objects": {}}})
        asset_index = MojangAssets.model_validate(
            {"id": "5", "sha1": sha1(b"other"), "size": 2, "totalSize": 0, "url": "https://example.com/5.json"}
        )

        with pytest.raises(InvalidDownloadError):
            ManifestClient(layout, session, LINUX).fetch_asset_index(asset_index)

        assert not (layout.asset_indexes_dir / "5.json").exists()

    def test_refresh_swaps_in_the_new_manifest(self, client, session) -> None:
        client.load_version_manifest()
        manifest = version_manifest()
        manifest["versions"].append({"id": "1.20.2", "type": "release", "url": "https://example.com/1.20.2.json"})
        session.add(VERSION_MANIFEST_URL, manifest)

        client.refresh()

        assert client.version_ids() == ["1.20.1", "1.20.2"]
        assert session.requested.count(VERSION_MANIFEST_URL) == 2

    def test_version_ids_hide_snapshots_by_default(self, client) -> None:
        client.load_version_manifest()

        assert client.version_ids() == ["1.20.1"]
        assert client.version_ids(show_snapshots=True) == ["23w31a", "1.20.1", "b1.7.3"]

    def test_fetch_game_jar(self, client, layout) -> None:
        client.load_version_manifest()
        version = client.fetch_version("1.20.1")

        path = client.fetch_game_jar(version, JarType.Client)

        assert path == layout.versions_dir / "1.20.1" / "client.jar"
        assert path.read_bytes() == b"client jar"

    def test_missing_jar_download_is_a_parse_error(self, client) -> None:
        client.load_version_manifest()
        version = client.fetch_version("1.20.1")

        with pytest.raises(ManifestParseError):
            client.fetch_game_jar(version, JarType.Server)

    def test_malformed_manifest_is_a_parse_error(self, layout) -> None:
        session = FakeSession({VERSION_MANIFEST_URL: {"versions": [{"id": "1.20.1"}]}})

        with pytest.raises(ManifestParseError):
            ManifestClient(layout, session, LINUX).load_version_manifest()

    def test_non_utf8_manifest_is_a_decode_error(self, layout) -> None:
        session = FakeSession({VERSION_MANIFEST_URL: b"\xff\xfe\x00{"})

        with pytest.raises(DecodeError):
            ManifestClient(layout, session, LINUX).load_version_manifest()

    def test_old_launchermeta_urls_are_rewritten(self, layout) -> None:
        manifest = version_manifest()
        manifest["versions"][1]["url"] = "https://launchermeta.mojang.com/v1/packages/abc/1.20.1.json"
        session = FakeSession({VERSION_MANIFEST_URL: manifest})
        client = ManifestClient(layout, session, LINUX)
        client.load_version_manifest()

        assert client.get_version_entry("1.20.1").url == VERSION_URL


JAVA_INDEX = {
    "linux": {
        "java-runtime-gamma": [
            {
                "availability": {"group": 1, "progress": 100},
                "manifest": {"sha1": "a" * 40, "size": 100, "url": "https://example.com/gamma.json"},
                "version": {"name": "17.0.8", "released": "2023-07-18T00:00:00+00:00"},
            }
        ],
        "jre-legacy": [],
    },
    "mac-os-arm64": {},
}


class TestJavaRuntimeSelection:
    def test_fetch_java_index_persists_it(self, layout) -> None:
        session = FakeSession({JAVA_MANIFEST_URL: JAVA_INDEX})

        index = ManifestClient(layout, session, LINUX).fetch_java_index()

        assert "linux" in index
        assert (layout.java_dir / "all.json").is_file()

    def test_cached_java_index_is_reused_until_refreshed(self, layout) -> None:
        session = FakeSession({JAVA_MANIFEST_URL: JAVA_INDEX})
        client = ManifestClient(layout, session, LINUX)

        client.fetch_java_index()
        index = client.fetch_java_index()

        assert "linux" in index
        assert session.requested.count(JAVA_MANIFEST_URL) == 1

        client.fetch_java_index(refresh=True)

        assert session.requested.count(JAVA_MANIFEST_URL) == 2

    def test_selects_first_runtime_for_component(self, layout, session) -> None:
        client = ManifestClient(layout, session, LINUX)

        runtime = client.select_java_runtime(JavaIndex.model_validate(JAVA_INDEX), "java-runtime-gamma")

        assert runtime.version.name == "17.0.8"

    @pytest.mark.parametrize(
        "platform,component",
        [(LINUX, "jre-legacy"), (LINUX, "java-runtime-delta"), (MACOS_ARM, "java-runtime-gamma")],
    )
    def test_missing_component_is_fatal(self, layout, session, platform, component) -> None:
        client = ManifestClient(layout, session, platform)

        with pytest.raises(MissingRuntimeComponentError):
            client.select_java_runtime(JavaIndex.model_validate(JAVA_INDEX), component)
