import pytest

from launchmeta.errors import UnsupportedPlatformError
from launchmeta.model import Library
from launchmeta.platform import Platform, java_manifest_key

from .conftest import LINUX, MACOS_ARM, WINDOWS


@pytest.mark.parametrize(
    "os_name,arch,expected",
    [
        ("linux", "x86_64", "linux"),
        ("linux", "x86", "linux-i386"),
        ("macos", "x86_64", "mac-os"),
        ("macos", "aarch64", "mac-os-arm64"),
        ("windows", "x86", "windows-x86"),
        ("windows", "x86_64", "windows-x64"),
        ("windows", "aarch64", "windows-arm64"),
    ],
)
def test_java_manifest_key(os_name: str, arch: str, expected: str) -> None:
    assert java_manifest_key(Platform(os_name, arch)) == expected


def test_unknown_windows_arch_is_unsupported() -> None:
    with pytest.raises(UnsupportedPlatformError):
        java_manifest_key(Platform("windows", "arm"))


def test_unknown_os_is_unsupported() -> None:
    with pytest.raises(UnsupportedPlatformError):
        java_manifest_key(Platform("freebsd", "x86_64"))


def test_classifier_key_fills_in_arch_bits() -> None:
    lib = Library.model_validate(
        {
            "name": "org.lwjgl.lwjgl:lwjgl-platform:2.9.4",
            "natives": {"linux": "natives-linux", "osx": "natives-osx", "windows": "natives-windows-${arch}"},
        }
    )

    assert lib.classifier_key(WINDOWS) == "natives-windows-64"
    assert lib.classifier_key(Platform("windows", "x86")) == "natives-windows-32"
    assert lib.classifier_key(MACOS_ARM) == "natives-osx"
    assert lib.classifier_key(LINUX) == "natives-linux"


def test_library_without_natives_has_no_classifier() -> None:
    lib = Library.model_validate({"name": "com.mojang:brigadier:1.1.8"})

    assert lib.classifier_key(LINUX) is None


def test_unnamed_library_classifier_is_named_by_its_path() -> None:
    lib = Library.model_validate(
        {
            "downloads": {
                "classifiers": {
                    "natives-linux": {"path": "natives/lwjgl-natives-linux.jar", "sha1": "a" * 40, "url": "https://example.com/n.jar"}
                }
            },
            "natives": {"linux": "natives-linux"},
        }
    )

    classifier = lib.classifier_download(lib.classifier_key(LINUX))

    assert classifier.name == "natives/lwjgl-natives-linux.jar"
    assert classifier.relative_path == "natives/lwjgl-natives-linux.jar"
