import os
import platform as _platform
from dataclasses import dataclass

from .errors import UnsupportedPlatformError

OS_TRANSLATIONS = {
    "linux": "linux",
    "windows": "windows",
    "darwin": "macos",
    "macos": "macos",
}

ARCH_TRANSLATIONS = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "x64": "x86_64",
    "i386": "x86",
    "i486": "x86",
    "i586": "x86",
    "i686": "x86",
    "x86": "x86",
    "aarch64": "aarch64",
    "arm64": "aarch64",
    "armv7l": "arm",
    "armv6l": "arm",
    "arm": "arm",
}

# names used by the "natives" map of a library
NATIVES_OS_NAMES = {
    "linux": "linux",
    "windows": "windows",
    "macos": "osx",
}


@dataclass(frozen=True)
class Platform:
    """
    The host identity every platform-conditional decision is made against.

    os_name is one of linux, windows, macos; arch one of x86_64, x86, aarch64, arm.
    """

    os_name: str
    arch: str
    path_separator: str = os.pathsep

    @classmethod
    def current(cls) -> "Platform":
        system = _platform.system().lower()
        machine = _platform.machine().lower()
        return cls(
            os_name=OS_TRANSLATIONS.get(system, system),
            arch=ARCH_TRANSLATIONS.get(machine, machine),
            path_separator=os.pathsep,
        )

    @property
    def natives_os_name(self) -> str:
        return NATIVES_OS_NAMES.get(self.os_name, self.os_name)

    @property
    def arch_bits(self) -> str:
        if self.arch in ("x86_64", "aarch64"):
            return "64"
        return "32"

    @property
    def supports_posix_permissions(self) -> bool:
        return self.os_name != "windows"


def java_manifest_key(platform: Platform) -> str:
    """Maps a platform onto one of the keys of the java manifest map."""
    os_name = platform.os_name
    arch = platform.arch
    if os_name == "linux":
        if arch == "x86":
            return "linux-i386"
        return "linux"
    elif os_name == "macos":
        if arch == "aarch64":
            return "mac-os-arm64"
        return "mac-os"
    elif os_name == "windows":
        if arch == "x86":
            return "windows-x86"
        elif arch == "x86_64":
            return "windows-x64"
        elif arch == "aarch64":
            return "windows-arm64"
        raise UnsupportedPlatformError(f"Unexpected windows architecture: {arch}")
    raise UnsupportedPlatformError(
        f"Unknown java version os: {os_name}. Expected `linux`, `macos` or `windows`"
    )
