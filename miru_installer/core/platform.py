"""
Platform detection for the miru installer.

This module maps the running operating system and CPU architecture to one of
the release targets published for the miru CLI.

Features:
- Operating system detection (Linux, macOS)
- CPU architecture detection and normalization (x86_64, arm64)
- Release artifact naming (e.g., 'cli_Linux_x86_64.tar.gz')

Usage:
    from miru_installer.core.platform import detect_platform

    target = detect_platform()
    print(f"Artifact: {target.artifact_name()}")
"""

import platform
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .exceptions import UnsupportedPlatformError


class OperatingSystem(Enum):
    """Operating systems with published release artifacts."""

    LINUX = "Linux"
    DARWIN = "Darwin"


class Architecture(Enum):
    """CPU architectures with published release artifacts."""

    X86_64 = "x86_64"
    ARM64 = "arm64"


_OS_TABLE = {
    "linux": OperatingSystem.LINUX,
    "darwin": OperatingSystem.DARWIN,
}

_ARCH_TABLE = {
    "x86_64": Architecture.X86_64,
    "amd64": Architecture.X86_64,
    "aarch64": Architecture.ARM64,
    "arm64": Architecture.ARM64,
}


@dataclass(frozen=True)
class PlatformTarget:
    """
    Release target for the current host.

    Attributes:
        os: Operating system the artifact was built for
        arch: CPU architecture the artifact was built for
    """

    os: OperatingSystem
    arch: Architecture

    def platform_string(self) -> str:
        """
        Get release platform string (e.g., 'Linux_x86_64', 'Darwin_arm64').

        Example:
            >>> PlatformTarget(OperatingSystem.LINUX, Architecture.ARM64).platform_string()
            'Linux_arm64'
        """
        return f"{self.os.value}_{self.arch.value}"

    def artifact_name(self) -> str:
        """Get the release archive filename for this target."""
        return f"cli_{self.platform_string()}.tar.gz"

    def __str__(self) -> str:
        return self.platform_string()


def detect_platform(
    system: Optional[str] = None, machine: Optional[str] = None
) -> PlatformTarget:
    """
    Detect the release target for the current (or given) host.

    Args:
        system: OS name as reported by platform.system(); detected if None
        machine: Machine name as reported by platform.machine(); detected if None

    Returns:
        PlatformTarget for the host

    Raises:
        UnsupportedPlatformError: If the OS or architecture has no release artifact

    Example:
        >>> detect_platform("Linux", "aarch64").artifact_name()
        'cli_Linux_arm64.tar.gz'
    """
    system = platform.system() if system is None else system
    machine = platform.machine() if machine is None else machine

    os_name = _OS_TABLE.get(system.strip().lower())
    if os_name is None:
        raise UnsupportedPlatformError(
            f"Unsupported operating system: {system} (supported: Linux, macOS)"
        )

    arch = _ARCH_TABLE.get(machine.strip().lower())
    if arch is None:
        raise UnsupportedPlatformError(
            f"Unsupported architecture: {machine} (supported: x86_64, arm64)"
        )

    return PlatformTarget(os=os_name, arch=arch)


def get_supported_targets() -> list[PlatformTarget]:
    """
    Get every target with a published release artifact.

    Example:
        >>> [t.platform_string() for t in get_supported_targets()]
        ['Linux_x86_64', 'Linux_arm64', 'Darwin_x86_64', 'Darwin_arm64']
    """
    return [
        PlatformTarget(os_name, arch)
        for os_name in OperatingSystem
        for arch in Architecture
    ]


__all__ = [
    "OperatingSystem",
    "Architecture",
    "PlatformTarget",
    "detect_platform",
    "get_supported_targets",
]
