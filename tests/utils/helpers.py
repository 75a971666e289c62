"""
Helper utilities for installer tests.
"""

import os
from pathlib import Path

import pytest

from .builders import fake_binary_script

requires_posix_shell = pytest.mark.skipif(
    os.name == "nt", reason="fake binaries are POSIX shell scripts"
)


def install_fake_binary(install_dir: Path, version: str, name: str = "miru") -> Path:
    """
    Place an executable that reports version at install_dir/name.

    Args:
        install_dir: Directory to install into
        version: Version the binary reports for --version
        name: Executable name

    Returns:
        Path to the installed executable
    """
    binary = install_dir / name
    binary.write_bytes(fake_binary_script(version, name))
    binary.chmod(0o755)
    return binary


def list_workspaces(root: Path) -> list:
    """Installer workspaces currently present under root."""
    return sorted(root.glob("miru-install.*"))
