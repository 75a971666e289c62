"""
Test utilities for installer testing.

This package provides test data builders for release artifacts.
"""

from .builders import ReleaseBuilder, SUPPORTED_PLATFORMS, fake_binary_script
from .helpers import install_fake_binary, list_workspaces, requires_posix_shell

__all__ = [
    "ReleaseBuilder",
    "SUPPORTED_PLATFORMS",
    "fake_binary_script",
    "install_fake_binary",
    "list_workspaces",
    "requires_posix_shell",
]
