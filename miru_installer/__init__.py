"""
miru installer.

Installs the miru CLI from GitHub releases: resolves the release for the
current platform, downloads and verifies it, and installs the binary atomically.
"""

__version__ = "0.1.0"
