"""
Core functionality for the miru installer.

This package contains the foundational modules the install pipeline is built on.
"""

from .config import (
    InstallerConfig,
    load_config,
)

from .platform import (
    Architecture,
    OperatingSystem,
    PlatformTarget,
    detect_platform,
    get_supported_targets,
)

from .exceptions import (
    InstallerError,
    ConfigurationError,
    UnsupportedPlatformError,
    ParseError,
    DocumentParseError,
    MissingFieldError,
    VersionResolutionError,
    ReleaseApiError,
    VersionParseError,
    DownloadError,
    DownloadTimeoutError,
    ChecksumMismatchError,
    FilesystemError,
    ArchiveExtractionError,
    InsecureArchiveError,
    InstallError,
)

__all__ = [
    "InstallerConfig",
    "load_config",
    "Architecture",
    "OperatingSystem",
    "PlatformTarget",
    "detect_platform",
    "get_supported_targets",
    "InstallerError",
    "ConfigurationError",
    "UnsupportedPlatformError",
    "ParseError",
    "DocumentParseError",
    "MissingFieldError",
    "VersionResolutionError",
    "ReleaseApiError",
    "VersionParseError",
    "DownloadError",
    "DownloadTimeoutError",
    "ChecksumMismatchError",
    "FilesystemError",
    "ArchiveExtractionError",
    "InsecureArchiveError",
    "InstallError",
]
