"""
Centralized exception hierarchy for the miru installer.

Every fatal condition in the install pipeline is raised as a subclass of
InstallerError so the CLI can report it with a single handler. Messages name the
resource involved (URL, file, digest) so users can act on them directly.
"""

from typing import Optional


# ============================================================================
# Base Exceptions
# ============================================================================


class InstallerError(Exception):
    """Base exception for all installer errors."""

    pass


# ============================================================================
# Configuration Exceptions
# ============================================================================


class ConfigurationError(InstallerError):
    """Raised when an environment variable or config file value is invalid."""

    pass


class UnsupportedPlatformError(ConfigurationError):
    """Raised when the host OS or architecture has no release artifact."""

    pass


# ============================================================================
# Parsing Exceptions
# ============================================================================


class ParseError(InstallerError):
    """Base exception for structured document parsing errors."""

    pass


class DocumentParseError(ParseError):
    """Raised when a document cannot be decoded into the expected structure."""

    pass


class MissingFieldError(ParseError):
    """Raised when a required field is absent or empty in a document."""

    def __init__(self, field: str, message: Optional[str] = None):
        self.field = field
        super().__init__(message or f"Missing or empty field: {field}")


# ============================================================================
# Version Resolution Exceptions
# ============================================================================


class VersionResolutionError(InstallerError):
    """Base exception for release version lookup errors."""

    pass


class ReleaseApiError(VersionResolutionError):
    """Raised when the release API cannot be reached or answers with an error."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch latest release from {url}: {reason}")


class VersionParseError(VersionResolutionError):
    """Raised when the release API response carries no usable version."""

    def __init__(self, url: str, api_message: str = ""):
        self.url = url
        self.api_message = api_message
        msg = f"Failed to parse version from response of {url}"
        if api_message:
            msg += f" (API message: {api_message})"
        super().__init__(msg)


# ============================================================================
# Transport Exceptions
# ============================================================================


ARTIFACT_KINDS = {
    "artifact": "binary archive",
    "checksums": "checksums file",
}


class DownloadError(InstallerError):
    """Raised when a download exhausts its retry budget."""

    def __init__(self, url: str, kind: str, attempts: int, reason: str):
        self.url = url
        self.kind = kind
        self.attempts = attempts
        self.reason = reason
        description = ARTIFACT_KINDS.get(kind, kind)
        super().__init__(
            f"Failed to download {description}: {url} "
            f"({attempts} attempt{'s' if attempts != 1 else ''}): {reason}"
        )


class DownloadTimeoutError(DownloadError):
    """Raised when the final download attempt timed out."""

    pass


# ============================================================================
# Integrity Exceptions
# ============================================================================


class ChecksumMismatchError(InstallerError):
    """Raised when an artifact digest differs from the checksum manifest."""

    def __init__(self, filename: str, expected: Optional[str], actual: str):
        self.filename = filename
        self.expected = expected
        self.actual = actual
        shown = expected if expected else "<no entry in checksums file>"
        super().__init__(
            f"Checksum mismatch for {filename}\n"
            f"  Expected: {shown}\n"
            f"  Actual:   {actual}"
        )


# ============================================================================
# Filesystem Exceptions
# ============================================================================


class FilesystemError(InstallerError):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


class InstallError(FilesystemError):
    """Failed to place the binary at the install path."""

    pass
