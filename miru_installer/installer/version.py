"""
Release version handling.

Resolves the version to install: either the one the user asked for, or the
latest published release from the release API.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

import requests

from miru_installer.core.config import InstallerConfig
from miru_installer.core.download import create_session
from miru_installer.core.exceptions import (
    ConfigurationError,
    ParseError,
    ReleaseApiError,
    VersionParseError,
)
from miru_installer.core.parsing import (
    extract_string_field,
    load_json_object,
    optional_string_field,
)

logger = logging.getLogger(__name__)

VERSION_PREFIX = "v"
LATEST_ALIASES = {"", "latest"}

# First vX.Y.Z token in `miru --version` output
_REPORTED_VERSION_RE = re.compile(r"v\d+\.\d+\.\d+")


@dataclass(frozen=True)
class ReleaseVersion:
    """
    A release tag, stored in canonical 'v'-prefixed form.

    Two versions are equal when their canonical forms are identical; there is
    no ordering.

    Example:
        >>> ReleaseVersion.parse("1.0.0") == ReleaseVersion.parse("v1.0.0")
        True
        >>> str(ReleaseVersion.parse("1.0.0"))
        'v1.0.0'
    """

    tag: str

    @classmethod
    def parse(cls, value: str) -> "ReleaseVersion":
        """
        Normalize a version string, adding the 'v' prefix if absent.

        Raises:
            ValueError: If value is empty
        """
        value = value.strip()
        if not value or value == VERSION_PREFIX:
            raise ValueError("Version cannot be empty")
        if not value.startswith(VERSION_PREFIX):
            value = VERSION_PREFIX + value
        return cls(value)

    @property
    def number(self) -> str:
        """Version without the prefix (e.g. '1.0.0')."""
        return self.tag[len(VERSION_PREFIX):]

    def __str__(self) -> str:
        return self.tag


def parse_reported_version(output: str) -> Optional[ReleaseVersion]:
    """
    Extract the version from a binary's `--version` output.

    Example:
        >>> parse_reported_version("miru v0.8.0 (linux/amd64)")
        ReleaseVersion(tag='v0.8.0')
    """
    match = _REPORTED_VERSION_RE.search(output)
    if not match:
        return None
    return ReleaseVersion.parse(match.group(0))


def fetch_latest_version(
    config: InstallerConfig, session: Optional[requests.Session] = None
) -> ReleaseVersion:
    """
    Ask the release API for the latest published release tag.

    Args:
        config: Installer configuration (release_api_url, timeout)
        session: Optional requests session

    Returns:
        ReleaseVersion of the latest release

    Raises:
        ReleaseApiError: If the API cannot be reached or returns an error status
        VersionParseError: If the response does not contain a usable tag_name
    """
    url = config.latest_release_url()
    http = session or create_session()

    logger.debug(f"Fetching latest release from {url}")

    try:
        response = http.get(
            url,
            headers={"Accept": "application/vnd.github+json"},
            timeout=config.timeout,
        )
    except requests.RequestException as e:
        raise ReleaseApiError(url, str(e) or type(e).__name__) from e

    if not response.ok:
        reason = f"HTTP {response.status_code}"
        try:
            api_message = optional_string_field(load_json_object(response.content), "message")
        except ParseError:
            api_message = None
        if api_message:
            reason += f" ({api_message})"
        raise ReleaseApiError(url, reason)

    try:
        data = load_json_object(response.content)
    except ParseError as e:
        logger.debug(f"Release API response is not a JSON object: {e}")
        raise VersionParseError(url) from e

    try:
        tag = extract_string_field(data, "tag_name")
    except ParseError as e:
        raise VersionParseError(url, optional_string_field(data, "message") or "") from e

    try:
        return ReleaseVersion.parse(tag)
    except ValueError as e:
        raise VersionParseError(url) from e


def resolve_version(
    requested: Optional[str],
    config: InstallerConfig,
    session: Optional[requests.Session] = None,
) -> ReleaseVersion:
    """
    Determine which version to install.

    An explicit version is normalized and used without any network call;
    None, '' or 'latest' (any case) resolves the latest release.

    Raises:
        ConfigurationError: If the requested version is not usable (e.g. 'v')
        ReleaseApiError: If the latest release lookup cannot reach the API
        VersionParseError: If the API response carries no version
    """
    if requested is None or requested.strip().lower() in LATEST_ALIASES:
        return fetch_latest_version(config, session)

    try:
        return ReleaseVersion.parse(requested)
    except ValueError as e:
        raise ConfigurationError(f"Invalid version {requested!r}: {e}") from e


__all__ = [
    "ReleaseVersion",
    "fetch_latest_version",
    "parse_reported_version",
    "resolve_version",
]
