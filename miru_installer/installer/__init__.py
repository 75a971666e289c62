"""
Release installation for the miru CLI.

This package resolves release versions, runs the install workflow and performs
post-install environment checks.
"""

from .version import (
    ReleaseVersion,
    fetch_latest_version,
    parse_reported_version,
    resolve_version,
)
from .installer import (
    InstallOutcome,
    InstallResult,
    ReleaseInstaller,
    StatusReporter,
    query_installed_version,
)
from .environment import (
    check_search_path,
    is_on_search_path,
    publish_version_output,
)

__all__ = [
    "ReleaseVersion",
    "fetch_latest_version",
    "parse_reported_version",
    "resolve_version",
    "InstallOutcome",
    "InstallResult",
    "ReleaseInstaller",
    "StatusReporter",
    "query_installed_version",
    "check_search_path",
    "is_on_search_path",
    "publish_version_output",
]
