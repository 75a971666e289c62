"""
Post-install environment checks.

Inspects (never modifies) the user's search path, and publishes the installed
version to GitHub Actions when running inside a workflow.
"""

import logging
import os
from pathlib import Path
from typing import Mapping, Optional, TextIO

from miru_installer.core.exceptions import FilesystemError
from miru_installer.installer.version import ReleaseVersion

logger = logging.getLogger(__name__)


def _normalize(entry: str) -> str:
    return os.path.normcase(os.path.normpath(os.path.expanduser(entry)))


def is_on_search_path(directory: Path, path_value: str) -> bool:
    """
    Check whether directory is one of the entries of a PATH-style string.

    Entries are compared after normalization, so '/usr/local/bin/' matches
    '/usr/local/bin' but '/usr/local/bin2' does not.

    Example:
        >>> is_on_search_path(Path('/usr/local/bin'), '/usr/bin:/usr/local/bin/')
        True
    """
    wanted = _normalize(str(directory))
    return any(
        _normalize(entry) == wanted for entry in path_value.split(os.pathsep) if entry
    )


def check_search_path(directory: Path, environ: Mapping[str, str]) -> Optional[str]:
    """
    Return a warning if directory is not reachable through PATH.

    Returns:
        Warning text, or None if directory is on PATH
    """
    if is_on_search_path(directory, environ.get("PATH", "")):
        logger.debug(f"{directory} is on PATH")
        return None

    return (
        f"{directory} is not in your PATH. "
        f'Add it with: export PATH="{directory}:$PATH"'
    )


def publish_version_output(
    version: ReleaseVersion,
    environ: Mapping[str, str],
    stream: Optional[TextIO] = None,
) -> bool:
    """
    Expose the installed version as a GitHub Actions step output.

    Appends 'version=<v>' to the file named by GITHUB_OUTPUT; on runners that
    only set GITHUB_ACTIONS, prints the legacy set-output command instead.
    Outside GitHub Actions nothing is written.

    Returns:
        True if an output was published

    Raises:
        FilesystemError: If the GITHUB_OUTPUT file cannot be written
    """
    output_file = environ.get("GITHUB_OUTPUT")
    if output_file:
        try:
            with open(output_file, "a", encoding="utf-8") as f:
                f.write(f"version={version}\n")
        except OSError as e:
            raise FilesystemError(
                f"Failed to write version output to {output_file}: {e}"
            ) from e
        logger.debug(f"Wrote version output to {output_file}")
        return True

    if environ.get("GITHUB_ACTIONS"):
        print(f"::set-output name=version::{version}", file=stream, flush=True)
        return True

    return False


__all__ = ["check_search_path", "is_on_search_path", "publish_version_output"]
