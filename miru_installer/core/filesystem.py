"""
File system utilities for the miru installer.

This module provides the file operations of the install pipeline:
- Archive extraction (tar.gz) with directory traversal protection
- Atomic placement of the installed binary (temp file + rename)
- Safe deletion and scoped temporary workspaces
"""

import logging
import os
import secrets
import shutil
import subprocess
import sys
import tarfile
import tempfile
import zlib
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Sequence, Union

from .exceptions import (
    ArchiveExtractionError,
    FilesystemError,
    InsecureArchiveError,
    InstallError,
)

logger = logging.getLogger(__name__)

WORKSPACE_PREFIX = "miru-install."
EXECUTABLE_MODE = 0o755


# ============================================================================
# Path Utilities
# ============================================================================


def is_relative_to(path: Path, parent: Path) -> bool:
    """
    Check if path is relative to parent.

    Example:
        >>> is_relative_to(Path('/a/b/c'), Path('/a'))
        True
    """
    try:
        path.relative_to(parent)
        return True
    except ValueError:
        return False


def is_writable_directory(path: Union[str, Path]) -> bool:
    """
    Check whether files can be created in path.

    A missing directory counts as writable when its nearest existing parent is.
    """
    path = Path(path)
    while not path.exists():
        if path.parent == path:
            return False
        path = path.parent
    return path.is_dir() and os.access(path, os.W_OK | os.X_OK)


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()

    if not is_relative_to(member_path, destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_archive(archive_path: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Extract a .tar.gz archive to a destination directory.

    Validates all member paths before extracting anything.

    Args:
        archive_path: Path to the archive file
        destination: Directory to extract to

    Raises:
        InsecureArchiveError: If archive contains malicious paths
        ArchiveExtractionError: If the archive is missing, corrupt, or
            cannot be written out

    Example:
        >>> extract_archive(workspace / 'miru.tar.gz', workspace)
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    destination.mkdir(parents=True, exist_ok=True)

    try:
        with tarfile.open(archive_path, "r:gz") as tar:
            members = tar.getmembers()

            for member in members:
                _validate_archive_path(member.name, destination)

            # Extract with filter for security (Python 3.12+)
            # For older Python, we've already validated paths above
            if sys.version_info >= (3, 12):
                tar.extractall(destination, filter="data")
            else:
                tar.extractall(destination)
    except InsecureArchiveError:
        raise
    except (tarfile.TarError, zlib.error, EOFError, OSError, ValueError) as e:
        raise ArchiveExtractionError(
            f"Failed to extract archive {archive_path} (file may be corrupted): {e}"
        ) from e

    logger.debug(f"Extracted {len(members)} member(s) to {destination}")


# ============================================================================
# Atomic Install
# ============================================================================


def atomic_install(
    source: Union[str, Path],
    target: Union[str, Path],
    sudo: Sequence[str] = (),
) -> Path:
    """
    Install source as an executable at target, atomically.

    The file is first copied to a hidden temporary sibling of target (same
    directory, so same filesystem), made executable, then renamed over
    target. Observers of target see either the old file or the complete new
    one.

    Args:
        source: File to install
        target: Final path of the executable
        sudo: Privilege-escalation command prefix (e.g. ['sudo']); when
            given, the copy and rename run through it

    Returns:
        target as a Path

    Raises:
        InstallError: If any step fails; the temporary sibling is removed
    """
    source = Path(source)
    target = Path(target)

    if not source.is_file():
        raise InstallError(f"Failed to install binary to {target}: {source} not found")

    if sudo:
        _privileged_install(source, target, list(sudo))
    else:
        _direct_install(source, target)

    logger.debug(f"Installed {source} -> {target}")
    return target


def _direct_install(source: Path, target: Path) -> None:
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=".tmp"
        )
    except OSError as e:
        raise InstallError(f"Failed to install binary to {target}: {e}") from e

    temp_path = Path(temp_path_str)
    try:
        with open(temp_fd, "wb") as out, open(source, "rb") as src:
            shutil.copyfileobj(src, out)
        os.chmod(temp_path, EXECUTABLE_MODE)
        # Atomic rename (replaces destination if it exists)
        os.replace(temp_path, target)
    except BaseException as e:
        temp_path.unlink(missing_ok=True)
        if isinstance(e, OSError):
            raise InstallError(f"Failed to install binary to {target}: {e}") from e
        raise


def _privileged_install(source: Path, target: Path, sudo: list) -> None:
    temp_path = target.parent / f".{target.name}.{secrets.token_hex(4)}.tmp"

    steps = [
        [*sudo, "mkdir", "-p", str(target.parent)],
        [*sudo, "install", "-m", format(EXECUTABLE_MODE, "o"), str(source), str(temp_path)],
        [*sudo, "mv", "-f", str(temp_path), str(target)],
    ]

    for cmd in steps:
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            _privileged_cleanup(temp_path, sudo)
            raise InstallError(f"Failed to install binary to {target}: {e}") from e

        if result.returncode != 0:
            _privileged_cleanup(temp_path, sudo)
            detail = result.stderr.strip() or f"exit status {result.returncode}"
            raise InstallError(f"Failed to install binary to {target}: {detail}")


def _privileged_cleanup(temp_path: Path, sudo: list) -> None:
    try:
        subprocess.run([*sudo, "rm", "-f", str(temp_path)], capture_output=True)
    except OSError as e:
        logger.warning(f"Could not remove temporary file {temp_path}: {e}")


# ============================================================================
# Safe Deletion and Temporary Directories
# ============================================================================


def safe_rmtree(path: Union[str, Path]) -> None:
    """
    Remove a directory tree.

    Missing paths are ignored.

    Raises:
        FilesystemError: If path is not a directory or deletion fails
    """
    path = Path(path)

    if not path.exists():
        return  # Already gone, nothing to do

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}")


@contextmanager
def temporary_directory(prefix: str = WORKSPACE_PREFIX) -> Iterator[Path]:
    """
    Context manager for a private temporary workspace.

    The directory is removed when the block exits, whether it completes,
    raises, or is interrupted.

    Example:
        >>> with temporary_directory() as workspace:
        ...     (workspace / 'checksums.txt').write_text('...')
    """
    temp_dir = Path(tempfile.mkdtemp(prefix=prefix))
    logger.debug(f"Created workspace {temp_dir}")

    try:
        yield temp_dir
    finally:
        safe_rmtree(temp_dir)
        logger.debug(f"Removed workspace {temp_dir}")


__all__ = [
    "EXECUTABLE_MODE",
    "WORKSPACE_PREFIX",
    "atomic_install",
    "extract_archive",
    "is_relative_to",
    "is_writable_directory",
    "safe_rmtree",
    "temporary_directory",
]
