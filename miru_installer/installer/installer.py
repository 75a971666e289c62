"""
Release installation workflow.

This module orchestrates installing the miru CLI from a GitHub release,
coordinating platform detection, version resolution, downloads, checksum
verification, extraction and atomic placement of the binary.
"""

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional

import requests

from miru_installer.core.config import InstallerConfig
from miru_installer.core.download import create_session, fetch
from miru_installer.core.exceptions import ArchiveExtractionError, InstallError
from miru_installer.core.filesystem import (
    atomic_install,
    extract_archive,
    is_writable_directory,
    temporary_directory,
)
from miru_installer.core.platform import PlatformTarget, detect_platform
from miru_installer.core.verification import ChecksumManifest, verify_artifact
from miru_installer.installer.environment import (
    check_search_path,
    publish_version_output,
)
from miru_installer.installer.version import (
    ReleaseVersion,
    parse_reported_version,
    resolve_version,
)

logger = logging.getLogger(__name__)

CHECKSUMS_FILENAME = "checksums.txt"
VERSION_PROBE_TIMEOUT = 10


class InstallOutcome(Enum):
    """How an installer run ended."""

    INSTALLED = "installed"
    UPGRADED = "upgraded"
    ALREADY_INSTALLED = "already_installed"


@dataclass
class InstallResult:
    """Result of an installer run."""

    version: ReleaseVersion
    """Version that is now installed"""

    binary_path: Path
    """Path of the installed executable"""

    outcome: InstallOutcome
    """Whether the binary was installed, upgraded, or already present"""

    previous_version: Optional[ReleaseVersion] = None
    """Version that was installed before this run, if any"""


class StatusReporter:
    """
    Receives user-facing progress messages from the installer.

    The default implementation only logs; the CLI supplies one that prints.
    """

    def status(self, message: str) -> None:
        logger.info(message)

    def warning(self, message: str) -> None:
        logger.warning(message)


def query_installed_version(
    binary_path: Path, timeout: float = VERSION_PROBE_TIMEOUT
) -> Optional[ReleaseVersion]:
    """
    Ask an installed binary for its version by running '<binary> --version'.

    This trusts the existing binary to be safe to execute. Any failure to run
    it or to find a version in its output is treated as "no comparable
    version installed".

    Returns:
        Reported version, or None
    """
    if not binary_path.is_file() or not os.access(binary_path, os.X_OK):
        return None

    try:
        result = subprocess.run(
            [str(binary_path), "--version"],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"Version probe of {binary_path} failed: {e}")
        return None

    version = parse_reported_version(result.stdout)
    if version is None:
        logger.debug(f"No version found in output of {binary_path} --version")
    return version


class ReleaseInstaller:
    """
    Installs the miru binary for the current platform.

    The complete workflow:
    1. Open a private workspace (removed on every exit path)
    2. Detect the platform target
    3. Resolve the version (explicit or latest release)
    4. Stop early if that version is already installed
    5. Download the checksum manifest and the release archive
    6. Verify the archive against the manifest
    7. Extract and atomically install the binary
    8. Warn if the install directory is not on PATH

    Example:
        >>> installer = ReleaseInstaller(load_config())
        >>> result = installer.install("v0.8.0")
        >>> print(f"Installed at: {result.binary_path}")
    """

    def __init__(
        self,
        config: InstallerConfig,
        reporter: Optional[StatusReporter] = None,
        session: Optional[requests.Session] = None,
        platform_target: Optional[PlatformTarget] = None,
    ):
        """
        Initialize the installer.

        Args:
            config: Installer configuration
            reporter: Receives status and warning messages
            session: Optional requests session shared by all HTTP calls
            platform_target: Override platform detection (for testing)
        """
        self.config = config
        self.reporter = reporter or StatusReporter()
        self.session = session or create_session()
        self.platform_target = platform_target

    def install(self, requested_version: Optional[str] = None) -> InstallResult:
        """
        Run the install workflow.

        Args:
            requested_version: Version to install; None or 'latest' installs
                the latest release

        Returns:
            InstallResult describing what happened

        Raises:
            InstallerError: On the first fatal error; nothing is left at the
                install path unless the final atomic rename succeeded
        """
        config = self.config
        name = config.binary_name

        with temporary_directory() as workspace:
            target = self.platform_target or detect_platform()
            logger.debug(f"Platform target: {target}")

            version = resolve_version(requested_version, config, self.session)
            self.reporter.status(f"Installing version: {version}")

            previous = query_installed_version(config.binary_path)
            if previous == version:
                self.reporter.status(f"{name} {version} is already installed")
                publish_version_output(version, config.environ)
                return InstallResult(
                    version=version,
                    binary_path=config.binary_path,
                    outcome=InstallOutcome.ALREADY_INSTALLED,
                    previous_version=previous,
                )
            if previous is not None:
                self.reporter.status(f"Upgrading {name} from {previous} to {version}")

            sudo = self._privilege_prefix()

            artifact_name = target.artifact_name()
            checksums_url = config.release_url(str(version), CHECKSUMS_FILENAME)
            artifact_url = config.release_url(str(version), artifact_name)

            self.reporter.status(f"Downloading {name} {version}...")
            manifest_path = fetch(
                checksums_url,
                workspace / CHECKSUMS_FILENAME,
                "checksums",
                config,
                session=self.session,
                on_retry=self._report_retry,
            )
            artifact_path = fetch(
                artifact_url,
                workspace / artifact_name,
                "artifact",
                config,
                session=self.session,
                on_retry=self._report_retry,
            )

            self.reporter.status("Verifying checksum...")
            verify_artifact(
                artifact_path, artifact_name, ChecksumManifest.load(manifest_path)
            )

            self.reporter.status("Installing...")
            extract_dir = workspace / "extracted"
            extract_archive(artifact_path, extract_dir)
            binary = self._find_binary(extract_dir, artifact_name)
            atomic_install(binary, config.binary_path, sudo=sudo)

            self.reporter.status(
                f"{name} {version} successfully installed to {config.binary_path}"
            )

            warning = check_search_path(config.install_dir, config.environ)
            if warning:
                self.reporter.warning(warning)

        publish_version_output(version, config.environ)

        return InstallResult(
            version=version,
            binary_path=config.binary_path,
            outcome=InstallOutcome.UPGRADED if previous else InstallOutcome.INSTALLED,
            previous_version=previous,
        )

    def _privilege_prefix(self) -> List[str]:
        """
        Command prefix used for the install step.

        An explicit SUDO setting wins; otherwise sudo is used only when the
        install directory is not writable.
        """
        if self.config.sudo:
            return shlex.split(self.config.sudo)

        install_dir = self.config.install_dir
        if is_writable_directory(install_dir):
            return []

        if shutil.which("sudo") is None:
            raise InstallError(
                f"Cannot write to {install_dir} and sudo is unavailable"
            )

        logger.debug(f"{install_dir} is not writable, using sudo")
        return ["sudo"]

    def _find_binary(self, extract_dir: Path, artifact_name: str) -> Path:
        """Locate the executable inside the extracted archive."""
        name = self.config.binary_name

        candidate = extract_dir / name
        if candidate.is_file():
            return candidate

        for path in sorted(extract_dir.rglob(name)):
            if path.is_file():
                return path

        raise ArchiveExtractionError(
            f"Failed to extract {name} from {artifact_name}: "
            "binary not found in archive (file may be corrupted)"
        )

    def _report_retry(
        self, attempt: int, max_attempts: int, error: BaseException, wait: float
    ) -> None:
        self.reporter.status(
            f"Retry {attempt}/{max_attempts} failed, waiting {wait:g}s..."
        )


__all__ = [
    "InstallOutcome",
    "InstallResult",
    "ReleaseInstaller",
    "StatusReporter",
    "query_installed_version",
]
