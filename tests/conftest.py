"""
Pytest configuration and shared fixtures for installer tests.
"""

import tempfile
from pathlib import Path

import pytest
import responses

from miru_installer.core.config import load_config
from miru_installer.core.platform import Architecture, OperatingSystem, PlatformTarget
from tests.mocks.network import ARTIFACT_BASE_URL, RELEASE_API_URL, MockReleaseServer


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def install_dir(tmp_path: Path) -> Path:
    """Empty install directory."""
    path = tmp_path / "bin"
    path.mkdir()
    return path


@pytest.fixture
def workspace_root(tmp_path: Path, monkeypatch) -> Path:
    """Redirect temporary directories into an inspectable location."""
    root = tmp_path / "tmp"
    root.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(root))
    return root


@pytest.fixture
def test_environ(install_dir: Path) -> dict:
    """Environment for a fast, fully local installer run."""
    return {
        "INSTALL_DIR": str(install_dir),
        "MAX_RETRIES": "2",
        "RETRY_DELAY": "0",
        "DOWNLOAD_TIMEOUT": "5",
        "RELEASE_API_URL": RELEASE_API_URL,
        "ARTIFACT_BASE_URL": ARTIFACT_BASE_URL,
        "PATH": "/usr/bin:/bin",
    }


@pytest.fixture
def installer_config(test_environ: dict):
    """InstallerConfig built from test_environ."""
    return load_config(test_environ)


@pytest.fixture
def linux_target() -> PlatformTarget:
    return PlatformTarget(OperatingSystem.LINUX, Architecture.X86_64)


@pytest.fixture
def mocked_responses():
    """Active responses mock; unmatched requests raise ConnectionError."""
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def release_server(mocked_responses) -> MockReleaseServer:
    """Mock release API and asset hosting."""
    return MockReleaseServer(mocked_responses)
