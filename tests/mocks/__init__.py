"""Mock objects for installer testing."""

from .network import ARTIFACT_BASE_URL, MockReleaseServer, RELEASE_API_URL

__all__ = ["ARTIFACT_BASE_URL", "MockReleaseServer", "RELEASE_API_URL"]
