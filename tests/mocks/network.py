"""
Mock release hosting for testing.

Registers the release API and release asset URLs on a `responses` mock so the
installer can run end to end without network access.
"""

import json
from typing import Optional, Union

import responses

from tests.utils.builders import ReleaseBuilder

RELEASE_API_URL = "https://api.example.test/repos/mirurobotics/cli"
ARTIFACT_BASE_URL = "https://downloads.example.test/releases/download"


class MockReleaseServer:
    """Serves release metadata and assets through a RequestsMock."""

    def __init__(self, mock: responses.RequestsMock):
        """
        Initialize mock server.

        Args:
            mock: Active RequestsMock to register URLs on
        """
        self.mock = mock

    @property
    def latest_url(self) -> str:
        return f"{RELEASE_API_URL}/releases/latest"

    def asset_url(self, version: str, filename: str) -> str:
        return f"{ARTIFACT_BASE_URL}/{version}/{filename}"

    def serve_latest(
        self,
        tag: Optional[str] = "v0.8.0",
        body: Optional[Union[str, dict, Exception]] = None,
        status: int = 200,
    ):
        """
        Register the latest-release API response.

        Args:
            tag: tag_name to return (ignored when body is given)
            body: Raw body, JSON-able dict, or exception to raise
            status: HTTP status code
        """
        if body is None:
            body = {"tag_name": tag}
        if isinstance(body, dict):
            body = json.dumps(body)
        self.mock.add(responses.GET, self.latest_url, body=body, status=status)

    def serve_release(
        self,
        version: str = "v0.8.0",
        builder: Optional[ReleaseBuilder] = None,
        platform: str = "Linux_x86_64",
        artifact_status: int = 200,
        checksums_status: int = 200,
    ) -> bytes:
        """
        Register the archive and checksum manifest of a release.

        Returns:
            The archive bytes that will be served
        """
        builder = builder or ReleaseBuilder().with_version(version)
        tarball = builder.tarball()

        self.mock.add(
            responses.GET,
            self.asset_url(version, "checksums.txt"),
            body=builder.checksums(tarball),
            status=checksums_status,
        )
        self.mock.add(
            responses.GET,
            self.asset_url(version, f"cli_{platform}.tar.gz"),
            body=tarball,
            status=artifact_status,
            content_type="application/gzip",
        )
        return tarball

    def requested_urls(self) -> list:
        """URLs requested so far, in order."""
        return [call.request.url for call in self.mock.calls]


__all__ = ["ARTIFACT_BASE_URL", "MockReleaseServer", "RELEASE_API_URL"]
