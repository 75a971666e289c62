"""
Tests for release version resolution.
"""

import pytest
import requests

from miru_installer.core.exceptions import (
    ConfigurationError,
    ReleaseApiError,
    VersionParseError,
    VersionResolutionError,
)
from miru_installer.installer.version import (
    ReleaseVersion,
    fetch_latest_version,
    parse_reported_version,
    resolve_version,
)


class TestReleaseVersion:
    """Test ReleaseVersion normalization."""

    @pytest.mark.parametrize("value", ["1.0.0", "v1.0.0", " v1.0.0\n"])
    def test_parse_adds_prefix(self, value):
        assert str(ReleaseVersion.parse(value)) == "v1.0.0"

    def test_prefixed_and_bare_are_equal(self):
        assert ReleaseVersion.parse("0.8.0") == ReleaseVersion.parse("v0.8.0")

    def test_number(self):
        assert ReleaseVersion.parse("v2.3.4").number == "2.3.4"

    def test_prerelease_kept_verbatim(self):
        assert str(ReleaseVersion.parse("1.0.0-rc.1")) == "v1.0.0-rc.1"

    @pytest.mark.parametrize("value", ["", "   ", "v"])
    def test_empty_rejected(self, value):
        with pytest.raises(ValueError, match="empty"):
            ReleaseVersion.parse(value)


class TestParseReportedVersion:
    """Test parse_reported_version()."""

    @pytest.mark.parametrize(
        "output,expected",
        [
            ("miru v0.8.0\n", "v0.8.0"),
            ("miru version v1.2.3 (linux/amd64)", "v1.2.3"),
            ("v10.20.30", "v10.20.30"),
        ],
    )
    def test_finds_version(self, output, expected):
        assert str(parse_reported_version(output)) == expected

    @pytest.mark.parametrize("output", ["", "miru 0.8.0", "unknown command"])
    def test_no_version(self, output):
        assert parse_reported_version(output) is None


class TestFetchLatestVersion:
    """Test fetch_latest_version() against a mocked release API."""

    def test_tag_name(self, installer_config, release_server):
        release_server.serve_latest("v0.8.0")

        assert fetch_latest_version(installer_config) == ReleaseVersion("v0.8.0")

    def test_sends_github_accept_header(self, installer_config, release_server):
        release_server.serve_latest("v0.8.0")

        fetch_latest_version(installer_config)

        request = release_server.mock.calls[0].request
        assert request.headers["Accept"] == "application/vnd.github+json"

    def test_bare_tag_normalized(self, installer_config, release_server):
        release_server.serve_latest("0.9.1")

        assert str(fetch_latest_version(installer_config)) == "v0.9.1"

    def test_missing_tag_name(self, installer_config, release_server):
        """Test a response without tag_name is a parse failure."""
        release_server.serve_latest(body={})

        with pytest.raises(VersionParseError) as exc_info:
            fetch_latest_version(installer_config)

        message = str(exc_info.value)
        assert "parse" in message
        assert "version" in message
        assert release_server.latest_url in message

    def test_api_message_included(self, installer_config, release_server):
        """Test the API's own message is passed on to the user."""
        release_server.serve_latest(body={"message": "API rate limit exceeded"})

        with pytest.raises(VersionParseError, match="API rate limit exceeded"):
            fetch_latest_version(installer_config)

    def test_tag_without_version(self, installer_config, release_server):
        """Test a bare 'v' tag is a parse failure, not a crash."""
        release_server.serve_latest("v")

        with pytest.raises(VersionParseError):
            fetch_latest_version(installer_config)

    def test_non_json_body(self, installer_config, release_server):
        release_server.serve_latest(body="<html>maintenance</html>")

        with pytest.raises(VersionParseError):
            fetch_latest_version(installer_config)

    def test_http_error_status(self, installer_config, release_server):
        """Test error statuses report the code and API message."""
        release_server.serve_latest(body={"message": "Not Found"}, status=404)

        with pytest.raises(ReleaseApiError) as exc_info:
            fetch_latest_version(installer_config)

        assert "HTTP 404 (Not Found)" in str(exc_info.value)

    def test_unreachable(self, installer_config, release_server):
        """Test network failures name the API URL."""
        release_server.serve_latest(
            body=requests.exceptions.ConnectionError("Name or service not known")
        )

        with pytest.raises(ReleaseApiError) as exc_info:
            fetch_latest_version(installer_config)

        assert exc_info.value.url == release_server.latest_url
        assert release_server.latest_url in str(exc_info.value)

    def test_failures_share_base_class(self, installer_config, release_server):
        release_server.serve_latest(body={})

        with pytest.raises(VersionResolutionError):
            fetch_latest_version(installer_config)


class TestResolveVersion:
    """Test resolve_version()."""

    def test_explicit_version_skips_network(self, installer_config, release_server):
        """Test an explicit version is used without calling the API."""
        assert str(resolve_version("1.0.0", installer_config)) == "v1.0.0"
        assert release_server.requested_urls() == []

    def test_unusable_explicit_version(self, installer_config, release_server):
        with pytest.raises(ConfigurationError, match="Invalid version"):
            resolve_version("v", installer_config)

        assert release_server.requested_urls() == []

    @pytest.mark.parametrize("requested", [None, "", "latest", "LATEST"])
    def test_latest(self, requested, installer_config, release_server):
        release_server.serve_latest("v0.8.0")

        assert str(resolve_version(requested, installer_config)) == "v0.8.0"
        assert release_server.requested_urls() == [release_server.latest_url]
