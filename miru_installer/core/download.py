"""
Network download manager with retry logic and timeout handling.

This module provides the downloading used by the installer:
- HTTP/HTTPS downloads with TLS verification (via requests)
- Streaming writes to a temporary '.part' file, renamed into place on success
- Per-attempt timeout covering both stalled connections and slow transfers
- Bounded retries with a configurable delay between attempts
"""

import logging
import time
from pathlib import Path
from typing import Iterator, Optional

import requests
import urllib3
from requests.exceptions import (
    ChunkedEncodingError,
    ContentDecodingError,
    ReadTimeout,
    RequestException,
    Timeout,
)

from .config import InstallerConfig
from .exceptions import DownloadError, DownloadTimeoutError
from .retry import RetryCallback, RetryError, retry_call

logger = logging.getLogger(__name__)

CHUNK_SIZE = 8192
USER_AGENT = "miru-installer"


def create_session() -> requests.Session:
    """Create an HTTP session with the installer's default headers."""
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    return session


def download_file(
    url: str,
    destination: Path,
    timeout: float = 60.0,
    session: Optional[requests.Session] = None,
) -> Path:
    """
    Download a URL to destination in a single attempt.

    The body is streamed into '<destination>.part' and renamed once complete,
    so destination never holds a partial download.

    Args:
        url: URL to download from
        destination: Local path to save file
        timeout: Seconds allowed for the whole attempt
        session: Optional requests session

    Returns:
        Path to downloaded file

    Raises:
        requests.RequestException: If the request fails, returns an error
            status, or exceeds the timeout
        ValueError: If URL or destination is invalid
    """
    if not url:
        raise ValueError("URL cannot be empty")

    if not destination:
        raise ValueError("Destination path cannot be empty")

    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    partial = destination.with_name(destination.name + ".part")

    http = session or create_session()
    deadline = time.monotonic() + timeout

    logger.debug(f"Downloading from {url}")

    try:
        with http.get(
            url, stream=True, timeout=(timeout, timeout), allow_redirects=True
        ) as response:
            response.raise_for_status()

            with open(partial, "wb") as f:
                for chunk in _iter_body(response, url, timeout, deadline):
                    f.write(chunk)

        partial.replace(destination)

    except BaseException:
        partial.unlink(missing_ok=True)
        raise

    logger.debug(f"Download complete: {destination}")
    return destination


def _iter_body(
    response: requests.Response, url: str, timeout: float, deadline: float
) -> Iterator[bytes]:
    """
    Yield the response body as it arrives, enforcing the attempt deadline.

    raw.read1() returns whatever a single socket read produced, so the
    deadline is checked after every read. A server trickling bytes cannot
    keep one buffered read open past it; each read is still bounded by the
    read timeout.

    Raises:
        requests.Timeout: If the deadline passes or a read times out
        requests.RequestException: For other transport failures mid-body
    """
    raw = response.raw
    while True:
        if time.monotonic() > deadline:
            raise Timeout(f"Download of {url} exceeded {timeout}s")

        try:
            chunk = raw.read1(CHUNK_SIZE, decode_content=True)
        except urllib3.exceptions.ReadTimeoutError as e:
            raise ReadTimeout(e, request=response.request)
        except urllib3.exceptions.ProtocolError as e:
            raise ChunkedEncodingError(e)
        except urllib3.exceptions.DecodeError as e:
            raise ContentDecodingError(e)
        except urllib3.exceptions.HTTPError as e:
            raise requests.ConnectionError(e)

        if not chunk:
            return
        yield chunk


def fetch(
    url: str,
    destination: Path,
    kind: str,
    config: InstallerConfig,
    session: Optional[requests.Session] = None,
    on_retry: Optional[RetryCallback] = None,
) -> Path:
    """
    Download a release asset with the configured retry policy.

    Args:
        url: URL to download from
        destination: Local path to save file
        kind: What is being downloaded ('artifact' or 'checksums'); used in
            error messages
        config: Installer configuration (max_retries, retry_delay, timeout)
        session: Optional requests session
        on_retry: Optional callback invoked before each retry

    Returns:
        Path to downloaded file

    Raises:
        DownloadTimeoutError: If the final attempt timed out
        DownloadError: If all attempts failed for any other transport reason

    Example:
        >>> fetch(url, workspace / "checksums.txt", "checksums", config)
    """
    try:
        return retry_call(
            lambda: download_file(url, destination, config.timeout, session),
            max_attempts=config.max_retries,
            delay=config.retry_delay,
            retry_on=(RequestException,),
            on_retry=on_retry,
        )
    except RetryError as e:
        error_cls = DownloadTimeoutError if _is_timeout(e.last_error) else DownloadError
        raise error_cls(url, kind, e.attempts, _describe(e.last_error)) from e


def _is_timeout(error: BaseException) -> bool:
    """
    Check whether a requests failure was a timeout.

    requests reports a read that timed out mid-body as a ConnectionError
    wrapping urllib3's ReadTimeoutError.
    """
    if isinstance(error, Timeout):
        return True
    return isinstance(error, requests.ConnectionError) and any(
        isinstance(arg, urllib3.exceptions.ReadTimeoutError) for arg in error.args
    )


def _describe(error: BaseException) -> str:
    """Short, user-facing description of a requests failure."""
    if isinstance(error, requests.HTTPError) and error.response is not None:
        return f"HTTP {error.response.status_code}"
    if _is_timeout(error):
        return f"timed out ({error})"
    return str(error) or type(error).__name__


__all__ = ["create_session", "download_file", "fetch"]
