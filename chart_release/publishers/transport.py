"""HTTP upload of chart archives.

The archive is streamed from the open file; it is never read into
memory as a whole. Redirects are not followed, so a 3xx answer is
reported as what it is instead of silently turning a POST into a GET.
"""

import base64
import http.client
import logging
import os
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from chart_release import __version__
from chart_release.exceptions import NetworkError, PublishError
from chart_release.publishers.base import CHART_CONTENT_TYPE

logger = logging.getLogger(__name__)

USER_AGENT = f"chart-release/{__version__}"


@dataclass
class UploadResponse:
    """Status and body text returned by the repository."""

    status: int
    body: str


class _NoRedirect(urllib.request.HTTPRedirectHandler):
    def redirect_request(self, req, fp, code, msg, headers, newurl):  # type: ignore[no-untyped-def]
        return None


_opener = urllib.request.build_opener(_NoRedirect)


class DeadlineReader:
    """File wrapper that stops the body stream once a deadline passes.

    Socket timeouts only bound a single read or write, so a server that
    accepts bytes slowly could stretch an upload indefinitely.
    """

    def __init__(self, f: BinaryIO, deadline: float) -> None:
        self._f = f
        self._deadline = deadline

    def read(self, size: int = -1) -> bytes:
        if time.monotonic() > self._deadline:
            raise TimeoutError("upload deadline exceeded")
        return self._f.read(size)


def basic_auth_header(username: str, password: str) -> str:
    """Build an HTTP basic Authorization header value."""
    token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
    return f"Basic {token}"


def upload_file(
    method: str,
    url: str,
    package_path: Path,
    timeout: int,
    username: str = "",
    password: str = "",
    declare_length: bool = False,
) -> UploadResponse:
    """Stream a chart archive to url.

    Args:
        method: HTTP method (POST or PUT)
        url: Endpoint receiving the archive
        package_path: Chart archive to send
        timeout: Seconds allowed for streaming the whole body. Each socket
            operation, including waiting for the response, gets the same limit
        username: Basic auth user; auth is sent only with a password too
        password: Basic auth password
        declare_length: Send Content-Length from the file size instead of
            chunked transfer encoding

    Returns:
        The repository's status code and body, whatever the status

    Raises:
        PublishError: If the archive cannot be opened
        NetworkError: If no HTTP response was received
    """
    try:
        f = open(package_path, "rb")
    except OSError as e:
        raise PublishError(f"failed to open package {package_path}", details=str(e)) from e

    deadline = time.monotonic() + timeout
    with f:
        headers = {
            "Content-Type": CHART_CONTENT_TYPE,
            "User-Agent": USER_AGENT,
        }
        if declare_length:
            # Some servers reject chunked uploads
            headers["Content-Length"] = str(os.fstat(f.fileno()).st_size)
        if username and password:
            headers["Authorization"] = basic_auth_header(username, password)

        request = urllib.request.Request(url, data=DeadlineReader(f, deadline), headers=headers, method=method)
        logger.debug("%s %s", method, url)

        try:
            with _opener.open(request, timeout=timeout) as response:
                return UploadResponse(status=response.status, body=_decode(response.read()))
        except urllib.error.HTTPError as e:
            # Non-2xx answers still carry the server's explanation
            return UploadResponse(status=e.code, body=_decode(e.read()))
        except urllib.error.URLError as e:
            raise NetworkError(
                f"network error during {method} {url}",
                details=str(e.reason),
            ) from e
        except (TimeoutError, http.client.HTTPException, OSError) as e:
            raise NetworkError(
                f"network error during {method} {url}",
                details=f"{type(e).__name__}: {e}",
            ) from e


def _decode(body: bytes | None) -> str:
    if not body:
        return ""
    return body.decode("utf-8", errors="replace").strip()
