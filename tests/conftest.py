"""Pytest fixtures for chart-release tests.

Provides common fixtures for:
- Temporary project and chart directories
- Mock configurations
- A local HTTP server recording chart uploads
"""

import os
import threading
from collections.abc import Generator
from dataclasses import dataclass, field
from email.message import Message
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any

import pytest
import yaml

SAMPLE_CHART_YAML = """\
apiVersion: v2
name: webapp
description: A Helm chart for the web application
type: application
# bumped by CI
version: 1.0.0
appVersion: "1.0.0"
keywords:
  - web
maintainers:
  - name: Platform Team
    email: platform@example.com
"""


@pytest.fixture
def temp_dir(tmp_path: Path) -> Generator[Path, None, None]:
    """Create a temporary directory for tests.

    Yields:
        Path to temporary directory
    """
    yield tmp_path
    # Cleanup handled by pytest's tmp_path


@pytest.fixture
def project_dir(temp_dir: Path) -> Path:
    """Create a temporary project directory.

    Returns:
        Path to project directory
    """
    project = temp_dir / "test-project"
    project.mkdir()
    return project


@pytest.fixture
def chart_dir(project_dir: Path) -> Path:
    """Create a chart directory with a realistic Chart.yaml.

    Returns:
        Path to chart directory (project_dir/charts/webapp)
    """
    chart = project_dir / "charts" / "webapp"
    (chart / "templates").mkdir(parents=True)
    (chart / "Chart.yaml").write_text(SAMPLE_CHART_YAML, encoding="utf-8")
    (chart / "values.yaml").write_text("replicaCount: 1\n", encoding="utf-8")
    return chart


@pytest.fixture
def package_file(temp_dir: Path) -> Path:
    """Create a fake packaged chart.

    Returns:
        Path to a small .tgz file
    """
    path = temp_dir / "webapp-1.0.0.tgz"
    path.write_bytes(b"\x1f\x8b\x08\x00" + bytes(range(256)) * 8)
    return path


@pytest.fixture
def mock_config() -> dict[str, Any]:
    """Return a configuration dictionary for a ChartMuseum target.

    Returns:
        Configuration dictionary
    """
    return {
        "chart_path": "charts/webapp",
        "repository": {
            "type": "chartmuseum",
            "url": "https://charts.example.com",
            "username": "ci-bot",
            "password": "s3cret",
        },
        "version": {
            "update_chart": True,
            "update_app_version": True,
        },
        "lint": True,
        "template_validate": True,
        "output_dir": "dist",
    }


@pytest.fixture
def config_file(project_dir: Path, mock_config: dict[str, Any]) -> Path:
    """Write mock_config to chart_release.yml in the project.

    Returns:
        Path to config file
    """
    path = project_dir / "chart_release.yml"
    path.write_text(yaml.safe_dump(mock_config))
    return path


@pytest.fixture
def clean_env() -> Generator[None, None, None]:
    """Temporarily clean environment variables.

    Removes CHART_RELEASE_* environment variables during test.
    """
    old_env = {}
    for key in list(os.environ.keys()):
        if key.startswith("CHART_RELEASE_"):
            old_env[key] = os.environ.pop(key)

    yield

    os.environ.update(old_env)


@dataclass
class RecordedRequest:
    """A request captured by the upload server."""

    method: str
    path: str
    headers: Message
    body: bytes


@dataclass
class UploadServer:
    """Handle to the running upload server."""

    url: str
    requests: list[RecordedRequest] = field(default_factory=list)
    status: int = 201
    response_body: bytes = b'{"saved":true}'


def _read_chunked(rfile: Any) -> bytes:
    body = b""
    while True:
        size = int(rfile.readline().split(b";")[0].strip(), 16)
        if size == 0:
            # trailer terminator
            rfile.readline()
            return body
        body += rfile.read(size)
        rfile.readline()


@pytest.fixture
def upload_server() -> Generator[UploadServer, None, None]:
    """Run a local HTTP server that records POST and PUT requests.

    The response status and body can be changed through the yielded
    handle before the request is made.

    Yields:
        UploadServer with the base URL and the recorded requests
    """
    state = UploadServer(url="")

    class Handler(BaseHTTPRequestHandler):
        protocol_version = "HTTP/1.1"

        def _record(self) -> None:
            if self.headers.get("Transfer-Encoding", "").lower() == "chunked":
                body = _read_chunked(self.rfile)
            else:
                body = self.rfile.read(int(self.headers.get("Content-Length", "0")))
            state.requests.append(
                RecordedRequest(
                    method=self.command,
                    path=self.path,
                    headers=self.headers,
                    body=body,
                )
            )
            self.send_response(state.status)
            self.send_header("Content-Type", "application/json")
            self.send_header("Content-Length", str(len(state.response_body)))
            self.send_header("Connection", "close")
            self.end_headers()
            self.wfile.write(state.response_body)

        do_POST = _record
        do_PUT = _record

        def log_message(self, format: str, *args: Any) -> None:
            pass

    server = ThreadingHTTPServer(("127.0.0.1", 0), Handler)
    state.url = f"http://127.0.0.1:{server.server_address[1]}"
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()

    yield state

    server.shutdown()
    server.server_close()
    thread.join(timeout=5)
