"""Chart.yaml reading, validation and version rewriting.

Version fields are rewritten textually so that comments, key order,
quoting style and blank lines written by humans survive a release.
Only the first top-level `version:` and `appVersion:` lines are touched.
"""

import json
import logging
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from chart_release.chart.models import ACCEPTED_API_VERSIONS, Chart
from chart_release.exceptions import (
    ManifestError,
    ManifestFieldNotFoundError,
    ManifestValidationError,
)

logger = logging.getLogger(__name__)

CHART_FILE = "Chart.yaml"

# [^\r\n] instead of `.` keeps CRLF line endings intact on rewrite
VERSION_LINE = re.compile(r"^version:[ \t]*[^\r\n]+", re.MULTILINE)
APP_VERSION_LINE = re.compile(r"^appVersion:[ \t]*[^\r\n]+", re.MULTILINE)


def chart_file(chart_path: Path) -> Path:
    """Return the path of Chart.yaml inside a chart directory."""
    return Path(chart_path) / CHART_FILE


def read_chart_text(chart_path: Path) -> str:
    """Read Chart.yaml verbatim (line endings preserved).

    Raises:
        ManifestError: If the file is missing or unreadable
    """
    path = chart_file(chart_path)
    try:
        with open(path, encoding="utf-8", newline="") as f:
            return f.read()
    except FileNotFoundError:
        raise ManifestError(
            f"{CHART_FILE} not found in {chart_path}",
            fix_hint="Set 'chart_path' to the directory containing Chart.yaml",
        ) from None
    except OSError as e:
        raise ManifestError(f"Failed to read {path}", details=str(e)) from e


def parse_chart(chart_path: Path) -> Chart:
    """Parse Chart.yaml into a Chart model.

    Args:
        chart_path: Chart directory

    Returns:
        Parsed chart metadata

    Raises:
        ManifestError: If the file is missing or not valid YAML
    """
    text = read_chart_text(chart_path)
    try:
        data: Any = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ManifestError(
            f"Failed to parse {CHART_FILE}",
            details=str(e),
            fix_hint="Check YAML syntax at the indicated line",
        ) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ManifestError(
            f"Failed to parse {CHART_FILE}",
            details=f"Expected a mapping at the top level, got {type(data).__name__}",
        )

    try:
        return Chart.model_validate(data)
    except PydanticValidationError as e:
        raise ManifestError(f"Failed to parse {CHART_FILE}", details=str(e)) from e


def validate_chart(chart: Chart) -> None:
    """Check the invariants every publishable chart must satisfy.

    Raises:
        ManifestValidationError: On the first violated invariant
    """
    if not chart.name:
        raise ManifestValidationError("chart name is required")
    if not chart.version:
        raise ManifestValidationError("chart version is required")
    if not chart.api_version:
        raise ManifestValidationError("apiVersion is required")
    if chart.api_version not in ACCEPTED_API_VERSIONS:
        raise ManifestValidationError(
            f"apiVersion must be v1 or v2, got: {chart.api_version}"
        )


def _line_ending(text: str, match: re.Match[str]) -> str:
    return "\r\n" if text.startswith("\r\n", match.end()) else "\n"


def _quote(value: str) -> str:
    # A JSON string is a valid YAML double-quoted scalar
    return json.dumps(value, ensure_ascii=False)


def patch_versions(text: str, version: str, app_version: str | None = None) -> str:
    """Rewrite the version fields of Chart.yaml text.

    The first `version:` line becomes `version: <version>`. When
    app_version is given, the first `appVersion:` line becomes
    `appVersion: "<app_version>"`, or such a line is inserted right
    after the version line if none exists. All other bytes are kept.

    Args:
        text: Raw Chart.yaml contents
        version: New chart version
        app_version: New appVersion, or None/empty to leave it alone

    Returns:
        Updated Chart.yaml contents

    Raises:
        ManifestFieldNotFoundError: If there is no version line
    """
    if VERSION_LINE.search(text) is None:
        raise ManifestFieldNotFoundError(f"version field not found in {CHART_FILE}")

    text = VERSION_LINE.sub(lambda m: f"version: {version}", text, count=1)

    if not app_version:
        return text

    app_line = f"appVersion: {_quote(app_version)}"
    if APP_VERSION_LINE.search(text) is not None:
        return APP_VERSION_LINE.sub(lambda m: app_line, text, count=1)

    return VERSION_LINE.sub(
        lambda m: f"{m.group(0)}{_line_ending(text, m)}{app_line}", text, count=1
    )


def update_chart_version(
    chart_path: Path,
    version: str,
    app_version: str | None = None,
) -> None:
    """Rewrite version (and optionally appVersion) of Chart.yaml in place.

    Args:
        chart_path: Chart directory
        version: New chart version
        app_version: New appVersion, or None to leave it alone

    Raises:
        ManifestError: If Chart.yaml cannot be read or written
        ManifestFieldNotFoundError: If Chart.yaml has no version line
    """
    path = chart_file(chart_path)
    updated = patch_versions(read_chart_text(chart_path), version, app_version)
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(updated)
    except OSError as e:
        raise ManifestError(f"Failed to write {path}", details=str(e)) from e
    logger.info("Updated %s: version=%s appVersion=%s", path, version, app_version or "-")
