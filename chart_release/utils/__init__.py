"""Utility modules for chart-release."""

from chart_release.utils.shell import ShellError, is_command_available, run, strip_ansi
from chart_release.utils.version import (
    SEMVER_PATTERN,
    VERSION_PLACEHOLDER,
    is_valid_version,
    normalize_version,
    render_app_version,
)

__all__ = [
    # Shell utilities
    "run",
    "strip_ansi",
    "is_command_available",
    "ShellError",
    # Version utilities
    "is_valid_version",
    "normalize_version",
    "render_app_version",
    "SEMVER_PATTERN",
    "VERSION_PLACEHOLDER",
]
