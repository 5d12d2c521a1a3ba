"""Version string helpers for chart versions.

Helm requires chart versions to follow Semantic Versioning 2.0.0
(MAJOR.MINOR.PATCH with optional pre-release and build metadata).
Release tags often carry a 'v' prefix that must not reach Chart.yaml.
"""

import re

from chart_release.exceptions import ConfigurationError

# MAJOR.MINOR.PATCH[-prerelease][+build], optional leading 'v'
SEMVER_PATTERN = re.compile(
    r"^v?(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)"
    r"(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

# Placeholder substituted with the release version in app_version_format
VERSION_PLACEHOLDER = "{{.Version}}"


def is_valid_version(version_str: str) -> bool:
    """Check if a version string is valid SemVer (with optional 'v' prefix).

    Examples:
        >>> is_valid_version('1.2.3')
        True
        >>> is_valid_version('v1.2.3-rc.1+build.5')
        True
        >>> is_valid_version('1.2')
        False
    """
    if not version_str or not version_str.strip():
        return False
    return SEMVER_PATTERN.match(version_str.strip()) is not None


def normalize_version(version_str: str) -> str:
    """Strip whitespace and a leading 'v' from a release version.

    Args:
        version_str: Version such as 'v1.2.3' or '1.2.3'

    Returns:
        Bare version suitable for Chart.yaml

    Raises:
        ConfigurationError: If the version is not valid SemVer
    """
    if not is_valid_version(version_str):
        raise ConfigurationError(
            f"Invalid chart version: '{version_str}'",
            details="Chart versions must follow SemVer 2: MAJOR.MINOR.PATCH[-pre][+build]",
            fix_hint="Use a version like '1.2.3' or '1.2.3-rc.1'",
        )
    version = version_str.strip()
    return version[1:] if version.startswith("v") else version


def render_app_version(fmt: str, version: str) -> str:
    """Render the appVersion for a release.

    Every '{{.Version}}' placeholder in fmt is replaced with version.
    An empty format means the appVersion equals the chart version.

    Examples:
        >>> render_app_version('', '1.2.3')
        '1.2.3'
        >>> render_app_version('v{{.Version}}-alpine', '1.2.3')
        'v1.2.3-alpine'
    """
    if not fmt:
        return version
    return fmt.replace(VERSION_PLACEHOLDER, version)
