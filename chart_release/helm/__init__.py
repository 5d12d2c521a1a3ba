"""Helm CLI integration."""

from chart_release.helm.cli import HelmCLI, SignOptions
from chart_release.helm.output import PACKAGE_PATH_MARKER, extract_package_path

__all__ = [
    "HelmCLI",
    "SignOptions",
    "PACKAGE_PATH_MARKER",
    "extract_package_path",
]
