"""Helm chart release automation: version bump, validate, package, publish."""

__version__ = "0.1.0"

from chart_release.exceptions import (
    ChartReleaseError,
    ConfigurationError,
    HelmError,
    ManifestError,
    ManifestFieldNotFoundError,
    ManifestValidationError,
    NetworkError,
    PackagePathNotFoundError,
    PublishError,
    ReleaseTimeoutError,
)

__all__ = [
    "__version__",
    "ChartReleaseError",
    "ConfigurationError",
    "ManifestError",
    "ManifestValidationError",
    "ManifestFieldNotFoundError",
    "HelmError",
    "PackagePathNotFoundError",
    "PublishError",
    "NetworkError",
    "ReleaseTimeoutError",
]
