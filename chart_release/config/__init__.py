"""Configuration management for chart-release."""

from chart_release.config.models import (
    ChartReleaseConfig,
    DependencyConfig,
    RepositoryConfig,
    TimeoutsConfig,
    VersionConfig,
)

__all__ = [
    "ChartReleaseConfig",
    "RepositoryConfig",
    "VersionConfig",
    "DependencyConfig",
    "TimeoutsConfig",
]
