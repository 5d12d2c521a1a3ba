"""Publishers for chart repositories."""

from chart_release.publishers.base import (
    CHART_CONTENT_TYPE,
    Publisher,
    PublishResult,
    PublishStatus,
    RepositoryTarget,
    RepositoryType,
)
from chart_release.publishers.chartmuseum import ChartMuseumPublisher
from chart_release.publishers.generic import HTTPPublisher
from chart_release.publishers.oci import OCIPublisher
from chart_release.publishers.repository import Repository, is_supported_type

__all__ = [
    "CHART_CONTENT_TYPE",
    "ChartMuseumPublisher",
    "HTTPPublisher",
    "OCIPublisher",
    "Publisher",
    "PublishResult",
    "PublishStatus",
    "Repository",
    "RepositoryTarget",
    "RepositoryType",
    "is_supported_type",
]
