"""ChartMuseum publisher.

Uploads the archive with `POST {url}[/{context_path}]/api/charts`.

Configuration:
    repository:
        type: chartmuseum
        url: https://charts.example.com
        username: admin     # optional, HTTP basic auth
        password: secret    # optional
    context_path: museum    # optional, when ChartMuseum runs under a prefix
"""

import logging
from pathlib import Path
from typing import ClassVar

from chart_release.exceptions import ChartReleaseError
from chart_release.publishers.base import Publisher, PublishResult, RepositoryType
from chart_release.publishers.transport import upload_file

logger = logging.getLogger(__name__)

CHARTS_API = "api/charts"

# ChartMuseum answers 201 Created; some proxies in front of it answer 200
ACCEPTED_STATUSES = (200, 201)


def chartmuseum_endpoint(url: str, context_path: str = "") -> str:
    """Build the chart upload endpoint.

    Examples:
        >>> chartmuseum_endpoint("https://charts.example.com")
        'https://charts.example.com/api/charts'
        >>> chartmuseum_endpoint("https://charts.example.com", "museum")
        'https://charts.example.com/museum/api/charts'
    """
    if context_path:
        return f"{url}/{context_path}/{CHARTS_API}"
    return f"{url}/{CHARTS_API}"


class ChartMuseumPublisher(Publisher):
    """Publisher for ChartMuseum servers."""

    repository_type: ClassVar[RepositoryType] = RepositoryType.CHARTMUSEUM
    display_name: ClassVar[str] = "ChartMuseum"

    def publish(self, package_path: Path) -> PublishResult:
        endpoint = chartmuseum_endpoint(self.target.url, self.target.context_path)
        logger.info("Uploading %s to %s", package_path, endpoint)

        try:
            response = upload_file(
                "POST",
                endpoint,
                package_path,
                timeout=self.timeout,
                username=self.target.username,
                password=self.target.password,
            )
        except ChartReleaseError as e:
            return PublishResult.failed(message=e.message, details=e.details)

        if response.status not in ACCEPTED_STATUSES:
            return PublishResult.failed(
                message=f"upload failed with status {response.status}",
                details=response.body,
                status_code=response.status,
            )

        return PublishResult.success(
            f"Uploaded {package_path.name} to {endpoint}",
            status_code=response.status,
        )
