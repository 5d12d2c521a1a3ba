"""Generic HTTP publisher.

Uploads the archive with `PUT {url}`, for object stores and plain web
servers (Nexus raw repositories, Artifactory generic repositories,
S3 presigned URLs, ...).

Configuration:
    repository:
        type: http
        url: https://repo.example.com/charts/mychart-1.0.0.tgz
        username: deploy    # optional, HTTP basic auth
        password: secret    # optional
"""

import logging
from pathlib import Path
from typing import ClassVar

from chart_release.exceptions import ChartReleaseError
from chart_release.publishers.base import Publisher, PublishResult, RepositoryType
from chart_release.publishers.transport import upload_file

logger = logging.getLogger(__name__)


class HTTPPublisher(Publisher):
    """Publisher for generic HTTP servers.

    Content-Length is always declared from the file size.
    """

    repository_type: ClassVar[RepositoryType] = RepositoryType.HTTP
    display_name: ClassVar[str] = "HTTP Repository"

    def publish(self, package_path: Path) -> PublishResult:
        logger.info("Uploading %s to %s", package_path, self.target.url)

        try:
            response = upload_file(
                "PUT",
                self.target.url,
                package_path,
                timeout=self.timeout,
                username=self.target.username,
                password=self.target.password,
                declare_length=True,
            )
        except ChartReleaseError as e:
            return PublishResult.failed(message=e.message, details=e.details)

        if not 200 <= response.status < 300:
            return PublishResult.failed(
                message=f"upload failed with status {response.status}",
                details=response.body,
                status_code=response.status,
            )

        return PublishResult.success(
            f"Uploaded {package_path.name} to {self.target.url}",
            status_code=response.status,
        )
