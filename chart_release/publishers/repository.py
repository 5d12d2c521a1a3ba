"""Single entry point for pushing a chart to any supported repository.

The set of repository kinds is closed; dispatch is a fixed table,
not a plugin registry.
"""

import logging
from pathlib import Path

from chart_release.publishers.base import (
    Publisher,
    PublishResult,
    RepositoryTarget,
    RepositoryType,
)
from chart_release.publishers.chartmuseum import ChartMuseumPublisher
from chart_release.publishers.generic import HTTPPublisher
from chart_release.publishers.oci import OCIPublisher

logger = logging.getLogger(__name__)

PUBLISHERS: dict[RepositoryType, type[Publisher]] = {
    RepositoryType.OCI: OCIPublisher,
    RepositoryType.CHARTMUSEUM: ChartMuseumPublisher,
    RepositoryType.HTTP: HTTPPublisher,
}

# Seconds; object stores can be slow to acknowledge large uploads
DEFAULT_TIMEOUTS: dict[RepositoryType, int] = {
    RepositoryType.OCI: 600,
    RepositoryType.CHARTMUSEUM: 60,
    RepositoryType.HTTP: 120,
}


def is_supported_type(repository_type: str) -> bool:
    return repository_type in {t.value for t in RepositoryType}


class Repository:
    """Pushes packaged charts to one repository target.

    Every push is a single attempt; retrying is left to the caller.
    """

    def __init__(
        self,
        target: RepositoryTarget,
        timeouts: dict[RepositoryType, int] | None = None,
    ) -> None:
        self.target = target
        self.timeouts = {**DEFAULT_TIMEOUTS, **(timeouts or {})}

    def publisher(self) -> Publisher | None:
        """Publisher for the target's type, or None when unsupported."""
        if not is_supported_type(self.target.type):
            return None
        repository_type = RepositoryType(self.target.type)
        return PUBLISHERS[repository_type](self.target, self.timeouts[repository_type])

    def push(self, package_path: Path) -> PublishResult:
        """Push a chart archive to the target.

        Args:
            package_path: Path of the packaged chart

        Returns:
            PublishResult; unsupported types fail before any I/O
        """
        publisher = self.publisher()
        if publisher is None:
            return PublishResult.failed(f"unsupported repository type: {self.target.type}")
        return publisher.publish(Path(package_path))

    def logout(self) -> PublishResult:
        """Close the registry session, if the target type has one.

        Best effort: a failure is logged and returned, never raised.
        """
        publisher = self.publisher()
        if publisher is None:
            return PublishResult.skipped(f"unsupported repository type: {self.target.type}")
        result = publisher.logout()
        if not result.ok:
            logger.warning("%s", result)
        return result
