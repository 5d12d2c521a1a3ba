"""Base types shared by the repository publishers.

Publishers upload a packaged chart to one kind of chart repository:
- OCI registries (helm registry login + helm push)
- ChartMuseum (authenticated POST to /api/charts)
- Generic HTTP servers (authenticated PUT of the archive)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import ClassVar

# Media type of a packaged chart (.tgz)
CHART_CONTENT_TYPE = "application/gzip"

OCI_SCHEME = "oci://"


class RepositoryType(str, Enum):
    """Supported chart repository kinds."""

    OCI = "oci"
    CHARTMUSEUM = "chartmuseum"
    HTTP = "http"


class PublishStatus(Enum):
    """Status of a publish operation."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class PublishResult:
    """Result of a publish operation.

    Attributes:
        status: Overall status
        message: Brief description
        details: Extended information (tool output, response body)
        status_code: HTTP status returned by the repository, if any
    """

    status: PublishStatus
    message: str
    details: str | None = None
    status_code: int | None = None

    @property
    def ok(self) -> bool:
        return self.status != PublishStatus.FAILED

    @classmethod
    def success(cls, message: str, status_code: int | None = None) -> "PublishResult":
        """Create a successful publish result."""
        return cls(status=PublishStatus.SUCCESS, message=message, status_code=status_code)

    @classmethod
    def failed(
        cls,
        message: str,
        details: str | None = None,
        status_code: int | None = None,
    ) -> "PublishResult":
        """Create a failed publish result.

        Args:
            message: Error message
            details: Extended error information
            status_code: HTTP status, when the repository answered

        Returns:
            PublishResult with FAILED status
        """
        return cls(
            status=PublishStatus.FAILED,
            message=message,
            details=details,
            status_code=status_code,
        )

    @classmethod
    def skipped(cls, message: str) -> "PublishResult":
        """Create a skipped publish result."""
        return cls(status=PublishStatus.SKIPPED, message=message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


@dataclass(frozen=True)
class RepositoryTarget:
    """Where a chart is published.

    The type is kept as a plain string so that a misconfigured kind
    reaches the publisher and is rejected there with a clear message.
    """

    type: str
    url: str
    username: str = ""
    password: str = field(default="", repr=False)
    name: str = ""
    context_path: str = ""
    registry_config: str = ""

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    @property
    def registry_host(self) -> str:
        """Registry host of an OCI URL.

        Example: 'oci://ghcr.io/acme/charts' -> 'ghcr.io'
        """
        registry = self.url.removeprefix(OCI_SCHEME)
        return registry.split("/", 1)[0]


class Publisher(ABC):
    """Abstract base class for repository publishers.

    One instance handles one target for one publish run.
    """

    repository_type: ClassVar[RepositoryType]
    display_name: ClassVar[str]

    def __init__(self, target: RepositoryTarget, timeout: int) -> None:
        self.target = target
        self.timeout = timeout

    @abstractmethod
    def publish(self, package_path: Path) -> PublishResult:
        """Upload the packaged chart.

        Args:
            package_path: Path of the chart archive

        Returns:
            PublishResult indicating success/failure
        """

    def logout(self) -> PublishResult:
        """End any session opened by publish().

        Only registry-style publishers hold a session.
        """
        return PublishResult.skipped(f"No session to close for {self.display_name}")
