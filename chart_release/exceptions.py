"""Custom exception hierarchy for chart-release.

Exit codes follow Unix conventions:
- 1: General error
- 2: Configuration error
- 3: Manifest error
- 4: Helm error
- 5: Publish error
- 7: Network error
- 10: Timeout
"""


class ChartReleaseError(Exception):
    """Base exception for all chart-release errors.

    Each subclass defines an exit_code for CLI error reporting.
    """

    exit_code: int = 1

    def __init__(
        self,
        message: str,
        details: str | None = None,
        fix_hint: str | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Brief error message
            details: Detailed explanation of what went wrong
            fix_hint: Suggested command or action to fix the issue
        """
        super().__init__(message)
        self.message = message
        self.details = details
        self.fix_hint = fix_hint

    def __str__(self) -> str:
        parts = [self.message]
        if self.details:
            parts.append(f"\nDetails: {self.details}")
        if self.fix_hint:
            parts.append(f"\nFix: {self.fix_hint}")
        return "".join(parts)


class ConfigurationError(ChartReleaseError):
    """Configuration file errors.

    Raised when:
    - Config file not found
    - Config file has invalid syntax (YAML/TOML)
    - Config values fail validation
    """

    exit_code = 2


class ManifestError(ChartReleaseError):
    """Chart.yaml could not be read, parsed or rewritten."""

    exit_code = 3


class ManifestValidationError(ManifestError):
    """Chart.yaml violates a required invariant.

    Raised when:
    - name is empty
    - version is empty
    - apiVersion is missing or not v1/v2
    """


class ManifestFieldNotFoundError(ManifestError):
    """A field that must be rewritten is absent from Chart.yaml."""


class HelmError(ChartReleaseError):
    """Helm CLI failures.

    Raised when:
    - helm exits with a non-zero status
    - helm is not installed
    - helm output cannot be interpreted
    """

    exit_code = 4


class PackagePathNotFoundError(HelmError):
    """helm package output did not name the produced archive."""


class PublishError(ChartReleaseError):
    """Publishing failures.

    Raised when:
    - Registry login fails
    - helm push fails
    - Repository rejects the upload
    """

    exit_code = 5


class NetworkError(ChartReleaseError):
    """Network failures (connection refused, DNS, timeouts)."""

    exit_code = 7


class ReleaseTimeoutError(ChartReleaseError):
    """Operation timeout errors.

    Named ReleaseTimeoutError to avoid shadowing Python's built-in TimeoutError.
    """

    exit_code = 10
