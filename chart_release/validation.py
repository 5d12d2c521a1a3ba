"""Pre-publish setup checks.

Reports problems that would make a publish fail before any work is
done: a missing or outdated helm, an unreadable Chart.yaml, and an
incomplete repository configuration.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from chart_release.chart.manifest import parse_chart, validate_chart
from chart_release.config.models import ChartReleaseConfig
from chart_release.exceptions import ChartReleaseError
from chart_release.helm.cli import HelmCLI
from chart_release.publishers.repository import is_supported_type
from chart_release.utils.shell import is_command_available

logger = logging.getLogger(__name__)

SUPPORTED_HELM_MAJOR = "v3"


class ValidationSeverity(Enum):
    """Severity level for validation results.

    - ERROR: Blocks publishing (must be fixed)
    - WARNING: Shown but doesn't block
    - INFO: Informational only
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass
class ValidationResult:
    """Result of a setup check.

    Attributes:
        passed: Whether the check passed
        check: Short name of the check
        message: Brief description of the result
        severity: How serious the issue is
        details: Extended explanation
        fix_command: Suggested command to fix the issue
    """

    passed: bool
    check: str
    message: str
    severity: ValidationSeverity = ValidationSeverity.ERROR
    details: str | None = None
    fix_command: str | None = None

    @classmethod
    def success(cls, check: str, message: str) -> "ValidationResult":
        return cls(passed=True, check=check, message=message, severity=ValidationSeverity.INFO)

    @classmethod
    def error(
        cls,
        check: str,
        message: str,
        details: str | None = None,
        fix_command: str | None = None,
    ) -> "ValidationResult":
        return cls(
            passed=False,
            check=check,
            message=message,
            severity=ValidationSeverity.ERROR,
            details=details,
            fix_command=fix_command,
        )

    @classmethod
    def warning(
        cls,
        check: str,
        message: str,
        details: str | None = None,
    ) -> "ValidationResult":
        return cls(
            passed=True,
            check=check,
            message=message,
            severity=ValidationSeverity.WARNING,
            details=details,
        )


def check_helm(helm: HelmCLI) -> list[ValidationResult]:
    """Check that helm is installed and is a 3.x release."""
    if not is_command_available("helm"):
        return [
            ValidationResult.error(
                "helm",
                "helm not found in PATH",
                fix_command="https://helm.sh/docs/intro/install/",
            )
        ]

    try:
        version = helm.version()
    except ChartReleaseError as e:
        return [ValidationResult.error("helm", e.message, details=e.details)]

    if not version.startswith(SUPPORTED_HELM_MAJOR):
        return [
            ValidationResult.error(
                "helm",
                f"helm {version} is not supported",
                details="Helm 3.x is required",
            )
        ]
    return [ValidationResult.success("helm", f"helm {version}")]


def check_chart(chart_path: Path) -> list[ValidationResult]:
    """Check that Chart.yaml exists, parses and satisfies its invariants."""
    try:
        chart = parse_chart(chart_path)
        validate_chart(chart)
    except ChartReleaseError as e:
        return [ValidationResult.error("chart", e.message, details=e.details)]

    results = [ValidationResult.success("chart", f"{chart.name} {chart.version}")]
    if chart.has_dependencies and not (chart_path / "charts").is_dir():
        results.append(
            ValidationResult.warning(
                "chart",
                "dependencies declared but charts/ is missing",
                details="Enable dependencies.update or run 'helm dependency update'",
            )
        )
    return results


def check_repository(config: ChartReleaseConfig) -> list[ValidationResult]:
    """Check the repository URL and type."""
    repository = config.repository
    results = []

    if not repository.url:
        results.append(
            ValidationResult.error(
                "repository",
                "repository URL is required",
                fix_command="Set repository.url in chart_release.yml",
            )
        )

    if not is_supported_type(repository.type):
        results.append(
            ValidationResult.error(
                "repository",
                f"unsupported repository type: {repository.type}",
                details="Supported types: oci, chartmuseum, http",
            )
        )
    elif repository.url:
        results.append(
            ValidationResult.success("repository", f"{repository.type} {repository.url}")
        )

    if bool(repository.username) != bool(repository.password):
        results.append(
            ValidationResult.warning(
                "repository",
                "only one of username/password is set; credentials will not be sent",
            )
        )
    return results


def check_setup(
    config: ChartReleaseConfig,
    project_root: Path | None = None,
    helm: HelmCLI | None = None,
) -> list[ValidationResult]:
    """Run every setup check.

    Args:
        config: chart-release configuration
        project_root: Directory chart_path is resolved against (defaults to cwd)
        helm: Helm wrapper to query (built from the config if omitted)

    Returns:
        All check results, errors included
    """
    if project_root is None:
        project_root = Path.cwd()

    chart_path = Path(config.chart_path).expanduser()
    if not chart_path.is_absolute():
        chart_path = project_root / chart_path

    if helm is None:
        helm = HelmCLI(chart_path, timeout=config.timeouts.helm_operations)

    results = check_helm(helm)
    results.extend(check_chart(chart_path))
    results.extend(check_repository(config))

    failed = sum(1 for r in results if not r.passed)
    logger.debug("Setup checks: %d run, %d failed", len(results), failed)
    return results
