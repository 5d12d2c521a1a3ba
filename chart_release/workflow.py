"""Chart publish workflow orchestration.

Coordinates the publish process:
1. Update version fields in Chart.yaml
2. Resolve chart dependencies (helm dependency update/build)
3. Lint the chart
4. Validate templates
5. Package (and optionally sign) the chart
6. Push the package to the repository

Steps 1-4 form the pre-publish phase, 5-6 the post-publish phase.
Each step can be disabled in the configuration. A failing step stops
the run; earlier steps are not undone.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from rich.markup import escape
from rich.panel import Panel

from chart_release.chart.manifest import parse_chart, update_chart_version, validate_chart
from chart_release.chart.models import Chart
from chart_release.config.models import ChartReleaseConfig
from chart_release.console import console
from chart_release.exceptions import ChartReleaseError, ConfigurationError
from chart_release.helm.cli import HelmCLI, SignOptions
from chart_release.publishers.repository import Repository, is_supported_type
from chart_release.utils.version import render_app_version

logger = logging.getLogger(__name__)

DRY_RUN_PREFIX = "[DRY-RUN]"


class WorkflowState(Enum):
    """Progress of a publish run."""

    NOT_STARTED = "not_started"
    MANIFEST_UPDATED = "manifest_updated"
    DEPENDENCIES_RESOLVED = "dependencies_resolved"
    LINTED = "linted"
    TEMPLATES_VALIDATED = "templates_validated"
    PACKAGED = "packaged"
    PUBLISHED = "published"
    FAILED = "failed"


@dataclass
class WorkflowResult:
    """Result of a workflow step."""

    success: bool
    message: str
    details: str | None = None


@dataclass
class PublishOutcome:
    """Terminal result handed back to the caller.

    Attributes:
        success: Whether the run completed
        message: Human-readable summary
        state: Last state reached (FAILED on failure)
        failed_step: Name of the step that failed, if any
    """

    success: bool
    message: str
    state: WorkflowState
    failed_step: str | None = None


@dataclass
class _Step:
    name: str
    state: WorkflowState
    enabled: bool
    action: Callable[[], WorkflowResult]
    failure: str


@dataclass
class PublishWorkflow:
    """Publishes one chart version to one repository."""

    config: ChartReleaseConfig
    version: str
    app_version: str | None = None
    dry_run: bool = False
    project_root: Path = field(default_factory=Path.cwd)
    helm: HelmCLI | None = None
    repository: Repository | None = None

    # State tracking
    state: WorkflowState = WorkflowState.NOT_STARTED
    chart: Chart | None = None
    package_path: Path | None = None

    def __post_init__(self) -> None:
        """Initialize collaborators from the configuration."""
        self.dry_run = self.dry_run or self.config.dry_run
        self.chart_path = self._resolve(self.config.chart_path)
        if self.helm is None:
            self.helm = HelmCLI(self.chart_path, timeout=self.config.timeouts.helm_operations)
        if self.repository is None:
            self.repository = Repository(
                self.config.repository_target(),
                timeouts=self.config.repository_timeouts(),
            )

    def run(self) -> PublishOutcome:
        """Execute both phases.

        Returns:
            PublishOutcome of the post-publish phase, or the failure
            of the pre-publish phase
        """
        outcome = self.pre_publish()
        if not outcome.success:
            return outcome
        return self.post_publish()

    def pre_publish(self) -> PublishOutcome:
        """Update Chart.yaml, resolve dependencies, lint and render templates."""
        try:
            chart = self._load_chart()
        except ChartReleaseError as e:
            return self._fail("Loading chart", e.message, e.details)

        steps = [
            _Step(
                "Updating Chart.yaml version",
                WorkflowState.MANIFEST_UPDATED,
                self.config.version.update_chart,
                self.update_manifest,
                "Failed to update Chart.yaml version",
            ),
            _Step(
                "Resolving dependencies",
                WorkflowState.DEPENDENCIES_RESOLVED,
                self.config.dependencies.update or self.config.dependencies.build,
                self.resolve_dependencies,
                "Failed to resolve dependencies",
            ),
            _Step(
                "Linting chart",
                WorkflowState.LINTED,
                self.config.lint,
                self.lint,
                "Chart linting failed",
            ),
            _Step(
                "Validating templates",
                WorkflowState.TEMPLATES_VALIDATED,
                self.config.template_validate,
                self.validate_templates,
                "Template validation failed",
            ),
        ]

        failed = self._run_steps(steps)
        if failed is not None:
            return failed

        logger.info("Pre-publish completed for %s", chart.name)
        return PublishOutcome(
            success=True,
            message=f"Chart {chart.name} validated successfully",
            state=self.state,
        )

    def post_publish(self) -> PublishOutcome:
        """Package the chart and push it to the repository."""
        try:
            chart = self._load_chart()
        except ChartReleaseError as e:
            return self._fail("Loading chart", e.message, e.details)

        steps = [
            _Step(
                "Packaging chart",
                WorkflowState.PACKAGED,
                True,
                self.package,
                "Failed to package chart",
            ),
            _Step(
                "Pushing chart",
                WorkflowState.PUBLISHED,
                True,
                self.push,
                "Failed to push chart",
            ),
        ]

        failed = self._run_steps(steps)
        if failed is not None:
            return failed

        url = self.config.repository.url
        if self.dry_run:
            message = f"{DRY_RUN_PREFIX} Would publish {chart.name}@{self.version} to {url}"
        else:
            message = f"Published {chart.name}@{self.version} to {url}"

        logger.info("Post-publish completed for %s", chart.name)
        return PublishOutcome(success=True, message=message, state=self.state)

    def update_manifest(self) -> WorkflowResult:
        """Rewrite version (and appVersion) in Chart.yaml."""
        app_version = self._target_app_version()
        current = self.chart.version if self.chart else "?"

        if self.dry_run:
            logger.info(
                "%s Would update Chart.yaml from %s to %s (appVersion=%s)",
                DRY_RUN_PREFIX,
                current,
                self.version,
                app_version or "unchanged",
            )
            return WorkflowResult(
                success=True,
                message=f"Would update Chart.yaml version {current} -> {self.version}",
            )

        update_chart_version(self.chart_path, self.version, app_version)
        return WorkflowResult(
            success=True,
            message=f"Chart.yaml version {current} -> {self.version}",
        )

    def resolve_dependencies(self) -> WorkflowResult:
        """Run helm dependency update and/or build."""
        deps = self.config.dependencies
        commands = [
            name
            for name, enabled in (("update", deps.update), ("build", deps.build))
            if enabled
        ]

        if self.dry_run:
            for name in commands:
                logger.info("%s Would run helm dependency %s", DRY_RUN_PREFIX, name)
            return WorkflowResult(
                success=True,
                message=f"Would run helm dependency {' and '.join(commands)}",
            )

        if deps.update:
            self.helm.dependency_update()
        if deps.build:
            self.helm.dependency_build()
        return WorkflowResult(success=True, message="Dependencies resolved")

    def lint(self) -> WorkflowResult:
        """Run helm lint."""
        strict = self.config.lint_strict
        if self.dry_run:
            logger.info("%s Would run helm lint (strict=%s)", DRY_RUN_PREFIX, strict)
            return WorkflowResult(success=True, message="Would run helm lint")

        self.helm.lint(strict=strict)
        return WorkflowResult(success=True, message="Lint passed")

    def validate_templates(self) -> WorkflowResult:
        """Render templates with helm template."""
        kube_version = self.config.kube_version
        if self.dry_run:
            logger.info(
                "%s Would run helm template validation (kubeVersion=%s)",
                DRY_RUN_PREFIX,
                kube_version or "default",
            )
            return WorkflowResult(success=True, message="Would validate templates")

        self.helm.template(kube_version, self.config.api_versions)
        return WorkflowResult(success=True, message="Templates rendered")

    def package(self) -> WorkflowResult:
        """Package (and sign) the chart, recording the archive path."""
        output_dir = self._resolve(self.config.output_dir)
        name = self.chart.name if self.chart else "chart"

        if self.dry_run:
            self.package_path = output_dir / f"{name}-{self.version}.tgz"
            logger.info(
                "%s Would package chart into %s (sign=%s)",
                DRY_RUN_PREFIX,
                output_dir,
                self.config.sign,
            )
            return WorkflowResult(success=True, message=f"Would package {self.package_path}")

        try:
            output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return WorkflowResult(
                success=False,
                message=f"Failed to create output directory {output_dir}",
                details=str(e),
            )

        sign = None
        if self.config.sign:
            sign = SignOptions(
                keyring=self.config.keyring,
                key=self.config.sign_key,
                passphrase_file=self.config.passphrase_file,
            )

        self.package_path = self.helm.package(output_dir, sign)
        return WorkflowResult(success=True, message=f"Packaged {self.package_path}")

    def push(self) -> WorkflowResult:
        """Push the package, then close the registry session."""
        target = self.repository.target

        if self.dry_run:
            logger.info(
                "%s Would push %s to %s (%s)",
                DRY_RUN_PREFIX,
                self.package_path,
                target.url,
                target.type,
            )
            return WorkflowResult(success=True, message=f"Would push to {target.url}")

        if self.package_path is None:
            return WorkflowResult(success=False, message="No package to push")

        try:
            result = self.repository.push(self.package_path)
        finally:
            if target.has_credentials:
                self.repository.logout()

        if not result.ok:
            return WorkflowResult(success=False, message=result.message, details=result.details)
        return WorkflowResult(success=True, message=result.message)

    def _run_steps(self, steps: list[_Step]) -> PublishOutcome | None:
        for step in steps:
            if not step.enabled:
                logger.debug("Skipping: %s", step.name)
                self.state = step.state
                continue

            console.print(f"\n[bold cyan]>[/bold cyan] {step.name}...")
            try:
                result = step.action()
            except ChartReleaseError as e:
                result = WorkflowResult(success=False, message=e.message, details=e.details)

            if not result.success:
                return self._fail(step.name, f"{step.failure}: {result.message}", result.details)

            console.print(f"[green]  {escape(result.message)}[/green]")
            self.state = step.state
        return None

    def _fail(self, step_name: str, message: str, details: str | None) -> PublishOutcome:
        self.state = WorkflowState.FAILED
        console.print(f"[red]  Failed: {escape(message)}[/red]")
        if details:
            console.print(f"[dim]  {escape(details)}[/dim]")
        logger.debug("%s failed: %s", step_name, message)
        full = f"{message}\n{details}" if details else message
        return PublishOutcome(
            success=False,
            message=full,
            state=WorkflowState.FAILED,
            failed_step=step_name,
        )

    def _load_chart(self) -> Chart:
        """Parse and validate Chart.yaml and the repository settings.

        These checks involve no helm or network I/O and run in dry-run too.
        """
        repository_type = self.config.repository.type
        if not is_supported_type(repository_type):
            raise ConfigurationError(
                f"unsupported repository type: {repository_type}",
                fix_hint="Set repository.type to oci, chartmuseum or http",
            )
        if not self.config.repository.url:
            raise ConfigurationError(
                "Repository URL is required",
                fix_hint="Set repository.url in the configuration",
            )

        chart = parse_chart(self.chart_path)
        validate_chart(chart)
        self.chart = chart
        return chart

    def _target_app_version(self) -> str | None:
        if not self.config.version.update_app_version:
            if self.app_version:
                logger.warning(
                    "Ignoring app version %s: version.update_app_version is disabled",
                    self.app_version,
                )
            return None
        if self.app_version:
            return self.app_version
        return render_app_version(self.config.version.app_version_format, self.version)

    def _resolve(self, path: str) -> Path:
        p = Path(path).expanduser()
        return p if p.is_absolute() else self.project_root / p


def execute_publish(
    config: ChartReleaseConfig,
    version: str,
    app_version: str | None = None,
    dry_run: bool = False,
    project_root: Path | None = None,
) -> PublishOutcome:
    """Run a complete publish workflow with console reporting.

    This is the main entry point for publishing a chart.

    Args:
        config: chart-release configuration
        version: Chart version to publish
        app_version: appVersion override (default: derived from version)
        dry_run: Whether to simulate without changes
        project_root: Directory relative paths are resolved against

    Returns:
        PublishOutcome of the run
    """
    workflow = PublishWorkflow(
        config=config,
        version=version,
        app_version=app_version,
        dry_run=dry_run,
        project_root=project_root or Path.cwd(),
    )

    console.print(
        Panel(
            f"[bold]Publish {version}[/bold]\n"
            f"Repository: {escape(config.repository.url)} ({escape(config.repository.type)})\n"
            f"{'[yellow]DRY RUN[/yellow]' if workflow.dry_run else ''}",
            title="Starting Chart Publish",
            border_style="cyan",
        )
    )

    outcome = workflow.run()

    if outcome.success:
        console.print(Panel(f"[bold green]{escape(outcome.message)}[/bold green]", border_style="green"))
    else:
        console.print(
            Panel(
                f"[bold red]Publish {version} failed[/bold red]\n"
                f"Step: {outcome.failed_step}",
                border_style="red",
            )
        )

    return outcome
