"""Command-line interface for chart-release.

Provides commands for:
- publish: Bump, validate, package and push a chart
- validate: Check publish prerequisites
- status: Show chart and repository information
- init-config: Generate configuration
"""

from pathlib import Path

import typer
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from chart_release import __version__
from chart_release.chart.manifest import parse_chart
from chart_release.config.defaults import write_default_config
from chart_release.config.loader import load_config
from chart_release.config.models import ChartReleaseConfig
from chart_release.console import console, setup_logging
from chart_release.exceptions import ChartReleaseError
from chart_release.utils.version import normalize_version
from chart_release.validation import ValidationResult, ValidationSeverity, check_setup
from chart_release.workflow import execute_publish

DEFAULT_CONFIG_OUTPUT = Path("chart_release.yml")

# Create Typer app
app = typer.Typer(
    name="chart-release",
    help="Helm chart release automation tool",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"chart-release version {__version__}")
        raise typer.Exit()


def load_project_config(config: Path | None, chart_path: str | None = None) -> ChartReleaseConfig:
    """Load configuration and apply command-line overrides."""
    cfg = load_config(config)
    if chart_path:
        cfg = cfg.model_copy(update={"chart_path": chart_path})
    return cfg


def display_validation_results(
    results: list[ValidationResult],
    title: str = "Setup Checks",
) -> bool:
    """Display validation results in a formatted table.

    Args:
        results: List of validation results
        title: Table title

    Returns:
        True if all validations passed (no errors)
    """
    table = Table(title=title)
    table.add_column("Status", style="bold", width=8)
    table.add_column("Check", style="cyan")
    table.add_column("Message")

    has_errors = False

    for result in results:
        if not result.passed:
            status = "[red]FAIL[/red]"
            has_errors = True
        elif result.severity == ValidationSeverity.WARNING:
            status = "[yellow]WARN[/yellow]"
        else:
            status = "[green]PASS[/green]"

        table.add_row(status, result.check, escape(result.message))

    console.print(table)

    # Show details for failures
    for result in results:
        if not result.passed and result.details:
            console.print(f"\n[red]Details:[/red] {escape(result.details)}")
            if result.fix_command:
                console.print(f"[yellow]Fix:[/yellow] {escape(result.fix_command)}")

    return not has_errors


def report_error(error: ChartReleaseError) -> None:
    console.print(f"[red]Error:[/red] {escape(str(error))}")


@app.callback()
def main(
    version: bool = typer.Option(  # noqa: B008
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Helm chart release automation tool.

    Updates Chart.yaml versions, lints and renders the chart, packages
    it and pushes it to an OCI registry, ChartMuseum or an HTTP server.
    """
    pass


@app.command()
def publish(
    version: str = typer.Argument(  # noqa: B008
        ...,
        help="Chart version to publish (SemVer, optional 'v' prefix)",
    ),
    app_version: str | None = typer.Option(  # noqa: B008
        None,
        "--app-version",
        help="appVersion to write (default: derived from VERSION)",
    ),
    dry_run: bool = typer.Option(  # noqa: B008
        False,
        "--dry-run",
        "-n",
        help="Show what would be done without making changes",
    ),
    config: Path | None = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to configuration file (default: search standard locations)",
    ),
    chart_path: str | None = typer.Option(  # noqa: B008
        None,
        "--chart-path",
        help="Chart directory (overrides chart_path from the configuration)",
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False,
        "--verbose",
        "-v",
        help="Show detailed output",
    ),
    debug: bool = typer.Option(  # noqa: B008
        False,
        "--debug",
        help="Show debug output",
    ),
) -> None:
    """Publish a chart version.

    Examples:
        chart-release publish 1.2.3
        chart-release publish v2.0.0 --app-version 2.0.0-alpine
        chart-release publish 1.2.3 --dry-run
    """
    setup_logging(verbose=verbose, debug=debug)

    try:
        cfg = load_project_config(config, chart_path)
        new_version = normalize_version(version)

        if dry_run or cfg.dry_run:
            console.print(
                Panel("[yellow]DRY RUN MODE[/yellow] - No changes will be made")
            )

        outcome = execute_publish(cfg, new_version, app_version=app_version, dry_run=dry_run)

    except ChartReleaseError as e:
        report_error(e)
        raise typer.Exit(code=e.exit_code) from None

    if not outcome.success:
        console.print(f"\n[red]{escape(outcome.message)}[/red]")
        raise typer.Exit(code=1)


@app.command()
def validate(
    config: Path | None = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
    chart_path: str | None = typer.Option(  # noqa: B008
        None,
        "--chart-path",
        help="Chart directory (overrides chart_path from the configuration)",
    ),
    verbose: bool = typer.Option(  # noqa: B008
        False,
        "--verbose",
        "-v",
        help="Show detailed output",
    ),
) -> None:
    """Validate publish prerequisites without making changes.

    Checks:
    - helm 3.x is installed
    - Chart.yaml exists and is valid
    - The repository URL and type are set
    """
    setup_logging(verbose=verbose)

    try:
        cfg = load_project_config(config, chart_path)
        results = check_setup(cfg)

        if display_validation_results(results):
            console.print("\n[green]All checks passed![/green]")
        else:
            console.print("\n[red]Some checks failed.[/red]")
            raise typer.Exit(code=1)

    except ChartReleaseError as e:
        report_error(e)
        raise typer.Exit(code=e.exit_code) from None


@app.command()
def status(
    config: Path | None = typer.Option(  # noqa: B008
        None,
        "--config",
        "-c",
        help="Path to configuration file",
    ),
    chart_path: str | None = typer.Option(  # noqa: B008
        None,
        "--chart-path",
        help="Chart directory (overrides chart_path from the configuration)",
    ),
) -> None:
    """Show current chart and repository status."""
    try:
        cfg = load_project_config(config, chart_path)
        chart = parse_chart(Path(cfg.chart_path))

        table = Table(title="Chart Status")
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Chart", chart.name or "Unknown")
        table.add_row("Version", chart.version or "Unknown")
        table.add_row("App Version", chart.app_version or "-")
        table.add_row("API Version", chart.api_version or "-")
        table.add_row("Dependencies", str(len(chart.dependencies)))
        table.add_row("Repository", escape(cfg.repository.url) or "Not configured")
        table.add_row("Repository Type", cfg.repository.type)

        console.print(table)

    except ChartReleaseError as e:
        report_error(e)
        raise typer.Exit(code=e.exit_code) from None


@app.command(name="init-config")
def init_config(
    output: Path = typer.Option(  # noqa: B008
        DEFAULT_CONFIG_OUTPUT,
        "--output",
        "-o",
        help="Output path for configuration file",
    ),
    force: bool = typer.Option(  # noqa: B008
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration",
    ),
) -> None:
    """Generate a chart-release configuration file.

    Detects the chart directory and writes commented defaults.

    Examples:
        chart-release init-config
        chart-release init-config -o config/chart_release.yml
    """
    if output.exists() and not force:
        console.print(f"[red]Configuration already exists:[/red] {output}")
        console.print("Use --force to overwrite")
        raise typer.Exit(code=1)

    try:
        write_default_config(output)
        console.print(f"[green]Configuration written to:[/green] {output}")

    except OSError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from None


if __name__ == "__main__":
    app()
