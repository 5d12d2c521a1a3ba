"""Default configuration generation.

Writes a commented chart_release.yml with values detected from the
project layout (chart directory, chart name).
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml

from chart_release.chart.manifest import CHART_FILE


def detect_chart_path(project_root: Path) -> str:
    """Find the chart directory relative to project_root.

    Checks, in order:
    - Chart.yaml at the root
    - charts/<name>/Chart.yaml
    - helm/<name>/Chart.yaml, deploy/<name>/Chart.yaml
    - helm/Chart.yaml, deploy/Chart.yaml

    Returns:
        Relative chart path, "." when nothing is found
    """
    if (project_root / CHART_FILE).exists():
        return "."

    for parent in ("charts", "helm", "deploy"):
        base = project_root / parent
        if not base.is_dir():
            continue
        if (base / CHART_FILE).exists():
            return parent
        for candidate in sorted(base.iterdir()):
            if (candidate / CHART_FILE).exists():
                return f"{parent}/{candidate.name}"

    return "."


def generate_default_config(project_root: Path) -> dict[str, Any]:
    """Build the default configuration dictionary for a project."""
    return {
        "chart_path": detect_chart_path(project_root),
        "repository": {
            "type": "oci",
            "url": "oci://ghcr.io/OWNER/charts",
            "username": "",
            "password": "",
        },
        "version": {
            "update_chart": True,
            "update_app_version": True,
            "app_version_format": "",
        },
        "dependencies": {
            "update": True,
            "build": True,
        },
        "lint": True,
        "lint_strict": False,
        "template_validate": True,
        "kube_version": "",
        "api_versions": [],
        "sign": False,
        "sign_key": "",
        "keyring": "",
        "passphrase_file": "",
        "output_dir": ".helm-packages",
        "context_path": "",
        "dry_run": False,
    }


def generate_config_header(project_root: Path) -> str:
    """Comment block written at the top of a generated config."""
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
    return (
        f"# chart-release configuration for {project_root.name}\n"
        f"# Generated {timestamp}\n"
        "#\n"
        "# repository.type: oci | chartmuseum | http\n"
        "# Keep secrets out of this file; set them in the environment instead:\n"
        "#   CHART_RELEASE_REPOSITORY__USERNAME, CHART_RELEASE_REPOSITORY__PASSWORD\n"
        "\n"
    )


def write_default_config(output: Path, project_root: Path | None = None) -> None:
    """Write a default configuration file.

    Args:
        output: Destination path (parent directories are created)
        project_root: Project to inspect (defaults to cwd)
    """
    if project_root is None:
        project_root = Path.cwd()

    config = generate_default_config(project_root)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as f:
        f.write(generate_config_header(project_root))
        yaml.safe_dump(config, f, sort_keys=False, default_flow_style=False)
