"""Chart manifest (Chart.yaml) handling."""

from chart_release.chart.manifest import (
    CHART_FILE,
    parse_chart,
    patch_versions,
    update_chart_version,
    validate_chart,
)
from chart_release.chart.models import Chart, ChartDependency, Maintainer

__all__ = [
    "CHART_FILE",
    "Chart",
    "ChartDependency",
    "Maintainer",
    "parse_chart",
    "patch_versions",
    "update_chart_version",
    "validate_chart",
]
