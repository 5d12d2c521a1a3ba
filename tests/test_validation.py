"""Unit tests for chart_release.validation."""

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

from chart_release.config.models import ChartReleaseConfig
from chart_release.exceptions import HelmError
from chart_release.helm.cli import HelmCLI
from chart_release.validation import (
    ValidationSeverity,
    check_chart,
    check_helm,
    check_repository,
    check_setup,
)


def repository_config(**repository: Any) -> ChartReleaseConfig:
    return ChartReleaseConfig(repository=repository)


def make_helm(version: str = "v3.14.2+gc309b6f") -> MagicMock:
    helm = MagicMock(spec=HelmCLI)
    helm.version.return_value = version
    return helm


class TestCheckHelm:
    """Tests for check_helm function."""

    def test_helm_3(self) -> None:
        with patch("chart_release.validation.is_command_available", return_value=True):
            results = check_helm(make_helm())
        assert results[0].passed

    def test_helm_missing(self) -> None:
        with patch("chart_release.validation.is_command_available", return_value=False):
            results = check_helm(make_helm())
        assert not results[0].passed
        assert results[0].message == "helm not found in PATH"

    def test_helm_2_rejected(self) -> None:
        with patch("chart_release.validation.is_command_available", return_value=True):
            results = check_helm(make_helm("v2.17.0+ga690bad"))
        assert not results[0].passed
        assert "not supported" in results[0].message

    def test_version_command_fails(self) -> None:
        helm = make_helm()
        helm.version.side_effect = HelmError("helm version failed")
        with patch("chart_release.validation.is_command_available", return_value=True):
            results = check_helm(helm)
        assert not results[0].passed


class TestCheckChart:
    """Tests for check_chart function."""

    def test_valid_chart(self, chart_dir: Path) -> None:
        results = check_chart(chart_dir)
        assert [r.passed for r in results] == [True]

    def test_missing_chart(self, temp_dir: Path) -> None:
        results = check_chart(temp_dir)
        assert not results[0].passed
        assert "not found" in results[0].message

    def test_nameless_chart(self, temp_dir: Path) -> None:
        (temp_dir / "Chart.yaml").write_text("apiVersion: v2\nversion: 1.0.0\n")
        results = check_chart(temp_dir)
        assert results[0].message == "chart name is required"

    def test_dependencies_without_charts_dir(self, temp_dir: Path) -> None:
        (temp_dir / "Chart.yaml").write_text(
            "apiVersion: v2\nname: app\nversion: 1.0.0\n"
            "dependencies:\n  - name: redis\n    version: 17.0.0\n"
        )
        results = check_chart(temp_dir)
        assert results[-1].severity == ValidationSeverity.WARNING
        assert all(r.passed for r in results)


class TestCheckRepository:
    """Tests for check_repository function."""

    def test_valid(self, clean_env: None) -> None:
        results = check_repository(repository_config(type="oci", url="oci://ghcr.io/acme"))
        assert all(r.passed for r in results)

    def test_empty_url(self, clean_env: None) -> None:
        results = check_repository(repository_config(type="oci", url=""))
        assert any(r.message == "repository URL is required" for r in results)

    def test_unsupported_type(self, clean_env: None) -> None:
        results = check_repository(repository_config(type="s3", url="s3://bucket"))
        assert any(r.message == "unsupported repository type: s3" for r in results)

    def test_partial_credentials_warn(self, clean_env: None) -> None:
        results = check_repository(repository_config(type="http", url="https://x", username="u"))
        assert results[-1].severity == ValidationSeverity.WARNING


class TestCheckSetup:
    def test_combines_checks(self, project_dir: Path, chart_dir: Path, clean_env: None) -> None:
        config = ChartReleaseConfig(
            chart_path="charts/webapp",
            repository={"type": "chartmuseum", "url": ""},
        )
        with patch("chart_release.validation.is_command_available", return_value=True):
            results = check_setup(config, project_root=project_dir, helm=make_helm())

        checks = [(r.check, r.passed) for r in results]
        assert ("helm", True) in checks
        assert ("chart", True) in checks
        assert ("repository", False) in checks
