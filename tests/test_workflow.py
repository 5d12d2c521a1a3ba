"""Unit tests for chart_release.workflow.

The helm wrapper and the repository are replaced with mocks; Chart.yaml
handling runs for real against temporary chart directories.
"""

import logging
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from chart_release.config.models import ChartReleaseConfig
from chart_release.exceptions import HelmError
from chart_release.helm.cli import HelmCLI
from chart_release.publishers.base import PublishResult, RepositoryTarget
from chart_release.publishers.repository import Repository
from chart_release.workflow import PublishWorkflow, WorkflowState, execute_publish


def make_config(**overrides: Any) -> ChartReleaseConfig:
    data: dict[str, Any] = {
        "chart_path": "charts/webapp",
        "repository": {"type": "chartmuseum", "url": "https://charts.example.com"},
        "output_dir": "dist",
    }
    data.update(overrides)
    return ChartReleaseConfig(**data)


def make_helm(package_path: Path) -> MagicMock:
    helm = MagicMock(spec=HelmCLI)
    helm.package.return_value = package_path
    return helm


def make_repository(config: ChartReleaseConfig, result: PublishResult | None = None) -> MagicMock:
    repository = MagicMock(spec=Repository)
    repository.target = config.repository_target()
    repository.push.return_value = result or PublishResult.success("Uploaded")
    return repository


@pytest.fixture
def workflow_factory(project_dir: Path, chart_dir: Path, clean_env: None) -> Any:
    """Build PublishWorkflow instances with mocked collaborators."""

    def factory(
        version: str = "1.1.0",
        app_version: str | None = None,
        dry_run: bool = False,
        push_result: PublishResult | None = None,
        version_settings: dict[str, Any] | None = None,
        **overrides: Any,
    ) -> PublishWorkflow:
        if version_settings is not None:
            overrides["version"] = version_settings
        config = make_config(**overrides)
        return PublishWorkflow(
            config=config,
            version=version,
            app_version=app_version,
            dry_run=dry_run,
            project_root=project_dir,
            helm=make_helm(project_dir / "dist" / f"webapp-{version}.tgz"),
            repository=make_repository(config, push_result),
        )

    return factory


class TestPublishWorkflowRun:
    """Tests for a complete run."""

    def test_successful_publish(self, workflow_factory: Any, chart_dir: Path) -> None:
        """All steps run in order and the chart is pushed."""
        workflow = workflow_factory(version="1.1.0")

        outcome = workflow.run()

        assert outcome.success
        assert outcome.message == "Published webapp@1.1.0 to https://charts.example.com"
        assert outcome.state == WorkflowState.PUBLISHED
        helm = workflow.helm
        helm.dependency_update.assert_called_once()
        helm.dependency_build.assert_called_once()
        helm.lint.assert_called_once_with(strict=False)
        helm.template.assert_called_once_with("", [])
        helm.package.assert_called_once()
        workflow.repository.push.assert_called_once_with(workflow.package_path)

        content = (chart_dir / "Chart.yaml").read_text()
        assert "version: 1.1.0\n" in content
        assert 'appVersion: "1.1.0"\n' in content

    def test_version_and_app_version_inserted(self, workflow_factory: Any, chart_dir: Path) -> None:
        """version: 1.0.0 without appVersion, published as 2.0.0."""
        (chart_dir / "Chart.yaml").write_text("apiVersion: v2\nname: webapp\nversion: 1.0.0\n")
        workflow = workflow_factory(version="2.0.0", app_version="2.0.0")

        outcome = workflow.run()

        assert outcome.success
        assert (chart_dir / "Chart.yaml").read_text() == (
            'apiVersion: v2\nname: webapp\nversion: 2.0.0\nappVersion: "2.0.0"\n'
        )

    def test_app_version_format(self, workflow_factory: Any, chart_dir: Path) -> None:
        """app_version_format is rendered when no override is given."""
        workflow = workflow_factory(
            version="3.0.0", version_settings={"app_version_format": "v{{.Version}}-alpine"}
        )

        workflow.run()

        assert 'appVersion: "v3.0.0-alpine"' in (chart_dir / "Chart.yaml").read_text()

    def test_app_version_update_disabled(self, workflow_factory: Any, chart_dir: Path) -> None:
        """With update_app_version off, appVersion keeps its value."""
        workflow = workflow_factory(version="1.5.0", version_settings={"update_app_version": False})

        workflow.run()

        content = (chart_dir / "Chart.yaml").read_text()
        assert "version: 1.5.0\n" in content
        assert 'appVersion: "1.0.0"\n' in content

    def test_explicit_app_version_ignored_when_disabled(
        self, workflow_factory: Any, chart_dir: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """An --app-version given while update_app_version is off is reported, not applied."""
        workflow = workflow_factory(
            version="1.5.0", app_version="9.9.9", version_settings={"update_app_version": False}
        )

        with caplog.at_level(logging.WARNING, logger="chart_release.workflow"):
            outcome = workflow.run()

        assert outcome.success
        assert 'appVersion: "1.0.0"\n' in (chart_dir / "Chart.yaml").read_text()
        assert "Ignoring app version 9.9.9" in caplog.text

    def test_signing_options_passed(self, workflow_factory: Any) -> None:
        workflow = workflow_factory(sign=True, sign_key="Release Key", keyring="/k/ring")

        workflow.run()

        sign = workflow.helm.package.call_args[0][1]
        assert sign.key == "Release Key"
        assert sign.keyring == "/k/ring"


class TestDisabledSteps:
    """Tests for steps switched off in the configuration."""

    def test_skipped_steps_not_run(self, workflow_factory: Any, chart_dir: Path) -> None:
        """Disabled steps are skipped and the run still succeeds."""
        original = (chart_dir / "Chart.yaml").read_text()
        workflow = workflow_factory(
            lint=False,
            template_validate=False,
            dependencies={"update": False, "build": False},
            version_settings={"update_chart": False},
        )

        outcome = workflow.run()

        assert outcome.success
        workflow.helm.lint.assert_not_called()
        workflow.helm.template.assert_not_called()
        workflow.helm.dependency_update.assert_not_called()
        workflow.helm.dependency_build.assert_not_called()
        assert (chart_dir / "Chart.yaml").read_text() == original

    def test_only_dependency_build(self, workflow_factory: Any) -> None:
        workflow = workflow_factory(dependencies={"update": False, "build": True})

        workflow.run()

        workflow.helm.dependency_update.assert_not_called()
        workflow.helm.dependency_build.assert_called_once()

    def test_lint_strict_and_template_flags(self, workflow_factory: Any) -> None:
        workflow = workflow_factory(
            lint_strict=True,
            kube_version="1.29.0",
            api_versions=["monitoring.coreos.com/v1"],
        )

        workflow.run()

        workflow.helm.lint.assert_called_once_with(strict=True)
        workflow.helm.template.assert_called_once_with("1.29.0", ["monitoring.coreos.com/v1"])


class TestFailures:
    """Tests for failing steps."""

    def test_lint_failure_stops_run(self, workflow_factory: Any, chart_dir: Path) -> None:
        """A failing lint stops the run; the manifest update is not undone."""
        workflow = workflow_factory(version="1.2.0")
        workflow.helm.lint.side_effect = HelmError("helm lint failed", details="Exit code: 1")

        outcome = workflow.run()

        assert not outcome.success
        assert outcome.state == WorkflowState.FAILED
        assert outcome.failed_step == "Linting chart"
        assert outcome.message.startswith("Chart linting failed: helm lint failed")
        assert "Exit code: 1" in outcome.message
        workflow.helm.template.assert_not_called()
        workflow.helm.package.assert_not_called()
        workflow.repository.push.assert_not_called()
        assert "version: 1.2.0\n" in (chart_dir / "Chart.yaml").read_text()

    def test_push_failure(self, workflow_factory: Any) -> None:
        """A failed push makes the run fail with the publisher's reason."""
        workflow = workflow_factory(
            push_result=PublishResult.failed("upload failed with status 409", details="exists"),
        )

        outcome = workflow.run()

        assert not outcome.success
        assert outcome.failed_step == "Pushing chart"
        assert "upload failed with status 409" in outcome.message
        assert "exists" in outcome.message

    def test_logout_after_push_with_credentials(self, project_dir: Path, chart_dir: Path, clean_env: None) -> None:
        """logout runs after the push attempt, even a failed one."""
        config = make_config(
            repository={"type": "oci", "url": "oci://ghcr.io/acme", "username": "u", "password": "p"}
        )
        repository = make_repository(config, PublishResult.failed("helm push failed"))
        workflow = PublishWorkflow(
            config=config,
            version="1.1.0",
            project_root=project_dir,
            helm=make_helm(project_dir / "dist" / "webapp-1.1.0.tgz"),
            repository=repository,
        )

        workflow.run()

        repository.logout.assert_called_once()

    def test_no_logout_without_credentials(self, workflow_factory: Any) -> None:
        workflow = workflow_factory()
        workflow.run()
        workflow.repository.logout.assert_not_called()

    def test_unsupported_repository_type(self, workflow_factory: Any, chart_dir: Path) -> None:
        """An unknown repository type fails before any step runs."""
        original = (chart_dir / "Chart.yaml").read_text()
        workflow = workflow_factory(repository={"type": "s3", "url": "s3://bucket"})

        outcome = workflow.run()

        assert not outcome.success
        assert "unsupported repository type: s3" in outcome.message
        workflow.helm.lint.assert_not_called()
        assert (chart_dir / "Chart.yaml").read_text() == original

    def test_missing_repository_url(self, workflow_factory: Any) -> None:
        workflow = workflow_factory(repository={"type": "http", "url": ""})

        outcome = workflow.run()

        assert not outcome.success
        assert "Repository URL is required" in outcome.message

    def test_invalid_chart(self, workflow_factory: Any, chart_dir: Path) -> None:
        """A chart with a bad apiVersion fails in the loading step."""
        (chart_dir / "Chart.yaml").write_text("apiVersion: v9\nname: webapp\nversion: 1.0.0\n")
        workflow = workflow_factory()

        outcome = workflow.run()

        assert not outcome.success
        assert outcome.failed_step == "Loading chart"
        assert "v1 or v2" in outcome.message

    def test_missing_version_line(self, workflow_factory: Any, chart_dir: Path) -> None:
        """A quoted version key is not rewritten textually."""
        (chart_dir / "Chart.yaml").write_text('apiVersion: v2\nname: webapp\n"version": 1.0.0\n')

        outcome = workflow_factory().run()

        assert not outcome.success
        assert outcome.failed_step == "Updating Chart.yaml version"
        assert "version field not found" in outcome.message


class TestDryRun:
    """Tests for dry-run mode."""

    def test_dry_run_makes_no_calls(self, project_dir: Path, chart_dir: Path, clean_env: None) -> None:
        """Dry-run succeeds with a [DRY-RUN] message and no subprocess or network calls."""
        original = (chart_dir / "Chart.yaml").read_text()
        config = make_config(
            repository={"type": "oci", "url": "oci://ghcr.io/acme", "username": "u", "password": "p"}
        )

        with (
            patch("chart_release.utils.shell.subprocess.run") as mock_subprocess,
            patch("chart_release.publishers.transport.upload_file") as mock_upload,
            patch("chart_release.publishers.chartmuseum.upload_file") as mock_post,
            patch("chart_release.publishers.generic.upload_file") as mock_put,
        ):
            outcome = PublishWorkflow(
                config=config,
                version="2.0.0",
                dry_run=True,
                project_root=project_dir,
            ).run()

        assert outcome.success
        assert outcome.message == "[DRY-RUN] Would publish webapp@2.0.0 to oci://ghcr.io/acme"
        mock_subprocess.assert_not_called()
        mock_upload.assert_not_called()
        mock_post.assert_not_called()
        mock_put.assert_not_called()
        assert (chart_dir / "Chart.yaml").read_text() == original
        assert not (project_dir / "dist").exists()

    def test_dry_run_from_config(self, project_dir: Path, chart_dir: Path, clean_env: None) -> None:
        """dry_run in the configuration enables dry-run too."""
        workflow = PublishWorkflow(
            config=make_config(dry_run=True),
            version="1.0.0",
            project_root=project_dir,
            helm=make_helm(project_dir / "unused.tgz"),
        )

        outcome = workflow.run()

        assert workflow.dry_run is True
        assert outcome.message.startswith("[DRY-RUN]")
        workflow.helm.lint.assert_not_called()

    def test_dry_run_package_path(self, workflow_factory: Any, project_dir: Path) -> None:
        """The would-be archive path follows helm's naming."""
        workflow = workflow_factory(version="1.3.0", dry_run=True)

        workflow.run()

        assert workflow.package_path == project_dir / "dist" / "webapp-1.3.0.tgz"
        workflow.helm.package.assert_not_called()
        workflow.repository.push.assert_not_called()

    def test_dry_run_still_validates_chart(self, workflow_factory: Any, chart_dir: Path) -> None:
        """Manifest validation errors surface in dry-run."""
        (chart_dir / "Chart.yaml").write_text("apiVersion: v2\nversion: 1.0.0\n")

        outcome = workflow_factory(dry_run=True).run()

        assert not outcome.success
        assert "name is required" in outcome.message

    def test_dry_run_with_empty_optional_keys(self, workflow_factory: Any, chart_dir: Path) -> None:
        """Empty keys and numeric dependency versions do not stop a dry run."""
        (chart_dir / "Chart.yaml").write_text(
            "apiVersion: v2\nname: webapp\nversion: 1.0.0\nhome:\nsources:\nkeywords: [web, 2024]\n"
            "dependencies:\n  - name: redis\n    version: 17\n"
        )

        outcome = workflow_factory(dry_run=True).run()

        assert outcome.success, outcome.message


class TestPhases:
    """Tests for pre_publish and post_publish on their own."""

    def test_pre_publish_only(self, workflow_factory: Any) -> None:
        workflow = workflow_factory()

        outcome = workflow.pre_publish()

        assert outcome.success
        assert outcome.message == "Chart webapp validated successfully"
        assert outcome.state == WorkflowState.TEMPLATES_VALIDATED
        workflow.helm.package.assert_not_called()

    def test_post_publish_only(self, workflow_factory: Any) -> None:
        workflow = workflow_factory()

        outcome = workflow.post_publish()

        assert outcome.success
        workflow.helm.lint.assert_not_called()
        workflow.helm.package.assert_called_once()
        workflow.repository.push.assert_called_once()


class TestExecutePublish:
    """Tests for execute_publish."""

    def test_returns_outcome(self, project_dir: Path, chart_dir: Path, clean_env: None) -> None:
        config = make_config()
        with patch("chart_release.workflow.PublishWorkflow.run") as mock_run:
            mock_run.return_value = MagicMock(success=True, message="Published webapp@1.0.0 to x")
            outcome = execute_publish(config, "1.0.0", project_root=project_dir)

        assert outcome.success
        mock_run.assert_called_once()

    def test_repository_built_from_config(self, project_dir: Path, clean_env: None) -> None:
        config = make_config(context_path="museum")
        workflow = PublishWorkflow(config=config, version="1.0.0", project_root=project_dir)

        assert isinstance(workflow.repository, Repository)
        assert workflow.repository.target == RepositoryTarget(
            type="chartmuseum", url="https://charts.example.com", context_path="museum"
        )
