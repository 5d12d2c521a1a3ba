"""Pydantic v2 configuration models for chart_release.yml.

These models provide:
- Type-safe configuration loading
- Automatic validation
- Default values
- Environment variable override support

Key names match the helm plugin configuration keys (chart_path,
lint_strict, context_path, ...) so existing configs load unchanged.
"""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from chart_release.publishers.base import RepositoryTarget, RepositoryType


class RepositoryConfig(BaseModel):
    """Chart repository the packaged chart is pushed to."""

    type: str = Field(
        default=RepositoryType.OCI.value,
        description="Repository type (oci, chartmuseum, http)",
    )
    url: str = Field(default="", description="Repository URL")
    name: str = Field(default="", description="Repository name")
    username: str = Field(default="", description="Repository username")
    password: str = Field(
        default="",
        repr=False,
        description="Repository password or token",
    )
    registry_config: str = Field(
        default="",
        description="Path to the helm registry credential store (OCI only)",
    )


class VersionConfig(BaseModel):
    """Chart.yaml version update settings."""

    update_chart: bool = Field(
        default=True,
        description="Rewrite version in Chart.yaml",
    )
    update_app_version: bool = Field(
        default=True,
        description="Rewrite appVersion in Chart.yaml",
    )
    app_version_format: str = Field(
        default="",
        description="appVersion template; {{.Version}} is replaced with the release version",
    )


class DependencyConfig(BaseModel):
    """Chart dependency management settings."""

    update: bool = Field(default=True, description="Run helm dependency update")
    build: bool = Field(default=True, description="Run helm dependency build")


class TimeoutsConfig(BaseModel):
    """Timeout configuration in seconds."""

    helm_operations: int = Field(
        default=300,
        ge=10,
        description="lint, template, dependency and package timeout",
    )
    helm_push: int = Field(
        default=600,
        ge=10,
        description="OCI login, push and logout timeout",
    )
    chartmuseum_upload: int = Field(
        default=60,
        ge=5,
        description="ChartMuseum POST timeout",
    )
    http_upload: int = Field(
        default=120,
        ge=5,
        description="Generic HTTP PUT timeout",
    )


class ChartReleaseConfig(BaseSettings):
    """Root configuration model for chart_release.yml.

    Supports environment variable overrides with CHART_RELEASE_ prefix.
    Example: CHART_RELEASE_REPOSITORY__PASSWORD=token
    """

    model_config = SettingsConfigDict(
        env_prefix="CHART_RELEASE_",
        env_nested_delimiter="__",
    )

    chart_path: str = Field(default=".", description="Directory containing Chart.yaml")
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    version: VersionConfig = Field(default_factory=VersionConfig)
    lint: bool = Field(default=True, description="Run helm lint")
    lint_strict: bool = Field(default=False, description="Pass --strict to helm lint")
    template_validate: bool = Field(
        default=True,
        description="Render templates with helm template",
    )
    kube_version: str = Field(default="", description="--kube-version for helm template")
    api_versions: list[str] = Field(
        default_factory=list,
        description="--api-versions for helm template",
    )
    dependencies: DependencyConfig = Field(default_factory=DependencyConfig)
    sign: bool = Field(default=False, description="Sign the package")
    sign_key: str = Field(default="", description="Signing key name")
    keyring: str = Field(default="", description="Keyring path")
    passphrase_file: str = Field(default="", description="Signing passphrase file")
    output_dir: str = Field(
        default=".helm-packages",
        description="Directory packages are written to",
    )
    context_path: str = Field(
        default="",
        description="ChartMuseum context path",
    )
    dry_run: bool = Field(default=False, description="Log actions without performing them")
    timeouts: TimeoutsConfig = Field(default_factory=TimeoutsConfig)

    def repository_target(self) -> RepositoryTarget:
        """Immutable publish target built from this configuration."""
        return RepositoryTarget(
            type=self.repository.type,
            url=self.repository.url,
            username=self.repository.username,
            password=self.repository.password,
            name=self.repository.name,
            context_path=self.context_path,
            registry_config=self.repository.registry_config,
        )

    def repository_timeouts(self) -> dict[RepositoryType, int]:
        return {
            RepositoryType.OCI: self.timeouts.helm_push,
            RepositoryType.CHARTMUSEUM: self.timeouts.chartmuseum_upload,
            RepositoryType.HTTP: self.timeouts.http_upload,
        }
