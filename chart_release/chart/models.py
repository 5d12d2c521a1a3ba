"""Pydantic models for Chart.yaml contents.

These models are read-only views of the manifest, used to learn the
chart name and current version and to check the manifest invariants.
Chart.yaml is never written back from them (see chart.manifest).
"""

from typing import Any, get_origin

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

ACCEPTED_API_VERSIONS = ("v1", "v2")


def _scalar_to_str(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


class ManifestModel(BaseModel):
    """Base for Chart.yaml sections.

    Empty keys load from YAML as null and unquoted scalars such as
    `version: 1.0` or `- 2024` load as numbers. Both are accepted: null
    reads as the field's empty value, numbers read as their text.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("*", mode="before")
    @classmethod
    def coerce_yaml_scalars(cls, v: Any, info: ValidationInfo) -> Any:
        annotation = cls.model_fields[info.field_name].annotation
        if get_origin(annotation) is list:
            if v is None:
                return []
            if not isinstance(v, list):
                v = [v]
            return [_scalar_to_str(item) for item in v if item is not None]
        if annotation is bool:
            return False if v is None else v
        if annotation is str:
            return "" if v is None else _scalar_to_str(v)
        return v


class ChartDependency(ManifestModel):
    """A chart listed under 'dependencies'."""

    name: str = ""
    version: str = ""
    repository: str = ""
    condition: str = ""
    tags: list[str] = Field(default_factory=list)
    alias: str = ""


class Maintainer(ManifestModel):
    """A chart maintainer."""

    name: str = ""
    email: str = ""
    url: str = ""


class Chart(ManifestModel):
    """Chart.yaml contents."""

    api_version: str = Field(default="", alias="apiVersion")
    name: str = ""
    version: str = ""
    app_version: str = Field(default="", alias="appVersion")
    description: str = ""
    type: str = ""
    keywords: list[str] = Field(default_factory=list)
    home: str = ""
    sources: list[str] = Field(default_factory=list)
    dependencies: list[ChartDependency] = Field(default_factory=list)
    maintainers: list[Maintainer] = Field(default_factory=list)
    icon: str = ""
    deprecated: bool = False
    kube_version: str = Field(default="", alias="kubeVersion")

    @property
    def has_dependencies(self) -> bool:
        return len(self.dependencies) > 0
