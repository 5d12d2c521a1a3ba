"""Configuration file loading utilities.

Supports loading configuration from YAML and TOML files with:
- Automatic format detection
- Error reporting with file location
- Default value merging
"""

import tomllib
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError as PydanticValidationError

from chart_release.config.models import ChartReleaseConfig
from chart_release.exceptions import ConfigurationError

SEARCH_PATHS = [
    "chart_release.yml",
    "chart_release.yaml",
    "config/chart_release.yml",
    "config/chart_release.yaml",
    "chart_release.toml",
]


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML configuration file.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML as dictionary

    Raises:
        ConfigurationError: If file cannot be read or parsed
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {path}",
            fix_hint="Create the file or use 'chart-release init-config' to generate one",
        ) from None
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in {path}",
            details=str(e),
            fix_hint="Check YAML syntax at the indicated line",
        ) from e

    if not data:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Invalid configuration in {path}",
            details=f"Expected a mapping at the top level, got {type(data).__name__}",
        )
    return data


def load_toml(path: Path) -> dict[str, Any]:
    """Load a TOML configuration file.

    Args:
        path: Path to the TOML file

    Returns:
        Parsed TOML as dictionary

    Raises:
        ConfigurationError: If file cannot be read or parsed
    """
    try:
        with open(path, "rb") as f:
            data: dict[str, Any] = tomllib.load(f)
            return data
    except FileNotFoundError:
        raise ConfigurationError(
            f"Configuration file not found: {path}",
            fix_hint="Create the file or use 'chart-release init-config' to generate one",
        ) from None
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(
            f"Invalid TOML in {path}",
            details=str(e),
            fix_hint="Check TOML syntax at the indicated line",
        ) from e


def find_config(project_root: Path) -> Path | None:
    """Return the first config file found in the standard locations."""
    for search_path in SEARCH_PATHS:
        candidate = project_root / search_path
        if candidate.exists():
            return candidate
    return None


def load_config(
    path: Path | None = None,
    project_root: Path | None = None,
    required: bool = False,
) -> ChartReleaseConfig:
    """Load chart-release configuration.

    Search order if path not specified: see SEARCH_PATHS. When nothing
    is found and required is False, defaults plus CHART_RELEASE_*
    environment overrides are used.

    Args:
        path: Explicit path to config file
        project_root: Project root directory (defaults to cwd)
        required: Fail when no config file exists

    Returns:
        Validated ChartReleaseConfig instance

    Raises:
        ConfigurationError: If config not found (when required) or invalid
    """
    if project_root is None:
        project_root = Path.cwd()

    config_path: Path | None = None
    if path:
        config_path = Path(path)
        if not config_path.is_absolute():
            config_path = project_root / config_path
        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {config_path}",
                fix_hint="Run 'chart-release init-config' to create a configuration file",
            )
    else:
        config_path = find_config(project_root)

    if config_path is None:
        if required:
            raise ConfigurationError(
                "No configuration file found",
                details=f"Searched in: {', '.join(SEARCH_PATHS)}",
                fix_hint="Run 'chart-release init-config' to create a configuration file",
            )
        data: dict[str, Any] = {}
        source = "environment"
    else:
        if config_path.suffix in (".yml", ".yaml"):
            data = load_yaml(config_path)
        elif config_path.suffix == ".toml":
            data = load_toml(config_path)
        else:
            raise ConfigurationError(
                f"Unsupported config format: {config_path.suffix}",
                fix_hint="Use .yml, .yaml, or .toml extension",
            )
        source = str(config_path)

    try:
        return ChartReleaseConfig(**data)
    except PydanticValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration in {source}",
            details=str(e),
            fix_hint="Check the configuration values match expected types",
        ) from e
