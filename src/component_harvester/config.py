"""Configuration loading and management for Component Harvester.

Configuration sources are merged in priority order:
    1. Defaults (defined in HarvestConfig)
    2. Global config (~/.component-harvester.toml)
    3. Project config (./component-harvester.toml)
    4. Explicit config file
    5. Environment variables (HARVESTER_* prefix)
    6. Keyword overrides (typically CLI flags)

Example:
    >>> config = load_config(http_timeout_seconds=5)
    >>> config.http_timeout_seconds
    5
"""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]

ENV_PREFIX = "HARVESTER_"
CONFIG_FILENAME = "component-harvester.toml"


@dataclass(frozen=True)
class HarvestConfig:
    """Settings shared by handlers and their collaborators.

    Attributes:
        Temporary storage:
            temp_location: Directory that hosts request-scoped temp files
                (None = platform default)

        Registries:
            maven_repository_url: Base URL of the Maven repository to fetch POMs from
            github_api_url: Base URL of the GitHub REST API used for source discovery
            github_token: Optional token for authenticated GitHub calls
            http_timeout_seconds: Timeout for registry calls

        External tools:
            docker_command: Executable used to inspect container images
            licensee_command: Executable used to detect licenses
            tool_timeout_seconds: Timeout for a single tool invocation

        Output control:
            verbosity: Logging verbosity level
    """

    temp_location: Optional[str] = None

    maven_repository_url: str = "https://repo1.maven.org/maven2"
    github_api_url: str = "https://api.github.com"
    github_token: Optional[str] = None
    http_timeout_seconds: float = 30.0

    docker_command: str = "docker"
    licensee_command: str = "licensee"
    tool_timeout_seconds: int = 600

    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.http_timeout_seconds <= 0:
            raise InvalidConfigError(
                "http_timeout_seconds", self.http_timeout_seconds, "must be positive"
            )
        if self.tool_timeout_seconds < 1:
            raise InvalidConfigError(
                "tool_timeout_seconds", self.tool_timeout_seconds, "must be at least 1"
            )
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise InvalidConfigError(
                "verbosity", self.verbosity, "expected quiet, normal or verbose"
            )
        if not self.maven_repository_url:
            raise InvalidConfigError("maven_repository_url", "", "must not be empty")

    @property
    def temp_dir(self) -> str:
        """Directory for temp files, falling back to the platform default."""
        return self.temp_location or tempfile.gettempdir()


def load_config(config_file: Optional[Path] = None, **overrides) -> HarvestConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated HarvestConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / f".{CONFIG_FILENAME}"
    if global_config.exists():
        merged.update(_load_toml_file(global_config, "global"))

    project_config = Path.cwd() / CONFIG_FILENAME
    if project_config.exists():
        merged.update(_load_toml_file(project_config, "project"))

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_toml_file(config_file, "explicit"))

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return HarvestConfig(**merged)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from HARVESTER_* environment variables.

    Every HarvestConfig field is addressable, e.g. HARVESTER_GITHUB_TOKEN or
    HARVESTER_TOOL_TIMEOUT_SECONDS.
    """
    type_hints = get_type_hints(HarvestConfig)

    result: dict[str, Any] = {}

    for field_name in HarvestConfig.__dataclass_fields__:
        env_key = f"{ENV_PREFIX}{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise InvalidConfigError(env_key, env_value, str(e))
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the type of the target field."""
    origin = getattr(type_hint, "__origin__", None)

    # Optional[X] is Union[X, None]
    args = getattr(type_hint, "__args__", ())
    if type(None) in args:
        non_none_types = [t for t in args if t is not type(None)]
        if non_none_types:
            type_hint = non_none_types[0]
            origin = getattr(type_hint, "__origin__", None)

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        if lower in ("false", "0", "no", "off"):
            return False
        raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path, kind: str) -> dict:
    """Load TOML file and return parsed dict."""
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(f"Invalid {kind} config '{path}': {e}")
