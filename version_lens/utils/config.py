"""Configuration for version-lens."""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib


CONFIG_TABLE = "version-lens"
ENV_PREFIX = "VERSION_LENS_"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


@dataclass
class Settings:
    """Runtime settings consumed by the checker and changelog resolver."""

    enable_changelog_cache: bool = True
    changelog_cache_ttl: float = 60 * 60
    debounce_interval: float = 0.3
    verbose: bool = False

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.changelog_cache_ttl < 0:
            raise ValueError(f"changelog_cache_ttl must be non-negative: {self.changelog_cache_ttl}")
        if self.debounce_interval < 0:
            raise ValueError(f"debounce_interval must be non-negative: {self.debounce_interval}")

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "Settings":
        """Build settings from a mapping, accepting kebab-case keys.

        Unknown keys are ignored.
        """
        known = {field.name: field for field in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in values.items():
            name = key.replace("-", "_")
            if name in known:
                kwargs[name] = _coerce(name, value, known[name].type)
        return cls(**kwargs)


def _coerce(name: str, value: Any, target: Any) -> Any:
    if target in (bool, "bool"):
        if isinstance(value, bool):
            return value
        text = str(value).strip().lower()
        if text in _TRUE:
            return True
        if text in _FALSE:
            return False
        raise ValueError(f"Invalid boolean for {name}: {value!r}")

    if target in (float, "float"):
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid number for {name}: {value!r}") from None

    return value


def _read_config_file(config_file: Path) -> Dict[str, Any]:
    """Read the ``[tool.version-lens]`` table of a TOML file."""
    with open(config_file, "rb") as f:
        data = tomllib.load(f)

    table = data.get("tool", {}).get(CONFIG_TABLE, {})
    if not isinstance(table, dict):
        raise ValueError(f"[tool.{CONFIG_TABLE}] must be a table in {config_file}")
    return table


def _read_environment(environ: Mapping[str, str]) -> Dict[str, str]:
    values = {}
    for field in fields(Settings):
        key = f"{ENV_PREFIX}{field.name.upper()}"
        if key in environ:
            values[field.name] = environ[key]
    return values


def load_settings(
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load settings from a TOML file and environment overrides.

    Args:
        config_file: Optional TOML file holding a ``[tool.version-lens]`` table
        environ: Environment mapping, defaults to ``os.environ``

    Returns:
        Validated settings
    """
    values: Dict[str, Any] = {}
    if config_file is not None:
        values.update(_read_config_file(config_file))

    values.update(_read_environment(os.environ if environ is None else environ))
    return Settings.from_mapping(values)
