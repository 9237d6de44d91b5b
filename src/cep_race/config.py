"""Race configuration loader (YAML file and environment variables)."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
import os
from os import PathLike
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigError
from .providers.factory import DEFAULT_PROVIDERS
from .providers.http import DEFAULT_HTTP_TIMEOUT_S
from .utils import ensure_str_list

__all__ = [
    "ConfigError",
    "RaceConfig",
    "SCHEMA_VERSION",
    "load_race_config",
    "race_config_from_environment",
]

SCHEMA_VERSION = 1

ENV_PROVIDERS = "CEP_RACE_PROVIDERS"
ENV_HTTP_TIMEOUT = "CEP_RACE_HTTP_TIMEOUT"
ENV_RACE_TIMEOUT = "CEP_RACE_TIMEOUT"
ENV_METRICS_PATH = "CEP_RACE_METRICS_PATH"


@dataclass(frozen=True)
class RaceConfig:
    providers: tuple[str, ...] = field(default=DEFAULT_PROVIDERS)
    http_timeout_s: float = DEFAULT_HTTP_TIMEOUT_S
    race_timeout_s: float | None = None
    metrics_path: Path | None = None

    def __post_init__(self) -> None:
        providers = tuple(self.providers)
        if not providers:
            raise ConfigError("'providers' must list at least one provider.")
        object.__setattr__(self, "providers", providers)
        if self.http_timeout_s <= 0:
            raise ConfigError("'http_timeout_s' must be positive.")
        if self.race_timeout_s is not None and self.race_timeout_s <= 0:
            raise ConfigError("'race_timeout_s' must be positive.")

    def merged(self, **overrides: Any) -> RaceConfig:
        """Return a copy with every non-``None`` override applied."""

        values = {key: value for key, value in overrides.items() if value is not None}
        if not values:
            return self
        return replace(self, **values)


def _coerce_path(config: str | Path | PathLike[str]) -> Path:
    if isinstance(config, Path):
        return config
    if isinstance(config, (str, PathLike)):
        return Path(config)
    raise ConfigError("Config path must be a string or Path instance.")


def _optional_float(data: Mapping[str, Any], field_name: str) -> float | None:
    if field_name not in data or data[field_name] is None:
        return None
    value = data[field_name]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{field_name}' must be a number.")
    return float(value)


def _providers_field(data: Mapping[str, Any]) -> tuple[str, ...] | None:
    if "providers" not in data:
        return None
    raw = data["providers"]
    if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
        raise ConfigError("'providers' must be a list of provider specs.")
    providers = tuple(ensure_str_list(raw))
    if not providers:
        raise ConfigError("'providers' must list at least one provider.")
    return providers


def load_race_config(config: str | Path, *, base: RaceConfig | None = None) -> RaceConfig:
    """Load and validate a race configuration file."""

    path = _coerce_path(config)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc

    try:
        raw_data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(raw_data, Mapping):
        raise ConfigError("Config root must be a mapping.")

    version = raw_data.get("schema_version", SCHEMA_VERSION)
    if isinstance(version, bool) or not isinstance(version, int):
        raise ConfigError("'schema_version' must be an integer.")
    if version != SCHEMA_VERSION:
        raise ConfigError(f"Unsupported schema_version: {version}")

    metrics_raw = raw_data.get("metrics_path")
    if metrics_raw is not None and not isinstance(metrics_raw, str):
        raise ConfigError("'metrics_path' must be a string.")

    overrides: dict[str, Any] = {
        "providers": _providers_field(raw_data),
        "http_timeout_s": _optional_float(raw_data, "http_timeout_s"),
        "race_timeout_s": _optional_float(raw_data, "race_timeout_s"),
        "metrics_path": Path(metrics_raw) if metrics_raw else None,
    }
    try:
        return (base or RaceConfig()).merged(**overrides)
    except ConfigError as exc:
        raise ConfigError(f"{path}: {exc}") from exc


def _env_float(environ: Mapping[str, str], name: str) -> float | None:
    raw = environ.get(name, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ConfigError(f"environment variable {name} must be numeric") from exc


def race_config_from_environment(
    base: RaceConfig | None = None,
    environ: Mapping[str, str] | None = None,
) -> RaceConfig:
    env = os.environ if environ is None else environ
    providers = tuple(ensure_str_list(env.get(ENV_PROVIDERS)))
    metrics = env.get(ENV_METRICS_PATH, "").strip()
    return (base or RaceConfig()).merged(
        providers=providers or None,
        http_timeout_s=_env_float(env, ENV_HTTP_TIMEOUT),
        race_timeout_s=_env_float(env, ENV_RACE_TIMEOUT),
        metrics_path=Path(metrics) if metrics else None,
    )
