import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml
from structlog import get_logger

from hub_search.search.driver import DEFAULT_CHUNK_SIZE, SearchSettings
from hub_search.search.evaluator import DEFAULT_INT_BITS
from hub_search.search.operators import DEFAULT_OPERATIONS, OperatorSet

logger = get_logger("config.loader")

DEFAULT_SETTINGS_PATH = "config/search.yaml"

DEFAULT_SETTINGS: Dict[str, Any] = {
    "max_number": None,
    "max_size": None,
    "operations": DEFAULT_OPERATIONS,
    "workers": 1,
    "int_bits": DEFAULT_INT_BITS,
    "chunk_size": DEFAULT_CHUNK_SIZE,
    "log_level": "INFO",
    "metrics_port": None,
}

_ENV_KEYS: Dict[str, Tuple[str, type]] = {
    "HUB_SEARCH_MAX_NUMBER": ("max_number", int),
    "HUB_SEARCH_MAX_SIZE": ("max_size", int),
    "HUB_SEARCH_OPERATIONS": ("operations", str),
    "HUB_SEARCH_WORKERS": ("workers", int),
    "HUB_SEARCH_INT_BITS": ("int_bits", int),
    "HUB_SEARCH_CHUNK_SIZE": ("chunk_size", int),
    "HUB_SEARCH_LOG_LEVEL": ("log_level", str),
    "HUB_SEARCH_METRICS_PORT": ("metrics_port", int),
}

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    pass


def _load_settings_yaml(path: str, *, required: bool = False) -> Dict[str, Any]:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        if required:
            raise ConfigError(f"Settings file not found: {path}")
        return {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file must hold a mapping: {path}")
    unknown = sorted(set(data) - set(DEFAULT_SETTINGS))
    if unknown:
        logger.warning("Ignoring unknown settings keys", path=path, keys=unknown)
    return {k: v for k, v in data.items() if k in DEFAULT_SETTINGS}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Shallow merge; ``None`` in *override* keeps the base value."""
    for k, v in override.items():
        if v is not None:
            base[k] = v
    return base


def _env_overrides() -> Dict[str, Any]:
    env: Dict[str, Any] = {}
    for name, (key, cast) in _ENV_KEYS.items():
        raw = os.getenv(name)
        if not raw:
            continue
        try:
            env[key] = cast(raw)
        except ValueError as exc:
            raise ConfigError(f"{name} must be {cast.__name__}, was {raw!r}") from exc
    return env


def load_settings(
    cli_overrides: Dict[str, Any] | None = None,
    path: str | None = None,
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Return (settings, applied_defaults) after applying priority chain.

    defaults < YAML file (*path*, else ``config/search.yaml`` when present) < env < CLI.
    """
    cli_overrides = cli_overrides or {}

    settings = deepcopy(DEFAULT_SETTINGS)
    applied_defaults = deepcopy(DEFAULT_SETTINGS)

    if path:
        settings = _merge(settings, _load_settings_yaml(path, required=True))
    elif Path(DEFAULT_SETTINGS_PATH).is_file():
        settings = _merge(settings, _load_settings_yaml(DEFAULT_SETTINGS_PATH))

    settings = _merge(settings, _env_overrides())
    settings = _merge(settings, cli_overrides)

    for key in list(applied_defaults):
        if settings.get(key) != applied_defaults[key]:
            applied_defaults.pop(key)

    return settings, applied_defaults


def _positive_int(settings: Dict[str, Any], key: str) -> int:
    value = settings.get(key)
    if value is None:
        raise ConfigError(f"{key} is required")
    if isinstance(value, bool) or not isinstance(value, int):
        try:
            value = int(str(value))
        except ValueError as exc:
            raise ConfigError(f"{key} must be an integer, was {value!r}") from exc
    if value <= 0:
        raise ConfigError(f"{key} must be > 0, was {value}")
    return value


def build_search_settings(settings: Dict[str, Any]) -> SearchSettings:
    """Validate a merged settings dict into ``SearchSettings``."""
    max_number = _positive_int(settings, "max_number")
    max_size = _positive_int(settings, "max_size")
    workers = _positive_int(settings, "workers")
    chunk_size = _positive_int(settings, "chunk_size")
    int_bits = _positive_int(settings, "int_bits")
    if int_bits < 2:
        raise ConfigError(f"int_bits must be >= 2, was {int_bits}")
    try:
        operators = OperatorSet.parse(settings.get("operations"))
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc
    return SearchSettings(
        max_number=max_number,
        max_size=max_size,
        operators=operators,
        workers=workers,
        int_bits=int_bits,
        chunk_size=chunk_size,
    )


def validate_log_level(settings: Dict[str, Any]) -> str:
    level = str(settings.get("log_level") or "INFO").upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {','.join(_LOG_LEVELS)}, was {level!r}")
    return level


def summarize_settings(settings: Dict[str, Any]) -> str:
    lines = []
    lines.append(f"max_number={settings.get('max_number')}")
    lines.append(f"max_size={settings.get('max_size')}")
    lines.append(f"operations={settings.get('operations')}")
    lines.append(f"workers={settings.get('workers')} chunk_size={settings.get('chunk_size')}")
    lines.append(f"int_bits={settings.get('int_bits')}")
    return " | ".join(lines)
