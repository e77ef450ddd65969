"""Runtime configuration loader for `config/runtime.toml`."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from xmlstats_events import __version__

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "config" / "runtime.toml"
DEFAULT_LOCAL_OVERRIDE_PATH = Path(__file__).resolve().parents[2] / "config" / "runtime.local.toml"


@dataclass(frozen=True)
class RuntimeConfig:
    """Materialized runtime configuration."""

    config_path: Path
    host: str
    sport: str
    endpoint: str
    format: str
    version: str
    user_agent_contact: str
    time_zone: str
    timeout_s: float | None
    token_files: tuple[str, ...]
    cache_ttl_s: float
    coalesce_requests: bool


_CURRENT_RUNTIME_CONFIG: RuntimeConfig | None = None


def set_current_runtime_config(config: RuntimeConfig | None) -> None:
    global _CURRENT_RUNTIME_CONFIG
    _CURRENT_RUNTIME_CONFIG = config


def current_runtime_config() -> RuntimeConfig:
    config = _CURRENT_RUNTIME_CONFIG
    if config is not None:
        return config
    loaded = load_runtime_config()
    set_current_runtime_config(loaded)
    return loaded


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for key, value in overlay.items():
        existing = out.get(key)
        if isinstance(existing, dict) and isinstance(value, dict):
            out[key] = _deep_merge(existing, value)
        else:
            out[key] = value
    return out


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        payload = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise RuntimeError(f"failed reading runtime config: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise RuntimeError(f"invalid runtime config TOML: {path}") from exc
    return payload


def _as_table(payload: dict[str, Any], key: str) -> dict[str, Any]:
    value = payload.get(key, {})
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise RuntimeError(f"runtime config section [{key}] must be a table")
    return value


def _as_str(value: Any, *, default: str) -> str:
    if isinstance(value, str):
        stripped = value.strip()
        if stripped:
            return stripped
    return default


def _as_bool(value: Any, *, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    return default


def _as_float(value: Any, *, default: float) -> float:
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return default
    return default


def _as_timeout(value: Any) -> float | None:
    # 0, negative or missing means "wait indefinitely"
    parsed = _as_float(value, default=0.0)
    return parsed if parsed > 0 else None


def _as_csv_list(values: Any, *, default: tuple[str, ...]) -> tuple[str, ...]:
    if isinstance(values, list):
        cleaned = [str(value).strip() for value in values if str(value).strip()]
        return tuple(cleaned) if cleaned else default
    if isinstance(values, str):
        cleaned = [part.strip() for part in values.split(",") if part.strip()]
        return tuple(cleaned) if cleaned else default
    return default


def load_runtime_config(config_path: Path | None = None) -> RuntimeConfig:
    """Load runtime config from `config/runtime.toml` plus optional local override."""
    source = (config_path or DEFAULT_CONFIG_PATH).expanduser().resolve()
    if not source.exists():
        raise RuntimeError(f"runtime config file not found: {source}")

    payload = _read_toml(source)
    if source == DEFAULT_CONFIG_PATH and DEFAULT_LOCAL_OVERRIDE_PATH.exists():
        payload = _deep_merge(payload, _read_toml(DEFAULT_LOCAL_OVERRIDE_PATH))

    xmlstats = _as_table(payload, "xmlstats")
    cache = _as_table(payload, "cache")

    return RuntimeConfig(
        config_path=source,
        host=_as_str(xmlstats.get("host"), default="erikberg.com"),
        sport=_as_str(xmlstats.get("sport"), default="nba"),
        endpoint=_as_str(xmlstats.get("endpoint"), default="events"),
        format=_as_str(xmlstats.get("format"), default="json"),
        version=_as_str(xmlstats.get("version"), default=__version__),
        user_agent_contact=_as_str(xmlstats.get("user_agent_contact"), default=""),
        time_zone=_as_str(xmlstats.get("time_zone"), default="America/New_York"),
        timeout_s=_as_timeout(xmlstats.get("timeout_s")),
        token_files=_as_csv_list(
            xmlstats.get("token_files"),
            default=("XMLSTATS_ACCESS_TOKEN.ignore", "XMLSTATS_ACCESS_TOKEN"),
        ),
        cache_ttl_s=_as_float(cache.get("ttl_s"), default=600.0),
        coalesce_requests=_as_bool(cache.get("coalesce_requests"), default=True),
    )
