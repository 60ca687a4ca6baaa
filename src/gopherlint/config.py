from __future__ import annotations

from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

from gopherlint.exceptions import ConfigError

DEFAULT_CONFIG_NAME = "gopherlint.toml"
DEFAULT_MIN_CONFIDENCE = 0.8
DEFAULT_EXCLUDE_DIRS: tuple[str, ...] = ("testdata", "vendor")
DEFAULT_ENGINE = "gopherlint.lint:Linter"

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def lint_defaults(
    root: Path | None = None, config_path: Path | None = None
) -> TomlTable:
    data = load_config(root=root, config_path=config_path)
    section = data.get("lint", {})
    return section if isinstance(section, dict) else {}


def _normalize_name_list(value: TomlValue) -> list[str]:
    items: list[str] = []
    if value is None:
        return items
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",") if part.strip()]
    elif isinstance(value, (list, tuple, set)):
        for item in value:
            if isinstance(item, str):
                items.extend([part.strip() for part in item.split(",") if part.strip()])
    return [item for item in items if item]


def _as_bool(value: TomlValue) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return False


def min_confidence_value(section: TomlTable | None) -> float:
    if not isinstance(section, dict) or section.get("min_confidence") is None:
        return DEFAULT_MIN_CONFIDENCE
    raw = section["min_confidence"]
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        raise ConfigError(f"min_confidence must be a number, got {raw!r}")
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"min_confidence must be a number, got {raw!r}") from exc
    if not 0.0 <= value <= 1.0:
        raise ConfigError(f"min_confidence must be within [0, 1], got {value}")
    return value


def exclude_dir_list(section: TomlTable | None) -> list[str]:
    if not isinstance(section, dict) or "exclude_dirs" not in section:
        return list(DEFAULT_EXCLUDE_DIRS)
    return _normalize_name_list(section.get("exclude_dirs"))


def build_tag_list(section: TomlTable | None) -> list[str]:
    if not isinstance(section, dict):
        return []
    return _normalize_name_list(section.get("tags"))


def engine_spec(section: TomlTable | None) -> str:
    if not isinstance(section, dict):
        return DEFAULT_ENGINE
    value = section.get("engine")
    if isinstance(value, str) and value.strip():
        return value.strip()
    return DEFAULT_ENGINE


def set_exit_status_flag(section: TomlTable | None) -> bool:
    if not isinstance(section, dict):
        return False
    return _as_bool(section.get("set_exit_status"))


def merge_payload(payload: TomlTable, defaults: TomlTable) -> TomlTable:
    merged = dict(defaults)
    for key, value in payload.items():
        if value is None:
            continue
        merged[key] = value
    return merged
