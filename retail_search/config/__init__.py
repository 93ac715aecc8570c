from __future__ import annotations

import os
import sys
import tomllib
from collections.abc import Mapping, MutableMapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEFAULT_ENV_FILE = PROJECT_ROOT / ".env"
DEFAULT_CONFIG_FILE = Path.home() / ".config" / "retail_search" / "config.toml"
ENV_FILE_ENV_VAR = "RETAIL_SEARCH_ENV_FILE"
CONFIG_FILE_ENV_VAR = "RETAIL_SEARCH_CONFIG_FILE"

_PATH_TO_ENV_KEY: dict[tuple[str, str], str] = {
    ("google", "project_number"): "PROJECT_NUMBER",
    ("google", "api_endpoint"): "RETAIL_API_ENDPOINT",
    ("search", "visitor_id"): "RETAIL_SEARCH_VISITOR_ID",
    ("search", "page_size"): "RETAIL_SEARCH_PAGE_SIZE",
}
_ENV_KEY_TO_PATH = {env_name: path for path, env_name in _PATH_TO_ENV_KEY.items()}

_DEFAULTS: dict[tuple[str, str], str] = {
    ("google", "project_number"): "",
    ("search", "visitor_id"): "123456",
    ("search", "page_size"): "10",
}

_SECTION_FIELDS: dict[str, set[str]] = {}
for section, field in _PATH_TO_ENV_KEY:
    _SECTION_FIELDS.setdefault(section, set()).add(field)


class ConfigError(RuntimeError):
    """Raised when the configuration cannot be loaded."""


@dataclass(frozen=True)
class GoogleConfig:
    project_number: str
    api_endpoint: str | None = None


@dataclass(frozen=True)
class SearchConfig:
    visitor_id: str
    page_size: int


@dataclass(frozen=True)
class AppConfig:
    google: GoogleConfig
    search: SearchConfig


_CONFIG_CACHE: AppConfig | None = None


def get_config() -> AppConfig:
    """Return a cached configuration using the default sources."""
    global _CONFIG_CACHE
    if _CONFIG_CACHE is None:
        _CONFIG_CACHE = load_config()
    return _CONFIG_CACHE


def load_config(
    *,
    env_file: Path | str | None = None,
    config_file: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load a configuration from `.env`, the personal config file, and environment variables.

    Later sources win. A missing project number is passed through as an empty
    string so that the placement it feeds is rejected remotely, not here.
    """
    env_path = _resolve_env_file(env_file)
    config_path = _resolve_config_file(config_file)

    merged: dict[str, Any] = {}
    _deep_merge(merged, _env_mapping_to_nested(_parse_env_file(env_path)))
    _deep_merge(merged, _filter_known_sections(_read_config_file(config_path)))
    runtime_values = environ if environ is not None else os.environ
    _deep_merge(merged, _env_mapping_to_nested(runtime_values))
    return _build_app_config(merged)


def doctor(*, env_file: Path | str | None = None, config_file: Path | str | None = None) -> bool:
    """Validate configuration sources and print a diagnostic summary."""
    try:
        config = load_config(env_file=env_file, config_file=config_file)
    except ConfigError as exc:
        print("Retail search configuration invalid:", file=sys.stderr)
        print(f"  {exc}", file=sys.stderr)
        return False

    if not config.google.project_number:
        print("Retail search configuration incomplete:", file=sys.stderr)
        print("  PROJECT_NUMBER is not set; the search placement will be rejected.", file=sys.stderr)
        return False

    print("Retail search configuration looks good.", file=sys.stdout)
    print(f"  Project number: {config.google.project_number}", file=sys.stdout)
    endpoint = config.google.api_endpoint or "retail.googleapis.com (default)"
    print(f"  Retail API endpoint: {endpoint}", file=sys.stdout)
    print(f"  Default visitor ID: {config.search.visitor_id}", file=sys.stdout)
    print(f"  Default page size: {config.search.page_size}", file=sys.stdout)
    return True


def _build_app_config(data: Mapping[str, Any]) -> AppConfig:
    values: dict[tuple[str, str], str | None] = {}
    for path in _PATH_TO_ENV_KEY:
        section_name, key = path
        section = data.get(section_name)
        raw_value = section.get(key) if isinstance(section, Mapping) else None
        if raw_value is None or str(raw_value).strip() == "":
            values[path] = _DEFAULTS.get(path)
            continue
        values[path] = str(raw_value).strip()

    return AppConfig(
        google=GoogleConfig(
            project_number=values[("google", "project_number")] or "",
            api_endpoint=values[("google", "api_endpoint")],
        ),
        search=SearchConfig(
            visitor_id=values[("search", "visitor_id")] or "",
            page_size=_parse_page_size(values[("search", "page_size")]),
        ),
    )


def _parse_page_size(raw: str | None) -> int:
    env_name = _PATH_TO_ENV_KEY[("search", "page_size")]
    try:
        page_size = int(raw or "")
    except ValueError:
        raise ConfigError(f"{env_name} must be an integer, got {raw!r}") from None
    if page_size <= 0:
        raise ConfigError(f"{env_name} must be positive, got {page_size}")
    return page_size


def _resolve_env_file(explicit: Path | str | None) -> Path:
    if explicit is not None:
        return Path(explicit)
    override = os.environ.get(ENV_FILE_ENV_VAR)
    if override:
        return Path(override)
    return DEFAULT_ENV_FILE


def _resolve_config_file(explicit: Path | str | None) -> Path:
    if explicit is not None:
        return Path(explicit)
    override = os.environ.get(CONFIG_FILE_ENV_VAR)
    if override:
        return Path(override)
    return DEFAULT_CONFIG_FILE


def _parse_env_file(path: Path) -> dict[str, str]:
    try:
        contents = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError as exc:
        raise ConfigError(f"Failed to read env file {path}: {exc}") from exc

    values: dict[str, str] = {}
    for raw_line in contents.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("export "):
            line = line[len("export ") :]
        if "=" not in line:
            continue
        key, raw_value = line.split("=", 1)
        values[key.strip()] = _strip_quotes(raw_value.strip())
    return values


def _strip_quotes(value: str) -> str:
    if len(value) >= 2 and ((value[0] == value[-1]) and value.startswith(("'", '"'))):
        return value[1:-1]
    return value


def _read_config_file(path: Path) -> Mapping[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError:
        return {}
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Config file {path} is not valid TOML: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read config file {path}: {exc}") from exc


def _filter_known_sections(raw: Mapping[str, Any]) -> dict[str, Any]:
    filtered: dict[str, Any] = {}
    for section, allowed_fields in _SECTION_FIELDS.items():
        raw_section = raw.get(section)
        if not isinstance(raw_section, Mapping):
            continue
        filtered_section = {
            field: str(raw_section[field]) for field in allowed_fields if field in raw_section
        }
        if filtered_section:
            filtered[section] = filtered_section
    return filtered


def _env_mapping_to_nested(mapping: Mapping[str, Any]) -> dict[str, Any]:
    nested: dict[str, Any] = {}
    for key, value in mapping.items():
        path = _ENV_KEY_TO_PATH.get(key)
        if path:
            nested.setdefault(path[0], {})[path[1]] = value
    return nested


def _deep_merge(target: MutableMapping[str, Any], data: Mapping[str, Any]) -> None:
    for key, value in data.items():
        if isinstance(value, Mapping):
            child = target.get(key)
            if not isinstance(child, MutableMapping):
                child = {}
                target[key] = child
            _deep_merge(child, value)
        elif value is not None:
            target[key] = value


__all__ = [
    "AppConfig",
    "ConfigError",
    "GoogleConfig",
    "SearchConfig",
    "doctor",
    "get_config",
    "load_config",
]
