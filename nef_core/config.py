"""Settings for catalog scanning and logging, stored as TOML."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import tomllib
from platformdirs import user_config_dir

from .errors import ConfigError

DEFAULT_APP_NAME = "nef"
CONFIG_FILE_NAME = "config.toml"
CONFIG_ENV_VAR = "NEF_CONFIG"
DEFAULT_PATTERNS: tuple[str, ...] = ("*.py",)


def default_config_path(environ: Mapping[str, str] | None = None) -> Path:
    """Return ``$NEF_CONFIG`` or the platform-specific default config path."""

    env = os.environ if environ is None else environ
    override = env.get(CONFIG_ENV_VAR, "").strip()
    if override:
        return Path(override)
    base_dir = Path(user_config_dir(DEFAULT_APP_NAME, appauthor=False))
    return base_dir / CONFIG_FILE_NAME


@dataclass(frozen=True)
class Settings:
    patterns: tuple[str, ...] = DEFAULT_PATTERNS
    exclude: tuple[str, ...] = ()
    log_level: str = "WARNING"
    path: Path | None = field(default=None, compare=False)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "Settings":
        """Read the ``[nef]`` table; a missing file yields the defaults."""

        config_path = Path(path) if path is not None else default_config_path()
        if not config_path.exists():
            return cls(path=config_path)
        try:
            with config_path.open("rb") as handle:
                document = tomllib.load(handle)
        except (OSError, tomllib.TOMLDecodeError) as exc:
            raise ConfigError(f"unable to read settings at {config_path}") from exc

        section = document.get("nef", {})
        if not isinstance(section, dict):
            raise ConfigError("malformed [nef] section")

        return cls(
            patterns=_string_list(section, "patterns", DEFAULT_PATTERNS),
            exclude=_string_list(section, "exclude", ()),
            log_level=_log_level(section.get("log_level", "WARNING")),
            path=config_path,
        )


def _string_list(
    section: dict[str, Any], key: str, default: tuple[str, ...]
) -> tuple[str, ...]:
    raw_value = section.get(key)
    if raw_value is None:
        return default
    if isinstance(raw_value, str):
        raw_value = [raw_value]
    if not isinstance(raw_value, list) or not all(isinstance(item, str) for item in raw_value):
        raise ConfigError(f"'{key}' must be a string or a list of strings")
    return tuple(item.strip() for item in raw_value if item.strip())


def _log_level(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError("'log_level' must be a non-empty string")
    return value.strip().upper()
