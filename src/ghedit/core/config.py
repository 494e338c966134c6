"""User configuration loaded from ~/.ghedit/config.toml and the environment.

Precedence, lowest first: built-in defaults, the config file, GHEDIT_*
environment variables, then command line flags (applied by the CLI).
"""

import os
import tomllib
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import tomlkit

from ghedit.models.filter_context import DEFAULT_LIST_LIMIT, StateFilter

DEFAULT_CACHE_TTL_SECONDS = 300
DEFAULT_DISPATCH_TIMEOUT_SECONDS = 5.0

ENV_OVERRIDES = {
    "GHEDIT_REPO": "repo",
    "GHEDIT_CACHE_TTL": "cache_ttl_seconds",
    "GHEDIT_DISPATCH_TIMEOUT": "dispatch_timeout_seconds",
    "GHEDIT_LIST_LIMIT": "list_limit",
}


@dataclass(frozen=True)
class GheditConfig:
    """Immutable configuration data.

    Loaded once at CLI entry point and stored in GheditContext.
    """

    repo: str | None = None
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    dispatch_timeout_seconds: float = DEFAULT_DISPATCH_TIMEOUT_SECONDS
    list_limit: int = DEFAULT_LIST_LIMIT
    default_state: str = "open"
    editor: str | None = None
    delete_confirmation: bool = True

    @staticmethod
    def keys() -> list[str]:
        return [f.name for f in fields(GheditConfig)]

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.keys()}


def _coerce(key: str, value: Any, source: str) -> Any:
    """Convert a raw value for key to the field's type.

    Raises:
        ValueError: If the value cannot be converted, naming key and source
    """
    try:
        if key in ("repo", "editor"):
            if value is None:
                return None
            text = str(value).strip()
            return text or None
        if key in ("cache_ttl_seconds", "list_limit"):
            if isinstance(value, bool):
                raise ValueError(value)
            number = int(value)
            if number < 0 or (key == "list_limit" and number == 0):
                raise ValueError(value)
            return number
        if key == "dispatch_timeout_seconds":
            if isinstance(value, bool):
                raise ValueError(value)
            seconds = float(value)
            if seconds <= 0:
                raise ValueError(value)
            return seconds
        if key == "default_state":
            return StateFilter.parse(str(value)).value
        if key == "delete_confirmation":
            if isinstance(value, bool):
                return value
            text = str(value).strip().lower()
            if text in ("true", "yes", "1", "on"):
                return True
            if text in ("false", "no", "0", "off"):
                return False
            raise ValueError(value)
    except ValueError:
        raise ValueError(f"Invalid value {value!r} for '{key}' in {source}") from None
    raise ValueError(f"Unknown config key '{key}' in {source}")


def config_from_mapping(data: Mapping[str, Any], source: str) -> GheditConfig:
    """Build a config from parsed TOML data; absent keys keep their defaults.

    Raises:
        ValueError: On unknown keys or malformed values
    """
    values = {key: _coerce(key, value, source) for key, value in data.items()}
    return GheditConfig(**values)


def apply_env_overrides(config: GheditConfig, env: Mapping[str, str]) -> GheditConfig:
    """Apply GHEDIT_* environment variables on top of config."""
    overrides = {
        key: _coerce(key, env[name], f"${name}")
        for name, key in ENV_OVERRIDES.items()
        if env.get(name)
    }
    if not overrides:
        return config
    return replace(config, **overrides)


class ConfigStore(ABC):
    """Abstract interface for config file access.

    Enables in-memory implementations for tests without touching filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if the config file exists."""
        ...

    @abstractmethod
    def load(self) -> GheditConfig:
        """Load config, falling back to defaults when no file exists.

        Raises:
            ValueError: If the file is malformed
        """
        ...

    @abstractmethod
    def set_value(self, key: str, value: str) -> GheditConfig:
        """Persist a single key and return the resulting config.

        Raises:
            ValueError: If key is unknown or value is invalid for it
        """
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path to the config file (for messages)."""
        ...


class FilesystemConfigStore(ConfigStore):
    """Production implementation that reads/writes ~/.ghedit/config.toml."""

    def __init__(self, config_path: Path | None = None) -> None:
        self._path = config_path

    def path(self) -> Path:
        if self._path is not None:
            return self._path
        return Path.home() / ".ghedit" / "config.toml"

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> GheditConfig:
        config_path = self.path()
        if not config_path.exists():
            return GheditConfig()
        try:
            data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"Malformed config file {config_path}: {e}") from e
        return config_from_mapping(data, str(config_path))

    def set_value(self, key: str, value: str) -> GheditConfig:
        """Update key in place, preserving existing formatting and comments."""
        config_path = self.path()
        coerced = _coerce(key, value, str(config_path))

        if config_path.exists():
            with config_path.open("r", encoding="utf-8") as f:
                doc = tomlkit.load(f)
        else:
            doc = tomlkit.document()
            doc.add(tomlkit.comment("ghedit configuration"))

        if coerced is None:
            if key in doc:
                del doc[key]
        else:
            doc[key] = coerced

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with config_path.open("w", encoding="utf-8") as f:
            tomlkit.dump(doc, f)

        return self.load()


class InMemoryConfigStore(ConfigStore):
    """Test implementation that stores config in memory without touching filesystem."""

    def __init__(self, config: GheditConfig | None = None) -> None:
        """Initialize in-memory config store.

        Args:
            config: Initial config state (None = no config file)
        """
        self._config = config

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> GheditConfig:
        if self._config is None:
            return GheditConfig()
        return self._config

    def set_value(self, key: str, value: str) -> GheditConfig:
        coerced = _coerce(key, value, str(self.path()))
        self._config = replace(self.load(), **{key: coerced})
        return self._config

    def path(self) -> Path:
        return Path("/fake/ghedit/config.toml")


def load_config(store: ConfigStore, env: Mapping[str, str] | None = None) -> GheditConfig:
    """Load the effective config: file values overridden by the environment."""
    return apply_env_overrides(store.load(), os.environ if env is None else env)
