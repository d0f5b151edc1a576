"""Configuration resolver with 4-level priority.

Priority (highest to lowest):
1. CLI arguments
2. Environment variables (DIRENV_RELOAD_*)
3. Config files (user > system)
4. Defaults
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from direnv_reload.errors import ConfigError, ConfigKeyNotFound

ALLOWED_LOGGING_LEVELS = frozenset({"quiet", "normal", "verbose", "debug"})
DEFAULT_LOGGING_LEVEL = "quiet"

ENV_PREFIX = "DIRENV_RELOAD_"


@dataclass
class ConfigSource:
    """Represents where a config value came from."""

    value: Any
    source: str  # 'cli' | 'env' | 'user_config' | 'system_config' | 'default'


@dataclass(frozen=True)
class LoggingPolicy:
    """Resolved, immutable logging policy."""

    level_name: str  # quiet | normal | verbose | debug
    color: bool
    sources: dict[str, ConfigSource]


def _flatten_items(data: dict[str, Any], prefix: str = "") -> list[tuple[str, Any]]:
    """Flatten nested dicts to dot-notation key paths."""
    items: list[tuple[str, Any]] = []

    for key, value in data.items():
        key_path = f"{prefix}.{key}" if prefix else str(key)

        if isinstance(value, dict):
            items.extend(_flatten_items(value, key_path))
        else:
            items.append((key_path, value))

    return items


def default_config() -> dict[str, Any]:
    """Default configuration."""
    return {
        "project_dir": str(Path.cwd()),
        "direnv": {
            "executable": "direnv",
            "force_env": "_nix_direnv_force_reload",
            "noop_command": ["true"],
        },
        "files": {
            "trigger": ".envrc",
            "cache_dir": ".direnv",
            "profile_glob": "*.rc",
        },
        "logging": {
            "level": DEFAULT_LOGGING_LEVEL,
            "color": True,
        },
    }


class ConfigResolver:
    """Resolve configuration with strict priority.

    Example:
        resolver = ConfigResolver(
            cli_args={'project_dir': '/home/me/src/app'},
            user_config_path=Path('~/.config/direnv-reload/config.yaml'),
        )

        project_dir, source = resolver.resolve('project_dir')
        # project_dir = '/home/me/src/app', source = 'cli'
    """

    def __init__(
        self,
        cli_args: dict[str, Any] | None = None,
        user_config_path: Path | None = None,
        system_config_path: Path | None = None,
        defaults: dict[str, Any] | None = None,
        environ: dict[str, str] | None = None,
        require_user_config: bool = False,
    ) -> None:
        """Initialize config resolver.

        Args:
            cli_args: Arguments from CLI (highest priority, dot-notation keys)
            user_config_path: Path to user config file
            system_config_path: Path to system config file
            defaults: Default values (lowest priority)
            environ: Environment mapping (defaults to os.environ)
            require_user_config: Fail if the user config file is missing
                (set when the path was given explicitly)
        """
        self.cli_args = cli_args or {}
        self.user_config_path = (
            user_config_path or Path.home() / ".config" / "direnv-reload" / "config.yaml"
        )
        self.system_config_path = system_config_path or Path("/etc/direnv-reload/config.yaml")
        self.defaults = defaults or default_config()
        self.environ = os.environ if environ is None else environ
        self.require_user_config = require_user_config

        self._user_config: dict[str, Any] | None = None
        self._system_config: dict[str, Any] | None = None

    def resolve(self, key: str) -> tuple[Any, str]:
        """Resolve config value with priority.

        Args:
            key: Config key (supports dot notation: 'files.trigger')

        Returns:
            (value, source) tuple

        Raises:
            ConfigError: If key not found in any source
        """
        value = self.cli_args.get(key)
        if value is not None:
            return value, "cli"

        value = self._from_env(key)
        if value is not None:
            return value, "env"

        value = self._get_nested(self._get_user_config(), key)
        if value is not None:
            return value, "user_config"

        value = self._get_nested(self._get_system_config(), key)
        if value is not None:
            return value, "system_config"

        value = self._get_nested(self.defaults, key)
        if value is not None:
            return value, "default"

        raise ConfigKeyNotFound(key)

    def resolve_str(self, key: str) -> str:
        value, _src = self.resolve(key)
        if not isinstance(value, str):
            raise ConfigError(f"Config key '{key}' must be a string, got {type(value).__name__}")
        if value.strip() == "":
            raise ConfigError(f"Config key '{key}' must not be empty")
        return value

    def resolve_bool(self, key: str) -> bool:
        value, _src = self.resolve(key)
        if isinstance(value, bool):
            return value
        # Environment variables are always strings.
        if isinstance(value, str) and value.strip().lower() in {"true", "false", "1", "0"}:
            return value.strip().lower() in {"true", "1"}
        raise ConfigError(f"Config key '{key}' must be a bool")

    def resolve_argv(self, key: str) -> tuple[str, ...]:
        """Resolve a command line; a string value is split on whitespace."""
        value, _src = self.resolve(key)
        if isinstance(value, str):
            parts = value.split()
        elif isinstance(value, list) and all(isinstance(v, str) for v in value):
            parts = list(value)
        else:
            raise ConfigError(f"Config key '{key}' must be a list of strings")
        if not parts:
            raise ConfigError(f"Config key '{key}' must not be empty")
        return tuple(parts)

    def resolve_logging_policy(self) -> LoggingPolicy:
        """Resolve the logging policy.

        Canonical key is logging.level; 'verbosity' is accepted as an alias.

        Raises:
            ConfigError: If the resolved level is invalid.
        """
        found = self._try_resolve("logging.level")
        if found is None or found[1] == "default":
            alias = self._try_resolve("verbosity")
            if alias is not None:
                found = alias

        if found is None:
            value, source = DEFAULT_LOGGING_LEVEL, "default"
        else:
            value, source = found

        if not isinstance(value, str):
            raise ConfigError(f"Config key 'logging.level' must be a string, got {type(value).__name__}")
        norm = value.strip().lower()
        if norm not in ALLOWED_LOGGING_LEVELS:
            allowed = ", ".join(sorted(ALLOWED_LOGGING_LEVELS))
            raise ConfigError(f"Invalid 'logging.level': {value!r}. Allowed values: {allowed}")

        return LoggingPolicy(
            level_name=norm,
            color=self.resolve_bool("logging.color"),
            sources={"level_name": ConfigSource(value=norm, source=source)},
        )

    def resolve_all(self) -> dict[str, ConfigSource]:
        """Resolve every key present in any source.

        Returns:
            Dict of key -> ConfigSource, sorted by key
        """
        all_keys: set[str] = set(self.cli_args.keys())
        for data in (self.defaults, self._get_user_config(), self._get_system_config()):
            all_keys.update(k for k, _v in _flatten_items(data))

        result: dict[str, ConfigSource] = {}
        for key in sorted(all_keys):
            found = self._try_resolve(key)
            if found is not None:
                result[key] = ConfigSource(value=found[0], source=found[1])
        return result

    def _try_resolve(self, key: str) -> tuple[Any, str] | None:
        try:
            return self.resolve(key)
        except ConfigKeyNotFound:
            return None

    def _from_env(self, key: str) -> Any | None:
        """Get value from environment variables.

        Environment variable format: DIRENV_RELOAD_KEY_NAME
        Example: DIRENV_RELOAD_PROJECT_DIR, DIRENV_RELOAD_DIRENV_EXECUTABLE
        """
        env_key = f"{ENV_PREFIX}{key.upper().replace('.', '_')}"
        return self.environ.get(env_key)

    def _get_user_config(self) -> dict[str, Any]:
        if self._user_config is None:
            if self.require_user_config and not self.user_config_path.is_file():
                raise ConfigError(
                    f"Config file not found: {self.user_config_path}",
                    "check the --config path",
                )
            self._user_config = self._load_yaml(self.user_config_path)
        return self._user_config

    def _get_system_config(self) -> dict[str, Any]:
        if self._system_config is None:
            self._system_config = self._load_yaml(self.system_config_path)
        return self._system_config

    def _load_yaml(self, path: Path) -> dict[str, Any]:
        """Load YAML file."""
        if not path.exists():
            return {}

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
                return data if isinstance(data, dict) else {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {path}: {e}") from e

    def _get_nested(self, data: dict[str, Any], key: str) -> Any | None:
        """Get nested value using dot notation.

        Example:
            data = {'files': {'trigger': '.envrc'}}
            _get_nested(data, 'files.trigger') -> '.envrc'
        """
        current: Any = data

        for part in key.split("."):
            if not isinstance(current, dict):
                return None
            current = current.get(part)
            if current is None:
                return None

        return current
