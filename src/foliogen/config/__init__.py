"""Configuration management for foliogen.

Settings live in ``~/.foliogen/config.yaml``. :class:`ConfigManager` creates the
file on first use, lays environment variables and CLI flags over it and
validates the result into a :class:`FoliogenConfig`.
"""

from __future__ import annotations

import os
import textwrap
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Mapping

import yaml

from .exceptions import ConfigError
from .models import FoliogenConfig
from .resolver import (
    ENV_PREFIX,
    ENV_SEPARATOR,
    expand_dotted,
    flatten_for_env,
    merge_layers,
    resolve_with_precedence,
)

DEFAULT_CONFIG_PATH = Path("~/.foliogen/config.yaml")
STAMP_PREFIX = "# Last updated: "
_CONFIG_HEADER = textwrap.dedent(
    """\
    # foliogen configuration file
    # Generated automatically; manage via `foliogen config edit` or `foliogen config set`.
    """
)


def _is_true(raw: str) -> bool:
    return raw.strip().lower() == "true"


def _is_not_false(raw: str) -> bool:
    return raw.strip().lower() != "false"


# Names shared with the cache-refresh service.
WEBHOOK_ENV_VARS: dict[str, tuple[str, Callable[[str], Any]]] = {
    "MANIFEST_WEBHOOK_URL": ("url", str),
    "MANIFEST_WEBHOOK_BASE": ("base", str),
    "WEBHOOK_SECRET": ("secret", str),
    "MANIFEST_WEBHOOK_ALWAYS": ("always", _is_true),
    "MANIFEST_WEBHOOK_DISABLED": ("disabled", _is_not_false),
}


def overrides_from_env(env: Mapping[str, str]) -> dict[str, Any]:
    """Translate environment variables into a dotted-key override layer.

    ``FOLIOGEN__SECTION__KEY`` values are parsed as YAML scalars and win over
    the webhook variables in :data:`WEBHOOK_ENV_VARS`.
    """
    overrides: dict[str, Any] = {}
    for name, (field, parse) in WEBHOOK_ENV_VARS.items():
        raw = env.get(name)
        if raw:
            overrides[f"webhook.{field}"] = parse(raw)

    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        segments = name[len(ENV_PREFIX) :].split(ENV_SEPARATOR)
        if not all(segments):
            continue
        try:
            value: Any = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        overrides[".".join(segment.lower() for segment in segments)] = value
    return overrides


class ConfigManager:
    """Read, validate and persist the configuration file."""

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        self._config_path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        """Return the resolved configuration path."""
        return self._config_path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> FoliogenConfig:
        """Return the effective configuration.

        Args:
            cli_overrides: Dotted-key values taken from command-line flags.
            include_env: Apply environment variables.
            ensure_file: Create the file with defaults when it is missing.
            env_overrides: Environment mapping used instead of the process environment.

        Raises:
            ConfigError: If the file cannot be parsed or values fail validation.
        """
        if ensure_file:
            self.ensure_exists()

        env_layer: dict[str, Any] | None = None
        if include_env:
            env_layer = overrides_from_env(self._env if env_overrides is None else env_overrides) or None

        return resolve_with_precedence(
            defaults=FoliogenConfig(),
            file_overrides=self._read_file(),
            env_overrides=env_layer,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the raw mapping stored on disk."""
        return self._read_file()

    def save(self, config: FoliogenConfig | Mapping[str, Any]) -> None:
        """Persist ``config`` with a fresh header and timestamp."""
        if isinstance(config, FoliogenConfig):
            self._write_file(config.model_dump(mode="python"))
        else:
            self._write_file(dict(config))

    def ensure_exists(self) -> Path:
        """Create the file with default settings unless it already exists."""
        if not self._config_path.exists():
            self._write_file(FoliogenConfig().model_dump(mode="python"))
        return self._config_path

    def read_text(self) -> str:
        """Return the file contents, or an empty string when it is missing."""
        try:
            return self._config_path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""

    def _read_file(self) -> dict[str, Any]:
        text = self.read_text()
        if not text:
            return {}
        try:
            raw = yaml.safe_load(text) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return raw

    def _write_file(self, data: Mapping[str, Any]) -> None:
        stamp = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        body = yaml.safe_dump(dict(data), sort_keys=False)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        self._config_path.write_text(f"{_CONFIG_HEADER}{STAMP_PREFIX}{stamp}\n{body}", encoding="utf-8")


__all__ = [
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "FoliogenConfig",
    "STAMP_PREFIX",
    "WEBHOOK_ENV_VARS",
    "expand_dotted",
    "flatten_for_env",
    "merge_layers",
    "overrides_from_env",
    "resolve_with_precedence",
]
