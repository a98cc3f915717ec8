"""Layered configuration resolution.

Layers are merged in increasing priority: built-in defaults, the YAML file,
environment variables, then CLI flags. Keys inside any layer may be nested
mappings or dotted paths such as ``featured.total_limit``.
"""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Iterator, Mapping

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import FoliogenConfig

ENV_PREFIX = "FOLIOGEN__"
ENV_SEPARATOR = "__"


def resolve_with_precedence(
    *,
    defaults: FoliogenConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> FoliogenConfig:
    """Merge the override layers onto ``defaults`` and validate the result.

    Raises:
        ConfigError: If a layer is malformed or the merged values do not validate.
    """
    merged = defaults.model_dump(mode="python")
    layers = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for layer_name, layer in layers:
        if layer is not None:
            merged = merge_layers(merged, expand_dotted(layer, layer_name=layer_name))

    try:
        return FoliogenConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def expand_dotted(layer: Mapping[str, Any], *, layer_name: str) -> dict[str, Any]:
    """Return ``layer`` with dotted keys expanded into nested mappings.

    Raises:
        ConfigError: If the layer or a key has the wrong type, or a dotted key
            would descend into a scalar value.
    """
    label = layer_name.capitalize()
    if not isinstance(layer, MappingABC):
        raise ConfigError(f"{label} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in layer.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = expand_dotted(value, layer_name=layer_name)

        *parents, leaf = key.split(".")
        node = expanded
        for segment in parents:
            child = node.get(segment)
            if child is None:
                child = node[segment] = {}
            elif not isinstance(child, dict):
                raise ConfigError(f"{label} override for {key} conflicts with existing value.")
            node = child

        if isinstance(value, dict) and isinstance(node.get(leaf), dict):
            node[leaf] = merge_layers(node[leaf], value)
        else:
            node[leaf] = value
    return expanded


def merge_layers(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Return a deep copy of ``base`` with ``override`` merged on top."""
    merged = deepcopy(dict(base))
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = merge_layers(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


def flatten_for_env(config: FoliogenConfig) -> Dict[str, str]:
    """Render ``config`` as ``FOLIOGEN__SECTION__KEY`` environment variables."""
    return {
        ENV_PREFIX + ENV_SEPARATOR.join(part.upper() for part in path): _env_value(value)
        for path, value in _leaves(config.model_dump(mode="python"))
    }


def _leaves(data: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> Iterator[tuple[tuple[str, ...], Any]]:
    for key, value in data.items():
        path = (*prefix, str(key))
        if isinstance(value, dict) and value:
            yield from _leaves(value, path)
        else:
            yield path, value


def _env_value(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return yaml.safe_dump(value, default_flow_style=True).strip()
    return str(value)


__all__ = [
    "ENV_PREFIX",
    "ENV_SEPARATOR",
    "expand_dotted",
    "flatten_for_env",
    "merge_layers",
    "resolve_with_precedence",
]
