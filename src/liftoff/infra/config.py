"""Infrastructure: layered YAML configuration.

Sources, later ones winning:

1. Built-in defaults, beneath any values already in the store.
2. ``~/.liftoff/liftoff.yml``
3. ``<project root>/liftoff.yml``
4. Files passed with ``--config``.
5. ``LIFTOFF_*`` environment variables (``__`` separates key parts).
"""

from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import yaml

from liftoff.exceptions import ConfigError

CONFIG_FILENAME: str = "liftoff.yml"
ENV_PREFIX: str = "LIFTOFF_"

DEFAULTS: dict[str, Any] = {
    "options": {
        "root": None,
        "uri": None,
        "yes": False,
        "no": False,
        "simulate": False,
        "verbose": False,
        "debug": False,
        "quiet": False,
    },
    "aliases": {},
}

_MISSING = object()


class Config:
    """Dotted-key configuration store.

    ``config.get("options.uri")`` reads ``{"options": {"uri": ...}}``.
    Setting a dotted key creates intermediate mappings as needed.
    """

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = copy.deepcopy(dict(data or {}))
        self.sources: list[Path] = []
        """Files merged into this config, in load order."""

    def get(self, key: str, default: Any = None) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = {}
                node[part] = child
            node = child
        node[parts[-1]] = value

    def has(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING

    def merge(self, data: Mapping[str, Any]) -> None:
        """Deep-merge *data* over the current values."""
        _deep_merge(self._data, data)

    def setdefaults(self, data: Mapping[str, Any]) -> None:
        """Deep-merge *data* beneath the current values; existing keys win."""
        layered = copy.deepcopy(dict(data))
        _deep_merge(layered, self._data)
        self._data = layered

    def export(self) -> dict[str, Any]:
        """Return a deep copy of the whole tree."""
        return copy.deepcopy(self._data)


def _deep_merge(target: dict[str, Any], data: Mapping[str, Any]) -> None:
    for key, value in data.items():
        existing = target.get(key)
        if isinstance(existing, dict) and isinstance(value, Mapping):
            _deep_merge(existing, value)
        else:
            target[key] = copy.deepcopy(value)


def read_yaml_file(path: Path) -> dict[str, Any]:
    """Parse *path* as a YAML mapping.

    An empty file yields ``{}``.

    Raises
    ------
    ConfigError
        When the file cannot be read, is not valid YAML, or its root
        is not a mapping.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
    try:
        obj = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc
    if obj is None:
        return {}
    if not isinstance(obj, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")
    return obj


def env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Translate ``LIFTOFF_A__B=x`` variables into ``{"a": {"b": x}}``.

    Values are parsed as YAML scalars so ``true`` and ``3`` keep their
    types.
    """
    result: dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX) or len(name) == len(ENV_PREFIX):
            continue
        parts = [p.lower() for p in name[len(ENV_PREFIX):].split("__") if p]
        if not parts:
            continue
        try:
            value = yaml.safe_load(raw) if raw else raw
        except yaml.YAMLError:
            value = raw
        node = result
        for part in parts[:-1]:
            node = node.setdefault(part, {})
        node[parts[-1]] = value
    return result


def candidate_files(home: Path, root: Path | None) -> list[Path]:
    """Return the implicit config file locations, lowest priority first."""
    files = [home / ".liftoff" / CONFIG_FILENAME]
    if root is not None:
        files.append(root / CONFIG_FILENAME)
    return files


def load_config(
    config: Config,
    *,
    home: Path,
    root: Path | None = None,
    explicit: Iterable[Path] = (),
    env: Mapping[str, str] | None = None,
) -> Config:
    """Layer every configuration source into *config* and return it.

    Implicit files are skipped when missing; explicit ``--config``
    files must exist.
    """
    config.setdefaults(DEFAULTS)
    for path in candidate_files(home, root):
        if path.is_file():
            config.merge(read_yaml_file(path))
            config.sources.append(path)
    for path in explicit:
        if not path.is_file():
            raise ConfigError(
                f"Config file not found: {path}",
                hint="Check the path passed to --config.",
            )
        config.merge(read_yaml_file(path))
        config.sources.append(path)
    if env:
        config.merge(env_overrides(env))
    return config
