"""Infrastructure: site alias records.

An alias is a named mapping (``root``, ``uri`` and any extra keys) that
can be selected on the command line as ``@name``.  Aliases come from the
``aliases`` configuration key and from ``<name>.alias.yml`` files.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from liftoff.exceptions import AliasNotFoundError, ConfigError
from liftoff.infra.config import read_yaml_file

ALIAS_FILE_SUFFIX: str = ".alias.yml"


class AliasManager:
    """Registry of known site aliases and the one selected for this run."""

    def __init__(self) -> None:
        self._aliases: dict[str, dict[str, Any]] = {}
        self.self_alias: dict[str, Any] | None = None
        """Record selected with ``@name`` for this run, if any."""
        self.selected: str | None = None
        """Name of the selected alias, without the leading ``@``."""

    @staticmethod
    def normalize(name: str) -> str:
        return name[1:] if name.startswith("@") else name

    def add(self, name: str, record: Mapping[str, Any]) -> None:
        self._aliases[self.normalize(name)] = dict(record)

    def add_many(self, records: Mapping[str, Any]) -> None:
        for name, record in records.items():
            if not isinstance(record, Mapping):
                raise ConfigError(f"Alias @{name} must be a mapping.")
            self.add(name, record)

    def get(self, name: str) -> dict[str, Any] | None:
        return self._aliases.get(self.normalize(name))

    def names(self) -> list[str]:
        return sorted(self._aliases)

    def load_files(self, directories: Iterable[Path]) -> None:
        """Read every ``*.alias.yml`` file in *directories*.

        Missing directories are skipped.  Later directories override
        earlier ones.
        """
        for directory in directories:
            if not directory.is_dir():
                continue
            for path in sorted(directory.glob(f"*{ALIAS_FILE_SUFFIX}")):
                name = path.name[: -len(ALIAS_FILE_SUFFIX)]
                self.add(name, read_yaml_file(path))

    def resolve(self, name: str) -> dict[str, Any]:
        """Return the record for *name* (with or without ``@``).

        Raises
        ------
        AliasNotFoundError
            When no such alias is defined.
        """
        record = self.get(name)
        if record is None:
            known = ", ".join(f"@{n}" for n in self.names()) or "none"
            raise AliasNotFoundError(
                f"Unknown site alias @{self.normalize(name)}.",
                hint=f"Known aliases: {known}",
            )
        return record

    def select(self, name: str) -> dict[str, Any]:
        """Resolve *name* and remember it as the alias for this run."""
        self.self_alias = self.resolve(name)
        self.selected = self.normalize(name)
        return self.self_alias
