"""Command registry and command-file discovery.

A command file is any ``*_commands.py`` module in a search path.  Every
function in it decorated with :func:`~liftoff.commands.decorators.command`
is registered.  The built-in directory is imported as a normal package
module; other directories are loaded from their file location.
"""

from __future__ import annotations

import importlib
import importlib.util
import re
import sys
from collections.abc import Iterable
from pathlib import Path
from types import ModuleType

from liftoff.commands.decorators import CommandSpec, command_spec
from liftoff.exceptions import CommandRegistrationError

COMMAND_FILE_GLOB: str = "*_commands.py"
_BUILTIN_PACKAGE: str = "liftoff.commands"
_EXTERNAL_PREFIX: str = "liftoff_commandfiles"


def _builtin_dir() -> Path:
    return Path(__file__).resolve().parent


def _module_name_for(path: Path) -> str:
    return f"{_EXTERNAL_PREFIX}_{re.sub(r'[^0-9A-Za-z_]', '_', str(path.with_suffix('')))}"


def load_command_file(path: Path) -> ModuleType:
    """Import the command file at *path*.

    Raises
    ------
    CommandRegistrationError
        When the file cannot be imported.
    """
    module_name = _module_name_for(path)
    if module_name in sys.modules:
        return sys.modules[module_name]
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise CommandRegistrationError(f"Cannot load command file {path}.")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        del sys.modules[module_name]
        raise CommandRegistrationError(
            f"Cannot load command file {path}: {type(exc).__name__}: {exc}",
        ) from exc
    return module


class CommandRegistry:
    """Commands known to the application, addressable by name or alias."""

    def __init__(self) -> None:
        self._commands: dict[str, CommandSpec] = {}
        self._lookup: dict[str, CommandSpec] = {}
        self.files: list[Path] = []
        """Command files loaded by :meth:`discover`, in load order."""

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._lookup

    def register(self, spec: CommandSpec) -> None:
        """Add *spec*.

        Registering the same spec object twice is a no-op (a command
        file may import another's command).

        Raises
        ------
        CommandRegistrationError
            When another command already claims the name or an alias.
        """
        for key in (spec.name, *spec.aliases):
            existing = self._lookup.get(key)
            if existing is spec:
                return
            if existing is not None:
                raise CommandRegistrationError(
                    f"Command name '{key}' is already registered "
                    f"by {existing.callback.__module__}.{existing.callback.__qualname__}.",
                )
        self._commands[spec.name] = spec
        for key in (spec.name, *spec.aliases):
            self._lookup[key] = spec

    def register_module(self, module: ModuleType) -> int:
        """Register every decorated command in *module*; return the count."""
        count = 0
        for obj in list(vars(module).values()):
            spec = command_spec(obj)
            if spec is not None:
                self.register(spec)
                count += 1
        return count

    def get(self, name: str) -> CommandSpec | None:
        return self._lookup.get(name)

    def names(self) -> list[str]:
        return sorted(self._commands)

    def specs(self) -> list[CommandSpec]:
        return [self._commands[name] for name in self.names()]

    def discover(self, search_paths: Iterable[Path]) -> None:
        """Load and register every command file in *search_paths*."""
        builtin = _builtin_dir()
        for directory in search_paths:
            directory = Path(directory)
            for path in sorted(directory.glob(COMMAND_FILE_GLOB)):
                if directory.resolve() == builtin:
                    module = importlib.import_module(f"{_BUILTIN_PACKAGE}.{path.stem}")
                else:
                    module = load_command_file(path)
                self.register_module(module)
                self.files.append(path)
