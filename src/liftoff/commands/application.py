"""The command application: registration, URI selection and dispatch.

The lifecycle controller constructs one :class:`Application` per run,
hands it to the dependency assembler (which calls
:meth:`Application.set_container`), and then drives it through
:meth:`refine_uri_selection`, :meth:`configure_global_options`,
:meth:`configure_and_register_commands` and :meth:`run`.

Command-level failures are handled here and mapped to exit codes; they
never reach the controller's last-resort boundary.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any, NoReturn

from liftoff.cli import exit_codes
from liftoff.commands.io import CommandIO
from liftoff.commands.registry import CommandRegistry
from liftoff.exceptions import (
    CommandError,
    CommandNotFoundError,
    DependencyAssemblyError,
    LiftoffError,
)

if TYPE_CHECKING:
    from liftoff.commands.decorators import CommandSpec
    from liftoff.core.models import ArgvInput
    from liftoff.core.protocols import KeyValueStore, OutputSink, ServiceContainer

DEFAULT_URI: str = "default"


@dataclass(frozen=True, slots=True)
class GlobalOption:
    """A global option as shown in ``liftoff list``."""

    name: str
    flags: str
    help: str


GLOBAL_OPTIONS: tuple[GlobalOption, ...] = (
    GlobalOption("root", "-r, --root=ROOT", "Project root to operate on."),
    GlobalOption("uri", "-l, --uri=URI", "Site URI within the project."),
    GlobalOption("config", "-c, --config=FILE", "Additional config file (repeatable)."),
    GlobalOption("include", "-i, --include=DIR", "Additional command-file directory (repeatable)."),
    GlobalOption("yes", "-y, --yes", "Assume 'yes' for all prompts."),
    GlobalOption("no", "-n, --no", "Assume 'no' for all prompts."),
    GlobalOption("simulate", "--simulate", "Report actions without performing them."),
    GlobalOption("verbose", "-v, --verbose", "Show informational log messages."),
    GlobalOption("debug", "-d, --debug", "Show debug log messages."),
    GlobalOption("quiet", "-q, --quiet", "Only show errors."),
)


class _CommandParser(argparse.ArgumentParser):
    """Parser whose usage errors become :class:`CommandError`."""

    def error(self, message: str) -> NoReturn:
        raise CommandError(
            f"{self.prog}: {message}",
            code=exit_codes.UNEXPECTED_ERROR,
            hint=self.format_usage().strip(),
        )


class Application:
    """Owns command registration and dispatch.

    Parameters
    ----------
    name:
        Product name shown by ``list`` and ``version``.
    version:
        Running version string.
    """

    def __init__(self, name: str, version: str) -> None:
        self.name = name
        self.version = version
        self.registry = CommandRegistry()
        self.global_options: tuple[GlobalOption, ...] = ()
        self._container: ServiceContainer | None = None
        self._parser: _CommandParser | None = None
        self._subparsers: dict[str, _CommandParser] = {}

    # ------------------------------------------------------------------
    # Container access
    # ------------------------------------------------------------------

    def set_container(self, container: ServiceContainer) -> None:
        self._container = container

    @property
    def container(self) -> ServiceContainer:
        if self._container is None:
            raise DependencyAssemblyError(
                "Application used before the container was assembled."
            )
        return self._container

    @property
    def config(self) -> KeyValueStore:
        return self.container.get("config")

    @property
    def logger(self) -> logging.Logger:
        return self.container.get("logger")

    # ------------------------------------------------------------------
    # Startup steps driven by the runtime
    # ------------------------------------------------------------------

    def refine_uri_selection(self, cwd: Path) -> None:
        """Pick a site URI when none was given explicitly.

        Preference: the selected alias's ``uri``, then the ``sites/<name>``
        directory containing *cwd*, then ``"default"``.
        """
        config = self.config
        if config.get("options.uri"):
            return
        uri: str | None = None
        alias = getattr(self.container.get("alias_manager"), "self_alias", None)
        if alias and alias.get("uri"):
            uri = str(alias["uri"])
        if uri is None:
            uri = self._uri_from_cwd(cwd)
        config.set("options.uri", uri)
        self.logger.debug("Selected site URI: %s", uri)

    def _uri_from_cwd(self, cwd: Path) -> str:
        root = getattr(self.container.get("finder"), "root", None)
        if root is None:
            return DEFAULT_URI
        sites = Path(root) / "sites"
        try:
            relative = cwd.resolve().relative_to(sites.resolve())
        except ValueError:
            return DEFAULT_URI
        return relative.parts[0] if relative.parts else DEFAULT_URI

    def configure_global_options(self) -> None:
        """Register global options and copy their values into config."""
        self.global_options = GLOBAL_OPTIONS
        config = self.config
        input: ArgvInput = self.container.get("input")
        for name, value in input.options.items():
            if value is None:
                continue
            config.set(f"options.{name}", value)

    def configure_and_register_commands(
        self,
        input: ArgvInput,
        output: OutputSink,
        search_paths: Sequence[Path],
    ) -> None:
        """Discover command files and build the command parser."""
        self.registry.discover(search_paths)
        self.logger.debug(
            "Registered %d command(s) from %d file(s).",
            len(self.registry),
            len(self.registry.files),
        )
        self._build_parser()

    def _build_parser(self) -> _CommandParser:
        parser = _CommandParser(prog="liftoff", add_help=False)
        subparsers = parser.add_subparsers(dest="command", metavar="<command>")
        self._subparsers = {}
        for spec in self.registry.specs():
            sub = subparsers.add_parser(
                spec.name,
                aliases=list(spec.aliases),
                help=spec.help,
                description=spec.help,
                add_help=False,
            )
            for param in spec.parameters:
                sub.add_argument(*param.flags, **param.kwargs)
            self._subparsers[spec.name] = sub
        self._parser = parser
        return parser

    def command_usage(self, name: str) -> str:
        """Return the full help text for command *name*."""
        spec = self._find(name)
        return self._subparsers[spec.name].format_help()

    def _find(self, name: str) -> CommandSpec:
        spec = self.registry.get(name)
        if spec is None:
            raise CommandNotFoundError(
                f"Command '{name}' is not defined.",
                hint="Run 'liftoff list' to see the available commands.",
            )
        return spec

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def run(self, input: ArgvInput, output: OutputSink) -> int:
        """Run the selected command and return its exit status."""
        container = self.container
        logger = self.logger
        parser = self._parser or self._build_parser()

        tokens = input.tokens()
        name = tokens[0] if tokens else "list"
        try:
            spec = self._find(name)
            args = parser.parse_args(tokens or [name])
            io = CommandIO(container, output, input)
            result: Any = spec.callback(io, args)
        except LiftoffError as exc:
            logger.error("%s", exc)
            if exc.hint:
                logger.error("Hint: %s", exc.hint)
            return exc.code or exit_codes.GENERAL_ERROR
        except KeyboardInterrupt:
            logger.error("Aborted by user.")
            return exit_codes.KEYBOARD_INTERRUPT
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error in command '%s'.", name)
            return exit_codes.UNEXPECTED_ERROR

        if result is None:
            return exit_codes.SUCCESS
        return int(result)
