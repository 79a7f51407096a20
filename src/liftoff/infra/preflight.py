"""Infrastructure: preflight — environment discovery before any command.

Preflight parses the global options, locates the project, layers the
configuration, selects the site alias and computes the command-file
search paths.  It returns :class:`~liftoff.core.models.Terminal` when the
run is already finished (``--version``) and
:class:`~liftoff.core.models.Continue` otherwise.

Nothing here may depend on the assembled container: :attr:`logger` is a
plain-text log usable before logging is configured.
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any, NoReturn, TextIO

from liftoff.cli import exit_codes
from liftoff.core.models import (
    ArgvInput,
    Continue,
    Environment,
    PreflightContext,
    PreflightResult,
    Terminal,
)
from liftoff.exceptions import PreflightError
from liftoff.infra.aliases import AliasManager
from liftoff.infra.autoloader import SiteAutoloader
from liftoff.infra.config import Config, load_config
from liftoff.infra.finder import ProjectFinder
from liftoff.version import __version__

GLOBAL_FLAGS: tuple[str, ...] = ("yes", "no", "simulate", "verbose", "debug", "quiet")
"""Boolean global options copied into ``options.<name>``."""


def builtin_commands_path() -> Path:
    """Directory holding the built-in command files."""
    from liftoff import commands

    return Path(commands.__file__).resolve().parent


# ---------------------------------------------------------------------------
# Early diagnostic log
# ---------------------------------------------------------------------------

class PreflightLog:
    """Plain-text log used before the container logger exists.

    Messages are discarded unless debug mode is on; the outermost
    failure boundary forces it on before reporting.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream: TextIO | None = stream
        self.debug: bool = False

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stderr

    def set_debug(self, flag: bool) -> PreflightLog:
        self.debug = bool(flag)
        return self

    def log(self, message: str) -> None:
        if not self.debug:
            return
        self.stream.write(f"[preflight] {message}\n")
        self.stream.flush()


# ---------------------------------------------------------------------------
# Global option parser
# ---------------------------------------------------------------------------

class _GlobalOptionParser(argparse.ArgumentParser):
    """Parser whose usage errors raise instead of exiting the process."""

    def error(self, message: str) -> NoReturn:
        raise PreflightError(
            f"Invalid global option: {message}",
            code=exit_codes.UNEXPECTED_ERROR,
            hint="Run 'liftoff list' to see the available options.",
        )


def build_global_parser() -> argparse.ArgumentParser:
    """Construct the parser for options accepted before any command."""
    parser = _GlobalOptionParser(prog="liftoff", add_help=False, allow_abbrev=False)
    parser.add_argument("-r", "--root", default=None)
    parser.add_argument("-l", "--uri", default=None)
    parser.add_argument("-c", "--config", action="append", default=[])
    parser.add_argument("-i", "--include", action="append", default=[])
    parser.add_argument("-d", "--debug", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")
    parser.add_argument("-q", "--quiet", action="store_true")
    parser.add_argument("-y", "--yes", action="store_true")
    parser.add_argument("-n", "--no", action="store_true")
    parser.add_argument("--simulate", action="store_true")
    parser.add_argument("--version", action="store_true")
    parser.add_argument("-h", "--help", action="store_true")
    return parser


VALUE_OPTIONS: frozenset[str] = frozenset(
    {"-r", "--root", "-l", "--uri", "-c", "--config", "-i", "--include"}
)
"""Global options whose value is the following token."""


def split_alias(argv: Sequence[str]) -> tuple[str | None, list[str]]:
    """Pull a leading ``@alias`` token out of *argv*.

    Only the first token that is neither an option nor an option's
    value is considered, so ``@`` inside command arguments is left
    alone.
    """
    args = list(argv)
    expect_value = False
    for index, token in enumerate(args):
        if expect_value:
            expect_value = False
            continue
        if token.startswith("-"):
            expect_value = token in VALUE_OPTIONS
            continue
        if token.startswith("@") and len(token) > 1:
            del args[index]
            return token, args
        break
    return None, args


# ---------------------------------------------------------------------------
# Preflight
# ---------------------------------------------------------------------------

class Preflight:
    """Default preflight collaborator.

    Parameters
    ----------
    config:
        Store to load configuration into.  The process entry point
        shares it with :class:`~liftoff.core.state.LifecycleState`.
    environment:
        Environment snapshot; captured from the process when omitted.
    logger:
        Early diagnostic log; a stderr :class:`PreflightLog` by default.
    stdout:
        Where ``--version`` is printed.
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        environment: Environment | None = None,
        logger: PreflightLog | None = None,
        stdout: TextIO | None = None,
        product_name: str = "liftoff Commandline Tool",
        version: str = __version__,
    ) -> None:
        self.config: Config = config if config is not None else Config()
        self.environment: Environment = environment or Environment.capture()
        self.logger: PreflightLog = logger or PreflightLog()
        self.finder: ProjectFinder = ProjectFinder()
        self.alias_manager: AliasManager = AliasManager()
        self._stdout = stdout
        self._product_name = product_name
        self._version = version

    # ------------------------------------------------------------------
    # Site autoloading
    # ------------------------------------------------------------------

    def load_site_autoloader(self) -> SiteAutoloader:
        """Add ``<root>/lib`` to the import path; no-op without a root."""
        return SiteAutoloader(self.finder.root).load()

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def preflight(self, argv: Sequence[str]) -> PreflightResult:
        """Discover the environment for *argv*.

        Raises
        ------
        PreflightError
            On invalid global options or an unknown ``@alias``.
        ConfigError
            When a configuration file cannot be parsed.
        """
        alias, args = split_alias(argv)
        opts, rest = build_global_parser().parse_known_args(args)
        self.logger.set_debug(opts.debug)
        self.logger.log(f"Preflight arguments: {' '.join(argv) or '(none)'}")

        if opts.version:
            stream = self._stdout if self._stdout is not None else sys.stdout
            stream.write(f"{self._product_name} {self._version}\n")
            return Terminal(exit_codes.SUCCESS)

        home = self.environment.home
        if opts.root:
            self.finder.use_root(self._absolute(opts.root))
        else:
            self.finder.locate(self.environment.cwd())

        load_config(
            self.config,
            home=home,
            root=self.finder.root,
            explicit=[self._absolute(p) for p in opts.config],
            env=self.environment.env,
        )
        self.logger.log(
            "Config sources: "
            + (",".join(str(p) for p in self.config.sources) or "(defaults)")
        )

        self.alias_manager.add_many(self.config.get("aliases") or {})
        alias_dirs = [home / ".liftoff" / "aliases"]
        if self.finder.root is not None:
            alias_dirs.append(self.finder.root / "aliases")
        self.alias_manager.load_files(alias_dirs)

        if alias is not None:
            record = self.alias_manager.select(alias)
            self.logger.log(f"Selected alias {alias}")
            if not opts.root and record.get("root"):
                self.finder.use_root(self._absolute(str(record["root"])))
            if opts.uri is None and record.get("uri"):
                opts.uri = str(record["uri"])

        self._apply_options(opts)
        command_file_paths = self._search_paths(opts.include)
        cmd_input = self._build_input(argv, opts, rest)
        return Continue(
            PreflightContext(
                command_file_paths=tuple(command_file_paths),
                input=cmd_input,
                environment=self.environment,
                finder=self.finder,
                alias_manager=self.alias_manager,
            )
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _absolute(self, value: str | Path) -> Path:
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = self.environment.cwd() / path
        return path.resolve()

    def _apply_options(self, opts: argparse.Namespace) -> None:
        """Copy explicitly given global options over configured values."""
        for name in GLOBAL_FLAGS:
            if getattr(opts, name):
                self.config.set(f"options.{name}", True)
        if self.finder.root is not None:
            self.config.set("options.root", str(self.finder.root))
        if opts.uri is not None:
            self.config.set("options.uri", opts.uri)

    def _search_paths(self, includes: Sequence[str]) -> list[Path]:
        home = self.environment.home
        candidates = [builtin_commands_path(), home / ".liftoff" / "commands"]
        if self.finder.root is not None:
            candidates.append(self.finder.root / "commands")
        candidates.extend(self._absolute(p) for p in includes)

        paths: list[Path] = []
        for candidate in candidates:
            if candidate.is_dir() and candidate not in paths:
                paths.append(candidate)
        return paths

    def _build_input(
        self,
        argv: Sequence[str],
        opts: argparse.Namespace,
        rest: list[str],
    ) -> ArgvInput:
        command: str | None = None
        arguments = list(rest)
        for index, token in enumerate(arguments):
            if not token.startswith("-"):
                command = arguments.pop(index)
                break

        if opts.help or command is None:
            if command is None:
                command = "list"
            else:
                arguments = [command]
                command = "help"

        options: dict[str, Any] = {
            name: bool(self.config.get(f"options.{name}", False))
            for name in GLOBAL_FLAGS
        }
        options["root"] = self.config.get("options.root")
        options["uri"] = self.config.get("options.uri")
        options["config"] = [str(self._absolute(p)) for p in opts.config]
        options["include"] = [str(self._absolute(p)) for p in opts.include]
        return ArgvInput(
            command=command,
            arguments=tuple(arguments),
            options=options,
            raw=tuple(argv),
        )
