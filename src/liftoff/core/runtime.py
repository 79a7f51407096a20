"""Lifecycle controller — sequences one run from argv to exit code.

Phases, in strict order (none repeats within a run):

1. Preflight — may end the run with a terminal status.
2. Discovery recording — command-file search paths into config.
3. Autoload — site-specific import paths.
4. Application construction.
5. Dependency assembly.
6. Termination handlers — only once a container (and logger) exists.
7. URI refinement, global option wiring, command registration.
8. Dispatch.
9. Outcome recording — completed flag and exit code.

:meth:`Runtime.run` is the last-resort failure boundary; it never lets
an ``Exception`` escape.  Failures after step 6 are expected to be
handled by the installed handlers and by the command application.
"""

from __future__ import annotations

import contextlib
import sys
from collections.abc import Sequence
from typing import TYPE_CHECKING

from liftoff.cli import exit_codes
from liftoff.core.models import is_terminal
from liftoff.core.state import COMMANDFILE_PATHS_KEY, LifecycleState
from liftoff.exceptions import LiftoffError
from liftoff.version import __version__

if TYPE_CHECKING:
    from liftoff.core.protocols import (
        ApplicationFactory,
        DependencyAssembler,
        HandlerInstaller,
        OutputFactory,
        OutputSink,
        Preflight,
    )

PRODUCT_NAME: str = "liftoff Commandline Tool"


def _default_output() -> OutputSink:
    from liftoff.cli.console import ConsoleOutput

    return ConsoleOutput()


def _last_resort_write(message: str) -> None:
    """Write *message* to the interpreter's original stderr, if it still works."""
    stream = sys.__stderr__
    if stream is None:
        return
    with contextlib.suppress(OSError, ValueError):
        stream.write(f"{message}\n")
        stream.flush()


def failure_status(exc: BaseException) -> int:
    """Extract the exit status carried by *exc*.

    Falls back to :data:`exit_codes.UNEXPECTED_ERROR` when the failure
    carries no integer code, or carries ``0``: an uncaught failure must
    never look like success.
    """
    if isinstance(exc, KeyboardInterrupt):
        return exit_codes.KEYBOARD_INTERRUPT
    code = getattr(exc, "code", None)
    if isinstance(code, int) and not isinstance(code, bool) and code != 0:
        return code
    return exit_codes.UNEXPECTED_ERROR


def failure_message(exc: BaseException) -> str:
    """Render *exc* as a single diagnostic message."""
    if isinstance(exc, KeyboardInterrupt):
        return "Aborted by user."
    message = f"{type(exc).__name__}: {exc}"
    if isinstance(exc, LiftoffError) and exc.hint:
        message = f"{message}\nHint: {exc.hint}"
    return message


class Runtime:
    """Control the liftoff runtime: preflight, dispatch, termination.

    Parameters
    ----------
    preflight:
        Environment discovery collaborator.  Its ``logger`` is the
        diagnostic channel of last resort.
    assembler:
        Builds the service container once preflight succeeded.
    state:
        Shared completion / exit-code facts; the runtime is their only
        writer during normal operation.
    application_factory:
        Builds the command application from ``(name, version)``.
    handler_installer:
        Installs error and shutdown handlers given the assembled
        container.  Injectable so tests never touch process hooks.
    output_factory:
        Builds the output sink when :meth:`run` receives none.
    """

    def __init__(
        self,
        preflight: Preflight,
        assembler: DependencyAssembler,
        state: LifecycleState,
        *,
        application_factory: ApplicationFactory,
        handler_installer: HandlerInstaller,
        output_factory: OutputFactory | None = None,
        product_name: str = PRODUCT_NAME,
        version: str = __version__,
    ) -> None:
        self._preflight = preflight
        self._assembler = assembler
        self._state = state
        self._application_factory = application_factory
        self._handler_installer = handler_installer
        self._output_factory: OutputFactory = output_factory or _default_output
        self._product_name = product_name
        self._version = version

    @property
    def state(self) -> LifecycleState:
        return self._state

    # ------------------------------------------------------------------
    # Last-resort boundary
    # ------------------------------------------------------------------

    def run(self, argv: Sequence[str], output: OutputSink | None = None) -> int:
        """Run the application, catching any error that escapes.

        Typically this only catches code that fails fast during
        preflight or dependency assembly; later code handles its own
        exceptions.
        """
        try:
            if output is None:
                output = self._output_factory()
            status = self.execute(argv, output)
        except (Exception, KeyboardInterrupt) as exc:  # noqa: BLE001
            status = failure_status(exc)
            # Uncaught errors can happen before the logger and config
            # are initialized; force the preflight log on and report.
            self._report(failure_message(exc))
        return status

    def _report(self, message: str) -> None:
        try:
            self._preflight.logger.set_debug(True).log(message)
        except Exception:  # noqa: BLE001
            _last_resort_write(message)

    # ------------------------------------------------------------------
    # Phase sequencing
    # ------------------------------------------------------------------

    def execute(self, argv: Sequence[str], output: OutputSink) -> int:
        """Start up, dispatch one command and record the outcome."""
        result = self._preflight.preflight(argv)
        if is_terminal(result):
            return result.status

        context = result.context
        search_paths = list(context.command_file_paths)
        self._preflight.logger.log(
            "Commandfile search paths: " + ",".join(str(p) for p in search_paths)
        )
        self._preflight.config.set(
            COMMANDFILE_PATHS_KEY, [str(p) for p in search_paths]
        )

        loader = self._preflight.load_site_autoloader()

        application = self._application_factory(self._product_name, self._version)

        container = self._assembler.init_container(
            application,
            self._preflight.config,
            context.input,
            output,
            loader,
            context.finder,
            context.alias_manager,
        )

        # The handlers are bound to the container's logger, so they
        # cannot be installed any earlier than this.
        self._handler_installer(container, self._state)

        application.refine_uri_selection(context.environment.cwd())
        application.configure_global_options()
        application.configure_and_register_commands(
            context.input, output, search_paths
        )

        status = application.run(context.input, output)

        self._state.set_completed()
        self._state.record_exit_code(status)
        return status
