"""Infrastructure: process-level error and shutdown handlers.

Both handlers are bound to the container's logger, so they can only be
created from an assembled container (see
:func:`install_termination_handlers`).  Installing them touches global
process state — ``sys.excepthook``, ``threading.excepthook``,
``warnings.showwarning``, :mod:`faulthandler` and :mod:`atexit` — and
happens exactly once per run.
"""

from __future__ import annotations

import atexit
import faulthandler
import logging
import os
import sys
import threading
import warnings
from collections.abc import Callable
from dataclasses import dataclass
from types import TracebackType
from typing import TYPE_CHECKING, Any, TextIO

from liftoff.exceptions import HandlerInstallError

if TYPE_CHECKING:
    from liftoff.core.protocols import ServiceContainer
    from liftoff.core.state import LifecycleState

ABNORMAL_TERMINATION_MESSAGE: str = "liftoff command terminated abnormally."


# ---------------------------------------------------------------------------
# Error handler
# ---------------------------------------------------------------------------

class ErrorHandler:
    """Route errors raised outside the normal exception flow to the logger.

    Covers exceptions that escape to the interpreter, exceptions that
    escape worker threads, runtime warnings and hard faults.
    """

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger
        self._installed = False
        self._previous: dict[str, Any] = {}

    @property
    def installed(self) -> bool:
        return self._installed

    def install_handler(self) -> None:
        if self._installed:
            raise HandlerInstallError("Error handler is already installed.")
        self._previous = {
            "excepthook": sys.excepthook,
            "threading_excepthook": threading.excepthook,
            "showwarning": warnings.showwarning,
        }
        sys.excepthook = self.handle_exception
        threading.excepthook = self.handle_thread_exception
        warnings.showwarning = self.handle_warning
        try:
            faulthandler.enable(file=sys.__stderr__ or sys.stderr)
        except (AttributeError, ValueError, OSError) as exc:
            self._logger.debug("Fault handler not enabled: %s", exc)
        self._installed = True

    def uninstall_handler(self) -> None:
        """Restore the hooks that were active before installation."""
        if not self._installed:
            return
        sys.excepthook = self._previous["excepthook"]
        threading.excepthook = self._previous["threading_excepthook"]
        warnings.showwarning = self._previous["showwarning"]
        self._installed = False

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def handle_exception(
        self,
        exc_type: type[BaseException],
        exc: BaseException,
        tb: TracebackType | None,
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            self._previous.get("excepthook", sys.__excepthook__)(exc_type, exc, tb)
            return
        self._logger.critical(
            "Uncaught %s: %s", exc_type.__name__, exc, exc_info=(exc_type, exc, tb)
        )

    def handle_thread_exception(self, args: threading.ExceptHookArgs) -> None:
        if args.exc_type is SystemExit:
            return
        thread_name = args.thread.name if args.thread is not None else "unknown"
        self._logger.error(
            "Uncaught exception in thread %s: %s",
            thread_name,
            args.exc_value,
            exc_info=(args.exc_type, args.exc_value, args.exc_traceback),
        )

    def handle_warning(
        self,
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: TextIO | None = None,
        line: str | None = None,
    ) -> None:
        self._logger.warning(
            "%s:%s: %s: %s", filename, lineno, category.__name__, message
        )


# ---------------------------------------------------------------------------
# Shutdown handler
# ---------------------------------------------------------------------------

def _hard_exit(code: int) -> None:
    for stream in (sys.stdout, sys.stderr):
        try:
            stream.flush()
        except (AttributeError, ValueError, OSError):
            pass
    os._exit(code)


class ShutdownHandler:
    """Detect runs that ended before the command application completed.

    Parameters
    ----------
    logger:
        Container logger the diagnostic is written to.
    state:
        Lifecycle facts checked at shutdown.
    terminate:
        Called with a stored non-zero exit code to enforce it as the
        process status.  ``None`` only reports.
    """

    def __init__(
        self,
        logger: logging.Logger,
        state: LifecycleState,
        *,
        terminate: Callable[[int], Any] | None = None,
    ) -> None:
        self._logger = logger
        self._state = state
        self._terminate = terminate
        self._installed = False

    @property
    def installed(self) -> bool:
        return self._installed

    def install_handler(self) -> None:
        if self._installed:
            raise HandlerInstallError("Shutdown handler is already installed.")
        atexit.register(self.handle)
        self._installed = True

    def uninstall_handler(self) -> None:
        if not self._installed:
            return
        atexit.unregister(self.handle)
        self._installed = False

    def handle(self) -> int | None:
        """Report abnormal termination and enforce a stored exit code.

        Returns the enforced exit code, or ``None`` when the run
        completed or no non-zero code was recorded.
        """
        if self._state.is_completed():
            return None
        self._logger.error(ABNORMAL_TERMINATION_MESSAGE)
        code = self._state.stored_exit_code()
        if not code:
            return None
        if self._terminate is not None:
            self._terminate(code)
        return code


# ---------------------------------------------------------------------------
# Installer
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TerminationHandlers:
    """The pair of handlers installed for one run."""

    error: ErrorHandler
    shutdown: ShutdownHandler

    def uninstall(self) -> None:
        self.error.uninstall_handler()
        self.shutdown.uninstall_handler()


def install_termination_handlers(
    container: ServiceContainer,
    state: LifecycleState,
) -> TerminationHandlers:
    """Install error and shutdown handlers bound to the container logger."""
    logger = container.get("logger")
    error_handler = ErrorHandler(logger)
    error_handler.install_handler()

    shutdown_handler = ShutdownHandler(logger, state, terminate=_hard_exit)
    shutdown_handler.install_handler()
    return TerminationHandlers(error=error_handler, shutdown=shutdown_handler)
