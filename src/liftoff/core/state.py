"""Process-wide completion and exit-code facts.

:class:`LifecycleState` is the explicit, process-scoped context through
which the controller and the termination handlers share two facts:
whether the command application ran to completion, and the status it
returned.  Both live in a :class:`~liftoff.core.protocols.KeyValueStore`
under fixed namespaced keys, so legacy consumers that poll the
configuration store keep working.
"""

from __future__ import annotations

import warnings
from typing import Any

from liftoff.cli import exit_codes
from liftoff.core.models import ExecutionOutcome
from liftoff.core.protocols import KeyValueStore

COMPLETED_KEY: str = "runtime.execution.completed"
"""Boolean: the command application ran to completion."""

EXIT_CODE_KEY: str = "runtime.exit_code"
"""Integer: status returned by the command application."""

COMMANDFILE_PATHS_KEY: str = "runtime.commandfile.paths"
"""List of command-file search paths recorded after preflight."""

_issued_deprecations: set[str] = set()


def _warn_deprecated(key: str, message: str) -> None:
    """Emit a ``DeprecationWarning`` once per unique key."""
    if key not in _issued_deprecations:
        warnings.warn(message, DeprecationWarning, stacklevel=3)
        _issued_deprecations.add(key)


class _DictStore:
    """Bare in-memory store used when no configuration is supplied."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def has(self, key: str) -> bool:
        return key in self._data


class LifecycleState:
    """Reads and writes the outcome of one run in shared state.

    Parameters
    ----------
    store:
        Backing key/value store.  The process entry point passes the
        same :class:`~liftoff.infra.config.Config` instance preflight
        uses, so the facts are visible as ordinary configuration.
    """

    def __init__(self, store: KeyValueStore | None = None) -> None:
        self._store: KeyValueStore = store if store is not None else _DictStore()

    @property
    def store(self) -> KeyValueStore:
        return self._store

    # ------------------------------------------------------------------
    # Completion flag
    # ------------------------------------------------------------------

    def set_completed(self) -> None:
        """Mark the current run as having completed.  Idempotent."""
        self._store.set(COMPLETED_KEY, True)

    def is_completed(self) -> bool:
        return bool(self._store.get(COMPLETED_KEY, False))

    # ------------------------------------------------------------------
    # Exit code (legacy accessors)
    # ------------------------------------------------------------------

    def set_exit_code(self, code: int) -> None:
        """Store the exit code for the current run.

        .. deprecated::
            Kept for out-of-band consumers that poll shared state.  Use
            the value returned by :meth:`Runtime.run` instead.
        """
        _warn_deprecated(
            "set_exit_code",
            "LifecycleState.set_exit_code() is deprecated; "
            "use the status returned by Runtime.run().",
        )
        self.record_exit_code(code)

    def exit_code(self) -> int:
        """Return the stored exit code, or ``SUCCESS`` if none was set.

        .. deprecated::
            Kept for out-of-band consumers that poll shared state.
        """
        _warn_deprecated(
            "exit_code",
            "LifecycleState.exit_code() is deprecated; "
            "use the status returned by Runtime.run().",
        )
        return self.stored_exit_code()

    def record_exit_code(self, code: int) -> None:
        """Write the exit code without the legacy deprecation warning."""
        self._store.set(EXIT_CODE_KEY, int(code))

    def stored_exit_code(self) -> int:
        return int(self._store.get(EXIT_CODE_KEY, exit_codes.SUCCESS))

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def outcome(self) -> ExecutionOutcome:
        return ExecutionOutcome(
            status=self.stored_exit_code(),
            completed=self.is_completed(),
        )
