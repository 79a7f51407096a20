"""Domain models for liftoff.

All models are **frozen** dataclasses — immutable value objects with no
behaviour beyond data access.  Collaborator handles (finder, alias
manager, output sink) are carried opaquely; the lifecycle controller
only reads the fields it needs.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from typing import TypeGuard

    from liftoff.core.protocols import AliasResolver, BootstrapLocator, OutputSink


# ---------------------------------------------------------------------------
# Raw process input
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class RunRequest:
    """The raw process input, consumed once by the controller."""

    argv: tuple[str, ...]
    """Argument vector without the program name."""

    output: OutputSink | None = None
    """Output sink; ``None`` lets the controller build the default one."""

    @classmethod
    def from_argv(
        cls,
        argv: Sequence[str] | None = None,
        output: OutputSink | None = None,
    ) -> RunRequest:
        """Build a request from *argv*, defaulting to ``sys.argv[1:]``."""
        args = sys.argv[1:] if argv is None else argv
        return cls(argv=tuple(args), output=output)


# ---------------------------------------------------------------------------
# Discovered environment
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Environment:
    """Snapshot of the process environment taken during preflight."""

    working_dir: Path
    home: Path
    env: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def capture(cls) -> Environment:
        return cls(
            working_dir=Path.cwd(),
            home=Path.home(),
            env=dict(os.environ),
        )

    def cwd(self) -> Path:
        return self.working_dir


@dataclass(frozen=True, slots=True)
class ArgvInput:
    """Resolved input: global options stripped, command selected."""

    command: str | None
    """Command name, or ``None`` when none was given."""

    arguments: tuple[str, ...] = ()
    """Arguments following the command name."""

    options: Mapping[str, Any] = field(default_factory=dict)
    """Global option values resolved during preflight."""

    raw: tuple[str, ...] = ()
    """The unmodified argument vector."""

    def tokens(self) -> list[str]:
        """Return ``[command, *arguments]`` for the command parser."""
        if self.command is None:
            return list(self.arguments)
        return [self.command, *self.arguments]


# ---------------------------------------------------------------------------
# Preflight result (tagged union)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PreflightContext:
    """Everything preflight discovered that later phases consume."""

    command_file_paths: tuple[Path, ...]
    input: ArgvInput
    environment: Environment
    finder: BootstrapLocator
    alias_manager: AliasResolver


@dataclass(frozen=True, slots=True)
class Continue:
    """Preflight succeeded; the run proceeds with *context*."""

    context: PreflightContext


@dataclass(frozen=True, slots=True)
class Terminal:
    """Preflight finished the run; *status* is the final exit code."""

    status: int


PreflightResult = Union[Continue, Terminal]


def is_terminal(result: PreflightResult) -> TypeGuard[Terminal]:
    """Return ``True`` when *result* ends the run."""
    return isinstance(result, Terminal)


# ---------------------------------------------------------------------------
# Outcome
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class ExecutionOutcome:
    """Snapshot of the completion facts recorded in shared state."""

    status: int
    """Stored exit code (``SUCCESS`` when never set)."""

    completed: bool
    """Whether the command application ran to completion."""
