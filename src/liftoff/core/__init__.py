"""Core layer — lifecycle state machine, models and collaborator contracts.

Rules
-----
* No filesystem access and no process-level hooks.
* No imports from ``infra`` or ``commands``.
* Collaborators are reached only through :mod:`liftoff.core.protocols`.
"""

from liftoff.core.models import (
    ArgvInput,
    Continue,
    Environment,
    ExecutionOutcome,
    PreflightContext,
    PreflightResult,
    RunRequest,
    Terminal,
    is_terminal,
)
from liftoff.core.runtime import Runtime
from liftoff.core.state import COMPLETED_KEY, EXIT_CODE_KEY, LifecycleState

__all__: list[str] = [
    "COMPLETED_KEY",
    "EXIT_CODE_KEY",
    "ArgvInput",
    "Continue",
    "Environment",
    "ExecutionOutcome",
    "LifecycleState",
    "PreflightContext",
    "PreflightResult",
    "RunRequest",
    "Runtime",
    "Terminal",
    "is_terminal",
]
