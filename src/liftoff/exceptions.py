"""Custom exception hierarchy for liftoff.

All exceptions that cross layer boundaries must inherit from
:class:`LiftoffError`.  Each carries an optional process exit
``code`` so that the outermost boundary can translate a failure into
a status without knowing its concrete type.

Hierarchy
---------
LiftoffError
├── ConfigError
├── PreflightError
│   └── AliasNotFoundError
├── DependencyAssemblyError
│   └── ServiceNotFoundError
├── CommandError
│   ├── CommandNotFoundError
│   └── CommandRegistrationError
├── HandlerInstallError
└── EnvironmentError
"""

from __future__ import annotations


class LiftoffError(Exception):
    """Base exception for all liftoff errors.

    Every user-visible error condition must map to a subclass of this
    exception so that error boundaries can render a clean message
    without leaking internal stack traces.
    """

    default_code: int = 1

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message)
        self.code: int = self.default_code if code is None else code
        """Process exit status this failure maps to."""
        self.hint: str | None = hint
        """Optional actionable guidance shown below the error message."""


# --- Configuration ---------------------------------------------------------

class ConfigError(LiftoffError):
    """Raised when a configuration file cannot be read or parsed."""


# --- Preflight -------------------------------------------------------------

class PreflightError(LiftoffError):
    """Raised when environment discovery fails before any command runs."""


class AliasNotFoundError(PreflightError):
    """Raised when a requested site alias is not defined."""


# --- Dependency assembly ---------------------------------------------------

class DependencyAssemblyError(LiftoffError):
    """Raised when the service container cannot be built."""


class ServiceNotFoundError(DependencyAssemblyError):
    """Raised when a service is requested that the container does not hold."""


# --- Commands --------------------------------------------------------------

class CommandError(LiftoffError):
    """Raised by commands to report a handled, user-facing failure."""


class CommandNotFoundError(CommandError):
    """Raised when the requested command is not registered."""


class CommandRegistrationError(CommandError):
    """Raised when two commands claim the same name or alias."""


# --- Termination handling --------------------------------------------------

class HandlerInstallError(LiftoffError):
    """Raised when a termination handler is installed more than once."""


# --- Environment / tooling -------------------------------------------------

class EnvironmentError(LiftoffError):
    """Raised when an optional runtime dependency is not available."""
