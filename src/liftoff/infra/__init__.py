"""Infrastructure layer — default collaborators of the lifecycle controller.

This layer touches the filesystem, the environment and process-level
hooks.  It implements the contracts in :mod:`liftoff.core.protocols`.

Rules
-----
* No imports from ``cli`` other than :mod:`liftoff.cli.exit_codes`.
* No user-facing output except the preflight log and ``--version``.
"""

from liftoff.infra.aliases import AliasManager
from liftoff.infra.autoloader import SiteAutoloader
from liftoff.infra.config import Config, load_config
from liftoff.infra.container import Container, DependencyInjection
from liftoff.infra.finder import ProjectFinder
from liftoff.infra.handlers import (
    ErrorHandler,
    ShutdownHandler,
    TerminationHandlers,
    install_termination_handlers,
)
from liftoff.infra.preflight import Preflight, PreflightLog

__all__: list[str] = [
    "AliasManager",
    "Config",
    "Container",
    "DependencyInjection",
    "ErrorHandler",
    "Preflight",
    "PreflightLog",
    "ProjectFinder",
    "ShutdownHandler",
    "SiteAutoloader",
    "TerminationHandlers",
    "install_termination_handlers",
    "load_config",
]
