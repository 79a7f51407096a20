"""CLI application entry point for liftoff.

This module wires the default collaborators into a
:class:`~liftoff.core.runtime.Runtime` and hands it the process
arguments.  The runtime is the error boundary; this module is the only
place that turns its status into the OS process exit code.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from typing import TYPE_CHECKING, TextIO

from liftoff.commands.application import Application
from liftoff.core.models import Environment, RunRequest
from liftoff.core.runtime import PRODUCT_NAME, Runtime
from liftoff.core.state import LifecycleState
from liftoff.infra.config import Config
from liftoff.infra.container import DependencyInjection
from liftoff.infra.handlers import install_termination_handlers
from liftoff.infra.preflight import Preflight, PreflightLog
from liftoff.version import __version__

if TYPE_CHECKING:
    from liftoff.core.protocols import HandlerInstaller, OutputSink


def build_runtime(
    *,
    config: Config | None = None,
    environment: Environment | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
    handler_installer: HandlerInstaller | None = None,
) -> Runtime:
    """Wire the default collaborators.

    The configuration store doubles as the lifecycle state's backing
    store, so ``runtime.execution.completed`` and ``runtime.exit_code``
    are readable through the configuration like any other key.
    """
    config = config if config is not None else Config()
    state = LifecycleState(config)
    preflight = Preflight(
        config,
        environment=environment,
        logger=PreflightLog(stderr),
        stdout=stdout,
        product_name=PRODUCT_NAME,
        version=__version__,
    )
    return Runtime(
        preflight,
        DependencyInjection(state),
        state,
        application_factory=Application,
        handler_installer=handler_installer or install_termination_handlers,
    )


def main(
    argv: Sequence[str] | None = None,
    output: OutputSink | None = None,
) -> int:
    """Run the liftoff CLI.

    Parameters
    ----------
    argv:
        Explicit argument list.  When ``None`` (default), ``sys.argv[1:]``
        is used.  Accepting *argv* enables deterministic testing without
        monkeypatching.
    output:
        Output sink; the runtime builds a stdout console when omitted.

    Returns
    -------
    int
        OS process exit code.
    """
    request = RunRequest.from_argv(argv, output)
    return build_runtime().run(request.argv, request.output)


def cli() -> None:
    """Console-script entry point: exit with the runtime's status."""
    sys.exit(main())
