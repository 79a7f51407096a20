"""Infrastructure: logger configuration for the assembled container.

Configures the ``liftoff`` stdlib logger once per process.  Records are
rendered through ``rich.logging.RichHandler`` on stderr when Rich is
installed, and through a plain ``StreamHandler`` otherwise, so that
bootstrap paths keep working without optional UI packages.
"""

from __future__ import annotations

import logging
import sys
from typing import TextIO

LOGGER_NAME: str = "liftoff"

_LEVELS: dict[str, int] = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.INFO,
    "debug": logging.DEBUG,
}


def verbosity_from_options(
    *, quiet: bool = False, verbose: bool = False, debug: bool = False
) -> str:
    """Collapse the verbosity flags into one level name; ``debug`` wins."""
    if debug:
        return "debug"
    if verbose:
        return "verbose"
    if quiet:
        return "quiet"
    return "normal"


def _build_handler(stream: TextIO) -> logging.Handler:
    try:
        from rich.console import Console
        from rich.logging import RichHandler
    except ModuleNotFoundError:
        handler: logging.Handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
        return handler
    return RichHandler(
        console=Console(file=stream),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )


def configure_logging(
    verbosity: str = "normal", *, stream: TextIO | None = None
) -> logging.Logger:
    """Configure and return the ``liftoff`` logger.

    Safe to call multiple times: the handler is replaced, never stacked.
    """
    level = _LEVELS.get(verbosity, logging.WARNING)
    logger = logging.getLogger(LOGGER_NAME)
    for existing in list(logger.handlers):
        if getattr(existing, "_liftoff_handler", False):
            logger.removeHandler(existing)

    handler = _build_handler(stream if stream is not None else sys.stderr)
    handler._liftoff_handler = True  # type: ignore[attr-defined]
    handler.setLevel(level)
    logger.addHandler(handler)
    logger.setLevel(level)
    logger.propagate = False
    return logger
