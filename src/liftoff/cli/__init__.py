"""CLI layer — process entry point, console rendering and exit codes.

This package is the outermost layer of the application.  It may import
from ``core``, ``infra`` and ``commands``; ``core`` and ``infra`` only
import the :mod:`~liftoff.cli.exit_codes` constants, and the runtime
builds its default :class:`~liftoff.cli.console.ConsoleOutput` lazily.
"""
