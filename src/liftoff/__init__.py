"""liftoff — execution-lifecycle controller for command-line applications.

Sequences preflight, dependency assembly, termination handling and
command dispatch into one deterministic run with a single exit code.
"""

from liftoff.version import __version__

__all__: list[str] = ["__version__"]
