"""Allow ``python -m liftoff`` invocation.

This module simply delegates to the CLI entry point so that
``python -m liftoff`` behaves identically to the ``liftoff``
console script.
"""

from __future__ import annotations

from liftoff.cli.app import cli

if __name__ == "__main__":
    cli()
