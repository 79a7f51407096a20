"""Per-invocation I/O handed to every command callback."""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any

from liftoff.exceptions import EnvironmentError

if TYPE_CHECKING:
    from liftoff.core.models import ArgvInput
    from liftoff.core.protocols import KeyValueStore, OutputSink, ServiceContainer


def _import_questionary() -> Any:
    """Import questionary lazily for interactive prompts."""
    try:
        import questionary
    except ModuleNotFoundError as exc:
        raise EnvironmentError(
            "questionary is not installed. Install with: pip install questionary",
        ) from exc
    return questionary


class CommandIO:
    """Output, logger, configuration and prompts for one command run."""

    def __init__(
        self,
        container: ServiceContainer,
        output: OutputSink,
        input: ArgvInput,
    ) -> None:
        self.container = container
        self.output = output
        self.input = input
        self.logger: logging.Logger = container.get("logger")
        self.config: KeyValueStore = container.get("config")

    @property
    def simulate(self) -> bool:
        return bool(self.config.get("options.simulate", False))

    def write(self, text: str, *, markup: bool = True) -> None:
        self.output.write(text, markup=markup)

    def writeln(self, text: str = "", *, markup: bool = True) -> None:
        self.output.writeln(text, markup=markup)

    def confirm(self, question: str, default: bool = False) -> bool:
        """Ask a yes/no question.

        ``--yes`` and ``--no`` answer without prompting; a non-interactive
        stdin returns *default*.  Ctrl+C propagates as
        ``KeyboardInterrupt``.
        """
        if self.config.get("options.yes", False):
            return True
        if self.config.get("options.no", False):
            return False
        if sys.stdin is None or not sys.stdin.isatty():
            return default
        questionary = _import_questionary()
        return bool(questionary.confirm(question, default=default).unsafe_ask())
