"""CLI console helpers with optional Rich support.

This module intentionally avoids module-level imports of optional UI
dependencies so bootstrap paths (``--help``, ``--version``) remain
functional even when Rich is not installed.
"""

from __future__ import annotations

import re
import sys
from typing import Any, TextIO

from liftoff.exceptions import EnvironmentError

_MARKUP_TAG = re.compile(r"\[/?[a-z][a-z0-9 _#.-]*\]")


def _load_rich_console_class() -> type[Any]:
	"""Return ``rich.console.Console`` class or raise ``EnvironmentError``."""
	try:
		from rich.console import Console
	except ModuleNotFoundError as exc:
		raise EnvironmentError(
			"rich is not installed. Install with: pip install rich",
		) from exc
	return Console


def get_rich_console(file: TextIO | None = None) -> Any:
	"""Create a Rich console instance targeting *file* (stderr by default)."""
	console_class = _load_rich_console_class()
	if file is None:
		return console_class(stderr=True)
	return console_class(file=file)


def strip_markup(text: str) -> str:
	"""Remove Rich ``[style]`` tags for plain-text rendering."""
	return _MARKUP_TAG.sub("", text)


class ConsoleOutput:
	"""Default output sink for command results.

	Writes to *stream* (stdout by default).  Markup is rendered through
	Rich when it is installed and stripped otherwise.
	"""

	def __init__(self, stream: TextIO | None = None) -> None:
		self._stream: TextIO | None = stream

	@property
	def stream(self) -> TextIO:
		"""The underlying text stream, resolved lazily so capture works."""
		return self._stream if self._stream is not None else sys.stdout

	def write(self, text: str, *, markup: bool = True) -> None:
		if not markup:
			self.stream.write(text)
			return
		try:
			rich_console = get_rich_console(self.stream)
		except EnvironmentError:
			self.stream.write(strip_markup(text))
			return
		rich_console.print(text, end="", soft_wrap=True, highlight=False)

	def writeln(self, text: str = "", *, markup: bool = True) -> None:
		self.write(text + "\n", markup=markup)

	def render(self, renderable: object) -> None:
		"""Print a Rich renderable (tables etc.) to the output stream."""
		rich_console = get_rich_console(self.stream)
		rich_console.print(renderable)
