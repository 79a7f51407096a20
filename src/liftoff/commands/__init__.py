"""Command layer — declaration, discovery and dispatch of commands.

Command files declare commands with :func:`command`, :func:`argument`
and :func:`option`; the :class:`Application` discovers them in the
command-file search paths and runs the one selected on the command line.
"""

from liftoff.commands.application import GLOBAL_OPTIONS, Application, GlobalOption
from liftoff.commands.decorators import CommandSpec, ParameterSpec, argument, command, option
from liftoff.commands.io import CommandIO
from liftoff.commands.registry import CommandRegistry

__all__: list[str] = [
    "GLOBAL_OPTIONS",
    "Application",
    "CommandIO",
    "CommandRegistry",
    "CommandSpec",
    "GlobalOption",
    "ParameterSpec",
    "argument",
    "command",
    "option",
]
