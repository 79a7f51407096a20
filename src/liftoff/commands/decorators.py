"""Command declaration decorators.

Usage::

    @command("greet", help="Say hello.")
    @argument("name")
    @option("--shout", action="store_true")
    def greet(io: CommandIO, args: argparse.Namespace) -> int | None:
        ...

``@argument`` and ``@option`` take the same parameters as
:meth:`argparse.ArgumentParser.add_argument`.  ``@command`` must be the
outermost decorator.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

COMMAND_ATTR: str = "__liftoff_command__"
_PARAMS_ATTR: str = "__liftoff_params__"

CommandCallback = Callable[..., "int | None"]


@dataclass(frozen=True, slots=True)
class ParameterSpec:
    """One ``add_argument`` call recorded by a decorator."""

    flags: tuple[str, ...]
    kwargs: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class CommandSpec:
    """Declaration of a single command."""

    name: str
    callback: CommandCallback
    help: str = ""
    aliases: tuple[str, ...] = ()
    parameters: tuple[ParameterSpec, ...] = ()


def _push_parameter(fn: CommandCallback, spec: ParameterSpec) -> CommandCallback:
    params: list[ParameterSpec] = list(getattr(fn, _PARAMS_ATTR, []))
    params.append(spec)
    setattr(fn, _PARAMS_ATTR, params)
    return fn


def argument(name: str, **kwargs: Any) -> Callable[[CommandCallback], CommandCallback]:
    """Declare a positional argument."""

    def decorator(fn: CommandCallback) -> CommandCallback:
        return _push_parameter(fn, ParameterSpec(flags=(name,), kwargs=kwargs))

    return decorator


def option(*flags: str, **kwargs: Any) -> Callable[[CommandCallback], CommandCallback]:
    """Declare an option such as ``-f/--force``."""

    def decorator(fn: CommandCallback) -> CommandCallback:
        return _push_parameter(fn, ParameterSpec(flags=flags, kwargs=kwargs))

    return decorator


def command(
    name: str | None = None,
    *,
    help: str | None = None,
    aliases: tuple[str, ...] | list[str] = (),
) -> Callable[[CommandCallback], CommandCallback]:
    """Mark *fn* as a command.

    The name defaults to the function name with underscores turned into
    dashes; the help text defaults to the first docstring line.
    """

    def decorator(fn: CommandCallback) -> CommandCallback:
        doc = inspect.getdoc(fn) or ""
        params: list[ParameterSpec] = getattr(fn, _PARAMS_ATTR, [])
        spec = CommandSpec(
            name=name or fn.__name__.replace("_", "-"),
            callback=fn,
            help=help if help is not None else (doc.splitlines()[0] if doc else ""),
            aliases=tuple(aliases),
            # Decorators apply bottom-up; restore source order.
            parameters=tuple(reversed(params)),
        )
        setattr(fn, COMMAND_ATTR, spec)
        return fn

    return decorator


def command_spec(obj: object) -> CommandSpec | None:
    """Return the :class:`CommandSpec` attached to *obj*, if any."""
    spec = getattr(obj, COMMAND_ATTR, None)
    return spec if isinstance(spec, CommandSpec) else None
