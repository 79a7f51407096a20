"""Built-in commands: ``list``, ``help``, ``version`` and ``status``."""

from __future__ import annotations

import argparse
import platform
from typing import TYPE_CHECKING

from liftoff.cli import exit_codes
from liftoff.commands.decorators import argument, command
from liftoff.commands.io import CommandIO
from liftoff.core.state import COMMANDFILE_PATHS_KEY

if TYPE_CHECKING:
    from liftoff.commands.application import Application


def _application(io: CommandIO) -> Application:
    return io.container.get("application")


# ---------------------------------------------------------------------------
# list / help / version
# ---------------------------------------------------------------------------

@command("list", help="List available commands.")
def list_commands(io: CommandIO, args: argparse.Namespace) -> int:
    app = _application(io)
    io.writeln(f"[bold]{app.name}[/bold] {app.version}")
    io.writeln()
    io.writeln("[yellow]Global options:[/yellow]")
    for opt in app.global_options:
        io.writeln(f"  {opt.flags:<24} {opt.help}", markup=False)
    io.writeln()
    io.writeln("[yellow]Available commands:[/yellow]")
    for spec in app.registry.specs():
        label = spec.name
        if spec.aliases:
            label = f"{label} ({', '.join(spec.aliases)})"
        io.writeln(f"  {label:<24} {spec.help}", markup=False)
    return exit_codes.SUCCESS


@command("help", help="Display usage for a command.")
@argument("command_name", metavar="command", help="Command to describe.")
def help_command(io: CommandIO, args: argparse.Namespace) -> int:
    io.write(_application(io).command_usage(args.command_name), markup=False)
    return exit_codes.SUCCESS


@command("version", help="Show the liftoff version.")
def version(io: CommandIO, args: argparse.Namespace) -> int:
    app = _application(io)
    io.writeln(f"{app.name} {app.version}", markup=False)
    return exit_codes.SUCCESS


# ---------------------------------------------------------------------------
# status
# ---------------------------------------------------------------------------

def _os_description() -> str:
    system_raw = platform.system()
    system_display = {
        "Windows": "Windows",
        "Linux": "Linux",
        "Darwin": "macOS",
    }.get(system_raw, system_raw)
    return f"{system_display} {platform.release()} ({platform.machine()})"


def collect_status(io: CommandIO) -> list[tuple[str, str]]:
    """Return (label, value) rows describing the current run."""
    app = _application(io)
    config = io.config
    alias_manager = io.container.get("alias_manager")
    selected = getattr(alias_manager, "selected", None)
    sources = getattr(config, "sources", [])
    paths = config.get(COMMANDFILE_PATHS_KEY, []) or []
    return [
        ("liftoff", app.version),
        ("Python", platform.python_version()),
        ("OS", _os_description()),
        ("Root", str(config.get("options.root") or "(none)")),
        ("URI", str(config.get("options.uri") or "(none)")),
        ("Alias", f"@{selected}" if selected else "(none)"),
        ("Config", ", ".join(str(s) for s in sources) or "(defaults)"),
        ("Command paths", ", ".join(str(p) for p in paths) or "(none)"),
    ]


def _render_plain(io: CommandIO, rows: list[tuple[str, str]]) -> None:
    width = max(len(label) for label, _ in rows)
    for label, value in rows:
        io.writeln(f"{label:<{width}}  {value}", markup=False)


@command("status", help="Show the discovered environment.", aliases=("st",))
def status(io: CommandIO, args: argparse.Namespace) -> int:
    rows = collect_status(io)
    render = getattr(io.output, "render", None)
    try:
        from rich.markup import escape
        from rich.table import Table
    except ModuleNotFoundError:
        Table = None  # noqa: N806

    if Table is None or render is None:
        _render_plain(io, rows)
        return exit_codes.SUCCESS

    table = Table(
        title="liftoff status",
        show_header=True,
        header_style="bold cyan",
        border_style="dim",
    )
    table.add_column("Component", style="bold", min_width=12)
    table.add_column("Value", min_width=20)
    for label, value in rows:
        table.add_row(label, escape(value))
    render(table)
    return exit_codes.SUCCESS

