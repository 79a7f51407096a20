"""End-to-end tests through the process entry point (cli/app.py).

The real preflight, container, application and built-in commands run;
only the termination-handler installer is replaced by a recorder so no
process hooks are left behind.
"""

from __future__ import annotations

import io
import sys
from pathlib import Path
from typing import Any

import pytest

from liftoff.cli import app as app_module
from liftoff.cli import exit_codes
from liftoff.cli.app import build_runtime, cli, main
from liftoff.cli.console import ConsoleOutput
from liftoff.core.models import Environment
from liftoff.core.state import COMPLETED_KEY, EXIT_CODE_KEY
from liftoff.infra.config import Config
from liftoff.version import __version__

GREET_COMMANDS = '''
from liftoff.commands import argument, command


@command("greet", help="Say hello.")
@argument("name")
def greet(io, args):
    io.writeln(f"Hello {args.name} from {io.config.get('options.uri')}", markup=False)
'''


@pytest.fixture
def installed(monkeypatch: pytest.MonkeyPatch) -> list[tuple[Any, Any]]:
    calls: list[tuple[Any, Any]] = []

    def recorder(container: Any, state: Any) -> None:
        calls.append((container, state))

    monkeypatch.setattr(app_module, "install_termination_handlers", recorder)
    return calls


@pytest.fixture
def project(isolated_env: Environment) -> Path:
    root = isolated_env.working_dir
    (root / "liftoff.yml").write_text("options:\n  uri: example.test\n", encoding="utf-8")
    (root / "commands").mkdir()
    (root / "commands" / "greet_commands.py").write_text(GREET_COMMANDS, encoding="utf-8")
    return root


# ---------------------------------------------------------------------------
# main()
# ---------------------------------------------------------------------------

class TestMain:
    def test_version_flag(
        self,
        isolated_env: Environment,
        installed: list[Any],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(["--version"]) == exit_codes.SUCCESS
        assert capsys.readouterr().out == f"liftoff Commandline Tool {__version__}\n"
        assert installed == []

    def test_no_arguments_lists_commands(
        self,
        isolated_env: Environment,
        installed: list[Any],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main([]) == exit_codes.SUCCESS
        out = capsys.readouterr().out
        assert "Available commands:" in out
        assert "status (st)" in out
        assert len(installed) == 1

    def test_project_command(
        self,
        project: Path,
        installed: list[Any],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(["greet", "ada"]) == exit_codes.SUCCESS
        assert capsys.readouterr().out == "Hello ada from example.test\n"

    def test_global_uri_overrides_project(
        self,
        project: Path,
        installed: list[Any],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(["-l", "cli.test", "greet", "ada"]) == exit_codes.SUCCESS
        assert capsys.readouterr().out == "Hello ada from cli.test\n"

    def test_unknown_command(
        self,
        isolated_env: Environment,
        installed: list[Any],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(["nope"]) == exit_codes.GENERAL_ERROR
        assert "Command 'nope' is not defined." in capsys.readouterr().err

    def test_unknown_alias_reported_by_boundary(
        self,
        isolated_env: Environment,
        installed: list[Any],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(["@nowhere", "status"]) == exit_codes.GENERAL_ERROR
        err = capsys.readouterr().err
        assert "[preflight] AliasNotFoundError: Unknown site alias @nowhere." in err
        assert installed == []

    def test_invalid_global_option(
        self,
        isolated_env: Environment,
        installed: list[Any],
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        assert main(["--root"]) == exit_codes.UNEXPECTED_ERROR
        assert "Invalid global option" in capsys.readouterr().err

    def test_explicit_output_sink(
        self, isolated_env: Environment, installed: list[Any]
    ) -> None:
        stream = io.StringIO()
        assert main(["version"], ConsoleOutput(stream)) == exit_codes.SUCCESS
        assert stream.getvalue() == f"liftoff Commandline Tool {__version__}\n"


# ---------------------------------------------------------------------------
# build_runtime()
# ---------------------------------------------------------------------------

class TestBuildRuntime:
    def test_completion_readable_through_config(self, isolated_env: Environment) -> None:
        calls: list[Any] = []
        config = Config()
        runtime = build_runtime(
            config=config,
            environment=isolated_env,
            handler_installer=lambda container, state: calls.append((container, state)),
        )
        status = runtime.run(["version"], ConsoleOutput(io.StringIO()))
        assert status == exit_codes.SUCCESS
        assert config.get(COMPLETED_KEY) is True
        assert config.get(EXIT_CODE_KEY) == exit_codes.SUCCESS
        ((container, state),) = calls
        assert container.get("state") is state
        assert container.get("config") is config

    def test_closed_stderr_does_not_escape(self, isolated_env: Environment) -> None:
        class ClosedStream(io.StringIO):
            def write(self, text: str) -> int:
                raise BrokenPipeError("closed")

        runtime = build_runtime(
            environment=isolated_env,
            stderr=ClosedStream(),
            handler_installer=lambda container, state: None,
        )
        status = runtime.run(["@missing", "status"], ConsoleOutput(io.StringIO()))
        assert status == exit_codes.GENERAL_ERROR

    def test_explicit_config_file(self, isolated_env: Environment, tmp_path: Path) -> None:
        extra = tmp_path / "extra.yml"
        extra.write_text("options:\n  uri: from-extra\n", encoding="utf-8")
        config = Config()
        runtime = build_runtime(
            config=config,
            environment=isolated_env,
            handler_installer=lambda container, state: None,
        )
        runtime.run(["-c", str(extra), "version"], ConsoleOutput(io.StringIO()))
        assert config.get("options.uri") == "from-extra"
        assert extra in config.sources


# ---------------------------------------------------------------------------
# Console script
# ---------------------------------------------------------------------------

class TestConsoleScript:
    def test_exits_with_status(
        self,
        isolated_env: Environment,
        installed: list[Any],
        monkeypatch: pytest.MonkeyPatch,
        capsys: pytest.CaptureFixture[str],
    ) -> None:
        monkeypatch.setattr(sys, "argv", ["liftoff", "nope"])
        with pytest.raises(SystemExit) as exc_info:
            cli()
        assert exc_info.value.code == exit_codes.GENERAL_ERROR
