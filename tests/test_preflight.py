"""Tests for preflight discovery (infra/preflight.py, finder, aliases)."""

from __future__ import annotations

import io
import sys
from pathlib import Path

import pytest

from liftoff.cli import exit_codes
from liftoff.core.models import Continue, Environment, Terminal
from liftoff.exceptions import AliasNotFoundError, PreflightError
from liftoff.infra.autoloader import SiteAutoloader
from liftoff.infra.config import Config
from liftoff.infra.finder import ProjectFinder
from liftoff.infra.preflight import (
    Preflight,
    PreflightLog,
    builtin_commands_path,
    split_alias,
)


def _preflight(env: Environment, **kwargs: object) -> Preflight:
    return Preflight(Config(), environment=env, logger=PreflightLog(io.StringIO()), **kwargs)


def _project(env: Environment, body: str = "") -> Path:
    (env.working_dir / "liftoff.yml").write_text(body, encoding="utf-8")
    return env.working_dir


# ---------------------------------------------------------------------------
# PreflightLog
# ---------------------------------------------------------------------------

class TestPreflightLog:
    def test_silent_until_debug(self) -> None:
        stream = io.StringIO()
        log = PreflightLog(stream)
        log.log("hidden")
        log.set_debug(True).log("shown")
        assert stream.getvalue() == "[preflight] shown\n"


# ---------------------------------------------------------------------------
# Argument handling
# ---------------------------------------------------------------------------

class TestSplitAlias:
    def test_leading_alias(self) -> None:
        assert split_alias(["-v", "@prod", "status"]) == ("@prod", ["-v", "status"])

    def test_alias_after_command_ignored(self) -> None:
        assert split_alias(["greet", "@bob"]) == (None, ["greet", "@bob"])

    def test_alias_after_option_value(self) -> None:
        assert split_alias(["-l", "x.test", "@site", "status"]) == (
            "@site",
            ["-l", "x.test", "status"],
        )

    def test_option_value_is_not_an_alias(self) -> None:
        assert split_alias(["--uri", "@odd", "status"]) == (None, ["--uri", "@odd", "status"])


class TestPreflight:
    def test_version_is_terminal(self, isolated_env: Environment) -> None:
        stdout = io.StringIO()
        pf = _preflight(isolated_env, stdout=stdout, product_name="Tool", version="9.9.9")
        result = pf.preflight(["--version"])
        assert result == Terminal(exit_codes.SUCCESS)
        assert stdout.getvalue() == "Tool 9.9.9\n"

    def test_continue_with_command(self, isolated_env: Environment) -> None:
        result = _preflight(isolated_env).preflight(["-y", "greet", "--shout", "bob"])
        assert isinstance(result, Continue)
        cmd_input = result.context.input
        assert cmd_input.command == "greet"
        assert cmd_input.arguments == ("--shout", "bob")
        assert cmd_input.options["yes"] is True
        assert cmd_input.raw == ("-y", "greet", "--shout", "bob")

    def test_no_command_lists(self, isolated_env: Environment) -> None:
        result = _preflight(isolated_env).preflight([])
        assert isinstance(result, Continue)
        assert result.context.input.command == "list"

    def test_help_for_command(self, isolated_env: Environment) -> None:
        result = _preflight(isolated_env).preflight(["greet", "--help"])
        assert isinstance(result, Continue)
        assert result.context.input.tokens() == ["help", "greet"]

    def test_invalid_global_option(self, isolated_env: Environment) -> None:
        with pytest.raises(PreflightError) as exc_info:
            _preflight(isolated_env).preflight(["--root"])
        assert exc_info.value.code == exit_codes.UNEXPECTED_ERROR

    def test_search_paths(self, isolated_env: Environment, tmp_path: Path) -> None:
        root = _project(isolated_env)
        (root / "commands").mkdir()
        (isolated_env.home / ".liftoff" / "commands").mkdir(parents=True)
        extra = tmp_path / "extra"
        extra.mkdir()
        result = _preflight(isolated_env).preflight(["-i", str(extra), "-i", "missing", "x"])
        assert isinstance(result, Continue)
        assert result.context.command_file_paths == (
            builtin_commands_path(),
            isolated_env.home / ".liftoff" / "commands",
            root.resolve() / "commands",
            extra.resolve(),
        )

    def test_project_config_and_root(self, isolated_env: Environment) -> None:
        root = _project(isolated_env, "options:\n  uri: from-file\n")
        sub = root / "deep" / "er"
        sub.mkdir(parents=True)
        env = Environment(working_dir=sub, home=isolated_env.home)
        pf = _preflight(env)
        pf.preflight(["status"])
        assert pf.finder.root == root.resolve()
        assert pf.config.get("options.root") == str(root.resolve())
        assert pf.config.get("options.uri") == "from-file"

    def test_cli_uri_overrides_config(self, isolated_env: Environment) -> None:
        _project(isolated_env, "options:\n  uri: from-file\n")
        pf = _preflight(isolated_env)
        pf.preflight(["--uri", "cli", "status"])
        assert pf.config.get("options.uri") == "cli"

    def test_alias_selects_root_and_uri(self, isolated_env: Environment, tmp_path: Path) -> None:
        site = tmp_path / "site"
        site.mkdir()
        alias_dir = isolated_env.home / ".liftoff" / "aliases"
        alias_dir.mkdir(parents=True)
        (alias_dir / "prod.alias.yml").write_text(
            f"root: {site}\nuri: prod.example\n", encoding="utf-8"
        )
        pf = _preflight(isolated_env)
        result = pf.preflight(["@prod", "status"])
        assert isinstance(result, Continue)
        assert pf.finder.root == site.resolve()
        assert pf.alias_manager.selected == "prod"
        assert result.context.input.options["uri"] == "prod.example"

    def test_unknown_alias(self, isolated_env: Environment) -> None:
        with pytest.raises(AliasNotFoundError) as exc_info:
            _preflight(isolated_env).preflight(["@nowhere", "status"])
        assert exc_info.value.code == exit_codes.GENERAL_ERROR

    def test_alias_after_global_option(self, isolated_env: Environment) -> None:
        _project(isolated_env, "aliases:\n  site:\n    uri: site.local\n")
        pf = _preflight(isolated_env)
        result = pf.preflight(["-l", "x.test", "@site", "status"])
        assert isinstance(result, Continue)
        assert result.context.input.command == "status"
        assert pf.alias_manager.selected == "site"
        assert pf.config.get("options.uri") == "x.test"

    def test_aliases_from_config(self, isolated_env: Environment) -> None:
        _project(isolated_env, "aliases:\n  dev:\n    uri: dev.local\n")
        pf = _preflight(isolated_env)
        pf.preflight(["@dev", "status"])
        assert pf.config.get("options.uri") == "dev.local"

    def test_preset_config_survives(self, isolated_env: Environment) -> None:
        config = Config({"options": {"uri": "preset.test", "simulate": True}})
        pf = Preflight(config, environment=isolated_env, logger=PreflightLog(io.StringIO()))
        result = pf.preflight(["status"])
        assert isinstance(result, Continue)
        assert config.get("options.uri") == "preset.test"
        assert result.context.input.options["uri"] == "preset.test"
        assert result.context.input.options["simulate"] is True


# ---------------------------------------------------------------------------
# Finder & autoloader
# ---------------------------------------------------------------------------

class TestProjectFinder:
    def test_no_marker(self, tmp_path: Path) -> None:
        finder = ProjectFinder()
        assert finder.locate(tmp_path) is False
        assert finder.root is None
        assert finder.sites_dir is None


class TestSiteAutoloader:
    def test_no_root_is_noop(self) -> None:
        before = list(sys.path)
        loader = SiteAutoloader().load()
        assert loader.added == []
        assert sys.path == before

    def test_adds_and_removes_lib(self, tmp_path: Path) -> None:
        (tmp_path / "lib").mkdir()
        loader = SiteAutoloader(tmp_path).load()
        try:
            assert sys.path[0] == str(tmp_path / "lib")
        finally:
            loader.unload()
        assert str(tmp_path / "lib") not in sys.path
