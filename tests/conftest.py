"""Shared pytest fixtures and configuration for the liftoff test suite.

Guidelines
----------
* Tests never install real process hooks: ``atexit``, ``sys.excepthook``
  and ``faulthandler`` are patched or replaced by recording installers.
* HOME and the working directory point at ``tmp_path``.
* Collaborators of the runtime are recording fakes that append to a
  shared event list so phase order can be asserted.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from liftoff.core.models import (
    ArgvInput,
    Continue,
    Environment,
    PreflightContext,
    PreflightResult,
)
from liftoff.core.runtime import Runtime
from liftoff.core.state import LifecycleState
from liftoff.infra.aliases import AliasManager
from liftoff.infra.autoloader import SiteAutoloader
from liftoff.infra.config import Config
from liftoff.infra.container import Container
from liftoff.infra.finder import ProjectFinder


# ---------------------------------------------------------------------------
# Recording fakes
# ---------------------------------------------------------------------------

class FakeLog:
    """Preflight log that records every message and which were emitted."""

    def __init__(self) -> None:
        self.debug = False
        self.messages: list[str] = []
        self.emitted: list[str] = []

    def set_debug(self, flag: bool) -> FakeLog:
        self.debug = flag
        return self

    def log(self, message: str) -> None:
        self.messages.append(message)
        if self.debug:
            self.emitted.append(message)


class FakeOutput:
    def __init__(self) -> None:
        self.text = ""

    def write(self, text: str, *, markup: bool = True) -> None:
        self.text += text

    def writeln(self, text: str = "", *, markup: bool = True) -> None:
        self.write(text + "\n", markup=markup)


class FakePreflight:
    def __init__(
        self,
        result: PreflightResult | BaseException,
        events: list[str],
        config: Config,
    ) -> None:
        self._result = result
        self._events = events
        self.logger = FakeLog()
        self.config = config

    def preflight(self, argv: Any) -> PreflightResult:
        self._events.append("preflight")
        if isinstance(self._result, BaseException):
            raise self._result
        return self._result

    def load_site_autoloader(self) -> SiteAutoloader:
        self._events.append("autoload")
        return SiteAutoloader()


class FakeApplication:
    def __init__(
        self,
        name: str,
        version: str,
        events: list[str],
        status: int = 0,
        error: BaseException | None = None,
    ) -> None:
        self.name = name
        self.version = version
        self._events = events
        self._status = status
        self._error = error
        self.container: Any = None

    def set_container(self, container: Any) -> None:
        self.container = container

    def refine_uri_selection(self, cwd: Path) -> None:
        self._events.append("refine")

    def configure_global_options(self) -> None:
        self._events.append("globals")

    def configure_and_register_commands(self, input: Any, output: Any, paths: Any) -> None:
        self._events.append("register")

    def run(self, input: Any, output: Any) -> int:
        self._events.append("dispatch")
        if self._error is not None:
            raise self._error
        return self._status


class FakeAssembler:
    def __init__(self, events: list[str], error: BaseException | None = None) -> None:
        self._events = events
        self._error = error
        self.container: Container | None = None

    def init_container(self, application: Any, config: Any, input: Any, output: Any,
                       loader: Any, finder: Any, alias_manager: Any) -> Container:
        self._events.append("assemble")
        if self._error is not None:
            raise self._error
        container = Container()
        container.add("logger", logging.getLogger("liftoff.tests"))
        container.add("application", application)
        self.container = container
        return container


class Lifecycle:
    """A runtime built from recording fakes, plus handles to inspect them."""

    def __init__(
        self,
        tmp_path: Path,
        *,
        result: PreflightResult | BaseException | None = None,
        status: int = 0,
        app_error: BaseException | None = None,
        assembly_error: BaseException | None = None,
    ) -> None:
        self.events: list[str] = []
        self.config = Config()
        self.state = LifecycleState(self.config)
        self.applications: list[FakeApplication] = []
        self.installed: list[tuple[Any, LifecycleState]] = []
        self.output = FakeOutput()

        if result is None:
            result = Continue(make_context(tmp_path))
        self.preflight = FakePreflight(result, self.events, self.config)
        self.assembler = FakeAssembler(self.events, assembly_error)

        def factory(name: str, version: str) -> FakeApplication:
            self.events.append("application")
            app = FakeApplication(name, version, self.events, status, app_error)
            self.applications.append(app)
            return app

        def installer(container: Any, state: LifecycleState) -> None:
            self.events.append("handlers")
            self.installed.append((container, state))

        self.runtime = Runtime(
            self.preflight,
            self.assembler,
            self.state,
            application_factory=factory,
            handler_installer=installer,
            output_factory=lambda: self.output,
        )


def make_context(tmp_path: Path, command: str | None = "demo") -> PreflightContext:
    commands_dir = tmp_path / "commands"
    commands_dir.mkdir(exist_ok=True)
    return PreflightContext(
        command_file_paths=(commands_dir,),
        input=ArgvInput(command=command),
        environment=Environment(working_dir=tmp_path, home=tmp_path),
        finder=ProjectFinder(),
        alias_manager=AliasManager(),
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def lifecycle(tmp_path: Path) -> Callable[..., Lifecycle]:
    """Factory for runtimes wired to recording fakes."""

    def build(**kwargs: Any) -> Lifecycle:
        return Lifecycle(tmp_path, **kwargs)

    return build


@pytest.fixture
def context_factory(tmp_path: Path) -> Callable[..., PreflightContext]:
    def build(command: str | None = "demo") -> PreflightContext:
        return make_context(tmp_path, command)

    return build


@pytest.fixture
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Environment:
    """An environment whose HOME and cwd are empty temporary directories."""
    home = tmp_path / "home"
    work = tmp_path / "work"
    home.mkdir()
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for name in list(os.environ):
        if name.startswith("LIFTOFF_"):
            monkeypatch.delenv(name, raising=False)
    return Environment(working_dir=work, home=home, env={})


@pytest.fixture(autouse=True)
def _reset_liftoff_logger() -> Any:
    """Drop handlers that ``configure_logging`` attached during a test."""
    yield
    logger = logging.getLogger("liftoff")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
