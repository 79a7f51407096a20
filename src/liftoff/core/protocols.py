"""Protocols (interfaces) consumed by the core layer.

These define the narrow contracts the lifecycle controller calls its
collaborators through.  Core code depends ONLY on these protocols —
never on concrete implementations — so every collaborator can be
swapped for a fake in tests.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from liftoff.core.models import ArgvInput, PreflightResult
    from liftoff.core.state import LifecycleState


class KeyValueStore(Protocol):
    """Configuration-like store addressed by dotted keys."""

    def get(self, key: str, default: Any = None) -> Any:
        ...  # pragma: no cover

    def set(self, key: str, value: Any) -> None:
        ...  # pragma: no cover

    def has(self, key: str) -> bool:
        ...  # pragma: no cover


class DiagnosticLog(Protocol):
    """Minimal logger available before any logging is configured.

    :meth:`log` may discard messages until :meth:`set_debug` turns
    verbose output on.
    """

    def log(self, message: str) -> None:
        ...  # pragma: no cover

    def set_debug(self, flag: bool) -> DiagnosticLog:
        ...  # pragma: no cover


class OutputSink(Protocol):
    """Destination for command output."""

    def write(self, text: str, *, markup: bool = True) -> None:
        ...  # pragma: no cover

    def writeln(self, text: str = "", *, markup: bool = True) -> None:
        ...  # pragma: no cover


class BootstrapLocator(Protocol):
    """Locates the project root the command operates on."""

    @property
    def root(self) -> Path | None:
        ...  # pragma: no cover


class AliasResolver(Protocol):
    """Resolves ``@name`` site aliases to alias records."""

    def resolve(self, name: str) -> dict[str, Any]:
        ...  # pragma: no cover


class SiteLoader(Protocol):
    """Handle returned by the site autoloading step."""

    def unload(self) -> None:
        ...  # pragma: no cover


class Preflight(Protocol):
    """Environment discovery performed before anything else.

    ``logger`` and ``config`` must be usable before :meth:`preflight`
    has been called, because the outermost failure boundary reports
    through ``logger`` no matter how early the failure happened.
    """

    logger: DiagnosticLog
    config: KeyValueStore

    def preflight(self, argv: Sequence[str]) -> PreflightResult:
        """Return ``Terminal(status)`` to stop, or ``Continue(context)``."""
        ...  # pragma: no cover

    def load_site_autoloader(self) -> SiteLoader:
        ...  # pragma: no cover


class ServiceContainer(Protocol):
    """Assembled dependency graph; exposes services by name."""

    def get(self, name: str) -> Any:
        ...  # pragma: no cover


class DependencyAssembler(Protocol):
    """Builds the :class:`ServiceContainer` once preflight succeeded."""

    def init_container(
        self,
        application: CommandApplication,
        config: KeyValueStore,
        input: ArgvInput,
        output: OutputSink,
        loader: SiteLoader,
        finder: BootstrapLocator,
        alias_manager: AliasResolver,
    ) -> ServiceContainer:
        ...  # pragma: no cover


class CommandApplication(Protocol):
    """Owns command registration and dispatch."""

    def refine_uri_selection(self, cwd: Path) -> None:
        ...  # pragma: no cover

    def configure_global_options(self) -> None:
        ...  # pragma: no cover

    def configure_and_register_commands(
        self,
        input: ArgvInput,
        output: OutputSink,
        search_paths: Sequence[Path],
    ) -> None:
        ...  # pragma: no cover

    def run(self, input: ArgvInput, output: OutputSink) -> int:
        ...  # pragma: no cover


ApplicationFactory = Callable[[str, str], CommandApplication]
"""Builds the command application from ``(name, version)``."""

HandlerInstaller = Callable[[ServiceContainer, "LifecycleState"], Any]
"""Installs termination handlers; only callable with an assembled container."""

OutputFactory = Callable[[], OutputSink]

__all__: list[str] = [
    "AliasResolver",
    "ApplicationFactory",
    "BootstrapLocator",
    "CommandApplication",
    "DependencyAssembler",
    "DiagnosticLog",
    "HandlerInstaller",
    "KeyValueStore",
    "OutputFactory",
    "OutputSink",
    "Preflight",
    "ServiceContainer",
    "SiteLoader",
]
