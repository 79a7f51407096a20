"""Infrastructure: dependency assembly.

:class:`DependencyInjection` wires the services a command run needs into
a :class:`Container`.  The container is built only after preflight has
succeeded; everything that needs the configured logger (termination
handlers, commands) obtains it from here.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from liftoff.exceptions import DependencyAssemblyError, ServiceNotFoundError
from liftoff.infra.logging import configure_logging, verbosity_from_options

if TYPE_CHECKING:
    from liftoff.core.models import ArgvInput
    from liftoff.core.protocols import (
        AliasResolver,
        BootstrapLocator,
        CommandApplication,
        KeyValueStore,
        OutputSink,
        SiteLoader,
    )
    from liftoff.core.state import LifecycleState


class Container:
    """Name-addressed service registry."""

    def __init__(self) -> None:
        self._services: dict[str, Any] = {}

    def add(self, name: str, service: Any) -> None:
        self._services[name] = service

    def has(self, name: str) -> bool:
        return name in self._services

    def get(self, name: str) -> Any:
        try:
            return self._services[name]
        except KeyError:
            raise ServiceNotFoundError(
                f"Service '{name}' is not registered in the container."
            ) from None

    def names(self) -> list[str]:
        return sorted(self._services)


class DependencyInjection:
    """Builds the :class:`Container` for one run.

    Parameters
    ----------
    state:
        Lifecycle facts, registered as the ``state`` service so commands
        and handlers can read them.
    """

    def __init__(self, state: LifecycleState) -> None:
        self._state = state

    def init_container(
        self,
        application: CommandApplication,
        config: KeyValueStore,
        input: ArgvInput,
        output: OutputSink,
        loader: SiteLoader,
        finder: BootstrapLocator,
        alias_manager: AliasResolver,
    ) -> Container:
        """Assemble the services and hand the container to *application*.

        Raises
        ------
        DependencyAssemblyError
            When the application cannot accept the container.
        """
        container = Container()
        container.add("logger", self._configure_logger(config))
        container.add("application", application)
        container.add("config", config)
        container.add("input", input)
        container.add("output", output)
        container.add("loader", loader)
        container.add("finder", finder)
        container.add("alias_manager", alias_manager)
        container.add("state", self._state)

        set_container = getattr(application, "set_container", None)
        if set_container is None:
            raise DependencyAssemblyError(
                f"{type(application).__name__} does not accept a container."
            )
        set_container(container)
        return container

    @staticmethod
    def _configure_logger(config: KeyValueStore) -> logging.Logger:
        verbosity = verbosity_from_options(
            quiet=bool(config.get("options.quiet", False)),
            verbose=bool(config.get("options.verbose", False)),
            debug=bool(config.get("options.debug", False)),
        )
        return configure_logging(verbosity)
