"""Wiring — constructs and releases the dependency graph for one service run.

Invariants:
    - Construction order: data access -> business logic -> route table -> application
    - Release order is the exact reverse (listener is released earlier, by the lifecycle manager)
    - Any construction failure becomes ConstructionError naming the failed component,
      after everything built so far has been released
    - This module and _lifecycle.py are the only code that names concrete
      services/ or infrastructure/ types

Design Decisions:
    - Injected factories (store_factory, echo_factory) take precedence over the
      built-in implementations: test assembly swaps capabilities, never the wiring
    - Release failures are logged and the remaining releases still run: shutdown
      must always reach STOPPED
"""

import logging
from dataclasses import dataclass
from typing import Callable, TypeVar

from fastapi import FastAPI
from fastapi.routing import APIRoute

from layered_echo._config import ServiceConfiguration
from layered_echo._internal.api.application import build_application
from layered_echo._internal.api.request_tracking import RequestTracker
from layered_echo._internal.api.route_table import (
    RouteTable, build_route_table, unmount_routes,
)
from layered_echo._internal.core.capability_protocols import EchoCapability, KeyValueStore
from layered_echo._internal.core.domain_types import StoreBackend
from layered_echo._internal.core.errors import ConstructionError
from layered_echo._internal.core.lifecycle_state import LifecycleState
from layered_echo._internal.infrastructure.memory_store import InMemoryKeyValueStore
from layered_echo._internal.infrastructure.sql_store import SqlKeyValueStore
from layered_echo._internal.services.echo_service import EchoService

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class WiredComponents:
    """The dependency graph of one run, held only by the lifecycle manager."""
    store: KeyValueStore
    echo: EchoCapability
    route_table: RouteTable
    app: FastAPI
    mounted_routes: list[APIRoute]
    tracker: RequestTracker


def wire_components(
    config: ServiceConfiguration,
    state_reader: Callable[[], LifecycleState],
) -> WiredComponents:
    """Build data access, business logic, route table and app, in that order."""
    releasers: list[tuple[str, Callable[[], None]]] = []
    try:
        store = _construct("data access", _store_builder(config))
        releasers.append(("data access", store.close))

        echo_builder = _echo_builder(config)
        echo = _construct("business logic", lambda: echo_builder(store))
        releasers.append(("business logic", echo.close))

        table = _construct(
            "route table", lambda: build_route_table(echo, state_reader),
        )
        tracker = RequestTracker()
        app, mounted = _construct(
            "application", lambda: build_application(table, tracker),
        )
    except ConstructionError:
        _release_in_reverse(releasers)
        raise
    return WiredComponents(store, echo, table, app, mounted, tracker)


def release_components(components: WiredComponents) -> None:
    """Release route table, then business logic, then data access."""
    _release_in_reverse([
        ("data access", components.store.close),
        ("business logic", components.echo.close),
        ("route table", lambda: unmount_routes(components.app, components.mounted_routes)),
    ])


def _construct(component: str, builder: Callable[[], T]) -> T:
    logger.debug(f"Wiring {component}", extra={"component": component})
    try:
        return builder()
    except Exception as exc:
        raise ConstructionError(str(exc), component) from exc


def _store_builder(config: ServiceConfiguration) -> Callable[[], KeyValueStore]:
    if config.store_factory is not None:
        return config.store_factory
    if config.store_backend is StoreBackend.SQL:
        return lambda: SqlKeyValueStore(config.database_url)
    return InMemoryKeyValueStore


def _echo_builder(
    config: ServiceConfiguration,
) -> Callable[[KeyValueStore], EchoCapability]:
    if config.echo_factory is not None:
        return config.echo_factory
    return lambda store: EchoService(store, config.max_message_length)


def _release_in_reverse(releasers: list[tuple[str, Callable[[], None]]]) -> None:
    for component, release in reversed(releasers):
        try:
            release()
            logger.debug(f"Released {component}", extra={"component": component})
        except Exception as exc:
            logger.error(
                f"Failed to release {component}: {exc}",
                extra={"component": component}, exc_info=True,
            )
