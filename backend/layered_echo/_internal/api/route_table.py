"""Route Table — ordered, immutable (method, path) -> handler mapping.

Invariants:
    - Built once during wiring; a tuple of frozen RouteSpecs, never mutated while serving
    - Ordered most-specific first: more literal segments, then more segments overall
    - Every mapping explicit — adding a route requires editing build_route_table
    - mount_routes/unmount_routes are the only code that touches the app's router

Design Decisions:
    - Explicit table over decorators on a module-level router: handlers are
      closures over the injected capability, so nothing global is registered
    - Starlette matches in registration order, so sorting here is what makes
      the most specific route win
"""

from dataclasses import dataclass
from typing import Callable

from fastapi import FastAPI
from fastapi.routing import APIRoute

from layered_echo._internal.api.routes.echo import ECHO_PATH, make_echo_endpoint
from layered_echo._internal.api.routes.health import HEALTH_PATH, make_health_endpoint
from layered_echo._internal.core.capability_protocols import EchoCapability
from layered_echo._internal.core.lifecycle_state import LifecycleState


@dataclass(frozen=True)
class RouteSpec:
    """One entry of the route table."""
    methods: frozenset[str]
    path: str
    endpoint: Callable
    name: str


RouteTable = tuple[RouteSpec, ...]


def route_specificity(path: str) -> tuple[int, int]:
    """Sort key: (literal segment count, total segment count)."""
    segments = [s for s in path.split("/") if s]
    literals = sum(1 for s in segments if not s.startswith("{"))
    return literals, len(segments)


def build_route_table(
    echo: EchoCapability,
    state_reader: Callable[[], LifecycleState],
) -> RouteTable:
    """Build the ordered route table for one service run."""
    routes = [
        RouteSpec(frozenset({"GET"}), ECHO_PATH, make_echo_endpoint(echo), "echo"),
        RouteSpec(frozenset({"GET"}), HEALTH_PATH, make_health_endpoint(state_reader), "health"),
    ]
    return tuple(sorted(
        routes, key=lambda r: route_specificity(r.path), reverse=True,
    ))


def mount_routes(app: FastAPI, table: RouteTable) -> list[APIRoute]:
    """Register every route on the app in table order. Returns the mounted routes."""
    for spec in table:
        app.add_api_route(
            spec.path, spec.endpoint, methods=sorted(spec.methods), name=spec.name,
        )
    names = {spec.name for spec in table}
    return [
        r for r in app.router.routes
        if isinstance(r, APIRoute) and r.name in names
    ]


def unmount_routes(app: FastAPI, mounted: list[APIRoute]) -> None:
    """Drop mounted routes so their handlers (and capabilities) can be released."""
    released = {id(r) for r in mounted}
    app.router.routes[:] = [r for r in app.router.routes if id(r) not in released]
