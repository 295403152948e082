"""Application Assembly — builds the FastAPI app for one service run.

Invariants:
    - One app per run, built from an already-wired route table (no module-level app)
    - Routes mounted explicitly from the table (no auto-discovery)
    - No docs/openapi routes: every path outside the table answers NOT_FOUND
    - redirect_slashes=False: "/echo" is NOT_FOUND, never a redirect to "/echo/"
    - Same factory for both hosting modes, so responses are byte-identical

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern; it only logs,
      resource release is owned by the lifecycle manager
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.routing import APIRoute

from layered_echo._internal.api.error_handlers import register_error_handlers
from layered_echo._internal.api.request_tracking import (
    RequestTracker, RequestTrackingMiddleware,
)
from layered_echo._internal.api.route_table import RouteTable, mount_routes

logger = logging.getLogger(__name__)

APP_TITLE = "Layered Echo"
APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown logging."""
    logger.info("Layered Echo API started")
    yield
    logger.info("Layered Echo API shutting down")


def build_application(
    table: RouteTable, tracker: RequestTracker,
) -> tuple[FastAPI, list[APIRoute]]:
    """Assemble the app. Returns it with the routes mounted from the table."""
    app = FastAPI(
        title=APP_TITLE, version=APP_VERSION, lifespan=lifespan,
        docs_url=None, redoc_url=None, openapi_url=None, redirect_slashes=False,
    )
    app.add_middleware(RequestTrackingMiddleware, tracker=tracker)
    register_error_handlers(app)
    mounted = mount_routes(app, table)
    return app, mounted
