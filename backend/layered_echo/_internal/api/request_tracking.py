"""Request Tracking — ASGI middleware counting in-flight and abandoned requests.

Invariants:
    - Every HTTP request increments active on entry; on exit it either leaves
      (completed or failed) or is abandoned (cancelled), exactly once
    - A request cancelled by the drain deadline is counted as abandoned
    - A failure writing to the client connection becomes a TransportError:
      logged, the connection dropped, other requests unaffected
    - Counters are guarded by a lock (requests finish on the event loop while
      the lifecycle manager reads from another thread)

Design Decisions:
    - Pure ASGI middleware over BaseHTTPMiddleware: sees CancelledError and the
      raw send channel, and adds no extra task per request
"""

import asyncio
import logging
import threading

from starlette.requests import ClientDisconnect
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from layered_echo._internal.core.errors import ErrorContext, TransportError

logger = logging.getLogger(__name__)


class RequestTracker:
    """Thread-safe in-flight / abandoned request counters.

    A request is either active or abandoned, never both: abandon() moves it
    from one counter to the other under the same lock.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._active = 0
        self._abandoned = 0

    @property
    def active(self) -> int:
        with self._lock:
            return self._active

    @property
    def abandoned(self) -> int:
        with self._lock:
            return self._abandoned

    def unfinished(self) -> int:
        """Requests that never completed: still active plus abandoned, read atomically."""
        with self._lock:
            return self._active + self._abandoned

    def enter(self) -> None:
        with self._lock:
            self._active += 1

    def leave(self) -> None:
        with self._lock:
            self._active -= 1

    def abandon(self) -> None:
        with self._lock:
            self._active -= 1
            self._abandoned += 1


class RequestTrackingMiddleware:
    """Wraps the app: tracks each request and isolates connection failures."""

    def __init__(self, app: ASGIApp, tracker: RequestTracker):
        self.app = app
        self.tracker = tracker

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        path = scope["path"]

        async def guarded_send(message: Message) -> None:
            try:
                await send(message)
            except OSError as exc:
                raise TransportError(
                    f"Connection failed while writing response: {exc}",
                    ErrorContext(path=path),
                ) from exc

        abandoned = False
        self.tracker.enter()
        try:
            await self.app(scope, receive, guarded_send)
        except asyncio.CancelledError:
            abandoned = True
            self.tracker.abandon()
            logger.warning(
                f"Request abandoned at drain deadline: {scope['method']} {path}",
                extra={"path": path, "method": scope["method"]},
            )
            raise
        except ClientDisconnect:
            _log_transport_error(
                TransportError("Client disconnected", ErrorContext(path=path)),
            )
        except TransportError as exc:
            _log_transport_error(exc)
        finally:
            if not abandoned:
                self.tracker.leave()


def _log_transport_error(error: TransportError) -> None:
    logger.warning(
        f"TransportError: {error.message}",
        extra={"error_code": error.code, "path": error.context.path},
    )
