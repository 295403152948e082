"""Service Lifecycle Manager — single entry point, two hosting modes.

Invariants:
    - start(config) wires the dependency graph synchronously; failure raises
      ConstructionError to the caller, leaves no listener bound, state STOPPED
    - EMBEDDED: start() binds (or adopts config.listener), serves on a background
      thread and returns once the server accepts connections. The caller's code
      runs concurrently with the service from that point on.
    - STANDALONE: start() returns a wired handle; run() binds and blocks the
      calling thread until shutdown
    - Both modes serve the same app through the same uvicorn settings, so
      identical requests produce byte-identical responses
    - Shutdown: listener, then route table, then business logic, then data access
    - stop() never blocks past the drain deadline plus a fixed grace; requests
      still in flight are reported as abandoned

Design Decisions:
    - One start() + run() instead of two entry points: wiring exists once
    - The manager binds the listener itself (instead of letting uvicorn do it)
      so a bind failure is a ConstructionError, not a process exit
    - server_header/date_header disabled: responses carry nothing time-dependent
    - The shutdown trigger is external: stop() from any thread, or uvicorn's own
      SIGINT/SIGTERM handling when run() owns the main thread
"""

import logging
import socket
import threading
import time

import uvicorn

from layered_echo._config import ServiceConfiguration, get_settings
from layered_echo._internal.core.domain_types import HostingMode, ShutdownReport
from layered_echo._internal.core.errors import (
    ConstructionError, IllegalTransitionError, ShutdownTimeoutError,
)
from layered_echo._internal.core.lifecycle_state import (
    LifecycleState, LifecycleStateMachine,
)
from layered_echo._internal.infrastructure.observability import setup_logging
from layered_echo._wiring import WiredComponents, release_components, wire_components

logger = logging.getLogger(__name__)

LISTEN_BACKLOG = 128
SHUTDOWN_GRACE_SECONDS = 1.0
_STARTUP_POLL_SECONDS = 0.01


class ServiceHandle:
    """One run of the service. Created by start(); drive it with run()/stop()."""

    def __init__(
        self,
        config: ServiceConfiguration,
        machine: LifecycleStateMachine,
        components: WiredComponents,
    ):
        self._config = config
        self._machine = machine
        self._components = components
        self._listener: socket.socket | None = None
        self._server: uvicorn.Server | None = None
        self._thread: threading.Thread | None = None
        self._report: ShutdownReport | None = None
        self._serving = threading.Event()
        self._control_lock = threading.Lock()
        self._finish_lock = threading.Lock()

    # ─── Observation ────────────────────────────────────────────

    @property
    def state(self) -> LifecycleState:
        return self._machine.state

    @property
    def mode(self) -> HostingMode:
        return self._config.mode

    @property
    def address(self) -> tuple[str, int] | None:
        """(host, port) the listener is bound to, once bound."""
        if self._listener is None:
            return None
        host, port = self._listener.getsockname()[:2]
        return host, port

    @property
    def base_url(self) -> str | None:
        if self.address is None:
            return None
        host, port = self.address
        if ":" in host:
            host = f"[{host}]"
        return f"http://{host}:{port}"

    def wait_until_serving(self, timeout: float | None = None) -> bool:
        return self._serving.wait(timeout)

    def wait(self, timeout: float | None = None) -> bool:
        """Block until the service reaches STOPPED."""
        return self._machine.wait_stopped(timeout)

    # ─── Control ────────────────────────────────────────────────

    def run(self) -> ShutdownReport | None:
        """Serve until shutdown.

        STANDALONE: binds the listener and blocks the calling thread.
        EMBEDDED: already serving; blocks until stop() completes elsewhere.
        """
        if self._config.mode is HostingMode.EMBEDDED:
            self._machine.wait_stopped()
            return self._report

        with self._control_lock:
            if self._machine.state is not LifecycleState.WIRING:
                raise IllegalTransitionError(
                    f"run() requires a wired service, state is {self.state.value}",
                )
            try:
                self._acquire_listener()
            except ConstructionError as exc:
                _log_construction_error(exc)
                raise
            self._server = self._create_server()
            self._enter_serving()

        try:
            self._server.run(sockets=[self._listener])
        finally:
            self._finish_shutdown()
        return self._report

    def stop(self) -> ShutdownReport:
        """Stop serving, drain in-flight requests up to the deadline, release everything."""
        with self._control_lock:
            if self._report is not None:
                return self._report
            if self._machine.state is LifecycleState.WIRING:
                # Standalone handle that never ran: nothing is listening yet.
                self._abort()
                return self._report
            self._machine.try_transition(LifecycleState.SHUTTING_DOWN)
            logger.info(
                "Shutdown requested", extra={"mode": self._config.mode.value},
            )
            self._server.should_exit = True

        deadline = self._config.drain_timeout_seconds + SHUTDOWN_GRACE_SECONDS
        if self._thread is not None:
            self._thread.join(deadline)
            self._finish_shutdown()
        elif not self._machine.wait_stopped(deadline):
            self._finish_shutdown()
        return self._report

    def __enter__(self) -> "ServiceHandle":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    # ─── Internals ──────────────────────────────────────────────

    def _serve_in_background(self) -> None:
        self._acquire_listener()
        self._server = self._create_server()
        self._thread = threading.Thread(
            target=self._server.run, kwargs={"sockets": [self._listener]},
            name="layered-echo-server", daemon=True,
        )
        self._thread.start()
        if not self._await_startup():
            self._server.should_exit = True
            self._thread.join(self._config.drain_timeout_seconds)
            self._abort()
            raise ConstructionError(
                f"server did not accept connections within "
                f"{self._config.startup_timeout_seconds}s", "listener",
            )
        self._enter_serving()

    def _await_startup(self) -> bool:
        deadline = time.monotonic() + self._config.startup_timeout_seconds
        while time.monotonic() < deadline:
            if self._server.started:
                return True
            if not self._thread.is_alive():
                return False
            time.sleep(_STARTUP_POLL_SECONDS)
        return False

    def _acquire_listener(self) -> None:
        try:
            if self._config.listener is not None:
                self._listener = self._config.listener
                self._listener.listen(LISTEN_BACKLOG)
            else:
                self._listener = bind_listener(self._config.host, self._config.port)
        except OSError as exc:
            self._abort()
            raise ConstructionError(str(exc), "listener") from exc

    def _create_server(self) -> uvicorn.Server:
        server_config = uvicorn.Config(
            self._components.app,
            host=self._config.host,
            port=self._config.port,
            lifespan="on",
            log_config=None,
            server_header=False,
            date_header=False,
            timeout_graceful_shutdown=self._config.drain_timeout_seconds,
        )
        return uvicorn.Server(server_config)

    def _enter_serving(self) -> None:
        self._machine.transition(LifecycleState.SERVING)
        self._serving.set()
        logger.info(
            f"Serving on {self.base_url}",
            extra={"mode": self._config.mode.value, "address": self.base_url},
        )

    def _close_listener(self) -> None:
        if self._listener is not None:
            self._listener.close()
        elif self._config.listener is not None:
            self._config.listener.close()

    def _abort(self) -> None:
        """WIRING -> STOPPED: release everything without ever having served."""
        self._close_listener()
        release_components(self._components)
        self._report = ShutdownReport()
        self._machine.transition(LifecycleState.STOPPED)

    def _finish_shutdown(self) -> None:
        with self._finish_lock:
            if self._report is not None:
                return
            # Signal-triggered shutdown never went through stop().
            self._machine.try_transition(LifecycleState.SHUTTING_DOWN)
            self._close_listener()
            release_components(self._components)

            abandoned = self._components.tracker.unfinished()
            error = None
            if abandoned:
                error = ShutdownTimeoutError(
                    abandoned, self._config.drain_timeout_seconds,
                )
                logger.warning(
                    error.message,
                    extra={"error_code": error.code, "abandoned": abandoned},
                )
            self._report = ShutdownReport(abandoned=abandoned, error=error)
            self._machine.transition(LifecycleState.STOPPED)


def bind_listener(host: str, port: int) -> socket.socket:
    """Bind and listen on (host, port). Port 0 picks a free port."""
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    try:
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind((host, port))
        sock.listen(LISTEN_BACKLOG)
    except OSError:
        sock.close()
        raise
    return sock


def start(config: ServiceConfiguration) -> ServiceHandle:
    """Wire the service and, in embedded mode, start serving before returning.

    Raises ConstructionError if any component (or the listener, in embedded
    mode) fails to initialize; nothing is left running in that case.
    """
    machine = LifecycleStateMachine()
    machine.transition(LifecycleState.WIRING)
    try:
        components = wire_components(config, lambda: machine.state)
    except ConstructionError as exc:
        if config.listener is not None:
            config.listener.close()
        machine.transition(LifecycleState.STOPPED)
        _log_construction_error(exc)
        raise

    handle = ServiceHandle(config, machine, components)
    if config.mode is HostingMode.EMBEDDED:
        try:
            handle._serve_in_background()
        except ConstructionError as exc:
            _log_construction_error(exc)
            raise
    return handle


def _log_construction_error(exc: ConstructionError) -> None:
    logger.error(
        f"ConstructionError: {exc.message}",
        extra={"error_code": exc.code, "component": exc.component},
    )


def main() -> None:
    """Blocking entry point: serve with environment settings until shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    handle = start(settings.to_configuration())
    handle.run()
