"""Lifecycle State — the service state machine and its fixed transition table.

Invariants:
    - Transitions strictly forward; SERVING -> SHUTTING_DOWN -> STOPPED is the only path out
    - WIRING failure goes straight to STOPPED, never through SERVING
    - STOPPED is terminal
    - Transitions are serialized by a lock (stop() may race the serving thread)

Design Decisions:
    - Explicit dict over conditionals: every legal edge visible in one place
"""

import logging
import threading
from enum import Enum

from layered_echo._internal.core.errors import IllegalTransitionError

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    """Service lifecycle states."""
    UNINITIALIZED = "uninitialized"
    WIRING = "wiring"
    SERVING = "serving"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


ALLOWED_TRANSITIONS: dict[LifecycleState, frozenset[LifecycleState]] = {
    LifecycleState.UNINITIALIZED: frozenset({LifecycleState.WIRING}),
    LifecycleState.WIRING: frozenset({LifecycleState.SERVING, LifecycleState.STOPPED}),
    LifecycleState.SERVING: frozenset({LifecycleState.SHUTTING_DOWN}),
    LifecycleState.SHUTTING_DOWN: frozenset({LifecycleState.STOPPED}),
    LifecycleState.STOPPED: frozenset(),
}


class LifecycleStateMachine:
    """Thread-safe holder of the current LifecycleState."""

    def __init__(self) -> None:
        self._state = LifecycleState.UNINITIALIZED
        self._lock = threading.Lock()
        self._stopped = threading.Event()

    @property
    def state(self) -> LifecycleState:
        return self._state

    def transition(self, target: LifecycleState) -> None:
        """Move to target or raise IllegalTransitionError."""
        with self._lock:
            self._apply(target)

    def try_transition(self, target: LifecycleState) -> bool:
        """Move to target if the edge exists. Returns False instead of raising."""
        with self._lock:
            if target not in ALLOWED_TRANSITIONS[self._state]:
                return False
            self._apply(target)
            return True

    def wait_stopped(self, timeout: float | None = None) -> bool:
        return self._stopped.wait(timeout)

    def _apply(self, target: LifecycleState) -> None:
        if target not in ALLOWED_TRANSITIONS[self._state]:
            raise IllegalTransitionError(
                f"Illegal lifecycle transition {self._state.value} -> {target.value}",
            )
        logger.info(
            f"Lifecycle {self._state.value} -> {target.value}",
            extra={"state": target.value},
        )
        self._state = target
        if target is LifecycleState.STOPPED:
            self._stopped.set()
