"""Domain Types — plain value types shared across layers.

Invariants:
    - EchoRequest / EchoResult carry no transport framing (no status, no headers)
    - All valid modes encoded as Enums — no raw string matching
    - Value types are frozen: passing one across a layer never shares mutable state

Design Decisions:
    - Frozen dataclasses over pydantic models here: core stays free of validation
      frameworks, API schemas live in schemas/
    - str Enums: serialize to JSON and env vars without custom encoders
"""

from dataclasses import dataclass
from enum import Enum

from layered_echo._internal.core.errors import ShutdownTimeoutError


# ─── Capability Values ───────────────────────────────────────────

@dataclass(frozen=True)
class EchoRequest:
    """Input to the echo operation."""
    message: str


@dataclass(frozen=True)
class EchoResult:
    """Output of the echo operation — message reproduced verbatim."""
    message: str
    length: int


# ─── Lifecycle Values ────────────────────────────────────────────

@dataclass(frozen=True)
class ShutdownReport:
    """Outcome of a shutdown: how many requests the drain deadline abandoned."""
    abandoned: int = 0
    error: ShutdownTimeoutError | None = None

    @property
    def clean(self) -> bool:
        return self.abandoned == 0


# ─── Enums ───────────────────────────────────────────────────────

class HostingMode(str, Enum):
    """How the listener is acquired and whether start blocks."""
    STANDALONE = "standalone"
    EMBEDDED = "embedded"


class StoreBackend(str, Enum):
    """Which data access implementation the wiring step constructs."""
    MEMORY = "memory"
    SQL = "sql"
