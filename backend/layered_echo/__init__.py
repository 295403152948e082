"""Layered Echo — public surface of the service.

Invariants:
    - __all__ is the entire public API: the entry points, their configuration
      and handle types, the capability Protocols (for test assembly) with their
      value and error types
    - Every submodule is underscore-prefixed (_config, _lifecycle, _wiring,
      _internal): nothing outside __all__ is part of the API

Design Decisions:
    - Explicit re-exports only, no star imports
"""

from layered_echo._config import ServiceConfiguration
from layered_echo._internal.core.capability_protocols import EchoCapability, KeyValueStore
from layered_echo._internal.core.domain_types import (
    EchoRequest, EchoResult, HostingMode, ShutdownReport, StoreBackend,
)
from layered_echo._internal.core.errors import (
    ConstructionError, DomainError, InvalidInputError,
    ResourceNotFoundError, ShutdownTimeoutError, StoreUnavailableError,
)
from layered_echo._internal.core.lifecycle_state import LifecycleState
from layered_echo._lifecycle import ServiceHandle, main, start

__all__ = [
    # Entry points
    "main",
    "start",
    "ServiceHandle",
    "ServiceConfiguration",
    "HostingMode",
    "StoreBackend",
    "LifecycleState",
    "ShutdownReport",
    # Capability contracts
    "EchoCapability",
    "KeyValueStore",
    "EchoRequest",
    "EchoResult",
    # Errors
    "ConstructionError",
    "DomainError",
    "InvalidInputError",
    "ResourceNotFoundError",
    "StoreUnavailableError",
    "ShutdownTimeoutError",
]
