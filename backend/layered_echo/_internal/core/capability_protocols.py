"""Capability Protocols — contracts between the router, business logic and data access.

Invariants:
    - The router depends on EchoCapability only, never on a concrete service
    - Business logic depends on KeyValueStore only, never on a concrete store
    - Implementations provided by the lifecycle manager via dependency injection
    - KeyValueStore implementations are safe for concurrent calls from many threads

Design Decisions:
    - Protocol over ABC: structural subtyping, test doubles need no inheritance
    - Synchronous methods: every request runs on its own worker thread, so a
      blocking call is the only suspension point a layer ever sees
"""

from typing import Protocol

from layered_echo._internal.core.domain_types import EchoRequest, EchoResult


class KeyValueStore(Protocol):
    """Data access contract. Raises StoreUnavailableError on failure."""
    def get(self, key: str) -> str | None: ...
    def put(self, key: str, value: str) -> None: ...
    def delete(self, key: str) -> bool: ...
    def close(self) -> None: ...


class EchoCapability(Protocol):
    """Business logic contract. Raises DomainError subclasses, never transport errors."""
    def execute(self, request: EchoRequest) -> EchoResult: ...
    def close(self) -> None: ...
