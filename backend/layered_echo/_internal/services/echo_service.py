"""Echo Service — business logic behind the EchoCapability contract.

Invariants:
    - Output reproduces the input message verbatim (identity law)
    - Exactly one KeyValueStore call per execute(): put(LAST_ECHO_KEY, message)
    - Raises DomainError subclasses only; never sees requests, responses or status codes
    - Validation runs before the store is touched (invalid input never writes)

Design Decisions:
    - Store injected as KeyValueStore Protocol: the service never learns which backend it got
    - Closed flag guarded by the store contract: execute() after close() is a data access failure
"""

import logging
import unicodedata

from layered_echo._internal.core.capability_protocols import KeyValueStore
from layered_echo._internal.core.domain_types import EchoRequest, EchoResult
from layered_echo._internal.core.errors import (
    ErrorContext, InvalidInputError, StoreUnavailableError,
)

logger = logging.getLogger(__name__)

LAST_ECHO_KEY = "last_echo"
DEFAULT_MAX_MESSAGE_LENGTH = 1024


class EchoService:
    """Validates a message, records it, and echoes it back."""

    def __init__(
        self, store: KeyValueStore,
        max_message_length: int = DEFAULT_MAX_MESSAGE_LENGTH,
    ):
        self._store = store
        self._max_message_length = max_message_length
        self._closed = False

    def execute(self, request: EchoRequest) -> EchoResult:
        if self._closed:
            raise StoreUnavailableError("echo service is closed", "put")
        message = request.message
        validate_message(message, self._max_message_length)
        self._store.put(LAST_ECHO_KEY, message)
        return EchoResult(message=message, length=len(message))

    def close(self) -> None:
        self._closed = True
        logger.debug("Echo service closed")


def validate_message(message: str, max_length: int) -> None:
    """Raise InvalidInputError if message is blank, too long, or has control characters."""
    ctx = ErrorContext(component="echo_service")
    if not message.strip():
        raise InvalidInputError(
            "message cannot be empty or whitespace", "message", ctx,
        )
    if len(message) > max_length:
        raise InvalidInputError(
            f"message exceeds {max_length} characters", "message", ctx,
        )
    if any(unicodedata.category(ch) == "Cc" for ch in message):
        raise InvalidInputError(
            "message cannot contain control characters", "message", ctx,
        )
