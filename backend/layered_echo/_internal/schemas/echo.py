"""Response Schemas — Pydantic models for the public wire format.

Invariants:
    - EchoResponse.echo reproduces the request message verbatim
    - Field order is fixed: identical requests serialize to identical bytes
"""

from pydantic import BaseModel


class EchoResponse(BaseModel):
    """Successful echo — the message and its length in characters."""
    echo: str
    length: int


class HealthResponse(BaseModel):
    """Readiness probe body."""
    status: str
    service: str
