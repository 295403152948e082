"""Health Probe — GET /health reports whether the service is serving.

Invariants:
    - 200 only while the lifecycle state is SERVING, 503 otherwise
"""

from typing import Callable

from fastapi import status
from fastapi.responses import JSONResponse

from layered_echo._internal.core.lifecycle_state import LifecycleState
from layered_echo._internal.schemas.echo import HealthResponse

HEALTH_PATH = "/health"
SERVICE_NAME = "layered-echo"


def make_health_endpoint(state_reader: Callable[[], LifecycleState]):
    """Build the readiness handler over a read-only view of lifecycle state."""

    async def health_check():
        state = state_reader()
        body = HealthResponse(status=state.value, service=SERVICE_NAME)
        if state is not LifecycleState.SERVING:
            return JSONResponse(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                content=body.model_dump(),
            )
        return body

    return health_check
