"""Echo Route — GET /echo/{message}, the single application route.

Invariants:
    - Handler closes over the EchoCapability Protocol, never a concrete service
    - Business logic runs on a worker thread: a slow request never stalls others
    - Domain errors propagate untouched to the global handler (error_handlers.py)
    - Everything after "/echo/" is the message, "/" included: any message the
      service accepts is reachable by percent-encoding it
    - "/echo/" (empty message) is an unmatched route, never an empty echo

Design Decisions:
    - abandon_on_cancel=True: when the drain deadline cancels the request the
      worker thread is abandoned and its result discarded, so shutdown never
      waits on a blocked handler
    - {message:path} rather than {message}: servers decode %2F before routing,
      so a single-segment converter would turn "a/b" into a 404
"""

import anyio
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

from layered_echo._internal.core.capability_protocols import EchoCapability
from layered_echo._internal.core.domain_types import EchoRequest
from layered_echo._internal.schemas.echo import EchoResponse

ECHO_PATH = "/echo/{message:path}"


def make_echo_endpoint(echo: EchoCapability):
    """Build the echo handler bound to one capability instance."""

    async def echo_message(message: str) -> EchoResponse:
        """Echo the rest of the path back to the caller."""
        if not message:
            raise StarletteHTTPException(status_code=status.HTTP_404_NOT_FOUND)
        result = await anyio.to_thread.run_sync(
            echo.execute, EchoRequest(message=message),
            abandon_on_cancel=True,
        )
        return EchoResponse(echo=result.message, length=result.length)

    return echo_message
