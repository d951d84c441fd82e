"""Per-request structured logging with sync context."""
import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"

# Attributes routes may set on request.state for the access log line.
STATE_FIELDS: tuple[str, ...] = ("event_kind", "collection", "records")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an id and logs its outcome.

    The request id is bound into structlog's context variables, so sync
    and proxy log lines emitted while handling the request carry it. The
    closing ``http_request`` line includes whatever event kind, collection
    and record count the route recorded on ``request.state``.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Bind the request id, run the request and log the result.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware or route handler.

        Returns:
            HTTP response with the X-Request-ID header set.
        """
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        response.headers[REQUEST_ID_HEADER] = request_id

        context = {
            field: getattr(request.state, field)
            for field in STATE_FIELDS
            if hasattr(request.state, field)
        }
        log = logger.debug if request.url.path.startswith("/api/v1/health") else logger.info
        log(
            "http_request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=round(duration_ms, 2),
            **context,
        )

        structlog.contextvars.clear_contextvars()
        return response
