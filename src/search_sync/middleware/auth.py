"""API key authentication for the invocation and search endpoints."""

import secrets
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

PROTECTED_PREFIXES: tuple[str, ...] = (
    "/api/v1/events",
    "/api/v1/collections/",
)


def requires_key(path: str) -> bool:
    """Whether a request path writes to or reads from the index.

    Args:
        path: Request URL path.

    Returns:
        True for event invocations and collection searches.
    """
    return any(
        path == prefix.rstrip("/") or path.startswith(prefix)
        for prefix in PROTECTED_PREFIXES
    )


class APIKeyMiddleware(BaseHTTPMiddleware):
    """Requires the configured X-API-Key on index-facing endpoints.

    Everything outside PROTECTED_PREFIXES (health checks, docs) is served
    without a key.
    """

    def __init__(self, app: Callable[..., Awaitable[Response]], api_key: str) -> None:
        """Initialize middleware with API key.

        Args:
            app: ASGI application.
            api_key: Expected API key value.
        """
        super().__init__(app)  # type: ignore[arg-type]
        self._api_key = api_key

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        """Reject protected requests with a missing or wrong key.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware or route handler.

        Returns:
            HTTP response, or 401 if authentication fails.
        """
        if not requires_key(request.url.path):
            return await call_next(request)

        provided_key = request.headers.get("X-API-Key", "")
        if not provided_key or not secrets.compare_digest(provided_key, self._api_key):
            return JSONResponse(
                status_code=401,
                content={"error": "Missing or invalid X-API-Key header"},
            )

        return await call_next(request)
