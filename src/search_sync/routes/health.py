"""Health check endpoints for liveness and readiness checks."""
from typing import Literal

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from search_sync.errors import SearchSyncError
from search_sync.index.backend import IndexBackend

router = APIRouter(prefix="/health", tags=["health"])


class LivenessResponse(BaseModel):
    """Response model for liveness check.

    Attributes:
        status: Always 'alive' when process is running.
    """

    status: Literal["alive"]


class ReadinessCheck(BaseModel):
    """Individual dependency check result.

    Attributes:
        name: Identifier for the dependency being checked.
        status: Result of the check ('ok' or 'failed').
        message: Error details when status is 'failed'.
    """

    name: str
    status: Literal["ok", "failed"]
    message: str | None = None


class ReadinessResponse(BaseModel):
    """Response model for readiness check.

    Attributes:
        status: Overall readiness ('ready' or 'not_ready').
        checks: List of individual dependency check results.
    """

    status: Literal["ready", "not_ready"]
    checks: list[ReadinessCheck]


async def _check_backend(backend: IndexBackend) -> ReadinessCheck:
    """Verify the index backend answers a collection listing.

    Args:
        backend: Index backend to check.

    Returns:
        Check result with status and optional error message.
    """
    try:
        await backend.list_collections()
    except SearchSyncError as e:
        return ReadinessCheck(name="index_backend", status="failed", message=str(e))
    return ReadinessCheck(name="index_backend", status="ok")


@router.get("/live", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness endpoint.

    Returns:
        Liveness status response.
    """
    return LivenessResponse(status="alive")


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(request: Request) -> JSONResponse:
    """Readiness endpoint.

    Returns 200 when the index backend is reachable, 503 otherwise.

    Returns:
        Readiness status with individual check results.
    """
    checks = [await _check_backend(request.app.state.backend)]
    all_ok = all(c.status == "ok" for c in checks)
    response = ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        checks=checks,
    )
    code = status.HTTP_200_OK if all_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=response.model_dump(), status_code=code)
