"""Health check endpoints for liveness and readiness probes."""
import os
from pathlib import Path
from typing import Literal

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

router = APIRouter(prefix="/health", tags=["health"])


class LivenessResponse(BaseModel):
    """Response model for liveness probe.

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
    """Response model for readiness probe.

    Attributes:
        status: Overall readiness ('ready' or 'not_ready').
        checks: List of individual dependency check results.
    """

    status: Literal["ready", "not_ready"]
    checks: list[ReadinessCheck]


def _check_static_root(path: Path) -> ReadinessCheck:
    """Verify the static root exists and can be listed and read.

    Args:
        path: Absolute path to the static root.

    Returns:
        Check result with status and optional error message.
    """
    name = "static_root"
    try:
        if not path.is_dir():
            return ReadinessCheck(name=name, status="failed", message="Directory not found")
        if not os.access(path, os.R_OK | os.X_OK):
            return ReadinessCheck(name=name, status="failed", message="Directory not readable")
        next(path.iterdir(), None)
        return ReadinessCheck(name=name, status="ok")
    except PermissionError:
        return ReadinessCheck(name=name, status="failed", message="Permission denied")
    except OSError as e:
        return ReadinessCheck(name=name, status="failed", message=e.strerror or "Unavailable")


@router.get("/live", response_model=LivenessResponse)
async def liveness() -> LivenessResponse:
    """Liveness probe endpoint.

    Returns immediate success if the process is running.
    Used by load balancers to detect hung processes.

    Returns:
        Liveness status response.
    """
    return LivenessResponse(status="alive")


@router.get("/ready", response_model=ReadinessResponse)
async def readiness(request: Request) -> JSONResponse:
    """Readiness probe endpoint.

    Returns 200 if the static root is a readable directory, 503 otherwise.
    Host paths are never included in the response.

    Args:
        request: Incoming HTTP request.

    Returns:
        Readiness status with individual check results.
    """
    checks = [_check_static_root(request.app.state.pipeline.root.path)]
    all_ok = all(c.status == "ok" for c in checks)
    response = ReadinessResponse(
        status="ready" if all_ok else "not_ready",
        checks=checks,
    )
    code = status.HTTP_200_OK if all_ok else status.HTTP_503_SERVICE_UNAVAILABLE
    return JSONResponse(content=response.model_dump(), status_code=code)
