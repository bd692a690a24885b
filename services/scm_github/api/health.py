"""
Health check endpoints for the SCM adapter.

Provides /health (liveness) and /ready (readiness) endpoints. Readiness
fails while the provider circuit breaker is open.
"""

from fastapi import APIRouter, Depends, Response, status

from scm_github.api.dependencies import get_scm
from scm_github.logging_config import get_logger
from scm_github.scm import GithubScm

router = APIRouter(tags=["health"])
logger = get_logger(__name__)


@router.get("/health", status_code=status.HTTP_200_OK)
async def health() -> dict[str, str]:
    """Liveness probe endpoint.

    Returns 200 if the API server is running.
    """
    return {"status": "healthy"}


@router.get("/ready", status_code=status.HTTP_200_OK)
async def ready(
    response: Response, scm: GithubScm = Depends(get_scm)
) -> dict[str, str | dict[str, str]]:
    """Readiness probe endpoint."""
    breaker = scm.stats()["breaker"]
    checks = {"github": "healthy" if breaker["isClosed"] else breaker["state"]}

    if not breaker["isClosed"]:
        logger.warning("Readiness check failed", checks=checks)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not ready", "checks": checks}

    return {"status": "ready", "checks": checks}
