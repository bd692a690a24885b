"""SCM adapter endpoints.

Endpoints:
    GET  /v1/stats                 invoker request counters and breaker state
    GET  /v1/repos/decorate        display title/subtitle/link for a remote URL
    POST /v1/repos/resolve         canonical id, name and link for a remote URL
"""

from typing import Any

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from pydantic import BaseModel, Field

from scm_github.api.dependencies import get_scm
from scm_github.errors import BreakerOpen, ProviderError
from scm_github.logging_config import get_logger
from scm_github.scm import GithubScm

router = APIRouter(tags=["scm"])
logger = get_logger(__name__)


class ResolveRequest(BaseModel):
    scm_url: str = Field(alias="scmUrl")


def _token(authorization: str) -> str:
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() not in ("token", "bearer") or not token:
        raise HTTPException(status_code=401, detail="Missing GitHub token")
    return token


@router.get("/stats")
async def stats(scm: GithubScm = Depends(get_scm)) -> dict[str, Any]:
    return scm.stats()


@router.get("/repos/decorate")
async def decorate(
    scm_url: str = Query(alias="scmUrl"), scm: GithubScm = Depends(get_scm)
) -> dict[str, str]:
    return scm.decorate_url(scm_url)


@router.post("/repos/resolve")
async def resolve(
    body: ResolveRequest,
    authorization: str = Header(default=""),
    scm: GithubScm = Depends(get_scm),
) -> dict[str, str]:
    """Resolve a remote URL to its canonical id, full name and branch link."""
    token = _token(authorization)
    try:
        repo_id = await scm.get_repo_id(body.scm_url, token)
    except BreakerOpen as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    except ProviderError as exc:
        logger.warning("Repository lookup failed", scm_url=body.scm_url, error=str(exc))
        status_code = exc.status_code if exc.status_code in (401, 403, 404) else 502
        raise HTTPException(status_code=status_code, detail=str(exc))
    return repo_id
