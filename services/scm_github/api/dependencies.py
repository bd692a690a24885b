"""FastAPI dependencies shared by the routers."""

from fastapi import HTTPException, Request, status

from scm_github.scm import GithubScm


def get_scm(request: Request) -> GithubScm:
    """Return the adapter created during startup."""
    scm = getattr(request.app.state, "scm", None)
    if scm is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="SCM adapter not initialized",
        )
    return scm
