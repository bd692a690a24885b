"""GitHub webhook receiver.

Validates the HMAC signature when a webhook secret is configured, then
normalizes push and pull_request payloads into canonical events.

Endpoints:
    POST /v1/webhooks/github
"""

import json

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import JSONResponse

from scm_github.api.dependencies import get_scm
from scm_github.errors import InvalidEventPayload, UnsupportedEvent
from scm_github.events import get_event_type
from scm_github.github_client import validate_webhook_signature
from scm_github.logging_config import get_logger
from scm_github.scm import GithubScm

router = APIRouter(tags=["webhooks"])
logger = get_logger(__name__)


@router.post("/webhooks/github")
async def github_webhook(request: Request, scm: GithubScm = Depends(get_scm)) -> Response:
    """Receive a GitHub webhook and return its canonical event."""
    payload = await request.body()

    secret = scm.options.github.webhook_secret
    if secret:
        signature = request.headers.get("X-Hub-Signature-256", "")
        if not validate_webhook_signature(secret, payload, signature):
            logger.warning("Invalid webhook signature")
            raise HTTPException(status_code=401, detail="Invalid signature")

    # GitHub sends this when the webhook is first configured
    if get_event_type(request.headers) == "ping":
        logger.info("GitHub webhook ping received")
        return JSONResponse(content={"message": "pong"})

    try:
        body = json.loads(payload)
    except ValueError:
        # JSONDecodeError, or UnicodeDecodeError for bytes that are not UTF-8
        raise HTTPException(status_code=400, detail="Invalid JSON payload")

    try:
        event = scm.parse_hook(body, request.headers)
    except (UnsupportedEvent, InvalidEventPayload) as exc:
        logger.info("Webhook rejected", reason=str(exc))
        raise HTTPException(status_code=400, detail=str(exc))

    logger.info("Webhook event received", action=event["action"], url=event["url"])
    return JSONResponse(content=event)
