"""Facebook webhook endpoints.

``GET /webhook`` answers the subscription handshake. ``POST /webhook``
authenticates the delivery with ``X-Hub-Signature-256`` (when an app secret
is configured) and hands it to the message, postback and echo dispatchers.
Callback failures are isolated inside the dispatchers, so only a malformed
delivery is reported back to Facebook as an error.
"""

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from fastapi.responses import PlainTextResponse

from messenger_platform.config import get_settings
from messenger_platform.constants import SIGNATURE_HEADER
from messenger_platform.dispatch import (
    WebhookDispatchers,
    WebhookStructureError,
    get_webhook_dispatchers,
)
from messenger_platform.services.signature import verify_webhook_signature

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def verify_webhook(request: Request):
    """Facebook webhook verification endpoint."""
    settings = get_settings()

    mode = request.query_params.get("hub.mode")
    token = request.query_params.get("hub.verify_token")
    challenge = request.query_params.get("hub.challenge")

    if mode == "subscribe" and token == settings.facebook_verify_token:
        logger.info("Webhook verified successfully")
        return PlainTextResponse(challenge or "")

    logger.warning("Webhook verification failed")
    return Response(status_code=403)


@router.post("")
async def handle_webhook(
    request: Request,
    dispatchers: WebhookDispatchers = Depends(get_webhook_dispatchers),
):
    """Handle incoming Facebook Messenger webhook events."""
    settings = get_settings()
    body = await request.body()

    if settings.facebook_app_secret and not verify_webhook_signature(
        body, request.headers.get(SIGNATURE_HEADER), settings.facebook_app_secret
    ):
        logger.warning("Rejected webhook with invalid signature")
        raise HTTPException(status_code=403, detail="Invalid signature")

    try:
        payload = json.loads(body)
    except ValueError:
        logger.warning("Rejected webhook with non-JSON body")
        raise HTTPException(status_code=400, detail="Invalid JSON body")

    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Invalid webhook payload")

    try:
        await dispatchers.process_webhook(payload)
    except WebhookStructureError as e:
        logger.warning("Rejected malformed webhook: %s", e)
        raise HTTPException(status_code=400, detail=str(e))

    return {"status": "ok"}
