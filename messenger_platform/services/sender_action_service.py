"""Typing indicators and read receipts."""

from enum import Enum

import logfire

from messenger_platform.logging_config import mask_pii
from messenger_platform.services.graph_api import graph_request, resolve_access_token


class SenderAction(str, Enum):
    TYPING_ON = "typing_on"
    TYPING_OFF = "typing_off"
    MARK_SEEN = "mark_seen"


async def send_sender_action(
    page_id: str,
    recipient_id: str,
    action: SenderAction,
    page_access_token: str | None = None,
) -> dict:
    """
    POST a sender action to ``/{page_id}/messages``.

    Raises:
        FacebookApiError: If the Graph API call fails
    """
    action = SenderAction(action)
    logfire.info(
        "Sending sender action",
        page_id=page_id,
        recipient_id=mask_pii(recipient_id),
        action=action.value,
    )
    return await graph_request(
        "POST",
        f"/{page_id}/messages",
        operation=f"send sender action {action.value}",
        params={"access_token": resolve_access_token(page_access_token)},
        json_body={"recipient": {"id": recipient_id}, "sender_action": action.value},
    )


async def send_typing_on(
    page_id: str, recipient_id: str, page_access_token: str | None = None
) -> dict:
    return await send_sender_action(page_id, recipient_id, SenderAction.TYPING_ON, page_access_token)


async def send_typing_off(
    page_id: str, recipient_id: str, page_access_token: str | None = None
) -> dict:
    return await send_sender_action(
        page_id, recipient_id, SenderAction.TYPING_OFF, page_access_token
    )


async def send_mark_seen(
    page_id: str, recipient_id: str, page_access_token: str | None = None
) -> dict:
    return await send_sender_action(page_id, recipient_id, SenderAction.MARK_SEEN, page_access_token)
