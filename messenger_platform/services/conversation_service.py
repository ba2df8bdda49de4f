"""Handover protocol: move a conversation thread between apps of a Page."""

from typing import Any

import logfire
from pydantic import BaseModel

from messenger_platform.logging_config import mask_pii
from messenger_platform.services.graph_api import graph_request, resolve_access_token


class ThreadControlResponse(BaseModel):
    success: bool


class ThreadOwner(BaseModel):
    app_id: str


class SecondaryReceiver(BaseModel):
    id: str
    name: str


def _control_body(recipient_id: str, metadata: str | None, **fields: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"recipient": {"id": recipient_id}, **fields}
    if metadata:
        body["metadata"] = metadata
    return body


async def _thread_control(
    page_id: str,
    action: str,
    body: dict[str, Any],
    page_access_token: str | None,
) -> ThreadControlResponse:
    logfire.info(
        "Changing thread control",
        page_id=page_id,
        recipient_id=mask_pii(body["recipient"]["id"]),
        action=action,
    )
    data = await graph_request(
        "POST",
        f"/{page_id}/{action}",
        operation=action.replace("_", " "),
        params={"access_token": resolve_access_token(page_access_token)},
        json_body=body,
    )
    return ThreadControlResponse.model_validate(data)


async def pass_thread_control(
    page_id: str,
    recipient_id: str,
    target_app_id: str,
    metadata: str | None = None,
    page_access_token: str | None = None,
) -> ThreadControlResponse:
    """
    Hand the conversation with ``recipient_id`` to another app.

    Args:
        page_id: Page owning the conversation
        recipient_id: PSID of the user
        target_app_id: App receiving control, e.g. the Page inbox
        metadata: Free text passed to the receiving app
        page_access_token: Page token; defaults to the configured one

    Raises:
        FacebookApiError: If the Graph API call fails
    """
    body = _control_body(recipient_id, metadata, target_app_id=target_app_id)
    return await _thread_control(page_id, "pass_thread_control", body, page_access_token)


async def take_thread_control(
    page_id: str,
    recipient_id: str,
    metadata: str | None = None,
    page_access_token: str | None = None,
) -> ThreadControlResponse:
    """Take control back; only the primary receiver app may do this."""
    body = _control_body(recipient_id, metadata)
    return await _thread_control(page_id, "take_thread_control", body, page_access_token)


async def request_thread_control(
    page_id: str,
    recipient_id: str,
    metadata: str | None = None,
    page_access_token: str | None = None,
) -> ThreadControlResponse:
    """Ask the current owner to pass control to this app."""
    body = _control_body(recipient_id, metadata)
    return await _thread_control(page_id, "request_thread_control", body, page_access_token)


async def get_thread_owner(
    page_id: str,
    recipient_id: str,
    page_access_token: str | None = None,
) -> ThreadOwner | None:
    """App currently controlling the conversation, or None if Facebook reports none."""
    data = await graph_request(
        "GET",
        f"/{page_id}/thread_owner",
        operation="get thread owner",
        params={
            "recipient": recipient_id,
            "access_token": resolve_access_token(page_access_token),
        },
    )
    owners = data.get("data") or []
    if not owners:
        return None
    return ThreadOwner.model_validate(owners[0])


async def get_secondary_receivers(
    page_id: str, page_access_token: str | None = None
) -> list[SecondaryReceiver]:
    data = await graph_request(
        "GET",
        f"/{page_id}/secondary_receivers",
        operation="get secondary receivers",
        params={"access_token": resolve_access_token(page_access_token)},
    )
    return [SecondaryReceiver.model_validate(item) for item in data.get("data", [])]
