"""Subscribe Pages to this app's webhook."""

from typing import Any

from messenger_platform.services.graph_api import graph_request, resolve_access_token

DEFAULT_SUBSCRIBED_FIELDS = ["feed"]


async def get_page_details(
    page_id: str, page_access_token: str | None = None
) -> dict[str, Any]:
    return await graph_request(
        "GET",
        f"/{page_id}",
        operation="get page details",
        params={"access_token": resolve_access_token(page_access_token)},
    )


async def subscribe_page_to_webhooks(
    page_id: str,
    subscribed_fields: list[str] | None = None,
    page_access_token: str | None = None,
) -> dict[str, Any]:
    """
    Subscribe the app to webhook fields of a Page.

    Args:
        page_id: Page to subscribe
        subscribed_fields: Webhook fields, e.g. ``messages``,
            ``messaging_postbacks``, ``message_echoes``; defaults to ``feed``
        page_access_token: Page token; defaults to the configured one

    Returns:
        Graph API response, ``{"success": true}`` on success
    """
    fields = subscribed_fields or DEFAULT_SUBSCRIBED_FIELDS
    return await graph_request(
        "POST",
        f"/{page_id}/subscribed_apps",
        operation="subscribe page to webhooks",
        params={
            "subscribed_fields": ",".join(fields),
            "access_token": resolve_access_token(page_access_token),
        },
    )


async def get_subscribed_apps(
    page_id: str, page_access_token: str | None = None
) -> list[dict[str, Any]]:
    data = await graph_request(
        "GET",
        f"/{page_id}/subscribed_apps",
        operation="get subscribed apps",
        params={"access_token": resolve_access_token(page_access_token)},
    )
    return data.get("data", [])


async def unsubscribe_page_from_webhooks(
    page_id: str, page_access_token: str | None = None
) -> dict[str, Any]:
    return await graph_request(
        "DELETE",
        f"/{page_id}/subscribed_apps",
        operation="unsubscribe page from webhooks",
        params={"access_token": resolve_access_token(page_access_token)},
    )
