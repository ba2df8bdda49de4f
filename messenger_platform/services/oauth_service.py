"""Exchange and refresh Facebook user access tokens."""

import logfire

from messenger_platform.config import get_settings
from messenger_platform.services.graph_api import FacebookApiError, graph_request


async def _execute_token_request(token: str, operation: str) -> str:
    settings = get_settings()
    if not settings.facebook_app_id or not settings.facebook_app_secret:
        raise FacebookApiError(
            code=0,
            message=f"Failed to {operation}: FACEBOOK_APP_ID and FACEBOOK_APP_SECRET are required",
        )

    data = await graph_request(
        "GET",
        "/oauth/access_token",
        operation=operation,
        params={
            "grant_type": "fb_exchange_token",
            "client_id": settings.facebook_app_id,
            "client_secret": settings.facebook_app_secret,
            "fb_exchange_token": token,
        },
    )

    access_token = data.get("access_token")
    if not access_token:
        raise FacebookApiError(
            code=0, message=f"Failed to {operation}: access_token missing in response"
        )

    logfire.info(
        "Facebook access token issued",
        operation=operation,
        token_type=data.get("token_type"),
        expires_in=data.get("expires_in"),
    )
    return access_token


async def exchange_short_lived_token(short_lived_token: str) -> str:
    """
    Exchange a short-lived user token for a long-lived one (about 60 days).

    Raises:
        FacebookApiError: If the app credentials are missing, the Graph API
            call fails or the response has no ``access_token``
    """
    return await _execute_token_request(short_lived_token, "exchange short-lived token")


async def refresh_long_lived_token(long_lived_token: str) -> str:
    """Refresh a long-lived user token before it expires."""
    return await _execute_token_request(long_lived_token, "refresh long-lived token")
