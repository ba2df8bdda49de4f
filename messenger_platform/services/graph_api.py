"""Shared Facebook Graph API request helper."""

import time
from typing import Any

import httpx
import logfire

from messenger_platform.config import get_settings
from messenger_platform.constants import FACEBOOK_GRAPH_API_URL
from messenger_platform.logging_config import redact_tokens


class FacebookApiError(Exception):
    """
    The Graph API call failed.

    ``code`` is the HTTP status or Graph error code, and 0 when the request
    never got a usable response (transport failure, non-JSON body).
    """

    def __init__(
        self,
        code: int,
        message: str,
        details: str | None = None,
        fbtrace_id: str | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details
        self.fbtrace_id = fbtrace_id

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (code={self.code}): {self.details}"
        return f"{self.message} (code={self.code})"


def resolve_access_token(access_token: str | None) -> str:
    """Use the given token, falling back to the configured Page access token."""
    return access_token or get_settings().facebook_page_access_token


def _error_from_body(data: dict[str, Any], status_code: int, operation: str) -> FacebookApiError:
    error = data.get("error")
    if isinstance(error, dict):
        return FacebookApiError(
            code=error.get("code") or status_code,
            message=error.get("message") or f"Failed to {operation}",
            details=error.get("type"),
            fbtrace_id=error.get("fbtrace_id"),
        )
    return FacebookApiError(code=status_code, message=f"Failed to {operation}")


async def graph_request(
    method: str,
    path: str,
    *,
    operation: str,
    params: dict[str, Any] | None = None,
    json_body: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Call the Graph API and return the decoded JSON body.

    Args:
        method: HTTP method
        path: Path below the versioned Graph API URL, e.g. ``/123/messages``
        operation: Short description used in logs and error messages
        params: Query parameters, including the access token
        json_body: JSON request body

    Raises:
        FacebookApiError: On transport failure, a non-JSON body, a Graph
            ``error`` body or an HTTP error status
    """
    start_time = time.time()
    url = f"{FACEBOOK_GRAPH_API_URL}{path}"

    logfire.info(
        "Calling Facebook Graph API",
        operation=operation,
        method=method,
        path=path,
        params=redact_tokens(params or {}),
    )

    try:
        settings = get_settings()
        async with httpx.AsyncClient(timeout=settings.facebook_api_timeout_seconds) as client:
            response = await client.request(method, url, params=params, json=json_body)
    except httpx.RequestError as e:
        elapsed = time.time() - start_time
        logfire.error(
            "Facebook API request error",
            operation=operation,
            error=str(e),
            error_type=type(e).__name__,
            response_time_ms=elapsed * 1000,
        )
        raise FacebookApiError(code=0, message=f"Failed to {operation}", details=str(e)) from e

    elapsed = time.time() - start_time

    try:
        data = response.json()
    except ValueError as e:
        logfire.error(
            "Facebook API returned a non-JSON body",
            operation=operation,
            status_code=response.status_code,
            response_body=response.text[:500],
            response_time_ms=elapsed * 1000,
        )
        raise FacebookApiError(
            code=0,
            message=f"Failed to parse {operation} response",
            details=str(e),
        ) from e

    if not isinstance(data, dict):
        raise FacebookApiError(code=0, message=f"Failed to parse {operation} response")

    if "error" in data or response.status_code >= 400:
        api_error = _error_from_body(data, response.status_code, operation)
        logfire.error(
            "Facebook API error",
            operation=operation,
            status_code=response.status_code,
            error_code=api_error.code,
            error=api_error.message,
            fbtrace_id=api_error.fbtrace_id,
            response_time_ms=elapsed * 1000,
        )
        raise api_error

    logfire.info(
        "Facebook API call succeeded",
        operation=operation,
        status_code=response.status_code,
        response_time_ms=elapsed * 1000,
    )
    return data
