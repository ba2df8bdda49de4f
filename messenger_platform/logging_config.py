"""Centralized logging configuration with Pydantic Logfire integration."""

import logging
from typing import Any

import logfire
from fastapi import FastAPI

from messenger_platform.config import get_settings

SENSITIVE_KEYS = (
    "token",
    "access_token",
    "fb_exchange_token",
    "client_secret",
    "secret",
    "authorization",
)


def setup_logfire(app: FastAPI) -> None:
    """
    Initialize and configure Pydantic Logfire for observability.

    Sets up:
    - FastAPI instrumentation (request/response tracing)
    - Pydantic instrumentation (webhook payload validation)
    - Python logging, console format locally and bare messages elsewhere
    """
    settings = get_settings()

    logfire_config: dict[str, Any] = {
        "environment": settings.env,
    }
    if settings.logfire_token:
        logfire_config["token"] = settings.logfire_token

    logfire.configure(**logfire_config)
    logfire.instrument_fastapi(app)
    logfire.instrument_pydantic()

    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    if settings.env == "local":
        logging.basicConfig(
            level=log_level,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )
    else:
        # Logfire handles structured formatting
        logging.basicConfig(level=log_level, format="%(message)s")


def mask_pii(value: str | None, mask_char: str = "*") -> str:
    """
    Mask potentially sensitive data in logs.

    Args:
        value: Value to mask
        mask_char: Character to use for masking

    Returns:
        Masked string showing only the first and last two characters
    """
    if not value:
        return ""

    if len(value) <= 4:
        return mask_char * len(value)

    return f"{value[:2]}{mask_char * (len(value) - 4)}{value[-2:]}"


def redact_tokens(data: dict[str, Any]) -> dict[str, Any]:
    """
    Redact access tokens and app secrets from request parameters before logging.

    Args:
        data: Query parameters or body that may contain credentials

    Returns:
        Copy of the dictionary with credentials masked
    """
    redacted = data.copy()

    for key in SENSITIVE_KEYS:
        if key in redacted:
            if isinstance(redacted[key], str):
                redacted[key] = mask_pii(redacted[key])
            elif isinstance(redacted[key], dict):
                redacted[key] = redact_tokens(redacted[key])

    return redacted
