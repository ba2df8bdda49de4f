"""FastAPI application initialization."""

from contextlib import asynccontextmanager

import logfire
import sentry_sdk
from fastapi import FastAPI
from sentry_sdk.integrations.fastapi import FastApiIntegration

from messenger_platform.api import health, webhook
from messenger_platform.config import get_settings
from messenger_platform.dispatch import get_webhook_dispatchers
from messenger_platform.logging_config import setup_logfire
from messenger_platform.middleware.correlation_id import CorrelationIDMiddleware

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()

    setup_logfire(app)

    if settings.sentry_dsn:
        sentry_sdk.init(
            dsn=settings.sentry_dsn,
            traces_sample_rate=settings.sentry_traces_sample_rate,
            environment=settings.env,
            integrations=[FastApiIntegration()],
        )

    dispatchers = get_webhook_dispatchers()
    logfire.info(
        "Application startup complete",
        environment=settings.env,
        page_id=settings.facebook_page_id,
        message_callbacks=len(dispatchers.messages.registry),
        postback_callbacks=len(dispatchers.postbacks.registry),
        echo_callbacks=len(dispatchers.echoes.registry),
    )

    yield

    logfire.info("Application shutdown complete")


app = FastAPI(
    title="Messenger Platform Webhooks",
    description="Facebook Messenger webhook dispatch and Send API client",
    version=APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(CorrelationIDMiddleware)

app.include_router(health.router, tags=["health"])
app.include_router(webhook.router, prefix="/webhook", tags=["webhook"])


@app.get("/")
def root():
    """Root endpoint."""
    settings = get_settings()
    return {
        "message": "Messenger Platform Webhooks API",
        "environment": settings.env,
        "version": APP_VERSION,
    }
