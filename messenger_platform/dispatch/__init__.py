"""Webhook event classification and callback dispatch."""

from messenger_platform.dispatch.categories import EventCategory, PayloadCategory
from messenger_platform.dispatch.dispatcher import (
    DispatcherOptions,
    WebhookDispatcher,
    WebhookStructureError,
)
from messenger_platform.dispatch.echoes import EchoDispatcher
from messenger_platform.dispatch.messages import MessageDispatcher
from messenger_platform.dispatch.postbacks import PostbackDispatcher
from messenger_platform.dispatch.registry import CallbackRegistry
from messenger_platform.dispatch.routing import (
    WebhookDispatchers,
    get_webhook_dispatchers,
    reset_webhook_dispatchers,
    split_webhook_payload,
)

__all__ = [
    "CallbackRegistry",
    "DispatcherOptions",
    "EchoDispatcher",
    "EventCategory",
    "MessageDispatcher",
    "PayloadCategory",
    "PostbackDispatcher",
    "WebhookDispatcher",
    "WebhookDispatchers",
    "WebhookStructureError",
    "get_webhook_dispatchers",
    "reset_webhook_dispatchers",
    "split_webhook_payload",
]
