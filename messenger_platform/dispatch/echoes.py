"""Dispatcher and accessors for message echoes.

Echoes are messages the Page itself sent (from this app, another app or the
Page inbox) reflected back to the webhook. Events without ``is_echo: true``
are skipped, and standby deliveries are dispatched unless
``handle_standby_events`` is turned off.
"""

from typing import Any, Iterable

import logfire

from messenger_platform.constants import PAGE_INBOX_APP_ID
from messenger_platform.dispatch.categories import Category, EventCategory
from messenger_platform.dispatch.classifiers import classify_echo
from messenger_platform.dispatch.dispatcher import WebhookDispatcher
from messenger_platform.dispatch.registry import WebhookCallback
from messenger_platform.models.messenger import (
    EchoAttachment,
    EchoesWebhookPayload,
    EchoEvent,
    ProductElement,
    WebhookEntry,
)


class EchoDispatcher(WebhookDispatcher[EchoEvent]):
    """Routes ``message_echoes`` webhook events."""

    family = "echo"
    payload_model = EchoesWebhookPayload
    event_model = EchoEvent

    def classify(self, event: EchoEvent) -> EventCategory:
        return classify_echo(event.message)

    def accepts(self, event: EchoEvent) -> bool:
        if event.message.is_echo is True:
            return True
        if self.options.enable_logging:
            logfire.warn(
                "Received non-echo message in echo dispatcher",
                mid=event.message.mid,
            )
        return False

    def events_for(self, entry: WebhookEntry) -> Iterable[EchoEvent]:
        if self.options.handle_standby_events:
            return [*entry.messaging, *entry.standby]
        return entry.messaging

    async def process_echo_webhook(self, payload: Any) -> None:
        await self.process_webhook(payload)

    def on_echo_message(
        self,
        category_or_callback: Category | str | WebhookCallback,
        callback: WebhookCallback | None = None,
    ) -> Any:
        """Register for one echo category, or for all echoes."""
        return self._on(category_or_callback, callback)

    def on_text_echo(self, callback: WebhookCallback) -> WebhookCallback:
        return self.register(EventCategory.TEXT, callback)

    def on_attachment_echo(self, callback: WebhookCallback) -> WebhookCallback:
        """Image, video, audio and file echoes."""
        return self.register(EventCategory.ATTACHMENT, callback)

    def on_template_echo(self, callback: WebhookCallback) -> WebhookCallback:
        return self.register(EventCategory.TEMPLATE, callback)

    def on_fallback_echo(self, callback: WebhookCallback) -> WebhookCallback:
        return self.register(EventCategory.FALLBACK, callback)

    def on_product_echo(self, callback: WebhookCallback) -> WebhookCallback:
        return self.register(EventCategory.PRODUCT, callback)

    def on_media_echo(self, callback: WebhookCallback) -> WebhookCallback:
        return self.register(EventCategory.MEDIA, callback)


# =============================================================================
# Accessors
# =============================================================================


def _attachments(event: EchoEvent) -> list[EchoAttachment]:
    return event.message.attachments or []


def get_echo_message_text(event: EchoEvent) -> str | None:
    """Text the Page sent, or None."""
    return event.message.text or None


def get_page_id(event: EchoEvent) -> str | None:
    """The Page is the sender of an echo."""
    return event.sender.id


def get_recipient_psid(event: EchoEvent) -> str:
    """Page-scoped id of the user the message went to."""
    return event.recipient.id


def get_app_id(event: EchoEvent) -> int | None:
    """Id of the app that sent the message, if known."""
    return event.message.app_id


def get_metadata(event: EchoEvent) -> str | None:
    """Metadata string attached when the message was sent."""
    return event.message.metadata or None


def has_attachments(event: EchoEvent) -> bool:
    """Whether the echoed message carries attachments."""
    return bool(event.message.attachments)


def get_attachment_urls(event: EchoEvent) -> list[str]:
    """Attachment URLs, from the payload or the attachment itself."""
    urls = []
    for attachment in _attachments(event):
        url = (attachment.payload.url if attachment.payload else None) or attachment.url
        if url:
            urls.append(url)
    return urls


def get_attachment_types(event: EchoEvent) -> list[str]:
    """Types of the echoed attachments, in order."""
    return [attachment.type for attachment in _attachments(event)]


def is_template(event: EchoEvent) -> bool:
    """Whether any attachment is a template."""
    return any(attachment.type == "template" for attachment in _attachments(event))


def _product_attachment(event: EchoEvent) -> EchoAttachment | None:
    for attachment in _attachments(event):
        if (
            attachment.type == "template"
            and attachment.payload is not None
            and attachment.payload.product
        ):
            return attachment
    return None


def is_product_template(event: EchoEvent) -> bool:
    """Whether the echo carries a product template."""
    return _product_attachment(event) is not None


def get_product_elements(event: EchoEvent) -> list[ProductElement]:
    """Elements of the echoed product template."""
    attachment = _product_attachment(event)
    if attachment is None:
        return []
    return list(attachment.payload.product.elements)


def is_fallback(event: EchoEvent) -> bool:
    """Whether any attachment is a fallback attachment."""
    return any(attachment.type == "fallback" for attachment in _attachments(event))


def get_template_type(event: EchoEvent) -> str | None:
    """Template type of the first template attachment, if any."""
    for attachment in _attachments(event):
        if attachment.type == "template":
            if attachment.payload is None:
                return None
            return attachment.payload.template_type or None
    return None


def is_sent_from_page_inbox(event: EchoEvent) -> bool:
    """Whether the message was sent from the Page inbox."""
    return event.message.app_id == PAGE_INBOX_APP_ID
