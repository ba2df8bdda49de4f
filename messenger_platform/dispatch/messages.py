"""Dispatcher and accessors for incoming user messages.

Categories: text, attachment, product, referral, command, quick_reply
(and unknown for messages carrying none of those).

Example:
    >>> messages = MessageDispatcher(page_id="page456")
    >>> @messages.on_text_message
    ... async def echo_back(event):
    ...     await send_text_message(get_page_id(event), get_sender_psid(event), event.message.text)
"""

from typing import Any

from messenger_platform.dispatch.categories import Category, EventCategory
from messenger_platform.dispatch.classifiers import classify_message
from messenger_platform.dispatch.dispatcher import WebhookDispatcher
from messenger_platform.dispatch.registry import WebhookCallback
from messenger_platform.models.messenger import MessagesWebhookPayload, MessagingEvent


class MessageDispatcher(WebhookDispatcher[MessagingEvent]):
    """Routes ``messages`` webhook events."""

    family = "message"
    payload_model = MessagesWebhookPayload
    event_model = MessagingEvent

    def classify(self, event: MessagingEvent) -> EventCategory:
        return classify_message(event.message)

    def on_message(
        self,
        category_or_callback: Category | str | WebhookCallback,
        callback: WebhookCallback | None = None,
    ) -> Any:
        """Register for one message category, or for all messages.

        ``on_message(cb)`` registers for every message;
        ``on_message("text", cb)`` for one category; ``@on_message("text")``
        works as a decorator.
        """
        return self._on(category_or_callback, callback)

    def on_text_message(self, callback: WebhookCallback) -> WebhookCallback:
        return self.register(EventCategory.TEXT, callback)

    def on_attachment_message(self, callback: WebhookCallback) -> WebhookCallback:
        return self.register(EventCategory.ATTACHMENT, callback)

    def on_product_message(self, callback: WebhookCallback) -> WebhookCallback:
        """Product template messages (a template attachment with a product)."""
        return self.register(EventCategory.PRODUCT, callback)

    def on_referral_message(self, callback: WebhookCallback) -> WebhookCallback:
        return self.register(EventCategory.REFERRAL, callback)

    def on_command_message(self, callback: WebhookCallback) -> WebhookCallback:
        return self.register(EventCategory.COMMAND, callback)

    def on_quick_reply_message(self, callback: WebhookCallback) -> WebhookCallback:
        return self.register(EventCategory.QUICK_REPLY, callback)


# =============================================================================
# Accessors
# =============================================================================


def get_message_text(event: MessagingEvent) -> str | None:
    """Text of the message, or None when it has none."""
    return event.message.text or None


def get_sender_psid(event: MessagingEvent) -> str | None:
    """Page-scoped id of the user who sent the message."""
    return event.sender.id


def get_page_id(event: MessagingEvent) -> str:
    """Id of the Page that received the message."""
    return event.recipient.id


def has_attachments(event: MessagingEvent) -> bool:
    """Whether the message carries any attachment."""
    return bool(event.message.attachments)


def get_attachment_urls(event: MessagingEvent) -> list[str]:
    """URLs of the media attachments; attachments without one are skipped."""
    return [
        attachment.payload.url
        for attachment in event.message.attachments or []
        if attachment.payload is not None and attachment.payload.url
    ]


def is_quick_reply(event: MessagingEvent) -> bool:
    """Whether the message is a quick reply tap."""
    return event.message.quick_reply is not None


def get_quick_reply_payload(event: MessagingEvent) -> str | None:
    """Payload of the tapped quick reply, if any."""
    quick_reply = event.message.quick_reply
    return (quick_reply.payload or None) if quick_reply else None


def has_referral(event: MessagingEvent) -> bool:
    """Whether the message came in through a referral."""
    return event.message.referral is not None


def get_referral_product_id(event: MessagingEvent) -> str | None:
    """Product id of a shop referral, if any."""
    referral = event.message.referral
    if referral is None or referral.product is None:
        return None
    return referral.product.id or None


def get_referral_ad_id(event: MessagingEvent) -> str | None:
    """Id of the ad that referred the user, if any."""
    referral = event.message.referral
    return (referral.ad_id or None) if referral else None


def has_commands(event: MessagingEvent) -> bool:
    """Whether the message invokes bot commands."""
    return bool(event.message.commands)


def get_command_names(event: MessagingEvent) -> list[str]:
    """Names of the commands the message invokes."""
    return [command.name for command in event.message.commands or []]
