"""Pure classifiers mapping one event payload to exactly one category.

Webhook events are not disjoint unions: a message may carry a quick reply
and attachments at the same time. The check order below decides which
callbacks fire for such payloads and must not be reordered.
"""

from messenger_platform.dispatch.categories import EventCategory
from messenger_platform.models.messenger import EchoMessage, Message, Postback


def classify_message(message: Message) -> EventCategory:
    """Classify an incoming user message."""
    if message.quick_reply:
        return EventCategory.QUICK_REPLY
    if message.commands:
        return EventCategory.COMMAND
    if message.referral:
        return EventCategory.REFERRAL
    if message.attachments:
        has_product_template = any(
            attachment.type == "template"
            and attachment.payload is not None
            and attachment.payload.product
            for attachment in message.attachments
        )
        return EventCategory.PRODUCT if has_product_template else EventCategory.ATTACHMENT
    if message.text:
        return EventCategory.TEXT
    return EventCategory.UNKNOWN


def classify_postback(postback: Postback) -> EventCategory:
    """Classify a postback; anything unrecognized is a plain button press."""
    if postback.referral:
        return EventCategory.REFERRAL

    payload = postback.payload.lower()
    if "get_started" in payload:
        return EventCategory.GET_STARTED
    if "menu" in payload or "persistent" in payload:
        return EventCategory.PERSISTENT_MENU

    return EventCategory.BUTTON


def classify_echo(message: EchoMessage) -> EventCategory:
    """Classify an echo by its first attachment, then by text."""
    if message.attachments:
        attachment = message.attachments[0]
        payload = attachment.payload

        if attachment.type == "template":
            if payload is not None and payload.product:
                return EventCategory.PRODUCT
            if payload is not None and payload.template_type == "media":
                return EventCategory.MEDIA
            return EventCategory.TEMPLATE
        if attachment.type == "fallback":
            return EventCategory.FALLBACK
        # image, video, audio, file and anything Facebook adds later
        return EventCategory.ATTACHMENT

    if message.text:
        return EventCategory.TEXT

    return EventCategory.UNKNOWN
