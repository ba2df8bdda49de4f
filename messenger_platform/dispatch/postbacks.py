"""Dispatcher and accessors for postback events.

Postbacks come from postback buttons, the Get Started button and persistent
menu items. Besides its category, every postback is also routed to the
callbacks subscribed to its exact payload string.
"""

from typing import Any

from messenger_platform.dispatch.categories import Category, EventCategory, PayloadCategory
from messenger_platform.dispatch.classifiers import classify_postback
from messenger_platform.dispatch.dispatcher import WebhookDispatcher
from messenger_platform.dispatch.registry import WebhookCallback
from messenger_platform.models.messenger import PostbackEvent, PostbacksWebhookPayload

REFERRAL_SOURCE_SHORTLINK = "SHORTLINK"
REFERRAL_SOURCE_ADS = "ADS"


class PostbackDispatcher(WebhookDispatcher[PostbackEvent]):
    """Routes ``messaging_postbacks`` webhook events."""

    family = "postback"
    payload_model = PostbacksWebhookPayload
    event_model = PostbackEvent

    def classify(self, event: PostbackEvent) -> EventCategory:
        return classify_postback(event.postback)

    def categories_for(self, event: PostbackEvent) -> list[Category]:
        categories: list[Category] = [self.classify(event)]
        if event.postback.payload:
            categories.append(PayloadCategory(payload=event.postback.payload))
        return categories

    def on_postback(
        self,
        category_or_callback: Category | str | WebhookCallback,
        callback: WebhookCallback | None = None,
    ) -> Any:
        """Register for one postback category, or for all postbacks."""
        return self._on(category_or_callback, callback)

    def on_button_postback(self, callback: WebhookCallback) -> WebhookCallback:
        return self.register(EventCategory.BUTTON, callback)

    def on_get_started_postback(self, callback: WebhookCallback) -> WebhookCallback:
        return self.register(EventCategory.GET_STARTED, callback)

    def on_persistent_menu_postback(self, callback: WebhookCallback) -> WebhookCallback:
        return self.register(EventCategory.PERSISTENT_MENU, callback)

    def on_referral_postback(self, callback: WebhookCallback) -> WebhookCallback:
        return self.register(EventCategory.REFERRAL, callback)

    def on_payload_postback(self, payload: str, callback: WebhookCallback) -> WebhookCallback:
        """Register for postbacks whose payload equals ``payload`` exactly."""
        return self.register(PayloadCategory(payload=payload), callback)


# =============================================================================
# Accessors
# =============================================================================


def get_postback_payload(event: PostbackEvent) -> str:
    """Developer-defined payload of the pressed button."""
    return event.postback.payload


def get_postback_title(event: PostbackEvent) -> str | None:
    """Title of the pressed button, if any."""
    return event.postback.title or None


def get_sender_psid(event: PostbackEvent) -> str | None:
    """Page-scoped id of the user, None for Chat Plugin users."""
    return event.sender.id or None


def get_sender_user_ref(event: PostbackEvent) -> str | None:
    """Chat Plugin user reference, if any."""
    return event.sender.user_ref or None


def get_page_id(event: PostbackEvent) -> str:
    """Id of the Page that received the postback."""
    return event.recipient.id


def has_referral(event: PostbackEvent) -> bool:
    """Whether the postback carries a referral."""
    return event.postback.referral is not None


def get_referral_ref(event: PostbackEvent) -> str | None:
    """The ref parameter of the referral, if any."""
    referral = event.postback.referral
    return (referral.ref or None) if referral else None


def get_referral_source(event: PostbackEvent) -> str | None:
    """Referral source such as SHORTLINK or ADS, if any."""
    referral = event.postback.referral
    return (referral.source or None) if referral else None


def get_referral_type(event: PostbackEvent) -> str | None:
    """Referral type such as OPEN_THREAD, if any."""
    referral = event.postback.referral
    return (referral.type or None) if referral else None


def is_from_me_link(event: PostbackEvent) -> bool:
    """Whether the conversation was opened from an m.me link."""
    return get_referral_source(event) == REFERRAL_SOURCE_SHORTLINK


def is_from_ads(event: PostbackEvent) -> bool:
    """Whether the conversation was opened from an ad."""
    return get_referral_source(event) == REFERRAL_SOURCE_ADS


def is_get_started(event: PostbackEvent) -> bool:
    """Whether the postback came from the Get Started button."""
    return "get_started" in event.postback.payload.lower()


def has_payload(event: PostbackEvent, payload: str) -> bool:
    """Whether the postback payload equals payload exactly."""
    return event.postback.payload == payload


def get_message_id(event: PostbackEvent) -> str | None:
    """Message id of the postback, if any."""
    return event.postback.mid or None
