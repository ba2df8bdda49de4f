"""Split one webhook delivery across the message, postback and echo dispatchers.

Facebook sends every subscribed field of a Page to the same callback URL, so
a single delivery can mix user messages, postbacks and echoes. Events of
other kinds (deliveries, reads, reactions) are dropped here.
"""

from collections.abc import Mapping
from typing import Any

from messenger_platform.config import Settings, get_settings
from messenger_platform.constants import WEBHOOK_OBJECT_PAGE
from messenger_platform.dispatch.dispatcher import WebhookStructureError
from messenger_platform.dispatch.echoes import EchoDispatcher
from messenger_platform.dispatch.messages import MessageDispatcher
from messenger_platform.dispatch.postbacks import PostbackDispatcher

MESSAGES = "messages"
POSTBACKS = "postbacks"
ECHOES = "echoes"


def _family_of(event: Any) -> str | None:
    if not isinstance(event, Mapping):
        return None
    if "postback" in event:
        return POSTBACKS
    message = event.get("message")
    if isinstance(message, Mapping):
        return ECHOES if message.get("is_echo") else MESSAGES
    return None


def split_webhook_payload(payload: Mapping[str, Any]) -> dict[str, dict[str, Any]]:
    """Partition a raw webhook payload into one payload per family.

    Entry ids and times are preserved in every partition. Standby events are
    only kept for echoes; a family without events is left out of the result.

    Raises:
        WebhookStructureError: If ``object`` is not ``"page"``, ``entry`` is
            not a list of objects, or an entry's ``messaging`` or
            ``standby`` is not a list
    """
    if payload.get("object") != WEBHOOK_OBJECT_PAGE:
        raise WebhookStructureError("Invalid webhook object type")

    entries = payload.get("entry") or []
    if not isinstance(entries, list):
        raise WebhookStructureError("Invalid webhook payload")

    partitions: dict[str, list[dict[str, Any]]] = {MESSAGES: [], POSTBACKS: [], ECHOES: []}

    for entry in entries:
        if not isinstance(entry, Mapping):
            raise WebhookStructureError("Invalid webhook payload")

        raw_messaging = entry.get("messaging") or []
        raw_standby = entry.get("standby") or []
        if not isinstance(raw_messaging, list) or not isinstance(raw_standby, list):
            raise WebhookStructureError("Invalid webhook payload")

        messaging: dict[str, list[Any]] = {MESSAGES: [], POSTBACKS: [], ECHOES: []}
        for event in raw_messaging:
            family = _family_of(event)
            if family:
                messaging[family].append(event)

        standby = [event for event in raw_standby if _family_of(event) == ECHOES]

        for family, events in messaging.items():
            family_standby = standby if family == ECHOES else []
            if events or family_standby:
                partitions[family].append(
                    {
                        "id": entry.get("id"),
                        "time": entry.get("time"),
                        "messaging": events,
                        "standby": family_standby,
                    }
                )

    return {
        family: {"object": WEBHOOK_OBJECT_PAGE, "entry": family_entries}
        for family, family_entries in partitions.items()
        if family_entries
    }


class WebhookDispatchers:
    """The three family dispatchers of one application.

    Built once at startup; callbacks are registered during setup and the
    bundle is then shared by the webhook route.
    """

    def __init__(
        self,
        messages: MessageDispatcher | None = None,
        postbacks: PostbackDispatcher | None = None,
        echoes: EchoDispatcher | None = None,
    ):
        self.messages = messages or MessageDispatcher()
        self.postbacks = postbacks or PostbackDispatcher()
        self.echoes = echoes or EchoDispatcher()

    @classmethod
    def from_settings(cls, settings: Settings) -> "WebhookDispatchers":
        dispatchers = cls()
        dispatchers.set_options(
            page_id=settings.facebook_page_id,
            enable_logging=settings.dispatcher_enable_logging,
        )
        dispatchers.echoes.set_options(handle_standby_events=settings.handle_standby_events)
        return dispatchers

    def set_options(self, **changes: Any) -> None:
        """Apply the same option changes to all three dispatchers."""
        for dispatcher in (self.messages, self.postbacks, self.echoes):
            dispatcher.set_options(**changes)

    async def process_webhook(self, payload: Mapping[str, Any]) -> None:
        """Dispatch a raw delivery, messages first, then postbacks, then echoes.

        Every family is parsed before the first callback runs, so a delivery
        is either rejected as a whole or dispatched as a whole.

        Raises:
            WebhookStructureError: When the delivery is not a Page webhook
        """
        partitions = split_webhook_payload(payload)
        dispatchers = {MESSAGES: self.messages, POSTBACKS: self.postbacks, ECHOES: self.echoes}

        parsed = [
            (dispatchers[family], dispatchers[family].parse_payload(partitions[family]))
            for family in (MESSAGES, POSTBACKS, ECHOES)
            if family in partitions
        ]

        for dispatcher, family_payload in parsed:
            await dispatcher.dispatch_payload(family_payload)


# Global instance
_webhook_dispatchers: WebhookDispatchers | None = None


def get_webhook_dispatchers() -> WebhookDispatchers:
    """Get the application's dispatchers, configured from settings on first use."""
    global _webhook_dispatchers
    if _webhook_dispatchers is None:
        _webhook_dispatchers = WebhookDispatchers.from_settings(get_settings())
    return _webhook_dispatchers


def reset_webhook_dispatchers() -> None:
    """Drop the global dispatchers and every registered callback (for testing)."""
    global _webhook_dispatchers
    _webhook_dispatchers = None
