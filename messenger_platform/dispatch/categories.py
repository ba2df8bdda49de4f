"""Event categories used as callback registry keys."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class EventCategory(str, Enum):
    """Static categories produced by the classifiers.

    ``ALL`` never comes out of a classifier; callbacks registered under it
    run for every dispatched event.
    """

    ALL = "all"
    TEXT = "text"
    ATTACHMENT = "attachment"
    QUICK_REPLY = "quick_reply"
    REFERRAL = "referral"
    COMMAND = "command"
    PRODUCT = "product"
    GET_STARTED = "get_started"
    PERSISTENT_MENU = "persistent_menu"
    BUTTON = "button"
    TEMPLATE = "template"
    MEDIA = "media"
    FALLBACK = "fallback"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


class PayloadCategory(BaseModel):
    """Postback category keyed by the literal payload string.

    Kept apart from :class:`EventCategory` so a postback whose payload is
    ``"text"`` never lands on the ``text`` callbacks.
    """

    model_config = ConfigDict(frozen=True)

    payload: str

    def __str__(self) -> str:
        return f"payload:{self.payload}"


Category = EventCategory | PayloadCategory


def to_category(value: "Category | str") -> Category:
    """Normalize a registration key.

    Plain strings must name a static category; dynamic payload keys have to
    be passed as :class:`PayloadCategory`.

    Raises:
        ValueError: If ``value`` is a string that names no static category
    """
    if isinstance(value, (EventCategory, PayloadCategory)):
        return value
    try:
        return EventCategory(value)
    except ValueError:
        raise ValueError(f"Unknown event category: {value!r}") from None
