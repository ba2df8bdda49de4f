"""Incoming Facebook Messenger webhook models.

One payload shape is shared by the three webhook families (messages,
postbacks, echoes); only the event model differs. Every model keeps unknown
fields because the Graph API adds new ones without versioning the webhook.
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class WebhookModel(BaseModel):
    """Base for webhook models: unknown fields are kept, not rejected."""

    model_config = ConfigDict(extra="allow")


class Sender(WebhookModel):
    """Event sender: a PSID for users, the Page ID for echoes."""

    id: str | None = None
    user_ref: str | None = None  # Chat Plugin users


class Recipient(WebhookModel):
    """Event recipient."""

    id: str


# =============================================================================
# Messages
# =============================================================================


class QuickReply(WebhookModel):
    payload: str


class ReplyTo(WebhookModel):
    mid: str


class ProductElement(WebhookModel):
    """Catalog product shown in a product template."""

    id: str | None = None
    retailer_id: str | None = None
    image_url: str | None = None
    title: str | None = None
    subtitle: str | None = None


class ProductTemplate(WebhookModel):
    elements: list[ProductElement] = Field(default_factory=list)


class AttachmentPayload(WebhookModel):
    url: str | None = None
    title: str | None = None
    sticker_id: int | None = None
    reel_video_id: int | None = None
    product: ProductTemplate | None = None


class MessageAttachment(WebhookModel):
    """Attachment on an incoming message (image, video, template, ...)."""

    type: str
    payload: AttachmentPayload | None = None


class ReferralProduct(WebhookModel):
    id: str


class AdsContextData(WebhookModel):
    ad_title: str | None = None
    photo_url: str | None = None
    video_url: str | None = None
    post_id: str | None = None
    product_id: str | None = None
    flow_id: str | None = None


class MessageReferral(WebhookModel):
    """Referral attached to a message (shops product page, ads, m.me link)."""

    product: ReferralProduct | None = None
    source: str | None = None
    type: str | None = None
    ref: str | None = None
    ad_id: str | None = None
    ads_context_data: AdsContextData | None = None


class MessageCommand(WebhookModel):
    name: str


class Message(WebhookModel):
    """A message sent by a user to the Page."""

    mid: str | None = None
    text: str | None = None
    quick_reply: QuickReply | None = None
    reply_to: ReplyTo | None = None
    attachments: list[MessageAttachment] | None = None
    referral: MessageReferral | None = None
    commands: list[MessageCommand] | None = None


class MessagingEvent(WebhookModel):
    sender: Sender
    recipient: Recipient
    timestamp: int | None = None
    message: Message


# =============================================================================
# Postbacks
# =============================================================================


class PostbackReferral(WebhookModel):
    ref: str | None = None
    source: str | None = None  # "SHORTLINK" or "ADS"
    type: str | None = None  # "OPEN_THREAD"


class Postback(WebhookModel):
    """Postback fired by a button, Get Started or a persistent menu item."""

    mid: str | None = None
    title: str | None = None
    payload: str
    referral: PostbackReferral | None = None


class PostbackEvent(WebhookModel):
    sender: Sender
    recipient: Recipient
    timestamp: int | None = None
    postback: Postback


# =============================================================================
# Echoes
# =============================================================================


class EchoAttachmentPayload(WebhookModel):
    url: str | None = None
    title: str | None = None
    template_type: str | None = None
    buttons: list[Any] | None = None
    elements: list[Any] | None = None
    product: ProductTemplate | None = None


class EchoAttachment(WebhookModel):
    type: str
    title: str | None = None  # fallback attachments
    url: str | None = None  # fallback attachments
    payload: EchoAttachmentPayload | None = None


class EchoMessage(WebhookModel):
    """A message the Page itself sent, reflected back to the webhook."""

    mid: str | None = None
    is_echo: bool = False
    app_id: int | None = None
    metadata: str | None = None
    text: str | None = None
    attachments: list[EchoAttachment] | None = None


class EchoEvent(WebhookModel):
    sender: Sender
    recipient: Recipient
    timestamp: int | None = None
    message: EchoMessage


# =============================================================================
# Envelope
# =============================================================================

EventT = TypeVar("EventT", bound=BaseModel)


class WebhookEntry(WebhookModel, Generic[EventT]):
    """One Page's batch of events in a single webhook delivery."""

    id: str
    time: int | None = None
    messaging: list[EventT] = Field(default_factory=list)
    standby: list[EventT] = Field(default_factory=list)


class WebhookPayload(WebhookModel, Generic[EventT]):
    """Facebook webhook payload."""

    object: str
    entry: list[WebhookEntry[EventT]] = Field(default_factory=list)


MessagesWebhookPayload = WebhookPayload[MessagingEvent]
PostbacksWebhookPayload = WebhookPayload[PostbackEvent]
EchoesWebhookPayload = WebhookPayload[EchoEvent]
