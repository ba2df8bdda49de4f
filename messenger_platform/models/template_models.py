"""Outgoing message templates: quick replies, button, generic, coupon and receipt templates."""

from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field


class QuickReplyContentType(str, Enum):
    TEXT = "text"
    USER_PHONE_NUMBER = "user_phone_number"
    USER_EMAIL = "user_email"


class TextQuickReply(BaseModel):
    """Text quick reply shown as a chip above the composer."""

    content_type: Literal[QuickReplyContentType.TEXT] = QuickReplyContentType.TEXT
    title: str = Field(..., description="Chip label, at most 20 characters")
    payload: str | None = None
    image_url: str | None = None


class UserPhoneNumberQuickReply(BaseModel):
    """Offers the phone number stored on the user's profile."""

    content_type: Literal[QuickReplyContentType.USER_PHONE_NUMBER] = (
        QuickReplyContentType.USER_PHONE_NUMBER
    )


class UserEmailQuickReply(BaseModel):
    """Offers the email stored on the user's profile."""

    content_type: Literal[QuickReplyContentType.USER_EMAIL] = QuickReplyContentType.USER_EMAIL


QuickReplyOption = TextQuickReply | UserPhoneNumberQuickReply | UserEmailQuickReply


class QuickReplyMessage(BaseModel):
    """Message body carrying text plus quick replies."""

    text: str
    quick_replies: list[QuickReplyOption]


class ButtonType(str, Enum):
    WEB_URL = "web_url"
    POSTBACK = "postback"
    PHONE_NUMBER = "phone_number"
    ACCOUNT_LINK = "account_link"
    ACCOUNT_UNLINK = "account_unlink"
    GAME_PLAY = "game_play"


class WebUrlButton(BaseModel):
    type: Literal[ButtonType.WEB_URL] = ButtonType.WEB_URL
    title: str
    url: str
    webview_height_ratio: Literal["compact", "tall", "full"] | None = None
    messenger_extensions: bool | None = None
    fallback_url: str | None = None
    webview_share_button: Literal["hide"] | None = None


class PostbackButton(BaseModel):
    type: Literal[ButtonType.POSTBACK] = ButtonType.POSTBACK
    title: str
    payload: str


class PhoneNumberButton(BaseModel):
    type: Literal[ButtonType.PHONE_NUMBER] = ButtonType.PHONE_NUMBER
    title: str
    payload: str = Field(..., description="Phone number with country code, e.g. +15105551234")


class AccountLinkButton(BaseModel):
    type: Literal[ButtonType.ACCOUNT_LINK] = ButtonType.ACCOUNT_LINK
    url: str


class AccountUnlinkButton(BaseModel):
    type: Literal[ButtonType.ACCOUNT_UNLINK] = ButtonType.ACCOUNT_UNLINK


class GameMetadata(BaseModel):
    player_id: str | None = None
    context_id: str | None = None


class GamePlayButton(BaseModel):
    type: Literal[ButtonType.GAME_PLAY] = ButtonType.GAME_PLAY
    title: str
    payload: str | None = None
    game_metadata: GameMetadata | None = None


Button = (
    WebUrlButton
    | PostbackButton
    | PhoneNumberButton
    | AccountLinkButton
    | AccountUnlinkButton
    | GamePlayButton
)


class ButtonTemplatePayload(BaseModel):
    """Payload of a ``template`` attachment with ``template_type: button``."""

    template_type: Literal["button"] = "button"
    text: str
    buttons: list[Button]


WebviewHeightRatio = Literal["compact", "tall", "full"]
ImageAspectRatio = Literal["horizontal", "square"]


class DefaultAction(BaseModel):
    """URL opened when a generic template element is tapped."""

    type: Literal["web_url"] = "web_url"
    url: str
    messenger_extensions: bool | None = None
    webview_height_ratio: WebviewHeightRatio | None = None


class GenericTemplateElement(BaseModel):
    title: str
    image_url: str | None = None
    subtitle: str | None = None
    default_action: DefaultAction | None = None
    buttons: list[Button] | None = None


class GenericTemplatePayload(BaseModel):
    """Payload of a ``generic`` template; more than one element renders a carousel."""

    template_type: Literal["generic"] = "generic"
    elements: list[GenericTemplateElement]
    image_aspect_ratio: ImageAspectRatio | None = None


class CouponTemplatePayload(BaseModel):
    """Payload of a ``coupon`` template; carries a code or a URL, never both."""

    template_type: Literal["coupon"] = "coupon"
    title: str
    subtitle: str | None = None
    coupon_code: str | None = None
    coupon_pre_message: str | None = None
    coupon_url: str | None = None
    coupon_url_button_title: str | None = None
    image_url: str | None = None
    payload: str | None = None


class ReceiptAddress(BaseModel):
    street_1: str
    street_2: str | None = None
    city: str
    postal_code: str
    state: str
    country: str = Field(..., description="Two-letter country code")


class ReceiptSummary(BaseModel):
    subtotal: float | None = None
    shipping_cost: float | None = None
    total_tax: float | None = None
    total_cost: float


class ReceiptAdjustment(BaseModel):
    name: str
    amount: float


class ReceiptElement(BaseModel):
    title: str
    subtitle: str | None = None
    quantity: int | None = None
    price: float
    currency: str | None = None
    image_url: str | None = None


class ReceiptTemplatePayload(BaseModel):
    """Payload of a ``receipt`` template: an order confirmation."""

    template_type: Literal["receipt"] = "receipt"
    sharable: bool | None = None
    recipient_name: str
    merchant_name: str | None = None
    order_number: str
    currency: str
    payment_method: str
    timestamp: str | None = None
    elements: list[ReceiptElement] | None = None
    address: ReceiptAddress | None = None
    summary: ReceiptSummary
    adjustments: list[ReceiptAdjustment] | None = None
