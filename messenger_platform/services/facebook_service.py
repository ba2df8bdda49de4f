"""Send messages through the Facebook Send API."""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

import logfire
from pydantic import BaseModel

from messenger_platform.constants import MAX_IMAGES_PER_MESSAGE, STANDARD_MESSAGING_WINDOW_HOURS
from messenger_platform.logging_config import mask_pii
from messenger_platform.models.template_models import (
    Button,
    CouponTemplatePayload,
    GenericTemplateElement,
    GenericTemplatePayload,
    QuickReplyMessage,
    QuickReplyOption,
    ReceiptTemplatePayload,
)
from messenger_platform.services.graph_api import (
    FacebookApiError,
    graph_request,
    resolve_access_token,
)
from messenger_platform.services.template_service import (
    create_article_element,
    create_button_template_payload,
    create_contact_quick_reply_message,
    create_generic_template_payload,
    create_location_element,
    create_multiple_choice_quick_reply_message,
    create_product_element,
    create_quick_reply_message,
    create_rating_quick_reply_message,
    create_yes_no_quick_reply_message,
)


class MessagingType(str, Enum):
    RESPONSE = "RESPONSE"
    UPDATE = "UPDATE"
    MESSAGE_TAG = "MESSAGE_TAG"


class MessageTag(str, Enum):
    """Tags that allow sending outside the standard messaging window."""

    CONFIRMED_EVENT_UPDATE = "CONFIRMED_EVENT_UPDATE"
    POST_PURCHASE_UPDATE = "POST_PURCHASE_UPDATE"
    ACCOUNT_UPDATE = "ACCOUNT_UPDATE"
    HUMAN_AGENT = "HUMAN_AGENT"


class AttachmentType(str, Enum):
    AUDIO = "audio"
    FILE = "file"
    IMAGE = "image"
    VIDEO = "video"
    TEMPLATE = "template"


class SendMessageResponse(BaseModel):
    recipient_id: str
    message_id: str


def _message_request(
    recipient_id: str,
    message: dict[str, Any],
    messaging_type: MessagingType,
    tag: MessageTag | None = None,
) -> dict[str, Any]:
    request: dict[str, Any] = {
        "recipient": {"id": recipient_id},
        "messaging_type": MessagingType(messaging_type).value,
        "message": message,
    }
    if tag is not None:
        request["tag"] = MessageTag(tag).value
    return request


def _template_message(payload: BaseModel) -> dict[str, Any]:
    return {
        "attachment": {
            "type": AttachmentType.TEMPLATE.value,
            "payload": payload.model_dump(mode="json", exclude_none=True),
        }
    }


async def send_message_request(
    page_id: str,
    request: dict[str, Any],
    page_access_token: str | None = None,
) -> SendMessageResponse:
    """
    POST a complete Send API request to ``/{page_id}/messages``.

    Args:
        page_id: Page sending the message
        request: Body with ``recipient``, ``messaging_type``, ``message`` and
            optionally ``tag``
        page_access_token: Page token; defaults to the configured one

    Raises:
        FacebookApiError: If the Graph API call fails
    """
    recipient_id = request.get("recipient", {}).get("id")
    logfire.info(
        "Sending Facebook message",
        page_id=page_id,
        recipient_id=mask_pii(recipient_id),
        messaging_type=request.get("messaging_type"),
    )

    data = await graph_request(
        "POST",
        f"/{page_id}/messages",
        operation="send message",
        params={"access_token": resolve_access_token(page_access_token)},
        json_body=request,
    )
    return SendMessageResponse.model_validate(data)


async def send_text_message(
    page_id: str,
    recipient_id: str,
    text: str,
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    request = _message_request(recipient_id, {"text": text}, messaging_type)
    return await send_message_request(page_id, request, page_access_token)


async def send_button_template_message(
    page_id: str,
    recipient_id: str,
    text: str,
    buttons: list[Button],
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    """Send a button template; the template is validated before sending."""
    payload = create_button_template_payload(text, buttons)
    request = _message_request(recipient_id, _template_message(payload), messaging_type)
    return await send_message_request(page_id, request, page_access_token)


async def _send_quick_reply_body(
    page_id: str,
    recipient_id: str,
    message: QuickReplyMessage,
    messaging_type: MessagingType,
    page_access_token: str | None,
) -> SendMessageResponse:
    request = _message_request(
        recipient_id, message.model_dump(mode="json", exclude_none=True), messaging_type
    )
    return await send_message_request(page_id, request, page_access_token)


async def send_quick_reply_message(
    page_id: str,
    recipient_id: str,
    text: str,
    quick_replies: list[QuickReplyOption],
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    message = create_quick_reply_message(text, quick_replies)
    return await _send_quick_reply_body(
        page_id, recipient_id, message, messaging_type, page_access_token
    )


async def send_yes_no_quick_reply_message(
    page_id: str,
    recipient_id: str,
    text: str,
    yes_payload: str | None = None,
    no_payload: str | None = None,
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    message = create_yes_no_quick_reply_message(text, yes_payload, no_payload)
    return await _send_quick_reply_body(
        page_id, recipient_id, message, messaging_type, page_access_token
    )


async def send_media_message(
    page_id: str,
    recipient_id: str,
    attachment_type: AttachmentType,
    media_url: str,
    is_reusable: bool = True,
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    """Send an image, video, audio or file by URL."""
    message = {
        "attachment": {
            "type": AttachmentType(attachment_type).value,
            "payload": {"url": media_url, "is_reusable": is_reusable},
        }
    }
    request = _message_request(recipient_id, message, messaging_type)
    return await send_message_request(page_id, request, page_access_token)


async def send_tagged_message(
    page_id: str,
    recipient_id: str,
    text: str,
    tag: MessageTag,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    """Send text outside the standard messaging window using a message tag."""
    request = _message_request(recipient_id, {"text": text}, MessagingType.MESSAGE_TAG, tag)
    return await send_message_request(page_id, request, page_access_token)


async def send_multiple_images_message(
    page_id: str,
    recipient_id: str,
    image_urls: list[str],
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    """
    Send between 1 and 30 images in one message.

    Raises:
        FacebookApiError: With code 0 if the image count is out of range,
            before any request is made; otherwise if the Graph API call fails
    """
    if not image_urls:
        raise FacebookApiError(
            code=0,
            message="Missing image URL",
            details="At least one image URL is required.",
        )
    if len(image_urls) > MAX_IMAGES_PER_MESSAGE:
        raise FacebookApiError(
            code=0,
            message="Too many images",
            details=f"Maximum of {MAX_IMAGES_PER_MESSAGE} images allowed per message.",
        )

    message = {
        "attachments": [
            {"type": AttachmentType.IMAGE.value, "payload": {"url": url}} for url in image_urls
        ]
    }
    request = _message_request(recipient_id, message, messaging_type)
    return await send_message_request(page_id, request, page_access_token)


async def send_message_with_attachment_id(
    page_id: str,
    recipient_id: str,
    attachment_type: AttachmentType,
    attachment_id: str,
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    """Send media uploaded earlier, by its reusable attachment id."""
    message = {
        "attachment": {
            "type": AttachmentType(attachment_type).value,
            "payload": {"attachment_id": attachment_id},
        }
    }
    request = _message_request(recipient_id, message, messaging_type)
    return await send_message_request(page_id, request, page_access_token)


async def send_generic_template_message(
    page_id: str,
    recipient_id: str,
    payload: GenericTemplatePayload,
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    request = _message_request(recipient_id, _template_message(payload), messaging_type)
    return await send_message_request(page_id, request, page_access_token)


async def send_coupon_template_message(
    page_id: str,
    recipient_id: str,
    payload: CouponTemplatePayload,
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    request = _message_request(recipient_id, _template_message(payload), messaging_type)
    return await send_message_request(page_id, request, page_access_token)


async def send_receipt_template_message(
    page_id: str,
    recipient_id: str,
    payload: ReceiptTemplatePayload,
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    request = _message_request(recipient_id, _template_message(payload), messaging_type)
    return await send_message_request(page_id, request, page_access_token)


async def send_carousel_generic_template_message(
    page_id: str,
    recipient_id: str,
    elements: list[GenericTemplateElement],
    image_aspect_ratio: str | None = None,
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    """Send up to 10 generic template elements as a horizontally scrolling carousel."""
    payload = create_generic_template_payload(elements, image_aspect_ratio)
    return await send_generic_template_message(
        page_id, recipient_id, payload, messaging_type, page_access_token
    )


async def send_product_carousel_message(
    page_id: str,
    recipient_id: str,
    products: list[dict[str, Any]],
    image_aspect_ratio: str | None = None,
    webview_height_ratio: str | None = None,
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    """
    Send a carousel of products.

    Args:
        products: Mappings with ``title``, ``price``, ``image_url`` and
            ``product_url``, and optionally ``subtitle`` and ``buttons``
        webview_height_ratio: Webview size for product pages, default ``tall``
    """
    elements = [
        create_product_element(
            product["title"],
            product["price"],
            product["image_url"],
            product["product_url"],
            subtitle=product.get("subtitle"),
            buttons=product.get("buttons"),
            webview_height_ratio=webview_height_ratio,
        )
        for product in products
    ]
    return await send_carousel_generic_template_message(
        page_id, recipient_id, elements, image_aspect_ratio, messaging_type, page_access_token
    )


async def send_location_carousel_message(
    page_id: str,
    recipient_id: str,
    locations: list[dict[str, Any]],
    image_aspect_ratio: str | None = None,
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    """Locations are mappings with ``title``, ``address``, ``image_url``, ``map_url`` and ``buttons``."""
    elements = [
        create_location_element(
            location["title"],
            location["address"],
            location["image_url"],
            location["map_url"],
            buttons=location.get("buttons"),
        )
        for location in locations
    ]
    return await send_carousel_generic_template_message(
        page_id, recipient_id, elements, image_aspect_ratio, messaging_type, page_access_token
    )


async def send_article_carousel_message(
    page_id: str,
    recipient_id: str,
    articles: list[dict[str, Any]],
    image_aspect_ratio: str | None = None,
    webview_height_ratio: str | None = None,
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    elements = [
        create_article_element(
            article["title"],
            article["summary"],
            article["image_url"],
            article["article_url"],
            buttons=article.get("buttons"),
            webview_height_ratio=webview_height_ratio,
        )
        for article in articles
    ]
    return await send_carousel_generic_template_message(
        page_id, recipient_id, elements, image_aspect_ratio, messaging_type, page_access_token
    )


async def send_rating_quick_reply_message(
    page_id: str,
    recipient_id: str,
    text: str,
    use_star_emojis: bool = True,
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    message = create_rating_quick_reply_message(text, use_star_emojis)
    return await _send_quick_reply_body(
        page_id, recipient_id, message, messaging_type, page_access_token
    )


async def send_multiple_choice_quick_reply_message(
    page_id: str,
    recipient_id: str,
    text: str,
    choices: list[dict[str, str]],
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    message = create_multiple_choice_quick_reply_message(text, choices)
    return await _send_quick_reply_body(
        page_id, recipient_id, message, messaging_type, page_access_token
    )


async def send_contact_quick_reply_message(
    page_id: str,
    recipient_id: str,
    text: str,
    include_phone: bool = True,
    include_email: bool = True,
    additional_options: list[dict[str, str]] | None = None,
    messaging_type: MessagingType = MessagingType.RESPONSE,
    page_access_token: str | None = None,
) -> SendMessageResponse:
    """Offer the user's profile phone number and email, plus any extra text options."""
    message = create_contact_quick_reply_message(
        text, include_phone, include_email, additional_options
    )
    return await _send_quick_reply_body(
        page_id, recipient_id, message, messaging_type, page_access_token
    )


def is_within_standard_messaging_window(
    last_interaction: datetime,
    now: datetime | None = None,
) -> bool:
    """Whether ``last_interaction`` is less than 24 hours before ``now``."""
    now = now or datetime.now(timezone.utc)
    return now - last_interaction < timedelta(hours=STANDARD_MESSAGING_WINDOW_HOURS)
