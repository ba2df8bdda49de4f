"""Builders for quick replies and button, generic, coupon and receipt templates.

Builders validate against the Messenger Platform limits and raise
``TemplateValidationError`` naming the offending field, so a bad template is
rejected before any Graph API call is made.
"""

from collections.abc import Iterable, Mapping
from urllib.parse import urlsplit

from messenger_platform.constants import (
    MAX_BUTTON_PAYLOAD_CHARS,
    MAX_BUTTON_TEMPLATE_TEXT_CHARS,
    MAX_BUTTON_TITLE_CHARS,
    MAX_BUTTONS_PER_GENERIC_ELEMENT,
    MAX_BUTTONS_PER_TEMPLATE,
    MAX_GENERIC_TEMPLATE_ELEMENTS,
    MAX_QUICK_REPLIES,
    MAX_QUICK_REPLY_PAYLOAD_CHARS,
    MAX_QUICK_REPLY_TITLE_CHARS,
    MAX_RECEIPT_ELEMENTS,
    MAX_TEMPLATE_SUBTITLE_CHARS,
    MAX_TEMPLATE_TITLE_CHARS,
)
from messenger_platform.models.template_models import (
    AccountLinkButton,
    AccountUnlinkButton,
    Button,
    ButtonTemplatePayload,
    CouponTemplatePayload,
    DefaultAction,
    GameMetadata,
    GamePlayButton,
    GenericTemplateElement,
    GenericTemplatePayload,
    PhoneNumberButton,
    PostbackButton,
    QuickReplyMessage,
    QuickReplyOption,
    ReceiptAddress,
    ReceiptAdjustment,
    ReceiptElement,
    ReceiptSummary,
    ReceiptTemplatePayload,
    TextQuickReply,
    UserEmailQuickReply,
    UserPhoneNumberQuickReply,
    WebUrlButton,
)


class TemplateValidationError(ValueError):
    """A template builder received input the Messenger Platform would reject."""

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field
        self.message = message


# =============================================================================
# Quick replies
# =============================================================================


def create_text_quick_reply(
    title: str,
    payload: str | None = None,
    image_url: str | None = None,
) -> TextQuickReply:
    """
    Create a text quick reply.

    Args:
        title: Chip label, required, at most 20 characters (stored trimmed)
        payload: Developer payload echoed back on tap, at most 1000 characters
        image_url: Optional icon shown beside the title

    Raises:
        TemplateValidationError: If the title or payload is invalid
    """
    if not title or not title.strip():
        raise TemplateValidationError("title", "Title is required for text quick replies")
    if len(title) > MAX_QUICK_REPLY_TITLE_CHARS:
        raise TemplateValidationError(
            "title",
            f"Quick reply title must be {MAX_QUICK_REPLY_TITLE_CHARS} characters or less",
        )
    if payload and len(payload) > MAX_QUICK_REPLY_PAYLOAD_CHARS:
        raise TemplateValidationError(
            "payload",
            f"Quick reply payload must be {MAX_QUICK_REPLY_PAYLOAD_CHARS} characters or less",
        )

    return TextQuickReply(
        title=title.strip(),
        payload=payload or None,
        image_url=image_url or None,
    )


def create_user_phone_number_quick_reply() -> UserPhoneNumberQuickReply:
    return UserPhoneNumberQuickReply()


def create_user_email_quick_reply() -> UserEmailQuickReply:
    return UserEmailQuickReply()


def create_text_quick_replies(options: Iterable[Mapping[str, str]]) -> list[TextQuickReply]:
    """Create text quick replies from ``{"title", "payload", "image_url"}`` mappings."""
    options = list(options)
    if len(options) > MAX_QUICK_REPLIES:
        raise TemplateValidationError(
            "options", f"Maximum of {MAX_QUICK_REPLIES} quick replies allowed"
        )
    return [
        create_text_quick_reply(
            option.get("title", ""),
            option.get("payload"),
            option.get("image_url"),
        )
        for option in options
    ]


def create_quick_reply_message(
    text: str,
    quick_replies: list[QuickReplyOption],
) -> QuickReplyMessage:
    """
    Combine text and quick replies into a message body.

    Raises:
        TemplateValidationError: If the text is blank, there are no quick
            replies or more than 13, or a text quick reply has no title
    """
    if not text or not text.strip():
        raise TemplateValidationError("text", "Text is required for quick reply message")
    if not quick_replies:
        raise TemplateValidationError("quick_replies", "At least one quick reply is required")
    if len(quick_replies) > MAX_QUICK_REPLIES:
        raise TemplateValidationError(
            "quick_replies", f"Maximum of {MAX_QUICK_REPLIES} quick replies allowed"
        )

    for index, quick_reply in enumerate(quick_replies):
        if isinstance(quick_reply, TextQuickReply) and not quick_reply.title:
            raise TemplateValidationError(
                f"quick_replies[{index}]",
                f"Quick reply at index {index} is missing required title",
            )

    return QuickReplyMessage(text=text.strip(), quick_replies=list(quick_replies))


def create_yes_no_quick_reply_message(
    text: str,
    yes_payload: str | None = None,
    no_payload: str | None = None,
) -> QuickReplyMessage:
    return create_quick_reply_message(
        text,
        [
            create_text_quick_reply("Yes", yes_payload or "YES"),
            create_text_quick_reply("No", no_payload or "NO"),
        ],
    )


def create_rating_quick_reply_message(
    text: str,
    use_star_emojis: bool = True,
) -> QuickReplyMessage:
    """Five quick replies with payloads ``RATING_1`` to ``RATING_5``."""
    quick_replies = []
    for rating in range(1, 6):
        if use_star_emojis:
            title = "⭐" * rating
        else:
            title = f"{rating} Star{'s' if rating > 1 else ''}"
        quick_replies.append(create_text_quick_reply(title, f"RATING_{rating}"))
    return create_quick_reply_message(text, quick_replies)


def create_multiple_choice_quick_reply_message(
    text: str,
    choices: Iterable[Mapping[str, str]],
) -> QuickReplyMessage:
    """One quick reply per ``{"label", "value", "image_url"}`` choice."""
    quick_replies = [
        create_text_quick_reply(choice["label"], choice["value"], choice.get("image_url"))
        for choice in choices
    ]
    return create_quick_reply_message(text, quick_replies)


def create_contact_quick_reply_message(
    text: str,
    include_phone: bool = True,
    include_email: bool = True,
    additional_options: Iterable[Mapping[str, str]] | None = None,
) -> QuickReplyMessage:
    quick_replies: list[QuickReplyOption] = []
    if include_phone:
        quick_replies.append(create_user_phone_number_quick_reply())
    if include_email:
        quick_replies.append(create_user_email_quick_reply())
    if additional_options:
        quick_replies.extend(create_text_quick_replies(additional_options))
    return create_quick_reply_message(text, quick_replies)


# =============================================================================
# Button template
# =============================================================================


def _validate_button_title(title: str) -> str:
    if len(title) > MAX_BUTTON_TITLE_CHARS:
        raise TemplateValidationError(
            "title", f"Button title must be {MAX_BUTTON_TITLE_CHARS} characters or less"
        )
    return title


def _validate_button_payload(payload: str) -> str:
    if len(payload) > MAX_BUTTON_PAYLOAD_CHARS:
        raise TemplateValidationError(
            "payload", f"Button payload must be {MAX_BUTTON_PAYLOAD_CHARS} characters or less"
        )
    return payload


def create_web_url_button(
    title: str,
    url: str,
    webview_height_ratio: str | None = None,
    messenger_extensions: bool | None = None,
    fallback_url: str | None = None,
    webview_share_button: str | None = None,
) -> WebUrlButton:
    return WebUrlButton(
        title=_validate_button_title(title),
        url=url,
        webview_height_ratio=webview_height_ratio,
        messenger_extensions=messenger_extensions,
        fallback_url=fallback_url,
        webview_share_button=webview_share_button,
    )


def create_postback_button(title: str, payload: str) -> PostbackButton:
    return PostbackButton(
        title=_validate_button_title(title),
        payload=_validate_button_payload(payload),
    )


def create_phone_number_button(title: str, phone_number: str) -> PhoneNumberButton:
    """Call button; ``phone_number`` must start with ``+`` and the country code."""
    title = _validate_button_title(title)
    if not phone_number.startswith("+"):
        raise TemplateValidationError(
            "phone_number", "Phone number must start with + and include country code"
        )
    return PhoneNumberButton(title=title, payload=phone_number)


def create_account_link_button(url: str) -> AccountLinkButton:
    return AccountLinkButton(url=url)


def create_account_unlink_button() -> AccountUnlinkButton:
    return AccountUnlinkButton()


def create_game_play_button(
    title: str,
    payload: str | None = None,
    player_id: str | None = None,
    context_id: str | None = None,
) -> GamePlayButton:
    game_metadata = None
    if player_id or context_id:
        game_metadata = GameMetadata(player_id=player_id, context_id=context_id)
    return GamePlayButton(
        title=_validate_button_title(title),
        payload=payload,
        game_metadata=game_metadata,
    )


def create_button_template_payload(text: str, buttons: list[Button]) -> ButtonTemplatePayload:
    """
    Build a button template payload.

    Raises:
        TemplateValidationError: If the text is empty or longer than 640
            characters, or there are not between 1 and 3 buttons
    """
    if not text:
        raise TemplateValidationError("text", "Text is required for button template message")
    if len(text) > MAX_BUTTON_TEMPLATE_TEXT_CHARS:
        raise TemplateValidationError(
            "text", f"Text must be {MAX_BUTTON_TEMPLATE_TEXT_CHARS} characters or less"
        )
    if not buttons:
        raise TemplateValidationError("buttons", "At least one button is required")
    if len(buttons) > MAX_BUTTONS_PER_TEMPLATE:
        raise TemplateValidationError(
            "buttons",
            f"Maximum of {MAX_BUTTONS_PER_TEMPLATE} buttons allowed per button template",
        )
    return ButtonTemplatePayload(text=text, buttons=list(buttons))


# =============================================================================
# Generic template
# =============================================================================


def _validate_url(url: str, field: str = "url") -> str:
    if not url or not url.strip():
        raise TemplateValidationError(field, "URL is required")
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        raise TemplateValidationError(field, "Invalid URL format")
    return url


def _validate_template_title(title: str) -> str:
    if not title or not title.strip():
        raise TemplateValidationError("title", "Title is required")
    if len(title) > MAX_TEMPLATE_TITLE_CHARS:
        raise TemplateValidationError(
            "title", f"Title must be {MAX_TEMPLATE_TITLE_CHARS} characters or less"
        )
    return title.strip()


def _validate_template_subtitle(subtitle: str) -> str:
    if len(subtitle) > MAX_TEMPLATE_SUBTITLE_CHARS:
        raise TemplateValidationError(
            "subtitle", f"Subtitle must be {MAX_TEMPLATE_SUBTITLE_CHARS} characters or less"
        )
    return subtitle.strip()


def create_default_action(
    url: str,
    webview_height_ratio: str | None = None,
    messenger_extensions: bool | None = None,
) -> DefaultAction:
    return DefaultAction(
        url=_validate_url(url),
        webview_height_ratio=webview_height_ratio,
        messenger_extensions=messenger_extensions,
    )


def create_generic_element(
    title: str,
    image_url: str | None = None,
    subtitle: str | None = None,
    default_action: DefaultAction | None = None,
    buttons: list[Button] | None = None,
) -> GenericTemplateElement:
    """
    Create one element (card) of a generic template.

    Args:
        title: Card title, required, at most 80 characters (stored trimmed)
        image_url: Card image
        subtitle: Text below the title, at most 80 characters
        default_action: URL opened when the card itself is tapped
        buttons: Up to 3 buttons; an empty list is omitted

    Raises:
        TemplateValidationError: If any of the above limits is broken
    """
    title = _validate_template_title(title)
    if subtitle:
        subtitle = _validate_template_subtitle(subtitle)
    if image_url:
        _validate_url(image_url, "image_url")
    if buttons and len(buttons) > MAX_BUTTONS_PER_GENERIC_ELEMENT:
        raise TemplateValidationError(
            "buttons",
            f"Maximum of {MAX_BUTTONS_PER_GENERIC_ELEMENT} buttons allowed per generic template element",
        )

    return GenericTemplateElement(
        title=title,
        image_url=image_url or None,
        subtitle=subtitle or None,
        default_action=default_action,
        buttons=list(buttons) if buttons else None,
    )


def create_generic_template_payload(
    elements: list[GenericTemplateElement],
    image_aspect_ratio: str | None = None,
) -> GenericTemplatePayload:
    """Between 1 and 10 elements; more than one renders as a carousel."""
    if not elements:
        raise TemplateValidationError(
            "elements", "At least one element is required for generic template"
        )
    if len(elements) > MAX_GENERIC_TEMPLATE_ELEMENTS:
        raise TemplateValidationError(
            "elements",
            f"Maximum of {MAX_GENERIC_TEMPLATE_ELEMENTS} elements allowed in generic template carousel",
        )
    return GenericTemplatePayload(elements=list(elements), image_aspect_ratio=image_aspect_ratio)


def create_product_element(
    title: str,
    price: str,
    image_url: str,
    product_url: str,
    subtitle: str | None = None,
    buttons: list[Button] | None = None,
    webview_height_ratio: str | None = None,
) -> GenericTemplateElement:
    """Product card: subtitle falls back to the price, tapping opens the product page."""
    return create_generic_element(
        title,
        image_url=image_url,
        subtitle=subtitle or price,
        default_action=create_default_action(product_url, webview_height_ratio or "tall"),
        buttons=buttons,
    )


def create_location_element(
    title: str,
    address: str,
    image_url: str,
    map_url: str,
    buttons: list[Button] | None = None,
) -> GenericTemplateElement:
    return create_generic_element(
        title,
        image_url=image_url,
        subtitle=address,
        default_action=create_default_action(map_url),
        buttons=buttons,
    )


def create_article_element(
    title: str,
    summary: str,
    image_url: str,
    article_url: str,
    buttons: list[Button] | None = None,
    webview_height_ratio: str | None = None,
) -> GenericTemplateElement:
    return create_generic_element(
        title,
        image_url=image_url,
        subtitle=summary,
        default_action=create_default_action(article_url, webview_height_ratio or "tall"),
        buttons=buttons,
    )


# =============================================================================
# Coupon template
# =============================================================================


def _validate_coupon_code(coupon_code: str) -> str:
    if not coupon_code or not coupon_code.strip():
        raise TemplateValidationError(
            "coupon_code", "Coupon code is required when not using coupon URL"
        )
    coupon_code = coupon_code.strip()
    if " " in coupon_code:
        raise TemplateValidationError("coupon_code", "Coupon code cannot contain spaces")
    return coupon_code


def create_coupon_template_payload(
    title: str,
    coupon_code: str | None = None,
    coupon_url: str | None = None,
    subtitle: str | None = None,
    coupon_pre_message: str | None = None,
    coupon_url_button_title: str | None = None,
    image_url: str | None = None,
    payload: str | None = None,
) -> CouponTemplatePayload:
    """
    Build a coupon template payload.

    Exactly one of ``coupon_code`` and ``coupon_url`` must be given. Codes may
    not contain spaces.

    Raises:
        TemplateValidationError: If the title, subtitle, code or URLs are
            invalid, or both or neither of code and URL are given
    """
    title = _validate_template_title(title)
    if not coupon_code and not coupon_url:
        raise TemplateValidationError(
            "coupon_code", "Either coupon code or coupon URL must be provided"
        )
    if coupon_code and coupon_url:
        raise TemplateValidationError(
            "coupon_code", "Cannot provide both coupon code and coupon URL"
        )
    if coupon_code:
        coupon_code = _validate_coupon_code(coupon_code)
    if coupon_url:
        _validate_url(coupon_url, "coupon_url")
    if subtitle:
        subtitle = _validate_template_subtitle(subtitle)
    if image_url:
        _validate_url(image_url, "image_url")

    return CouponTemplatePayload(
        title=title,
        subtitle=subtitle or None,
        coupon_code=coupon_code or None,
        coupon_pre_message=coupon_pre_message.strip() if coupon_pre_message else None,
        coupon_url=coupon_url or None,
        coupon_url_button_title=(
            coupon_url_button_title.strip() if coupon_url_button_title else None
        ),
        image_url=image_url or None,
        payload=payload.strip() if payload else None,
    )


# =============================================================================
# Receipt template
# =============================================================================


def create_receipt_address(
    street_1: str,
    city: str,
    postal_code: str,
    state: str,
    country: str,
    street_2: str | None = None,
) -> ReceiptAddress:
    if not all([street_1, city, postal_code, state, country]):
        raise TemplateValidationError(
            "address", "Street 1, city, postal code, state, and country are required for address"
        )
    if len(country) != 2:
        raise TemplateValidationError("country", "Country must be a two-letter abbreviation")
    return ReceiptAddress(
        street_1=street_1,
        street_2=street_2,
        city=city,
        postal_code=postal_code,
        state=state,
        country=country.upper(),
    )


def create_receipt_summary(
    total_cost: float,
    subtotal: float | None = None,
    shipping_cost: float | None = None,
    total_tax: float | None = None,
) -> ReceiptSummary:
    """Order totals; no amount may be negative."""
    amounts = {
        "total_cost": total_cost,
        "subtotal": subtotal,
        "shipping_cost": shipping_cost,
        "total_tax": total_tax,
    }
    for field, amount in amounts.items():
        if amount is not None and amount < 0:
            raise TemplateValidationError(field, f"{field} cannot be negative")
    return ReceiptSummary(**amounts)


def create_receipt_adjustment(name: str, amount: float) -> ReceiptAdjustment:
    if not name or not name.strip():
        raise TemplateValidationError("name", "Adjustment name is required")
    if amount == 0:
        raise TemplateValidationError("amount", "Adjustment amount cannot be zero")
    return ReceiptAdjustment(name=name.strip(), amount=amount)


def create_receipt_element(
    title: str,
    price: float,
    subtitle: str | None = None,
    quantity: int | None = None,
    currency: str | None = None,
    image_url: str | None = None,
) -> ReceiptElement:
    if not title or not title.strip():
        raise TemplateValidationError("title", "Element title is required")
    if price < 0:
        raise TemplateValidationError("price", "Element price cannot be negative")
    if quantity is not None and quantity <= 0:
        raise TemplateValidationError("quantity", "Element quantity must be greater than 0")
    return ReceiptElement(
        title=title.strip(),
        price=price,
        subtitle=subtitle.strip() if subtitle else None,
        quantity=quantity,
        currency=currency.upper() if currency else None,
        image_url=image_url,
    )


def create_receipt_template_payload(
    recipient_name: str,
    order_number: str,
    currency: str,
    payment_method: str,
    summary: ReceiptSummary,
    merchant_name: str | None = None,
    timestamp: str | None = None,
    elements: list[ReceiptElement] | None = None,
    address: ReceiptAddress | None = None,
    adjustments: list[ReceiptAdjustment] | None = None,
    sharable: bool | None = None,
) -> ReceiptTemplatePayload:
    """
    Build a receipt template payload.

    Args:
        recipient_name: Name shown on the receipt
        order_number: Unique order number
        currency: Currency code, stored upper-cased
        payment_method: Free text, e.g. ``Visa 2345``
        summary: Order totals from ``create_receipt_summary``
        merchant_name: Shown instead of the Page name
        timestamp: Order time as UNIX seconds
        elements: Up to 100 line items; an empty list is omitted
        address: Shipping address
        adjustments: Discounts or surcharges; an empty list is omitted
        sharable: Whether the native share button is shown

    Raises:
        TemplateValidationError: If a required field is blank, the summary is
            missing or there are more than 100 elements
    """
    required = {
        "recipient_name": recipient_name,
        "order_number": order_number,
        "currency": currency,
        "payment_method": payment_method,
    }
    for field, value in required.items():
        if not value or not value.strip():
            raise TemplateValidationError(field, f"{field} is required")
    if summary is None:
        raise TemplateValidationError("summary", "Summary is required")
    if elements and len(elements) > MAX_RECEIPT_ELEMENTS:
        raise TemplateValidationError(
            "elements", f"Maximum of {MAX_RECEIPT_ELEMENTS} elements allowed per receipt"
        )

    return ReceiptTemplatePayload(
        recipient_name=recipient_name.strip(),
        order_number=order_number.strip(),
        currency=currency.upper(),
        payment_method=payment_method.strip(),
        summary=summary,
        merchant_name=merchant_name.strip() if merchant_name else None,
        timestamp=timestamp or None,
        elements=list(elements) if elements else None,
        address=address,
        adjustments=list(adjustments) if adjustments else None,
        sharable=sharable,
    )
