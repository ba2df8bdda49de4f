"""Tests for the quick reply and template builders."""

import pytest
from hypothesis import given, strategies as st

from messenger_platform.models.template_models import (
    ButtonType,
    QuickReplyContentType,
    TextQuickReply,
)
from messenger_platform.services.template_service import (
    TemplateValidationError,
    create_account_link_button,
    create_account_unlink_button,
    create_button_template_payload,
    create_article_element,
    create_contact_quick_reply_message,
    create_coupon_template_payload,
    create_default_action,
    create_game_play_button,
    create_generic_element,
    create_generic_template_payload,
    create_location_element,
    create_multiple_choice_quick_reply_message,
    create_phone_number_button,
    create_postback_button,
    create_product_element,
    create_quick_reply_message,
    create_rating_quick_reply_message,
    create_receipt_address,
    create_receipt_adjustment,
    create_receipt_element,
    create_receipt_summary,
    create_receipt_template_payload,
    create_text_quick_replies,
    create_text_quick_reply,
    create_user_email_quick_reply,
    create_user_phone_number_quick_reply,
    create_web_url_button,
    create_yes_no_quick_reply_message,
)


class TestTextQuickReply:
    """Test create_text_quick_reply()."""

    def test_title_is_trimmed(self):
        reply = create_text_quick_reply("  Red  ", "COLOR_RED", "https://img/red.png")
        assert reply.title == "Red"
        assert reply.payload == "COLOR_RED"
        assert reply.image_url == "https://img/red.png"
        assert reply.content_type == QuickReplyContentType.TEXT

    @pytest.mark.parametrize("title", ["", "   "])
    def test_title_required(self, title):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_text_quick_reply(title)
        assert exc_info.value.field == "title"

    def test_title_limit(self):
        create_text_quick_reply("x" * 20)
        with pytest.raises(TemplateValidationError) as exc_info:
            create_text_quick_reply("x" * 21)
        assert exc_info.value.field == "title"

    def test_payload_limit(self):
        create_text_quick_reply("ok", "p" * 1000)
        with pytest.raises(TemplateValidationError) as exc_info:
            create_text_quick_reply("ok", "p" * 1001)
        assert exc_info.value.field == "payload"

    def test_empty_payload_is_omitted(self):
        assert create_text_quick_reply("ok", "").payload is None

    @given(title=st.text(min_size=1, max_size=20).filter(lambda s: s.strip()))
    def test_valid_titles_accepted(self, title):
        """Property: any non-blank title within the limit is accepted trimmed."""
        assert create_text_quick_reply(title).title == title.strip()


class TestQuickReplyMessage:
    """Test create_quick_reply_message() and the canned variants."""

    def test_text_trimmed(self):
        message = create_quick_reply_message(" Pick ", [create_user_phone_number_quick_reply()])
        assert message.text == "Pick"

    def test_text_required(self):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_quick_reply_message(" ", [create_user_email_quick_reply()])
        assert exc_info.value.field == "text"

    def test_needs_at_least_one_reply(self):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_quick_reply_message("Pick", [])
        assert exc_info.value.field == "quick_replies"

    def test_at_most_thirteen(self):
        replies = [create_text_quick_reply(f"o{i}") for i in range(13)]
        assert len(create_quick_reply_message("Pick", replies).quick_replies) == 13

        with pytest.raises(TemplateValidationError):
            create_quick_reply_message("Pick", replies + [create_text_quick_reply("extra")])

    def test_text_reply_without_title(self):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_quick_reply_message("Pick", [create_user_email_quick_reply(), TextQuickReply(title="")])
        assert exc_info.value.field == "quick_replies[1]"

    def test_text_quick_replies_limit(self):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_text_quick_replies([{"title": f"o{i}"} for i in range(14)])
        assert exc_info.value.field == "options"

    def test_yes_no_defaults(self):
        message = create_yes_no_quick_reply_message("Continue?")
        assert [(r.title, r.payload) for r in message.quick_replies] == [("Yes", "YES"), ("No", "NO")]

    def test_yes_no_custom_payloads(self):
        message = create_yes_no_quick_reply_message("Continue?", "GO", "STOP")
        assert [r.payload for r in message.quick_replies] == ["GO", "STOP"]

    def test_rating_with_stars(self):
        message = create_rating_quick_reply_message("Rate us")
        assert [r.payload for r in message.quick_replies] == [f"RATING_{i}" for i in range(1, 6)]
        assert message.quick_replies[2].title == "⭐⭐⭐"

    def test_rating_without_stars(self):
        message = create_rating_quick_reply_message("Rate us", use_star_emojis=False)
        assert message.quick_replies[0].title == "1 Star"
        assert message.quick_replies[4].title == "5 Stars"

    def test_multiple_choice(self):
        message = create_multiple_choice_quick_reply_message(
            "Size?", [{"label": "Small", "value": "S"}, {"label": "Large", "value": "L"}]
        )
        assert [(r.title, r.payload) for r in message.quick_replies] == [("Small", "S"), ("Large", "L")]

    def test_contact(self):
        message = create_contact_quick_reply_message(
            "How can we reach you?", additional_options=[{"title": "Skip", "payload": "SKIP"}]
        )
        assert [r.content_type for r in message.quick_replies] == [
            QuickReplyContentType.USER_PHONE_NUMBER,
            QuickReplyContentType.USER_EMAIL,
            QuickReplyContentType.TEXT,
        ]

    def test_contact_with_nothing_fails(self):
        with pytest.raises(TemplateValidationError):
            create_contact_quick_reply_message("Reach you?", include_phone=False, include_email=False)


class TestButtons:
    """Test the button builders."""

    def test_web_url_button(self):
        button = create_web_url_button("Visit", "https://example.com", webview_height_ratio="tall")
        assert button.type == ButtonType.WEB_URL
        assert button.webview_height_ratio == "tall"

    def test_title_limit(self):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_postback_button("x" * 21, "P")
        assert exc_info.value.field == "title"

    def test_postback_payload_limit(self):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_postback_button("Buy", "p" * 1001)
        assert exc_info.value.field == "payload"

    def test_phone_number_needs_plus(self):
        assert create_phone_number_button("Call", "+15105551234").payload == "+15105551234"
        with pytest.raises(TemplateValidationError) as exc_info:
            create_phone_number_button("Call", "15105551234")
        assert exc_info.value.field == "phone_number"

    def test_account_buttons(self):
        assert create_account_link_button("https://auth").model_dump(mode="json") == {
            "type": "account_link",
            "url": "https://auth",
        }
        assert create_account_unlink_button().model_dump(mode="json") == {"type": "account_unlink"}

    def test_game_play_button(self):
        button = create_game_play_button("Play", "GAME", player_id="p1")
        assert button.game_metadata.player_id == "p1"
        assert create_game_play_button("Play").game_metadata is None


class TestButtonTemplatePayload:
    """Test create_button_template_payload()."""

    def test_valid(self):
        payload = create_button_template_payload("Hi", [create_postback_button("A", "A")])
        assert payload.template_type == "button"
        assert len(payload.buttons) == 1

    def test_text_required(self):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_button_template_payload("", [create_postback_button("A", "A")])
        assert exc_info.value.field == "text"

    def test_text_limit(self):
        create_button_template_payload("t" * 640, [create_postback_button("A", "A")])
        with pytest.raises(TemplateValidationError):
            create_button_template_payload("t" * 641, [create_postback_button("A", "A")])

    def test_button_count(self):
        buttons = [create_postback_button(str(i), str(i)) for i in range(4)]
        create_button_template_payload("Pick", buttons[:3])
        with pytest.raises(TemplateValidationError) as exc_info:
            create_button_template_payload("Pick", buttons)
        assert exc_info.value.field == "buttons"
        with pytest.raises(TemplateValidationError):
            create_button_template_payload("Pick", [])

    def test_validation_error_is_value_error(self):
        assert issubclass(TemplateValidationError, ValueError)


class TestGenericTemplate:
    """Test the generic template builders."""

    def test_element_is_trimmed_and_sparse(self):
        element = create_generic_element(" Latte ", subtitle=" Hot ", buttons=[])
        assert element.model_dump(mode="json", exclude_none=True) == {
            "title": "Latte",
            "subtitle": "Hot",
        }

    @pytest.mark.parametrize("title", ["", "   ", "x" * 81])
    def test_element_title(self, title):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_generic_element(title)
        assert exc_info.value.field == "title"

    def test_element_subtitle_limit(self):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_generic_element("Latte", subtitle="s" * 81)
        assert exc_info.value.field == "subtitle"

    def test_element_button_limit(self):
        buttons = [create_postback_button(str(i), str(i)) for i in range(4)]
        create_generic_element("Latte", buttons=buttons[:3])
        with pytest.raises(TemplateValidationError) as exc_info:
            create_generic_element("Latte", buttons=buttons)
        assert exc_info.value.field == "buttons"

    @pytest.mark.parametrize("url", ["", "not a url", "/relative/path"])
    def test_default_action_url(self, url):
        with pytest.raises(TemplateValidationError):
            create_default_action(url)

    def test_image_url_is_validated(self):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_generic_element("Latte", image_url="cdn/latte.png")
        assert exc_info.value.field == "image_url"

    def test_payload_element_count(self):
        elements = [create_generic_element(f"Item {i}") for i in range(11)]
        payload = create_generic_template_payload(elements[:10], "square")
        assert payload.template_type == "generic"
        assert payload.image_aspect_ratio == "square"
        with pytest.raises(TemplateValidationError) as exc_info:
            create_generic_template_payload(elements)
        assert exc_info.value.field == "elements"
        with pytest.raises(TemplateValidationError):
            create_generic_template_payload([])

    def test_product_element(self):
        element = create_product_element(
            "Beans", "$12", "https://img.example.com/b.png", "https://shop.example.com/b"
        )
        assert element.subtitle == "$12"
        assert element.default_action.model_dump(mode="json", exclude_none=True) == {
            "type": "web_url",
            "url": "https://shop.example.com/b",
            "webview_height_ratio": "tall",
        }
        described = create_product_element(
            "Beans",
            "$12",
            "https://img.example.com/b.png",
            "https://shop.example.com/b",
            subtitle="Single origin",
            webview_height_ratio="compact",
        )
        assert described.subtitle == "Single origin"
        assert described.default_action.webview_height_ratio == "compact"

    def test_location_element(self):
        element = create_location_element(
            "Main St", "1 Main St", "https://img.example.com/m.png", "https://maps.example.com/?q=1"
        )
        assert element.subtitle == "1 Main St"
        assert element.default_action.url == "https://maps.example.com/?q=1"
        assert element.default_action.webview_height_ratio is None

    def test_article_element(self):
        element = create_article_element(
            "News", "Summary", "https://img.example.com/n.png", "https://blog.example.com/n"
        )
        assert element.subtitle == "Summary"
        assert element.default_action.webview_height_ratio == "tall"


class TestCouponTemplate:
    """Test create_coupon_template_payload()."""

    def test_code_coupon(self):
        payload = create_coupon_template_payload(
            " 10% off ", coupon_code=" SAVE10 ", coupon_pre_message="Here you go"
        )
        assert payload.model_dump(mode="json", exclude_none=True) == {
            "template_type": "coupon",
            "title": "10% off",
            "coupon_code": "SAVE10",
            "coupon_pre_message": "Here you go",
        }

    def test_url_coupon(self):
        payload = create_coupon_template_payload(
            "Free shipping",
            coupon_url="https://shop.example.com/c",
            coupon_url_button_title="Shop",
        )
        assert payload.coupon_code is None
        assert payload.coupon_url_button_title == "Shop"

    def test_needs_code_or_url(self):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_coupon_template_payload("Deal")
        assert exc_info.value.field == "coupon_code"

    def test_not_both_code_and_url(self):
        with pytest.raises(TemplateValidationError):
            create_coupon_template_payload(
                "Deal", coupon_code="SAVE", coupon_url="https://shop.example.com"
            )

    def test_code_without_spaces(self):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_coupon_template_payload("Deal", coupon_code="SAVE 10")
        assert "spaces" in exc_info.value.message

    def test_invalid_coupon_url(self):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_coupon_template_payload("Deal", coupon_url="shop")
        assert exc_info.value.field == "coupon_url"


class TestReceiptTemplate:
    """Test the receipt template builders."""

    def test_address_country(self):
        address = create_receipt_address("1 Main St", "Menlo Park", "94025", "CA", "us")
        assert address.country == "US"
        with pytest.raises(TemplateValidationError) as exc_info:
            create_receipt_address("1 Main St", "Menlo Park", "94025", "CA", "USA")
        assert exc_info.value.field == "country"
        with pytest.raises(TemplateValidationError):
            create_receipt_address("", "Menlo Park", "94025", "CA", "US")

    @pytest.mark.parametrize(
        "kwargs,field",
        [
            ({"total_cost": -1}, "total_cost"),
            ({"total_cost": 1, "subtotal": -1}, "subtotal"),
            ({"total_cost": 1, "shipping_cost": -1}, "shipping_cost"),
            ({"total_cost": 1, "total_tax": -1}, "total_tax"),
        ],
    )
    def test_summary_not_negative(self, kwargs, field):
        with pytest.raises(TemplateValidationError) as exc_info:
            create_receipt_summary(**kwargs)
        assert exc_info.value.field == field

    def test_adjustment(self):
        assert create_receipt_adjustment(" Coupon ", -5).name == "Coupon"
        with pytest.raises(TemplateValidationError):
            create_receipt_adjustment("Coupon", 0)
        with pytest.raises(TemplateValidationError):
            create_receipt_adjustment(" ", 5)

    def test_element(self):
        element = create_receipt_element(" Latte ", 4.5, quantity=2, currency="usd")
        assert element.title == "Latte"
        assert element.currency == "USD"
        with pytest.raises(TemplateValidationError) as exc_info:
            create_receipt_element("Latte", -1)
        assert exc_info.value.field == "price"
        with pytest.raises(TemplateValidationError) as exc_info:
            create_receipt_element("Latte", 4.5, quantity=0)
        assert exc_info.value.field == "quantity"

    def test_payload(self):
        payload = create_receipt_template_payload(
            " Stephane Crozatier ",
            "12345678902",
            "usd",
            "Visa 2345",
            create_receipt_summary(56.14, subtotal=75.0),
            elements=[create_receipt_element("Latte", 4.5)],
            adjustments=[],
            sharable=False,
        )
        dumped = payload.model_dump(mode="json", exclude_none=True)
        assert dumped["template_type"] == "receipt"
        assert dumped["recipient_name"] == "Stephane Crozatier"
        assert dumped["currency"] == "USD"
        assert dumped["summary"] == {"subtotal": 75.0, "total_cost": 56.14}
        assert dumped["sharable"] is False
        assert "adjustments" not in dumped

    @pytest.mark.parametrize("field", ["recipient_name", "order_number", "currency", "payment_method"])
    def test_payload_required_fields(self, field):
        values = {
            "recipient_name": "Ann",
            "order_number": "1",
            "currency": "USD",
            "payment_method": "Visa",
        }
        values[field] = " "
        with pytest.raises(TemplateValidationError) as exc_info:
            create_receipt_template_payload(summary=create_receipt_summary(1), **values)
        assert exc_info.value.field == field

    def test_payload_element_limit(self):
        elements = [create_receipt_element(f"Item {i}", 1) for i in range(101)]
        with pytest.raises(TemplateValidationError) as exc_info:
            create_receipt_template_payload(
                "Ann", "1", "USD", "Visa", create_receipt_summary(101), elements=elements
            )
        assert exc_info.value.field == "elements"
