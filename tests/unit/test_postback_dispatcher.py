"""Tests for PostbackDispatcher and the postback accessors."""

import pytest

from messenger_platform.dispatch import EventCategory, PayloadCategory, postbacks
from messenger_platform.models.messenger import PostbackEvent


def make_event(sender=None, **postback):
    return PostbackEvent.model_validate(
        {
            "sender": sender or {"id": "user123"},
            "recipient": {"id": "page456"},
            "timestamp": 1458692752478,
            "postback": {"mid": "m_pb", "title": "Start", **postback},
        }
    )


class TestPostbackDispatcher:
    """Test routing of postbacks."""

    @pytest.mark.asyncio
    async def test_get_started_flag(self, postback_dispatcher, postback_payload):
        triggered = False

        async def on_get_started(event):
            nonlocal triggered
            triggered = True

        postback_dispatcher.on_get_started_postback(on_get_started)

        await postback_dispatcher.process_webhook(postback_payload({"payload": "GET_STARTED"}))

        assert triggered is True

    @pytest.mark.asyncio
    async def test_exact_payload_routing(self, postback_dispatcher, postback_payload):
        seen = []
        postback_dispatcher.on_payload_postback("BUY_NOW", seen.append)

        await postback_dispatcher.process_webhook(postback_payload({"payload": "BUY_NOW"}))
        await postback_dispatcher.process_webhook(postback_payload({"payload": "buy_now"}))
        await postback_dispatcher.process_webhook(postback_payload({"payload": "BUY_NOW_2"}))

        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_payload_named_like_a_category(self, postback_dispatcher, postback_payload):
        calls = []
        postback_dispatcher.on_payload_postback("button", lambda e: calls.append("payload"))
        postback_dispatcher.on_button_postback(lambda e: calls.append("button"))

        await postback_dispatcher.process_webhook(postback_payload({"payload": "button"}))

        assert calls == ["button", "payload"]

    @pytest.mark.asyncio
    async def test_order_is_category_payload_then_all(
        self, postback_dispatcher, postback_payload
    ):
        order = []
        postback_dispatcher.on_postback(lambda e: order.append("all"))
        postback_dispatcher.on_payload_postback("MAIN_MENU", lambda e: order.append("payload"))
        postback_dispatcher.on_persistent_menu_postback(lambda e: order.append("menu"))

        await postback_dispatcher.process_webhook(postback_payload({"payload": "MAIN_MENU"}))

        assert order == ["menu", "payload", "all"]

    def test_empty_payload_has_no_payload_category(self, postback_dispatcher):
        event = make_event(payload="")
        assert postback_dispatcher.categories_for(event) == [EventCategory.BUTTON]

    def test_categories_for_includes_payload(self, postback_dispatcher):
        event = make_event(payload="GET_STARTED")
        assert postback_dispatcher.categories_for(event) == [
            EventCategory.GET_STARTED,
            PayloadCategory(payload="GET_STARTED"),
        ]

    @pytest.mark.asyncio
    async def test_referral_postback(self, postback_dispatcher, postback_payload):
        seen = []
        postback_dispatcher.on_referral_postback(seen.append)

        await postback_dispatcher.process_webhook(
            postback_payload(
                {"payload": "GET_STARTED", "referral": {"ref": "promo", "source": "SHORTLINK"}}
            )
        )

        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_on_postback_category_decorator(self, postback_dispatcher, postback_payload):
        seen = []

        @postback_dispatcher.on_postback("button")
        def handle_button(event):
            seen.append(event.postback.payload)

        await postback_dispatcher.process_webhook(postback_payload({"payload": "ORDER_42"}))

        assert seen == ["ORDER_42"]


class TestPostbackAccessors:
    """Test postback accessor helpers."""

    def test_basic_fields(self):
        event = make_event(payload="GET_STARTED")
        assert postbacks.get_postback_payload(event) == "GET_STARTED"
        assert postbacks.get_postback_title(event) == "Start"
        assert postbacks.get_sender_psid(event) == "user123"
        assert postbacks.get_page_id(event) == "page456"
        assert postbacks.get_message_id(event) == "m_pb"
        assert postbacks.is_get_started(event) is True
        assert postbacks.has_payload(event, "GET_STARTED") is True
        assert postbacks.has_payload(event, "get_started") is False

    def test_chat_plugin_sender(self):
        event = make_event(sender={"user_ref": "ref-1"}, payload="X")
        assert postbacks.get_sender_psid(event) is None
        assert postbacks.get_sender_user_ref(event) == "ref-1"

    def test_me_link_referral(self):
        event = make_event(
            payload="X", referral={"ref": "spring", "source": "SHORTLINK", "type": "OPEN_THREAD"}
        )
        assert postbacks.has_referral(event) is True
        assert postbacks.get_referral_ref(event) == "spring"
        assert postbacks.get_referral_source(event) == "SHORTLINK"
        assert postbacks.get_referral_type(event) == "OPEN_THREAD"
        assert postbacks.is_from_me_link(event) is True
        assert postbacks.is_from_ads(event) is False

    def test_ads_referral(self):
        event = make_event(payload="X", referral={"source": "ADS"})
        assert postbacks.is_from_ads(event) is True
        assert postbacks.get_referral_ref(event) is None

    def test_no_referral(self):
        event = make_event(payload="X")
        assert postbacks.has_referral(event) is False
        assert postbacks.get_referral_source(event) is None
        assert postbacks.is_from_me_link(event) is False
