"""
Tests for deep-link parsing and view routing.
"""

from urllib.parse import parse_qs, urlsplit

import pytest

from sacco_portal.deeplink import (
    DeepLinkParams,
    create_deep_link,
    get_target_view,
    notification_target,
    parse_deep_link,
    unread_count,
)
from sacco_portal.models import Notification


class TestParseDeepLink:
    def test_query_string(self):
        params = parse_deep_link("?chat_id=55&member_id=MEM-1&view=loans&resource_id=L1")
        assert params == DeepLinkParams("55", "MEM-1", "loans", "L1")

    def test_full_url(self):
        params = parse_deep_link("https://portal.example/client?view=accounts")
        assert params.view == "accounts"
        assert params.chat_id is None

    def test_empty(self):
        assert parse_deep_link("") == DeepLinkParams()


class TestCreateDeepLink:
    def test_adds_non_empty_params(self):
        url = create_deep_link(
            "https://portal.example/login?lang=am",
            DeepLinkParams(chat_id="55", view="loans"),
        )
        query = parse_qs(urlsplit(url).query)
        assert query == {"lang": ["am"], "chat_id": ["55"], "view": ["loans"]}

    def test_parse_reads_what_create_writes(self):
        params = DeepLinkParams("1", "MEM-1", "accounts", "A9")
        assert parse_deep_link(create_deep_link("https://p.example/", params)) == params


class TestGetTargetView:
    @pytest.mark.parametrize(
        "view,resource_id,expected",
        [
            ("accounts", None, "/client/accounts"),
            ("accounts", "A1", "/client/accounts/A1/transactions"),
            ("loans", None, "/client/loans"),
            ("loans", "L1", "/client/loans/L1"),
            ("requests", None, "/client/requests"),
            ("profile", None, "/client/profile"),
            ("notifications", None, "/client/notifications"),
            ("unknown", None, "/client/dashboard"),
            (None, None, "/client/dashboard"),
        ],
    )
    def test_views(self, view, resource_id, expected):
        assert get_target_view(DeepLinkParams(view=view, resource_id=resource_id)) == expected


class TestNotifications:
    def test_targets(self):
        def n(resource_type, resource_id="X"):
            return Notification(id="1", resource_type=resource_type, resource_id=resource_id)

        assert notification_target(n("transaction")) == "/client/accounts"
        assert notification_target(n("loan", "L1")) == "/client/loans/L1"
        assert notification_target(n("request")) == "/client/requests"
        assert notification_target(n("other")) is None
        assert notification_target(n(None, None)) is None

    def test_unread_count(self):
        notifications = [
            Notification(id="1", is_read=True),
            Notification(id="2"),
            Notification(id="3", is_read=False),
        ]
        assert unread_count(notifications) == 2
