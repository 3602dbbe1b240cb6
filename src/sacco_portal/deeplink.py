"""
Deep links from the Telegram bot into portal views.

A deep link carries chat_id, member_id, view and resource_id as query
parameters; get_target_view maps them to the portal view to open.
"""

from dataclasses import asdict, dataclass
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from sacco_portal.models import Notification

DEEP_LINK_KEYS = ("chat_id", "member_id", "view", "resource_id")


@dataclass
class DeepLinkParams:
    chat_id: Optional[str] = None
    member_id: Optional[str] = None
    view: Optional[str] = None
    resource_id: Optional[str] = None


def parse_deep_link(search: str) -> DeepLinkParams:
    """Parse a query string (with or without a leading ``?``) or a full URL."""
    if "://" in search:
        search = urlsplit(search).query
    query = parse_qs(search.lstrip("?"))
    values = {key: (query.get(key) or [None])[0] or None for key in DEEP_LINK_KEYS}
    return DeepLinkParams(**values)


def create_deep_link(base: str, params: DeepLinkParams) -> str:
    """Append the non-empty parameters to ``base``, replacing existing ones."""
    parts = urlsplit(base)
    query = {k: v[0] for k, v in parse_qs(parts.query).items()}
    query.update({k: v for k, v in asdict(params).items() if v})
    return urlunsplit(parts._replace(query=urlencode(query)))


def get_target_view(params: DeepLinkParams) -> str:
    """Portal view path for a deep link; unknown views land on the dashboard."""
    view, resource_id = params.view, params.resource_id

    if view == "accounts":
        return f"/client/accounts/{resource_id}/transactions" if resource_id else "/client/accounts"
    if view == "loans":
        return f"/client/loans/{resource_id}" if resource_id else "/client/loans"
    if view in ("requests", "profile", "notifications"):
        return f"/client/{view}"
    return "/client/dashboard"


def notification_target(notification: Notification) -> Optional[str]:
    """View a notification points at, or None when it references nothing."""
    if not notification.resource_type or not notification.resource_id:
        return None
    if notification.resource_type == "transaction":
        return "/client/accounts"
    if notification.resource_type == "loan":
        return f"/client/loans/{notification.resource_id}"
    if notification.resource_type == "request":
        return "/client/requests"
    return None


def unread_count(notifications: list[Notification]) -> int:
    return sum(1 for n in notifications if not n.is_read)
