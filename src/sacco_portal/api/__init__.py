"""
Backend API access.

- client: httpx wrapper with bearer auth, error classification and retries
- errors: PortalError hierarchy and the response classifier
- auth / member / public: typed endpoint groups
"""

from sacco_portal.api.auth import AuthApi
from sacco_portal.api.client import ApiClient
from sacco_portal.api.errors import (
    PortalError,
    RequestFailedError,
    SessionError,
    TransportError,
    UnauthorizedError,
)
from sacco_portal.api.member import MemberApi
from sacco_portal.api.public import PublicApi

__all__ = [
    "ApiClient",
    "AuthApi",
    "MemberApi",
    "PortalError",
    "PublicApi",
    "RequestFailedError",
    "SessionError",
    "TransportError",
    "UnauthorizedError",
]
