"""
Authentication endpoints: login, token refresh, password reset and change.
"""

from sacco_portal.api.client import ApiClient
from sacco_portal.models import AuthResponse, Member, TokenPair


class AuthApi:
    """Authentication and profile collaborators used by the session."""

    def __init__(self, client: ApiClient):
        self.client = client

    async def login(self, identifier: str, secret: str) -> AuthResponse:
        data = await self.client.post(
            "/auth/login",
            json={"phone": identifier, "password": secret},
            authenticated=False,
        )
        return AuthResponse.model_validate(data)

    async def refresh(self, refresh_token: str) -> TokenPair:
        data = await self.client.post(
            "/auth/refresh",
            json={"refreshToken": refresh_token},
            authenticated=False,
        )
        return TokenPair.model_validate(data)

    async def get_profile(self, token: str | None = None, quiet: bool = False) -> Member:
        """Current member profile. ``token`` overrides the session's bearer token."""
        data = await self.client.get("/client/me", token=token, quiet=quiet)
        if isinstance(data, dict) and isinstance(data.get("member"), dict):
            data = data["member"]
        return Member.model_validate(data)

    async def request_otp(self, email: str) -> str:
        """Start a password reset; returns the OTP request id."""
        data = await self.client.post(
            "/auth/request-otp", json={"email": email}, authenticated=False
        )
        return str((data or {}).get("otp_req_id", ""))

    async def change_password(self, current_password: str, new_password: str) -> None:
        await self.client.post(
            "/auth/change-password",
            json={"current_password": current_password, "new_password": new_password},
        )
