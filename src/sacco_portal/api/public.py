"""
Public (unauthenticated) forms and document uploads.
"""

from pathlib import Path
from typing import Any

from sacco_portal.api.client import ApiClient
from sacco_portal.api.member import file_part


def resolve_upload_url(url: str, public_base_url: str) -> str:
    """Turn a server-relative upload path into an absolute URL."""
    if not url or url.startswith("http"):
        return url
    base = public_base_url.rstrip("/")
    return f"{base}{url if url.startswith('/') else '/' + url}"


class PublicApi:
    def __init__(self, client: ApiClient):
        self.client = client

    async def create_registration_request(self, payload: dict[str, Any]) -> Any:
        return await self.client.post(
            "/public/registration-requests", json=payload, authenticated=False
        )

    async def create_partner_request(self, payload: dict[str, Any]) -> Any:
        return await self.client.post(
            "/public/partner-requests", json=payload, authenticated=False
        )

    async def create_loan_request(self, payload: dict[str, Any]) -> Any:
        # Sent with the member's token when there is one.
        return await self.client.post("/public/loan-requests", json=payload)

    async def upload(self, path: Path, document_type: str) -> str:
        """Upload a document and return the URL the server stored it under."""
        data = await self.client.post(
            "/uploads",
            data={"type": document_type},
            files={"file": file_part(path)},
            authenticated=False,
        )
        return str((data or {}).get("url", ""))
