"""
Member (client) endpoints: dashboard, accounts, loans, requests and
notifications. All calls are authenticated.
"""

import mimetypes
from pathlib import Path
from typing import Any, Optional, TypeVar

from pydantic import BaseModel

from sacco_portal.api.client import ApiClient
from sacco_portal.models import (
    Account,
    KPISummary,
    Loan,
    LoanDetail,
    MemberRequest,
    Notification,
    TransactionPage,
)

M = TypeVar("M", bound=BaseModel)


def _items(payload: Any, key: Optional[str] = None) -> list:
    """Accept bare lists or lists wrapped under ``data`` (or ``key``)."""
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for name in (key, "data"):
            if name and isinstance(payload.get(name), list):
                return payload[name]
    return []


def _parse_list(model: type[M], payload: Any, key: Optional[str] = None) -> list[M]:
    return [model.model_validate(item) for item in _items(payload, key)]


def _unwrap(payload: Any, key: str) -> Any:
    if isinstance(payload, dict) and isinstance(payload.get(key), dict):
        return payload[key]
    if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
        return payload["data"]
    return payload


def file_part(path: Path) -> tuple[str, bytes, str]:
    """Multipart file tuple for httpx."""
    path = Path(path)
    content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    return path.name, path.read_bytes(), content_type


def _form_fields(payload: dict[str, Any]) -> dict[str, str]:
    return {k: str(v) for k, v in payload.items() if v is not None}


class MemberApi:
    def __init__(self, client: ApiClient):
        self.client = client

    async def get_kpi_summary(self) -> KPISummary:
        data = await self.client.get("/client/dashboard/summary")
        return KPISummary.model_validate(_unwrap(data, "summary"))

    async def get_accounts(self) -> list[Account]:
        data = await self.client.get("/client/accounts")
        return _parse_list(Account, data, "accounts")

    async def get_account_transactions(
        self, account_id: str, page: int = 1, limit: int = 20
    ) -> TransactionPage:
        data = await self.client.get(
            f"/client/accounts/{account_id}/transactions",
            params={"page": page, "limit": limit},
        )
        return TransactionPage.model_validate(data)

    async def get_transactions(self, page: int = 1, limit: int = 20) -> TransactionPage:
        data = await self.client.get(
            "/client/transactions", params={"page": page, "limit": limit}
        )
        return TransactionPage.model_validate(data)

    async def get_loans(self) -> list[Loan]:
        data = await self.client.get("/client/loans")
        return _parse_list(Loan, data, "loans")

    async def get_loan_detail(self, loan_id: str) -> LoanDetail:
        data = await self.client.get(f"/client/loans/{loan_id}")
        return LoanDetail.model_validate(_unwrap(data, "loan"))

    async def get_requests(self) -> list[MemberRequest]:
        data = await self.client.get("/client/requests")
        return _parse_list(MemberRequest, data, "requests")

    async def create_request(self, payload: dict[str, Any]) -> MemberRequest:
        data = await self.client.post("/client/requests", json=payload)
        return MemberRequest.model_validate(_unwrap(data, "request"))

    async def get_deposit_requests(self) -> list[MemberRequest]:
        data = await self.client.get("/client/deposit-requests")
        return _parse_list(MemberRequest, data, "requests")

    async def create_deposit_request(
        self, payload: dict[str, Any], receipt: Optional[Path] = None
    ) -> MemberRequest:
        files = {"receipt": file_part(receipt)} if receipt else None
        data = await self.client.post(
            "/client/deposit-requests", data=_form_fields(payload), files=files
        )
        return MemberRequest.model_validate(_unwrap(data, "request"))

    async def get_loan_repayment_requests(self) -> list[MemberRequest]:
        data = await self.client.get("/client/loan-repayment-requests")
        return _parse_list(MemberRequest, data, "requests")

    async def create_loan_repayment_request(
        self, payload: dict[str, Any], bank_receipt: Path
    ) -> MemberRequest:
        data = await self.client.post(
            "/client/loan-repayment-requests",
            data=_form_fields(payload),
            files={"bank_receipt": file_part(bank_receipt)},
        )
        return MemberRequest.model_validate(_unwrap(data, "request"))

    async def get_notifications(self) -> list[Notification]:
        data = await self.client.get("/client/notifications")
        return _parse_list(Notification, data, "notifications")

    async def mark_notification_read(self, notification_id: str) -> None:
        await self.client.patch(f"/client/notifications/{notification_id}/read")
