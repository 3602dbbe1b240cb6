"""
Pydantic models for backend payloads.

Covers:
- Member profile and session credentials
- Savings accounts and transactions
- Loans and their precomputed repayment schedules
- Member requests, notifications and the dashboard summary
"""

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator


class PortalModel(BaseModel):
    """Common config: tolerate unknown fields, accept numeric ids as strings."""

    model_config = ConfigDict(
        extra="allow", populate_by_name=True, coerce_numbers_to_str=True
    )

    @classmethod
    def to_field_names(cls, data: dict[str, Any]) -> dict[str, Any]:
        """Rename alias keys (e.g. ``phone_primary``) to their field names."""
        aliases = {}
        for name, info in cls.model_fields.items():
            alias = info.validation_alias
            if isinstance(alias, AliasChoices):
                for choice in alias.choices:
                    if isinstance(choice, str):
                        aliases[choice] = name
        return {aliases.get(key, key): value for key, value in data.items()}


# ─── Member & Auth ───────────────────────────────────────────────────


class Member(PortalModel):
    """Snapshot of the logged-in member's profile."""

    id: str
    member_id: str | None = None
    first_name: str = ""
    middle_name: str | None = None
    last_name: str = ""
    phone: str | None = Field(
        default=None, validation_alias=AliasChoices("phone", "phone_primary")
    )
    email: str | None = None
    gender: str | None = None
    date_of_birth: str | None = None
    national_id: str | None = None
    address: str | None = None
    status: str | None = None
    telegram_chat_id: str | None = None
    profile_photo: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name or "", self.last_name]
        return " ".join(p for p in parts if p).strip()


class TokenPair(PortalModel):
    """Refresh Collaborator response."""

    access_token: str = Field(
        validation_alias=AliasChoices("accessToken", "access_token")
    )
    refresh_token: str = Field(
        validation_alias=AliasChoices("refreshToken", "refresh_token")
    )


class AuthResponse(TokenPair):
    """Authentication Collaborator response."""

    member: Member


# ─── Accounts ────────────────────────────────────────────────────────


class Account(PortalModel):
    id: str
    account_number: str
    account_type: str
    balance: float = 0.0
    lien_amount: float = 0.0
    available_balance: float = 0.0
    status: str = "ACTIVE"
    interest_rate: float = 0.0
    last_transaction_date: str | None = None
    created_at: str | None = None


class Transaction(PortalModel):
    id: str
    transaction_id: str | None = None
    account_id: str | None = None
    type: str
    amount: float
    balance_after: float | None = None
    reference: str | None = None
    description: str | None = None
    receipt_url: str | None = None
    performed_by: str | None = None
    created_at: str


class TransactionPage(PortalModel):
    data: list[Transaction] = Field(default_factory=list)
    has_more: bool = Field(
        default=False, validation_alias=AliasChoices("hasMore", "has_more")
    )


# ─── Loans ───────────────────────────────────────────────────────────


class LoanScheduleItem(PortalModel):
    """One installment of a server-computed amortization schedule."""

    period: int
    due_date: str
    principal: float
    interest: float
    total_payment: float
    balance_after: float
    status: Literal["PENDING", "PAID", "OVERDUE", "PARTIAL"] = "PENDING"


class Loan(PortalModel):
    id: str
    loan_id: str | None = None
    product_name: str = ""
    applied_amount: float = 0.0
    approved_amount: float | None = None
    interest_rate: float = 0.0
    interest_type: str | None = None
    term_months: int = 0
    repayment_frequency: str | None = None
    monthly_installment: float = 0.0
    outstanding_balance: float = 0.0
    total_paid: float = 0.0
    total_interest: float = 0.0
    total_penalty: float = 0.0
    status: str = "PENDING"
    purpose: str | None = None
    next_payment_date: str | None = None
    days_overdue: int = 0
    disbursed_at: str | None = None
    created_at: str | None = None


class LoanDetail(Loan):
    schedule: list[LoanScheduleItem] = Field(default_factory=list)


# ─── Requests & Notifications ────────────────────────────────────────


RequestType = Literal[
    "DEPOSIT",
    "REPAYMENT",
    "LOAN_REQUEST",
    "PROFILE_UPDATE",
    "PASSWORD_RESET",
    "DOCUMENT_UPLOAD",
]


class MemberRequest(PortalModel):
    """A deposit, repayment or other request awaiting staff review."""

    id: str
    request_id: str | None = None
    type: str | None = None
    status: str = "PENDING"
    amount: float | None = None
    description: str | None = None
    staff_notes: str | None = None
    processed_by: str | None = None
    created_at: str | None = None
    processed_at: str | None = None


class Notification(PortalModel):
    """
    A member notification.

    The backend has shipped several field spellings for the same concepts
    (``notification_id``/``id``, ``read``/``is_read``, top-level vs.
    ``metadata`` resource references). They are folded into one field each
    here and only the canonical names are exposed.
    """

    id: str
    type: str = "SYSTEM"
    title: str = ""
    message: str = ""
    is_read: bool = False
    read_at: str | None = None
    resource_type: str | None = None
    resource_id: str | None = None
    created_at: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        notification_id = data.pop("notification_id", None)
        if data.get("id") is None and notification_id is not None:
            data["id"] = notification_id
        read = data.pop("read", None)
        if data.get("is_read") is None and read is not None:
            data["is_read"] = read
        metadata = data.pop("metadata", None) or {}
        if isinstance(metadata, dict):
            for key in ("resource_type", "resource_id"):
                if data.get(key) is None and metadata.get(key) is not None:
                    data[key] = metadata[key]
            if data.get("resource_id") is None:
                for key in ("loan_id", "transaction_id", "request_id"):
                    if metadata.get(key) is not None:
                        data["resource_id"] = metadata[key]
                        if data.get("resource_type") is None:
                            data["resource_type"] = key[: -len("_id")]
                        break
        return data


class KPISummary(PortalModel):
    total_savings: float = 0.0
    loan_outstanding: float = 0.0
    next_payment_amount: float = 0.0
    next_payment_date: str | None = None
    savings_change_percent: float = 0.0
    total_accounts: int = 0
    active_loans: int = 0
