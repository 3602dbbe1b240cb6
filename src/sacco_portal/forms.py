"""
Validation schemas for member-facing forms.

Each form validates user input and shapes the payload the backend expects
(``to_payload``). Validation failures raise ``pydantic.ValidationError``;
``form_errors`` flattens one into ``{field: message}`` for display.
"""

import re
import secrets
import string
from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from sacco_portal.models import RequestType

PHONE_PATTERN = re.compile(r"^\+251\d{9}$")
AMOUNT_PATTERN = re.compile(r"^\d+(\.\d{1,2})?$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def form_errors(exc: ValidationError) -> dict[str, str]:
    """First error message per field, without pydantic's prefixes."""
    errors: dict[str, str] = {}
    for err in exc.errors():
        field = ".".join(str(p) for p in err.get("loc", ())) or "form"
        msg = err.get("msg", "Invalid value")
        for prefix in ("Value error, ", "Assertion failed, "):
            if msg.startswith(prefix):
                msg = msg[len(prefix):]
        errors.setdefault(field, msg)
    return errors


def _require_min(value: str, length: int, message: str) -> str:
    value = (value or "").strip()
    if len(value) < length:
        raise ValueError(message)
    return value


def _ethiopian_phone(value: str) -> str:
    value = (value or "").strip()
    if not PHONE_PATTERN.match(value):
        raise ValueError("Please enter a valid phone number (+251XXXXXXXXX)")
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class FormModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


# ─── Auth forms ──────────────────────────────────────────────────────


class LoginForm(FormModel):
    phone: str
    password: str
    remember: bool = False

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return _require_min(v, 10, "Please enter a valid phone number")

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v or "") < 6:
            raise ValueError("Password must be at least 6 characters")
        return v


class PasswordResetForm(FormModel):
    email: str

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        if not EMAIL_PATTERN.match(v or ""):
            raise ValueError("Please enter a valid email address")
        return v


class ChangePasswordForm(FormModel):
    current_password: str
    new_password: str
    confirm_password: str

    @field_validator("current_password")
    @classmethod
    def _current(cls, v: str) -> str:
        if not v:
            raise ValueError("Current password is required")
        return v

    @field_validator("new_password")
    @classmethod
    def _new(cls, v: str) -> str:
        if len(v or "") < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    @model_validator(mode="after")
    def _matches(self) -> "ChangePasswordForm":
        if self.new_password != self.confirm_password:
            raise ValueError("Passwords do not match")
        return self


# ─── Member requests ─────────────────────────────────────────────────


class RequestForm(FormModel):
    """Generic member request (profile update, document upload, ...)."""

    type: RequestType
    amount: Optional[float] = None
    description: str

    @field_validator("amount")
    @classmethod
    def _amount(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and v < 1:
            raise ValueError("Amount must be greater than 0")
        return v

    @field_validator("description")
    @classmethod
    def _description(cls, v: str) -> str:
        return _require_min(v, 10, "Description must be at least 10 characters")

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class DepositRequestForm(FormModel):
    account_id: str
    amount: float
    reference_number: Optional[str] = None
    description: str
    receipt: Optional[Path] = None

    @field_validator("account_id")
    @classmethod
    def _account(cls, v: str) -> str:
        return _require_min(v, 1, "Please select an account")

    @field_validator("amount")
    @classmethod
    def _amount(cls, v: float) -> float:
        if v < 1:
            raise ValueError("Amount must be greater than 0")
        return v

    @field_validator("description")
    @classmethod
    def _description(cls, v: str) -> str:
        return _require_min(v, 10, "Description must be at least 10 characters")

    @field_validator("reference_number", mode="before")
    @classmethod
    def _reference(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("receipt")
    @classmethod
    def _receipt(cls, v: Optional[Path]) -> Optional[Path]:
        if v is not None and not v.is_file():
            raise ValueError(f"Receipt file not found: {v}")
        return v

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude={"receipt"}, exclude_none=True)


class LoanRepaymentRequestForm(FormModel):
    loan_id: str
    amount: float
    payment_method: str
    bank_receipt_no: str
    notes: Optional[str] = None
    bank_receipt: Path

    @field_validator("loan_id")
    @classmethod
    def _loan(cls, v: str) -> str:
        return _require_min(v, 1, "Please select a loan")

    @field_validator("amount")
    @classmethod
    def _amount(cls, v: float) -> float:
        if v < 1:
            raise ValueError("Amount must be greater than 0")
        return v

    @field_validator("payment_method")
    @classmethod
    def _method(cls, v: str) -> str:
        return _require_min(v, 1, "Please select a payment method")

    @field_validator("bank_receipt_no")
    @classmethod
    def _receipt_no(cls, v: str) -> str:
        return _require_min(v, 1, "Bank receipt number is required")

    @field_validator("notes", mode="before")
    @classmethod
    def _notes(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("bank_receipt")
    @classmethod
    def _bank_receipt(cls, v: Path) -> Path:
        if not v.is_file():
            raise ValueError(f"Bank receipt file not found: {v}")
        return v

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude={"bank_receipt"}, exclude_none=True)


# ─── Public forms ────────────────────────────────────────────────────


class LoanRequestForm(FormModel):
    loan_purpose: str
    other_purpose: Optional[str] = None
    requested_amount: str
    phone: str

    @field_validator("loan_purpose")
    @classmethod
    def _purpose(cls, v: str) -> str:
        return _require_min(v, 1, "This field is required")

    @field_validator("requested_amount")
    @classmethod
    def _amount(cls, v: str) -> str:
        if not AMOUNT_PATTERN.match(v or ""):
            raise ValueError("Please enter a valid amount")
        return v

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return _ethiopian_phone(v)

    @model_validator(mode="after")
    def _other_purpose(self) -> "LoanRequestForm":
        if self.loan_purpose == "OTHER" and not (self.other_purpose or "").strip():
            raise ValueError("Please specify the loan purpose")
        return self

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "loan_purpose": self.loan_purpose,
            "requested_amount": float(self.requested_amount),
            "phone": self.phone,
        }
        if self.loan_purpose == "OTHER" and self.other_purpose:
            payload["other_purpose"] = self.other_purpose
        return payload


class PartnerRequestForm(FormModel):
    name: str
    company_name: Optional[str] = None
    phone: str
    request_type: Literal["PARTNERSHIP", "SPONSORSHIP"] = "PARTNERSHIP"
    sponsorship_type: Optional[Literal["PLATINUM", "GOLD", "SILVER"]] = None

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return _require_min(v, 2, "This field is required")

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        return _ethiopian_phone(v)

    @field_validator("company_name", "sponsorship_type", mode="before")
    @classmethod
    def _optional(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @model_validator(mode="after")
    def _sponsorship(self) -> "PartnerRequestForm":
        if self.request_type == "SPONSORSHIP" and not self.sponsorship_type:
            raise ValueError(
                "Sponsorship type is required when selecting Sponsorship"
            )
        return self

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "phone": self.phone,
            "request_type": self.request_type,
        }
        if self.company_name:
            payload["company_name"] = self.company_name
        if self.request_type == "SPONSORSHIP" and self.sponsorship_type:
            payload["sponsorship_type"] = self.sponsorship_type
        return payload


class RegistrationForm(FormModel):
    """Self-registration request for prospective members."""

    first_name: str
    middle_name: str
    last_name: str
    phone_primary: str
    email: Optional[str] = None
    gender: Literal["M", "F"]
    marital_status: Literal["SINGLE", "MARRIED", "DIVORCED", "WIDOWED"]
    age: Optional[int] = None
    family_size_female: Optional[int] = None
    family_size_male: Optional[int] = None
    educational_level: Optional[
        Literal["PRIMARY", "SECONDARY", "DIPLOMA", "DEGREE", "MASTERS", "PHD", "NONE"]
    ] = None
    occupation: Optional[str] = None
    work_experience_years: Optional[int] = None
    address_subcity: str
    address_woreda: str
    address_kebele: Optional[str] = None
    address_area_name: Optional[str] = None
    address_house_no: str
    national_id_number: Optional[str] = None
    shares_requested: Optional[int] = None
    terms_accepted: bool = False
    member_type: Literal["GOV_EMP", "TRADER", "NGO", "FARMER", "SELF"] = "GOV_EMP"
    monthly_income: float
    tin_number: Optional[str] = None
    password: str
    id_card_front_url: Optional[str] = None
    id_card_back_url: Optional[str] = None
    emergency_contacts: list[dict[str, Any]] = Field(default_factory=list)
    beneficiaries: list[dict[str, Any]] = Field(default_factory=list)
    documents: list[dict[str, Any]] = Field(default_factory=list)

    @field_validator(
        "email",
        "age",
        "family_size_female",
        "family_size_male",
        "educational_level",
        "occupation",
        "work_experience_years",
        "address_kebele",
        "address_area_name",
        "national_id_number",
        "shares_requested",
        "tin_number",
        mode="before",
    )
    @classmethod
    def _optional(cls, v: Any) -> Any:
        return _blank_to_none(v)

    @field_validator("first_name")
    @classmethod
    def _first(cls, v: str) -> str:
        return _require_min(v, 2, "First name must be at least 2 characters")

    @field_validator("middle_name")
    @classmethod
    def _middle(cls, v: str) -> str:
        return _require_min(v, 2, "Middle name must be at least 2 characters")

    @field_validator("last_name")
    @classmethod
    def _last(cls, v: str) -> str:
        return _require_min(v, 2, "Last name must be at least 2 characters")

    @field_validator("phone_primary")
    @classmethod
    def _phone(cls, v: str) -> str:
        if not PHONE_PATTERN.match((v or "").strip()):
            raise ValueError("Phone must be in format +251XXXXXXXXX")
        return v.strip()

    @field_validator("email")
    @classmethod
    def _email(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not EMAIL_PATTERN.match(v):
            raise ValueError("Invalid email")
        return v

    @field_validator("address_subcity")
    @classmethod
    def _subcity(cls, v: str) -> str:
        return _require_min(v, 2, "Subcity is required")

    @field_validator("address_woreda")
    @classmethod
    def _woreda(cls, v: str) -> str:
        return _require_min(v, 2, "Woreda is required")

    @field_validator("address_house_no")
    @classmethod
    def _house(cls, v: str) -> str:
        return _require_min(v, 1, "House number is required")

    @field_validator("terms_accepted")
    @classmethod
    def _terms(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError("You must accept the terms and conditions")
        return v

    @field_validator("monthly_income", mode="before")
    @classmethod
    def _income(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Monthly income is required")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v or "") < 6:
            raise ValueError("Password must be at least 6 characters")
        return v

    def to_payload(self) -> dict[str, Any]:
        """Shape the registration payload; the backend wants strings, not nulls."""
        payload: dict[str, Any] = {
            "first_name": self.first_name,
            "middle_name": self.middle_name or "",
            "last_name": self.last_name,
            "phone_primary": self.phone_primary,
            "email": self.email or "",
            "gender": self.gender,
            "marital_status": self.marital_status,
            "age": self.age,
            "family_size_female": self.family_size_female or 0,
            "family_size_male": self.family_size_male or 0,
            "educational_level": self.educational_level or "",
            "occupation": self.occupation or "",
            "work_experience_years": self.work_experience_years,
            "address_subcity": self.address_subcity,
            "address_woreda": self.address_woreda,
            "address_kebele": self.address_kebele or "",
            "address_area_name": self.address_area_name or "",
            "address_house_no": self.address_house_no,
            "national_id_number": self.national_id_number or "",
            "shares_requested": self.shares_requested or 0,
            "terms_accepted": self.terms_accepted,
            "member_type": self.member_type,
            "monthly_income": self.monthly_income,
            "tin_number": self.tin_number or "",
            "password": self.password,
            "id_card_front_url": self.id_card_front_url or "",
            "id_card_back_url": self.id_card_back_url or "",
        }
        if self.emergency_contacts:
            payload["emergency_contacts"] = self.emergency_contacts
        if self.beneficiaries:
            payload["beneficiaries"] = self.beneficiaries
        if self.documents:
            # Drop client-side bookkeeping keys such as _urls
            payload["documents"] = [
                {k: v for k, v in doc.items() if not k.startswith("_")}
                for doc in self.documents
            ]
        return payload


def generate_password() -> str:
    """Random 8-12 character password with an upper, a lower and a digit."""
    rng = secrets.SystemRandom()
    alphabet = string.ascii_uppercase + string.ascii_lowercase + string.digits
    chars = [
        rng.choice(string.ascii_uppercase),
        rng.choice(string.ascii_lowercase),
        rng.choice(string.digits),
    ]
    length = 8 + rng.randrange(5)
    chars.extend(rng.choice(alphabet) for _ in range(length - len(chars)))
    rng.shuffle(chars)
    return "".join(chars)
