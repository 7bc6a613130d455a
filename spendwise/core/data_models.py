"""Data models consumed from the SpendWise REST gateway."""
from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from dateutil import parser as date_parser
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class GatewayModel(BaseModel):
    """Immutable value object; unknown payload fields are ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")


def _parse_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and value:
        return date_parser.isoparse(value).date()
    return value


class AccountType(str, Enum):
    CHECKING = "checking"
    SAVINGS = "savings"
    CREDIT = "credit"
    INVESTMENT = "investment"
    OTHER = "other"


class User(GatewayModel):
    id: int
    email: str
    first_name: str = ""
    last_name: str = ""
    admin: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part).strip()


class Account(GatewayModel):
    """A bank account linked through the aggregation provider."""

    id: int
    name: str
    institution_name: str = ""
    account_type: AccountType = AccountType.OTHER
    balance_current: float = 0.0
    balance_available: Optional[float] = None
    currency: str = "USD"
    active: bool = True
    plaid_account_id: Optional[str] = None
    last_sync_at: Optional[datetime] = None
    display_name: Optional[str] = None

    @field_validator("account_type", mode="before")
    @classmethod
    def _normalize_account_type(cls, value: Any) -> AccountType:
        if isinstance(value, AccountType):
            return value
        normalized = str(value or "").strip().lower()
        try:
            return AccountType(normalized)
        except ValueError:
            return AccountType.OTHER

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        payload = dict(data)
        if payload.get("balance_current") is None:
            payload["balance_current"] = 0.0
        if payload.get("balance_available") is None:
            payload["balance_available"] = payload["balance_current"]
        if not payload.get("display_name"):
            payload["display_name"] = payload.get("name")
        return payload


class AccountRef(GatewayModel):
    id: int
    name: str = ""
    display_name: Optional[str] = None
    account_type: Optional[str] = None


class CategoryRef(GatewayModel):
    id: int
    name: str
    color: Optional[str] = None
    full_name: Optional[str] = None


class Transaction(GatewayModel):
    """A synchronized bank transaction.

    ``amount`` is always signed (negative for outflows). ``is_expense`` and
    ``is_income`` are the server's classification; when a payload omits both
    they are derived from the sign of ``amount``.
    """

    id: int
    amount: float
    description: str = ""
    merchant_name: Optional[str] = None
    date: date
    currency: str = "USD"
    pending: bool = False
    is_expense: bool = False
    is_income: bool = False
    plaid_transaction_id: Optional[str] = None
    primary_category: Optional[CategoryRef] = None
    account: Optional[AccountRef] = None

    @field_validator("date", mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> Any:
        return _parse_date(value)

    @model_validator(mode="before")
    @classmethod
    def _derive_direction(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        if data.get("is_expense") is None and data.get("is_income") is None:
            payload = dict(data)
            amount = float(payload.get("amount") or 0)
            payload["is_expense"] = amount < 0
            payload["is_income"] = amount > 0
            return payload
        return data

    @model_validator(mode="after")
    def _check_direction(self) -> "Transaction":
        if self.is_expense and self.is_income:
            raise ValueError("transaction cannot be both an expense and income")
        return self

    @property
    def magnitude(self) -> float:
        return abs(self.amount)

    @property
    def category_name(self) -> Optional[str]:
        return self.primary_category.name if self.primary_category else None


class Category(GatewayModel):
    id: int
    name: str
    color: str = "#6B7280"
    description: Optional[str] = None
    budget_limit: Optional[float] = None
    parent_category_id: Optional[int] = None
    full_name: str = ""
    child_categories: List["Category"] = Field(default_factory=list)
    transaction_count: Optional[int] = None
    total_spent: Optional[float] = None
    budget_utilization: Optional[float] = None

    @model_validator(mode="before")
    @classmethod
    def _default_full_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("full_name"):
            return {**data, "full_name": data.get("name", "")}
        return data


NotificationType = Literal["success", "error", "warning", "info"]


class Notification(GatewayModel):
    """Client-only transient message shown in the notification queue."""

    id: str
    type: NotificationType
    title: str
    message: str = ""
    duration: int = 5000
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def persistent(self) -> bool:
        return self.duration <= 0


# Request payloads


class LoginCredentials(BaseModel):
    email: str
    password: str


class RegisterData(BaseModel):
    email: str
    password: str
    password_confirmation: str
    first_name: str
    last_name: str


class CategoryInput(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None
    description: Optional[str] = None
    budget_limit: Optional[float] = None
    parent_category_id: Optional[int] = None


class TransactionFilters(BaseModel):
    page: Optional[int] = None
    per_page: Optional[int] = None
    account_id: Optional[int] = None
    category_id: Optional[int] = None
    type: Optional[Literal["expenses", "income"]] = None
    pending: Optional[bool] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    search: Optional[str] = None
    sort: Optional[Literal["date_asc", "date_desc", "amount_asc", "amount_desc"]] = None

    def to_params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        for key, value in self.model_dump(exclude_none=True).items():
            if isinstance(value, bool):
                params[key] = "true" if value else "false"
            elif isinstance(value, date):
                params[key] = value.isoformat()
            else:
                params[key] = value
        return params

    def cache_key(self) -> tuple:
        return tuple(sorted(self.to_params().items()))


class DisconnectOptions(BaseModel):
    remove_transactions: bool = False
    keep_categories: bool = True
    remove_account: bool = False

    def to_params(self) -> Dict[str, str]:
        return {key: "true" if value else "false" for key, value in self.model_dump().items()}


# Response envelopes


class LoginResponse(GatewayModel):
    message: str = ""
    token: str
    user: User


class AccountsSummary(GatewayModel):
    total_balance: float = 0.0
    total_available: float = 0.0
    account_count: int = 0


class AccountsResponse(GatewayModel):
    accounts: List[Account] = Field(default_factory=list)
    summary: AccountsSummary = Field(default_factory=AccountsSummary)


class Pagination(GatewayModel):
    current_page: int = 1
    per_page: int = 25
    total_count: int = 0
    total_pages: int = 0


class TransactionsSummary(GatewayModel):
    total_count: int = 0
    total_expenses: float = 0.0
    total_income: float = 0.0
    net_amount: float = 0.0
    pending_count: int = 0
    uncategorized_count: int = 0


class TransactionsResponse(GatewayModel):
    transactions: List[Transaction] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)
    summary: TransactionsSummary = Field(default_factory=TransactionsSummary)


class CategoriesResponse(GatewayModel):
    categories: List[Category] = Field(default_factory=list)


class SyncResult(GatewayModel):
    message: str = ""
    transactions_created: int = 0
    transactions_updated: int = 0
    last_sync_at: Optional[datetime] = None


class LinkTokenResponse(GatewayModel):
    link_token: str


class ExchangeResponse(GatewayModel):
    message: str = ""
    accounts: List[Account] = Field(default_factory=list)


class CleanupSummary(GatewayModel):
    transactions_removed: int = 0
    classifications_removed: int = 0
    account_deactivated: bool = False
    plaid_ids_cleared: bool = False


class DisconnectResponse(GatewayModel):
    message: str = ""
    account: Optional[Account] = None
    cleanup_summary: CleanupSummary = Field(default_factory=CleanupSummary)


class ConnectionStatus(GatewayModel):
    connected: bool = False
    accounts_count: int = 0
    last_sync: Optional[datetime] = None


class MessageResponse(GatewayModel):
    message: str = ""
