"""Domain model entities for fxdesk.

These are pure data classes representing business concepts, independent of
the storage schema. Rows read from storage are converted into these entities
by ``fxdesk.database.mappers``, which is where defaulting rules are applied.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, date
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

LOCAL_CURRENCY_LABEL = "دينار ليبي"


class CustomerStatus(str, Enum):
    """Customer account status."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class TransactionType(str, Enum):
    """Kinds of treasury movement."""

    ENTRY = "entry"
    EXIT = "exit"
    BUY = "buy"
    SELL_TO = "sell_to"


class TransactionCategory:
    """Known transaction category labels."""

    DEPOSIT = "Deposit"
    WITHDRAWAL = "Withdrawal"
    FX = "FX"
    TRANSFER = "Transfer"


# Report type filter value that selects by category instead of type
TRANSFER_FILTER = "transfer"


@dataclass(frozen=True)
class CustomerRecord:
    """Customer domain entity."""

    id: str
    name: str
    phones: tuple[str, ...]
    email: Optional[str]
    status: CustomerStatus
    notes: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime] = None

    def to_snapshot(self) -> dict[str, Any]:
        """Return a JSON-safe snapshot of the record for the backup log."""
        return {
            "id": self.id,
            "name": self.name,
            "phones": list(self.phones),
            "email": self.email,
            "status": self.status.value,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def merged(self, patch: dict[str, Any]) -> "CustomerRecord":
        """Return a copy with the mutable fields in ``patch`` applied."""
        changes: dict[str, Any] = {}
        if "name" in patch:
            changes["name"] = patch["name"]
        if "phones" in patch:
            changes["phones"] = tuple(patch["phones"])
        if "email" in patch:
            changes["email"] = patch["email"]
        if "status" in patch:
            changes["status"] = CustomerStatus(patch["status"])
        if "notes" in patch:
            changes["notes"] = patch["notes"]
        if "updated_at" in patch:
            changes["updated_at"] = patch["updated_at"]
        return replace(self, **changes)


@dataclass(frozen=True)
class CustomerBackupEntry:
    """Append-only audit row holding a customer's state before and after a change."""

    id: str
    customer_id: str
    old_data: dict[str, Any]
    new_data: dict[str, Any]
    changed_by: str
    reason: str
    created_at: datetime

    @property
    def old_record(self) -> CustomerRecord:
        from fxdesk.database.mappers import snapshot_to_customer

        return snapshot_to_customer(self.old_data)

    @property
    def new_record(self) -> CustomerRecord:
        from fxdesk.database.mappers import snapshot_to_customer

        return snapshot_to_customer(self.new_data)


@dataclass(frozen=True)
class Transaction:
    """Treasury transaction domain entity."""

    id: str
    type: str
    category: Optional[str]
    created_at: datetime
    amount: Optional[Decimal] = None
    fee: Optional[Decimal] = None
    currency: Optional[str] = None
    price: Optional[Decimal] = None
    rate: Optional[Decimal] = None
    currency_final: str = LOCAL_CURRENCY_LABEL
    customer_name: str = ""
    country_city: str = ""
    deliver_to: Optional[str] = None
    from_account_name: Optional[str] = None
    to_account_name: Optional[str] = None
    fx_base_currency: Optional[str] = None
    fx_quote_currency: Optional[str] = None
    fee_currency: Optional[str] = None
    notes: Optional[str] = None

    @property
    def has_fx_pair(self) -> bool:
        return bool(self.fx_base_currency or self.fx_quote_currency)


@dataclass(frozen=True)
class Currency:
    """Entry of the currency catalogue. Transactions refer to currencies by name."""

    id: str
    name: str
    code: str
    symbol: Optional[str]
    created_at: datetime


@dataclass(frozen=True)
class TreasuryAccount:
    """A treasury (cash box or bank account) and the currencies it holds."""

    id: str
    name: str
    category: str
    supported_currencies: tuple[str, ...]
    active: bool
    created_at: datetime


@dataclass(frozen=True)
class CustomerActivity:
    """A customer with their transaction counts for the customer list."""

    customer: CustomerRecord
    total_transactions: int = 0
    window_transactions: int = 0
    latest_transaction_at: Optional[datetime] = None


@dataclass(frozen=True)
class CustomerPage:
    """One page of the customer list. ``total`` counts matches before paging."""

    items: tuple[CustomerActivity, ...]
    total: int
    offset: int = 0
    limit: Optional[int] = None


@dataclass(frozen=True)
class AggregationFilter:
    """Report filter. Date bounds are inclusive and compared by day."""

    customer_name: Optional[str] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    currency: Optional[str] = None
    account: Optional[str] = None
    transaction_type: Optional[str] = None
    strict_category: bool = True


@dataclass(frozen=True)
class FxCurrencyData:
    """Buy or sell totals for one currency."""

    total: Decimal
    average_rate: Decimal


@dataclass(frozen=True)
class CurrencyTotals:
    """Per-currency deposit, withdrawal and net totals."""

    deposits: dict[str, Decimal] = field(default_factory=dict)
    withdrawals: dict[str, Decimal] = field(default_factory=dict)
    net: dict[str, Decimal] = field(default_factory=dict)


@dataclass(frozen=True)
class CurrencyRow:
    """One display row of the per-currency report section."""

    currency: str
    deposits: Decimal
    withdrawals: Decimal
    net: Decimal
    bought: Optional[FxCurrencyData] = None
    sold: Optional[FxCurrencyData] = None


@dataclass(frozen=True)
class AggregationResult:
    """Everything a report view or document renderer needs."""

    filtered_transactions: tuple[Transaction, ...]
    transaction_counts: dict[str, int]
    currency_totals: CurrencyTotals
    buy_currency_data: dict[str, FxCurrencyData]
    sell_currency_data: dict[str, FxCurrencyData]
    currency_rows: tuple[CurrencyRow, ...] = ()
