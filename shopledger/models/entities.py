"""
Core Data Models for Shop Ledger

These models define the strict schemas for every record the shop keeps.
They are designed to:
1. Enforce type safety at runtime
2. Serialize to the same camelCase blob that has always been persisted
3. Be immutable - a change is a new object, never an in-place edit
4. Preserve fields they do not know about, so old and new blobs round-trip

DESIGN DECISION: Amounts are floats, not Decimals.
The persisted blob stores plain JSON numbers and every aggregate is a
simple sum; Decimal would turn them into strings on the wire.

DESIGN DECISION: Dates are ISO-8601 strings, not datetime objects.
They are compared and bucketed by string prefix, and keeping them
verbatim means a loaded blob is saved back byte-for-byte equivalent.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def generate_id() -> str:
    """
    Generate a record identifier.

    128 random bits; collisions are not checked for.
    """
    return uuid4().hex


def generate_sku() -> str:
    """Generate a default SKU: a short uppercase token."""
    return uuid4().hex[:10].upper()


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class DebtStatus(str, Enum):
    """Status of money owed TO the business."""
    PENDING = "pending"
    PAID = "paid"


class LoanStatus(str, Enum):
    """Status of money owed BY the business."""
    ACTIVE = "active"
    CLEARED = "cleared"


class EquityType(str, Enum):
    """Direction of an equity movement."""
    INVESTMENT = "investment"
    DRAWAL = "drawal"


# =============================================================================
# BASE
# =============================================================================

class LedgerRecord(BaseModel):
    """
    Base for every persisted record.

    Attribute names are snake_case; persisted keys are camelCase
    (buying_price <-> buyingPrice). Both spellings are accepted on input.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
        str_strip_whitespace=True,
    )

    def to_blob(self) -> dict:
        """Dump to the persisted (camelCase, JSON-safe) shape."""
        return self.model_dump(mode="json", by_alias=True)


# =============================================================================
# ENTITIES
# =============================================================================

class InventoryItem(LedgerRecord):
    """
    A product the shop stocks.

    Mutated (by replacement) on edit and on sale; stock never goes negative.
    """

    id: str = Field(default_factory=generate_id)
    name: str = Field(..., min_length=1, max_length=200)
    sku: str = Field(default_factory=generate_sku)
    buying_price: float = Field(..., ge=0)
    selling_price: float = Field(..., ge=0)
    stock: int = Field(default=0, ge=0)
    category: str = Field(default="General")

    @property
    def stock_value(self) -> float:
        """Value of the units on hand at cost."""
        return self.buying_price * self.stock


class SaleRecord(LedgerRecord):
    """
    A completed sale.

    item_id is an opaque reference; item_name and the prices behind
    total_price/profit are snapshotted at sale time and never follow
    later edits to the item. Sales are never edited, only deleted.
    """

    id: str = Field(default_factory=generate_id)
    item_id: str
    item_name: str
    quantity: int = Field(..., ge=1)
    total_price: float = Field(..., ge=0)
    # Negative when an item is sold below cost
    profit: float
    date: str = Field(default_factory=now_iso)


class Expense(LedgerRecord):
    """A single expense entry."""

    id: str = Field(default_factory=generate_id)
    description: str = Field(..., min_length=1, max_length=500)
    amount: float = Field(..., ge=0)
    category: str = Field(default="General")
    date: str = Field(default_factory=now_iso)


class Debt(LedgerRecord):
    """
    Money owed TO the business (e.g. a booked item not yet collected).

    INVARIANT: paid_amount <= amount, and status is PAID exactly
    when paid_amount has reached amount. Payments keep this true;
    the model does not reject historical blobs that break it.
    """

    id: str = Field(default_factory=generate_id)
    creditor: str = Field(..., min_length=1, max_length=200)
    amount: float = Field(..., ge=0)
    paid_amount: float = Field(default=0.0, ge=0)
    due_date: Optional[str] = None
    status: DebtStatus = Field(default=DebtStatus.PENDING)

    @property
    def total(self) -> float:
        return self.amount

    @property
    def outstanding(self) -> float:
        return max(self.amount - self.paid_amount, 0.0)

    @property
    def is_settled(self) -> bool:
        return self.status == DebtStatus.PAID


class Loan(LedgerRecord):
    """
    Money owed BY the business.

    Same paid/total invariant as Debt, with CLEARED as the closed status.
    """

    id: str = Field(default_factory=generate_id)
    source: str = Field(..., min_length=1, max_length=200)
    principal: float = Field(..., ge=0)
    paid_amount: float = Field(default=0.0, ge=0)
    interest_rate: float = Field(default=0.0, ge=0)
    term_months: int = Field(default=12, ge=1)
    start_date: str = Field(default_factory=now_iso)
    status: LoanStatus = Field(default=LoanStatus.ACTIVE)

    @property
    def total(self) -> float:
        return self.principal

    @property
    def outstanding(self) -> float:
        return max(self.principal - self.paid_amount, 0.0)

    @property
    def is_settled(self) -> bool:
        return self.status == LoanStatus.CLEARED


class Equity(LedgerRecord):
    """A single owner investment or drawal. No paid/total tracking."""

    id: str = Field(default_factory=generate_id)
    source: str = Field(..., min_length=1, max_length=200)
    amount: float = Field(..., ge=0)
    date: str = Field(default_factory=now_iso)
    type: EquityType = Field(default=EquityType.INVESTMENT)


class QuarantinedRecord(LedgerRecord):
    """
    A persisted record that no longer fits its model.

    Kept verbatim instead of being dropped, so the rest of the book still
    loads and the record can be repaired by hand.
    """

    collection: str
    record: Any
    reason: str
    quarantined_at: str = Field(default_factory=now_iso)

    @property
    def record_id(self) -> Optional[str]:
        if isinstance(self.record, dict):
            value = self.record.get("id")
            return None if value is None else str(value)
        return None


# =============================================================================
# AGGREGATE ROOT
# =============================================================================

class AppState(LedgerRecord):
    """
    Every record the shop has, in one aggregate.

    CRITICAL: This is the unit of persistence and of every update.
    Nothing below it is saved or changed on its own.

    Lists are newest-first by convention (inventory is append order);
    nothing relies on the ordering.
    """

    inventory: list[InventoryItem] = Field(default_factory=list)
    sales: list[SaleRecord] = Field(default_factory=list)
    expenses: list[Expense] = Field(default_factory=list)
    debts: list[Debt] = Field(default_factory=list)
    loans: list[Loan] = Field(default_factory=list)
    equity: list[Equity] = Field(default_factory=list)
    # Not one of the six collections: ignored by every aggregate
    quarantine: list[QuarantinedRecord] = Field(default_factory=list)

    def find_item(self, item_id: str) -> Optional[InventoryItem]:
        """Look up an inventory item by id."""
        return next((item for item in self.inventory if item.id == item_id), None)

    def collection_counts(self) -> dict[str, int]:
        """Number of records per collection, for logging."""
        return {name: len(getattr(self, name)) for name in STATE_COLLECTIONS}

    @property
    def record_count(self) -> int:
        return sum(self.collection_counts().values())

    def to_blob(self) -> dict:
        """Dump to the persisted shape; an empty quarantine is left out."""
        blob = super().to_blob()
        if not blob.get("quarantine"):
            blob.pop("quarantine", None)
        return blob


STATE_COLLECTIONS: tuple[str, ...] = (
    "inventory",
    "sales",
    "expenses",
    "debts",
    "loans",
    "equity",
)


def empty_state() -> AppState:
    """The canonical empty AppState: all six collections empty."""
    return AppState()


class Snapshot(LedgerRecord):
    """A manually captured, timestamped copy of AppState."""

    id: str = Field(default_factory=lambda: "SNAP-" + uuid4().hex[:6].upper())
    timestamp: str = Field(default_factory=now_iso)
    data: AppState
