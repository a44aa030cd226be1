"""
Data Models Package

This package contains all Pydantic models used in Shop Ledger.
All data flowing through the system must conform to these schemas.
"""

from shopledger.models.entities import (
    STATE_COLLECTIONS,
    AppState,
    Debt,
    DebtStatus,
    Equity,
    EquityType,
    Expense,
    InventoryItem,
    LedgerRecord,
    Loan,
    LoanStatus,
    SaleRecord,
    QuarantinedRecord,
    Snapshot,
    empty_state,
    generate_id,
    generate_sku,
    now_iso,
)
from shopledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Entity models
    "STATE_COLLECTIONS",
    "AppState",
    "Debt",
    "DebtStatus",
    "Equity",
    "EquityType",
    "Expense",
    "InventoryItem",
    "LedgerRecord",
    "Loan",
    "LoanStatus",
    "SaleRecord",
    "QuarantinedRecord",
    "Snapshot",
    "empty_state",
    "generate_id",
    "generate_sku",
    "now_iso",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
