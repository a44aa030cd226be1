"""
Feature Operations Package

Pure functions of the form (AppState, ...) -> AppState. They are meant to
be passed to LedgerSession.update_state, e.g.:

    session.update_state(lambda s: record_sale(s, item_id, quantity=2))

They never mutate the state they receive and raise instead of returning
a partially changed one.
"""

from shopledger.operations.errors import (
    ImportFailedError,
    InsufficientStockError,
    LedgerError,
    LedgerValidationError,
    RecordNotFoundError,
    ValidationIssue,
)
from shopledger.operations.expenses import add_expense, delete_expense
from shopledger.operations.financials import (
    add_debt,
    add_equity,
    add_loan,
    delete_debt,
    delete_equity,
    delete_loan,
    record_debt_payment,
    record_loan_payment,
)
from shopledger.operations.inventory import add_item, edit_item, remove_item
from shopledger.operations.sales import delete_sale, record_sale

__all__ = [
    # Errors
    "ImportFailedError",
    "InsufficientStockError",
    "LedgerError",
    "LedgerValidationError",
    "RecordNotFoundError",
    "ValidationIssue",
    # Inventory
    "add_item",
    "edit_item",
    "remove_item",
    # Sales
    "delete_sale",
    "record_sale",
    # Expenses
    "add_expense",
    "delete_expense",
    # Debts, loans, equity
    "add_debt",
    "add_equity",
    "add_loan",
    "delete_debt",
    "delete_equity",
    "delete_loan",
    "record_debt_payment",
    "record_loan_payment",
]
