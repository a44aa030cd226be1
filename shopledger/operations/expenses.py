"""Expense Operations. Append and delete only; expenses are never edited."""

from typing import Optional

from shopledger.models.entities import AppState, Expense, now_iso
from shopledger.operations._checks import IssueCollector
from shopledger.operations.errors import RecordNotFoundError


def add_expense(
    state: AppState,
    description: str,
    amount: float,
    category: str = "General",
    date: Optional[str] = None,
) -> AppState:
    """Prepend a new expense (newest first)."""
    issues = IssueCollector()
    issues.require_text("description", description)
    issues.require_positive("amount", amount)
    issues.raise_if_any()

    expense = Expense(
        description=description,
        amount=amount,
        category=category or "General",
        date=date or now_iso(),
    )
    return state.model_copy(update={"expenses": [expense, *state.expenses]})


def delete_expense(state: AppState, expense_id: str) -> AppState:
    if not any(e.id == expense_id for e in state.expenses):
        raise RecordNotFoundError("expenses", expense_id)
    return state.model_copy(update={
        "expenses": [e for e in state.expenses if e.id != expense_id]
    })
