"""
Financial Operations: debts, loans and equity

Debts (owed TO the shop) and loans (owed BY the shop) carry a paid/total
pair. A payment adds to paid_amount, clamped to the total, and flips the
status to the closed variant exactly when the total is reached.
Equity entries are single immutable movements.
"""

from typing import Optional, TypeVar, Union

from shopledger.models.entities import (
    AppState,
    Debt,
    DebtStatus,
    Equity,
    EquityType,
    Loan,
    LoanStatus,
    now_iso,
)
from shopledger.operations._checks import IssueCollector
from shopledger.operations.errors import RecordNotFoundError

Settleable = TypeVar("Settleable", Debt, Loan)


# =============================================================================
# CREATION
# =============================================================================

def add_debt(
    state: AppState,
    creditor: str,
    amount: float,
    due_date: Optional[str] = None,
) -> AppState:
    """Prepend a new pending debt with nothing paid."""
    issues = IssueCollector()
    issues.require_text("creditor", creditor)
    issues.require_positive("amount", amount)
    issues.raise_if_any()

    debt = Debt(
        creditor=creditor,
        amount=amount,
        paid_amount=0.0,
        due_date=due_date or None,
        status=DebtStatus.PENDING,
    )
    return state.model_copy(update={"debts": [debt, *state.debts]})


def add_loan(
    state: AppState,
    source: str,
    principal: float,
    interest_rate: float = 0.0,
    term_months: int = 12,
    start_date: Optional[str] = None,
) -> AppState:
    """Prepend a new active loan with nothing repaid."""
    issues = IssueCollector()
    issues.require_text("source", source)
    issues.require_positive("principal", principal)
    issues.require_non_negative("interest_rate", interest_rate)
    issues.require_int_at_least("term_months", term_months, 1)
    issues.raise_if_any()

    loan = Loan(
        source=source,
        principal=principal,
        paid_amount=0.0,
        interest_rate=interest_rate,
        term_months=term_months,
        start_date=start_date or now_iso(),
        status=LoanStatus.ACTIVE,
    )
    return state.model_copy(update={"loans": [loan, *state.loans]})


def add_equity(
    state: AppState,
    source: str,
    amount: float,
    entry_type: Union[EquityType, str] = EquityType.INVESTMENT,
    date: Optional[str] = None,
) -> AppState:
    """Prepend an investment or drawal."""
    issues = IssueCollector()
    issues.require_text("source", source)
    issues.require_positive("amount", amount)
    try:
        entry_type = EquityType(entry_type)
    except ValueError:
        issues.add("type", "invalid", f"Unknown equity type: {entry_type}")
    issues.raise_if_any()

    entry = Equity(
        source=source,
        amount=amount,
        type=entry_type,
        date=date or now_iso(),
    )
    return state.model_copy(update={"equity": [entry, *state.equity]})


# =============================================================================
# PAYMENTS
# =============================================================================

def _apply_payment(record: Settleable, amount: float, closed_status) -> Settleable:
    new_paid = record.paid_amount + amount
    fully_paid = new_paid >= record.total
    return record.model_copy(update={
        "paid_amount": min(new_paid, record.total),
        "status": closed_status if fully_paid else record.status,
    })


def _check_payment(amount: float) -> None:
    issues = IssueCollector()
    issues.require_positive("amount", amount)
    issues.raise_if_any()


def record_debt_payment(state: AppState, debt_id: str, amount: float) -> AppState:
    """
    Record money collected against a debt.

    Overpayment is clamped: paid_amount never exceeds amount.
    """
    _check_payment(amount)
    if not any(d.id == debt_id for d in state.debts):
        raise RecordNotFoundError("debts", debt_id)

    return state.model_copy(update={
        "debts": [
            _apply_payment(d, amount, DebtStatus.PAID) if d.id == debt_id else d
            for d in state.debts
        ]
    })


def record_loan_payment(state: AppState, loan_id: str, amount: float) -> AppState:
    """Record a repayment against a loan. Same clamping as debts."""
    _check_payment(amount)
    if not any(loan.id == loan_id for loan in state.loans):
        raise RecordNotFoundError("loans", loan_id)

    return state.model_copy(update={
        "loans": [
            _apply_payment(loan, amount, LoanStatus.CLEARED) if loan.id == loan_id else loan
            for loan in state.loans
        ]
    })


# =============================================================================
# DELETION
# =============================================================================

def _without(state: AppState, collection: str, record_id: str) -> AppState:
    records = getattr(state, collection)
    remaining = [r for r in records if r.id != record_id]
    if len(remaining) == len(records):
        raise RecordNotFoundError(collection, record_id)
    return state.model_copy(update={collection: remaining})


def delete_debt(state: AppState, debt_id: str) -> AppState:
    return _without(state, "debts", debt_id)


def delete_loan(state: AppState, loan_id: str) -> AppState:
    return _without(state, "loans", loan_id)


def delete_equity(state: AppState, equity_id: str) -> AppState:
    return _without(state, "equity", equity_id)
