"""
Derived Aggregates

DESIGN DECISION: Every business number is computed from AppState on
demand. Nothing here is stored or cached, so a figure can never lag
behind the state it was derived from. The functions are plain sums over
lists of shop-sized length; recomputing them on every change is cheap.

At no point do these functions modify the state they read.
"""

import math
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from pydantic import BaseModel, Field

from shopledger.models.entities import (
    AppState,
    DebtStatus,
    EquityType,
    InventoryItem,
    LoanStatus,
)

LOW_STOCK_THRESHOLD = 5
TREND_DAYS = 7
PROJECTION_YEARS = 30
PROJECTION_ANNUAL_RATE = 0.10


# =============================================================================
# RESULT MODELS
# =============================================================================

class DailySales(BaseModel):
    """Revenue and profit of one calendar day."""

    day: date
    revenue: float = 0.0
    profit: float = 0.0
    sale_count: int = 0

    @property
    def label(self) -> str:
        """Short weekday name, as shown on the trend chart."""
        return self.day.strftime("%a")


class ProjectionPoint(BaseModel):
    """Simulated balance at the end of a year."""

    year: int = Field(ge=0)
    value: float


class BusinessSummary(BaseModel):
    """Headline figures for the dashboard."""

    revenue: float
    total_profit: float
    total_expenses: float
    net_profit: float
    liabilities: float
    inventory_value: float
    profit_margin: float = Field(description="Gross profit as a percentage of revenue")
    low_stock_count: int
    equity_balance: float


# =============================================================================
# TOTALS
# =============================================================================

def revenue(state: AppState) -> float:
    """Sum of every sale's total price."""
    return sum(sale.total_price for sale in state.sales)


def total_profit(state: AppState) -> float:
    """Gross profit: sum of every sale's profit."""
    return sum(sale.profit for sale in state.sales)


def total_expenses(state: AppState) -> float:
    return sum(expense.amount for expense in state.expenses)


def net_profit(state: AppState) -> float:
    """Gross profit from sales minus all expenses."""
    return total_profit(state) - total_expenses(state)


def liabilities(state: AppState) -> float:
    """
    Active loans' principal plus pending debts' amount.

    NOTE: Uses the original totals, not the outstanding balances, so a
    half-repaid loan still counts in full. Settled records drop out.
    """
    loans = sum(
        loan.principal for loan in state.loans if loan.status == LoanStatus.ACTIVE
    )
    debts = sum(
        debt.amount for debt in state.debts if debt.status == DebtStatus.PENDING
    )
    return loans + debts


def outstanding_liabilities(state: AppState) -> float:
    """Like liabilities(), but net of what has already been paid."""
    loans = sum(
        loan.outstanding for loan in state.loans if loan.status == LoanStatus.ACTIVE
    )
    debts = sum(
        debt.outstanding for debt in state.debts if debt.status == DebtStatus.PENDING
    )
    return loans + debts


def inventory_value(state: AppState) -> float:
    """Stock on hand valued at buying price."""
    return sum(item.buying_price * item.stock for item in state.inventory)


def low_stock_items(
    state: AppState,
    threshold: int = LOW_STOCK_THRESHOLD,
) -> list[InventoryItem]:
    """Items with fewer than `threshold` units, emptiest first."""
    return sorted(
        (item for item in state.inventory if item.stock < threshold),
        key=lambda item: item.stock,
    )


def low_stock_count(state: AppState, threshold: int = LOW_STOCK_THRESHOLD) -> int:
    return sum(1 for item in state.inventory if item.stock < threshold)


def profit_margin(state: AppState) -> float:
    """Gross profit as a percentage of revenue; 0 with no sales."""
    total_revenue = revenue(state)
    if total_revenue <= 0:
        return 0.0
    return total_profit(state) / total_revenue * 100


def equity_balance(state: AppState) -> float:
    """Investments minus drawals."""
    return sum(
        entry.amount if entry.type == EquityType.INVESTMENT else -entry.amount
        for entry in state.equity
    )


def summarize(state: AppState) -> BusinessSummary:
    """All headline figures in one pass over the state."""
    return BusinessSummary(
        revenue=revenue(state),
        total_profit=total_profit(state),
        total_expenses=total_expenses(state),
        net_profit=net_profit(state),
        liabilities=liabilities(state),
        inventory_value=inventory_value(state),
        profit_margin=profit_margin(state),
        low_stock_count=low_stock_count(state),
        equity_balance=equity_balance(state),
    )


# =============================================================================
# TRENDS AND PROJECTIONS
# =============================================================================

def sales_trend(
    state: AppState,
    today: Optional[date] = None,
    days: int = TREND_DAYS,
) -> list[DailySales]:
    """
    Revenue and profit per calendar day for the last `days` days.

    Includes today; oldest day first. A sale belongs to the day its
    date string starts with (YYYY-MM-DD).
    """
    if days < 1:
        raise ValueError("days must be at least 1")
    today = today or datetime.now(timezone.utc).date()

    buckets = {
        today - timedelta(days=offset): DailySales(day=today - timedelta(days=offset))
        for offset in range(days - 1, -1, -1)
    }
    by_prefix = {day.isoformat(): bucket for day, bucket in buckets.items()}

    for sale in state.sales:
        bucket = by_prefix.get(sale.date[:10])
        if bucket is None:
            continue
        bucket.revenue += sale.total_price
        bucket.profit += sale.profit
        bucket.sale_count += 1

    return list(buckets.values())


def growth_projection(
    monthly_net_profit: float,
    years: int = PROJECTION_YEARS,
    annual_rate: float = PROJECTION_ANNUAL_RATE,
) -> list[ProjectionPoint]:
    """
    Simulate reinvesting a constant monthly profit with annual compounding.

    Year 0 is 0; each later year adds twelve months of profit and then
    grows the balance by annual_rate. A what-if curve, not a forecast.

    Values are NOT rounded, so later years compound on exact balances.
    Use project_state for the whole-number figures the dashboard shows.
    """
    balance = 0.0
    points = [ProjectionPoint(year=0, value=balance)]
    for year in range(1, years + 1):
        balance = (balance + 12 * monthly_net_profit) * (1 + annual_rate)
        points.append(ProjectionPoint(year=year, value=balance))
    return points


def project_state(state: AppState, years: int = PROJECTION_YEARS) -> list[ProjectionPoint]:
    """
    Growth projection using the state's net profit as the monthly figure.

    The ledger has no period boundaries, so all-time net profit stands in
    for the current month. Each point is rounded to a whole amount for
    display (halves round up); rounding happens after compounding, never
    in between.
    """
    return [
        point.model_copy(update={"value": float(math.floor(point.value + 0.5))})
        for point in growth_projection(net_profit(state), years=years)
    ]
