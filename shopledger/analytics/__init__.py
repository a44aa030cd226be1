"""Derived business metrics, trends and projections."""

from shopledger.analytics.aggregates import (
    LOW_STOCK_THRESHOLD,
    BusinessSummary,
    DailySales,
    ProjectionPoint,
    equity_balance,
    growth_projection,
    inventory_value,
    liabilities,
    low_stock_count,
    low_stock_items,
    net_profit,
    outstanding_liabilities,
    profit_margin,
    project_state,
    revenue,
    sales_trend,
    summarize,
    total_expenses,
    total_profit,
)

__all__ = [
    "LOW_STOCK_THRESHOLD",
    "BusinessSummary",
    "DailySales",
    "ProjectionPoint",
    "equity_balance",
    "growth_projection",
    "inventory_value",
    "liabilities",
    "low_stock_count",
    "low_stock_items",
    "net_profit",
    "outstanding_liabilities",
    "profit_margin",
    "project_state",
    "revenue",
    "sales_trend",
    "summarize",
    "total_expenses",
    "total_profit",
]
