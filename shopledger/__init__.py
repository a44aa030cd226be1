"""
Shop Ledger - Source Package

Local bookkeeping core for a single shop: inventory, sales, expenses,
debts, loans and equity held in one AppState aggregate.

DESIGN PRINCIPLES:
1. One state object, one way to change it
2. Every change is persisted before it counts
3. Old data is migrated, never rejected
4. Numbers on screen are always derived, never stored
5. Storage and peripheral services are swappable
"""

__version__ = "1.2.1"
__author__ = "Shop Ledger Team"
