"""
Sales Operations

CRITICAL: Recording a sale is one transaction. The stock decrement and
the new SaleRecord are built into the same new AppState, so either both
are committed by the update protocol or neither is.
"""

from typing import Optional

from shopledger.models.entities import AppState, SaleRecord, now_iso
from shopledger.operations._checks import IssueCollector
from shopledger.operations.errors import InsufficientStockError, RecordNotFoundError


def record_sale(
    state: AppState,
    item_id: str,
    quantity: int,
    unit_price: Optional[float] = None,
    date: Optional[str] = None,
) -> AppState:
    """
    Sell `quantity` units of an item.

    unit_price defaults to the item's selling price; a custom price is
    allowed (discounts) and may be below cost. Name and prices are
    copied into the SaleRecord and never follow later item edits.

    Raises:
        RecordNotFoundError: Unknown item
        LedgerValidationError: Quantity below 1 or negative price
        InsufficientStockError: quantity > stock on hand
    """
    item = state.find_item(item_id)
    if item is None:
        raise RecordNotFoundError("inventory", item_id)

    issues = IssueCollector()
    issues.require_int_at_least("quantity", quantity, 1)
    if unit_price is not None:
        issues.require_non_negative("unit_price", unit_price)
    issues.raise_if_any()

    if quantity > item.stock:
        raise InsufficientStockError(item.name, quantity, item.stock)

    price = item.selling_price if unit_price is None else float(unit_price)
    sale = SaleRecord(
        item_id=item.id,
        item_name=item.name,
        quantity=quantity,
        total_price=price * quantity,
        profit=(price - item.buying_price) * quantity,
        date=date or now_iso(),
    )

    updated_item = item.model_copy(update={"stock": item.stock - quantity})
    return state.model_copy(update={
        "sales": [sale, *state.sales],
        "inventory": [updated_item if i.id == item.id else i for i in state.inventory],
    })


def delete_sale(state: AppState, sale_id: str) -> AppState:
    """
    Remove a sale from the history.

    Stock is not given back; a deletion corrects the record, it is not
    a return.
    """
    if not any(s.id == sale_id for s in state.sales):
        raise RecordNotFoundError("sales", sale_id)
    return state.model_copy(update={
        "sales": [s for s in state.sales if s.id != sale_id]
    })
