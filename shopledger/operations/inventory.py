"""
Inventory Operations

Pure transformations of AppState.inventory. Removing an item never
touches its historical sales; those keep their snapshotted name and
prices.
"""

from typing import Any, Optional

from pydantic import ValidationError

from shopledger.models.entities import AppState, InventoryItem
from shopledger.operations._checks import IssueCollector
from shopledger.operations.errors import LedgerValidationError, RecordNotFoundError

EDITABLE_FIELDS = frozenset(
    {"name", "sku", "buying_price", "selling_price", "stock", "category"}
)


def add_item(
    state: AppState,
    name: str,
    buying_price: float,
    selling_price: float,
    stock: int = 0,
    category: str = "General",
    sku: Optional[str] = None,
) -> AppState:
    """
    Append a new inventory item.

    A blank sku gets a generated one.
    """
    issues = IssueCollector()
    issues.require_text("name", name)
    issues.require_positive("buying_price", buying_price)
    issues.require_positive("selling_price", selling_price)
    issues.require_int_at_least("stock", stock, 0)
    issues.raise_if_any()

    fields: dict[str, Any] = {
        "name": name,
        "buying_price": buying_price,
        "selling_price": selling_price,
        "stock": stock,
        "category": category or "General",
    }
    if sku and sku.strip():
        fields["sku"] = sku

    item = InventoryItem(**fields)
    return state.model_copy(update={"inventory": [*state.inventory, item]})


def edit_item(state: AppState, item_id: str, **changes: Any) -> AppState:
    """
    Apply a partial edit to one item.

    Only EDITABLE_FIELDS may change; the id never does.
    """
    item = state.find_item(item_id)
    if item is None:
        raise RecordNotFoundError("inventory", item_id)

    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise LedgerValidationError.single(
            ", ".join(sorted(unknown)),
            "not_editable",
            f"Cannot edit field(s): {', '.join(sorted(unknown))}",
        )

    try:
        # Re-validate: model_copy(update=...) alone skips validation
        updated = InventoryItem.model_validate({**item.model_dump(), **changes})
    except ValidationError as e:
        issues = IssueCollector()
        for error in e.errors(include_url=False):
            field = ".".join(str(part) for part in error["loc"]) or "item"
            issues.add(field, error["type"], error["msg"])
        raise LedgerValidationError(issues.issues) from e

    return state.model_copy(update={
        "inventory": [updated if i.id == item_id else i for i in state.inventory]
    })


def remove_item(state: AppState, item_id: str) -> AppState:
    """Remove one item. Its sales stay."""
    if state.find_item(item_id) is None:
        raise RecordNotFoundError("inventory", item_id)
    return state.model_copy(update={
        "inventory": [i for i in state.inventory if i.id != item_id]
    })

