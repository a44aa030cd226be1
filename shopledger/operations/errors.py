"""
Operation Errors

Every feature operation either returns a complete new AppState or raises
one of these. There is no third outcome: no partial entity is ever
created, and the state passed in is never touched.
"""

from typing import Optional

from pydantic import BaseModel, Field


class ValidationIssue(BaseModel):
    """A single problem with the input to an operation."""

    field: str = Field(..., description="Input field with the issue")
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'not_positive', 'insufficient_stock')"
    )
    message: str = Field(..., description="Human-readable description of the issue")


class LedgerError(Exception):
    """Base exception for rejected operations."""
    pass


class LedgerValidationError(LedgerError):
    """Operation input failed validation; nothing was changed."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues))

    @classmethod
    def single(cls, field: str, issue_type: str, message: str) -> "LedgerValidationError":
        return cls([ValidationIssue(field=field, issue_type=issue_type, message=message)])


class InsufficientStockError(LedgerValidationError):
    """A sale asked for more units than are in stock."""

    def __init__(self, item_name: str, requested: int, available: int):
        self.item_name = item_name
        self.requested = requested
        self.available = available
        super().__init__([
            ValidationIssue(
                field="quantity",
                issue_type="insufficient_stock",
                message=(
                    f"Only {available} of '{item_name}' in stock, "
                    f"cannot sell {requested}"
                ),
            )
        ])


class RecordNotFoundError(LedgerError):
    """The record an operation refers to does not exist."""

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"No record {record_id!r} in {collection}")


class ImportFailedError(LedgerError):
    """An import file could not be turned into an AppState."""

    def __init__(self, message: str, errors: Optional[list[dict]] = None):
        super().__init__(message)
        self.errors = errors or []
