"""Input checks shared by the feature operations."""

from typing import Any, Optional

from shopledger.operations.errors import LedgerValidationError, ValidationIssue


class IssueCollector:
    """
    Collects validation issues and raises them together.

    Usage:
        issues = IssueCollector()
        issues.require_text("name", name)
        issues.require_positive("amount", amount)
        issues.raise_if_any()
    """

    def __init__(self):
        self.issues: list[ValidationIssue] = []

    def add(self, field: str, issue_type: str, message: str) -> None:
        self.issues.append(
            ValidationIssue(field=field, issue_type=issue_type, message=message)
        )

    def require_text(self, field: str, value: Optional[str]) -> None:
        if value is None or not str(value).strip():
            self.add(field, "missing", f"{field} is required")

    def require_positive(self, field: str, value: Any) -> None:
        if not _is_number(value):
            self.add(field, "missing", f"{field} must be a number")
        elif value <= 0:
            self.add(field, "not_positive", f"{field} must be greater than zero")

    def require_non_negative(self, field: str, value: Any) -> None:
        if not _is_number(value):
            self.add(field, "missing", f"{field} must be a number")
        elif value < 0:
            self.add(field, "negative", f"{field} cannot be negative")

    def require_int_at_least(self, field: str, value: Any, minimum: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            self.add(field, "not_integer", f"{field} must be a whole number")
        elif value < minimum:
            self.add(field, "too_small", f"{field} must be at least {minimum}")

    def raise_if_any(self) -> None:
        if self.issues:
            raise LedgerValidationError(self.issues)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
