"""
Schema Migration

Turns whatever is sitting in durable storage into a valid current AppState.

FLOW:
1. parse_blob: raw text -> MissingBlob | CorruptBlob | ParsedBlob
   (never raises; the blob is untyped until step 2 accepts it)
2. migrate: parsed mapping -> AppState
   - overlay onto the empty state (missing/null collections become [])
   - backfill paidAmount on debts and loans that predate it
   - validate every record against the current models, one at a time

Backfill rules run on EVERY load. They only fill a missing paidAmount
and never overwrite one that is present, so running them twice changes
nothing.

DESIGN DECISION: A record that still does not fit is quarantined, not fatal.
One bad record (say a negative stock written by an old edit screen) must
not cost the shop the rest of its book. It is moved verbatim into
AppState.quarantine, which is saved with the state, and reported so the
caller can audit it. Only a blob whose SHAPE is wrong (not an object, a
collection that is not a list) is rejected as a whole.

load_state wraps both steps and falls back to the empty state; it is the
only entry point that is allowed to swallow a failure, and it logs it.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

import structlog
from pydantic import BaseModel, ValidationError

from shopledger.models.entities import (
    STATE_COLLECTIONS,
    AppState,
    Debt,
    DebtStatus,
    Equity,
    Expense,
    InventoryItem,
    Loan,
    LoanStatus,
    QuarantinedRecord,
    SaleRecord,
    empty_state,
)


logger = structlog.get_logger(__name__)

COLLECTION_MODELS: dict[str, type[BaseModel]] = {
    "inventory": InventoryItem,
    "sales": SaleRecord,
    "expenses": Expense,
    "debts": Debt,
    "loans": Loan,
    "equity": Equity,
}


class MigrationError(Exception):
    """A parsed blob could not be coerced into an AppState."""

    def __init__(self, message: str, errors: Optional[list[dict]] = None):
        super().__init__(message)
        self.errors = errors or []


# =============================================================================
# RAW BLOB - tagged result of parsing persisted text
# =============================================================================

@dataclass(frozen=True)
class MissingBlob:
    """Nothing stored under the key."""


@dataclass(frozen=True)
class CorruptBlob:
    """Stored text that is not a JSON object."""
    reason: str


@dataclass(frozen=True)
class ParsedBlob:
    """A JSON object, not yet validated."""
    data: dict[str, Any]


RawBlob = Union[MissingBlob, CorruptBlob, ParsedBlob]


def parse_json(text: str) -> Any:
    """
    json.loads that fails only with ValueError.

    Pathologically nested input makes the decoder hit the recursion
    limit; that is reported as invalid JSON like any other garbage.
    """
    try:
        return json.loads(text)
    except RecursionError as e:
        raise ValueError(f"nesting too deep: {e}") from e


def parse_blob(text: Optional[str]) -> RawBlob:
    """Parse persisted text without trusting its shape."""
    if text is None:
        return MissingBlob()

    try:
        data = parse_json(text)
    except (TypeError, ValueError) as e:
        return CorruptBlob(reason=f"invalid JSON: {e}")

    if data is None:
        return MissingBlob()
    if not isinstance(data, dict):
        return CorruptBlob(reason=f"expected a JSON object, got {type(data).__name__}")

    return ParsedBlob(data=data)


# =============================================================================
# MIGRATION
# =============================================================================

@dataclass(frozen=True)
class MigrationResult:
    """A migrated state plus the records quarantined during THIS pass."""
    state: AppState
    quarantined: list[QuarantinedRecord] = field(default_factory=list)


def _backfill_paid_amount(
    records: list[Any],
    total_field: str,
    closed_status: str,
) -> list[Any]:
    """
    Give every record without paidAmount a computed one.

    Closed records are treated as fully paid, open ones as unpaid.
    """
    backfilled = []
    for record in records:
        if isinstance(record, Mapping) and record.get("paidAmount") is None:
            record = dict(record)
            record["paidAmount"] = (
                record.get(total_field, 0)
                if record.get("status") == closed_status
                else 0
            )
        backfilled.append(record)
    return backfilled


def _describe(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in e['loc']) or 'record'}: {e['msg']}"
        for e in error.errors(include_url=False)
    )


def _validate_records(
    name: str,
    records: list[Any],
) -> tuple[list[BaseModel], list[QuarantinedRecord]]:
    model = COLLECTION_MODELS[name]
    valid = []
    rejected = []
    for record in records:
        try:
            valid.append(model.model_validate(record))
        except ValidationError as e:
            rejected.append(
                QuarantinedRecord(collection=name, record=record, reason=_describe(e))
            )
    return valid, rejected


def _previous_quarantine(value: Any) -> list[QuarantinedRecord]:
    """Carry forward what earlier loads quarantined."""
    if not isinstance(value, list):
        return []
    kept = []
    for entry in value:
        try:
            kept.append(QuarantinedRecord.model_validate(entry))
        except ValidationError as e:
            logger.warning("quarantine_entry_unreadable", error=str(e))
    return kept


def migrate_with_report(data: Optional[Mapping[str, Any]]) -> MigrationResult:
    """
    Convert a parsed, possibly older-shaped blob into a current AppState.

    Raises:
        MigrationError: If the blob is not a mapping or a collection is
            not a list. Individual bad records never raise.
    """
    if data is None:
        return MigrationResult(state=empty_state())
    if not isinstance(data, Mapping):
        raise MigrationError(f"expected a mapping, got {type(data).__name__}")

    migrated: dict[str, Any] = {name: [] for name in STATE_COLLECTIONS}
    migrated.update(data)

    for name in STATE_COLLECTIONS:
        value = migrated[name]
        if value is None:
            migrated[name] = []
        elif not isinstance(value, list):
            raise MigrationError(
                f"'{name}' must be a list, got {type(value).__name__}"
            )

    migrated["debts"] = _backfill_paid_amount(
        migrated["debts"], "amount", DebtStatus.PAID.value
    )
    migrated["loans"] = _backfill_paid_amount(
        migrated["loans"], "principal", LoanStatus.CLEARED.value
    )

    quarantined: list[QuarantinedRecord] = []
    for name in STATE_COLLECTIONS:
        migrated[name], rejected = _validate_records(name, migrated[name])
        quarantined.extend(rejected)

    migrated["quarantine"] = [
        *_previous_quarantine(migrated.get("quarantine")),
        *quarantined,
    ]

    try:
        state = AppState.model_validate(migrated)
    except ValidationError as e:
        raise MigrationError(
            f"state does not match the current schema ({e.error_count()} errors)",
            errors=e.errors(include_url=False),
        ) from e

    for entry in quarantined:
        logger.warning(
            "record_quarantined",
            collection=entry.collection,
            record_id=entry.record_id,
            reason=entry.reason,
        )
    return MigrationResult(state=state, quarantined=quarantined)


def migrate(data: Optional[Mapping[str, Any]]) -> AppState:
    """Like migrate_with_report, for callers that only want the state."""
    return migrate_with_report(data).state


def migrate_blob_with_report(blob: RawBlob) -> MigrationResult:
    """
    Migrate a tagged blob.

    Raises:
        MigrationError: If the blob is corrupt or has the wrong shape.
    """
    if isinstance(blob, MissingBlob):
        return MigrationResult(state=empty_state())
    if isinstance(blob, CorruptBlob):
        raise MigrationError(blob.reason)
    return migrate_with_report(blob.data)


def migrate_blob(blob: RawBlob) -> AppState:
    return migrate_blob_with_report(blob).state


def load_state(text: Optional[str]) -> AppState:
    """
    Parse and migrate persisted text, falling back to the empty state.

    Never raises.
    """
    try:
        return migrate_blob(parse_blob(text))
    except MigrationError as e:
        logger.warning("state_migration_failed", error=str(e), errors=e.errors[:5])
        return empty_state()


def serialize_state(state: AppState, indent: Optional[int] = None) -> str:
    """Serialize an AppState to its persisted JSON text."""
    return json.dumps(state.to_blob(), indent=indent, ensure_ascii=False)
