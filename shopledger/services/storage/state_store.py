"""
Persistent Store

Loads and saves the AppState blob and the rolling snapshot log on top of
any KeyValueStore.

CONTRACT:
- load() never raises. Absent, unreadable or corrupt data gives the
  empty state; a corrupt blob is left where it is until the next save
  overwrites it.
- save() writes the full state under the fixed key and replaces the old
  value. No deltas, no versions. It raises StorageError on failure so the
  update protocol can refuse to commit.
- A record that no longer fits its model is quarantined inside the
  state (see migration); the rest of the book still loads.
- The snapshot log holds at most max_snapshots entries, newest first.
  Capturing one more evicts the oldest. Entries that cannot be read are
  kept verbatim; a log that is unreadable as a whole is copied to
  "<snapshots_key>.corrupt" before it is replaced.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from shopledger.audit import AuditLogger
from shopledger.config import StorageSettings
from shopledger.migration import (
    MigrationError,
    migrate,
    migrate_blob_with_report,
    parse_blob,
    parse_json,
    serialize_state,
)
from shopledger.models.entities import AppState, Snapshot, empty_state
from shopledger.services.storage.file_store import FileKeyValueStore
from shopledger.services.storage.interface import KeyValueStore, StorageError


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class _LogEntry:
    """One entry of the snapshot log, as stored and as understood."""
    raw: Any
    snapshot: Optional[Snapshot]


@dataclass(frozen=True)
class _SnapshotLog:
    entries: list[_LogEntry] = field(default_factory=list)
    # Original text of a log that could not be read at all
    corrupt_text: Optional[str] = None

    @property
    def snapshots(self) -> list[Snapshot]:
        return [e.snapshot for e in self.entries if e.snapshot is not None]


class PersistentStore:
    """
    Durable home of the AppState.

    Holds no state of its own beyond the backend; every load reads the
    backend again and every save replaces what is there.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        state_key: str = "biashara_master_v1",
        snapshots_key: str = "biashara_boutique_snapshots",
        max_snapshots: int = 10,
        audit_logger: Optional[AuditLogger] = None,
    ):
        if state_key == snapshots_key:
            raise ValueError("state_key and snapshots_key must differ")
        if max_snapshots < 1:
            raise ValueError("max_snapshots must be at least 1")

        self._kv = kv
        self._state_key = state_key
        self._snapshots_key = snapshots_key
        self._corrupt_snapshots_key = f"{snapshots_key}.corrupt"
        self._max_snapshots = max_snapshots
        self._audit_logger = audit_logger or AuditLogger()

    @classmethod
    def from_settings(
        cls,
        settings: StorageSettings,
        audit_logger: Optional[AuditLogger] = None,
    ) -> "PersistentStore":
        """Build a file-backed store from storage settings."""
        return cls(
            FileKeyValueStore(settings.data_dir),
            state_key=settings.state_key,
            snapshots_key=settings.snapshots_key,
            max_snapshots=settings.max_snapshots,
            audit_logger=audit_logger,
        )

    @property
    def state_key(self) -> str:
        return self._state_key

    @property
    def max_snapshots(self) -> int:
        return self._max_snapshots

    # =========================================================================
    # PRIMARY STATE
    # =========================================================================

    def load(self) -> AppState:
        """Read, parse and migrate the persisted state. Never raises."""
        try:
            text = self._kv.get(self._state_key)
        except StorageError as e:
            self._audit_logger.log_state_load_failed(self._state_key, str(e))
            return empty_state()

        try:
            result = migrate_blob_with_report(parse_blob(text))
        except MigrationError as e:
            self._audit_logger.log_state_load_failed(self._state_key, str(e))
            return empty_state()

        for entry in result.quarantined:
            self._audit_logger.log_record_quarantined(
                entry.collection, entry.record_id, entry.reason
            )
        self._audit_logger.log_state_loaded(result.state.collection_counts())
        return result.state

    def save(self, state: AppState) -> None:
        """
        Serialize and write the full state.

        Raises:
            StorageError: If the backend write fails
        """
        text = serialize_state(state)
        self._kv.set(self._state_key, text)
        self._audit_logger.log_state_saved(self._state_key, len(text.encode("utf-8")))

    # =========================================================================
    # SNAPSHOT LOG
    # =========================================================================

    def _read_snapshot_log(self) -> _SnapshotLog:
        try:
            text = self._kv.get(self._snapshots_key)
        except StorageError as e:
            self._audit_logger.log_snapshot_log_corrupt(self._snapshots_key, str(e))
            return _SnapshotLog()

        if text is None:
            return _SnapshotLog()

        try:
            entries = parse_json(text)
        except ValueError as e:
            self._audit_logger.log_snapshot_log_corrupt(self._snapshots_key, str(e))
            return _SnapshotLog(corrupt_text=text)

        if entries is None:
            return _SnapshotLog()
        if not isinstance(entries, list):
            self._audit_logger.log_snapshot_log_corrupt(
                self._snapshots_key, "expected a JSON list"
            )
            return _SnapshotLog(corrupt_text=text)

        return _SnapshotLog(
            entries=[_LogEntry(raw, self._parse_snapshot(raw)) for raw in entries]
        )

    def _parse_snapshot(self, entry: Any) -> Optional[Snapshot]:
        """Validate one log entry, migrating its state like a normal load."""
        if not isinstance(entry, dict):
            logger.warning("snapshot_entry_unreadable", entry_type=type(entry).__name__)
            return None
        try:
            data = migrate(entry.get("data"))
            return Snapshot.model_validate({**entry, "data": data})
        except (MigrationError, ValidationError) as e:
            logger.warning(
                "snapshot_entry_unreadable",
                snapshot_id=entry.get("id"),
                error=str(e),
            )
            return None

    def _write_snapshot_log(self, log: _SnapshotLog) -> None:
        if log.corrupt_text is not None:
            # Keep the unreadable log under a side key before replacing it
            self._kv.set(self._corrupt_snapshots_key, log.corrupt_text)
        text = json.dumps([entry.raw for entry in log.entries], ensure_ascii=False)
        self._kv.set(self._snapshots_key, text)

    def list_snapshots(self) -> list[Snapshot]:
        """All readable snapshots, newest first."""
        return self._read_snapshot_log().snapshots

    def get_snapshot(self, snapshot_id: str) -> Optional[Snapshot]:
        return next(
            (s for s in self._read_snapshot_log().snapshots if s.id == snapshot_id),
            None,
        )

    def capture_snapshot(self, state: AppState) -> Snapshot:
        """
        Capture a deep copy of the state into the log.

        The new entry goes in front and the log is cut to max_snapshots.
        Entries that cannot be read are written back verbatim and count
        toward the cap like any other.

        Raises:
            StorageError: If the log cannot be written
        """
        snapshot = Snapshot(data=state.model_copy(deep=True))

        log = self._read_snapshot_log()
        entries = [_LogEntry(snapshot.to_blob(), snapshot), *log.entries]
        kept = entries[: self._max_snapshots]

        self._write_snapshot_log(_SnapshotLog(entries=kept, corrupt_text=log.corrupt_text))
        self._audit_logger.log_snapshot_captured(snapshot.id, len(kept))
        return snapshot

    def delete_snapshot(self, snapshot_id: str) -> bool:
        log = self._read_snapshot_log()
        remaining = [
            entry for entry in log.entries
            if entry.snapshot is None or entry.snapshot.id != snapshot_id
        ]
        if len(remaining) == len(log.entries):
            return False
        self._write_snapshot_log(_SnapshotLog(entries=remaining))
        return True
