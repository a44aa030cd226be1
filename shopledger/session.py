"""
Ledger Session - the State Update Protocol

This module owns the single in-memory AppState of a running session and
is the only thing allowed to change it.

FLOW (update_state):
1. status -> SYNCING, listeners notified
2. new_state = fn(current_state)        (pure; may raise)
3. store.save(new_state)                (durable; may raise)
4. current_state = new_state            (commit)
5. status -> SYNCED, listeners notified

DESIGN DECISION: Save before commit.
If fn raises, or the save fails, nothing is committed and the previous
state stays authoritative. The exception goes back to the caller, who
decides how to tell the user. There is no rollback because nothing
partial ever exists.

Updates are serialized with a lock, so hosts that call in from several
threads still see them applied one at a time in call order. Two
processes sharing one data directory are NOT coordinated: the last save
wins.
"""

import threading
from enum import Enum
from typing import Callable, Optional

import structlog

from shopledger.audit import AuditLogger, configure_logging
from shopledger.config import get_settings
from shopledger.migration import (
    MigrationError,
    MissingBlob,
    migrate_blob_with_report,
    parse_blob,
    serialize_state,
)
from shopledger.models.entities import AppState, Snapshot
from shopledger.operations.errors import ImportFailedError
from shopledger.services.storage import NotFoundError, PersistentStore


logger = structlog.get_logger(__name__)


class SyncStatus(str, Enum):
    """Visible persistence indicator."""
    SYNCED = "synced"
    SYNCING = "syncing"


StateTransform = Callable[[AppState], AppState]
StatusListener = Callable[[SyncStatus], None]


class LedgerSession:
    """
    Explicit context object for one bookkeeping session.

    Constructed once at start-up with its store, handed to every
    consumer, and discarded at the end. There is no module-level
    instance.
    """

    def __init__(
        self,
        store: PersistentStore,
        initial_state: AppState,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = store
        self._state = initial_state
        self._status = SyncStatus.SYNCED
        self._audit_logger = audit_logger or AuditLogger()
        self._lock = threading.RLock()
        self._listeners: list[StatusListener] = []

    @classmethod
    def open(
        cls,
        store: PersistentStore,
        audit_logger: Optional[AuditLogger] = None,
    ) -> "LedgerSession":
        """Start a session from whatever the store holds (never fails)."""
        return cls(store, store.load(), audit_logger=audit_logger)

    @classmethod
    def from_settings(cls, audit_logger: Optional[AuditLogger] = None) -> "LedgerSession":
        """
        Start a file-backed session configured from the environment.

        Also applies the logging level from AppSettings.debug_mode.
        """
        settings = get_settings()
        configure_logging(debug=settings.app.debug_mode)
        audit_logger = audit_logger or AuditLogger()
        store = PersistentStore.from_settings(settings.storage, audit_logger=audit_logger)
        return cls.open(store, audit_logger=audit_logger)

    # =========================================================================
    # READ SIDE
    # =========================================================================

    @property
    def state(self) -> AppState:
        """The committed state. Treat it as read-only."""
        return self._state

    @property
    def status(self) -> SyncStatus:
        return self._status

    @property
    def store(self) -> PersistentStore:
        return self._store

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """
        Be told about every status transition.

        Returns a callable that unsubscribes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_status(self, status: SyncStatus) -> None:
        """
        Record a transition and tell every listener about it.

        Listeners only observe. One that raises is logged and skipped; it
        cannot stop an update or leave the status stuck on SYNCING.
        """
        self._status = status
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception:
                logger.exception("status_listener_failed", status=status.value)

    # =========================================================================
    # WRITE SIDE
    # =========================================================================

    def _commit(self, transform: StateTransform, replaced: bool) -> AppState:
        with self._lock:
            self._set_status(SyncStatus.SYNCING)
            try:
                new_state = transform(self._state)
                if not isinstance(new_state, AppState):
                    raise TypeError(
                        f"state transform returned {type(new_state).__name__}, "
                        "expected AppState"
                    )
                self._store.save(new_state)
            except Exception as e:
                self._audit_logger.log_update_failed(e)
                raise
            else:
                self._state = new_state
                self._audit_logger.log_state_updated(
                    new_state.collection_counts(), replaced=replaced
                )
                return new_state
            finally:
                self._set_status(SyncStatus.SYNCED)

    def update_state(self, transform: StateTransform) -> AppState:
        """
        Apply a pure transformation, persist the result, then commit it.

        Returns:
            The newly committed state

        Raises:
            Whatever `transform` or the store raised; the previous state
            is kept in that case.
        """
        return self._commit(transform, replaced=False)

    def replace_state(self, state: AppState) -> AppState:
        """Replace the whole state (import, restore) through the same path."""
        return self._commit(lambda _previous: state, replaced=True)

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================

    def snapshots(self) -> list[Snapshot]:
        """Saved restore points, newest first."""
        return self._store.list_snapshots()

    def capture_snapshot(self) -> Snapshot:
        """Save a restore point of the current state."""
        with self._lock:
            return self._store.capture_snapshot(self._state)

    def restore_snapshot(self, snapshot_id: str) -> AppState:
        """
        Roll the state back to a saved restore point.

        Raises:
            NotFoundError: If no snapshot has that id
        """
        snapshot = self._store.get_snapshot(snapshot_id)
        if snapshot is None:
            raise NotFoundError(f"Snapshot not found: {snapshot_id}")
        restored = self.replace_state(snapshot.data.model_copy(deep=True))
        self._audit_logger.log_snapshot_restored(snapshot_id)
        return restored

    # =========================================================================
    # IMPORT / EXPORT
    # =========================================================================

    def export_json(self) -> str:
        """The current state, verbatim, pretty-printed."""
        return serialize_state(self._state, indent=2)

    def import_json(self, text: str) -> AppState:
        """
        Replace the entire state with the contents of an import file.

        The caller must have obtained the user's confirmation first.
        The file goes through the same migration as a normal load.

        Raises:
            ImportFailedError: If the file is not a usable backup; the
                current state is left untouched
        """
        blob = parse_blob(text)
        try:
            if isinstance(blob, MissingBlob):
                raise MigrationError("import file is empty")
            result = migrate_blob_with_report(blob)
        except MigrationError as e:
            self._audit_logger.log_import_failed(str(e))
            raise ImportFailedError(f"Invalid backup file: {e}", errors=e.errors) from e

        committed = self.replace_state(result.state)
        for entry in result.quarantined:
            self._audit_logger.log_record_quarantined(
                entry.collection, entry.record_id, entry.reason
            )
        self._audit_logger.log_state_imported(committed.collection_counts())
        return committed
