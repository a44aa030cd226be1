"""
Audit Models for Shop Ledger

Every state transition and every recovered failure is logged.
This provides:
1. Traceability of what changed the books and when
2. Debugging information when a load falls back to an empty state
3. A record of imports, restores and backups

DESIGN DECISION: Audit events describe what happened; they never carry
the full AppState. Counts and ids are enough to reconstruct the story.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Persistence
    STATE_LOADED = "state_loaded"
    STATE_LOAD_FAILED = "state_load_failed"
    RECORD_QUARANTINED = "record_quarantined"
    STATE_SAVED = "state_saved"
    SNAPSHOT_LOG_CORRUPT = "snapshot_log_corrupt"

    # Update protocol
    STATE_UPDATED = "state_updated"
    STATE_REPLACED = "state_replaced"
    STATE_UPDATE_FAILED = "state_update_failed"

    # Snapshots
    SNAPSHOT_CAPTURED = "snapshot_captured"
    SNAPSHOT_RESTORED = "snapshot_restored"

    # Import / backup
    STATE_IMPORTED = "state_imported"
    IMPORT_FAILED = "import_failed"
    BACKUP_PUSHED = "backup_pushed"

    # Peripheral services
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType
    severity: AuditSeverity = Field(default=AuditSeverity.INFO)

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }


def _state_counts(counts: dict[str, int]) -> dict[str, int]:
    return {name: int(count) for name, count in counts.items()}


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.state_saved(counts)
        event = AuditEventBuilder.import_failed(reason)
    """

    @staticmethod
    def state_loaded(counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            description="State loaded from durable storage",
            details=_state_counts(counts),
        )

    @staticmethod
    def state_load_failed(key: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_LOAD_FAILED,
            severity=AuditSeverity.WARNING,
            description="Persisted state unreadable, using empty state",
            error_message=reason,
            details={"key": key},
        )

    @staticmethod
    def record_quarantined(
        collection: str,
        record_id: Optional[str],
        reason: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_QUARANTINED,
            severity=AuditSeverity.WARNING,
            description=f"Unreadable record set aside from {collection}",
            error_message=reason,
            details={"collection": collection, "record_id": record_id},
        )

    @staticmethod
    def snapshot_log_corrupt(key: str, reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_LOG_CORRUPT,
            severity=AuditSeverity.WARNING,
            description="Snapshot log unreadable, treating it as empty",
            error_message=reason,
            details={"key": key},
        )

    @staticmethod
    def state_saved(key: str, size_bytes: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_SAVED,
            severity=AuditSeverity.DEBUG,
            description=f"State saved ({size_bytes} bytes)",
            details={"key": key, "size_bytes": size_bytes},
        )

    @staticmethod
    def state_updated(counts: dict[str, int], replaced: bool = False) -> AuditEvent:
        return AuditEvent(
            event_type=(
                AuditEventType.STATE_REPLACED if replaced
                else AuditEventType.STATE_UPDATED
            ),
            description="State replaced" if replaced else "State updated",
            details=_state_counts(counts),
        )

    @staticmethod
    def state_update_failed(error_type: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_UPDATE_FAILED,
            severity=AuditSeverity.WARNING,
            description=f"Update rejected: {error_type}",
            error_message=error_message,
            details={"error_type": error_type},
        )

    @staticmethod
    def snapshot_captured(snapshot_id: str, kept: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_CAPTURED,
            description=f"Snapshot {snapshot_id} captured",
            details={"snapshot_id": snapshot_id, "kept": kept},
        )

    @staticmethod
    def snapshot_restored(snapshot_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SNAPSHOT_RESTORED,
            description=f"State rolled back to snapshot {snapshot_id}",
            details={"snapshot_id": snapshot_id},
        )

    @staticmethod
    def state_imported(counts: dict[str, int]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STATE_IMPORTED,
            description="State replaced from imported file",
            details=_state_counts(counts),
        )

    @staticmethod
    def import_failed(reason: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IMPORT_FAILED,
            severity=AuditSeverity.WARNING,
            description="Import rejected, current state kept",
            error_message=reason,
        )

    @staticmethod
    def backup_pushed(target: str, vault_key: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BACKUP_PUSHED,
            description=f"Backup pushed to {target}",
            details={"target": target, "vault_key": vault_key},
        )

    @staticmethod
    def external_service_error(service: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"External service error: {service}",
            error_message=error_message,
            details={"service": service},
        )
