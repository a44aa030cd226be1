"""
Audit Logger

DESIGN DECISION: Every state transition is logged.
This provides:
1. Traceability of every change to the books
2. Visibility into silent recoveries (corrupt blob -> empty state)
3. A history the shop owner can be shown

The audit logger:
- Is synchronous; it runs inside the update protocol
- Never raises into the caller (a logging failure must not block a save)
- Keeps a bounded in-memory trail for the current session
"""

import logging
from collections import deque
from typing import Optional

import structlog

from shopledger.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity


def configure_logging(debug: bool = False) -> None:
    """
    Configure structlog for JSON output on the standard library logger.

    Safe to call more than once; the last call wins.
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(format="%(message)s", level=level)
    # basicConfig is a no-op once the root logger has handlers
    logging.getLogger().setLevel(level)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


configure_logging()


class AuditLogger:
    """
    Central audit logging service.

    Logs events to the structured local log and keeps the most recent
    ones in memory for display.
    """

    def __init__(self, history_size: int = 200):
        self._logger = structlog.get_logger("shopledger.audit")
        self._history: deque[AuditEvent] = deque(maxlen=history_size)

    def log(self, event: AuditEvent) -> None:
        """Log an audit event."""
        self._history.append(event)
        log_dict = event.to_log_dict()

        try:
            if event.severity == AuditSeverity.ERROR:
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            elif event.severity == AuditSeverity.DEBUG:
                self._logger.debug("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # A broken log handler must never fail a state update
            logging.getLogger(__name__).warning("audit log write failed: %s", e)

    def recent_events(self, limit: int = 50) -> list[AuditEvent]:
        """Most recent events, newest first."""
        return list(reversed(self._history))[:limit]

    def log_state_loaded(self, counts: dict[str, int]) -> None:
        self.log(AuditEventBuilder.state_loaded(counts))

    def log_state_load_failed(self, key: str, reason: str) -> None:
        self.log(AuditEventBuilder.state_load_failed(key, reason))

    def log_record_quarantined(
        self,
        collection: str,
        record_id: Optional[str],
        reason: str,
    ) -> None:
        self.log(AuditEventBuilder.record_quarantined(collection, record_id, reason))

    def log_snapshot_log_corrupt(self, key: str, reason: str) -> None:
        self.log(AuditEventBuilder.snapshot_log_corrupt(key, reason))

    def log_state_saved(self, key: str, size_bytes: int) -> None:
        self.log(AuditEventBuilder.state_saved(key, size_bytes))

    def log_state_updated(self, counts: dict[str, int], replaced: bool = False) -> None:
        self.log(AuditEventBuilder.state_updated(counts, replaced=replaced))

    def log_update_failed(self, error: Exception) -> None:
        self.log(
            AuditEventBuilder.state_update_failed(type(error).__name__, str(error))
        )

    def log_snapshot_captured(self, snapshot_id: str, kept: int) -> None:
        self.log(AuditEventBuilder.snapshot_captured(snapshot_id, kept))

    def log_snapshot_restored(self, snapshot_id: str) -> None:
        self.log(AuditEventBuilder.snapshot_restored(snapshot_id))

    def log_state_imported(self, counts: dict[str, int]) -> None:
        self.log(AuditEventBuilder.state_imported(counts))

    def log_import_failed(self, reason: str) -> None:
        self.log(AuditEventBuilder.import_failed(reason))

    def log_backup_pushed(self, target: str, vault_key: str) -> None:
        self.log(AuditEventBuilder.backup_pushed(target, vault_key))

    def log_external_service_error(
        self,
        service: str,
        error_message: str,
        details: Optional[dict] = None,
    ) -> None:
        event = AuditEventBuilder.external_service_error(service, error_message)
        if details:
            event.details.update(details)
        self.log(event)
