"""
Google Sheets Backup Target

Each backup is one row in a dedicated worksheet:
    vault_key | timestamp | record_count | state_json

DESIGN DECISION: The state goes in as a single JSON cell, not spread
over columns. A backup is only ever restored whole (through the normal
import path), so there is nothing to gain from a tabular layout, and
the blob format stays identical to an export file.

TRADEOFFS:
- A Sheets cell holds at most 50,000 characters; larger states are
  refused with a BackupError rather than truncated.
"""

from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from shopledger.audit import AuditLogger
from shopledger.config import GoogleSheetsSettings, get_settings
from shopledger.migration import serialize_state
from shopledger.models.entities import AppState
from shopledger.services.backup.interface import (
    BackupError,
    BackupReceipt,
    BackupTarget,
)


BACKUP_COLUMNS = [
    "vault_key",
    "timestamp",
    "record_count",
    "state_json",
]

# Google Sheets per-cell character limit
MAX_CELL_CHARS = 50_000


class GoogleSheetsBackupTarget(BackupTarget):
    """
    Appends full-state backups to a Google Sheets worksheet.

    Pass `worksheet` to skip authentication entirely (tests, or a host
    that already holds an authorized gspread client).
    """

    name = "google_sheets"

    def __init__(
        self,
        settings: Optional[GoogleSheetsSettings] = None,
        worksheet: Optional[gspread.Worksheet] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._settings = settings
        self._worksheet = worksheet
        self._audit_logger = audit_logger or AuditLogger()

    def _get_settings(self) -> GoogleSheetsSettings:
        if self._settings is None:
            self._settings = get_settings().google_sheets
        return self._settings

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _connect(self) -> gspread.Client:
        """Authorize with the service account credentials."""
        settings = self._get_settings()
        scopes = [
            "https://www.googleapis.com/auth/spreadsheets",
            "https://www.googleapis.com/auth/drive",
        ]
        try:
            credentials = Credentials.from_service_account_file(
                settings.credentials_path,
                scopes=scopes,
            )
        except FileNotFoundError:
            raise BackupError(
                f"Google credentials file not found: {settings.credentials_path}"
            )
        return gspread.authorize(credentials)

    def _get_worksheet(self) -> gspread.Worksheet:
        """Get or create the backup worksheet."""
        if self._worksheet is None:
            settings = self._get_settings()
            try:
                spreadsheet = self._connect().open_by_key(settings.spreadsheet_id)
            except gspread.SpreadsheetNotFound:
                raise BackupError(f"Spreadsheet not found: {settings.spreadsheet_id}")

            try:
                self._worksheet = spreadsheet.worksheet(settings.backup_sheet_name)
            except gspread.WorksheetNotFound:
                self._worksheet = spreadsheet.add_worksheet(
                    title=settings.backup_sheet_name,
                    rows=1000,
                    cols=len(BACKUP_COLUMNS),
                )
                self._worksheet.append_row(BACKUP_COLUMNS)
        return self._worksheet

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _append(self, worksheet: gspread.Worksheet, row: list) -> None:
        worksheet.append_row(row, value_input_option="RAW")

    def push(self, state: AppState) -> BackupReceipt:
        payload = serialize_state(state)
        if len(payload) > MAX_CELL_CHARS:
            raise BackupError(
                f"State is too large for a single backup cell "
                f"({len(payload)} > {MAX_CELL_CHARS} characters)"
            )

        receipt = BackupReceipt(
            target=self.name,
            size_bytes=len(payload.encode("utf-8")),
        )
        row = [receipt.vault_key, receipt.timestamp, state.record_count, payload]

        try:
            self._append(self._get_worksheet(), row)
        except BackupError as e:
            self._audit_logger.log_external_service_error(self.name, str(e))
            raise
        except Exception as e:
            self._audit_logger.log_external_service_error(self.name, str(e))
            raise BackupError(f"Failed to push backup: {e}") from e

        self._audit_logger.log_backup_pushed(self.name, receipt.vault_key)
        return receipt

    def find(self, vault_key: str) -> Optional[str]:
        """
        Fetch the state JSON stored under a vault key.

        The returned text is meant for LedgerSession.import_json.
        """
        try:
            rows = self._get_worksheet().get_all_values()
        except BackupError:
            raise
        except Exception as e:
            raise BackupError(f"Failed to read backups: {e}") from e

        for row in rows[1:]:
            if row and row[0] == vault_key and len(row) >= len(BACKUP_COLUMNS):
                return row[3]
        return None
