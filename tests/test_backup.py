"""Tests for the Google Sheets backup target (gspread is always mocked)."""

import json
from unittest.mock import MagicMock

import pytest
from tenacity import wait_none

from shopledger.models import AppState, AuditEventType
from shopledger.services.backup import (
    BackupError,
    GoogleSheetsBackupTarget,
    generate_vault_key,
)
from shopledger.services.backup import google_sheets
from shopledger.session import LedgerSession


class TestVaultKey:
    """Tests for the key shown to the user."""

    def test_format(self):
        key = generate_vault_key()
        assert key.startswith("BTM-VAULT-")
        assert len(key) == len("BTM-VAULT-") + 6
        assert key == key.upper()


class TestGoogleSheetsBackupTarget:
    """Tests for pushing and finding backups."""

    def test_push_appends_one_row(self, stocked_state, audit_logger):
        worksheet = MagicMock()
        target = GoogleSheetsBackupTarget(worksheet=worksheet, audit_logger=audit_logger)

        receipt = target.push(stocked_state)

        worksheet.append_row.assert_called_once()
        row = worksheet.append_row.call_args.args[0]
        assert row[0] == receipt.vault_key
        assert row[1] == receipt.timestamp
        assert row[2] == 1
        assert json.loads(row[3])["inventory"][0]["name"] == "Dress"
        assert receipt.target == "google_sheets"
        assert audit_logger.recent_events(1)[0].event_type == AuditEventType.BACKUP_PUSHED

    def test_push_failure_raises_backup_error(self, monkeypatch, audit_logger):
        monkeypatch.setattr(
            GoogleSheetsBackupTarget._append.retry, "wait", wait_none()
        )
        worksheet = MagicMock()
        worksheet.append_row.side_effect = RuntimeError("quota exceeded")
        target = GoogleSheetsBackupTarget(worksheet=worksheet, audit_logger=audit_logger)

        with pytest.raises(BackupError):
            target.push(AppState())

        assert worksheet.append_row.call_count == 3
        assert audit_logger.recent_events(1)[0].event_type == AuditEventType.EXTERNAL_SERVICE_ERROR

    def test_oversized_state_is_refused(self, monkeypatch):
        monkeypatch.setattr(google_sheets, "MAX_CELL_CHARS", 10)
        worksheet = MagicMock()
        with pytest.raises(BackupError):
            GoogleSheetsBackupTarget(worksheet=worksheet).push(AppState())
        worksheet.append_row.assert_not_called()

    def test_find_returns_state_json(self):
        worksheet = MagicMock()
        worksheet.get_all_values.return_value = [
            google_sheets.BACKUP_COLUMNS,
            ["BTM-VAULT-AAAAAA", "2024-01-01T00:00:00.000Z", "0", "{}"],
            ["BTM-VAULT-BBBBBB", "2024-01-02T00:00:00.000Z", "1", '{"sales": []}'],
        ]
        target = GoogleSheetsBackupTarget(worksheet=worksheet)
        assert target.find("BTM-VAULT-BBBBBB") == '{"sales": []}'
        assert target.find("BTM-VAULT-CCCCCC") is None

    def test_backup_restores_through_import(self, store, stocked_state):
        """Test a pushed backup imports back into a session unchanged."""
        worksheet = MagicMock()
        target = GoogleSheetsBackupTarget(worksheet=worksheet)
        receipt = target.push(stocked_state)
        row = worksheet.append_row.call_args.args[0]
        worksheet.get_all_values.return_value = [google_sheets.BACKUP_COLUMNS, row]

        session = LedgerSession.open(store)
        session.import_json(target.find(receipt.vault_key))
        assert session.state == stocked_state


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
