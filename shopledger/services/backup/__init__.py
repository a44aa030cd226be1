"""
Backup Services Package

Optional destinations for full-state backups. Nothing in the core
depends on them.
"""

from shopledger.services.backup.interface import (
    BackupError,
    BackupReceipt,
    BackupTarget,
    generate_vault_key,
)
from shopledger.services.backup.google_sheets import GoogleSheetsBackupTarget

__all__ = [
    "BackupError",
    "BackupReceipt",
    "BackupTarget",
    "generate_vault_key",
    "GoogleSheetsBackupTarget",
]
