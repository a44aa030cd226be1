"""
Backup Target Interface

A backup target receives a full copy of the AppState and hands back a
receipt the user can quote to find it again.

DESIGN DECISION: Backups are push-only and never automatic.
The core is correct without them; a target that is offline or
misconfigured must never block a save. Only an explicit user action
calls push().
"""

from abc import ABC, abstractmethod
from uuid import uuid4

from pydantic import BaseModel, Field

from shopledger.models.entities import AppState, now_iso


class BackupError(Exception):
    """A backup could not be delivered to its target."""
    pass


def generate_vault_key() -> str:
    """Key the user can quote to locate a backup, e.g. BTM-VAULT-3F9A1C."""
    return "BTM-VAULT-" + uuid4().hex[:6].upper()


class BackupReceipt(BaseModel):
    """Proof that a backup was delivered."""

    vault_key: str = Field(default_factory=generate_vault_key)
    timestamp: str = Field(default_factory=now_iso)
    target: str
    size_bytes: int = Field(default=0, ge=0)


class BackupTarget(ABC):
    """Abstract destination for full-state backups."""

    name: str = "backup"

    @abstractmethod
    def push(self, state: AppState) -> BackupReceipt:
        """
        Deliver a full copy of the state.

        Raises:
            BackupError: If the target could not store it
        """
        pass
