"""
Slot state for in-flight generation requests.

A slot tracks exactly one outstanding (or settled) generation call. Its
identity is fixed when the batch is created so that front-ends can key
placeholders before any response arrives. Slots are never persisted.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class SlotStatus(str, Enum):
    """Slot lifecycle states."""

    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class Slot:
    """
    One generation request within a batch.

    Exactly one of these shapes holds at any time:
    - LOADING: artifact and error are both None
    - SUCCESS: artifact is the persisted record, error is None
    - ERROR: error is a readable message, artifact is None

    Attributes:
        id: Stable identifier assigned before the call starts
        index: Position in the batch (0-based)
        status: Current lifecycle state
        artifact: Persisted record once successful
        error: Failure message once failed
        attempts: Number of calls made for this slot (1 + retries)
    """

    id: str
    index: int
    status: SlotStatus = SlotStatus.LOADING
    artifact: Any | None = None
    error: str | None = None
    attempts: int = 1

    @property
    def settled(self) -> bool:
        return self.status != SlotStatus.LOADING

    def mark_loading(self) -> None:
        self.status = SlotStatus.LOADING
        self.artifact = None
        self.error = None
        self.attempts += 1

    def mark_success(self, artifact: Any) -> None:
        self.status = SlotStatus.SUCCESS
        self.artifact = artifact
        self.error = None

    def mark_error(self, message: str) -> None:
        self.status = SlotStatus.ERROR
        self.artifact = None
        self.error = message
