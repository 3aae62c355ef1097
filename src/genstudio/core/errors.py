"""
Exceptions for genstudio.

Exception Hierarchy:
    GenStudioError (base)
    ├── StoreError
    │   ├── InvalidImportError (malformed import payload)
    │   ├── StorageQuotaExceededError (strict-mode write dropped for capacity)
    │   └── UnknownCollectionError
    ├── OrchestratorError
    │   ├── BatchRejectedError
    │   │   ├── BatchInFlightError
    │   │   ├── InvalidSlotCountError
    │   │   └── ParentNotFoundError
    │   └── SlotNotRetryableError
    └── CapabilityError
        ├── GenerationError (a single generation call failed)
        └── MissingApiKeyError

QuotaExceededError is not part of this hierarchy. It is the raw
signal raised by a storage medium and never escapes the store.

Example:
    >>> from genstudio.core.errors import ParentNotFoundError
    >>> try:
    ...     raise ParentNotFoundError("messages", "msg-1")
    ... except ParentNotFoundError as e:
    ...     print(e.context["parent_id"])
    msg-1
"""


class GenStudioError(Exception):
    """
    Base exception for all genstudio errors.

    Attributes:
        message: Human-readable error message
        context: Additional context as keyword arguments
    """

    def __init__(self, message: str, **context: object) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class QuotaExceededError(Exception):
    """Raised by a storage medium when a write would exceed its capacity."""

    def __init__(self, key: str, needed: int, quota: int | None) -> None:
        self.key = key
        self.needed = needed
        self.quota = quota
        super().__init__(f"Storage quota exceeded writing '{key}' ({needed} bytes, quota {quota})")


# ==============================================================================
# Store errors
# ==============================================================================


class StoreError(GenStudioError):
    """Base class for local store errors."""


class InvalidImportError(StoreError):
    """
    Raised when an import payload is malformed.

    The whole import is rejected and nothing is written.
    """

    def __init__(self, detail: str | None = None) -> None:
        super().__init__("invalid format", detail=detail)
        self.detail = detail


class StorageQuotaExceededError(StoreError):
    """Raised after a write was dropped for capacity reasons.

    Plain writes raise it only in strict mode; imports always raise it.
    """

    def __init__(self, key: str) -> None:
        super().__init__(f"Storage is full; changes to '{key}' were not saved", key=key)
        self.key = key


class UnknownCollectionError(StoreError):
    """Raised when addressing a collection the store does not know about."""

    def __init__(self, collection: str) -> None:
        super().__init__(f"Unknown collection: {collection}", collection=collection)
        self.collection = collection


# ==============================================================================
# Orchestrator errors
# ==============================================================================


class OrchestratorError(GenStudioError):
    """Base class for generation orchestrator errors."""


class BatchRejectedError(OrchestratorError):
    """A batch request was refused before any slot was created."""


class BatchInFlightError(BatchRejectedError):
    """Raised when a batch is already running for the same parent."""

    def __init__(self, parent_id: str) -> None:
        super().__init__(
            f"A generation batch is already in flight for '{parent_id}'",
            parent_id=parent_id,
        )
        self.parent_id = parent_id


class InvalidSlotCountError(BatchRejectedError):
    """Raised when a batch is requested with fewer than one slot."""

    def __init__(self, count: int) -> None:
        super().__init__(f"Slot count must be >= 1, got {count}", count=count)
        self.count = count


class ParentNotFoundError(BatchRejectedError):
    """Raised when the parent entity is missing or soft-deleted."""

    def __init__(self, collection: str, parent_id: str) -> None:
        super().__init__(
            f"Parent '{parent_id}' not found in {collection}",
            collection=collection,
            parent_id=parent_id,
        )
        self.collection = collection
        self.parent_id = parent_id


class SlotNotRetryableError(OrchestratorError):
    """Raised when retrying a slot that is unknown or not in the error state."""

    def __init__(self, slot_id: str, status: str | None = None) -> None:
        reason = f"status is {status}" if status else "no such slot"
        super().__init__(
            f"Slot '{slot_id}' cannot be retried ({reason})",
            slot_id=slot_id,
            status=status,
        )
        self.slot_id = slot_id
        self.status = status


# ==============================================================================
# Capability errors
# ==============================================================================


class CapabilityError(GenStudioError):
    """Base class for generation capability errors."""


class GenerationError(CapabilityError):
    """A single generation call failed; the message is shown to the user."""


class MissingApiKeyError(CapabilityError):
    """Raised when a provider capability is selected without an API key."""

    def __init__(self, capability: str) -> None:
        super().__init__(
            f"An API key is required for the '{capability}' capability. "
            "Configure it with 'genstudio settings set --api-key'.",
            capability=capability,
        )
        self.capability = capability
