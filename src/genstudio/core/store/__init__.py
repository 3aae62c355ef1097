"""
Versioned local store.

Typed collections over a synchronous key/value medium, with read-side
migration, soft delete, pinning, quota-safe writes and export/import.
"""

from .events import QuotaEventBus
from .medium import FileMedium, MemoryMedium, StorageMedium
from .migrations import migrate_on_read
from .schema import COLLECTIONS, CollectionSpec, Domain, collections_for_domain
from .service import LocalStore, strip_secrets

__all__ = [
    # Media
    "StorageMedium",
    "MemoryMedium",
    "FileMedium",
    # Events
    "QuotaEventBus",
    # Schema
    "COLLECTIONS",
    "CollectionSpec",
    "Domain",
    "collections_for_domain",
    "migrate_on_read",
    # Store
    "LocalStore",
    "strip_secrets",
]
