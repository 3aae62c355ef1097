"""
Versioned local store.

A typed, collection-oriented persistence layer over a synchronous storage
medium. Owns every durable entity: parent entries, generated artifacts and
settings.

Key behaviors:
- Read-side migration: every read passes raw records through
  migrate_on_read; storage is never rewritten just because the schema moved
- Soft delete: records are flagged ``deleted`` and hidden from default
  listings, never physically removed
- Single writer: every read-modify-write cycle runs under one re-entrant
  lock, so concurrent producers (async callbacks, worker threads) cannot
  lose each other's appends
- Quota handling: a write rejected for capacity is dropped, the previous
  value stays intact, and one event is published on the quota bus

Example:
    >>> store = LocalStore(MemoryMedium(), QuotaEventBus())
    >>> msg = store.create("messages", {"role": "assistant", "title": "Dawn"})
    >>> store.get("messages", msg.id).title
    'Dawn'
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from pydantic import ValidationError

from genstudio.core.errors import (
    InvalidImportError,
    QuotaExceededError,
    StorageQuotaExceededError,
)
from genstudio.core.store.events import QuotaEventBus
from genstudio.core.store.medium import StorageMedium
from genstudio.core.store.migrations import migrate_on_read
from genstudio.core.store.models import StoreModel, generate_id, utcnow
from genstudio.core.store.schema import COLLECTIONS, CollectionSpec, get_collection_spec

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fields callers may never change through update()
IMMUTABLE_FIELDS = frozenset({"id", "created_at"})

# Settings fields that hold credentials
SECRET_FIELDS = ("poeApiKey",)


def to_field_names(model: type[StoreModel], data: dict[str, Any]) -> dict[str, Any]:
    """
    Normalize a dict keyed by aliases or attribute names to attribute names.

    Keys unknown to the model are passed through unchanged.
    """
    by_alias = {
        (field.alias or name): name for name, field in model.model_fields.items()
    }
    return {by_alias.get(key, key): value for key, value in data.items()}


def strip_secrets(snapshot: dict[str, Any]) -> dict[str, Any]:
    """
    Return a copy of an export snapshot with credentials blanked.

    The store never strips secrets itself; front-ends call this before
    writing an export somewhere shareable.
    """
    result = dict(snapshot)
    settings = result.get("settings")
    if isinstance(settings, dict):
        settings = dict(settings)
        for field in SECRET_FIELDS:
            if field in settings:
                settings[field] = ""
        result["settings"] = settings
    return result


class LocalStore:
    """
    Typed local store over a StorageMedium.

    Attributes:
        medium: Backing key/value medium
        quota_bus: Bus notified once per write dropped for capacity
        namespace: Prefix for every storage key
        strict: If True, a dropped write raises StorageQuotaExceededError
            after publishing; otherwise the caller gets the attempted state
    """

    def __init__(
        self,
        medium: StorageMedium,
        quota_bus: QuotaEventBus | None = None,
        *,
        namespace: str = "genstudio",
        strict: bool = False,
    ) -> None:
        self.medium = medium
        self.quota_bus = quota_bus or QuotaEventBus()
        self.namespace = namespace
        self.strict = strict
        self._lock = threading.RLock()

    # ==========================================================================
    # Raw I/O
    # ==========================================================================

    def key_for(self, collection: str) -> str:
        return get_collection_spec(collection).storage_key(self.namespace)

    def _read_raw(self, spec: CollectionSpec) -> Any:
        raw = self.medium.get_item(spec.storage_key(self.namespace))
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable data for {spec.name}: {e}")
            return None

    def _write_raw(self, spec: CollectionSpec, value: Any) -> bool:
        """
        Persist a JSON value for a collection.

        Returns:
            True if the value was stored, False if it was dropped for capacity

        Raises:
            StorageQuotaExceededError: In strict mode, after publishing
        """
        key = spec.storage_key(self.namespace)
        data = json.dumps(value, ensure_ascii=False, separators=(",", ":"))
        try:
            self.medium.set_item(key, data)
        except QuotaExceededError as e:
            logger.warning(f"Write to {key} dropped: {e}")
            self.quota_bus.publish()
            if self.strict:
                raise StorageQuotaExceededError(key) from e
            return False
        logger.debug(f"Wrote {len(data)} bytes to {key}")
        return True

    def _validate(self, spec: CollectionSpec, raw: Any) -> StoreModel:
        if not isinstance(raw, dict):
            raise ValueError(f"expected an object, got {type(raw).__name__}")
        return spec.model.model_validate(migrate_on_read(spec.name, raw))

    def _load_list(self, spec: CollectionSpec) -> list[StoreModel]:
        raw = self._read_raw(spec)
        if not isinstance(raw, list):
            return []

        records: list[StoreModel] = []
        for index, item in enumerate(raw):
            try:
                records.append(self._validate(spec, item))
            except (ValidationError, ValueError) as e:
                # Skip corrupt records but keep the rest of the collection readable
                logger.warning(f"Skipping malformed record {index} in {spec.name}: {e}")
        return records

    def _load_record(self, spec: CollectionSpec) -> StoreModel | None:
        raw = self._read_raw(spec)
        if raw is None:
            return None
        try:
            return self._validate(spec, raw)
        except (ValidationError, ValueError) as e:
            logger.warning(f"Ignoring malformed {spec.name} record: {e}")
            return None

    def _list_spec(self, collection: str) -> CollectionSpec:
        spec = get_collection_spec(collection)
        if not spec.is_list:
            raise ValueError(f"{collection} holds a single record, not a list")
        return spec

    # ==========================================================================
    # Queries
    # ==========================================================================

    def all(self, collection: str) -> list[Any]:
        """Return every record in a collection, soft-deleted ones included."""
        return self._load_list(self._list_spec(collection))

    def list(
        self,
        collection: str,
        include_deleted: bool = False,
        where: Callable[[Any], bool] | None = None,
    ) -> list[Any]:
        """
        List records in a collection.

        Args:
            collection: Collection name
            include_deleted: If False (default), soft-deleted records are hidden
            where: Optional predicate applied after the deleted filter

        Returns:
            Records in storage order
        """
        records = self.all(collection)
        if not include_deleted:
            records = [r for r in records if not getattr(r, "deleted", False)]
        if where is not None:
            records = [r for r in records if where(r)]
        return records

    def get(self, collection: str, record_id: str) -> Any | None:
        """Return one record by key, or None if absent. Deleted records are returned."""
        spec = self._list_spec(collection)
        for record in self._load_list(spec):
            if getattr(record, spec.key_field or "id") == record_id:
                return record
        return None

    # ==========================================================================
    # Mutations
    # ==========================================================================

    def mutate(self, collection: str, fn: Callable[[list[Any]], T]) -> T:
        """
        Run one read-modify-write cycle on a list collection.

        The collection is loaded, passed to ``fn`` which may change it in
        place, and written back, all while holding the writer lock.

        Args:
            collection: Collection name
            fn: Receives the record list, returns the caller's result

        Returns:
            Whatever fn returned
        """
        spec = self._list_spec(collection)
        with self._lock:
            records = self._load_list(spec)
            result = fn(records)
            self._write_raw(spec, [r.to_storage() for r in records])
            return result

    def create(self, collection: str, data: dict[str, Any] | None = None) -> Any:
        """
        Create and persist a new record.

        Generated fields (id, timestamps, deleted/pinned flags) are assigned
        here and win over anything in ``data``.

        Args:
            collection: Collection name
            data: Field values keyed by attribute name or persisted alias

        Returns:
            The new record (even if the write was dropped for capacity)
        """
        spec = self._list_spec(collection)
        fields = spec.model.model_fields
        values = to_field_names(spec.model, dict(data or {}))

        now = utcnow()
        if spec.key_field == "id":
            values["id"] = generate_id()
        if "created_at" in fields:
            values["created_at"] = now
        if "updated_at" in fields:
            values["updated_at"] = now
        if "deleted" in fields:
            values["deleted"] = False
        if "pinned" in fields:
            values["pinned"] = False
            values["pinned_at"] = None

        record = spec.model.model_validate(values)

        def append(records: list[Any]) -> None:
            records.append(record)

        self.mutate(collection, append)
        logger.debug(f"Created {collection} record {getattr(record, spec.key_field or 'id')}")
        return record

    def update(self, collection: str, record_id: str, patch: dict[str, Any]) -> Any | None:
        """
        Apply a partial update to one record.

        ``id`` and ``created_at`` cannot change; ``updated_at`` is always
        bumped for models that carry it.

        Returns:
            The updated record, or None if no record has that key
        """
        spec = self._list_spec(collection)
        key_field = spec.key_field or "id"
        changes = {
            k: v
            for k, v in to_field_names(spec.model, patch).items()
            if k not in IMMUTABLE_FIELDS and k != key_field
        }

        def apply(records: list[Any]) -> Any | None:
            for index, current in enumerate(records):
                if getattr(current, key_field) != record_id:
                    continue
                merged = current.model_dump()
                merged.update(changes)
                if "updated_at" in spec.model.model_fields:
                    merged["updated_at"] = utcnow()
                records[index] = spec.model.model_validate(merged)
                return records[index]
            return None

        with self._lock:
            if self.get(collection, record_id) is None:
                return None
            return self.mutate(collection, apply)

    def soft_delete(self, collection: str, record_id: str) -> bool:
        """
        Mark a record deleted without touching any other field.

        Returns:
            True if the record exists, False otherwise
        """
        spec = self._list_spec(collection)

        def flag(records: list[Any]) -> bool:
            for index, current in enumerate(records):
                if getattr(current, spec.key_field or "id") == record_id:
                    records[index] = current.model_copy(update={"deleted": True})
                    return True
            return False

        with self._lock:
            if self.get(collection, record_id) is None:
                return False
            return self.mutate(collection, flag)

    def set_pinned(self, collection: str, record_id: str, value: bool) -> Any | None:
        """
        Pin or unpin an artifact.

        Idempotent in effect; the write is performed even when the value
        does not change. ``pinned_at`` is stamped when pinning and cleared
        when unpinning.
        """
        if "pinned" not in self._list_spec(collection).model.model_fields:
            raise ValueError(f"{collection} records cannot be pinned")
        return self.update(
            collection,
            record_id,
            {"pinned": value, "pinned_at": utcnow() if value else None},
        )

    # ==========================================================================
    # Settings
    # ==========================================================================

    def get_settings(self, collection: str = "settings") -> Any | None:
        spec = get_collection_spec(collection)
        if spec.is_list:
            raise ValueError(f"{collection} is a list collection")
        return self._load_record(spec)

    def save_settings(self, value: StoreModel | dict[str, Any], collection: str = "settings") -> Any:
        spec = get_collection_spec(collection)
        if spec.is_list:
            raise ValueError(f"{collection} is a list collection")
        if isinstance(value, dict):
            value = spec.model.model_validate(to_field_names(spec.model, value))
        with self._lock:
            self._write_raw(spec, value.to_storage())
        return value

    # ==========================================================================
    # Export / import / reset
    # ==========================================================================

    def export(self, collections: Iterable[str] | None = None) -> dict[str, Any]:
        """
        Snapshot collections as plain JSON-ready data.

        Soft-deleted records and credentials are included. Settings export
        as None when never saved.

        Args:
            collections: Names to export (default: all)

        Returns:
            Dict keyed by collection name
        """
        names = list(collections) if collections is not None else list(COLLECTIONS)
        snapshot: dict[str, Any] = {}
        with self._lock:
            for name in names:
                spec = get_collection_spec(name)
                if spec.is_list:
                    snapshot[name] = [r.to_storage() for r in self._load_list(spec)]
                else:
                    record = self._load_record(spec)
                    snapshot[name] = record.to_storage() if record is not None else None
        return snapshot

    def import_data(self, payload: Any) -> list[str]:
        """
        Replace collections with the contents of an export payload.

        Each collection present in the payload is replaced wholesale; keys
        that are absent (or null) leave their collection untouched. The
        payload is fully validated before anything is written.

        Args:
            payload: Parsed export document

        Returns:
            Names of the collections that were replaced

        Raises:
            InvalidImportError: If the payload is malformed (nothing written)
            StorageQuotaExceededError: If any collection could not be stored;
                collections already replaced are restored first, in strict
                and non-strict mode alike
        """
        if not isinstance(payload, dict):
            raise InvalidImportError("payload must be an object")

        known = [name for name in payload if name in COLLECTIONS]
        if not known:
            raise InvalidImportError("no known collections in payload")

        prepared: list[tuple[CollectionSpec, Any]] = []
        for name in known:
            value = payload[name]
            if value is None:
                continue
            spec = COLLECTIONS[name]
            try:
                if spec.is_list:
                    if not isinstance(value, list):
                        raise ValueError(f"expected a list, got {type(value).__name__}")
                    prepared.append((spec, [self._validate(spec, v).to_storage() for v in value]))
                else:
                    prepared.append((spec, self._validate(spec, value).to_storage()))
            except (ValidationError, ValueError) as e:
                raise InvalidImportError(f"{name}: {e}") from e

        with self._lock:
            previous = {
                spec.name: self.medium.get_item(spec.storage_key(self.namespace))
                for spec, _ in prepared
            }
            written: list[CollectionSpec] = []
            for spec, value in prepared:
                try:
                    stored = self._write_raw(spec, value)
                except StorageQuotaExceededError:
                    self._restore(written, previous)
                    raise
                if not stored:
                    self._restore(written, previous)
                    raise StorageQuotaExceededError(spec.storage_key(self.namespace))
                written.append(spec)

        imported = [spec.name for spec, _ in prepared]
        logger.info(f"Imported collections: {', '.join(imported) or 'none'}")
        return imported

    def _restore(self, specs: list[CollectionSpec], previous: dict[str, str | None]) -> None:
        """Put back the raw values captured before an import started writing."""
        for spec in reversed(specs):
            key = spec.storage_key(self.namespace)
            if previous[spec.name] is None:
                self.medium.remove_item(key)
            else:
                self.medium.set_item(key, previous[spec.name])
        if specs:
            logger.warning(f"Import rolled back: {', '.join(s.name for s in specs)}")

    def reset(self, collections: Iterable[str] | None = None) -> None:
        """
        Remove stored data.

        Args:
            collections: Names to clear (default: every key in the namespace)
        """
        with self._lock:
            if collections is not None:
                for name in collections:
                    self.medium.remove_item(self.key_for(name))
                return
            prefix = f"{self.namespace}:"
            for key in self.medium.keys():
                if key.startswith(prefix):
                    self.medium.remove_item(key)
