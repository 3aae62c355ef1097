"""
Generation slot orchestrator.

Runs N independent generation calls for one parent entity and tracks each
as its own slot:

1. ``start_batch`` validates the request, pre-generates N stable slot IDs,
   marks every slot Loading and schedules N concurrent calls, all before
   returning, so callers can render placeholders immediately
2. Each call that succeeds persists exactly one artifact and flips only its
   own slot to Success; each failure flips only its own slot to Error
3. Once every slot has settled (Success or Error), the per-parent
   in-flight guard clears. Error slots are kept until the user retries
4. ``retry_slot`` re-runs a single Error slot without touching its siblings

There is no batch-wide timeout and no cancellation; each capability owns
its own timeout policy.

Example:
    >>> orchestrator = SlotOrchestrator(store, SONG_TARGET)
    >>> call = capability_call(capability, build_style_prompt(message))
    >>> batch = orchestrator.start_batch(message.id, 3, call)
    >>> [slot.status for slot in batch.slots.values()]
    [<SlotStatus.LOADING: 'loading'>, <SlotStatus.LOADING: 'loading'>, ...]
    >>> await batch.wait()
"""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from genstudio.core.capability.base import GenerationCapability, GenerationResult
from genstudio.core.errors import (
    BatchInFlightError,
    InvalidSlotCountError,
    ParentNotFoundError,
    SlotNotRetryableError,
)
from genstudio.core.orchestrator.slots import Slot, SlotStatus
from genstudio.core.orchestrator.targets import GenerationTarget
from genstudio.core.store.models import utcnow
from genstudio.core.store.service import LocalStore

logger = logging.getLogger(__name__)

# A capability invocation bound to everything except the slot index
SlotCall = Callable[[int], Awaitable[GenerationResult]]
SlotListener = Callable[["Batch", Slot], None]

DEFAULT_ERROR_MESSAGE = "Generation failed"


def capability_call(capability: GenerationCapability, prompt: str, **params: Any) -> SlotCall:
    """
    Bind a capability and prompt into a per-slot call.

    Every slot receives the same prompt and parameters.
    """

    def call(slot_index: int) -> Awaitable[GenerationResult]:
        return capability.generate(prompt, **params)

    return call


class Batch:
    """
    The slots created by one trigger.

    Slots are kept in a dict keyed by slot ID, in creation order. Updates
    replace the state of one entry; there is no positional reuse.

    Attributes:
        id: Batch identifier
        parent_id: Parent entity the artifacts belong to
        slots: Slot ID -> Slot, in creation order
        context: Per-batch values handed to the target (e.g. generation_id)
        started_at: When the batch was created
        settled_at: When every initial slot had settled (None until then)
    """

    def __init__(self, parent_id: str, count: int, context: dict[str, Any]) -> None:
        self.id = uuid.uuid4().hex
        self.parent_id = parent_id
        self.context = context
        self.slots: dict[str, Slot] = {}
        for index in range(count):
            slot_id = uuid.uuid4().hex
            self.slots[slot_id] = Slot(id=slot_id, index=index)
        self.started_at: datetime = utcnow()
        self.settled_at: datetime | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._settled: asyncio.Task[None] | None = None
        self._listeners: list[SlotListener] = []

    def __repr__(self) -> str:
        counts = {status.value: len(self.by_status(status)) for status in SlotStatus}
        return f"Batch(id={self.id!r}, parent_id={self.parent_id!r}, slots={counts})"

    # Observation

    def subscribe(self, listener: SlotListener) -> Callable[[], None]:
        """
        Register a callback invoked after each slot change.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, slot: Slot) -> None:
        for listener in list(self._listeners):
            try:
                listener(self, slot)
            except Exception as e:
                logger.warning(f"Slot listener failed for slot {slot.id}: {e}")

    # State

    def by_status(self, status: SlotStatus) -> list[Slot]:
        return [slot for slot in self.slots.values() if slot.status == status]

    @property
    def done(self) -> bool:
        """True once no slot is Loading."""
        return all(slot.settled for slot in self.slots.values())

    @property
    def artifacts(self) -> list[Any]:
        return [slot.artifact for slot in self.by_status(SlotStatus.SUCCESS)]

    def clear_settled(self) -> list[Slot]:
        """
        Drop Success slots, keeping Loading and Error ones.

        Front-ends call this once successful results are shown from the
        store-backed list instead of the placeholders.

        Returns:
            The removed slots
        """
        removed = self.by_status(SlotStatus.SUCCESS)
        for slot in removed:
            del self.slots[slot.id]
        return removed

    # Task tracking

    def _track(self, task: "asyncio.Task[None]") -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def wait(self) -> "Batch":
        """
        Wait until every slot has settled, including in-flight retries.

        Never raises for slot failures: Error is a settled state.
        """
        if self._settled is not None:
            await self._settled
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
        return self


class SlotOrchestrator:
    """
    Runs generation batches for one target.

    Only one batch may be in flight per parent; different parents run
    concurrently without interfering.

    Attributes:
        store: Store receiving artifacts
        target: What kind of artifact this orchestrator produces
    """

    def __init__(self, store: LocalStore, target: GenerationTarget) -> None:
        self.store = store
        self.target = target
        self._in_flight: dict[str, Batch] = {}

    def is_in_flight(self, parent_id: str) -> bool:
        return parent_id in self._in_flight

    def _require_parent(self, parent_id: str) -> Any:
        parent = self.store.get(self.target.parent_collection, parent_id)
        if parent is None or getattr(parent, "deleted", False):
            raise ParentNotFoundError(self.target.parent_collection, parent_id)
        return parent

    def start_batch(
        self,
        parent_id: str,
        count: int,
        call: SlotCall,
        *,
        fields: dict[str, Any] | None = None,
    ) -> Batch:
        """
        Create ``count`` Loading slots and launch one call per slot.

        Must be called from within a running event loop. Everything up to
        slot creation happens synchronously; any rejection is raised before
        a single slot exists.

        Args:
            parent_id: Parent entity ID (must exist and not be deleted)
            count: Number of slots (>= 1)
            call: Invoked once per slot with the slot index
            fields: Extra per-batch values for the target (e.g. shot_id)

        Returns:
            The new batch, all slots Loading

        Raises:
            BatchInFlightError: A batch is already running for this parent
            InvalidSlotCountError: count < 1
            ParentNotFoundError: Parent missing or soft-deleted
            BatchRejectedError: The target refused the batch fields
        """
        if parent_id in self._in_flight:
            raise BatchInFlightError(parent_id)
        if count < 1:
            raise InvalidSlotCountError(count)
        parent = self._require_parent(parent_id)
        loop = asyncio.get_running_loop()

        context = self.target.prepare(self.store, parent, dict(fields or {}))
        batch = Batch(parent_id, count, context)
        self._in_flight[parent_id] = batch
        logger.info(f"Starting {self.target.name} batch {batch.id} for {parent_id} ({count} slots)")

        tasks = []
        for slot in batch.slots.values():
            task = loop.create_task(self._run_slot(batch, parent, slot, call))
            batch._track(task)
            tasks.append(task)
        batch._settled = loop.create_task(self._settle(batch, tasks))
        return batch

    async def run_batch(
        self,
        parent_id: str,
        count: int,
        call: SlotCall,
        *,
        fields: dict[str, Any] | None = None,
    ) -> Batch:
        """Start a batch and wait for every slot to settle."""
        batch = self.start_batch(parent_id, count, call, fields=fields)
        return await batch.wait()

    def retry_slot(self, batch: Batch, slot_id: str, call: SlotCall) -> "asyncio.Task[None]":
        """
        Re-run one Error slot.

        The slot goes back to Loading and then settles again; siblings and
        the in-flight guard are not touched.

        Args:
            batch: Batch owning the slot
            slot_id: Slot to retry
            call: Invoked once with the slot's index

        Returns:
            The task running the retry (also awaited by batch.wait())

        Raises:
            SlotNotRetryableError: Unknown slot, or slot not in Error
            ParentNotFoundError: Parent deleted since the batch started
        """
        slot = batch.slots.get(slot_id)
        if slot is None:
            raise SlotNotRetryableError(slot_id)
        if slot.status != SlotStatus.ERROR:
            raise SlotNotRetryableError(slot_id, slot.status.value)
        parent = self._require_parent(batch.parent_id)
        loop = asyncio.get_running_loop()

        slot.mark_loading()
        logger.debug(f"Retrying slot {slot.id} (attempt {slot.attempts})")
        batch._notify(slot)

        task = loop.create_task(self._run_slot(batch, parent, slot, call))
        batch._track(task)
        return task

    async def _run_slot(self, batch: Batch, parent: Any, slot: Slot, call: SlotCall) -> None:
        try:
            result = await call(slot.index)
            record = self.store.create(
                self.target.artifact_collection,
                self.target.build_artifact(parent, slot.index, result, batch.context),
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            message = str(e) or DEFAULT_ERROR_MESSAGE
            slot.mark_error(message)
            logger.debug(f"Slot {slot.id} failed: {message}")
        else:
            slot.mark_success(record)
            logger.debug(f"Slot {slot.id} succeeded: {record.id}")
        batch._notify(slot)

    async def _settle(self, batch: Batch, tasks: list["asyncio.Task[None]"]) -> None:
        try:
            await asyncio.gather(*tasks, return_exceptions=True)
        finally:
            batch.settled_at = utcnow()
            if self._in_flight.get(batch.parent_id) is batch:
                del self._in_flight[batch.parent_id]
            failed = len(batch.by_status(SlotStatus.ERROR))
            logger.info(
                f"{self.target.name} batch {batch.id} settled: "
                f"{len(batch.slots) - failed} succeeded, {failed} failed"
            )
