"""
Quota event bus.

The store publishes on this bus when a write is dropped because the medium
is full. Front-ends subscribe to show feedback (a toast, a CLI warning).
The bus is passed into the store explicitly so the data layer has no
knowledge of who is listening.
"""

import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)

QuotaListener = Callable[[], None]


class QuotaEventBus:
    """
    Fire-and-forget publish/subscribe channel with no payload.

    Late subscribers do not see earlier events. A listener that raises is
    logged and skipped; it never stops delivery to other listeners or
    reaches the publisher.

    Example:
        >>> bus = QuotaEventBus()
        >>> seen = []
        >>> unsubscribe = bus.subscribe(lambda: seen.append(True))
        >>> bus.publish()
        >>> unsubscribe()
        >>> bus.publish()
        >>> len(seen)
        1
    """

    def __init__(self) -> None:
        self._listeners: list[QuotaListener] = []

    def subscribe(self, listener: QuotaListener) -> Callable[[], None]:
        """
        Register a listener.

        Args:
            listener: Zero-argument callable invoked on every publish

        Returns:
            A function that removes the listener when called
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self) -> None:
        """Notify every current listener once."""
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as e:
                logger.warning(f"Quota listener {listener!r} failed: {e}")

    @property
    def listener_count(self) -> int:
        return len(self._listeners)
