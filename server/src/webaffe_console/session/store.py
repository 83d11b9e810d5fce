"""In-memory, observable holder of the process-wide session state."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from webaffe_console.models.identity import SessionState

logger = logging.getLogger(__name__)


class SessionReader(Protocol):
    """Read-only view of the session store handed to consumers."""

    def get(self) -> SessionState:
        ...

    def subscribe(self) -> asyncio.Queue[SessionState]:
        ...

    def unsubscribe(self, queue: asyncio.Queue[SessionState]) -> None:
        ...


class SessionStore:
    """Single holder of SessionState.

    Every replacement is a new frozen snapshot, so readers always see a
    consistent state. Subscribers get every replacement made after they
    subscribe. Only the bootstrap listener writes.
    """

    def __init__(
        self,
        initial: SessionState | None = None,
        queue_size: int = 100,
    ) -> None:
        self._state = initial or SessionState()
        self._subscribers: list[asyncio.Queue[SessionState]] = []
        self._queue_size = queue_size

    def get(self) -> SessionState:
        """Return the current snapshot."""
        return self._state

    def replace(self, **changes: Any) -> SessionState:
        """Swap in a new snapshot with ``changes`` applied and notify subscribers."""
        self._state = self._state.model_copy(update=changes)

        for queue in self._subscribers:
            try:
                queue.put_nowait(self._state)
            except asyncio.QueueFull:
                # Slow subscriber: drop its oldest snapshot, keep the newest
                queue.get_nowait()
                queue.put_nowait(self._state)

        return self._state

    def subscribe(self) -> asyncio.Queue[SessionState]:
        """Subscribe to subsequent state replacements."""
        queue: asyncio.Queue[SessionState] = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[SessionState]) -> None:
        """Remove a subscriber queue. Idempotent."""
        try:
            self._subscribers.remove(queue)
        except ValueError:
            pass

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
