# =============================================================================
# RWS Client -- Offline Queue
# =============================================================================
#
# Buffers outgoing frames while the connection is down and flushes them, in
# insertion order, right after the next successful connect.
#
# The queue is bounded by age only.  A client that stays offline with no max
# age keeps every message in memory until it reconnects.
# =============================================================================

from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from ._logging import logger


@dataclass(slots=True)
class QueuedMessage:
    """A frame waiting to be sent when the connection is restored."""

    timestamp: float
    encoded: str


SendFn = Callable[[QueuedMessage], Awaitable[bool]]


class OutboundQueue:
    """FIFO of frames that could not be sent while offline.

    Flushing is single-attempt: every message gets at most one send and the
    queue is emptied after the pass, whatever the outcome of each send.

    Args:
        clock: Returns the current time in seconds. Defaults to
            :func:`time.monotonic`.
    """

    def __init__(self, *, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._queue: deque[QueuedMessage] = deque()

    @property
    def size(self) -> int:
        return len(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    def enqueue(self, encoded: str) -> None:
        self._queue.append(QueuedMessage(timestamp=self._clock(), encoded=encoded))

    async def flush(self, send_fn: SendFn, max_age: float = 0.0) -> tuple[int, int]:
        """Hand every fresh message to *send_fn*, then clear the queue.

        A message is fresh when *max_age* is 0 or it is at most *max_age*
        seconds old.  Stale messages are discarded without being sent.

        Returns:
            ``(sent, expired)``: how many messages were passed to *send_fn*
            and how many were discarded for age.
        """
        if not self._queue:
            return 0, 0

        # Messages enqueued while this flush awaits belong to the next flush.
        pending = list(self._queue)
        self._queue.clear()

        now = self._clock()
        sent = expired = 0
        for item in pending:
            if max_age == 0 or (now - item.timestamp) <= max_age:
                await send_fn(item)
                sent += 1
            else:
                expired += 1

        if expired:
            logger.debug("Dropped %d expired messages from offline queue", expired)
        return sent, expired

    def clear(self) -> None:
        """Discard all queued messages."""
        self._queue.clear()

    def get_stats(self) -> dict[str, Any]:
        oldest = self._queue[0].timestamp if self._queue else None
        return {
            "size": len(self._queue),
            "oldest_age_seconds": (self._clock() - oldest) if oldest is not None else None,
        }
