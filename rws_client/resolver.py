# =============================================================================
# RWS Client -- Resolver Registry
# =============================================================================
#
# Correlates a caller-chosen message id with one pending result.  Each entry
# is settled exactly once: by resolve() or, failing that, by its timer with
# the UNANSWERED sentinel.
# =============================================================================

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Callable

from ._logging import TaggedLogger, get_logger
from .types import UNANSWERED

Settle = Callable[[Any], None]


@dataclass(eq=False, slots=True)
class PendingRequest:
    message_id: str
    settle: Settle
    timer: asyncio.TimerHandle | None = None


class ResolverRegistry:
    """Map of message id -> pending settlement with a timeout fallback.

    Registering an id that is already pending replaces the old entry.  The
    replaced entry is orphaned: its timer is cancelled and it is never
    settled.  Callers own id uniqueness.

    Timers run on the event loop that is current when :meth:`register` is
    called.
    """

    def __init__(self, log: TaggedLogger | None = None) -> None:
        self._log = log or get_logger(type(self).__name__)
        self._pending: dict[str, PendingRequest] = {}

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    @property
    def pending_ids(self) -> list[str]:
        return list(self._pending)

    def register(self, message_id: str, settle: Settle, timeout: float) -> None:
        """Store *settle* under *message_id* and arm a *timeout* second timer."""
        previous = self._pending.pop(message_id, None)
        if previous is not None:
            self._log.warning(
                "Resolver for message id %r replaced, previous request is orphaned",
                message_id,
            )
            if previous.timer is not None:
                previous.timer.cancel()

        entry = PendingRequest(message_id, settle)
        loop = asyncio.get_running_loop()
        entry.timer = loop.call_later(timeout, self._expire, entry, timeout)
        self._pending[message_id] = entry
        self._log.debug(
            "Registered resolver for message id %r with timeout %.3fs",
            message_id,
            timeout,
        )

    def resolve(self, message_id: str, result: Any) -> bool:
        """Settle the pending request for *message_id* with *result*.

        Returns False (and logs) when nothing is pending under that id;
        never raises for unknown, timed out or already resolved ids.
        """
        entry = self._pending.pop(message_id, None)
        if entry is None:
            self._log.warning(
                "Message id %r not pending, cannot resolve", message_id
            )
            return False
        if entry.timer is not None:
            entry.timer.cancel()
        self._settle(entry, result)
        self._log.debug("Resolved message id %r", message_id)
        return True

    def cancel_all(self) -> int:
        """Settle every pending request with ``UNANSWERED`` right away."""
        entries = list(self._pending.values())
        self._pending.clear()
        for entry in entries:
            if entry.timer is not None:
                entry.timer.cancel()
            self._settle(entry, UNANSWERED)
        return len(entries)

    def _expire(self, entry: PendingRequest, timeout: float) -> None:
        # Only the entry that armed this timer may be expired by it
        if self._pending.get(entry.message_id) is not entry:
            return
        del self._pending[entry.message_id]
        self._log.debug(
            "Resolver for message id %r timed out after %.3fs",
            entry.message_id,
            timeout,
        )
        self._settle(entry, UNANSWERED)

    def _settle(self, entry: PendingRequest, result: Any) -> None:
        try:
            entry.settle(result)
        except Exception as exc:
            self._log.error(
                "Settle callback for message id %r failed: %s", entry.message_id, exc
            )
