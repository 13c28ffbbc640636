# =============================================================================
# RWS Client -- WebSocket Client
# =============================================================================
#
# Primary public API.  Wraps ConnectionManager with the offline queue, the
# resolver registry for request/reply correlation, and the caller's hooks.
# =============================================================================

from __future__ import annotations

import asyncio
import time
from typing import Any, Callable

from ._logging import get_logger
from .codec import encode_body
from .connection import ConnectionManager
from .constants import DEFAULT_REPLY_TIMEOUT
from .message_id import IdGenerator
from .offline_queue import OutboundQueue, QueuedMessage
from .resolver import ResolverRegistry
from .types import (
    ClientOptions,
    ClientStats,
    CloseEvent,
    ConnectionState,
    ErrorEvent,
    MessageEvent,
    OpenEvent,
)


class WebSocketClient:
    """Resilient WebSocket client.

    Supports automatic reconnection, queueing of messages sent while
    disconnected, and reply correlation by message id. Nothing happens
    until :meth:`init` is called from a running event loop.

    Args:
        options: Client configuration. Alternatively pass the
            :class:`~rws_client.types.ClientOptions` fields as keyword
            arguments.
        clock: Time source for the offline queue, in seconds.

    Example::

        client = WebSocketClient(
            name="Telemetry",
            url="ws://127.0.0.1:7700",
            message_queueing=True,
            on_message=lambda event: client.resolve(*parse(event.data)),
        )
        client.init()
        reply = await client.send_with_reply({"op": "ping"}, "ping-1", timeout=0.5)
        if reply is UNANSWERED:
            ...
    """

    def __init__(
        self,
        options: ClientOptions | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        **kwargs: Any,
    ) -> None:
        if options is None:
            options = ClientOptions(**kwargs)
        elif kwargs:
            raise TypeError("Pass either a ClientOptions instance or keyword options, not both")
        self._options = options
        self._tag = f"{type(self).__name__}->{options.name}"
        self._log = get_logger(self._tag)

        # Hooks
        self._on_open = options.on_open or self._hook_not_set("on_open")
        self._on_close = options.on_close or self._hook_not_set("on_close")
        self._on_message = options.on_message or self._hook_not_set("on_message")
        self._on_error = options.on_error or self._hook_not_set("on_error")

        # Services
        self._queue = OutboundQueue(clock=clock)
        self._resolvers = ResolverRegistry(self._log)
        self._ids = IdGenerator()
        self._stats = ClientStats()
        self._opened_once = False
        self._background_tasks: set[asyncio.Task[Any]] = set()

        self._connection = ConnectionManager(
            options.url,
            reconnect_interval=options.reconnect_interval,
            subprotocols=options.subprotocols,
            log=self._log,
            on_open=self._handle_open,
            on_close=self._handle_close,
            on_message=self._handle_message,
            on_error=self._handle_error,
        )

    # -- Context manager ------------------------------------------------------

    async def __aenter__(self) -> WebSocketClient:
        self.init()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    # -- Lifecycle ------------------------------------------------------------

    def init(self) -> None:
        """Start the connection loop.  No connection is made before this."""
        self._connection.init()

    def reconnect(self) -> None:
        """Close the connection and open it again."""
        self._connection.reconnect()

    def disconnect(self) -> None:
        """Close the connection and keep it closed until init()/reconnect().

        Pending replies are not cancelled; they still settle on their own
        timers.
        """
        self._connection.disconnect()

    async def close(self) -> None:
        """Disconnect for good and settle all pending replies as unanswered."""
        for task in self._background_tasks:
            task.cancel()
        self._background_tasks.clear()
        self._resolvers.cancel_all()
        await self._connection.aclose()

    # -- Properties -----------------------------------------------------------

    @property
    def options(self) -> ClientOptions:
        return self._options

    @property
    def name(self) -> str:
        return self._options.name

    @property
    def is_connected(self) -> bool:
        return self._connection.is_connected

    @property
    def state(self) -> ConnectionState:
        return self._connection.state

    @property
    def queue_size(self) -> int:
        """Number of messages waiting for the next connection."""
        return self._queue.size

    @property
    def pending_replies(self) -> list[str]:
        """Message ids still waiting for a reply."""
        return self._resolvers.pending_ids

    # -- Send -----------------------------------------------------------------

    async def send(self, body: Any) -> bool:
        """Send *body* to the server.

        Non-string bodies are serialized to JSON. While disconnected the
        message is queued when message queueing is enabled and dropped
        otherwise.

        Returns:
            True if the frame was written to the socket.

        Raises:
            RWSEncodeError: If *body* cannot be serialized.
        """
        encoded = encode_body(body)
        if self._connection.is_connected:
            ok = await self._connection.send(encoded)
            if ok:
                self._stats.messages_sent += 1
                self._log.debug("Sent message %s", encoded)
            else:
                self._stats.messages_dropped += 1
            return ok

        if self._options.message_queueing:
            self._queue.enqueue(encoded)
            self._stats.messages_queued += 1
            self._log.debug("Not connected, adding to queue (entries) %d", self._queue.size)
        else:
            self._stats.messages_dropped += 1
            self._log.debug("Not connected, message dropped")
        return False

    async def send_with_reply(
        self,
        body: Any,
        message_id: str,
        timeout: float = DEFAULT_REPLY_TIMEOUT,
    ) -> Any:
        """Send *body* and wait until :meth:`resolve` is called for *message_id*.

        Returns:
            The result passed to :meth:`resolve`, or
            :data:`~rws_client.types.UNANSWERED` if nothing arrived within
            *timeout* seconds.
        """
        encoded = encode_body(body)
        if not message_id:
            self._log.warning("Message with reply registered with empty message id")
        else:
            self._log.debug(
                "Sending message with reply, message id %r, timeout %.3fs",
                message_id,
                timeout,
            )

        future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()

        def settle(result: Any) -> None:
            if not future.done():
                future.set_result(result)

        self._resolvers.register(message_id, settle, timeout)
        await self.send(encoded)
        return await future

    def resolve(self, message_id: str, result: Any) -> bool:
        """Deliver *result* to the request waiting on *message_id*.

        Unknown, timed out and already resolved ids are ignored (logged).

        Returns:
            True if a waiting request was settled.
        """
        return self._resolvers.resolve(message_id, result)

    def next_message_id(self) -> str:
        """Return a message id unique to this client, scoped by its name."""
        return self._ids.next(self._options.name)

    # -- Stats ----------------------------------------------------------------

    def get_stats(self) -> dict[str, Any]:
        s = self._stats
        since = self._connection.connected_since
        return {
            "state": self.state.value,
            "messages_sent": s.messages_sent,
            "messages_received": s.messages_received,
            "messages_queued": s.messages_queued,
            "messages_dropped": s.messages_dropped,
            "messages_expired": s.messages_expired,
            "reconnect_count": s.reconnect_count,
            "connection_attempts": self._connection.attempts,
            "uptime_seconds": (time.monotonic() - since) if since is not None else None,
            "pending_replies": len(self._resolvers),
            "offline_queue": self._queue.get_stats(),
        }

    # -- Internal: connection events ------------------------------------------

    async def _handle_open(self, event: OpenEvent) -> None:
        if self._opened_once:
            self._stats.reconnect_count += 1
        self._opened_once = True
        self._stats.connected_since = self._connection.connected_since
        self._invoke(self._on_open, event)
        if self._connection.is_connected:
            await self._flush_queue()

    def _handle_close(self, event: CloseEvent) -> None:
        self._stats.connected_since = None
        self._invoke(self._on_close, event)

    def _handle_message(self, event: MessageEvent) -> None:
        self._stats.messages_received += 1
        self._invoke(self._on_message, event)

    def _handle_error(self, event: ErrorEvent) -> None:
        self._invoke(self._on_error, event)

    async def _flush_queue(self) -> None:
        """Replay queued messages, skipping those older than the max age."""
        if not self._queue.size:
            return
        self._log.info("Flushing %d offline-queued messages", self._queue.size)
        sent, expired = await self._queue.flush(
            self._send_queued, self._options.message_max_queue_seconds
        )
        self._stats.messages_expired += expired
        if expired:
            self._log.info(
                "Skipped %d queued messages older than %.1fs",
                expired,
                self._options.message_max_queue_seconds,
            )

    async def _send_queued(self, item: QueuedMessage) -> bool:
        ok = await self._connection.send(item.encoded)
        if ok:
            self._stats.messages_sent += 1
        else:
            self._stats.messages_dropped += 1
        return ok

    # -- Internal: hooks ------------------------------------------------------

    def _invoke(self, hook: Callable[[Any], Any], event: Any) -> None:
        try:
            result = hook(event)
            if asyncio.iscoroutine(result):
                self._fire_task(result)
        except Exception as exc:
            self._log.error("Hook error for '%s' event: %s", event.kind.value, exc)

    def _fire_task(self, coro: Any) -> None:
        """Schedule a coroutine with a strong reference to prevent GC."""
        task = asyncio.ensure_future(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    def _hook_not_set(self, name: str) -> Callable[[Any], None]:
        def hook(event: Any) -> None:
            self._log.debug("%s callback not set", name)

        return hook

