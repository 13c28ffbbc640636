# =============================================================================
# RWS Client -- Connection Manager
# =============================================================================
#
# WebSocket lifecycle: connect, periodic reconnect, event dispatch.
#
# Two kinds of task are owned here and each kind has at most one live
# instance: the reconnect timer (_reconnect_task) and the socket task
# (_socket_task) that opens one connection and reads from it until it
# closes.  Starting either always cancels the previous one first.
# =============================================================================

from __future__ import annotations

import asyncio
import inspect
import time
from typing import Any

import websockets.asyncio.client
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, InvalidHandshake

from ._logging import TaggedLogger, get_logger
from .constants import (
    CLOSE_TIMEOUT,
    CONNECTION_TIMEOUT,
    DEFAULT_RECONNECT_INTERVAL,
    ERROR_CODE_CONNECT_FAILED,
    ERROR_CODE_HANDSHAKE,
    ERROR_CODE_TIMEOUT,
    ERROR_CODE_UNKNOWN,
    MAX_MESSAGE_SIZE,
    WS_CLOSE_ABNORMAL,
    WS_CLOSE_NORMAL,
)
from .errors import RWSConnectionError
from .types import (
    CloseEvent,
    CloseHook,
    ConnectionErrorInfo,
    ConnectionEvent,
    ConnectionState,
    ErrorEvent,
    ErrorHook,
    MessageEvent,
    MessageHook,
    OpenEvent,
    OpenHook,
)


def normalize_error(exc: BaseException) -> ConnectionErrorInfo:
    """Map whatever the transport raised onto a :class:`ConnectionErrorInfo`."""
    message = str(exc) or type(exc).__name__
    if isinstance(exc, TimeoutError):
        return ConnectionErrorInfo(ERROR_CODE_TIMEOUT, f"Connection timed out: {message}")
    if isinstance(exc, InvalidHandshake):
        return ConnectionErrorInfo(ERROR_CODE_HANDSHAKE, message)
    if isinstance(exc, ConnectionClosed):
        frame = exc.rcvd
        if frame is not None:
            return ConnectionErrorInfo(frame.code, frame.reason or message)
        return ConnectionErrorInfo(WS_CLOSE_ABNORMAL, message)
    if isinstance(exc, OSError):
        return ConnectionErrorInfo(ERROR_CODE_CONNECT_FAILED, message)
    return ConnectionErrorInfo(ERROR_CODE_UNKNOWN, message or "Unknown issue")


class ConnectionManager:
    """Keeps one WebSocket connection alive until told to stop.

    Listeners are called from the event loop, inside the socket task.
    ``on_open`` may return an awaitable; it is awaited before the first
    inbound frame is read, so work done there (flushing buffered messages)
    happens before any reply is processed.  The other listeners should be
    plain callables; their return values are ignored.  A listener that
    raises is logged and the connection carries on.  Listeners may call
    :meth:`init`, :meth:`reconnect` and :meth:`disconnect`; the socket they
    were called from is closed as soon as they return.

    A failed handshake is reported through ``on_error`` only.  ``on_close``
    fires only for a connection that was open.

    Args:
        url: WebSocket server URL.
        reconnect_interval: Seconds between connection attempts while
            disconnected.
        subprotocols: Subprotocols offered during the handshake.
        connect_timeout: Handshake timeout in seconds.
        log: Logger adapter carrying the owner's tag.
    """

    def __init__(
        self,
        url: str,
        *,
        reconnect_interval: float = DEFAULT_RECONNECT_INTERVAL,
        subprotocols: tuple[str, ...] | list[str] | None = None,
        connect_timeout: float = CONNECTION_TIMEOUT,
        log: TaggedLogger | None = None,
        on_open: OpenHook | None = None,
        on_close: CloseHook | None = None,
        on_message: MessageHook | None = None,
        on_error: ErrorHook | None = None,
    ) -> None:
        self._url = url
        self._reconnect_interval = reconnect_interval
        self._subprotocols = list(subprotocols) if subprotocols else None
        self._connect_timeout = connect_timeout
        self._log = log or get_logger(type(self).__name__)

        # Listeners
        self._on_open = on_open
        self._on_close = on_close
        self._on_message = on_message
        self._on_error = on_error

        # State
        self._ws: websockets.asyncio.client.ClientConnection | None = None
        self._state = ConnectionState.DISCONNECTED
        self._should_reconnect = False
        self._connected_at: float | None = None
        self._attempts = 0
        self._closed = False

        # Tasks
        self._reconnect_task: asyncio.Task[None] | None = None
        self._socket_task: asyncio.Task[None] | None = None
        self._socket_tasks: set[asyncio.Task[None]] = set()

    # -- Properties -----------------------------------------------------------

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._ws is not None and self._state == ConnectionState.CONNECTED

    @property
    def should_reconnect(self) -> bool:
        return self._should_reconnect

    @property
    def connected_since(self) -> float | None:
        return self._connected_at

    @property
    def attempts(self) -> int:
        """Connection attempts made since construction."""
        return self._attempts

    @property
    def reconnect_timer_active(self) -> bool:
        task = self._reconnect_task
        return task is not None and not task.done()

    # -- Public lifecycle -----------------------------------------------------

    def init(self) -> None:
        """Enable reconnection and connect now.  No-op if already active."""
        self._check_open()
        self._should_reconnect = True
        if self._state != ConnectionState.DISCONNECTED:
            self._log.debug("init() while %s, nothing to do", self._state.value)
            return
        self._start_connect_loop(immediate=True)

    def reconnect(self) -> None:
        """Drop the current connection (if any) and connect again now."""
        self._check_open()
        self._should_reconnect = True
        self._close_socket(WS_CLOSE_NORMAL, "Reconnecting")
        self._start_connect_loop(immediate=True)

    def disconnect(self) -> None:
        """Close the connection and stay closed until init()/reconnect()."""
        self._should_reconnect = False
        self._stop_connect_loop()
        self._close_socket(WS_CLOSE_NORMAL, "Client disconnect")

    async def aclose(self) -> None:
        """Disconnect, wait for the socket to shut down, refuse further use."""
        self._closed = True
        self.disconnect()
        tasks = list(self._socket_tasks)
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # -- Send -----------------------------------------------------------------

    async def send(self, data: str) -> bool:
        """Send a text frame.  Returns True on success."""
        ws = self._ws
        if ws is None or self._state != ConnectionState.CONNECTED:
            return False
        try:
            await ws.send(data)
            return True
        except ConnectionClosed:
            self._log.debug("Send failed: connection closed")
            return False

    # -- Internal: reconnect timer --------------------------------------------

    def _start_connect_loop(self, immediate: bool = False) -> None:
        self._stop_connect_loop()
        loop = asyncio.get_running_loop()
        self._reconnect_task = loop.create_task(self._connect_loop())
        if immediate:
            self._connect()

    def _stop_connect_loop(self) -> None:
        if self._reconnect_task is not None:
            self._reconnect_task.cancel()
            self._reconnect_task = None

    async def _connect_loop(self) -> None:
        """Attempt a connection every interval until one succeeds."""
        while True:
            await asyncio.sleep(self._reconnect_interval)
            if self._state == ConnectionState.CONNECTED:
                return
            self._log.debug("Reconnect timer fired, attempting connection")
            self._connect()

    # -- Internal: socket -----------------------------------------------------

    def _connect(self) -> None:
        """Replace any existing socket with a fresh connection attempt."""
        self._close_socket(WS_CLOSE_NORMAL, "Replaced by new connection")
        self._attempts += 1
        self._set_state(ConnectionState.CONNECTING)
        task = asyncio.get_running_loop().create_task(self._run_socket())
        self._socket_task = task
        self._socket_tasks.add(task)
        task.add_done_callback(self._socket_tasks.discard)

    def _close_socket(self, code: int, reason: str) -> None:
        task = self._socket_task
        self._socket_task = None
        if task is not None and task is not asyncio.current_task() and not task.done():
            task.cancel()

        if self._state == ConnectionState.CONNECTED:
            self._handle_close(CloseEvent(code, reason))
        else:
            self._ws = None
            self._set_state(ConnectionState.DISCONNECTED)

    def _is_current(self) -> bool:
        return self._socket_task is not None and self._socket_task is asyncio.current_task()

    async def _run_socket(self) -> None:
        """Open one connection and pump its frames until it closes."""
        ws: websockets.asyncio.client.ClientConnection | None = None
        try:
            try:
                ws = await websockets.asyncio.client.connect(
                    self._url,
                    subprotocols=self._subprotocols,
                    open_timeout=self._connect_timeout,
                    close_timeout=CLOSE_TIMEOUT,
                    max_size=MAX_MESSAGE_SIZE,
                )
            except Exception as exc:
                if self._is_current():
                    self._handle_error(normalize_error(exc), immediate=False)
                return

            if not self._is_current():
                return

            await self._handle_open(ws)
            if not self._is_current():
                return

            try:
                async for message in ws:
                    if not self._is_current():
                        return
                    self._handle_message(message)
                    if not self._is_current():
                        return
            except ConnectionClosedError as exc:
                if self._is_current():
                    self._handle_error(normalize_error(exc), immediate=True)
                return

            if self._is_current():
                self._socket_task = None
                self._handle_close(
                    CloseEvent(ws.close_code or WS_CLOSE_NORMAL, ws.close_reason or "")
                )
        finally:
            if ws is not None:
                try:
                    await ws.close()
                except Exception:
                    pass

    # -- Internal: event dispatch ---------------------------------------------

    async def _handle_open(self, ws: websockets.asyncio.client.ClientConnection) -> None:
        self._ws = ws
        self._connected_at = time.monotonic()
        self._set_state(ConnectionState.CONNECTED)
        self._stop_connect_loop()
        self._log.debug("Connected to %s", self._url)
        event = OpenEvent(self._url, ws.subprotocol)
        result = self._emit(self._on_open, event)
        if inspect.isawaitable(result):
            try:
                await result
            except Exception as exc:
                self._log.error("Listener error for '%s' event: %s", event.kind.value, exc)

    def _handle_close(self, event: CloseEvent) -> None:
        self._ws = None
        self._connected_at = None
        self._set_state(ConnectionState.DISCONNECTED)
        self._log.debug("Disconnected (code=%d reason=%r)", event.code, event.reason)
        self._emit(self._on_close, event)
        if self._should_reconnect:
            self._start_connect_loop()

    def _handle_message(self, data: str | bytes) -> None:
        self._log.debug("Received message %r", data)
        self._emit(self._on_message, MessageEvent(data))

    def _handle_error(self, info: ConnectionErrorInfo, *, immediate: bool) -> None:
        """Force-close, restart the timer, report.

        *immediate* adds a connection attempt right away; it is used for
        failures of an established session.  A failed handshake waits for
        the next tick so an unreachable server is not retried in a tight
        loop.
        """
        self._log.debug("Error (code=%d): %s", info.code, info.message)
        close_code = info.code if info.code >= WS_CLOSE_NORMAL else WS_CLOSE_ABNORMAL
        self._close_socket(close_code, info.message)
        if self._should_reconnect:
            self._start_connect_loop(immediate=immediate)
        self._emit(self._on_error, ErrorEvent(info))

    def _emit(self, listener: Any, event: ConnectionEvent) -> Any:
        if listener is None:
            return None
        try:
            return listener(event)
        except Exception as exc:
            self._log.error("Listener error for '%s' event: %s", event.kind.value, exc)
            return None

    # -- State management -----------------------------------------------------

    def _set_state(self, new_state: ConnectionState) -> None:
        if new_state == self._state:
            return
        old = self._state
        self._state = new_state
        self._log.debug("State: %s -> %s", old.value, new_state.value)

    def _check_open(self) -> None:
        if self._closed:
            raise RWSConnectionError("ConnectionManager has been closed")
