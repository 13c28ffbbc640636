# =============================================================================
# RWS Client -- Type Definitions
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, Union
from urllib.parse import urlparse

from .constants import DEFAULT_MAX_QUEUE_SECONDS, DEFAULT_RECONNECT_INTERVAL
from .errors import RWSConfigError


class ConnectionState(str, Enum):
    """WebSocket connection lifecycle state.

    Flow: DISCONNECTED -> CONNECTING -> CONNECTED -> DISCONNECTED, looping
    for as long as reconnection is enabled.
    """

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class EventKind(str, Enum):
    OPEN = "open"
    CLOSE = "close"
    MESSAGE = "message"
    ERROR = "error"


class _Unanswered(Enum):
    TOKEN = "unanswered"

    def __repr__(self) -> str:
        return "UNANSWERED"

    def __bool__(self) -> bool:
        return False


#: Result delivered to a pending request whose reply never arrived.
#: Compare with ``is``; it is distinct from ``None`` and every other value.
UNANSWERED = _Unanswered.TOKEN


@dataclass(frozen=True, slots=True)
class ConnectionErrorInfo:
    """Normalized description of a transport failure.

    Attributes:
        code: One of the ``ERROR_CODE_*`` constants, or the WebSocket close
            code when the failure was an abnormal close.
        message: Human readable description.
    """

    code: int
    message: str


@dataclass(frozen=True, slots=True)
class OpenEvent:
    url: str
    subprotocol: str | None = None
    kind: EventKind = EventKind.OPEN


@dataclass(frozen=True, slots=True)
class CloseEvent:
    code: int
    reason: str = ""
    kind: EventKind = EventKind.CLOSE


@dataclass(frozen=True, slots=True)
class MessageEvent:
    """An inbound frame.  ``data`` is passed through exactly as received."""

    data: str | bytes
    kind: EventKind = EventKind.MESSAGE


@dataclass(frozen=True, slots=True)
class ErrorEvent:
    error: ConnectionErrorInfo
    kind: EventKind = EventKind.ERROR


ConnectionEvent = Union[OpenEvent, CloseEvent, MessageEvent, ErrorEvent]

OpenHook = Callable[[OpenEvent], Union[Any, Awaitable[Any]]]
CloseHook = Callable[[CloseEvent], Union[Any, Awaitable[Any]]]
MessageHook = Callable[[MessageEvent], Union[Any, Awaitable[Any]]]
ErrorHook = Callable[[ErrorEvent], Union[Any, Awaitable[Any]]]


@dataclass(frozen=True)
class ClientOptions:
    """Configuration for one :class:`~rws_client.client.WebSocketClient`.

    Attributes:
        name: Label used in log tags and generated message ids.
        url: Server URL including scheme and port, e.g.
            ``"ws://127.0.0.1:7700"``.
        reconnect_interval: Seconds between connection attempts while
            disconnected.
        message_queueing: Buffer messages sent while disconnected and
            deliver them on reconnect.
        message_max_queue_seconds: Maximum age of a buffered message before
            it is skipped on flush. ``0`` keeps messages until reconnected.
        subprotocols: Subprotocol values offered during the handshake.
        on_open: Called after the connection opens.
        on_close: Called after the connection closes.
        on_message: Called with every inbound frame.
        on_error: Called on connection failures.
    """

    name: str
    url: str
    reconnect_interval: float = DEFAULT_RECONNECT_INTERVAL
    message_queueing: bool = False
    message_max_queue_seconds: float = DEFAULT_MAX_QUEUE_SECONDS
    subprotocols: tuple[str, ...] | None = None
    on_open: OpenHook | None = None
    on_close: CloseHook | None = None
    on_message: MessageHook | None = None
    on_error: ErrorHook | None = None

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise RWSConfigError("name must not be empty")
        if not self.url:
            raise RWSConfigError("url must not be empty")
        scheme = urlparse(self.url).scheme
        if scheme not in ("ws", "wss"):
            raise RWSConfigError(f"Unsupported URL scheme {scheme!r}, expected ws or wss")
        if self.reconnect_interval <= 0:
            raise RWSConfigError("reconnect_interval must be positive")
        if self.message_max_queue_seconds < 0:
            raise RWSConfigError("message_max_queue_seconds must not be negative")
        if self.subprotocols is not None:
            # Accept any iterable (lists are common) but store a tuple
            object.__setattr__(self, "subprotocols", tuple(self.subprotocols))


@dataclass
class ClientStats:
    """Counters for a single client instance."""

    messages_sent: int = 0
    messages_received: int = 0
    messages_queued: int = 0
    messages_dropped: int = 0
    messages_expired: int = 0
    reconnect_count: int = 0
    connected_since: float | None = None
