"""Resilient WebSocket client.

Keeps a session alive across disconnects, optionally queues outbound
messages while offline, and correlates requests with replies by message id.

Usage::

    import asyncio
    import json

    from rws_client import UNANSWERED, WebSocketClient

    async def main():
        def on_message(event):
            reply = json.loads(event.data)
            client.resolve(reply["id"], reply)

        client = WebSocketClient(
            name="Telemetry",
            url="ws://127.0.0.1:7700",
            reconnect_interval=5,
            message_queueing=True,
            message_max_queue_seconds=60,
            on_message=on_message,
        )
        client.init()
        message_id = client.next_message_id()
        reply = await client.send_with_reply({"id": message_id, "op": "status"}, message_id)
        if reply is UNANSWERED:
            print("no reply")

Optional extras::

    pip install rws-client[fast]   # orjson body encoding
"""

from ._version import __version__
from .client import WebSocketClient
from .connection import ConnectionManager, normalize_error
from .errors import RWSConfigError, RWSConnectionError, RWSEncodeError, RWSError
from .message_id import IdGenerator
from .offline_queue import OutboundQueue, QueuedMessage
from .resolver import ResolverRegistry
from .types import (
    UNANSWERED,
    ClientOptions,
    ClientStats,
    CloseEvent,
    ConnectionErrorInfo,
    ConnectionEvent,
    ConnectionState,
    ErrorEvent,
    EventKind,
    MessageEvent,
    OpenEvent,
)


def connect(url: str, name: str, **kwargs) -> WebSocketClient:
    """Create a client for *url*.

    Use as an async context manager: the connection loop starts on entry
    and the client is closed on exit. Keyword arguments are the
    :class:`ClientOptions` fields.

    Example::

        async with connect("ws://127.0.0.1:7700", "Telemetry") as client:
            await client.send({"op": "hello"})
    """
    return WebSocketClient(name=name, url=url, **kwargs)


__all__ = [
    "__version__",
    "connect",
    "WebSocketClient",
    "ConnectionManager",
    "OutboundQueue",
    "QueuedMessage",
    "ResolverRegistry",
    "IdGenerator",
    "normalize_error",
    "UNANSWERED",
    "ClientOptions",
    "ClientStats",
    "ConnectionState",
    "ConnectionErrorInfo",
    "ConnectionEvent",
    "EventKind",
    "OpenEvent",
    "CloseEvent",
    "MessageEvent",
    "ErrorEvent",
    "RWSError",
    "RWSConnectionError",
    "RWSConfigError",
    "RWSEncodeError",
]
