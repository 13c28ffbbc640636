"""Shared fixtures: an in-memory stand-in for the websockets transport."""

import asyncio

import pytest
import websockets.asyncio.client
from websockets.exceptions import ConnectionClosedOK


class FakeSocket:
    """Quacks like ``websockets.asyncio.client.ClientConnection``.

    Push inbound frames with :meth:`feed`. ``None`` ends iteration the way
    a clean close does; an exception instance is raised from the iterator.
    """

    def __init__(self, subprotocol=None):
        self.sent = []
        self.incoming = asyncio.Queue()
        self.subprotocol = subprotocol
        self.close_code = None
        self.close_reason = None
        self.closed = False
        self.fail_send = False

    def feed(self, item):
        self.incoming.put_nowait(item)

    async def send(self, data):
        if self.closed or self.fail_send:
            raise ConnectionClosedOK(None, None)
        self.sent.append(data)

    def __aiter__(self):
        return self

    async def __anext__(self):
        item = await self.incoming.get()
        if item is None:
            self.close_code = 1000
            self.close_reason = "server shutdown"
            raise StopAsyncIteration
        if isinstance(item, BaseException):
            raise item
        return item

    async def close(self):
        self.closed = True


class FakeConnector:
    """Replacement for ``websockets.asyncio.client.connect``."""

    def __init__(self):
        self.reachable = True
        self.fail_send = False
        self.sockets = []
        self.calls = []

    async def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        if not self.reachable:
            raise ConnectionRefusedError(111, "Connect call failed")
        offered = kwargs.get("subprotocols") or [None]
        ws = FakeSocket(subprotocol=offered[0])
        ws.fail_send = self.fail_send
        self.sockets.append(ws)
        return ws

    @property
    def last(self):
        return self.sockets[-1]


@pytest.fixture
def connector(monkeypatch):
    fake = FakeConnector()
    monkeypatch.setattr(websockets.asyncio.client, "connect", fake)
    return fake


@pytest.fixture
def clock():
    """Manually advanced time source: ``clock.now`` is the current time."""

    class Clock:
        now = 0.0

        def __call__(self):
            return self.now

    return Clock()


async def _wait_until(predicate, timeout=1.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


def _live_reconnect_timers():
    """Reconnect timer tasks that are scheduled and not being cancelled."""
    return [
        t
        for t in asyncio.all_tasks()
        if t.get_coro().__qualname__.endswith("ConnectionManager._connect_loop")
        and not t.done()
        and not t.cancelling()
    ]


@pytest.fixture
def wait_until():
    return _wait_until


@pytest.fixture
def live_reconnect_timers():
    return _live_reconnect_timers
