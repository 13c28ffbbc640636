"""Tests for the offline queue."""

import pytest

from rws_client.offline_queue import OutboundQueue


class Recorder:
    def __init__(self, ok=True):
        self.sent = []
        self.ok = ok

    async def __call__(self, item):
        self.sent.append(item.encoded)
        return self.ok


class TestOutboundQueue:
    def test_starts_empty(self):
        q = OutboundQueue()
        assert q.size == 0
        assert len(q) == 0

    def test_enqueue_records_time(self, clock):
        clock.now = 42.0
        q = OutboundQueue(clock=clock)
        q.enqueue("hello")
        assert q.size == 1
        assert q._queue[0].timestamp == 42.0

    @pytest.mark.asyncio
    async def test_flush_keeps_insertion_order(self):
        q = OutboundQueue()
        for body in ("a", "b", "c"):
            q.enqueue(body)
        send = Recorder()
        sent, expired = await q.flush(send)
        assert send.sent == ["a", "b", "c"]
        assert (sent, expired) == (3, 0)
        assert q.size == 0

    @pytest.mark.asyncio
    async def test_zero_max_age_keeps_everything(self, clock):
        q = OutboundQueue(clock=clock)
        q.enqueue("old")
        clock.now = 10_000.0
        send = Recorder()
        await q.flush(send, max_age=0)
        assert send.sent == ["old"]

    @pytest.mark.asyncio
    async def test_stale_messages_dropped(self, clock):
        q = OutboundQueue(clock=clock)
        q.enqueue("a")  # t=0
        clock.now = 10.0
        q.enqueue("b")
        clock.now = 12.0
        send = Recorder()
        sent, expired = await q.flush(send, max_age=5)
        assert send.sent == ["b"]
        assert (sent, expired) == (1, 1)
        assert q.size == 0

    @pytest.mark.asyncio
    async def test_age_equal_to_limit_is_sent(self, clock):
        q = OutboundQueue(clock=clock)
        q.enqueue("edge")
        clock.now = 5.0
        send = Recorder()
        await q.flush(send, max_age=5)
        assert send.sent == ["edge"]

    @pytest.mark.asyncio
    async def test_failed_sends_are_not_retried(self):
        q = OutboundQueue()
        q.enqueue("a")
        q.enqueue("b")
        send = Recorder(ok=False)
        sent, _ = await q.flush(send)
        assert send.sent == ["a", "b"]
        assert sent == 2
        assert q.size == 0

        again = Recorder()
        await q.flush(again)
        assert again.sent == []

    @pytest.mark.asyncio
    async def test_enqueue_during_flush_waits_for_next_flush(self):
        q = OutboundQueue()
        q.enqueue("a")

        async def send(item):
            q.enqueue("late")
            return True

        await q.flush(send)
        assert q.size == 1

    @pytest.mark.asyncio
    async def test_flush_empty(self):
        q = OutboundQueue()
        send = Recorder()
        assert await q.flush(send) == (0, 0)
        assert send.sent == []

    def test_clear(self):
        q = OutboundQueue()
        q.enqueue("a")
        q.clear()
        assert q.size == 0

    def test_stats(self, clock):
        q = OutboundQueue(clock=clock)
        assert q.get_stats() == {"size": 0, "oldest_age_seconds": None}
        q.enqueue("a")
        clock.now = 3.0
        q.enqueue("b")
        assert q.get_stats() == {"size": 2, "oldest_age_seconds": 3.0}
