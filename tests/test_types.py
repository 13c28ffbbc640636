"""Tests for option validation and event types."""

import pytest

from rws_client.constants import DEFAULT_RECONNECT_INTERVAL
from rws_client.errors import RWSConfigError
from rws_client.types import (
    ClientOptions,
    CloseEvent,
    ConnectionErrorInfo,
    ConnectionState,
    ErrorEvent,
    EventKind,
    MessageEvent,
    OpenEvent,
)


class TestClientOptions:
    def test_defaults(self):
        opts = ClientOptions(name="Test", url="ws://127.0.0.1:7700")
        assert opts.reconnect_interval == DEFAULT_RECONNECT_INTERVAL == 30.0
        assert opts.message_queueing is False
        assert opts.message_max_queue_seconds == 0
        assert opts.subprotocols is None
        assert opts.on_open is None
        assert opts.on_error is None

    def test_frozen(self):
        opts = ClientOptions(name="Test", url="ws://127.0.0.1:7700")
        with pytest.raises(AttributeError):
            opts.message_queueing = True

    def test_subprotocols_stored_as_tuple(self):
        opts = ClientOptions(name="Test", url="wss://example.com", subprotocols=["a", "b"])
        assert opts.subprotocols == ("a", "b")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"name": "", "url": "ws://h:1"},
            {"name": "  ", "url": "ws://h:1"},
            {"name": "x", "url": ""},
            {"name": "x", "url": "http://h:1"},
            {"name": "x", "url": "ws://h:1", "reconnect_interval": 0},
            {"name": "x", "url": "ws://h:1", "message_max_queue_seconds": -1},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(RWSConfigError):
            ClientOptions(**kwargs)

    def test_config_error_is_value_error(self):
        with pytest.raises(ValueError):
            ClientOptions(name="x", url="tcp://h:1")


class TestEvents:
    def test_kinds(self):
        assert OpenEvent("ws://h:1").kind == EventKind.OPEN
        assert CloseEvent(1000).kind == EventKind.CLOSE
        assert MessageEvent("hi").kind == EventKind.MESSAGE
        assert ErrorEvent(ConnectionErrorInfo(1, "x")).kind == EventKind.ERROR

    def test_close_reason_default(self):
        assert CloseEvent(1006).reason == ""

    def test_error_info_equality(self):
        assert ConnectionErrorInfo(1, "refused") == ConnectionErrorInfo(1, "refused")


class TestConnectionState:
    def test_values(self):
        assert ConnectionState.DISCONNECTED.value == "disconnected"
        assert ConnectionState("connected") is ConnectionState.CONNECTED
