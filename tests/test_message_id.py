"""Tests for message id generation."""

from rws_client.message_id import IdGenerator, kebab_case


class TestKebabCase:
    def test_lowercases_and_replaces_whitespace(self):
        assert kebab_case("Main Client") == "main-client"

    def test_each_whitespace_char_replaced(self):
        assert kebab_case("a  b\tc") == "a--b-c"


class TestIdGenerator:
    def test_scoped_ids(self):
        ids = IdGenerator()
        assert ids.next("Main Client") == "main-client-1"
        assert ids.next("Main Client") == "main-client-2"

    def test_scope_is_trimmed(self):
        ids = IdGenerator()
        assert ids.next("  Telemetry ") == "telemetry-1"

    def test_fallback_without_scope(self):
        ids = IdGenerator()
        assert ids.next() == "message-id-1"
        assert ids.next("") == "message-id-2"
        assert ids.next("   ") == "message-id-3"

    def test_counter_shared_across_scopes(self):
        ids = IdGenerator()
        assert ids.next("a") == "a-1"
        assert ids.next("b") == "b-2"

    def test_generators_are_independent(self):
        one, two = IdGenerator(), IdGenerator()
        assert one.next("x") == "x-1"
        assert two.next("x") == "x-1"

    def test_unique(self):
        ids = IdGenerator()
        issued = {ids.next("scope") for _ in range(1000)}
        assert len(issued) == 1000
