"""Tests for body encoding."""

import json

import pytest

from rws_client.codec import encode_body
from rws_client.errors import RWSEncodeError


class TestEncodeBody:
    def test_string_passes_through(self):
        assert encode_body("ping") == "ping"

    def test_string_is_not_quoted(self):
        assert encode_body('{"a":1}') == '{"a":1}'

    def test_dict_to_compact_json(self):
        encoded = encode_body({"op": "ping", "n": 1})
        assert json.loads(encoded) == {"op": "ping", "n": 1}
        assert " " not in encoded

    @pytest.mark.parametrize(
        "body, expected",
        [
            (None, "null"),
            (True, "true"),
            (3, "3"),
            ([1, 2], "[1,2]"),
        ],
    )
    def test_scalars_and_lists(self, body, expected):
        assert encode_body(body) == expected

    def test_unserializable_raises(self):
        with pytest.raises(RWSEncodeError):
            encode_body(object())

    def test_encode_error_is_type_error(self):
        with pytest.raises(TypeError):
            encode_body({1, 2})

    def test_non_string_keys_are_stringified(self):
        assert encode_body({1: "a", "b": 2}) == '{"1":"a","b":2}'

    def test_non_finite_floats_become_null(self):
        assert encode_body([float("nan"), float("inf"), 1.5]) == "[null,null,1.5]"
        assert encode_body({"v": float("-inf")}) == '{"v":null}'
