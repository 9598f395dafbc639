"""Tests for the raw payload normalization helpers."""

from __future__ import annotations

import pytest

from formrelay.mapping.payload import (
    first_present,
    get_value_by_path,
    is_blank,
    normalize_to_string_array,
    normalize_value,
    parse_int,
    parse_number,
    stringify,
)


class TestNormalizeValue:
    def test_scalars_and_dicts_pass_through(self):
        assert normalize_value("a") == "a"
        assert normalize_value(3) == 3
        assert normalize_value({"a": 1}) == {"a": 1}
        assert normalize_value(None) is None

    def test_sequences_become_flat_lists(self):
        assert normalize_value(("a", ["b", None], None)) == ["a", "b"]

    def test_other_objects_are_stringified(self):
        class Token:
            def __str__(self) -> str:
                return "token"

        assert normalize_value(Token()) == "token"


class TestStringHelpers:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, []),
            ("x", ["x"]),
            ([1, None, "b"], ["1", "b"]),
            ({"labels": ["a"]}, ["a"]),
            ({"ids": [1, 2]}, ["1", "2"]),
            ({"x": 1}, []),
        ],
    )
    def test_normalize_to_string_array(self, value, expected):
        assert normalize_to_string_array(value) == expected

    def test_stringify(self):
        assert stringify(3.0) == "3"
        assert stringify(2.5) == "2.5"
        assert stringify(True) == "true"

    @pytest.mark.parametrize("value", [None, "", "   ", [], {}])
    def test_is_blank(self, value):
        assert is_blank(value)

    def test_zero_is_not_blank(self):
        assert not is_blank(0)
        assert not is_blank(False)


class TestNumbers:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("42", 42),
            (" -3 ", -3),
            (4.0, 4),
            (4.5, None),
            ("4.5", None),
            (True, None),
            ("abc", None),
            ("--5", None),
            ("\u00b2", None),
            ("\u2460", None),
            ("1_000", None),
        ],
    )
    def test_parse_int(self, value, expected):
        assert parse_int(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("42", 42),
            ("1,5", 1.5),
            ("2.50", 2.5),
            (7, 7),
            (1.25, 1.25),
            ("", None),
            ("abc", None),
            ("nan", None),
            ("inf", None),
            (None, None),
        ],
    )
    def test_parse_number(self, value, expected):
        assert parse_number(value) == expected

    def test_parse_number_keeps_int_type(self):
        assert isinstance(parse_number("42"), int)


class TestPaths:
    def test_get_value_by_path_walks_dicts_and_lists(self):
        data = {"data": {"items": [{"name": "a"}, {"name": "b"}]}}

        assert get_value_by_path(data, "data.items.1.name") == "b"
        assert get_value_by_path(data, "data.items.5.name") is None
        assert get_value_by_path(data, "data.missing") is None
        assert get_value_by_path(data, "data.items.x") is None

    def test_first_present_skips_blank_values(self):
        data = {"a": "", "b": None, "c": "value", "d": "other"}

        assert first_present(data, ("a", "b", "c", "d")) == "value"
        assert first_present(data, ("a", "b")) is None
