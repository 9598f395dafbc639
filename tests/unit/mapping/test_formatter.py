"""Tests for the value formatter and its date helpers."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from formrelay.core.models import ColumnType
from formrelay.mapping.formatter import format_value, parse_date, to_display_date, to_yyyymmdd


class TestParseDate:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("25/12/2024", date(2024, 12, 25)),
            ("5/1/2025", date(2025, 1, 5)),
            ("2024-12-25", date(2024, 12, 25)),
            ("2024-12-25T10:30:00Z", date(2024, 12, 25)),
            ("20241225", date(2024, 12, 25)),
            ({"date": "2024-12-25"}, date(2024, 12, 25)),
            (datetime(2024, 12, 25, 8, 0), date(2024, 12, 25)),
        ],
    )
    def test_supported_formats(self, value, expected):
        assert parse_date(value) == expected

    @pytest.mark.parametrize("value", ["31/02/2024", "2024-13-01", "next friday", "", None, 20241225])
    def test_invalid_values(self, value):
        assert parse_date(value) is None

    def test_compact_and_display_forms(self):
        assert to_yyyymmdd("25/12/2024") == "20241225"
        assert to_display_date("2024-12-25") == "25/12/2024"
        assert to_yyyymmdd("garbage") == ""


class TestNumberAndDate:
    def test_number_parses_finite_values(self):
        assert format_value("42", ColumnType.NUMBER) == 42
        assert format_value("12,5", ColumnType.NUMBER) == 12.5

    @pytest.mark.parametrize("raw", ["abc", "nan", "", None])
    def test_number_omitted_when_unparseable(self, raw):
        assert format_value(raw, ColumnType.NUMBER) is None

    @pytest.mark.parametrize("raw", ["25/12/2024", "2024-12-25", {"date": "25/12/2024"}])
    def test_date_is_normalized_to_iso(self, raw):
        assert format_value(raw, ColumnType.DATE) == {"date": "2024-12-25"}

    def test_unrecognized_date_is_forwarded(self):
        assert format_value("dezembro", ColumnType.DATE) == {"date": "dezembro"}


class TestTextAndChoices:
    def test_text_joins_lists(self, caplog):
        assert format_value(["a", "b", 3], ColumnType.TEXT) == "a, b, 3"
        assert "joining them" in caplog.text

    def test_text_keeps_empty_strings(self):
        assert format_value("", ColumnType.TEXT) == ""

    def test_text_omits_objects(self):
        assert format_value({"a": 1}, ColumnType.TEXT) is None

    @pytest.mark.parametrize(
        "raw,expected",
        [("true", True), ("Sim", True), ("on", True), (1, True), ("false", False), ("no", False), (0, False)],
    )
    def test_checkbox(self, raw, expected):
        assert format_value(raw, ColumnType.CHECKBOX) == {"checked": expected}

    def test_status_index_or_label(self):
        assert format_value("3", ColumnType.STATUS) == {"index": 3}
        assert format_value("Em andamento", ColumnType.STATUS) == {"label": "Em andamento"}
        assert format_value({"label": "Feito"}, ColumnType.STATUS) == {"label": "Feito"}

    def test_dropdown_ids_when_all_numeric(self):
        assert format_value(["1", 2], ColumnType.DROPDOWN) == {"ids": [1, 2]}

    def test_dropdown_labels_when_mixed(self):
        assert format_value(["Alta", "7", "Baixa"], ColumnType.DROPDOWN) == {"labels": ["Alta", "Baixa", "7"]}

    def test_dropdown_accepts_label_objects(self):
        value = {"labels": ["Autoridade", "Exclusividade"]}
        assert format_value(value, ColumnType.DROPDOWN) == {"labels": ["Autoridade", "Exclusividade"]}

    def test_tags(self):
        assert format_value(["5", "promo"], ColumnType.TAGS) == {"tag_ids": [5, "promo"]}


class TestStructured:
    def test_board_relation_keeps_numeric_ids(self):
        assert format_value(["10", "x", 20], ColumnType.BOARD_RELATION) == {"item_ids": [10, 20]}
        assert format_value({"item_ids": ["3"]}, ColumnType.BOARD_RELATION) == {"item_ids": [3]}
        assert format_value("Email", ColumnType.BOARD_RELATION) is None

    @pytest.mark.parametrize(
        "raw",
        [
            {"from": "01/12/2024", "to": "2024-12-31"},
            "01/12/2024, 31/12/2024",
            ["2024-12-01", "2024-12-31"],
        ],
    )
    def test_timeline(self, raw):
        assert format_value(raw, ColumnType.TIMELINE) == {"from": "2024-12-01", "to": "2024-12-31"}

    def test_timeline_with_bad_bound_is_omitted(self):
        assert format_value("01/12/2024, soon", ColumnType.TIMELINE) is None

    def test_people_from_ids(self):
        assert format_value("42, 43", ColumnType.PEOPLE) == {
            "personsAndTeams": [{"id": 42, "kind": "person"}, {"id": 43, "kind": "person"}]
        }

    def test_people_keeps_team_kind(self):
        raw = {"personsAndTeams": [{"id": "77", "kind": "team"}]}
        assert format_value(raw, ColumnType.PEOPLE) == {"personsAndTeams": [{"id": 77, "kind": "team"}]}

    def test_file_ids(self):
        assert format_value("asset-1", ColumnType.FILE) == {"file_ids": ["asset-1"]}

    @pytest.mark.parametrize("column_type", [t for t in ColumnType if t is not ColumnType.TEXT])
    def test_blank_string_is_omitted_for_typed_columns(self, column_type):
        assert format_value("  ", column_type) is None

    def test_format_is_deterministic(self):
        raw = ["Alta", "7"]
        assert format_value(raw, ColumnType.DROPDOWN) == format_value(raw, ColumnType.DROPDOWN)


class TestDigitLookalikes:
    """Strings that look numeric to str.isdigit but are not integers"""

    @pytest.mark.parametrize("column_type", [ColumnType.BOARD_RELATION, ColumnType.PEOPLE])
    def test_double_minus_is_dropped(self, column_type):
        assert format_value("--5", column_type) is None

    def test_double_minus_dropdown_is_a_label(self):
        assert format_value("--5", ColumnType.DROPDOWN) == {"labels": ["--5"]}

    def test_superscript_status_is_a_label(self):
        assert format_value("²", ColumnType.STATUS) == {"label": "²"}

    def test_negative_status_is_a_label(self):
        assert format_value("-2", ColumnType.STATUS) == {"label": "-2"}

    def test_circled_digit_dropdown_is_a_label(self):
        assert format_value("①", ColumnType.DROPDOWN) == {"labels": ["①"]}

    def test_lookalikes_mixed_with_ids(self):
        assert format_value(["²", "12"], ColumnType.BOARD_RELATION) == {"item_ids": [12]}
