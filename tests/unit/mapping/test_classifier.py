"""Tests for the column type classifier."""

from __future__ import annotations

import pytest

from formrelay.core.models import ColumnType
from formrelay.mapping.classifier import (
    PATTERN_TABLE,
    Anchor,
    FieldPattern,
    classify,
    find_pattern_overlaps,
)


class TestClassify:
    """Table-driven checks of field name -> column type"""

    @pytest.mark.parametrize(
        "field_name,expected",
        [
            ("enviar_arquivo__1", ColumnType.FILE),
            ("file_mkr1", ColumnType.FILE),
            ("data__1", ColumnType.DATE),
            ("date_mkr6nj1f", ColumnType.DATE),
            ("n_mero__1", ColumnType.NUMBER),
            ("n_meros_mkkchcmk", ColumnType.NUMBER),
            ("numeric_abc", ColumnType.NUMBER),
            ("pessoas__1", ColumnType.PEOPLE),
            ("people_x", ColumnType.PEOPLE),
            ("lista_suspensa5__1", ColumnType.DROPDOWN),
            ("sele__o_m_ltipla__1", ColumnType.DROPDOWN),
            ("sele__o_individual9__1", ColumnType.DROPDOWN),
            ("dropdown_abc", ColumnType.DROPDOWN),
            ("status__1", ColumnType.STATUS),
            ("color_mkr", ColumnType.STATUS),
            ("tags__1", ColumnType.TAGS),
            ("etiquetas_x", ColumnType.TAGS),
            ("conectar_quadros8__1", ColumnType.BOARD_RELATION),
            ("board_relation_x", ColumnType.BOARD_RELATION),
            ("timeline__1", ColumnType.TIMELINE),
            ("cronograma_x", ColumnType.TIMELINE),
            ("checkbox__1", ColumnType.CHECKBOX),
            ("caixa_de_sele__o__1", ColumnType.CHECKBOX),
        ],
    )
    def test_known_markers(self, field_name, expected):
        assert classify(field_name) is expected

    @pytest.mark.parametrize("field_name", ["text_mkr3znn0", "texto__1", "name", "lookup_mkrtaebd", ""])
    def test_unknown_names_are_text(self, field_name):
        assert classify(field_name) is ColumnType.TEXT

    def test_prefix_markers_only_match_at_start(self):
        """'date_' and 'color_' are anchored, a mid-name occurrence is plain text."""
        assert classify("update_notes") is ColumnType.TEXT
        assert classify("watercolor_text") is ColumnType.TEXT

    def test_classify_is_stable(self):
        assert classify("data__1") is classify("data__1")


class TestPatternTable:
    def test_shipped_table_has_no_overlaps(self):
        assert find_pattern_overlaps(PATTERN_TABLE) == []

    def test_contains_marker_shadowing_another_type_is_reported(self):
        table = (
            (ColumnType.DATE, (FieldPattern("data"),)),
            (ColumnType.TEXT, (FieldPattern("metadata"),)),
        )

        overlaps = find_pattern_overlaps(table)

        assert overlaps == [(FieldPattern("data"), FieldPattern("metadata"))]

    def test_prefix_markers_overlap_only_with_prefixes(self):
        table = (
            (ColumnType.DATE, (FieldPattern("date_", Anchor.PREFIX),)),
            (ColumnType.NUMBER, (FieldPattern("date_num", Anchor.PREFIX),)),
            (ColumnType.STATUS, (FieldPattern("x_date_", Anchor.CONTAINS),)),
        )

        overlaps = find_pattern_overlaps(table)

        assert overlaps == [(FieldPattern("date_", Anchor.PREFIX), FieldPattern("date_num", Anchor.PREFIX))]

    def test_same_type_markers_never_overlap(self):
        table = ((ColumnType.DATE, (FieldPattern("data"), FieldPattern("data__"))),)
        assert find_pattern_overlaps(table) == []
