"""Tests for the parent column builder."""

from __future__ import annotations

from datetime import date

from formrelay.core.models import ColumnMappingRule, ColumnType, FormMapping, Submission
from formrelay.mapping.column_builder import (
    build_columns,
    closest_demand_date,
    is_relation_column,
    split_relation_columns,
)
from formrelay.mapping.field_mappings import apply_field_mappings


def _augmented(submission: Submission) -> Submission:
    return submission.with_data(apply_field_mappings(submission.data))


class TestBuildColumns:
    def test_formats_by_classified_type(self, sample_submission):
        columns = build_columns(_augmented(sample_submission), today=date(2025, 8, 1))

        assert columns.base["name"] == "Campanha de Natal"
        assert columns.base["data__1"] == {"date": "2025-12-25"}
        assert columns.base["n_meros_mkkchcmk"] == 1500
        assert columns.base["n_mero__1"] == 0

    def test_excluded_fields_are_not_copied(self, sample_submission):
        columns = build_columns(_augmented(sample_submission), today=date(2025, 8, 1))

        assert "lookup_mkrtaebd" not in columns.base
        assert "pessoas5__1" not in columns.base
        assert "pessoas__1" not in columns.base
        # mirrored text copy survives
        assert columns.base["text_mkvhz8g3"] == "Banco XP"

    def test_campaign_dates_are_derived(self, sample_submission):
        columns = build_columns(_augmented(sample_submission), today=date(2025, 8, 1))

        assert columns.base["date_mkrj355f"] == {"date": "2025-12-25"}
        assert columns.base["text_mkr3n64h"] == "20251225"
        assert columns.campaign_date_text == "20251225"

    def test_relation_columns_are_withheld_raw(self):
        submission = Submission(id="s", timestamp="", form_title="", data={"conectar_quadros__1": "Marketing"})

        columns = build_columns(submission, today=date(2025, 8, 1))

        assert columns.relations == {"conectar_quadros__1": "Marketing"}
        assert "conectar_quadros__1" not in columns.base
        assert columns.all_columns()["conectar_quadros__1"] == "Marketing"

    def test_send_date_is_closest_demand_date(self):
        data = {
            "data__1": "01/01/2025",
            "__SUBITEMS__": [{"data__1": "01/08/2025"}, {"data__1": "20/08/2025"}],
        }
        submission = Submission(id="s", timestamp="", form_title="", data=data)

        columns = build_columns(submission, today=date(2025, 8, 15))

        assert columns.base["data__1"] == {"date": "2025-08-20"}

    def test_mapping_rules_apply_paths_defaults_and_transforms(self):
        mapping = FormMapping(
            board_id="1",
            group_id="topics",
            rules=(
                ColumnMappingRule("status__1", "data.priority", ColumnType.STATUS, default="Normal"),
                ColumnMappingRule("numeric_total", "data.amount", ColumnType.NUMBER, transform=lambda v: v * 2),
                ColumnMappingRule("text_form", "formTitle", ColumnType.TEXT),
            ),
        )
        submission = Submission(id="s", timestamp="", form_title="Campanha", data={"amount": 21})

        columns = build_columns(submission, mapping, today=date(2025, 8, 1))

        assert columns.base["status__1"] == {"label": "Normal"}
        assert columns.base["numeric_total"] == 42
        assert columns.base["text_form"] == "Campanha"

    def test_failing_transform_skips_the_column(self):
        def explode(value):
            raise ValueError("bad value")

        mapping = FormMapping(
            board_id="1",
            group_id="topics",
            rules=(ColumnMappingRule("text_x", "data.x", ColumnType.TEXT, transform=explode),),
        )
        submission = Submission(id="s", timestamp="", form_title="", data={"x": "1"})

        columns = build_columns(submission, mapping, today=date(2025, 8, 1))

        assert "text_x" not in columns.base


class TestHelpers:
    def test_is_relation_column(self):
        assert is_relation_column("conectar_quadros8__1")
        assert is_relation_column("link_to_itens_filhos__1")
        assert not is_relation_column("text_mkr3znn0")

    def test_split_relation_columns(self):
        base, relations = split_relation_columns({"conectar_quadros1": [1], "texto": "a"})
        assert base == {"texto": "a"}
        assert relations == {"conectar_quadros1": [1]}

    def test_closest_date_ties_keep_first(self):
        records = [{"data__1": "10/08/2025"}, {"data__1": "20/08/2025"}, {"data__1": "lixo"}]
        assert closest_demand_date(records, date(2025, 8, 15)) == "10/08/2025"
