"""Type classifier: maps a field name to the semantic column type.

The mapping is a single constant table of (type, patterns), evaluated in order,
first match wins. The table is checked for ambiguous overlaps when this module
is imported so a bad edit fails at startup instead of misrouting values."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from ..core.models import ColumnType


class Anchor(Enum):
    """Where a marker must appear in the field name"""

    CONTAINS = "contains"
    PREFIX = "prefix"


@dataclass(frozen=True)
class FieldPattern:
    marker: str
    anchor: Anchor = Anchor.CONTAINS

    def matches(self, field_name: str) -> bool:
        if self.anchor is Anchor.PREFIX:
            return field_name.startswith(self.marker)
        return self.marker in field_name


PATTERN_TABLE: tuple[tuple[ColumnType, tuple[FieldPattern, ...]], ...] = (
    (ColumnType.FILE, (FieldPattern("enviar_arquivo"), FieldPattern("file_"))),
    (ColumnType.DATE, (FieldPattern("data__"), FieldPattern("date_", Anchor.PREFIX))),
    (ColumnType.NUMBER, (FieldPattern("n_mero"), FieldPattern("numeric_", Anchor.PREFIX))),
    (ColumnType.PEOPLE, (FieldPattern("pessoas"), FieldPattern("people_", Anchor.PREFIX))),
    (
        ColumnType.DROPDOWN,
        (
            FieldPattern("lista_suspensa"),
            FieldPattern("sele__o_m_ltipla"),
            FieldPattern("sele__o_individual"),
            FieldPattern("dropdown_", Anchor.PREFIX),
        ),
    ),
    (ColumnType.STATUS, (FieldPattern("status"), FieldPattern("color_", Anchor.PREFIX))),
    (ColumnType.TAGS, (FieldPattern("tags"), FieldPattern("etiquetas"))),
    (
        ColumnType.BOARD_RELATION,
        (FieldPattern("conectar_quadros"), FieldPattern("board_relation"), FieldPattern("connect_boards")),
    ),
    (ColumnType.TIMELINE, (FieldPattern("timeline"), FieldPattern("cronograma"))),
    (ColumnType.CHECKBOX, (FieldPattern("checkbox"), FieldPattern("caixa_de_sele"))),
)


def find_pattern_overlaps(
    table: tuple[tuple[ColumnType, tuple[FieldPattern, ...]], ...],
) -> list[tuple[FieldPattern, FieldPattern]]:
    """Return marker pairs of different types where one marker can shadow the other.

    A CONTAINS marker shadows any marker of another type that includes it,
    a PREFIX marker shadows a PREFIX marker of another type that starts with it.
    """
    flat = [(column_type, pattern) for column_type, patterns in table for pattern in patterns]
    overlaps: list[tuple[FieldPattern, FieldPattern]] = []
    for i, (type_a, a) in enumerate(flat):
        for type_b, b in flat[i + 1 :]:
            if type_a is type_b:
                continue
            for first, second in ((a, b), (b, a)):
                if first.anchor is Anchor.CONTAINS and first.marker in second.marker:
                    overlaps.append((first, second))
                elif (
                    first.anchor is Anchor.PREFIX
                    and second.anchor is Anchor.PREFIX
                    and second.marker.startswith(first.marker)
                ):
                    overlaps.append((first, second))
    return overlaps


def _validate_table() -> None:
    overlaps = find_pattern_overlaps(PATTERN_TABLE)
    if overlaps:
        described = ", ".join(f"'{a.marker}' shadows '{b.marker}'" for a, b in overlaps)
        raise ValueError(f"Ambiguous column type patterns: {described}")


_validate_table()


def classify(field_name: str) -> ColumnType:
    """Return the semantic column type for a field name, TEXT when nothing matches."""
    for column_type, patterns in PATTERN_TABLE:
        if any(pattern.matches(field_name) for pattern in patterns):
            return column_type
    return ColumnType.TEXT
