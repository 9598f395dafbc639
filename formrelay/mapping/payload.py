"""Normalization boundary for raw submission values.

Form payloads arrive as arbitrary JSON. Everything downstream of this module
works on the closed variant `Scalar | list[Scalar] | dict[str, Any]`; values
of any other shape are coerced here once.
"""

from __future__ import annotations

import math
from typing import Any, Union

Scalar = Union[str, int, float, bool]
RawValue = Union[Scalar, list[Scalar], dict[str, Any], None]


def normalize_value(value: Any) -> RawValue:
    """Coerce an arbitrary JSON value into the closed RawValue variant.

    Tuples and sets become lists; nested lists are flattened one level;
    non-JSON scalars are stringified.
    """
    if value is None or isinstance(value, (str, bool, int, float)):
        return value
    if isinstance(value, dict):
        return value
    if isinstance(value, (list, tuple, set)):
        items: list[Scalar] = []
        for element in value:
            if isinstance(element, (list, tuple, set)):
                items.extend(e for e in element if e is not None)
            elif element is not None:
                items.append(element)
        return items
    return str(value)


def is_blank(value: Any) -> bool:
    """True for None, empty strings and empty containers"""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def stringify(value: Any) -> str:
    """String form of a scalar; integral floats lose their trailing '.0'"""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_to_string_array(value: Any) -> list[str]:
    """Normalize a value into a list of strings.

    None -> [], list -> each element stringified, object with a `labels` or
    `ids` list -> that list stringified, any scalar -> single-element list.
    """
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [stringify(v) for v in value if v is not None]
    if isinstance(value, dict):
        for key in ("labels", "ids"):
            inner = value.get(key)
            if isinstance(inner, list):
                return [stringify(v) for v in inner if v is not None]
        return []
    return [stringify(value)]


def parse_int(value: Any) -> int | None:
    """Parse a strictly integral value, None when it is not one"""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) and value.is_integer() else None
    if isinstance(value, str):
        text = value.strip()
        if "_" in text:
            return None
        try:
            return int(text)
        except ValueError:
            return None
    return None


def parse_number(value: Any) -> float | int | None:
    """Parse a finite number; ints stay ints"""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        text = value.strip().replace(",", ".") if value.count(",") == 1 and "." not in value else value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return int(number) if number.is_integer() and "." not in text and "e" not in text.lower() else number
    return None


def get_value_by_path(data: dict[str, Any], path: str) -> Any:
    """Resolve a dotted path ("a.b.0.c") against nested dicts and lists.

    Returns None as soon as a segment is missing.
    """
    current: Any = data
    for segment in path.split("."):
        if isinstance(current, dict):
            if segment not in current:
                return None
            current = current[segment]
        elif isinstance(current, list):
            index = parse_int(segment)
            if index is None or not -len(current) <= index < len(current):
                return None
            current = current[index]
        else:
            return None
    return current


def first_present(data: dict[str, Any], keys: tuple[str, ...] | list[str]) -> Any:
    """First value among `keys` that is not blank, else None"""
    for key in keys:
        value = data.get(key)
        if not is_blank(value):
            return value
    return None
