"""
Modifier values and their classification.

A raw modifier value such as ``sentiment``, ``a,b,c`` or
``price:0.5,support:0.2`` is classified into one of three variants:

    - WeightedList: every comma-separated item is ``key:number``
    - ListValue: contains a comma but is not a weighted list
    - Scalar: anything else

Weights are kept as floats and are never normalized; they need not sum to 1.
"""

import math

from attrs import field, frozen
from inflection import underscore


@frozen
class Scalar:
    """A single textual modifier value."""

    text: str

    def render(self) -> str:
        return self.text


@frozen
class ListValue:
    """An ordered sequence of textual items."""

    items: tuple[str, ...] = field(converter=tuple)

    def render(self) -> str:
        return ",".join(self.items)


@frozen
class WeightedList:
    """An ordered sequence of (key, weight) pairs."""

    pairs: tuple[tuple[str, float], ...] = field(
        converter=lambda pairs: tuple((str(k), float(w)) for k, w in pairs)
    )

    def keys(self) -> list[str]:
        return [key for key, _ in self.pairs]

    def total_weight(self) -> float:
        return sum(weight for _, weight in self.pairs)

    def render(self) -> str:
        return ",".join(f"{key}:{weight:g}" for key, weight in self.pairs)


ModifierValue = Scalar | ListValue | WeightedList


def _parse_weighted_item(item: str) -> tuple[str, float] | None:
    """Split ``key:number`` into a pair, or return None if it is not one."""
    if ":" not in item:
        return None
    key, weight_text = item.rsplit(":", 1)
    key = key.strip()
    if not key:
        return None
    try:
        weight = float(weight_text.strip())
    except ValueError:
        return None
    if not math.isfinite(weight):
        return None
    return key, weight


def parse_modifier_value(raw: str) -> ModifierValue:
    """
    Classify a raw modifier value.

    Params:
        raw: Value text as written after ``--key=`` (quotes already removed)

    Returns:
        Scalar, ListValue or WeightedList

    Examples:
        >>> parse_modifier_value("a,b,c")
        ListValue(items=('a', 'b', 'c'))
        >>> parse_modifier_value("price:0.5,support:0.2")
        WeightedList(pairs=(('price', 0.5), ('support', 0.2)))
    """
    items = [item.strip() for item in raw.split(",")]
    non_empty = [item for item in items if item]

    pairs = [_parse_weighted_item(item) for item in non_empty]
    if pairs and all(pair is not None for pair in pairs):
        return WeightedList(pairs)

    if "," in raw:
        return ListValue(non_empty)

    return Scalar(raw.strip())


def normalize_modifier_key(key: str) -> str:
    """Normalize a modifier key for case-insensitive lookup (``Output-Format`` -> ``output_format``)."""
    return underscore(key.strip().lower())
