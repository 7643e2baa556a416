"""
Core LangCmd components.

This package provides the value types and type aliases shared by the
parser, the grammar registry and the executor.
"""

from langcmd.core.types import GrammarData, InputValue, ResultValue
from langcmd.core.values import (
    ListValue,
    ModifierValue,
    Scalar,
    WeightedList,
    normalize_modifier_key,
    parse_modifier_value,
)

__all__ = [
    "GrammarData",
    "InputValue",
    "ResultValue",
    "ModifierValue",
    "Scalar",
    "ListValue",
    "WeightedList",
    "parse_modifier_value",
    "normalize_modifier_key",
]
