"""
LangCmd grammar registry.

This package holds the command table, the value domains modifiers are
checked against, and the validation entry points used by the parser.
"""

from langcmd.grammar.domains import (
    Enumerated,
    FreeText,
    ListOf,
    NumericRange,
    ValueDomain,
    WeightedListOf,
)
from langcmd.grammar.registry import (
    CommandSchema,
    CommandSpec,
    GrammarRegistry,
    GrammarSpec,
    default_registry,
)
from langcmd.grammar.validation import (
    validate_invocation,
    validate_modifier,
    validate_modifiers,
)

__all__ = [
    "CommandSchema",
    "CommandSpec",
    "GrammarRegistry",
    "GrammarSpec",
    "default_registry",
    "ValueDomain",
    "FreeText",
    "Enumerated",
    "NumericRange",
    "ListOf",
    "WeightedListOf",
    "validate_modifier",
    "validate_modifiers",
    "validate_invocation",
]
