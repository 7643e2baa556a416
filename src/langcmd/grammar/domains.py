"""
Value domains for command modifiers.

Each domain decides whether a ModifierValue is acceptable and can describe
itself for error messages. Domains are immutable and side-effect free.
"""

import math
from abc import ABC, abstractmethod

from attrs import field, frozen

from langcmd.core.values import ListValue, ModifierValue, Scalar, WeightedList


class ValueDomain(ABC):
    """Abstract base class for modifier value domains."""

    @abstractmethod
    def check(self, value: ModifierValue) -> str | None:
        """Return None if the value is accepted, otherwise the reason it is not."""
        pass

    @abstractmethod
    def describe(self) -> str:
        """Describe the accepted values for display in diagnostics."""
        pass

    def accepts(self, value: ModifierValue) -> bool:
        return self.check(value) is None


@frozen
class FreeText(ValueDomain):
    """Any value is accepted."""

    def check(self, value: ModifierValue) -> str | None:
        return None

    def describe(self) -> str:
        return "free text"


@frozen
class Enumerated(ValueDomain):
    """A single value from a fixed set of choices (case-sensitive)."""

    choices: frozenset[str] = field(converter=frozenset)

    def check(self, value: ModifierValue) -> str | None:
        if not isinstance(value, Scalar):
            return f"expected a single value, got '{value.render()}'"
        if value.text not in self.choices:
            return f"'{value.text}' is not an allowed choice"
        return None

    def describe(self) -> str:
        return "one of: " + ", ".join(sorted(self.choices))


@frozen
class NumericRange(ValueDomain):
    """A number within inclusive bounds."""

    minimum: float
    maximum: float

    def check(self, value: ModifierValue) -> str | None:
        if not isinstance(value, Scalar):
            return f"expected a number, got '{value.render()}'"
        try:
            number = float(value.text)
        except ValueError:
            return f"'{value.text}' is not a number"
        if not math.isfinite(number):
            return f"'{value.text}' is not a finite number"
        if not self.minimum <= number <= self.maximum:
            return f"{value.text} is out of range"
        return None

    def describe(self) -> str:
        return f"number between {self.minimum:g} and {self.maximum:g}"


@frozen
class ListOf(ValueDomain):
    """A comma-separated list whose items all belong to an inner domain.

    A single scalar counts as a one-item list.
    """

    item: ValueDomain

    def check(self, value: ModifierValue) -> str | None:
        if isinstance(value, WeightedList):
            return f"expected a list, got weighted pairs '{value.render()}'"
        items = value.items if isinstance(value, ListValue) else (value.text,)
        for item in items:
            reason = self.item.check(Scalar(item))
            if reason is not None:
                return f"item {reason}" if reason.startswith("'") else reason
        return None

    def describe(self) -> str:
        return f"comma-separated list of ({self.item.describe()})"


@frozen
class WeightedListOf(ValueDomain):
    """``key:weight`` pairs whose keys come from a fixed set.

    Weights are not required to sum to 1.
    """

    keys: frozenset[str] = field(converter=frozenset)

    def check(self, value: ModifierValue) -> str | None:
        if not isinstance(value, WeightedList):
            return f"expected key:weight pairs, got '{value.render()}'"
        for key in value.keys():
            if key not in self.keys:
                return f"'{key}' is not an allowed weight key"
        return None

    def describe(self) -> str:
        return "key:weight pairs with keys from: " + ", ".join(sorted(self.keys))
