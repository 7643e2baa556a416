"""
Syntax tree produced by the LangCmd parser.

All nodes are immutable. A Script holds top-level Invocation and Chain
items in textual order; a Chain holds its steps, each of which carries the
slot label under which its result is stored while the chain runs.
"""

from collections.abc import Iterator, Mapping
from types import MappingProxyType
from typing import Union

from attrs import field, frozen

from langcmd.core.values import ModifierValue


def _freeze_mapping(modifiers: Mapping[str, ModifierValue]) -> Mapping[str, ModifierValue]:
    return MappingProxyType(dict(modifiers))


@frozen
class LiteralInput:
    """Input given as one or more quoted or block strings."""

    parts: tuple[str, ...] = field(converter=tuple)

    @property
    def value(self) -> str | list[str]:
        """Single string for one part, list of strings for several parts."""
        if len(self.parts) == 1:
            return self.parts[0]
        return list(self.parts)


@frozen
class BindingInput:
    """Unquoted phrase referring to the result of an earlier chain step."""

    phrase: str


InputRef = LiteralInput | BindingInput


@frozen
class Invocation:
    """
    A single command invocation.

    Params:
        command_name: Registered command name (case-sensitive)
        input: Primary input, None when the command takes none
        modifiers: Validated modifiers keyed by normalized lowercase key
        slot_label: Result slot name inside a chain, None at top level
        line: 1-based line of the command header
        column: 1-based column of the command header
    """

    command_name: str
    input: InputRef | None
    modifiers: Mapping[str, ModifierValue] = field(
        factory=dict, converter=_freeze_mapping, hash=False
    )
    slot_label: str | None = None
    line: int = 0
    column: int = 0

    @property
    def command_text(self) -> str:
        return self.command_name


@frozen
class Chain:
    """An ordered sequence of steps executed as a pipeline."""

    steps: tuple[Union[Invocation, "Chain"], ...] = field(converter=tuple)
    slot_label: str | None = None
    line: int = 0
    column: int = 0

    command_name = "CHAIN"

    @property
    def command_text(self) -> str:
        return self.command_name

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self) -> Iterator[Union[Invocation, "Chain"]]:
        return iter(self.steps)


ScriptItem = Invocation | Chain


@frozen
class Script:
    """Root of a parsed script."""

    items: tuple[ScriptItem, ...] = field(converter=tuple)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[ScriptItem]:
        return iter(self.items)
