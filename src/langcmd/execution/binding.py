"""
Result table and binding resolution for chain execution.

A ResultTable is created empty when a chain starts and receives one entry per
completed step. A BindingResolver maps a bare reference phrase written in a
later step (``search results``, ``the analysis``) to one of those entries.

Matching rules (case-insensitive, whitespace collapsed):
    1. The slot label's words appear contiguously in the phrase, or the
       phrase's words appear contiguously in the label.
    2. After removing filler words, the phrase equals the label's remainder
       or the step's command name.
    3. A phrase made only of filler words (``previous results``) matches
       every earlier slot.

When several earlier steps match, the most recently produced one wins.
"""

from collections.abc import Iterable

from attrs import frozen

from langcmd.core.types import ResultValue
from langcmd.exceptions import BindingError, ErrorContext

FILLER_WORDS = frozenset(
    {
        "the",
        "a",
        "an",
        "previous",
        "last",
        "above",
        "prior",
        "result",
        "results",
        "output",
        "outputs",
        "of",
        "from",
    }
)


@frozen
class SlotEntry:
    """Result of one completed chain step."""

    step_index: int
    label: str
    command_name: str
    value: ResultValue


class ResultTable:
    """Slot label -> result storage owned by a single chain run.

    Entries are kept in production order; duplicate labels are allowed and
    the latest entry shadows earlier ones in ``as_dict``.
    """

    def __init__(self):
        self._entries: list[SlotEntry] = []

    def store(
        self, step_index: int, label: str, command_name: str, value: ResultValue
    ) -> SlotEntry:
        entry = SlotEntry(step_index, label, command_name, value)
        self._entries.append(entry)
        return entry

    def entries(self) -> tuple[SlotEntry, ...]:
        return tuple(self._entries)

    def before(self, step_index: int) -> list[SlotEntry]:
        """Entries produced by steps strictly before ``step_index``."""
        return [entry for entry in self._entries if entry.step_index < step_index]

    def labels(self) -> list[str]:
        return [entry.label for entry in self._entries]

    def as_dict(self) -> dict[str, ResultValue]:
        return {entry.label: entry.value for entry in self._entries}

    def last(self) -> SlotEntry | None:
        return self._entries[-1] if self._entries else None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


def _words(text: str) -> list[str]:
    return text.lower().split()


def _contains(haystack: list[str], needle: list[str]) -> bool:
    """Check whether ``needle`` occurs as a contiguous run inside ``haystack``."""
    if not needle or len(needle) > len(haystack):
        return False
    return any(
        haystack[i : i + len(needle)] == needle
        for i in range(len(haystack) - len(needle) + 1)
    )


class BindingResolver:
    """Resolve bare reference phrases against a chain's ResultTable."""

    def __init__(self, filler_words: Iterable[str] = FILLER_WORDS):
        self.filler_words = frozenset(word.lower() for word in filler_words)

    def _core(self, words: list[str]) -> list[str]:
        return [word for word in words if word not in self.filler_words]

    def matches(self, phrase: str, entry: SlotEntry) -> bool:
        """Check whether a phrase refers to a slot entry."""
        phrase_words = _words(phrase)
        label_words = _words(entry.label)

        if _contains(phrase_words, label_words) or _contains(label_words, phrase_words):
            return True

        phrase_core = self._core(phrase_words)
        if not phrase_core:
            return bool(phrase_words)
        return phrase_core == self._core(label_words) or phrase_core == [
            entry.command_name.lower()
        ]

    def candidates(
        self, phrase: str, table: ResultTable, step_index: int
    ) -> list[SlotEntry]:
        """All entries from steps before ``step_index`` that the phrase matches."""
        return [entry for entry in table.before(step_index) if self.matches(phrase, entry)]

    def resolve(
        self,
        phrase: str,
        table: ResultTable,
        step_index: int,
        context: ErrorContext | None = None,
    ) -> SlotEntry:
        """
        Resolve a phrase to exactly one earlier step.

        Params:
            phrase: Reference phrase as written in the script
            table: Result table of the running chain
            step_index: Index of the step containing the reference
            context: Source location for error reporting

        Returns:
            The most recently produced matching entry

        Raises:
            BindingError: If no earlier step matches
        """
        found = self.candidates(phrase, table, step_index)
        if not found:
            available = [entry.label for entry in table.before(step_index)]
            raise BindingError(phrase, available, context)
        return found[-1]
