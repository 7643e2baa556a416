"""
Tests for chain result tables and binding resolution.

This module tests how bare reference phrases inside a chain are matched to
the slot labels of earlier steps, including article and filler handling,
the most-recent-wins rule and unresolved references.
"""

from typing import NamedTuple

import pytest

from langcmd.exceptions import BindingError, ErrorContext
from langcmd.execution.binding import BindingResolver, ResultTable, SlotEntry


class MatchCase(NamedTuple):
    """Phrase, target slot and whether they should match."""

    name: str
    phrase: str
    label: str
    command_name: str
    expected: bool


MATCH_CASES = [
    MatchCase("exact_label", "search results", "search results", "SEARCH", True),
    MatchCase("label_with_article", "the search results", "search results", "SEARCH", True),
    MatchCase("single_word_label", "the analysis", "analysis", "ANALYZE", True),
    MatchCase("label_inside_phrase", "analysis above", "analysis", "ANALYZE", True),
    MatchCase("phrase_inside_label", "refined", "refined text", "REFINE", True),
    MatchCase("case_insensitive", "The Analysis", "analysis", "ANALYZE", True),
    MatchCase("extra_whitespace", "search    results", "search results", "SEARCH", True),
    MatchCase("command_name", "the search", "search results", "SEARCH", True),
    MatchCase("command_name_with_filler", "previous summarize output", "summary", "SUMMARIZE", True),
    MatchCase("filler_only_matches_any", "previous results", "analysis", "ANALYZE", True),
    MatchCase("unrelated_word", "the translation", "analysis", "ANALYZE", False),
    MatchCase("partial_word_is_not_a_match", "analys", "analysis", "ANALYZE", False),
    MatchCase("extra_content_word", "search engines", "search results", "SEARCH", False),
]


class TestResultTable:
    """Tests for ResultTable storage."""

    def test_store_and_read(self):
        table = ResultTable()
        entry = table.store(0, "search results", "SEARCH", "R1")

        assert entry == SlotEntry(0, "search results", "SEARCH", "R1")
        assert len(table) == 1
        assert table.labels() == ["search results"]
        assert table.last() == entry

    def test_before_excludes_current_and_later_steps(self):
        table = ResultTable()
        table.store(0, "search results", "SEARCH", "R1")
        table.store(1, "analysis", "ANALYZE", "A1")
        table.store(2, "summary", "SUMMARIZE", "S1")

        assert [entry.step_index for entry in table.before(2)] == [0, 1]
        assert table.before(0) == []

    def test_duplicate_labels_latest_shadows(self):
        table = ResultTable()
        table.store(0, "search results", "SEARCH", "first")
        table.store(1, "search results", "SEARCH", "second")

        assert len(table) == 2
        assert table.as_dict() == {"search results": "second"}

    def test_clear(self):
        table = ResultTable()
        table.store(0, "analysis", "ANALYZE", "A1")
        table.clear()

        assert len(table) == 0
        assert table.last() is None


class TestMatching:
    """Tests for phrase to slot matching."""

    def test_match_cases(self):
        resolver = BindingResolver()

        for case in MATCH_CASES:
            entry = SlotEntry(0, case.label, case.command_name, None)
            assert resolver.matches(case.phrase, entry) is case.expected, case.name

    def test_custom_filler_words(self):
        """Test filler words are configurable."""
        resolver = BindingResolver(filler_words={"whatever"})
        entry = SlotEntry(0, "analysis", "ANALYZE", None)

        assert resolver.matches("whatever", entry)
        assert not resolver.matches("the results", entry)


class TestResolve:
    """Tests for resolving a phrase to exactly one earlier step."""

    def setup_method(self):
        self.resolver = BindingResolver()
        self.table = ResultTable()
        self.table.store(0, "search results", "SEARCH", "R1")
        self.table.store(1, "analysis", "ANALYZE", "A1")

    def test_resolve_by_label(self):
        entry = self.resolver.resolve("search results", self.table, 2)

        assert entry.value == "R1"

    def test_most_recent_match_wins(self):
        """Test the latest matching step shadows earlier ones."""
        self.table.store(2, "search results", "SEARCH", "R2")

        assert self.resolver.resolve("search results", self.table, 3).value == "R2"

    def test_filler_phrase_resolves_to_latest_step(self):
        assert self.resolver.resolve("the previous results", self.table, 2).value == "A1"

    def test_search_space_is_limited_to_earlier_steps(self):
        """Test entries from the referencing step or later are invisible."""
        assert self.resolver.resolve("previous results", self.table, 1).value == "R1"

        with pytest.raises(BindingError):
            self.resolver.resolve("the analysis", self.table, 1)

    def test_candidates(self):
        self.table.store(2, "search results", "SEARCH", "R2")

        found = self.resolver.candidates("search results", self.table, 3)

        assert [entry.value for entry in found] == ["R1", "R2"]

    def test_unresolved_reference(self):
        """Test the error lists the slots that were visible."""
        context = ErrorContext(line=3, column=5, command_text="SUMMARIZE", step_index=2)

        with pytest.raises(BindingError) as exc_info:
            self.resolver.resolve("the translation", self.table, 2, context)

        error = exc_info.value
        assert error.phrase == "the translation"
        assert error.available_slots == ["search results", "analysis"]
        assert "'search results', 'analysis'" in error.message
        assert error.context.step_index == 2

    def test_unresolved_with_no_earlier_steps(self):
        with pytest.raises(BindingError) as exc_info:
            self.resolver.resolve("search results", ResultTable(), 0)

        assert "available slots: none" in exc_info.value.message
