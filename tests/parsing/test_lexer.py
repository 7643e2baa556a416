"""
Tests for the LangCmd lexer.

This module tests tokenization of command headers, quoted and block strings,
modifiers and bare references, plus indentation tracking and the lexical
error conditions (bad quoting, mixed indentation).
"""

import pytest

from langcmd.exceptions import LexError
from langcmd.parsing.lexer import Lexer, tokenize
from langcmd.parsing.tokens import TokenType

T = TokenType


def types(text: str) -> list[TokenType]:
    return [token.type for token in tokenize(text)]


class TestSimpleLines:
    """Tests for single line invocations."""

    def test_invocation_token_sequence(self):
        """Test header, input and two modifiers tokenize in order."""
        tokens = tokenize('ANALYZE: "great product" --focus=sentiment --output=summary')

        assert [t.type for t in tokens] == [
            T.COMMAND_NAME,
            T.COLON,
            T.QUOTED_STRING,
            T.MODIFIER_KEY,
            T.MODIFIER_VALUE,
            T.MODIFIER_KEY,
            T.MODIFIER_VALUE,
            T.NEWLINE,
            T.EOF,
        ]
        assert [t.value for t in tokens[:7]] == [
            "ANALYZE",
            ":",
            "great product",
            "focus",
            "sentiment",
            "output",
            "summary",
        ]

    def test_positions_are_one_based(self):
        """Test line and column tracking."""
        tokens = tokenize('ANALYZE: "great product" --focus=sentiment')

        assert (tokens[0].line, tokens[0].column) == (1, 1)
        assert (tokens[1].line, tokens[1].column) == (1, 8)
        assert (tokens[2].line, tokens[2].column) == (1, 10)
        assert (tokens[3].line, tokens[3].column) == (1, 26)

    def test_second_line_positions(self):
        """Test line counter advances across lines."""
        tokens = tokenize('ANALYZE: "a"\nSUMMARIZE: "b"\n')

        summarize = [t for t in tokens if t.value == "SUMMARIZE"][0]
        assert summarize.line == 2
        assert summarize.column == 1

    def test_multiple_quoted_strings(self):
        """Test several literal parts on one line."""
        tokens = tokenize('COMPARE: "AWS" "Azure"')

        strings = [t.value for t in tokens if t.type is T.QUOTED_STRING]
        assert strings == ["AWS", "Azure"]

    def test_no_trailing_newline_still_terminates_line(self):
        """Test the last line gets a NEWLINE before EOF."""
        assert types('SEARCH: "x"')[-2:] == [T.NEWLINE, T.EOF]

    def test_empty_text(self):
        """Test empty input yields only EOF."""
        assert types("") == [T.EOF]

    def test_crlf_line_endings(self):
        """Test Windows line endings behave like LF."""
        assert types('ANALYZE: "a"\r\nSEARCH: "b"\r\n') == types('ANALYZE: "a"\nSEARCH: "b"\n')

    def test_header_without_colon(self):
        """Test a header word without colon is still emitted for the parser to report."""
        tokens = tokenize('ANALYZE "x"')

        assert tokens[0].type is T.COMMAND_NAME
        assert tokens[1].type is T.QUOTED_STRING


class TestStrings:
    """Tests for quoted and block strings."""

    def test_escape_sequences(self):
        """Test supported escapes inside quoted strings."""
        tokens = tokenize('ANALYZE: "say \\"hi\\"\\tnow\\\\done\\n"')

        assert tokens[2].value == 'say "hi"\tnow\\done\n'

    def test_unknown_escape_is_kept(self):
        """Test an unsupported escape keeps its backslash."""
        tokens = tokenize('ANALYZE: "C:\\path"')

        assert tokens[2].value == "C:\\path"

    def test_block_string_preserves_content(self):
        """Test block strings keep newlines and indentation verbatim."""
        text = 'SUMMARIZE: """line one\n   line two\n"""\n'
        tokens = tokenize(text)

        assert tokens[2].type is T.BLOCK_STRING
        assert tokens[2].value == "line one\n   line two\n"
        assert T.INDENT not in [t.type for t in tokens]

    def test_block_string_followed_by_modifier(self):
        """Test modifiers may follow the closing triple quote."""
        tokens = tokenize('SUMMARIZE: """text\nmore""" --length=short\nSEARCH: "x"\n')

        assert [t.type for t in tokens][:6] == [
            T.COMMAND_NAME,
            T.COLON,
            T.BLOCK_STRING,
            T.MODIFIER_KEY,
            T.MODIFIER_VALUE,
            T.NEWLINE,
        ]
        search = [t for t in tokens if t.value == "SEARCH"][0]
        assert search.line == 3

    def test_quoted_modifier_value(self):
        """Test modifier values may be quoted to contain spaces."""
        tokens = tokenize('GENERATE: "x" --audience="new users"')

        assert tokens[4].type is T.MODIFIER_VALUE
        assert tokens[4].value == "new users"

    def test_unterminated_string(self):
        """Test unterminated quoted string reports its opening position."""
        with pytest.raises(LexError) as exc_info:
            tokenize('ANALYZE: "abc\nSEARCH: "x"\n')

        assert exc_info.value.line == 1
        assert exc_info.value.column == 10
        assert "Unterminated string" in exc_info.value.message

    def test_unterminated_block_string(self):
        """Test a block string without closing quotes."""
        with pytest.raises(LexError) as exc_info:
            tokenize('SUMMARIZE: """never closed\nstill going\n')

        assert exc_info.value.line == 1
        assert "block string" in exc_info.value.message


class TestModifiersAndReferences:
    """Tests for modifier and bare reference tokens."""

    def test_bare_reference_stops_at_modifier(self):
        """Test a bare phrase ends where the first modifier starts."""
        tokens = tokenize("ANALYZE: search results --focus=thematic")

        assert tokens[2].type is T.BARE_REFERENCE
        assert tokens[2].value == "search results"
        assert tokens[3].type is T.MODIFIER_KEY

    def test_bare_reference_to_end_of_line(self):
        """Test trailing whitespace is not part of a bare phrase."""
        tokens = tokenize("SUMMARIZE: the analysis   \n")

        assert tokens[2].value == "the analysis"

    def test_hyphenated_modifier_key(self):
        """Test modifier keys may contain hyphens."""
        tokens = tokenize('SUMMARIZE: "x" --max-words=100')

        assert tokens[3].value == "max-words"
        assert tokens[4].value == "100"

    def test_modifier_without_value(self):
        """Test a bare --key produces no MODIFIER_VALUE token."""
        assert types('ANALYZE: "x" --focus')[3:] == [T.MODIFIER_KEY, T.NEWLINE, T.EOF]

    def test_modifier_missing_equals(self):
        """Test a modifier key followed by other characters."""
        with pytest.raises(LexError) as exc_info:
            tokenize('ANALYZE: "x" --focus:sentiment')

        assert "Expected '='" in exc_info.value.message

    def test_modifier_missing_key(self):
        """Test '--' with no key."""
        with pytest.raises(LexError):
            tokenize('ANALYZE: "x" --=value')


class TestIndentation:
    """Tests for INDENT/DEDENT emission."""

    def test_chain_block(self):
        """Test a chain header followed by an indented block."""
        text = (
            "CHAIN:\n"
            '  SEARCH: "x"\n'
            "  ANALYZE: search results --focus=thematic\n"
        )

        assert types(text) == [
            T.COMMAND_NAME,
            T.COLON,
            T.NEWLINE,
            T.INDENT,
            T.COMMAND_NAME,
            T.COLON,
            T.QUOTED_STRING,
            T.NEWLINE,
            T.COMMAND_NAME,
            T.COLON,
            T.BARE_REFERENCE,
            T.MODIFIER_KEY,
            T.MODIFIER_VALUE,
            T.NEWLINE,
            T.DEDENT,
            T.EOF,
        ]

    def test_dedent_before_next_top_level_item(self):
        """Test DEDENT is emitted before a following top-level line."""
        text = 'CHAIN:\n    SEARCH: "x"\nANALYZE: "y"\n'
        token_types = types(text)

        dedent_at = token_types.index(T.DEDENT)
        assert token_types[dedent_at + 1] is T.COMMAND_NAME
        assert token_types.count(T.DEDENT) == 1

    def test_nested_blocks_close_at_eof(self):
        """Test all open levels are closed at end of input."""
        text = 'CHAIN:\n  CHAIN:\n    SEARCH: "x"'

        assert types(text)[-3:] == [T.DEDENT, T.DEDENT, T.EOF]

    def test_blank_and_comment_lines_ignored(self):
        """Test blank lines and # comments produce no tokens."""
        tokens = tokenize('# a comment\n\n   \nANALYZE: "x"\n')

        assert tokens[0].type is T.COMMAND_NAME
        assert tokens[0].line == 4

    def test_comment_inside_chain_does_not_dedent(self):
        """Test an unindented comment inside a block leaves indentation alone."""
        text = 'CHAIN:\n  SEARCH: "x"\n# note\n  ANALYZE: search results\n'

        assert types(text).count(T.DEDENT) == 1
        assert types(text)[-2:] == [T.DEDENT, T.EOF]

    def test_tab_indentation(self):
        """Test tabs are accepted when used consistently."""
        text = 'CHAIN:\n\tSEARCH: "x"\n\tANALYZE: search results\n'

        assert types(text).count(T.INDENT) == 1

    def test_mixed_tabs_and_spaces_on_one_line(self):
        """Test a single indentation run mixing tabs and spaces."""
        with pytest.raises(LexError) as exc_info:
            tokenize('CHAIN:\n \tSEARCH: "x"\n')

        assert exc_info.value.line == 2
        assert "Mixed tabs and spaces" in exc_info.value.message

    def test_inconsistent_indentation_across_lines(self):
        """Test switching from spaces to tabs between lines."""
        text = 'CHAIN:\n  SEARCH: "x"\nCHAIN:\n\tSEARCH: "y"\n'

        with pytest.raises(LexError) as exc_info:
            tokenize(text)

        assert exc_info.value.line == 4

    def test_dedent_to_unknown_level(self):
        """Test dedenting to a width that was never opened."""
        text = 'CHAIN:\n    SEARCH: "x"\n  ANALYZE: "y"\n'

        with pytest.raises(LexError) as exc_info:
            tokenize(text)

        assert "Dedent does not match" in exc_info.value.message

    def test_error_context_carries_source_line(self):
        """Test lexical errors quote the offending line."""
        with pytest.raises(LexError) as exc_info:
            Lexer('CHAIN:\n \tSEARCH: "x"\n').tokenize()

        assert exc_info.value.context.source_line == ' \tSEARCH: "x"'
