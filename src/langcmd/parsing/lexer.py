"""
Lexer for LangCmd scripts.

Tokenizes script text line by line into a flat token list.

Features:
- Command headers (``ANALYZE:``) and modifier tokens (``--key=value``)
- Single-line quoted strings with escapes and triple-quoted block strings
- Bare reference phrases (unquoted inputs inside chains)
- Indentation-aware: emits INDENT/DEDENT from a stack of indentation levels
- Position tracking (line, column) for diagnostics
"""

import re

from langcmd.exceptions import ErrorContext, LexError
from langcmd.parsing.tokens import Token, TokenType

IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")
MODIFIER_KEY_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_-]*")
MODIFIER_START_PATTERN = re.compile(r"\s--")

BLOCK_QUOTE = '"""'
ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t"}


class Lexer:
    """
    LangCmd lexer with indentation handling.

    Based on the off-side rule:
    - Track a stack of indentation widths
    - Emit INDENT when a line is indented deeper than the top of the stack
    - Emit one DEDENT per level popped when a line is indented less
    - Blank lines and ``#`` comment lines do not affect indentation
    """

    def __init__(self, text: str):
        self.text = text.replace("\r\n", "\n")
        self.source_lines = self.text.split("\n")
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

        self.indent_stack = [0]
        self.indent_char: str | None = None

    # Main tokenization

    def tokenize(self) -> list[Token]:
        """
        Tokenize the entire script.

        Returns:
            Token list terminated by EOF, with all open indentation closed

        Raises:
            LexError: On malformed quoting or inconsistent indentation
        """
        while self.pos < len(self.text):
            self._scan_line()

        while len(self.indent_stack) > 1:
            self.indent_stack.pop()
            self._emit(TokenType.DEDENT, "")

        self._emit(TokenType.EOF, "")
        return self.tokens

    def _scan_line(self) -> None:
        """Scan one logical line starting at the beginning of a physical line."""
        indent = self._read_indentation()

        if self._at_line_end() or self._peek() == "#":
            self._skip_rest_of_line()
            return

        self._handle_indentation(indent)
        self._scan_header()
        self._scan_arguments()

        self._emit(TokenType.NEWLINE, "\n")
        if self._peek() == "\n":
            self._advance()

    # Indentation handling

    def _read_indentation(self) -> str:
        run = ""
        while self._peek() in (" ", "\t"):
            run += self._advance()
        return run

    def _handle_indentation(self, run: str) -> None:
        """Compare a line's indentation with the stack and emit INDENT/DEDENT."""
        if run:
            if " " in run and "\t" in run:
                raise self._error("Mixed tabs and spaces in indentation", column=1)
            if self.indent_char is None:
                self.indent_char = run[0]
            elif run[0] != self.indent_char:
                raise self._error(
                    "Inconsistent use of tabs and spaces in indentation", column=1
                )

        width = len(run)
        current = self.indent_stack[-1]

        if width > current:
            self.indent_stack.append(width)
            self._emit(TokenType.INDENT, run, column=1)
        elif width < current:
            while len(self.indent_stack) > 1 and self.indent_stack[-1] > width:
                self.indent_stack.pop()
                self._emit(TokenType.DEDENT, "", column=1)
            if self.indent_stack[-1] != width:
                raise self._error(
                    "Dedent does not match any outer indentation level", column=1
                )

    # Token scanners

    def _scan_header(self) -> None:
        """Scan ``NAME:`` at the start of a line, leaving anything else to the argument scanner."""
        match = IDENTIFIER_PATTERN.match(self.text, self.pos)
        if not match:
            return
        name = match.group(0)
        after = match.end()
        if after < len(self.text) and self.text[after] == ":":
            self._emit(TokenType.COMMAND_NAME, name)
            self._advance(len(name))
            self._emit(TokenType.COLON, ":")
            self._advance()
        elif after >= len(self.text) or self.text[after] in " \t\n":
            # Header word without colon; the parser reports the missing colon
            self._emit(TokenType.COMMAND_NAME, name)
            self._advance(len(name))

    def _scan_arguments(self) -> None:
        """Scan inputs and modifiers until the end of the current line."""
        while True:
            self._skip_spaces()
            if self._at_line_end():
                return
            if self.text.startswith(BLOCK_QUOTE, self.pos):
                self._scan_block_string()
            elif self._peek() == '"':
                line, column = self.line, self.column
                value = self._read_quoted()
                self._emit(TokenType.QUOTED_STRING, value, line=line, column=column)
            elif self.text.startswith("--", self.pos):
                self._scan_modifier()
            else:
                self._scan_bare_reference()

    def _scan_block_string(self) -> None:
        """Scan a triple-quoted block; content is literal, newlines included."""
        line, column = self.line, self.column
        self._advance(len(BLOCK_QUOTE))
        end = self.text.find(BLOCK_QUOTE, self.pos)
        if end == -1:
            raise self._error(
                "Unterminated block string", line=line, column=column
            )
        value = self.text[self.pos : end]
        self._advance(end - self.pos + len(BLOCK_QUOTE))
        self._emit(TokenType.BLOCK_STRING, value, line=line, column=column)

    def _read_quoted(self) -> str:
        """Read a single-line double-quoted string and return its unescaped content."""
        line, column = self.line, self.column
        self._advance()
        value = ""
        while True:
            char = self._peek()
            if char is None or char == "\n":
                raise self._error(
                    "Unterminated string literal", line=line, column=column
                )
            if char == "\\":
                self._advance()
                escaped = self._peek()
                if escaped is None or escaped == "\n":
                    raise self._error(
                        "Unterminated string literal", line=line, column=column
                    )
                value += ESCAPES.get(escaped, "\\" + escaped)
                self._advance()
            elif char == '"':
                self._advance()
                return value
            else:
                value += self._advance()

    def _scan_modifier(self) -> None:
        """Scan ``--key`` and an optional ``=value`` part."""
        self._advance(2)
        match = MODIFIER_KEY_PATTERN.match(self.text, self.pos)
        if not match:
            raise self._error("Expected a modifier key after '--'")
        key = match.group(0)
        self._emit(TokenType.MODIFIER_KEY, key, column=self.column - 2)
        self._advance(len(key))

        char = self._peek()
        if char == "=":
            self._advance()
            line, column = self.line, self.column
            if self._peek() == '"':
                value = self._read_quoted()
            else:
                value = ""
                while not self._at_line_end() and self._peek() not in (" ", "\t"):
                    value += self._advance()
            self._emit(TokenType.MODIFIER_VALUE, value, line=line, column=column)
        elif char is not None and char not in " \t\n":
            raise self._error(f"Expected '=' after modifier key '--{key}'")

    def _scan_bare_reference(self) -> None:
        """Scan an unquoted phrase up to the end of line or the next modifier."""
        line_end = self.text.find("\n", self.pos)
        if line_end == -1:
            line_end = len(self.text)
        segment = self.text[self.pos : line_end]
        match = MODIFIER_START_PATTERN.search(segment)
        if match:
            segment = segment[: match.start()]
        self._emit(TokenType.BARE_REFERENCE, segment.rstrip())
        self._advance(len(segment))

    # Character helpers

    def _peek(self) -> str | None:
        if self.pos < len(self.text):
            return self.text[self.pos]
        return None

    def _at_line_end(self) -> bool:
        return self.pos >= len(self.text) or self.text[self.pos] == "\n"

    def _advance(self, count: int = 1) -> str:
        consumed = self.text[self.pos : self.pos + count]
        for char in consumed:
            if char == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        self.pos += len(consumed)
        return consumed

    def _skip_spaces(self) -> None:
        while self._peek() in (" ", "\t"):
            self._advance()

    def _skip_rest_of_line(self) -> None:
        while not self._at_line_end():
            self._advance()
        if self._peek() == "\n":
            self._advance()

    def _emit(
        self,
        token_type: TokenType,
        value: str,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        self.tokens.append(
            Token(
                type=token_type,
                value=value,
                line=self.line if line is None else line,
                column=self.column if column is None else column,
            )
        )

    def _error(
        self, message: str, line: int | None = None, column: int | None = None
    ) -> LexError:
        line = self.line if line is None else line
        column = self.column if column is None else column
        source_line = (
            self.source_lines[line - 1] if 0 < line <= len(self.source_lines) else None
        )
        return LexError(
            message,
            ErrorContext(line=line, column=column, source_line=source_line),
        )


def tokenize(text: str) -> list[Token]:
    """Convenience function to tokenize script text."""
    return Lexer(text).tokenize()
