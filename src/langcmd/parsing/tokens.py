"""Token definitions produced by the LangCmd lexer."""

from enum import Enum

from attrs import frozen


class TokenType(Enum):
    """Type of a lexical token."""

    COMMAND_NAME = "command_name"
    COLON = "colon"
    QUOTED_STRING = "quoted_string"
    BLOCK_STRING = "block_string"
    MODIFIER_KEY = "modifier_key"
    MODIFIER_VALUE = "modifier_value"
    BARE_REFERENCE = "bare_reference"
    INDENT = "indent"
    DEDENT = "dedent"
    NEWLINE = "newline"
    EOF = "eof"


@frozen
class Token:
    """A single token with its 1-based source position."""

    type: TokenType
    value: str
    line: int
    column: int

    def describe(self) -> str:
        """Short human readable form used in parse error messages."""
        if self.type in (TokenType.NEWLINE, TokenType.EOF):
            return "end of line" if self.type is TokenType.NEWLINE else "end of input"
        if self.type in (TokenType.INDENT, TokenType.DEDENT):
            return self.type.value
        if self.type is TokenType.MODIFIER_KEY:
            return f"modifier '--{self.value}'"
        if self.type is TokenType.BLOCK_STRING:
            return "block string"
        return f"{self.type.value.replace('_', ' ')} '{self.value}'"
