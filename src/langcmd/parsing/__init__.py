"""
LangCmd parsing components.

This package provides the lexer, the token types, the syntax tree and the
parser that validates scripts against the grammar registry.
"""

from langcmd.parsing.ast import (
    BindingInput,
    Chain,
    InputRef,
    Invocation,
    LiteralInput,
    Script,
    ScriptItem,
)
from langcmd.parsing.lexer import Lexer, tokenize
from langcmd.parsing.parser import CHAIN_COMMAND, Parser, parse_script
from langcmd.parsing.tokens import Token, TokenType

__all__ = [
    "Lexer",
    "tokenize",
    "Token",
    "TokenType",
    "Parser",
    "parse_script",
    "CHAIN_COMMAND",
    "Script",
    "ScriptItem",
    "Invocation",
    "Chain",
    "InputRef",
    "LiteralInput",
    "BindingInput",
]
