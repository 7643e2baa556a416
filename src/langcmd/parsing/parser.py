"""
Parser for LangCmd scripts.

This module turns the lexer's token list into an immutable Script tree,
checking command names and modifiers against a GrammarRegistry as it goes.
Parsing is fail-fast: the first ParseError or ValidationError aborts.

Grammar:

    script      := (NEWLINE | chain | invocation)* EOF
    chain       := "CHAIN" ":" NEWLINE INDENT (invocation | chain)+ DEDENT
    invocation  := COMMAND_NAME ":" input? modifier* (NEWLINE | EOF)
    input       := (QUOTED_STRING | BLOCK_STRING)+ | BARE_REFERENCE
    modifier    := MODIFIER_KEY MODIFIER_VALUE
"""

from difflib import get_close_matches

from langcmd.core.values import ModifierValue, normalize_modifier_key, parse_modifier_value
from langcmd.exceptions import ErrorContext, ParseError
from langcmd.grammar.registry import CommandSchema, GrammarRegistry, default_registry
from langcmd.grammar.validation import validate_modifiers
from langcmd.parsing.ast import (
    BindingInput,
    Chain,
    InputRef,
    Invocation,
    LiteralInput,
    Script,
    ScriptItem,
)
from langcmd.parsing.lexer import Lexer
from langcmd.parsing.tokens import Token, TokenType

CHAIN_COMMAND = "CHAIN"

STRING_TOKENS = (TokenType.QUOTED_STRING, TokenType.BLOCK_STRING)


class Parser:
    """Recursive descent parser over a LangCmd token list."""

    def __init__(
        self,
        tokens: list[Token],
        registry: GrammarRegistry | None = None,
        source: str | None = None,
    ):
        """
        Params:
            tokens: Token list as produced by Lexer.tokenize (EOF-terminated)
            registry: Grammar to validate against; the built-in table by default
            source: Original script text, used to quote lines in diagnostics
        """
        self.tokens = tokens
        self.pos = 0
        self.registry = registry if registry is not None else default_registry()
        self.source_lines = source.replace("\r\n", "\n").split("\n") if source else []

    def parse(self) -> Script:
        """
        Parse the whole token list.

        Returns:
            Script with top-level items in textual order

        Raises:
            ParseError: On the first grammar violation
            ValidationError: On the first rejected modifier
        """
        items: list[ScriptItem] = []
        while not self._check(TokenType.EOF):
            if self._match(TokenType.NEWLINE):
                continue
            if self._check(TokenType.INDENT):
                raise self._error(
                    "Unexpected indentation; only the steps of a CHAIN block are indented",
                    self._peek(),
                )
            if self._check(TokenType.DEDENT):
                raise self._error("Unexpected dedent", self._peek())
            items.append(self._parse_statement(in_chain=False, step_index=None))
        return Script(items)

    # Statements

    def _parse_statement(self, in_chain: bool, step_index: int | None) -> ScriptItem:
        header = self._peek()
        if header.type is not TokenType.COMMAND_NAME:
            raise self._error(
                f"Expected a command header such as 'ANALYZE:', found {header.describe()}",
                header,
            )
        self._advance()

        name = header.value
        if name not in self.registry:
            raise self._error(self._unknown_command_message(name), header)
        if not self._match(TokenType.COLON):
            raise self._error(f"Expected ':' after command name '{name}'", self._peek())

        if name == CHAIN_COMMAND:
            return self._parse_chain(header, in_chain)
        return self._parse_invocation(header, in_chain, step_index)

    def _parse_invocation(
        self, header: Token, in_chain: bool, step_index: int | None
    ) -> Invocation:
        name = header.value
        schema = self.registry.get(name)

        input_ref = self._parse_input(header, in_chain, step_index)
        if input_ref is None and schema.requires_input:
            raise self._error(
                f"{name} requires an input: a quoted string, a \"\"\"block\"\"\" or, inside a chain, a reference",
                self._peek(),
            )

        modifiers = self._parse_modifiers(schema, header)
        self._expect_line_end(name)

        return Invocation(
            command_name=name,
            input=input_ref,
            modifiers=modifiers,
            slot_label=schema.label if in_chain else None,
            line=header.line,
            column=header.column,
        )

    def _parse_chain(self, header: Token, in_chain: bool) -> Chain:
        schema = self.registry.get(CHAIN_COMMAND)

        if self._check(*STRING_TOKENS, TokenType.BARE_REFERENCE):
            raise self._error(
                "CHAIN takes no input; its steps follow as an indented block",
                self._peek(),
            )
        self._parse_modifiers(schema, header)
        self._expect_line_end(CHAIN_COMMAND)

        if not self._match(TokenType.INDENT):
            raise self._error(
                "CHAIN block has no steps; indent at least one command below 'CHAIN:'",
                header,
            )

        steps: list[ScriptItem] = []
        while not self._check(TokenType.DEDENT, TokenType.EOF):
            if self._match(TokenType.NEWLINE):
                continue
            if self._check(TokenType.INDENT):
                raise self._error(
                    "Unexpected indentation inside chain; nest a chain with its own 'CHAIN:' header",
                    self._peek(),
                )
            steps.append(self._parse_statement(in_chain=True, step_index=len(steps)))
        self._match(TokenType.DEDENT)

        if not steps:
            raise self._error("CHAIN block has no steps", header)

        return Chain(
            steps=steps,
            slot_label=schema.label if in_chain else None,
            line=header.line,
            column=header.column,
        )

    # Inputs and modifiers

    def _parse_input(
        self, header: Token, in_chain: bool, step_index: int | None
    ) -> InputRef | None:
        parts = []
        while self._check(*STRING_TOKENS):
            parts.append(self._advance().value)
        if parts:
            if self._check(TokenType.BARE_REFERENCE):
                raise self._error(
                    f"Unexpected unquoted text '{self._peek().value}' after quoted input",
                    self._peek(),
                )
            return LiteralInput(parts)

        if not self._check(TokenType.BARE_REFERENCE):
            return None

        token = self._advance()
        if not in_chain:
            raise self._error(
                f"Unquoted input '{token.value}' is only allowed as a reference inside a CHAIN block; quote literal input",
                token,
            )
        if step_index == 0:
            raise self._error(
                f"The first step of a chain needs a quoted input; nothing precedes '{token.value}'",
                token,
            )
        return BindingInput(token.value)

    def _parse_modifiers(
        self, schema: CommandSchema, header: Token
    ) -> dict[str, ModifierValue]:
        """Collect ``--key=value`` pairs (last occurrence wins) and validate them."""
        modifiers: dict[str, ModifierValue] = {}
        contexts: dict[str, ErrorContext] = {}

        while self._check(TokenType.MODIFIER_KEY):
            key_token = self._advance()
            key = normalize_modifier_key(key_token.value)
            if not self._check(TokenType.MODIFIER_VALUE):
                raise self._error(
                    f"Modifier '--{key_token.value}' has no value; expected '--{key_token.value}=value'",
                    key_token,
                )
            value_token = self._advance()
            if not value_token.value.strip():
                raise self._error(
                    f"Modifier '--{key_token.value}' has an empty value", value_token
                )

            modifiers.pop(key, None)
            modifiers[key] = parse_modifier_value(value_token.value)
            contexts[key] = self._context(key_token, command=header.value)

        return validate_modifiers(schema, modifiers, contexts)

    def _expect_line_end(self, name: str) -> None:
        if self._match(TokenType.NEWLINE) or self._check(TokenType.EOF):
            return
        token = self._peek()
        raise self._error(f"Unexpected {token.describe()} in {name} command", token)

    # Token helpers

    def _peek(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.type is not TokenType.EOF:
            self.pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        return self._peek().type in types

    def _match(self, *types: TokenType) -> bool:
        if self._check(*types):
            self._advance()
            return True
        return False

    def _unknown_command_message(self, name: str) -> str:
        message = f"Unknown command '{name}'"
        if name.upper() in self.registry:
            return f"{message}; command names are case-sensitive, did you mean '{name.upper()}'?"
        suggestions = get_close_matches(name.upper(), self.registry.names(), n=1)
        if suggestions:
            return f"{message}; did you mean '{suggestions[0]}'?"
        return message

    def _context(self, token: Token, command: str | None = None) -> ErrorContext:
        source_line = (
            self.source_lines[token.line - 1]
            if 0 < token.line <= len(self.source_lines)
            else None
        )
        return ErrorContext(
            line=token.line,
            column=token.column,
            source_line=source_line,
            command_text=command,
        )

    def _error(self, message: str, token: Token) -> ParseError:
        return ParseError(message, self._context(token))


def parse_script(text: str, registry: GrammarRegistry | None = None) -> Script:
    """
    Tokenize and parse script text.

    Params:
        text: Script source
        registry: Grammar to validate against; the built-in table by default

    Returns:
        Parsed Script

    Raises:
        LexError, ParseError, ValidationError: On the first static error
    """
    tokens = Lexer(text).tokenize()
    return Parser(tokens, registry, source=text).parse()
