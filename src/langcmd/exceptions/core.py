"""
Exception classes for LangCmd script processing.

This module defines specific exception types for the error conditions that
can occur while lexing, parsing, validating and executing LangCmd scripts.
Every error carries an ErrorContext pointing back at the script source.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorLevel(Enum):
    """Error message detail level for end users vs developers."""

    USER = "user"  # Position and command only
    DEVELOPER = "developer"  # Adds the offending source line with a caret


class ErrorKind(Enum):
    """Diagnostic category of an error, used to select a host exit code."""

    LEX = "lex"
    PARSE = "parse"
    VALIDATION = "validation"
    BINDING = "binding"
    EXECUTION = "execution"

    @property
    def exit_code(self) -> int:
        """Process exit code a host should use for this kind of failure."""
        return _EXIT_CODES[self]


_EXIT_CODES = {
    ErrorKind.LEX: 1,
    ErrorKind.PARSE: 1,
    ErrorKind.VALIDATION: 2,
    ErrorKind.BINDING: 3,
    ErrorKind.EXECUTION: 4,
}


@dataclass
class ErrorContext:
    """
    Context information for error messages.

    Captures where an error occurred in the script text. Supports formatting
    at different detail levels for user-facing vs developer debugging.

    Params:
        line: 1-based line number in the script
        column: 1-based column number in the script
        source_line: Full text of the offending script line
        command_text: Command name the error relates to, if any
        step_index: Chain step index for runtime errors inside a chain
    """

    line: int | None = None
    column: int | None = None
    source_line: str | None = None
    command_text: str | None = None
    step_index: int | None = None

    def format_location(self, error_level: ErrorLevel) -> str:
        """
        Format location information based on error level.

        Params:
            error_level: Whether to show USER or DEVELOPER level details

        Returns:
            Formatted location string with appropriate detail level
        """
        lines = []

        if self.line is not None:
            if self.column is not None:
                lines.append(f"  at line {self.line}, column {self.column}")
            else:
                lines.append(f"  at line {self.line}")

        if self.command_text:
            if self.step_index is not None:
                lines.append(f"  in {self.command_text} (chain step {self.step_index})")
            else:
                lines.append(f"  in {self.command_text}")

        if error_level == ErrorLevel.DEVELOPER and self.source_line is not None:
            lines.append(f"    {self.source_line}")
            if self.column is not None:
                lines.append("    " + " " * (self.column - 1) + "^")

        return "\n".join(lines)


class LangCmdError(Exception):
    """Base exception for all LangCmd errors."""

    kind: ErrorKind = ErrorKind.PARSE

    def __init__(self, message: str, context: ErrorContext | None = None):
        """
        Initialize the exception.

        Params:
            message: Primary error message without location details
            context: ErrorContext with source location information
        """
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(message)

    @property
    def line(self) -> int | None:
        return self.context.line

    @property
    def column(self) -> int | None:
        return self.context.column

    def describe(self, error_level: ErrorLevel = ErrorLevel.USER) -> str:
        """
        Render the message together with its location block.

        Params:
            error_level: Level of detail to show

        Returns:
            Multi-line description suitable for terminal output
        """
        location_info = self.context.format_location(error_level)
        if location_info:
            return f"{self.message}\n{location_info}"
        return self.message


class LexError(LangCmdError):
    """Raised when script text cannot be tokenized (quoting, indentation)."""

    kind = ErrorKind.LEX


class ParseError(LangCmdError):
    """Raised when the token stream does not follow the script grammar."""

    kind = ErrorKind.PARSE


class ValidationError(LangCmdError):
    """Raised when a modifier key or value is not accepted by a command."""

    kind = ErrorKind.VALIDATION

    def __init__(
        self,
        command: str,
        key: str,
        value: Any,
        domain: str,
        context: ErrorContext | None = None,
        reason: str | None = None,
    ):
        """
        Initialize the exception.

        Params:
            command: Command name whose schema rejected the modifier
            key: Offending modifier key (normalized)
            value: Offending modifier value, None for unknown keys
            domain: Human readable description of the accepted domain
            context: ErrorContext with source location information
            reason: Optional override of the default explanation
        """
        self.command = command
        self.key = key
        self.value = value
        self.domain = domain
        if reason is None:
            reason = f"value {value} is outside the accepted domain"
        super().__init__(
            f"Invalid modifier '--{key}' for {command}: {reason}; accepted: {domain}",
            context,
        )


class BindingError(LangCmdError):
    """Raised when a bare reference matches no earlier chain step."""

    kind = ErrorKind.BINDING

    def __init__(
        self,
        phrase: str,
        available_slots: list[str],
        context: ErrorContext | None = None,
    ):
        """
        Initialize the exception.

        Params:
            phrase: The unresolved reference phrase as written
            available_slots: Slot labels that were visible to the reference
            context: ErrorContext with source location information
        """
        self.phrase = phrase
        self.available_slots = list(available_slots)
        available = ", ".join(repr(s) for s in self.available_slots) or "none"
        super().__init__(
            f"Cannot resolve reference '{phrase}'; available slots: {available}",
            context,
        )


class ExecutionError(LangCmdError):
    """Raised when the command handler fails for an invocation."""

    kind = ErrorKind.EXECUTION

    def __init__(
        self,
        command: str,
        message: str,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
    ):
        """
        Initialize the exception.

        Params:
            command: Command name whose handler failed
            message: Handler failure message, surfaced verbatim
            context: ErrorContext with source location information
            cause: Original exception raised by the handler
        """
        self.command = command
        self.cause = cause
        super().__init__(message, context)


class CommandCancelled(ExecutionError):
    """Raised when a running chain is cancelled or a step times out."""

    def __init__(
        self,
        command: str,
        message: str = "execution cancelled",
        context: ErrorContext | None = None,
    ):
        super().__init__(command, message, context)
