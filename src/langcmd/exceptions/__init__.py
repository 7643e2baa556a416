"""
LangCmd exception classes.

This package provides all exception types used throughout LangCmd for
consistent error handling and reporting.
"""

from langcmd.exceptions.core import (
    BindingError,
    CommandCancelled,
    ErrorContext,
    ErrorKind,
    ErrorLevel,
    ExecutionError,
    LangCmdError,
    LexError,
    ParseError,
    ValidationError,
)

__all__ = [
    "LangCmdError",
    "LexError",
    "ParseError",
    "ValidationError",
    "BindingError",
    "ExecutionError",
    "CommandCancelled",
    "ErrorContext",
    "ErrorKind",
    "ErrorLevel",
]
