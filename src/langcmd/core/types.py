"""
Core type definitions for LangCmd.

This module contains type aliases shared between the parser, the executor
and command handlers.
"""

from typing import Any, Union

# Value handed to a handler as the primary input of a command
InputValue = Union[str, list[str], Any]

# Value returned by a handler; opaque to the engine
ResultValue = Any

GrammarData = dict[str, dict[str, Any]]
