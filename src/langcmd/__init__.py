"""
LangCmd - a command meta-language for issuing structured directives to LLMs

LangCmd parses scripts of COMMAND: input --modifier=value directives, validates
them against a grammar registry and executes them, threading results through
CHAIN blocks, via a pluggable command handler.
"""

from importlib.metadata import version

from langcmd.diagnostics import Diagnostic
from langcmd.execution import (
    DispatchHandler,
    ExecutionReport,
    Executor,
    ExecutorConfig,
    LLMCommandHandler,
    arun_script,
    run_script,
)
from langcmd.grammar import GrammarRegistry, default_registry
from langcmd.parsing import parse_script

__version__ = version("langcmd")

__all__ = [
    "__version__",
    "parse_script",
    "run_script",
    "arun_script",
    "Executor",
    "ExecutorConfig",
    "ExecutionReport",
    "GrammarRegistry",
    "default_registry",
    "DispatchHandler",
    "LLMCommandHandler",
    "Diagnostic",
]
