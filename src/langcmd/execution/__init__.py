"""
LangCmd execution components.

This package provides the executor that runs parsed scripts, the result
table and binding resolver used inside chains, and the command handler
collaborators the executor dispatches to.
"""

from langcmd.execution.binding import (
    FILLER_WORDS,
    BindingResolver,
    ResultTable,
    SlotEntry,
)
from langcmd.execution.executor import (
    ChainRun,
    ChainState,
    ExecutionReport,
    Executor,
    ExecutorConfig,
    ItemReport,
    ItemStatus,
    arun_script,
    run_script,
)
from langcmd.execution.handlers import CommandHandler, DispatchHandler, LLMCommandHandler

__all__ = [
    "BindingResolver",
    "ResultTable",
    "SlotEntry",
    "FILLER_WORDS",
    "ChainRun",
    "ChainState",
    "ExecutionReport",
    "Executor",
    "ExecutorConfig",
    "ItemReport",
    "ItemStatus",
    "run_script",
    "arun_script",
    "CommandHandler",
    "DispatchHandler",
    "LLMCommandHandler",
]
