"""
Executor for parsed LangCmd scripts.

Top-level items run in textual order (or concurrently on the async path).
A chain is a strictly sequential pipeline: each step's input is resolved,
the handler is invoked, and the result is stored in the chain's ResultTable
under the step's slot label before the next step starts.

Chain state machine:

    PENDING -> RUNNING(i) -> RUNNING(i+1) -> ... -> COMPLETED
                    \\-> ABORTED (handler failure, binding failure, cancellation)

Runtime errors abort only their own chain or top-level invocation; other
items keep their results.
"""

import asyncio
import logging
import threading
from enum import Enum

from attrs import Factory, define, frozen

from langcmd.core.types import InputValue, ResultValue
from langcmd.diagnostics import Diagnostic, exit_code_for
from langcmd.exceptions import (
    CommandCancelled,
    ErrorContext,
    ExecutionError,
    LangCmdError,
)
from langcmd.execution.binding import BindingResolver, ResultTable, SlotEntry
from langcmd.execution.handlers import CommandHandler
from langcmd.grammar.registry import GrammarRegistry
from langcmd.parsing.ast import Chain, Invocation, LiteralInput, Script, ScriptItem
from langcmd.parsing.parser import parse_script

logger = logging.getLogger(__name__)


class ChainState(Enum):
    """Lifecycle state of a chain run."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


class ItemStatus(Enum):
    """Outcome of a top-level script item."""

    COMPLETED = "completed"
    ABORTED = "aborted"
    SKIPPED = "skipped"


@frozen
class ExecutorConfig:
    """
    Executor settings.

    Params:
        concurrent: Dispatch independent top-level items concurrently (async path)
        step_timeout: Seconds allowed per handler call (async path), None for no limit
        stop_on_error: Skip top-level items after the first failed one
    """

    concurrent: bool = True
    step_timeout: float | None = None
    stop_on_error: bool = False


@define
class ChainRun:
    """Mutable state of one chain while it executes."""

    chain: Chain
    table: ResultTable = Factory(ResultTable)
    state: ChainState = ChainState.PENDING
    step_index: int | None = None
    error: LangCmdError | None = None
    nested_steps: tuple[SlotEntry, ...] = ()

    def start(self) -> None:
        self._require(ChainState.PENDING)
        self.state = ChainState.RUNNING

    def advance(self, step_index: int) -> None:
        self._require(ChainState.RUNNING)
        self.step_index = step_index

    def complete(self) -> None:
        self._require(ChainState.RUNNING)
        self.state = ChainState.COMPLETED

    def abort(self, error: LangCmdError) -> None:
        self._require(ChainState.RUNNING)
        self.state = ChainState.ABORTED
        self.error = error

    @property
    def result(self) -> ResultValue:
        entry = self.table.last()
        return entry.value if entry is not None else None

    def release(self) -> tuple[SlotEntry, ...]:
        """Hand out the table's entries and drop the table contents."""
        entries = self.table.entries()
        self.table.clear()
        return entries

    def _require(self, state: ChainState) -> None:
        if self.state is not state:
            raise RuntimeError(
                f"Invalid chain transition from {self.state.value} (expected {state.value})"
            )


@frozen
class ItemReport:
    """
    Outcome of one top-level item.

    Params:
        position: Index of the item in the script
        node: The Invocation or Chain that ran
        status: COMPLETED, ABORTED or SKIPPED
        result: Final value (the last step's result for a chain)
        steps: Slot entries produced by a chain, partial when aborted
        failed_step: Index of the failing chain step, if aborted inside a chain
        error: The runtime error that aborted the item
        nested_steps: Partial entries of a nested chain that aborted at
            failed_step, outermost nesting level first
    """

    position: int
    node: ScriptItem
    status: ItemStatus
    result: ResultValue = None
    steps: tuple[SlotEntry, ...] = ()
    failed_step: int | None = None
    error: LangCmdError | None = None
    nested_steps: tuple[SlotEntry, ...] = ()

    @property
    def command_name(self) -> str:
        return self.node.command_name

    @property
    def slots(self) -> dict[str, ResultValue]:
        return {entry.label: entry.value for entry in self.steps}

    @classmethod
    def from_chain_run(cls, position: int, run: ChainRun) -> "ItemReport":
        completed = run.state is ChainState.COMPLETED
        result = run.result if completed else None
        return cls(
            position=position,
            node=run.chain,
            status=ItemStatus.COMPLETED if completed else ItemStatus.ABORTED,
            result=result,
            steps=run.release(),
            failed_step=None if completed else run.step_index,
            error=run.error,
            nested_steps=run.nested_steps,
        )


@frozen
class ExecutionReport:
    """Results of a whole script run, plus the first fatal error if any."""

    items: tuple[ItemReport, ...] = ()
    diagnostic: Diagnostic | None = None

    @classmethod
    def from_items(cls, items: list[ItemReport]) -> "ExecutionReport":
        first_error = next((item.error for item in items if item.error is not None), None)
        diagnostic = Diagnostic.from_error(first_error) if first_error is not None else None
        return cls(tuple(items), diagnostic)

    @classmethod
    def static_failure(cls, error: LangCmdError) -> "ExecutionReport":
        return cls((), Diagnostic.from_error(error))

    @property
    def ok(self) -> bool:
        return self.diagnostic is None

    @property
    def exit_code(self) -> int:
        return exit_code_for(self.diagnostic)

    @property
    def outputs(self) -> list[ResultValue]:
        """Result of every top-level item in textual order (None if it did not complete)."""
        return [item.result for item in self.items]

    @property
    def errors(self) -> list[LangCmdError]:
        return [item.error for item in self.items if item.error is not None]


class Executor:
    """Run parsed scripts against a command handler.

    The handler is supplied at construction and used for every invocation of
    every run; the executor holds no other state between runs.
    """

    def __init__(
        self,
        handler: CommandHandler,
        config: ExecutorConfig | None = None,
        resolver: BindingResolver | None = None,
    ):
        self.handler = handler
        self.config = config or ExecutorConfig()
        self.resolver = resolver or BindingResolver()

    # Synchronous execution

    def run(self, script: Script, cancel_event: threading.Event | None = None) -> ExecutionReport:
        """
        Execute all top-level items in textual order.

        Params:
            script: Parsed script
            cancel_event: Optional signal; once set, running chains abort
                before their next step

        Returns:
            ExecutionReport with one ItemReport per top-level item
        """
        reports = []
        failed = False
        for position, item in enumerate(script.items):
            if failed and self.config.stop_on_error:
                reports.append(ItemReport(position, item, ItemStatus.SKIPPED))
                continue
            report = self._run_item(position, item, cancel_event)
            failed = failed or report.status is ItemStatus.ABORTED
            reports.append(report)
        return ExecutionReport.from_items(reports)

    def _run_item(
        self, position: int, item: ScriptItem, cancel_event: threading.Event | None
    ) -> ItemReport:
        if isinstance(item, Chain):
            return ItemReport.from_chain_run(position, self._execute_chain(item, cancel_event))

        try:
            self._check_cancelled(cancel_event, item, None)
            value = self._call_handler(item, self._resolve_input(item, ResultTable(), 0), None)
        except LangCmdError as error:
            logger.warning("%s at line %d failed: %s", item.command_name, item.line, error.message)
            return ItemReport(position, item, ItemStatus.ABORTED, error=error)
        return ItemReport(position, item, ItemStatus.COMPLETED, result=value)

    def _execute_chain(self, chain: Chain, cancel_event: threading.Event | None) -> ChainRun:
        run = ChainRun(chain)
        run.start()
        logger.debug("Chain at line %d started with %d steps", chain.line, len(chain))

        for index, step in enumerate(chain.steps):
            run.advance(index)
            try:
                self._check_cancelled(cancel_event, step, index)
                if isinstance(step, Chain):
                    value = self._nested_result(run, self._execute_chain(step, cancel_event))
                else:
                    value = self._call_handler(
                        step, self._resolve_input(step, run.table, index), index
                    )
            except LangCmdError as error:
                run.abort(error)
                self._log_abort(chain, index, error)
                return run
            run.table.store(index, step.slot_label, step.command_name, value)

        run.complete()
        logger.info("Chain at line %d completed", chain.line)
        return run

    def _call_handler(
        self, step: Invocation, value: InputValue, index: int | None
    ) -> ResultValue:
        logger.debug("Dispatching %s from line %d", step.command_name, step.line)
        try:
            return self.handler.invoke(step.command_name, value, dict(step.modifiers))
        except ExecutionError:
            raise
        except Exception as exc:
            raise self._execution_error(step, index, exc) from exc

    # Asynchronous execution

    async def arun(
        self, script: Script, cancel_event: threading.Event | None = None
    ) -> ExecutionReport:
        """
        Execute the script on the running event loop.

        Independent top-level items are gathered concurrently when
        ``config.concurrent`` is set; reports keep textual order either way.
        """
        if self.config.concurrent and not self.config.stop_on_error:
            reports = await asyncio.gather(
                *(
                    self._arun_item(position, item, cancel_event)
                    for position, item in enumerate(script.items)
                )
            )
            return ExecutionReport.from_items(list(reports))

        reports = []
        failed = False
        for position, item in enumerate(script.items):
            if failed and self.config.stop_on_error:
                reports.append(ItemReport(position, item, ItemStatus.SKIPPED))
                continue
            report = await self._arun_item(position, item, cancel_event)
            failed = failed or report.status is ItemStatus.ABORTED
            reports.append(report)
        return ExecutionReport.from_items(reports)

    async def _arun_item(
        self, position: int, item: ScriptItem, cancel_event: threading.Event | None
    ) -> ItemReport:
        if isinstance(item, Chain):
            run = await self._aexecute_chain(item, cancel_event)
            return ItemReport.from_chain_run(position, run)

        try:
            self._check_cancelled(cancel_event, item, None)
            value = await self._acall_handler(
                item, self._resolve_input(item, ResultTable(), 0), None
            )
        except LangCmdError as error:
            logger.warning("%s at line %d failed: %s", item.command_name, item.line, error.message)
            return ItemReport(position, item, ItemStatus.ABORTED, error=error)
        return ItemReport(position, item, ItemStatus.COMPLETED, result=value)

    async def _aexecute_chain(
        self, chain: Chain, cancel_event: threading.Event | None
    ) -> ChainRun:
        run = ChainRun(chain)
        run.start()
        logger.debug("Chain at line %d started with %d steps", chain.line, len(chain))

        for index, step in enumerate(chain.steps):
            run.advance(index)
            try:
                self._check_cancelled(cancel_event, step, index)
                if isinstance(step, Chain):
                    nested = await self._aexecute_chain(step, cancel_event)
                    value = self._nested_result(run, nested)
                else:
                    value = await self._acall_handler(
                        step, self._resolve_input(step, run.table, index), index
                    )
            except LangCmdError as error:
                run.abort(error)
                self._log_abort(chain, index, error)
                return run
            except asyncio.CancelledError:
                # The executor's own task is being cancelled; the caller gets no report.
                if run.state is ChainState.RUNNING:
                    error = CommandCancelled(step.command_name, context=self._context(step, index))
                    run.abort(error)
                    self._log_abort(chain, index, error)
                raise
            run.table.store(index, step.slot_label, step.command_name, value)

        run.complete()
        logger.info("Chain at line %d completed", chain.line)
        return run

    async def _acall_handler(
        self, step: Invocation, value: InputValue, index: int | None
    ) -> ResultValue:
        logger.debug("Dispatching %s from line %d", step.command_name, step.line)
        modifiers = dict(step.modifiers)
        ainvoke = getattr(self.handler, "ainvoke", None)
        timeout = self.config.step_timeout
        try:
            if ainvoke is not None:
                pending = ainvoke(step.command_name, value, modifiers)
            else:
                pending = asyncio.to_thread(
                    self.handler.invoke, step.command_name, value, modifiers
                )
            if timeout is None:
                return await pending
            try:
                return await asyncio.wait_for(pending, timeout)
            except asyncio.TimeoutError:
                raise CommandCancelled(
                    step.command_name,
                    f"step timed out after {timeout:g}s",
                    self._context(step, index),
                ) from None
        except asyncio.CancelledError:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                raise
            # Cancellation raised by the handler itself aborts only this step's item.
            raise CommandCancelled(step.command_name, context=self._context(step, index)) from None
        except ExecutionError:
            raise
        except Exception as exc:
            raise self._execution_error(step, index, exc) from exc

    # Shared helpers

    def _resolve_input(self, step: Invocation, table: ResultTable, index: int) -> InputValue:
        """Literal input as-is; a binding is looked up among earlier steps."""
        if step.input is None:
            return None
        if isinstance(step.input, LiteralInput):
            return step.input.value
        entry = self.resolver.resolve(
            step.input.phrase, table, index, self._context(step, index)
        )
        logger.debug(
            "Bound '%s' to step %d (%s)", step.input.phrase, entry.step_index, entry.label
        )
        return entry.value

    @staticmethod
    def _nested_result(outer: ChainRun, nested: ChainRun) -> ResultValue:
        """Result of a finished nested chain; an abort is re-raised in the outer chain.

        The partial entries of an aborted nested chain move to
        ``outer.nested_steps`` so they survive into the report.
        """
        if nested.state is ChainState.ABORTED:
            outer.nested_steps = nested.release() + nested.nested_steps
            raise nested.error
        result = nested.result
        nested.release()
        return result

    def _check_cancelled(
        self, cancel_event: threading.Event | None, step: ScriptItem, index: int | None
    ) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise CommandCancelled(step.command_name, context=self._context(step, index))

    def _execution_error(
        self, step: Invocation, index: int | None, exc: Exception
    ) -> ExecutionError:
        if isinstance(exc, KeyError) and len(exc.args) == 1:
            # str() of a KeyError is the repr of its argument
            message = str(exc.args[0])
        else:
            message = str(exc) or type(exc).__name__
        return ExecutionError(step.command_name, message, self._context(step, index), cause=exc)

    @staticmethod
    def _context(step: ScriptItem, index: int | None) -> ErrorContext:
        return ErrorContext(
            line=step.line,
            column=step.column,
            command_text=step.command_name,
            step_index=index,
        )

    @staticmethod
    def _log_abort(chain: Chain, index: int, error: LangCmdError) -> None:
        logger.warning(
            "Chain at line %d aborted at step %d: %s", chain.line, index, error.message
        )


def run_script(
    text: str,
    handler: CommandHandler,
    registry: GrammarRegistry | None = None,
    config: ExecutorConfig | None = None,
    cancel_event: threading.Event | None = None,
) -> ExecutionReport:
    """
    Parse and execute script text.

    A static (lex, parse or validation) error stops before any handler call
    and is returned as the report's diagnostic.

    Params:
        text: Script source
        handler: Command handler collaborator
        registry: Grammar; the built-in table by default
        config: Executor settings
        cancel_event: Optional cancellation signal

    Returns:
        ExecutionReport
    """
    try:
        script = parse_script(text, registry)
    except LangCmdError as error:
        logger.info("Script rejected before execution: %s", error.message)
        return ExecutionReport.static_failure(error)
    return Executor(handler, config).run(script, cancel_event)


async def arun_script(
    text: str,
    handler: CommandHandler,
    registry: GrammarRegistry | None = None,
    config: ExecutorConfig | None = None,
    cancel_event: threading.Event | None = None,
) -> ExecutionReport:
    """Async counterpart of run_script."""
    try:
        script = parse_script(text, registry)
    except LangCmdError as error:
        logger.info("Script rejected before execution: %s", error.message)
        return ExecutionReport.static_failure(error)
    return await Executor(handler, config).arun(script, cancel_event)
