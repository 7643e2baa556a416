"""
Command handlers: the collaborators that perform a command's actual work.

The executor only needs an object with ``invoke(command_name, input,
modifiers)``. An optional ``ainvoke`` coroutine with the same signature is
used by the async executor path; without it ``invoke`` runs in a worker
thread.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Protocol, runtime_checkable

from langchain_core.rate_limiters import BaseRateLimiter
from langchain_core.runnables import Runnable
from pydantic import BaseModel

from langcmd.chains import DEFAULT_SYSTEM_PROMPT, INPUT_VARIABLE, prepare_chain, render_input
from langcmd.core.types import InputValue, ResultValue
from langcmd.core.values import ModifierValue
from langcmd.grammar.registry import GrammarRegistry, default_registry
from langcmd.models import LLMProvider, default_rate_limiter

logger = logging.getLogger(__name__)

RouteFunction = Callable[[InputValue, Mapping[str, ModifierValue]], ResultValue]
FallbackFunction = Callable[[str, InputValue, Mapping[str, ModifierValue]], ResultValue]


@runtime_checkable
class CommandHandler(Protocol):
    """Interface the executor calls for every invocation."""

    def invoke(
        self,
        command_name: str,
        input: InputValue,
        modifiers: Mapping[str, ModifierValue],
    ) -> ResultValue: ...


class DispatchHandler:
    """Route each command name to a registered callable.

    Route functions receive ``(input, modifiers)``; the optional fallback
    receives ``(command_name, input, modifiers)`` for unrouted commands.
    """

    def __init__(
        self,
        routes: Mapping[str, RouteFunction] | None = None,
        fallback: FallbackFunction | None = None,
    ):
        self._routes: dict[str, RouteFunction] = dict(routes or {})
        self._fallback = fallback

    def register(self, command_name: str, func: RouteFunction | None = None):
        """Register a route; usable directly or as a decorator."""
        if func is not None:
            self._routes[command_name] = func
            return func

        def decorator(route: RouteFunction) -> RouteFunction:
            self._routes[command_name] = route
            return route

        return decorator

    def routes(self) -> list[str]:
        return list(self._routes.keys())

    def invoke(
        self,
        command_name: str,
        input: InputValue,
        modifiers: Mapping[str, ModifierValue],
    ) -> ResultValue:
        route = self._routes.get(command_name)
        if route is not None:
            return route(input, modifiers)
        if self._fallback is not None:
            return self._fallback(command_name, input, modifiers)
        raise KeyError(
            f"No handler registered for {command_name}. Registered commands: {self.routes()}"
        )


class LLMCommandHandler:
    """Perform every command with a chat model through a LangChain runnable.

    Notes:
      - One runnable is assembled per invocation from the command schema and
        the validated modifiers; nothing is cached between calls.
      - Commands listed in `structured_outputs` return Pydantic instances,
        all others return plain strings.
      - `command_models` routes individual commands to another logical model
        (e.g. ANALYZE to "reasoning"); the rest use `llm_name`.
    """

    def __init__(
        self,
        llm_name: str = "default",
        registry: GrammarRegistry | None = None,
        provider: LLMProvider | None = None,
        prompt_system: str = DEFAULT_SYSTEM_PROMPT,
        structured_outputs: Mapping[str, type[BaseModel]] | None = None,
        rate_limiter: BaseRateLimiter | None = default_rate_limiter,
        command_models: Mapping[str, str] | None = None,
    ):
        self.llm_name = llm_name
        self.command_models = dict(command_models or {})
        self.registry = registry if registry is not None else default_registry()
        self.provider = provider
        self.prompt_system = prompt_system
        self.structured_outputs = dict(structured_outputs or {})
        self.rate_limiter = rate_limiter

    def model_for(self, command_name: str) -> str:
        return self.command_models.get(command_name, self.llm_name)

    def build_chain(
        self, command_name: str, modifiers: Mapping[str, ModifierValue]
    ) -> Runnable:
        """Assemble the runnable for one command invocation."""
        schema = self.registry.get(command_name)
        return prepare_chain(
            llm_name=self.model_for(command_name),
            command_name=command_name,
            command_description=schema.description,
            modifiers=modifiers,
            prompt_system=self.prompt_system,
            structured_output=self.structured_outputs.get(command_name),
            provider=self.provider,
            rate_limiter=self.rate_limiter,
        )

    def invoke(
        self,
        command_name: str,
        input: InputValue,
        modifiers: Mapping[str, ModifierValue],
    ) -> ResultValue:
        chain = self.build_chain(command_name, modifiers)
        logger.debug("Invoking %s on model %s", command_name, self.model_for(command_name))
        return chain.invoke({INPUT_VARIABLE: render_input(input)})

    async def ainvoke(
        self,
        command_name: str,
        input: InputValue,
        modifiers: Mapping[str, ModifierValue],
    ) -> ResultValue:
        chain = self.build_chain(command_name, modifiers)
        logger.debug(
            "Invoking %s on model %s (async)", command_name, self.model_for(command_name)
        )
        return await chain.ainvoke({INPUT_VARIABLE: render_input(input)})
