"""Chain construction helpers for running a directive against a chat model.

This module assembles LangChain runnable pipelines for a single resolved
invocation. Responsibilities are intentionally limited to:
    - Rendering the command, its modifiers and its input into prompt sections
    - Applying optional structured output binding (Pydantic) when requested

Design notes:
    - Functions return `Runnable` objects rather than executing eagerly so the
        handler can choose between `invoke` and `ainvoke`.
    - The directive input is passed as a template variable, never spliced
        into the template text, so braces in user input are not interpreted.
"""

import json
from collections.abc import Mapping

from langchain_core.output_parsers import StrOutputParser
from langchain_core.prompts import (
    ChatPromptTemplate,
    HumanMessagePromptTemplate,
    SystemMessagePromptTemplate,
)
from langchain_core.rate_limiters import BaseRateLimiter
from langchain_core.runnables import Runnable
from pydantic import BaseModel

from langcmd.core.types import InputValue
from langcmd.core.values import ModifierValue
from langcmd.models import DEFAULT_MODEL_PARAMS, LLMProvider

_llm_provider = LLMProvider(DEFAULT_MODEL_PARAMS)

DEFAULT_SYSTEM_PROMPT = (
    "You execute structured directives. Each directive names a command, "
    "gives its input and lists modifiers that refine how to carry it out. "
    "Follow the modifiers exactly and answer with the result only."
)

INPUT_VARIABLE = "directive_input"


def escape_template(text: str) -> str:
    """Escape braces so text survives f-string style prompt templates."""
    return text.replace("{", "{{").replace("}", "}}")


def render_input(value: InputValue) -> str:
    """Render a resolved directive input as prompt text.

    Params:
        value: String, list of strings (several literal parts) or a structured
            value returned by an earlier step.

    Returns:
        Text block; lists become numbered items, other structures JSON.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, BaseModel):
        return value.model_dump_json(indent=2)
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return "\n".join(f"{i + 1}. {item}" for i, item in enumerate(value))
    return json.dumps(value, indent=2, default=str)


def render_modifiers(modifiers: Mapping[str, ModifierValue]) -> str:
    """Render modifiers as a bullet list (``- key: value``)."""
    return "\n".join(f"- {key}: {value.render()}" for key, value in modifiers.items())


def prepare_chain(
    llm_name: str,
    command_name: str,
    command_description: str,
    modifiers: Mapping[str, ModifierValue],
    prompt_system: str = DEFAULT_SYSTEM_PROMPT,
    structured_output: type[BaseModel] | None = None,
    provider: LLMProvider | None = None,
    rate_limiter: BaseRateLimiter | None = None,
) -> Runnable:
    """
    Assemble a runnable LLM chain for one directive.

    Sections of the human message, in order:
      1. Task: the command name and its description
      2. Modifiers: the validated modifiers (omitted when there are none)
      3. Output: JSON schema of `structured_output` (only when given)
      4. Input: the `directive_input` template variable

    When `structured_output` is provided, the model is bound with LangChain's
    `.with_structured_output()`; otherwise a `StrOutputParser` is appended.

    Params:
        llm_name: Registered model identifier from LLMProvider
        command_name: Command being executed (e.g. ANALYZE)
        command_description: One-line description from the command schema
        modifiers: Validated modifiers of the invocation
        prompt_system: System prompt segment with behavioral instructions
        structured_output: Optional Pydantic model class for the response
        provider: Model provider; the module default when omitted
        rate_limiter: Optional rate limiter passed to the chat model

    Returns:
        A composed `Runnable` expecting a mapping with `directive_input`
    """
    llm = (provider or _llm_provider).get_llm(llm_name, rate_limiter=rate_limiter)
    if structured_output is not None:
        llm = llm.with_structured_output(structured_output)

    task = f"Execute the {command_name} directive."
    if command_description:
        task += f" {command_description}"

    human_message = "".join((
        f"# Task\n\n{escape_template(task)}\n",
        f"\n# Modifiers\n\n{escape_template(render_modifiers(modifiers))}\n" if modifiers else "",
        "\n# Output\n\nRespond with JSON matching this schema:\n\n"
        + escape_template(json.dumps(structured_output.model_json_schema(), indent=2))
        + "\n" if structured_output is not None else "",
        f"\n# Input\n\n{{{INPUT_VARIABLE}}}\n",
    ))
    messages = [
        SystemMessagePromptTemplate.from_template(escape_template(prompt_system)),
        HumanMessagePromptTemplate.from_template(human_message),
    ]
    prompt_template = ChatPromptTemplate.from_messages(messages=messages)
    chain = prompt_template | llm
    if structured_output is None:
        chain = chain | StrOutputParser()
    return chain
