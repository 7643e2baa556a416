"""
Chat model configuration for LLM-backed command handlers.

Models are referred to by logical names ("default", "reasoning", "fast") so
scripts and handlers never hard-code a vendor. A name maps to a ModelParam;
the LLMProvider turns that into a LangChain chat model on request.
"""

from collections.abc import Mapping
from enum import Enum
from typing import Any

from attrs import frozen
from langchain_anthropic import ChatAnthropic
from langchain_core.language_models import BaseChatModel
from langchain_core.rate_limiters import BaseRateLimiter, InMemoryRateLimiter
from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_openai import ChatOpenAI
from pydantic import BaseModel, ConfigDict, Field


def make_rate_limiter(calls_per_second: float) -> InMemoryRateLimiter:
    """Token bucket limiter allowing one call at a time at the given rate."""
    return InMemoryRateLimiter(
        requests_per_second=calls_per_second,
        check_every_n_seconds=max(0.1, 1.0 / calls_per_second),
        max_bucket_size=1,
    )


default_rate_limiter = make_rate_limiter(1)


class Provider(Enum):
    anthropic = "anthropic"
    google = "google"
    openai = "openai"


CHAT_MODEL_CLASSES: dict[Provider, type[BaseChatModel]] = {
    Provider.anthropic: ChatAnthropic,
    Provider.google: ChatGoogleGenerativeAI,
    Provider.openai: ChatOpenAI,
}


@frozen
class ModelParam:
    """Constructor settings of one logical model."""

    provider: Provider
    model: str
    temperature: float | None = None
    max_tokens: int | None = None

    def chat_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for the provider's chat class, unset values omitted."""
        kwargs: dict[str, Any] = {"model": self.model}
        if self.temperature is not None:
            kwargs["temperature"] = self.temperature
        if self.max_tokens is not None:
            kwargs["max_tokens"] = self.max_tokens
        return kwargs


class ModelParamSpec(BaseModel):
    """Data form of a ModelParam, e.g. loaded from a settings file."""

    model_config = ConfigDict(extra="forbid")

    provider: Provider
    model: str = Field(min_length=1)
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    max_tokens: int | None = Field(default=None, gt=0)

    def to_param(self) -> ModelParam:
        return ModelParam(self.provider, self.model, self.temperature, self.max_tokens)


DEFAULT_MODEL_PARAMS = {
    "default": ModelParam(Provider.openai, "gpt-4o-mini", temperature=0.0),
    "reasoning": ModelParam(Provider.anthropic, "claude-sonnet-4-5", temperature=0.0),
    "fast": ModelParam(Provider.google, "gemini-2.0-flash", temperature=0.0),
}


class LLMProvider:
    """Factory for the chat models behind LLMCommandHandler.

    Notes:
      - A fresh chat model is built for every directive; nothing is cached.
      - Rate limiting is decided by the caller, per request.
    """

    def __init__(self, model_params: Mapping[str, ModelParam] | None = None):
        self._model_params = dict(model_params or {})

    @classmethod
    def from_data(cls, data: Mapping[str, Mapping[str, Any]]) -> "LLMProvider":
        """Build a provider from plain data such as ``{"default": {"provider": "openai", "model": "gpt-4o-mini"}}``.

        Raises:
            pydantic.ValidationError: On an unknown provider or bad settings.
        """
        return cls(
            {name: ModelParamSpec.model_validate(spec).to_param() for name, spec in data.items()}
        )

    def get_llm(
        self, name: str, rate_limiter: BaseRateLimiter | None = None
    ) -> BaseChatModel:
        """Instantiate the chat model registered under ``name``.

        Params:
            name: Logical model name.
            rate_limiter: Limiter handed to the chat model, if any.

        Raises:
            KeyError: If the model name is not registered.
        """
        params = self.get_params(name)
        chat_class = CHAT_MODEL_CLASSES[params.provider]
        return chat_class(rate_limiter=rate_limiter, **params.chat_kwargs())

    def get_params(self, name: str) -> ModelParam:
        try:
            return self._model_params[name]
        except KeyError:
            raise KeyError(
                f"Unknown model '{name}'. Registered models: {self.list_models()}"
            ) from None

    def list_models(self) -> list[str]:
        return list(self._model_params)

    def set_model(self, name: str, model_params: ModelParam) -> None:
        """Register a model name or point an existing one at new settings."""
        self._model_params[name] = model_params

    def __contains__(self, name: object) -> bool:
        return name in self._model_params
