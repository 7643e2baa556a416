"""
Shared test fixtures and utilities for the langcmd test suite.
"""

from unittest.mock import patch

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel


class RecordingHandler:
    """Command handler that records every call and returns canned results.

    A result may be a plain value, a callable taking the input, or an
    exception instance to raise.
    """

    def __init__(self, results: dict | None = None):
        self.calls = []
        self.results = results or {}

    def invoke(self, command_name, input, modifiers):
        self.calls.append((command_name, input, dict(modifiers)))
        result = self.results.get(command_name, f"{command_name.lower()}({input})")
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(input)
        return result

    @property
    def commands(self) -> list[str]:
        return [call[0] for call in self.calls]


@pytest.fixture
def recording_handler():
    return RecordingHandler()


@pytest.fixture
def mock_llm_provider():
    """Patch the module level LLM provider with a fake chat model.

    The fake model answers with "R1", then "R2", preventing API calls
    during tests.

    Usage:
        def test_something(mock_llm_provider):
            ...
    """
    fake_llm = FakeListChatModel(responses=["R1", "R2"])

    with patch("langcmd.chains._llm_provider") as mock_provider:
        mock_provider.get_llm.return_value = fake_llm
        mock_provider.list_models.return_value = ["default", "reasoning", "fast"]
        yield mock_provider
