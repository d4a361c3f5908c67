"""Tests for the Anthropic-backed completion capability."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import anthropic
import httpx
import pytest

from clipnote.chat.completion import AnthropicCompletion, CompletionError
from clipnote.config import LLMConfig


def _mock_response(*texts: str) -> MagicMock:
    blocks = []
    for text in texts:
        block = MagicMock()
        block.type = "text"
        block.text = text
        blocks.append(block)
    response = MagicMock()
    response.content = blocks
    return response


def test_returns_first_text_block() -> None:
    mock_client = MagicMock()
    mock_client.messages.create = MagicMock(return_value=_mock_response("The answer.", "ignored"))

    with (
        patch("clipnote.chat.completion.anthropic.Anthropic", return_value=mock_client),
        patch.dict("os.environ", {"ANTHROPIC_API_KEY": "test-key"}),
    ):
        text = AnthropicCompletion(LLMConfig(model="test-model"))("prompt")

    assert text == "The answer."
    kwargs = mock_client.messages.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["messages"] == [{"role": "user", "content": "prompt"}]


def test_missing_api_key() -> None:
    with patch.dict("os.environ", {}, clear=True):
        with pytest.raises(CompletionError, match="ANTHROPIC_API_KEY"):
            AnthropicCompletion(LLMConfig())("prompt")


def test_empty_response() -> None:
    mock_client = MagicMock()
    mock_client.messages.create = MagicMock(return_value=_mock_response())
    with (
        patch("clipnote.chat.completion.anthropic.Anthropic", return_value=mock_client),
        patch.dict("os.environ", {"ANTHROPIC_API_KEY": "test-key"}),
    ):
        with pytest.raises(CompletionError, match="no text"):
            AnthropicCompletion(LLMConfig())("prompt")


def test_api_error_wrapped() -> None:
    request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
    mock_client = MagicMock()
    mock_client.messages.create = MagicMock(side_effect=anthropic.APIConnectionError(request=request))
    with (
        patch("clipnote.chat.completion.anthropic.Anthropic", return_value=mock_client),
        patch.dict("os.environ", {"ANTHROPIC_API_KEY": "test-key"}),
    ):
        with pytest.raises(CompletionError, match="Anthropic API error"):
            AnthropicCompletion(LLMConfig())("prompt")
