"""Completion capability backed by the Anthropic Messages API."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable

import anthropic

from clipnote.config import LLMConfig

logger = logging.getLogger("clipnote.completion")

CompletionFn = Callable[[str], str]


class CompletionError(Exception):
    """The model could not produce a completion."""


class AnthropicCompletion:
    """Callable prompt -> completion text. Raises CompletionError on any failure."""

    def __init__(self, config: LLMConfig) -> None:
        self._config = config
        self._client: anthropic.Anthropic | None = None

    def _get_client(self) -> anthropic.Anthropic:
        if self._client is None:
            api_key = os.environ.get(self._config.api_key_env, "")
            if not api_key:
                raise CompletionError(f"Missing API key: set {self._config.api_key_env} environment variable")
            self._client = anthropic.Anthropic(api_key=api_key)
        return self._client

    def __call__(self, prompt: str) -> str:
        client = self._get_client()
        logger.info("Requesting completion: model=%s prompt_chars=%d", self._config.model, len(prompt))
        try:
            response = client.messages.create(
                model=self._config.model,
                max_tokens=self._config.max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.APIError as e:
            raise CompletionError(f"Anthropic API error: {e}") from e

        for block in response.content:
            if block.type == "text" and block.text:
                return block.text  # type: ignore[no-any-return]
        raise CompletionError("LLM returned no text content")
