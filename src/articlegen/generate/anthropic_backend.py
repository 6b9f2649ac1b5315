from __future__ import annotations

import logging
from typing import Any

from articlegen.config import LLMConfig
from articlegen.errors import ArticlegenConfigError
from articlegen.generate.base import GeneratorBackend
from articlegen.generate.shared import strip_markdown_fences
from articlegen.prompting import ArticlePrompt

logger = logging.getLogger("articlegen.generate.anthropic")


class AnthropicBackend(GeneratorBackend):
    """Article generation using the Anthropic Messages API."""

    name = "anthropic"

    def __init__(self, llm: LLMConfig) -> None:
        self._model = llm.model
        self._max_tokens = llm.max_tokens

        try:
            from anthropic import AsyncAnthropic  # type: ignore[import-untyped]
        except ImportError as e:
            raise ArticlegenConfigError(
                "The 'anthropic' package is required for provider='anthropic'. "
                "Install it with: pip install anthropic"
            ) from e

        self._client_cls: Any = AsyncAnthropic

    async def _call_anthropic(
        self, system: str, messages: list[dict[str, str]], *, api_key: str
    ) -> str:
        """Single Messages API call; errors propagate to the caller."""
        logger.debug("Anthropic request: model=%s", self._model)
        resp: Any = await self._client_cls(api_key=api_key).messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            system=system,
            messages=messages,
        )
        parts = [
            str(block.text)
            for block in (resp.content or [])
            if getattr(block, "type", None) == "text" and hasattr(block, "text")
        ]
        text = "".join(parts)
        if not text.strip():
            raise RuntimeError("Anthropic returned empty content.")
        return text

    async def generate_article(self, prompt: ArticlePrompt, *, api_key: str) -> str:
        messages = [{"role": "user", "content": prompt.user}]
        raw = await self._call_anthropic(prompt.system, messages, api_key=api_key)
        return strip_markdown_fences(raw)
