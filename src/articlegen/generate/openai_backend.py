from __future__ import annotations

import logging
from typing import Any

from articlegen.config import LLMConfig
from articlegen.errors import ArticlegenConfigError
from articlegen.generate.base import GeneratorBackend
from articlegen.generate.shared import strip_markdown_fences
from articlegen.prompting import ArticlePrompt

logger = logging.getLogger("articlegen.generate.openai")


class OpenAIBackend(GeneratorBackend):
    """Article generation via the OpenAI chat completions API.

    `llm.base_url` points the client at any OpenAI-compatible endpoint.
    """

    name = "openai"

    def __init__(self, llm: LLMConfig) -> None:
        self._model = llm.model
        self._base_url = llm.base_url

        # The SDK is only imported by this backend.
        try:
            from openai import AsyncOpenAI
        except ImportError as e:
            raise ArticlegenConfigError(
                "The 'openai' package is required for provider='openai'. "
                "Install it with: pip install openai"
            ) from e

        self._client_cls: Any = AsyncOpenAI

    def _client(self, api_key: str) -> Any:
        if self._base_url:
            return self._client_cls(api_key=api_key, base_url=self._base_url)
        return self._client_cls(api_key=api_key)

    def _render_messages(self, prompt: ArticlePrompt) -> list[dict[str, str]]:
        return [
            {"role": "system", "content": prompt.system},
            {"role": "user", "content": prompt.user},
        ]

    async def _call_openai(self, messages: list[dict[str, str]], *, api_key: str) -> str:
        """Single chat completions call; errors propagate to the caller."""
        logger.debug("OpenAI request: model=%s base_url=%s", self._model, self._base_url)
        resp: Any = await self._client(api_key).chat.completions.create(
            model=self._model,
            messages=messages,
        )
        content = resp.choices[0].message.content
        if not isinstance(content, str) or not content.strip():
            raise RuntimeError("OpenAI returned empty content.")
        return content

    async def generate_article(self, prompt: ArticlePrompt, *, api_key: str) -> str:
        messages = self._render_messages(prompt)
        raw = await self._call_openai(messages, api_key=api_key)
        return strip_markdown_fences(raw)
