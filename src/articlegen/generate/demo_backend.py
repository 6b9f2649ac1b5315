"""Offline backend that fills a canned article template.

Useful for trying the CLI and rendering pipeline without an API key.
"""

from __future__ import annotations

import logging

from articlegen.generate.base import GeneratorBackend
from articlegen.generate.shared import load_prompt, render_template
from articlegen.prompting import ArticlePrompt, ArticleRequest

logger = logging.getLogger("articlegen.generate.demo")


def mock_article(request: ArticleRequest, template: str | None = None) -> str:
    text = template if template is not None else load_prompt("demo_article.md", None)
    mapping = {
        "topic": request.topic.strip(),
        "tone_lower": request.tone.lower(),
        "depth_lower": request.depth.lower(),
        "format_lower": request.format.lower(),
    }
    return render_template(text, mapping).strip()


class DemoBackend(GeneratorBackend):
    name = "demo"

    def __init__(self) -> None:
        self._template = load_prompt("demo_article.md", None)

    @property
    def requires_credential(self) -> bool:
        return False

    async def generate_article(self, prompt: ArticlePrompt, *, api_key: str) -> str:
        logger.debug("Demo article for topic=%r", prompt.request.topic)
        return mock_article(prompt.request, self._template)
