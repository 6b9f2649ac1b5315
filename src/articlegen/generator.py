"""Submission flow: validate, prompt, one upstream call, render, remember key."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from articlegen.credentials import CredentialStore
from articlegen.errors import ArticlegenError, ArticlegenGenerationError
from articlegen.generate.base import GeneratorBackend
from articlegen.prompting import (
    ArticleRequest,
    PromptTemplates,
    build_prompt,
    load_templates,
    validate_request,
)
from articlegen.render import MarkdownRenderer

logger = logging.getLogger("articlegen.generator")


@dataclass(frozen=True, slots=True)
class Article:
    request: ArticleRequest
    markdown: str
    html: str


class ArticleGenerator:
    def __init__(
        self,
        backend: GeneratorBackend,
        *,
        renderer: MarkdownRenderer | None = None,
        templates: PromptTemplates | None = None,
        store: CredentialStore | None = None,
    ) -> None:
        self.backend = backend
        self.renderer = renderer or MarkdownRenderer()
        self.templates = templates or load_templates()
        self.store = store

    async def submit(self, request: ArticleRequest, credential: str | None) -> Article:
        """Generate and render one article.

        Raises ArticlegenInputError before any upstream call when a required
        field is missing, and ArticlegenGenerationError when the upstream call
        fails. Neither path writes the credential store.
        """

        validate_request(
            request, credential, require_credential=self.backend.requires_credential
        )
        api_key = (credential or "").strip()
        prompt = build_prompt(request, self.templates)

        try:
            markdown = await self.backend.generate_article(prompt, api_key=api_key)
        except ArticlegenError:
            raise
        except Exception as e:  # noqa: BLE001
            logger.warning(
                "Article generation via %s failed: %s: %s", self.backend.name, type(e).__name__, e
            )
            raise ArticlegenGenerationError(f"{type(e).__name__}: {e}") from e

        html = self.renderer.render(markdown)

        if self.store is not None and api_key:
            try:
                self.store.save(api_key)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Could not save credential to %s: %s", self.store.path, e)

        return Article(request=request, markdown=markdown, html=html)
