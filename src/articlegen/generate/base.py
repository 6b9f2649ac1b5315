from __future__ import annotations

from abc import ABC, abstractmethod

from articlegen.prompting import ArticlePrompt


class GeneratorBackend(ABC):
    name: str = "backend"

    @property
    def requires_credential(self) -> bool:
        """Whether submissions through this backend need an API key."""
        return True

    @abstractmethod
    async def generate_article(self, prompt: ArticlePrompt, *, api_key: str) -> str:
        """Send `prompt` upstream once and return the article as markdown."""
