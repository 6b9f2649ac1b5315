"""Articlegen exception hierarchy.

Keep this module small and dependency-free: it is imported broadly across the
project and by tests.
"""


class ArticlegenError(Exception):
    """Base exception for all articlegen errors."""


class ArticlegenConfigError(ArticlegenError):
    """Raised for invalid user configuration."""


class ArticlegenInputError(ArticlegenError):
    """Raised when a submission is missing required input.

    Carries a short `title` and a longer `description` so the CLI can surface it
    as a notification without re-deriving the wording.
    """

    def __init__(self, title: str, description: str) -> None:
        super().__init__(description)
        self.title = title
        self.description = description


class ArticlegenGenerationError(ArticlegenError):
    """Raised when the upstream generative-content request fails."""
