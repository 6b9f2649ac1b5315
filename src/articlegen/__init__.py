from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version

from articlegen.errors import (
    ArticlegenConfigError,
    ArticlegenError,
    ArticlegenGenerationError,
    ArticlegenInputError,
)
from articlegen.prompting import ArticleRequest
from articlegen.render import MarkdownRenderer, RenderStyles, render_markdown


def _package_version() -> str:
    try:
        return version("articlegen")
    except PackageNotFoundError:
        # Running from a source checkout, or otherwise not installed.
        return "0.0.0"


__version__ = _package_version()

__all__ = [
    "ArticleRequest",
    "ArticlegenConfigError",
    "ArticlegenError",
    "ArticlegenGenerationError",
    "ArticlegenInputError",
    "MarkdownRenderer",
    "RenderStyles",
    "__version__",
    "render_markdown",
]
