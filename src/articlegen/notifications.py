"""User-facing notifications for submission outcomes and errors.

Keep this module small and dependency-light: it is imported by the CLI layer
and only depends on the error hierarchy.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from articlegen.errors import (
    ArticlegenConfigError,
    ArticlegenGenerationError,
    ArticlegenInputError,
)

Variant = Literal["default", "destructive"]


@dataclass(frozen=True, slots=True)
class Notification:
    title: str
    description: str
    variant: Variant = "default"


ARTICLE_GENERATED = Notification(
    "Article Generated!",
    "Your educational article has been created successfully.",
)


def article_saved(path: Path, *, kind: str = "Markdown") -> Notification:
    return Notification("Article Saved", f"Your article has been saved to {path} as {kind}.")


def notification_for_error(exc: BaseException) -> Notification:
    """Map an exception to the notification shown to the user."""

    if isinstance(exc, ArticlegenInputError):
        return Notification(exc.title, exc.description, "destructive")

    if isinstance(exc, ArticlegenGenerationError):
        detail = (str(exc) or "").strip()
        desc = "Unable to generate the article. Please try again."
        if detail:
            desc = f"{desc} ({detail})"
        return Notification("Generation Failed", desc, "destructive")

    if isinstance(exc, ArticlegenConfigError):
        return Notification("Configuration Error", str(exc), "destructive")

    msg = (str(exc) or repr(exc)).strip()
    return Notification("Unexpected Error", msg, "destructive")


def format_hint(exc: BaseException) -> str | None:
    """Return an actionable hint for a known error, or None."""
    if isinstance(exc, ArticlegenInputError) and exc.title == "API Key Required":
        return "pass --api-key, export the configured api_key_env variable, or use --provider demo"
    if isinstance(exc, ArticlegenConfigError) and "package is required" in str(exc):
        return "install the provider SDK or switch llm.provider in articlegen.toml"
    return None


def format_notification(n: Notification, *, hint: str | None = None) -> str:
    """Format a notification for stderr output."""
    prefix = "error" if n.variant == "destructive" else "ok"
    result = f"{prefix}: {n.title} {n.description}".rstrip()
    if hint:
        result += f"\nhint: {hint}"
    return result


def format_error(exc: BaseException) -> str:
    return format_notification(notification_for_error(exc), hint=format_hint(exc))
