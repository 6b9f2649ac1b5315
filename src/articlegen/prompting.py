"""Article request model, required-field validation and prompt assembly."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from articlegen.config import PromptsConfig
from articlegen.errors import ArticlegenInputError
from articlegen.generate.shared import load_prompt, render_template

OptionKind = Literal["tone", "depth", "format"]

# label -> value, in display order.
TONES: dict[str, str] = {
    "Academic": "Academic",
    "Casual": "Casual",
    "Formal": "Formal",
    "Engaging": "Engaging",
}
DEPTHS: dict[str, str] = {
    "Introductory": "Introductory Overview",
    "Intermediate": "Intermediate Detail",
    "Advanced": "Advanced Deep Dive",
}
FORMATS: dict[str, str] = {
    "Blog Post": "Structured Blog Post",
    "Step Guide": "Step-by-Step Guide",
    "FAQ Format": "FAQ Format",
}

OPTIONS: dict[OptionKind, dict[str, str]] = {
    "tone": TONES,
    "depth": DEPTHS,
    "format": FORMATS,
}


@dataclass(frozen=True, slots=True)
class ArticleRequest:
    topic: str = ""
    tone: str = ""
    depth: str = ""
    format: str = ""


@dataclass(frozen=True, slots=True)
class PromptTemplates:
    system: str
    article: str


@dataclass(frozen=True, slots=True)
class ArticlePrompt:
    request: ArticleRequest
    system: str
    user: str


def resolve_option(kind: OptionKind, raw: str | None) -> str:
    """Map a label or value (case-insensitive) to the canonical option value.

    Empty input stays unset (`""`) so validation can report it.
    """

    text = (raw or "").strip()
    if not text:
        return ""
    table = OPTIONS[kind]
    folded = text.casefold()
    for label, value in table.items():
        if folded in (label.casefold(), value.casefold()):
            return value
    choices = ", ".join(table)
    raise ArticlegenInputError(
        "Invalid Option",
        f"Unknown {kind} {text!r}. Choose one of: {choices}.",
    )


def validate_request(
    request: ArticleRequest, credential: str | None, *, require_credential: bool = True
) -> None:
    """Raise ArticlegenInputError if a required field is missing."""

    if not request.topic.strip():
        raise ArticlegenInputError(
            "Topic Required",
            "Please enter a topic or keywords for your article.",
        )

    if not request.tone or not request.depth or not request.format:
        raise ArticlegenInputError(
            "Complete the Form",
            "Please select all options to generate your article.",
        )

    if require_credential and not (credential or "").strip():
        raise ArticlegenInputError(
            "API Key Required",
            "Please provide an API key to generate your article.",
        )


def load_templates(prompts: PromptsConfig | None = None, *, root: Path | None = None) -> PromptTemplates:
    def _override(value: str | None) -> str | None:
        if not value:
            return None
        p = Path(value).expanduser()
        if root is not None and not p.is_absolute():
            p = root / p
        return str(p)

    return PromptTemplates(
        system=load_prompt("system.md", _override(prompts.system if prompts else None)),
        article=load_prompt("article.md", _override(prompts.article if prompts else None)),
    )


def build_prompt(request: ArticleRequest, templates: PromptTemplates) -> ArticlePrompt:
    mapping = {
        "topic": request.topic.strip(),
        "tone": request.tone,
        "depth": request.depth,
        "format": request.format,
    }
    system = render_template(templates.system, mapping).strip() + "\n"
    user = render_template(templates.article, mapping).strip() + "\n"
    return ArticlePrompt(request=request, system=system, user=user)
