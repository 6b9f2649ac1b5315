"""Shared utilities for generation backends."""

from __future__ import annotations

import re
from importlib import resources
from pathlib import Path


_PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")


def render_template(text: str, mapping: dict[str, str]) -> str:
    """Fill `{{name}}` placeholders in one pass.

    Substituted values are never rescanned, so a topic that itself contains
    `{{tone}}` reaches the model verbatim. Unknown names are left as written.
    """

    return _PLACEHOLDER_RE.sub(lambda m: mapping.get(m.group(1), m.group(0)), text)


_FENCE_RE = re.compile(r"^\s*```[a-zA-Z0-9_-]*\s*\n(?P<body>.*)\n\s*```\s*$", re.DOTALL)


def strip_markdown_fences(text: str) -> str:
    """Unwrap a response that arrived as one fenced ```markdown block."""
    m = _FENCE_RE.match(text or "")
    if not m:
        return (text or "").strip()
    return (m.group("body") or "").strip()


def load_prompt(default_name: str, override_path: str | None) -> str:
    """Load a prompt template from the packaged defaults or a user-specified path."""
    if override_path:
        return Path(override_path).read_text(encoding="utf-8")
    p = resources.files("articlegen") / "prompts" / default_name
    return p.read_text(encoding="utf-8")
