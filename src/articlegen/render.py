"""Markdown → HTML fragment renderer.

A best-effort formatter for the small markdown subset that generated articles
use: headings (levels 1-3), bullet and numbered list items, bold, italic and
paragraphs. It is a fixed sequence of regex rewrites, not a markdown parser.
Each rule sees the output of the previous one, so rule order is behavior.

No escaping is performed: raw HTML in the source passes through untouched.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, fields

Replacement = str | Callable[[re.Match[str]], str]


@dataclass(frozen=True, slots=True)
class RenderStyles:
    """`class` attribute values for every tag the renderer emits."""

    h1: str = "text-3xl font-bold text-primary mb-6 mt-8 first:mt-0"
    h2: str = "text-2xl font-semibold text-primary mb-4 mt-6"
    h3: str = "text-xl font-medium text-foreground mb-3 mt-5"
    li: str = "mb-2 text-muted-foreground"
    strong: str = "font-semibold text-foreground"
    em: str = "italic"
    p: str = "mb-4 text-muted-foreground"
    ul: str = "mb-4 ml-6"

    @classmethod
    def plain(cls) -> RenderStyles:
        """Styles that emit bare tags with no `class` attribute."""
        return cls(**{f.name: "" for f in fields(cls)})


@dataclass(frozen=True, slots=True)
class RewriteRule:
    name: str
    pattern: re.Pattern[str]
    replacement: Replacement

    def apply(self, text: str) -> str:
        return self.pattern.sub(self.replacement, text)


def _tag(tag: str, css: str) -> str:
    if not css:
        return f"<{tag}>"
    return f'<{tag} class="{css}">'


def _open(tag: str, css: str) -> str:
    # Replacement templates treat backslashes specially.
    return _tag(tag, css).replace("\\", "\\\\")


# Line terminators are \n, \r, U+2028 and U+2029, not just \n. `_LINE` stands
# in for `.`, and `_BOL`/`_EOL` for multiline `^`/`$`.
_LINE = r"[^\n\r\u2028\u2029]"
_BOL = r"(?:(?<=[\n\r\u2028\u2029])|\A)"
_EOL = r"(?=[\n\r\u2028\u2029]|\Z)"

_LI = r"<li(?:\s[^>]*)?>"
_LIST_RUN_RE = re.compile(
    r"(?P<open><ul(?:\s[^>]*)?>)?"
    rf"(?P<items>{_LI}{_LINE}*?</li>(?:\s*{_LI}{_LINE}*?</li>)*)"
    r"(?P<close></ul>)?"
)


def _line_rule(prefix: str) -> re.Pattern[str]:
    return re.compile(rf"{_BOL}{prefix}({_LINE}*){_EOL}")


def _balance_lists(ul_open: str) -> Callable[[re.Match[str]], str]:
    def _sub(m: re.Match[str]) -> str:
        return (m.group("open") or ul_open) + m.group("items") + "</ul>"

    return _sub


def build_rules(styles: RenderStyles | None = None) -> tuple[RewriteRule, ...]:
    """Return the ordered rewrite rules for `styles`."""

    s = styles or RenderStyles()
    li = _open("li", s.li)
    p = _open("p", s.p)
    ul = _open("ul", s.ul)

    return (
        RewriteRule("heading_1", _line_rule(r"# "), _open("h1", s.h1) + r"\1</h1>"),
        RewriteRule("heading_2", _line_rule(r"## "), _open("h2", s.h2) + r"\1</h2>"),
        RewriteRule("heading_3", _line_rule(r"### "), _open("h3", s.h3) + r"\1</h3>"),
        RewriteRule("star_item", _line_rule(r"\* "), li + r"\1</li>"),
        RewriteRule("dash_item", _line_rule(r"- "), li + r"\1</li>"),
        RewriteRule("numbered_item", _line_rule(r"[0-9]+\. "), li + r"\1</li>"),
        # Bold must run first or `**x**` would be eaten by the italic rule.
        RewriteRule(
            "bold",
            re.compile(rf"\*\*({_LINE}*?)\*\*"),
            _open("strong", s.strong) + r"\1</strong>",
        ),
        RewriteRule("italic", re.compile(rf"\*({_LINE}*?)\*"), _open("em", s.em) + r"\1</em>"),
        RewriteRule("paragraph_break", re.compile(r"\n\n"), "</p>" + p),
        # `[h|l]` also matches a literal "|".
        RewriteRule("paragraph_open", re.compile(rf"{_BOL}(?!<[h|l])"), p),
        RewriteRule("unwrap_heading", re.compile(r"</p><p[^>]*>(<h[1-6][^>]*>)"), r"\1"),
        RewriteRule("open_list", re.compile(r"</p><p[^>]*>(<li[^>]*>)"), ul + r"\1"),
        RewriteRule("unwrap_after_item", re.compile(r"(</li>)\s*<p[^>]*>"), r"\1"),
        RewriteRule("close_list", re.compile(r"(</li>\s*</p>)"), "</li></ul>"),
        RewriteRule("balance_lists", _LIST_RUN_RE, _balance_lists(_tag("ul", s.ul))),
    )


class MarkdownRenderer:
    """Render markdown to an HTML fragment by applying `rules` in order.

    Instances hold no mutable state; `render` is a pure function of its input.
    """

    def __init__(self, styles: RenderStyles | None = None) -> None:
        self._styles = styles or RenderStyles()
        self._rules = build_rules(self._styles)

    @property
    def styles(self) -> RenderStyles:
        return self._styles

    @property
    def rules(self) -> tuple[RewriteRule, ...]:
        return self._rules

    def render(self, markdown: str) -> str:
        html = markdown
        for rule in self._rules:
            html = rule.apply(html)
        return html


def render_markdown(markdown: str, *, styles: RenderStyles | None = None) -> str:
    return MarkdownRenderer(styles).render(markdown)
