"""Syntax highlighting and language detection, backed by Pygments.

The document core only stores a language name next to raw content; this
module is the external collaborator that turns the pair into markup and
picks a language when the client did not name one. Unknown languages,
formatters and styles fall back instead of failing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pygments import highlight
from pygments.formatters import HtmlFormatter, get_formatter_by_name
from pygments.formatters.other import NullFormatter
from pygments.lexer import Lexer
from pygments.lexers import TextLexer, get_lexer_by_name, guess_lexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

AUTO_LANGUAGE = "auto"
FALLBACK_LANGUAGE = "text"
FALLBACK_STYLE = "default"


@dataclass(frozen=True)
class RenderedDocument:
    formatted: str
    css: Optional[str]
    language: str
    style: str


def _language_name(lexer: Lexer) -> str:
    # First alias round-trips through get_lexer_by_name
    return lexer.aliases[0] if lexer.aliases else lexer.name.lower()


def _lexer_for(language: Optional[str]) -> Lexer:
    if not language:
        return TextLexer()
    try:
        return get_lexer_by_name(language)
    except ClassNotFound:
        return TextLexer()


def detect_language(content: str, requested: Optional[str] = None) -> str:
    """Resolve the language name stored with a document version.

    ``None``, ``""`` and ``"auto"`` trigger content-based detection; any
    other value is looked up by name. Unresolvable values give ``"text"``.
    """
    if requested and requested.lower() != AUTO_LANGUAGE:
        return _language_name(_lexer_for(requested))
    try:
        return _language_name(guess_lexer(content))
    except ClassNotFound:
        return FALLBACK_LANGUAGE


def render(
    content: str,
    language: Optional[str],
    formatter_name: str,
    style_name: Optional[str] = None,
) -> RenderedDocument:
    """Highlight *content* with the named formatter.

    The HTML formatter also produces the stylesheet for the chosen style.
    """
    resolved_style = style_name or FALLBACK_STYLE
    try:
        style = get_style_by_name(resolved_style)
    except ClassNotFound:
        resolved_style = FALLBACK_STYLE
        style = get_style_by_name(FALLBACK_STYLE)

    try:
        formatter = get_formatter_by_name(formatter_name, style=style)
    except ClassNotFound:
        formatter = NullFormatter()

    lexer = _lexer_for(language)
    formatted = highlight(content, lexer, formatter)

    css = None
    if isinstance(formatter, HtmlFormatter):
        css = formatter.get_style_defs(".highlight")

    return RenderedDocument(
        formatted=formatted,
        css=css,
        language=_language_name(lexer),
        style=resolved_style,
    )
