"""Server-side highlighting delegated to Pygments.

Loaded lazily by the global registry; an environment without Pygments installed
resolves the ``pygments`` name to no adapter.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from pathlib import Path

from pygments import highlight as pygments_highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.lexers.special import TextLexer
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from syntax_hl.adapters.base import (
    DEFAULT_BACKEND,
    BaseHighlighter,
    DocinfoLocation,
    DocumentLike,
    FormatOptions,
    HighlightOptions,
    SourceNode,
    document_attribute,
)
from syntax_hl.adapters.factory import Factory, register_adapter

DEFAULT_STYLE = "default"
TOKEN_CLASS_PREFIX = "tok-"
STYLESHEET_SCOPE = ".pygments"


class PygmentsAdapter(BaseHighlighter):
    """Highlights source during conversion using Pygments lexers and styles."""

    def __init__(
        self,
        name: str,
        backend: str = DEFAULT_BACKEND,
        options: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(name, backend, options)
        self._style = resolve_style(document_attribute(self.document, "pygments-style", ""))
        self._requires_stylesheet = False
        self._inline_background: str | None = None

    @property
    def style(self) -> str:
        """Return the style used by the most recent highlight."""
        return self._style

    def highlights(self) -> bool:
        return True

    def highlight(
        self,
        node: SourceNode,
        source: str,
        lang: str | None,
        options: HighlightOptions,
    ) -> str | tuple[str, int]:
        """Highlight source line-for-line; table line numbers report their line shift."""
        if options.style:
            self._style = resolve_style(options.style)
        inline_css = options.css_mode != "class"
        if inline_css:
            self._inline_background = get_style_by_name(self._style).background_color
        else:
            self._requires_stylesheet = True
        formatter_options: dict[str, object] = {
            "nowrap": True,
            "classprefix": TOKEN_CLASS_PREFIX,
            "noclasses": inline_css,
            "style": self._style,
        }
        if options.highlight_lines:
            formatter_options["hl_lines"] = sorted(options.highlight_lines)
        lexer = _lexer_for(lang, node)
        highlighted = _strip_added_newline(
            source, pygments_highlight(source, lexer, HtmlFormatter(**formatter_options))
        )
        if options.line_numbers == "inline":
            return _number_lines(source, highlighted, options.start_line_number)
        if options.line_numbers != "table":
            return highlighted
        line_count = source.count("\n") + 1
        numbers = "\n".join(
            str(number)
            for number in range(
                options.start_line_number, options.start_line_number + line_count
            )
        )
        table = (
            '<table class="linenotable"><tbody><tr>'
            f'<td class="linenos gl"><pre class="lineno">{numbers}</pre></td>'
            f'<td class="code"><pre>{highlighted}</pre></td>'
            "</tr></tbody></table>"
        )
        return table, line_count - 1

    def format(self, node: SourceNode, lang: str | None, options: FormatOptions) -> str:
        """Wrap highlighted source, carrying the style background in inline CSS mode."""
        background = self._inline_background
        if background is None:
            return super().format(node, lang, options)
        caller_transform = options.transform

        def transform(pre: dict[str, str], code: dict[str, str]) -> None:
            pre["style"] = f"background: {background}"
            if caller_transform is not None:
                caller_transform(pre, code)

        return super().format(node, lang, replace(options, transform=transform))

    def has_docinfo(self, location: DocinfoLocation) -> bool:
        """Class-mode output needs its stylesheet referenced from the footer."""
        return self._requires_stylesheet and location == "footer"

    def docinfo(self, location: DocinfoLocation) -> str:
        """Return a stylesheet link when CSS is linked, else the stylesheet inline."""
        _ = location
        if self.options.get("linkcss"):
            stylesdir = self.option_text("stylesdir", "")
            href = stylesheet_basename(self._style)
            if stylesdir:
                href = f"{stylesdir.rstrip('/')}/{href}"
            slash = self.option_text("self_closing_tag_slash", "")
            return f'<link rel="stylesheet" href="{href}"{slash}>'
        return f"<style>\n{read_stylesheet(self._style)}\n</style>"

    def writes_stylesheet(self, doc: DocumentLike) -> bool:
        _ = doc
        return self._requires_stylesheet

    def write_stylesheet(self, doc: DocumentLike, to_dir: str) -> None:
        """Write ``pygments-<style>.css`` into the stylesheet directory."""
        _ = doc
        target = Path(to_dir) / stylesheet_basename(self._style)
        target.write_text(read_stylesheet(self._style), encoding="utf-8")


def resolve_style(style: str | None) -> str:
    """Return ``style`` when Pygments knows it, else the default style."""
    if not style:
        return DEFAULT_STYLE
    try:
        get_style_by_name(style)
    except ClassNotFound:
        return DEFAULT_STYLE
    return style


def stylesheet_basename(style: str) -> str:
    """Return the stylesheet file name for a style."""
    return f"pygments-{style}.css"


def read_stylesheet(style: str) -> str:
    """Return CSS rules for the token classes emitted in class mode."""
    formatter = HtmlFormatter(style=style, classprefix=TOKEN_CLASS_PREFIX)
    return formatter.get_style_defs(STYLESHEET_SCOPE)


def _lexer_for(lang: str | None, node: SourceNode) -> Lexer:
    lexer_options: dict[str, object] = {"stripnl": False, "ensurenl": False}
    if lang == "php" and "mixed-option" not in node.attributes:
        lexer_options["startinline"] = True
    if lang:
        try:
            return get_lexer_by_name(lang, **lexer_options)
        except ClassNotFound:
            pass
    return TextLexer(**lexer_options)


def _strip_added_newline(source: str, highlighted: str) -> str:
    # the formatter terminates the final line even when the source does not
    if source.endswith("\n"):
        return highlighted
    if highlighted.endswith("\n"):
        return highlighted[:-1]
    if highlighted.endswith("\n</span>"):
        return highlighted[: -len("\n</span>")] + "</span>"
    return highlighted


def _number_lines(source: str, highlighted: str, start: int) -> str:
    # a tinted line closes its span after the newline, so the next line opens with it
    line_count = source.count("\n") + (0 if source.endswith("\n") else 1)
    width = len(str(start + line_count - 1))
    lines = highlighted.split("\n")
    for index in range(min(line_count, len(lines))):
        closing, rest = "", lines[index]
        if rest.startswith("</span>"):
            closing, rest = "</span>", rest[len("</span>") :]
        number = str(start + index).rjust(width)
        lines[index] = f'{closing}<span class="linenos">{number}</span>{rest}'
    return "\n".join(lines)


def register(factory: Factory) -> None:
    """Register the Pygments adapter."""
    register_adapter(factory, PygmentsAdapter, "pygments")
