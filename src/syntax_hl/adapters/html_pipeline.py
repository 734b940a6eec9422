"""Markup expected by the html-pipeline syntax highlight filter."""

from __future__ import annotations

from syntax_hl.adapters.base import BaseHighlighter, FormatOptions, SourceNode
from syntax_hl.adapters.factory import Factory, register_adapter


class HtmlPipelineAdapter(BaseHighlighter):
    """Emits bare ``pre``/``code`` with a ``lang`` attribute for downstream highlighting."""

    def format(self, node: SourceNode, lang: str | None, options: FormatOptions) -> str:
        _ = options
        lang_attr = f' lang="{lang}"' if lang else ""
        return f"<pre{lang_attr}><code>{node.content}</code></pre>"


def register(factory: Factory) -> None:
    """Register the html-pipeline adapter."""
    register_adapter(factory, HtmlPipelineAdapter, "html-pipeline")
