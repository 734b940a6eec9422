"""Client-side highlighting with Google Code Prettify."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace

from syntax_hl.adapters.base import (
    DEFAULT_BACKEND,
    BaseHighlighter,
    DocinfoLocation,
    FormatOptions,
    SourceNode,
    document_attribute,
)
from syntax_hl.adapters.factory import Factory, register_adapter

PRETTIFY_VERSION = "r298"
DEFAULT_CDN_BASE_URL = "https://cdnjs.cloudflare.com/ajax/libs"
DEFAULT_THEME = "prettify"


class PrettifyAdapter(BaseHighlighter):
    """Leaves highlighting to prettify in the browser."""

    def __init__(
        self,
        name: str,
        backend: str = DEFAULT_BACKEND,
        options: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(name, backend, options)
        self.pre_class = "prettyprint"

    def format(self, node: SourceNode, lang: str | None, options: FormatOptions) -> str:
        """Wrap source, adding ``linenums`` when the block asks for line numbers."""
        if "linenums" in node.attributes:
            caller_transform = options.transform

            def transform(pre: dict[str, str], code: dict[str, str]) -> None:
                pre["class"] = f"{pre['class']} linenums"
                if caller_transform is not None:
                    caller_transform(pre, code)

            options = replace(options, transform=transform)
        return super().format(node, lang, options)

    def has_docinfo(self, location: DocinfoLocation) -> bool:
        return location in {"head", "footer"}

    def docinfo(self, location: DocinfoLocation) -> str:
        """Return the theme link for the head or the runner script for the footer."""
        doc = self.document
        cdn_base_url = self.option_text("cdn_base_url", DEFAULT_CDN_BASE_URL)
        base_url = document_attribute(
            doc, "prettifydir", f"{cdn_base_url}/prettify/{PRETTIFY_VERSION}"
        )
        if location == "head":
            theme = document_attribute(doc, "prettify-theme", DEFAULT_THEME)
            if theme.startswith(("http://", "https://")):
                theme_url = theme
            else:
                theme_url = f"{base_url}/{theme}.min.css"
            slash = self.option_text("self_closing_tag_slash", "")
            return f'<link rel="stylesheet" href="{theme_url}"{slash}>'
        return f'<script src="{base_url}/run_prettify.min.js"></script>'


def register(factory: Factory) -> None:
    """Register the prettify adapter."""
    register_adapter(factory, PrettifyAdapter, "prettify")
