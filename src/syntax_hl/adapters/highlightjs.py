"""Client-side highlighting with highlight.js."""

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

HIGHLIGHT_JS_VERSION = "9.18.3"
DEFAULT_CDN_BASE_URL = "https://cdnjs.cloudflare.com/ajax/libs"
DEFAULT_THEME = "github"

_INIT_SCRIPT = """<script>
if (!hljs.initHighlighting.called) {
  hljs.initHighlighting.called = true
  ;[].slice.call(document.querySelectorAll('pre.highlight > code')).forEach(function (el) { hljs.highlightBlock(el) })
}
</script>"""


class HighlightJsAdapter(BaseHighlighter):
    """Leaves highlighting to highlight.js in the browser."""

    def __init__(
        self,
        name: str,
        backend: str = DEFAULT_BACKEND,
        options: Mapping[str, object] | None = None,
    ) -> None:
        super().__init__(name, backend, options)
        self.name = self.pre_class = "highlightjs"

    def format(self, node: SourceNode, lang: str | None, options: FormatOptions) -> str:
        """Wrap source with the ``language-*`` class highlight.js expects."""
        caller_transform = options.transform

        def transform(pre: dict[str, str], code: dict[str, str]) -> None:
            code["class"] = f"language-{lang or 'none'} hljs"
            if caller_transform is not None:
                caller_transform(pre, code)

        return super().format(node, lang, replace(options, transform=transform))

    def has_docinfo(self, location: DocinfoLocation) -> bool:
        """highlight.js contributes a stylesheet to the head and scripts to the footer."""
        return location in {"head", "footer"}

    def docinfo(self, location: DocinfoLocation) -> str:
        """Return the theme link for the head or the loader scripts for the footer."""
        doc = self.document
        cdn_base_url = self.option_text("cdn_base_url", DEFAULT_CDN_BASE_URL)
        base_url = document_attribute(
            doc, "highlightjsdir", f"{cdn_base_url}/highlight.js/{HIGHLIGHT_JS_VERSION}"
        )
        if location == "head":
            theme = document_attribute(doc, "highlightjs-theme", DEFAULT_THEME)
            slash = self.option_text("self_closing_tag_slash", "")
            return f'<link rel="stylesheet" href="{base_url}/styles/{theme}.min.css"{slash}>'
        lines = [f'<script src="{base_url}/highlight.min.js"></script>']
        languages = document_attribute(doc, "highlightjs-languages", "")
        for language in languages.split(","):
            language = language.strip()
            if language:
                lines.append(f'<script src="{base_url}/languages/{language}.min.js"></script>')
        lines.append(_INIT_SCRIPT)
        return "\n".join(lines)


def register(factory: Factory) -> None:
    """Register the highlight.js adapter under its names."""
    register_adapter(factory, HighlightJsAdapter, "highlightjs", "highlight.js")
