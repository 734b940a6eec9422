"""Conversion-side use of a resolved highlighter."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from syntax_hl.adapters.base import (
    AttributeTransform,
    DocinfoLocation,
    DocumentLike,
    FormatOptions,
    HighlightOptions,
    SourceNode,
    SyntaxHighlighter,
)
from syntax_hl.adapters.factory import Factory
from syntax_hl.config import HighlightConfig


class HighlighterUsageError(RuntimeError):
    """Raised when a capability is requested from an adapter that does not offer it."""


@dataclass(slots=True, frozen=True)
class HighlightResult:
    """Highlighted markup and the number of lines it was shifted by."""

    text: str
    line_shift: int = 0


class HighlightSession:
    """Drives one adapter through a document conversion using effective config."""

    def __init__(self, adapter: SyntaxHighlighter, config: HighlightConfig) -> None:
        self._adapter = adapter
        self._config = config

    @classmethod
    def open(
        cls,
        config: HighlightConfig,
        factory: Factory,
        doc: DocumentLike | None = None,
    ) -> HighlightSession | None:
        """Resolve the configured highlighter; None when none is configured or found."""
        name = config.highlighter.name
        if not name:
            return None
        options = config.adapter_options()
        if doc is not None:
            options["doc"] = doc
        adapter = factory.create(name, config.highlighter.backend, options)
        if adapter is None:
            return None
        return cls(adapter, config)

    @property
    def adapter(self) -> SyntaxHighlighter:
        """Return the adapter this session drives."""
        return self._adapter

    def highlights(self) -> bool:
        """Return True when source blocks are highlighted during conversion."""
        return self._adapter.highlights()

    def highlight_block(
        self,
        node: SourceNode,
        source: str,
        lang: str | None,
        callouts: Mapping[int, list[str]] | None = None,
        highlight_lines: Iterable[int] | None = None,
    ) -> HighlightResult:
        """Highlight one source block with the configured rendering options."""
        if not self._adapter.highlights():
            raise HighlighterUsageError(
                f"Highlighter '{self._adapter.name}' does not highlight during conversion."
            )
        settings = self._config.highlighter
        options = HighlightOptions(
            callouts=callouts,
            css_mode=settings.css_mode,  # type: ignore[arg-type]
            highlight_lines=frozenset(highlight_lines) if highlight_lines else None,
            line_numbers=settings.line_numbers,  # type: ignore[arg-type]
            start_line_number=settings.start_line_number,
            style=settings.style,
        )
        result = self._adapter.highlight(node, source, lang, options)
        if isinstance(result, tuple):
            text, line_shift = result
            return HighlightResult(text=text, line_shift=line_shift)
        return HighlightResult(text=result)

    def format_block(
        self,
        node: SourceNode,
        lang: str | None,
        nowrap: bool = False,
        transform: AttributeTransform | None = None,
    ) -> str:
        """Wrap a processed block in its final markup."""
        return self._adapter.format(node, lang, FormatOptions(nowrap=nowrap, transform=transform))

    def docinfo(self, location: DocinfoLocation) -> str:
        """Return markup for a document slot, or an empty string when there is none."""
        if not self._adapter.has_docinfo(location):
            return ""
        return self._adapter.docinfo(location)

    def write_stylesheet(self, doc: DocumentLike, to_dir: str) -> bool:
        """Write the adapter stylesheet when CSS is both linked and copied."""
        stylesheet = self._config.stylesheet
        if not (stylesheet.linkcss and stylesheet.copycss):
            return False
        if not self._adapter.writes_stylesheet(doc):
            return False
        self._adapter.write_stylesheet(doc, to_dir)
        return True
