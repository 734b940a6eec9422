"""Core highlighter contract, option types, and the default HTML-wrapping adapter."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Literal, Protocol

DEFAULT_BACKEND = "html5"

CssMode = Literal["class", "inline"]
LineNumbers = Literal["table", "inline"]
DocinfoLocation = Literal["head", "footer"]
AttributeTransform = Callable[[dict[str, str], dict[str, str]], None]


class SourceNode(Protocol):
    """Source block handed over by the conversion pipeline."""

    content: str
    attributes: Mapping[str, str]


class DocumentLike(Protocol):
    """Document in which a highlighter is being used."""

    attributes: Mapping[str, str]


class AdapterContractError(NotImplementedError):
    """Raised when an adapter advertises a capability it never implemented."""


class AdapterConfigurationError(ValueError):
    """Raised when a registered adapter cannot be used as configured."""


@dataclass(slots=True, frozen=True)
class HighlightOptions:
    """Options that control server-side highlighting of one source block."""

    callouts: Mapping[int, list[str]] | None = None
    css_mode: CssMode = "class"
    highlight_lines: frozenset[int] | None = None
    line_numbers: LineNumbers | None = None
    start_line_number: int = 1
    style: str | None = None


@dataclass(slots=True, frozen=True)
class FormatOptions:
    """Options that control wrapping of processed source."""

    nowrap: bool = False
    transform: AttributeTransform | None = None


class SyntaxHighlighter:
    """Capability contract implemented by every highlighter adapter.

    An adapter either highlights during conversion (``highlights`` returns True and
    ``highlight`` is implemented) or leaves highlighting to the client and contributes
    markup through ``docinfo``. Predicates default to False; the companion methods
    raise ``AdapterContractError`` until a subclass overrides them.
    """

    def __init__(
        self,
        name: str,
        backend: str = DEFAULT_BACKEND,
        options: Mapping[str, object] | None = None,
    ) -> None:
        self.name = name
        self.pre_class = name
        self.backend = backend
        self.options: Mapping[str, object] = options or {}

    @property
    def document(self) -> DocumentLike | None:
        """Return the document this adapter was created for, when supplied."""
        return self.options.get("doc")  # type: ignore[return-value]

    def option_text(self, key: str, default: str) -> str:
        """Return a string creation option, or ``default`` when unset."""
        value = self.options.get(key)
        if isinstance(value, str):
            return value
        return default

    def highlights(self) -> bool:
        """Return True when this adapter highlights source during conversion."""
        return False

    def highlight(
        self,
        node: SourceNode,
        source: str,
        lang: str | None,
        options: HighlightOptions,
    ) -> str | tuple[str, int]:
        """Return highlighted markup, or markup plus the number of lines it shifted.

        When ``options.callouts`` is set the caller expects the result to keep one
        output line per source line. An adapter that shifts lines must return the
        shift so callouts can be realigned.
        """
        raise self._missing("highlight", "highlights")

    def format(self, node: SourceNode, lang: str | None, options: FormatOptions) -> str:
        """Wrap processed source in preformatted markup."""
        raise AdapterContractError(f"{type(self).__name__} must implement the format method")

    def has_docinfo(self, location: DocinfoLocation) -> bool:
        """Return True when this adapter contributes markup at ``location``."""
        _ = location
        return False

    def docinfo(self, location: DocinfoLocation) -> str:
        """Return markup to insert at ``location`` (head or footer)."""
        raise self._missing("docinfo", "has_docinfo")

    def writes_stylesheet(self, doc: DocumentLike) -> bool:
        """Return True when this adapter wants its stylesheet written to disk."""
        _ = doc
        return False

    def write_stylesheet(self, doc: DocumentLike, to_dir: str) -> None:
        """Write the stylesheet supporting the highlighted output into ``to_dir``."""
        raise self._missing("write_stylesheet", "writes_stylesheet")

    def _missing(self, method: str, predicate: str) -> AdapterContractError:
        return AdapterContractError(
            f"{type(self).__name__} ({self.name!r}) must implement the {method} method "
            f"if the {predicate} method returns True"
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, backend={self.backend!r})"


class BaseHighlighter(SyntaxHighlighter):
    """Adapter base providing the default ``<pre><code>`` wrapping."""

    def format(self, node: SourceNode, lang: str | None, options: FormatOptions) -> str:
        """Wrap node content in ``pre``/``code`` elements carrying the highlight class."""
        class_value = f"{self.pre_class} highlight"
        if options.nowrap:
            class_value = f"{class_value} nowrap"
        if options.transform is not None:
            pre = {"class": class_value}
            code = {"data-lang": lang} if lang else {}
            options.transform(pre, code)
            return (
                f"<pre{render_attributes(pre)}><code{render_attributes(code)}>"
                f"{node.content}</code></pre>"
            )
        lang_attr = f' data-lang="{lang}"' if lang else ""
        return f'<pre class="{class_value}"><code{lang_attr}>{node.content}</code></pre>'


def render_attributes(attributes: Mapping[str, str]) -> str:
    """Serialize attributes in insertion order as ``key="value"`` pairs."""
    return "".join(f' {key}="{value}"' for key, value in attributes.items())


def document_attribute(doc: DocumentLike | None, name: str, default: str) -> str:
    """Return a document attribute value, or ``default`` when unset."""
    if doc is None:
        return default
    value = doc.attributes.get(name)
    if value is None:
        return default
    return value
