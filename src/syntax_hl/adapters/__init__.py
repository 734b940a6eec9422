"""Syntax highlighter adapter contract and registries."""

from .base import (
    DEFAULT_BACKEND,
    AdapterConfigurationError,
    AdapterContractError,
    BaseHighlighter,
    DocumentLike,
    FormatOptions,
    HighlightOptions,
    SourceNode,
    SyntaxHighlighter,
    render_attributes,
)
from .factory import (
    Factory,
    GlobalRegistry,
    LayeredFactory,
    RegistryEntry,
    ScopedRegistry,
    build_global_registry,
    default_registry,
    provider_loader,
    register_adapter,
)
from .highlightjs import HighlightJsAdapter
from .html_pipeline import HtmlPipelineAdapter

__all__ = [
    "DEFAULT_BACKEND",
    "AdapterConfigurationError",
    "AdapterContractError",
    "BaseHighlighter",
    "DocumentLike",
    "Factory",
    "FormatOptions",
    "GlobalRegistry",
    "HighlightJsAdapter",
    "HighlightOptions",
    "HtmlPipelineAdapter",
    "LayeredFactory",
    "RegistryEntry",
    "ScopedRegistry",
    "SourceNode",
    "SyntaxHighlighter",
    "build_global_registry",
    "default_registry",
    "provider_loader",
    "register_adapter",
    "render_attributes",
]
