"""Runtime factory construction."""

from __future__ import annotations

import importlib

from syntax_hl.adapters.base import AdapterConfigurationError
from syntax_hl.adapters.factory import (
    AdapterSource,
    Factory,
    LayeredFactory,
    ScopedRegistry,
    register_adapter,
)
from syntax_hl.config import HighlightConfig
from syntax_hl.logging import EventSink, JsonlEventLogger


def build_factory(
    config: HighlightConfig,
    fallback: Factory | None = None,
    event_sink: EventSink | None = None,
) -> LayeredFactory:
    """Build a layered factory with configured custom adapters over the global registry."""
    sink = event_sink or open_event_logger(config)
    scoped = ScopedRegistry(event_sink=sink)
    for name, spec in sorted(config.custom_adapters.items()):
        register_adapter(scoped, load_adapter_source(spec), name)
    return LayeredFactory(scoped, fallback=fallback, event_sink=sink)


def load_adapter_source(spec: str) -> AdapterSource:
    """Import the adapter class or instance named by a ``module:attribute`` spec."""
    module_path, _, attribute = spec.partition(":")
    if not module_path or not attribute:
        raise AdapterConfigurationError(f"Adapter spec '{spec}' must be 'module:attribute'.")
    module = importlib.import_module(module_path)
    try:
        return getattr(module, attribute)
    except AttributeError as exc:
        raise AdapterConfigurationError(
            f"Module '{module_path}' has no adapter attribute '{attribute}'."
        ) from exc


def open_event_logger(config: HighlightConfig) -> JsonlEventLogger | None:
    """Return the configured event logger, if any."""
    if config.event_log is None:
        return None
    return JsonlEventLogger(path=config.event_log)
