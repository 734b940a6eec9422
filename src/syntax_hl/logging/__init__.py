"""Structured logging utilities."""

from .events import (
    EventSink,
    JsonlEventLogger,
    RegistryEvent,
    make_event,
    summarize_options,
    utc_timestamp,
)

__all__ = [
    "EventSink",
    "JsonlEventLogger",
    "RegistryEvent",
    "make_event",
    "summarize_options",
    "utc_timestamp",
]
