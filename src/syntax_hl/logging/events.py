"""Structured JSONL event log for registry activity."""

from __future__ import annotations

import json
import threading
from collections.abc import Callable, Mapping
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path


@dataclass(slots=True, frozen=True)
class RegistryEvent:
    """Single registration, resolution, or creation event."""

    timestamp: str
    registry: str
    action: str
    name: str
    outcome: str
    metadata: dict[str, object]


EventSink = Callable[[RegistryEvent], None]


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def make_event(
    registry: str,
    action: str,
    name: str,
    outcome: str,
    metadata: dict[str, object] | None = None,
) -> RegistryEvent:
    """Build an event stamped with the current time."""
    return RegistryEvent(
        timestamp=utc_timestamp(),
        registry=registry,
        action=action,
        name=name,
        outcome=outcome,
        metadata=metadata or {},
    )


def summarize_options(options: Mapping[str, object]) -> dict[str, object]:
    """Reduce an options mapping to log-safe metadata."""
    summary: dict[str, object] = {}
    for key in sorted(options.keys()):
        value = options[key]
        if isinstance(value, (int, float, bool)) or value is None:
            summary[key] = value
            continue
        if isinstance(value, str):
            if key in {"css_mode", "line_numbers", "style", "backend"}:
                summary[key] = value
            else:
                summary[f"{key}_length"] = len(value)
            continue
        if isinstance(value, (list, tuple, set, frozenset)):
            summary[f"{key}_type"] = "list"
            summary[f"{key}_length"] = len(value)
            continue
        if isinstance(value, Mapping):
            summary[f"{key}_type"] = "dict"
            summary[f"{key}_keys"] = sorted(str(k) for k in value.keys())
            continue
        summary[f"{key}_type"] = type(value).__name__
    return summary


class JsonlEventLogger:
    """Append-only JSONL event logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def __call__(self, event: RegistryEvent) -> None:
        self.append(event)

    def append(self, event: RegistryEvent) -> None:
        """Append an event as one JSON object per line."""
        line = json.dumps(asdict(event), sort_keys=True) + "\n"
        with self._lock, self._path.open("a", encoding="utf-8") as handle:
            handle.write(line)

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Read recent events, optionally filtered by timestamp lower bound."""
        if limit < 1:
            return []
        entries: list[dict[str, object]] = []
        if not self._path.exists():
            return entries
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                if since is not None:
                    ts = record.get("timestamp")
                    if not isinstance(ts, str) or ts < since:
                        continue
                entries.append(record)
        if len(entries) <= limit:
            return entries
        return entries[-limit:]
