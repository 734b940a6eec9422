from __future__ import annotations

import json
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from syntax_hl.adapters import BaseHighlighter, GlobalRegistry
from syntax_hl.logging import JsonlEventLogger, make_event, summarize_options


def test_registry_events_are_written_as_jsonl(tmp_path: Path) -> None:
    logger = JsonlEventLogger(path=tmp_path / "logs" / "registry.jsonl")
    registry = GlobalRegistry(event_sink=logger)

    registry.register(BaseHighlighter, "plain")
    registry.create("plain", options={"style": "monokai", "doc": object()})
    registry.for_name("nope")

    lines = logger.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 3
    event = json.loads(lines[1])
    assert set(event.keys()) == {"action", "metadata", "name", "outcome", "registry", "timestamp"}
    assert event["registry"] == "global"
    assert event["action"] == "create"
    assert event["name"] == "plain"
    assert event["metadata"] == {"doc_type": "object", "style": "monokai"}
    assert json.loads(lines[2])["action"] == "negative_cache"


def test_read_filters_by_timestamp_and_limit(tmp_path: Path) -> None:
    logger = JsonlEventLogger(path=tmp_path / "events.jsonl")
    for index in range(5):
        logger.append(make_event("scoped", "register", f"name-{index}", "factory"))
    with logger.path.open("a", encoding="utf-8") as handle:
        handle.write("not json\n\n")

    recent = logger.read(limit=2)

    assert [entry["name"] for entry in recent] == ["name-3", "name-4"]
    assert logger.read(since="9999") == []
    assert logger.read(limit=0) == []
    assert len(logger.read()) == 5


def test_concurrent_appends_keep_one_event_per_line(tmp_path: Path) -> None:
    logger = JsonlEventLogger(path=tmp_path / "events.jsonl")
    workers = 8
    per_worker = 50
    barrier = threading.Barrier(workers)

    def emit(worker: int) -> None:
        barrier.wait()
        for index in range(per_worker):
            logger(make_event("global", "create", f"w{worker}-{index}", "factory"))

    with ThreadPoolExecutor(max_workers=workers) as pool:
        list(pool.map(emit, range(workers)))

    lines = logger.path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == workers * per_worker
    names = {json.loads(line)["name"] for line in lines}
    assert len(names) == workers * per_worker
    assert len(logger.read(limit=workers * per_worker)) == workers * per_worker


def test_read_missing_log_returns_empty_list(tmp_path: Path) -> None:
    logger = JsonlEventLogger(path=tmp_path / "never-written.jsonl")

    assert logger.read() == []


def test_summarize_options_keeps_enums_and_hides_free_text() -> None:
    summary = summarize_options(
        {
            "css_mode": "inline",
            "stylesdir": "/private/path",
            "linkcss": True,
            "callouts": {1: ["<1>"]},
            "highlight_lines": [1, 2],
        }
    )

    assert summary == {
        "callouts_keys": ["1"],
        "callouts_type": "dict",
        "css_mode": "inline",
        "highlight_lines_length": 2,
        "highlight_lines_type": "list",
        "linkcss": True,
        "stylesdir_length": 13,
    }
