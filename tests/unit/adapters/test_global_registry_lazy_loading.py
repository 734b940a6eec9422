from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from syntax_hl.adapters import (
    BaseHighlighter,
    Factory,
    GlobalRegistry,
    HighlightJsAdapter,
    HtmlPipelineAdapter,
    build_global_registry,
    default_registry,
    register_adapter,
)
from syntax_hl.logging import RegistryEvent


class Provided(BaseHighlighter):
    pass


class CountingLoader:
    def __init__(self, name: str, populate: bool = True) -> None:
        self.name = name
        self.populate = populate
        self.calls = 0

    def __call__(self, factory: Factory) -> None:
        self.calls += 1
        if self.populate:
            register_adapter(factory, Provided, self.name)


def test_known_provider_is_loaded_on_first_lookup() -> None:
    loader = CountingLoader("builtin-x")
    registry = GlobalRegistry(providers={"builtin-x": loader})

    assert loader.calls == 0
    assert registry.for_name("builtin-x") is Provided
    assert loader.calls == 1
    assert registry.for_name("builtin-x") is Provided
    assert loader.calls == 1


def test_created_provider_adapter_takes_lookup_name() -> None:
    registry = GlobalRegistry(providers={"builtin-x": CountingLoader("builtin-x")})

    adapter = registry.create("builtin-x")

    assert isinstance(adapter, Provided)
    assert adapter.name == "builtin-x"


def test_unknown_name_is_negatively_cached() -> None:
    events: list[RegistryEvent] = []
    loader = CountingLoader("builtin-x")
    registry = GlobalRegistry(providers={"builtin-x": loader}, event_sink=events.append)

    assert registry.for_name("nope") is None
    assert registry.for_name("nope") is None

    assert "nope" in registry
    assert loader.calls == 0
    assert [(e.action, e.name) for e in events] == [("negative_cache", "nope")]


def test_provider_that_registers_nothing_is_not_loaded_twice() -> None:
    loader = CountingLoader("nope", populate=False)
    registry = GlobalRegistry(providers={"nope": loader})

    assert registry.for_name("nope") is None
    assert registry.for_name("nope") is None
    assert registry.create("nope") is None
    assert loader.calls == 1


def test_provider_with_missing_dependency_resolves_to_absence() -> None:
    events: list[RegistryEvent] = []
    calls: list[str] = []

    def loader(factory: Factory) -> None:
        _ = factory
        calls.append("load")
        raise ImportError("No module named 'missing_engine'")

    registry = GlobalRegistry(providers={"engine": loader}, event_sink=events.append)

    assert registry.create("engine") is None
    assert registry.for_name("engine") is None
    assert calls == ["load"]
    assert events[0].action == "provider_unavailable"
    assert events[0].metadata == {"error": "No module named 'missing_engine'"}


def test_registered_name_skips_provider_table() -> None:
    loader = CountingLoader("builtin-x")
    registry = GlobalRegistry(providers={"builtin-x": loader})
    override = Provided("override")
    registry.register(override, "builtin-x")

    assert registry.for_name("builtin-x") is override
    assert loader.calls == 0


def test_concurrent_first_lookups_load_provider_exactly_once() -> None:
    workers = 16
    barrier = threading.Barrier(workers)
    load_calls: list[int] = []

    def slow_loader(factory: Factory) -> None:
        load_calls.append(1)
        threading.Event().wait(0.05)
        register_adapter(factory, Provided, "builtin-x")

    registry = GlobalRegistry(providers={"builtin-x": slow_loader})

    def lookup() -> object:
        barrier.wait()
        return registry.for_name("builtin-x")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(lambda _: lookup(), range(workers)))

    assert len(load_calls) == 1
    assert all(result is Provided for result in results)


def test_concurrent_registration_keeps_every_name() -> None:
    registry = GlobalRegistry()
    names = [f"name-{index}" for index in range(64)]

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(lambda name: registry.register(Provided, name), names))

    assert sorted(registry.names()) == sorted(names)


def test_loader_may_register_while_lock_is_held() -> None:
    def nested_loader(factory: Factory) -> None:
        register_adapter(factory, Provided, "builtin-x", "builtin-x-alias")
        assert factory.for_name("builtin-x-alias") is Provided

    registry = GlobalRegistry(providers={"builtin-x": nested_loader})

    assert registry.for_name("builtin-x") is Provided
    assert registry.for_name("builtin-x-alias") is Provided


def test_provider_load_event_is_recorded() -> None:
    events: list[RegistryEvent] = []
    registry = GlobalRegistry(
        providers={"builtin-x": CountingLoader("builtin-x")}, event_sink=events.append
    )

    registry.for_name("builtin-x")

    assert [(e.registry, e.action, e.name, e.outcome) for e in events] == [
        ("global", "register", "builtin-x", "factory"),
        ("global", "provider_load", "builtin-x", "factory"),
    ]


def test_built_global_registry_has_eager_and_lazy_builtins() -> None:
    registry = build_global_registry()

    assert registry.for_name("highlightjs") is HighlightJsAdapter
    assert registry.for_name("highlight.js") is HighlightJsAdapter
    assert registry.for_name("html-pipeline") is HtmlPipelineAdapter
    assert registry.provider_names == ("prettify", "pygments")
    assert "prettify" not in registry


def test_built_global_registry_loads_prettify_lazily() -> None:
    registry = build_global_registry()

    adapter = registry.create("prettify")

    assert adapter is not None
    assert type(adapter).__name__ == "PrettifyAdapter"
    assert "prettify" in registry


def test_default_registry_is_a_process_wide_singleton() -> None:
    assert default_registry() is default_registry()
    assert isinstance(default_registry(), GlobalRegistry)
