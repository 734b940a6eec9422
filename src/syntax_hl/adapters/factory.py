"""Name-to-adapter registries: generic, global (lazy and locked), scoped, and layered."""

from __future__ import annotations

import importlib
import threading
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Literal

from syntax_hl.adapters.base import (
    DEFAULT_BACKEND,
    AdapterConfigurationError,
    SyntaxHighlighter,
)
from syntax_hl.logging import EventSink, make_event, summarize_options

AdapterSource = type[SyntaxHighlighter] | Callable[..., SyntaxHighlighter] | SyntaxHighlighter

EAGER_PROVIDER_MODULES = (
    "syntax_hl.adapters.highlightjs",
    "syntax_hl.adapters.html_pipeline",
)
LAZY_PROVIDER_MODULES = {
    "prettify": "syntax_hl.adapters.prettify",
    "pygments": "syntax_hl.adapters.pygments",
}

_MISSING = object()


@dataclass(slots=True, frozen=True)
class RegistryEntry:
    """Registered adapter: a factory building fresh adapters, or one shared instance."""

    kind: Literal["factory", "instance"]
    target: AdapterSource

    @classmethod
    def wrap(cls, adapter: AdapterSource) -> RegistryEntry:
        """Tag an adapter instance, or any other callable as a factory."""
        if isinstance(adapter, SyntaxHighlighter) or not callable(adapter):
            return cls(kind="instance", target=adapter)
        return cls(kind="factory", target=adapter)

    def build(
        self, name: str, backend: str, options: Mapping[str, object]
    ) -> SyntaxHighlighter:
        """Return a ready adapter for this entry."""
        if self.kind == "factory":
            return self.target(name, backend, options)  # type: ignore[operator]
        return self.target  # type: ignore[return-value]


class Factory:
    """Registers adapters by name and resolves names to adapter instances."""

    label = "factory"

    def __init__(self, event_sink: EventSink | None = None) -> None:
        self._entries: dict[str, RegistryEntry | None] = {}
        self._event_sink = event_sink

    def register(self, adapter: AdapterSource, *names: str) -> None:
        """Bind each name to the adapter; the last registration for a name wins."""
        entry = RegistryEntry.wrap(adapter)
        for name in names:
            self._entries[name] = entry
            self._emit("register", name, entry.kind)

    def resolve(self, name: str) -> RegistryEntry | None:
        """Return the tagged entry registered for a name, or None."""
        return self._entries.get(name)

    def for_name(self, name: str) -> AdapterSource | None:
        """Return the adapter class or instance registered for a name, or None."""
        entry = self.resolve(name)
        if entry is None:
            return None
        return entry.target

    def create(
        self,
        name: str,
        backend: str = DEFAULT_BACKEND,
        options: Mapping[str, object] | None = None,
    ) -> SyntaxHighlighter | None:
        """Resolve a name to a ready adapter; None when nothing is registered."""
        effective_options = options or {}
        entry = self.resolve(name)
        if entry is None:
            self._emit("create", name, "absent")
            return None
        adapter = entry.build(name, backend, effective_options)
        if not getattr(adapter, "name", None):
            raise AdapterConfigurationError(
                f"{type(adapter).__name__} must specify a value for `name`"
            )
        self._emit("create", name, entry.kind, summarize_options(effective_options))
        return adapter

    def names(self) -> tuple[str, ...]:
        """Return names with a live entry in registration order."""
        return tuple(name for name, entry in self._entries.items() if entry is not None)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def _emit(
        self,
        action: str,
        name: str,
        outcome: str,
        metadata: dict[str, object] | None = None,
    ) -> None:
        if self._event_sink is None:
            return
        self._event_sink(make_event(self.label, action, name, outcome, metadata))


ProviderLoader = Callable[[Factory], None]


class GlobalRegistry(Factory):
    """Process-wide registry that lazily loads built-in providers on first lookup.

    Lookups read the shared map without locking first. A miss takes the registry
    lock and checks again before running the provider loader, or writing an
    explicit negative entry for names no provider offers. A loader runs at most
    once per name. Loaders register through this registry while the lock is held.
    """

    label = "global"

    def __init__(
        self,
        providers: Mapping[str, ProviderLoader] | None = None,
        event_sink: EventSink | None = None,
    ) -> None:
        super().__init__(event_sink=event_sink)
        self._providers: Mapping[str, ProviderLoader] = MappingProxyType(dict(providers or {}))
        self._lock = threading.RLock()

    @property
    def provider_names(self) -> tuple[str, ...]:
        """Return names of providers available for lazy loading."""
        return tuple(self._providers.keys())

    def register(self, adapter: AdapterSource, *names: str) -> None:
        """Bind names under the registry lock."""
        with self._lock:
            super().register(adapter, *names)

    def resolve(self, name: str) -> RegistryEntry | None:
        """Return the entry for a name, loading a built-in provider on first use."""
        entry = self._entries.get(name, _MISSING)
        if entry is not _MISSING:
            return entry  # type: ignore[return-value]
        with self._lock:
            entry = self._entries.get(name, _MISSING)
            if entry is not _MISSING:
                return entry  # type: ignore[return-value]
            return self._load_provider(name)

    def _load_provider(self, name: str) -> RegistryEntry | None:
        loader = self._providers.get(name)
        if loader is None:
            self._entries[name] = None
            self._emit("negative_cache", name, "unknown")
            return None
        try:
            loader(self)
        except ImportError as exc:
            self._entries[name] = None
            self._emit("provider_unavailable", name, "import_error", {"error": str(exc)})
            return None
        entry = self._entries.get(name)
        if entry is None:
            self._entries[name] = None
            self._emit("provider_load", name, "unregistered")
            return None
        self._emit("provider_load", name, entry.kind)
        return entry


class ScopedRegistry(Factory):
    """Independent registry without provider loading, optionally pre-seeded.

    Seed values may be ``None`` to shadow a name with an explicit "no adapter".
    Not synchronized.
    """

    label = "scoped"

    def __init__(
        self,
        entries: Mapping[str, AdapterSource | None] | None = None,
        event_sink: EventSink | None = None,
    ) -> None:
        super().__init__(event_sink=event_sink)
        for name, adapter in (entries or {}).items():
            self._entries[name] = None if adapter is None else RegistryEntry.wrap(adapter)


class LayeredFactory(Factory):
    """Scoped registry consulted first, falling back to the global registry.

    Any name present in the scoped map wins, including explicit negative entries.
    Registrations go to the scoped map.
    """

    label = "layered"

    def __init__(
        self,
        scoped: ScopedRegistry,
        fallback: Factory | None = None,
        event_sink: EventSink | None = None,
    ) -> None:
        super().__init__(event_sink=event_sink)
        self._entries = scoped._entries
        self._fallback = fallback

    @property
    def fallback(self) -> Factory:
        """Return the factory consulted for names absent from the scoped map."""
        if self._fallback is None:
            return default_registry()
        return self._fallback

    def resolve(self, name: str) -> RegistryEntry | None:
        """Return the scoped entry when present, else the fallback's resolution."""
        if name in self._entries:
            return self._entries[name]
        return self.fallback.resolve(name)


def register_adapter(factory: Factory, adapter: AdapterSource, *names: str) -> None:
    """Register an adapter for the given names in a factory."""
    factory.register(adapter, *names)


def provider_loader(module_path: str) -> ProviderLoader:
    """Return a loader that imports a provider module and calls its ``register``."""

    def load(factory: Factory) -> None:
        module = importlib.import_module(module_path)
        module.register(factory)

    return load


def build_global_registry(event_sink: EventSink | None = None) -> GlobalRegistry:
    """Build a global registry with eager built-ins and the lazy provider table."""
    registry = GlobalRegistry(
        providers={
            name: provider_loader(module_path)
            for name, module_path in LAZY_PROVIDER_MODULES.items()
        },
        event_sink=event_sink,
    )
    for module_path in EAGER_PROVIDER_MODULES:
        provider_loader(module_path)(registry)
    return registry


_default_registry: GlobalRegistry | None = None
_default_registry_lock = threading.Lock()


def default_registry() -> GlobalRegistry:
    """Return the process-wide registry, building it on first call."""
    global _default_registry
    if _default_registry is None:
        with _default_registry_lock:
            if _default_registry is None:
                _default_registry = build_global_registry()
    return _default_registry
