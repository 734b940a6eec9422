"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path

CONFIG_FILE_NAME = "syntax_hl.toml"
DEFAULT_CDN_BASE_URL = "https://cdnjs.cloudflare.com/ajax/libs"
MAX_START_LINE_NUMBER = 1_000_000

CSS_MODES = ("class", "inline")
LINE_NUMBER_MODES = ("table", "inline")


@dataclass(slots=True, frozen=True)
class HighlighterSettings:
    """Which highlighter to use and how it renders."""

    name: str | None = None
    backend: str = "html5"
    style: str | None = None
    css_mode: str = "class"
    line_numbers: str | None = None
    start_line_number: int = 1


@dataclass(slots=True, frozen=True)
class StylesheetSettings:
    """Stylesheet linking and copying behavior."""

    linkcss: bool = False
    copycss: bool = False
    stylesdir: str = ""


@dataclass(slots=True, frozen=True)
class HighlightConfig:
    """Fully merged highlighting configuration."""

    root: Path
    highlighter: HighlighterSettings
    stylesheet: StylesheetSettings
    cdn_base_url: str
    custom_adapters: dict[str, str] = field(default_factory=dict)
    event_log: Path | None = None

    def adapter_options(self) -> dict[str, object]:
        """Return creation options handed to adapters built from this config."""
        return {
            "cdn_base_url": self.cdn_base_url,
            "linkcss": self.stylesheet.linkcss,
            "stylesdir": self.stylesheet.stylesdir,
        }

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot."""
        return {
            "root": str(self.root),
            "highlighter": {
                "name": self.highlighter.name,
                "backend": self.highlighter.backend,
                "style": self.highlighter.style,
                "css_mode": self.highlighter.css_mode,
                "line_numbers": self.highlighter.line_numbers,
                "start_line_number": self.highlighter.start_line_number,
            },
            "stylesheet": {
                "linkcss": self.stylesheet.linkcss,
                "copycss": self.stylesheet.copycss,
                "stylesdir": self.stylesheet.stylesdir,
            },
            "docinfo": {"cdn_base_url": self.cdn_base_url},
            "registry": {"custom": dict(sorted(self.custom_adapters.items()))},
            "logging": {"event_log": str(self.event_log) if self.event_log else None},
        }


@dataclass(slots=True, frozen=True)
class ConfigOverrides:
    """Optional caller overrides applied at highest precedence."""

    name: str | None = None
    style: str | None = None
    css_mode: str | None = None
    line_numbers: str | None = None
    linkcss: bool | None = None
    copycss: bool | None = None
    event_log: Path | None = None


def default_config(root: Path) -> HighlightConfig:
    """Build default config for a given project root."""
    return HighlightConfig(
        root=root.resolve(),
        highlighter=HighlighterSettings(),
        stylesheet=StylesheetSettings(),
        cdn_base_url=DEFAULT_CDN_BASE_URL,
    )


def load_config_file(root: Path) -> dict[str, object]:
    """Load optional syntax_hl.toml from the project root."""
    config_path = root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def merge_config(
    base: HighlightConfig, payload: dict[str, object], overrides: ConfigOverrides
) -> HighlightConfig:
    """Merge defaults, config file, then caller overrides."""
    highlighter_payload = _get_table(payload, "highlighter")
    stylesheet_payload = _get_table(payload, "stylesheet")
    docinfo_payload = _get_table(payload, "docinfo")
    registry_payload = _get_table(payload, "registry")
    logging_payload = _get_table(payload, "logging")

    highlighter = base.highlighter
    highlighter = replace(
        highlighter,
        name=_optional_str(highlighter_payload, "highlighter", "name", highlighter.name),
        backend=_optional_str(highlighter_payload, "highlighter", "backend", highlighter.backend)
        or highlighter.backend,
        style=_optional_str(highlighter_payload, "highlighter", "style", highlighter.style),
        css_mode=_choice(
            highlighter_payload.get("css_mode"),
            "highlighter.css_mode",
            CSS_MODES,
            highlighter.css_mode,
        ),
        line_numbers=_optional_choice(
            highlighter_payload.get("line_numbers"),
            "highlighter.line_numbers",
            LINE_NUMBER_MODES,
            highlighter.line_numbers,
        ),
        start_line_number=_optional_positive_int_with_cap(
            highlighter_payload.get("start_line_number"),
            "highlighter.start_line_number",
            highlighter.start_line_number,
            MAX_START_LINE_NUMBER,
        ),
    )

    stylesheet = StylesheetSettings(
        linkcss=_optional_bool(
            stylesheet_payload, "stylesheet", "linkcss", base.stylesheet.linkcss
        ),
        copycss=_optional_bool(
            stylesheet_payload, "stylesheet", "copycss", base.stylesheet.copycss
        ),
        stylesdir=_optional_str(
            stylesheet_payload, "stylesheet", "stylesdir", base.stylesheet.stylesdir
        )
        or "",
    )

    cdn_base_url = (
        _optional_str(docinfo_payload, "docinfo", "cdn_base_url", base.cdn_base_url)
        or base.cdn_base_url
    )

    custom_adapters = dict(base.custom_adapters)
    custom_payload = _get_table(registry_payload, "custom")
    for name, spec in custom_payload.items():
        if not isinstance(spec, str) or ":" not in spec:
            raise ValueError(
                f"Config field 'registry.custom.{name}' must be a 'module:attribute' string."
            )
        custom_adapters[name] = spec

    event_log = base.event_log
    raw_event_log = _optional_str(logging_payload, "logging", "event_log", None)
    if raw_event_log is not None:
        event_log = base.root / raw_event_log

    merged = HighlightConfig(
        root=base.root,
        highlighter=highlighter,
        stylesheet=stylesheet,
        cdn_base_url=cdn_base_url,
        custom_adapters=custom_adapters,
        event_log=event_log,
    )
    return apply_overrides(merged, overrides)


def apply_overrides(config: HighlightConfig, overrides: ConfigOverrides) -> HighlightConfig:
    """Apply caller overrides at highest precedence."""
    highlighter = replace(
        config.highlighter,
        name=overrides.name if overrides.name is not None else config.highlighter.name,
        style=overrides.style if overrides.style is not None else config.highlighter.style,
        css_mode=_choice(
            overrides.css_mode, "overrides.css_mode", CSS_MODES, config.highlighter.css_mode
        ),
        line_numbers=_optional_choice(
            overrides.line_numbers,
            "overrides.line_numbers",
            LINE_NUMBER_MODES,
            config.highlighter.line_numbers,
        ),
    )
    stylesheet = replace(
        config.stylesheet,
        linkcss=(
            overrides.linkcss if overrides.linkcss is not None else config.stylesheet.linkcss
        ),
        copycss=(
            overrides.copycss if overrides.copycss is not None else config.stylesheet.copycss
        ),
    )
    event_log = overrides.event_log or config.event_log
    return replace(
        config,
        highlighter=highlighter,
        stylesheet=stylesheet,
        event_log=event_log.resolve() if event_log is not None else None,
    )


def load_effective_config(root: Path, overrides: ConfigOverrides | None = None) -> HighlightConfig:
    """Load effective config using merge order defaults -> config file -> overrides."""
    resolved_root = root.resolve()
    base = default_config(resolved_root)
    payload = load_config_file(resolved_root)
    return merge_config(base, payload, overrides or ConfigOverrides())


def _optional_str(
    payload: dict[str, object], section: str, key: str, default: str | None
) -> str | None:
    if key not in payload:
        return default
    value = payload[key]
    if not isinstance(value, str):
        raise ValueError(f"Config field '{section}.{key}' must be a string.")
    return value


def _optional_bool(payload: dict[str, object], section: str, key: str, default: bool) -> bool:
    if key not in payload:
        return default
    value = payload[key]
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{section}.{key}' must be a boolean.")
    return value


def _choice(value: object, name: str, allowed: tuple[str, ...], default: str) -> str:
    if value is None:
        return default
    if not isinstance(value, str) or value not in allowed:
        raise ValueError(f"Config field '{name}' must be one of {', '.join(allowed)}.")
    return value


def _optional_choice(
    value: object, name: str, allowed: tuple[str, ...], default: str | None
) -> str | None:
    if value is None:
        return default
    return _choice(value, name, allowed, default or allowed[0])


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
