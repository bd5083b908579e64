"""Typed settings loaded from TOML config with env-var overrides."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from importlib import resources
from pathlib import Path

from .config import HEARTH_HOME, MAX_MESSAGE_BYTES, SOCKET_PORT


USER_CONFIG_PATH = HEARTH_HOME / "config.toml"

TRANSPORT_KINDS = ("auto", "unix", "tcp")
SURFACE_KINDS = ("terminal", "sway", "none")


def _load_default_toml() -> dict:
    """Load the built-in default_config.toml shipped with the package."""
    ref = resources.files("hearth").joinpath("default_config.toml")
    return tomllib.loads(ref.read_text(encoding="utf-8"))


def _load_user_toml(path: Path | None = None) -> dict:
    """Load user config if it exists, otherwise empty dict."""
    path = path or USER_CONFIG_PATH
    if path.is_file():
        return tomllib.loads(path.read_text(encoding="utf-8"))
    return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (override wins)."""
    merged = dict(base)
    for key, val in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(val, dict):
            merged[key] = _deep_merge(merged[key], val)
        else:
            merged[key] = val
    return merged


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


# ── Dataclasses ──────────────────────────────────────────────────────


@dataclass
class TransportConfig:
    kind: str
    port: int
    read_timeout: float
    max_payload: int


@dataclass
class VisibilityConfig:
    reset_after: float
    hide_on_blur: bool
    surface: str
    sway_app_id: str


@dataclass
class NotificationConfig:
    success_timeout: float
    error_timeout: float
    fade: float


@dataclass
class Settings:
    transport: TransportConfig
    visibility: VisibilityConfig
    notifications: NotificationConfig


def _choice(value: str, allowed: tuple[str, ...], default: str) -> str:
    clean = value.strip().lower()
    return clean if clean in allowed else default


def load_settings(user_path: Path | None = None) -> Settings:
    """Load settings: defaults ← user TOML ← env vars."""
    defaults = _load_default_toml()
    user = _load_user_toml(user_path)
    raw = _deep_merge(defaults, user)

    tr = raw.get("transport", {})
    vis = raw.get("visibility", {})
    notes = raw.get("notifications", {})

    transport = TransportConfig(
        kind=_choice(
            os.environ.get("HEARTH_TRANSPORT", str(tr.get("kind", "auto"))),
            TRANSPORT_KINDS,
            "auto",
        ),
        port=int(os.environ.get("HEARTH_PORT", tr.get("port", SOCKET_PORT))),
        read_timeout=float(tr.get("read_timeout", 5.0)),
        max_payload=int(tr.get("max_payload", MAX_MESSAGE_BYTES)),
    )

    visibility = VisibilityConfig(
        reset_after=float(
            os.environ.get("HEARTH_RESET_AFTER", vis.get("reset_after", 90.0))
        ),
        hide_on_blur=_env_bool(
            "HEARTH_HIDE_ON_BLUR", bool(vis.get("hide_on_blur", False))
        ),
        surface=_choice(
            os.environ.get("HEARTH_SURFACE", str(vis.get("surface", "terminal"))),
            SURFACE_KINDS,
            "terminal",
        ),
        sway_app_id=str(vis.get("sway_app_id", "hearth")),
    )

    notifications = NotificationConfig(
        success_timeout=float(notes.get("success_timeout", 3.0)),
        error_timeout=float(notes.get("error_timeout", 4.0)),
        fade=float(notes.get("fade", 0.3)),
    )

    return Settings(
        transport=transport,
        visibility=visibility,
        notifications=notifications,
    )


# Module-level singleton, loaded once on import.
SETTINGS = load_settings()
