"""Global configuration, constants, and runtime paths."""

from __future__ import annotations

import os
import tomllib
from pathlib import Path


APP_NAME = "hearth"
COMMAND_NAMESPACE = APP_NAME

HEARTH_HOME = Path(os.environ.get("HEARTH_HOME") or "~/.config/hearth").expanduser()

_USER_CONFIG_PATHS: tuple[Path, ...] = (HEARTH_HOME / "config.toml",)


def _load_user_storage() -> dict[str, str]:
    raw: dict[str, object] | None = None
    for config_path in _USER_CONFIG_PATHS:
        if not config_path.is_file():
            continue
        try:
            parsed = tomllib.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError):
            continue
        if isinstance(parsed, dict):
            raw = parsed
            break

    if raw is None:
        return {}

    storage = raw.get("storage")
    if not isinstance(storage, dict):
        return {}

    out: dict[str, str] = {}
    runtime_dir = storage.get("runtime_dir")
    if isinstance(runtime_dir, str) and runtime_dir.strip():
        out["runtime_dir"] = runtime_dir.strip()

    log_dir = storage.get("log_dir")
    if isinstance(log_dir, str) and log_dir.strip():
        out["log_dir"] = log_dir.strip()

    return out


def _resolve_dir(raw: str) -> Path:
    return Path(os.path.expanduser(raw)).expanduser()


def _ensure_writable_dir(path: Path, fallback: Path) -> Path:
    """Ensure directory exists, falling back when creation is denied."""
    try:
        path.mkdir(parents=True, exist_ok=True)
        return path
    except OSError:
        fallback.mkdir(parents=True, exist_ok=True)
        return fallback


def _default_runtime_dir() -> str:
    xdg = os.environ.get("XDG_RUNTIME_DIR", "").strip()
    if xdg:
        return str(Path(xdg) / APP_NAME)
    uid = os.getuid() if hasattr(os, "getuid") else os.getpid()
    return f"/tmp/{APP_NAME}-{uid}"


_storage = _load_user_storage()
_fallback_runtime_dir = _resolve_dir(f"/tmp/{APP_NAME}")

RUNTIME_DIR = _ensure_writable_dir(
    _resolve_dir(
        os.environ.get("HEARTH_RUNTIME_DIR")
        or _storage.get("runtime_dir")
        or _default_runtime_dir()
    ),
    _fallback_runtime_dir,
)
LOG_DIR = _resolve_dir(
    os.environ.get("HEARTH_LOG_DIR")
    or _storage.get("log_dir")
    or "~/.local/share/hearth/logs"
)

SOCKET_PATH = Path(
    os.environ.get("HEARTH_SOCKET") or str(RUNTIME_DIR / f"{APP_NAME}.sock")
)

# Loopback port used where Unix domain sockets are unavailable.
DEFAULT_PORT = 47150
SOCKET_PORT = int(os.environ.get("HEARTH_PORT") or DEFAULT_PORT)

# Cap on either wire message; a snapshot of a few hundred commands is ~20 KiB.
MAX_MESSAGE_BYTES = 64 * 1024
