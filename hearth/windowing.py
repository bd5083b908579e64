"""Sway scratchpad surface for the launcher window."""

from __future__ import annotations

import logging
import subprocess

from .settings import Settings
from .visibility import NullSurface, Surface


logger = logging.getLogger(__name__)


def run_swaymsg(*args: str, timeout: float = 3) -> bool:
    """Run swaymsg command, return True on success."""
    try:
        r = subprocess.run(
            ["swaymsg", *args],
            capture_output=True,
            timeout=timeout,
        )
        return r.returncode == 0
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError):
        return False


def criteria_for_app_id(app_id: str) -> str:
    escaped = app_id.replace("\\", "\\\\").replace('"', '\\"')
    return f'[app_id="{escaped}"]'


class SwaySurface:
    """Show/hide the terminal hosting hearth via the sway scratchpad.

    The launcher terminal is expected to run with a dedicated app id, e.g.
    ``foot --app-id hearth hearth``.
    """

    def __init__(self, app_id: str = "hearth", timeout: float = 3) -> None:
        self.app_id = app_id
        self.timeout = timeout

    def show(self) -> None:
        criteria = criteria_for_app_id(self.app_id)
        if not run_swaymsg(criteria, "scratchpad", "show", timeout=self.timeout):
            logger.warning("swaymsg could not show %s", criteria)
            return
        run_swaymsg(criteria, "focus", timeout=self.timeout)

    def hide(self) -> None:
        criteria = criteria_for_app_id(self.app_id)
        if not run_swaymsg(criteria, "move", "scratchpad", timeout=self.timeout):
            logger.warning("swaymsg could not hide %s", criteria)


def surface_for(settings: Settings) -> Surface:
    """Surface selected by ``[visibility] surface`` for hosts without their own."""
    if settings.visibility.surface == "sway":
        return SwaySurface(settings.visibility.sway_app_id)
    return NullSurface()
