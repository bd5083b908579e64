"""Pytest global setup for isolated hearth test state.

This keeps tests away from the live runtime socket and user config.
"""

from __future__ import annotations

import atexit
import os
from pathlib import Path
import shutil
import tempfile


_TEST_ROOT = Path(tempfile.mkdtemp(prefix="hearth-pytest-state-"))
_TEST_HOME = _TEST_ROOT / "home"
_TEST_RUNTIME_DIR = _TEST_ROOT / "run"
_TEST_LOG_DIR = _TEST_ROOT / "logs"

for _path in (_TEST_HOME, _TEST_RUNTIME_DIR, _TEST_LOG_DIR):
    _path.mkdir(parents=True, exist_ok=True)

# Force test process (and imported hearth modules) to use isolated paths.
os.environ["HEARTH_HOME"] = str(_TEST_HOME)
os.environ["HEARTH_RUNTIME_DIR"] = str(_TEST_RUNTIME_DIR)
os.environ["HEARTH_LOG_DIR"] = str(_TEST_LOG_DIR)
os.environ["HEARTH_SOCKET"] = str(_TEST_RUNTIME_DIR / "hearth.sock")
for _name in ("HEARTH_TRANSPORT", "HEARTH_PORT", "HEARTH_RESET_AFTER", "HEARTH_HIDE_ON_BLUR", "HEARTH_SURFACE"):
    os.environ.pop(_name, None)


@atexit.register
def _cleanup_test_state() -> None:
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)
