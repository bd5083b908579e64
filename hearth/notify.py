"""Desktop notifications."""

import subprocess


def notify(title: str, body: str, urgency: str = "normal") -> bool:
    try:
        r = subprocess.run(
            ["notify-send", f"--urgency={urgency}",
             "--app-name=hearth", "-i", "system-search",
             title, body],
            capture_output=True, timeout=5)
    except (subprocess.TimeoutExpired, FileNotFoundError, OSError):
        return False
    return r.returncode == 0
