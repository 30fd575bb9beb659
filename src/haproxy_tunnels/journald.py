# src/haproxy_tunnels/journald.py
"""Keep HAProxy alerts out of operators' terminals.

HAProxy logs "no server available!" at emerg level, which journald
broadcasts to every logged-in terminal by default. Turning off wall
forwarding stops the broadcast; the messages are still in the journal.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path

from . import systemd

WALL_SETTINGS = {
    "ForwardToWall": "no",
    "MaxLevelWall": "emerg",
}


def set_option(content: str, key: str, value: str) -> tuple[str, bool]:
    """Set key=value in journald.conf content.

    Commented-out lines for the key (#ForwardToWall=yes) are uncommented
    and updated in place; otherwise the setting is appended.

    Returns:
        (new content, True if an existing line was updated)
    """
    pattern = re.compile(rf"^\s*#?\s*{re.escape(key)}=.*$", re.MULTILINE)
    new_line = f"{key}={value}"
    if pattern.search(content):
        return pattern.sub(new_line, content), True

    if content and not content.endswith("\n"):
        content += "\n"
    return f"{content}{new_line}\n", False


def configure(config_path: Path, service: str = "systemd-journald") -> list[str]:
    """Apply WALL_SETTINGS to config_path and restart journald.

    The original file is backed up to <config_path>.bak first.

    Returns:
        One line per setting describing what changed.

    Raises:
        FileNotFoundError: If config_path doesn't exist.
        subprocess.CalledProcessError: If journald fails to restart.
    """
    if not config_path.exists():
        raise FileNotFoundError(f"Journald config file not found at {config_path}")

    backup = config_path.with_name(config_path.name + ".bak")
    shutil.copy2(config_path, backup)

    content = config_path.read_text()
    changes = []
    for key, value in WALL_SETTINGS.items():
        content, updated = set_option(content, key, value)
        verb = "Updated" if updated else "Added"
        changes.append(f"{verb} '{key}={value}'")
    config_path.write_text(content)

    systemd.restart(service)
    return changes
