# src/haproxy_tunnels/state_file.py
"""
State file parsing and persistence.

The state file holds the global settings as KEY=VALUE lines followed by
one JSON record per tunnel, each wrapped in TUNNEL_START/TUNNEL_END lines:

    HEALTH_CHECK_PORT=80
    TELEGRAM_BOT_TOKEN=
    TELEGRAM_ADMIN_ID=
    TUNNEL_START
    {"backend_ip":"10.0.0.1,10.0.0.2","ports":"80,443","mode":"tcp"}
    TUNNEL_END

Tunnel order in the file is the tunnel id order and the rendering order.
save() always rewrites the whole file.
"""

from __future__ import annotations

import fcntl
import json
import os
import re
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

from .exceptions import PersistenceError, ValidationError
from .tunnels import HealthCheckPolicy, TelegramSettings, Tunnel, TunnelSet

if TYPE_CHECKING:
    from collections.abc import Iterator

# KEY=VALUE settings lines
SETTING_LINE_PATTERN = re.compile(r"^(?P<key>[A-Za-z_][A-Za-z0-9_]*)=(?P<value>.*)$")

TUNNEL_START = "TUNNEL_START"
TUNNEL_END = "TUNNEL_END"

HEALTH_CHECK_PORT_KEY = "HEALTH_CHECK_PORT"
TELEGRAM_BOT_TOKEN_KEY = "TELEGRAM_BOT_TOKEN"
TELEGRAM_ADMIN_ID_KEY = "TELEGRAM_ADMIN_ID"


def parse(text: str, source: Path | str = "<string>") -> TunnelSet:
    """Parse state file content into a TunnelSet.

    Only the first occurrence of each setting counts. Lines between a
    TUNNEL_START/TUNNEL_END pair are joined into one record; a block
    without TUNNEL_END is ignored.

    Raises:
        PersistenceError: If a record or setting is malformed.
    """
    settings: dict[str, str] = {}
    records: list[tuple[int, str]] = []
    block: list[str] | None = None
    block_line = 0

    for lineno, line in enumerate(text.splitlines(), 1):
        if line == TUNNEL_START:
            block = []
            block_line = lineno
            continue
        if line == TUNNEL_END:
            if block is not None:
                records.append((block_line, "".join(block)))
            block = None
            continue
        if block is not None:
            block.append(line)
            continue

        match = SETTING_LINE_PATTERN.match(line.lstrip())
        if match:
            settings.setdefault(match.group("key"), match.group("value"))

    tunnels = [_parse_record(raw, source, lineno) for lineno, raw in records]
    return TunnelSet(
        tunnels=tunnels,
        health_check=_parse_health_check(settings.get(HEALTH_CHECK_PORT_KEY, ""), source),
        telegram=TelegramSettings(
            bot_token=settings.get(TELEGRAM_BOT_TOKEN_KEY, ""),
            admin_id=settings.get(TELEGRAM_ADMIN_ID_KEY, ""),
        ),
    )


def _parse_record(raw: str, source: Path | str, lineno: int) -> Tunnel:
    try:
        record = json.loads(raw)
    except json.JSONDecodeError as e:
        raise PersistenceError(f"{source}:{lineno}: malformed tunnel record: {e}") from e
    if not isinstance(record, dict):
        raise PersistenceError(f"{source}:{lineno}: tunnel record is not an object")
    try:
        return Tunnel.from_record(record)
    except ValidationError as e:
        raise PersistenceError(f"{source}:{lineno}: {e}") from e


def _parse_health_check(value: str, source: Path | str) -> HealthCheckPolicy:
    # Empty means disabled, same as "none"
    if not value:
        return HealthCheckPolicy()
    try:
        return HealthCheckPolicy.parse(value)
    except ValidationError as e:
        raise PersistenceError(f"{source}: {e}") from e


def _setting_line(key: str, value: str) -> str:
    line = f"{key}={value}"
    if len(line.splitlines()) != 1:
        raise PersistenceError(f"Refusing to write {key}: value contains a line break")
    return line


def dumps(tunnel_set: TunnelSet) -> str:
    """Serialize a TunnelSet to state file content.

    Raises:
        PersistenceError: If a setting value spans more than one line.
    """
    lines = [
        _setting_line(HEALTH_CHECK_PORT_KEY, str(tunnel_set.health_check.port or "")),
        _setting_line(TELEGRAM_BOT_TOKEN_KEY, tunnel_set.telegram.bot_token),
        _setting_line(TELEGRAM_ADMIN_ID_KEY, tunnel_set.telegram.admin_id),
    ]
    for tunnel in tunnel_set:
        lines.append(TUNNEL_START)
        lines.append(json.dumps(tunnel.to_record(), separators=(",", ":")))
        lines.append(TUNNEL_END)
    return "\n".join(lines) + "\n"


def export(tunnel_set: TunnelSet) -> dict:
    """Whole state as one JSON-ready dict, keyed like the state file.

    This is what the remote control bot reads instead of parsing the
    state file itself.
    """
    return {
        HEALTH_CHECK_PORT_KEY: str(tunnel_set.health_check.port or ""),
        TELEGRAM_BOT_TOKEN_KEY: tunnel_set.telegram.bot_token,
        TELEGRAM_ADMIN_ID_KEY: tunnel_set.telegram.admin_id,
        "tunnels": [tunnel.to_record() for tunnel in tunnel_set],
    }


def load(path: Path) -> TunnelSet:
    """Load the state file; a missing file is an empty TunnelSet.

    Raises:
        PersistenceError: If the file exists but can't be read or parsed.
    """
    if not path.exists():
        return TunnelSet()
    try:
        text = path.read_text()
    except OSError as e:
        raise PersistenceError(f"Failed to read {path}: {e}") from e
    return parse(text, source=path)


def save(tunnel_set: TunnelSet, path: Path) -> None:
    """Overwrite the state file with tunnel_set.

    Writes a temp file next to the target and renames it into place so
    readers never see a partial file. The file holds the bot token, so it
    keeps the 0600 mode tempfile creates it with.

    Raises:
        PersistenceError: If the file can't be written.
    """
    content = dumps(tunnel_set)
    temp_path = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="w", dir=path.parent, prefix=f".{path.name}.", delete=False
        ) as f:
            temp_path = f.name
            f.write(content)
        os.replace(temp_path, path)
    except OSError as e:
        if temp_path:
            Path(temp_path).unlink(missing_ok=True)
        raise PersistenceError(f"Failed to write {path}: {e}") from e


@contextmanager
def locked(lock_path: Path) -> Iterator[None]:
    """Hold an exclusive advisory lock for the duration of the block.

    Blocks until any other haproxy-tunnels invocation holding the lock
    finishes.

    Raises:
        PersistenceError: If the lock file can't be opened.
    """
    try:
        lock_path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(lock_path, os.O_RDWR | os.O_CREAT, 0o600)
    except OSError as e:
        raise PersistenceError(f"Failed to open lock file {lock_path}: {e}") from e
    try:
        fcntl.flock(fd, fcntl.LOCK_EX)
        yield
    finally:
        fcntl.flock(fd, fcntl.LOCK_UN)
        os.close(fd)
