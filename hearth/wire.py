"""Wire messages exchanged over one control connection.

Each direction carries exactly one UTF-8 JSON document, terminated by the
sender shutting down its write side:

1. server → client: ``{"commands": {"<id>": {"id", "title", "category"}}}``
2. client → server: ``{"action": "<toplevel action>", "command": str | null}``
"""

from __future__ import annotations

import asyncio
import json

from .config import MAX_MESSAGE_BYTES
from .errors import MalformedPayload
from .models import CommandPayload, SnapshotEntry, TopLevelAction


_CHUNK = 4096


def encode_snapshot(entries: list[SnapshotEntry]) -> bytes:
    body = {"commands": {entry.id: entry.to_dict() for entry in entries}}
    return json.dumps(body).encode("utf-8")


def _load(data: bytes) -> object:
    try:
        return json.loads(data.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise MalformedPayload(f"invalid JSON: {exc}") from exc


def decode_snapshot(data: bytes) -> list[SnapshotEntry]:
    raw = _load(data)
    commands = raw.get("commands") if isinstance(raw, dict) else None
    if not isinstance(commands, dict):
        raise MalformedPayload("snapshot has no 'commands' mapping")

    entries: list[SnapshotEntry] = []
    for key, meta in commands.items():
        if not isinstance(meta, dict):
            raise MalformedPayload(f"snapshot entry {key!r} is not an object")
        title = meta.get("title")
        category = meta.get("category")
        if not isinstance(title, str) or not isinstance(category, str):
            raise MalformedPayload(f"snapshot entry {key!r} lacks title/category")
        entries.append(SnapshotEntry(id=str(key), title=title, category=category))
    return entries


def encode_payload(payload: CommandPayload) -> bytes:
    return json.dumps(payload.to_dict()).encode("utf-8")


def decode_payload(data: bytes) -> CommandPayload:
    raw = _load(data)
    if not isinstance(raw, dict):
        raise MalformedPayload("request is not an object")
    try:
        action = TopLevelAction(raw.get("action"))
    except ValueError as exc:
        raise MalformedPayload(f"unknown action {raw.get('action')!r}") from exc
    command = raw.get("command")
    if command is not None and not isinstance(command, str):
        raise MalformedPayload("'command' must be a string or null")
    return CommandPayload(action=action, command=command or None)


async def _read_all(reader: asyncio.StreamReader, limit: int) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await reader.read(_CHUNK)
        if not chunk:
            break
        total += len(chunk)
        if total > limit:
            raise MalformedPayload(f"message exceeds {limit} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


async def read_message(
    reader: asyncio.StreamReader,
    *,
    limit: int = MAX_MESSAGE_BYTES,
    timeout: float | None = None,
) -> bytes:
    """Read until the peer shuts down its write side."""
    if timeout is None:
        return await _read_all(reader, limit)
    return await asyncio.wait_for(_read_all(reader, limit), timeout)


async def write_message(writer: asyncio.StreamWriter, data: bytes) -> None:
    writer.write(data)
    await writer.drain()
    if writer.can_write_eof():
        writer.write_eof()
