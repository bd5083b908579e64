"""End-to-end tests for the dispatch server over a Unix socket."""

import asyncio
from pathlib import Path

import pytest

from hearth.commands import THEMES_ID
from hearth.errors import AlreadyRunning
from hearth.main import run_headless
from hearth.server import DispatchServer
from hearth.transport import UnixTransport
from hearth.wire import decode_snapshot, read_message, write_message
from tests.helpers import make_context


async def _send(transport: UnixTransport, data: bytes | None) -> list:  # type: ignore[type-arg]
    reader, writer = await transport.connect()
    snapshot = decode_snapshot(await read_message(reader))
    if data is not None:
        await write_message(writer, data)
    writer.close()
    await writer.wait_closed()
    return snapshot


async def _until_handled(server: DispatchServer, count: int) -> None:
    async def _poll() -> None:
        while server.handled < count:
            await asyncio.sleep(0.01)

    await asyncio.wait_for(_poll(), 5)


def _run(tmp_path: Path, scenario):  # type: ignore[no-untyped-def]
    path = tmp_path / "s.sock"

    async def _main():  # type: ignore[no-untyped-def]
        context, _, _ = make_context()
        server = DispatchServer(context, UnixTransport(path).bind(), read_timeout=0.5)
        await server.start()
        try:
            return await scenario(context, server, UnixTransport(path))
        finally:
            await server.close()

    return asyncio.run(_main())


def test_greets_with_snapshot_and_applies_command(tmp_path: Path) -> None:
    async def scenario(context, server, transport):  # type: ignore[no-untyped-def]
        snapshot = await _send(transport, b'{"action": "command", "command": "themes"}')
        await _until_handled(server, 1)
        return snapshot, context.navigation.depth, context.active.id

    snapshot, depth, active = _run(tmp_path, scenario)
    assert {entry.leaf for entry in snapshot} == {"hearth", "themes"}
    assert depth == 2
    assert active == THEMES_ID


def test_bad_requests_are_dropped_and_server_keeps_serving(tmp_path: Path) -> None:
    async def scenario(context, server, transport):  # type: ignore[no-untyped-def]
        await _send(transport, b'{"action": "command", "command": "bogus"}')
        await _send(transport, b"definitely not json")
        await _send(transport, b'{"action": "teleport"}')
        await _send(transport, None)
        await _until_handled(server, 4)
        unchanged = (context.navigation.depth, context.visibility.is_shown)
        await _send(transport, b'{"action": "hide", "command": null}')
        await _until_handled(server, 5)
        return unchanged, context.visibility.is_hidden

    unchanged, hidden = _run(tmp_path, scenario)
    assert unchanged == (1, True)
    assert hidden


def test_silent_client_times_out(tmp_path: Path) -> None:
    async def scenario(context, server, transport):  # type: ignore[no-untyped-def]
        reader, writer = await transport.connect()
        await read_message(reader)
        await _until_handled(server, 1)
        writer.close()
        await writer.wait_closed()
        return context.navigation.depth

    assert _run(tmp_path, scenario) == 1


def test_oversized_request_is_dropped(tmp_path: Path) -> None:
    async def scenario(context, server, transport):  # type: ignore[no-untyped-def]
        server.max_bytes = 32
        await _send(transport, b'{"action": "hide", "command": "' + b"x" * 64 + b'"}')
        await _until_handled(server, 1)
        return context.visibility.is_shown

    assert _run(tmp_path, scenario)


def test_requests_apply_in_order(tmp_path: Path) -> None:
    async def scenario(context, server, transport):  # type: ignore[no-untyped-def]
        requests = [
            b'{"action": "show"}',
            b'{"action": "command", "command": "themes"}',
            b'{"action": "command", "command": "themes"}',
        ]
        for count, request in enumerate(requests, start=1):
            await _send(transport, request)
            await _until_handled(server, count)
        return context.visibility.is_hidden, context.navigation.depth

    assert _run(tmp_path, scenario) == (True, 2)


def test_headless_runs_until_quit(tmp_path: Path) -> None:
    path = tmp_path / "headless.sock"

    async def _main():  # type: ignore[no-untyped-def]
        started = asyncio.Event()
        listener = UnixTransport(path).bind()
        task = asyncio.create_task(run_headless(listener, started=started))
        await asyncio.wait_for(started.wait(), 5)
        with pytest.raises(AlreadyRunning):
            UnixTransport(path).bind()
        await _send(UnixTransport(path), b'{"action": "quit"}')
        return await asyncio.wait_for(task, 5)

    context = asyncio.run(_main())
    assert context.quit_requested
    assert not path.exists()
