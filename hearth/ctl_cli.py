"""hearth-ctl CLI: send one control request to the resident launcher."""

from __future__ import annotations

import argparse
import asyncio
import sys

from .errors import ConnectionRefused, MalformedPayload, TransportError
from .models import CommandPayload, SnapshotEntry, TopLevelAction
from .settings import SETTINGS
from .transport import Transport, select_transport
from .wire import decode_snapshot, encode_payload, read_message, write_message


SNAPSHOT_TIMEOUT = 5.0


def _err(message: str) -> int:
    print(f"hearth-ctl: {message}", file=sys.stderr)
    return 1


def build_parser(snapshot: list[SnapshotEntry]) -> argparse.ArgumentParser:
    """Argument grammar built from the live registry's command leaves."""
    leaves = sorted({entry.leaf for entry in snapshot})
    parser = argparse.ArgumentParser(
        prog="hearth-ctl",
        description="Control the resident hearth launcher",
    )
    parser.add_argument(
        "action",
        metavar="ACTION",
        choices=[a.value for a in TopLevelAction],
        help="toggle | show | hide | quit | command | pipe",
    )
    parser.add_argument(
        "command",
        metavar="COMMAND",
        nargs="?",
        choices=leaves,
        help=f"command to open (with ACTION 'command'): {', '.join(leaves) or 'none'}",
    )
    parser.add_argument(
        "-d",
        "--delimiter",
        default=" ",
        help="input delimiter for ACTION 'pipe' (reserved)",
    )
    return parser


def parse_request(snapshot: list[SnapshotEntry], argv: list[str]) -> CommandPayload:
    parser = build_parser(snapshot)
    args = parser.parse_args(argv)
    action = TopLevelAction(args.action)
    if action is TopLevelAction.COMMAND and not args.command:
        parser.error("COMMAND is required when ACTION is 'command'")
    if action is not TopLevelAction.COMMAND and args.command:
        parser.error("COMMAND is only accepted with ACTION 'command'")
    return CommandPayload(action=action, command=args.command)


async def run(argv: list[str], transport: Transport) -> int:
    try:
        reader, writer = await transport.connect()
    except ConnectionRefused as error:
        return _err(f"no resident instance ({error})")
    except TransportError as error:
        return _err(str(error))

    try:
        raw = await read_message(reader, timeout=SNAPSHOT_TIMEOUT)
        snapshot = decode_snapshot(raw)
        payload = parse_request(snapshot, argv)
        await write_message(writer, encode_payload(payload))
    except MalformedPayload as error:
        return _err(f"invalid registry snapshot: {error}")
    except asyncio.TimeoutError:
        return _err("resident instance did not answer")
    except (ConnectionError, OSError) as error:
        return _err(f"transport error: {error}")
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except (ConnectionError, OSError):
            pass
    return 0


def main(argv: list[str] | None = None) -> int:
    transport = select_transport(SETTINGS)
    return asyncio.run(run(sys.argv[1:] if argv is None else argv, transport))


if __name__ == "__main__":
    raise SystemExit(main())
