"""Resident entry point: bind the control socket, then run the host."""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from .commands import builtin_registry
from .context import AppContext
from .errors import AlreadyRunning, BindError
from .logging_setup import configure
from .registry import CommandRegistry
from .scheduler import LoopScheduler
from .server import DispatchServer
from .settings import SETTINGS, Settings
from .transport import Listener, select_transport
from .windowing import surface_for


logger = logging.getLogger(__name__)


async def run_headless(
    listener: Listener,
    *,
    settings: Settings | None = None,
    registry: CommandRegistry | None = None,
    start_hidden: bool = False,
    started: asyncio.Event | None = None,
) -> AppContext:
    """Serve control requests on a bare asyncio loop until a quit request."""
    settings = settings or SETTINGS
    stop = asyncio.Event()
    context = AppContext(
        registry or builtin_registry(),
        LoopScheduler(),
        surface=surface_for(settings),
        settings=settings,
        on_quit=stop.set,
        start_hidden=start_hidden,
    )
    server = DispatchServer(context, listener)
    await server.start()
    if started is not None:
        started.set()
    try:
        await stop.wait()
    finally:
        await server.close()
    logger.info("quit requested, shutting down")
    return context


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="hearth",
        description="Resident command launcher",
    )
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Serve control requests without a terminal UI",
    )
    parser.add_argument(
        "--hidden",
        action="store_true",
        help="Start with the surface hidden",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("HEARTH_LOG_LEVEL", "INFO"),
        help="Log level (default: INFO, env HEARTH_LOG_LEVEL)",
    )
    args = parser.parse_args(argv)

    runtime = configure(args.log_level, stderr=args.headless)
    logger.info("logging to %s at %s", runtime.file_path, runtime.level_name)

    transport = select_transport(SETTINGS)
    try:
        listener = transport.bind()
    except AlreadyRunning as error:
        print(f"hearth: already running ({error})", file=sys.stderr)
        return 1
    except BindError as error:
        print(f"hearth: {error}", file=sys.stderr)
        return 1

    try:
        if args.headless:
            asyncio.run(run_headless(listener, start_hidden=args.hidden))
        else:
            from .ui.app import HearthApp

            HearthApp(listener=listener, start_hidden=args.hidden).run()
    except KeyboardInterrupt:
        logger.info("interrupted")
    finally:
        listener.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
