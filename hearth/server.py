"""Dispatch server: one request per connection, applied on the owner loop.

Per connection: greet with the registry snapshot, read one request, apply
it, close. Any failure drops only that connection.
"""

from __future__ import annotations

import asyncio
import logging

from .context import AppContext
from .errors import CommandNotFound, MalformedPayload
from .transport import Listener
from .wire import decode_payload, encode_snapshot, read_message, write_message


logger = logging.getLogger(__name__)


class DispatchServer:
    def __init__(
        self,
        context: AppContext,
        listener: Listener,
        *,
        read_timeout: float | None = None,
        max_bytes: int | None = None,
    ) -> None:
        self.context = context
        self.listener = listener
        self.read_timeout = (
            context.settings.transport.read_timeout if read_timeout is None else read_timeout
        )
        self.max_bytes = (
            context.settings.transport.max_payload if max_bytes is None else max_bytes
        )
        self._server: asyncio.AbstractServer | None = None
        self.handled = 0

    async def start(self) -> None:
        self._server = await self.listener.serve(self._on_connection)
        logger.info("dispatch server accepting on %s", self.listener.address)

    async def serve_forever(self) -> None:
        if self._server is None:
            await self.start()
        assert self._server is not None
        await self._server.serve_forever()

    async def close(self) -> None:
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
        self.listener.close()

    async def _on_connection(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        try:
            await self.handle(reader, writer)
        except CommandNotFound as exc:
            logger.warning("dropping request: %s", exc)
        except MalformedPayload as exc:
            logger.warning("dropping malformed request: %s", exc)
        except asyncio.TimeoutError:
            logger.warning("client did not send a request within %.1fs", self.read_timeout)
        except (ConnectionError, OSError) as exc:
            logger.warning("connection error: %s", exc)
        except Exception:
            logger.exception("unexpected error while handling client")
        finally:
            self.handled += 1
            writer.close()
            try:
                await writer.wait_closed()
            except (ConnectionError, OSError):
                pass

    async def handle(
        self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter
    ) -> None:
        snapshot = encode_snapshot(self.context.registry.snapshot())
        await write_message(writer, snapshot)

        raw = await read_message(reader, limit=self.max_bytes, timeout=self.read_timeout)
        if not raw:
            logger.debug("client closed without a request")
            return

        payload = decode_payload(raw)
        self.context.apply(payload)
