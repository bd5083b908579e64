"""Local control-socket transport and single-instance guard.

Two variants share one interface: a Unix domain socket under the runtime
directory, and a fixed loopback TCP port where domain sockets are missing.
``select_transport`` is the only place that chooses between them.

``bind`` always probes the address first. A successful connect means a
resident instance owns it and nothing is touched.
"""

from __future__ import annotations

import asyncio
import contextlib
import errno
import logging
import os
import socket
import stat
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterator
from pathlib import Path

from .config import SOCKET_PATH
from .errors import AlreadyRunning, BindError, ConnectionRefused, TransportError
from .settings import Settings


logger = logging.getLogger(__name__)

LOOPBACK = "127.0.0.1"
PROBE_TIMEOUT = 1.0
BACKLOG = 16

ConnectionHandler = Callable[
    [asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]
]


class Listener:
    """A bound, listening socket ready to be served on the owner loop."""

    def __init__(
        self,
        sock: socket.socket,
        address: str,
        *,
        unix: bool,
        cleanup: Callable[[], None] | None = None,
    ) -> None:
        self.sock = sock
        self.address = address
        self.unix = unix
        self._cleanup = cleanup
        self._closed = False

    async def serve(self, handler: ConnectionHandler) -> asyncio.AbstractServer:
        """Start accepting; asyncio runs ``handler`` as one task per connection."""
        if self.unix:
            return await asyncio.start_unix_server(handler, sock=self.sock)
        return await asyncio.start_server(handler, sock=self.sock)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self.sock.close()
        except OSError:
            pass
        if self._cleanup is not None:
            self._cleanup()


class Transport(ABC):
    address: str

    @abstractmethod
    def probe(self) -> bool:
        """Return True when something accepts connections on the address."""

    @abstractmethod
    def bind(self) -> Listener:
        """Bind the address; raise ``AlreadyRunning`` or ``BindError``."""

    @abstractmethod
    async def connect(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        """Open a client stream; raise ``ConnectionRefused`` if nobody listens."""


@contextlib.contextmanager
def _exclusive_lock(path: Path) -> Iterator[None]:
    import fcntl

    with open(path, "a+") as handle:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX)
        try:
            yield
        finally:
            fcntl.flock(handle.fileno(), fcntl.LOCK_UN)


class UnixTransport(Transport):
    def __init__(self, path: Path = SOCKET_PATH, lock_path: Path | None = None) -> None:
        self.path = Path(path)
        self.lock_path = Path(lock_path) if lock_path else self.path.with_name(self.path.name + ".lock")
        self.address = str(self.path)

    def probe(self) -> bool:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        sock.settimeout(PROBE_TIMEOUT)
        try:
            sock.connect(str(self.path))
            return True
        except OSError:
            return False
        finally:
            sock.close()

    def bind(self) -> Listener:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        except OSError as exc:
            raise BindError(f"cannot create {self.path.parent}: {exc}") from exc

        # Probe, stale cleanup and bind must not interleave with another process.
        with _exclusive_lock(self.lock_path):
            if self.probe():
                raise AlreadyRunning(f"already listening on {self.path}")
            self._remove_stale()
            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            try:
                sock.bind(str(self.path))
                sock.listen(BACKLOG)
                sock.setblocking(False)
                inode = os.stat(self.path).st_ino
            except OSError as exc:
                sock.close()
                raise BindError(f"cannot bind {self.path}: {exc}") from exc

        logger.info("listening on unix socket %s", self.path)
        return Listener(
            sock, self.address, unix=True, cleanup=lambda: self._unlink_if_owned(inode)
        )

    def _remove_stale(self) -> None:
        try:
            mode = os.lstat(self.path).st_mode
        except FileNotFoundError:
            return
        except OSError as exc:
            raise BindError(f"cannot inspect {self.path}: {exc}") from exc
        if not stat.S_ISSOCK(mode):
            raise BindError(f"{self.path} exists and is not a socket")
        logger.info("removing stale socket %s", self.path)
        try:
            self.path.unlink()
        except OSError as exc:
            raise BindError(f"cannot remove stale socket {self.path}: {exc}") from exc

    def _unlink_if_owned(self, inode: int) -> None:
        try:
            if os.stat(self.path).st_ino == inode:
                self.path.unlink()
        except OSError:
            pass

    async def connect(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        try:
            return await asyncio.open_unix_connection(str(self.path))
        except (FileNotFoundError, ConnectionRefusedError) as exc:
            raise ConnectionRefused(f"no resident instance at {self.path}") from exc
        except OSError as exc:
            raise TransportError(f"cannot connect to {self.path}: {exc}") from exc


class TcpTransport(Transport):
    def __init__(self, port: int, host: str = LOOPBACK) -> None:
        self.host = host
        self.port = port
        self.address = f"{host}:{port}"

    def probe(self) -> bool:
        try:
            with socket.create_connection((self.host, self.port), timeout=PROBE_TIMEOUT):
                return True
        except OSError:
            return False

    def bind(self) -> Listener:
        if self.probe():
            raise AlreadyRunning(f"already listening on {self.address}")
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        if hasattr(socket, "SO_EXCLUSIVEADDRUSE"):
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_EXCLUSIVEADDRUSE, 1)
        else:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, self.port))
            sock.listen(BACKLOG)
            sock.setblocking(False)
        except OSError as exc:
            sock.close()
            if exc.errno in {errno.EADDRINUSE, getattr(errno, "WSAEADDRINUSE", -1)}:
                # Lost a race with another instance between probe and bind.
                raise AlreadyRunning(f"already listening on {self.address}") from exc
            raise BindError(f"cannot bind {self.address}: {exc}") from exc
        logger.info("listening on tcp %s", self.address)
        return Listener(sock, self.address, unix=False)

    async def connect(self) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        try:
            return await asyncio.open_connection(self.host, self.port)
        except ConnectionRefusedError as exc:
            raise ConnectionRefused(f"no resident instance at {self.address}") from exc
        except OSError as exc:
            raise TransportError(f"cannot connect to {self.address}: {exc}") from exc


def select_transport(
    settings: Settings,
    *,
    path: Path | None = None,
    lock_path: Path | None = None,
) -> Transport:
    kind = settings.transport.kind
    if kind == "auto":
        kind = "unix" if hasattr(socket, "AF_UNIX") else "tcp"
    if kind == "unix":
        return UnixTransport(path or SOCKET_PATH, lock_path)
    return TcpTransport(settings.transport.port)
