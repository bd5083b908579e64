"""Exception taxonomy for the control plane."""

from __future__ import annotations


class HearthError(Exception):
    """Base class for all control-plane failures."""


class AlreadyRunning(HearthError):
    """Another resident instance already owns the control address."""


class BindError(HearthError):
    """The control address could not be bound for a reason other than a live owner."""


class TransportError(HearthError):
    """Socket I/O failed while talking to the other side."""


class ConnectionRefused(TransportError):
    """No resident instance is listening on the control address."""


class CommandNotFound(HearthError):
    """A requested command id or leaf is not in the registry."""

    def __init__(self, name: str) -> None:
        super().__init__(f"command not found: {name!r}")
        self.name = name


class MalformedPayload(HearthError):
    """A wire message could not be decoded."""
