"""Custom exception hierarchy for dockmqtt."""

from __future__ import annotations


class DockError(Exception):
    """Base exception for all dockmqtt errors."""


class DockConfigError(DockError):
    """Invalid or missing configuration."""


class DockConnectionError(DockError):
    """Broker transport failure (socket error, refused or missing CONNACK)."""

    def __init__(
        self,
        message: str,
        *,
        host: str = "",
        port: int | None = None,
    ) -> None:
        self.host = host
        self.port = port
        super().__init__(message)


class DockProtocolError(DockError):
    """Broker rejected or failed a SUBSCRIBE request."""

    def __init__(
        self,
        message: str,
        *,
        topic: str = "",
        rc: int | None = None,
    ) -> None:
        self.topic = topic
        self.rc = rc
        super().__init__(message)


class InterfaceEnumerationError(DockError):
    """Local network interfaces could not be listed."""
