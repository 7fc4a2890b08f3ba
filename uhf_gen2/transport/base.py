# uhf_gen2/transport/base.py

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Optional


class BaseTransport(ABC):
    """
    Abstract base class for the byte stream a reader talks over.

    The reader drives all I/O itself: it writes a frame, then pulls bytes with
    ``read`` until it has what it needs. A transport never reads in the
    background and never interprets frames.
    """

    def __init__(self, connection_details: Optional[dict[str, Any]] = None):
        """
        Args:
            connection_details: Parameters needed to open the stream
                                (e.g. {'port': '/dev/ttyUSB0', 'baudrate': 115200}).
        """
        self._connection_details = dict(connection_details or {})
        self._connected = False
        self._connection_lock = asyncio.Lock() # Serializes connect/disconnect

    @abstractmethod
    async def connect(self) -> None:
        """
        Opens the stream. Safe to call when already connected.

        Raises:
            ConnectionError: If the connection cannot be established.
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Closes the stream. Safe to call even if not connected."""

    @abstractmethod
    async def write(self, data: bytes) -> int:
        """
        Writes all of ``data`` and returns the number of bytes written.

        Raises:
            WriteError: If not connected or if writing fails.
        """

    @abstractmethod
    async def read(self, size: int, timeout: float) -> bytes:
        """
        Returns up to ``size`` bytes, waiting at most ``timeout`` seconds.

        An empty result means nothing arrived in time; it is not end of stream.

        Raises:
            ReadError: If not connected or if the stream failed.
        """

    @abstractmethod
    async def clear_input(self) -> None:
        """
        Discards every byte received but not yet read.

        Raises:
            TransportError: If the input buffer cannot be reset.
        """

    def is_connected(self) -> bool:
        """Returns True if the transport is currently connected."""
        return self._connected

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()

    @property
    def connection_details(self) -> dict[str, Any]:
        """Returns the connection details provided during initialization."""
        return self._connection_details
