# uhf_gen2/transport/serial_async.py

import asyncio
import logging
from typing import Any, Dict, Optional

import serial
import serial_asyncio

from uhf_gen2.transport.base import BaseTransport
from uhf_gen2.core.exceptions import (
    ConnectionError, SerialConnectionError, ReadError, WriteError, TransportError
)

logger = logging.getLogger(__name__)

DEFAULT_SERIAL_SETTINGS = {
    'baudrate': 115200,
    'bytesize': serial.EIGHTBITS,
    'parity': serial.PARITY_NONE,
    'stopbits': serial.STOPBITS_ONE,
    'timeout': None, # Must be None for async operation
    'xonxoff': False,
    'rtscts': False,
    'dsrdtr': False,
}

CLEAR_INPUT_POLL = 0.001 # Read window used to empty the stream buffer


class SerialTransport(BaseTransport):
    """
    Asynchronous serial transport using pyserial-asyncio.
    """

    def __init__(self, connection_details: Dict[str, Any]):
        """
        Args:
            connection_details: Dictionary containing serial port settings.
                Required: 'port' (e.g., '/dev/ttyUSB0', 'COM3')
                Optional: 'baudrate', 'bytesize', 'parity', 'stopbits', etc.
                          Defaults are taken from DEFAULT_SERIAL_SETTINGS.
        """
        super().__init__(connection_details)

        if 'port' not in self._connection_details:
            raise ValueError("Missing 'port' in connection_details for SerialTransport.")

        self._serial_settings = DEFAULT_SERIAL_SETTINGS.copy()
        self._serial_settings.update(self._connection_details)
        self._serial_settings['timeout'] = None

        self._port = self._serial_settings.pop('port')
        self._serial_settings.pop('url', None)
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None

        logger.info(f"SerialTransport initialized for port {self._port} with settings: {self._serial_settings}")

    @property
    def port(self) -> str:
        return self._port

    async def connect(self) -> None:
        """Opens the serial port."""
        async with self._connection_lock:
            if self._connected:
                logger.warning(f"Serial port {self._port} already connected.")
                return

            logger.info(f"Connecting to serial port {self._port}...")
            try:
                self._reader, self._writer = await serial_asyncio.open_serial_connection(
                    url=self._port, **self._serial_settings
                )
            except serial.SerialException as e:
                logger.error(f"Failed to connect to serial port {self._port}: {e}")
                self._reader = None
                self._writer = None
                raise SerialConnectionError(port=self._port, message=str(e), original_exception=e) from e
            except OSError as e:
                logger.error(f"Unexpected error connecting to {self._port}: {e}")
                self._reader = None
                self._writer = None
                raise ConnectionError(f"Unexpected error connecting to {self._port}: {e}", original_exception=e) from e

            self._connected = True
            logger.info(f"Serial port {self._port} connected successfully.")

    async def disconnect(self) -> None:
        """Closes the serial port."""
        async with self._connection_lock:
            if not self._connected:
                return

            logger.info(f"Disconnecting from serial port {self._port}...")
            writer = self._writer
            self._writer = None
            self._reader = None
            if writer and not writer.is_closing():
                try:
                    writer.close()
                    await writer.wait_closed()
                    logger.debug(f"Serial writer for {self._port} closed.")
                except (serial.SerialException, OSError) as e:
                    # The port is gone either way
                    logger.error(f"Error closing serial writer for {self._port}: {e}")

            self._connected = False
            logger.info(f"Serial port {self._port} disconnected.")

    async def write(self, data: bytes) -> int:
        if not self._connected or not self._writer:
            raise WriteError(f"Cannot write: serial port {self._port} not connected.")

        logger.debug(f"Serial sending ({len(data)} bytes) on {self._port}: {data.hex(' ').upper()}")
        try:
            self._writer.write(data)
            await self._writer.drain()
        except (serial.SerialException, OSError) as e:
            logger.error(f"Failed to write to serial port {self._port}: {e}")
            raise WriteError(f"Failed to write to serial port {self._port}", original_exception=e) from e
        return len(data)

    async def read(self, size: int, timeout: float) -> bytes:
        if not self._connected or not self._reader:
            raise ReadError(f"Cannot read: serial port {self._port} not connected.")

        try:
            data = await asyncio.wait_for(self._reader.read(size), timeout)
        except asyncio.TimeoutError:
            return b''
        except (serial.SerialException, OSError) as e:
            logger.error(f"Serial error during read on {self._port}: {e}")
            raise ReadError(f"Failed to read from serial port {self._port}", original_exception=e) from e

        if not data and self._reader.at_eof():
            raise ReadError(f"Serial port {self._port} closed")
        if data:
            logger.debug(f"Serial received ({len(data)} bytes) on {self._port}: {data.hex(' ').upper()}")
        return data

    async def clear_input(self) -> None:
        """Resets the OS input buffer, then empties bytes already queued in the stream reader."""
        if not self._connected or not self._writer or not self._reader:
            raise TransportError(f"Cannot clear input: serial port {self._port} not connected.")

        try:
            self._writer.transport.serial.reset_input_buffer()
        except (serial.SerialException, OSError) as e:
            raise TransportError(f"Failed to reset input buffer on {self._port}", original_exception=e) from e

        discarded = 0
        while True:
            try:
                chunk = await asyncio.wait_for(self._reader.read(4096), CLEAR_INPUT_POLL)
            except asyncio.TimeoutError:
                break
            if not chunk:
                break
            discarded += len(chunk)
        if discarded:
            logger.debug(f"Discarded {discarded} stale bytes on {self._port}")
