# uhf_gen2/transport/mock.py

import asyncio
import logging
from collections import deque
from typing import Any, Dict, List, Optional, Union

from uhf_gen2.transport.base import BaseTransport
from uhf_gen2.core.exceptions import ConnectionError, ReadError, WriteError

logger = logging.getLogger(__name__)

ScriptItem = Union[bytes, BaseException]


class MockTransport(BaseTransport):
    """
    A scripted transport for tests and simulation.

    Each ``read`` hands out the next scripted item: a chunk of bytes (split
    if larger than the requested size) or an exception, which is raised.
    With the script exhausted, reads return b'' like a quiet line. Written
    frames are recorded for inspection.

    Scripted responses model bytes that arrive after the next command, so
    ``clear_input`` leaves them alone. Bytes that are already sitting in the
    input buffer are modelled with ``inject_stale_input`` and are the only
    thing ``clear_input`` discards.
    """

    def __init__(self, connection_details: Optional[Dict[str, Any]] = None, name: str = "Mock"):
        super().__init__(connection_details)
        self._name = name
        self._response_queue: deque[ScriptItem] = deque()
        self._stale_input = bytearray()
        self._sent_data_queue: deque[bytes] = deque()
        self._write_errors: deque[BaseException] = deque()
        self._connect_error: Optional[BaseException] = None
        self._connection_delay = 0.0
        self.write_count = 0
        self.clear_count = 0

        logger.info(f"MockTransport '{self._name}' initialized.")

    async def connect(self) -> None:
        async with self._connection_lock:
            if self._connected:
                logger.warning(f"[{self._name}] Already connected.")
                return
            if self._connection_delay:
                await asyncio.sleep(self._connection_delay)
            if self._connect_error is not None:
                error, self._connect_error = self._connect_error, None
                raise ConnectionError(f"[{self._name}] Simulated connection failure", original_exception=error)
            self._connected = True
            logger.info(f"[{self._name}] Mock connection established.")

    async def disconnect(self) -> None:
        async with self._connection_lock:
            if not self._connected:
                return
            self._connected = False
            logger.info(f"[{self._name}] Mock connection closed.")

    async def write(self, data: bytes) -> int:
        if not self._connected:
            raise WriteError(f"[{self._name}] Cannot write: Not connected.")
        if self._write_errors:
            raise self._write_errors.popleft()

        logger.debug(f"[{self._name}] Simulating write: {data.hex(' ').upper()}")
        self._sent_data_queue.append(bytes(data))
        self.write_count += 1
        return len(data)

    async def read(self, size: int, timeout: float) -> bytes:
        if not self._connected:
            raise ReadError(f"[{self._name}] Cannot read: Not connected.")
        await asyncio.sleep(0)

        if self._stale_input:
            chunk = bytes(self._stale_input[:size])
            del self._stale_input[:size]
            return chunk
        if not self._response_queue:
            return b''

        item = self._response_queue.popleft()
        if isinstance(item, BaseException):
            raise item
        if len(item) > size:
            self._response_queue.appendleft(item[size:])
            item = item[:size]
        logger.debug(f"[{self._name}] Simulating receive: {item.hex(' ').upper()}")
        return item

    async def clear_input(self) -> None:
        self.clear_count += 1
        if self._stale_input:
            logger.debug(f"[{self._name}] Discarding {len(self._stale_input)} stale bytes")
            self._stale_input.clear()

    # --- Mock Control Methods ---

    def add_response(self, response: ScriptItem) -> None:
        """Queues one read result: a chunk of bytes or an exception to raise."""
        if isinstance(response, (bytes, bytearray)):
            response = bytes(response)
            logger.debug(f"[{self._name}] Adding mock response: {response.hex(' ').upper()}")
        self._response_queue.append(response)

    def add_responses(self, responses: List[ScriptItem]) -> None:
        for response in responses:
            self.add_response(response)

    def add_read_error(self, error: Optional[BaseException] = None) -> None:
        """Makes one scripted read fail with ``error`` (a ReadError by default)."""
        self._response_queue.append(error or ReadError(f"[{self._name}] Simulated read failure"))

    def add_write_error(self, error: Optional[BaseException] = None) -> None:
        """Makes the next write fail with ``error`` (a WriteError by default)."""
        self._write_errors.append(error or WriteError(f"[{self._name}] Simulated write failure"))

    def fail_next_connect(self, error: Optional[BaseException] = None) -> None:
        self._connect_error = error or OSError("Simulated connection failure")

    def inject_stale_input(self, data: bytes) -> None:
        """Places bytes in the input buffer as if they had arrived before the next command."""
        self._stale_input.extend(data)

    def get_sent_data(self) -> Optional[bytes]:
        """Retrieves the oldest written frame (FIFO)."""
        try:
            return self._sent_data_queue.popleft()
        except IndexError:
            return None

    def get_all_sent_data(self) -> List[bytes]:
        """Retrieves and clears all written frames."""
        data = list(self._sent_data_queue)
        self._sent_data_queue.clear()
        return data

    def pending_responses(self) -> int:
        return len(self._response_queue)

    def clear_response_queue(self) -> None:
        logger.debug(f"[{self._name}] Clearing mock response queue ({len(self._response_queue)} items).")
        self._response_queue.clear()

    def set_connection_delay(self, delay: float) -> None:
        self._connection_delay = max(0, delay)
