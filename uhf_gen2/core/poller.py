# uhf_gen2/core/poller.py

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

from uhf_gen2.core.config import ReaderConfig, DEFAULT_CONFIG
from uhf_gen2.core.exceptions import InvalidParameterError, InvalidResponseError, TransportError
from uhf_gen2.core.status import PollState
from uhf_gen2.protocols import constants as const
from uhf_gen2.protocols import framing
from uhf_gen2.protocols.commands_tags import encode_multiple_poll_request, encode_stop_multiple_poll_request
from uhf_gen2.protocols.types import TagInfo
from uhf_gen2.transport.base import BaseTransport

logger = logging.getLogger(__name__)

# Called once per discovered tag; may be a plain function or a coroutine function
TagCallback = Callable[[TagInfo], Union[None, Awaitable[Any]]]


class StreamPoller:
    """
    Runs one multi-round poll session over a transport.

    The reader answers a multi-poll command with a stream of TAG frames and,
    when its round count runs out, an end-of-round notification. The poller
    reassembles frames from arbitrary read boundaries, hands each tag to the
    callback in stream order and decides when the session is over.

    A poller owns its accumulation buffer and is meant for a single session;
    the Reader creates a fresh one for every poll call.
    """

    def __init__(self, transport: BaseTransport, config: Optional[ReaderConfig] = None):
        self._transport = transport
        self._config = config or DEFAULT_CONFIG
        self._state = PollState.IDLE
        self._buffer = bytearray()
        self._tag_count = 0

    @property
    def state(self) -> PollState:
        return self._state

    @property
    def tag_count(self) -> int:
        """Tags delivered to the callback so far in this session."""
        return self._tag_count

    def _set_state(self, new_state: PollState) -> None:
        if self._state != new_state:
            logger.debug(f"Poll state changed: {self._state} -> {new_state}")
            self._state = new_state

    def _now(self) -> float:
        return asyncio.get_running_loop().time()

    async def run_rounds(self, rounds: int, callback: TagCallback) -> int:
        """
        Polls for ``rounds`` inventory rounds and returns the number of tags seen.

        The session ends on the end-of-round notification, or on the first
        read that comes back empty after ``max_poll_wait`` seconds.

        Raises:
            InvalidParameterError: ``rounds`` is outside 1-65535 (nothing is written).
            TransportError: The poll command could not be issued.
        """
        command = framing.build_frame(const.CMD_MULTIPLE_POLL, encode_multiple_poll_request(rounds))
        self._reset()
        try:
            self._set_state(PollState.POLLING)
            await self._transport.clear_input()
            await self._transport.write(command)
            logger.debug(f"Multi-poll issued for {rounds} rounds: {command.hex(' ').upper()}")
            await asyncio.sleep(self._config.poll_settle)

            start = self._now()
            while True:
                data = await self._read_chunk()
                if data:
                    self._buffer.extend(data)
                    for frame in framing.extract_frames(self._buffer):
                        if framing.is_end_of_round(frame):
                            logger.debug("End of poll rounds reported by reader")
                            return self._tag_count
                        await self._dispatch(frame, callback)
                    continue

                if self._now() - start > self._config.max_poll_wait:
                    logger.debug(f"No end-of-round notification within {self._config.max_poll_wait}s, stopping")
                    break
                await asyncio.sleep(self._config.idle_sleep)
            return self._tag_count
        finally:
            self._set_state(PollState.IDLE)

    async def run_for_duration(self, duration: float, callback: TagCallback) -> int:
        """
        Polls continuously for ``duration`` seconds and returns the number of tags seen.

        The reader is asked for the maximum round count; whenever it reports
        the end of its rounds while time remains, the poll is issued again.
        Once time is up the stop command is sent and stale bytes are drained.

        Raises:
            InvalidParameterError: ``duration`` is negative.
            TransportError: The initial poll command could not be issued.
        """
        if duration < 0:
            raise InvalidParameterError(f"Poll duration must not be negative, got {duration}")
        command = framing.build_frame(const.CMD_MULTIPLE_POLL, encode_multiple_poll_request(const.MAX_POLL_ROUNDS))
        self._reset()
        try:
            self._set_state(PollState.POLLING)
            await self._transport.clear_input()
            await self._transport.write(command)
            logger.debug(f"Continuous poll issued for {duration}s")

            start = self._now()
            while self._now() - start < duration:
                data = await self._read_chunk()
                if not data:
                    await asyncio.sleep(self._config.retry_sleep)
                    continue

                self._buffer.extend(data)
                for frame in framing.extract_frames(self._buffer):
                    if framing.is_end_of_round(frame):
                        if self._now() - start < duration:
                            logger.debug("Reader finished its rounds, re-issuing poll")
                            await self._write_quietly(command)
                        continue
                    await self._dispatch(frame, callback)

            self._set_state(PollState.DRAINING)
            await self._drain()
            return self._tag_count
        finally:
            self._set_state(PollState.IDLE)

    def _reset(self) -> None:
        self._buffer.clear()
        self._tag_count = 0

    async def _read_chunk(self) -> bytes:
        """One read; transport failures count as "nothing yet"."""
        try:
            return await self._transport.read(self._config.read_size, self._config.poll_read_timeout)
        except TransportError as e:
            logger.warning(f"Transient read error while polling: {e}")
            return b''

    async def _write_quietly(self, data: bytes) -> None:
        try:
            await self._transport.write(data)
        except TransportError as e:
            logger.warning(f"Write failed while polling: {e}")

    async def _dispatch(self, frame: bytes, callback: TagCallback) -> None:
        try:
            tag = framing.parse_tag_frame(frame)
        except InvalidResponseError as e:
            logger.warning(f"Failed to parse frame: {e}")
            return
        if tag is None:
            logger.debug(f"Ignoring non-tag frame: {frame.hex(' ').upper()}")
            return

        self._tag_count += 1
        logger.debug(f"Tag discovered: EPC={tag.epc} RSSI={tag.rssi}")
        try:
            result = callback(tag)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            cb_name = getattr(callback, '__name__', repr(callback))
            logger.error(f"Error executing tag callback {cb_name}: {e}", exc_info=True)

    async def _drain(self) -> None:
        """Stops the reader and discards whatever it still sends."""
        await self._write_quietly(framing.build_frame(const.CMD_STOP_MULTIPLE_POLL,
                                                      encode_stop_multiple_poll_request()))
        await asyncio.sleep(self._config.drain_settle)
        discarded = 0
        while True:
            try:
                data = await self._transport.read(self._config.read_size, self._config.poll_read_timeout)
            except TransportError as e:
                logger.debug(f"Read error while draining, giving up: {e}")
                break
            if not data:
                break
            discarded += len(data)
        self._buffer.clear()
        if discarded:
            logger.debug(f"Drained {discarded} bytes after stopping the poll")
