# uhf_gen2/protocols/framing.py

import logging
import struct
from dataclasses import dataclass
from typing import Iterator, Optional

from uhf_gen2.protocols import constants as const
from uhf_gen2.protocols.types import TagInfo
from uhf_gen2.core.exceptions import (
    FrameParseError, ChecksumError, InvalidResponseError, ReaderStatusError
)

logger = logging.getLogger(__name__)


def bytes_to_hex(data: bytes) -> str:
    """Returns ``data`` as an uppercase hex string without separators."""
    return data.hex().upper()


# --- Checksum Calculation ---

def calculate_checksum(data: bytes) -> int:
    """
    Calculates the frame checksum for the given data buffer.

    The checksum is the 8-bit wraparound sum of every byte from the frame type
    up to and including the last parameter byte (the header is not included).

    Args:
        data: The byte sequence TYPE, COMMAND, LEN_HI, LEN_LO, PARAMS...

    Returns:
        The calculated checksum byte (as an integer 0-255).
    """
    return sum(data) & 0xFF


# --- Frame Building ---

def build_frame(command: int, parameters: bytes = b'', frame_type: int = const.FRAME_TYPE_COMMAND) -> bytes:
    """
    Constructs a complete protocol frame.

    Args:
        command: The command code (0x00-0xFF).
        parameters: The parameter bytes. Defaults to empty bytes.
        frame_type: The frame type. Host frames are always FRAME_TYPE_COMMAND;
                    other values are used to build reader-side frames in tests.

    Returns:
        HEADER, TYPE, COMMAND, LEN_HI, LEN_LO, PARAMS..., CHECKSUM, END

    Raises:
        ValueError: If an input is outside the range the frame can carry.
    """
    if not (0x00 <= frame_type <= 0xFF):
        raise ValueError(f"Invalid frame_type: {frame_type}. Must be between 0x00 and 0xFF.")
    if not (0x00 <= command <= 0xFF):
        raise ValueError(f"Invalid command: {command}. Must be between 0x00 and 0xFF.")

    param_len = len(parameters)
    if param_len > const.MAX_PARAM_LENGTH:
        raise ValueError(f"Parameter length {param_len} exceeds maximum allowed ({const.MAX_PARAM_LENGTH} bytes).")

    # > = Big-endian, B = unsigned char, H = unsigned short
    body = struct.pack('>BBH', frame_type, command, param_len) + bytes(parameters)
    checksum = calculate_checksum(body)
    return bytes([const.FRAME_HEADER]) + body + bytes([checksum, const.FRAME_END])


# --- Strict Frame Parsing ---

@dataclass(frozen=True)
class Frame:
    """A complete frame that passed structural and checksum validation."""
    frame_type: int
    command: int
    params: bytes
    checksum: int
    raw: bytes

    @property
    def status(self) -> Optional[int]:
        """First parameter byte (the status code of notification replies)."""
        return self.params[0] if self.params else None


def parse_frame(data: bytes) -> Frame:
    """
    Parses and validates a single frame occupying all of ``data``.

    Raises:
        FrameParseError: Short data, wrong header/terminator or a LEN field that
                         disagrees with the physical length.
        ChecksumError: The checksum byte does not match the frame content.
    """
    data = bytes(data)
    if len(data) < const.MIN_FRAME_LENGTH:
        raise FrameParseError(
            f"Data length {len(data)} is less than minimum frame length {const.MIN_FRAME_LENGTH}.",
            frame=data)
    if data[0] != const.FRAME_HEADER:
        raise FrameParseError(f"Frame does not start with header 0x{const.FRAME_HEADER:02X}.", frame=data)
    if data[-1] != const.FRAME_END:
        raise FrameParseError(f"Frame does not end with terminator 0x{const.FRAME_END:02X}.", frame=data)

    frame_type, command, declared_len = struct.unpack('>BBH', data[1:const.PARAMS_OFFSET])
    actual_len = len(data) - const.MIN_FRAME_LENGTH
    if declared_len != actual_len:
        raise FrameParseError(
            f"Declared param length {declared_len} does not match the {actual_len} parameter bytes present.",
            frame=data)

    params = data[const.PARAMS_OFFSET:const.PARAMS_OFFSET + declared_len]
    received_checksum = data[-2]
    calculated = calculate_checksum(data[1:-2])
    if calculated != received_checksum:
        raise ChecksumError(calculated, received_checksum, data)

    return Frame(frame_type=frame_type, command=command, params=params, checksum=received_checksum, raw=data)


# --- Response Checks ---

def check_header(response: bytes, command: Optional[int] = None) -> None:
    """Raises InvalidResponseError unless ``response`` is long enough and starts with HEADER."""
    if len(response) < const.MIN_FRAME_LENGTH:
        raise InvalidResponseError(
            f"Response too short: {len(response)} bytes (minimum {const.MIN_FRAME_LENGTH})",
            command=command, frame=response)
    if response[0] != const.FRAME_HEADER:
        raise InvalidResponseError(
            f"Invalid response header: 0x{response[0]:02X}", command=command, frame=response)


def warn_on_checksum(response: bytes) -> None:
    """Logs a warning when the frame's checksum byte does not add up. Never raises."""
    if len(response) < const.MIN_FRAME_LENGTH:
        return
    calculated = calculate_checksum(response[1:-2])
    if calculated != response[-2]:
        logger.warning(
            f"Checksum mismatch in response (calculated 0x{calculated:02X}, "
            f"received 0x{response[-2]:02X}): {response.hex(' ').upper()}")


def expect_notification(response: bytes, command: Optional[int], operation: str,
                        min_length: int = const.MIN_FRAME_LENGTH) -> int:
    """
    Validates a NOTIFICATION reply and returns its status byte.

    Args:
        response: Raw bytes read from the transport.
        command: Expected command echo, or None to accept any echo.
        operation: Human readable operation name for error messages.
        min_length: Minimum response length required by the operation.

    Raises:
        InvalidResponseError: Short frame, wrong header, type or command echo.
    """
    check_header(response, command)
    if len(response) < min_length:
        raise InvalidResponseError(
            f"Failed to {operation}: response too short ({len(response)} bytes)", command=command, frame=response)
    if response[const.OFFSET_TYPE] != const.FRAME_TYPE_NOTIFICATION:
        raise InvalidResponseError(
            f"Failed to {operation}: unexpected frame type 0x{response[const.OFFSET_TYPE]:02X}",
            command=command, frame=response)
    echo = response[const.OFFSET_COMMAND]
    if command is not None and echo != command:
        raise InvalidResponseError(
            f"Failed to {operation}: unexpected command echo 0x{echo:02X}",
            command=command, frame=response)
    warn_on_checksum(response)
    return response[const.OFFSET_STATUS]


def expect_success(response: bytes, command: Optional[int], operation: str) -> None:
    """Like expect_notification, but also requires the status byte to be 0x00."""
    status = expect_notification(response, command, operation)
    if status != const.STATUS_SUCCESS:
        raise ReaderStatusError(command if command is not None else response[const.OFFSET_COMMAND],
                                status, frame=bytes(response), operation=operation[:1].upper() + operation[1:])


def declared_length(response: bytes) -> int:
    """Returns the big-endian LEN field of a frame (caller guarantees >= 5 bytes)."""
    return (response[const.OFFSET_LEN_HI] << 8) | response[const.OFFSET_LEN_LO]


# --- Typed Response Decoders ---

def parse_tag_frame(response: bytes) -> Optional[TagInfo]:
    """
    Decodes a TAG frame into a TagInfo.

    Returns None for responses too short to hold tag data and for
    well-formed non-TAG frames (the "no tag" notification).

    Raises:
        InvalidResponseError: Bad header, or a LEN that claims more EPC bytes than exist.
    """
    if len(response) < const.TAG_FRAME_MIN_LENGTH:
        return None

    if response[0] != const.FRAME_HEADER:
        raise InvalidResponseError(
            f"Invalid response header: {response.hex(' ').upper()}", frame=bytes(response))
    if response[const.OFFSET_TYPE] != const.FRAME_TYPE_TAG:
        return None

    data_length = response[const.OFFSET_LEN_LO]
    rssi = response[const.OFFSET_STATUS]
    epc_start = const.TAG_EPC_OFFSET
    epc_end = epc_start + max(data_length - const.TAG_EPC_OVERHEAD, 0)
    if epc_end > len(response):
        raise InvalidResponseError(
            f"Invalid tag response: data_length claims {data_length} bytes "
            f"but response only has {len(response)} bytes", frame=bytes(response))

    return TagInfo(epc=bytes_to_hex(bytes(response[epc_start:epc_end])), rssi=rssi)


def parse_firmware_version(response: bytes) -> str:
    """Decodes the firmware version string, replacing undecodable bytes."""
    if (len(response) > const.PARAMS_OFFSET + 1
            and response[0] == const.FRAME_HEADER
            and response[const.OFFSET_TYPE] == const.FRAME_TYPE_NOTIFICATION):
        # Skip the leading info-type byte; drop checksum and terminator
        return bytes(response[const.PARAMS_OFFSET + 1:-2]).decode('utf-8', errors='replace')
    raise InvalidResponseError("Invalid firmware response", command=const.CMD_GET_FIRMWARE, frame=bytes(response))


# --- Stream Reassembly ---

def is_end_of_round(frame: bytes) -> bool:
    """True for the notification the module sends when a multi-poll round runs out."""
    return (len(frame) >= 8
            and frame[const.OFFSET_TYPE] == const.FRAME_TYPE_NOTIFICATION
            and frame[const.OFFSET_COMMAND] == const.CMD_NOTIFICATION_EVENT
            and frame[const.OFFSET_STATUS] == const.STATUS_INVENTORY_FAILED)


def extract_frames(buffer: bytearray) -> Iterator[bytes]:
    """
    Yields complete frames from ``buffer`` in stream order, consuming them.

    Each frame ends at the first terminator byte and starts at the nearest
    header byte before it. Bytes ahead of that header, and spans ending in a
    terminator with no header at all, are discarded. Trailing bytes without a
    terminator stay in the buffer for the next read.
    """
    while True:
        frame_end = buffer.find(const.FRAME_END)
        if frame_end == -1:
            return
        frame_start = buffer.rfind(const.FRAME_HEADER, 0, frame_end)
        if frame_start == -1:
            logger.warning(f"Discarding {frame_end + 1} bytes without a frame header: "
                           f"{bytes(buffer[:frame_end + 1]).hex(' ').upper()}")
            del buffer[:frame_end + 1]
            continue
        if frame_start > 0:
            logger.debug(f"Discarding {frame_start} bytes ahead of frame header")
        frame = bytes(buffer[frame_start:frame_end + 1])
        del buffer[:frame_end + 1]
        yield frame
