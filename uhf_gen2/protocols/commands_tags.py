# uhf_gen2/protocols/commands_tags.py
import logging
import struct
from typing import List, Optional, Union

from uhf_gen2.core.exceptions import InvalidParameterError, InvalidResponseError, ReaderStatusError
from uhf_gen2.protocols import constants as const
from uhf_gen2.protocols import framing
from uhf_gen2.protocols.gen2 import LockPayload
from uhf_gen2.protocols.types import MemoryBank, TagInfo
from uhf_gen2.protocols.validation import require_byte, require_member, require_range
from uhf_gen2.utils.tag_utils import parse_password

logger = logging.getLogger(__name__)

Password = Union[bytes, bytearray, str]

# --- Inventory ---

def encode_single_poll_request() -> bytes:
    # Single poll has no parameters
    return b''


def decode_single_poll_response(response: bytes) -> Optional[TagInfo]:
    """
    Returns the tag in the field, or None for the "no tag" notification and
    for replies too short to carry a tag (including an empty read).
    """
    framing.warn_on_checksum(response)
    return framing.parse_tag_frame(response)


def encode_multiple_poll_request(rounds: int) -> bytes:
    """ Encodes CMD_MULTIPLE_POLL (0x27): reserved byte 0x22 then the 16-bit round count. """
    require_range("Poll rounds", rounds, 1, const.MAX_POLL_ROUNDS)
    return struct.pack('>BH', const.MULTIPLE_POLL_RESERVED, rounds)


def encode_stop_multiple_poll_request() -> bytes:
    return b''


# --- Tag Memory Access ---

def encode_read_tag_data_request(password: Password, mem_bank, word_ptr: int, word_count: int) -> bytes:
    """ Encodes CMD_READ_TAG_DATA (0x39): password(4), bank, word pointer, word count. """
    bank = require_member("memory bank", mem_bank, MemoryBank)
    require_byte("Word pointer", word_ptr)
    require_range("Word count", word_count, 1, 0xFF)
    return parse_password(password) + bytes([bank, word_ptr, word_count])


def decode_read_tag_data_response(response: bytes) -> bytes:
    """
    A TAG frame carries the data (LEN bytes from offset 5). A NOTIFICATION
    frame means the read failed; its first parameter byte is the error code.
    """
    framing.check_header(response, const.CMD_READ_TAG_DATA)
    if len(response) < const.MIN_FRAME_LENGTH + 1 or response[const.OFFSET_COMMAND] != const.CMD_READ_TAG_DATA:
        raise InvalidResponseError("Invalid read response", command=const.CMD_READ_TAG_DATA, frame=bytes(response))

    frame_type = response[const.OFFSET_TYPE]
    if frame_type == const.FRAME_TYPE_TAG:
        data_end = const.PARAMS_OFFSET + framing.declared_length(response)
        if len(response) < data_end + 2:
            raise InvalidResponseError("Response too short for data",
                                       command=const.CMD_READ_TAG_DATA, frame=bytes(response))
        framing.warn_on_checksum(response)
        return bytes(response[const.PARAMS_OFFSET:data_end])
    if frame_type == const.FRAME_TYPE_NOTIFICATION:
        raise ReaderStatusError(const.CMD_READ_TAG_DATA, response[const.OFFSET_STATUS],
                                frame=bytes(response), operation="Read")
    raise InvalidResponseError(f"Unexpected response type 0x{frame_type:02X}",
                               command=const.CMD_READ_TAG_DATA, frame=bytes(response))


def encode_write_tag_data_request(password: Password, mem_bank, word_ptr: int, data: bytes) -> bytes:
    """ Encodes CMD_WRITE_TAG_DATA (0x49). ``data`` must be whole words, at most 64 bytes. """
    bank = require_member("memory bank", mem_bank, MemoryBank)
    require_byte("Word pointer", word_ptr)
    if not data:
        raise InvalidParameterError("Data cannot be empty")
    if len(data) % 2 != 0:
        raise InvalidParameterError("Data length must be even (word-aligned)")
    if len(data) > const.MAX_WRITE_DATA_BYTES:
        raise InvalidParameterError(f"Data length exceeds maximum of {const.MAX_WRITE_DATA_BYTES} bytes")
    word_count = len(data) // 2
    return parse_password(password) + bytes([bank, word_ptr, word_count]) + bytes(data)


def encode_lock_tag_request(password: Password, payload: LockPayload) -> bytes:
    if not isinstance(payload, LockPayload):
        raise InvalidParameterError(f"Expected LockPayload, got {type(payload).__name__}")
    return parse_password(password) + payload.to_bytes()


def encode_kill_tag_request(kill_password: Password) -> bytes:
    password = parse_password(kill_password)
    # Gen2 tags cannot be killed with the zero password
    if password == bytes(const.PASSWORD_LENGTH):
        raise InvalidParameterError("Kill password must be non-zero")
    return password


# --- Reader Buffer ---

def encode_inventory_buffer_request(rounds: int) -> bytes:
    require_range("Inventory rounds", rounds, 1, const.MAX_POLL_ROUNDS)
    return struct.pack('>BH', const.MULTIPLE_POLL_RESERVED, rounds)


def decode_get_buffer_data_response(response: bytes) -> List[TagInfo]:
    """
    Decodes the buffered tag list.

    Entries are RSSI(1) PC(2) EPC. The EPC length is not read from the PC
    word: every entry is assumed to carry a 12-byte EPC (fewer if the frame
    ends first), so tags with other EPC sizes are split incorrectly.
    """
    framing.expect_notification(response, const.CMD_GET_BUFFER_DATA, "read buffer data")
    data_len = framing.declared_length(response)
    if data_len == 1 and response[const.OFFSET_STATUS] == const.STATUS_SUCCESS:
        return []

    tags: List[TagInfo] = []
    offset = const.PARAMS_OFFSET
    while offset + 4 < len(response) - 2:
        if response[offset] == 0x00 or offset >= data_len + const.PARAMS_OFFSET:
            break
        rssi = response[offset]
        epc_len = min(const.BUFFER_EPC_LENGTH, len(response) - offset - 3)
        epc = bytes(response[offset + 3:offset + 3 + epc_len])
        tags.append(TagInfo(epc=framing.bytes_to_hex(epc), rssi=rssi))
        offset += 3 + epc_len

    logger.debug(f"Decoded {len(tags)} buffered tags")
    return tags
