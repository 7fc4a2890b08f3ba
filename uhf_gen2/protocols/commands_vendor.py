# uhf_gen2/protocols/commands_vendor.py

"""
Request encoders and reply decoders for chip-vendor commands: Gen2 block
permalock, the NXP UCODE custom commands and Impinj Monza QT.
"""

import logging
import struct

from uhf_gen2.core.exceptions import InvalidParameterError, InvalidResponseError
from uhf_gen2.protocols import constants as const
from uhf_gen2.protocols import framing
from uhf_gen2.protocols.gen2 import QtControl
from uhf_gen2.protocols.types import MemoryBank
from uhf_gen2.protocols.validation import require_byte, require_member, require_word
from uhf_gen2.utils.tag_utils import parse_password

logger = logging.getLogger(__name__)


def encode_block_permalock_request(password, mem_bank, block_ptr: int, block_range: int, mask: int) -> bytes:
    """ Encodes CMD_BLOCK_PERMALOCK (0xD3): password, bank, block pointer, block range, 16-bit mask. """
    bank = require_member("memory bank", mem_bank, MemoryBank)
    require_byte("Block pointer", block_ptr)
    require_byte("Block range", block_range)
    require_word("Block mask", mask)
    return parse_password(password) + struct.pack('>BBBH', bank, block_ptr, block_range, mask)


# --- NXP UCODE ---

def encode_nxp_password_request(password) -> bytes:
    """ Parameters of NXP ReadProtect (0xE1) and Reset ReadProtect (0xE2): the access password only. """
    return parse_password(password)


def encode_nxp_change_eas_request(password, enabled: bool) -> bytes:
    return parse_password(password) + bytes([0x01 if enabled else 0x00])


def encode_nxp_change_config_request(password, config_word: int) -> bytes:
    require_word("Config word", config_word)
    return parse_password(password) + struct.pack('>H', config_word)


def decode_nxp_eas_alarm_response(response: bytes) -> bool:
    """
    A TAG frame means an EAS-enabled tag answered. A NOTIFICATION reports
    True only with a zero status byte.
    """
    framing.check_header(response, const.CMD_NXP_EAS_ALARM)
    frame_type = response[const.OFFSET_TYPE]
    if frame_type == const.FRAME_TYPE_TAG:
        return True
    if frame_type == const.FRAME_TYPE_NOTIFICATION:
        status = response[const.OFFSET_STATUS]
        if status != const.STATUS_SUCCESS:
            logger.debug(f"No EAS alarm (status 0x{status:02X})")
        return status == const.STATUS_SUCCESS
    raise InvalidResponseError(f"Unexpected response type 0x{frame_type:02X}",
                               command=const.CMD_NXP_EAS_ALARM, frame=bytes(response))


# --- Impinj Monza QT ---

def encode_impinj_monza_qt_request(password, qt_control: QtControl, read: bool) -> bytes:
    """ Encodes CMD_IMPINJ_MONZA_QT (0xE5): password, read/write flag (read = 0x00), QT control byte. """
    if not isinstance(qt_control, QtControl):
        raise InvalidParameterError(f"Expected QtControl, got {type(qt_control).__name__}")
    rw_flag = const.QT_READ if read else const.QT_WRITE
    return parse_password(password) + bytes([rw_flag, qt_control.to_byte()])


def decode_impinj_monza_qt_response(response: bytes) -> int:
    """ Returns the QT control byte reported by the tag (the byte after the status). """
    framing.expect_success(response, const.CMD_IMPINJ_MONZA_QT, "Impinj Monza QT")
    if len(response) < const.MIN_FRAME_LENGTH + 1:
        raise InvalidResponseError("Impinj Monza QT response too short",
                                   command=const.CMD_IMPINJ_MONZA_QT, frame=bytes(response))
    return response[const.OFFSET_STATUS + 1]
