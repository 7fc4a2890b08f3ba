# uhf_gen2/protocols/commands_device.py
import logging

from uhf_gen2.protocols import constants as const
from uhf_gen2.protocols import framing
from uhf_gen2.protocols.types import BaudRate
from uhf_gen2.protocols.validation import require_member

logger = logging.getLogger(__name__)


def encode_get_firmware_request() -> bytes:
    # Info type selector: 0x00 hardware, 0x01 software, 0x02 manufacturer
    return bytes([const.FIRMWARE_SOFTWARE_VERSION])


def decode_get_firmware_response(response: bytes) -> str:
    """ Decodes the software version string. LEN is not trusted; the text runs up to the checksum. """
    version = framing.parse_firmware_version(response)
    logger.debug(f"Decoded firmware version: {version!r}")
    return version


def encode_set_baud_rate_request(rate) -> bytes:
    """ Encodes CMD_SET_BAUD_RATE (0x11). ``rate`` is a BaudRate or its index 0-2. """
    baud = require_member("baud rate index", rate, BaudRate)
    logger.info(f"Encoding baud rate change to {baud.bps} bps")
    return bytes([baud])


def decode_status_response(response: bytes, command: int, operation: str) -> None:
    """ Shared decoder for replies that carry only a status byte (0x00 = success). """
    framing.expect_success(response, command, operation)
