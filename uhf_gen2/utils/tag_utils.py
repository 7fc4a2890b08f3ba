# uhf_gen2/utils/tag_utils.py
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

from uhf_gen2.core.exceptions import InvalidParameterError, UhfError
from uhf_gen2.protocols import constants as const
from uhf_gen2.protocols.types import MemoryBank

if TYPE_CHECKING:
    from uhf_gen2.core.reader import Reader

logger = logging.getLogger(__name__)

TID_ALLOCATION_CLASS_GEN2 = 0xE2
TID_HEADER_WORDS = 2 # ACI, mask designer id, model number
NO_PASSWORD = bytes(const.PASSWORD_LENGTH)


def hex_to_bytes(value: str) -> bytes:
    """
    Converts a hex string to bytes. Spaces and an optional '0x' prefix are ignored.

    Raises:
        InvalidParameterError: The string is not valid hex.
    """
    cleaned = value.strip().replace(' ', '')
    if cleaned[:2].lower() == '0x':
        cleaned = cleaned[2:]
    try:
        return bytes.fromhex(cleaned)
    except ValueError as e:
        raise InvalidParameterError(f"Invalid hex string: {value!r}") from e


def parse_password(password: Union[str, bytes, bytearray, None]) -> bytes:
    """
    Normalizes an access or kill password to its 4-byte wire form.

    Accepts 4 raw bytes or an 8-digit hex string ("00000000", "DE AD BE EF").
    None means the all-zero password.
    """
    if password is None:
        return NO_PASSWORD
    if isinstance(password, str):
        password = hex_to_bytes(password)
    if not isinstance(password, (bytes, bytearray)):
        raise InvalidParameterError(f"Password must be bytes or a hex string, got {type(password).__name__}")
    if len(password) != const.PASSWORD_LENGTH:
        raise InvalidParameterError(
            f"Password must be {const.PASSWORD_LENGTH} bytes, got {len(password)}")
    return bytes(password)


def pc_word_epc_length(pc_word: int) -> int:
    """Returns the EPC length in bytes encoded in the top 5 bits of a Gen2 PC word."""
    return ((pc_word >> 11) & 0x1F) * 2


@dataclass(frozen=True)
class TidInfo:
    """Fields decoded from the first two words of TID memory."""
    raw: bytes
    allocation_class: int
    mask_designer_id: Optional[int] = None
    model_number: Optional[int] = None


def parse_tid(tid_data: bytes) -> TidInfo:
    """
    Parses the TID header (allocation class, mask designer id, tag model number).

    Only the Gen2 allocation class (0xE2) carries the designer and model fields;
    other classes come back with those fields set to None.

    Raises:
        ValueError: Fewer than 4 bytes were given.
    """
    if len(tid_data) < TID_HEADER_WORDS * 2:
        raise ValueError(f"TID data must hold at least 4 bytes, got {len(tid_data)}")

    aci = tid_data[0]
    if aci != TID_ALLOCATION_CLASS_GEN2:
        logger.warning(f"Unknown TID allocation class 0x{aci:02X}")
        return TidInfo(raw=bytes(tid_data), allocation_class=aci)

    mask_designer_id = (tid_data[1] << 4) | (tid_data[2] >> 4)
    model_number = ((tid_data[2] & 0x0F) << 8) | tid_data[3]
    return TidInfo(raw=bytes(tid_data), allocation_class=aci,
                   mask_designer_id=mask_designer_id, model_number=model_number)


async def identify_tag(reader: 'Reader', password: Union[str, bytes, None] = None) -> Optional[TidInfo]:
    """
    Reads the TID header of the tag in the field and decodes it.

    Use ``set_select_param`` beforehand to address one tag among several.

    Returns:
        The parsed TID, or None when the read or the parse fails.
    """
    try:
        tid_data = await reader.read_tag_data(parse_password(password), MemoryBank.TID, 0, TID_HEADER_WORDS)
        tid = parse_tid(tid_data)
    except UhfError as e:
        logger.warning(f"Failed to read TID: {e}")
        return None
    except ValueError as e:
        logger.warning(f"Failed to parse TID data: {e}")
        return None

    logger.info(f"Identified tag: TID={tid.raw.hex().upper()} MDID={tid.mask_designer_id} TMN={tid.model_number}")
    return tid
