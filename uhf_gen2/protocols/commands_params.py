# uhf_gen2/protocols/commands_params.py
import logging
import struct

from uhf_gen2.core.exceptions import InvalidParameterError, InvalidResponseError
from uhf_gen2.protocols import constants as const
from uhf_gen2.protocols import framing
from uhf_gen2.protocols.gen2 import QueryParams, SelectParams
from uhf_gen2.protocols.types import Region, RfLinkProfile, SelectMode
from uhf_gen2.protocols.validation import require_byte, require_member, require_range

logger = logging.getLogger(__name__)


def _decode_fixed_payload(response: bytes, command: int, operation: str, length: int) -> bytes:
    """ Validates a NOTIFICATION reply whose LEN must equal ``length`` and returns the payload. """
    framing.expect_notification(response, command, operation,
                                min_length=const.MIN_FRAME_LENGTH + length)
    declared = framing.declared_length(response)
    if declared != length:
        raise InvalidResponseError(
            f"Failed to {operation}: expected {length} payload bytes, LEN field says {declared}",
            command=command, frame=bytes(response))
    return bytes(response[const.PARAMS_OFFSET:const.PARAMS_OFFSET + length])


# --- Transmit Power ---

def encode_set_tx_power_request(power_dbm: int) -> bytes:
    """ Encodes CMD_SET_TX_POWER (0xB6). Power travels as dBm * 100, big-endian. """
    require_range("Transmit power (dBm)", power_dbm, const.MIN_TX_POWER_DBM, const.MAX_TX_POWER_DBM)
    return struct.pack('>H', power_dbm * const.TX_POWER_SCALE)


def decode_get_tx_power_response(response: bytes) -> int:
    payload = _decode_fixed_payload(response, const.CMD_GET_TX_POWER, "get transmit power", 2)
    raw = struct.unpack('>H', payload)[0]
    return raw // const.TX_POWER_SCALE


# --- Region / Channel ---

def encode_set_region_request(region) -> bytes:
    return bytes([require_member("region", region, Region)])


def decode_get_region_response(response: bytes) -> Region:
    payload = _decode_fixed_payload(response, const.CMD_GET_REGION, "get region", 1)
    try:
        return Region.from_code(payload[0])
    except ValueError as e:
        raise InvalidResponseError(f"Unknown region code: 0x{payload[0]:02X}",
                                   command=const.CMD_GET_REGION, frame=bytes(response)) from e


def encode_channel_request(channel: int) -> bytes:
    """ Used by both CMD_SET_CHANNEL (0xAB) and CMD_INSERT_CHANNEL (0xA9). """
    return bytes([require_byte("Channel index", channel)])


def decode_get_channel_response(response: bytes) -> int:
    return _decode_fixed_payload(response, const.CMD_GET_CHANNEL, "get channel", 1)[0]


def encode_switch_request(enabled: bool) -> bytes:
    """ On/off parameter of CMD_SET_AUTO_FREQ_HOP (0xAD) and CMD_SET_CONTINUOUS_CARRIER (0xB0). """
    return bytes([const.SWITCH_ON if enabled else const.SWITCH_OFF])


# --- Select ---

def encode_set_select_param_request(params: SelectParams) -> bytes:
    if not isinstance(params, SelectParams):
        raise InvalidParameterError(f"Expected SelectParams, got {type(params).__name__}")
    return params.to_bytes()


def decode_get_select_param_response(response: bytes) -> SelectParams:
    """
    Decodes the select block that follows the 5-byte frame prefix. Header,
    pointer, mask length and truncate need at least 14 bytes of response.
    """
    framing.expect_notification(response, const.CMD_GET_SELECT_PARAM, "get select parameters", min_length=14)
    try:
        return SelectParams.from_bytes(bytes(response[const.PARAMS_OFFSET:-2]))
    except ValueError as e:
        raise InvalidResponseError(f"Invalid select parameter response: {e}",
                                   command=const.CMD_GET_SELECT_PARAM, frame=bytes(response)) from e


def encode_set_select_mode_request(mode) -> bytes:
    return bytes([require_member("select mode", mode, SelectMode)])


# --- Query ---

def encode_set_query_param_request(params: QueryParams) -> bytes:
    if not isinstance(params, QueryParams):
        raise InvalidParameterError(f"Expected QueryParams, got {type(params).__name__}")
    return params.to_bytes()


def decode_get_query_param_response(response: bytes) -> QueryParams:
    payload = _decode_fixed_payload(response, const.CMD_GET_QUERY_PARAM, "get query parameters", 2)
    try:
        return QueryParams.from_bytes(payload)
    except ValueError as e:
        raise InvalidResponseError(f"Invalid query parameter response: {e}",
                                   command=const.CMD_GET_QUERY_PARAM, frame=bytes(response)) from e


# --- RF Link Profile / Sensitivity ---

def encode_set_rf_link_profile_request(profile) -> bytes:
    return bytes([require_member("RF link profile", profile, RfLinkProfile)])


def decode_get_rf_link_profile_response(response: bytes) -> RfLinkProfile:
    payload = _decode_fixed_payload(response, const.CMD_GET_RF_LINK_PROFILE, "get RF link profile", 1)
    try:
        return RfLinkProfile.from_code(payload[0])
    except ValueError as e:
        raise InvalidResponseError(f"Unknown RF link profile: 0x{payload[0]:02X}",
                                   command=const.CMD_GET_RF_LINK_PROFILE, frame=bytes(response)) from e


def encode_set_reader_sensitivity_request(sensitivity: int) -> bytes:
    return bytes([require_byte("Reader sensitivity", sensitivity)])


def decode_get_reader_sensitivity_response(response: bytes) -> int:
    return _decode_fixed_payload(response, const.CMD_GET_READER_SENSITIVITY, "get reader sensitivity", 1)[0]
