# tests/protocols/test_framing.py

import pytest

from uhf_gen2.protocols import framing
from uhf_gen2.protocols import constants as const
from uhf_gen2.protocols.types import TagInfo
from uhf_gen2.core.exceptions import (
    ChecksumError, FrameParseError, InvalidResponseError, ReaderStatusError
)

# --- Test Data ---

TAG_FRAME = bytes.fromhex("BB 02 22 00 11 C8 00 00 E2 00 68 16 00 00 00 60 12 34 56 78 00 7E")
NO_TAG_FRAME = bytes.fromhex("BB 01 22 00 01 00 00 7E")
END_OF_ROUND_FRAME = bytes.fromhex("BB 01 FF 00 01 15 00 7E")
FIRMWARE_FRAME = bytes.fromhex("BB 01 03 00 0A 00") + b"V1.0.0" + bytes.fromhex("00 7E")

# --- Frame Building ---

@pytest.mark.parametrize("command, params, expected_hex", [
    (const.CMD_GET_FIRMWARE, bytes([0x01]), "BB 00 03 00 01 01 05 7E"),
    (const.CMD_SINGLE_POLL, b'', "BB 00 22 00 00 22 7E"),
    (const.CMD_MULTIPLE_POLL, bytes([0x22, 0x27, 0x10]), "BB 00 27 00 03 22 27 10 83 7E"),
    (const.CMD_SET_TX_POWER, bytes([0x07, 0xD0]), "BB 00 B6 00 02 07 D0 8F 7E"),
    (const.CMD_STOP_MULTIPLE_POLL, b'', "BB 00 28 00 00 28 7E"),
    (const.CMD_SET_SELECT_MODE, bytes([0x01]), "BB 00 12 00 01 01 14 7E"),
    (const.CMD_SET_QUERY_PARAM, bytes([0x10, 0x20]), "BB 00 0E 00 02 10 20 40 7E"),
    (const.CMD_SET_REGION, bytes([0x02]), "BB 00 07 00 01 02 0A 7E"),
    (const.CMD_SET_CHANNEL, bytes([0x0A]), "BB 00 AB 00 01 0A B6 7E"),
])
def test_build_frame(command, params, expected_hex):
    assert framing.build_frame(command, params) == bytes.fromhex(expected_hex)


@pytest.mark.parametrize("params", [b'', b'\x00', bytes(range(10)), b'\xFF' * 300])
def test_build_frame_length_and_checksum(params):
    frame = framing.build_frame(0x49, params)
    assert len(frame) == len(params) + 7
    assert frame[0] == const.FRAME_HEADER
    assert frame[-1] == const.FRAME_END
    assert frame[-2] == sum(frame[1:-2]) & 0xFF


def test_build_frame_params_too_long():
    with pytest.raises(ValueError, match="exceeds maximum"):
        framing.build_frame(0x49, bytes(const.MAX_PARAM_LENGTH + 1))


def test_build_frame_invalid_command():
    with pytest.raises(ValueError, match="Invalid command"):
        framing.build_frame(0x100)


def test_calculate_checksum_wraps():
    assert framing.calculate_checksum(bytes([0xFF, 0x02])) == 0x01
    assert framing.calculate_checksum(b'') == 0


def test_bytes_to_hex():
    assert framing.bytes_to_hex(b'') == ""
    assert framing.bytes_to_hex(bytes([0xDE, 0xAD, 0x0B])) == "DEAD0B"

# --- Strict Parsing ---

def test_parse_frame_valid():
    raw = framing.build_frame(const.CMD_GET_CHANNEL, bytes([0x0A]), frame_type=const.FRAME_TYPE_NOTIFICATION)
    frame = framing.parse_frame(raw)
    assert frame.frame_type == const.FRAME_TYPE_NOTIFICATION
    assert frame.command == const.CMD_GET_CHANNEL
    assert frame.params == bytes([0x0A])
    assert frame.status == 0x0A
    assert frame.raw == raw


def test_parse_frame_empty_params():
    frame = framing.parse_frame(framing.build_frame(const.CMD_SINGLE_POLL))
    assert frame.params == b''
    assert frame.status is None


def test_parse_frame_checksum_mismatch():
    raw = bytearray(framing.build_frame(const.CMD_GET_FIRMWARE, bytes([0x01])))
    raw[-2] ^= 0xFF
    with pytest.raises(ChecksumError) as exc_info:
        framing.parse_frame(bytes(raw))
    assert exc_info.value.calculated_checksum == 0x05
    assert exc_info.value.received_checksum == 0xFA


@pytest.mark.parametrize("raw, match", [
    (bytes.fromhex("BB 00 22 00 7E"), "minimum frame length"),
    (bytes.fromhex("AA 00 22 00 00 22 7E"), "header"),
    (bytes.fromhex("BB 00 22 00 00 22 7F"), "terminator"),
    (bytes.fromhex("BB 00 22 00 02 01 25 7E"), "does not match"),
])
def test_parse_frame_structure_errors(raw, match):
    with pytest.raises(FrameParseError, match=match):
        framing.parse_frame(raw)


def test_frame_errors_are_invalid_responses():
    with pytest.raises(InvalidResponseError):
        framing.parse_frame(b'\xBB')

# --- Response Checks ---

def test_expect_notification_returns_status():
    response = bytes.fromhex("BB 01 B6 00 01 00 00 7E")
    assert framing.expect_notification(response, const.CMD_SET_TX_POWER, "set transmit power") == 0x00


def test_expect_notification_wrong_echo():
    response = bytes.fromhex("BB 01 B7 00 01 00 00 7E")
    with pytest.raises(InvalidResponseError, match="command echo") as exc_info:
        framing.expect_notification(response, const.CMD_SET_TX_POWER, "set transmit power")
    assert exc_info.value.command == const.CMD_SET_TX_POWER


def test_expect_notification_wrong_type():
    response = bytes.fromhex("BB 02 B6 00 01 00 00 7E")
    with pytest.raises(InvalidResponseError, match="frame type"):
        framing.expect_notification(response, const.CMD_SET_TX_POWER, "set transmit power")


def test_expect_success_device_error():
    response = bytes.fromhex("BB 01 B6 00 01 01 00 7E")
    with pytest.raises(ReaderStatusError) as exc_info:
        framing.expect_success(response, const.CMD_SET_TX_POWER, "set transmit power")
    assert exc_info.value.status == 0x01
    assert exc_info.value.command == const.CMD_SET_TX_POWER
    assert "Set transmit power failed" in str(exc_info.value)


def test_checksum_mismatch_only_warns(caplog):
    response = bytes.fromhex("BB 01 B6 00 01 00 00 7E") # checksum should be 0xB8
    with caplog.at_level("WARNING"):
        framing.expect_success(response, const.CMD_SET_TX_POWER, "set transmit power")
    assert "Checksum mismatch" in caplog.text

# --- Typed Decoders ---

def test_parse_tag_frame():
    tag = framing.parse_tag_frame(TAG_FRAME)
    assert tag == TagInfo("E20068160000006012345678")
    assert tag.rssi == 0xC8


def test_parse_tag_frame_short_is_none():
    assert framing.parse_tag_frame(NO_TAG_FRAME) is None
    assert framing.parse_tag_frame(b'') is None


def test_parse_tag_frame_notification_is_none():
    frame = bytes.fromhex("BB 01 22 00 05 15 00 00 00 00 00 7E")
    assert framing.parse_tag_frame(frame) is None


def test_parse_tag_frame_bad_header():
    with pytest.raises(InvalidResponseError, match="header"):
        framing.parse_tag_frame(b'\xAA' + TAG_FRAME[1:])


def test_parse_tag_frame_length_overrun():
    frame = bytearray(TAG_FRAME)
    frame[4] = 0x40 # Claims far more EPC bytes than present
    with pytest.raises(InvalidResponseError, match="data_length"):
        framing.parse_tag_frame(bytes(frame))


def test_parse_firmware_version():
    assert framing.parse_firmware_version(FIRMWARE_FRAME) == "V1.0.0"


def test_parse_firmware_version_invalid_utf8_is_replaced():
    frame = bytes.fromhex("BB 01 03 00 03 01 56 FF 00 7E")
    assert framing.parse_firmware_version(frame) == "V\ufffd"


@pytest.mark.parametrize("frame", [
    b'',
    bytes.fromhex("BB 01 03 00 7E"),
    bytes.fromhex("BB 02 03 00 0A 00 56 31 00 7E"),
])
def test_parse_firmware_version_invalid(frame):
    with pytest.raises(InvalidResponseError):
        framing.parse_firmware_version(frame)

# --- Stream Reassembly ---

def test_is_end_of_round():
    assert framing.is_end_of_round(END_OF_ROUND_FRAME)
    assert not framing.is_end_of_round(NO_TAG_FRAME)
    assert not framing.is_end_of_round(TAG_FRAME)
    assert not framing.is_end_of_round(END_OF_ROUND_FRAME[:7])


def test_extract_frames_in_order():
    buffer = bytearray(TAG_FRAME + END_OF_ROUND_FRAME)
    assert list(framing.extract_frames(buffer)) == [TAG_FRAME, END_OF_ROUND_FRAME]
    assert buffer == bytearray()


@pytest.mark.parametrize("split", [1, 5, 11, len(TAG_FRAME) - 1])
def test_extract_frames_across_reads(split):
    buffer = bytearray(TAG_FRAME[:split])
    assert list(framing.extract_frames(buffer)) == []
    assert bytes(buffer) == TAG_FRAME[:split]

    buffer.extend(TAG_FRAME[split:])
    assert list(framing.extract_frames(buffer)) == [TAG_FRAME]
    assert buffer == bytearray()


def test_extract_frames_skips_garbage_before_header():
    buffer = bytearray(b'\x01\x02\x03' + TAG_FRAME)
    assert list(framing.extract_frames(buffer)) == [TAG_FRAME]


def test_extract_frames_drops_terminator_without_header():
    buffer = bytearray(b'\x01\x02\x7E' + NO_TAG_FRAME)
    assert list(framing.extract_frames(buffer)) == [NO_TAG_FRAME]
    assert buffer == bytearray()


def test_extract_frames_keeps_trailing_partial():
    buffer = bytearray(NO_TAG_FRAME + TAG_FRAME[:6])
    assert list(framing.extract_frames(buffer)) == [NO_TAG_FRAME]
    assert bytes(buffer) == TAG_FRAME[:6]
