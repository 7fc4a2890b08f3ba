# tests/protocols/test_types.py

import pytest

from uhf_gen2.protocols.types import BaudRate, LockTarget, MemoryBank, Region, RfLinkProfile, TagInfo


def test_tag_info_identity_ignores_rssi():
    assert TagInfo("E2003412", rssi=0xC8) == TagInfo("E2003412", rssi=0x40)
    assert len({TagInfo("E2003412", rssi=1), TagInfo("E2003412", rssi=2), TagInfo("300833B2")}) == 2


def test_from_code_known():
    assert MemoryBank.from_code(0x03) is MemoryBank.USER
    assert RfLinkProfile.from_code(0xD4) is RfLinkProfile.MILLER2_40KHZ_DRM


def test_from_code_unknown():
    with pytest.raises(ValueError, match="Unknown Region code: 0x05"):
        Region.from_code(0x05)


@pytest.mark.parametrize("region, channel, expected_mhz", [
    (Region.CHINA_900, 0, 920.125),
    (Region.CHINA_900, 4, 921.125),
    (Region.US, 10, 907.25),
    (Region.EUROPE, 3, 865.7),
    (Region.CHINA_800, 1, 840.375),
    (Region.KOREA, 5, 918.1),
])
def test_frequency_from_channel(region, channel, expected_mhz):
    assert region.frequency_from_channel(channel) == pytest.approx(expected_mhz)


def test_channel_from_frequency():
    assert Region.CHINA_900.channel_from_frequency(921.125) == 4
    assert Region.US.channel_from_frequency(903.25) == 2


def test_channel_from_frequency_truncates():
    assert Region.US.channel_from_frequency(903.0) == 1
    assert Region.US.channel_from_frequency(902.25) == 0


def test_lock_target_shift():
    assert [t.shift for t in LockTarget] == [0, 2, 4, 6, 8]


def test_baud_rate_bps():
    assert BaudRate.BAUD_38400.bps == 38400
    assert BaudRate.BAUD_115200.bps == 115200
    assert BaudRate.BAUD_9600.bps == 9600
