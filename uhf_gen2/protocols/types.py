# uhf_gen2/protocols/types.py

"""
Value types shared by the codecs and the reader: tag reports and the closed
code sets of the protocol.
"""

from dataclasses import dataclass, field
from enum import IntEnum


@dataclass(frozen=True)
class TagInfo:
    """A tag seen during inventory. Identity is the EPC; RSSI is read quality only."""
    epc: str
    rssi: int = field(default=0, compare=False)


class _CodedEnum(IntEnum):
    """IntEnum whose wire decode refuses unknown codes."""

    @classmethod
    def from_code(cls, code: int):
        """Returns the member for ``code``; raises ValueError for unknown codes."""
        try:
            return cls(code)
        except ValueError:
            raise ValueError(f"Unknown {cls.__name__} code: 0x{code:02X}") from None


class MemoryBank(_CodedEnum):
    """Tag memory banks (EPC Gen2)."""
    RESERVED = 0x00
    EPC = 0x01
    TID = 0x02
    USER = 0x03


class SelectTarget(_CodedEnum):
    """Target flag of the Gen2 Select command."""
    S0 = 0x00
    S1 = 0x01
    S2 = 0x02
    S3 = 0x03
    SL = 0x04


class SelectAction(_CodedEnum):
    """
    Gen2 Select action table (matching tags / non-matching tags):
    0 assert SL or A / deassert SL or B, 1 assert or A / nothing,
    2 nothing / deassert or B, 3 negate / nothing,
    4 deassert or B / assert or A, 5 deassert or B / nothing,
    6 nothing / assert or A, 7 nothing / negate.
    """
    ACTION0 = 0x00
    ACTION1 = 0x01
    ACTION2 = 0x02
    ACTION3 = 0x03
    ACTION4 = 0x04
    ACTION5 = 0x05
    ACTION6 = 0x06
    ACTION7 = 0x07


class SelectMode(_CodedEnum):
    """When the module sends a Select before tag operations."""
    ALWAYS = 0x00
    DISABLED = 0x01
    NON_POLLING = 0x02 # Only before Read, Write, Lock and Kill


class QuerySel(_CodedEnum):
    """Sel field of the Gen2 Query command."""
    ALL = 0x00
    NOT_SL = 0x02
    SL = 0x03


class QuerySession(_CodedEnum):
    S0 = 0x00
    S1 = 0x01
    S2 = 0x02
    S3 = 0x03


class QueryTarget(_CodedEnum):
    A = 0x00
    B = 0x01


class LockTarget(_CodedEnum):
    """Memory area addressed by a lock payload."""
    USER = 0x01
    TID = 0x02
    EPC = 0x03
    ACCESS_PASSWORD = 0x04
    KILL_PASSWORD = 0x05

    @property
    def shift(self) -> int:
        """Bit offset of this area's 2-bit zone in the mask and action fields."""
        return (self.value - 1) * 2


class LockAction(_CodedEnum):
    UNLOCK = 0x00
    LOCK = 0x01
    PERM_UNLOCK = 0x02
    PERM_LOCK = 0x03


class Region(_CodedEnum):
    """Operating region; carries the channel plan of each band."""
    CHINA_900 = 0x01
    US = 0x02
    EUROPE = 0x03
    CHINA_800 = 0x04
    KOREA = 0x06

    @property
    def base_frequency(self) -> float:
        """Frequency of channel 0 in MHz."""
        return _REGION_PLAN[self][0]

    @property
    def channel_spacing(self) -> float:
        """Channel spacing in MHz."""
        return _REGION_PLAN[self][1]

    def frequency_from_channel(self, channel: int) -> float:
        return channel * self.channel_spacing + self.base_frequency

    def channel_from_frequency(self, freq_mhz: float) -> int:
        # int() truncates toward zero
        return int((freq_mhz - self.base_frequency) / self.channel_spacing)


_REGION_PLAN = {
    Region.CHINA_900: (920.125, 0.25),
    Region.US: (902.25, 0.5),
    Region.EUROPE: (865.1, 0.2),
    Region.CHINA_800: (840.125, 0.25),
    Region.KOREA: (917.1, 0.2),
}


class RfLinkProfile(_CodedEnum):
    """Vendor modulation / backscatter link profiles."""
    FM0_40KHZ = 0xD0
    FM0_400KHZ = 0xD1
    MILLER4_250KHZ = 0xD2
    MILLER4_300KHZ = 0xD3
    MILLER2_40KHZ_DRM = 0xD4 # Dense Reader Mode


class BaudRate(_CodedEnum):
    """Baud rate index accepted by the set-baud-rate command."""
    BAUD_38400 = 0x00
    BAUD_115200 = 0x01
    BAUD_9600 = 0x02

    @property
    def bps(self) -> int:
        return {BaudRate.BAUD_38400: 38400, BaudRate.BAUD_115200: 115200, BaudRate.BAUD_9600: 9600}[self]
