# uhf_gen2/protocols/gen2.py

"""
Data classes for the EPC Gen2 bit-packed structures carried in frame parameters:
Query parameters, the Select parameter block, the Lock payload and the
Impinj Monza QT control byte.

Every class pairs ``to_bytes()`` with ``from_bytes()``. Encoding validates
ranges and raises InvalidParameterError instead of clamping.
"""

import logging
import math
import struct
from dataclasses import dataclass

from uhf_gen2.core.exceptions import InvalidParameterError
from uhf_gen2.protocols import constants as const
from uhf_gen2.protocols.types import (
    LockAction, LockTarget, MemoryBank, QuerySel, QuerySession, QueryTarget,
    SelectAction, SelectTarget,
)
from uhf_gen2.protocols.validation import require_member

logger = logging.getLogger(__name__)

QUERY_FLAGS = 0x10 # DR=8, M=1, TRext=1 (pilot tone)
MAX_Q = 15
LOCK_ZONE_BITS = 10 # Width of each of the mask and action fields


@dataclass(frozen=True)
class QueryParams:
    """Parameters of the Gen2 Query command used during inventory."""
    sel: QuerySel = QuerySel.ALL
    session: QuerySession = QuerySession.S0
    target: QueryTarget = QueryTarget.A
    q: int = 4 # Slot count exponent, 0-15

    def to_bytes(self) -> bytes:
        """Encodes to the 2-byte field: DR|M(2)|TRext|Sel(2)|Session(2) and Target|Q(4)|pad(3)."""
        if not (0 <= self.q <= MAX_Q):
            raise InvalidParameterError(f"Q value must be 0-{MAX_Q}, got {self.q}")
        sel = require_member("Query sel", self.sel, QuerySel)
        session = require_member("Query session", self.session, QuerySession)
        target = require_member("Query target", self.target, QueryTarget)
        byte0 = QUERY_FLAGS | (sel << 2) | session
        byte1 = (target << 7) | (self.q << 3)
        return bytes([byte0, byte1])

    @classmethod
    def from_bytes(cls, data: bytes) -> "QueryParams":
        if len(data) != 2:
            raise ValueError(f"Expected 2 bytes for QueryParams, got {len(data)}")
        sel_bits = (data[0] >> 2) & 0x03
        # Sel values 0 and 1 both mean "all tags"
        sel = QuerySel.ALL if sel_bits < QuerySel.NOT_SL else QuerySel(sel_bits)
        return cls(sel=sel,
                   session=QuerySession(data[0] & 0x03),
                   target=QueryTarget((data[1] >> 7) & 0x01),
                   q=(data[1] >> 3) & 0x0F)


@dataclass(frozen=True)
class SelectParams:
    """Parameters of the Gen2 Select command used to filter tag operations."""
    target: SelectTarget = SelectTarget.S0
    action: SelectAction = SelectAction.ACTION0
    mem_bank: MemoryBank = MemoryBank.EPC
    pointer: int = 0 # Bit offset into the memory bank
    mask: bytes = b''
    truncate: bool = False

    _HEADER_FORMAT = ">BIBB" # selector, pointer, mask bit length, truncate
    _HEADER_LEN = struct.calcsize(_HEADER_FORMAT)

    def selector_byte(self) -> int:
        """Target (3 bits) | Action (3 bits) | MemBank (2 bits)."""
        target = require_member("Select target", self.target, SelectTarget)
        action = require_member("Select action", self.action, SelectAction)
        mem_bank = require_member("memory bank", self.mem_bank, MemoryBank)
        return (target << 5) | (action << 2) | mem_bank

    def to_bytes(self) -> bytes:
        if len(self.mask) > const.MAX_SELECT_MASK_BYTES:
            raise InvalidParameterError(
                f"Mask length exceeds maximum of {const.MAX_SELECT_MASK_BYTES} bytes")
        if not (0 <= self.pointer <= 0xFFFFFFFF):
            raise InvalidParameterError(f"Select pointer must fit in 32 bits, got {self.pointer}")
        mask_len_bits = len(self.mask) * 8
        if mask_len_bits > 0xFF:
            logger.warning(f"Select mask of {len(self.mask)} bytes exceeds the 255-bit length field; "
                           f"the last bit will not be compared")
            mask_len_bits = 0xFF
        truncate = const.TRUNCATE_ON if self.truncate else const.TRUNCATE_OFF
        return struct.pack(self._HEADER_FORMAT, self.selector_byte(), self.pointer,
                           mask_len_bits, truncate) + bytes(self.mask)

    @classmethod
    def from_bytes(cls, data: bytes) -> "SelectParams":
        """
        Decodes a Select parameter block. Selector sub-fields outside the known
        range fall back to their zero member; the module does not emit them.
        """
        if len(data) < cls._HEADER_LEN:
            raise ValueError(f"Expected at least {cls._HEADER_LEN} bytes for SelectParams, got {len(data)}")
        selector, pointer, mask_len_bits, truncate = struct.unpack(cls._HEADER_FORMAT, data[:cls._HEADER_LEN])
        mask_len = math.ceil(mask_len_bits / 8)
        mask = bytes(data[cls._HEADER_LEN:cls._HEADER_LEN + mask_len])
        if len(mask) != mask_len:
            raise ValueError(f"Select mask truncated: expected {mask_len} bytes, got {len(mask)}")

        target_code = (selector >> 5) & 0x07
        target = SelectTarget(target_code) if target_code <= SelectTarget.SL else SelectTarget.S0
        return cls(target=target,
                   action=SelectAction((selector >> 2) & 0x07),
                   mem_bank=MemoryBank(selector & 0x03),
                   pointer=pointer,
                   mask=mask,
                   truncate=truncate == const.TRUNCATE_ON)


@dataclass(frozen=True)
class LockPayload:
    """
    Lock mask and action for one memory area.

    The 20-bit payload is the 10-bit mask followed by the 10-bit action field,
    right-aligned in 3 bytes. Each area owns a 2-bit zone (User=bit 0, TID=2,
    EPC=4, Access password=6, Kill password=8); only the addressed zone's mask
    bits are set, so other areas keep their current lock state.
    """
    target: LockTarget
    action: LockAction

    def to_bytes(self) -> bytes:
        shift = require_member("lock target", self.target, LockTarget).shift
        mask = 0x03 << shift
        action = require_member("lock action", self.action, LockAction) << shift
        payload = (mask << LOCK_ZONE_BITS) | action
        return payload.to_bytes(3, 'big')

    @classmethod
    def from_bytes(cls, data: bytes) -> "LockPayload":
        if len(data) != 3:
            raise ValueError(f"Expected 3 bytes for LockPayload, got {len(data)}")
        payload = int.from_bytes(data, 'big')
        mask = (payload >> LOCK_ZONE_BITS) & 0x3FF
        action = payload & 0x3FF
        zones = [t for t in LockTarget if mask & (0x03 << t.shift)]
        if len(zones) != 1 or mask != (0x03 << zones[0].shift):
            raise ValueError(f"Lock payload must address exactly one area, mask=0b{mask:010b}")
        target = zones[0]
        return cls(target=target, action=LockAction((action >> target.shift) & 0x03))


@dataclass(frozen=True)
class QtControl:
    """QT control for Impinj Monza tags."""
    short_range: bool = False # Reduced backscatter range
    persistence: bool = False # False: temporary, True: permanent

    def to_byte(self) -> int:
        value = 0x00
        if self.short_range:
            value |= 0x01
        if self.persistence:
            value |= 0x02
        return value

    def to_bytes(self) -> bytes:
        return bytes([self.to_byte()])

    @classmethod
    def from_byte(cls, value: int) -> "QtControl":
        return cls(short_range=bool(value & 0x01), persistence=bool(value & 0x02))

    @classmethod
    def from_bytes(cls, data: bytes) -> "QtControl":
        if len(data) != 1:
            raise ValueError(f"Expected 1 byte for QtControl, got {len(data)}")
        return cls.from_byte(data[0])
