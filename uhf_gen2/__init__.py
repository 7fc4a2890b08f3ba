"""uhf_gen2 - Asynchronous driver for UHF RFID modules speaking the 0xBB/0x7E framed serial protocol."""

from .core import (
    Reader,
    ReaderConfig,
    PollState,
    UhfError,
    TransportError,
    InvalidParameterError,
    InvalidResponseError,
    ReaderStatusError,
)
from .transport import (
    SerialTransport,
    MockTransport,
)
from .protocols.types import (
    TagInfo,
    MemoryBank,
    SelectTarget,
    SelectAction,
    SelectMode,
    QuerySel,
    QuerySession,
    QueryTarget,
    LockTarget,
    LockAction,
    Region,
    RfLinkProfile,
    BaudRate,
)
from .protocols.gen2 import QueryParams, SelectParams, LockPayload, QtControl

__version__ = '0.1.0'

__all__ = [
    # Core components
    'Reader',
    'ReaderConfig',
    'PollState',
    # Exceptions
    'UhfError',
    'TransportError',
    'InvalidParameterError',
    'InvalidResponseError',
    'ReaderStatusError',
    # Transport
    'SerialTransport',
    'MockTransport',
    # Data model
    'TagInfo',
    'MemoryBank',
    'SelectTarget',
    'SelectAction',
    'SelectMode',
    'QuerySel',
    'QuerySession',
    'QueryTarget',
    'LockTarget',
    'LockAction',
    'Region',
    'RfLinkProfile',
    'BaudRate',
    'QueryParams',
    'SelectParams',
    'LockPayload',
    'QtControl',
]
