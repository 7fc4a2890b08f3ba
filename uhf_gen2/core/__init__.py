"""Core components of the uhf_gen2 library."""

from .reader import Reader
from .poller import StreamPoller
from .status import PollState
from .config import ReaderConfig, DEFAULT_CONFIG
from .exceptions import (
    UhfError,
    TransportError,
    ConnectionError,
    SerialConnectionError,
    ReadError,
    WriteError,
    InvalidParameterError,
    InvalidResponseError,
    FrameParseError,
    ChecksumError,
    ReaderStatusError,
)

__all__ = [
    'Reader',
    'StreamPoller',
    'PollState',
    'ReaderConfig',
    'DEFAULT_CONFIG',
    'UhfError',
    'TransportError',
    'ConnectionError',
    'SerialConnectionError',
    'ReadError',
    'WriteError',
    'InvalidParameterError',
    'InvalidResponseError',
    'FrameParseError',
    'ChecksumError',
    'ReaderStatusError',
]
