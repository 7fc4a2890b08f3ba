"""Transport implementations for the uhf_gen2 library."""

from .base import BaseTransport
from .serial_async import SerialTransport, DEFAULT_SERIAL_SETTINGS
from .mock import MockTransport

__all__ = [
    'BaseTransport',
    'SerialTransport',
    'DEFAULT_SERIAL_SETTINGS',
    'MockTransport',
]
