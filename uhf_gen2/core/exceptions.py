# uhf_gen2/core/exceptions.py

"""Custom exceptions for the uhf_gen2 library.

Three kinds of failure exist: the transport failed (:class:`TransportError`),
the caller passed a value the protocol cannot carry (:class:`InvalidParameterError`),
or the reader's reply did not have the expected shape, echo or status
(:class:`InvalidResponseError`).
"""

from typing import Optional

from uhf_gen2.protocols import constants as const


def _hex_preview(data: bytes, limit: int = 32) -> str:
    return f"{data[:limit].hex(' ').upper()}{'...' if len(data) > limit else ''}"


class UhfError(Exception):
    """Base exception class for all uhf_gen2 errors."""
    def __init__(self, message="An unspecified RFID error occurred."):
        super().__init__(message)


# --- Transport Layer Exceptions ---

class TransportError(UhfError):
    """
    Base exception for errors raised by the underlying byte stream (serial port,
    mock). It usually wraps a lower-level exception.
    """
    def __init__(self, message="Transport layer error.", original_exception: Exception | None = None):
        """
        Args:
            message: A description of the transport error.
            original_exception: The underlying exception (e.g. from pyserial or asyncio streams).
        """
        super().__init__(message)
        self.original_exception = original_exception

    def __str__(self):
        base_msg = super().__str__()
        if self.original_exception:
            orig_exc_type = type(self.original_exception).__name__
            return f"{base_msg} Original exception: [{orig_exc_type}] {self.original_exception}"
        return base_msg


class ConnectionError(TransportError):
    """Exception raised when opening the transport fails."""
    def __init__(self, message="Failed to establish connection.", original_exception: Exception | None = None):
        super().__init__(message, original_exception)


class SerialConnectionError(ConnectionError):
    """
    Connection error specific to the serial transport.
    Typical causes: the port does not exist, permission denied, or the port
    is held by another process.
    """
    def __init__(self, port: str | None = None, message="Serial connection error.", original_exception: Exception | None = None):
        msg = "Serial connection error"
        if port:
            msg += f" on port '{port}'"
        msg += f": {message}"
        super().__init__(msg, original_exception)
        self.port = port


class ReadError(TransportError):
    """Exception raised when reading from the transport fails."""
    def __init__(self, message="Failed to read data from transport.", original_exception: Exception | None = None):
        super().__init__(message, original_exception)


class WriteError(TransportError):
    """Exception raised when writing to the transport fails."""
    def __init__(self, message="Failed to write data to transport.", original_exception: Exception | None = None):
        super().__init__(message, original_exception)


# --- Caller Input Exceptions ---

class InvalidParameterError(UhfError, ValueError):
    """
    A caller-supplied value violates a protocol or safety constraint.
    Always raised before any byte is written to the transport.
    """
    def __init__(self, message="Invalid parameter."):
        super().__init__(message)


# --- Response Exceptions ---

class InvalidResponseError(UhfError):
    """
    The received frame does not match the expected shape, command echo,
    status or checksum for the operation attempted.
    """
    def __init__(self, message="Invalid response from reader.", command: Optional[int] = None,
                 status: Optional[int] = None, frame: Optional[bytes] = None):
        super().__init__(message)
        self.command = command
        self.status = status
        self.frame = frame

    def __str__(self):
        base_msg = super().__str__()
        details = []
        if self.command is not None:
            details.append(f"Command: 0x{self.command:02X}")
        if self.status is not None:
            details.append(f"Status: 0x{self.status:02X}")
        if self.frame:
            details.append(f"Frame: {_hex_preview(self.frame)}")
        if details:
            return f"{base_msg} ({'; '.join(details)})"
        return base_msg


class FrameParseError(InvalidResponseError):
    """Exception raised when a frame's structure cannot be parsed."""
    def __init__(self, message="Failed to parse frame structure.", frame: bytes | None = None):
        super().__init__(f"Frame parsing error: {message}", frame=frame)


class ChecksumError(InvalidResponseError):
    """Exception raised when frame checksum validation fails."""
    def __init__(self, calculated_checksum: int, received_checksum: int, frame: bytes):
        message = (
            f"Checksum mismatch. Calculated: 0x{calculated_checksum:02X}, "
            f"Received: 0x{received_checksum:02X}."
        )
        super().__init__(message, frame=frame)
        self.calculated_checksum = calculated_checksum
        self.received_checksum = received_checksum


class ReaderStatusError(InvalidResponseError):
    """
    The reader answered with a non-zero status byte. The code is surfaced
    verbatim in ``status``; ``error_message`` holds the known meaning, if any.
    """
    def __init__(self, command: int, status: int, frame: Optional[bytes] = None, operation: Optional[str] = None):
        self.error_message = const.STATUS_MESSAGES.get(status, f"Unknown reader status code: 0x{status:02X}")
        prefix = f"{operation} failed" if operation else "Reader error"
        super().__init__(f"{prefix} with error code: 0x{status:02X} ({self.error_message})",
                         command=command, status=status, frame=frame)
