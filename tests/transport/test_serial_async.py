# tests/transport/test_serial_async.py

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
import serial

from uhf_gen2.core.exceptions import ReadError, SerialConnectionError, TransportError, WriteError
from uhf_gen2.transport.serial_async import SerialTransport


def make_writer() -> MagicMock:
    writer = MagicMock()
    writer.drain = AsyncMock()
    writer.wait_closed = AsyncMock()
    writer.is_closing.return_value = False
    return writer


@pytest_asyncio.fixture
async def stream():
    reader = asyncio.StreamReader()
    writer = make_writer()
    with patch("serial_asyncio.open_serial_connection", new=AsyncMock(return_value=(reader, writer))) as opener:
        yield reader, writer, opener


def test_requires_port():
    with pytest.raises(ValueError, match="port"):
        SerialTransport({'baudrate': 9600})


def test_settings_merge_defaults():
    transport = SerialTransport({'port': '/dev/ttyUSB0', 'baudrate': 9600})
    assert transport.port == '/dev/ttyUSB0'
    assert transport._serial_settings['baudrate'] == 9600
    assert transport._serial_settings['timeout'] is None
    assert 'port' not in transport._serial_settings


@pytest.mark.asyncio
async def test_connect_opens_port(stream):
    _, writer, opener = stream
    transport = SerialTransport({'port': '/dev/ttyUSB0'})
    await transport.connect()
    assert transport.is_connected()
    assert opener.await_args.kwargs['url'] == '/dev/ttyUSB0'
    assert opener.await_args.kwargs['baudrate'] == 115200

    await transport.disconnect()
    assert not transport.is_connected()
    writer.close.assert_called_once()


@pytest.mark.asyncio
async def test_connect_failure():
    opener = AsyncMock(side_effect=serial.SerialException("could not open port"))
    with patch("serial_asyncio.open_serial_connection", new=opener):
        transport = SerialTransport({'port': 'COM9'})
        with pytest.raises(SerialConnectionError, match="COM9"):
            await transport.connect()
    assert not transport.is_connected()


@pytest.mark.asyncio
async def test_write(stream):
    _, writer, _ = stream
    transport = SerialTransport({'port': '/dev/ttyUSB0'})
    await transport.connect()
    assert await transport.write(b'\xBB\x00') == 2
    writer.write.assert_called_once_with(b'\xBB\x00')
    writer.drain.assert_awaited_once()


@pytest.mark.asyncio
async def test_write_failure(stream):
    _, writer, _ = stream
    writer.drain.side_effect = serial.SerialException("device reports readiness to read but returned no data")
    transport = SerialTransport({'port': '/dev/ttyUSB0'})
    await transport.connect()
    with pytest.raises(WriteError):
        await transport.write(b'\xBB')


@pytest.mark.asyncio
async def test_write_not_connected():
    transport = SerialTransport({'port': '/dev/ttyUSB0'})
    with pytest.raises(WriteError):
        await transport.write(b'\xBB')


@pytest.mark.asyncio
async def test_read(stream):
    reader, _, _ = stream
    transport = SerialTransport({'port': '/dev/ttyUSB0'})
    await transport.connect()
    reader.feed_data(b'\xBB\x01\x22')
    assert await transport.read(256, 0.1) == b'\xBB\x01\x22'
    assert await transport.read(256, 0.01) == b''


@pytest.mark.asyncio
async def test_read_eof(stream):
    reader, _, _ = stream
    transport = SerialTransport({'port': '/dev/ttyUSB0'})
    await transport.connect()
    reader.feed_eof()
    with pytest.raises(ReadError):
        await transport.read(256, 0.1)


@pytest.mark.asyncio
async def test_clear_input(stream):
    reader, writer, _ = stream
    transport = SerialTransport({'port': '/dev/ttyUSB0'})
    await transport.connect()
    reader.feed_data(b'\x01\x02\x03')
    await transport.clear_input()
    writer.transport.serial.reset_input_buffer.assert_called_once()
    assert await transport.read(256, 0.01) == b''


@pytest.mark.asyncio
async def test_clear_input_not_connected():
    transport = SerialTransport({'port': '/dev/ttyUSB0'})
    with pytest.raises(TransportError):
        await transport.clear_input()
