# tests/transport/test_mock.py

import pytest

from uhf_gen2.core.exceptions import ConnectionError, ReadError, WriteError
from uhf_gen2.transport.mock import MockTransport


@pytest.mark.asyncio
async def test_connect_and_disconnect():
    transport = MockTransport()
    assert not transport.is_connected()
    async with transport:
        assert transport.is_connected()
        await transport.connect() # Already connected
    assert not transport.is_connected()


@pytest.mark.asyncio
async def test_connect_failure():
    transport = MockTransport()
    transport.fail_next_connect()
    with pytest.raises(ConnectionError):
        await transport.connect()
    assert not transport.is_connected()
    await transport.connect()
    assert transport.is_connected()


@pytest.mark.asyncio
async def test_io_requires_connection():
    transport = MockTransport()
    with pytest.raises(WriteError):
        await transport.write(b'\x01')
    with pytest.raises(ReadError):
        await transport.read(10, 0.1)


@pytest.mark.asyncio
async def test_write_records_frames():
    transport = MockTransport()
    await transport.connect()
    assert await transport.write(b'\x01\x02') == 2
    await transport.write(b'\x03')
    assert transport.write_count == 2
    assert transport.get_sent_data() == b'\x01\x02'
    assert transport.get_all_sent_data() == [b'\x03']
    assert transport.get_sent_data() is None


@pytest.mark.asyncio
async def test_read_splits_large_chunks():
    transport = MockTransport()
    await transport.connect()
    transport.add_response(b'\x01\x02\x03\x04\x05')
    assert await transport.read(2, 0.1) == b'\x01\x02'
    assert await transport.read(2, 0.1) == b'\x03\x04'
    assert await transport.read(2, 0.1) == b'\x05'
    assert await transport.read(2, 0.1) == b''


@pytest.mark.asyncio
async def test_scripted_errors():
    transport = MockTransport()
    await transport.connect()
    transport.add_read_error()
    transport.add_response(b'\x01')
    transport.add_write_error()
    with pytest.raises(ReadError):
        await transport.read(10, 0.1)
    assert await transport.read(10, 0.1) == b'\x01'
    with pytest.raises(WriteError):
        await transport.write(b'\x00')
    assert transport.write_count == 0


@pytest.mark.asyncio
async def test_clear_input_discards_only_stale_bytes():
    transport = MockTransport()
    await transport.connect()
    transport.inject_stale_input(b'\xAA\xBB')
    transport.add_response(b'\x01')
    await transport.clear_input()
    assert transport.clear_count == 1
    assert await transport.read(10, 0.1) == b'\x01'


@pytest.mark.asyncio
async def test_stale_bytes_read_first():
    transport = MockTransport()
    await transport.connect()
    transport.inject_stale_input(b'\xAA')
    transport.add_response(b'\x01')
    assert await transport.read(10, 0.1) == b'\xAA'
    assert transport.pending_responses() == 1
    transport.clear_response_queue()
    assert transport.pending_responses() == 0
