"""
Tests for the local echo listener.
"""

import asyncio

import pytest

from tcpswarm.modules.echo import EchoMode, EchoServer


@pytest.mark.asyncio
async def test_echo_mode_sends_data_back(echo_server):
    host, port = echo_server.address.rsplit(":", 1)
    reader, writer = await asyncio.open_connection(host, int(port))

    writer.write(b"hello")
    await writer.drain()
    data = await asyncio.wait_for(reader.read(1024), timeout=2)

    writer.close()
    await writer.wait_closed()

    assert data == b"hello"
    assert echo_server.connections == 1
    assert echo_server.received[0][1] == b"hello"


@pytest.mark.asyncio
async def test_close_mode_closes_connection(close_server):
    host, port = close_server.address.rsplit(":", 1)
    reader, writer = await asyncio.open_connection(host, int(port))

    data = await asyncio.wait_for(reader.read(1024), timeout=2)

    writer.close()
    await writer.wait_closed()

    assert data == b""


@pytest.mark.asyncio
async def test_silent_mode_records_without_reply(silent_server):
    host, port = silent_server.address.rsplit(":", 1)
    reader, writer = await asyncio.open_connection(host, int(port))

    writer.write(b"ping")
    await writer.drain()

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(reader.read(1024), timeout=0.1)

    writer.close()
    await writer.wait_closed()

    assert silent_server.received[0][1] == b"ping"


@pytest.mark.asyncio
async def test_stop_closes_open_connections():
    server = EchoServer(mode=EchoMode.SILENT)
    await server.start()
    host, port = server.address.rsplit(":", 1)
    reader, writer = await asyncio.open_connection(host, int(port))
    await asyncio.sleep(0.05)

    await asyncio.wait_for(server.stop(), timeout=2)
    data = await asyncio.wait_for(reader.read(1024), timeout=2)

    writer.close()
    await writer.wait_closed()
    assert data == b""


@pytest.mark.asyncio
async def test_context_manager_binds_free_port():
    async with EchoServer(port=0) as server:
        assert not server.address.endswith(":0")


def test_address_before_start_raises():
    with pytest.raises(RuntimeError):
        EchoServer().address


def test_mode_accepts_string():
    assert EchoServer(mode="close").mode is EchoMode.CLOSE


@pytest.mark.asyncio
async def test_received_data_not_kept_by_default():
    async with EchoServer(mode=EchoMode.SILENT) as server:
        host, port = server.address.rsplit(":", 1)
        reader, writer = await asyncio.open_connection(host, int(port))
        writer.write(b"ping")
        await writer.drain()
        await asyncio.sleep(0.05)

        writer.close()
        await writer.wait_closed()

    assert server.connections == 1
    assert server.received == []


@pytest.mark.asyncio
async def test_stall_mode_never_drains_peer(stall_server):
    host, port = stall_server.address.rsplit(":", 1)
    reader, writer = await asyncio.open_connection(host, int(port))

    writer.write(b"x" * 10_000_000)
    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(writer.drain(), timeout=0.3)

    writer.transport.abort()
    assert stall_server.connections == 1
