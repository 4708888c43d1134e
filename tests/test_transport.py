from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from bleak.exc import BleakError

from dfu_transfer.errors import ConnectionLost
from dfu_transfer.transport import DFU_CTRL_UUID, DFU_DATA_UUID, BleakTransport


@pytest.fixture
def client():
    c = MagicMock()
    c.is_connected = True
    c.start_notify = AsyncMock()
    c.stop_notify = AsyncMock()
    c.write_gatt_char = AsyncMock()
    return c


@pytest.mark.asyncio
async def test_notifications_are_dispatched_on_loop(client):
    transport = BleakTransport(client)
    received = []
    transport.subscribe(received.append)
    await transport.start()

    callback = client.start_notify.call_args[0][1]
    callback(SimpleNamespace(uuid=DFU_CTRL_UUID.upper()), bytearray(b"\x60\x03\x01"))
    await asyncio.sleep(0)

    assert len(received) == 1
    assert received[0].channel_id == transport.control_channel_id
    assert received[0].value == b"\x60\x03\x01"


@pytest.mark.asyncio
async def test_unsubscribed_callback_gets_nothing(client):
    transport = BleakTransport(client)
    received = []
    transport.subscribe(received.append)
    transport.unsubscribe(received.append)
    transport.unsubscribe(received.append)
    await transport.start()

    client.start_notify.call_args[0][1](SimpleNamespace(uuid=DFU_CTRL_UUID), bytearray(b"\x01"))
    await asyncio.sleep(0)

    assert received == []


@pytest.mark.asyncio
async def test_start_and_stop_are_idempotent(client):
    transport = BleakTransport(client)
    await transport.start()
    await transport.start()
    await transport.stop()
    await transport.stop()
    assert client.start_notify.await_count == 1
    assert client.stop_notify.await_count == 1


@pytest.mark.asyncio
async def test_write_data_uses_data_characteristic(client):
    transport = BleakTransport(client)
    await transport.write_data(b"abc")
    client.write_gatt_char.assert_awaited_once_with(DFU_DATA_UUID, b"abc", response=False)


@pytest.mark.asyncio
async def test_write_error_maps_to_connection_lost(client):
    client.write_gatt_char.side_effect = BleakError("gone")
    transport = BleakTransport(client)
    with pytest.raises(ConnectionLost):
        await transport.write_data(b"abc")


@pytest.mark.asyncio
async def test_write_when_disconnected(client):
    client.is_connected = False
    transport = BleakTransport(client)
    with pytest.raises(ConnectionLost):
        await transport.write_data(b"\x03")
    client.write_gatt_char.assert_not_awaited()
