"""
Tests for connection.py against a mocked bleak client.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from cowboy_ble.connection import CowboyConnection, is_cowboy_advertisement
from cowboy_ble.errors import EncodeError, StrictlyReadError
from cowboy_ble.protocol import (
    CHAR_COWBOY,
    CHAR_SETTINGS_READ,
    CHAR_SETTINGS_WRITE,
    SERVICE_COWBOY,
    SERVICE_SETTINGS,
    ReadDashboard,
    ReadLock,
    ReadMaxAssistedSpeed,
    SetAutoLock,
    SetLock,
    encode,
)

ADDRESS = "E4:2F:9A:10:33:B1"


def _mock_client() -> MagicMock:
    client = MagicMock()
    client.is_connected = True
    client.connect = AsyncMock()
    client.disconnect = AsyncMock()
    client.write_gatt_char = AsyncMock()
    client.read_gatt_char = AsyncMock(return_value=bytearray(b"\x01\x02"))
    client.start_notify = AsyncMock()
    client.stop_notify = AsyncMock()
    return client


@pytest.fixture
def client():
    mock = _mock_client()
    with patch("cowboy_ble.connection.BleakClient", return_value=mock):
        yield mock


def _run(coro):
    return asyncio.run(coro)


class TestSend:
    def test_acknowledged_write(self, client):
        async def go():
            async with CowboyConnection(ADDRESS) as conn:
                return await conn.send(SetAutoLock(True))

        packet = _run(go())
        assert packet == encode(SetAutoLock(True))
        client.write_gatt_char.assert_awaited_once_with(
            CHAR_SETTINGS_WRITE, packet, response=True
        )

    def test_unacknowledged_write(self, client):
        async def go():
            async with CowboyConnection(ADDRESS) as conn:
                await conn.send(ReadMaxAssistedSpeed())

        _run(go())
        client.write_gatt_char.assert_awaited_once_with(
            CHAR_SETTINGS_WRITE, encode(ReadMaxAssistedSpeed()), response=False
        )

    def test_lock_goes_to_cowboy_characteristic(self, client):
        async def go():
            async with CowboyConnection(ADDRESS) as conn:
                await conn.send(SetLock(True))

        _run(go())
        char, packet = client.write_gatt_char.await_args.args
        assert char == CHAR_COWBOY
        assert packet[0] == 1

    def test_strictly_read_is_never_written(self, client):
        async def go():
            async with CowboyConnection(ADDRESS) as conn:
                await conn.send(ReadLock())

        with pytest.raises(StrictlyReadError):
            _run(go())
        client.write_gatt_char.assert_not_awaited()

    def test_not_connected(self):
        conn = CowboyConnection(ADDRESS)
        with pytest.raises(RuntimeError, match="Not connected"):
            _run(conn.send(SetAutoLock(True)))


class TestRead:
    def test_returns_raw_bytes(self, client):
        async def go():
            async with CowboyConnection(ADDRESS) as conn:
                return await conn.read(ReadDashboard())

        assert _run(go()) == b"\x01\x02"
        client.read_gatt_char.assert_awaited_once_with(CHAR_COWBOY)

    def test_writable_command_rejected(self, client):
        async def go():
            async with CowboyConnection(ADDRESS) as conn:
                await conn.read(SetAutoLock(True))

        with pytest.raises(EncodeError, match="use send"):
            _run(go())
        client.read_gatt_char.assert_not_awaited()


class TestLifecycle:
    def test_context_manager_connects_and_disconnects(self, client):
        async def go():
            async with CowboyConnection(ADDRESS) as conn:
                assert conn.is_connected

        _run(go())
        client.connect.assert_awaited_once()
        client.disconnect.assert_awaited_once()

    def test_notifications_stopped_on_disconnect(self, client):
        callback = MagicMock()

        async def go():
            async with CowboyConnection(ADDRESS) as conn:
                await conn.subscribe_notifications(callback)

        _run(go())
        client.start_notify.assert_awaited_once_with(CHAR_SETTINGS_READ, callback)
        client.stop_notify.assert_awaited_once_with(CHAR_SETTINGS_READ)

    def test_unsubscribe(self, client):
        async def go():
            async with CowboyConnection(ADDRESS) as conn:
                await conn.subscribe_notifications(MagicMock())
                await conn.unsubscribe_notifications()

        _run(go())
        # Once by unsubscribe, not again on disconnect
        client.stop_notify.assert_awaited_once()

    def test_disconnect_callback(self, client):
        callback = MagicMock()
        conn = CowboyConnection(ADDRESS, disconnect_callback=callback)
        conn._on_disconnect(client)
        callback.assert_called_once_with(client)


class TestAdvertisement:
    @pytest.mark.parametrize("uuid", [SERVICE_SETTINGS, SERVICE_COWBOY.upper()])
    def test_detects_cowboy_services(self, uuid):
        adv = MagicMock(service_uuids=[uuid])
        assert is_cowboy_advertisement(adv) is True

    def test_rejects_other_services(self):
        adv = MagicMock(service_uuids=["0000180f-0000-1000-8000-00805f9b34fb"])
        assert is_cowboy_advertisement(adv) is False

    def test_rejects_empty(self):
        assert is_cowboy_advertisement(MagicMock(service_uuids=[])) is False
