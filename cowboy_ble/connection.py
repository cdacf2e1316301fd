"""
BLE connection management for Cowboy bikes.

Provides scanning (discovery) and a thin async connection class built on
top of ``bleak`` that writes encoded command frames with the GATT write
type each command requires.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

from bleak import BleakClient, BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData

from .errors import EncodeError
from .protocol import (
    CHAR_SETTINGS_READ,
    SERVICE_COWBOY,
    SERVICE_SETTINGS,
    Command,
    characteristic_for,
    encode,
    is_strictly_read,
    write_mode,
)

logger = logging.getLogger(__name__)

_COWBOY_SERVICES = frozenset({SERVICE_SETTINGS, SERVICE_COWBOY})


def is_cowboy_advertisement(adv: AdvertisementData) -> bool:
    """Check if an advertisement announces one of the Cowboy services."""
    return any(uuid.lower() in _COWBOY_SERVICES for uuid in adv.service_uuids)


# ---------------------------------------------------------------------------
# Scanning / discovery
# ---------------------------------------------------------------------------


async def scan_for_bikes(
    timeout: float = 10.0,
) -> list[tuple[BLEDevice, AdvertisementData]]:
    """
    Scan for Cowboy bikes advertising via BLE.

    Parameters
    ----------
    timeout : float
        How long to scan, in seconds.

    Returns
    -------
    list[tuple[BLEDevice, AdvertisementData]]
        Discovered bikes, one entry per address.
    """
    found: list[tuple[BLEDevice, AdvertisementData]] = []

    def _detection_callback(device: BLEDevice, adv: AdvertisementData) -> None:
        if is_cowboy_advertisement(adv):
            if not any(d.address == device.address for d, _ in found):
                logger.info("Found Cowboy bike: %s (%s)", device.name, device.address)
                found.append((device, adv))

    scanner = BleakScanner(detection_callback=_detection_callback)
    await scanner.start()
    await asyncio.sleep(timeout)
    await scanner.stop()
    return found


async def find_bike_by_address(
    address: str,
    timeout: float = 10.0,
) -> BLEDevice | None:
    """Scan for a specific bike by its BLE address; None if not found."""
    return await BleakScanner.find_device_by_address(address, timeout=timeout)


# ---------------------------------------------------------------------------
# Connection
# ---------------------------------------------------------------------------


class CowboyConnection:
    """
    Async BLE connection to a Cowboy bike.

    Usage::

        async with CowboyConnection("E4:2F:9A:10:33:B1") as conn:
            await conn.subscribe_notifications(my_callback)
            await conn.send(ReadMaxAssistedSpeed())  # reply is notified
            await conn.send(SetMaxAssistedSpeed(Speed(32)))
            await conn.send(WriteFlash())

    Nothing is retried and nothing the bike sends back is interpreted;
    callers get the raw bytes.
    """

    def __init__(
        self,
        address_or_device: str | BLEDevice,
        *,
        disconnect_callback: Callable[[BleakClient], None] | None = None,
    ) -> None:
        self._address = address_or_device
        self._client: BleakClient | None = None
        self._disconnect_cb = disconnect_callback
        self._notification_started = False

    # -- context manager --------------------------------------------------

    async def __aenter__(self) -> CowboyConnection:
        await self.connect()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.disconnect()

    # -- connection lifecycle ---------------------------------------------

    async def connect(self) -> None:
        """Establish the BLE connection."""
        logger.info("Connecting to %s ...", self._address)
        self._client = BleakClient(
            self._address,
            disconnected_callback=self._on_disconnect,
        )
        await self._client.connect()
        logger.info("Connection established to %s", self._address)

    async def disconnect(self) -> None:
        """Cleanly disconnect from the bike."""
        if self._client and self._client.is_connected:
            if self._notification_started:
                try:
                    await self._client.stop_notify(CHAR_SETTINGS_READ)
                except Exception as exc:
                    logger.debug(
                        "stop_notify during disconnect raised %s: %s",
                        type(exc).__name__,
                        exc,
                    )
                self._notification_started = False
            await self._client.disconnect()
            logger.info("Disconnected from %s", self._address)
        self._client = None

    @property
    def is_connected(self) -> bool:
        return self._client is not None and self._client.is_connected

    # -- notifications ----------------------------------------------------

    async def subscribe_notifications(
        self,
        callback: Callable[[Any, bytearray], None],
    ) -> None:
        """
        Subscribe to notifications from the bike.

        Replies to read commands sent with :meth:`send` arrive here.
        """
        client = self._require_client()
        await client.start_notify(CHAR_SETTINGS_READ, callback)
        self._notification_started = True
        logger.info("Subscribed to notifications")

    async def unsubscribe_notifications(self) -> None:
        if self._client and self._notification_started:
            await self._client.stop_notify(CHAR_SETTINGS_READ)
            self._notification_started = False
            logger.info("Unsubscribed from notifications")

    # -- commands ---------------------------------------------------------

    async def send(self, command: Command) -> bytes:
        """
        Encode *command* and write it to its characteristic.

        Returns the frame that was written. Raises StrictlyReadError for
        commands that can only be read; use :meth:`read` for those.
        """
        client = self._require_client()
        packet = encode(command)
        mode = write_mode(command)
        char = characteristic_for(command)
        logger.debug("Write %s -> %s (%s)", packet.hex(), char, mode.value)
        await client.write_gatt_char(char, packet, response=mode.response)
        return packet

    async def read(self, command: Command) -> bytes:
        """
        Read the raw value behind a strictly-read command.

        Raises EncodeError if *command* is a writable command.
        """
        if not is_strictly_read(command):
            raise EncodeError(
                f"{type(command).__name__} is written, not read; use send()"
            )
        client = self._require_client()
        char = characteristic_for(command)
        data = bytes(await client.read_gatt_char(char))
        logger.debug("Read %s <- %s", data.hex(), char)
        return data

    # -- internal ---------------------------------------------------------

    def _require_client(self) -> BleakClient:
        if self._client is None:
            raise RuntimeError("Not connected")
        return self._client

    def _on_disconnect(self, client: BleakClient) -> None:
        logger.warning("Disconnected from bike!")
        self._notification_started = False
        if self._disconnect_cb:
            self._disconnect_cb(client)
