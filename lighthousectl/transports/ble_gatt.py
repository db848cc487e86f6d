"""BLE adapter implementation backed by bleak."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator
from typing import Any

from bleak import BleakClient, BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError

from lighthousectl.core.errors import AdapterError, WriteError
from lighthousectl.core.model import (
    AdapterEvent,
    DeviceDiscovered,
    DeviceIdentity,
    DeviceProperties,
    DeviceUpdated,
)

LOGGER = logging.getLogger(__name__)


class BLEGATTAdapter:
    def __init__(
        self,
        *,
        adapter: str | None = None,
        connect_timeout_s: float = 10.0,
        write_with_response: bool = True,
    ) -> None:
        self.adapter = adapter
        self.connect_timeout_s = connect_timeout_s
        self.write_with_response = write_with_response
        self._events: asyncio.Queue[AdapterEvent] = asyncio.Queue()
        self._seen: dict[str, tuple[BLEDevice, AdvertisementData]] = {}
        self._names: dict[str, str] = {}
        self._announced: set[str] = set()
        self._scanner: BleakScanner | None = None

    def _on_advertisement(self, device: BLEDevice, advertisement: AdvertisementData) -> None:
        # Discovery waits for the first named sighting; the name often only
        # arrives with a later scan response.
        self._seen[device.address] = (device, advertisement)
        name = advertisement.local_name or device.name
        if name:
            self._names[device.address] = name
        identity = DeviceIdentity(address=device.address)
        if name and device.address not in self._announced:
            self._announced.add(device.address)
            self._events.put_nowait(DeviceDiscovered(identity))
        else:
            self._events.put_nowait(DeviceUpdated(identity))

    async def start_scan(self) -> None:
        self._events = asyncio.Queue()
        self._seen.clear()
        self._names.clear()
        self._announced.clear()
        kwargs: dict[str, Any] = {}
        if self.adapter:
            kwargs["adapter"] = self.adapter
        scanner = BleakScanner(detection_callback=self._on_advertisement, **kwargs)
        try:
            await scanner.start()
        except (BleakError, OSError) as exc:
            where = f" '{self.adapter}'" if self.adapter else ""
            raise AdapterError(f"Could not start scanning on Bluetooth adapter{where}: {exc}") from exc
        self._scanner = scanner
        LOGGER.debug("Scanning started")

    async def stop_scan(self) -> None:
        if self._scanner is None:
            return
        scanner, self._scanner = self._scanner, None
        try:
            await scanner.stop()
        except (BleakError, OSError) as exc:
            raise AdapterError(f"Could not stop scanning: {exc}") from exc
        LOGGER.debug("Scanning stopped")

    async def events(self) -> AsyncIterator[AdapterEvent]:
        while True:
            yield await self._events.get()

    async def resolve_properties(self, identity: DeviceIdentity) -> DeviceProperties | None:
        if identity.address not in self._seen:
            return None
        return DeviceProperties(local_name=self._names.get(identity.address))

    async def write(self, identity: DeviceIdentity, data: bytes, characteristic: uuid.UUID) -> None:
        entry = self._seen.get(identity.address)
        target: BLEDevice | str = entry[0] if entry else identity.address
        try:
            async with BleakClient(target, timeout=self.connect_timeout_s) as client:
                if not client.is_connected:
                    raise WriteError(f"BLE connect failed for {identity.address}")
                await client.write_gatt_char(
                    str(characteristic),
                    data,
                    response=self.write_with_response,
                )
        except WriteError:
            raise
        except Exception as exc:
            raise WriteError(f"GATT write to {identity.address} ({characteristic}) failed: {exc}") from exc
