from __future__ import annotations

import asyncio
import uuid
from types import SimpleNamespace

import pytest
from bleak.exc import BleakError

from lighthousectl.core.errors import AdapterError, WriteError
from lighthousectl.core.model import DeviceDiscovered, DeviceIdentity, DeviceUpdated
from lighthousectl.transports import ble_gatt
from lighthousectl.transports.ble_gatt import BLEGATTAdapter

GEN2_CHAR = uuid.UUID("00001525-1212-efde-1523-785feabcd124")


class FakeClient:
    instances: list[FakeClient] = []
    fail_with: Exception | None = None

    def __init__(self, target, timeout: float = 10.0) -> None:
        self.target = target
        self.timeout = timeout
        self.is_connected = True
        self.writes: list[tuple[str, bytes, bool]] = []
        FakeClient.instances.append(self)

    async def __aenter__(self) -> FakeClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        return None

    async def write_gatt_char(self, char_uuid: str, data: bytes, response: bool = False) -> None:
        if FakeClient.fail_with is not None:
            raise FakeClient.fail_with
        self.writes.append((char_uuid, data, response))


class FailingScanner:
    def __init__(self, detection_callback=None, **kwargs) -> None:
        self.kwargs = kwargs

    async def start(self) -> None:
        raise BleakError("No Bluetooth adapters found.")


@pytest.fixture(autouse=True)
def _fake_client(monkeypatch: pytest.MonkeyPatch):
    FakeClient.instances = []
    FakeClient.fail_with = None
    monkeypatch.setattr(ble_gatt, "BleakClient", FakeClient)


def test_first_sighting_is_discovery_then_updates() -> None:
    adapter = BLEGATTAdapter()
    device = SimpleNamespace(address="AA:BB", name=None)
    adapter._on_advertisement(device, SimpleNamespace(local_name="LHB-ABCDEF"))
    adapter._on_advertisement(device, SimpleNamespace(local_name="LHB-ABCDEF"))

    assert adapter._events.get_nowait() == DeviceDiscovered(DeviceIdentity("AA:BB"))
    assert adapter._events.get_nowait() == DeviceUpdated(DeviceIdentity("AA:BB"))


def test_discovery_waits_for_first_named_sighting() -> None:
    adapter = BLEGATTAdapter()
    device = SimpleNamespace(address="AA:BB", name=None)
    adapter._on_advertisement(device, SimpleNamespace(local_name=None))
    adapter._on_advertisement(device, SimpleNamespace(local_name="HTC BS12345678"))
    adapter._on_advertisement(device, SimpleNamespace(local_name=None))

    assert adapter._events.get_nowait() == DeviceUpdated(DeviceIdentity("AA:BB"))
    assert adapter._events.get_nowait() == DeviceDiscovered(DeviceIdentity("AA:BB"))
    assert adapter._events.get_nowait() == DeviceUpdated(DeviceIdentity("AA:BB"))

    resolved = asyncio.run(adapter.resolve_properties(DeviceIdentity("AA:BB")))
    assert resolved.local_name == "HTC BS12345678"


def test_resolve_properties_prefers_advertised_name() -> None:
    adapter = BLEGATTAdapter()
    adapter._on_advertisement(
        SimpleNamespace(address="AA:BB", name="cached"),
        SimpleNamespace(local_name="HTC BS12345678"),
    )
    adapter._on_advertisement(SimpleNamespace(address="CC:DD", name="cached"), SimpleNamespace(local_name=None))

    resolved = asyncio.run(adapter.resolve_properties(DeviceIdentity("AA:BB")))
    fallback = asyncio.run(adapter.resolve_properties(DeviceIdentity("CC:DD")))
    unknown = asyncio.run(adapter.resolve_properties(DeviceIdentity("EE:FF")))

    assert resolved.local_name == "HTC BS12345678"
    assert fallback.local_name == "cached"
    assert unknown is None


def test_write_uses_seen_device_and_configured_mode() -> None:
    adapter = BLEGATTAdapter(connect_timeout_s=2.5, write_with_response=False)
    device = SimpleNamespace(address="AA:BB", name="LHB-ABCDEF")
    adapter._on_advertisement(device, SimpleNamespace(local_name="LHB-ABCDEF"))

    asyncio.run(adapter.write(DeviceIdentity("AA:BB"), b"\x01", GEN2_CHAR))

    (client,) = FakeClient.instances
    assert client.target is device
    assert client.timeout == 2.5
    assert client.writes == [(str(GEN2_CHAR), b"\x01", False)]


def test_write_failure_raises_write_error() -> None:
    FakeClient.fail_with = BleakError("Characteristic not found")
    adapter = BLEGATTAdapter()

    with pytest.raises(WriteError) as exc:
        asyncio.run(adapter.write(DeviceIdentity("AA:BB"), b"\x00", GEN2_CHAR))
    assert "AA:BB" in str(exc.value)


def test_scan_start_failure_raises_adapter_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(ble_gatt, "BleakScanner", FailingScanner)
    adapter = BLEGATTAdapter(adapter="hci1")

    with pytest.raises(AdapterError) as exc:
        asyncio.run(adapter.start_scan())
    assert "hci1" in str(exc.value)
