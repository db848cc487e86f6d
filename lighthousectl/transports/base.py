"""Adapter interface consumed by the discovery and dispatch engine."""

from __future__ import annotations

import uuid
from collections.abc import AsyncIterator
from typing import Protocol

from lighthousectl.core.model import AdapterEvent, DeviceIdentity, DeviceProperties


class Adapter(Protocol):
    async def start_scan(self) -> None:
        """Begin unfiltered advertisement scanning."""

    async def stop_scan(self) -> None:
        """Stop scanning and release the adapter."""

    def events(self) -> AsyncIterator[AdapterEvent]:
        """Yield discovery events in the order the adapter reports them."""

    async def resolve_properties(self, identity: DeviceIdentity) -> DeviceProperties | None:
        """Return the latest known properties of a discovered device."""

    async def write(self, identity: DeviceIdentity, data: bytes, characteristic: uuid.UUID) -> None:
        """Write data to a GATT characteristic of the device."""
