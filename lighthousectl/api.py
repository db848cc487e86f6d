"""Stable public API for building tooling on top of lighthousectl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from pathlib import Path

from lighthousectl.core.errors import (
    AdapterError,
    ConfigError,
    FormatError,
    LighthouseError,
    UnsupportedStateError,
    WriteError,
)
from lighthousectl.core.model import (
    DetectedDevice,
    DeviceIdentity,
    DispatchResult,
    Generation,
    LogicalState,
    ScanSettings,
    SessionSummary,
)
from lighthousectl.core.service import PowerService
from lighthousectl.transports.base import Adapter
from lighthousectl.transports.ble_gatt import BLEGATTAdapter

__all__ = [
    "LighthouseError",
    "ConfigError",
    "AdapterError",
    "FormatError",
    "UnsupportedStateError",
    "WriteError",
    "DetectedDevice",
    "DeviceIdentity",
    "DispatchResult",
    "Generation",
    "LogicalState",
    "ScanSettings",
    "SessionSummary",
    "Adapter",
    "BLEGATTAdapter",
    "Client",
]


class Client:
    """Public client for switching base stations.

    A `Client` wraps settings loading, advertisement scanning, and GATT
    writes behind a stable API intended for third-party tools (GUI, tray
    apps, scripts).
    """

    def __init__(
        self,
        *,
        adapter: Adapter | None = None,
        settings: ScanSettings | None = None,
        config_path: Path | None = None,
    ) -> None:
        self._service = PowerService(adapter=adapter, settings=settings, config_path=config_path)

    @property
    def settings(self) -> ScanSettings:
        return self._service.settings

    @property
    def load_warnings(self) -> tuple[str, ...]:
        return self._service.load_warnings

    def set_state(self, state: LogicalState | str) -> SessionSummary:
        if isinstance(state, str):
            state = LogicalState.parse(state)
        return self._service.set_state(state)

    def list_devices(self, *, duration_s: float | None = None) -> list[DetectedDevice]:
        return self._service.list_devices(duration_s)
