"""Core data models used across encoders, dispatch, service, and CLI."""

from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass

from lighthousectl.core.errors import ConfigError


class LogicalState(enum.Enum):
    OFF = "off"
    ON = "on"
    STANDBY = "standby"

    @classmethod
    def parse(cls, value: str) -> LogicalState:
        try:
            return cls[value.strip().upper()]
        except KeyError:
            available = "|".join(member.name for member in cls)
            raise ConfigError(f"Unknown state '{value}', available: [{available}]") from None


class Generation(enum.Enum):
    GEN1 = "gen1"
    GEN2 = "gen2"
    NOT_APPLICABLE = "<no-match>"


@dataclass(frozen=True)
class DeviceIdentity:
    address: str


@dataclass(frozen=True)
class DeviceProperties:
    local_name: str | None = None


@dataclass(frozen=True)
class DeviceDiscovered:
    identity: DeviceIdentity


@dataclass(frozen=True)
class DeviceUpdated:
    identity: DeviceIdentity


AdapterEvent = DeviceDiscovered | DeviceUpdated


@dataclass(frozen=True)
class CommandPayload:
    data: bytes
    characteristic: uuid.UUID


@dataclass(frozen=True)
class DispatchResult:
    identity: DeviceIdentity
    name: str | None = None
    generation: Generation = Generation.NOT_APPLICABLE
    payload_hex: str | None = None
    completed_at: float | None = None

    @property
    def applicable(self) -> bool:
        return self.completed_at is not None


@dataclass(frozen=True)
class ScanSession:
    """Remaining scan window and the timestamp of the last successful dispatch."""

    timeout_s: float
    previous: float

    def advance(self, completed_at: float, scale: float) -> ScanSession:
        elapsed = max(0.0, completed_at - self.previous)
        return ScanSession(timeout_s=elapsed * scale, previous=completed_at)


@dataclass(frozen=True)
class ScanSettings:
    initial_timeout_s: float = 10.0
    timeout_scale: float = 10.0
    queue_size: int = 100
    connect_timeout_s: float = 10.0
    write_with_response: bool = True
    adapter: str | None = None
    scan_duration_s: float = 5.0


@dataclass(frozen=True)
class SessionSummary:
    commanded: tuple[DispatchResult, ...]
    skipped: int
    timeouts: tuple[float, ...]


@dataclass(frozen=True)
class DetectedDevice:
    identity: DeviceIdentity
    name: str | None
    generation: Generation
