"""Discovery loop, adaptive timeout controller, and the service used by CLI and API."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from pathlib import Path

from lighthousectl.core.config import load_settings
from lighthousectl.core.device_match import classify
from lighthousectl.core.dispatch import dispatch
from lighthousectl.core.errors import AdapterError
from lighthousectl.core.model import (
    DetectedDevice,
    DeviceDiscovered,
    DeviceUpdated,
    DispatchResult,
    LogicalState,
    ScanSession,
    ScanSettings,
    SessionSummary,
)
from lighthousectl.transports.base import Adapter
from lighthousectl.transports.ble_gatt import BLEGATTAdapter

LOGGER = logging.getLogger(__name__)

DispatchQueue = asyncio.Queue["asyncio.Task[DispatchResult]"]


async def discovery_loop(adapter: Adapter, state: LogicalState, queue: DispatchQueue) -> None:
    """Spawn one dispatch task per newly discovered device.

    Handles go onto ``queue`` in event order; a full queue suspends the loop
    until the controller drains it.
    """
    async for event in adapter.events():
        if not isinstance(event, DeviceDiscovered):
            continue
        task = asyncio.create_task(
            dispatch(adapter, event.identity, state),
            name=f"dispatch-{event.identity.address}",
        )
        try:
            await queue.put(task)
        except asyncio.CancelledError:
            task.cancel()
            raise


def _raise_if_failed(task: asyncio.Task[None]) -> None:
    if task.done() and not task.cancelled():
        exc = task.exception()
        if exc is not None:
            raise exc


async def _next_handle(
    queue: DispatchQueue,
    timeout_s: float,
    producer: asyncio.Task[None] | None,
) -> asyncio.Task[DispatchResult] | None:
    """Wait up to ``timeout_s`` for the next handle; None on timeout.

    A producer that fails while waiting has its error raised immediately.
    """
    if producer is not None:
        _raise_if_failed(producer)
    getter = asyncio.ensure_future(queue.get())
    waiters: set[asyncio.Future] = {getter}
    if producer is not None and not producer.done():
        waiters.add(producer)

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout_s
    try:
        while True:
            done, _ = await asyncio.wait(
                waiters,
                timeout=max(0.0, deadline - loop.time()),
                return_when=asyncio.FIRST_COMPLETED,
            )
            if getter in done:
                return getter.result()
            if not done:
                return None
            _raise_if_failed(producer)
            waiters.discard(producer)
    finally:
        if not getter.done():
            getter.cancel()


async def run_controller(
    queue: DispatchQueue,
    settings: ScanSettings,
    *,
    clock: Callable[[], float] = time.monotonic,
    producer: asyncio.Task[None] | None = None,
) -> SessionSummary:
    """Drain dispatch handles until no handle arrives within the scan window.

    Each successful dispatch rescales the window to ``timeout_scale`` times
    the gap since the previous one. The first failed dispatch, or a failed
    ``producer``, is re-raised.
    """
    session = ScanSession(timeout_s=settings.initial_timeout_s, previous=clock())
    commanded: list[DispatchResult] = []
    timeouts: list[float] = []
    skipped = 0

    while True:
        task = await _next_handle(queue, session.timeout_s, producer)
        if task is None:
            LOGGER.info(
                "No dispatch within %.2fs, ending session (%d commanded, %d skipped)",
                session.timeout_s,
                len(commanded),
                skipped,
            )
            return SessionSummary(
                commanded=tuple(commanded),
                skipped=skipped,
                timeouts=tuple(timeouts),
            )

        result = await task
        if not result.applicable:
            skipped += 1
            continue

        session = session.advance(result.completed_at, settings.timeout_scale)
        LOGGER.debug("Scan window now %.2fs after %s", session.timeout_s, result.identity.address)
        commanded.append(result)
        timeouts.append(session.timeout_s)


def _reap(queue: DispatchQueue) -> None:
    """Cancel or collect dispatch tasks the controller never consumed."""
    while not queue.empty():
        task = queue.get_nowait()
        if not task.done():
            task.cancel()
        elif not task.cancelled() and task.exception() is not None:
            LOGGER.debug("Discarding unconsumed failure from %s: %s", task.get_name(), task.exception())


class PowerService:
    def __init__(
        self,
        *,
        adapter: Adapter | None = None,
        settings: ScanSettings | None = None,
        config_path: Path | None = None,
    ) -> None:
        if settings is None:
            loaded = load_settings(config_path)
            settings = loaded.settings
            self.load_warnings = loaded.warnings
        else:
            self.load_warnings = ()
        self.settings = settings
        self.adapter = adapter or BLEGATTAdapter(
            adapter=settings.adapter,
            connect_timeout_s=settings.connect_timeout_s,
            write_with_response=settings.write_with_response,
        )

    def set_state(self, state: LogicalState) -> SessionSummary:
        return asyncio.run(self.run_session(state))

    def list_devices(self, duration_s: float | None = None) -> list[DetectedDevice]:
        duration = self.settings.scan_duration_s if duration_s is None else duration_s
        return asyncio.run(self.scan(duration))

    async def run_session(self, state: LogicalState) -> SessionSummary:
        queue: DispatchQueue = asyncio.Queue(maxsize=self.settings.queue_size)
        await self.adapter.start_scan()
        producer = asyncio.create_task(discovery_loop(self.adapter, state, queue), name="discovery")
        try:
            summary = await run_controller(queue, self.settings, producer=producer)
            _raise_if_failed(producer)
        except BaseException:
            await self._teardown(producer, queue, aborted=True)
            raise
        await self._teardown(producer, queue, aborted=False)
        return summary

    async def _teardown(self, producer: asyncio.Task[None], queue: DispatchQueue, *, aborted: bool) -> None:
        producer.cancel()
        _reap(queue)
        try:
            await self.adapter.stop_scan()
        except AdapterError as exc:
            if not aborted:
                raise
            LOGGER.warning("Could not stop scanning after failed session: %s", exc)

    async def scan(self, duration_s: float) -> list[DetectedDevice]:
        found: dict[str, DetectedDevice] = {}

        async def _collect() -> None:
            async for event in self.adapter.events():
                if not isinstance(event, (DeviceDiscovered, DeviceUpdated)):
                    continue
                properties = await self.adapter.resolve_properties(event.identity)
                name = properties.local_name if properties else None
                previous = found.get(event.identity.address)
                if previous is not None and previous.name and not name:
                    continue
                found[event.identity.address] = DetectedDevice(
                    identity=event.identity,
                    name=name,
                    generation=classify(name),
                )

        await self.adapter.start_scan()
        try:
            await asyncio.wait_for(_collect(), timeout=duration_s)
        except asyncio.TimeoutError:
            pass
        finally:
            await self.adapter.stop_scan()
        return sorted(found.values(), key=lambda d: d.identity.address)
