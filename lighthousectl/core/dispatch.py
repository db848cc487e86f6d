"""Per-device dispatch: resolve, classify, encode, write."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from lighthousectl.core.device_match import classify
from lighthousectl.core.encoders import encode_gen1, encode_gen2
from lighthousectl.core.errors import AdapterError
from lighthousectl.core.model import DeviceIdentity, DispatchResult, Generation, LogicalState
from lighthousectl.transports.base import Adapter

LOGGER = logging.getLogger(__name__)


async def dispatch(
    adapter: Adapter,
    identity: DeviceIdentity,
    state: LogicalState,
    *,
    clock: Callable[[], float] = time.monotonic,
) -> DispatchResult:
    """Send ``state`` to one discovered device if it is a known base station.

    Returns a result with ``completed_at`` set to the time processing started
    when a command was written, or a not-applicable result otherwise. Encoder
    and write errors propagate to the caller.
    """
    try:
        properties = await adapter.resolve_properties(identity)
    except AdapterError as exc:
        LOGGER.debug("Could not resolve %s: %s", identity.address, exc)
        return DispatchResult(identity=identity)
    if properties is None or not properties.local_name:
        return DispatchResult(identity=identity)

    name = properties.local_name
    started = clock()
    generation = classify(name)
    if generation is Generation.GEN1:
        payload = encode_gen1(state, name)
    elif generation is Generation.GEN2:
        payload = encode_gen2(state)
    else:
        LOGGER.debug("Skipping %s (%s)", identity.address, name)
        return DispatchResult(identity=identity, name=name)

    await adapter.write(identity, payload.data, payload.characteristic)
    LOGGER.info(
        "Sent %s to %s (%s, %s) payload=%s",
        state.name,
        identity.address,
        name,
        generation.value,
        payload.data.hex(),
    )
    return DispatchResult(
        identity=identity,
        name=name,
        generation=generation,
        payload_hex=payload.data.hex(),
        completed_at=started,
    )
