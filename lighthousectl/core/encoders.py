"""Command frames for the two base station generations."""

from __future__ import annotations

import re
import uuid

from lighthousectl.core.errors import FormatError, UnsupportedStateError
from lighthousectl.core.model import CommandPayload, LogicalState

GEN1_CHARACTERISTIC = uuid.UUID("0000cb01-0000-1000-8000-00805f9b34fb")
GEN2_CHARACTERISTIC = uuid.UUID("00001525-1212-efde-1523-785feabcd124")

_GEN1_HEADERS = {
    LogicalState.OFF: bytes.fromhex("12020001"),
    LogicalState.ON: bytes.fromhex("12000000"),
}
_GEN1_FRAME_LEN = 20
_GEN1_ID_CHARS = 8
_HEX_PAIR_RE = re.compile(r"^[0-9a-fA-F]{2}$")

_GEN2_VALUES = {
    LogicalState.OFF: 0x00,
    LogicalState.ON: 0x01,
    LogicalState.STANDBY: 0x02,
}


def gen1_identifier(name: str) -> bytes:
    """Return the 4-byte identifier from the trailing hex digits of a Gen1 name.

    The bytes are returned in frame order, i.e. reversed with respect to the
    name: ``"HTC BS12345678"`` yields ``78 56 34 12``.
    """
    suffix = name[-_GEN1_ID_CHARS:]
    if len(suffix) != _GEN1_ID_CHARS:
        raise FormatError(f"Name '{name}' is too short to carry a base station identifier")

    pairs = [suffix[i : i + 2] for i in range(0, _GEN1_ID_CHARS, 2)]
    for pair in pairs:
        if not _HEX_PAIR_RE.match(pair):
            raise FormatError(f"Name '{name}' has non-hex identifier byte '{pair}'")
    return bytes(int(pair, 16) for pair in reversed(pairs))


def encode_gen1(state: LogicalState, name: str) -> CommandPayload:
    header = _GEN1_HEADERS.get(state)
    if header is None:
        raise UnsupportedStateError(
            f"Gen1 base stations do not support {state.name}, available: [OFF|ON]"
        )
    frame = header + gen1_identifier(name)
    return CommandPayload(
        data=frame.ljust(_GEN1_FRAME_LEN, b"\x00"),
        characteristic=GEN1_CHARACTERISTIC,
    )


def encode_gen2(state: LogicalState) -> CommandPayload:
    return CommandPayload(data=bytes([_GEN2_VALUES[state]]), characteristic=GEN2_CHARACTERISTIC)
