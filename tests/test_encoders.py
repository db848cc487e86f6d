from __future__ import annotations

import pytest

from lighthousectl.core.encoders import (
    GEN1_CHARACTERISTIC,
    GEN2_CHARACTERISTIC,
    encode_gen1,
    encode_gen2,
    gen1_identifier,
)
from lighthousectl.core.errors import FormatError, UnsupportedStateError
from lighthousectl.core.model import LogicalState


def test_gen1_on_frame() -> None:
    payload = encode_gen1(LogicalState.ON, "HTC BS12345678")
    assert payload.data.hex() == "12000000" + "78563412" + "00" * 12
    assert len(payload.data) == 20
    assert str(payload.characteristic) == "0000cb01-0000-1000-8000-00805f9b34fb"


def test_gen1_off_frame_header_and_reversed_id() -> None:
    payload = encode_gen1(LogicalState.OFF, "HTC BS-0A1B2C3D")
    assert payload.data[:4] == bytes.fromhex("12020001")
    assert payload.data[4:8] == bytes.fromhex("3d2c1b0a")
    assert payload.data[8:] == bytes(12)
    assert payload.characteristic == GEN1_CHARACTERISTIC


def test_gen1_identifier_accepts_lowercase_hex() -> None:
    assert gen1_identifier("HTC BSdeadbeef") == bytes.fromhex("efbeadde")


@pytest.mark.parametrize("name", ["HTC BS12345678", "HTC BS00000000", "HTC BSFFFFFFFF"])
def test_gen1_standby_is_unsupported(name: str) -> None:
    with pytest.raises(UnsupportedStateError):
        encode_gen1(LogicalState.STANDBY, name)


@pytest.mark.parametrize("name", ["HTC BSZZZZZZZZ", "HTC BS1234567G", "HTC BS12 45678", "1234"])
def test_gen1_malformed_name_raises_format_error(name: str) -> None:
    with pytest.raises(FormatError):
        encode_gen1(LogicalState.ON, name)


def test_gen1_signed_pair_is_not_hex() -> None:
    with pytest.raises(FormatError):
        gen1_identifier("HTC BS+1234567")


def test_gen2_mapping_is_total_and_distinct() -> None:
    frames = {state: encode_gen2(state).data for state in LogicalState}
    assert frames == {
        LogicalState.OFF: b"\x00",
        LogicalState.ON: b"\x01",
        LogicalState.STANDBY: b"\x02",
    }


def test_gen2_standby_targets_gen2_characteristic() -> None:
    payload = encode_gen2(LogicalState.STANDBY)
    assert payload.data == b"\x02"
    assert payload.characteristic == GEN2_CHARACTERISTIC
    assert str(payload.characteristic) == "00001525-1212-efde-1523-785feabcd124"
