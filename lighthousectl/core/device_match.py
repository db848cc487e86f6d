"""Advertised-name to base station generation matching."""

from __future__ import annotations

from lighthousectl.core.model import Generation

GEN1_PREFIX = "HTC BS"
GEN2_PREFIX = "LHB-"


def classify(name: str | None) -> Generation:
    if not name:
        return Generation.NOT_APPLICABLE
    if name.startswith(GEN1_PREFIX):
        return Generation.GEN1
    if name.startswith(GEN2_PREFIX):
        return Generation.GEN2
    return Generation.NOT_APPLICABLE
