import pytest

from lighthousectl.core.device_match import classify
from lighthousectl.core.model import Generation


@pytest.mark.parametrize("name", ["HTC BS12345678", "HTC BS", "HTC BSZZZZZZZZ", "HTC BS anything"])
def test_htc_prefix_is_gen1(name: str) -> None:
    assert classify(name) is Generation.GEN1


@pytest.mark.parametrize("name", ["LHB-ABCDEF", "LHB-", "LHB-12345678"])
def test_lhb_prefix_is_gen2(name: str) -> None:
    assert classify(name) is Generation.GEN2


@pytest.mark.parametrize("name", [None, "", "htc bs12345678", "lhb-ABCDEF", "My Headphones", " HTC BS12345678"])
def test_other_names_are_not_applicable(name: str | None) -> None:
    assert classify(name) is Generation.NOT_APPLICABLE
