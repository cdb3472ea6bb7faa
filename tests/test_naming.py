import pytest

from iotbridge.naming import camel_to_snake_case

NAMES = ["PanelPower", "RunTime", "UAvgPP", "InMeas", "I1Thd", "EcN1", "InternalTemp"]


def test_pinned_examples():
    assert camel_to_snake_case("PanelPower") == "panel_power"
    assert camel_to_snake_case("InternalTemp") == "internal_temp"
    assert camel_to_snake_case("UAvgPN") == "u_avg_pn"


@pytest.mark.parametrize("name", NAMES)
def test_only_inserts_underscores(name):
    assert camel_to_snake_case(name).replace("_", "") == name.lower()


@pytest.mark.parametrize("name", NAMES)
def test_idempotent(name):
    once = camel_to_snake_case(name)
    assert camel_to_snake_case(once) == once


def test_already_snake_unchanged():
    assert camel_to_snake_case("already_snake") == "already_snake"