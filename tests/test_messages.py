import json
from datetime import datetime, timedelta, timezone

import pytest

from iotbridge.messages import (
    EnumTelemetryValue,
    NumericTelemetryValue,
    RealtimeMessage,
    StructRegister,
    StructureMessage,
    TelemetryMessage,
    TextTelemetryValue,
    parse_realtime,
    parse_structure,
    parse_telemetry,
)


def _register(**kwargs):
    defaults = dict(category="Monitor", name="PanelPower", description="Panel power",
                    type="number", unit="W", sort=100)
    defaults.update(kwargs)
    return StructRegister(**defaults)


# --- realtime ---

def test_realtime_numeric_integral_value_wire_form():
    assert RealtimeMessage(numeric_value=230.0).to_json() == b'{"NumVal":230}'


def test_realtime_empty_message_omits_all_fields():
    assert RealtimeMessage().to_json() == b"{}"


@pytest.mark.parametrize(
    "msg",
    [
        RealtimeMessage(numeric_value=12.75),
        RealtimeMessage(numeric_value=-0.001),
        RealtimeMessage(numeric_value=1e-7),
        RealtimeMessage(numeric_value=3e22),
        RealtimeMessage(text_value="hello"),
        RealtimeMessage(enum_idx=2),
        RealtimeMessage(enum_idx=0),
    ],
)
def test_realtime_round_trip(msg):
    assert parse_realtime(msg.to_json()) == msg


def test_realtime_small_float_uses_short_exponent():
    assert RealtimeMessage(numeric_value=1e-7).to_json() == b'{"NumVal":1e-7}'


def test_realtime_only_set_field_is_present():
    raw = RealtimeMessage(enum_idx=1).to_json()
    assert list(json.loads(raw)) == ["EnumIdx"]


def test_realtime_html_characters_are_escaped_and_round_trip():
    msg = RealtimeMessage(text_value="<a&b>")
    raw = msg.to_json()
    assert b"<" not in raw and b">" not in raw and b"&" not in raw
    assert parse_realtime(raw).text_value == "<a&b>"


def test_realtime_parse_matches_keys_case_insensitively():
    assert parse_realtime(b'{"numval": 1.5}').numeric_value == 1.5


def test_realtime_parse_accepts_str_payload():
    assert parse_realtime('{"TextVal": "on"}').text_value == "on"


def test_realtime_parse_null_gives_empty_message():
    assert parse_realtime(b"null") == RealtimeMessage()


def test_realtime_parse_wrong_type_raises():
    with pytest.raises(ValueError):
        parse_realtime(b'{"NumVal": "high"}')


def test_realtime_parse_fractional_enum_idx_raises():
    with pytest.raises(ValueError):
        parse_realtime(b'{"EnumIdx": 1.5}')


def test_realtime_parse_invalid_json_raises():
    with pytest.raises(ValueError):
        parse_realtime(b"{not json")


def test_realtime_nan_cannot_be_encoded():
    with pytest.raises(ValueError):
        RealtimeMessage(numeric_value=float("nan")).to_json()


# --- structure ---

def test_structure_omits_empty_topics():
    raw = StructureMessage(registers=[_register()]).to_json()
    assert list(json.loads(raw)) == ["Regs"]


def test_structure_field_order():
    msg = StructureMessage(
        availability_topics=["a/avail"],
        telemetry_topic="a/tele",
        realtime_topic="a/real/%RegisterName%",
        command_topic="a/cmnd/%RegisterName%",
        registers=[],
    )
    assert list(json.loads(msg.to_json())) == ["Avail", "Tele", "Real", "Cmnd", "Regs"]


def test_structure_register_field_names_and_omitempty():
    reg = _register(unit="", enum=None)
    decoded = json.loads(StructureMessage(registers=[reg]).to_json())["Regs"][0]
    assert list(decoded) == ["Cat", "Name", "Desc", "Type", "Sort", "Cmnd"]
    assert decoded["Name"] == "PanelPower"
    assert decoded["Cmnd"] is False


def test_structure_enum_keys_are_sorted_strings():
    reg = _register(type="enum", unit="", enum={1: "closed", 0: "open"})
    decoded = json.loads(StructureMessage(registers=[reg]).to_json())["Regs"][0]
    assert list(decoded["Enum"].items()) == [("0", "open"), ("1", "closed")]


def test_structure_round_trip():
    msg = StructureMessage(
        availability_topics=["client/avail", "device/avail"],
        telemetry_topic="tele/dev",
        realtime_topic="real/dev/%RegisterName%",
        command_topic="cmnd/dev/%RegisterName%",
        registers=[
            _register(),
            _register(name="CH1", type="enum", unit="", enum={0: "open", 1: "closed"},
                      sort=0, writable=True),
        ],
    )
    assert parse_structure(msg.to_json()) == msg


def test_structure_parse_invalid_enum_key_raises():
    with pytest.raises(ValueError):
        parse_structure(b'{"Regs":[{"Name":"x","Enum":{"x":"a"}}]}')


def test_structure_parse_non_object_raises():
    with pytest.raises(ValueError):
        parse_structure(b"[1, 2]")


def test_structure_parse_missing_regs_gives_empty_list():
    assert parse_structure(b'{"Tele":"t"}') == StructureMessage(telemetry_topic="t")


# --- telemetry ---

def test_telemetry_at_formats_times():
    now = datetime(2024, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc)
    msg = TelemetryMessage.at(now, timedelta(seconds=10), "bmv")
    assert msg.time == "2024-01-02T03:04:05Z"
    assert parse_telemetry(msg.to_json()).next_telemetry == TelemetryMessage.at(
        now + timedelta(seconds=10), timedelta(0), "bmv"
    ).time


def test_telemetry_at_uses_offset_for_non_utc_zone():
    zone = timezone(timedelta(hours=2))
    msg = TelemetryMessage.at(datetime(2024, 1, 2, 3, 4, 5, tzinfo=zone), timedelta(0), "x")
    assert msg.time.endswith("+02:00")
    assert msg.time == msg.next_telemetry


def test_telemetry_omits_empty_value_maps():
    raw = TelemetryMessage(time="t", next_telemetry="n", model="m").to_json()
    assert list(json.loads(raw)) == ["Time", "NextTelemetry", "Model"]


def test_telemetry_value_field_names():
    msg = TelemetryMessage(
        model="m",
        numeric_values={"P": NumericTelemetryValue("Power", "Power", 5.5, "")},
        enum_values={"S": EnumTelemetryValue("State", "State", 1, "on")},
    )
    decoded = json.loads(msg.to_json())
    assert list(decoded["NumericValues"]["P"]) == ["Cat", "Desc", "Val"]
    assert list(decoded["EnumValues"]["S"]) == ["Cat", "Desc", "Idx", "Val"]


def test_telemetry_map_keys_sorted():
    msg = TelemetryMessage(
        text_values={"b": TextTelemetryValue("c", "d", "x"), "a": TextTelemetryValue("c", "d", "y")}
    )
    assert list(json.loads(msg.to_json())["TextValues"]) == ["a", "b"]


def test_telemetry_round_trip():
    now = datetime(2023, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
    msg = TelemetryMessage.at(
        now,
        timedelta(minutes=1),
        "BMV-702",
        numeric_values={"Voltage": NumericTelemetryValue("Essential", "Main voltage", 12.6, "V")},
        text_values={"Serial": TextTelemetryValue("Product", "Serial number", "SERIAL-TEST")},
        enum_values={"Alarm": EnumTelemetryValue("Monitor", "Alarm", 0, "off")},
    )
    assert parse_telemetry(msg.to_json()) == msg


def test_telemetry_parse_wrong_value_type_raises():
    with pytest.raises(ValueError):
        parse_telemetry(b'{"NumericValues":{"P":{"Val":"x"}}}')