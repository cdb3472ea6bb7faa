import pytest

from iotbridge.finder_register import FinderRegister, FinderRegisterType, RegisterKind

INVALID_ENUM = {0: "valid", 1: "invalid"}


def test_string_register():
    reg = FinderRegister(
        "Device Info", "ModelNumber", "Model Number",
        FinderRegisterType.T_STR16, 30001, 30008, sort=600,
    )
    assert reg.count_registers() == 8
    assert reg.count_bytes() == 16
    assert reg.kind is RegisterKind.TEXT


def test_serial_number_register():
    reg = FinderRegister(
        "Device Info", "SerialNumber", "Serial Number",
        FinderRegisterType.T_STR8, 30009, 30012, sort=601,
    )
    assert reg.count_bytes() == 8
    assert reg.kind is RegisterKind.TEXT


def test_float_register():
    reg = FinderRegister(
        "Essential", "UAvgPN", "Uavg (phase to neutral)",
        FinderRegisterType.T_FLOAT, 32484, 32485, unit="V", sort=0,
    )
    assert reg.count_registers() == 2
    assert reg.count_bytes() == 4
    assert reg.kind is RegisterKind.NUMBER
    assert reg.unit == "V"


def test_t1_without_enum_is_number():
    reg = FinderRegister(
        "Device Info", "SoftwareReference", "Software Reference",
        FinderRegisterType.T1, 30013, 30013, sort=602,
    )
    assert reg.kind is RegisterKind.NUMBER
    assert reg.count_bytes() == 2
    assert reg.bit == -1


def test_t1_with_enum_is_enum():
    reg = FinderRegister(
        "Essential", "P2valid", "Phase 2 measurement",
        FinderRegisterType.T1, 30101, 30101, enum=INVALID_ENUM, bit=1, sort=31,
    )
    assert reg.kind is RegisterKind.ENUM
    assert reg.enum[1] == "invalid"
    assert reg.bit == 1


def test_hardware_reference_str2():
    reg = FinderRegister(
        "Device Info", "HardwareReference", "Hardware Reference",
        FinderRegisterType.T_STR2, 30014, 30014, sort=603,
    )
    assert reg.kind is RegisterKind.TEXT
    assert reg.count_registers() == 1


@pytest.mark.parametrize(
    "register_type, begin, end",
    [
        (FinderRegisterType.T_FLOAT, 32484, 32484),
        (FinderRegisterType.T1, 30101, 30102),
        (FinderRegisterType.T_STR16, 30001, 30004),
        (FinderRegisterType.T_STR8, 30009, 30008),
    ],
)
def test_size_mismatch_raises(register_type, begin, end):
    with pytest.raises(ValueError, match="expect"):
        FinderRegister("Cat", "Bad", "Bad register", register_type, begin, end)


def test_registers_are_hashable_and_comparable():
    a = FinderRegister("Cat", "X", "x", FinderRegisterType.T_FLOAT, 10, 11, enum=None)
    b = FinderRegister("Cat", "X", "x", FinderRegisterType.T_FLOAT, 10, 11, enum=None)
    assert a == b
    assert len({a, b}) == 1