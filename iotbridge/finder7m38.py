"""Finder 7M.38 energy meter: register list and Modbus input register reads."""

from __future__ import annotations

import logging
import struct
from typing import Iterable, Iterator, List, Union

from .finder_register import FinderRegister, FinderRegisterType, RegisterKind
from .modbus_frame import ModbusFrameError, WriteRead, call_function

log = logging.getLogger(__name__)

FUNCTION_READ_HOLDING_REGISTERS = 0x03
FUNCTION_READ_INPUT_REGISTERS = 0x04

INPUT_REGISTER_ADDRESS_OFFSET = 30000

READ_ATTEMPTS = 8

STATIC_CATEGORIES = frozenset({"Device Info", "Energy Counter"})

RegisterValue = Union[float, int, str]

_INVALID_ENUM = {0: "valid", 1: "invalid"}

# address, sort, category, name, description, unit
_FLOAT_REGISTERS = (
    (32480, 620, "Device Info", "RunTime", "Run time", "s"),
    (32484, 0, "Essential", "UAvgPN", "Uavg (phase to neutral)", "V"),
    (32486, 1, "Essential", "UAvgPP", "Uavg (phase to phase)", "V"),
    (32488, 100, "Current", "SI", "S I", "A"),
    (32490, 25, "Essential", "Pt", "Active Power Total", "W"),
    (32492, 200, "Power", "Qt", "Reactive Power Total", "var"),
    (32494, 201, "Power", "St", "Apparent Power Total", "VA"),
    (32496, 21, "Essential", "PFt", "Power Factor Total", ""),
    (32498, 5, "Essential", "F", "Frequency", "Hz"),
    (32500, 10, "Essential", "U1", "U1", "V"),
    (32502, 11, "Essential", "U2", "U2", "V"),
    (32504, 12, "Essential", "U3", "U3", "V"),
    (32508, 300, "Phase Geometry", "U12", "U12", "V"),
    (32510, 301, "Phase Geometry", "U23", "U23", "V"),
    (32512, 302, "Phase Geometry", "U31", "U31", "V"),
    (32516, 101, "Current", "I1", "I1", "A"),
    (32518, 102, "Current", "I2", "I2", "A"),
    (32520, 103, "Current", "I3", "I3", "A"),
    (32524, 104, "Current", "INCalc", "I neutral (calculated)", "A"),
    (32526, 105, "Current", "InMeas", "I neutral (measured)", "A"),
    (32528, 106, "Current", "Iavg", "Iavg", "A"),
    (32530, 20, "Essential", "P1", "Active Power Phase L1", "W"),
    (32532, 21, "Essential", "P2", "Active Power Phase L2", "W"),
    (32534, 22, "Essential", "P3", "Active Power Phase L3", "W"),
    (32538, 202, "Power", "Q1", "Reactive Power Phase L1", "var"),
    (32540, 203, "Power", "Q2", "Reactive Power Phase L2", "var"),
    (32542, 204, "Power", "Q3", "Reactive Power Phase L3", "var"),
    (32544, 205, "Power", "Qt", "Reactive Power Total", "var"),
    (32546, 206, "Power", "S1", "Apparent Power Phase L1 ", "VA"),
    (32548, 207, "Power", "S2", "Apparent Power Phase L2 ", "VA"),
    (32550, 208, "Power", "S3", "Apparent Power Phase L3 ", "VA"),
    (32552, 209, "Power", "St", "Apparent Power Total", "VA"),
    (32554, 210, "Power", "PF1", "Power Factor Phase 1", ""),
    (32556, 211, "Power", "PF2", "Power Factor Phase 2", ""),
    (32558, 212, "Power", "PF3", "Power Factor Phase 3", ""),
    (32560, 213, "Power", "PFt", "Power Factor Total", ""),
    (32562, 214, "Power", "PF1", "CAP/IND P. F. Phase 1", ""),
    (32564, 215, "Power", "PF2", "CAP/IND P. F. Phase 2", ""),
    (32566, 216, "Power", "PF3", "CAP/IND P. F. Phase 3", ""),
    (32568, 217, "Power", "PFt", "CAP/IND P. F. Total", ""),
    (32570, 310, "Phase Geometry", "J1", "j1 (angle between U1 and I1)", "°"),
    (32572, 311, "Phase Geometry", "J2", "j2 (angle between U2 and I2)", "°"),
    (32574, 312, "Phase Geometry", "J3", "j3 (angle between U3 and I3) ", "°"),
    (32576, 313, "Phase Geometry", "Jt", "Power Angle Total (atan2(Pt,Qt))", "°"),
    (32578, 314, "Phase Geometry", "J12", "j12 (angle between U1 and U2)", "°"),
    (32580, 315, "Phase Geometry", "J23", "j23 (angle between U2 and U3)", "°"),
    (32582, 316, "Phase Geometry", "J31", "j31 (angle between U3 and U1)", "°"),
    (32588, 400, "Distortion", "I1Thd", "I1 THD", "%"),
    (32590, 401, "Distortion", "I2Thd", "I2 THD", "%"),
    (32592, 402, "Distortion", "I3Thd", "I3 THD", "%"),
    (32594, 403, "Distortion", "U1Thd", "U1 THD", "%"),
    (32596, 404, "Distortion", "U2Thd", "U2 THD", "%"),
    (32598, 405, "Distortion", "U3Thd", "U3 THD", "%"),
    (32638, 500, "Energy Counter", "EcN1", "Energy Counter n1", "Wh"),
    (32640, 501, "Energy Counter", "EcN2", "Energy Counter n2", "varh"),
    (32642, 502, "Energy Counter", "EcN3", "Energy Counter n3", "Wh"),
    (32644, 503, "Energy Counter", "EcN4", "Energy Counter n4", "varh"),
    (32658, 40, "Essential", "InternalTemp", "Internal Temperature", "°C"),
    (32985, 610, "Device Info", "Unom", "nominal phase voltage", "V"),
    (32987, 611, "Device Info", "Inom", "nominal phase current", "A"),
    (32989, 612, "Device Info", "Pnom", "nominal phase power", "W"),
    (32991, 613, "Device Info", "Ptot", "nominal total power", "W"),
    (32993, 614, "Device Info", "Itot", "nominal total current", "A"),
    (32995, 615, "Device Info", "Fnom", "nominal frequency", "Hz"),
)


def register_list_7m38() -> List[FinderRegister]:
    """All registers of the Finder 7M.38: product information first, then measurements."""
    registers = [
        FinderRegister("Device Info", "ModelNumber", "Model Number",
                       FinderRegisterType.T_STR16, 30001, 30008, sort=600),
        FinderRegister("Device Info", "SerialNumber", "Serial Number",
                       FinderRegisterType.T_STR8, 30009, 30012, sort=601),
        FinderRegister("Device Info", "SoftwareReference", "Software Reference",
                       FinderRegisterType.T1, 30013, 30013, sort=602),
        FinderRegister("Device Info", "HardwareReference", "Hardware Reference",
                       FinderRegisterType.T_STR2, 30014, 30014, sort=603),
        FinderRegister("Essential", "P1valid", "Phase 1 measurement",
                       FinderRegisterType.T1, 30101, 30101, enum=_INVALID_ENUM, bit=0, sort=30),
        FinderRegister("Essential", "P2valid", "Phase 2 measurement",
                       FinderRegisterType.T1, 30101, 30101, enum=_INVALID_ENUM, bit=1, sort=31),
        FinderRegister("Essential", "P3valid", "Phase 3 measurement",
                       FinderRegisterType.T1, 30101, 30101, enum=_INVALID_ENUM, bit=2, sort=32),
    ]
    registers.extend(
        FinderRegister(category, name, description, FinderRegisterType.T_FLOAT,
                       address, address + 1, unit=unit, sort=sort)
        for address, sort, category, name, description, unit in _FLOAT_REGISTERS
    )
    return registers


def read_input_registers_raw(write_read: WriteRead, device_address: int, register: FinderRegister) -> bytes:
    """Read the register's input registers once and return their bytes."""
    start = register.address_begin - INPUT_REGISTER_ADDRESS_OFFSET
    if not 0 <= start <= 0xFFFF:
        raise ValueError(f"register {register.name}: address {register.address_begin} out of range")
    payload = start.to_bytes(2, "big") + register.count_registers().to_bytes(2, "big")

    expected = register.count_bytes()
    response = call_function(
        write_read,
        device_address,
        FUNCTION_READ_INPUT_REGISTERS,
        payload,
        1 + expected,  # byte count followed by the data
    )
    if response[0] != expected:
        raise ModbusFrameError(
            f"FinderReadInputRegisters: expected byte count to be {expected} but got {response[0]}"
        )
    return response[1:]


def read_input_registers(write_read: WriteRead, device_address: int, register: FinderRegister) -> bytes:
    """Read the register's bytes, retrying since the meter sometimes does not answer."""
    last_error: Exception = ModbusFrameError("no attempt made")
    for _ in range(READ_ATTEMPTS):
        try:
            return read_input_registers_raw(write_read, device_address, register)
        except (ModbusFrameError, OSError) as exc:
            last_error = exc
    raise last_error


def read_register(write_read: WriteRead, device_address: int, register: FinderRegister) -> RegisterValue:
    """Read and decode a register: float for numbers, enum index for enums, str for text."""
    kind = register.kind
    if kind is RegisterKind.NUMBER and register.register_type not in (
        FinderRegisterType.T_FLOAT,
        FinderRegisterType.T1,
    ):
        raise ValueError(
            f"FinderReadRegister does not implement finderRegisterType={int(register.register_type)}"
        )

    log.debug("finder7M38: read registerName=%s, addressBegin=%d, addressEnd=%d",
              register.name, register.address_begin, register.address_end)
    data = read_input_registers(write_read, device_address, register)

    if kind is RegisterKind.NUMBER:
        if register.register_type is FinderRegisterType.T_FLOAT:
            try:
                (value,) = struct.unpack(">f", data[:4])
            except struct.error as exc:
                raise ValueError(f"conversion to float32 failed: {exc}") from exc
            return float(value)
        return float(_uint16(data))

    if kind is RegisterKind.ENUM:
        enum_idx = _uint16(data)
        if register.bit >= 0:
            enum_idx = (enum_idx >> register.bit) & 1
        if enum_idx not in (register.enum or {}):
            raise ValueError(f"invalid enumIdx={enum_idx}")
        return enum_idx

    return data.decode("utf-8", errors="replace")


def poll_registers(registers: Iterable[FinderRegister], reduced_set: bool) -> Iterator[FinderRegister]:
    """Registers to fetch in one poll; a reduced set skips the static ones."""
    for register in registers:
        if reduced_set and register.category in STATIC_CATEGORIES:
            continue
        yield register


def _uint16(data: bytes) -> int:
    if len(data) < 2:
        raise ValueError("conversion to uint16 failed: not enough data")
    return int.from_bytes(data[:2], "big")