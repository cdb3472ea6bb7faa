"""Waveshare Modbus RTU Relay (8 channels) protocol."""

from __future__ import annotations

import re
from enum import IntEnum
from typing import List, Tuple

from .modbus_frame import ModbusFrameError, WriteRead, call_function

FUNCTION_READ_RELAY = 0x01
FUNCTION_READ_ADDRESS_AND_VERSION = 0x03
FUNCTION_WRITE_RELAY = 0x05

RELAY_COUNT = 8
RELAY_CATEGORY = "Relays"

_RELAY_NAME = re.compile(r"CH([0-9])")


class RelayCommand(IntEnum):
    """Relay commands; 0xFF00 energises the relay."""

    OPEN = 0x0000
    CLOSE = 0xFF00


def write_relay(write_read: WriteRead, device_address: int, relay_nr: int, command: RelayCommand) -> None:
    """Switch the relay with the given number (0 to 7)."""
    if not 0 <= relay_nr <= 7:
        raise ValueError(f"invalid relayNr: {relay_nr}, it must be between 0 and 7")
    payload = relay_nr.to_bytes(2, "big") + int(command).to_bytes(2, "big")
    call_function(write_read, device_address, FUNCTION_WRITE_RELAY, payload, 4)


def read_software_revision(write_read: WriteRead, device_address: int) -> str:
    """Read the software revision, formatted like V1.00."""
    try:
        response = call_function(
            write_read,
            device_address,
            FUNCTION_READ_ADDRESS_AND_VERSION,
            bytes([0x20, 0x00, 0x00, 0x01]),
            2,
        )
    except (ModbusFrameError, OSError) as exc:
        raise ModbusFrameError(f"cannot read address and version: {exc}") from exc
    revision = response[1]
    return f"V{revision // 100}.{revision % 100:02d}"


def read_relays(write_read: WriteRead, device_address: int) -> Tuple[bool, ...]:
    """Read the state of all eight relays; True means closed."""
    try:
        response = call_function(
            write_read,
            device_address,
            FUNCTION_READ_RELAY,
            bytes([0x00, 0xFF, 0x00, 0x01]),
            2,
        )
    except (ModbusFrameError, OSError) as exc:
        raise ModbusFrameError(f"cannot read state of relays: {exc}") from exc
    state = response[1]
    return tuple(bool(state & (1 << bit)) for bit in range(RELAY_COUNT))


def relay_address(register_name: str) -> int:
    """Relay number for a register name; CH1 is relay 0."""
    match = _RELAY_NAME.fullmatch(register_name)
    if match is None:
        raise ValueError("invalid registerName")
    return int(match.group(1)) - 1


def relay_register_names() -> List[str]:
    """Register names of the relays, CH1 to CH8."""
    return [f"CH{i + 1}" for i in range(RELAY_COUNT)]