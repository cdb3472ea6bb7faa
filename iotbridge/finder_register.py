"""Register descriptions of Finder energy meters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Mapping, Optional


class RegisterKind(Enum):
    """How a register value is represented."""

    NUMBER = "number"
    TEXT = "text"
    ENUM = "enum"


class FinderRegisterType(IntEnum):
    """Data types of Finder input registers."""

    T1 = 0
    T_STR2 = 1
    T_STR8 = 2
    T_STR16 = 3
    T_FLOAT = 4


_EXPECTED_BYTES = {
    FinderRegisterType.T1: 2,
    FinderRegisterType.T_STR2: 2,
    FinderRegisterType.T_STR8: 8,
    FinderRegisterType.T_STR16: 16,
    FinderRegisterType.T_FLOAT: 4,
}


@dataclass(frozen=True)
class FinderRegister:
    """A register spanning the 16-bit input registers address_begin to address_end.

    For enum registers a non-negative bit selects a single bit as the value.
    """

    category: str
    name: str
    description: str
    register_type: FinderRegisterType
    address_begin: int
    address_end: int
    enum: Optional[Mapping[int, str]] = field(default=None, hash=False)
    bit: int = -1
    unit: str = ""
    sort: int = 0
    writable: bool = False

    def __post_init__(self) -> None:
        expected = _EXPECTED_BYTES[self.register_type]
        got = self.count_bytes()
        if got != expected:
            raise ValueError(
                f"FinderDevice: registerName={self.name}: expect {expected} bytes but got {got}"
            )

    @property
    def kind(self) -> RegisterKind:
        """Representation of the register's value."""
        if self.register_type is FinderRegisterType.T1:
            return RegisterKind.ENUM if self.enum is not None else RegisterKind.NUMBER
        if self.register_type is FinderRegisterType.T_FLOAT:
            return RegisterKind.NUMBER
        return RegisterKind.TEXT

    def count_registers(self) -> int:
        """Number of 16-bit registers covered."""
        return self.address_end - self.address_begin + 1

    def count_bytes(self) -> int:
        """Number of bytes covered."""
        return self.count_registers() * 2