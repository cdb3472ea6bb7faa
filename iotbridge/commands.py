"""Command messages sent to writable registers and helpers for remote devices."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping, Optional, Set

from .messages import (
    REGISTER_NAME_PLACEHOLDER,
    Payload,
    RealtimeMessage,
    StructRegister,
    parse_realtime,
)


@dataclass(frozen=True)
class CommandMessage:
    """A new value for a writable register; normally exactly one field is set."""

    numeric_value: Optional[float] = None
    text_value: Optional[str] = None
    enum_idx: Optional[int] = None

    def to_json(self) -> bytes:
        """Wire form of the command; it has the same shape as a realtime message."""
        return RealtimeMessage(
            numeric_value=self.numeric_value,
            text_value=self.text_value,
            enum_idx=self.enum_idx,
        ).to_json()

    @property
    def is_empty(self) -> bool:
        """Whether the message carries no value at all."""
        return self.numeric_value is None and self.text_value is None and self.enum_idx is None


def parse_command(payload: Payload) -> CommandMessage:
    """Decode a command message; raises ValueError on malformed input."""
    message = parse_realtime(payload)
    return CommandMessage(
        numeric_value=message.numeric_value,
        text_value=message.text_value,
        enum_idx=message.enum_idx,
    )


def writable_register_names(registers: Iterable[StructRegister]) -> Set[str]:
    """Names of the registers that accept commands."""
    return {register.name for register in registers if register.writable}


def fill_register_topic(topic_template: str, register_name: str) -> str:
    """Replace the first register name placeholder in a topic template."""
    return topic_template.replace(REGISTER_NAME_PLACEHOLDER, register_name, 1)


def all_available(availability: Mapping[str, bool], expected_count: int) -> bool:
    """Whether exactly the expected number of availability topics report online."""
    return sum(1 for online in availability.values() if online) == expected_count