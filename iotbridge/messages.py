"""MQTT structure, telemetry and realtime messages and their JSON wire form."""

from __future__ import annotations

import json
import math
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Union

Payload = Union[bytes, bytearray, str]

REGISTER_NAME_PLACEHOLDER = "%RegisterName%"

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

_MISSING = object()
_INT_KEY = re.compile(r"[+-]?[0-9]+")


# --- encoding -------------------------------------------------------------


def _format_float(value: float) -> str:
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"json: unsupported value: {value!r}")
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"
    magnitude = abs(value)
    if 1e-6 <= magnitude < 1e21:
        text = format(Decimal(repr(value)), "f")
        if "." in text:
            text = text.rstrip("0").rstrip(".")
        return text
    return re.sub(r"e-0(\d)$", r"e-\1", repr(value))


def _encode_str(text: str) -> str:
    encoded = json.dumps(text, ensure_ascii=False)
    for char, escaped in _HTML_ESCAPES.items():
        encoded = encoded.replace(char, escaped)
    return encoded


def _encode(obj: Any) -> str:
    if obj is None:
        return "null"
    if isinstance(obj, bool):
        return "true" if obj else "false"
    if isinstance(obj, int):
        return str(obj)
    if isinstance(obj, float):
        return _format_float(obj)
    if isinstance(obj, str):
        return _encode_str(obj)
    if isinstance(obj, dict):
        return "{" + ",".join(f"{_encode_str(k)}:{_encode(v)}" for k, v in obj.items()) + "}"
    if isinstance(obj, (list, tuple)):
        return "[" + ",".join(_encode(item) for item in obj) + "]"
    raise TypeError(f"json: unsupported type: {type(obj).__name__}")


def _dumps(obj: Any) -> bytes:
    return _encode(obj).encode("utf-8")


def _sorted_map(mapping: Mapping[Any, Any], convert=lambda v: v) -> Dict[str, Any]:
    items = sorted((str(k), v) for k, v in mapping.items())
    return {k: convert(v) for k, v in items}


# --- decoding -------------------------------------------------------------


def _loads(payload: Payload) -> Any:
    if isinstance(payload, (bytes, bytearray)):
        payload = bytes(payload).decode("utf-8", errors="replace")
    return json.loads(payload)


def _object(value: Any, what: str) -> Optional[Dict[str, Any]]:
    if value is None:
        return None
    if not isinstance(value, dict):
        raise ValueError(f"json: cannot unmarshal {type(value).__name__} into {what}")
    return value


def _lookup(obj: Dict[str, Any], key: str) -> Any:
    """Field value by key, matched case-insensitively; the last match wins."""
    result = _MISSING
    folded = key.lower()
    for k, v in obj.items():
        if k == key or k.lower() == folded:
            result = v
    return result


def _get_str(obj: Dict[str, Any], key: str, default: str = "") -> str:
    value = _lookup(obj, key)
    if value is _MISSING or value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"json: cannot unmarshal {type(value).__name__} into string field {key}")
    return value


def _get_bool(obj: Dict[str, Any], key: str) -> bool:
    value = _lookup(obj, key)
    if value is _MISSING or value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"json: cannot unmarshal {type(value).__name__} into bool field {key}")
    return value


def _as_int(value: Any, key: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"json: cannot unmarshal {type(value).__name__} into int field {key}")
    return value


def _as_float(value: Any, key: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"json: cannot unmarshal {type(value).__name__} into float field {key}")
    return float(value)


def _get_int(obj: Dict[str, Any], key: str) -> int:
    value = _lookup(obj, key)
    if value is _MISSING or value is None:
        return 0
    return _as_int(value, key)


def _get_float(obj: Dict[str, Any], key: str) -> float:
    value = _lookup(obj, key)
    if value is _MISSING or value is None:
        return 0.0
    return _as_float(value, key)


def _get_map(obj: Dict[str, Any], key: str) -> Optional[Dict[str, Any]]:
    value = _lookup(obj, key)
    if value is _MISSING:
        return None
    return _object(value, f"map field {key}")


def _get_list(obj: Dict[str, Any], key: str) -> Optional[List[Any]]:
    value = _lookup(obj, key)
    if value is _MISSING or value is None:
        return None
    if not isinstance(value, list):
        raise ValueError(f"json: cannot unmarshal {type(value).__name__} into list field {key}")
    return value


# --- structure ------------------------------------------------------------


@dataclass
class StructRegister:
    """Description of one register as published in structure messages."""

    category: str = ""
    name: str = ""
    description: str = ""
    type: str = ""
    enum: Optional[Dict[int, str]] = None
    unit: str = ""
    sort: int = 0
    writable: bool = False

    def _wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {
            "Cat": self.category,
            "Name": self.name,
            "Desc": self.description,
            "Type": self.type,
        }
        if self.enum:
            wire["Enum"] = _sorted_map(self.enum)
        if self.unit:
            wire["Unit"] = self.unit
        wire["Sort"] = self.sort
        wire["Cmnd"] = self.writable
        return wire

    @classmethod
    def _from_wire(cls, value: Any) -> "StructRegister":
        obj = _object(value, "StructRegister")
        if obj is None:
            return cls()
        enum_raw = _get_map(obj, "Enum")
        enum: Optional[Dict[int, str]] = None
        if enum_raw is not None:
            enum = {}
            for key, label in enum_raw.items():
                if not _INT_KEY.fullmatch(key):
                    raise ValueError(f"json: invalid enum key {key!r}")
                if not isinstance(label, str):
                    raise ValueError(f"json: enum label of {key} is not a string")
                enum[int(key)] = label
        return cls(
            category=_get_str(obj, "Cat"),
            name=_get_str(obj, "Name"),
            description=_get_str(obj, "Desc"),
            type=_get_str(obj, "Type"),
            enum=enum,
            unit=_get_str(obj, "Unit"),
            sort=_get_int(obj, "Sort"),
            writable=_get_bool(obj, "Cmnd"),
        )


@dataclass
class StructureMessage:
    """Registers of a device together with the topics its data is sent to.

    The realtime and command topics hold the register name placeholder.
    """

    availability_topics: List[str] = field(default_factory=list)
    telemetry_topic: str = ""
    realtime_topic: str = ""
    command_topic: str = ""
    registers: List[StructRegister] = field(default_factory=list)

    def to_json(self) -> bytes:
        """Wire form of the message."""
        wire: Dict[str, Any] = {}
        if self.availability_topics:
            wire["Avail"] = list(self.availability_topics)
        if self.telemetry_topic:
            wire["Tele"] = self.telemetry_topic
        if self.realtime_topic:
            wire["Real"] = self.realtime_topic
        if self.command_topic:
            wire["Cmnd"] = self.command_topic
        wire["Regs"] = [r._wire() for r in self.registers]
        return _dumps(wire)


def parse_structure(payload: Payload) -> StructureMessage:
    """Decode a structure message; raises ValueError on malformed input."""
    obj = _object(_loads(payload), "StructureMessage")
    if obj is None:
        return StructureMessage()
    avail = _get_list(obj, "Avail") or []
    for topic in avail:
        if not isinstance(topic, str):
            raise ValueError("json: availability topics must be strings")
    return StructureMessage(
        availability_topics=list(avail),
        telemetry_topic=_get_str(obj, "Tele"),
        realtime_topic=_get_str(obj, "Real"),
        command_topic=_get_str(obj, "Cmnd"),
        registers=[StructRegister._from_wire(r) for r in (_get_list(obj, "Regs") or [])],
    )


# --- telemetry ------------------------------------------------------------


@dataclass
class NumericTelemetryValue:
    category: str = ""
    description: str = ""
    value: float = 0.0
    unit: str = ""

    def _wire(self) -> Dict[str, Any]:
        wire: Dict[str, Any] = {"Cat": self.category, "Desc": self.description, "Val": float(self.value)}
        if self.unit:
            wire["Unit"] = self.unit
        return wire

    @classmethod
    def _from_wire(cls, value: Any) -> "NumericTelemetryValue":
        obj = _object(value, "NumericTelemetryValue") or {}
        return cls(_get_str(obj, "Cat"), _get_str(obj, "Desc"), _get_float(obj, "Val"), _get_str(obj, "Unit"))


@dataclass
class TextTelemetryValue:
    category: str = ""
    description: str = ""
    value: str = ""

    def _wire(self) -> Dict[str, Any]:
        return {"Cat": self.category, "Desc": self.description, "Val": self.value}

    @classmethod
    def _from_wire(cls, value: Any) -> "TextTelemetryValue":
        obj = _object(value, "TextTelemetryValue") or {}
        return cls(_get_str(obj, "Cat"), _get_str(obj, "Desc"), _get_str(obj, "Val"))


@dataclass
class EnumTelemetryValue:
    category: str = ""
    description: str = ""
    enum_idx: int = 0
    value: str = ""

    def _wire(self) -> Dict[str, Any]:
        return {"Cat": self.category, "Desc": self.description, "Idx": self.enum_idx, "Val": self.value}

    @classmethod
    def _from_wire(cls, value: Any) -> "EnumTelemetryValue":
        obj = _object(value, "EnumTelemetryValue") or {}
        return cls(_get_str(obj, "Cat"), _get_str(obj, "Desc"), _get_int(obj, "Idx"), _get_str(obj, "Val"))


def _rfc3339(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.astimezone()
    offset = moment.utcoffset() or timedelta(0)
    text = moment.strftime("%Y-%m-%dT%H:%M:%S")
    if offset == timedelta(0):
        return text + "Z"
    total = int(offset.total_seconds()) // 60
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total), 60)
    return f"{text}{sign}{hours:02d}:{minutes:02d}"


@dataclass
class TelemetryMessage:
    """Periodic snapshot of all values of a device."""

    time: str = ""
    next_telemetry: str = ""
    model: str = ""
    numeric_values: Dict[str, NumericTelemetryValue] = field(default_factory=dict)
    text_values: Dict[str, TextTelemetryValue] = field(default_factory=dict)
    enum_values: Dict[str, EnumTelemetryValue] = field(default_factory=dict)

    @classmethod
    def at(
        cls,
        now: datetime,
        interval: timedelta,
        model: str,
        numeric_values: Optional[Dict[str, NumericTelemetryValue]] = None,
        text_values: Optional[Dict[str, TextTelemetryValue]] = None,
        enum_values: Optional[Dict[str, EnumTelemetryValue]] = None,
    ) -> "TelemetryMessage":
        """Message sent at now, announcing the next one after interval."""
        return cls(
            time=_rfc3339(now),
            next_telemetry=_rfc3339(now + interval),
            model=model,
            numeric_values=dict(numeric_values or {}),
            text_values=dict(text_values or {}),
            enum_values=dict(enum_values or {}),
        )

    def to_json(self) -> bytes:
        """Wire form of the message."""
        wire: Dict[str, Any] = {"Time": self.time, "NextTelemetry": self.next_telemetry, "Model": self.model}
        if self.numeric_values:
            wire["NumericValues"] = _sorted_map(self.numeric_values, lambda v: v._wire())
        if self.text_values:
            wire["TextValues"] = _sorted_map(self.text_values, lambda v: v._wire())
        if self.enum_values:
            wire["EnumValues"] = _sorted_map(self.enum_values, lambda v: v._wire())
        return _dumps(wire)


def parse_telemetry(payload: Payload) -> TelemetryMessage:
    """Decode a telemetry message; raises ValueError on malformed input."""
    obj = _object(_loads(payload), "TelemetryMessage")
    if obj is None:
        return TelemetryMessage()
    return TelemetryMessage(
        time=_get_str(obj, "Time"),
        next_telemetry=_get_str(obj, "NextTelemetry"),
        model=_get_str(obj, "Model"),
        numeric_values={
            k: NumericTelemetryValue._from_wire(v) for k, v in (_get_map(obj, "NumericValues") or {}).items()
        },
        text_values={k: TextTelemetryValue._from_wire(v) for k, v in (_get_map(obj, "TextValues") or {}).items()},
        enum_values={k: EnumTelemetryValue._from_wire(v) for k, v in (_get_map(obj, "EnumValues") or {}).items()},
    )


# --- realtime -------------------------------------------------------------


@dataclass
class RealtimeMessage:
    """A single value of one register; at most one of the fields is normally set."""

    numeric_value: Optional[float] = None
    text_value: Optional[str] = None
    enum_idx: Optional[int] = None

    def to_json(self) -> bytes:
        """Wire form of the message."""
        wire: Dict[str, Any] = {}
        if self.numeric_value is not None:
            wire["NumVal"] = float(self.numeric_value)
        if self.text_value is not None:
            wire["TextVal"] = self.text_value
        if self.enum_idx is not None:
            wire["EnumIdx"] = self.enum_idx
        return _dumps(wire)


def parse_realtime(payload: Payload) -> RealtimeMessage:
    """Decode a realtime message; raises ValueError on malformed input."""
    obj = _object(_loads(payload), "RealtimeMessage")
    if obj is None:
        return RealtimeMessage()
    num = _lookup(obj, "NumVal")
    text = _lookup(obj, "TextVal")
    idx = _lookup(obj, "EnumIdx")
    if text is not _MISSING and text is not None and not isinstance(text, str):
        raise ValueError("json: cannot unmarshal into string field TextVal")
    return RealtimeMessage(
        numeric_value=None if num is _MISSING or num is None else _as_float(num, "NumVal"),
        text_value=None if text is _MISSING else text,
        enum_idx=None if idx is _MISSING or idx is None else _as_int(idx, "EnumIdx"),
    )