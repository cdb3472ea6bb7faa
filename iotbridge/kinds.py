"""Kinds of devices that can be configured."""

from __future__ import annotations

from enum import IntEnum


class HttpDeviceKind(IntEnum):
    UNDEFINED = 0
    TERACOM = 1
    SHELLY_EM3 = 2

    def __str__(self) -> str:
        return _HTTP_LABELS.get(self, "Undefined")

    @classmethod
    def from_string(cls, s: str) -> "HttpDeviceKind":
        """Parse a configured kind name; unknown names give UNDEFINED."""
        return _HTTP_NAMES.get(s, cls.UNDEFINED)


class ModbusDeviceKind(IntEnum):
    UNDEFINED = 0
    WAVESHARE_RTU_RELAY8 = 1
    FINDER_7M38 = 2

    def __str__(self) -> str:
        return _MODBUS_LABELS.get(self, "Undefined")

    @classmethod
    def from_string(cls, s: str) -> "ModbusDeviceKind":
        """Parse a configured kind name; unknown names give UNDEFINED."""
        return _MODBUS_NAMES.get(s, cls.UNDEFINED)


class MqttDeviceKind(IntEnum):
    UNDEFINED = 0
    GO_IOTDEVICE_V3 = 1

    def __str__(self) -> str:
        return _MQTT_LABELS.get(self, "Undefined")

    @classmethod
    def from_string(cls, s: str) -> "MqttDeviceKind":
        """Parse a configured kind name; unknown names give UNDEFINED."""
        return _MQTT_NAMES.get(s, cls.UNDEFINED)


class VictronDeviceKind(IntEnum):
    UNDEFINED = 0
    RANDOM_BMV = 1
    RANDOM_SOLAR = 2
    VEDIRECT = 3

    def __str__(self) -> str:
        return _VICTRON_LABELS.get(self, "Undefined")

    @classmethod
    def from_string(cls, s: str) -> "VictronDeviceKind":
        """Parse a configured kind name; unknown names give UNDEFINED."""
        return _VICTRON_NAMES.get(s, cls.UNDEFINED)


_HTTP_LABELS = {
    HttpDeviceKind.TERACOM: "Teracom",
    HttpDeviceKind.SHELLY_EM3: "Shelly3m",
}
_HTTP_NAMES = {
    "Teracom": HttpDeviceKind.TERACOM,
    "ShellyEm3": HttpDeviceKind.SHELLY_EM3,
}

_MODBUS_LABELS = {
    ModbusDeviceKind.WAVESHARE_RTU_RELAY8: "WaveshareRtuRelay8",
    ModbusDeviceKind.FINDER_7M38: "Finder7M38",
}
_MODBUS_NAMES = {label: kind for kind, label in _MODBUS_LABELS.items()}

_MQTT_LABELS = {
    MqttDeviceKind.GO_IOTDEVICE_V3: "GoIotdeviceV3",
}
_MQTT_NAMES = {label: kind for kind, label in _MQTT_LABELS.items()}

_VICTRON_LABELS = {
    VictronDeviceKind.RANDOM_BMV: "RandomBmv",
    VictronDeviceKind.RANDOM_SOLAR: "RandomSolar",
    VictronDeviceKind.VEDIRECT: "Vedirect",
}
_VICTRON_NAMES = {label: kind for kind, label in _VICTRON_LABELS.items()}