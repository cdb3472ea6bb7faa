"""Modbus framing, relay and energy meter protocols, MQTT message formats and supervision helpers."""

__version__ = "3.0.0"