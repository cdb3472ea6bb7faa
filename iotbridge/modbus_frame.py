"""Modbus RTU framing: address, function code, payload and CRC-16 checksum."""

from __future__ import annotations

from typing import Callable, List

WriteRead = Callable[[bytes, int], bytes]
"""Sends a request and returns exactly the given number of response bytes."""

_CRC_POLYNOMIAL = 0xA001  # reflected form of 0x8005


class ModbusFrameError(Exception):
    """A response frame is malformed or does not answer the request."""


def _build_crc_table() -> List[int]:
    table = []
    for value in range(256):
        crc = value
        for _ in range(8):
            crc = (crc >> 1) ^ _CRC_POLYNOMIAL if crc & 1 else crc >> 1
        table.append(crc)
    return table


_CRC_TABLE = _build_crc_table()


def compute_checksum(data: bytes) -> int:
    """CRC-16/MODBUS of the data."""
    crc = 0xFFFF
    for byte in data:
        crc = (crc >> 8) ^ _CRC_TABLE[(crc ^ byte) & 0xFF]
    return crc


def call_function(
    write_read: WriteRead,
    device_address: int,
    function_code: int,
    payload: bytes,
    response_payload_length: int,
) -> bytes:
    """Send a request frame and return the payload of the verified response.

    Both frames consist of one address byte, one function code byte, the
    payload and a little-endian CRC-16.
    """
    request = bytes([device_address, function_code]) + bytes(payload)
    request += compute_checksum(request).to_bytes(2, "little")

    response_length = 1 + 1 + response_payload_length + 2
    response = bytes(write_read(request, response_length))
    if len(response) != response_length:
        raise ModbusFrameError(
            f"expected a response of {response_length} bytes but got {len(response)}"
        )

    received = int.from_bytes(response[-2:], "little")
    computed = compute_checksum(response[:-2])
    if received != computed:
        raise ModbusFrameError(
            f"checksum mismatch received != computed : {received:x} != {computed:x}"
        )

    if response[0] != device_address:
        raise ModbusFrameError(
            f"device address in response != address in request: "
            f"{response[0]:x} != {device_address:x}"
        )

    if response[1] != function_code:
        raise ModbusFrameError(
            f"function code in response != function code in request: "
            f"{response[1]:x} != {function_code:x}"
        )

    return response[2:-2]