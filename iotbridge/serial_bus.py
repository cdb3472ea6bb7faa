"""Serial line shared by Modbus devices."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Any

import serial

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SerialBusConfig:
    """Settings of a serial bus; read_timeout is in seconds."""

    name: str
    device: str
    baud_rate: int = 9600
    read_timeout: float = 0.1
    log_debug: bool = False


class SerialBus:
    """A serial port on which one request/response exchange runs at a time."""

    def __init__(self, config: SerialBusConfig, port: Any) -> None:
        self.config = config
        self._port = port
        self._lock = threading.Lock()

    @classmethod
    def open(cls, config: SerialBusConfig) -> "SerialBus":
        """Open the configured serial device."""
        if config.log_debug:
            log.debug("modbus[%s]: create device=%s", config.name, config.device)
        try:
            port = serial.Serial(
                port=config.device,
                baudrate=config.baud_rate,
                timeout=config.read_timeout,
            )
        except (serial.SerialException, OSError, ValueError) as exc:
            raise OSError(f"cannot open device: {config.device}") from exc
        if config.log_debug:
            log.debug("modbus[%s]: Open succeeded", config.name)
        return cls(config, port)

    @property
    def name(self) -> str:
        return self.config.name

    def write_read(self, request: bytes, response_length: int) -> bytes:
        """Discard pending input, send the request and read the whole response."""
        with self._lock:
            self._flush()
            self._write(request)
            return self._read_exact(response_length)

    def shutdown(self) -> None:
        """Close the serial port."""
        try:
            self._port.close()
        except (serial.SerialException, OSError) as exc:
            self._debug("Shutdown err=%s", exc)
        else:
            self._debug("Shutdown successful")

    def __enter__(self) -> "SerialBus":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def _flush(self) -> None:
        try:
            self._port.reset_input_buffer()
        except (serial.SerialException, OSError) as exc:
            self._debug("Flush err=%s", exc)
        else:
            self._debug("Flush err=None")

    def _write(self, data: bytes) -> None:
        self._debug("Write b=%s len=%d", data.hex(), len(data))
        try:
            self._port.write(data)
        except (serial.SerialException, OSError) as exc:
            log.warning("Write error: %s", exc)
            raise

    def _read_exact(self, length: int) -> bytes:
        buffer = bytearray()
        while len(buffer) < length:
            try:
                chunk = self._port.read(length - len(buffer))
            except (serial.SerialException, OSError) as exc:
                self._debug("Read error: %s", exc)
                raise
            if not chunk:
                self._debug("Read timeout after %d of %d bytes", len(buffer), length)
                raise TimeoutError(f"read timeout: expected {length} bytes but got {len(buffer)}")
            self._debug("Read b=%s len=%d", bytes(chunk).hex(), len(chunk))
            buffer += chunk
        return bytes(buffer)

    def _debug(self, fmt: str, *args: object) -> None:
        if self.config.log_debug:
            log.debug("modbus[%s]: " + fmt, self.config.name, *args)