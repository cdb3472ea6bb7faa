# iotbridge

A library of building blocks for bridging field devices (Modbus relays and
energy meters) to MQTT and HTTP clients.

## Modules

- `iotbridge.modbus_frame`: Modbus RTU framing. `call_function(write_read,
  device_address, function_code, payload, response_payload_length)` builds a
  request with a CRC-16/MODBUS checksum, sends it through a `write_read`
  callable (`write_read(request, response_length) -> bytes`) and checks the
  length, checksum, address and function code of the reply, raising
  `ModbusFrameError` on a mismatch. `compute_checksum(data)` is exposed too.
- `iotbridge.serial_bus`: `SerialBus.open(SerialBusConfig(...))` opens a
  serial port with pyserial. `SerialBus.write_read(request, response_length)`
  discards pending input, sends the request and reads exactly the requested
  number of bytes under a lock, raising `TimeoutError` when the line goes
  quiet. `shutdown()` closes the port; the bus is also a context manager.
- `iotbridge.waveshare`: Waveshare Modbus RTU Relay (8 channels):
  `read_relays`, `write_relay`, `read_software_revision`, `RelayCommand`,
  plus `relay_register_names()` (`CH1` … `CH8`) and `relay_address(name)`
  (`CH1` is relay 0).
- `iotbridge.finder_register` and `iotbridge.finder7m38`: Finder 7M.38
  energy meter. `register_list_7m38()` returns all `FinderRegister`s;
  `read_register(write_read, device_address, register)` returns a `float`
  for numbers, the enum index for enums and a `str` for text, retrying a
  read up to eight times. `poll_registers(registers, reduced_set)` skips the
  static "Device Info" and "Energy Counter" registers when `reduced_set` is
  true.
- `iotbridge.messages`: structure, telemetry and realtime MQTT messages
  (`StructureMessage`, `StructRegister`, `TelemetryMessage` with its value
  classes, `RealtimeMessage`), each with `to_json()` and a matching
  `parse_structure` / `parse_telemetry` / `parse_realtime`.
- `iotbridge.commands`: `CommandMessage` and `parse_command`, plus
  `writable_register_names`, `fill_register_topic` and `all_available`.
- `iotbridge.topic_matcher`: `create_matcher_single_variable(template,
  placeholder)` returns a `TopicMatcher` whose `parse_topic(topic)` extracts
  the placeholder's value; both raise `TopicMatcherError`.
- `iotbridge.restarter`: `Restarter(RestarterConfig(...), service)` runs a
  service in a thread and restarts it with exponential back-off whenever it
  raises; a `ServiceError(..., immediate=True)` counts as a failure at start.
- `iotbridge.pool`: `Pool` of named items with `add`, `remove`, `get_all`,
  `get_by_name`, `get_by_names` and `shutdown`.
- `iotbridge.fifo`: bounded thread-safe `Fifo` that drops the oldest item
  when full.
- `iotbridge.auth`: `create_token`, `check_token` (raises
  `InvalidTokenError`) and `is_view_authenticated_by_user`.
- `iotbridge.http_cache`: `json_get_response(obj, if_none_match)` returns a
  `JsonResponse` with a weak ETag, or status 304 when the client's ETag
  matches; `cache_control_public`, `compute_etag`, `is_not_modified` and
  `error_body`.
- `iotbridge.kinds`: device kind enums (`HttpDeviceKind`,
  `ModbusDeviceKind`, `MqttDeviceKind`, `VictronDeviceKind`) with
  `from_string`.
- `iotbridge.naming`: `camel_to_snake_case`.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Example: reading relays

```python
from iotbridge.serial_bus import SerialBus, SerialBusConfig
from iotbridge.waveshare import RelayCommand, read_relays, write_relay

with SerialBus.open(SerialBusConfig(name="bus0", device="/dev/ttyUSB0", baud_rate=9600)) as bus:
    state = read_relays(bus.write_read, 1)       # tuple of 8 bools, True = closed
    write_relay(bus.write_read, 1, 0, RelayCommand.CLOSE)
```

## Example: reading an energy meter

```python
from iotbridge.finder7m38 import poll_registers, read_register, register_list_7m38

registers = register_list_7m38()
for register in poll_registers(registers, reduced_set=True):
    print(register.name, read_register(bus.write_read, 33, register))
```

## Example: messages and topics

```python
from iotbridge.commands import CommandMessage, fill_register_topic, parse_command
from iotbridge.topic_matcher import create_matcher_single_variable

CommandMessage(enum_idx=1).to_json()             # b'{"EnumIdx":1}'
parse_command(b'{"NumVal":2.5}').numeric_value   # 2.5
fill_register_topic("prefix/cmnd/dev/%RegisterName%", "CH1")

matcher = create_matcher_single_variable("prefix/real/control0/%RegisterName%", "%RegisterName%")
matcher.parse_topic("prefix/real/control0/my-reg")  # "my-reg"
```

## What this package does not do

It is a library only. It has no command-line program or daemon, does not
read configuration files, does not connect to an MQTT broker and runs no
HTTP server; the message, token and response helpers produce and check the
data that such components would exchange. Of the device kinds in
`iotbridge.kinds`, only the Waveshare relay and the Finder 7M.38 meter have
protocol support here.