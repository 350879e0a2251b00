# robolink

Tools for commanding a robot over a small binary telecommand protocol.

The package has four modules:

- `robolink.packet`: the wire format. A `Packet` holds a 4-byte `Header`
  (16-bit packet count, Drive/Status/Sleep/Ack flag bits, one-byte total
  length), an optional body and a one-byte CRC equal to the number of set
  bits in the header and body. Bodies are a 3-byte `DriveBody` (direction,
  duration, speed) or a 9-byte `TelemetryBody` sent back by the robot.
- `robolink.netsocket`: `RobotSocket`, a client or server socket over UDP or
  TCP with a fixed receive size. It can be used as a context manager.
- `robolink.webserver`: a Flask application that connects to a robot over
  UDP and forwards drive, sleep and telemetry requests from a browser.
- `robolink.console`: a console client that sends test commands to a robot.

## Installation

```
pip install .
```

## Building and reading packets

```python
from robolink.packet import CmdType, DriveBody, Packet, check_crc

pkt = Packet(1)                     # packet count 1, Ack flag set
pkt.set_command(CmdType.DRIVE)
pkt.set_body(DriveBody(direction=1, duration=10, speed=80).pack())
raw = pkt.to_bytes()                # header + body + CRC
assert check_crc(raw)

reply = Packet.from_bytes(raw)
print(reply.header_text())
print(reply.command())              # CmdType.DRIVE
```

Notes on the packet API:

- `set_command()` raises the flag for the given `CmdType` and leaves the
  other flags alone; `command()` reads them back, with Drive taking
  precedence over Status, then Sleep, and `RESPONSE` when none is set.
- `set_body()` only attaches a body when the Drive flag is set; otherwise
  the packet carries no body and its length is header plus CRC (5 bytes).
  Bodies longer than 250 bytes raise `ValueError`.
- `Packet.from_bytes()` keeps a body only when it is 3 or 9 bytes long,
  fills `drive_body` or `telemetry_body` from it, and recalculates the CRC
  from the parsed contents rather than keeping the received one. Use
  `check_crc()` to validate the received bytes.
- `telemetry_text()` renders a telemetry body as text, or reports that no
  telemetry data is available.
- `response_message(direction, duration, speed, command)` builds the text
  shown for an acknowledged command, e.g.
  `Driving forward for 10s at 80% speed.`; `drive_direction_name()` maps
  direction codes 1–4 to `forward`, `backwards`, `right`, `left`.
- `count_bits()` is the bit counter behind the CRC.

## Sockets

```python
from robolink.netsocket import ConnectionType, RobotSocket, SocketType

with RobotSocket(SocketType.CLIENT, "127.0.0.1", 27000, ConnectionType.UDP, 1024) as sock:
    sock.send_data(raw)
    reply = sock.get_data()
```

A UDP server socket is bound on creation; a TCP server socket listens and
`connect_tcp()` accepts one client, while a TCP client's `connect_tcp()`
connects to the server. `disconnect_tcp()` closes an open TCP connection.
The `ip`, `port` and `socket_type` properties can be changed only while not
connected; otherwise, and for operations that do not fit the current state
(such as sending on an unconnected TCP socket), `SocketStateError` is
raised. Invalid IPv4 addresses and out-of-range ports raise `ValueError`.

## Web front end

```
robolink-web [--host 0.0.0.0] [--port 23500] [--public ../public]
```

It serves pages from the `--public` directory (`Pages/index.html`,
`Pages/Command.html` and `Scripts/<name>`); a missing file gives a 404
"Not Found". The routes are:

- `/`: the connect page; also drops the robot connection and resets the
  packet counter.
- `POST /connect?ip=...&port=...`: opens a UDP socket to the robot and
  returns the command page, or the connect page again if the address is
  invalid.
- `POST /telecommand?direction=..&duration=..&speed=..&command=drive|sleep`:
  sends the command and returns the response message, or
  `Bad Command Packet` if the robot does not acknowledge it.
- `GET /telemetry_request`: asks the robot for telemetry and returns it as
  text, or `Bad Telemetry Packet`.
- `/Scripts/<name>`: static scripts.

Missing or non-numeric query parameters give 400; commands sent before
`/connect` give 409. An application can also be built in code with
`robolink.webserver.create_app(public_dir)`, and
`robolink.webserver.command_type()` maps `drive`/`sleep` to their
`CmdType` (anything else to `RESPONSE`).

## Console client

```
robolink-console [--host 127.0.0.1] [--port 27000]
```

It prompts for a command on standard input (1 drive, 2 sleep, 3 response),
sends it over UDP with a fixed test drive body (direction 1, 10 seconds,
80% speed) and prints the acknowledged reply. Any other input, or the end
of input, ends the session with exit status 1; an acknowledged sleep ends
it with status 0. `robolink.console.run(sock_factory, commands, out)` runs
the same loop against any socket factory, command sequence and output
stream.

## What is not included

The package does not ship the HTML pages or scripts the web front end
serves; supply them in the directory given with `--public`. It does not
include a robot or robot simulator: both the web front end and the console
client need a robot listening on the given address.

## Running the tests

```
pip install .[test]
pytest
```