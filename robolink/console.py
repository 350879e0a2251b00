"""Interactive console that sends test commands to the robot."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Callable, Iterable, Iterator
from typing import TextIO

from robolink.netsocket import ConnectionType, RobotSocket, SocketType
from robolink.packet import CmdType, DriveBody, Packet

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 27000
BUFFER_SIZE = 1024
PROMPT = "Command (1 Drive, 2 Sleep, 3 Response"

_COMMANDS = {1: CmdType.DRIVE, 2: CmdType.SLEEP, 3: CmdType.RESPONSE}
_TEST_DRIVE = DriveBody(direction=1, duration=10, speed=80)


def direction_label(direction: int) -> str:
    """Return the console label of a drive direction code."""
    return {1: "FOWARD", 2: "BACKWARD", 3: "RIGHT", 4: "LEFT"}.get(direction, "UNKNOWN")


def drive_summary(packet: Packet) -> str:
    """Describe the drive body carried by ``packet``."""
    if packet.data is None or len(packet.data) < 3:
        raise ValueError("packet carries no drive body")
    direction, duration, speed = packet.data[:3]
    return (
        f"Driving {direction_label(direction)} for {duration} seconds "
        f"at {speed}% speed"
    )


def _parse_command(token: object) -> CmdType | None:
    try:
        return _COMMANDS.get(int(str(token).strip()))
    except ValueError:
        return None


def run(
    sock_factory: Callable[[], RobotSocket],
    commands: Iterable[object],
    out: TextIO,
) -> int:
    """Send one packet per command until an unknown command or a sleep is acknowledged.

    Returns 0 once the robot acknowledges a sleep command and 1 otherwise.
    """
    packet_count = 1
    tokens = iter(commands)
    while True:
        print(PROMPT, file=out)
        command = _parse_command(next(tokens, ""))
        if command is None:
            return 1

        with sock_factory() as sock:
            packet = Packet(packet_count)
            packet.set_command(command)
            packet.drive_body = DriveBody(
                _TEST_DRIVE.direction, _TEST_DRIVE.duration, _TEST_DRIVE.speed
            )
            packet.set_body(packet.drive_body.pack())
            sock.send_data(packet.to_bytes())

            reply = Packet.from_bytes(sock.get_data())
            if reply.header.ack != 1:
                continue

            packet_count += 1
            print("Good Reponse", file=out)
            if reply.header.drive == 1:
                print(drive_summary(packet), file=out)
                out.write(reply.header_text())
            elif reply.header.sleep == 1:
                out.write(reply.header_text())
                return 0
            elif reply.header.status == 1:
                telemetry = Packet.from_bytes(sock.get_data())
                out.write(telemetry.telemetry_text())
                packet_count += 1


def _stdin_tokens(stream: TextIO) -> Iterator[str]:
    for line in stream:
        yield from line.split()


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Send test commands to the robot.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args(argv)

    def factory() -> RobotSocket:
        return RobotSocket(
            SocketType.CLIENT, args.host, args.port, ConnectionType.UDP, BUFFER_SIZE
        )

    return run(factory, _stdin_tokens(sys.stdin), sys.stdout)


if __name__ == "__main__":
    raise SystemExit(main())