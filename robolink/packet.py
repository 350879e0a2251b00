"""Command and telemetry packets exchanged with the robot."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

HEADER_SIZE = 4
CRC_SIZE = 1
DRIVE_BODY_SIZE = 3
TELEMETRY_BODY_SIZE = 9
MAX_BODY_SIZE = 0xFF - HEADER_SIZE - CRC_SIZE

_HEADER_FORMAT = "<HBB"
_DRIVE_FORMAT = "<BBB"
_TELEMETRY_FORMAT = "<HHHBBB"


class CmdType(IntEnum):
    """Command carried by a packet."""

    DRIVE = 1
    RESPONSE = 2
    SLEEP = 3


def count_bits(data: bytes) -> int:
    """Return the number of set bits in ``data``."""
    return sum(bin(byte).count("1") for byte in bytes(data))


def check_crc(data: bytes) -> bool:
    """Return True if the last byte of ``data`` equals the bit count of the rest."""
    raw = bytes(data)
    if len(raw) < CRC_SIZE:
        raise ValueError("packet is too short to hold a CRC")
    return count_bits(raw[:-CRC_SIZE]) == raw[-1]


def drive_direction_name(direction: int) -> str:
    """Return the human name of a drive direction code."""
    return {1: "forward", 2: "backwards", 3: "right", 4: "left"}.get(direction, "UNKNOWN")


@dataclass
class Header:
    """Packet header: counter, command flags and total length."""

    pkt_count: int = 0
    drive: int = 0
    status: int = 0
    sleep: int = 0
    ack: int = 0
    padding: int = 0
    length: int = 0

    def pack(self) -> bytes:
        flags = (
            (self.drive & 1)
            | (self.status & 1) << 1
            | (self.sleep & 1) << 2
            | (self.ack & 1) << 3
            | (self.padding & 0x0F) << 4
        )
        return struct.pack(_HEADER_FORMAT, self.pkt_count & 0xFFFF, flags, self.length & 0xFF)

    @classmethod
    def unpack(cls, data: bytes) -> Header:
        raw = bytes(data)
        if len(raw) < HEADER_SIZE:
            raise ValueError(f"header needs {HEADER_SIZE} bytes, got {len(raw)}")
        pkt_count, flags, length = struct.unpack(_HEADER_FORMAT, raw[:HEADER_SIZE])
        return cls(
            pkt_count=pkt_count,
            drive=flags & 1,
            status=(flags >> 1) & 1,
            sleep=(flags >> 2) & 1,
            ack=(flags >> 3) & 1,
            padding=(flags >> 4) & 0x0F,
            length=length,
        )


@dataclass
class DriveBody:
    """Body of a drive command."""

    direction: int = 0
    duration: int = 0
    speed: int = 0

    def pack(self) -> bytes:
        return struct.pack(
            _DRIVE_FORMAT, self.direction & 0xFF, self.duration & 0xFF, self.speed & 0xFF
        )

    @classmethod
    def unpack(cls, data: bytes) -> DriveBody:
        raw = bytes(data)
        if len(raw) != DRIVE_BODY_SIZE:
            raise ValueError(f"drive body needs {DRIVE_BODY_SIZE} bytes, got {len(raw)}")
        return cls(*struct.unpack(_DRIVE_FORMAT, raw))


@dataclass
class TelemetryBody:
    """Body of a telemetry report sent by the robot."""

    last_pkt_counter: int = 0
    current_grade: int = 0
    hit_count: int = 0
    last_cmd: int = 0
    last_cmd_value: int = 0
    last_cmd_speed: int = 0

    def pack(self) -> bytes:
        return struct.pack(
            _TELEMETRY_FORMAT,
            self.last_pkt_counter & 0xFFFF,
            self.current_grade & 0xFFFF,
            self.hit_count & 0xFFFF,
            self.last_cmd & 0xFF,
            self.last_cmd_value & 0xFF,
            self.last_cmd_speed & 0xFF,
        )

    @classmethod
    def unpack(cls, data: bytes) -> TelemetryBody:
        raw = bytes(data)
        if len(raw) != TELEMETRY_BODY_SIZE:
            raise ValueError(
                f"telemetry body needs {TELEMETRY_BODY_SIZE} bytes, got {len(raw)}"
            )
        return cls(*struct.unpack(_TELEMETRY_FORMAT, raw))

    def describe(self) -> str:
        return (
            "Telemetry Body:\n"
            f"  LastPktCounter: {self.last_pkt_counter}\n"
            f"  CurrentGrade:   {self.current_grade}\n"
            f"  HitCount:       {self.hit_count}\n"
            f"  LastCmd:        {self.last_cmd}\n"
            f"  LastCmdValue:   {self.last_cmd_value}\n"
            f"  LastCmdSpeed:   {self.last_cmd_speed}\n"
        )


@dataclass(init=False)
class Packet:
    """A robot packet: header, optional body and a bit-count CRC."""

    header: Header
    data: bytes | None
    crc: int
    drive_body: DriveBody = field(default_factory=DriveBody)
    telemetry_body: TelemetryBody = field(default_factory=TelemetryBody)

    def __init__(self, pkt_count: int = 0) -> None:
        self.header = Header(pkt_count=pkt_count & 0xFFFF, ack=1)
        self.data = None
        self.crc = 0
        self.drive_body = DriveBody()
        self.telemetry_body = TelemetryBody()

    @classmethod
    def from_bytes(cls, data: bytes) -> Packet:
        """Parse a raw packet; the CRC is recalculated from the parsed contents."""
        raw = bytes(data)
        packet = cls()
        packet.header = Header.unpack(raw)
        payload = packet.header.length - (HEADER_SIZE + CRC_SIZE)
        body = raw[HEADER_SIZE:HEADER_SIZE + payload] if payload > 0 else b""
        if payload in (DRIVE_BODY_SIZE, TELEMETRY_BODY_SIZE) and len(body) < payload:
            raise ValueError(f"packet declares {payload} body bytes, got {len(body)}")
        if payload == DRIVE_BODY_SIZE:
            packet.data = body
            packet.drive_body = DriveBody.unpack(body)
        elif payload == TELEMETRY_BODY_SIZE:
            packet.data = body
            packet.telemetry_body = TelemetryBody.unpack(body)
        else:
            packet.data = None
        packet.calc_crc()
        return packet

    def set_command(self, command: CmdType) -> None:
        """Raise the header flag for ``command``; other flags are left as they are."""
        command = CmdType(command)
        if command is CmdType.DRIVE:
            self.header.drive = 1
        elif command is CmdType.RESPONSE:
            self.header.status = 1
        else:
            self.header.sleep = 1

    def command(self) -> CmdType:
        if self.header.drive == 1:
            return CmdType.DRIVE
        if self.header.status == 1:
            return CmdType.RESPONSE
        if self.header.sleep == 1:
            return CmdType.SLEEP
        return CmdType.RESPONSE

    def set_body(self, data: bytes) -> None:
        """Attach a body; packets without the drive flag carry none."""
        if self.header.drive == 0:
            self.header.length = HEADER_SIZE + CRC_SIZE
            self.data = None
            return
        body = bytes(data)
        if len(body) > MAX_BODY_SIZE:
            raise ValueError(f"body of {len(body)} bytes exceeds {MAX_BODY_SIZE}")
        self.data = body
        self.header.length = HEADER_SIZE + len(body) + CRC_SIZE

    def _body_bytes(self) -> bytes:
        if self.data is None:
            return b""
        size = max(self.header.length - HEADER_SIZE - CRC_SIZE, 0)
        return self.data[:size]

    def calc_crc(self) -> int:
        """Recompute, store and return the CRC."""
        self.crc = (count_bits(self.header.pack()) + count_bits(self._body_bytes())) & 0xFF
        return self.crc

    def to_bytes(self) -> bytes:
        """Serialise the packet for transmission."""
        crc = self.calc_crc()
        return self.header.pack() + self._body_bytes() + bytes([crc])

    def telemetry_text(self) -> str:
        if self.data is None:
            return "No telemetry data available.\n"
        return self.telemetry_body.describe()

    def header_text(self) -> str:
        h = self.header
        return (
            f"Packet Count:  {h.pkt_count}\n"
            f"Drive Flag:    {h.drive}\n"
            f"Stats Flag:    {h.status}\n"
            f"Sleep Flag:    {h.sleep}\n"
            f"Ack Flag:      {h.ack}\n"
            f"Length:        {h.length}\n"
            "\n"
            f"CRC:           {self.crc}\n"
        )

    def response_message(self, direction: int, duration: int, speed: int, command: str) -> str:
        if self.header.ack != 1:
            return "NACK Packet"
        if command == "drive":
            return (
                f"Driving {drive_direction_name(direction)} for {duration}s "
                f"at {speed}% speed."
            )
        if command == "sleep":
            return "Sleeping Robot."
        return "Bad Command"