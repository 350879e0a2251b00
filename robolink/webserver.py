"""Web front end that relays browser commands to the robot over UDP."""

from __future__ import annotations

import argparse
import threading
from dataclasses import dataclass, field
from pathlib import Path

from flask import Flask, Response, abort, make_response, request

from robolink.netsocket import ConnectionType, RobotSocket, SocketType
from robolink.packet import CmdType, DriveBody, Packet

DEFAULT_PUBLIC_DIR = "../public"
DEFAULT_PORT = 23500
BUFFER_SIZE = 1024


def command_type(command: str) -> CmdType:
    """Map a browser command name to a packet command."""
    if command == "drive":
        return CmdType.DRIVE
    if command == "sleep":
        return CmdType.SLEEP
    return CmdType.RESPONSE


@dataclass
class _Session:
    sock: RobotSocket | None = None
    counter: int = 0
    lock: threading.Lock = field(default_factory=threading.Lock)

    def replace(self, sock: RobotSocket | None) -> None:
        if self.sock is not None:
            self.sock.close()
        self.sock = sock

    def next_count(self) -> int:
        self.counter += 1
        return self.counter

    def require_socket(self) -> RobotSocket:
        if self.sock is None:
            abort(409, description="Not connected to a robot")
        return self.sock


def _send_file(path: Path) -> Response:
    try:
        return make_response(path.read_text(), 200)
    except OSError:
        return make_response("Not Found", 404)


def _int_arg(name: str) -> int:
    value = request.args.get(name)
    try:
        return int(value)
    except (TypeError, ValueError):
        abort(400, description=f"missing or invalid '{name}'")


def _str_arg(name: str) -> str:
    value = request.args.get(name)
    if value is None:
        abort(400, description=f"missing '{name}'")
    return value


def create_app(public_dir: str | Path = DEFAULT_PUBLIC_DIR) -> Flask:
    """Build the web application serving pages from ``public_dir``."""
    public = Path(public_dir)
    index_page = public / "Pages" / "index.html"
    command_page = public / "Pages" / "Command.html"
    scripts = (public / "Scripts").resolve()

    app = Flask(__name__)
    session = _Session()

    @app.route("/")
    def index() -> Response:
        with session.lock:
            session.replace(None)
            session.counter = 0
        return _send_file(index_page)

    @app.route("/connect", methods=["POST"])
    def connect() -> Response:
        ip = _str_arg("ip")
        port = _int_arg("port")
        try:
            sock = RobotSocket(SocketType.CLIENT, ip, port, ConnectionType.UDP, BUFFER_SIZE)
        except (OSError, ValueError) as exc:
            print(exc)
            return _send_file(index_page)
        with session.lock:
            session.replace(sock)
        return _send_file(command_page)

    @app.route("/telecommand", methods=["POST"])
    def telecommand() -> str:
        direction = _int_arg("direction")
        duration = _int_arg("duration")
        speed = _int_arg("speed")
        command = _str_arg("command")
        with session.lock:
            sock = session.require_socket()
            packet = Packet(session.next_count())
            packet.set_command(command_type(command))
            packet.drive_body = DriveBody(direction, duration, speed)
            packet.set_body(packet.drive_body.pack())
            sock.send_data(packet.to_bytes())
            reply = Packet.from_bytes(sock.get_data())
        if reply.header.ack == 1:
            return reply.response_message(direction, duration, speed, command)
        return "Bad Command Packet"

    @app.route("/telemetry_request", methods=["GET"])
    def telemetry_request() -> str:
        with session.lock:
            sock = session.require_socket()
            packet = Packet(session.next_count())
            packet.set_command(CmdType.RESPONSE)
            packet.set_body(packet.drive_body.pack())
            sock.send_data(packet.to_bytes())
            reply = Packet.from_bytes(sock.get_data())
            if reply.header.ack != 1:
                return "Bad Telemetry Packet"
            telemetry = Packet.from_bytes(sock.get_data())
        return telemetry.telemetry_text()

    @app.route("/Scripts/<string:script_name>")
    def script(script_name: str) -> Response:
        path = (scripts / script_name).resolve()
        if not path.is_relative_to(scripts):
            return make_response("Not Found", 404)
        return _send_file(path)

    return app


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Web control panel for the robot.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--public", default=DEFAULT_PUBLIC_DIR)
    args = parser.parse_args(argv)
    create_app(args.public).run(host=args.host, port=args.port, threaded=True)


if __name__ == "__main__":
    main()