import socket
import threading

import pytest

from robolink.packet import CmdType, DriveBody, Packet, TelemetryBody
from robolink.webserver import command_type, create_app

INDEX = "<html>index page</html>"
COMMAND = "<html>command page</html>"


class FakeRobot:
    def __init__(self, batches):
        self.sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        self.sock.bind(("127.0.0.1", 0))
        self.sock.settimeout(5)
        self.port = self.sock.getsockname()[1]
        self.received = []
        self._batches = batches
        self._thread = threading.Thread(target=self._serve, daemon=True)
        self._thread.start()

    def _serve(self):
        for batch in self._batches:
            try:
                data, addr = self.sock.recvfrom(1024)
            except OSError:
                return
            self.received.append(data)
            for reply in batch:
                self.sock.sendto(reply, addr)

    def stop(self):
        self._thread.join(5)
        self.sock.close()


@pytest.fixture
def robots():
    started = []

    def start(batches):
        robot = FakeRobot(batches)
        started.append(robot)
        return robot

    yield start
    for robot in started:
        robot.stop()


@pytest.fixture
def client(tmp_path):
    (tmp_path / "Pages").mkdir()
    (tmp_path / "Scripts").mkdir()
    (tmp_path / "Pages" / "index.html").write_text(INDEX)
    (tmp_path / "Pages" / "Command.html").write_text(COMMAND)
    (tmp_path / "Scripts" / "app.js").write_text("let x = 1;")
    (tmp_path / "secret.txt").write_text("hidden")
    return create_app(tmp_path).test_client()


def ack_packet(ack=1):
    packet = Packet(0)
    packet.header.ack = ack
    packet.set_body(b"")
    return packet.to_bytes()


def telemetry_packet(body):
    packet = Packet(0)
    packet.set_command(CmdType.RESPONSE)
    packet.header.length = 14
    packet.data = body.pack()
    return packet.to_bytes()


def connect(client, port):
    return client.post("/connect", query_string={"ip": "127.0.0.1", "port": port})


def drive(client, command="drive"):
    return client.post(
        "/telecommand",
        query_string={"direction": 1, "duration": 10, "speed": 80, "command": command},
    )


def test_command_type():
    assert command_type("drive") is CmdType.DRIVE
    assert command_type("sleep") is CmdType.SLEEP
    assert command_type("anything") is CmdType.RESPONSE


def test_index_served(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.get_data(as_text=True) == INDEX


def test_script_served(client):
    assert client.get("/Scripts/app.js").get_data(as_text=True) == "let x = 1;"


def test_missing_script_is_not_found(client):
    response = client.get("/Scripts/missing.js")
    assert response.status_code == 404
    assert response.get_data(as_text=True) == "Not Found"


def test_script_outside_directory_is_not_found(client):
    response = client.get("/Scripts/..%2Fsecret.txt")
    assert response.status_code == 404


def test_connect_serves_command_page(client, robots):
    robot = robots([])
    response = connect(client, robot.port)
    assert response.get_data(as_text=True) == COMMAND


def test_connect_with_bad_ip_serves_index(client):
    response = client.post("/connect", query_string={"ip": "not-an-ip", "port": 1})
    assert response.get_data(as_text=True) == INDEX


def test_connect_requires_port(client):
    response = client.post("/connect", query_string={"ip": "127.0.0.1"})
    assert response.status_code == 400


def test_telecommand_without_connection(client):
    assert drive(client).status_code == 409


def test_telecommand_drive_acknowledged(client, robots):
    robot = robots([[ack_packet()]])
    connect(client, robot.port)
    response = drive(client)
    assert response.get_data(as_text=True) == "Driving forward for 10s at 80% speed."
    robot.stop()
    sent = Packet.from_bytes(robot.received[0])
    assert sent.header.pkt_count == 1
    assert sent.command() is CmdType.DRIVE
    assert sent.drive_body == DriveBody(1, 10, 80)


def test_telecommand_sleep(client, robots):
    robot = robots([[ack_packet()]])
    connect(client, robot.port)
    assert drive(client, "sleep").get_data(as_text=True) == "Sleeping Robot."
    robot.stop()
    assert Packet.from_bytes(robot.received[0]).command() is CmdType.SLEEP


def test_telecommand_nack(client, robots):
    robot = robots([[ack_packet(ack=0)]])
    connect(client, robot.port)
    assert drive(client).get_data(as_text=True) == "Bad Command Packet"


def test_counter_increments_and_resets(client, robots):
    first = robots([[ack_packet()], [ack_packet()]])
    connect(client, first.port)
    drive(client)
    drive(client)
    first.stop()
    counts = [Packet.from_bytes(raw).header.pkt_count for raw in first.received]
    assert counts == [1, 2]

    client.get("/")
    second = robots([[ack_packet()]])
    connect(client, second.port)
    drive(client)
    second.stop()
    assert Packet.from_bytes(second.received[0]).header.pkt_count == 1


def test_telemetry_request(client, robots):
    body = TelemetryBody(5, 80, 2, 1, 10, 75)
    robot = robots([[ack_packet(), telemetry_packet(body)]])
    connect(client, robot.port)
    response = client.get("/telemetry_request")
    assert response.get_data(as_text=True) == body.describe()
    robot.stop()
    sent = Packet.from_bytes(robot.received[0])
    assert sent.command() is CmdType.RESPONSE
    assert sent.header.length == 5


def test_telemetry_request_nack(client, robots):
    robot = robots([[ack_packet(ack=0)]])
    connect(client, robot.port)
    response = client.get("/telemetry_request")
    assert response.get_data(as_text=True) == "Bad Telemetry Packet"