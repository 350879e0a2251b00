"""Client and server sockets used to talk to the robot over TCP or UDP."""

from __future__ import annotations

import ipaddress
import socket
from enum import Enum

DEFAULT_SIZE = 1024


class SocketType(Enum):
    """Role of a socket."""

    CLIENT = "client"
    SERVER = "server"


class ConnectionType(Enum):
    """Transport used by a socket."""

    TCP = "tcp"
    UDP = "udp"


class SocketStateError(RuntimeError):
    """Raised when an operation does not fit the socket's current state."""


def _check_ip(ip: str) -> str:
    return str(ipaddress.IPv4Address(ip))


def _check_port(port: int) -> int:
    port = int(port)
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port {port} is out of range")
    return port


class RobotSocket:
    """A TCP or UDP endpoint with a fixed receive size."""

    def __init__(
        self,
        socket_type: SocketType,
        ip: str,
        port: int,
        connection_type: ConnectionType,
        buffer_size: int = DEFAULT_SIZE,
    ) -> None:
        self._type = SocketType(socket_type)
        self._connection_type = ConnectionType(connection_type)
        self._ip = _check_ip(ip)
        self._port = _check_port(port)
        self._address = (self._ip, self._port)
        self.max_size = buffer_size if buffer_size > 0 else DEFAULT_SIZE
        self._connected = False
        self._welcome: socket.socket | None = None
        self._conn: socket.socket | None = None

        tcp = self._connection_type is ConnectionType.TCP
        if self._type is SocketType.SERVER and tcp:
            welcome = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            try:
                welcome.bind(self._address)
                welcome.listen(1)
            except OSError:
                welcome.close()
                raise
            self._welcome = welcome
            return

        kind = socket.SOCK_STREAM if tcp else socket.SOCK_DGRAM
        conn = socket.socket(socket.AF_INET, kind)
        if self._type is SocketType.SERVER:
            try:
                conn.bind(self._address)
            except OSError:
                conn.close()
                raise
        self._conn = conn

    @property
    def connection_type(self) -> ConnectionType:
        return self._connection_type

    @property
    def connected(self) -> bool:
        """True while a TCP connection is open."""
        return self._connected

    @property
    def local_address(self) -> tuple[str, int]:
        """Address the underlying socket is bound to."""
        sock = self._welcome if self._welcome is not None else self._conn
        if sock is None:
            raise SocketStateError("socket has no local endpoint")
        return sock.getsockname()

    @property
    def ip(self) -> str:
        return self._ip

    @ip.setter
    def ip(self, value: str) -> None:
        if self._connected:
            raise SocketStateError("cannot change the IP address while connected")
        self._ip = _check_ip(value)
        self._address = (self._ip, self._address[1])

    @property
    def port(self) -> int:
        return self._port

    @port.setter
    def port(self, value: int) -> None:
        if self._connected:
            raise SocketStateError("cannot change the port while connected")
        self._port = _check_port(value)
        self._address = (self._address[0], self._port)

    @property
    def socket_type(self) -> SocketType:
        return self._type

    @socket_type.setter
    def socket_type(self, value: SocketType) -> None:
        listening = (
            self._type is SocketType.SERVER
            and self._connection_type is ConnectionType.TCP
            and self._welcome is not None
        )
        if self._connected or listening:
            raise SocketStateError("cannot change the socket type while connected")
        self._type = SocketType(value)

    def connect_tcp(self) -> None:
        """Connect to the server, or accept one client when acting as server."""
        if self._connection_type is not ConnectionType.TCP:
            raise SocketStateError("cannot make a TCP connection on a UDP socket")
        if self._connected:
            raise SocketStateError("already connected")
        if self._type is SocketType.CLIENT:
            if self._conn is None:
                self._conn = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            self._conn.connect(self._address)
        else:
            if self._welcome is None:
                raise SocketStateError("server socket is not listening")
            self._conn, _ = self._welcome.accept()
        self._connected = True

    def disconnect_tcp(self) -> None:
        """Close an open TCP connection; does nothing otherwise."""
        if self._connection_type is not ConnectionType.TCP or not self._connected:
            return
        if self._conn is not None:
            self._conn.close()
        self._conn = None
        self._connected = False

    def _require_conn(self) -> socket.socket:
        if self._connection_type is ConnectionType.TCP and not self._connected:
            raise SocketStateError("TCP socket is not connected")
        if self._conn is None:
            raise SocketStateError("socket is closed")
        return self._conn

    def send_data(self, data: bytes) -> None:
        conn = self._require_conn()
        if self._connection_type is ConnectionType.TCP:
            conn.sendall(bytes(data))
        else:
            conn.sendto(bytes(data), self._address)

    def get_data(self) -> bytes:
        """Receive at most ``max_size`` bytes; UDP replies go back to the last sender."""
        conn = self._require_conn()
        if self._connection_type is ConnectionType.TCP:
            return conn.recv(self.max_size)
        data, sender = conn.recvfrom(self.max_size)
        self._address = sender
        return data

    def close(self) -> None:
        for sock in (self._conn, self._welcome):
            if sock is not None:
                sock.close()
        self._connected = False

    def __enter__(self) -> RobotSocket:
        return self

    def __exit__(self, *args) -> None:
        self.close()