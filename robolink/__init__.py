"""Robot telecommand packets, UDP/TCP sockets, a Flask web front end and a console client."""

__version__ = "0.1.0"
__all__ = ["packet", "netsocket", "webserver", "console"]