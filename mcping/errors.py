"""Exceptions raised while pinging a server.

Everything derives from ``PingError``; each class also derives from the
builtin a caller would naturally catch (``ConnectionError``, ``OSError``,
``ValueError`` ...).
"""


class PingError(Exception):
    """Base class for every error raised by mcping"""


class AddressResolutionError(PingError):
    """The host could not be resolved to an address"""


class ServerConnectionError(PingError, ConnectionError):
    """The TCP connection was refused, unreachable or timed out"""


class TransportError(PingError, OSError):
    """Writing to or reading from the socket failed"""


class ShortReadError(TransportError, EOFError):
    """The peer closed the stream before the expected bytes arrived"""


class ProtocolError(PingError, ValueError):
    """The response does not follow the wire format"""


class PayloadTooLargeError(ProtocolError):
    """The declared JSON length is over MAX_PACKET_SIZE"""


class EncodingError(PingError, UnicodeError):
    """The JSON payload is not valid UTF-8"""


class DeserializationError(PingError, ValueError):
    """The payload is not JSON or lacks a required field"""
