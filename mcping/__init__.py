"""Query a Minecraft server's status over the Server List Ping protocol."""
import logging

from .errors import (
    AddressResolutionError,
    DeserializationError,
    EncodingError,
    PayloadTooLargeError,
    PingError,
    ProtocolError,
    ServerConnectionError,
    ShortReadError,
    TransportError,
)
from .logger import Logger
from .pycraft2.connector import CONNECT_TIMEOUT, DEFAULT_PORT
from .pycraft2.packet import MAX_PACKET_SIZE
from .server import Server, get_server_json, server_status
from .status import PlayerSample, Players, StatusRecord, Version, parse_status, status_from_data

__version__ = "1.0.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "AddressResolutionError",
    "CONNECT_TIMEOUT",
    "DEFAULT_PORT",
    "DeserializationError",
    "EncodingError",
    "Logger",
    "MAX_PACKET_SIZE",
    "PayloadTooLargeError",
    "PingError",
    "PlayerSample",
    "Players",
    "ProtocolError",
    "Server",
    "ServerConnectionError",
    "ShortReadError",
    "StatusRecord",
    "TransportError",
    "Version",
    "get_server_json",
    "parse_status",
    "server_status",
    "status_from_data",
]
