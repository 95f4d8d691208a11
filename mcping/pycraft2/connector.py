import logging
import socket
import time

from ..errors import (
    AddressResolutionError,
    ServerConnectionError,
    ShortReadError,
    TransportError,
)
from . import Handshake, Status
from .packet import States

CONNECT_TIMEOUT = 5
DEFAULT_PORT = 25565


def build_status_request(hostname: str, port: int) -> bytes:
    """Build the handshake frame followed by the status request frame.

    Args:
        hostname (str): The address the client believes it is connecting to
        port (int): The port, sent as an unsigned short

    Returns:
        bytes: Both frames, ready to be written in one go
    """
    handshake = Handshake.C2S_0x00(
        protocol_version=0,
        server_address=hostname,
        server_port=port,
        next_state=States.STATUS,
    )
    request = Status.C2S_0x00()
    return handshake.toBytes() + request.toBytes()


def split_address(host: str, port: int = None) -> tuple[str, int]:
    """Split ``host:port`` when no explicit port is given.

    Raises:
        AddressResolutionError: The port is not a number in 0..65535
    """
    if port is None:
        if host.startswith("["):  # [::1]:25565
            host, _, rest = host[1:].partition("]")
            port = rest[1:] if rest.startswith(":") else DEFAULT_PORT
        elif host.count(":") == 1:
            host, _, port = host.partition(":")
        else:
            port = DEFAULT_PORT

    try:
        number = int(port)
    except ValueError as err:
        raise AddressResolutionError(f"Invalid port {port!r}") from err

    if not 0 <= number <= 2**16 - 1:
        raise AddressResolutionError(f"Port {number} is out of range")
    return host, number


def resolve(host: str, port: int):
    """Resolve ``host:port`` to the first TCP endpoint.

    Returns:
        tuple: ``(family, sockaddr)`` ready for ``socket.connect``
    """
    try:
        candidates = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM)
    except (OSError, UnicodeError) as err:
        raise AddressResolutionError(f"Failed to resolve {host}:{port}: {err}") from err

    if not candidates:
        raise AddressResolutionError(f"Failed to resolve {host}:{port}: no addresses")

    family, _, _, _, sockaddr = candidates[0]
    return family, sockaddr


class MCSocket:
    """
    Blocking connection to a Minecraft server, used for a single status ping.

    The connect timeout only guards the connect itself; reads block unless
    ``read_timeout`` is given.

    Example:

    ```python
    from mcping.pycraft2.connector import MCSocket

    with MCSocket("localhost", 25565) as mc:
        print(mc.status_request())
    ```
    """

    def __init__(
        self,
        host: str,
        port: int = None,
        timeout: float = CONNECT_TIMEOUT,
        read_timeout: float = None,
        socket_factory=socket.socket,
        logger=logging.getLogger("mcping.connector"),
    ):
        """
        Connect to a Minecraft server.
        """
        self.addr = split_address(host, port)
        self.timeout = timeout
        self.logger = logger

        family, sockaddr = resolve(*self.addr)

        self.socket = socket_factory(family, socket.SOCK_STREAM)
        self.socket.settimeout(timeout)
        try:
            self.socket.connect(sockaddr)
        except OSError as err:
            self.socket.close()
            raise ServerConnectionError(
                f"Failed to connect to {self.addr[0]}:{self.addr[1]}: {err}"
            ) from err
        self.socket.settimeout(read_timeout)

        self.logger.debug(f"Connected to {sockaddr}")

    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()

    def send(self, data: bytes) -> None:
        try:
            self.socket.sendall(data)
        except OSError as err:
            raise TransportError(f"Failed to send {len(data)} bytes: {err}") from err

    def read(self, n: int) -> bytes:
        """Read exactly ``n`` bytes."""
        result = bytearray()
        while len(result) < n:
            try:
                new = self.socket.recv(n - len(result))
            except OSError as err:
                raise TransportError(f"Failed to read from socket: {err}") from err

            if not new:
                raise ShortReadError(
                    f"Connection closed with {n - len(result)} bytes remaining"
                )
            result += new
        return bytes(result)

    def close(self):
        self.socket.close()

    def status_request(self) -> str:
        """
        Send the handshake and status request, then read the response

        Returns:
            str: The JSON text sent by the server
        """
        tStart = time.perf_counter()

        self.send(build_status_request(*self.addr))
        json_data = Status.read_status_json(self)

        tEnd = time.perf_counter()
        self.logger.debug(
            f"Received status response ({len(json_data)} chars) in {tEnd - tStart:.2f} seconds"
        )

        return json_data
