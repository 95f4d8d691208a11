"""Class for querying a server's status."""
import socket

from .logger import Logger
from .pycraft2.connector import CONNECT_TIMEOUT, DEFAULT_PORT, MCSocket
from .status import StatusRecord, dump_json, load_json, status_from_data


class Server:
    """Class for server connection and communication."""

    def __init__(
            self,
            logger: "Logger" = None,
            timeout: float = CONNECT_TIMEOUT,
            read_timeout: float = None,
            socket_factory=socket.socket,
    ):
        """Initializes the Server class

        Args:
            logger (Logger, optional): The logger to use. Default to a quiet
            Logger on the "mcping" namespace
            timeout (float, optional): Connect timeout in seconds.
            Default to 5.
            read_timeout (float, optional): Timeout for each read, None
            blocks until the server answers. Default to None.
            socket_factory (callable, optional): Builds the socket, called
            like ``socket.socket(family, type)``.
        """
        self.logger = logger if logger is not None else Logger()
        self.timeout = timeout
        self.read_timeout = read_timeout
        self.socket_factory = socket_factory

    def _connect(self, host: str, port: int) -> MCSocket:
        return MCSocket(
            host,
            port,
            timeout=self.timeout,
            read_timeout=self.read_timeout,
            socket_factory=self.socket_factory,
            logger=self.logger,
        )

    def _status_data(self, host: str, port: int):
        with self._connect(host, port) as connection:
            text = connection.status_request()
        return load_json(text)

    def status_json(self, host: str, port: int = DEFAULT_PORT) -> str:
        """Returns the status response, validated and re-serialized

        Args:
            host (str): The host to connect to
            port (int, optional): The port to connect to.
            Default to 25565.

        Returns:
            str: Compact JSON text of the server's response

        Raises:
            PingError: Any failure along the way, no retries are made.
            DeserializationError when the server did not send JSON
        """
        return dump_json(self.logger.timer(self._status_data, host, port))

    def status(self, host: str, port: int = DEFAULT_PORT) -> StatusRecord:
        """Returns the parsed status of a server

        Args:
            host (str): The host to connect to
            port (int, optional): The port to connect to.
            Default to 25565.

        Returns:
            StatusRecord: The parsed status

        Raises:
            PingError: Any failure along the way, no retries are made
        """
        status = status_from_data(self.logger.timer(self._status_data, host, port))
        self.logger.debug(
            f"{host}:{port} runs {status.version.name} with "
            f"{status.players.online}/{status.players.max} players"
        )
        return status


def get_server_json(host: str, port: int = DEFAULT_PORT, timeout: float = CONNECT_TIMEOUT, **kwargs) -> str:
    """Fetch the status JSON of ``host:port`` as compact text, kwargs go to Server"""
    return Server(timeout=timeout, **kwargs).status_json(host, port)


def server_status(host: str, port: int = DEFAULT_PORT, timeout: float = CONNECT_TIMEOUT, **kwargs) -> StatusRecord:
    """Fetch and parse the status of ``host:port``, kwargs go to Server"""
    return Server(timeout=timeout, **kwargs).status(host, port)
