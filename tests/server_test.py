import json
import socket
import time

import pytest

import mcping
from mcping.errors import (
    AddressResolutionError,
    PayloadTooLargeError,
    PingError,
    ServerConnectionError,
    ShortReadError,
    TransportError,
)
from mcping.pycraft2 import connector
from mcping.pycraft2.connector import build_status_request, split_address
from mcping.pycraft2.packet import MAX_PACKET_SIZE, Packet
from mcping.server import Server

STATUS = {
    "version": {"protocol": 758, "name": "Velocity 1.7.2-1.18.2"},
    "players": {
        "online": 196,
        "max": 150,
        "sample": [{"id": "4566e69f-c907-48ee-8d71-d7ba5aa00d20", "name": "thinkofdeath"}],
    },
    "description": {"text": "Hello world"},
}


def response_bytes(body: bytes) -> bytes:
    return Packet.pack(Packet.encode_varint(0) + Packet.pack(body))


def response(doc) -> bytes:
    return response_bytes(json.dumps(doc).encode("utf-8"))


class FakeSocket:
    """Scripted stand-in for socket.socket"""

    def __init__(self, data: bytes = b"", chunk: int = 7, connect_error=None, send_error=None):
        self.data = data
        self.chunk = chunk
        self.connect_error = connect_error
        self.send_error = send_error
        self.sent = b""
        self.timeouts = []
        self.address = None
        self.closed = False

    def __call__(self, family, type_):
        self.family = family
        return self

    def settimeout(self, value):
        self.timeouts.append(value)

    def connect(self, address):
        if self.connect_error is not None:
            raise self.connect_error
        self.address = address

    def sendall(self, data):
        if self.send_error is not None:
            raise self.send_error
        self.sent += data

    def recv(self, n):
        out = self.data[: min(n, self.chunk)]
        self.data = self.data[len(out):]
        return out

    def close(self):
        self.closed = True


def test_query():
    fake = FakeSocket(response(STATUS))
    server = Server(socket_factory=fake)

    status = server.status("127.0.0.1", 25565)

    assert status.players.online == 196
    assert status.players.max == 150
    assert status.players.sample[0].name == "thinkofdeath"
    assert status.version.protocol == 758
    assert status.description == "Hello world"
    assert status.favicon == ""

    assert fake.sent == build_status_request("127.0.0.1", 25565)
    assert fake.address == ("127.0.0.1", 25565)
    assert fake.closed


def test_timeouts():
    fake = FakeSocket(response(STATUS))
    Server(socket_factory=fake).status_json("127.0.0.1", 25565)

    assert fake.timeouts == [mcping.CONNECT_TIMEOUT, None]

    fake = FakeSocket(response(STATUS))
    Server(timeout=1.5, read_timeout=2, socket_factory=fake).status_json("127.0.0.1", 25565)

    assert fake.timeouts == [1.5, 2]


def test_query_json():
    fake = FakeSocket(response(STATUS))

    text = Server(socket_factory=fake).status_json("127.0.0.1", 25565)

    assert json.loads(text) == STATUS
    assert text == json.dumps(STATUS, separators=(",", ":"))


def test_query_json_keeps_unicode():
    doc = {"description": {"text": "Gr\u00fcn \u2713"}}
    fake = FakeSocket(response(doc))

    text = Server(socket_factory=fake).status_json("127.0.0.1", 25565)

    assert text == '{"description":{"text":"Gr\u00fcn \u2713"}}'


def test_closed_after_one_byte():
    fake = FakeSocket(response(STATUS)[:1])

    with pytest.raises(ShortReadError):
        Server(socket_factory=fake).status("127.0.0.1", 25565)
    assert fake.closed


def test_short_read_is_io_error():
    fake = FakeSocket(b"")

    with pytest.raises(IOError):
        Server(socket_factory=fake).status("127.0.0.1", 25565)


def test_too_large():
    data = Packet.encode_varint(5) + Packet.encode_varint(0) + Packet.encode_varint(2**30)
    fake = FakeSocket(data)

    with pytest.raises(PayloadTooLargeError):
        Server(socket_factory=fake).status("127.0.0.1", 25565)
    assert fake.closed


def test_connect_refused():
    fake = FakeSocket(connect_error=ConnectionRefusedError(111, "Connection refused"))

    with pytest.raises(ServerConnectionError):
        Server(socket_factory=fake).status("127.0.0.1", 25565)
    assert fake.closed


def test_connect_timeout():
    fake = FakeSocket(connect_error=socket.timeout("timed out"))

    with pytest.raises(ConnectionError):
        Server(socket_factory=fake).status("127.0.0.1", 25565)


def test_send_failure():
    fake = FakeSocket(send_error=BrokenPipeError(32, "Broken pipe"))

    with pytest.raises(TransportError):
        Server(socket_factory=fake).status("127.0.0.1", 25565)
    assert fake.closed


def test_read_timeout():
    class StallingSocket(FakeSocket):
        def recv(self, n):
            raise socket.timeout("timed out")

    with pytest.raises(TransportError):
        Server(read_timeout=0.1, socket_factory=StallingSocket()).status("127.0.0.1", 25565)


def test_bad_json():
    fake = FakeSocket(Packet.pack(Packet.encode_varint(0) + Packet.pack(b"not json")))

    with pytest.raises(mcping.DeserializationError):
        Server(socket_factory=fake).status("127.0.0.1", 25565)


def test_get_server_json_rejects_non_json():
    fake = FakeSocket(Packet.pack(Packet.encode_varint(0) + Packet.pack(b"not json")))

    with pytest.raises(mcping.DeserializationError):
        mcping.get_server_json("127.0.0.1", socket_factory=fake)
    assert fake.closed


def test_port_out_of_range():
    fake = FakeSocket(response(STATUS))

    with pytest.raises(AddressResolutionError):
        Server(socket_factory=fake).status_json("127.0.0.1", 70000)
    assert fake.address is None, "should fail before connecting"
    assert fake.sent == b""


class ChunkedSocket(FakeSocket):
    """Serves ``data`` in fixed chunks without re-slicing the whole buffer"""

    def __init__(self, data: bytes, chunk: int):
        super().__init__(chunk=chunk)
        self.view = memoryview(data)
        self.offset = 0

    def recv(self, n):
        out = bytes(self.view[self.offset:self.offset + min(n, self.chunk)])
        self.offset += len(out)
        return out


def test_large_body_read():
    body = b'"' + b"a" * (MAX_PACKET_SIZE - 2) + b'"'
    fake = ChunkedSocket(response_bytes(body), chunk=64 * 1024)

    start = time.perf_counter()
    text = Server(socket_factory=fake).status_json("127.0.0.1", 25565)
    elapsed = time.perf_counter() - start

    assert len(text) == MAX_PACKET_SIZE
    assert elapsed < 5, f"reading {MAX_PACKET_SIZE} bytes took {elapsed:.2f}s"


def test_resolution_error(monkeypatch):
    def fail(*args, **kwargs):
        raise socket.gaierror(-2, "Name or service not known")

    monkeypatch.setattr(connector.socket, "getaddrinfo", fail)

    with pytest.raises(AddressResolutionError):
        Server(socket_factory=FakeSocket()).status("nowhere.invalid", 25565)


def test_resolution_empty(monkeypatch):
    monkeypatch.setattr(connector.socket, "getaddrinfo", lambda *a, **k: [])

    with pytest.raises(AddressResolutionError):
        Server(socket_factory=FakeSocket()).status("nowhere.invalid", 25565)


def test_handshake_uses_hostname(monkeypatch):
    monkeypatch.setattr(
        connector.socket,
        "getaddrinfo",
        lambda *a, **k: [(socket.AF_INET, socket.SOCK_STREAM, 6, "", ("10.0.0.1", 25565))],
    )
    fake = FakeSocket(response(STATUS))

    Server(socket_factory=fake).status("mc.example.com", 25565)

    assert fake.address == ("10.0.0.1", 25565)
    assert fake.sent == build_status_request("mc.example.com", 25565)


def test_errors_share_base():
    for err in (
        AddressResolutionError,
        ServerConnectionError,
        TransportError,
        ShortReadError,
        PayloadTooLargeError,
        mcping.EncodingError,
        mcping.DeserializationError,
        mcping.ProtocolError,
    ):
        assert issubclass(err, PingError)


@pytest.mark.parametrize(
    "host,port,expected",
    [
        ("example.com", None, ("example.com", 25565)),
        ("example.com:25566", None, ("example.com", 25566)),
        ("example.com:25566", 1, ("example.com:25566", 1)),
        ("[::1]:25570", None, ("::1", 25570)),
        ("[::1]", None, ("::1", 25565)),
        ("::1", None, ("::1", 25565)),
    ],
)
def test_split_address(host, port, expected):
    assert split_address(host, port) == expected


def test_split_address_bad_port():
    with pytest.raises(AddressResolutionError):
        split_address("example.com:abc")

    with pytest.raises(AddressResolutionError):
        split_address("example.com:70000")

    with pytest.raises(AddressResolutionError):
        split_address("example.com", -1)


def test_module_functions():
    fake = FakeSocket(response(STATUS))
    status = mcping.server_status("127.0.0.1", socket_factory=fake)

    assert status.version.name == "Velocity 1.7.2-1.18.2"
    assert fake.address == ("127.0.0.1", 25565)

    fake = FakeSocket(response(STATUS))
    text = mcping.get_server_json("127.0.0.1", 25570, timeout=2, socket_factory=fake)

    assert json.loads(text) == STATUS
    assert fake.timeouts[0] == 2
