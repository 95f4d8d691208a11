import logging
import struct
from ctypes import c_int32 as signed_int32
from ctypes import c_uint32 as unsigned_int32

from ..errors import EncodingError, PayloadTooLargeError, ProtocolError, ShortReadError

# Limit the response to 50MB
MAX_PACKET_SIZE = 1024 * 1024 * 50

logger = logging.getLogger("mcping.pycraft2")


class States:
    HANDSHAKE = 0
    STATUS = 1


class DataTypes:
    VARINT = "VarInt"
    STRING = "String"
    USHORT = "Unsigned Short"


# https://wiki.vg/Protocol#Packet_format
class Packet:
    """In-memory byte buffer with the protocol's primitive codecs.

    ``decode_varint`` and ``read_exact`` accept anything with a ``read(n)`` method, so
    they serve a received buffer and a live socket alike.
    """

    def __init__(self, data: bytes = b""):
        self.__data = bytes(data)

    def __repr__(self):
        return f"Packet({self.__data!r})"

    def __len__(self):
        return len(self.__data)

    def __bytes__(self):
        return self.__data

    def read(self, length: int) -> bytes:
        result = self.__data[:length]
        self.__data = self.__data[length:]
        return result

    @staticmethod
    def encode_varint(value: int) -> bytes:
        """Encode ``value`` as a VarInt.

        Negative numbers are written as their unsigned 32-bit counterpart,
        so they always take the full 5 bytes.

        :param value: The Maximum is ``2 ** 31-1`` the minimum is ``-(2 ** 31)``.
        :raises ValueError: If value is out of range.
        """
        if value > 2**31 - 1 or value < -(2**31):
            raise ValueError(f'The value "{value}" is too big to send in a varint')

        remaining = unsigned_int32(value).value
        out = b""
        while remaining >= 0x80:
            out += struct.pack("!B", remaining & 0x7F | 0x80)
            remaining >>= 7
        return out + struct.pack("!B", remaining)

    @staticmethod
    def decode_varint(source) -> int:
        """Read a VarInt from ``source`` one byte at a time.

        :param source: Any object with a ``read(n)`` method.
        :raises ProtocolError: If 5 bytes pass without a terminating byte.
        :raises ShortReadError: If the source runs out of bytes.
        """
        result = 0
        for i in range(5):
            part = source.read(1)
            if not part:
                raise ShortReadError("Connection closed while reading a VarInt")

            part = part[0]
            result |= (part & 0x7F) << 7 * i
            if not part & 0x80:
                # bits past the 32nd are dropped
                return signed_int32(result).value
        raise ProtocolError("Malformed VarInt: more than 5 bytes")

    @staticmethod
    def read_exact(source, length: int) -> bytes:
        result = source.read(length)
        if len(result) < length:
            raise ShortReadError(
                f"Connection closed with {length - len(result)} bytes remaining"
            )
        return result

    @classmethod
    def pack(cls, payload: bytes) -> bytes:
        """Prefix ``payload`` with its length as a VarInt."""
        return cls.encode_varint(len(payload)) + payload

    @classmethod
    def encode_string(cls, string: str) -> bytes:
        return cls.pack(string.encode("utf-8"))

    @staticmethod
    def encode_ushort(value: int) -> bytes:
        """Encode an unsigned short, big-endian.

        :param value: The Maximum is ``2 ** 16-1`` the minimum is 0.
        :raises ValueError: If value is out of range.
        """
        if value < 0 or value > 2**16 - 1:
            raise ValueError(f"The value {value} is out of range for an unsigned short")
        return struct.pack("!H", value)

    def read_varint(self) -> int:
        return self.decode_varint(self)


class C2SPacket(Packet):
    """Base for packets sent by the client.

    Subclasses describe themselves through ``_info`` (name, id and protocol
    state) and ``_dataTypes`` (ordered field name -> DataTypes value); the
    field values are passed as keyword arguments.
    """

    def __init__(self, **kwargs):
        super().__init__(b"")
        info = self._info()

        self.fields = kwargs
        self.name = info["name"]
        self.id = info["id"]
        self.state = info["state"]

    def _info(self):
        raise NotImplementedError

    def _dataTypes(self):
        raise NotImplementedError

    def __str__(self):
        return f"{self.name}({', '.join([f'{k}={v}' for k, v in self.fields.items()])})"

    def toDict(self):
        return {
            "id": self.id,
            "name": self.name,
            "data": self.fields,
        }

    def toBytes(self) -> bytes:
        b = self.encode_varint(self.id)

        for k, v in self._dataTypes().items():
            match v:
                case DataTypes.VARINT:
                    b += self.encode_varint(self.fields[k])
                case DataTypes.STRING:
                    b += self.encode_string(self.fields[k])
                case DataTypes.USHORT:
                    b += self.encode_ushort(self.fields[k])
                case _:
                    raise ValueError(f"Unknown data type: {v}")

        return self.pack(b)


class S2CPacket(Packet):
    """Base for packets sent by the server, decoded straight off a stream.

    Nothing is buffered: every field is read from ``stream`` as it is
    decoded, and string lengths are checked against ``max_string_length``
    before the body is read. ``consumed`` counts the bytes read after the
    frame length.
    """

    max_string_length = MAX_PACKET_SIZE

    def __init__(self, stream):
        super().__init__(b"")
        info = self._info()

        self.stream = stream
        self.name = info["name"]
        self.id = info["id"]
        self.state = info["state"]
        self.length = None
        self.consumed = 0
        self.fields = {}

    def _info(self):
        raise NotImplementedError

    def _dataTypes(self):
        raise NotImplementedError

    def read(self, length: int) -> bytes:
        data = self.stream.read(length)
        self.consumed += len(data)
        return data

    def read_string_field(self) -> str:
        length = self.decode_varint(self)

        # a negative length reads as a huge unsigned one
        if unsigned_int32(length).value > self.max_string_length:
            raise PayloadTooLargeError(
                f"Response too large: {unsigned_int32(length).value} bytes "
                f"(limit {self.max_string_length})"
            )

        data = self.read_exact(self, length)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError as err:
            raise EncodingError(f"Response is not valid UTF-8: {err}") from err

    def read_response(self) -> dict:
        """Read the frame header and every field of this packet.

        The frame length is not enforced; the nested length fields decide
        how much is read.
        """
        self.length = self.decode_varint(self)
        self.consumed = 0
        packet_id = self.decode_varint(self)

        for k, v in self._dataTypes().items():
            match v:
                case DataTypes.STRING:
                    value = self.read_string_field()
                case _:
                    raise ValueError(f"Unknown data type: {v}")
            self.fields[k] = value

        if packet_id != self.id:
            logger.debug(f"Expected packet {hex(self.id)}, got {hex(packet_id)}")
        if self.consumed != self.length:
            logger.debug(
                f"Frame length mismatch: header says {self.length}, read {self.consumed}"
            )

        return self.fields
