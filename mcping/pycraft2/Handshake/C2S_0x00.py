from ..packet import C2SPacket, States, DataTypes


class C2S_0x00(C2SPacket):
    """
    Handshake packet (0x00) sent by the client to the server.

    Data:
        - Protocol Version | VarInt | Any value is accepted for a status ping, 0 is sent.
        - Server Address | String (255) | Hostname or IP that was used to connect, sent as raw UTF-8 bytes prefixed by their length.
        - Server Port | Unsigned Short | Default is 25565.
        - Next State | VarInt Enum | 1 for Status.
    """

    def _info(self):
        return {
            "name": "Handshake (0x00)",
            "id": 0x00,
            "state": States.HANDSHAKE,
        }

    def _dataTypes(self):
        return {
            "protocol_version": DataTypes.VARINT,
            "server_address": DataTypes.STRING,
            "server_port": DataTypes.USHORT,
            "next_state": DataTypes.VARINT,
        }
