from ..packet import S2CPacket, States, DataTypes


class S2C_0x00(S2CPacket):
    """
    Status Response Packet (0x00)

    Data:
        - JSON Response | String | See (Server List Ping#Status Response)[https://wiki.vg/Server_List_Ping#Status_Response]; as with all strings, this is prefixed by its length as a VarInt. Capped at MAX_PACKET_SIZE bytes.
    """

    def _info(self):
        return {
            "name": "Status Response",
            "id": 0x00,
            "state": States.STATUS,
        }

    def _dataTypes(self):
        return {
            "json_response": DataTypes.STRING,
        }


def read_status_json(stream) -> str:
    """Read a status response frame from ``stream`` and return its JSON text.

    Raises:
        ShortReadError: The stream closed before the frame was complete.
        ProtocolError: A VarInt in the header is malformed.
        PayloadTooLargeError: The declared JSON length is over the limit.
        EncodingError: The JSON bytes are not UTF-8.
    """
    return S2C_0x00(stream).read_response()["json_response"]
