"""Typed view of a server's status response."""
import json
from dataclasses import asdict, dataclass
from typing import Any

from .errors import DeserializationError


@dataclass(frozen=True)
class PlayerSample:
    id: str
    name: str


@dataclass(frozen=True)
class Players:
    max: int
    online: int
    sample: tuple[PlayerSample, ...] = ()


@dataclass(frozen=True)
class Version:
    name: str
    protocol: int


@dataclass(frozen=True)
class StatusRecord:
    """Parsed status of a server.

    ``description`` is the ``text`` of the description chat component;
    nested formatting (``extra``, colours ...) is not kept.
    """

    description: str
    players: Players
    version: Version
    favicon: str = ""

    def to_dict(self) -> dict:
        return {
            "description": {"text": self.description},
            "favicon": self.favicon,
            "players": {
                "max": self.players.max,
                "online": self.players.online,
                "sample": [asdict(p) for p in self.players.sample],
            },
            "version": asdict(self.version),
        }


_MISSING = object()


def _field(obj: dict, path: str, kind: type, default: Any = _MISSING):
    """Fetch ``path`` (dotted) from ``obj`` and check its type.

    Args:
        obj (dict): The decoded JSON object
        path (str): Dotted path, e.g. "players.max"
        kind (type): Expected type
        default (Any, optional): Returned when the last key is absent

    Raises:
        DeserializationError: The field is missing or has the wrong type
    """
    *parents, last = path.split(".")
    node = obj
    for key in parents:
        node = node.get(key) if isinstance(node, dict) else None
    if not isinstance(node, dict):
        raise DeserializationError(f"Missing object for field {path!r}")

    value = node.get(last, _MISSING)
    if value is _MISSING:
        if default is _MISSING:
            raise DeserializationError(f"Missing required field {path!r}")
        return default

    # bool is an int subclass but never a valid count
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise DeserializationError(
            f"Field {path!r} should be {kind.__name__}, got {type(value).__name__}"
        )
    return value


def _sample(raw: list) -> tuple[PlayerSample, ...]:
    sample = []
    for i, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise DeserializationError(f"players.sample[{i}] should be an object")
        sample.append(
            PlayerSample(
                id=_field(entry, "id", str),
                name=_field(entry, "name", str),
            )
        )
    return tuple(sample)


def load_json(text: str) -> Any:
    """Decode the JSON text of a status response

    Raises:
        DeserializationError: The text is not JSON
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as err:
        raise DeserializationError(f"Response is not valid JSON: {err}") from err


def dump_json(data: Any) -> str:
    """Compact JSON, non-ASCII characters kept as is"""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


def status_from_data(data: Any) -> StatusRecord:
    """Build a StatusRecord from an already decoded status response

    Args:
        data (Any): The decoded JSON sent by the server

    Returns:
        StatusRecord: The parsed status, with ``favicon`` and
        ``players.sample`` defaulted when absent

    Raises:
        DeserializationError: The data is not an object, or a required
        field is missing or of the wrong type
    """
    if not isinstance(data, dict):
        raise DeserializationError("Response is not a JSON object")

    return StatusRecord(
        description=_field(data, "description.text", str),
        favicon=_field(data, "favicon", str, ""),
        players=Players(
            max=_field(data, "players.max", int),
            online=_field(data, "players.online", int),
            sample=_sample(_field(data, "players.sample", list, [])),
        ),
        version=Version(
            name=_field(data, "version.name", str),
            protocol=_field(data, "version.protocol", int),
        ),
    )


def parse_status(text: str) -> StatusRecord:
    """Build a StatusRecord from the JSON text of a status response

    Raises:
        DeserializationError: The text is not JSON, or a required field is
        missing or of the wrong type
    """
    return status_from_data(load_json(text))
