"""Timestamped entry envelope and its text codec.

Every value written through the cache is wrapped with its write time so
expiration can be decided without looking at the payload. Text-only storages
hold the envelope as ``{"t": <epoch ms>, "v": <value>}``.
"""

import time
from dataclasses import dataclass
from numbers import Real
from typing import Any

from .json import JSONParseError, parse_json, dump_json
from .logging_config import get_logger

logger = get_logger(__name__)

TIMESTAMP_FIELD = "t"
VALUE_FIELD = "v"


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return time.time_ns() // 1_000_000


@dataclass(frozen=True)
class Envelope:
    """Stored value plus its write timestamp."""

    written_at: int
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Export in wire format."""
        return {TIMESTAMP_FIELD: self.written_at, VALUE_FIELD: self.value}


def wrap(value: Any, timestamp: int | None = None) -> Envelope:
    """Stamp a value with the given (or current) time."""
    return Envelope(written_at=now_ms() if timestamp is None else timestamp, value=value)


def is_timestamp(value: Any) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def encode_envelope(envelope: Envelope) -> str:
    """
    Serialize envelope for a text-only storage.

    Raises:
        TypeError: If the wrapped value is not JSON serializable
    """
    return dump_json(envelope.to_dict())


def decode_entry(raw: str | bytes | None) -> Envelope | Any | None:
    """
    Parse a payload read from a text-only storage.

    Returns:
        Envelope for enveloped payloads, the parsed value for well-formed JSON
        that carries no envelope (data written by someone else), or None when
        the payload is absent or malformed. Never raises.
    """
    if raw is None:
        return None

    try:
        data = parse_json(raw)
    except JSONParseError as e:
        logger.debug("malformed_entry", error=str(e))
        return None

    if isinstance(data, dict) and TIMESTAMP_FIELD in data:
        timestamp = data[TIMESTAMP_FIELD]
        if not is_timestamp(timestamp):
            logger.debug("malformed_entry", error="non-numeric timestamp")
            return None
        return Envelope(written_at=timestamp, value=data.get(VALUE_FIELD))

    return data


__all__ = [
    "Envelope",
    "wrap",
    "now_ms",
    "encode_envelope",
    "decode_entry",
]
