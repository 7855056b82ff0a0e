"""JSON codec for text storages: msgspec decoding, orjson encoding, stdlib fallbacks."""

from typing import Any
import json
import math

import msgspec
import orjson


class JSONParseError(Exception):
    """JSON parsing failed."""

    def __init__(self, message: str, original: Exception | None = None) -> None:
        super().__init__(message)
        self.original = original


_decoder = msgspec.json.Decoder()


def parse_json(text: str | bytes) -> Any:
    """
    Decode a JSON document.

    Raises:
        JSONParseError: If the input is not text or not valid JSON
    """
    if isinstance(text, str):
        data = text.encode("utf-8", "surrogatepass")
    elif isinstance(text, (bytes, bytearray)):
        data = bytes(text)
    else:
        raise JSONParseError(f"Expected str or bytes, got {type(text).__name__}")

    try:
        return _decoder.decode(data)
    except msgspec.DecodeError:
        pass

    # Standard library also detects UTF-16/32 encoded documents
    try:
        return json.loads(data)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise JSONParseError(f"Invalid JSON: {e}", e)


def _reject_lossy(obj: Any) -> None:
    """Raise TypeError for values JSON text cannot hold exactly."""
    if isinstance(obj, float):
        if not math.isfinite(obj):
            raise TypeError(f"Out of range float values are not JSON compliant: {obj!r}")
    elif isinstance(obj, dict):
        for key, item in obj.items():
            if not isinstance(key, str):
                raise TypeError(f"Dict keys must be str, got {type(key).__name__}")
            _reject_lossy(item)
    elif isinstance(obj, (list, tuple)):
        for item in obj:
            _reject_lossy(item)


def dump_json(obj: Any) -> str:
    """
    Encode to compact JSON text that decodes back to an equal value.

    orjson handles the common case; the standard library covers what it
    rejects (e.g. integers outside 64-bit range).

    Raises:
        TypeError: If the object is not JSON serializable, holds NaN or
            infinity, or has non-string dict keys
    """
    try:
        text = orjson.dumps(obj).decode("utf-8")
    except orjson.JSONEncodeError:
        try:
            text = json.dumps(obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        except ValueError as e:
            raise TypeError(str(e)) from e
    # Runs after encoding so cyclic structures have already been rejected
    _reject_lossy(obj)
    return text


__all__ = ["JSONParseError", "parse_json", "dump_json"]
