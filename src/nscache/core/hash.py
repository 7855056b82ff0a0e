"""Digests for storage key derivation.

Keys only need to be deterministic and collision-resistant for caching, so
xxhash64 is the default. MD5 gives keys in the older 32-character format and
SHA256 is there for callers that want a wider digest.
"""

from enum import Enum
from typing import Callable
import hashlib

import xxhash


class Algorithm(str, Enum):
    """Supported hash algorithms."""

    XXHASH64 = "xxhash64"  # Fast, non-cryptographic (default)
    MD5 = "md5"            # Legacy key format
    SHA256 = "sha256"


Digest = Callable[[bytes], str]

_DIGESTS: dict[Algorithm, tuple[Digest, int]] = {
    Algorithm.XXHASH64: (lambda data: xxhash.xxh64_hexdigest(data), 16),
    Algorithm.MD5: (lambda data: hashlib.md5(data, usedforsecurity=False).hexdigest(), 32),
    Algorithm.SHA256: (lambda data: hashlib.sha256(data).hexdigest(), 64),
}


def _lookup(algorithm: Algorithm | str) -> tuple[Digest, int]:
    try:
        return _DIGESTS[Algorithm(algorithm)]
    except ValueError:
        raise ValueError(f"Unknown algorithm: {algorithm}") from None


def get_digest(algorithm: Algorithm | str = Algorithm.XXHASH64) -> Digest:
    """
    Hex digest function for an algorithm.

    Raises:
        ValueError: If the algorithm is unknown
    """
    return _lookup(algorithm)[0]


def digest_length(algorithm: Algorithm | str = Algorithm.XXHASH64) -> int:
    """Number of hex characters the algorithm produces."""
    return _lookup(algorithm)[1]


def hash_string(text: str, algorithm: Algorithm | str = Algorithm.XXHASH64) -> str:
    """
    Hex digest of a UTF-8 encoded string.

    Examples:
        >>> len(hash_string("alice"))
        16
        >>> hash_string("alice", Algorithm.MD5)
        '6384e2b2184bcbf58eccf10ca7a6563c'
    """
    return get_digest(algorithm)(text.encode("utf-8", "surrogatepass"))


__all__ = ["Algorithm", "get_digest", "digest_length", "hash_string"]
