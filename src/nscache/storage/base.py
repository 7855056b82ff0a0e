"""
Storage Backend Base
Abstract key/value medium shared by cache namespaces
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class StorageBackend(ABC):
    """
    Abstract storage medium.

    Keys are plain strings. A missing key is never an error: ``get`` returns
    None and ``remove`` does nothing. ``keys`` enumerates the whole medium,
    filtering by namespace is the caller's job.
    """

    #: Values must be strings (envelopes are serialized before ``set``)
    text_only: bool = False

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Return the stored value or None"""
        pass

    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Store value under key, replacing any previous value"""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete key if present"""
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """All keys currently in the medium"""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Delete every key in the medium"""
        pass

    def close(self) -> None:
        """
        Release medium resources (optional override).
        Called when the owning registry is closed.
        """

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self.keys())
