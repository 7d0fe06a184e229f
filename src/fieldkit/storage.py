"""
In-memory persistence backends.

Post and term stores are scoped by context id; the settings store is one flat
namespace (``scope`` is ignored) whose keys already carry the settings prefix.
Hosts plug their own backends in by implementing ``KeyValueStore``.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Dict, Iterator, Optional, Tuple

logger = logging.getLogger(__name__)


class InMemoryScopedStore:
    """
    Key-value store partitioned by scope (post id, term id).

    Example:
        >>> store = InMemoryScopedStore("post")
        >>> store.set(42, "subtitle", "Hello")
        >>> store.get(42, "subtitle")
        'Hello'
        >>> store.get(7, "subtitle", "")
        ''
    """

    def __init__(self, name: str = "scoped") -> None:
        self.name = name
        self._data: Dict[Any, Dict[str, Any]] = {}

    def get(self, scope: Any, key: str, default: Any = None) -> Any:
        bucket = self._data.get(scope)
        if bucket is None or key not in bucket:
            return default
        return copy.deepcopy(bucket[key])

    def set(self, scope: Any, key: str, value: Any) -> None:
        self._data.setdefault(scope, {})[key] = copy.deepcopy(value)
        logger.debug(f"{self.name}[{scope!r}].{key} written")

    def delete(self, scope: Any, key: str) -> None:
        bucket = self._data.get(scope)
        if bucket is not None and key in bucket:
            del bucket[key]
            logger.debug(f"{self.name}[{scope!r}].{key} deleted")
        if bucket is not None and not bucket:
            del self._data[scope]

    def exists(self, scope: Any, key: str) -> bool:
        return key in self._data.get(scope, {})

    def items(self, scope: Any) -> Iterator[Tuple[str, Any]]:
        return iter(copy.deepcopy(self._data.get(scope, {})).items())

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._data.values())


class InMemorySettingsStore:
    """Flat option store; ``scope`` is accepted for protocol symmetry and ignored."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = copy.deepcopy(initial) if initial else {}

    def get(self, scope: Any, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, scope: Any, key: str, value: Any) -> None:
        self._data[key] = copy.deepcopy(value)
        logger.debug(f"settings.{key} written")

    def delete(self, scope: Any, key: str) -> None:
        if key in self._data:
            del self._data[key]
            logger.debug(f"settings.{key} deleted")

    def exists(self, scope: Any, key: str) -> bool:
        return key in self._data

    def as_dict(self) -> Dict[str, Any]:
        return copy.deepcopy(self._data)

    def clear(self) -> None:
        self._data.clear()

    def __len__(self) -> int:
        return len(self._data)


__all__ = ["InMemoryScopedStore", "InMemorySettingsStore"]
