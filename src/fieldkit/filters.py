"""
Before-save filters.

Two ordered stages run before a submitted value is sanitized:

1. global filters ``(value, field_name, context) -> value | SKIP``
2. field filters ``(value) -> value``, registered per field name

Returning ``SKIP`` from a global filter stops the chain: field filters do not
run and the field is not persisted for this submission.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from fieldkit.core.context import Context

logger = logging.getLogger(__name__)


class _SkipType:
    _instance: Optional["_SkipType"] = None

    def __new__(cls) -> "_SkipType":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "SKIP"

    def __bool__(self) -> bool:
        return False


SKIP = _SkipType()

GlobalFilter = Callable[[Any, str, Context], Any]
FieldFilter = Callable[[Any], Any]


class FilterChain:
    """
    Ordered global and per-field before-save filters.

    Example:
        >>> chain = FilterChain()
        >>> chain.add_global(lambda v, name, ctx: SKIP if name == "secret" else v)
        >>> chain.add_field("title", str.upper)
        >>> chain.apply("hello", "title", Context.of("post", 1))
        'HELLO'
    """

    def __init__(self) -> None:
        self._global: List[GlobalFilter] = []
        self._field: Dict[str, List[FieldFilter]] = {}

    def add_global(self, fn: GlobalFilter) -> GlobalFilter:
        self._global.append(fn)
        return fn

    def add_field(self, field_name: str, fn: FieldFilter) -> FieldFilter:
        self._field.setdefault(field_name, []).append(fn)
        return fn

    def remove_global(self, fn: GlobalFilter) -> bool:
        if fn in self._global:
            self._global.remove(fn)
            return True
        return False

    def remove_field(self, field_name: str, fn: FieldFilter) -> bool:
        filters = self._field.get(field_name, [])
        if fn in filters:
            filters.remove(fn)
            return True
        return False

    def clear(self) -> None:
        self._global.clear()
        self._field.clear()

    def apply(self, value: Any, field_name: str, context: Context) -> Any:
        """Run both stages; returns the filtered value or ``SKIP``."""
        for fn in self._global:
            value = fn(value, field_name, context)
            if value is SKIP:
                logger.debug(f"Global filter skipped field '{field_name}'")
                return SKIP
        for fn in self._field.get(field_name, []):
            value = fn(value)
        return value

    def __len__(self) -> int:
        return len(self._global) + sum(len(v) for v in self._field.values())


__all__ = ["SKIP", "GlobalFilter", "FieldFilter", "FilterChain"]
