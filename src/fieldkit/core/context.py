"""Persistence contexts and storage-key derivation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

ContextId = Union[int, str]


class ContextType(str, Enum):
    POST = "post"
    TERM = "term"
    SETTINGS = "settings"

    @classmethod
    def parse(cls, value: Union["ContextType", str]) -> Optional["ContextType"]:
        """Return the matching member, or None for an unrecognised token."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower().strip())
        except ValueError:
            return None


@dataclass(frozen=True)
class Context:
    """
    Where a value lives: a (context_type, context_id) pair.

    Example:
        >>> Context(ContextType.SETTINGS, "store-settings").storage_key("currency")
        'store-settings_currency'
        >>> Context(ContextType.POST, 42).storage_key("subtitle")
        'subtitle'
    """

    context_type: ContextType
    context_id: ContextId

    @classmethod
    def of(cls, context_type: Union[ContextType, str], context_id: ContextId) -> "Context":
        parsed = ContextType.parse(context_type)
        if parsed is None:
            raise ValueError(f"Unknown context type: {context_type!r}")
        return cls(parsed, context_id)

    @property
    def prefix(self) -> str:
        """Storage-key prefix; only settings contexts prefix their keys."""
        if self.context_type is ContextType.SETTINGS:
            return str(self.context_id)
        return ""

    def storage_key(self, field_name: str, use_name_prefix: bool = True) -> str:
        return build_storage_key(field_name, self.prefix, use_name_prefix)


def build_storage_key(field_name: str, prefix: str = "", use_name_prefix: bool = True) -> str:
    if use_name_prefix and prefix:
        return f"{prefix}_{field_name}"
    return field_name


__all__ = ["ContextId", "ContextType", "Context", "build_storage_key"]
