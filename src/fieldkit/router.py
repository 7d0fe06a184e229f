"""
Context router: maps a (field name, context id, context type) triple to a
persistence backend.

The backend is chosen by the caller-supplied context type alone, so one field
implementation works unchanged against post, term and settings storage.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from fieldkit.core.context import Context, ContextId, ContextType, build_storage_key
from fieldkit.core.protocols import KeyValueStore
from fieldkit.storage import InMemoryScopedStore, InMemorySettingsStore

logger = logging.getLogger(__name__)


def normalize_object_id(context_id: ContextId) -> ContextId:
    """
    Post and term ids are integers; digit-only strings such as ``"42"`` map
    to the same scope as ``42``. Other ids are used as given.
    """
    if isinstance(context_id, str):
        text = context_id.strip()
        if text.isascii() and text.isdigit():
            return int(text)
    return context_id


class ContextRouter:
    """
    Read and write side of field persistence.

    Example:
        >>> router = ContextRouter()
        >>> router.get_field("currency", "store-settings", "settings", "USD")
        'USD'
        >>> router.write(Context.of("post", 42), "stock", 0)
        >>> router.get_field("stock", 42, "post", "n/a")
        0
    """

    def __init__(
        self,
        post_store: Optional[KeyValueStore] = None,
        term_store: Optional[KeyValueStore] = None,
        settings_store: Optional[KeyValueStore] = None,
    ) -> None:
        self._stores: Dict[ContextType, KeyValueStore] = {
            ContextType.POST: post_store if post_store is not None else InMemoryScopedStore("post"),
            ContextType.TERM: term_store if term_store is not None else InMemoryScopedStore("term"),
            ContextType.SETTINGS: (
                settings_store if settings_store is not None else InMemorySettingsStore()
            ),
        }

    def store_for(self, context_type: Union[ContextType, str]) -> Optional[KeyValueStore]:
        parsed = ContextType.parse(context_type)
        return self._stores.get(parsed) if parsed is not None else None

    @staticmethod
    def _scope(context: Context) -> Any:
        """Backend scope: None for settings, the normalised id otherwise."""
        if context.context_type is ContextType.SETTINGS:
            return None
        return normalize_object_id(context.context_id)

    # ------------------------------------------------------------------
    # Write side
    # ------------------------------------------------------------------

    def write(self, context: Context, storage_key: str, value: Any) -> None:
        store = self._stores[context.context_type]
        store.set(self._scope(context), storage_key, value)

    def delete(self, context: Context, storage_key: str) -> None:
        store = self._stores[context.context_type]
        store.delete(self._scope(context), storage_key)

    def read(self, context: Context, storage_key: str, default: Any = None) -> Any:
        """Raw read by storage key, no default substitution."""
        store = self._stores[context.context_type]
        return store.get(self._scope(context), storage_key, default)

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    def get_field(
        self,
        field_name: str,
        context_id: ContextId,
        context_type: Union[ContextType, str] = "post",
        default: Any = "",
        *,
        use_name_prefix: bool = True,
    ) -> Any:
        """
        Read a field value for display.

        ``""`` and ``None`` yield ``default``; every other stored value,
        including ``0``, ``False`` and ``"0"``, is returned as stored.
        An unrecognised context type returns ``default`` without touching
        any backend.
        """
        if not field_name:
            return default
        parsed = ContextType.parse(context_type)
        if parsed is None:
            logger.debug(f"Unknown context type {context_type!r} for field '{field_name}'")
            return default

        context = Context(parsed, context_id)
        key = build_storage_key(field_name, context.prefix, use_name_prefix)
        value = self.read(context, key, None)
        if value is None or value == "":
            return default
        return value

    def get_post_field(self, field_name: str, post_id: ContextId, default: Any = "") -> Any:
        return self.get_field(field_name, post_id, ContextType.POST, default)

    def get_term_field(self, field_name: str, term_id: ContextId, default: Any = "") -> Any:
        return self.get_field(field_name, term_id, ContextType.TERM, default)

    def get_settings_field(self, field_name: str, page_id: str, default: Any = "") -> Any:
        return self.get_field(field_name, page_id, ContextType.SETTINGS, default)


__all__ = ["ContextRouter", "normalize_object_id"]
