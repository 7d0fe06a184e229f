"""Render a context's fields with their stored values."""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from fieldkit.core.config import ConfigLike
from fieldkit.core.context import Context, ContextType
from fieldkit.core.exceptions import ConfigError
from fieldkit.core.registry import FieldTypeRegistry
from fieldkit.fields.base import (
    AssetCollector,
    FieldKind,
    RenderScope,
    esc_html,
    field_kind,
    storage_key_for,
)
from fieldkit.router import ContextRouter

logger = logging.getLogger(__name__)


class FieldRenderer:
    """
    Builds field instances and renders them against one context.

    Leaves receive their stored value; in settings contexts their input is
    named by storage key so the submission maps straight back to storage.
    Containers receive a ``RenderScope`` and look up their nested values the
    same way.
    """

    def __init__(self, registry: FieldTypeRegistry, router: ContextRouter) -> None:
        self.registry = registry
        self.router = router

    def stored_value(self, field: Any, context: Context) -> Any:
        return self.router.read(context, storage_key_for(field, context.prefix), None)

    def scope_for(self, context: Context, assets: Optional[AssetCollector] = None) -> RenderScope:
        return RenderScope(
            lookup=lambda field: self.stored_value(field, context),
            prefix=context.prefix,
            assets=assets,
        )

    def render_instance(
        self, field: Any, context: Context, assets: Optional[AssetCollector] = None
    ) -> str:
        if hasattr(field, "bind_assets"):
            field.bind_assets(assets)
        field.enqueue_assets()

        if field_kind(field) is FieldKind.CONTAINER:
            return field.render(self.scope_for(context, assets))

        if context.context_type is ContextType.SETTINGS:
            field.set_config("input_name", storage_key_for(field, context.prefix))
        return field.render(self.stored_value(field, context))

    def render_field(
        self, config: ConfigLike, context: Context, assets: Optional[AssetCollector] = None
    ) -> str:
        """Render one declaration; construction errors propagate."""
        return self.render_instance(self.registry.create(config), context, assets)

    def render_fields(
        self,
        configs: Iterable[ConfigLike],
        context: Context,
        assets: Optional[AssetCollector] = None,
    ) -> str:
        """Render declarations in order; a broken declaration renders an error block."""
        parts: List[str] = []
        for config in configs:
            try:
                parts.append(self.render_field(config, context, assets))
            except ConfigError as e:
                logger.warning(f"Cannot render field in {context}: {e}")
                parts.append(
                    f'<div class="error"><p>Error rendering field: {esc_html(e.message)}</p></div>'
                )
        return "".join(parts)


__all__ = ["FieldRenderer", "AssetCollector", "RenderScope"]
