"""
RU: Конвейер сохранения: фильтр -> очистка -> валидация -> запись, поле за полем.
EN: Save pipeline: filter -> sanitize -> validate -> persist, one field at a time.

Containers are expanded depth-first in declaration order; each leaf is
attempted independently and failures are collected in a ``SaveReport``
instead of aborting the submission.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from fieldkit.core.config import ConfigLike, FieldConfig
from fieldkit.core.context import Context, ContextType
from fieldkit.core.exceptions import ConfigError, FieldValidationError
from fieldkit.core.registry import FieldTypeRegistry
from fieldkit.fields.base import FieldKind, field_kind, storage_key_for
from fieldkit.filters import SKIP, FilterChain
from fieldkit.router import ContextRouter

logger = logging.getLogger(__name__)

LeafCallback = Callable[[Any], None]


# ==============================================================================
# RESULTS
# ==============================================================================


@dataclass(frozen=True)
class FieldError:
    """Validation failure recorded against one storage key."""

    storage_key: str
    label: str
    errors: Tuple[str, ...]

    @property
    def message(self) -> str:
        return f"{self.label}: {', '.join(self.errors)}"


@dataclass
class SaveReport:
    """
    Outcome of one submission, in processing order.

    Attributes:
        saved: Storage keys written
        skipped: Storage keys a global filter skipped
        deleted: Storage keys removed because no value was submitted
        errors: Validation failures; nothing was written for these keys
    """

    context: Context
    saved: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)
    errors: List[FieldError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def error_map(self) -> Dict[str, List[str]]:
        return {e.storage_key: list(e.errors) for e in self.errors}

    def messages(self) -> List[str]:
        return [e.message for e in self.errors]

    def raise_for_errors(self) -> None:
        """Raise ``FieldValidationError`` if any field failed validation."""
        if self.errors:
            raise FieldValidationError(
                f"{len(self.errors)} field(s) failed validation",
                errors=self.error_map(),
            )


# ==============================================================================
# EXPANSION
# ==============================================================================


def expand_fields(
    registry: FieldTypeRegistry,
    configs: Iterable[ConfigLike],
    on_leaf: LeafCallback,
    *,
    strict: bool = True,
) -> None:
    """
    Walk declarations pre-order, depth-first, calling ``on_leaf`` per leaf.

    Args:
        registry: Builds each instance
        configs: Declarations at this level
        on_leaf: Save callback for leaf instances
        strict: Top-level construction errors propagate when True; nested
            entries are always tolerant (nameless or unbuildable entries are
            skipped and their siblings continue)

    Raises:
        ConfigError: Only for top-level entries with ``strict=True``
    """
    for cfg in configs:
        data = FieldConfig.from_mapping(cfg)
        if not strict and not data.name:
            continue
        try:
            instance = registry.create(data)
        except ConfigError as e:
            if strict:
                raise
            logger.debug(f"Skipping nested field '{data.name}': {e}")
            continue

        if field_kind(instance) is FieldKind.CONTAINER:
            expand_fields(registry, instance.get_nested_fields(), on_leaf, strict=False)
        else:
            on_leaf(instance)


# ==============================================================================
# PIPELINE
# ==============================================================================


class SavePipeline:
    """
    Persists one submission for one context.

    Example:
        >>> pipeline = SavePipeline(registry, router)
        >>> report = pipeline.save(
        ...     [{"name": "price", "type": "number", "required": True, "validation": {"min": 0}}],
        ...     {"price": "-5"},
        ...     Context.of("post", 42),
        ... )
        >>> report.messages()
        ['Price: Price must be at least 0.']
    """

    def __init__(
        self,
        registry: FieldTypeRegistry,
        router: ContextRouter,
        filters: Optional[FilterChain] = None,
    ) -> None:
        self.registry = registry
        self.router = router
        self.filters = filters if filters is not None else FilterChain()

    def save(
        self,
        configs: Iterable[ConfigLike],
        submitted: Mapping[str, Any],
        context: Context,
    ) -> SaveReport:
        report = SaveReport(context)
        expand_fields(
            self.registry,
            configs,
            lambda leaf: self.save_field(leaf, submitted, context, report),
        )
        logger.info(
            f"Saved {context.context_type.value}:{context.context_id} "
            f"({len(report.saved)} saved, {len(report.skipped)} skipped, "
            f"{len(report.errors)} invalid)"
        )
        return report

    def save_field(
        self,
        field: Any,
        submitted: Mapping[str, Any],
        context: Context,
        report: SaveReport,
    ) -> None:
        """Filter, sanitize, validate and persist one leaf."""
        if not getattr(field, "stores_value", True):
            return

        name = field.get_name()
        storage_key = storage_key_for(field, context.prefix)

        if storage_key in submitted:
            raw = submitted[storage_key]
        elif name in submitted:
            raw = submitted[name]
        elif context.context_type is ContextType.SETTINGS:
            raw = ""
        else:
            self.router.delete(context, storage_key)
            report.deleted.append(storage_key)
            return

        value = self.filters.apply(raw, name, context)
        if value is SKIP:
            report.skipped.append(storage_key)
            return

        clean = field.sanitize(value)
        result = field.validate(clean)
        if result.valid:
            self.router.write(context, storage_key, clean)
            report.saved.append(storage_key)
            return

        report.errors.append(FieldError(storage_key, field.get_label(), tuple(result.errors)))
        logger.info(f"Field '{storage_key}' failed validation: {', '.join(result.errors)}")


__all__ = ["FieldError", "SaveReport", "LeafCallback", "expand_fields", "SavePipeline"]
