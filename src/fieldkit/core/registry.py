"""
Field type registry.

Maps a type tag (``"text"``, ``"repeater"``...) to a field constructor and
builds request-scoped field instances from declarative configs.

Provides:
- Registration with contract validation (``CapabilityError`` on failure)
- One-shot seeding of the built-in types; pre-registered types win
- Factory methods ``create`` / ``create_multiple``
- Introspection helpers for tests and tooling

There is no process-wide instance: the composition root (``FieldManager``)
builds one registry and hands it to everything that constructs fields.

Example:
    >>> registry = FieldTypeRegistry()
    >>> field = registry.create({"name": "subtitle", "type": "text"})
    >>> field.get_label()
    'Subtitle'
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from fieldkit.core.config import ConfigLike, FieldConfig
from fieldkit.core.exceptions import CapabilityError, ConfigError, UnknownTypeError
from fieldkit.core.protocols import FIELD_CAPABILITIES, FieldProtocol

logger = logging.getLogger(__name__)

FieldConstructor = Callable[[str, str, Dict[str, Any], "FieldTypeRegistry"], Any]

_PROBE_NAME = "__capability_probe__"


# ==============================================================================
# DATACLASSES
# ==============================================================================


@dataclass(frozen=True)
class RegistryEntry:
    """
    One registered field type.

    Attributes:
        field_type: Type tag
        constructor: Class or factory building the instance
        builtin: True when seeded by ``register_defaults``
    """

    field_type: str
    constructor: FieldConstructor
    builtin: bool = False


# ==============================================================================
# MAIN CLASS: FIELD TYPE REGISTRY
# ==============================================================================


class FieldTypeRegistry:
    """
    Registry of field constructors keyed by type tag.

    Seeding order is part of the contract: a type registered before
    ``register_defaults()`` survives seeding, a type registered after it
    simply overwrites the built-in.

    Example:
        >>> registry = FieldTypeRegistry()
        >>> registry.register_type("text", MyTextField)
        >>> registry.register_defaults()
        >>> registry.get_constructor("text") is MyTextField
        True
    """

    def __init__(
        self,
        builtins: Optional[Mapping[str, FieldConstructor]] = None,
        field_defaults: Optional[Mapping[str, Any]] = None,
    ) -> None:
        """
        Args:
            builtins: Type table used by ``register_defaults``; defaults to the
                package's built-in field types.
            field_defaults: Config keys applied to every created field below
                its own declaration (e.g. ``css_prefix``).
        """
        self._entries: Dict[str, RegistryEntry] = {}
        self.field_defaults: Dict[str, Any] = dict(field_defaults or {})
        self._builtins = dict(builtins) if builtins is not None else None
        self._defaults_registered = False

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register_type(self, field_type: str, constructor: FieldConstructor) -> None:
        """
        Register (or overwrite) a field type.

        Args:
            field_type: Type tag, e.g. ``"currency"``
            constructor: Field class or factory ``(name, type, config, registry)``

        Raises:
            ConfigError: Empty type tag
            CapabilityError: Constructor does not implement the field contract
        """
        key = str(field_type or "").strip()
        if not key:
            raise ConfigError("Field type tag must be a non-empty string.")

        self._check_capabilities(key, constructor)

        previous = self._entries.get(key)
        if previous is not None:
            logger.warning(
                f"Re-registering field type '{key}', was {_describe(previous.constructor)}, "
                f"now {_describe(constructor)}"
            )
        self._entries[key] = RegistryEntry(key, constructor)
        logger.debug(f"Registered field type '{key}' -> {_describe(constructor)}")

    def register_defaults(self) -> None:
        """
        Seed the built-in field types once.

        Types already present keep their constructor. Further calls are no-ops.
        """
        if self._defaults_registered:
            return
        self._defaults_registered = True

        builtins = self._builtins
        if builtins is None:
            from fieldkit.fields import BUILTIN_FIELD_TYPES

            builtins = BUILTIN_FIELD_TYPES

        seeded = 0
        for key, constructor in builtins.items():
            if key in self._entries:
                logger.debug(f"Keeping pre-registered field type '{key}'")
                continue
            self._entries[key] = RegistryEntry(key, constructor, builtin=True)
            seeded += 1
        logger.info(f"Seeded {seeded} built-in field types ({len(self._entries)} total)")

    def unregister_type(self, field_type: str) -> bool:
        """Remove a type. Returns True if it was registered."""
        removed = self._entries.pop(field_type, None)
        if removed is not None:
            logger.debug(f"Unregistered field type '{field_type}'")
        return removed is not None

    def reset(self) -> None:
        """Drop every registration and re-arm default seeding (tests only)."""
        self._entries.clear()
        self._defaults_registered = False
        logger.debug("Field type registry reset")

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def has_type(self, field_type: str) -> bool:
        self._ensure_defaults()
        return field_type in self._entries

    def get_registered_types(self) -> List[str]:
        self._ensure_defaults()
        return list(self._entries)

    def get_constructor(self, field_type: str) -> Optional[FieldConstructor]:
        self._ensure_defaults()
        entry = self._entries.get(field_type)
        return entry.constructor if entry else None

    @property
    def defaults_registered(self) -> bool:
        return self._defaults_registered

    def __contains__(self, field_type: object) -> bool:
        return isinstance(field_type, str) and self.has_type(field_type)

    def __len__(self) -> int:
        return len(self._entries)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    def create(self, config: ConfigLike) -> Any:
        """
        Build a field instance from a declaration.

        Args:
            config: FieldConfig or flat mapping with at least ``name`` and ``type``

        Returns:
            New field instance

        Raises:
            ConfigError: ``name`` or ``type`` missing or empty
            UnknownTypeError: ``type`` is not registered
        """
        self._ensure_defaults()
        cfg = FieldConfig.from_mapping(config)

        if not cfg.name:
            raise ConfigError('Field config must include "name".', context={"type": cfg.type})
        if not cfg.type:
            raise ConfigError('Field config must include "type".', field=cfg.name)

        entry = self._entries.get(cfg.type)
        if entry is None:
            raise UnknownTypeError(cfg.type, self.get_registered_types(), field=cfg.name)

        data = dict(self.field_defaults)
        data.update(cfg.to_dict())
        return entry.constructor(cfg.name, cfg.type, data, self)

    def create_multiple(
        self, configs: Union[Mapping[str, ConfigLike], Iterable[ConfigLike]]
    ) -> Dict[str, Any]:
        """
        Build a name -> instance mapping.

        A mapping's keys fill in missing ``name`` values; later duplicates
        overwrite earlier ones.
        """
        fields: Dict[str, Any] = {}
        if isinstance(configs, Mapping):
            items = [(str(key), cfg) for key, cfg in configs.items()]
        else:
            items = [(None, cfg) for cfg in configs]

        for key, cfg in items:
            data = FieldConfig.from_mapping(cfg)
            if not data.name and key is not None:
                data = data.with_name(key)
            field = self.create(data)
            fields[field.get_name()] = field
        return fields

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _ensure_defaults(self) -> None:
        if not self._defaults_registered:
            self.register_defaults()

    def _check_capabilities(self, field_type: str, constructor: Any) -> None:
        if not callable(constructor):
            raise CapabilityError(field_type, reason="constructor is not callable")

        if inspect.isclass(constructor):
            missing = [
                name
                for name in FIELD_CAPABILITIES
                if not callable(getattr(constructor, name, None))
            ]
            if missing:
                raise CapabilityError(field_type, missing)
            if inspect.isabstract(constructor):
                abstract = sorted(getattr(constructor, "__abstractmethods__", ()))
                raise CapabilityError(field_type, abstract or None, reason="abstract class")
            return

        try:
            probe = constructor(_PROBE_NAME, field_type, {}, self)
        except Exception as e:
            raise CapabilityError(
                field_type, reason=f"probe construction failed ({type(e).__name__}: {e})"
            ) from e

        if not isinstance(probe, FieldProtocol):
            missing = [
                name for name in FIELD_CAPABILITIES if not callable(getattr(probe, name, None))
            ]
            raise CapabilityError(field_type, missing or None, reason="protocol mismatch")


def _describe(constructor: Any) -> str:
    return getattr(constructor, "__qualname__", None) or repr(constructor)


__all__ = ["FieldConstructor", "RegistryEntry", "FieldTypeRegistry"]
