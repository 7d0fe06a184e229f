"""Core building blocks: errors, protocols, configs, contexts and the type registry."""

from fieldkit.core.config import ConfigLike, FieldConfig, as_mapping
from fieldkit.core.context import Context, ContextId, ContextType, build_storage_key
from fieldkit.core.exceptions import (
    CapabilityError,
    ConfigError,
    DocumentError,
    FieldKitError,
    FieldValidationError,
    UnknownTypeError,
)
from fieldkit.core.protocols import (
    FIELD_CAPABILITIES,
    ContainerFieldProtocol,
    FieldProtocol,
    KeyValueStore,
    ResourceHost,
)
from fieldkit.core.registry import FieldTypeRegistry, RegistryEntry

__all__ = [
    "ConfigLike",
    "FieldConfig",
    "as_mapping",
    "Context",
    "ContextId",
    "ContextType",
    "build_storage_key",
    "FieldKitError",
    "ConfigError",
    "UnknownTypeError",
    "DocumentError",
    "CapabilityError",
    "FieldValidationError",
    "FIELD_CAPABILITIES",
    "FieldProtocol",
    "ContainerFieldProtocol",
    "KeyValueStore",
    "ResourceHost",
    "FieldTypeRegistry",
    "RegistryEntry",
]
