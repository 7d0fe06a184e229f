"""
Protocol interfaces for fieldkit.

Defines the structural contracts every collaborator is checked against:
- FieldProtocol: the contract every field type implements
- ContainerFieldProtocol: fields that organise nested declarations
- KeyValueStore: a persistence backend (post, term or settings scope)
- ResourceHost: the host content system resources are registered with

All protocols are ``@runtime_checkable`` so the registry can verify
constructors with ``isinstance()`` before accepting them.

Example:
    >>> from fieldkit.fields.text import TextField
    >>> field = TextField("title", "text", {})
    >>> isinstance(field, FieldProtocol)
    True
"""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    List,
    Mapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)

if TYPE_CHECKING:
    from fieldkit.validation import ValidationResult


# Method names a field constructor must provide; checked by the registry.
FIELD_CAPABILITIES: Tuple[str, ...] = (
    "render",
    "sanitize",
    "validate",
    "get_schema",
    "get_name",
    "get_label",
    "get_type",
    "get_config",
    "set_config",
    "enqueue_assets",
)


# ==============================================================================
# FIELD PROTOCOLS
# ==============================================================================


@runtime_checkable
class FieldProtocol(Protocol):
    """
    Contract for every field type.

    A field instance is request scoped: the registry builds it from a config,
    a render or save pass uses it, and it is discarded afterwards.
    """

    def render(self, value: Any = None) -> str:
        """Return the edit markup for ``value``."""
        ...

    def sanitize(self, value: Any) -> Any:
        """Return the cleaned value that will be persisted."""
        ...

    def validate(self, value: Any) -> "ValidationResult":
        """Validate an already sanitized value."""
        ...

    def get_schema(self) -> Dict[str, Any]:
        """Describe the field for documentation and schema generation."""
        ...

    def get_name(self) -> str: ...

    def get_label(self) -> str: ...

    def get_type(self) -> str: ...

    def get_config(self, key: str, default: Any = None) -> Any: ...

    def set_config(self, key: str, value: Any) -> Any: ...

    def enqueue_assets(self) -> None: ...


@runtime_checkable
class ContainerFieldProtocol(FieldProtocol, Protocol):
    """
    Contract for container fields.

    Containers own no value. Their nested declarations are constructed,
    rendered, sanitized, validated and persisted as if declared at the
    top level; nesting never scopes the storage key.
    """

    def get_nested_fields(self) -> List[Dict[str, Any]]:
        """Nested field declarations, in declaration order."""
        ...

    def is_container(self) -> bool: ...


# ==============================================================================
# COLLABORATOR PROTOCOLS
# ==============================================================================


@runtime_checkable
class KeyValueStore(Protocol):
    """
    Persistence backend for one context type.

    ``scope`` is the context id for post/term stores and ``None`` for the
    flat settings store.
    """

    def get(self, scope: Any, key: str, default: Any = None) -> Any: ...

    def set(self, scope: Any, key: str, value: Any) -> None: ...

    def delete(self, scope: Any, key: str) -> None: ...

    def exists(self, scope: Any, key: str) -> bool: ...


@runtime_checkable
class ResourceHost(Protocol):
    """
    Host content system (post types, taxonomies, settings pages).

    The host alone decides whether a resource id already exists and where a
    new resource is registered.
    """

    def resource_exists(self, kind: str, resource_id: str) -> bool: ...

    def register_resource(
        self,
        kind: str,
        resource_id: str,
        args: Mapping[str, Any],
        object_type: Optional[Sequence[str]] = None,
    ) -> None: ...


__all__: list[str] = [
    "FIELD_CAPABILITIES",
    "FieldProtocol",
    "ContainerFieldProtocol",
    "KeyValueStore",
    "ResourceHost",
]
