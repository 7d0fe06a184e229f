"""
Centralised exceptions for fieldkit.

Typed hierarchy shared by the registry, the field implementations, the save
pipeline and the document loader. Hard failures (bad configuration, unknown
types, incomplete field contracts) are raised; per-field validation failures
are collected by the pipeline and only become exceptions on request.

Example:
    >>> from fieldkit.core.exceptions import FieldKitError
    >>> try:
    ...     registry.create({"type": "text"})
    ... except FieldKitError as e:
    ...     logger.error(f"Field construction failed: {e}")

Hierarchy:
    FieldKitError (base)
    ├── ConfigError
    │   ├── UnknownTypeError
    │   └── DocumentError
    ├── CapabilityError
    └── FieldValidationError
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from fieldkit.validation import ValidationResult

__all__: list[str] = [
    "FieldKitError",
    "ConfigError",
    "UnknownTypeError",
    "DocumentError",
    "CapabilityError",
    "FieldValidationError",
]


# ==============================================================================
# BASE EXCEPTION
# ==============================================================================


class FieldKitError(Exception):
    """
    Base exception for every fieldkit error.

    Attributes:
        message: Human readable message
        field: Name of the field involved (optional)
        context: Extra debugging context (optional)

    Example:
        >>> raise FieldKitError("Broken", field="price", context={"type": "number"})
    """

    def __init__(
        self,
        message: str,
        *,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field = field
        self.context = context or {}

    def __str__(self) -> str:
        """
        Format the message with field and context details.

        Example:
            >>> str(error)
            'ConfigError: Field config must include "type". [field=price]'
        """
        parts = [self.__class__.__name__, ": ", self.message]

        if self.field:
            parts.append(f" [field={self.field}]")

        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f" ({ctx_str})")

        return "".join(parts)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"field={self.field!r}, "
            f"context={self.context!r})"
        )


# ==============================================================================
# CONFIGURATION ERRORS
# ==============================================================================


class ConfigError(FieldKitError):
    """
    A required configuration key is missing or malformed.

    Raised when a field config lacks ``name`` or ``type``, or a resource
    declaration lacks ``id``. Aborts the registration call that hit it.
    """

    pass


class UnknownTypeError(ConfigError):
    """
    The field type tag is not registered.

    Attributes:
        field_type: The requested type tag
        available: Registered type tags at the time of the lookup

    Example:
        >>> registry.create({"name": "x", "type": "hologram"})
        UnknownTypeError: Unknown field type "hologram". Register it with register_type().
    """

    def __init__(
        self,
        field_type: str,
        available: Optional[List[str]] = None,
        *,
        field: Optional[str] = None,
    ) -> None:
        message = f'Unknown field type "{field_type}". Register it with register_type().'
        super().__init__(
            message,
            field=field,
            context={"available_count": len(available) if available else 0},
        )
        self.field_type = field_type
        self.available = available or []


class DocumentError(ConfigError):
    """The declarative document could not be decoded or failed schema validation."""

    def __init__(self, message: str, *, errors: Optional[List[str]] = None) -> None:
        super().__init__(message, context={"errors": len(errors)} if errors else None)
        self.errors = errors or []


# ==============================================================================
# CONTRACT ERRORS
# ==============================================================================


class CapabilityError(FieldKitError):
    """
    A constructor passed to ``register_type`` does not implement the field contract.

    Attributes:
        field_type: The type tag being registered
        missing: Names of the missing capabilities

    Example:
        >>> registry.register_type("broken", object)
        CapabilityError: Constructor for "broken" does not implement the field contract
    """

    def __init__(
        self,
        field_type: str,
        missing: Optional[List[str]] = None,
        *,
        reason: Optional[str] = None,
    ) -> None:
        message = f'Constructor for "{field_type}" does not implement the field contract'
        if missing:
            message += f": missing {', '.join(missing)}"
        elif reason:
            message += f": {reason}"
        super().__init__(message, context={"type": field_type})
        self.field_type = field_type
        self.missing = missing or []


# ==============================================================================
# VALIDATION ERRORS
# ==============================================================================


class FieldValidationError(FieldKitError):
    """
    Submitted values failed validation.

    The save pipeline never raises this on its own; it is produced by
    ``SaveReport.raise_for_errors()`` for callers that prefer exceptions.

    Attributes:
        errors: Mapping storage key -> list of messages
    """

    def __init__(
        self,
        message: str,
        *,
        errors: Optional[Dict[str, List[str]]] = None,
        result: Optional["ValidationResult"] = None,
    ) -> None:
        super().__init__(message, context={"fields": len(errors)} if errors else None)
        self.errors = errors or {}
        self.result = result
