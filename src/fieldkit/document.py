"""
Declarative documents.

A document lists resources by kind::

    {
        "cpts": [{"id": "book", "args": {...}, "fields": [...]}],
        "taxonomies": [{"id": "genre", "object_type": ["book"], "fields": [...]}],
        "settings_pages": [{"id": "store-settings", "menu_title": "Store", "fields": [...]}]
    }

JSON input is decoded here and checked by a ``DocumentValidator`` before it
reaches the manager; mapping input goes straight to ``Document.from_mapping``.
"""

from __future__ import annotations

import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple, Union

from jsonschema import Draft7Validator

from fieldkit.core.context import ContextType
from fieldkit.core.exceptions import ConfigError, DocumentError

logger = logging.getLogger(__name__)

# Resource kinds as passed to ``ResourceHost``.
KIND_POST_TYPE = "post_type"
KIND_TAXONOMY = "taxonomy"
KIND_SETTINGS_PAGE = "settings_page"

SECTION_KINDS: Dict[str, str] = {
    "cpts": KIND_POST_TYPE,
    "taxonomies": KIND_TAXONOMY,
    "settings_pages": KIND_SETTINGS_PAGE,
}

KIND_CONTEXTS: Dict[str, ContextType] = {
    KIND_POST_TYPE: ContextType.POST,
    KIND_TAXONOMY: ContextType.TERM,
    KIND_SETTINGS_PAGE: ContextType.SETTINGS,
}

_KIND_LABELS: Dict[str, str] = {
    KIND_POST_TYPE: "CPT",
    KIND_TAXONOMY: "Taxonomy",
    KIND_SETTINGS_PAGE: "Settings page",
}

# Any of these on a settings page declaration means "create a new page".
SETTINGS_PAGE_PROPERTIES: Tuple[str, ...] = (
    "page_title",
    "menu_title",
    "capability",
    "menu_slug",
    "callback",
    "icon_url",
    "position",
    "parent_slug",
)

_FIELD_NAME_PATTERN = "^[a-z_][a-z0-9_]*$"
_HEX_COLOR_PATTERN = "^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$"
_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"

DOCUMENT_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "cpts": {"type": "array", "items": {"$ref": "#/definitions/post_type"}},
        "taxonomies": {"type": "array", "items": {"$ref": "#/definitions/taxonomy"}},
        "settings_pages": {"type": "array", "items": {"$ref": "#/definitions/settings_page"}},
    },
    "definitions": {
        "fields": {"type": "array", "items": {"$ref": "#/definitions/field"}},
        "post_type": {
            "type": "object",
            "required": ["id"],
            "properties": {
                "id": {"type": "string", "pattern": "^[a-z_]{1,20}$"},
                "args": {"type": "object"},
                "fields": {"$ref": "#/definitions/fields"},
            },
        },
        "taxonomy": {
            "type": "object",
            "required": ["id"],
            "properties": {
                "id": {"type": "string", "pattern": "^[a-z_]{1,32}$"},
                "args": {"type": "object"},
                "object_type": {
                    "oneOf": [
                        {"type": "string", "minLength": 1},
                        {"type": "array", "items": {"type": "string", "minLength": 1}},
                    ]
                },
                "fields": {"$ref": "#/definitions/fields"},
            },
        },
        "settings_page": {
            "type": "object",
            "required": ["id"],
            "properties": {
                "id": {"type": "string", "minLength": 1},
                "page_title": {"type": "string"},
                "menu_title": {"type": "string"},
                "capability": {"type": "string"},
                "menu_slug": {"type": "string"},
                "icon_url": {"type": "string"},
                "position": {"type": ["integer", "number", "null"]},
                "parent_slug": {"type": "string"},
                "fields": {"$ref": "#/definitions/fields"},
            },
        },
        "options": {"type": ["object", "array"], "minProperties": 1, "minItems": 1},
        "field": {
            "type": "object",
            "required": ["name", "type"],
            "properties": {
                "name": {"type": "string", "pattern": _FIELD_NAME_PATTERN, "maxLength": 64},
                "type": {"type": "string", "minLength": 1},
                "label": {"type": "string"},
                "description": {"type": "string"},
                "placeholder": {"type": "string"},
                "required": {"type": "boolean"},
                "validation": {"type": "object"},
                "use_name_prefix": {"type": "boolean"},
                "class": {"type": "string", "pattern": r"^[a-zA-Z0-9_-]+(\s+[a-zA-Z0-9_-]+)*$"},
                "fields": {"$ref": "#/definitions/fields"},
                "tabs": {
                    "type": "array",
                    "minItems": 1,
                    "items": {
                        "type": "object",
                        "required": ["id"],
                        "properties": {
                            "id": {"type": "string", "minLength": 1},
                            "label": {"type": "string"},
                            "fields": {"$ref": "#/definitions/fields"},
                        },
                    },
                },
                "min_rows": {"type": "integer", "minimum": 0},
                "max_rows": {"type": "integer", "minimum": 0},
            },
            "allOf": [
                {
                    "if": {"properties": {"type": {"enum": ["select", "radio"]}}, "required": ["type"]},
                    "then": {
                        "required": ["options"],
                        "properties": {"options": {"$ref": "#/definitions/options"}},
                    },
                },
                {
                    "if": {"properties": {"type": {"const": "checkbox"}}, "required": ["type"]},
                    "then": {"properties": {"options": {"$ref": "#/definitions/options"}}},
                },
                {
                    "if": {"properties": {"type": {"const": "number"}}, "required": ["type"]},
                    "then": {
                        "properties": {
                            "min": {"type": ["number", "string"], "pattern": r"^-?\d+(\.\d+)?$"},
                            "max": {"type": ["number", "string"], "pattern": r"^-?\d+(\.\d+)?$"},
                            "step": {"type": ["number", "string"], "pattern": r"^\d+(\.\d+)?$"},
                        }
                    },
                },
                {
                    "if": {"properties": {"type": {"const": "date"}}, "required": ["type"]},
                    "then": {
                        "properties": {
                            "min": {"type": "string", "pattern": _DATE_PATTERN},
                            "max": {"type": "string", "pattern": _DATE_PATTERN},
                        }
                    },
                },
                {
                    "if": {"properties": {"type": {"const": "color"}}, "required": ["type"]},
                    "then": {"properties": {"default": {"type": "string", "pattern": _HEX_COLOR_PATTERN}}},
                },
                {
                    "if": {"properties": {"type": {"const": "tabs"}}, "required": ["type"]},
                    "then": {"required": ["tabs"]},
                },
                {
                    "if": {"properties": {"type": {"enum": ["metabox", "group", "repeater"]}}, "required": ["type"]},
                    "then": {"required": ["fields"]},
                },
            ],
        },
    },
}


# ==============================================================================
# VALIDATION COLLABORATOR
# ==============================================================================


class DocumentValidator(Protocol):
    """Returns a list of human readable problems; empty means valid."""

    def validate(self, data: Mapping[str, Any]) -> List[str]: ...


def _format_path(path: Sequence[Any]) -> str:
    out = ""
    for part in path:
        if isinstance(part, int):
            out += f"[{part}]"
        else:
            out += f".{part}" if out else str(part)
    return out or "<document>"


class JsonSchemaDocumentValidator:
    """
    ``DocumentValidator`` backed by ``jsonschema`` and ``DOCUMENT_SCHEMA``.

    Example:
        >>> JsonSchemaDocumentValidator().validate({"cpts": [{"args": {}}]})
        ["cpts[0]: 'id' is a required property"]
    """

    def __init__(self, schema: Optional[Mapping[str, Any]] = None) -> None:
        self.schema = dict(schema) if schema is not None else DOCUMENT_SCHEMA
        Draft7Validator.check_schema(self.schema)
        self._validator = Draft7Validator(self.schema)

    def validate(self, data: Mapping[str, Any]) -> List[str]:
        errors = sorted(self._validator.iter_errors(data), key=lambda e: list(e.absolute_path))
        return [f"{_format_path(list(e.absolute_path))}: {e.message}" for e in errors]


# ==============================================================================
# DECODING
# ==============================================================================


def decode_json_document(path_or_json: Union[str, Path]) -> Dict[str, Any]:
    """
    Decode a JSON document from a file path or a JSON string.

    Raises:
        DocumentError: Unreadable file, invalid JSON or a non-object root
    """
    text: str
    candidate = Path(path_or_json) if isinstance(path_or_json, Path) else None
    if candidate is None and isinstance(path_or_json, str) and not path_or_json.lstrip().startswith(("{", "[")):
        candidate = Path(path_or_json)

    if candidate is not None and candidate.is_file():
        try:
            text = candidate.read_text(encoding="utf-8")
        except OSError as e:
            raise DocumentError(f"Unable to read file: {candidate} ({e})") from e
        logger.debug(f"Loaded document from {candidate}")
    else:
        text = str(path_or_json)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentError(f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})") from e

    if not isinstance(data, dict):
        raise DocumentError("JSON must decode to an object")
    return data


# ==============================================================================
# DOCUMENT MODEL
# ==============================================================================


def field_list(fields: Any) -> List[Dict[str, Any]]:
    """
    Normalise a ``fields`` value to a list of declarations.

    A mapping keyed by field name fills in missing ``name`` values; entries
    that are not mappings are dropped.
    """
    if not fields:
        return []
    if isinstance(fields, Mapping):
        items = [(str(key), value) for key, value in fields.items()]
    else:
        items = [(None, value) for value in fields]

    out: List[Dict[str, Any]] = []
    for key, value in items:
        if not isinstance(value, Mapping):
            continue
        entry = copy.deepcopy(dict(value))
        if key is not None and not entry.get("name"):
            entry["name"] = key
        out.append(entry)
    return out


@dataclass(frozen=True)
class ResourceDeclaration:
    """
    One resource of a document.

    Attributes:
        kind: ``post_type``, ``taxonomy`` or ``settings_page``
        resource_id: Identifier handed to the host
        args: Registration arguments for a new resource
        fields: Field declarations attached to the resource
        object_type: Post types a taxonomy attaches to
        page: Settings page properties (everything except ``fields``)
    """

    kind: str
    resource_id: str
    args: Dict[str, Any] = field(default_factory=dict)
    fields: List[Dict[str, Any]] = field(default_factory=list)
    object_type: Optional[List[str]] = None
    page: Dict[str, Any] = field(default_factory=dict)

    @property
    def context_type(self) -> ContextType:
        return KIND_CONTEXTS[self.kind]

    @property
    def declares_page(self) -> bool:
        """True when a settings page declaration carries page properties."""
        return any(self.page.get(prop) is not None for prop in SETTINGS_PAGE_PROPERTIES)

    @classmethod
    def from_mapping(cls, kind: str, data: Any, index: int = 0) -> "ResourceDeclaration":
        section = next((s for s, k in SECTION_KINDS.items() if k == kind), kind)
        if not isinstance(data, Mapping):
            raise ConfigError(f"{section}[{index}] must be an object")
        resource_id = data.get("id")
        if not resource_id:
            raise ConfigError(
                f'{_KIND_LABELS.get(kind, kind)} configuration must include "id".',
                context={"section": section, "index": index},
            )

        fields = field_list(data.get("fields"))
        args = copy.deepcopy(dict(data.get("args") or {}))

        object_type: Optional[List[str]] = None
        page: Dict[str, Any] = {}
        if kind == KIND_TAXONOMY:
            raw = data.get("object_type", ["post"])
            object_type = [str(t) for t in raw] if isinstance(raw, (list, tuple)) else [str(raw)]
        elif kind == KIND_SETTINGS_PAGE:
            page = {k: copy.deepcopy(v) for k, v in data.items() if k != "fields"}

        return cls(kind, str(resource_id), args, fields, object_type, page)


@dataclass(frozen=True)
class Document:
    """Parsed declarative document, resources in declaration order per section."""

    cpts: List[ResourceDeclaration] = field(default_factory=list)
    taxonomies: List[ResourceDeclaration] = field(default_factory=list)
    settings_pages: List[ResourceDeclaration] = field(default_factory=list)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Document":
        """
        Raises:
            ConfigError: A resource lacks ``id`` or a section is not a list
        """
        if not isinstance(data, Mapping):
            raise ConfigError("Document must be a mapping")
        sections: Dict[str, List[ResourceDeclaration]] = {}
        for section, kind in SECTION_KINDS.items():
            entries = data.get(section) or []
            if not isinstance(entries, (list, tuple)):
                raise ConfigError(f"{section} must be a list")
            sections[section] = [
                ResourceDeclaration.from_mapping(kind, entry, i) for i, entry in enumerate(entries)
            ]
        return cls(**sections)

    def resources(self) -> List[ResourceDeclaration]:
        return [*self.cpts, *self.taxonomies, *self.settings_pages]


__all__ = [
    "KIND_POST_TYPE",
    "KIND_TAXONOMY",
    "KIND_SETTINGS_PAGE",
    "SECTION_KINDS",
    "KIND_CONTEXTS",
    "SETTINGS_PAGE_PROPERTIES",
    "DOCUMENT_SCHEMA",
    "DocumentValidator",
    "JsonSchemaDocumentValidator",
    "decode_json_document",
    "field_list",
    "ResourceDeclaration",
    "Document",
]
