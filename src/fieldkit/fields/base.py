"""
RU: Базовые классы полей: лист (хранит одно значение) и контейнер (только вложенные объявления).
EN: Field base classes: leaf (owns one value) and container (nested declarations only).

Both bases implement the full field contract. Concrete types override
``type_defaults``, ``render`` and, where needed, ``sanitize`` and
``validate_value``.
"""

from __future__ import annotations

import copy
import html
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, ClassVar, Dict, List, Mapping, Optional

from fieldkit.core.config import ConfigLike, FieldConfig
from fieldkit.core.context import build_storage_key
from fieldkit.core.exceptions import ConfigError
from fieldkit.validation import ValidationResult, is_empty, run_rules

if TYPE_CHECKING:
    from fieldkit.core.registry import FieldTypeRegistry

logger = logging.getLogger(__name__)

DEFAULT_CSS_PREFIX = "fieldkit"

_TAG_RE = re.compile(r"<[^>]*>")
_SCRIPT_STYLE_RE = re.compile(r"<(script|style)[^>]*?>.*?</\1\s*>", re.I | re.S)
_WS_RE = re.compile(r"\s+")
_KEY_RE = re.compile(r"[^a-z0-9_\-]")


class FieldKind(str, Enum):
    LEAF = "leaf"
    CONTAINER = "container"


# ==============================================================================
# MARKUP HELPERS
# ==============================================================================


def esc_attr(text: Any) -> str:
    return html.escape("" if text is None else str(text), quote=True)


def esc_html(text: Any) -> str:
    return html.escape("" if text is None else str(text), quote=True)


def strip_tags(text: str) -> str:
    """Remove markup, including the bodies of script/style elements."""
    return _TAG_RE.sub("", _SCRIPT_STYLE_RE.sub("", text))


def sanitize_text(text: str) -> str:
    return _WS_RE.sub(" ", strip_tags(text)).strip()


def sanitize_key(key: Any) -> str:
    return _KEY_RE.sub("", str(key).lower())


def humanize(name: str) -> str:
    """``hero_image`` -> ``Hero Image``."""
    words = name.replace("_", " ").replace("-", " ").split(" ")
    return " ".join(w[:1].upper() + w[1:] for w in words)


def build_attributes(attributes: Mapping[str, Any]) -> str:
    """Render an attribute mapping; True emits a bare flag, False/None omit it."""
    parts: List[str] = []
    for key, value in attributes.items():
        if value is None or value is False:
            continue
        if value is True:
            parts.append(f" {esc_attr(key)}")
        else:
            parts.append(f' {esc_attr(key)}="{esc_attr(value)}"')
    return "".join(parts)


def field_kind(field: Any) -> FieldKind:
    """Leaf or container, also for custom types that do not subclass the bases."""
    kind = getattr(field, "kind", None)
    if isinstance(kind, FieldKind):
        return kind
    probe = getattr(field, "is_container", None)
    if callable(probe) and probe():
        return FieldKind.CONTAINER
    return FieldKind.LEAF


def storage_key_for(field: Any, prefix: str = "") -> str:
    getter = getattr(field, "get_option_name", None)
    if callable(getter):
        return getter(prefix)
    return build_storage_key(
        field.get_name(), prefix, bool(field.get_config("use_name_prefix", True))
    )


# ==============================================================================
# RENDER SUPPORT
# ==============================================================================


class AssetCollector:
    """Ordered, de-duplicated asset handles requested by fields during a render pass."""

    def __init__(self) -> None:
        self._handles: Dict[str, str] = {}

    def add(self, handle: str, kind: str = "script") -> None:
        if handle not in self._handles:
            self._handles[handle] = kind

    @property
    def handles(self) -> List[str]:
        return list(self._handles)

    def by_kind(self, kind: str) -> List[str]:
        return [h for h, k in self._handles.items() if k == kind]

    def __contains__(self, handle: object) -> bool:
        return handle in self._handles

    def __len__(self) -> int:
        return len(self._handles)


def _no_value(field: Any) -> Any:
    return None


@dataclass
class RenderScope:
    """
    What a container needs to render its nested fields.

    Attributes:
        lookup: Returns the stored value for a nested leaf
        prefix: Settings prefix; when set, nested inputs are named by storage key
        assets: Collector nested fields enqueue into
    """

    lookup: Callable[[Any], Any] = _no_value
    prefix: str = ""
    assets: Optional[AssetCollector] = field(default=None)

    def value_for(self, field: Any) -> Any:
        return self.lookup(field)

    @classmethod
    def coerce(cls, value: Any) -> "RenderScope":
        if isinstance(value, RenderScope):
            return value
        if isinstance(value, str) and value:
            return cls(prefix=value)
        return cls()


# ==============================================================================
# LEAF BASE
# ==============================================================================


class BaseField(ABC):
    """
    Leaf field: owns and persists exactly one value.

    Instance config = base defaults, then ``type_defaults``, then the supplied
    config (supplied wins).

    Example:
        >>> f = TextField("hero_title", "text", {"required": True})
        >>> f.get_label()
        'Hero Title'
        >>> f.validate("").errors
        ['Hero Title is required.']
    """

    kind: ClassVar[FieldKind] = FieldKind.LEAF
    stores_value: ClassVar[bool] = True
    type_defaults: ClassVar[Dict[str, Any]] = {}
    implicit_rules: ClassVar[Dict[str, Any]] = {}

    def __init__(
        self,
        name: str,
        field_type: str,
        config: Optional[ConfigLike] = None,
        registry: Optional["FieldTypeRegistry"] = None,
    ) -> None:
        self.name = name
        self.field_type = field_type
        self.registry = registry
        self.asset_collector: Optional[AssetCollector] = None

        supplied = FieldConfig.from_mapping(config or {}).to_dict()
        merged = self.base_defaults()
        merged.update(copy.deepcopy(self.type_defaults))
        merged.update(supplied)
        merged["name"] = name
        merged["type"] = field_type
        self.config: Dict[str, Any] = merged

        self.validation_rules: Dict[str, Any] = dict(merged.get("validation") or {})
        for rule, parameter in self.implicit_rules.items():
            self.validation_rules.setdefault(rule, parameter)

    def base_defaults(self) -> Dict[str, Any]:
        return {
            "label": humanize(self.name),
            "description": "",
            "placeholder": "",
            "default": "",
            "required": False,
            "class": "",
            "attributes": {},
            "use_name_prefix": True,
            "css_prefix": DEFAULT_CSS_PREFIX,
        }

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def get_name(self) -> str:
        return self.name

    def get_label(self) -> str:
        label = self.config.get("label")
        return "" if label is None else str(label)

    def get_type(self) -> str:
        return self.field_type

    def get_config(self, key: str, default: Any = None) -> Any:
        value = self.config.get(key)
        return default if value is None else value

    def set_config(self, key: str, value: Any) -> "BaseField":
        self.config[key] = value
        if key == "validation":
            self.validation_rules = dict(value or {})
            for rule, parameter in self.implicit_rules.items():
                self.validation_rules.setdefault(rule, parameter)
        return self

    def get_all_config(self) -> Dict[str, Any]:
        return copy.deepcopy(self.config)

    def is_container(self) -> bool:
        return self.kind is FieldKind.CONTAINER

    @property
    def required(self) -> bool:
        return bool(self.config.get("required"))

    # ------------------------------------------------------------------
    # Storage keys
    # ------------------------------------------------------------------

    def uses_name_prefix(self) -> bool:
        return bool(self.get_config("use_name_prefix", True))

    def get_option_name(self, prefix: str = "") -> str:
        return build_storage_key(self.name, prefix, self.uses_name_prefix())

    # ------------------------------------------------------------------
    # Sanitize / validate
    # ------------------------------------------------------------------

    def sanitize(self, value: Any) -> Any:
        if isinstance(value, str):
            return sanitize_text(value)
        return value

    def validate(self, value: Any) -> ValidationResult:
        result = run_rules(
            value, self.validation_rules, self.get_label(), required=self.required
        )
        if self.required and is_empty(value):
            return result
        self.validate_value(value, result)
        return result

    def validate_value(self, value: Any, result: ValidationResult) -> None:
        """Type-specific checks; append to ``result``."""

    def get_schema(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.field_type,
            "label": self.get_label(),
            "description": self.get_config("description", ""),
            "required": self.required,
            "default": self.get_config("default", ""),
            "validation": dict(self.validation_rules),
        }

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def bind_assets(self, collector: Optional[AssetCollector]) -> "BaseField":
        self.asset_collector = collector
        return self

    def enqueue_assets(self) -> None:
        """No assets by default."""

    def _enqueue(self, handle: str, kind: str = "script") -> None:
        if self.asset_collector is not None:
            self.asset_collector.add(handle, kind)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    @abstractmethod
    def render(self, value: Any = None) -> str:
        """Markup for this field with ``value`` as the current value."""

    def css(self, suffix: str = "") -> str:
        prefix = self.get_config("css_prefix", DEFAULT_CSS_PREFIX)
        return f"{prefix}-{suffix}" if suffix else prefix

    def get_field_id(self) -> str:
        return self.get_config("field_id") or self.css(f"field-{sanitize_key(self.name)}")

    def get_input_name(self) -> str:
        return self.get_config("input_name") or self.name

    def current_value(self, value: Any) -> Any:
        return self.get_config("default", "") if value is None else value

    def base_input_attributes(self, input_type: Optional[str], value: Any = None) -> Dict[str, Any]:
        attrs: Dict[str, Any] = {}
        if input_type:
            attrs["type"] = input_type
        attrs["id"] = self.get_field_id()
        attrs["name"] = self.get_input_name()
        if value is not None:
            attrs["value"] = value
        attrs["class"] = "regular-text"
        for key in ("placeholder", "maxlength", "pattern", "autocomplete"):
            if self.config.get(key) not in (None, ""):
                attrs[key] = self.config[key]
        for flag in ("required", "readonly", "disabled"):
            if self.config.get(flag):
                attrs[flag] = True
        extra = self.config.get("attributes")
        if isinstance(extra, Mapping):
            attrs.update(extra)
        return attrs

    def render_wrapper_start(self) -> str:
        classes = [self.css("field"), self.css(f"field-{self.field_type}")]
        if self.config.get("class"):
            classes.append(str(self.config["class"]))
        if self.required:
            classes.append(self.css("field-required"))
        return (
            f'<div class="{esc_attr(" ".join(classes))}" '
            f'data-field-name="{esc_attr(self.name)}" '
            f'data-field-type="{esc_attr(self.field_type)}">'
        )

    def render_wrapper_end(self) -> str:
        return "</div>"

    def render_label(self) -> str:
        if self.config.get("hide_label"):
            return ""
        label = self.get_label()
        if not label:
            return ""
        required = ' <span class="required">*</span>' if self.required else ""
        return (
            f'<label for="{esc_attr(self.get_field_id())}" '
            f'class="{self.css("field-label")}">{esc_html(label)}{required}</label>'
        )

    def render_description(self) -> str:
        description = self.config.get("description")
        if not description:
            return ""
        return (
            f'<p class="description {self.css("field-description")}">'
            f"{esc_html(description)}</p>"
        )

    def wrap(self, body: str, *, with_label: bool = True) -> str:
        """Wrapper + label + body + description."""
        return "".join(
            [
                self.render_wrapper_start(),
                self.render_label() if with_label else "",
                body,
                self.render_description(),
                self.render_wrapper_end(),
            ]
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, type={self.field_type!r})"


# ==============================================================================
# CONTAINER BASE
# ==============================================================================


class ContainerField(BaseField):
    """
    Field that owns no value and organises nested declarations.

    Nested fields are built through the registry and behave exactly as if
    they were declared at the top level of the same context.
    """

    kind: ClassVar[FieldKind] = FieldKind.CONTAINER
    stores_value: ClassVar[bool] = False

    def get_nested_fields(self) -> List[Dict[str, Any]]:
        nested = self.config.get("fields") or []
        return [copy.deepcopy(dict(cfg)) for cfg in nested if isinstance(cfg, Mapping)]

    def get_option_name(self, prefix: str = "") -> str:
        raise TypeError(f"Container field '{self.name}' has no storage key")

    def sanitize(self, value: Any) -> Any:
        return []

    def validate(self, value: Any) -> ValidationResult:
        return ValidationResult()

    def build_nested(self, config: Mapping[str, Any]) -> Optional[BaseField]:
        """Construct one nested field, or None when the entry is malformed."""
        if not config.get("name"):
            return None
        if self.registry is None:
            raise ConfigError(
                f"Container '{self.name}' cannot build nested fields without a registry",
                field=self.name,
            )
        return self.registry.create(config)

    def render_nested(
        self,
        configs: List[Dict[str, Any]],
        scope: RenderScope,
        *,
        as_table: bool = False,
    ) -> str:
        """Render nested declarations with their own stored values."""
        rows: List[str] = []
        for cfg in configs:
            try:
                nested = self.build_nested(cfg)
            except ConfigError as e:
                logger.warning(f"Cannot render nested field in '{self.name}': {e}")
                rows.append(
                    f'<div class="error"><p>Error rendering field: {esc_html(e.message)}</p></div>'
                )
                continue
            if nested is None:
                continue
            if hasattr(nested, "bind_assets"):
                nested.bind_assets(scope.assets)
            nested.enqueue_assets()

            if field_kind(nested) is FieldKind.CONTAINER:
                rows.append(nested.render(scope))
                continue

            if scope.prefix:
                nested.set_config("input_name", storage_key_for(nested, scope.prefix))
            if as_table:
                nested.set_config("hide_label", True)
                rows.append(
                    f'<tr><th scope="row">{esc_html(nested.get_label())}</th>'
                    f"<td>{nested.render(scope.value_for(nested))}</td></tr>"
                )
            else:
                rows.append(nested.render(scope.value_for(nested)))

        if as_table and rows:
            return '<table class="form-table" role="presentation">' + "".join(rows) + "</table>"
        return "".join(rows)

    def get_schema(self) -> Dict[str, Any]:
        schema = super().get_schema()
        schema["fields"] = self.get_nested_fields()
        return schema


__all__ = [
    "DEFAULT_CSS_PREFIX",
    "FieldKind",
    "field_kind",
    "storage_key_for",
    "AssetCollector",
    "RenderScope",
    "BaseField",
    "ContainerField",
    "esc_attr",
    "esc_html",
    "strip_tags",
    "sanitize_text",
    "sanitize_key",
    "humanize",
    "build_attributes",
]
