"""Free-text field types: text, textarea, password, email, url, wysiwyg, custom_html."""

from __future__ import annotations

import re
from typing import Any, ClassVar, Dict, FrozenSet, Mapping

import nh3

from fieldkit.fields.base import (
    BaseField,
    build_attributes,
    esc_attr,
    esc_html,
    strip_tags,
)
from fieldkit.validation import ValidationResult

_URL_UNSAFE_RE = re.compile(r"[^A-Za-z0-9$\-_.+!*'(),{}|\\^~\[\]`<>#%\";/?:@&=]")
_LINE_WS_RE = re.compile(r"[ \t\f\v]+")

# Markup kept by WysiwygField.sanitize; everything else is stripped, script
# and style bodies included.
RICH_TEXT_TAGS: FrozenSet[str] = frozenset(
    {
        "p", "br", "strong", "b", "em", "i", "u", "a", "ul", "ol", "li",
        "h1", "h2", "h3", "h4", "h5", "h6", "blockquote", "code", "pre",
    }
)
RICH_TEXT_ATTRIBUTES: Mapping[str, FrozenSet[str]] = {"a": frozenset({"href", "title"})}
RICH_TEXT_URL_SCHEMES: FrozenSet[str] = frozenset({"http", "https", "mailto"})


class TextField(BaseField):
    type_defaults: ClassVar[Dict[str, Any]] = {
        "maxlength": "",
        "pattern": "",
        "autocomplete": "",
    }
    input_type = "text"

    def render(self, value: Any = None) -> str:
        attrs = self.base_input_attributes(self.input_type, self.current_value(value))
        return self.wrap(f"<input{build_attributes(attrs)} />")


class TextareaField(BaseField):
    """Multi-line text; line breaks survive sanitizing."""

    type_defaults: ClassVar[Dict[str, Any]] = {"rows": 5, "cols": 50, "maxlength": ""}

    def sanitize(self, value: Any) -> Any:
        if not isinstance(value, str):
            return value
        lines = strip_tags(value).replace("\r\n", "\n").replace("\r", "\n").split("\n")
        return "\n".join(_LINE_WS_RE.sub(" ", line).strip() for line in lines).strip()

    def render(self, value: Any = None) -> str:
        attrs = self.base_input_attributes(None)
        attrs["class"] = "large-text"
        attrs["rows"] = self.config.get("rows")
        attrs["cols"] = self.config.get("cols")
        body = f"<textarea{build_attributes(attrs)}>{esc_html(self.current_value(value))}</textarea>"
        return self.wrap(body)


class PasswordField(TextField):
    """Password input. The stored value is never echoed back into markup."""

    type_defaults: ClassVar[Dict[str, Any]] = {"maxlength": "", "autocomplete": "off"}
    input_type = "password"

    def sanitize(self, value: Any) -> Any:
        if not isinstance(value, str):
            return ""
        return value.strip()

    def render(self, value: Any = None) -> str:
        attrs = self.base_input_attributes(self.input_type, "")
        return self.wrap(f"<input{build_attributes(attrs)} />")


class EmailField(TextField):
    type_defaults: ClassVar[Dict[str, Any]] = {"maxlength": ""}
    implicit_rules: ClassVar[Dict[str, Any]] = {"email": True}
    input_type = "email"

    def sanitize(self, value: Any) -> Any:
        if not isinstance(value, str):
            return ""
        return value.strip().lower()


class UrlField(TextField):
    type_defaults: ClassVar[Dict[str, Any]] = {}
    implicit_rules: ClassVar[Dict[str, Any]] = {"url": True}
    input_type = "url"

    def sanitize(self, value: Any) -> Any:
        if not isinstance(value, str):
            return ""
        return _URL_UNSAFE_RE.sub("", value.strip())

    def render(self, value: Any = None) -> str:
        attrs = self.base_input_attributes(self.input_type, self.current_value(value))
        attrs["class"] = "regular-text code"
        return self.wrap(f"<input{build_attributes(attrs)} />")


class WysiwygField(BaseField):
    """
    Rich-text body.

    Safe markup survives sanitizing (``RICH_TEXT_TAGS``); event handler
    attributes, script/style elements and non-http(s) links do not.
    Config ``min``/``max`` bound the content length in characters.
    """

    type_defaults: ClassVar[Dict[str, Any]] = {
        "media_buttons": True,
        "teeny": False,
        "textarea_rows": 10,
        "editor_class": "",
        "wpautop": True,
        "quicktags": True,
    }

    def sanitize(self, value: Any) -> Any:
        if not isinstance(value, str):
            return ""
        return nh3.clean(
            value,
            tags=set(RICH_TEXT_TAGS),
            attributes={tag: set(attrs) for tag, attrs in RICH_TEXT_ATTRIBUTES.items()},
            url_schemes=set(RICH_TEXT_URL_SCHEMES),
        )

    def validate_value(self, value: Any, result: ValidationResult) -> None:
        length = len("" if value is None else str(value))
        minimum = self.config.get("min")
        maximum = self.config.get("max")
        if minimum and length < int(minimum):
            result.add(f"Content must be at least {int(minimum)} characters.")
        if maximum and length > int(maximum):
            result.add(f"Content must not exceed {int(maximum)} characters.")

    def enqueue_assets(self) -> None:
        self._enqueue("editor")

    def render(self, value: Any = None) -> str:
        classes = " ".join(c for c in ("large-text", self.config.get("editor_class")) if c)
        body = (
            f'<textarea id="{esc_attr(self.get_field_id())}" '
            f'name="{esc_attr(self.get_input_name())}" '
            f'rows="{esc_attr(self.config.get("textarea_rows"))}" '
            f'class="{esc_attr(classes)}">'
            f"{esc_html(self.current_value(value))}</textarea>"
        )
        return self.wrap(body)

    def get_schema(self) -> Dict[str, Any]:
        schema = super().get_schema()
        for key in ("media_buttons", "teeny", "textarea_rows", "editor_class", "wpautop", "quicktags"):
            schema[key] = self.config.get(key)
        schema["min"] = self.config.get("min")
        schema["max"] = self.config.get("max")
        return schema


class CustomHtmlField(BaseField):
    """Display-only block. Stores nothing; content is escaped unless ``raw_html``."""

    stores_value: ClassVar[bool] = False
    type_defaults: ClassVar[Dict[str, Any]] = {"content": "", "raw_html": False}

    def sanitize(self, value: Any) -> Any:
        return None

    def validate(self, value: Any) -> ValidationResult:
        return ValidationResult()

    def render(self, value: Any = None) -> str:
        content = self.config.get("content") or ""
        body = ""
        if content:
            inner = str(content) if self.config.get("raw_html") else esc_html(content)
            body = f'<div class="{self.css("custom-html-content")}">{inner}</div>'
        return self.wrap(body)


__all__ = [
    "TextField",
    "TextareaField",
    "PasswordField",
    "EmailField",
    "UrlField",
    "WysiwygField",
    "CustomHtmlField",
]
