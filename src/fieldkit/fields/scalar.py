"""Scalar field types with a fixed value format: number, date, color, upload."""

from __future__ import annotations

import datetime
import posixpath
import re
from typing import Any, ClassVar, Dict, Union
from urllib.parse import urlparse

from fieldkit.fields.base import BaseField, build_attributes, esc_attr, esc_html
from fieldkit.validation import ValidationResult, is_numeric, is_valid_url, to_number

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_HEX_RE = re.compile(r"^(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "svg", "bmp", "ico"})


def _bound_set(value: Any) -> bool:
    return value is not None and value != ""


class NumberField(BaseField):
    """
    Numeric input.

    Numeric strings become ``int``, or ``float`` when they contain a decimal
    point or exponent. ``""`` stays ``""``; non-numeric text is kept so that
    validation can report it.
    """

    type_defaults: ClassVar[Dict[str, Any]] = {"min": "", "max": "", "step": ""}

    def sanitize(self, value: Any) -> Any:
        if value is None or value == "":
            return ""
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, (int, float)):
            return value
        text = str(value).strip()
        if not is_numeric(text):
            return super().sanitize(text)
        if any(ch in text for ch in ".eE"):
            return float(text)
        return int(text)

    def validate_value(self, value: Any, result: ValidationResult) -> None:
        if value is None or value == "":
            return
        if not is_numeric(value):
            result.add(f"{self.get_label()} must be a number.")
            return
        number: Union[int, float] = to_number(value)
        minimum = self.config.get("min")
        maximum = self.config.get("max")
        if _bound_set(minimum) and is_numeric(minimum) and number < to_number(minimum):
            result.add(f"{self.get_label()} must be at least {minimum}.")
        if _bound_set(maximum) and is_numeric(maximum) and number > to_number(maximum):
            result.add(f"{self.get_label()} must be at most {maximum}.")

    def render(self, value: Any = None) -> str:
        attrs = self.base_input_attributes("number", self.current_value(value))
        for key in ("min", "max", "step"):
            if _bound_set(self.config.get(key)):
                attrs[key] = self.config[key]
        return self.wrap(f"<input{build_attributes(attrs)} />")


class DateField(BaseField):
    """ISO ``YYYY-MM-DD`` date with optional ``min``/``max`` bounds."""

    type_defaults: ClassVar[Dict[str, Any]] = {"min": "", "max": ""}

    def validate_value(self, value: Any, result: ValidationResult) -> None:
        if not value:
            return
        label = self.get_label()
        text = str(value)
        if not _DATE_RE.match(text):
            result.add(f"{label} must be a valid date in YYYY-MM-DD format.")
            return
        try:
            datetime.date.fromisoformat(text)
        except ValueError:
            result.add(f"{label} is not a valid date.")
        minimum = self.config.get("min")
        maximum = self.config.get("max")
        if minimum and text < str(minimum):
            result.add(f"{label} must be on or after {minimum}.")
        if maximum and text > str(maximum):
            result.add(f"{label} must be on or before {maximum}.")

    def render(self, value: Any = None) -> str:
        attrs = self.base_input_attributes("date", self.current_value(value))
        for key in ("min", "max"):
            if self.config.get(key):
                attrs[key] = self.config[key]
        return self.wrap(f"<input{build_attributes(attrs)} />")


class ColorField(BaseField):
    """Hex color; anything unparseable falls back to the configured default."""

    type_defaults: ClassVar[Dict[str, Any]] = {"default": "#000000", "use_picker": True}

    def sanitize(self, value: Any) -> Any:
        fallback = self.get_config("default", "#000000")
        if not isinstance(value, str):
            return fallback
        color = value.strip().lstrip("#")
        if _HEX_RE.match(color):
            return f"#{color}"
        return fallback

    def validate_value(self, value: Any, result: ValidationResult) -> None:
        if not value:
            return
        if not _HEX_RE.match(str(value).lstrip("#")):
            result.add(f"{self.get_label()} must be a valid hex color (e.g., #FF0000 or #F00).")

    def enqueue_assets(self) -> None:
        if self.config.get("use_picker"):
            self._enqueue("color-picker", "style")
            self._enqueue("color-picker", "script")

    def render(self, value: Any = None) -> str:
        attrs = self.base_input_attributes("text", self.current_value(value))
        attrs["class"] = self.css("color-picker" if self.config.get("use_picker") else "color-input")
        attrs["data-default-color"] = self.get_config("default", "#000000")
        return self.wrap(f"<input{build_attributes(attrs)} />")


def is_image_url(url: str) -> bool:
    if not url:
        return False
    path = urlparse(url).path or ""
    extension = posixpath.splitext(path)[1].lstrip(".").lower()
    return extension in IMAGE_EXTENSIONS


class UploadField(BaseField):
    """Media reference: a numeric attachment id or an absolute URL."""

    type_defaults: ClassVar[Dict[str, Any]] = {
        "button_text": "Select File",
        "remove_text": "Remove",
        "allowed_types": [],
        "multiple": False,
        "preview": True,
        "library_type": "",
    }

    def sanitize(self, value: Any) -> Any:
        if value is None or value == "" or value is False:
            return ""
        if is_numeric(value):
            return int(to_number(value))
        if isinstance(value, str) and is_valid_url(value.strip()):
            return value.strip()
        return ""

    def enqueue_assets(self) -> None:
        self._enqueue("media")

    def render(self, value: Any = None) -> str:
        current = self.current_value(value)
        has_value = current not in (None, "", 0)
        url = current if isinstance(current, str) and not is_numeric(current) else ""
        file_name = posixpath.basename(urlparse(url).path) if url else ""
        is_image = is_image_url(url)
        show_preview = bool(self.config.get("preview")) and is_image and has_value
        field_id = self.get_field_id()

        parts = [
            f'<input type="hidden" id="{esc_attr(field_id)}" '
            f'name="{esc_attr(self.get_input_name())}" value="{esc_attr(current)}" '
            f'class="{self.css("upload-value")}" />',
            f'<div class="{self.css("upload-container")}">',
            f'<div class="{self.css("upload-preview")}"{"" if show_preview else " hidden"}>',
        ]
        if show_preview:
            parts.append(
                f'<img src="{esc_attr(url)}" alt="{esc_attr(file_name)}" '
                f'style="max-width:150px;max-height:150px;" />'
            )
        parts.append("</div>")
        show_name = has_value and not is_image
        parts.append(f'<div class="{self.css("upload-filename")}"{"" if show_name else " hidden"}>')
        if show_name:
            parts.append(esc_html(file_name or current))
        parts.append("</div>")

        button = {
            "type": "button",
            "class": f"button {self.css('upload-button')}",
            "data-library-type": self.config.get("library_type") or None,
            "data-multiple": "true" if self.config.get("multiple") else None,
            "data-field-id": field_id,
        }
        parts.append(f'<div class="{self.css("upload-buttons")}">')
        parts.append(f"<button{build_attributes(button)}>{esc_html(self.config.get('button_text'))}</button>")
        parts.append(
            f' <button type="button" class="button {self.css("upload-remove")}" '
            f'data-field-id="{esc_attr(field_id)}"{"" if has_value else " hidden"}>'
            f"{esc_html(self.config.get('remove_text'))}</button>"
        )
        parts.append("</div></div>")
        return self.wrap("".join(parts))


__all__ = [
    "IMAGE_EXTENSIONS",
    "NumberField",
    "DateField",
    "ColorField",
    "UploadField",
    "is_image_url",
]
