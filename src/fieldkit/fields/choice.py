"""Option-based field types: select, radio, checkbox."""

from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Mapping

from fieldkit.fields.base import (
    BaseField,
    build_attributes,
    esc_attr,
    esc_html,
    sanitize_key,
    sanitize_text,
)
from fieldkit.validation import ValidationResult, is_empty


def normalize_options(options: Any) -> Dict[str, str]:
    """
    Option value -> label, in declaration order.

    Accepts a mapping, a list of scalars (value doubles as label) or a list
    of ``{"value": ..., "label": ...}`` mappings.
    """
    if isinstance(options, Mapping):
        return {str(k): str(v) for k, v in options.items()}
    out: Dict[str, str] = {}
    for item in options or []:
        if isinstance(item, Mapping):
            value = item.get("value", item.get("label", ""))
            out[str(value)] = str(item.get("label", value))
        else:
            out[str(item)] = str(item)
    return out


class ChoiceField(BaseField):
    """Shared option handling."""

    type_defaults: ClassVar[Dict[str, Any]] = {"options": {}}

    @property
    def options(self) -> Dict[str, str]:
        return normalize_options(self.config.get("options"))

    def is_option(self, value: Any) -> bool:
        return not isinstance(value, (list, dict)) and str(value) in self.options

    def sanitize_single(self, value: Any) -> Any:
        if value is None or not self.is_option(value):
            return ""
        return sanitize_text(value) if isinstance(value, str) else value

    def invalid_option_error(self) -> str:
        return f"{self.get_label()} contains an invalid option."

    def get_schema(self) -> Dict[str, Any]:
        schema = super().get_schema()
        schema["options"] = self.options
        return schema


class SelectField(ChoiceField):
    type_defaults: ClassVar[Dict[str, Any]] = {"options": {}, "multiple": False, "size": 1}

    @property
    def multiple(self) -> bool:
        return bool(self.config.get("multiple"))

    def sanitize(self, value: Any) -> Any:
        if self.multiple and isinstance(value, (list, tuple)):
            return [self.sanitize_single(v) for v in value]
        return self.sanitize_single(value)

    def validate_value(self, value: Any, result: ValidationResult) -> None:
        if self.multiple and isinstance(value, (list, tuple)):
            values: List[Any] = list(value)
        else:
            values = [value]
        for item in values:
            if not is_empty(item) and not self.is_option(item):
                result.add(self.invalid_option_error())
                break

    def render(self, value: Any = None) -> str:
        current = self.current_value(value)
        if self.multiple and not isinstance(current, (list, tuple)):
            current = [current] if current else []

        attrs: Dict[str, Any] = {
            "id": self.get_field_id(),
            "name": self.get_input_name() + ("[]" if self.multiple else ""),
            "class": "regular-text",
        }
        if self.multiple:
            attrs["multiple"] = True
            size = int(self.config.get("size") or 1)
            attrs["size"] = size if size > 1 else 5
        attrs["required"] = bool(self.config.get("required"))
        attrs["disabled"] = bool(self.config.get("disabled"))

        selected_values = {str(v) for v in current} if self.multiple else {str(current)}
        options = "".join(
            f'<option value="{esc_attr(opt)}"{" selected" if opt in selected_values else ""}>'
            f"{esc_html(label)}</option>"
            for opt, label in self.options.items()
        )
        return self.wrap(f"<select{build_attributes(attrs)}>{options}</select>")


class RadioField(ChoiceField):
    type_defaults: ClassVar[Dict[str, Any]] = {"options": {}, "inline": False}

    def sanitize(self, value: Any) -> Any:
        return self.sanitize_single(value)

    def validate_value(self, value: Any, result: ValidationResult) -> None:
        if not is_empty(value) and not self.is_option(value):
            result.add(self.invalid_option_error())

    def render(self, value: Any = None) -> str:
        current = str(self.current_value(value))
        inline = bool(self.config.get("inline"))
        wrapper = self.css("radio-inline" if inline else "radio-stacked")
        items: List[str] = []
        for opt, label in self.options.items():
            attrs = {
                "type": "radio",
                "id": f"{self.get_field_id()}-{sanitize_key(opt)}",
                "name": self.get_input_name(),
                "value": opt,
                "checked": opt == current,
                "required": bool(self.config.get("required")),
                "disabled": bool(self.config.get("disabled")),
            }
            items.append(f"<label><input{build_attributes(attrs)} /> {esc_html(label)}</label>")
            if not inline:
                items.append("<br />")
        return self.wrap(f'<fieldset><div class="{esc_attr(wrapper)}">{"".join(items)}</div></fieldset>')


class CheckboxField(ChoiceField):
    """
    Single checkbox (no options) stores ``"1"``/``"0"``; with options it stores
    the checked option values, filtered to the declared options.
    """

    type_defaults: ClassVar[Dict[str, Any]] = {"options": {}, "inline": False}

    @property
    def is_group(self) -> bool:
        return bool(self.options)

    def sanitize(self, value: Any) -> Any:
        if not self.is_group:
            return "1" if value not in (None, "", "0", 0, False, [], {}) else "0"
        if not isinstance(value, (list, tuple)):
            return []
        allowed = self.options
        return [v for v in value if not isinstance(v, (list, dict)) and str(v) in allowed]

    def validate(self, value: Any) -> ValidationResult:
        # an unchecked single box is submitted as "0"
        if not self.is_group and self.required and str(value) == "0":
            return ValidationResult([f"{self.get_label()} is required."])
        return super().validate(value)

    def render(self, value: Any = None) -> str:
        current = self.current_value(value)
        if not self.is_group:
            attrs = {
                "type": "checkbox",
                "id": self.get_field_id(),
                "name": self.get_input_name(),
                "value": "1",
                "checked": current not in (None, "", "0", 0, False),
                "disabled": bool(self.config.get("disabled")),
            }
            body = (
                f'<input type="hidden" name="{esc_attr(self.get_input_name())}" value="0" />'
                f'<label for="{esc_attr(self.get_field_id())}">'
                f"<input{build_attributes(attrs)} /> {esc_html(self.get_label())}</label>"
            )
            return self.wrap(body, with_label=False)

        checked = {str(v) for v in current} if isinstance(current, (list, tuple)) else set()
        inline = bool(self.config.get("inline"))
        items: List[str] = []
        for opt, label in self.options.items():
            attrs = {
                "type": "checkbox",
                "id": f"{self.get_field_id()}-{sanitize_key(opt)}",
                "name": f"{self.get_input_name()}[]",
                "value": opt,
                "checked": opt in checked,
                "disabled": bool(self.config.get("disabled")),
            }
            items.append(f"<label><input{build_attributes(attrs)} /> {esc_html(label)}</label>")
            if not inline:
                items.append("<br />")
        wrapper = self.css("checkbox-inline" if inline else "checkbox-stacked")
        return self.wrap(f'<fieldset><div class="{esc_attr(wrapper)}">{"".join(items)}</div></fieldset>')


__all__ = ["normalize_options", "ChoiceField", "SelectField", "RadioField", "CheckboxField"]
