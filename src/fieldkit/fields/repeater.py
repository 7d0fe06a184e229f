"""
Repeater field.

A repeater is a leaf: it owns one value, a list of row mappings keyed by
sub-field name. Its ``fields`` declarations drive per-row sanitizing,
validation and rendering but are never persisted on their own.
"""

from __future__ import annotations

import logging
from typing import Any, ClassVar, Dict, Iterator, List, Mapping, Tuple, Union

from fieldkit.core.exceptions import ConfigError
from fieldkit.fields.base import BaseField, esc_attr, esc_html
from fieldkit.validation import ValidationResult, is_empty

logger = logging.getLogger(__name__)


def _is_blank(value: Any) -> bool:
    return is_empty(value) or (isinstance(value, str) and not value.strip())


class RepeaterField(BaseField):
    """
    0..N rows of the same sub-fields.

    Config:
        fields: Sub-field declarations
        min_rows / max_rows: Row bounds, 0 = unbounded
        button_label, row_label ("Row {{index}}"), collapsible, collapsed, sortable

    Example:
        >>> rep = registry.create({
        ...     "name": "links", "type": "repeater", "min_rows": 1,
        ...     "fields": [{"name": "url", "type": "url", "required": True}],
        ... })
        >>> rep.validate([{"url": ""}]).errors
        ['Row 1 - Url: Url is required.']
    """

    type_defaults: ClassVar[Dict[str, Any]] = {
        "fields": [],
        "min_rows": 0,
        "max_rows": 0,
        "button_label": "Add Row",
        "row_label": "Row {{index}}",
        "collapsible": True,
        "collapsed": False,
        "sortable": True,
    }

    def get_sub_fields(self) -> List[Dict[str, Any]]:
        return [dict(cfg) for cfg in self.config.get("fields") or [] if isinstance(cfg, Mapping)]

    @property
    def min_rows(self) -> int:
        return int(self.config.get("min_rows") or 0)

    @property
    def max_rows(self) -> int:
        return int(self.config.get("max_rows") or 0)

    def iter_sub_fields(self) -> Iterator[Tuple[str, BaseField]]:
        """Build each named sub-field; malformed declarations are skipped."""
        if self.registry is None:
            raise ConfigError(
                f"Repeater '{self.name}' cannot build sub-fields without a registry",
                field=self.name,
            )
        for cfg in self.get_sub_fields():
            sub_name = cfg.get("name")
            if not sub_name:
                continue
            try:
                yield str(sub_name), self.registry.create(cfg)
            except ConfigError as e:
                logger.debug(f"Skipping sub-field of repeater '{self.name}': {e}")

    def sanitize(self, value: Any) -> Any:
        if not isinstance(value, (list, tuple, Mapping)):
            return []
        rows = value.values() if isinstance(value, Mapping) else value
        sub_fields = list(self.iter_sub_fields())
        sanitized: List[Dict[str, Any]] = []
        for row in rows:
            if not isinstance(row, Mapping):
                continue
            # blank as submitted; sanitizers may turn blanks into "0" or a default
            if not sub_fields or all(_is_blank(row.get(name)) for name, _ in sub_fields):
                continue
            sanitized.append(
                {name: field.sanitize(row.get(name, "")) for name, field in sub_fields}
            )
        return sanitized

    def validate_value(self, value: Any, result: ValidationResult) -> None:
        rows = list(value) if isinstance(value, (list, tuple)) else []
        if self.min_rows > 0 and len(rows) < self.min_rows:
            result.add(f"At least {self.min_rows} row(s) required.")
        if self.max_rows > 0 and len(rows) > self.max_rows:
            result.add(f"Maximum {self.max_rows} row(s) allowed.")

        sub_fields = list(self.iter_sub_fields())
        for index, row in enumerate(rows, start=1):
            if not isinstance(row, Mapping):
                continue
            for name, field in sub_fields:
                sub_result = field.validate(row.get(name, ""))
                for error in sub_result.errors:
                    result.add(f"Row {index} - {field.get_label()}: {error}")

    def enqueue_assets(self) -> None:
        if self.config.get("sortable"):
            self._enqueue("sortable")

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, value: Any = None) -> str:
        rows: List[Any] = list(value) if isinstance(value, (list, tuple)) else []
        while len(rows) < self.min_rows:
            rows.append({})

        can_add = self.max_rows == 0 or len(rows) < self.max_rows
        collapsible = bool(self.config.get("collapsible"))
        collapsed = bool(self.config.get("collapsed"))

        parts = [
            f'<div class="{self.css("repeater")}" id="{esc_attr(self.get_field_id())}" '
            f'data-field-name="{esc_attr(self.get_input_name())}" '
            f'data-min-rows="{self.min_rows}" data-max-rows="{self.max_rows}" '
            f'data-sortable="{"true" if self.config.get("sortable") else "false"}" '
            f'data-collapsible="{"true" if collapsible else "false"}">',
            f'<div class="{self.css("repeater-rows")}">',
        ]
        for index, row in enumerate(rows):
            data = row if isinstance(row, Mapping) else {}
            parts.append(self.render_row(index, data, collapsible and collapsed))
        parts.append("</div>")
        parts.append(
            f'<div class="{self.css("repeater-actions")}">'
            f'<button type="button" class="button {self.css("repeater-add")}"'
            f'{"" if can_add else " disabled"}>{esc_html(self.config.get("button_label"))}</button>'
            "</div>"
        )
        parts.append(
            f'<script type="text/template" class="{self.css("repeater-template")}">'
            f'{self.render_row("{{INDEX}}", {}, False)}</script>'
        )
        parts.append("</div>")
        return self.wrap("".join(parts))

    def render_row(self, index: Union[int, str], data: Mapping[str, Any], collapsed: bool) -> str:
        display = index + 1 if isinstance(index, int) else index
        label = str(self.config.get("row_label") or "").replace("{{index}}", str(display))
        classes = self.css("repeater-row") + (" collapsed" if collapsed else "")
        base_name = self.get_input_name()

        cells: List[str] = []
        for sub_name, field in self.iter_sub_fields():
            field.set_config("input_name", f"{base_name}[{index}][{sub_name}]")
            field.set_config("field_id", f"{self.get_field_id()}-{index}-{sub_name}")
            field.set_config("hide_label", True)
            field.bind_assets(self.asset_collector)
            cells.append(
                f'<tr><th scope="row">{esc_html(field.get_label())}</th>'
                f"<td>{field.render(data.get(sub_name, ''))}</td></tr>"
            )

        return (
            f'<div class="{classes}" data-row-index="{esc_attr(index)}">'
            f'<div class="{self.css("repeater-row-header")}">'
            f'<span class="{self.css("repeater-row-label")}">{esc_html(label)}</span>'
            f'<button type="button" class="{self.css("repeater-remove")}" title="Remove"></button>'
            "</div>"
            f'<div class="{self.css("repeater-row-content")}"{" hidden" if collapsed else ""}>'
            f'<table class="form-table" role="presentation">{"".join(cells)}</table>'
            "</div></div>"
        )

    def get_schema(self) -> Dict[str, Any]:
        schema = super().get_schema()
        schema["fields"] = self.get_sub_fields()
        for key in ("min_rows", "max_rows", "button_label", "row_label", "collapsible", "collapsed", "sortable"):
            schema[key] = self.config.get(key)
        return schema


__all__ = ["RepeaterField"]
