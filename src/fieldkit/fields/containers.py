"""
Container field types: tabs, metabox, group.

A container renders its nested declarations but never stores a value of
its own; the save pipeline expands it into its nested leaves.
"""

from __future__ import annotations

import copy
from typing import Any, ClassVar, Dict, List, Mapping

from fieldkit.fields.base import ContainerField, RenderScope, esc_attr, esc_html, humanize


class TabsField(ContainerField):
    """
    Nested fields grouped under tab headers.

    Config ``tabs`` is a list of ``{"id", "label", "icon"?, "description"?, "fields"}``.
    """

    type_defaults: ClassVar[Dict[str, Any]] = {
        "label": "",
        "orientation": "horizontal",
        "tabs": [],
        "default_tab": "",
    }

    @property
    def tabs(self) -> List[Dict[str, Any]]:
        return [dict(tab) for tab in self.config.get("tabs") or [] if isinstance(tab, Mapping)]

    def get_nested_fields(self) -> List[Dict[str, Any]]:
        nested: List[Dict[str, Any]] = []
        for tab in self.tabs:
            fields = tab.get("fields")
            if isinstance(fields, list):
                nested.extend(copy.deepcopy(dict(f)) for f in fields if isinstance(f, Mapping))
        return nested

    def get_default_tab(self) -> str:
        default = self.config.get("default_tab")
        if default:
            return str(default)
        tabs = self.tabs
        return str(tabs[0].get("id", "tab-0")) if tabs else ""

    def render(self, value: Any = None) -> str:
        tabs = self.tabs
        if not tabs:
            return ""
        scope = RenderScope.coerce(value)
        orientation = "vertical" if self.config.get("orientation") == "vertical" else "horizontal"
        active = self.get_default_tab()

        nav: List[str] = []
        panels: List[str] = []
        for index, tab in enumerate(tabs):
            tab_id = str(tab.get("id") or f"tab-{index}")
            tab_label = tab.get("label") or f"Tab {index + 1}"
            state = " active" if tab_id == active else ""
            icon = tab.get("icon")
            icon_html = f'<span class="dashicons {esc_attr(icon)}"></span> ' if icon else ""
            nav.append(
                f'<button type="button" class="{self.css("tab-button")}{state}" '
                f'data-tab="{esc_attr(tab_id)}">{icon_html}{esc_html(tab_label)}</button>'
            )

            panel = [f'<div class="{self.css("tab-panel")}{state}" data-tab="{esc_attr(tab_id)}">']
            if tab.get("description"):
                panel.append(f'<p class="description">{esc_html(tab["description"])}</p>')
            fields = [dict(f) for f in tab.get("fields") or [] if isinstance(f, Mapping)]
            if fields:
                panel.append(self.render_nested(fields, scope, as_table=True))
            else:
                panel.append('<p class="description">No fields configured for this tab.</p>')
            panel.append("</div>")
            panels.append("".join(panel))

        body = (
            f'<div class="{self.css("tabs")} {self.css("tabs-" + orientation)}" '
            f'id="{esc_attr(self.get_field_id())}">'
            f'<div class="{self.css("tabs-nav")}">{"".join(nav)}</div>'
            f'<div class="{self.css("tabs-content")}">{"".join(panels)}</div>'
            "</div>"
        )
        return self.wrap(body)

    def get_schema(self) -> Dict[str, Any]:
        schema = super().get_schema()
        schema["orientation"] = self.config.get("orientation")
        schema["tabs"] = self.tabs
        schema["default_tab"] = self.get_default_tab()
        return schema


class MetaboxField(ContainerField):
    """Nested fields grouped under a named box with a layout context and priority."""

    type_defaults: ClassVar[Dict[str, Any]] = {
        "metabox_id": "",
        "metabox_title": "",
        "context": "normal",
        "priority": "default",
        "fields": [],
    }

    def get_metabox_id(self) -> str:
        return str(self.config.get("metabox_id") or self.name)

    def get_metabox_title(self) -> str:
        if self.config.get("metabox_title"):
            return str(self.config["metabox_title"])
        if self.config.get("label"):
            return str(self.config["label"])
        return humanize(self.get_metabox_id())

    def get_context(self) -> str:
        return str(self.get_config("context", "normal"))

    def get_priority(self) -> str:
        return str(self.get_config("priority", "default"))

    def render(self, value: Any = None) -> str:
        fields = self.get_nested_fields()
        if not fields:
            return '<p class="description">No fields configured for this metabox.</p>'
        scope = RenderScope.coerce(value)
        containers = [f for f in fields if self._is_container_type(f)]
        body = self.render_nested(fields, scope, as_table=not containers)
        return (
            f'<div class="{self.css("metabox-fields")}" id="{esc_attr(self.get_metabox_id())}" '
            f'data-context="{esc_attr(self.get_context())}" '
            f'data-priority="{esc_attr(self.get_priority())}">{body}</div>'
        )

    def _is_container_type(self, cfg: Mapping[str, Any]) -> bool:
        if self.registry is None or not cfg.get("type"):
            return False
        constructor = self.registry.get_constructor(str(cfg["type"]))
        return getattr(constructor, "kind", None) is ContainerField.kind

    def get_schema(self) -> Dict[str, Any]:
        schema = super().get_schema()
        schema.update(
            {
                "metabox_id": self.get_metabox_id(),
                "metabox_title": self.get_metabox_title(),
                "context": self.get_context(),
                "priority": self.get_priority(),
            }
        )
        return schema


class GroupField(ContainerField):
    """Simple nested box with its own label."""

    type_defaults: ClassVar[Dict[str, Any]] = {"label": "", "description": "", "fields": []}

    def render(self, value: Any = None) -> str:
        fields = self.get_nested_fields()
        if not fields:
            return ""
        scope = RenderScope.coerce(value)
        body = f'<div class="{self.css("group-fields")}">{self.render_nested(fields, scope)}</div>'
        return "".join(
            [
                self.render_wrapper_start(),
                self.render_label(),
                self.render_description(),
                body,
                self.render_wrapper_end(),
            ]
        )


__all__ = ["TabsField", "MetaboxField", "GroupField"]
