"""Tests for fieldkit.fields.repeater."""

from typing import Any, Dict

import pytest

from fieldkit.core.exceptions import ConfigError
from fieldkit.core.registry import FieldTypeRegistry
from fieldkit.fields.base import AssetCollector, FieldKind
from fieldkit.fields.repeater import RepeaterField

LINKS: Dict[str, Any] = {
    "name": "links",
    "type": "repeater",
    "min_rows": 1,
    "max_rows": 2,
    "fields": [
        {"name": "title", "type": "text"},
        {"name": "url", "type": "url", "required": True},
    ],
}


@pytest.fixture
def links(registry: FieldTypeRegistry) -> RepeaterField:
    return registry.create(LINKS)


def test_repeater_is_a_leaf(links: RepeaterField) -> None:
    assert links.kind is FieldKind.LEAF
    assert links.get_option_name("page") == "page_links"


class TestSanitize:
    def test_rows_are_sanitized_per_sub_field(self, links: RepeaterField) -> None:
        rows = [{"title": " <b>Home</b> ", "url": " https://example.com ", "extra": "dropped"}]
        assert links.sanitize(rows) == [{"title": "Home", "url": "https://example.com"}]

    def test_empty_rows_are_dropped(self, links: RepeaterField) -> None:
        rows = [{"title": "", "url": ""}, {"title": "Docs", "url": ""}]
        assert links.sanitize(rows) == [{"title": "Docs", "url": ""}]

    def test_blank_rows_dropped_before_sanitizing(self, registry: FieldTypeRegistry) -> None:
        buttons = registry.create(
            {
                "name": "buttons",
                "type": "repeater",
                "fields": [
                    {"name": "url", "type": "url"},
                    {"name": "new_tab", "type": "checkbox"},
                    {"name": "tint", "type": "color", "default": "#000000"},
                ],
            }
        )
        assert buttons.sanitize([{"url": "", "new_tab": "", "tint": "  "}]) == []
        assert buttons.sanitize([{"new_tab": "1"}]) == [
            {"url": "", "new_tab": "1", "tint": "#000000"}
        ]

    def test_mapping_of_rows(self, links: RepeaterField) -> None:
        rows = {"0": {"title": "A", "url": "https://a.test"}, "1": {"title": "B", "url": ""}}
        assert [r["title"] for r in links.sanitize(rows)] == ["A", "B"]

    def test_non_collection_becomes_empty(self, links: RepeaterField) -> None:
        assert links.sanitize("nope") == []

    def test_sanitize_is_idempotent(self, links: RepeaterField) -> None:
        once = links.sanitize([{"title": "  A  ", "url": "https://a.test"}])
        assert links.sanitize(once) == once


class TestValidate:
    def test_row_errors(self, links: RepeaterField) -> None:
        result = links.validate([{"title": "Home", "url": ""}])
        assert result.errors == ["Row 1 - Url: Url is required."]

    def test_min_rows(self, links: RepeaterField) -> None:
        assert links.validate([]).errors == ["At least 1 row(s) required."]

    def test_max_rows(self, links: RepeaterField) -> None:
        rows = [{"title": str(i), "url": "https://a.test"} for i in range(3)]
        assert links.validate(rows).errors == ["Maximum 2 row(s) allowed."]

    def test_valid(self, links: RepeaterField) -> None:
        assert links.validate([{"title": "A", "url": "https://a.test"}]).valid

    def test_required_repeater(self, registry: FieldTypeRegistry) -> None:
        field = registry.create({**LINKS, "required": True})
        assert field.validate([]).errors == ["Links is required."]


class TestRender:
    def test_rows_and_template(self, links: RepeaterField) -> None:
        html = links.render([{"title": "Home", "url": "https://example.com"}])
        assert 'name="links[0][title]"' in html
        assert 'value="Home"' in html
        assert 'name="links[{{INDEX}}][url]"' in html
        assert "Row 1" in html

    def test_min_rows_are_padded(self, registry: FieldTypeRegistry) -> None:
        field = registry.create({**LINKS, "min_rows": 2})
        html = field.render(None)
        assert 'data-row-index="1"' in html

    def test_add_button_disabled_at_max(self, links: RepeaterField) -> None:
        rows = [{"title": "A", "url": ""}, {"title": "B", "url": ""}]
        assert "fieldkit-repeater-add\" disabled" in links.render(rows)

    def test_enqueues_sortable(self, links: RepeaterField) -> None:
        assets = AssetCollector()
        links.bind_assets(assets).enqueue_assets()
        assert assets.handles == ["sortable"]


def test_schema(links: RepeaterField) -> None:
    schema = links.get_schema()
    assert schema["min_rows"] == 1
    assert schema["max_rows"] == 2
    assert [f["name"] for f in schema["fields"]] == ["title", "url"]


def test_sub_fields_need_registry() -> None:
    field = RepeaterField("links", "repeater", {"fields": [{"name": "a", "type": "text"}]})
    with pytest.raises(ConfigError):
        field.sanitize([{"a": "x"}])


def test_broken_sub_fields_are_skipped(registry: FieldTypeRegistry) -> None:
    field = registry.create(
        {
            "name": "rows",
            "type": "repeater",
            "fields": [{"name": "a", "type": "hologram"}, {"type": "text"}, {"name": "b", "type": "text"}],
        }
    )
    assert field.sanitize([{"a": "x", "b": "y"}]) == [{"b": "y"}]
