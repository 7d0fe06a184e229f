"""Tests for fieldkit.document: schema validation, decoding and the document model."""

import json
from pathlib import Path

import pytest

from fieldkit.core.context import ContextType
from fieldkit.core.exceptions import ConfigError, DocumentError
from fieldkit.document import (
    KIND_POST_TYPE,
    KIND_SETTINGS_PAGE,
    KIND_TAXONOMY,
    Document,
    JsonSchemaDocumentValidator,
    ResourceDeclaration,
    decode_json_document,
    field_list,
)


@pytest.fixture
def validator() -> JsonSchemaDocumentValidator:
    return JsonSchemaDocumentValidator()


# =============================================================================
# SCHEMA VALIDATION
# =============================================================================


class TestValidator:
    def test_valid_document(self, validator: JsonSchemaDocumentValidator) -> None:
        document = {
            "cpts": [
                {
                    "id": "book",
                    "args": {"public": True},
                    "fields": [
                        {"name": "isbn", "type": "text", "required": True},
                        {"name": "genre", "type": "select", "options": {"sf": "Sci-fi"}},
                        {"name": "details", "type": "group", "fields": [{"name": "pages", "type": "number"}]},
                    ],
                }
            ],
            "taxonomies": [{"id": "genre", "object_type": "book"}],
            "settings_pages": [{"id": "store-settings", "menu_title": "Store"}],
        }
        assert validator.validate(document) == []

    def test_missing_id_reports_path(self, validator: JsonSchemaDocumentValidator) -> None:
        assert validator.validate({"cpts": [{"args": {}}]}) == [
            "cpts[0]: 'id' is a required property"
        ]

    def test_select_requires_options(self, validator: JsonSchemaDocumentValidator) -> None:
        errors = validator.validate(
            {"cpts": [{"id": "book", "fields": [{"name": "genre", "type": "select"}]}]}
        )
        assert errors == ["cpts[0].fields[0]: 'options' is a required property"]

    def test_field_name_pattern(self, validator: JsonSchemaDocumentValidator) -> None:
        errors = validator.validate(
            {"cpts": [{"id": "book", "fields": [{"name": "Bad-Name", "type": "text"}]}]}
        )
        assert len(errors) == 1
        assert errors[0].startswith("cpts[0].fields[0].name: 'Bad-Name' does not match")

    def test_container_requires_fields(self, validator: JsonSchemaDocumentValidator) -> None:
        errors = validator.validate(
            {"settings_pages": [{"id": "s", "fields": [{"name": "box", "type": "metabox"}]}]}
        )
        assert errors == ["settings_pages[0].fields[0]: 'fields' is a required property"]

    def test_color_default_must_be_hex(self, validator: JsonSchemaDocumentValidator) -> None:
        errors = validator.validate(
            {"cpts": [{"id": "book", "fields": [{"name": "tint", "type": "color", "default": "red"}]}]}
        )
        assert len(errors) == 1
        assert errors[0].startswith("cpts[0].fields[0].default:")

    def test_missing_type_does_not_trigger_conditionals(
        self, validator: JsonSchemaDocumentValidator
    ) -> None:
        errors = validator.validate({"cpts": [{"id": "book", "fields": [{"name": "x"}]}]})
        assert errors == ["cpts[0].fields[0]: 'type' is a required property"]

    def test_cpt_id_pattern(self, validator: JsonSchemaDocumentValidator) -> None:
        errors = validator.validate({"cpts": [{"id": "Book-Type"}]})
        assert len(errors) == 1
        assert errors[0].startswith("cpts[0].id:")

    def test_root_must_be_object(self, validator: JsonSchemaDocumentValidator) -> None:
        errors = validator.validate([])  # type: ignore[arg-type]
        assert errors == ["<document>: [] is not of type 'object'"]


# =============================================================================
# DECODING
# =============================================================================


class TestDecode:
    def test_decode_string(self) -> None:
        assert decode_json_document('{"cpts": []}') == {"cpts": []}

    def test_decode_file(self, tmp_path: Path) -> None:
        path = tmp_path / "fields.json"
        path.write_text(json.dumps({"taxonomies": [{"id": "genre"}]}), encoding="utf-8")
        assert decode_json_document(path) == {"taxonomies": [{"id": "genre"}]}
        assert decode_json_document(str(path)) == {"taxonomies": [{"id": "genre"}]}

    def test_invalid_json(self) -> None:
        with pytest.raises(DocumentError, match=r"Invalid JSON: .*\(line 1, column"):
            decode_json_document('{"cpts": [}')

    def test_non_object_root(self) -> None:
        with pytest.raises(DocumentError, match="JSON must decode to an object"):
            decode_json_document("[1, 2]")

    def test_missing_file_is_treated_as_text(self, tmp_path: Path) -> None:
        with pytest.raises(DocumentError, match="Invalid JSON"):
            decode_json_document(str(tmp_path / "absent.json"))


# =============================================================================
# DOCUMENT MODEL
# =============================================================================


class TestFieldList:
    def test_mapping_fills_names(self) -> None:
        assert field_list({"isbn": {"type": "text"}, "pages": {"name": "page_count", "type": "number"}}) == [
            {"type": "text", "name": "isbn"},
            {"name": "page_count", "type": "number"},
        ]

    def test_drops_non_mappings(self) -> None:
        assert field_list([{"name": "a", "type": "text"}, "junk", 3]) == [{"name": "a", "type": "text"}]

    def test_empty(self) -> None:
        assert field_list(None) == []
        assert field_list([]) == []

    def test_entries_are_copies(self) -> None:
        source = [{"name": "a", "type": "text", "validation": {"min": 1}}]
        out = field_list(source)
        out[0]["validation"]["min"] = 5
        assert source[0]["validation"]["min"] == 1


class TestResourceDeclaration:
    def test_post_type(self) -> None:
        decl = ResourceDeclaration.from_mapping(KIND_POST_TYPE, {"id": "book", "args": {"public": True}})
        assert decl.resource_id == "book"
        assert decl.args == {"public": True}
        assert decl.object_type is None
        assert decl.context_type is ContextType.POST

    def test_taxonomy_object_type_defaults(self) -> None:
        decl = ResourceDeclaration.from_mapping(KIND_TAXONOMY, {"id": "genre"})
        assert decl.object_type == ["post"]
        assert decl.context_type is ContextType.TERM

    def test_taxonomy_scalar_object_type(self) -> None:
        decl = ResourceDeclaration.from_mapping(KIND_TAXONOMY, {"id": "genre", "object_type": "book"})
        assert decl.object_type == ["book"]

    def test_settings_page_properties(self) -> None:
        decl = ResourceDeclaration.from_mapping(
            KIND_SETTINGS_PAGE,
            {"id": "store", "menu_title": "Store", "fields": [{"name": "currency", "type": "text"}]},
        )
        assert decl.declares_page
        assert decl.page == {"id": "store", "menu_title": "Store"}
        assert decl.fields == [{"name": "currency", "type": "text"}]

    def test_settings_page_without_properties(self) -> None:
        decl = ResourceDeclaration.from_mapping(KIND_SETTINGS_PAGE, {"id": "general"})
        assert not decl.declares_page

    @pytest.mark.parametrize(
        "kind, label",
        [(KIND_POST_TYPE, "CPT"), (KIND_TAXONOMY, "Taxonomy"), (KIND_SETTINGS_PAGE, "Settings page")],
    )
    def test_missing_id(self, kind: str, label: str) -> None:
        with pytest.raises(ConfigError) as exc_info:
            ResourceDeclaration.from_mapping(kind, {"args": {}})
        assert exc_info.value.message == f'{label} configuration must include "id".'

    def test_entry_must_be_mapping(self) -> None:
        with pytest.raises(ConfigError, match=r"cpts\[2\] must be an object"):
            ResourceDeclaration.from_mapping(KIND_POST_TYPE, "book", 2)


class TestDocument:
    def test_sections_in_order(self) -> None:
        document = Document.from_mapping(
            {
                "settings_pages": [{"id": "store"}],
                "cpts": [{"id": "book"}, {"id": "movie"}],
                "taxonomies": [{"id": "genre"}],
            }
        )
        assert [d.resource_id for d in document.resources()] == ["book", "movie", "genre", "store"]

    def test_section_must_be_list(self) -> None:
        with pytest.raises(ConfigError, match="cpts must be a list"):
            Document.from_mapping({"cpts": {"id": "book"}})

    def test_empty_document(self) -> None:
        assert Document.from_mapping({}).resources() == []
