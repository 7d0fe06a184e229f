"""Tests for the free-text field types in fieldkit.fields.text."""

import pytest

from fieldkit.fields.base import AssetCollector
from fieldkit.fields.text import (
    CustomHtmlField,
    EmailField,
    PasswordField,
    TextareaField,
    UrlField,
    WysiwygField,
)


class TestTextarea:
    def test_keeps_line_breaks(self) -> None:
        field = TextareaField("bio", "textarea")
        assert field.sanitize("  line one  \r\n<b>line</b>   two ") == "line one\nline two"

    def test_sanitize_is_idempotent(self) -> None:
        field = TextareaField("bio", "textarea")
        once = field.sanitize("a  b\n\n c ")
        assert field.sanitize(once) == once

    def test_render(self) -> None:
        html = TextareaField("bio", "textarea", {"rows": 3}).render("<hi>")
        assert 'rows="3"' in html
        assert "&lt;hi&gt;</textarea>" in html


class TestPassword:
    def test_sanitize_trims(self) -> None:
        assert PasswordField("pw", "password").sanitize("  s3cret ") == "s3cret"
        assert PasswordField("pw", "password").sanitize(None) == ""

    def test_value_is_never_rendered(self) -> None:
        html = PasswordField("pw", "password").render("s3cret")
        assert "s3cret" not in html
        assert 'type="password"' in html


class TestEmail:
    def test_sanitize_lowercases(self) -> None:
        assert EmailField("email", "email").sanitize("  John@Example.COM ") == "john@example.com"

    def test_implicit_email_rule(self) -> None:
        field = EmailField("email", "email")
        assert field.validate("not-an-email").errors == ["Email must be a valid email address."]
        assert field.validate("").valid

    def test_required(self) -> None:
        field = EmailField("email", "email", {"required": True})
        assert field.validate("").errors == ["Email is required."]


class TestUrl:
    def test_sanitize_removes_unsafe_characters(self) -> None:
        assert UrlField("site", "url").sanitize(" https://exa mple.com/ä ") == "https://example.com/"

    def test_implicit_url_rule(self) -> None:
        field = UrlField("site", "url")
        assert field.validate("example").errors == ["Site must be a valid URL."]
        assert field.validate("https://example.com").valid

    def test_render_class(self) -> None:
        assert 'class="regular-text code"' in UrlField("site", "url").render()


class TestWysiwyg:
    def test_keeps_safe_markup(self) -> None:
        field = WysiwygField("body", "wysiwyg")
        assert field.sanitize("<p><strong>Hi</strong> <em>there</em></p>") == (
            "<p><strong>Hi</strong> <em>there</em></p>"
        )
        assert field.sanitize("<h2>Title</h2><ul><li>one</li></ul>") == (
            "<h2>Title</h2><ul><li>one</li></ul>"
        )
        link = field.sanitize('<a href="https://example.com">site</a>')
        assert 'href="https://example.com"' in link

    def test_removes_unsafe_markup(self) -> None:
        field = WysiwygField("body", "wysiwyg")
        assert field.sanitize("<script>alert(1)</script><p>ok</p>") == "<p>ok</p>"
        assert field.sanitize("<style>p{}</style><div>Hi</div>") == "Hi"
        assert field.sanitize('<p onclick="steal()">Hi</p>') == "<p>Hi</p>"
        assert "javascript" not in field.sanitize('<a href="javascript:alert(1)">x</a>')

    def test_non_string_is_empty(self) -> None:
        assert WysiwygField("body", "wysiwyg").sanitize(3) == ""

    def test_length_bounds(self) -> None:
        field = WysiwygField("body", "wysiwyg", {"min": 5, "max": 8})
        assert field.validate("abc").errors == ["Content must be at least 5 characters."]
        assert field.validate("abcdefghij").errors == ["Content must not exceed 8 characters."]
        assert field.validate("abcdef").valid

    def test_required_uses_label(self) -> None:
        field = WysiwygField("body", "wysiwyg", {"required": True, "min": 5})
        assert field.validate("").errors == ["Body is required."]

    def test_enqueues_editor(self) -> None:
        assets = AssetCollector()
        WysiwygField("body", "wysiwyg").bind_assets(assets).enqueue_assets()
        assert assets.handles == ["editor"]

    def test_schema_has_editor_settings(self) -> None:
        schema = WysiwygField("body", "wysiwyg", {"max": 100}).get_schema()
        assert schema["textarea_rows"] == 10
        assert schema["max"] == 100


class TestCustomHtml:
    def test_stores_nothing(self) -> None:
        field = CustomHtmlField("notice", "custom_html", {"content": "x"})
        assert field.stores_value is False
        assert field.sanitize("anything") is None
        assert field.validate(None).valid

    @pytest.mark.parametrize(
        "raw_html, expected",
        [(False, "&lt;em&gt;Note&lt;/em&gt;"), (True, "<em>Note</em>")],
    )
    def test_content_escaping(self, raw_html: bool, expected: str) -> None:
        field = CustomHtmlField("notice", "custom_html", {"content": "<em>Note</em>", "raw_html": raw_html})
        assert expected in field.render()
