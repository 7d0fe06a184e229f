"""Tests for fieldkit.core.context."""

import pytest

from fieldkit.core.context import Context, ContextType, build_storage_key


class TestContextType:
    @pytest.mark.parametrize(
        "token, expected",
        [
            ("post", ContextType.POST),
            ("TERM", ContextType.TERM),
            (" settings ", ContextType.SETTINGS),
            (ContextType.POST, ContextType.POST),
        ],
    )
    def test_parse(self, token: object, expected: ContextType) -> None:
        assert ContextType.parse(token) is expected  # type: ignore[arg-type]

    def test_parse_unknown(self) -> None:
        assert ContextType.parse("comment") is None


class TestContext:
    def test_of_parses_type(self) -> None:
        context = Context.of("term", 7)
        assert context.context_type is ContextType.TERM
        assert context.context_id == 7

    def test_of_rejects_unknown_type(self) -> None:
        with pytest.raises(ValueError):
            Context.of("user", 1)

    def test_only_settings_prefix_keys(self) -> None:
        assert Context.of("post", 42).prefix == ""
        assert Context.of("term", 3).prefix == ""
        assert Context.of("settings", "store-settings").prefix == "store-settings"

    def test_storage_key(self) -> None:
        settings = Context.of("settings", "store-settings")
        assert settings.storage_key("currency") == "store-settings_currency"
        assert settings.storage_key("currency", use_name_prefix=False) == "currency"
        assert Context.of("post", 42).storage_key("subtitle") == "subtitle"

    def test_is_hashable(self) -> None:
        assert len({Context.of("post", 1), Context.of("post", 1)}) == 1


def test_build_storage_key() -> None:
    assert build_storage_key("a") == "a"
    assert build_storage_key("a", "page") == "page_a"
    assert build_storage_key("a", "page", False) == "a"
