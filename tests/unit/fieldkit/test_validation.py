"""
Tests for fieldkit.validation

Covers the value helpers, each built-in rule and the ordering contract of
run_rules: the required check short-circuits, everything else accumulates.
"""

import logging
import re

import pytest

from fieldkit.validation import (
    ValidationResult,
    compile_pattern,
    email_rule,
    evaluate_rule,
    is_empty,
    is_numeric,
    is_valid_email,
    is_valid_url,
    max_rule,
    min_rule,
    pattern_rule,
    run_rules,
    url_rule,
)


class TestValidationResult:
    def test_empty_result_is_valid(self) -> None:
        result = ValidationResult()
        assert result.valid
        assert result.ok
        assert result.as_dict() == {"valid": True, "errors": []}

    def test_errors_make_it_invalid(self) -> None:
        result = ValidationResult()
        result.add("one")
        result.extend(["two", "three"])
        assert not result.valid
        assert result.errors == ["one", "two", "three"]


class TestHelpers:
    @pytest.mark.parametrize("value", [None, "", False, [], {}, ()])
    def test_empty_values(self, value: object) -> None:
        assert is_empty(value)

    @pytest.mark.parametrize("value", [0, "0", " ", [""], True, 0.0])
    def test_present_values(self, value: object) -> None:
        assert not is_empty(value)

    @pytest.mark.parametrize("value", [0, -5, 3.5, "42", "-1.5", " 7 ", "1e3", ".5"])
    def test_numeric(self, value: object) -> None:
        assert is_numeric(value)

    @pytest.mark.parametrize("value", ["", "abc", "1,5", True, None, [], float("nan")])
    def test_not_numeric(self, value: object) -> None:
        assert not is_numeric(value)

    def test_compile_plain_pattern(self) -> None:
        assert compile_pattern(r"^\d+$").match("123")

    def test_compile_delimited_pattern_with_flags(self) -> None:
        regex = compile_pattern("/^abc$/i")
        assert regex.flags & re.IGNORECASE
        assert regex.match("ABC")

    def test_compile_delimited_pattern_with_unicode_flag(self) -> None:
        regex = compile_pattern("/^\\w+$/u")
        assert regex.pattern == "^\\w+$"
        assert regex.match("caf\u00e9")

    def test_unsupported_flag_is_ignored_with_warning(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="fieldkit"):
            regex = compile_pattern("/^ab$/iD")
        assert regex.match("AB")
        assert "unsupported regex flag 'D'" in caplog.text

    @pytest.mark.parametrize("value", ["user@example.com", "first.last+tag@sub.example.org"])
    def test_valid_email(self, value: str) -> None:
        assert is_valid_email(value)

    @pytest.mark.parametrize("value", ["user", "user@", "@example.com", "user@example", "a b@c.com"])
    def test_invalid_email(self, value: str) -> None:
        assert not is_valid_email(value)

    @pytest.mark.parametrize("value", ["https://example.com", "http://example.com/a?b=c", "ftp://host/x"])
    def test_valid_url(self, value: str) -> None:
        assert is_valid_url(value)

    @pytest.mark.parametrize("value", ["example.com", "http://", "not a url", "https://exa mple.com"])
    def test_invalid_url(self, value: str) -> None:
        assert not is_valid_url(value)


class TestRules:
    def test_min_numeric(self) -> None:
        assert min_rule(-5, 0, "Price") == "Price must be at least 0."
        assert min_rule(0, 0, "Price") is None
        assert min_rule("3", "5", "Qty") == "Qty must be at least 5."

    def test_min_string_length(self) -> None:
        assert min_rule("ab", 3, "Code") == "Code must be at least 3 characters."
        assert min_rule("abc", 3, "Code") is None

    def test_max_numeric(self) -> None:
        assert max_rule(11, 10, "Qty") == "Qty must be at most 10."
        assert max_rule(10, 10, "Qty") is None

    def test_max_string_length(self) -> None:
        assert max_rule("abcdef", 5, "Code") == "Code must be at most 5 characters."

    def test_float_parameter_is_formatted(self) -> None:
        assert min_rule(1, 2.0, "X") == "X must be at least 2."
        assert min_rule(1, 2.5, "X") == "X must be at least 2.5."

    def test_pattern(self) -> None:
        assert pattern_rule("abc", r"^\d+$", "Zip") == "Zip format is invalid."
        assert pattern_rule("123", r"^\d+$", "Zip") is None

    def test_invalid_pattern_reports_error(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="fieldkit"):
            assert pattern_rule("abc", "([", "Zip") == "Zip format is invalid."
        assert "Invalid validation pattern" in caplog.text

    def test_email_skips_empty(self) -> None:
        assert email_rule("", True, "Email") is None
        assert email_rule("nope", True, "Email") == "Email must be a valid email address."

    def test_url_skips_empty(self) -> None:
        assert url_rule("", True, "Site") is None
        assert url_rule("nope", True, "Site") == "Site must be a valid URL."

    def test_unknown_rule_passes(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.DEBUG, logger="fieldkit"):
            assert evaluate_rule("luhn", True, "123", "Card") is None
        assert "Ignoring unknown validation rule 'luhn'" in caplog.text


class TestRunRules:
    def test_required_empty_gives_exactly_one_error(self) -> None:
        result = run_rules("", {"min": 3, "pattern": r"^\d+$"}, "Code", required=True)
        assert not result.valid
        assert result.errors == ["Code is required."]

    @pytest.mark.parametrize("value", [None, "", [], False])
    def test_required_message_references_label(self, value: object) -> None:
        assert run_rules(value, {}, "Hero Title", required=True).errors == ["Hero Title is required."]

    def test_rules_accumulate_in_declaration_order(self) -> None:
        result = run_rules("ab", {"pattern": r"^\d+$", "min": 3}, "Code")
        assert result.errors == ["Code format is invalid.", "Code must be at least 3 characters."]

    def test_empty_optional_value(self) -> None:
        assert run_rules("", {"email": True, "url": True}, "Contact").valid

    def test_price_scenario(self) -> None:
        result = run_rules(-5, {"min": 0}, "Price", required=True)
        assert result.errors == ["Price must be at least 0."]
