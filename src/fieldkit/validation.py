"""RU: Движок правил валидации полей: чистые функции, одно правило на одно значение.
EN: Field validation rule engine: pure functions, one declared rule against one value.

Rules are looked up by name in ``BUILTIN_RULES`` and evaluated in the order the
field config declares them. Every rule returns an error message or ``None``.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional
from urllib.parse import urlparse

logger = logging.getLogger(__name__)

RuleFn = Callable[[Any, Any, str], Optional[str]]

_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")
_DELIMITED_RE = re.compile(r"^/(?P<body>.*)/(?P<flags>[imsxuADSUXJn]*)$", re.S)
_EMAIL_RE = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)
_REGEX_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL, "x": re.VERBOSE}
# Python str patterns are always unicode-aware
_IGNORED_FLAGS = frozenset("u")


class ValidationResult:
    """
    Result of validating one value.
    errors: ordered list of messages; the value is valid iff it is empty.
    """

    def __init__(self, errors: Optional[Iterable[str]] = None) -> None:
        self.errors: List[str] = list(errors or [])

    def add(self, message: str) -> None:
        self.errors.append(message)

    def extend(self, messages: Iterable[str]) -> None:
        self.errors.extend(messages)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def ok(self) -> bool:
        return self.valid

    def as_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors)}

    def __repr__(self) -> str:
        return f"ValidationResult(valid={self.valid}, errors={self.errors!r})"


# ==============================================================================
# VALUE HELPERS
# ==============================================================================


def is_empty(value: Any) -> bool:
    """Empty for the required check: None, "", False and empty collections.

    Numeric zero and the string "0" are present values.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) == 0
    return False


def is_numeric(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        return bool(_NUMERIC_RE.match(value))
    return False


def to_number(value: Any) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return float(str(value).strip())


def _fmt(parameter: Any) -> str:
    if isinstance(parameter, float) and parameter.is_integer():
        return str(int(parameter))
    return str(parameter)


def compile_pattern(pattern: str) -> "re.Pattern[str]":
    """Compile a plain regex or a ``/body/flags`` delimited one."""
    match = _DELIMITED_RE.match(pattern)
    if match:
        flags = 0
        for flag in match.group("flags"):
            if flag in _REGEX_FLAGS:
                flags |= _REGEX_FLAGS[flag]
            elif flag not in _IGNORED_FLAGS:
                logger.warning(f"Ignoring unsupported regex flag '{flag}' in pattern {pattern!r}")
        return re.compile(match.group("body"), flags)
    return re.compile(pattern)


def is_valid_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value)) and len(value) <= 254


def is_valid_url(value: str) -> bool:
    if any(ch.isspace() for ch in value):
        return False
    parsed = urlparse(value)
    if not parsed.scheme or not re.fullmatch(r"[A-Za-z][A-Za-z0-9+.-]*", parsed.scheme):
        return False
    return bool(parsed.netloc)


# ==============================================================================
# RULES
# ==============================================================================


def min_rule(value: Any, parameter: Any, label: str) -> Optional[str]:
    if is_numeric(value) and is_numeric(parameter):
        if to_number(value) < to_number(parameter):
            return f"{label} must be at least {_fmt(parameter)}."
        return None
    if isinstance(value, str) and is_numeric(parameter):
        if len(value) < to_number(parameter):
            return f"{label} must be at least {_fmt(parameter)} characters."
    return None


def max_rule(value: Any, parameter: Any, label: str) -> Optional[str]:
    if is_numeric(value) and is_numeric(parameter):
        if to_number(value) > to_number(parameter):
            return f"{label} must be at most {_fmt(parameter)}."
        return None
    if isinstance(value, str) and is_numeric(parameter):
        if len(value) > to_number(parameter):
            return f"{label} must be at most {_fmt(parameter)} characters."
    return None


def pattern_rule(value: Any, parameter: Any, label: str) -> Optional[str]:
    if not isinstance(value, str) or not parameter:
        return None
    try:
        regex = compile_pattern(str(parameter))
    except re.error as e:
        logger.warning(f"Invalid validation pattern {parameter!r} for {label}: {e}")
        return f"{label} format is invalid."
    if not regex.search(value):
        return f"{label} format is invalid."
    return None


def email_rule(value: Any, parameter: Any, label: str) -> Optional[str]:
    # emptiness is the required check's job
    if not parameter or is_empty(value):
        return None
    if not isinstance(value, str) or not is_valid_email(value):
        return f"{label} must be a valid email address."
    return None


def url_rule(value: Any, parameter: Any, label: str) -> Optional[str]:
    if not parameter or is_empty(value):
        return None
    if not isinstance(value, str) or not is_valid_url(value):
        return f"{label} must be a valid URL."
    return None


BUILTIN_RULES: Dict[str, RuleFn] = {
    "min": min_rule,
    "max": max_rule,
    "pattern": pattern_rule,
    "email": email_rule,
    "url": url_rule,
}


def evaluate_rule(rule: str, parameter: Any, value: Any, label: str) -> Optional[str]:
    """Evaluate one declared rule; unknown rule names pass."""
    fn = BUILTIN_RULES.get(rule)
    if fn is None:
        logger.debug(f"Ignoring unknown validation rule '{rule}' for {label}")
        return None
    return fn(value, parameter, label)


def run_rules(
    value: Any,
    rules: Mapping[str, Any],
    label: str,
    *,
    required: bool = False,
) -> ValidationResult:
    """
    Required check first, then every declared rule in order.

    A failed required check is the only error reported. Otherwise all rules
    run and their errors accumulate.

    Example:
        >>> run_rules(-5, {"min": 0}, "Price", required=True).errors
        ['Price must be at least 0.']
    """
    result = ValidationResult()
    if required and is_empty(value):
        result.add(f"{label} is required.")
        return result
    for rule, parameter in rules.items():
        message = evaluate_rule(rule, parameter, value, label)
        if message:
            result.add(message)
    return result


__all__ = [
    "RuleFn",
    "ValidationResult",
    "BUILTIN_RULES",
    "is_empty",
    "is_numeric",
    "to_number",
    "compile_pattern",
    "is_valid_email",
    "is_valid_url",
    "min_rule",
    "max_rule",
    "pattern_rule",
    "email_rule",
    "url_rule",
    "evaluate_rule",
    "run_rules",
]
