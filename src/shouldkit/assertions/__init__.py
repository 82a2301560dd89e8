"""Assertion system for before/after change checks and matchers."""

from shouldkit.assertions.base import AssertionFailure, AssertionResult, ConfigurationError
from shouldkit.assertions.change import (
    ChangeOptions,
    TrackedExpression,
    check_change,
    check_no_change,
    parse_change_options,
    tracked,
)
from shouldkit.assertions.matchers import (
    Between,
    Exact,
    InRange,
    InstanceOf,
    Matcher,
    Pattern,
    Predicate,
    as_matcher,
)

__all__ = [
    "AssertionFailure",
    "AssertionResult",
    "Between",
    "ChangeOptions",
    "ConfigurationError",
    "Exact",
    "InRange",
    "InstanceOf",
    "Matcher",
    "Pattern",
    "Predicate",
    "TrackedExpression",
    "as_matcher",
    "check_change",
    "check_no_change",
    "parse_change_options",
    "tracked",
]
