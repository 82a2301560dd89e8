"""Tests for the before/after change checks."""

import re
from types import SimpleNamespace

import pytest

from shouldkit.assertions.base import AssertionFailure, ConfigurationError
from shouldkit.assertions.change import (
    ChangeOptions,
    check_change,
    check_no_change,
    parse_change_options,
    tracked,
)
from shouldkit.assertions.matchers import Between


def _opts(**options) -> ChangeOptions:
    return parse_change_options(options)


# --- parse_change_options ---


def test_parse_accepts_known_options():
    opts = _opts(by=1, to=2, **{"from": 1})
    assert opts.has_by and opts.has_from and opts.has_to
    assert opts.from_ == 1


def test_parse_accepts_from_underscore():
    opts = _opts(from_="old")
    assert opts.has_from
    assert opts.from_ == "old"


def test_parse_no_options_sets_nothing():
    opts = _opts()
    assert not opts.has_by
    assert not opts.has_from
    assert not opts.has_to
    assert opts.describe() == ""


def test_parse_rejects_unknown_option_naming_it():
    with pytest.raises(ConfigurationError, match="unknown_option"):
        _opts(unknown_option=1)


def test_parse_rejects_non_numeric_by():
    with pytest.raises(ConfigurationError, match="by"):
        _opts(by="1")


def test_parse_rejects_bool_by():
    with pytest.raises(ConfigurationError, match="numeric"):
        _opts(by=True)


def test_to_none_counts_as_given():
    opts = _opts(to=None)
    assert opts.has_to


def test_describe_lists_constraints_in_order():
    opts = _opts(by=1, to=1, from_=0)
    assert opts.describe() == " from 0 to 1 by 1"


# --- check_change ---


def test_any_change_passes():
    check_change("title", "old", "new", _opts())


def test_no_change_fails():
    with pytest.raises(AssertionFailure, match="'title' did not change"):
        check_change("title", "same", "same", _opts())


def test_by_exact_delta_passes():
    check_change("count", 0, 1, _opts(by=1))


def test_by_other_delta_fails():
    with pytest.raises(AssertionFailure, match="did not change by 1"):
        check_change("count", 0, 2, _opts(by=1))


def test_by_negative_delta():
    check_change("count", 5, 3, _opts(by=-2))


def test_by_zero_passes_when_unchanged():
    check_change("count", 3, 3, _opts(by=0))


def test_by_zero_fails_when_changed():
    with pytest.raises(AssertionFailure, match="did not change by 0"):
        check_change("count", 3, 4, _opts(by=0))


def test_from_mismatch_fails_before_anything_else():
    # would also fail "did not change", but from is checked first
    with pytest.raises(AssertionFailure, match="did not originally match 'old'"):
        check_change("title", "other", "other", _opts(from_="old"))


def test_to_mismatch_fails():
    with pytest.raises(AssertionFailure, match="was not changed to match 'new'"):
        check_change("title", "old", "newer", _opts(to="new"))


def test_from_and_to_pass():
    check_change("title", "old", "new", _opts(from_="old", to="new"))


def test_from_equal_to_still_requires_a_change():
    with pytest.raises(AssertionFailure, match="did not change"):
        check_change("title", "same", "same", _opts(from_="same", to="same"))


def test_matchers_for_from_and_to():
    check_change(
        "title",
        "draft 1",
        "published",
        _opts(from_=re.compile(r"^draft"), to=lambda v: v.startswith("pub")),
    )
    check_change("count", 2, 9, _opts(from_=range(0, 3), to=Between(5, 10)))


def test_by_on_non_numeric_values_is_an_assertion_failure():
    with pytest.raises(AssertionFailure, match="did not change by 1"):
        check_change("title", "old", "new", _opts(by=1))


# --- check_no_change ---


def test_no_change_passes_when_equal():
    check_no_change("count", 1, 1)


def test_no_change_fails_when_changed():
    with pytest.raises(AssertionFailure, match="'count' changed"):
        check_no_change("count", 1, 2)


# --- tracked ---


def test_tracked_attribute_path():
    ctx = SimpleNamespace(post=SimpleNamespace(title="hello"))
    expr = tracked("post.title")
    assert expr.label == "post.title"
    assert expr(ctx) == "hello"


def test_tracked_callable_uses_function_name():
    def post_count(ctx):
        return len(ctx.posts)

    expr = tracked(post_count)
    assert expr.label == "post_count"
    assert expr(SimpleNamespace(posts=[1, 2])) == 2


def test_tracked_explicit_label_wins():
    expr = tracked(lambda ctx: 1, label="one")
    assert expr.label == "one"


def test_tracked_rejects_non_callables():
    with pytest.raises(ConfigurationError):
        tracked(42)


def test_tracked_rejects_empty_path():
    with pytest.raises(ConfigurationError):
        tracked("  ")
