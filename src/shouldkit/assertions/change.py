"""Before/after change checks (should_change, should_not_change)."""

from __future__ import annotations

import logging
import numbers
import operator
from dataclasses import dataclass
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from shouldkit.assertions.base import AssertionFailure, ConfigurationError
from shouldkit.assertions.matchers import as_matcher

_log = logging.getLogger("shouldkit")

_OPTION_NAMES = ("by", "from", "to")


@dataclass(frozen=True)
class TrackedExpression:
    """A value read from the test context before and after the action."""

    label: str
    evaluate: Callable[[Any], Any]

    def __call__(self, ctx: Any) -> Any:
        return self.evaluate(ctx)


def tracked(expression: Any, label: str | None = None) -> TrackedExpression:
    """Build a TrackedExpression from a callable or a dotted attribute path.

    ``"post.title"`` reads ``ctx.post.title``; a callable receives the
    context as its only argument.
    """
    if isinstance(expression, TrackedExpression):
        if label is None:
            return expression
        return TrackedExpression(label=label, evaluate=expression.evaluate)
    if isinstance(expression, str):
        if not expression.strip():
            raise ConfigurationError("Tracked expression path must not be empty")
        return TrackedExpression(
            label=label or expression, evaluate=operator.attrgetter(expression)
        )
    if callable(expression):
        name = label or getattr(expression, "__name__", None) or repr(expression)
        return TrackedExpression(label=name, evaluate=expression)
    raise ConfigurationError(
        f"Cannot track {expression!r}: expected a callable or an attribute path"
    )


class ChangeOptions(BaseModel):
    """The ``by``/``from``/``to`` constraints of a change assertion.

    Presence is read from ``model_fields_set``, so ``to=None`` asserts the
    value became None rather than meaning "not given".
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True, frozen=True)

    by: Any = None
    from_: Any = Field(default=None, alias="from")
    to: Any = None

    @field_validator("by")
    @classmethod
    def by_must_be_numeric(cls, v: Any) -> Any:
        if v is None:
            return v
        if isinstance(v, bool) or not isinstance(v, numbers.Number):
            raise ValueError(f"'by' must be numeric, got {v!r}")
        return v

    @property
    def has_by(self) -> bool:
        return "by" in self.model_fields_set and self.by is not None

    @property
    def has_from(self) -> bool:
        return "from_" in self.model_fields_set

    @property
    def has_to(self) -> bool:
        return "to" in self.model_fields_set

    def describe(self) -> str:
        parts = []
        if self.has_from:
            parts.append(f" from {as_matcher(self.from_).describe()}")
        if self.has_to:
            parts.append(f" to {as_matcher(self.to).describe()}")
        if self.has_by:
            parts.append(f" by {self.by!r}")
        return "".join(parts)


def parse_change_options(options: dict[str, Any]) -> ChangeOptions:
    """Validate raw keyword options, raising ConfigurationError on bad input."""
    try:
        return ChangeOptions(**options)
    except ValidationError as e:
        problems = []
        for err in e.errors():
            key = err["loc"][0] if err["loc"] else "?"
            if err["type"] == "extra_forbidden":
                problems.append(
                    f"unknown option '{key}' (expected one of: {', '.join(_OPTION_NAMES)})"
                )
            else:
                problems.append(f"invalid option '{key}': {err['msg']}")
        raise ConfigurationError("; ".join(problems)) from e


def check_change(
    label: str,
    old: Any,
    new: Any,
    options: ChangeOptions,
    logger: logging.Logger | None = None,
) -> None:
    """Raise AssertionFailure unless old -> new satisfies the options.

    Checks run in order: ``from``, the value changed at all (skipped when
    ``by == 0``), ``to``, then ``old + by == new``.
    """
    logger = logger or _log
    logger.debug(f"Checking change of {label!r}: {old!r} -> {new!r}{options.describe()}")

    if options.has_from:
        expected_from = as_matcher(options.from_)
        if not expected_from.matches(old):
            raise AssertionFailure(
                f"{label!r} did not originally match {expected_from.describe()}"
            )

    if not (options.has_by and options.by == 0):
        if old == new:
            raise AssertionFailure(f"{label!r} did not change")

    if options.has_to:
        expected_to = as_matcher(options.to)
        if not expected_to.matches(new):
            raise AssertionFailure(
                f"{label!r} was not changed to match {expected_to.describe()}"
            )

    if options.has_by:
        try:
            expected = old + options.by
        except TypeError as e:
            raise AssertionFailure(
                f"{label!r} did not change by {options.by!r}: {e}"
            ) from e
        if expected != new:
            raise AssertionFailure(
                f"{label!r} did not change by {options.by!r} "
                f"(expected {expected!r}, got {new!r})"
            )


def check_no_change(
    label: str, old: Any, new: Any, logger: logging.Logger | None = None
) -> None:
    """Raise AssertionFailure if the value changed."""
    logger = logger or _log
    logger.debug(f"Checking {label!r} unchanged: {old!r} -> {new!r}")
    if old != new:
        raise AssertionFailure(f"{label!r} changed (from {old!r} to {new!r})")
