"""Matchers used by the ``from``/``to`` constraints of change assertions."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable


class Matcher(ABC):
    """Something a value can be tested against."""

    @abstractmethod
    def matches(self, value: Any) -> bool:
        """Return True when value satisfies this matcher."""
        ...

    @abstractmethod
    def describe(self) -> str:
        """Short human-readable form used in failure messages."""
        ...

    def __repr__(self) -> str:
        return self.describe()


@dataclass(frozen=True, repr=False)
class Exact(Matcher):
    expected: Any

    def matches(self, value: Any) -> bool:
        return value == self.expected

    def describe(self) -> str:
        return repr(self.expected)


@dataclass(frozen=True, repr=False)
class Predicate(Matcher):
    fn: Callable[[Any], bool]
    label: str | None = None

    def matches(self, value: Any) -> bool:
        return bool(self.fn(value))

    def describe(self) -> str:
        if self.label:
            return self.label
        return f"<predicate {getattr(self.fn, '__name__', 'anonymous')}>"


@dataclass(frozen=True, repr=False, init=False)
class Pattern(Matcher):
    """Regular expression search. Non-string values never match."""

    regex: re.Pattern

    def __init__(self, regex: str | re.Pattern):
        object.__setattr__(self, "regex", re.compile(regex))

    def matches(self, value: Any) -> bool:
        if not isinstance(value, str):
            return False
        return self.regex.search(value) is not None

    def describe(self) -> str:
        return f"/{self.regex.pattern}/"


@dataclass(frozen=True, repr=False)
class InRange(Matcher):
    bounds: range

    def matches(self, value: Any) -> bool:
        try:
            return value in self.bounds
        except TypeError:
            return False

    def describe(self) -> str:
        return repr(self.bounds)


@dataclass(frozen=True, repr=False)
class Between(Matcher):
    """Inclusive ``low <= value <= high`` for any comparable values."""

    low: Any
    high: Any

    def matches(self, value: Any) -> bool:
        try:
            return self.low <= value <= self.high
        except TypeError:
            return False

    def describe(self) -> str:
        return f"{self.low!r}..{self.high!r}"


@dataclass(frozen=True, repr=False)
class InstanceOf(Matcher):
    cls: type

    def matches(self, value: Any) -> bool:
        return isinstance(value, self.cls)

    def describe(self) -> str:
        return f"instance of {self.cls.__name__}"


def as_matcher(obj: Any) -> Matcher:
    """Pick the matcher variant for a raw ``from``/``to`` value.

    Matchers pass through unchanged, compiled regexes become ``Pattern``,
    ``range`` objects ``InRange``, classes ``InstanceOf`` and any other
    callable a ``Predicate``. Everything else is compared with ``==``.
    Wrap a value in ``Exact`` to force equality for callables or classes.
    """
    if isinstance(obj, Matcher):
        return obj
    if isinstance(obj, re.Pattern):
        return Pattern(obj)
    if isinstance(obj, range):
        return InRange(obj)
    if isinstance(obj, type):
        return InstanceOf(obj)
    if callable(obj):
        return Predicate(obj)
    return Exact(obj)
