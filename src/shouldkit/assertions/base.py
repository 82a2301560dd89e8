"""Base data structures and errors for the assertion system."""

from dataclasses import dataclass


class ConfigurationError(ValueError):
    """Raised when an assertion macro is declared with invalid options."""


class AssertionFailure(AssertionError):
    """Raised when a registered check does not hold."""


@dataclass
class AssertionResult:
    """Result of running a single registered test case.

    Attributes:
        name: Full case description (e.g. "Posts should change 'count' by 1").
        passed: Whether every check in the case held.
        message: Failure or error detail, empty when passed.
        errored: True when the case raised something other than an
            AssertionFailure (a broken setup, a bad expression).
        duration: Wall clock seconds spent running the case.
    """

    name: str
    passed: bool
    message: str = ""
    errored: bool = False
    duration: float = 0.0
