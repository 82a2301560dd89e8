"""Test suites: setups, nested contexts and the assertion macros that register cases."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, TYPE_CHECKING

from shouldkit.assertions.base import AssertionResult
from shouldkit.assertions.change import (
    check_change,
    check_no_change,
    parse_change_options,
    tracked,
)
from shouldkit.mail import Outbox, assert_did_not_send_email, assert_sent_email
from shouldkit.verbose import report

if TYPE_CHECKING:
    from shouldkit.harness import CommandHarness

Hook = Callable[["TestContext"], Any]


class TestContext:
    """Per-invocation state shared by a case's before-hook, setups and body.

    Setups assign whatever attributes the case needs (``ctx.post = ...``).
    """

    __test__ = False

    def __init__(self, outbox: Outbox | None = None, harness: CommandHarness | None = None):
        self.outbox = outbox if outbox is not None else Outbox()
        self.harness = harness
        self.snapshots: dict[object, Any] = {}

    def assert_sent_email(self, predicate: Callable[[Any], bool] | None = None) -> list:
        return assert_sent_email(self.outbox, predicate)

    def assert_did_not_send_email(self) -> None:
        assert_did_not_send_email(self.outbox)

    def report(self, msg: str = "") -> str:
        return report(msg, _depth=2)


@dataclass
class TestCase:
    """One registered case.

    Running order is: before-hook, setups (outermost suite first), body,
    then teardowns in reverse even when something failed.
    """

    __test__ = False

    name: str
    body: Hook
    before: Hook | None = None
    suite: Suite | None = None
    setups: list[Hook] = field(default_factory=list)
    teardowns: list[Hook] = field(default_factory=list)

    def run(self, ctx: TestContext) -> None:
        # suite hooks resolve at run time so setups declared after a macro still apply
        setups = self.suite._all_setups() if self.suite is not None else self.setups
        teardowns = self.suite._all_teardowns() if self.suite is not None else self.teardowns
        try:
            if self.before is not None:
                self.before(ctx)
            for setup in setups:
                setup(ctx)
            self.body(ctx)
        finally:
            for teardown in reversed(teardowns):
                teardown(ctx)


class Suite:
    """A named group of cases sharing setup (the action under test).

    Example::

        suite = Suite("Creating a post")

        @suite.setup
        def create(ctx):
            ctx.posts.append("hello")

        suite.should_change(lambda ctx: len(ctx.posts), label="len(posts)", by=1)
    """

    def __init__(
        self,
        name: str,
        context_factory: Callable[[], TestContext] = TestContext,
        parent: Suite | None = None,
    ):
        self.name = name
        self.parent = parent
        self.context_factory = context_factory
        self._setups: list[Hook] = []
        self._teardowns: list[Hook] = []
        self._cases: list[TestCase] = []
        self._children: list[Suite] = []

    @property
    def full_name(self) -> str:
        if self.parent is None:
            return self.name
        return f"{self.parent.full_name} {self.name}"

    def setup(self, fn: Hook) -> Hook:
        self._setups.append(fn)
        return fn

    def teardown(self, fn: Hook) -> Hook:
        self._teardowns.append(fn)
        return fn

    def context(self, name: str) -> Suite:
        """Create a nested suite that runs this suite's setups first."""
        child = Suite(name, context_factory=self.context_factory, parent=self)
        self._children.append(child)
        return child

    def _all_setups(self) -> list[Hook]:
        inherited = self.parent._all_setups() if self.parent else []
        return inherited + self._setups

    def _all_teardowns(self) -> list[Hook]:
        inherited = self.parent._all_teardowns() if self.parent else []
        return inherited + self._teardowns

    def register(self, description: str, body: Hook, before: Hook | None = None) -> TestCase:
        """Register one case. Every macro goes through here."""
        case = TestCase(
            name=f"{self.full_name} should {description}",
            body=body,
            before=before,
            suite=self,
        )
        self._cases.append(case)
        return case

    def should(self, description: str, before: Hook | None = None) -> Callable[[Hook], Hook]:
        """Decorator form of register."""

        def decorator(fn: Hook) -> Hook:
            self.register(description, fn, before=before)
            return fn

        return decorator

    def should_change(self, expression: Any, *, label: str | None = None, **options: Any) -> TestCase:
        """Register a case asserting the expression changes when setups run.

        Accepts ``by`` (numeric delta), ``from`` / ``from_`` and ``to``
        (values or matchers). Unknown options raise ConfigurationError here,
        before anything runs.
        """
        opts = parse_change_options(options)
        expr = tracked(expression, label)
        key = object()

        def before(ctx: TestContext) -> None:
            ctx.snapshots[key] = expr(ctx)

        def body(ctx: TestContext) -> None:
            check_change(expr.label, ctx.snapshots[key], expr(ctx), opts)

        return self.register(f"change {expr.label!r}{opts.describe()}", body, before=before)

    def should_not_change(self, expression: Any, *, label: str | None = None) -> TestCase:
        """Register a case asserting the expression is unchanged by the setups."""
        expr = tracked(expression, label)
        key = object()

        def before(ctx: TestContext) -> None:
            ctx.snapshots[key] = expr(ctx)

        def body(ctx: TestContext) -> None:
            check_no_change(expr.label, ctx.snapshots[key], expr(ctx))

        return self.register(f"not change {expr.label!r}", body, before=before)

    def cases(self) -> Iterator[TestCase]:
        yield from self._cases
        for child in self._children:
            yield from child.cases()

    def run(
        self,
        logger: logging.Logger | None = None,
        context_factory: Callable[[], TestContext] | None = None,
    ) -> list[AssertionResult]:
        """Run every case on a fresh context and collect results."""
        logger = logger or logging.getLogger("shouldkit")
        results = []
        for case in self.cases():
            factory = context_factory or case.suite.context_factory
            logger.debug(f"Running case '{case.name}'")
            start = time.monotonic()
            try:
                case.run(factory())
            except AssertionError as e:
                result = AssertionResult(name=case.name, passed=False, message=str(e))
            except Exception as e:
                logger.error(f"Case '{case.name}' raised {type(e).__name__}: {e}")
                result = AssertionResult(
                    name=case.name,
                    passed=False,
                    message=f"{type(e).__name__}: {e}",
                    errored=True,
                )
            else:
                result = AssertionResult(name=case.name, passed=True)
            result.duration = time.monotonic() - start
            logger.debug(f"Case '{case.name}' passed={result.passed}")
            results.append(result)
        return results

