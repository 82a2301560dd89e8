"""pytest integration: per-test fixtures and suite collection.

Registered through the ``pytest11`` entry point, so installing shouldkit is
enough to get the ``outbox``, ``shouldkit_context`` and ``harness`` fixtures.
Collect a Suite from a test module with::

    test_posts = suite_cases(suite)
"""

from __future__ import annotations

import logging
from typing import Callable

import pytest

from shouldkit.config import HarnessConfig
from shouldkit.harness import CommandHarness
from shouldkit.mail import Outbox
from shouldkit.suite import Suite, TestCase, TestContext


def suite_cases(suite: Suite) -> Callable[[TestCase], None]:
    """Return a pytest test function parametrized over every case in suite."""
    cases = list(suite.cases())

    @pytest.mark.parametrize("case", cases, ids=[case.name for case in cases])
    def test_case(case: TestCase) -> None:
        case.run(case.suite.context_factory())

    test_case.__name__ = f"test_{suite.name.lower().replace(' ', '_')}"
    return test_case


@pytest.fixture
def outbox() -> Outbox:
    """A fresh, empty delivery collection for each test."""
    return Outbox()


@pytest.fixture
def shouldkit_context(outbox: Outbox) -> TestContext:
    return TestContext(outbox=outbox)


@pytest.fixture
def harness_config() -> HarnessConfig:
    """Override in a conftest.py to customise the harness."""
    return HarnessConfig()


@pytest.fixture
def harness(harness_config: HarnessConfig, tmp_path) -> CommandHarness:
    """A command harness prepared for one scenario, running in tmp_path."""
    h = CommandHarness(
        config=harness_config,
        logger=logging.getLogger("shouldkit.harness"),
        workdir=harness_config.workdir or tmp_path,
    )
    h.before_scenario()
    return h
