"""Declarative change and mail-delivery assertions for Python tests."""

from shouldkit.assertions import (
    AssertionFailure,
    Between,
    ConfigurationError,
    Exact,
    InRange,
    InstanceOf,
    Pattern,
    Predicate,
)
from shouldkit.harness import CommandHarness, CommandResult
from shouldkit.mail import Message, Outbox, assert_did_not_send_email, assert_sent_email
from shouldkit.suite import Suite, TestCase, TestContext
from shouldkit.verbose import report

__all__ = [
    "AssertionFailure",
    "Between",
    "CommandHarness",
    "CommandResult",
    "ConfigurationError",
    "Exact",
    "InRange",
    "InstanceOf",
    "Message",
    "Outbox",
    "Pattern",
    "Predicate",
    "Suite",
    "TestCase",
    "TestContext",
    "assert_did_not_send_email",
    "assert_sent_email",
    "report",
]
