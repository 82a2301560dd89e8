"""Mail delivery collection and the assertions that read it."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Iterator

from shouldkit.assertions.base import AssertionFailure

_log = logging.getLogger("shouldkit")


@dataclass
class Message:
    """A delivered message as seen by the assertions."""

    subject: str
    to: list[str] = field(default_factory=list)
    sender: str | None = None
    cc: list[str] = field(default_factory=list)
    bcc: list[str] = field(default_factory=list)
    body: str = ""


class Outbox(Sequence):
    """Ordered collection of delivered messages.

    Code under test delivers into it; assertions only read it. Create one
    per test (the ``outbox`` pytest fixture and ``TestContext`` both do).
    """

    def __init__(self, messages: Iterable[Message] = ()):
        self._messages: list[Message] = list(messages)

    def deliver(self, message: Message) -> Message:
        self._messages.append(message)
        return message

    def clear(self) -> None:
        self._messages.clear()

    def __getitem__(self, index):
        return self._messages[index]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self._messages)

    def __repr__(self) -> str:
        return f"Outbox({len(self._messages)} messages)"


def to_sentence(items: Iterable[Any]) -> str:
    """Join items as an English list: "a", "a and b", "a, b, and c"."""
    words = [str(item) for item in items]
    if not words:
        return ""
    if len(words) == 1:
        return words[0]
    if len(words) == 2:
        return f"{words[0]} and {words[1]}"
    return f"{', '.join(words[:-1])}, and {words[-1]}"


def assert_sent_email(
    deliveries: Iterable[Any],
    predicate: Callable[[Any], bool] | None = None,
    logger: logging.Logger | None = None,
) -> list[Any]:
    """Assert at least one message was delivered, optionally one matching predicate.

    Returns the matching messages so callers can make further checks.
    """
    logger = logger or _log
    emails = list(deliveries)
    logger.debug(f"Checking sent email: {len(emails)} delivered")

    if not emails:
        raise AssertionFailure("No emails were sent")
    if predicate is None:
        return emails

    matching = [email for email in emails if predicate(email)]
    logger.debug(f"{len(matching)} of {len(emails)} emails matched")
    if not matching:
        raise AssertionFailure("None of the emails matched.")
    return matching


def assert_did_not_send_email(
    deliveries: Iterable[Any], logger: logging.Logger | None = None
) -> None:
    """Assert nothing was delivered, listing every message otherwise."""
    logger = logger or _log
    emails = list(deliveries)
    logger.debug(f"Checking no email sent: {len(emails)} delivered")
    if not emails:
        return

    msg = f"Sent {len(emails)} emails.\n"
    for email in emails:
        msg += f"  '{email.subject}' sent to {to_sentence(email.to)}\n"
    raise AssertionFailure(msg)
