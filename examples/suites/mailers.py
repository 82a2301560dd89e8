"""Delivery assertions against the per-case outbox."""

import re

from shouldkit import Message, Suite

suite = Suite("Signing up")


@suite.setup
def sign_up(ctx):
    ctx.outbox.deliver(Message(subject="hi there", to=["none@none.com"], sender="app@example.com"))


@suite.should("send a welcome email")
def welcome_sent(ctx):
    ctx.assert_sent_email(
        lambda m: re.search(r"hi there", m.subject) and "none@none.com" in m.to
    )


suite.should_change(lambda ctx: len(ctx.outbox), label="len(outbox)", by=1)

quiet = Suite("Browsing")


@quiet.should("not send anything")
def nothing_sent(ctx):
    ctx.assert_did_not_send_email()
