"""Scenarios that shell out through the command harness."""

from shouldkit import Suite

suite = Suite("Running commands")


@suite.setup
def run_echo(ctx):
    ctx.result = ctx.harness.run('echo "env=$APP_ENV"')


@suite.should("succeed")
def succeeded(ctx):
    assert ctx.result.succeeded, ctx.result.stderr


@suite.should("see the configured environment")
def configured_env(ctx):
    assert ctx.result.stdout.strip() == "env=test"
