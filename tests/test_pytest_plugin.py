"""Tests for the pytest plugin as pytest loads it from the installed entry point."""


def test_plugin_loads_alongside_plain_tests(pytester):
    pytester.makepyfile(
        test_plain="""
        def test_truth():
            assert True
        """
    )
    result = pytester.runpytest("-q")
    result.assert_outcomes(passed=1)


def test_plugin_collects_suite_cases(pytester):
    pytester.makepyfile(
        test_signup="""
        from shouldkit import Message, Suite
        from shouldkit.pytest_plugin import suite_cases

        suite = Suite("Signing up")


        @suite.setup
        def sign_up(ctx):
            ctx.users = ["ada"]
            ctx.outbox.deliver(Message(subject="Welcome", to=["ada@example.com"]))


        suite.should_change(lambda ctx: len(getattr(ctx, "users", [])), label="user count", by=1)
        suite.should_change(lambda ctx: len(getattr(ctx, "users", [])), label="user total", by=2)


        @suite.should("send a welcome email")
        def welcome_sent(ctx):
            ctx.assert_sent_email(lambda m: "ada@example.com" in m.to)


        test_signing_up = suite_cases(suite)
        """
    )
    result = pytester.runpytest("-v")
    result.assert_outcomes(passed=2, failed=1)
    result.stdout.fnmatch_lines(
        [
            "*Signing up should change 'user count' by 1*PASSED*",
            "*Signing up should change 'user total' by 2*FAILED*",
        ]
    )


def test_plugin_fixtures_are_available(pytester):
    pytester.makepyfile(
        test_fixtures="""
        from shouldkit import Message


        def test_outbox_starts_empty(outbox):
            assert len(outbox) == 0
            outbox.deliver(Message(subject="hi", to=["a@example.com"]))
            assert len(outbox) == 1


        def test_harness_runs_in_tmp_path(harness, tmp_path):
            assert harness.workdir == tmp_path
            assert harness.timeout == 15
        """
    )
    result = pytester.runpytest("-q")
    result.assert_outcomes(passed=2)
