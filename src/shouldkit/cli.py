from __future__ import annotations

from pathlib import Path

import typer

app = typer.Typer(name="shouldkit", help="Run declarative change and delivery assertions")
schema_app = typer.Typer(name="schema", help="Generate schema tooling for shouldkit.yaml")
app.add_typer(schema_app, name="schema")


def _load(config: str):
    from pydantic import ValidationError

    from shouldkit.config import load_config

    config_path = Path(config)
    if not config_path.exists():
        typer.echo(f"Error: config file not found: {config}", err=True)
        raise typer.Exit(1)

    try:
        return load_config(config_path)
    except (ValidationError, ValueError) as e:
        typer.echo(f"Error: invalid config {config}: {e}", err=True)
        raise typer.Exit(1)


@app.command()
def run(
    config: str = typer.Argument(help="Path to shouldkit YAML config"),
    suite: str | None = typer.Option(None, help="Run only this suite"),
    output_dir: str = typer.Option("runs", help="Output directory for run results"),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output to terminal"
    ),
    no_open: bool = typer.Option(
        False, "--no-open", help="Do not open report.html in browser after run"
    ),
):
    """Run the configured suites and write junit.xml plus an HTML report."""
    from junitparser import JUnitXml

    from shouldkit.reporting.junit import generate_report
    from shouldkit.runner import Runner

    shouldkit_config = _load(config)

    runner = Runner(
        config=shouldkit_config,
        output_dir=Path(output_dir),
        suite_filter=suite,
        verbose=verbose,
    )

    try:
        run_dir = runner.execute()
    except ValueError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if runner.interrupted:
        typer.echo("Run interrupted. Saving partial results...")

    typer.echo("Generating report...")
    report_path = generate_report(run_dir)

    if runner.interrupted:
        typer.echo(f"Partial run saved: {run_dir}")
    else:
        typer.echo(f"Run complete: {run_dir}")
    typer.echo(f"Report: {report_path}")
    if not verbose:
        typer.echo(f"Debug log: {run_dir / 'debug.log'}")

    if not no_open:
        import webbrowser

        webbrowser.open(report_path.resolve().as_uri())

    # Exit with non-zero if any case failed or run was interrupted
    if runner.interrupted:
        raise typer.Exit(1)

    xml = JUnitXml.fromfile(str(run_dir / "junit.xml"))
    has_failures = any(s.failures > 0 or s.errors > 0 for s in xml)
    if has_failures:
        raise typer.Exit(1)


@app.command()
def report(
    run_dir: str = typer.Argument(help="Path to run output directory"),
    open_report: bool = typer.Option(
        False, "--open", help="Open report.html in browser after generating"
    ),
):
    """Regenerate HTML report from a previous run."""
    from shouldkit.reporting.junit import generate_report

    run_path = Path(run_dir)
    if not run_path.exists() or not (run_path / "junit.xml").exists():
        typer.echo(f"Error: not a valid run directory: {run_dir}", err=True)
        raise typer.Exit(1)

    report_path = generate_report(run_path)
    typer.echo(f"Report generated: {report_path}")

    if open_report:
        import webbrowser

        webbrowser.open(report_path.resolve().as_uri())


@app.command(name="exec")
def exec_command(
    config: str = typer.Argument(help="Path to shouldkit YAML config"),
    command: str = typer.Argument(help="Shell command to run through the harness"),
):
    """Run one command with the scenario harness settings and echo its output."""
    import logging

    from shouldkit.harness import CommandHarness

    shouldkit_config = _load(config)

    logger = logging.getLogger("shouldkit.exec")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.setLevel(logging.INFO)

    harness = CommandHarness(config=shouldkit_config.harness, logger=logger)
    harness.before_scenario()
    result = harness.run(command)

    if result.stdout:
        typer.echo(result.stdout, nl=False)
    if result.stderr:
        typer.echo(result.stderr, nl=False, err=True)
    if result.timed_out:
        typer.echo(f"Error: command timed out after {harness.timeout}s", err=True)
        raise typer.Exit(1)
    if result.exit_code != 0:
        raise typer.Exit(result.exit_code)


@app.command()
def init(
    dir: str = typer.Option(
        "shouldkit", "--dir", help="Directory to initialize the project in"
    ),
):
    """Initialize a new project with an example config and suite."""
    project_dir = Path(dir)
    project_dir.mkdir(parents=True, exist_ok=True)

    example = project_dir / "shouldkit.yaml"
    if example.exists():
        typer.echo(f"shouldkit.yaml already exists in {dir}, skipping.")
        return

    example.write_text("""\
harness:
  timeout: 15
  debug_env: DEBUG
  propagate_env:
    - command_pattern: "^bundle exec rake"
      variable: BUNDLE_GEMFILE

suites:
  - suites/counter.py:suite
""")

    suites_dir = project_dir / "suites"
    suites_dir.mkdir(parents=True, exist_ok=True)
    (suites_dir / "counter.py").write_text('''\
from shouldkit import Message, Suite

suite = Suite("Signing up")


@suite.setup
def sign_up(ctx):
    ctx.users = ["ada"]
    ctx.outbox.deliver(Message(subject="Welcome", to=["ada@example.com"]))


suite.should_change(lambda ctx: len(getattr(ctx, "users", [])), label="user count", by=1)


@suite.should("send a welcome email")
def welcome_sent(ctx):
    ctx.assert_sent_email(lambda m: "ada@example.com" in m.to)
''')

    typer.echo(f"Initialized shouldkit project in {dir}:")
    typer.echo("  shouldkit.yaml     - example config")
    typer.echo("  suites/counter.py  - example suite")


@schema_app.command("generate")
def schema_generate(
    dir: str = typer.Option(
        "shouldkit", "--dir", help="Project directory for default schema/doc outputs"
    ),
    out: str | None = typer.Option(
        None,
        help="Output path for JSON Schema (defaults to <dir>/schemas/shouldkit.schema.json)",
    ),
    doc: str | None = typer.Option(
        None, help="Output path for schema docs (defaults to <dir>/docs/schema.md)"
    ),
):
    """Generate JSON Schema and docs for the shouldkit YAML format."""
    from shouldkit.schema import write_json_schema, write_schema_doc

    project_dir = Path(dir)
    out_path = (
        Path(out)
        if out is not None
        else project_dir / "schemas" / "shouldkit.schema.json"
    )
    doc_path = Path(doc) if doc is not None else project_dir / "docs" / "schema.md"
    write_json_schema(out_path)
    write_schema_doc(doc_path)
    typer.echo(f"Wrote schema: {out_path}")
    typer.echo(f"Wrote docs: {doc_path}")
