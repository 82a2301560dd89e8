import json
import textwrap

from typer.testing import CliRunner

from shouldkit.cli import app

runner = CliRunner()

PASSING_SUITE = textwrap.dedent("""\
    from shouldkit import Suite

    suite = Suite("Counting")
    suite.setup(lambda ctx: setattr(ctx, "n", 1))
    suite.should_change(lambda ctx: getattr(ctx, "n", 0), label="n", from_=0, to=1)
""")


def _project(tmp_path, suite_source=PASSING_SUITE):
    (tmp_path / "suites").mkdir()
    (tmp_path / "suites" / "counting.py").write_text(suite_source)
    config = tmp_path / "shouldkit.yaml"
    config.write_text("suites:\n  - suites/counting.py:suite\n")
    return config


# --- init ---


def test_init_creates_example_files(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0
    assert (tmp_path / "shouldkit" / "shouldkit.yaml").exists()
    assert (tmp_path / "shouldkit" / "suites" / "counter.py").exists()


def test_init_with_custom_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["init", "--dir", "my-dir"])
    assert result.exit_code == 0
    assert (tmp_path / "my-dir" / "shouldkit.yaml").exists()


def test_init_skips_existing_config(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "shouldkit").mkdir()
    (tmp_path / "shouldkit" / "shouldkit.yaml").write_text("suites: []\n")
    result = runner.invoke(app, ["init"])
    assert result.exit_code == 0
    assert "already exists" in result.output
    assert (tmp_path / "shouldkit" / "shouldkit.yaml").read_text() == "suites: []\n"


def test_init_example_runs_green(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    runner.invoke(app, ["init"])
    result = runner.invoke(
        app,
        ["run", "shouldkit/shouldkit.yaml", "--output-dir", str(tmp_path / "runs"), "--no-open"],
    )
    assert result.exit_code == 0, result.output
    assert "PASS" in result.output


# --- run ---


def test_run_missing_config():
    result = runner.invoke(app, ["run", "nonexistent.yaml"])
    assert result.exit_code != 0


def test_run_invalid_config(tmp_path):
    config = tmp_path / "shouldkit.yaml"
    config.write_text("harness:\n  timeout: -1\n")
    result = runner.invoke(app, ["run", str(config), "--no-open"])
    assert result.exit_code == 1


def test_run_passing_suite(tmp_path):
    config = _project(tmp_path)
    result = runner.invoke(
        app, ["run", str(config), "--output-dir", str(tmp_path / "runs"), "--no-open"]
    )
    assert result.exit_code == 0, result.output
    assert "Run complete" in result.output
    run_dirs = list((tmp_path / "runs").iterdir())
    assert len(run_dirs) == 1
    assert (run_dirs[0] / "report.html").exists()


def test_run_failing_suite_exits_nonzero(tmp_path):
    config = _project(
        tmp_path,
        PASSING_SUITE.replace("to=1", "to=2"),
    )
    result = runner.invoke(
        app, ["run", str(config), "--output-dir", str(tmp_path / "runs"), "--no-open"]
    )
    assert result.exit_code == 1
    assert "FAIL" in result.output


def test_run_unknown_suite_filter(tmp_path):
    config = _project(tmp_path)
    result = runner.invoke(
        app,
        ["run", str(config), "--suite", "missing", "--output-dir", str(tmp_path / "runs"), "--no-open"],
    )
    assert result.exit_code == 1


# --- report ---


def test_report_missing_dir():
    result = runner.invoke(app, ["report", "/tmp/nonexistent-run-dir"])
    assert result.exit_code != 0


def test_report_regenerates(tmp_path):
    config = _project(tmp_path)
    runner.invoke(app, ["run", str(config), "--output-dir", str(tmp_path / "runs"), "--no-open"])
    run_dir = next((tmp_path / "runs").iterdir())
    (run_dir / "report.html").unlink()
    result = runner.invoke(app, ["report", str(run_dir)])
    assert result.exit_code == 0
    assert (run_dir / "report.html").exists()


# --- exec ---


def test_exec_echoes_output(tmp_path):
    config = tmp_path / "shouldkit.yaml"
    config.write_text(f"harness:\n  workdir: {tmp_path}\n")
    result = runner.invoke(app, ["exec", str(config), "echo from-harness"])
    assert result.exit_code == 0
    assert "from-harness" in result.output


def test_exec_propagates_exit_code(tmp_path):
    config = tmp_path / "shouldkit.yaml"
    config.write_text("{}\n")
    result = runner.invoke(app, ["exec", str(config), "exit 4"])
    assert result.exit_code == 4


def test_exec_timeout(tmp_path):
    config = tmp_path / "shouldkit.yaml"
    config.write_text("harness:\n  timeout: 1\n")
    result = runner.invoke(app, ["exec", str(config), "sleep 5"])
    assert result.exit_code == 1


# --- schema ---


def test_schema_generate_command_writes_files(tmp_path):
    out = tmp_path / "schema.json"
    doc = tmp_path / "schema.md"
    result = runner.invoke(app, ["schema", "generate", "--out", str(out), "--doc", str(doc)])
    assert result.exit_code == 0
    schema = json.loads(out.read_text())
    assert set(schema["properties"]) == {"harness", "suites"}
    assert "## `harness`" in doc.read_text()


def test_schema_generate_defaults_to_project_directory(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["schema", "generate"])
    assert result.exit_code == 0
    assert (tmp_path / "shouldkit" / "schemas" / "shouldkit.schema.json").exists()
    assert (tmp_path / "shouldkit" / "docs" / "schema.md").exists()
