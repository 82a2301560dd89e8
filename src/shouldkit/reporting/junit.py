from __future__ import annotations

import re
from pathlib import Path
from typing import Any

from junitparser import Error, Failure, JUnitXml, TestCase, TestSuite


def suite_slug(suite_name: str) -> str:
    """Directory name used for a suite's files inside the run directory."""
    return re.sub(r"[^A-Za-z0-9_.-]+", "-", suite_name).strip("-") or "suite"


def write_junit(run_dir: Path, all_results: dict[str, list[dict[str, Any]]]) -> Path:
    """Write junit.xml from per-suite result dicts, return path."""
    xml = JUnitXml()

    for suite_name, results in all_results.items():
        suite = TestSuite(suite_name)

        # Test cases: one per registered case
        for result in results:
            case = TestCase(result["name"])
            case.classname = suite_name
            case.time = float(result.get("duration") or 0.0)
            if result.get("errored"):
                case.result = Error(result.get("message", ""))
            elif not result.get("passed", True):
                case.result = Failure(result.get("message", ""))
            suite.add_testcase(case)

        # Set time after add_testcase (add_testcase resets it via update_statistics)
        suite.time = sum(float(r.get("duration") or 0.0) for r in results)

        # Use append (not +=) to preserve properties and time
        xml.append(suite)

    junit_path = run_dir / "junit.xml"
    xml.write(str(junit_path), pretty=True)
    return junit_path


def generate_report(run_dir: Path) -> Path:
    """Render junit.xml → report.html using Jinja2 template, return path."""
    import yaml
    from jinja2 import Environment, FileSystemLoader

    junit_path = run_dir / "junit.xml"
    report_path = run_dir / "report.html"

    meta: dict = {}
    meta_path = run_dir / "meta.yaml"
    if meta_path.exists():
        meta = yaml.safe_load(meta_path.read_text()) or {}

    xml = JUnitXml.fromfile(str(junit_path))

    suites = []
    for suite in xml:
        cases = []
        for case in suite:
            result = None
            if case.result:
                result = {
                    "status": type(case.result[0]).__name__,
                    "message": case.result[0].message or "",
                }
            cases.append({"name": case.name, "classname": case.classname, "result": result})

        debug_log = ""
        debug_path = run_dir / suite_slug(suite.name) / "debug.log"
        if debug_path.exists():
            debug_log = debug_path.read_text(encoding="utf-8")

        suites.append(
            {
                "name": suite.name,
                "tests": suite.tests,
                "failures": suite.failures,
                "errors": suite.errors,
                "time": suite.time,
                "cases": cases,
                "debug_log": debug_log,
            }
        )

    total_tests = sum(s["tests"] for s in suites)
    total_failures = sum(s["failures"] for s in suites)
    total_errors = sum(s["errors"] for s in suites)

    tmpl_dir = Path(__file__).parent / "templates"
    env = Environment(loader=FileSystemLoader(str(tmpl_dir)), autoescape=True)
    template = env.get_template("report.html.j2")

    html = template.render(
        suites=suites,
        total_tests=total_tests,
        total_failures=total_failures,
        total_errors=total_errors,
        total_passed=total_tests - total_failures - total_errors,
        run_dir=str(run_dir),
        meta=meta,
    )
    report_path.write_text(html, encoding="utf-8")
    return report_path
