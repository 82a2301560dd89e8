from __future__ import annotations

import importlib.util
import logging
import sys
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import yaml

from shouldkit.config import HarnessConfig, ShouldkitConfig, SuiteRef
from shouldkit.harness import CommandHarness
from shouldkit.reporting.junit import suite_slug, write_junit
from shouldkit.suite import Suite, TestContext
from shouldkit.verbose import close_logger, setup_logger


def load_suite(ref: SuiteRef) -> Suite:
    """Import the suite file and return the Suite it names."""
    path = Path(ref.path)
    if not path.exists():
        raise ValueError(f"Suite file not found: {path}")

    module_name = f"shouldkit_suite_{suite_slug(str(path.resolve()))}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ValueError(f"Cannot import suite file: {path}")
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)

    suite = getattr(module, ref.attribute, None)
    if not isinstance(suite, Suite):
        raise ValueError(
            f"'{ref.attribute}' in {path} is not a shouldkit Suite (got {type(suite).__name__})"
        )
    return suite


def unique_suite_names(refs: list[SuiteRef]) -> list[str]:
    """Name each ref by its display name, numbering repeats so slugs stay distinct."""
    names = []
    used: set[str] = set()
    for ref in refs:
        name = ref.display_name
        n = 1
        while suite_slug(name) in used:
            n += 1
            name = f"{ref.display_name}-{n}"
        used.add(suite_slug(name))
        names.append(name)
    return names


def harnessed_context(
    factory: Callable[[], TestContext], config: HarnessConfig, logger: logging.Logger
) -> Callable[[], TestContext]:
    """Wrap a context factory so every case gets its own prepared harness."""

    def build() -> TestContext:
        ctx = factory()
        if ctx.harness is None:
            ctx.harness = CommandHarness(config=config, logger=logger)
            ctx.harness.before_scenario()
        return ctx

    return build


class Runner:
    """Runs configured suites and records the results of a run."""

    def __init__(
        self,
        config: ShouldkitConfig,
        output_dir: Path,
        suite_filter: str | None = None,
        verbose: bool = False,
    ):
        self.config = config
        self.output_dir = output_dir
        self.suite_filter = suite_filter
        self.verbose = verbose
        self.interrupted = False

    def _selected(self) -> list[SuiteRef]:
        refs = self.config.suites
        if self.suite_filter:
            refs = [
                r
                for r in refs
                if self.suite_filter in (r.display_name, Path(r.path).stem)
            ]
        if not refs:
            if self.suite_filter:
                raise ValueError(f"No suite matches '{self.suite_filter}'")
            raise ValueError("No suites configured")
        return refs

    def execute(self) -> Path:
        """Run every selected suite. Returns the run directory."""
        refs = self._selected()

        run_id = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
        run_dir = self.output_dir / run_id
        run_dir.mkdir(parents=True, exist_ok=True)

        logger = setup_logger(
            run_dir / "debug.log", verbose=self.verbose, logger_name="shouldkit_main"
        )
        logger.debug("Starting suite run")

        try:
            all_results = self._run_suites(refs, run_dir, logger)
            self._write_results(run_dir, all_results)
            logger.debug("Run results written")
        finally:
            close_logger(logger)
        return run_dir

    def _run_suites(
        self, refs: list[SuiteRef], run_dir: Path, logger: logging.Logger
    ) -> dict[str, list[dict[str, Any]]]:
        all_results: dict[str, list[dict[str, Any]]] = {}
        suite_loggers: list[logging.Logger] = []
        try:
            for ref, suite_name in zip(refs, unique_suite_names(refs)):
                suite = load_suite(ref)
                suite_logger = setup_logger(
                    run_dir / suite_slug(suite_name) / "debug.log",
                    verbose=self.verbose,
                    logger_name=f"shouldkit_{suite_slug(suite_name)}",
                )
                suite_loggers.append(suite_logger)
                logger.debug(f"Running suite '{suite_name}' ({suite.name})")

                results = suite.run(
                    logger=suite_logger,
                    context_factory=harnessed_context(
                        suite.context_factory, self.config.harness, suite_logger
                    ),
                )
                all_results[suite_name] = [asdict(r) for r in results]

                for index, result in enumerate(results, start=1):
                    if result.errored:
                        status = "ERROR"
                    else:
                        status = "PASS" if result.passed else "FAIL"
                    print(f"  [{index}/{len(results)}] {status}  {result.name}")

                n_passed = sum(1 for r in results if r.passed)
                logger.debug(
                    f"Suite '{suite_name}' completed: {n_passed}/{len(results)} cases passed"
                )
        except KeyboardInterrupt:
            self.interrupted = True
            logger.warning("Run interrupted by user (Ctrl+C). Saving partial results...")
        finally:
            for suite_logger in suite_loggers:
                close_logger(suite_logger)

        return all_results

    def _write_results(
        self, run_dir: Path, all_results: dict[str, list[dict[str, Any]]]
    ) -> None:
        """Write junit.xml and meta.yaml to the run directory."""
        write_junit(run_dir, all_results)

        try:
            import importlib.metadata

            shouldkit_version = importlib.metadata.version("shouldkit")
        except Exception:
            shouldkit_version = "unknown"

        meta: dict[str, Any] = {
            "run_id": run_dir.name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "suites": list(all_results.keys()),
            "shouldkit_version": shouldkit_version,
        }
        if self.interrupted:
            meta["interrupted"] = True

        (run_dir / "meta.yaml").write_text(yaml.dump(meta, default_flow_style=False))
