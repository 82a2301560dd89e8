"""Command harness for behaviour-driven scenarios that shell out."""

from __future__ import annotations

import logging
import os
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from shouldkit.config import DEFAULT_TIMEOUT, HarnessConfig

_log = logging.getLogger("shouldkit")


@dataclass
class CommandResult:
    """Captures the result of one harness command."""

    command: str
    exit_code: int
    stdout: str
    stderr: str
    duration_seconds: float
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0 and not self.timed_out


@dataclass
class Announcements:
    """Which parts of each command get echoed to the log."""

    stdout: bool = False
    stderr: bool = False
    cmd: bool = False
    dir: bool = False
    env: bool = False

    @classmethod
    def everything(cls) -> "Announcements":
        return cls(stdout=True, stderr=True, cmd=True, dir=True, env=True)


class CommandHarness:
    """Runs shell commands for a scenario with a fixed timeout and environment.

    Call ``before_scenario()`` at the start of every scenario; it resets the
    timeout and turns on announcements when the debug variable is set.
    """

    def __init__(
        self,
        config: HarnessConfig | None = None,
        logger: logging.Logger | None = None,
        environ: Mapping[str, str] | None = None,
        workdir: str | Path | None = None,
    ):
        self.config = config or HarnessConfig()
        self.logger = logger or _log
        self.environ = dict(os.environ if environ is None else environ)
        self.workdir = Path(workdir or self.config.workdir or Path.cwd())
        self.timeout = DEFAULT_TIMEOUT
        self.announce = Announcements()
        self.extra_env: dict[str, str] = {}

    @property
    def debug(self) -> bool:
        return self.config.debug_env in self.environ

    def before_scenario(self) -> None:
        self.timeout = self.config.timeout
        self.extra_env = self.config.expanded_env()
        self.announce = Announcements.everything() if self.debug else Announcements()
        self.logger.debug(
            f"Scenario harness ready: timeout={self.timeout}s debug={self.debug}"
        )

    def set_env(self, name: str, value: str) -> None:
        self.extra_env[name] = value

    def propagated_env(self, command: str) -> dict[str, str]:
        """Rule variables set in the parent environment whose rule matches command."""
        propagated = {}
        for rule in self.config.propagate_env:
            if not rule.applies_to(command):
                continue
            value = self.environ.get(rule.variable)
            if value:
                propagated[rule.variable] = value
        return propagated

    def command_env(self, command: str) -> dict[str, str]:
        """Build the subprocess environment for command.

        The parent environment is inherited as is; extra variables and the
        propagated rule variables are set explicitly on top of it.
        """
        env = dict(self.environ)
        env.update(self.extra_env)
        for name, value in self.propagated_env(command).items():
            self.logger.debug(f"Propagating {name} to '{command}'")
            env[name] = value
        return env

    def run(self, command: str) -> CommandResult:
        env = self.command_env(command)

        if self.announce.cmd:
            self.logger.info(f"$ {command}")
        if self.announce.dir:
            self.logger.info(f"$ cd {self.workdir}")
        if self.announce.env:
            announced = {**self.extra_env, **self.propagated_env(command)}
            for name, value in sorted(announced.items()):
                self.logger.info(f'$ export {name}="{value}"')

        start = time.monotonic()
        try:
            proc = subprocess.run(
                command,
                shell=True,
                cwd=self.workdir,
                env=env,
                timeout=self.timeout,
                capture_output=True,
                text=True,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            self.logger.warning(f"Command timed out after {self.timeout}s: {command}")
            return CommandResult(
                command=command,
                exit_code=-1,
                stdout=_decode(e.stdout),
                stderr=_decode(e.stderr),
                duration_seconds=time.monotonic() - start,
                timed_out=True,
            )

        result = CommandResult(
            command=command,
            exit_code=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
            duration_seconds=time.monotonic() - start,
        )

        self.logger.debug(f"Command exited with code {result.exit_code}: {command}")
        if self.announce.stdout and result.stdout:
            self.logger.info(f"stdout: {result.stdout}")
        if self.announce.stderr and result.stderr:
            self.logger.info(f"stderr: {result.stderr}")

        return result


def _decode(output: bytes | str | None) -> str:
    if output is None:
        return ""
    if isinstance(output, bytes):
        return output.decode("utf-8", errors="replace")
    return output
