from __future__ import annotations

import re
from pathlib import Path

import yaml
from expandvars import expandvars
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_TIMEOUT = 15


class EnvPropagationRule(BaseModel):
    """Copy ``variable`` from the parent environment into matching commands."""

    model_config = ConfigDict(extra="forbid")
    command_pattern: str
    variable: str

    @field_validator("command_pattern")
    @classmethod
    def pattern_must_compile(cls, v: str) -> str:
        try:
            re.compile(v)
        except re.error as e:
            raise ValueError(f"Invalid command_pattern '{v}': {e}") from e
        return v

    def applies_to(self, command: str) -> bool:
        return re.match(self.command_pattern, command) is not None


def _default_propagation() -> list[EnvPropagationRule]:
    return [EnvPropagationRule(command_pattern=r"^bundle exec rake", variable="BUNDLE_GEMFILE")]


class HarnessConfig(BaseModel):
    """Timeout, debug switch and environment for harness commands."""

    model_config = ConfigDict(extra="forbid")
    timeout: int = DEFAULT_TIMEOUT
    debug_env: str = "DEBUG"
    workdir: str | None = None
    env: dict[str, str] = {}
    propagate_env: list[EnvPropagationRule] = []

    @model_validator(mode="before")
    @classmethod
    def default_propagation(cls, data):
        if isinstance(data, dict) and "propagate_env" not in data:
            data = {**data, "propagate_env": _default_propagation()}
        return data

    @field_validator("timeout")
    @classmethod
    def timeout_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @model_validator(mode="after")
    def validate_env_variables(self) -> "HarnessConfig":
        """Validate that all ${VAR} references without defaults are set.

        Raises ValueError listing every missing variable so the user can fix them
        all at once rather than hitting them one-by-one mid-run.
        """
        missing: list[str] = []
        for key, value in self.env.items():
            try:
                expandvars(value, nounset=True)
            except Exception:
                missing.append(f"  {key}={value}")

        if missing:
            details = "\n".join(missing)
            raise ValueError(f"Harness env has missing environment variables:\n{details}")

        return self

    def expanded_env(self) -> dict[str, str]:
        return {key: expandvars(value) for key, value in self.env.items()}


class SuiteRef(BaseModel):
    """A suite file and the module attribute holding its Suite."""

    model_config = ConfigDict(extra="forbid")
    path: str
    attribute: str = "suite"

    @property
    def display_name(self) -> str:
        return f"{Path(self.path).stem}:{self.attribute}"


class ShouldkitConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    harness: HarnessConfig = Field(default_factory=HarnessConfig)
    suites: list[SuiteRef] = []

    @field_validator("harness", mode="before")
    @classmethod
    def empty_harness(cls, v):
        return {} if v is None else v

    @field_validator("suites", mode="before")
    @classmethod
    def normalize_suites(cls, v: list | None) -> list:
        result = []
        for item in v or []:
            if isinstance(item, str):
                path, sep, attribute = item.rpartition(":")
                if not sep:
                    result.append(SuiteRef(path=item))
                else:
                    result.append(SuiteRef(path=path, attribute=attribute))
            elif isinstance(item, dict):
                result.append(SuiteRef(**item))
            else:
                result.append(item)
        return result


def load_config(path: Path) -> ShouldkitConfig:
    """Load and validate a shouldkit config from a YAML file."""
    config_dir = path.parent.resolve()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    config = ShouldkitConfig(**raw)

    # Resolve relative paths relative to config file location
    for ref in config.suites:
        suite_path = Path(ref.path)
        if not suite_path.is_absolute():
            ref.path = str((config_dir / suite_path).resolve())

    if config.harness.workdir is not None:
        workdir_path = Path(config.harness.workdir)
        if not workdir_path.is_absolute():
            config.harness.workdir = str((config_dir / workdir_path).resolve())

    return config
