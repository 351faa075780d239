from __future__ import annotations

import signal
from pathlib import Path

import yaml
from expandvars import expandvars
from pydantic import BaseModel, ConfigDict, field_validator

from trapcheck.trap import SIGNAL_NAMES, signal_number

DEFAULT_SUITE = "trapcheck.reference.suite:suite"


class HarnessConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    suite: str = DEFAULT_SUITE
    color: bool = False
    keep_artifacts: bool = False
    silent: bool = False
    verbose: bool = False
    artifact_dir: str | None = None
    trapped_signals: list[str] = ["SIGABRT"]

    @field_validator("suite")
    @classmethod
    def suite_must_be_module_attr(cls, v: str) -> str:
        module, sep, attr = v.partition(":")
        if not sep or not module or not attr:
            raise ValueError(f"suite '{v}' must have the form 'module:attribute'")
        return v

    @field_validator("artifact_dir")
    @classmethod
    def expand_artifact_dir(cls, v: str | None) -> str | None:
        if v is None:
            return v
        try:
            return expandvars(v, nounset=True)
        except Exception as e:
            # expandvars raises a KeyError subclass, which pydantic would not wrap
            raise ValueError(f"artifact_dir '{v}' references an unset variable: {e}")

    @field_validator("trapped_signals")
    @classmethod
    def signals_must_be_known(cls, v: list[str]) -> list[str]:
        if not v:
            raise ValueError("trapped_signals must not be empty")
        known = set(SIGNAL_NAMES.values())
        for name in v:
            if name not in known:
                raise ValueError(
                    f"Unknown signal '{name}', expected one of: {', '.join(sorted(known))}"
                )
            if not hasattr(signal, name):
                raise ValueError(f"Signal '{name}' is not available on this platform")
        return v

    def signal_numbers(self) -> list[int]:
        return [signal_number(name) for name in self.trapped_signals]


def load_config(path: Path) -> HarnessConfig:
    """Load and validate harness options from a YAML file."""
    config_dir = path.parent.resolve()

    with open(path) as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"{path} is not valid YAML: {e}") from e

    if not isinstance(raw, dict):
        raise ValueError(
            f"{path} must contain a mapping of options, got {type(raw).__name__}"
        )

    config = HarnessConfig(**raw)

    # Resolve a relative artifact_dir relative to the config file location
    if config.artifact_dir is not None:
        artifact_path = Path(config.artifact_dir)
        if not artifact_path.is_absolute():
            config.artifact_dir = str((config_dir / artifact_path).resolve())

    return config
