from __future__ import annotations

from pathlib import Path

import yaml
from expandvars import expandvars
from pydantic import BaseModel, ConfigDict, field_validator

from multitool.ledger import DEFAULT_RECORD_FILE

DEFAULT_CONFIG_FILE = "multitool.yaml"


class MultitoolConfig(BaseModel):
    model_config = ConfigDict(extra="forbid")
    record_file: str = DEFAULT_RECORD_FILE
    debug_log: str | None = None
    verbose: bool = False

    @field_validator("record_file")
    @classmethod
    def record_file_must_not_be_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("record_file must not be empty")
        return v


def _expand_path(value: str, base_dir: Path) -> str:
    # ${VAR} without a default and unset is an error rather than an empty path
    expanded = expandvars(value, nounset=True)
    path = Path(expanded).expanduser()
    if not path.is_absolute():
        path = base_dir / path
    return str(path.resolve())


def load_config(path: Path) -> MultitoolConfig:
    """Load and validate a multitool config from a YAML file."""
    config_dir = path.parent.resolve()

    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Expected a mapping at the top level of {path}")

    config = MultitoolConfig(**raw)

    # Resolve relative paths relative to config file location
    try:
        config.record_file = _expand_path(config.record_file, config_dir)
        if config.debug_log is not None:
            config.debug_log = _expand_path(config.debug_log, config_dir)
    except Exception as exc:
        raise ValueError(f"{path}: {exc}") from exc

    return config


def resolve_config(path: str | None) -> MultitoolConfig:
    """Load *path*, or ``multitool.yaml`` in the working directory if present.

    An explicitly named file must exist; the default one is optional.
    """
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"config file not found: {path}")
        return load_config(config_path)

    default = Path(DEFAULT_CONFIG_FILE)
    if default.exists():
        return load_config(default)
    return MultitoolConfig()
