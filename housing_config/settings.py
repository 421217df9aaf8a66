"""
Settings loader (``housing_config.settings``).

Responsibility
--------------
Reads deployment settings from an optional YAML file with PyYAML and
applies environment-variable overrides on top.  The result is a frozen
``HousingSettings``.

Architecture position
---------------------
**Config layer** -- sits above ``housing_kernel``.  The kernel never imports
this package; values reach the kernel as plain constructor arguments
(database URL, log level).

Invariants enforced
-------------------
* ``max_officer_slots`` is fixed by the kernel at ``MAX_OFFICER_SLOTS``;
  a settings file may restate it but not change it.
* Unknown keys are rejected rather than ignored.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Unknown key, bad log level, bad boolean or slot override  -> ``ValueError``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

import yaml

from housing_kernel.domain.inventory import MAX_OFFICER_SLOTS

ENV_DATABASE_URL = "HOUSING_DATABASE_URL"
ENV_LOG_LEVEL = "HOUSING_LOG_LEVEL"
ENV_ECHO_SQL = "HOUSING_ECHO_SQL"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class HousingSettings:
    """Deployment settings for one process."""

    database_url: str = "sqlite:///:memory:"
    echo_sql: bool = False
    log_level: str = "INFO"
    max_officer_slots: int = MAX_OFFICER_SLOTS

    def __post_init__(self) -> None:
        level = self.log_level.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {self.log_level!r}")
        object.__setattr__(self, "log_level", level)
        if self.max_officer_slots != MAX_OFFICER_SLOTS:
            raise ValueError(
                f"max_officer_slots is fixed at {MAX_OFFICER_SLOTS}, "
                f"got {self.max_officer_slots}"
            )

    @property
    def log_level_number(self) -> int:
        return logging.getLevelName(self.log_level)


def parse_bool(value: Any) -> bool:
    """Parse a YAML or environment boolean."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"Cannot parse boolean from {value!r}")


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML mapping; an empty file yields an empty dict."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping, got {type(data).__name__}")
    return data


def settings_from_dict(data: Mapping[str, Any]) -> HousingSettings:
    known = {f.name for f in fields(HousingSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown settings keys: {', '.join(unknown)}")
    values = dict(data)
    if "echo_sql" in values:
        values["echo_sql"] = parse_bool(values["echo_sql"])
    if "max_officer_slots" in values:
        values["max_officer_slots"] = int(values["max_officer_slots"])
    return HousingSettings(**values)


def apply_env_overrides(
    settings: HousingSettings, environ: Mapping[str, str] | None = None
) -> HousingSettings:
    env = os.environ if environ is None else environ
    changes: dict[str, Any] = {}
    if env.get(ENV_DATABASE_URL):
        changes["database_url"] = env[ENV_DATABASE_URL]
    if env.get(ENV_LOG_LEVEL):
        changes["log_level"] = env[ENV_LOG_LEVEL]
    if ENV_ECHO_SQL in env:
        changes["echo_sql"] = parse_bool(env[ENV_ECHO_SQL])
    return replace(settings, **changes) if changes else settings


def load_settings(
    path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> HousingSettings:
    """
    Build settings from ``path`` (if given) and the environment.

    Precedence: environment over file over defaults.
    """
    data = load_yaml_file(Path(path)) if path is not None else {}
    return apply_env_overrides(settings_from_dict(data), environ)
