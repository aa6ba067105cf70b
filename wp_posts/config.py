from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml
from pydantic import ValidationError

from .config_schema import AppConfig
from .errors import ConfigError


@dataclass(frozen=True)
class RuntimeSecrets:
    username: str
    password: str


def load_config(path: str | Path) -> AppConfig:
    """
    Load a YAML config file and validate it into a typed AppConfig.

    Raises ConfigError with a readable validation message on failure.
    """
    p = Path(path)

    if not p.exists():
        raise ConfigError(f"Config file not found: {p}")

    try:
        raw_text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Failed to read config file: {p}") from e

    try:
        data = yaml.safe_load(raw_text)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse YAML in {p}: {e}") from e

    if data is None:
        data = {}

    if not isinstance(data, dict):
        raise ConfigError(f"Top-level YAML in {p} must be a mapping/object")

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(_format_pydantic_errors(e, p)) from e


def resolve_runtime_secrets(
    config: AppConfig, *, environ: Mapping[str, str] | None = None
) -> RuntimeSecrets:
    """Read the WordPress credentials named by the config from the environment."""
    env = os.environ if environ is None else environ

    user_env = config.wordpress.username_env
    password_env = config.wordpress.password_env

    missing = [name for name in (user_env, password_env) if not (env.get(name) or "").strip()]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    return RuntimeSecrets(
        username=env[user_env].strip(),
        password=env[password_env],
    )


def _format_pydantic_errors(err: ValidationError, path: Path) -> str:
    lines: list[str] = [f"Invalid configuration in {path}:"]
    for item in err.errors():
        loc = ".".join(str(part) for part in item.get("loc", [])) or "<root>"
        msg = item.get("msg", "invalid value")
        lines.append(f"- {loc}: {msg}")
    return "\n".join(lines)
