"""Configuration for hook runners.

Settings come from three places, highest priority first:

1. ``HOOKRUNNER_*`` environment variables (and a local ``.env`` file)
2. an optional YAML file (``$HOOKRUNNER_CONFIG`` or an explicit path)
3. the defaults below
"""

import logging
import os
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_ENV_VAR = "HOOKRUNNER_CONFIG"

_PACKAGE_LOGGER = "hookrunner"

_handler: logging.Handler | None = None


class RunnerConfig(BaseSettings):
    """Configuration for a hook runner.

    Settings can be provided via environment variables with HOOKRUNNER_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="HOOKRUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Seconds to wait for the first byte on stdin
    stdin_timeout: float = Field(default=1.0, gt=0)

    # Indentation of JSON replies written to stdout
    json_indent: int = Field(default=2, ge=0)

    # Logging (stderr is part of the hook protocol, so logs are off by default)
    debug: bool = False
    log_level: str = "WARNING"
    log_file: Path | None = None


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML config and flatten nested sections into RunnerConfig field names."""
    with open(path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    flat: dict[str, Any] = {}
    for key, value in raw.items():
        if isinstance(value, dict):
            # Flatten nested sections: log.file -> log_file, etc.
            for sub_key, sub_value in value.items():
                flat[f"{key}_{sub_key}"] = sub_value
        else:
            flat[key] = value

    if flat.get("log_file"):
        flat["log_file"] = Path(str(flat["log_file"])).expanduser()

    return flat


def load_config(path: str | Path | None = None) -> RunnerConfig:
    """Build a RunnerConfig from YAML + .env + env var overrides.

    Args:
        path: YAML file to read. Defaults to ``$HOOKRUNNER_CONFIG``. A path
            that does not exist is ignored.

    Returns:
        The merged configuration.
    """
    data: dict[str, Any] = {}

    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR) or None
    if path is not None and Path(path).expanduser().exists():
        data = _load_yaml(Path(path).expanduser())

    # Env var overrides (highest priority)
    from_env = RunnerConfig().model_dump(exclude_unset=True)
    data.update(from_env)

    return RunnerConfig(**data)


def configure_logging(config: RunnerConfig) -> None:
    """Attach a single handler to the package logger based on config.

    ``log_file`` wins over ``debug``. With neither set, nothing is attached
    and the package's NullHandler keeps stderr clean. Calling this again
    replaces the handler installed by the previous call.
    """
    global _handler

    logger = logging.getLogger(_PACKAGE_LOGGER)
    if _handler is not None:
        logger.removeHandler(_handler)
        _handler.close()
        _handler = None

    if config.log_file:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        _handler = logging.FileHandler(config.log_file, encoding="utf-8")
    elif config.debug:
        _handler = logging.StreamHandler(sys.stderr)
    else:
        return

    _handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
    )
    logger.addHandler(_handler)
    logger.setLevel(logging.DEBUG if config.debug else config.log_level.upper())
