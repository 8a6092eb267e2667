"""Configuration loading from env vars and an optional YAML file."""

import logging
import os
from dataclasses import dataclass

import yaml

logger = logging.getLogger(__name__)

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _parse_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("true", "1", "yes")


@dataclass(frozen=True)
class Config:
    log_level: str = "INFO"
    skip_hidden: bool = False
    create_output_dir: bool = True


def load_yaml_config(path: str | None) -> dict:
    """Load settings from a YAML file. Returns empty dict if no path."""
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except OSError as e:
        raise ValueError(f"cannot read config file {path}: {e.strerror or e}") from e
    except yaml.YAMLError as e:
        raise ValueError(f"invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping at the top level")
    logger.info("Loaded YAML config from %s", path)
    return data


def load_config(yaml_data: dict | None = None) -> Config:
    """Build Config from env vars, then YAML data, then defaults."""
    yaml_data = yaml_data or {}

    def _setting(env_key: str, yaml_key: str, default):
        value = os.environ.get(env_key)
        if value is not None:
            return value
        return yaml_data.get(yaml_key, default)

    log_level = str(_setting("HISTORY_MERGE_LOG_LEVEL", "log_level", Config.log_level)).upper()
    if log_level not in VALID_LOG_LEVELS:
        raise ValueError(f"log_level must be one of {list(VALID_LOG_LEVELS)}, got '{log_level}'")

    return Config(
        log_level=log_level,
        skip_hidden=_parse_bool(
            _setting("HISTORY_MERGE_SKIP_HIDDEN", "skip_hidden", Config.skip_hidden)
        ),
        create_output_dir=_parse_bool(
            _setting("HISTORY_MERGE_CREATE_OUTPUT", "create_output_dir", Config.create_output_dir)
        ),
    )
