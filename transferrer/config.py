#!/usr/bin/env python3

import os
import re
import json
import tomllib
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from .exit_codes import ConfigError

import logging
import sys

# Console logging; configure_logging adds the per-run file
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr)
    ]
)
logger = logging.getLogger("transferrer")

CONFIG_DIR_NAME = '.transferrer'
CONFIG_FILE_NAMES = ('config.json', 'config.toml', 'config.yaml', 'config.yml')
ENV_PREFIX = "TRANSFERRER_"
CONFIG_PATH_ENV = "TRANSFERRER_CONFIG"
LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_FLOAT = re.compile(r"^\d+\.\d+$")


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Checks in order:
    1. TRANSFERRER_CONFIG environment variable
    2. ~/.transferrer/config.{json,toml,yaml,yml}

    An explicit TRANSFERRER_CONFIG path is returned even if the file does not
    exist yet, so `config init` can create it. Otherwise falls back to
    ~/.transferrer/config.json.
    """
    explicit = os.environ.get(CONFIG_PATH_ENV)
    if explicit:
        return Path(explicit).expanduser()

    config_dir = Path.home() / CONFIG_DIR_NAME
    for filename in CONFIG_FILE_NAMES:
        candidate = config_dir / filename
        if candidate.exists() and candidate.stat().st_size > 10:  # skip empty stubs
            return candidate

    return config_dir / CONFIG_FILE_NAMES[0]


def _config_format(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == '.toml':
        return 'toml'
    if suffix in ('.yaml', '.yml'):
        return 'yaml'
    return 'json'


def _read_config_file(path: Path) -> Dict[str, Any]:
    fmt = _config_format(path)
    if fmt == 'toml':
        with open(path, 'rb') as f:
            return tomllib.load(f)
    if fmt == 'yaml':
        import yaml
        with open(path, 'r', encoding='utf-8') as f:
            return yaml.safe_load(f) or {}
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)


def _write_config_file(path: Path, config: Dict[str, Any]) -> None:
    fmt = _config_format(path)
    with open(path, 'w', encoding='utf-8') as f:
        if fmt == 'toml':
            # tomllib cannot write
            import toml
            toml.dump(config, f)
        elif fmt == 'yaml':
            import yaml
            yaml.safe_dump(config, f, default_flow_style=False)
        else:
            json.dump(config, f, indent=2)


def load_config() -> Dict[str, Any]:
    """
    Load configuration: defaults, then the config file, then environment
    overrides. An unreadable config file is logged and ignored.
    """
    config = get_default_config()
    config_path = get_config_path()

    if config_path.exists():
        try:
            config = merge_configs(config, _read_config_file(config_path))
        except Exception as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    return apply_env_overrides(config)


def save_config(config: Dict[str, Any]) -> Path:
    """
    Save configuration in the format implied by the config file's suffix.

    Raises:
        ConfigError: If the file cannot be written
    """
    config_path = get_config_path()
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        _write_config_file(config_path, config)
    except OSError as e:
        raise ConfigError(f"Error saving config to {config_path}: {e}") from e

    logger.info(f"Configuration saved to {config_path}")
    return config_path


def get_default_config() -> Dict[str, Any]:
    """Get default configuration."""
    return {
        "registry": {
            "api_url": "https://registry.purescript.org/api",
            "timeout_seconds": 30,
            "legacy_prefixes": ["purescript-"]
        },
        "paths": {
            "legacy_file": "bower-packages.json",
            "metadata_dir": "metadata",
            "log_dir": "logs"
        },
        "github": {
            "max_retries": 3,
            "base_delay_seconds": 1.0,
            "max_delay_seconds": 60,
            "timeout_seconds": 30
        },
        "logging": {
            "level": "INFO"
        }
    }


def merge_configs(base_config: Dict[str, Any], override_config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Recursively merge two configuration dictionaries.

    Nested sections merge key by key; any other value in override_config
    replaces the base value. Neither argument is modified.
    """
    merged = dict(base_config)
    for key, value in override_config.items():
        base_value = merged.get(key)
        if isinstance(base_value, dict) and isinstance(value, dict):
            merged[key] = merge_configs(base_value, value)
        else:
            merged[key] = value
    return merged


def _coerce_env_value(value: str) -> Any:
    lowered = value.lower()
    if lowered in ('true', 'yes', 'on'):
        return True
    if lowered in ('false', 'no', 'off'):
        return False
    if value.isdigit():
        return int(value)
    if _FLOAT.match(value):
        return float(value)
    return value


def _match_key(section: Dict[str, Any], parts: list) -> Optional[str]:
    """Longest key in section whose underscore-split words prefix parts."""
    best = None
    for key in section:
        words = key.split('_')
        if parts[:len(words)] == words and (best is None or len(words) > len(best.split('_'))):
            best = key
    return best


def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Variables follow the pattern TRANSFERRER_SECTION_KEY, e.g.
    TRANSFERRER_GITHUB_MAX_RETRIES=5. Keys containing underscores are
    matched greedily, so TRANSFERRER_REGISTRY_API_URL sets registry.api_url.
    List settings take comma-separated values.
    """
    for env_key, raw in os.environ.items():
        if not env_key.startswith(ENV_PREFIX) or env_key == CONFIG_PATH_ENV:
            continue

        parts = env_key[len(ENV_PREFIX):].lower().split('_')
        section = config
        while parts:
            key = _match_key(section, parts)
            if key is None:
                break

            parts = parts[len(key.split('_')):]
            if not parts:
                value = _coerce_env_value(raw)
                if isinstance(section[key], list) and isinstance(value, str):
                    value = [item.strip() for item in value.split(',') if item.strip()]
                section[key] = value
                break

            if not isinstance(section[key], dict):
                break
            section = section[key]

    return config


def log_file_name(started_at: datetime) -> str:
    """Log file name for a run, stamped with its start time to the second."""
    return f"transfer-{started_at.replace(microsecond=0).isoformat()}.log"


def configure_logging(log_dir, started_at: Optional[datetime] = None, level: str = "INFO") -> Path:
    """
    Send transferrer logs to stderr and to a per-run log file.

    Args:
        log_dir: Directory for the log file (created if missing)
        started_at: Run start time (defaults to now)
        level: Logging level name

    Returns:
        Path of the log file
    """
    started_at = started_at or datetime.now()
    log_dir = Path(log_dir).expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / log_file_name(started_at)

    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()

    file_handler = logging.FileHandler(log_path, encoding='utf-8')
    file_handler.setFormatter(logging.Formatter(LOG_FILE_FORMAT))
    logger.addHandler(file_handler)
    logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    logger.debug(f"Logging to {log_path}")
    return log_path
