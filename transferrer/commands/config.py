"""
Handles the 'config' command group.

Shows the effective configuration and writes a starter config file.
Secrets never appear here; they come only from environment variables.
"""

import click

from ..config import get_config_path, get_default_config, load_config, save_config
from ..exit_codes import ConfigError
from ..cli_utils import standard_command


@click.group("config")
def config_cmd():
    """Configuration management commands."""
    pass


@config_cmd.command("show")
@click.option("--path", is_flag=True, help="Show the config file path being used")
@standard_command
def show_config(path):
    """Show the current configuration with all merges applied.

    \b
    Defaults, then the config file, then TRANSFERRER_* environment
    overrides. Output is a single JSON object.
    """
    if path:
        return {"config_path": str(get_config_path())}
    return load_config()


@config_cmd.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config file")
@standard_command
def init_config(force):
    """Write the default configuration to the config file.

    \b
    The format follows the file suffix (.json, .toml, .yaml); point
    TRANSFERRER_CONFIG at a new file to choose one.
    """
    config_path = get_config_path()
    if config_path.exists() and not force:
        raise ConfigError(f"Config file already exists at {config_path}; use --force to overwrite")

    save_config(get_default_config())
    return {"config_path": str(config_path), "written": True}
