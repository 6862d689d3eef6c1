"""
Handles the 'transfer' command.

Reads the legacy registry snapshot, finds every package whose repository
has moved, and submits a signed transfer request for each one.

This command follows our design principles:
- Default output is JSONL of changed entries, or a table with --table
- Logs go to stderr and to a per-run log file
- Thin CLI layer that wires configuration into the transfer service
"""

import sys
from datetime import datetime

import click

from ..config import load_config, configure_logging, logger
from ..credentials import resolve_secrets
from ..infra import GitHubClient, GitHubTagLister, MetadataStore, RegistryClient, FileStore
from ..render import render_transfer_table
from ..services import LocationReconciler, TransferService, changed_entries
from ..cli_utils import standard_command, add_common_options
from ..exit_codes import ConfigError


def _setting(section, name, key, default, cast):
    """Read a numeric setting, accepting string values from files or env."""
    value = section.get(key, default)
    try:
        return cast(value)
    except (TypeError, ValueError):
        raise ConfigError(f"Setting {name}.{key} must be a number, got {value!r}")


def build_service(config, secrets, metadata_dir, dry_run=False) -> TransferService:
    """Wire clients and services from configuration and resolved secrets."""
    github_config = config.get('github', {})
    registry_config = config.get('registry', {})
    prefixes = registry_config.get('legacy_prefixes', [])

    github = GitHubClient(
        token=secrets.github_token,
        max_retries=_setting(github_config, 'github', 'max_retries', 3, int),
        base_delay=_setting(github_config, 'github', 'base_delay_seconds', 1.0, float),
        max_delay=_setting(github_config, 'github', 'max_delay_seconds', 60, float),
        timeout=_setting(github_config, 'github', 'timeout_seconds', 30, float),
    )
    reconciler = LocationReconciler(
        GitHubTagLister(github),
        MetadataStore(metadata_dir, prefixes),
    )
    registry = RegistryClient(
        registry_config.get('api_url', ''),
        token=secrets.bot_token,
        timeout=_setting(registry_config, 'registry', 'timeout_seconds', 30, float),
    )
    return TransferService(
        reconciler,
        registry,
        secrets.credentials,
        legacy_prefixes=prefixes,
        dry_run=dry_run,
    )


@click.command(name='transfer')
@click.option('--legacy-file', type=click.Path(dir_okay=False), default=None,
              help='Legacy registry snapshot (JSON object of name -> URL)')
@click.option('--metadata-dir', type=click.Path(file_okay=False), default=None,
              help='Directory of registry metadata files')
@click.option('--log-dir', type=click.Path(file_okay=False), default=None,
              help='Directory for the run log file')
@click.option('--write/--no-write', default=False,
              help='Save the updated snapshot back to the legacy file')
@click.option('--table/--no-table', default=None,
              help='Display as formatted table (auto-detected by default)')
@add_common_options('verbose', 'quiet', 'dry_run')
@standard_command
def transfer_handler(legacy_file, metadata_dir, log_dir, write, table, verbose, quiet, dry_run):
    """Transfer packages whose repositories have moved.

    \b
    For every package in the legacy snapshot, compares the registry's
    recorded location with the repository its latest published version's
    tag lives in. Each package that moved gets a signed transfer request.

    \b
    Required environment:
        GITHUB_TOKEN               GitHub token (ghp_...)
        TRANSFER_BOT_TOKEN         Bot GitHub token (ghp_...)
        TRANSFER_BOT_ED25519       Base64 bot private key
        TRANSFER_BOT_ED25519_PUB   Base64 bot public key line

    Examples:

    \b
        transferrer transfer --dry-run          # Sign but do not submit
        transferrer transfer --write --table    # Submit and save snapshot
    """
    started_at = datetime.now()
    config = load_config()
    paths = config.get('paths', {})

    level = 'DEBUG' if verbose else config.get('logging', {}).get('level', 'INFO')
    log_path = configure_logging(log_dir or paths.get('log_dir', 'logs'), started_at, level)
    logger.info(f"Transfer run started; logging to {log_path}")

    secrets = resolve_secrets()

    store = FileStore(legacy_file or paths.get('legacy_file', 'bower-packages.json'))
    packages = store.read()

    service = build_service(
        config,
        secrets,
        metadata_dir or paths.get('metadata_dir', 'metadata'),
        dry_run=dry_run,
    )
    result = service.run(packages)
    changes = changed_entries(packages, result)

    if write and changes:
        if dry_run:
            logger.info(f"[DRY RUN] Would update {len(changes)} entries in {store.path}")
        else:
            store.write(result)
            logger.info(f"Updated {len(changes)} entries in {store.path}")

    if table is None:
        table = sys.stdout.isatty()

    if table and not quiet:
        render_transfer_table(changes, dry_run=dry_run)
        return None

    return [
        {'name': name, 'old': change['old'], 'new': change['new'], 'dry_run': dry_run}
        for name, change in changes.items()
    ]
