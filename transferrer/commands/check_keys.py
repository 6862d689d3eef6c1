"""
Handles the 'check-keys' command.

Resolves every secret slot and proves the bot key pair can sign a payload
that verifies, so broken key material is caught before a transfer run.
"""

import click

from ..config import logger
from ..credentials import ENV_KEYS, BOT_EMAIL, resolve_secrets
from ..domain import GitHubLocation, TransferPayload
from ..exit_codes import SigningError
from ..cli_utils import standard_command, add_common_options
from .. import signing


@click.command(name='check-keys')
@add_common_options('quiet')
@standard_command
def check_keys_handler(quiet):
    """Validate tokens and the bot signing key pair.

    \b
    Signs a probe transfer payload with the configured private key and
    verifies it with the configured public key. Nothing is submitted.
    """
    secrets = resolve_secrets()
    logger.info(f"Resolved {len(ENV_KEYS)} secret slots")

    probe = TransferPayload(name='probe', new_location=GitHubLocation('owner', 'probe'))
    raw_payload = probe.to_json()
    credentials = secrets.credentials
    signature = signing.sign(credentials.private_key, credentials.public_key, raw_payload)

    if not signing.verify(credentials.public_key, raw_payload, signature):
        raise SigningError("Probe signature did not verify against the public key")

    logger.info("Bot key pair signs and verifies")
    return {
        'slots': [env_key.key for env_key in ENV_KEYS],
        'email': BOT_EMAIL,
        'verified': True,
    }
