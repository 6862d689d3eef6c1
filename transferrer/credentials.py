"""
Secret resolution for transferrer.

Secrets come only from environment variables, never from the config file.
Each slot is declared once as an EnvKey: the variable name paired with the
decoder that validates it. Resolution happens at startup, before any
package is looked at, so a bad token or key fails the run immediately.

Example:
    token = lookup_required(GITHUB_TOKEN)
    credentials = resolve_credentials()
"""

import base64
import binascii
import os
from dataclasses import dataclass
from typing import Callable, Generic, Mapping, Optional, TypeVar, List

from .exit_codes import MissingConfigError, DecodeError

T = TypeVar('T')

BOT_EMAIL = "pacchettibotti@purescript.org"
BOT_KEY_TYPE = "ssh-ed25519"
GITHUB_TOKEN_PREFIX = "ghp_"


@dataclass(frozen=True)
class EnvKey(Generic[T]):
    """
    A configuration slot bound to its decoder.

    Attributes:
        key: Environment variable name
        decode: Returns the decoded value or raises ValueError with a reason
    """
    key: str
    decode: Callable[[str], T]


@dataclass(frozen=True)
class Credentials:
    """Decoded signing key material."""
    public_key: str
    private_key: str

    def __repr__(self) -> str:
        return "Credentials(public_key=<redacted>, private_key=<redacted>)"

    __str__ = __repr__


# =============================================================================
# DECODERS
# =============================================================================

def decode_github_token(value: str) -> str:
    """Accept only classic personal access tokens."""
    if not value.startswith(GITHUB_TOKEN_PREFIX):
        raise ValueError(f"GitHub tokens begin with {GITHUB_TOKEN_PREFIX}, but received {value} instead.")
    return value


def decode_base64_key(value: str) -> str:
    """Decode base64-wrapped key material into trimmed text."""
    try:
        decoded = base64.b64decode(value.strip(), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(str(e)) from e
    try:
        return decoded.decode('utf-8').strip()
    except UnicodeDecodeError as e:
        raise ValueError(str(e)) from e


def decode_public_key(value: str) -> str:
    """
    Decode a base64-wrapped OpenSSH public key line.

    The decoded text must be 'keytype key email' with the bot's key type
    and email. Only the key field is returned.
    """
    fields = decode_base64_key(value).split()
    if len(fields) != 3:
        raise ValueError("Key must be of the form 'keytype key email'")

    key_type, key, email = fields
    if key_type != BOT_KEY_TYPE:
        raise ValueError(f"Key type must be {BOT_KEY_TYPE}, but received {key_type} instead.")
    if email != BOT_EMAIL:
        raise ValueError(f"Email must be {BOT_EMAIL}, but received {email} instead.")
    return key


# =============================================================================
# SLOTS
# =============================================================================

GITHUB_TOKEN: EnvKey[str] = EnvKey('GITHUB_TOKEN', decode_github_token)
BOT_TOKEN: EnvKey[str] = EnvKey('TRANSFER_BOT_TOKEN', decode_github_token)
BOT_PRIVATE_KEY: EnvKey[str] = EnvKey('TRANSFER_BOT_ED25519', decode_base64_key)
BOT_PUBLIC_KEY: EnvKey[str] = EnvKey('TRANSFER_BOT_ED25519_PUB', decode_public_key)

ENV_KEYS: List[EnvKey] = [GITHUB_TOKEN, BOT_TOKEN, BOT_PRIVATE_KEY, BOT_PUBLIC_KEY]


def lookup_optional(env_key: EnvKey[T], environ: Optional[Mapping[str, str]] = None) -> Optional[T]:
    """
    Look up and decode a slot; absent or empty yields None.

    Raises:
        DecodeError: If the slot is set but fails to decode
    """
    if environ is None:
        environ = os.environ

    value = environ.get(env_key.key)
    if not value:
        return None

    try:
        return env_key.decode(value)
    except ValueError as e:
        raise DecodeError(env_key.key, str(e)) from e


def lookup_required(env_key: EnvKey[T], environ: Optional[Mapping[str, str]] = None) -> T:
    """
    Look up and decode a slot that must be set.

    Raises:
        MissingConfigError: If the slot is absent or empty
        DecodeError: If the slot fails to decode
    """
    value = lookup_optional(env_key, environ)
    if value is None:
        raise MissingConfigError(env_key.key)
    return value


@dataclass(frozen=True)
class Secrets:
    """Every secret a transfer run needs."""
    github_token: str
    bot_token: str
    credentials: Credentials

    def __repr__(self) -> str:
        return "Secrets(<redacted>)"

    __str__ = __repr__


def resolve_credentials(environ: Optional[Mapping[str, str]] = None) -> Credentials:
    """Resolve the bot's signing key pair."""
    return Credentials(
        public_key=lookup_required(BOT_PUBLIC_KEY, environ),
        private_key=lookup_required(BOT_PRIVATE_KEY, environ),
    )


def resolve_secrets(environ: Optional[Mapping[str, str]] = None) -> Secrets:
    """Resolve every slot in ENV_KEYS in order; the first failure is raised."""
    values = {env_key.key: lookup_required(env_key, environ) for env_key in ENV_KEYS}
    return Secrets(
        github_token=values[GITHUB_TOKEN.key],
        bot_token=values[BOT_TOKEN.key],
        credentials=Credentials(
            public_key=values[BOT_PUBLIC_KEY.key],
            private_key=values[BOT_PRIVATE_KEY.key],
        ),
    )
