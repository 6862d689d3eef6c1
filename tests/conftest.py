"""Shared fixtures for transferrer tests."""

import base64

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from transferrer.credentials import BOT_EMAIL


class KeyPair:
    """A freshly generated bot key pair in every form the code consumes."""

    def __init__(self, email: str = BOT_EMAIL):
        self.key = Ed25519PrivateKey.generate()
        self.private_text = self.key.private_bytes(
            encoding=serialization.Encoding.PEM,
            format=serialization.PrivateFormat.OpenSSH,
            encryption_algorithm=serialization.NoEncryption(),
        ).decode('ascii')
        openssh_line = self.key.public_key().public_bytes(
            encoding=serialization.Encoding.OpenSSH,
            format=serialization.PublicFormat.OpenSSH,
        ).decode('ascii')
        self.public_body = openssh_line.split()[1]
        self.public_line = f"{openssh_line} {email}"

    @property
    def private_env(self) -> str:
        return base64.b64encode(self.private_text.encode('utf-8')).decode('ascii')

    @property
    def public_env(self) -> str:
        return base64.b64encode(self.public_line.encode('utf-8')).decode('ascii')


@pytest.fixture
def keypair():
    return KeyPair()


@pytest.fixture
def other_keypair():
    return KeyPair()


@pytest.fixture
def secret_env(keypair):
    """Environment with every secret slot set to valid values."""
    return {
        'GITHUB_TOKEN': 'ghp_readertoken',
        'TRANSFER_BOT_TOKEN': 'ghp_bottoken',
        'TRANSFER_BOT_ED25519': keypair.private_env,
        'TRANSFER_BOT_ED25519_PUB': keypair.public_env,
    }
