"""Cryptographic utilities."""

import asyncio
from dataclasses import dataclass

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


@dataclass(frozen=True)
class KeyPair:
    """An SSH key pair.

    ``public`` is in OpenSSH ``authorized_keys`` format, ``private`` is a
    PEM-encoded, unencrypted private key.
    """

    public: str
    private: str

    def __repr__(self) -> str:
        return f"KeyPair(public={self.public!r}, private=<redacted>)"


def _generate_rsa_key_pair(key_size: int) -> KeyPair:
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=key_size)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_ssh = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.OpenSSH,
        format=serialization.PublicFormat.OpenSSH,
    )
    return KeyPair(public=public_ssh.decode(), private=private_pem.decode())


async def generate_key_pair(key_size: int = 2048) -> KeyPair:
    """Generate a new RSA key pair for SSH access to a droplet.

    Key generation is CPU bound, so it runs in a worker thread to keep the
    event loop free while the rest of the create flow proceeds.

    Args:
        key_size: RSA modulus size in bits

    Returns:
        Newly generated KeyPair
    """
    return await asyncio.to_thread(_generate_rsa_key_pair, key_size)
