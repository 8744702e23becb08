"""Utility modules."""

from shadowbox_provisioner.utils.crypto import KeyPair, generate_key_pair
from shadowbox_provisioner.utils.validation import sanitize_access_token

__all__ = ["KeyPair", "generate_key_pair", "sanitize_access_token"]
