"""Input validation utilities."""

import re

from shadowbox_provisioner.exceptions import InvalidCredentialError

# Access tokens end up inside a single-quoted shell literal, so only
# characters that cannot terminate or escape the literal are accepted.
ACCESS_TOKEN_RE = re.compile(r"^[A-Za-z0-9_/-]+$")


def sanitize_access_token(value: str) -> str:
    """Validate an API access token before it is embedded in a script.

    Args:
        value: Raw token as supplied by the user

    Returns:
        The token with surrounding whitespace removed

    Raises:
        InvalidCredentialError: If the token is empty or contains
            characters outside letters, digits, ``_``, ``-`` and ``/``
    """
    sanitized = value.strip()
    if not ACCESS_TOKEN_RE.fullmatch(sanitized):
        raise InvalidCredentialError("Invalid DigitalOcean token")
    return sanitized
