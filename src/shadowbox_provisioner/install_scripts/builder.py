"""Install script generation for new Shadowbox droplets."""

from shadowbox_provisioner.config import ProvisioningSettings
from shadowbox_provisioner.install_scripts import do_install_script
from shadowbox_provisioner.utils.validation import sanitize_access_token


def bash_escape(s: str) -> str:
    """Replace each non-ASCII character with a unicode escape bash understands.

    DigitalOcean mangles non-ASCII characters in ``user_data``, so the
    generated script must be pure ASCII. Characters in the Basic Multilingual
    Plane become ``\\uXXXX``; anything above it becomes ``\\UXXXXXXXX``.
    ASCII characters are left untouched.
    """
    out = []
    for c in s:
        code = ord(c)
        if code < 0x80:
            out.append(c)
        elif code <= 0xFFFF:
            out.append(f"\\u{code:04x}")
        else:
            out.append(f"\\U{code:08x}")
    return "".join(out)


def _printf_literal(s: str) -> str:
    """Quote ``s`` for use as a single-quoted printf format string."""
    # Backslashes and percent signs are printf metacharacters and must be
    # doubled before the unicode escapes are introduced.
    s = s.replace("\\", "\\\\").replace("%", "%%")
    return bash_escape(s).replace("'", "'\\''")


def _single_quote(value: object) -> str:
    """Render ``value`` as a single-quoted shell word."""
    return "'" + str(value).replace("'", "'\\''") + "'"


def get_install_script(
    access_token: str,
    name: str,
    settings: ProvisioningSettings,
) -> str:
    """Build the user_data script that installs Shadowbox on a droplet.

    Args:
        access_token: DigitalOcean API token, exported for the droplet's
            own tagging calls
        name: Human-assigned server name, used as the default display name
        settings: Optional values exported to the installer

    Returns:
        Complete bash script

    Raises:
        InvalidCredentialError: If the access token fails sanitization
    """
    sanitized_token = sanitize_access_token(access_token)

    lines = [
        "#!/bin/bash -eu",
        f"export DO_ACCESS_TOKEN='{sanitized_token}'",
    ]
    if settings.image_id is not None:
        lines.append(f"export SB_IMAGE={_single_quote(settings.image_id)}")
    if settings.watchtower_refresh_seconds is not None:
        lines.append(
            "export WATCHTOWER_REFRESH_SECONDS="
            f"{_single_quote(settings.watchtower_refresh_seconds)}"
        )
    if settings.sentry_api_url is not None:
        lines.append(f"export SENTRY_API_URL={_single_quote(settings.sentry_api_url)}")
    if settings.metrics_url is not None:
        lines.append(f"export SB_METRICS_URL={_single_quote(settings.metrics_url)}")
    lines.append(
        f"export SB_DEFAULT_SERVER_NAME=\"$(printf -- '{_printf_literal(name)}')\""
    )

    return "\n".join(lines) + "\n" + do_install_script.SCRIPT
