"""Shadowbox Provisioner - create and track Shadowbox servers on DigitalOcean."""

from shadowbox_provisioner.account import BASE_IMAGE, SHADOWBOX_TAG, DigitalOceanAccount
from shadowbox_provisioner.config import Config, ProvisioningSettings
from shadowbox_provisioner.digitalocean_server import DigitalOceanServer
from shadowbox_provisioner.exceptions import (
    ConfigError,
    InvalidCredentialError,
    ServerManagerError,
    StructuralError,
    TransportError,
)
from shadowbox_provisioner.model import (
    MACHINE_SIZE,
    GeoLocation,
    Region,
    RegionOption,
    Status,
)
from shadowbox_provisioner.observability import (
    AccountContext,
    LogLevel,
    StructuredLogger,
    Timer,
    configure_logging,
    get_logger,
)

__version__ = "0.1.0"
__all__ = [
    # Core
    "BASE_IMAGE",
    "Config",
    "DigitalOceanAccount",
    "DigitalOceanServer",
    "GeoLocation",
    "MACHINE_SIZE",
    "ProvisioningSettings",
    "Region",
    "RegionOption",
    "SHADOWBOX_TAG",
    "Status",
    # Errors
    "ConfigError",
    "InvalidCredentialError",
    "ServerManagerError",
    "StructuralError",
    "TransportError",
    # Observability
    "AccountContext",
    "LogLevel",
    "StructuredLogger",
    "Timer",
    "configure_logging",
    "get_logger",
]
