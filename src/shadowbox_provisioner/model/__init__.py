"""Domain model."""

from shadowbox_provisioner.model.digitalocean import (
    LOCATIONS,
    MACHINE_SIZE,
    GeoLocation,
    Region,
    RegionOption,
    Status,
    build_region_options,
    resolve_status,
)
from shadowbox_provisioner.model.server import ManagedServer

__all__ = [
    "GeoLocation",
    "LOCATIONS",
    "MACHINE_SIZE",
    "ManagedServer",
    "Region",
    "RegionOption",
    "Status",
    "build_region_options",
    "resolve_status",
]
