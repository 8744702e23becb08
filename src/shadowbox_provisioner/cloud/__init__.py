"""DigitalOcean API access."""

from shadowbox_provisioner.cloud.base import (
    AccountInfo,
    DigitalOceanSession,
    DropletInfo,
    DropletSpec,
    RegionInfo,
)
from shadowbox_provisioner.cloud.digitalocean_api import RestApiSession

__all__ = [
    "AccountInfo",
    "DigitalOceanSession",
    "DropletInfo",
    "DropletSpec",
    "RegionInfo",
    "RestApiSession",
]
