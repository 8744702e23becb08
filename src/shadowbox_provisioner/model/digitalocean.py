"""DigitalOcean account model: status, regions and region availability."""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from shadowbox_provisioner.cloud.base import AccountInfo, RegionInfo

# Smallest droplet that runs Shadowbox comfortably.
MACHINE_SIZE = "s-1vcpu-1gb"


class Status(str, Enum):
    """Whether an account can create droplets, and if not, why."""

    ACTIVE = "active"
    EMAIL_UNVERIFIED = "email_unverified"
    MISSING_BILLING_INFORMATION = "missing_billing_information"


@dataclass(frozen=True)
class GeoLocation:
    """The city a data center is in."""

    id: str
    country_code: str

    @property
    def country_is_redundant(self) -> bool:
        """True when the city name already identifies the country."""
        return self.country_code in CITY_STATES


CITY_STATES = frozenset({"SG"})

# Keyed by the city prefix of a region slug: "nyc3" is in "nyc".
LOCATIONS = {
    "ams": GeoLocation("amsterdam", "NL"),
    "blr": GeoLocation("bangalore", "IN"),
    "fra": GeoLocation("frankfurt", "DE"),
    "lon": GeoLocation("london", "GB"),
    "nyc": GeoLocation("new-york-city", "US"),
    "sfo": GeoLocation("san-francisco", "US"),
    "sgp": GeoLocation("singapore", "SG"),
    "syd": GeoLocation("sydney", "AU"),
    "tor": GeoLocation("toronto", "CA"),
}


@dataclass(frozen=True)
class Region:
    """A DigitalOcean region, identified by its slug (e.g. ``nyc3``).

    ``name`` is the provider's display name when known. It does not take
    part in equality, so a region read back from a listing still matches
    one built from a bare slug.
    """

    id: str
    name: str | None = field(default=None, compare=False)

    @property
    def location(self) -> GeoLocation | None:
        """The city this region is in, or None for an unknown prefix."""
        return LOCATIONS.get(self.id[:3])


@dataclass(frozen=True)
class RegionOption:
    """A region plus whether a Shadowbox droplet can be created there."""

    cloud_location: Region
    available: bool


def resolve_status(account: AccountInfo) -> Status:
    """Derive the account status.

    An unverified email is reported before missing billing information,
    and every non-"active" status is treated the same way.
    """
    if account.status == "active":
        return Status.ACTIVE
    if not account.email_verified:
        return Status.EMAIL_UNVERIFIED
    return Status.MISSING_BILLING_INFORMATION


def build_region_options(
    regions: Iterable[RegionInfo],
    machine_size: str = MACHINE_SIZE,
) -> list[RegionOption]:
    """Map provider regions to options, preserving the provider's order.

    A region is available when DigitalOcean reports it as available and it
    offers ``machine_size``.
    """
    return [
        RegionOption(
            cloud_location=Region(info.slug, info.name),
            available=info.available and machine_size in info.sizes,
        )
        for info in regions
    ]
