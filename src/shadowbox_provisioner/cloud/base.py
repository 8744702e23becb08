"""Protocol and response types for the DigitalOcean API session.

Raw API payloads are converted into the dataclasses below as soon as they
are received. Missing or mistyped required fields raise StructuralError
instead of leaking ``None`` into the rest of the code.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from shadowbox_provisioner.exceptions import StructuralError


def _require(data: Any, key: str, kind: type, what: str) -> Any:
    if not isinstance(data, dict):
        raise StructuralError(f"Expected {what} object, got {type(data).__name__}")
    if key not in data:
        raise StructuralError(f"{what} is missing required field '{key}'")
    value = data[key]
    # bool is a subclass of int, but True is not a droplet id
    if not isinstance(value, kind) or (isinstance(value, bool) and kind is not bool):
        raise StructuralError(
            f"{what} field '{key}' has unexpected type {type(value).__name__}"
        )
    return value


def _optional(data: dict[str, Any], key: str, kind: type, what: str) -> Any:
    value = data.get(key)
    if value is not None and not isinstance(value, kind):
        raise StructuralError(
            f"{what} field '{key}' has unexpected type {type(value).__name__}"
        )
    return value


@dataclass
class AccountInfo:
    """Account details from ``GET /account``."""

    status: str
    email_verified: bool
    email: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "AccountInfo":
        """Create from an API payload."""
        email = data.get("email") if isinstance(data, dict) else None
        return cls(
            status=_require(data, "status", str, "account"),
            email_verified=_require(data, "email_verified", bool, "account"),
            email=email if isinstance(email, str) else None,
        )


@dataclass
class RegionInfo:
    """A region entry from ``GET /regions``."""

    slug: str
    available: bool
    sizes: list[str]
    name: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> "RegionInfo":
        """Create from an API payload."""
        sizes = _require(data, "sizes", list, "region")
        if not all(isinstance(size, str) for size in sizes):
            raise StructuralError("region field 'sizes' must be a list of strings")
        name = data.get("name")
        return cls(
            slug=_require(data, "slug", str, "region"),
            available=_require(data, "available", bool, "region"),
            sizes=sizes,
            name=name if isinstance(name, str) else None,
        )


@dataclass
class DropletInfo:
    """A droplet descriptor as returned by the droplet endpoints."""

    id: int
    name: str
    status: str | None = None
    tags: list[str] = field(default_factory=list)
    region_slug: str | None = None
    size_slug: str | None = None
    created_at: str | None = None
    networks: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Any) -> "DropletInfo":
        """Create from an API payload."""
        droplet_id = _require(data, "id", int, "droplet")
        name = _require(data, "name", str, "droplet")
        tags = _optional(data, "tags", list, "droplet") or []
        if not all(isinstance(tag, str) for tag in tags):
            raise StructuralError("droplet field 'tags' must be a list of strings")
        region = _optional(data, "region", dict, "droplet") or {}
        networks = data.get("networks")
        return cls(
            id=droplet_id,
            name=name,
            status=_optional(data, "status", str, "droplet"),
            tags=list(tags),
            region_slug=_optional(region, "slug", str, "region"),
            size_slug=_optional(data, "size_slug", str, "droplet"),
            created_at=_optional(data, "created_at", str, "droplet"),
            networks=networks if isinstance(networks, dict) else {},
            raw=data,
        )

    def public_ipv4(self) -> str | None:
        """Return the droplet's public IPv4 address, if one is assigned yet."""
        for network in self.networks.get("v4") or []:
            if isinstance(network, dict) and network.get("type") == "public":
                return network.get("ip_address")
        return None


@dataclass
class DropletSpec:
    """Creation parameters shared by every Shadowbox droplet."""

    install_command: str
    size: str
    image: str
    tags: list[str]


@runtime_checkable
class DigitalOceanSession(Protocol):
    """Protocol for a DigitalOcean API session.

    Implementations raise TransportError for any failure talking to the
    API and StructuralError for payloads they cannot interpret.
    """

    access_token: str

    async def get_account(self) -> AccountInfo:
        """Fetch the account the token belongs to."""
        ...

    async def get_region_info(self) -> list[RegionInfo]:
        """Fetch all regions in the provider's order."""
        ...

    async def create_droplet(
        self,
        name: str,
        region_id: str,
        public_key: str,
        spec: DropletSpec,
    ) -> DropletInfo:
        """Create a droplet and return its descriptor."""
        ...

    async def get_droplet(self, droplet_id: int) -> DropletInfo:
        """Fetch a single droplet."""
        ...

    async def get_droplets_by_tag(self, tag: str) -> list[DropletInfo]:
        """Fetch every droplet carrying ``tag``."""
        ...
