"""Handle for a Shadowbox droplet."""

from shadowbox_provisioner.cloud.base import DigitalOceanSession, DropletInfo


class DigitalOceanServer:
    """A Shadowbox droplet owned by a DigitalOceanAccount.

    Holds the last known droplet descriptor. Call refresh() to reload it,
    e.g. while waiting for a public IP to be assigned.
    """

    def __init__(
        self,
        id: str,
        session: DigitalOceanSession,
        droplet_info: DropletInfo,
    ) -> None:
        self._id = id
        self._session = session
        self.droplet_info = droplet_info

    def get_id(self) -> str:
        return self._id

    def get_name(self) -> str:
        return self.droplet_info.name

    def get_host(self) -> str | None:
        return self.droplet_info.public_ipv4()

    def get_region(self) -> str | None:
        return self.droplet_info.region_slug

    def get_tags(self) -> list[str]:
        return list(self.droplet_info.tags)

    async def refresh(self) -> None:
        self.droplet_info = await self._session.get_droplet(self.droplet_info.id)

    def __repr__(self) -> str:
        return f"DigitalOceanServer(id={self._id!r}, name={self.get_name()!r})"
