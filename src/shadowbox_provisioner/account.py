"""DigitalOcean account management for Shadowbox servers.

A DigitalOceanAccount creates Shadowbox droplets and keeps an in-memory
registry of the ones it knows about. Droplets are recognised as ours by the
``shadowbox`` tag, which is attached at creation time.
"""

import asyncio
from collections.abc import Awaitable, Callable

from shadowbox_provisioner.cloud.base import DigitalOceanSession, DropletInfo, DropletSpec
from shadowbox_provisioner.config import ProvisioningSettings
from shadowbox_provisioner.digitalocean_server import DigitalOceanServer
from shadowbox_provisioner.exceptions import ServerManagerError
from shadowbox_provisioner.install_scripts import get_install_script
from shadowbox_provisioner.model.digitalocean import (
    MACHINE_SIZE,
    Region,
    RegionOption,
    Status,
    build_region_options,
    resolve_status,
)
from shadowbox_provisioner.observability import (
    AccountContext,
    DiagnosticCallback,
    Timer,
    get_logger,
    log_diagnostic,
)
from shadowbox_provisioner.utils.crypto import KeyPair, generate_key_pair

logger = get_logger(__name__)

# Tag used to mark Shadowbox droplets.
SHADOWBOX_TAG = "shadowbox"
BASE_IMAGE = "docker-18-04"

KeyPairGenerator = Callable[[], Awaitable[KeyPair]]


class DigitalOceanAccount:
    """A DigitalOcean account that hosts Shadowbox servers.

    Registry updates are serialized: a create appends one server and a
    refresh replaces the whole list, never both at once. Readers get a
    snapshot copy.
    """

    def __init__(
        self,
        id: str,
        access_token: str,
        settings: ProvisioningSettings,
        debug_mode: bool = False,
        session: DigitalOceanSession | None = None,
        key_pair_generator: KeyPairGenerator = generate_key_pair,
        diagnostics: DiagnosticCallback = log_diagnostic,
    ) -> None:
        """Initialize the account.

        The access token is not validated here; an unusable token surfaces
        as InvalidCredentialError on the first create_server() call.

        Args:
            id: Caller-assigned account id, prefixed to every server id
            access_token: DigitalOcean personal access token
            settings: Values exported to each droplet's install script
            debug_mode: Emit private SSH keys of new droplets through
                ``diagnostics``. Never enable in production.
            session: API session; defaults to a RestApiSession for the token
            key_pair_generator: Async factory for droplet SSH key pairs
            diagnostics: Receives debug-only messages
        """
        if session is None:
            from shadowbox_provisioner.cloud.digitalocean_api import RestApiSession

            session = RestApiSession(access_token)

        self._id = id
        self._access_token = access_token
        self._settings = settings
        self._debug_mode = debug_mode
        self._session = session
        self._key_pair_generator = key_pair_generator
        self._diagnostics = diagnostics
        self._servers: list[DigitalOceanServer] = []
        self._registry_lock = asyncio.Lock()

    def get_id(self) -> str:
        return self._id

    async def get_name(self) -> str | None:
        """Return the account email, or None if DigitalOcean omits it."""
        async with AccountContext(self._id, "get_name"):
            account = await self._session.get_account()
            return account.email

    async def get_status(self) -> Status:
        async with AccountContext(self._id, "get_status"):
            account = await self._session.get_account()
            status = resolve_status(account)
            logger.debug("Resolved account status", context={"status": status.value})
            return status

    async def list_locations(self) -> list[RegionOption]:
        """List regions, marking those that can host a Shadowbox droplet."""
        async with AccountContext(self._id, "list_locations"):
            regions = await self._session.get_region_info()
            return build_region_options(regions, MACHINE_SIZE)

    async def create_server(self, region: Region, name: str) -> DigitalOceanServer:
        """Create a Shadowbox droplet and add it to the registry.

        Args:
            region: Region to create the droplet in
            name: Server name, also the default display name on the droplet

        Returns:
            The new server

        Raises:
            InvalidCredentialError: If the access token cannot be embedded in
                the install script. Nothing is sent to DigitalOcean.
            TransportError: If the API call fails
            StructuralError: If the API response cannot be interpreted
        """
        async with AccountContext(self._id, "create_server"):
            timer = Timer()
            try:
                with timer:
                    server = await self._create_server(region, name)
            except ServerManagerError as e:
                logger.error(
                    "Failed to create droplet",
                    context={"region": region.id},
                    error=e,
                    duration_ms=timer.duration_ms,
                )
                raise

            logger.info(
                "Created droplet",
                context={"server_id": server.get_id(), "region": region.id},
                duration_ms=timer.duration_ms,
            )
            return server

    async def _create_server(self, region: Region, name: str) -> DigitalOceanServer:
        key_pair_task = asyncio.ensure_future(self._key_pair_generator())
        try:
            install_command = get_install_script(self._access_token, name, self._settings)
        except Exception:
            key_pair_task.cancel()
            raise
        key_pair = await key_pair_task

        if self._debug_mode:
            logger.warning(
                "Debug mode is on, emitting the new droplet's private SSH key",
                context={"region": region.id},
            )
            # Strip carriage returns, which produce weird blank lines
            # when pasted into a terminal.
            private_key = key_pair.private.replace("\r", "")
            self._diagnostics(
                f"private key for SSH access to new droplet:\n{private_key}\n\n"
                'Use "ssh -i keyfile root@[ip_address]" to connect to the machine'
            )

        spec = DropletSpec(
            install_command=install_command,
            size=MACHINE_SIZE,
            image=BASE_IMAGE,
            tags=[SHADOWBOX_TAG],
        )
        async with self._registry_lock:
            droplet = await self._session.create_droplet(
                name, region.id, key_pair.public, spec
            )
            server = self._wrap(droplet)
            self._servers = [*self._servers, server]
        return server

    async def list_servers(self, fetch_from_host: bool = True) -> list[DigitalOceanServer]:
        """List the account's Shadowbox servers.

        Args:
            fetch_from_host: When False, return the in-memory registry
                without any API call. When True, replace the registry with
                the droplets currently tagged ``shadowbox``.

        Returns:
            Snapshot of the registry
        """
        if not fetch_from_host:
            return list(self._servers)

        async with AccountContext(self._id, "list_servers"):
            try:
                async with self._registry_lock:
                    droplets = await self._session.get_droplets_by_tag(SHADOWBOX_TAG)
                    servers = [self._wrap(droplet) for droplet in droplets]
                    self._servers = servers
            except ServerManagerError as e:
                logger.error("Failed to refresh server list", error=e)
                raise
            logger.debug("Refreshed server list", context={"count": len(servers)})
            return list(servers)

    def get_access_token(self) -> str:
        return self._access_token

    def _wrap(self, droplet: DropletInfo) -> DigitalOceanServer:
        return DigitalOceanServer(f"{self._id}:{droplet.id}", self._session, droplet)
