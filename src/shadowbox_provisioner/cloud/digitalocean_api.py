"""DigitalOcean REST API session.

Implements the DigitalOceanSession protocol on top of httpx. Every failure
is reported as TransportError (network problems, non-2xx responses) or
StructuralError (unparseable bodies); nothing is retried.
"""

from typing import Any

import httpx

from shadowbox_provisioner.cloud.base import (
    AccountInfo,
    DropletInfo,
    DropletSpec,
    RegionInfo,
)
from shadowbox_provisioner.exceptions import StructuralError, TransportError
from shadowbox_provisioner.observability import Timer, get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.digitalocean.com/v2"


class RestApiSession:
    """DigitalOcean API session authenticated with a personal access token."""

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        page_size: int = 100,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the session.

        Args:
            access_token: DigitalOcean personal access token
            base_url: API root, without trailing slash
            timeout: Per-request timeout in seconds
            page_size: ``per_page`` for paginated listings
            transport: Optional httpx transport (used by tests)
        """
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.page_size = page_size
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        """Get API request headers."""
        return {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers=self._headers(),
            timeout=self.timeout,
            transport=self._transport,
        )

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Send a request and return the decoded JSON object."""
        if not url.startswith("http"):
            url = f"{self.base_url}{url}"

        with Timer() as timer:
            try:
                async with self._client() as client:
                    response = await client.request(method, url, params=params, json=body)
            except httpx.HTTPError as e:
                raise TransportError(f"{method} {url} failed: {e}") from e

        logger.debug(
            "DigitalOcean API call",
            context={"method": method, "url": url, "status": response.status_code},
            duration_ms=timer.duration_ms,
        )

        if not response.is_success:
            error_id = None
            message = response.reason_phrase or "Unknown error"
            try:
                payload = response.json()
                error_id = payload.get("id")
                message = payload.get("message", message)
            except (ValueError, AttributeError):
                pass
            raise TransportError(
                f"DigitalOcean API error {response.status_code}: {message}",
                status_code=response.status_code,
                error_id=error_id,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise StructuralError(f"Invalid JSON from {method} {url}") from e
        if not isinstance(payload, dict):
            raise StructuralError(f"Expected JSON object from {method} {url}")
        return payload

    async def _get_all_pages(
        self, path: str, key: str, params: dict[str, Any] | None = None
    ) -> list[Any]:
        """Follow ``links.pages.next`` and concatenate ``key`` from every page."""
        items: list[Any] = []
        url: str | None = path
        query: dict[str, Any] | None = {**(params or {}), "per_page": self.page_size}
        while url:
            payload = await self._request("GET", url, params=query)
            page = payload.get(key)
            if not isinstance(page, list):
                raise StructuralError(f"Response is missing list field '{key}'")
            items.extend(page)
            url = ((payload.get("links") or {}).get("pages") or {}).get("next")
            # The next link already carries the query string
            query = None
        return items

    async def get_account(self) -> AccountInfo:
        """Fetch the account the token belongs to."""
        payload = await self._request("GET", "/account")
        return AccountInfo.from_dict(payload.get("account"))

    async def get_region_info(self) -> list[RegionInfo]:
        """Fetch all regions in the provider's order."""
        regions = await self._get_all_pages("/regions", "regions")
        return [RegionInfo.from_dict(region) for region in regions]

    async def _register_key(self, name: str, public_key: str) -> int:
        payload = await self._request(
            "POST",
            "/account/keys",
            body={"name": name, "public_key": public_key},
        )
        ssh_key = payload.get("ssh_key")
        if not isinstance(ssh_key, dict) or not isinstance(ssh_key.get("id"), int):
            raise StructuralError("Response is missing 'ssh_key.id'")
        return ssh_key["id"]

    async def create_droplet(
        self,
        name: str,
        region_id: str,
        public_key: str,
        spec: DropletSpec,
    ) -> DropletInfo:
        """Register ``public_key`` and create a droplet that trusts it.

        Args:
            name: Droplet name
            region_id: Region slug
            public_key: OpenSSH public key
            spec: Size, image, tags and install script

        Returns:
            Descriptor of the new droplet
        """
        key_id = await self._register_key(f"{name}-key", public_key)
        payload = await self._request(
            "POST",
            "/droplets",
            body={
                "name": name,
                "region": region_id,
                "size": spec.size,
                "image": spec.image,
                "ssh_keys": [key_id],
                "user_data": spec.install_command,
                "tags": spec.tags,
            },
        )
        return DropletInfo.from_dict(payload.get("droplet"))

    async def get_droplet(self, droplet_id: int) -> DropletInfo:
        """Fetch a single droplet."""
        payload = await self._request("GET", f"/droplets/{droplet_id}")
        return DropletInfo.from_dict(payload.get("droplet"))

    async def get_droplets_by_tag(self, tag: str) -> list[DropletInfo]:
        """Fetch every droplet carrying ``tag``."""
        droplets = await self._get_all_pages(
            "/droplets", "droplets", params={"tag_name": tag}
        )
        return [DropletInfo.from_dict(droplet) for droplet in droplets]
