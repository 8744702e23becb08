"""Managed server protocol."""

from typing import Protocol, runtime_checkable


@runtime_checkable
class ManagedServer(Protocol):
    """A server created and owned by an account."""

    def get_id(self) -> str:
        """Globally unique id, ``{account_id}:{droplet_id}``."""
        ...

    def get_name(self) -> str:
        """Droplet name."""
        ...

    def get_host(self) -> str | None:
        """Public IPv4 address, or None until one is assigned."""
        ...

    async def refresh(self) -> None:
        """Reload the server's details from the provider."""
        ...
