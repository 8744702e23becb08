"""Shadowbox provisioner exceptions."""


class ServerManagerError(Exception):
    """Base exception for shadowbox-provisioner."""

    pass


class ConfigError(ServerManagerError):
    """Configuration error."""

    pass


class InvalidCredentialError(ConfigError):
    """Access token is empty or contains characters unsafe for a shell literal."""

    pass


class TransportError(ServerManagerError):
    """The provider API could not be reached or rejected the request."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_id: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_id = error_id


class StructuralError(ServerManagerError):
    """Provider response is missing required fields or has the wrong shape."""

    pass
