"""Configuration loading with environment variable substitution."""

import os
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import BaseModel, Field

from shadowbox_provisioner.exceptions import ConfigError
from shadowbox_provisioner.observability import LogLevel, configure_logging

if TYPE_CHECKING:
    from shadowbox_provisioner.account import DigitalOceanAccount

ENV_VAR_PATTERN = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)\}")


def substitute_env_vars(value: Any) -> Any:
    """Recursively substitute ${VAR_NAME} patterns with environment variables."""
    if isinstance(value, str):
        def replace(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                raise ConfigError(f"Environment variable {var_name} is not set")
            return env_value

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: substitute_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substitute_env_vars(v) for v in value]
    return value


class ProvisioningSettings(BaseModel):
    """Settings exported to every new droplet's install script.

    A field is exported only when it is not None, so an explicit zero
    refresh interval is still passed through.
    """

    image_id: str | None = None
    metrics_url: str | None = None
    sentry_api_url: str | None = None
    watchtower_refresh_seconds: int | None = Field(default=None, ge=0)


class ApiConfig(BaseModel):
    """DigitalOcean REST API settings."""

    base_url: str = "https://api.digitalocean.com/v2"
    timeout_seconds: float = 30.0
    page_size: int = Field(default=100, ge=1, le=200)


class LoggingConfig(BaseModel):
    """Logging settings."""

    level: LogLevel = LogLevel.INFO
    format: str = "json"  # json | text


class AccountConfig(BaseModel):
    """A DigitalOcean account to manage."""

    id: str
    access_token: str


class Config(BaseModel):
    """Main configuration for shadowbox-provisioner."""

    accounts: list[AccountConfig] = Field(default_factory=list)
    settings: ProvisioningSettings = Field(default_factory=ProvisioningSettings)
    # Never enable in production: logs private SSH keys of new droplets.
    debug_mode: bool = False
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML or JSON file."""
        path = Path(path)
        with path.open() as f:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            else:
                import json
                data = json.load(f)

        # Substitute environment variables
        data = substitute_env_vars(data or {})
        return cls.model_validate(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Load configuration from a dictionary."""
        data = substitute_env_vars(data)
        return cls.model_validate(data)

    def setup_logging(self) -> None:
        """Configure package logging from the logging section."""
        configure_logging(self.logging.level, self.logging.format)

    def build_accounts(self) -> list["DigitalOceanAccount"]:
        """Create one DigitalOceanAccount per configured account."""
        from shadowbox_provisioner.account import DigitalOceanAccount
        from shadowbox_provisioner.cloud.digitalocean_api import RestApiSession

        return [
            DigitalOceanAccount(
                account.id,
                account.access_token,
                self.settings,
                debug_mode=self.debug_mode,
                session=RestApiSession(
                    account.access_token,
                    base_url=self.api.base_url,
                    timeout=self.api.timeout_seconds,
                    page_size=self.api.page_size,
                ),
            )
            for account in self.accounts
        ]
