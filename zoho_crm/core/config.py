"""Client configuration and loading/saving it as JSON."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigError
from .registry import DEFAULT_DATA_CENTER, get_data_center

logger = logging.getLogger(__name__)

# Default network timeout for API requests, in seconds.
DEFAULT_TIMEOUT = 30.0
# Refresh this many seconds before the token actually expires.
DEFAULT_REFRESH_MARGIN = 60.0

_REQUIRED_KEYS = ("client_id", "client_secret", "refresh_token")


@dataclass
class ClientConfig:
    """
    Everything needed to construct a ZohoCRMClient.

    oauth_domain and api_domain override the data center's defaults. When
    sandbox is set, the data center's sandbox API domain is used instead.
    """
    client_id: str
    client_secret: str
    refresh_token: str
    access_token: str | None = None
    access_token_expires_at: float | None = None
    data_center: str = DEFAULT_DATA_CENTER
    oauth_domain: str | None = None
    api_domain: str | None = None
    sandbox: bool = False
    timeout: float = DEFAULT_TIMEOUT
    refresh_margin: float = DEFAULT_REFRESH_MARGIN

    def __post_init__(self):
        for key in _REQUIRED_KEYS:
            if not getattr(self, key):
                raise ConfigError(f"Client configuration must include '{key}'")
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.refresh_margin < 0:
            raise ConfigError(f"refresh_margin must not be negative, got {self.refresh_margin}")
        # Fail early on unknown regions
        get_data_center(self.data_center)

    @property
    def accounts_url(self) -> str:
        """OAuth accounts server to refresh tokens against."""
        if self.oauth_domain:
            return self.oauth_domain.rstrip("/")
        return get_data_center(self.data_center).accounts_url

    @property
    def api_url(self) -> str:
        """API domain requests start out with."""
        if self.sandbox:
            data_center = get_data_center(self.data_center)
            if not data_center.sandbox_api_url:
                raise ConfigError(f"Data center '{data_center.name}' has no sandbox API")
            return data_center.sandbox_api_url
        if self.api_domain:
            return self.api_domain.rstrip("/")
        return get_data_center(self.data_center).api_url

    def to_dict(self) -> dict[str, Any]:
        """Convert ClientConfig to a dictionary."""
        return {
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": self.refresh_token,
            "access_token": self.access_token,
            "access_token_expires_at": self.access_token_expires_at,
            "data_center": self.data_center,
            "oauth_domain": self.oauth_domain,
            "api_domain": self.api_domain,
            "sandbox": self.sandbox,
            "timeout": self.timeout,
            "refresh_margin": self.refresh_margin,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ClientConfig":
        """
        Create ClientConfig from a dictionary.

        Raises:
            ConfigError: If required keys are missing or values are invalid
        """
        missing = [key for key in _REQUIRED_KEYS if not data.get(key)]
        if missing:
            raise ConfigError(f"Client configuration is missing: {', '.join(missing)}")

        try:
            return cls(
                client_id=data["client_id"],
                client_secret=data["client_secret"],
                refresh_token=data["refresh_token"],
                access_token=data.get("access_token"),
                access_token_expires_at=data.get("access_token_expires_at"),
                data_center=data.get("data_center") or DEFAULT_DATA_CENTER,
                oauth_domain=data.get("oauth_domain"),
                api_domain=data.get("api_domain"),
                sandbox=bool(data.get("sandbox", False)),
                timeout=float(data.get("timeout", DEFAULT_TIMEOUT)),
                refresh_margin=float(data.get("refresh_margin", DEFAULT_REFRESH_MARGIN)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Invalid client configuration: {e}") from e


def load_config(path: str | Path) -> ClientConfig:
    """
    Load a ClientConfig from a JSON file.

    Raises:
        ConfigError: If the file does not exist or its contents are invalid
    """
    path = Path(path)

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with open(path, "r") as f:
            data = json.load(f)
        logger.debug(f"Loaded client configuration from {path}")
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a JSON object")

    return ClientConfig.from_dict(data)


def save_config(config: ClientConfig, path: str | Path) -> Path:
    """
    Write a ClientConfig to a JSON file.

    Returns:
        Path to the saved file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(path, "w") as f:
            json.dump(config.to_dict(), f, indent=2)
        logger.debug(f"Saved client configuration to {path}")
        return path
    except OSError as e:
        raise ConfigError(f"Failed to save configuration to {path}: {e}") from e
