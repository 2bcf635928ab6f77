"""Registry of Zoho data centers (accounts and API domains per region)."""

import logging

from .errors import ConfigError
from .models import DataCenter

logger = logging.getLogger(__name__)

DEFAULT_DATA_CENTER = "us"

_BUILTIN_DATA_CENTERS = (
    DataCenter("us", "https://accounts.zoho.com", "https://www.zohoapis.com",
               "https://crmsandbox.zoho.com"),
    DataCenter("eu", "https://accounts.zoho.eu", "https://www.zohoapis.eu",
               "https://sandbox.zohoapis.eu"),
    DataCenter("in", "https://accounts.zoho.in", "https://www.zohoapis.in",
               "https://sandbox.zohoapis.in"),
    DataCenter("au", "https://accounts.zoho.com.au", "https://www.zohoapis.com.au",
               "https://sandbox.zohoapis.com.au"),
    DataCenter("jp", "https://accounts.zoho.jp", "https://www.zohoapis.jp",
               "https://sandbox.zohoapis.jp"),
    DataCenter("cn", "https://accounts.zoho.com.cn", "https://www.zohoapis.com.cn",
               "https://sandbox.zohoapis.com.cn"),
)

# In-memory storage for known data centers
_DATA_CENTERS: dict[str, DataCenter] = {}


def register_data_center(
    name: str,
    accounts_url: str,
    api_url: str,
    sandbox_api_url: str | None = None,
) -> DataCenter:
    """
    Register a data center, e.g. for a private or newly opened region.

    Args:
        name: Short key used in configuration (e.g. "eu")
        accounts_url: Base URL of the OAuth accounts server
        api_url: Base URL of the CRM API
        sandbox_api_url: Base URL of the sandbox API, if any

    Returns:
        The registered DataCenter

    Note:
        If name already exists, it will be overwritten.
    """
    key = name.lower()
    if key in _DATA_CENTERS:
        logger.warning(f"Data center '{key}' already exists. Overwriting.")

    data_center = DataCenter(
        name=key,
        accounts_url=accounts_url.rstrip("/"),
        api_url=api_url.rstrip("/"),
        sandbox_api_url=sandbox_api_url.rstrip("/") if sandbox_api_url else None,
    )
    _DATA_CENTERS[key] = data_center
    logger.debug(f"Registered data center: {key} ({api_url})")

    return data_center


def get_data_center(name: str) -> DataCenter:
    """
    Look up a data center by name.

    Raises:
        ConfigError: If the name is unknown
    """
    key = name.lower()
    if key not in _DATA_CENTERS:
        known = ", ".join(sorted(_DATA_CENTERS))
        raise ConfigError(f"Unknown data center '{name}'. Known data centers: {known}")

    return _DATA_CENTERS[key]


def list_data_centers() -> list[DataCenter]:
    """List all registered data centers sorted by name."""
    return sorted(_DATA_CENTERS.values(), key=lambda dc: dc.name)


def reset_registry() -> None:
    """
    Restore the registry to the built-in data centers.

    This is primarily intended for testing.
    """
    global _DATA_CENTERS
    _DATA_CENTERS = {dc.name: dc for dc in _BUILTIN_DATA_CENTERS}
    logger.debug("Data center registry reset")


reset_registry()
