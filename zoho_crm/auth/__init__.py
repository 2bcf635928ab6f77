"""OAuth2 credential handling."""

from .credentials import CredentialStore, abbreviate_token

__all__ = ["CredentialStore", "abbreviate_token"]
