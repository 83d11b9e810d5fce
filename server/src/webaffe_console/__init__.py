"""WebAffe Console - authentication gate and admin console."""

__version__ = "0.1.0"

from webaffe_console.exceptions import (
    AdminActionError,
    AuthenticationError,
    ConfigStoreError,
    CredentialError,
    ProfileStoreError,
    ProviderInteractionError,
)

__all__ = [
    "__version__",
    "AdminActionError",
    "AuthenticationError",
    "ConfigStoreError",
    "CredentialError",
    "ProfileStoreError",
    "ProviderInteractionError",
]
