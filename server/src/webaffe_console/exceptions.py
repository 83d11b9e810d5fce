"""Custom exceptions for WebAffe Console."""

from enum import Enum


class CredentialErrorKind(str, Enum):
    """Why the identity provider rejected a set of credentials."""

    INVALID_CREDENTIAL = "invalid_credential"
    USER_NOT_FOUND = "user_not_found"
    TOO_MANY_REQUESTS = "too_many_requests"
    EMAIL_IN_USE = "email_in_use"
    WEAK_PASSWORD = "weak_password"
    INVALID_EMAIL = "invalid_email"
    PASSWORD_MISMATCH = "password_mismatch"  # Checked locally before sign-up
    PASSWORD_TOO_SHORT = "password_too_short"  # Checked locally before sign-up


class ProviderErrorKind(str, Enum):
    """Failures while talking to an interactive sign-in provider."""

    POPUP_CLOSED = "popup_closed"
    NETWORK_ERROR = "network_error"


class AuthenticationError(Exception):
    """Raised when the identity provider fails an auth action."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code
        super().__init__(message)


class CredentialError(AuthenticationError):
    """Bad password, unknown user, weak password, email in use, invalid email."""

    def __init__(self, kind: CredentialErrorKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message or f"Credential rejected: {kind.value}", kind.value)


class ProviderInteractionError(AuthenticationError):
    """Popup closed or network failure during an interactive sign-in."""

    def __init__(self, kind: ProviderErrorKind, message: str | None = None) -> None:
        self.kind = kind
        super().__init__(message or f"Sign-in provider failed: {kind.value}", kind.value)


class ProfileStoreError(Exception):
    """Raised when a read or write against the profile store fails."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Profile store {operation} failed: {detail}")


class ConfigStoreError(Exception):
    """Raised when the global config record cannot be read or written."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        self.detail = detail
        super().__init__(f"Config store {operation} failed: {detail}")


class BoardStoreError(Exception):
    """Raised when a read or write against a board collection fails."""

    def __init__(self, collection: str, operation: str, detail: str) -> None:
        self.collection = collection
        self.operation = operation
        self.detail = detail
        super().__init__(f"{collection} store {operation} failed: {detail}")


class RecordNotFoundError(Exception):
    """Raised when an admin action targets a record that does not exist."""

    def __init__(self, collection: str, record_id: str) -> None:
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"No record {record_id} in {collection}")


class AdminActionError(Exception):
    """Raised when an admin action is not allowed for the target's state."""


class ProtectedAccountError(AdminActionError):
    """Raised when an admin tries to demote or revoke the bootstrap admin."""


class UnknownColumnError(AdminActionError):
    """Raised when a board item is moved to a column the board does not have."""
