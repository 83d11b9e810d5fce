"""Request and response models for auth actions."""

from pydantic import BaseModel

from webaffe_console.models.identity import Identity


class PasswordCredentials(BaseModel):
    """Email/password sign-in payload."""

    email: str
    password: str


class SignUpRequest(BaseModel):
    """Email/password sign-up payload."""

    email: str
    password: str
    confirm_password: str | None = None


class MagicLinkRequest(BaseModel):
    """Passwordless link request."""

    email: str


class MagicLinkCompletion(BaseModel):
    """Token from a passwordless link; email is recovered locally if omitted."""

    token: str
    email: str | None = None


class OAuthCallback(BaseModel):
    """Code returned by the OAuth provider. Empty means the popup was closed."""

    code: str | None = None


class OAuthStart(BaseModel):
    """Where to send the user to start an OAuth sign-in."""

    provider: str
    url: str


class AuthResult(BaseModel):
    """Explicit success/failure result of a direct auth action."""

    ok: bool
    identity: Identity | None = None
    error_code: str | None = None
    message: str | None = None

    @classmethod
    def success(cls, identity: Identity | None = None, message: str | None = None) -> "AuthResult":
        return cls(ok=True, identity=identity, message=message)

    @classmethod
    def failure(cls, error_code: str | None, message: str) -> "AuthResult":
        return cls(ok=False, error_code=error_code, message=message)
