"""Auth actions exposed to the front-end.

Each action returns an AuthResult instead of raising, carrying a message
the login form can show as-is.
"""

import logging
from typing import Awaitable, Callable

from webaffe_console.auth.provider import IdentityProvider
from webaffe_console.exceptions import (
    AuthenticationError,
    CredentialErrorKind,
    ProviderErrorKind,
)
from webaffe_console.models.auth import AuthResult
from webaffe_console.models.identity import Identity
from webaffe_console.session.listener import SessionBootstrapListener

logger = logging.getLogger(__name__)

_MESSAGES: dict[str, str] = {
    CredentialErrorKind.INVALID_CREDENTIAL.value: "Invalid email or password",
    CredentialErrorKind.USER_NOT_FOUND.value: "No account found with this email",
    CredentialErrorKind.TOO_MANY_REQUESTS.value: "Too many attempts. Please try again later",
    CredentialErrorKind.EMAIL_IN_USE.value: "An account with this email already exists",
    CredentialErrorKind.WEAK_PASSWORD.value: "Password is too weak",
    CredentialErrorKind.INVALID_EMAIL.value: "Invalid email address",
    CredentialErrorKind.PASSWORD_MISMATCH.value: "Passwords do not match",
    ProviderErrorKind.POPUP_CLOSED.value: "Google sign-in was cancelled",
    ProviderErrorKind.NETWORK_ERROR.value: "Network error. Please try again",
}


def user_message(error: AuthenticationError) -> str:
    """Message shown to the user for an auth failure."""
    return _MESSAGES.get(error.code or "") or error.message or "An error occurred"


class AuthService:
    """Direct auth actions: sign-in, sign-up, OAuth, magic link, logout."""

    def __init__(
        self,
        provider: IdentityProvider,
        listener: SessionBootstrapListener,
        min_password_length: int = 6,
    ) -> None:
        self.provider = provider
        self.listener = listener
        self.min_password_length = min_password_length

    async def _run(
        self,
        action: str,
        call: Callable[[], Awaitable[Identity | None]],
        success_message: str | None = None,
    ) -> AuthResult:
        try:
            identity = await call()
        except AuthenticationError as e:
            logger.info(f"{action} failed: {e.code or e.message}")
            return AuthResult.failure(e.code, user_message(e))
        return AuthResult.success(identity, success_message)

    async def login_with_email(self, email: str, password: str) -> AuthResult:
        return await self._run(
            "Password sign-in",
            lambda: self.provider.sign_in_with_password(email, password),
        )

    async def sign_up_with_email(
        self,
        email: str,
        password: str,
        confirm_password: str | None = None,
    ) -> AuthResult:
        """Create an account, checking the form rules before calling the provider."""
        if confirm_password is not None and password != confirm_password:
            return AuthResult.failure(
                CredentialErrorKind.PASSWORD_MISMATCH.value,
                _MESSAGES[CredentialErrorKind.PASSWORD_MISMATCH.value],
            )
        if len(password) < self.min_password_length:
            return AuthResult.failure(
                CredentialErrorKind.PASSWORD_TOO_SHORT.value,
                f"Password must be at least {self.min_password_length} characters",
            )

        result = await self._run(
            "Sign-up",
            lambda: self.provider.sign_up_with_password(email, password),
        )
        if result.ok and result.identity is None:
            return AuthResult.success(
                message=f"Check {email} to confirm your account, then sign in"
            )
        return result

    def google_sign_in_url(self, redirect_to: str | None = None) -> str:
        """URL that starts the OAuth flow.

        Raises:
            AuthenticationError: If the provider cannot start the flow
        """
        return self.provider.provider_sign_in_url(redirect_to)

    async def login_with_google(self, code: str | None) -> AuthResult:
        return await self._run(
            "OAuth sign-in",
            lambda: self.provider.sign_in_with_provider(code),
        )

    async def send_magic_link(self, email: str) -> AuthResult:
        async def _send() -> None:
            await self.provider.send_passwordless_link(email)

        return await self._run(
            "Magic link",
            _send,
            success_message=f"We sent a sign-in link to {email}",
        )

    async def complete_magic_link(self, token: str, email: str | None = None) -> AuthResult:
        return await self._run(
            "Magic link sign-in",
            lambda: self.provider.complete_passwordless_sign_in(token, email),
        )

    async def logout(self) -> AuthResult:
        """Sign out and publish the anonymous session.

        The anonymous state goes through the listener's serialized path so
        it cannot race a transition that is still in flight.
        """
        try:
            await self.provider.sign_out()
        except AuthenticationError as e:
            logger.warning(f"Provider sign-out failed, clearing local session anyway: {e}")

        await self.listener.apply(None)
        return AuthResult.success()
