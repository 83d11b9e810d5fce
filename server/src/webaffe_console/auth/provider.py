"""Identity provider adapter over Supabase Auth.

Wraps password, OAuth and passwordless sign-in, sign-out, and the single
process-lifetime subscription to identity changes. Provider errors are
translated into the exceptions in ``webaffe_console.exceptions``.
"""

import logging
from typing import Any, Callable, TypeVar

import httpx
from supabase import AuthError, AuthInvalidCredentialsError, AuthRetryableError, Client

from webaffe_console.auth.email_store import EmailLinkStore
from webaffe_console.exceptions import (
    AuthenticationError,
    CredentialError,
    CredentialErrorKind,
    ProviderErrorKind,
    ProviderInteractionError,
)
from webaffe_console.models.identity import Identity

logger = logging.getLogger(__name__)

T = TypeVar("T")

IdentityCallback = Callable[[Identity | None], None]

# Provider error codes -> credential failures
_CREDENTIAL_CODES: dict[str, CredentialErrorKind] = {
    "invalid_credentials": CredentialErrorKind.INVALID_CREDENTIAL,
    "user_not_found": CredentialErrorKind.USER_NOT_FOUND,
    "over_request_rate_limit": CredentialErrorKind.TOO_MANY_REQUESTS,
    "over_email_send_rate_limit": CredentialErrorKind.TOO_MANY_REQUESTS,
    "email_exists": CredentialErrorKind.EMAIL_IN_USE,
    "user_already_exists": CredentialErrorKind.EMAIL_IN_USE,
    "weak_password": CredentialErrorKind.WEAK_PASSWORD,
    "email_address_invalid": CredentialErrorKind.INVALID_EMAIL,
    "validation_failed": CredentialErrorKind.INVALID_EMAIL,
}

# Auth events that carry a (possibly new) signed-in user
_PRESENT_EVENTS = frozenset({"SIGNED_IN", "USER_UPDATED"})
# Auth events after which nobody is signed in
_ABSENT_EVENTS = frozenset({"SIGNED_OUT", "USER_DELETED"})


def identity_from_user(user: Any) -> Identity:
    """Build an Identity from a Supabase auth user."""
    metadata = user.user_metadata or {}
    return Identity(
        id=user.id,
        email=user.email,
        display_name=metadata.get("full_name") or metadata.get("name"),
        photo_url=metadata.get("avatar_url") or metadata.get("picture"),
    )


def translate_auth_error(error: AuthError) -> AuthenticationError:
    """Map a Supabase auth error onto the console's error taxonomy."""
    if isinstance(error, AuthRetryableError):
        return ProviderInteractionError(ProviderErrorKind.NETWORK_ERROR, error.message)
    if isinstance(error, AuthInvalidCredentialsError):
        return CredentialError(CredentialErrorKind.INVALID_CREDENTIAL, error.message)

    kind = _CREDENTIAL_CODES.get(error.code or "")
    if kind is not None:
        return CredentialError(kind, error.message)
    return AuthenticationError(error.message, error.code)


class IdentityProvider:
    """Adapter for the hosted identity service."""

    def __init__(
        self,
        client: Client,
        email_store: EmailLinkStore,
        site_url: str,
        oauth_provider: str = "google",
    ) -> None:
        self.client = client
        self.email_store = email_store
        self.site_url = site_url
        self.oauth_provider = oauth_provider
        self._subscription: Any = None

    def _call(self, operation: Callable[[], T]) -> T:
        """Run a provider call, translating its failures."""
        try:
            return operation()
        except AuthError as e:
            raise translate_auth_error(e) from e
        except httpx.HTTPError as e:
            raise ProviderInteractionError(ProviderErrorKind.NETWORK_ERROR, str(e)) from e

    def _require_identity(self, user: Any) -> Identity:
        if user is None:
            raise AuthenticationError("Identity provider returned no user")
        return identity_from_user(user)

    # -------------------------------------------------------------------------
    # Password
    # -------------------------------------------------------------------------

    async def sign_in_with_password(self, email: str, password: str) -> Identity:
        """Sign in with email and password.

        Raises:
            CredentialError: invalid credential, unknown user, too many requests
        """
        response = self._call(
            lambda: self.client.auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        )
        return self._require_identity(response.user)

    async def sign_up_with_password(self, email: str, password: str) -> Identity | None:
        """Create an account with email and password.

        Returns:
            The new identity, or None when the provider wants the address
            confirmed first and issued no session

        Raises:
            CredentialError: email in use, weak password, invalid email
        """
        response = self._call(
            lambda: self.client.auth.sign_up({"email": email, "password": password})
        )
        identity = self._require_identity(response.user)
        if response.session is None:
            logger.info(f"Sign-up for {identity.id} awaits email confirmation")
            return None
        return identity

    # -------------------------------------------------------------------------
    # OAuth
    # -------------------------------------------------------------------------

    def provider_sign_in_url(self, redirect_to: str | None = None) -> str:
        """Start an OAuth sign-in and return the URL the front-end opens."""
        response = self._call(
            lambda: self.client.auth.sign_in_with_oauth({
                "provider": self.oauth_provider,
                "options": {"redirect_to": redirect_to or self.site_url},
            })
        )
        return response.url

    async def sign_in_with_provider(self, auth_code: str | None) -> Identity:
        """Finish an OAuth sign-in with the code the provider returned.

        Args:
            auth_code: The authorization code; empty if the user closed the popup

        Raises:
            ProviderInteractionError: popup closed or network failure
        """
        if not auth_code:
            raise ProviderInteractionError(ProviderErrorKind.POPUP_CLOSED)

        response = self._call(
            lambda: self.client.auth.exchange_code_for_session({
                "auth_code": auth_code,
                "redirect_to": self.site_url,
            })
        )
        return self._require_identity(response.user)

    # -------------------------------------------------------------------------
    # Passwordless link
    # -------------------------------------------------------------------------

    async def send_passwordless_link(self, email: str) -> None:
        """Email a sign-in link and remember the address for completion.

        Raises:
            CredentialError: invalid email
            ProviderInteractionError: network failure
        """
        self._call(
            lambda: self.client.auth.sign_in_with_otp({
                "email": email,
                "options": {
                    "email_redirect_to": self.site_url,
                    "should_create_user": True,
                },
            })
        )
        self.email_store.save(email)
        logger.info("Passwordless sign-in link sent")

    async def complete_passwordless_sign_in(
        self,
        token: str,
        email: str | None = None,
    ) -> Identity:
        """Verify the emailed token and sign in.

        Args:
            token: Token from the sign-in email
            email: Address the link was sent to; recovered locally if omitted

        Raises:
            CredentialError: no email to complete with, or token rejected
        """
        email = email or self.email_store.load()
        if not email:
            raise CredentialError(
                CredentialErrorKind.INVALID_EMAIL,
                "No pending sign-in email; request a new link",
            )

        response = self._call(
            lambda: self.client.auth.verify_otp({
                "email": email,
                "token": token,
                "type": "email",
            })
        )
        self.email_store.clear()
        return self._require_identity(response.user)

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    async def sign_out(self) -> None:
        """Sign out the current user. Emits SIGNED_OUT to subscribers."""
        self._call(self.client.auth.sign_out)

    def on_identity_change(self, callback: IdentityCallback) -> bool:
        """Register the process-lifetime identity subscription.

        The callback receives the new Identity on sign-in and None on
        sign-out. It is also called once right away with the persisted
        session's identity (or None), so a cold start resolves too.

        Returns:
            True if registered, False if a subscription already exists
        """
        if self._subscription is not None:
            logger.debug("Identity subscription already registered; ignoring")
            return False

        def _on_auth_event(event: str, session: Any) -> None:
            if event in _ABSENT_EVENTS:
                callback(None)
            elif event in _PRESENT_EVENTS and session is not None and session.user:
                callback(identity_from_user(session.user))

        self._subscription = self.client.auth.on_auth_state_change(_on_auth_event)

        try:
            session = self.client.auth.get_session()
        except (AuthError, httpx.HTTPError) as e:
            logger.warning(f"Could not restore persisted session: {e}")
            session = None

        if session is not None and session.user:
            callback(identity_from_user(session.user))
        else:
            callback(None)
        return True
