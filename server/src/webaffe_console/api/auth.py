"""Dependency singletons and session gates."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status

from webaffe_console.auth.email_store import EmailLinkStore
from webaffe_console.auth.provider import IdentityProvider
from webaffe_console.auth.service import AuthService
from webaffe_console.config import get_settings
from webaffe_console.db.client import DatabaseClient
from webaffe_console.models.identity import SessionState
from webaffe_console.session.listener import SessionBootstrapListener
from webaffe_console.session.store import SessionReader, SessionStore

logger = logging.getLogger(__name__)

# Dependency injection
_db_client: DatabaseClient | None = None
_provider: IdentityProvider | None = None
_session_store: SessionStore | None = None
_listener: SessionBootstrapListener | None = None
_auth_service: AuthService | None = None


def get_db_client() -> DatabaseClient:
    """Get or create database client instance."""
    global _db_client
    if _db_client is None:
        _db_client = DatabaseClient()
    return _db_client


def get_identity_provider() -> IdentityProvider:
    """Get or create the identity provider adapter.

    Shares the database client's Supabase client so the auth session and
    table access use the same credentials.
    """
    global _provider
    if _provider is None:
        settings = get_settings()
        _provider = IdentityProvider(
            client=get_db_client().client,
            email_store=EmailLinkStore(settings.email_link_store_path),
            site_url=settings.site_url,
            oauth_provider=settings.oauth_provider,
        )
    return _provider


def get_session_store() -> SessionStore:
    """Get or create the process-wide session store."""
    global _session_store
    if _session_store is None:
        _session_store = SessionStore(queue_size=get_settings().session_queue_size)
    return _session_store


def get_session_reader() -> SessionReader:
    """Read-only view of the session store for request handlers."""
    return get_session_store()


def get_listener() -> SessionBootstrapListener:
    """Get or create the session bootstrap listener."""
    global _listener
    if _listener is None:
        _listener = SessionBootstrapListener(
            provider=get_identity_provider(),
            db=get_db_client(),
            store=get_session_store(),
            bootstrap_admin_email=get_settings().bootstrap_admin_email,
        )
    return _listener


def get_auth_service() -> AuthService:
    """Get or create the auth action service."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService(
            provider=get_identity_provider(),
            listener=get_listener(),
            min_password_length=get_settings().min_password_length,
        )
    return _auth_service


# -----------------------------------------------------------------------------
# Gates
# -----------------------------------------------------------------------------

def get_session_state(
    reader: Annotated[SessionReader, Depends(get_session_reader)],
) -> SessionState:
    """Current session snapshot."""
    return reader.get()


def require_authenticated(
    state: Annotated[SessionState, Depends(get_session_state)],
) -> SessionState:
    """Require a resolved, signed-in session.

    Raises:
        HTTPException: 503 while the session is loading, 401 if signed out
    """
    if state.loading:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session is loading",
            headers={"Retry-After": "1"},
        )
    if not state.is_authenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not signed in",
        )
    return state


def require_approved(
    state: Annotated[SessionState, Depends(require_authenticated)],
) -> SessionState:
    """Require an approved account.

    Raises:
        HTTPException: 403 while the account waits for approval
    """
    if not state.is_approved:
        email = state.profile.email if state.profile else state.identity.email
        logger.debug(f"Blocked unapproved session for {email}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Waiting for approval",
        )
    return state


def require_admin(
    state: Annotated[SessionState, Depends(require_approved)],
) -> SessionState:
    """Require an approved admin.

    Raises:
        HTTPException: 403 for non-admins
    """
    if not state.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return state


# Type aliases for dependency injection
Session = Annotated[SessionState, Depends(get_session_state)]
Approved = Annotated[SessionState, Depends(require_approved)]
AdminSession = Annotated[SessionState, Depends(require_admin)]
