"""FastAPI routes for health, session state and auth actions."""

import asyncio
import logging
from typing import Annotated, AsyncIterator

from fastapi import APIRouter, Depends, HTTPException, status
from starlette.responses import StreamingResponse

from webaffe_console import __version__
from webaffe_console.api.auth import (
    Approved,
    Session,
    get_auth_service,
    get_db_client,
    get_listener,
    get_session_reader,
)
from webaffe_console.auth.service import AuthService
from webaffe_console.db.client import DatabaseClient
from webaffe_console.exceptions import AuthenticationError, CredentialErrorKind
from webaffe_console.models.auth import (
    AuthResult,
    MagicLinkCompletion,
    MagicLinkRequest,
    OAuthCallback,
    OAuthStart,
    PasswordCredentials,
    SignUpRequest,
)
from webaffe_console.models.identity import GlobalConfig, SessionState
from webaffe_console.session.listener import SessionBootstrapListener
from webaffe_console.session.store import SessionReader

logger = logging.getLogger(__name__)

router = APIRouter()

Auth = Annotated[AuthService, Depends(get_auth_service)]
Listener = Annotated[SessionBootstrapListener, Depends(get_listener)]


async def _settle(result: AuthResult, listener: SessionBootstrapListener) -> AuthResult:
    """Wait for the session to resolve, or turn a failed result into an HTTP error.

    Raises:
        HTTPException: 401 for a rejected credential, 400 for other failures
    """
    if not result.ok:
        code = (
            status.HTTP_401_UNAUTHORIZED
            if result.error_code == CredentialErrorKind.INVALID_CREDENTIAL.value
            else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(status_code=code, detail=result.model_dump(mode="json"))

    # Identity events were scheduled by the provider call; let them land
    await listener.wait_idle()
    return result


@router.get("/health")
async def health(
    db: Annotated[DatabaseClient, Depends(get_db_client)],
) -> dict:
    """Health check endpoint."""
    db_health = await db.health_check()
    return {
        "status": "ok" if db_health["healthy"] else "degraded",
        "version": __version__,
        "database": db_health,
    }


# -----------------------------------------------------------------------------
# Session
# -----------------------------------------------------------------------------


@router.get("/session", response_model=SessionState)
async def get_session(state: Session) -> SessionState:
    """Current session snapshot, including the derived access flags."""
    return state


@router.get("/session/stream")
async def stream_session(
    reader: Annotated[SessionReader, Depends(get_session_reader)],
) -> StreamingResponse:
    """Stream session snapshots via Server-Sent Events.

    The current snapshot is sent first, then every replacement.

    Returns:
        StreamingResponse with text/event-stream content type
    """
    queue = reader.subscribe()
    current = reader.get()

    async def event_generator() -> AsyncIterator[str]:
        try:
            yield f"data: {current.model_dump_json()}\n\n"
            while True:
                try:
                    state = await asyncio.wait_for(queue.get(), timeout=30.0)
                    yield f"data: {state.model_dump_json()}\n\n"
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
        finally:
            reader.unsubscribe(queue)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )


@router.get("/config", response_model=GlobalConfig)
async def get_config(state: Approved) -> GlobalConfig:
    """Global default model settings for approved sessions."""
    return state.config


# -----------------------------------------------------------------------------
# Auth actions
# -----------------------------------------------------------------------------


@router.post("/auth/login", response_model=AuthResult)
async def login(
    credentials: PasswordCredentials,
    auth: Auth,
    listener: Listener,
) -> AuthResult:
    """Sign in with email and password."""
    result = await auth.login_with_email(credentials.email, credentials.password)
    return await _settle(result, listener)


@router.post("/auth/signup", response_model=AuthResult)
async def signup(
    request: SignUpRequest,
    auth: Auth,
    listener: Listener,
) -> AuthResult:
    """Create an account. New accounts wait for admin approval."""
    result = await auth.sign_up_with_email(
        request.email, request.password, request.confirm_password
    )
    return await _settle(result, listener)


@router.get("/auth/oauth/url", response_model=OAuthStart)
async def oauth_url(
    auth: Auth,
    redirect_to: str | None = None,
) -> OAuthStart:
    """URL the front-end opens to start the OAuth popup.

    Raises:
        HTTPException: 502 if the provider cannot start the flow
    """
    try:
        url = auth.google_sign_in_url(redirect_to)
    except AuthenticationError as e:
        logger.error(f"Could not start OAuth sign-in: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=e.message,
        )
    return OAuthStart(provider=auth.provider.oauth_provider, url=url)


@router.post("/auth/oauth/callback", response_model=AuthResult)
async def oauth_callback(
    callback: OAuthCallback,
    auth: Auth,
    listener: Listener,
) -> AuthResult:
    """Finish an OAuth sign-in with the code from the popup."""
    result = await auth.login_with_google(callback.code)
    return await _settle(result, listener)


@router.post("/auth/magic-link", response_model=AuthResult)
async def send_magic_link(
    request: MagicLinkRequest,
    auth: Auth,
    listener: Listener,
) -> AuthResult:
    """Email a passwordless sign-in link."""
    result = await auth.send_magic_link(request.email)
    return await _settle(result, listener)


@router.post("/auth/magic-link/complete", response_model=AuthResult)
async def complete_magic_link(
    completion: MagicLinkCompletion,
    auth: Auth,
    listener: Listener,
) -> AuthResult:
    """Finish a passwordless sign-in with the emailed token."""
    result = await auth.complete_magic_link(completion.token, completion.email)
    return await _settle(result, listener)


@router.post("/auth/logout", response_model=AuthResult)
async def logout(auth: Auth, listener: Listener) -> AuthResult:
    """Sign out and clear the session."""
    result = await auth.logout()
    return await _settle(result, listener)
