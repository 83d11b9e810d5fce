"""Session bootstrap listener - keeps SessionState in step with the identity provider.

On every identity change the listener resolves (or creates) the profile,
applies first-admin bootstrap, loads the global config and publishes the
result to the SessionStore.

Failure policy:
- Profile read/create failures fail closed: profile becomes None, so the
  session is authenticated but neither approved nor admin.
- Config failures fail soft: the previous config is kept.
- Unexpected adapter errors are handled the same way, and every
  transition ends with loading=False.
- No retries. The next identity event is the only recovery path.

Transitions are serialized with an asyncio.Lock (FIFO), so a slow older
transition can never overwrite the result of a newer one.
"""

import asyncio
import logging
from typing import Any, Coroutine

from webaffe_console.auth.provider import IdentityProvider
from webaffe_console.db.client import DatabaseClient
from webaffe_console.exceptions import ConfigStoreError, ProfileStoreError
from webaffe_console.models.identity import GlobalConfig, Identity, Profile, UserRole
from webaffe_console.session.store import SessionStore

logger = logging.getLogger(__name__)


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def is_bootstrap_admin(email: str | None, bootstrap_admin_email: str | None) -> bool:
    """Check whether an email is the configured bootstrap admin."""
    expected = normalize_email(bootstrap_admin_email)
    return bool(expected) and normalize_email(email) == expected


def build_initial_profile(identity: Identity, bootstrap_admin_email: str | None) -> Profile:
    """Build the profile created on an identity's first sign-in.

    The bootstrap admin starts approved with the admin role; everyone
    else starts as an unapproved user.
    """
    first_admin = is_bootstrap_admin(identity.email, bootstrap_admin_email)
    display_name = identity.display_name
    if not display_name:
        display_name = identity.email.split("@")[0] if identity.email else "User"

    return Profile(
        uid=identity.id,
        role=UserRole.ADMIN if first_admin else UserRole.USER,
        is_approved=first_admin,
        email=identity.email,
        display_name=display_name or "User",
        photo_url=identity.photo_url,
    )


class SessionBootstrapListener:
    """Reacts to identity changes and publishes the resolved session."""

    def __init__(
        self,
        provider: IdentityProvider,
        db: DatabaseClient,
        store: SessionStore,
        bootstrap_admin_email: str | None = None,
    ) -> None:
        self.provider = provider
        self.db = db
        self.store = store
        self.bootstrap_admin_email = bootstrap_admin_email

        self._lock = asyncio.Lock()
        self._initialized = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._transitions: set[asyncio.Task] = set()
        self._detached: set[asyncio.Task] = set()

    @property
    def initialized(self) -> bool:
        return self._initialized

    def start(self) -> bool:
        """Subscribe to identity changes. Must be called inside the event loop.

        Returns:
            True on the first call, False (no-op) afterwards
        """
        if self._initialized:
            return False

        self._initialized = True
        self._loop = asyncio.get_running_loop()
        self.provider.on_identity_change(self.submit)
        logger.info("Session bootstrap listener subscribed to identity changes")
        return True

    def submit(self, identity: Identity | None) -> None:
        """Schedule a transition for an identity event.

        Safe to call from the provider's callback on any thread.
        """
        if self._loop is None:
            raise RuntimeError("Listener not started")

        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            self._schedule(identity)
        else:
            self._loop.call_soon_threadsafe(self._schedule, identity)

    def _schedule(self, identity: Identity | None) -> None:
        task = asyncio.get_running_loop().create_task(self.apply(identity))
        self._transitions.add(task)
        task.add_done_callback(self._transitions.discard)

    async def apply(self, identity: Identity | None) -> None:
        """Run one transition, after any transition already in flight."""
        async with self._lock:
            await self._transition(identity)

    async def wait_idle(self) -> None:
        """Wait for scheduled transitions and detached side effects to finish."""
        while self._transitions or self._detached:
            await asyncio.gather(
                *self._transitions, *self._detached, return_exceptions=True
            )

    # -------------------------------------------------------------------------
    # Transition
    # -------------------------------------------------------------------------

    async def _transition(self, identity: Identity | None) -> None:
        current = self.store.get()

        # Never let a previous identity's profile stand in for a new one
        profile = current.profile
        if profile is not None and (identity is None or profile.uid != identity.id):
            profile = None
        self.store.replace(loading=True, identity=identity, profile=profile)

        if identity is None:
            self.store.replace(profile=None, loading=False)
            logger.info("Session resolved: anonymous")
            return

        # Whatever happens below, the session leaves the loading state
        profile = None
        config = current.config
        try:
            profile = await self._resolve_profile(identity)
            config = await self._load_config(current.config)
        finally:
            state = self.store.replace(profile=profile, config=config, loading=False)

        logger.info(
            f"Session resolved for {identity.id}: "
            f"approved={state.is_approved} admin={state.is_admin}"
        )

    async def _resolve_profile(self, identity: Identity) -> Profile | None:
        """Fetch the identity's profile, creating it on first sign-in."""
        try:
            existing = await self.db.get_profile(identity.id)
            if existing is not None:
                self._detach(self._touch_last_login(identity.id))
                # Contact fields follow the identity in memory only
                return existing.model_copy(update={
                    "email": identity.email or existing.email,
                    "display_name": identity.display_name or existing.display_name,
                    "photo_url": identity.photo_url or existing.photo_url,
                })

            profile = build_initial_profile(identity, self.bootstrap_admin_email)
            await self.db.create_profile(profile)
            logger.info(
                f"Created profile for {identity.id} "
                f"(role={profile.role.value}, approved={profile.is_approved})"
            )
            # Adopt what we wrote; no read-back
            return profile

        except ProfileStoreError as e:
            logger.error(f"Error loading profile for {identity.id}: {e}")
            return None
        except Exception as e:
            logger.error(f"Unexpected error loading profile for {identity.id}: {e}")
            return None

    async def _load_config(self, previous: GlobalConfig) -> GlobalConfig:
        try:
            return await self.db.get_global_config()
        except ConfigStoreError as e:
            logger.warning(f"Keeping previous global config: {e}")
            return previous
        except Exception as e:
            logger.error(f"Unexpected error loading global config, keeping previous: {e}")
            return previous

    async def _touch_last_login(self, uid: str) -> None:
        try:
            await self.db.touch_last_login(uid)
        except ProfileStoreError as e:
            logger.warning(f"Could not update last login for {uid}: {e}")
        except Exception as e:
            logger.error(f"Unexpected error updating last login for {uid}: {e}")

    def _detach(self, coro: Coroutine[Any, Any, None]) -> None:
        """Run a side effect without tying it to the transition."""
        task = asyncio.get_running_loop().create_task(coro)
        self._detached.add(task)
        task.add_done_callback(self._detached.discard)
