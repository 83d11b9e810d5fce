"""User management for administrators.

Approve pending accounts, promote and demote admins, revoke access. The
bootstrap admin can never be demoted or revoked from here; that guard
lives in this service, not in the profile store.
"""

import logging
from enum import Enum

from webaffe_console.db.client import USERS_TABLE, DatabaseClient
from webaffe_console.exceptions import (
    AdminActionError,
    ProtectedAccountError,
    RecordNotFoundError,
)
from webaffe_console.models.identity import Profile, ProfileUpdate, UserRole
from webaffe_console.session.listener import is_bootstrap_admin

logger = logging.getLogger(__name__)


class UserFilter(str, Enum):
    """User list filters."""

    ALL = "all"
    PENDING = "pending"  # Not approved yet
    APPROVED = "approved"  # Approved, not admin
    ADMIN = "admin"


class UserAction(str, Enum):
    """Actions an admin can take on a user."""

    APPROVE = "approve"
    MAKE_ADMIN = "make_admin"
    REMOVE_ADMIN = "remove_admin"
    REVOKE = "revoke"


_ACTION_UPDATES: dict[UserAction, ProfileUpdate] = {
    UserAction.APPROVE: ProfileUpdate(is_approved=True),
    UserAction.MAKE_ADMIN: ProfileUpdate(role=UserRole.ADMIN),
    UserAction.REMOVE_ADMIN: ProfileUpdate(role=UserRole.USER),
    UserAction.REVOKE: ProfileUpdate(is_approved=False),
}


def matches_filter(profile: Profile, user_filter: UserFilter) -> bool:
    if user_filter == UserFilter.PENDING:
        return not profile.is_approved
    if user_filter == UserFilter.APPROVED:
        return profile.is_approved and profile.role != UserRole.ADMIN
    if user_filter == UserFilter.ADMIN:
        return profile.role == UserRole.ADMIN
    return True


def matches_search(profile: Profile, search: str | None) -> bool:
    if not search:
        return True
    needle = search.lower()
    return any(
        needle in (value or "").lower()
        for value in (profile.email, profile.display_name)
    )


class UserAdmin:
    """Admin operations on user profiles."""

    def __init__(self, db: DatabaseClient, bootstrap_admin_email: str | None = None) -> None:
        self.db = db
        self.bootstrap_admin_email = bootstrap_admin_email

    async def list_users(
        self,
        search: str | None = None,
        user_filter: UserFilter = UserFilter.ALL,
    ) -> list[Profile]:
        """List users, newest first, narrowed by search text and filter."""
        return self.select(await self.db.list_profiles(), search, user_filter)

    @staticmethod
    def select(
        profiles: list[Profile],
        search: str | None = None,
        user_filter: UserFilter = UserFilter.ALL,
    ) -> list[Profile]:
        """Narrow an already loaded user list."""
        return [
            p for p in profiles
            if matches_search(p, search) and matches_filter(p, user_filter)
        ]

    @staticmethod
    def pending_count(profiles: list[Profile]) -> int:
        return sum(1 for p in profiles if not p.is_approved)

    def is_protected(self, profile: Profile) -> bool:
        return is_bootstrap_admin(profile.email, self.bootstrap_admin_email)

    def available_actions(self, profile: Profile) -> list[UserAction]:
        """Actions that make sense for a user in its current state."""
        actions: list[UserAction] = []
        protected = self.is_protected(profile)

        if not profile.is_approved:
            actions.append(UserAction.APPROVE)
        if profile.is_approved and profile.role != UserRole.ADMIN:
            actions.append(UserAction.MAKE_ADMIN)
        if profile.role == UserRole.ADMIN and not protected:
            actions.append(UserAction.REMOVE_ADMIN)
        if profile.is_approved and not protected:
            actions.append(UserAction.REVOKE)
        return actions

    async def perform(self, uid: str, action: UserAction) -> Profile:
        """Apply an action to a user and return the re-fetched profile.

        Raises:
            RecordNotFoundError: If the user does not exist
            ProtectedAccountError: If the action would demote or revoke the bootstrap admin
            AdminActionError: If the action does not apply to the user's state
        """
        profile = await self.db.get_profile(uid)
        if profile is None:
            raise RecordNotFoundError(USERS_TABLE, uid)

        if action not in self.available_actions(profile):
            if self.is_protected(profile) and action in (UserAction.REMOVE_ADMIN, UserAction.REVOKE):
                raise ProtectedAccountError(f"{profile.email} cannot be demoted or revoked")
            raise AdminActionError(
                f"Cannot {action.value} user {uid} "
                f"(role={profile.role.value}, approved={profile.is_approved})"
            )

        await self.db.update_profile(uid, _ACTION_UPDATES[action])
        logger.info(f"Admin action {action.value} applied to {uid}")

        refreshed = await self.db.get_profile(uid)
        if refreshed is None:
            raise RecordNotFoundError(USERS_TABLE, uid)
        return refreshed
