"""Supabase database client for profiles, global config and admin boards."""

import logging
import time
from datetime import UTC, datetime
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError
from supabase import Client, ClientOptions, PostgrestAPIError, create_client

from webaffe_console.config import get_settings
from webaffe_console.exceptions import BoardStoreError, ConfigStoreError, ProfileStoreError
from webaffe_console.models.identity import (
    GlobalConfig,
    GlobalConfigUpdate,
    Profile,
    ProfileUpdate,
)

logger = logging.getLogger(__name__)

USERS_TABLE = "users"
CONFIG_TABLE = "config"
CONFIG_ROW_ID = "app"

# Errors that mean "the store did not give us a usable answer"
_STORE_ERRORS = (PostgrestAPIError, httpx.HTTPError, ValidationError)

ItemT = TypeVar("ItemT", bound=BaseModel)


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def build_client() -> Client:
    """Create the shared Supabase client from settings."""
    settings = get_settings()
    return create_client(
        settings.supabase_url,
        settings.supabase_key,
        options=ClientOptions(
            flow_type="pkce",
            postgrest_client_timeout=settings.store_timeout,
        ),
    )


class DatabaseClient:
    """Client for Supabase database operations."""

    def __init__(self, client: Client | None = None) -> None:
        self.client: Client = client or build_client()

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    async def get_profile(self, uid: str) -> Profile | None:
        """Get the profile for an identity.

        Args:
            uid: The identity ID

        Returns:
            The profile, or None if it has not been created yet

        Raises:
            ProfileStoreError: If the store cannot be read
        """
        try:
            result = (
                self.client.table(USERS_TABLE)
                .select("*")
                .eq("id", uid)
                .limit(1)
                .execute()
            )
            if result.data:
                return Profile(**result.data[0])
            return None
        except _STORE_ERRORS as e:
            raise ProfileStoreError("read", str(e)) from e

    async def create_profile(self, profile: Profile) -> None:
        """Insert a new profile.

        This is a plain insert, so an existing row for the same identity
        makes it fail instead of overwriting role or approval.

        Args:
            profile: The profile to persist

        Raises:
            ProfileStoreError: If the row exists or the write fails
        """
        now = _now_iso()
        data = {
            **profile.to_row(),
            "createdAt": now,
            "lastLogin": now,
        }
        try:
            self.client.table(USERS_TABLE).insert(data).execute()
        except _STORE_ERRORS as e:
            raise ProfileStoreError("create", str(e)) from e
        logger.debug(f"Created profile {profile.uid} (role={profile.role.value})")

    async def update_profile(self, uid: str, update: ProfileUpdate) -> Profile | None:
        """Merge-update a profile.

        Only fields explicitly set on ``update`` change; ``updatedAt`` is
        always stamped.

        Args:
            uid: The identity ID
            update: The fields to change

        Returns:
            The updated profile, or None if no profile exists for uid
        """
        data: dict[str, Any] = {**update.to_row(), "updatedAt": _now_iso()}
        try:
            result = (
                self.client.table(USERS_TABLE)
                .update(data)
                .eq("id", uid)
                .execute()
            )
            if result.data:
                logger.info(f"Updated profile {uid}: {sorted(update.to_row())}")
                return Profile(**result.data[0])
            return None
        except _STORE_ERRORS as e:
            raise ProfileStoreError("update", str(e)) from e

    async def touch_last_login(self, uid: str) -> None:
        """Stamp the profile's lastLogin.

        Args:
            uid: The identity ID
        """
        try:
            self.client.table(USERS_TABLE).update({
                "lastLogin": _now_iso(),
            }).eq("id", uid).execute()
        except _STORE_ERRORS as e:
            raise ProfileStoreError("touch", str(e)) from e

    async def list_profiles(self) -> list[Profile]:
        """List all profiles, newest first."""
        try:
            result = (
                self.client.table(USERS_TABLE)
                .select("*")
                .order("createdAt", desc=True)
                .execute()
            )
            return [Profile(**row) for row in result.data]
        except _STORE_ERRORS as e:
            raise ProfileStoreError("list", str(e)) from e

    # -------------------------------------------------------------------------
    # Global config
    # -------------------------------------------------------------------------

    async def get_global_config(self) -> GlobalConfig:
        """Get the global config, falling back to defaults if absent.

        Raises:
            ConfigStoreError: If the store cannot be read
        """
        try:
            result = (
                self.client.table(CONFIG_TABLE)
                .select("*")
                .eq("id", CONFIG_ROW_ID)
                .limit(1)
                .execute()
            )
            if not result.data:
                return GlobalConfig()
            row = result.data[0]
            # Null columns behave like unset ones
            return GlobalConfig(
                default_provider=row.get("defaultProvider") or "",
                default_model=row.get("defaultModel") or "",
            )
        except _STORE_ERRORS as e:
            raise ConfigStoreError("read", str(e)) from e

    async def set_global_config(self, update: GlobalConfigUpdate) -> GlobalConfig:
        """Merge the named fields into the global config record.

        Admin-only by convention; callers enforce that.

        Args:
            update: The fields to change

        Returns:
            The stored config after the write
        """
        data = {
            "id": CONFIG_ROW_ID,
            **update.to_row(),
            "updatedAt": _now_iso(),
        }
        try:
            result = (
                self.client.table(CONFIG_TABLE)
                .upsert(data, on_conflict="id")
                .execute()
            )
        except _STORE_ERRORS as e:
            raise ConfigStoreError("write", str(e)) from e

        logger.info(f"Global config updated: {sorted(update.to_row())}")
        if result.data:
            row = result.data[0]
            return GlobalConfig(
                default_provider=row.get("defaultProvider") or "",
                default_model=row.get("defaultModel") or "",
            )
        return await self.get_global_config()

    # -------------------------------------------------------------------------
    # Board collections (features, bugs, support)
    # -------------------------------------------------------------------------

    async def list_items(self, collection: str, model: type[ItemT]) -> list[ItemT]:
        """List every item in a collection, newest first.

        Args:
            collection: Table name
            model: Model each row is parsed into

        Returns:
            Parsed items
        """
        try:
            result = (
                self.client.table(collection)
                .select("*")
                .order("createdAt", desc=True)
                .execute()
            )
            return [model(**row) for row in result.data]
        except _STORE_ERRORS as e:
            raise BoardStoreError(collection, "list", str(e)) from e

    async def get_item(
        self,
        collection: str,
        item_id: str,
        model: type[ItemT],
    ) -> ItemT | None:
        """Get a single item by ID, or None if not found."""
        try:
            result = (
                self.client.table(collection)
                .select("*")
                .eq("id", item_id)
                .limit(1)
                .execute()
            )
            if result.data:
                return model(**result.data[0])
            return None
        except _STORE_ERRORS as e:
            raise BoardStoreError(collection, "read", str(e)) from e

    async def update_item_status(
        self,
        collection: str,
        item_id: str,
        status: str,
    ) -> bool:
        """Set an item's status.

        Returns:
            True if an item was updated, False if it does not exist
        """
        try:
            result = (
                self.client.table(collection)
                .update({"status": status, "updatedAt": _now_iso()})
                .eq("id", item_id)
                .execute()
            )
        except _STORE_ERRORS as e:
            raise BoardStoreError(collection, "update", str(e)) from e

        logger.debug(f"Moved {collection}/{item_id} to {status}")
        return bool(result.data)

    # -------------------------------------------------------------------------
    # Health Check
    # -------------------------------------------------------------------------

    async def health_check(self) -> dict[str, Any]:
        """Check database connectivity and return health status.

        Returns:
            Dict with:
                - healthy: bool - whether the database is reachable
                - latency_ms: float - query latency in milliseconds
                - error: str | None - error message if unhealthy
        """
        start = time.perf_counter()
        try:
            self.client.table(USERS_TABLE).select("id").limit(1).execute()
            latency_ms = (time.perf_counter() - start) * 1000

            return {
                "healthy": True,
                "latency_ms": round(latency_ms, 2),
                "error": None,
            }
        except Exception as e:
            latency_ms = (time.perf_counter() - start) * 1000
            logger.error(f"Database health check failed: {e}")

            return {
                "healthy": False,
                "latency_ms": round(latency_ms, 2),
                "error": str(e),
            }
