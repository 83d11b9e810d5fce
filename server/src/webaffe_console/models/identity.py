"""Identity, profile and session models.

Profile and GlobalConfig field aliases are the persisted column names;
existing stored data depends on them, so they must not change.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class UserRole(str, Enum):
    """Role recorded on a profile."""

    USER = "user"
    ADMIN = "admin"


class Identity(BaseModel):
    """An externally verified account, as reported by the identity provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str | None = None
    display_name: str | None = None
    photo_url: str | None = None


class Profile(BaseModel):
    """This system's record of role and approval for an identity."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    uid: str = Field(alias="id")
    role: UserRole = UserRole.USER
    is_approved: bool = Field(default=False, alias="isApproved")
    email: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    photo_url: str | None = Field(default=None, alias="photoURL")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    last_login: datetime | None = Field(default=None, alias="lastLogin")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    def to_row(self) -> dict:
        """Serialize using persisted column names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ProfileUpdate(BaseModel):
    """Partial profile write. Only fields explicitly set are persisted."""

    model_config = ConfigDict(populate_by_name=True)

    role: UserRole | None = None
    is_approved: bool | None = Field(default=None, alias="isApproved")
    email: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")
    photo_url: str | None = Field(default=None, alias="photoURL")

    def to_row(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class GlobalConfig(BaseModel):
    """Default AI backend used by non-admin sessions."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    default_provider: str = Field(default="", alias="defaultProvider")
    default_model: str = Field(default="", alias="defaultModel")


class GlobalConfigUpdate(BaseModel):
    """Partial global config write."""

    model_config = ConfigDict(populate_by_name=True)

    default_provider: str | None = Field(default=None, alias="defaultProvider")
    default_model: str | None = Field(default=None, alias="defaultModel")

    def to_row(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class SessionState(BaseModel):
    """Process-wide session snapshot.

    The derived flags are pure functions of ``identity`` and ``profile``.
    A missing profile means unapproved and not admin, which is what makes
    profile-store failures fail closed.
    """

    model_config = ConfigDict(frozen=True)

    loading: bool = True
    identity: Identity | None = None
    profile: Profile | None = None
    config: GlobalConfig = Field(default_factory=GlobalConfig)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_authenticated(self) -> bool:
        return self.identity is not None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_approved(self) -> bool:
        return self.profile is not None and self.profile.is_approved is True

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_admin(self) -> bool:
        return self.profile is not None and self.profile.role == UserRole.ADMIN
