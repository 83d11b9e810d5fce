"""Pydantic models for WebAffe Console."""

from webaffe_console.models.admin import (
    BoardView,
    ColumnView,
    MoveResult,
    TicketList,
    UserEntry,
    UserList,
)
from webaffe_console.models.auth import (
    AuthResult,
    MagicLinkCompletion,
    MagicLinkRequest,
    OAuthCallback,
    OAuthStart,
    PasswordCredentials,
    SignUpRequest,
)
from webaffe_console.models.board import (
    BoardColumn,
    BoardItem,
    BugReport,
    FeatureRequest,
    MoveRequest,
    SupportTicket,
    TicketMessage,
    TicketStatus,
)
from webaffe_console.models.identity import (
    GlobalConfig,
    GlobalConfigUpdate,
    Identity,
    Profile,
    ProfileUpdate,
    SessionState,
    UserRole,
)

__all__ = [
    "AuthResult",
    "BoardColumn",
    "BoardItem",
    "BoardView",
    "BugReport",
    "ColumnView",
    "FeatureRequest",
    "GlobalConfig",
    "GlobalConfigUpdate",
    "Identity",
    "MagicLinkCompletion",
    "MagicLinkRequest",
    "MoveRequest",
    "MoveResult",
    "OAuthCallback",
    "OAuthStart",
    "PasswordCredentials",
    "Profile",
    "ProfileUpdate",
    "SessionState",
    "SignUpRequest",
    "SupportTicket",
    "TicketList",
    "TicketMessage",
    "TicketStatus",
    "UserEntry",
    "UserList",
    "UserRole",
]
