"""Admin console: user management, boards, support desk and settings."""

from webaffe_console.admin.boards import KanbanBoard, SupportDesk, bug_tracker, feature_board
from webaffe_console.admin.settings import SettingsAdmin
from webaffe_console.admin.users import UserAction, UserAdmin, UserFilter

__all__ = [
    "KanbanBoard",
    "SettingsAdmin",
    "SupportDesk",
    "UserAction",
    "UserAdmin",
    "UserFilter",
    "bug_tracker",
    "feature_board",
]
