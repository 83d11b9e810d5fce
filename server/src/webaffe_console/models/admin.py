"""Response models for the admin console."""

from pydantic import BaseModel, Field

from webaffe_console.models.board import BoardColumn, BugReport, FeatureRequest, SupportTicket
from webaffe_console.models.identity import Profile


class UserEntry(BaseModel):
    """A user row with the actions an admin may take on it."""

    profile: Profile
    actions: list[str] = Field(default_factory=list)
    protected: bool = False


class UserList(BaseModel):
    users: list[UserEntry]
    pending_count: int


class ColumnView(BaseModel):
    """A board column and the items currently in it."""

    column: BoardColumn
    items: list[FeatureRequest | BugReport]


class BoardView(BaseModel):
    columns: list[ColumnView]
    total: int


class MoveResult(BaseModel):
    """Outcome of dropping an item on a column."""

    id: str
    status: str
    message: str


class TicketList(BaseModel):
    tickets: list[SupportTicket]
    open_count: int
