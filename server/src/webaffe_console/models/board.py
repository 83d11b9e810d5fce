"""Crowd-submitted feature requests, bug reports and support tickets.

Field aliases match the stored document fields.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class BoardColumn(BaseModel):
    """A kanban column. ``id`` is the status value stored on items."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str


class BoardItem(BaseModel):
    """Fields shared by everything that lives on a board."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = ""
    description: str = ""
    status: str
    author: str | None = None
    author_email: str | None = Field(default=None, alias="authorEmail")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")


class FeatureRequest(BoardItem):
    """A feature request on the feature board."""

    priority: str | None = None  # low, medium, high, critical
    votes: list[str] = Field(default_factory=list)

    @property
    def vote_count(self) -> int:
        return len(self.votes)


class BugReport(BoardItem):
    """A bug report on the bug tracker."""

    steps: str = ""
    severity: str | None = None  # low, medium, high, critical


class TicketStatus(str, Enum):
    """Lifecycle of a support ticket."""

    OPEN = "open"
    IN_PROGRESS = "in-progress"
    WAITING = "waiting"
    RESOLVED = "resolved"
    CLOSED = "closed"


class TicketMessage(BaseModel):
    """One message in a support conversation."""

    text: str
    sender: str
    timestamp: datetime | None = None


class SupportTicket(BaseModel):
    """A support ticket."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    subject: str = ""
    message: str = ""
    status: TicketStatus = TicketStatus.OPEN
    priority: str | None = None  # low, medium, high, critical
    author: str | None = None
    author_email: str | None = Field(default=None, alias="authorEmail")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    messages: list[TicketMessage] = Field(default_factory=list)


class MoveRequest(BaseModel):
    """Drop of a board item onto a column."""

    status: str
