"""Kanban boards and the support desk.

Feature requests and bug reports move between status columns; support
tickets follow a small open -> in-progress -> resolved lifecycle.
"""

import logging
from typing import Generic, TypeVar

from webaffe_console.db.client import DatabaseClient
from webaffe_console.exceptions import (
    AdminActionError,
    RecordNotFoundError,
    UnknownColumnError,
)
from webaffe_console.models.board import (
    BoardColumn,
    BoardItem,
    BugReport,
    FeatureRequest,
    SupportTicket,
    TicketStatus,
)

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT", bound=BoardItem)

FEATURE_COLUMNS: tuple[BoardColumn, ...] = (
    BoardColumn(id="submitted", label="Submitted"),
    BoardColumn(id="under-review", label="Under Review"),
    BoardColumn(id="planned", label="Planned"),
    BoardColumn(id="in-progress", label="In Progress"),
    BoardColumn(id="done", label="Done"),
    BoardColumn(id="rejected", label="Rejected"),
)

BUG_COLUMNS: tuple[BoardColumn, ...] = (
    BoardColumn(id="reported", label="Reported"),
    BoardColumn(id="confirmed", label="Confirmed"),
    BoardColumn(id="in-progress", label="In Progress"),
    BoardColumn(id="fixed", label="Fixed"),
    BoardColumn(id="wont-fix", label="Won't Fix"),
)

SUPPORT_COLLECTION = "support"


class KanbanBoard(Generic[ItemT]):
    """A status board over one collection."""

    def __init__(
        self,
        db: DatabaseClient,
        collection: str,
        columns: tuple[BoardColumn, ...],
        model: type[ItemT],
    ) -> None:
        self.db = db
        self.collection = collection
        self.columns = columns
        self.model = model

    def column(self, status: str) -> BoardColumn:
        """Look up a column by status.

        Raises:
            UnknownColumnError: If the board has no such column
        """
        for column in self.columns:
            if column.id == status:
                return column
        raise UnknownColumnError(f"{self.collection} board has no column '{status}'")

    async def load(self) -> list[ItemT]:
        """All items, newest first."""
        return await self.db.list_items(self.collection, self.model)

    def columns_with_items(self, items: list[ItemT]) -> list[tuple[BoardColumn, list[ItemT]]]:
        """Group items by column, in column order.

        Items whose status matches no column are left out.
        """
        return [
            (column, [item for item in items if item.status == column.id])
            for column in self.columns
        ]

    async def move(self, item_id: str, status: str) -> BoardColumn:
        """Move an item to another column.

        Returns:
            The destination column

        Raises:
            UnknownColumnError: If the destination is not a column of this board
            RecordNotFoundError: If the item does not exist
        """
        destination = self.column(status)
        if not await self.db.update_item_status(self.collection, item_id, destination.id):
            raise RecordNotFoundError(self.collection, item_id)

        logger.info(f"{self.collection}/{item_id} moved to {destination.label}")
        return destination


def feature_board(db: DatabaseClient) -> KanbanBoard[FeatureRequest]:
    return KanbanBoard(db, "features", FEATURE_COLUMNS, FeatureRequest)


def bug_tracker(db: DatabaseClient) -> KanbanBoard[BugReport]:
    return KanbanBoard(db, "bugs", BUG_COLUMNS, BugReport)


class SupportDesk:
    """Support ticket triage."""

    def __init__(self, db: DatabaseClient) -> None:
        self.db = db

    async def list_tickets(self, status: TicketStatus | None = None) -> list[SupportTicket]:
        """Tickets, newest first, optionally only those in one status."""
        tickets = await self.db.list_items(SUPPORT_COLLECTION, SupportTicket)
        return self.with_status(tickets, status)

    @staticmethod
    def with_status(
        tickets: list[SupportTicket],
        status: TicketStatus | None = None,
    ) -> list[SupportTicket]:
        """Narrow an already loaded ticket list; None keeps every ticket."""
        if status is None:
            return tickets
        return [t for t in tickets if t.status == status]

    @staticmethod
    def open_count(tickets: list[SupportTicket]) -> int:
        return sum(1 for t in tickets if t.status == TicketStatus.OPEN)

    async def _get(self, ticket_id: str) -> SupportTicket:
        ticket = await self.db.get_item(SUPPORT_COLLECTION, ticket_id, SupportTicket)
        if ticket is None:
            raise RecordNotFoundError(SUPPORT_COLLECTION, ticket_id)
        return ticket

    async def _set_status(self, ticket: SupportTicket, status: TicketStatus) -> SupportTicket:
        if not await self.db.update_item_status(SUPPORT_COLLECTION, ticket.id, status.value):
            raise RecordNotFoundError(SUPPORT_COLLECTION, ticket.id)
        logger.info(f"Ticket {ticket.id} {status.value}")
        return await self._get(ticket.id)

    async def start(self, ticket_id: str) -> SupportTicket:
        """Pick up an open ticket.

        Raises:
            AdminActionError: If the ticket is not open
        """
        ticket = await self._get(ticket_id)
        if ticket.status != TicketStatus.OPEN:
            raise AdminActionError(f"Ticket {ticket_id} is {ticket.status.value}, not open")
        return await self._set_status(ticket, TicketStatus.IN_PROGRESS)

    async def resolve(self, ticket_id: str) -> SupportTicket:
        """Resolve a ticket that is not already resolved or closed.

        Raises:
            AdminActionError: If the ticket is already resolved or closed
        """
        ticket = await self._get(ticket_id)
        if ticket.status in (TicketStatus.RESOLVED, TicketStatus.CLOSED):
            raise AdminActionError(f"Ticket {ticket_id} is already {ticket.status.value}")
        return await self._set_status(ticket, TicketStatus.RESOLVED)
