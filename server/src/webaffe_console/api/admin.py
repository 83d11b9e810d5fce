"""Admin console endpoints. Every route requires an approved admin session."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from webaffe_console.admin.boards import KanbanBoard, SupportDesk, bug_tracker, feature_board
from webaffe_console.admin.settings import SettingsAdmin
from webaffe_console.admin.users import UserAction, UserAdmin, UserFilter
from webaffe_console.api.auth import get_db_client, require_admin
from webaffe_console.config import get_settings
from webaffe_console.db.client import DatabaseClient
from webaffe_console.exceptions import (
    AdminActionError,
    BoardStoreError,
    ConfigStoreError,
    ProfileStoreError,
    RecordNotFoundError,
    UnknownColumnError,
)
from webaffe_console.models.admin import (
    BoardView,
    ColumnView,
    MoveResult,
    TicketList,
    UserEntry,
    UserList,
)
from webaffe_console.models.board import MoveRequest, SupportTicket, TicketStatus
from webaffe_console.models.identity import GlobalConfig, GlobalConfigUpdate, Profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", dependencies=[Depends(require_admin)])

Database = Annotated[DatabaseClient, Depends(get_db_client)]


def _http_error(error: Exception) -> HTTPException:
    """Map an admin or store failure to an HTTP error."""
    if isinstance(error, RecordNotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(error, UnknownColumnError):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(error, AdminActionError):
        code = status.HTTP_409_CONFLICT
    else:
        logger.error(f"Admin store failure: {error}")
        code = status.HTTP_502_BAD_GATEWAY
    return HTTPException(status_code=code, detail=str(error))


_ADMIN_ERRORS = (
    AdminActionError,
    RecordNotFoundError,
    BoardStoreError,
    ProfileStoreError,
    ConfigStoreError,
)


def get_user_admin(db: Database) -> UserAdmin:
    return UserAdmin(db, get_settings().bootstrap_admin_email)


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------


@router.get("/users", response_model=UserList)
async def list_users(
    users: Annotated[UserAdmin, Depends(get_user_admin)],
    search: str | None = None,
    user_filter: UserFilter = UserFilter.ALL,
) -> UserList:
    """List users, newest first.

    Args:
        search: Case-insensitive substring of email or display name
        user_filter: all, pending, approved or admin
    """
    try:
        everyone = await users.list_users()
    except ProfileStoreError as e:
        raise _http_error(e)

    # One read serves both the filtered rows and the pending badge
    shown = UserAdmin.select(everyone, search, user_filter)
    return UserList(
        users=[
            UserEntry(
                profile=p,
                actions=[a.value for a in users.available_actions(p)],
                protected=users.is_protected(p),
            )
            for p in shown
        ],
        pending_count=UserAdmin.pending_count(everyone),
    )


@router.post("/users/{uid}/{action}", response_model=Profile)
async def user_action(
    uid: str,
    action: UserAction,
    users: Annotated[UserAdmin, Depends(get_user_admin)],
) -> Profile:
    """Approve, promote, demote or revoke a user."""
    try:
        return await users.perform(uid, action)
    except _ADMIN_ERRORS as e:
        raise _http_error(e)


# -----------------------------------------------------------------------------
# Boards
# -----------------------------------------------------------------------------


async def _board_view(board: KanbanBoard) -> BoardView:
    try:
        items = await board.load()
    except BoardStoreError as e:
        raise _http_error(e)
    return BoardView(
        columns=[
            ColumnView(column=column, items=column_items)
            for column, column_items in board.columns_with_items(items)
        ],
        total=len(items),
    )


async def _move(board: KanbanBoard, item_id: str, request: MoveRequest) -> MoveResult:
    try:
        destination = await board.move(item_id, request.status)
    except _ADMIN_ERRORS as e:
        raise _http_error(e)
    return MoveResult(
        id=item_id,
        status=destination.id,
        message=f"Moved to {destination.label}",
    )


@router.get("/features", response_model=BoardView)
async def list_features(db: Database) -> BoardView:
    """Feature requests grouped by column."""
    return await _board_view(feature_board(db))


@router.post("/features/{item_id}/move", response_model=MoveResult)
async def move_feature(item_id: str, request: MoveRequest, db: Database) -> MoveResult:
    return await _move(feature_board(db), item_id, request)


@router.get("/bugs", response_model=BoardView)
async def list_bugs(db: Database) -> BoardView:
    """Bug reports grouped by column."""
    return await _board_view(bug_tracker(db))


@router.post("/bugs/{item_id}/move", response_model=MoveResult)
async def move_bug(item_id: str, request: MoveRequest, db: Database) -> MoveResult:
    return await _move(bug_tracker(db), item_id, request)


# -----------------------------------------------------------------------------
# Support
# -----------------------------------------------------------------------------


@router.get("/support", response_model=TicketList)
async def list_tickets(
    db: Database,
    ticket_status: TicketStatus | None = None,
) -> TicketList:
    """Support tickets, newest first, optionally filtered by status."""
    desk = SupportDesk(db)
    try:
        tickets = await desk.list_tickets()
    except BoardStoreError as e:
        raise _http_error(e)

    shown = SupportDesk.with_status(tickets, ticket_status)
    return TicketList(tickets=shown, open_count=SupportDesk.open_count(tickets))


@router.post("/support/{ticket_id}/start", response_model=SupportTicket)
async def start_ticket(ticket_id: str, db: Database) -> SupportTicket:
    try:
        return await SupportDesk(db).start(ticket_id)
    except _ADMIN_ERRORS as e:
        raise _http_error(e)


@router.post("/support/{ticket_id}/resolve", response_model=SupportTicket)
async def resolve_ticket(ticket_id: str, db: Database) -> SupportTicket:
    try:
        return await SupportDesk(db).resolve(ticket_id)
    except _ADMIN_ERRORS as e:
        raise _http_error(e)


# -----------------------------------------------------------------------------
# Settings
# -----------------------------------------------------------------------------


@router.get("/settings", response_model=GlobalConfig)
async def get_global_settings(db: Database) -> GlobalConfig:
    return await SettingsAdmin(db).load()


@router.put("/settings", response_model=GlobalConfig)
async def update_global_settings(update: GlobalConfigUpdate, db: Database) -> GlobalConfig:
    """Save the default provider/model.

    Sessions pick up the new values on their next identity transition.
    """
    try:
        return await SettingsAdmin(db).save(update)
    except ConfigStoreError as e:
        raise _http_error(e)
