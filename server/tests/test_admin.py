"""Tests for the admin console services."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from webaffe_console.admin.boards import (
    BUG_COLUMNS,
    FEATURE_COLUMNS,
    SupportDesk,
    bug_tracker,
    feature_board,
)
from webaffe_console.admin.settings import SettingsAdmin
from webaffe_console.admin.users import UserAction, UserAdmin, UserFilter
from webaffe_console.exceptions import (
    AdminActionError,
    ConfigStoreError,
    ProtectedAccountError,
    RecordNotFoundError,
    UnknownColumnError,
)
from webaffe_console.models.board import FeatureRequest, SupportTicket, TicketStatus
from webaffe_console.models.identity import (
    GlobalConfig,
    GlobalConfigUpdate,
    Profile,
    ProfileUpdate,
    UserRole,
)

OWNER = "owner@webaffe.test"

PENDING = Profile(uid="p1", email="pending@example.com", display_name="Pat")
MEMBER = Profile(uid="m1", email="member@example.com", display_name="Mia", is_approved=True)
ADMIN = Profile(uid="a1", email="admin@example.com", role=UserRole.ADMIN, is_approved=True)
OWNER_PROFILE = Profile(uid="o1", email=OWNER, role=UserRole.ADMIN, is_approved=True)


@pytest.fixture
def mock_db():
    db = MagicMock()
    db.list_profiles = AsyncMock(return_value=[PENDING, MEMBER, ADMIN, OWNER_PROFILE])
    db.get_profile = AsyncMock(return_value=None)
    db.update_profile = AsyncMock(return_value=None)
    db.list_items = AsyncMock(return_value=[])
    db.get_item = AsyncMock(return_value=None)
    db.update_item_status = AsyncMock(return_value=True)
    db.get_global_config = AsyncMock(return_value=GlobalConfig())
    db.set_global_config = AsyncMock(return_value=GlobalConfig())
    return db


@pytest.fixture
def users(mock_db):
    return UserAdmin(mock_db, bootstrap_admin_email=OWNER)


# ---------------------------------------------------------------------------
# User management
# ---------------------------------------------------------------------------

class TestListUsers:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("user_filter,expected", [
        (UserFilter.ALL, ["p1", "m1", "a1", "o1"]),
        (UserFilter.PENDING, ["p1"]),
        (UserFilter.APPROVED, ["m1"]),
        (UserFilter.ADMIN, ["a1", "o1"]),
    ])
    async def test_filters(self, users, user_filter, expected):
        result = await users.list_users(user_filter=user_filter)
        assert [p.uid for p in result] == expected

    @pytest.mark.asyncio
    async def test_search_matches_email_or_name(self, users):
        assert [p.uid for p in await users.list_users(search="MIA")] == ["m1"]
        assert [p.uid for p in await users.list_users(search="pending@")] == ["p1"]

    def test_pending_count(self):
        assert UserAdmin.pending_count([PENDING, MEMBER, ADMIN]) == 1

    def test_select_narrows_loaded_list(self):
        loaded = [PENDING, MEMBER, ADMIN, OWNER_PROFILE]

        assert [p.uid for p in UserAdmin.select(loaded)] == ["p1", "m1", "a1", "o1"]
        assert [p.uid for p in UserAdmin.select(loaded, "admin", UserFilter.ADMIN)] == ["a1"]
        assert UserAdmin.select(loaded, "nobody") == []


class TestAvailableActions:

    def test_pending_user(self, users):
        assert users.available_actions(PENDING) == [UserAction.APPROVE]

    def test_member(self, users):
        assert users.available_actions(MEMBER) == [UserAction.MAKE_ADMIN, UserAction.REVOKE]

    def test_admin(self, users):
        assert users.available_actions(ADMIN) == [UserAction.REMOVE_ADMIN, UserAction.REVOKE]

    def test_bootstrap_admin_is_protected(self, users):
        assert users.is_protected(OWNER_PROFILE) is True
        assert users.available_actions(OWNER_PROFILE) == []


class TestPerform:

    @pytest.mark.asyncio
    async def test_approve_refetches(self, users, mock_db):
        approved = PENDING.model_copy(update={"is_approved": True})
        mock_db.get_profile.side_effect = [PENDING, approved]

        result = await users.perform("p1", UserAction.APPROVE)

        assert result.is_approved is True
        mock_db.update_profile.assert_awaited_once_with("p1", ProfileUpdate(is_approved=True))
        assert mock_db.get_profile.await_count == 2

    @pytest.mark.asyncio
    async def test_make_admin_writes_role(self, users, mock_db):
        mock_db.get_profile.side_effect = [MEMBER, MEMBER]

        await users.perform("m1", UserAction.MAKE_ADMIN)

        update = mock_db.update_profile.call_args.args[1]
        assert update.to_row() == {"role": "admin"}

    @pytest.mark.asyncio
    async def test_missing_user(self, users):
        with pytest.raises(RecordNotFoundError):
            await users.perform("ghost", UserAction.APPROVE)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", [UserAction.REMOVE_ADMIN, UserAction.REVOKE])
    async def test_bootstrap_admin_cannot_be_demoted(self, users, mock_db, action):
        mock_db.get_profile.return_value = OWNER_PROFILE

        with pytest.raises(ProtectedAccountError):
            await users.perform("o1", action)
        mock_db.update_profile.assert_not_called()

    @pytest.mark.asyncio
    async def test_action_not_applicable(self, users, mock_db):
        mock_db.get_profile.return_value = PENDING

        with pytest.raises(AdminActionError) as exc_info:
            await users.perform("p1", UserAction.MAKE_ADMIN)
        assert not isinstance(exc_info.value, ProtectedAccountError)


# ---------------------------------------------------------------------------
# Boards
# ---------------------------------------------------------------------------

class TestKanbanBoard:

    def test_column_ids(self):
        assert [c.id for c in FEATURE_COLUMNS] == [
            "submitted", "under-review", "planned", "in-progress", "done", "rejected",
        ]
        assert [c.id for c in BUG_COLUMNS] == [
            "reported", "confirmed", "in-progress", "fixed", "wont-fix",
        ]

    def test_columns_with_items(self, mock_db):
        board = feature_board(mock_db)
        items = [
            FeatureRequest(id="f1", status="planned"),
            FeatureRequest(id="f2", status="done"),
            FeatureRequest(id="f3", status="planned"),
            FeatureRequest(id="f4", status="archived"),
        ]

        grouped = dict((column.id, [i.id for i in col_items])
                       for column, col_items in board.columns_with_items(items))

        assert grouped["planned"] == ["f1", "f3"]
        assert grouped["done"] == ["f2"]
        assert "f4" not in sum(grouped.values(), [])
        assert list(grouped) == [c.id for c in FEATURE_COLUMNS]

    @pytest.mark.asyncio
    async def test_move(self, mock_db):
        destination = await bug_tracker(mock_db).move("b1", "fixed")

        assert destination.label == "Fixed"
        mock_db.update_item_status.assert_awaited_once_with("bugs", "b1", "fixed")

    @pytest.mark.asyncio
    async def test_move_to_unknown_column(self, mock_db):
        with pytest.raises(UnknownColumnError):
            await feature_board(mock_db).move("f1", "shipped")
        mock_db.update_item_status.assert_not_called()

    @pytest.mark.asyncio
    async def test_move_missing_item(self, mock_db):
        mock_db.update_item_status.return_value = False

        with pytest.raises(RecordNotFoundError):
            await feature_board(mock_db).move("nope", "done")


class TestSupportDesk:

    @pytest.mark.asyncio
    async def test_list_by_status(self, mock_db):
        mock_db.list_items.return_value = [
            SupportTicket(id="t1", status="open"),
            SupportTicket(id="t2", status="resolved"),
        ]
        desk = SupportDesk(mock_db)

        tickets = await desk.list_tickets()
        open_only = await desk.list_tickets(TicketStatus.OPEN)

        assert len(tickets) == 2
        assert [t.id for t in open_only] == ["t1"]
        assert SupportDesk.open_count(tickets) == 1

    def test_with_status(self):
        tickets = [
            SupportTicket(id="t1", status="open"),
            SupportTicket(id="t2", status="waiting"),
        ]

        assert SupportDesk.with_status(tickets) == tickets
        assert [t.id for t in SupportDesk.with_status(tickets, TicketStatus.WAITING)] == ["t2"]
        assert SupportDesk.with_status(tickets, TicketStatus.CLOSED) == []

    @pytest.mark.asyncio
    async def test_start_open_ticket(self, mock_db):
        mock_db.get_item.side_effect = [
            SupportTicket(id="t1", status="open"),
            SupportTicket(id="t1", status="in-progress"),
        ]

        ticket = await SupportDesk(mock_db).start("t1")

        assert ticket.status == TicketStatus.IN_PROGRESS
        mock_db.update_item_status.assert_awaited_once_with("support", "t1", "in-progress")

    @pytest.mark.asyncio
    async def test_start_requires_open(self, mock_db):
        mock_db.get_item.return_value = SupportTicket(id="t1", status="waiting")

        with pytest.raises(AdminActionError):
            await SupportDesk(mock_db).start("t1")

    @pytest.mark.asyncio
    async def test_resolve_waiting_ticket(self, mock_db):
        mock_db.get_item.side_effect = [
            SupportTicket(id="t1", status="waiting"),
            SupportTicket(id="t1", status="resolved"),
        ]

        ticket = await SupportDesk(mock_db).resolve("t1")

        assert ticket.status == TicketStatus.RESOLVED

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["resolved", "closed"])
    async def test_resolve_finished_ticket(self, mock_db, status):
        mock_db.get_item.return_value = SupportTicket(id="t1", status=status)

        with pytest.raises(AdminActionError):
            await SupportDesk(mock_db).resolve("t1")

    @pytest.mark.asyncio
    async def test_missing_ticket(self, mock_db):
        with pytest.raises(RecordNotFoundError):
            await SupportDesk(mock_db).resolve("t404")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------

class TestSettingsAdmin:

    @pytest.mark.asyncio
    async def test_load_failure_gives_defaults(self, mock_db):
        mock_db.get_global_config.side_effect = ConfigStoreError("read", "offline")

        assert await SettingsAdmin(mock_db).load() == GlobalConfig()

    @pytest.mark.asyncio
    async def test_save_merges(self, mock_db):
        update = GlobalConfigUpdate(default_model="claude")

        await SettingsAdmin(mock_db).save(update)

        mock_db.set_global_config.assert_awaited_once_with(update)

    @pytest.mark.asyncio
    async def test_save_failure_propagates(self, mock_db):
        mock_db.set_global_config.side_effect = ConfigStoreError("write", "denied")

        with pytest.raises(ConfigStoreError):
            await SettingsAdmin(mock_db).save(GlobalConfigUpdate(default_model="x"))
