"""
YourTales Backend - NotificationService Unit Tests
===================================================

What:  Tests NotificationService against a mocked AsyncSession.
How:   Uses the mock_db_session fixture; no database is touched.

What we test:
    ✅ notify() adds the row inside a savepoint and returns it
    ✅ notify() swallows database errors and returns None
    ✅ Listing returns notifications and the unread count
    ✅ Another user's notification is reported as not found
    ✅ Unexpected database errors surface as DatabaseError
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from yourtales.exceptions import DatabaseError, NotFoundError
from yourtales.models.enums import NotificationType
from yourtales.models.notification import Notification
from yourtales.services.notification_service import NotificationService


def make_notification(id=1, recipient_id=1, is_read=False):
    return Notification(
        id=id,
        recipient_id=recipient_id,
        type=NotificationType.SYSTEM,
        title="Manuscript Created",
        message='You created a new manuscript: "Draft"',
        data={"manuscriptId": 3},
        is_read=is_read,
        created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
    )


class TestNotify:

    def setup_method(self):
        self.service = NotificationService()

    @pytest.mark.asyncio
    async def test_notify_adds_row_in_savepoint(self, mock_db_session):
        result = await self.service.notify(
            mock_db_session,
            recipient_id=4,
            type=NotificationType.COMMENT,
            title="New Comment",
            message="hello",
            data={"chapterId": 9},
        )

        mock_db_session.begin_nested.assert_called_once()
        mock_db_session.add.assert_called_once_with(result)
        assert result.recipient_id == 4
        assert result.type == NotificationType.COMMENT
        assert result.data == {"chapterId": 9}

    @pytest.mark.asyncio
    async def test_notify_defaults_data_to_empty_object(self, mock_db_session):
        result = await self.service.notify(
            mock_db_session, 4, NotificationType.SYSTEM, "Title", "Body"
        )
        assert result.data == {}

    @pytest.mark.asyncio
    async def test_notify_failure_is_swallowed(self, mock_db_session):
        mock_db_session.begin_nested.return_value.__aexit__.side_effect = OperationalError(
            "INSERT", {}, Exception("disk full")
        )

        result = await self.service.notify(
            mock_db_session, 4, NotificationType.SYSTEM, "Title", "Body"
        )

        assert result is None


class TestListAndMutate:

    def setup_method(self):
        self.service = NotificationService()

    @pytest.mark.asyncio
    async def test_list_returns_notifications_and_unread_count(self, mock_db_session):
        rows = MagicMock()
        rows.scalars.return_value.all.return_value = [make_notification(2), make_notification(1)]
        count = MagicMock()
        count.scalar.return_value = 2
        mock_db_session.execute.side_effect = [rows, count]

        result = await self.service.list_for_user(mock_db_session, user_id=1)

        assert [n.id for n in result.notifications] == [2, 1]
        assert result.unread_count == 2

    @pytest.mark.asyncio
    async def test_list_database_error(self, mock_db_session):
        mock_db_session.execute.side_effect = Exception("connection lost")

        with pytest.raises(DatabaseError):
            await self.service.list_for_user(mock_db_session, user_id=1)

    @pytest.mark.asyncio
    async def test_mark_read_sets_flag(self, mock_db_session):
        notification = make_notification()
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = notification
        mock_db_session.execute.return_value = mock_result

        result = await self.service.mark_read(mock_db_session, user_id=1, notification_id=1)

        assert notification.is_read is True
        assert result.notification.is_read is True
        assert result.message == "Notification marked as read"

    @pytest.mark.asyncio
    async def test_mark_read_other_users_notification_not_found(self, mock_db_session):
        # The recipient filter is part of the query, so nothing comes back
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = mock_result

        with pytest.raises(NotFoundError) as exc_info:
            await self.service.mark_read(mock_db_session, user_id=2, notification_id=1)

        assert exc_info.value.message == "Notification not found"

    @pytest.mark.asyncio
    async def test_delete_missing_notification(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.scalar_one_or_none.return_value = None
        mock_db_session.execute.return_value = mock_result

        with pytest.raises(NotFoundError):
            await self.service.delete(mock_db_session, user_id=1, notification_id=99)

    @pytest.mark.asyncio
    async def test_mark_all_read_message(self, mock_db_session):
        mock_result = MagicMock()
        mock_result.rowcount = 3
        mock_db_session.execute.return_value = mock_result

        result = await self.service.mark_all_read(mock_db_session, user_id=1)

        assert result.message == "All notifications marked as read"
