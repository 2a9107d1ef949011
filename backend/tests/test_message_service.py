"""
Memory Map Backend — Message Service Unit Tests
=================================================

What:  Tests for MessageService business logic (validate, create, list).
How:   Uses a mock AsyncSession; no database is touched.

What we test:
    ✅ Valid submissions are added, flushed and returned with an identifier
    ✅ Invalid submissions raise ValidationError before any write
    ✅ Timestamp stamping can be switched off
    ✅ Store failures become DatabaseError
"""

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

from memorymap.exceptions import DatabaseError, ValidationError
from memorymap.models.message import Message
from memorymap.services.message_service import MessageService


class TestMessageServiceCreate:
    """Tests for create_message."""

    def setup_method(self):
        self.service = MessageService(stamp_created_at=True)

    @pytest.mark.asyncio
    async def test_create_message_success(self, mock_db_session, valid_submission):
        """A valid submission is persisted and returned with an identifier."""
        result = await self.service.create_message(mock_db_session, valid_submission)

        assert isinstance(result.id, UUID)
        assert result.name == "Alex"
        assert result.message == "Hello2024"
        assert result.latitude == 43.1
        assert result.longitude == -77.6
        assert result.date is not None

        mock_db_session.add.assert_called_once()
        added = mock_db_session.add.call_args.args[0]
        assert isinstance(added, Message)
        assert added.id == result.id
        mock_db_session.flush.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_message_without_timestamp(self, mock_db_session, valid_submission):
        service = MessageService(stamp_created_at=False)

        result = await service.create_message(mock_db_session, valid_submission)

        assert result.date is None
        assert mock_db_session.add.call_args.args[0].created_at is None

    @pytest.mark.asyncio
    async def test_create_message_with_space_is_rejected(self, mock_db_session):
        """'hi there' fails the alphanumeric rule; nothing is written."""
        candidate = {"name": "Bob", "message": "hi there", "latitude": 10, "longitude": 10}

        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_message(mock_db_session, candidate)

        assert [e["field"] for e in exc_info.value.errors] == ["message"]
        mock_db_session.add.assert_not_called()
        mock_db_session.flush.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_message_reports_every_bad_field(self, mock_db_session):
        candidate = {"name": "", "message": "ok", "latitude": 91, "longitude": -181}

        with pytest.raises(ValidationError) as exc_info:
            await self.service.create_message(mock_db_session, candidate)

        fields = {e["field"] for e in exc_info.value.errors}
        assert fields == {"name", "latitude", "longitude"}

    @pytest.mark.asyncio
    async def test_create_message_flush_failure(self, mock_db_session, valid_submission):
        """Insert errors surface as DatabaseError with a generic message."""
        mock_db_session.flush = AsyncMock(side_effect=RuntimeError("connection reset"))

        with pytest.raises(DatabaseError) as exc_info:
            await self.service.create_message(mock_db_session, valid_submission)

        assert exc_info.value.context == {"error_type": "RuntimeError"}


class TestMessageServiceValidate:
    """Tests for the raw-submission guard."""

    @pytest.mark.parametrize("candidate", [None, [], "Alex", 42])
    def test_non_object_body_is_rejected(self, candidate):
        with pytest.raises(ValidationError) as exc_info:
            MessageService.validate(candidate)

        assert exc_info.value.field == "body"

    def test_numeric_strings_are_coerced(self):
        submission = MessageService.validate(
            {"name": "Alex", "message": "Hello2024", "latitude": "43.1", "longitude": "-77.6"}
        )

        assert submission.latitude == 43.1
        assert submission.longitude == -77.6


class TestMessageServiceList:
    """Tests for list_messages."""

    def setup_method(self):
        self.service = MessageService()

    @pytest.mark.asyncio
    async def test_list_messages_empty(self, mock_db_session):
        """An empty store yields an empty list."""
        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = []
        mock_db_session.execute.return_value = mock_result

        result = await self.service.list_messages(mock_db_session)

        assert result == []
        mock_db_session.execute.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_list_messages_with_results(self, mock_db_session, sample_message_data):
        rows = []
        for i in range(3):
            row = MagicMock()
            row.id = uuid4()
            row.name = f"Visitor{i}"
            row.message = f"Memory{i}"
            row.latitude = 10.0 * i
            row.longitude = -20.0 * i
            row.created_at = sample_message_data["created_at"] if i else None
            rows.append(row)

        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = rows
        mock_db_session.execute.return_value = mock_result

        result = await self.service.list_messages(mock_db_session)

        assert [m.name for m in result] == ["Visitor0", "Visitor1", "Visitor2"]
        assert result[0].date is None
        assert result[2].latitude == 20.0

    @pytest.mark.asyncio
    async def test_list_messages_marks_naive_timestamps_as_utc(self, mock_db_session):
        row = MagicMock()
        row.id = uuid4()
        row.name = "Alex"
        row.message = "Hello2024"
        row.latitude = 43.1
        row.longitude = -77.6
        row.created_at = datetime(2026, 10, 19, 12, 0, 0)

        mock_result = MagicMock()
        mock_result.scalars.return_value.all.return_value = [row]
        mock_db_session.execute.return_value = mock_result

        result = await self.service.list_messages(mock_db_session)

        assert result[0].date == datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)

    @pytest.mark.asyncio
    async def test_list_messages_database_failure(self, mock_db_session):
        mock_db_session.execute = AsyncMock(side_effect=RuntimeError("database is down"))

        with pytest.raises(DatabaseError):
            await self.service.list_messages(mock_db_session)
