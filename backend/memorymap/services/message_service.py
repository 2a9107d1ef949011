"""
Memory Map Backend — Message Service
======================================

What:  Business logic for the `messages` resource: list and create.
How:   Validates raw submissions against MessageCreate, inserts through the
       request's AsyncSession, and converts rows into MessageResponse.
Who:   Called by the /api/v1/messages route handlers and the map page route.

Create Flow (POST /api/v1/messages):
    ┌──────────┐    ┌─────────────┐    ┌──────────────┐    ┌──────────┐
    │  Body    │───▶│  Validate   │───▶│  Stamp date  │───▶│  Insert  │
    │  (Route) │    │  (schema)   │    │  (optional)  │    │  (DB)    │
    └──────────┘    └─────────────┘    └──────────────┘    └──────────┘

    Validation failure → ValidationError before any write.
    Insert failure     → DatabaseError; get_db_session rolls back.

MessageService is stateless apart from the timestamp switch; each call
receives the session it should use.
"""

import logging
import uuid
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from memorymap.config import settings
from memorymap.exceptions import DatabaseError, ValidationError
from memorymap.models.message import Message
from memorymap.schemas.message import MessageCreate, MessageResponse

logger = logging.getLogger(__name__)


def describe_errors(exc: PydanticValidationError) -> List[Dict[str, Any]]:
    """Flattens pydantic errors into [{"field": ..., "reason": ...}] for the API."""
    described = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"]) or "body"
        described.append({"field": field, "reason": error["msg"]})
    return described


class MessageService:
    """
    Business logic layer for message operations.

    Responsibilities:
        - list_messages(): every stored message, store-native order
        - create_message(): validate → persist → return stored record
    """

    def __init__(self, stamp_created_at: Optional[bool] = None):
        # None defers to settings.stamp_created_at at call time
        self._stamp_created_at = stamp_created_at

    @property
    def stamp_created_at(self) -> bool:
        if self._stamp_created_at is None:
            return settings.stamp_created_at
        return self._stamp_created_at

    @staticmethod
    def validate(candidate: Any) -> MessageCreate:
        """
        Check a raw submission against the message schema.

        Args:
            candidate: Decoded JSON body; anything other than an object is rejected.

        Returns:
            The validated MessageCreate.

        Raises:
            ValidationError: with one entry per failing field in `errors`.
        """
        if not isinstance(candidate, Mapping):
            raise ValidationError(
                message="Message must be a JSON object",
                field="body",
            )
        try:
            return MessageCreate.model_validate(dict(candidate))
        except PydanticValidationError as e:
            raise ValidationError(
                message="Message failed validation",
                errors=describe_errors(e),
            )

    async def list_messages(self, db: AsyncSession) -> List[MessageResponse]:
        """
        Return every stored message.

        No ORDER BY: rows come back in whatever order the store yields them.

        Raises:
            DatabaseError: Query execution failed (→ 500)
        """
        try:
            result = await db.execute(select(Message))
            messages = list(result.scalars().all())
        except Exception as e:
            logger.error("Database error listing messages: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve messages. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.debug("Listed %d messages", len(messages))
        return [self._to_response(message) for message in messages]

    async def create_message(self, db: AsyncSession, candidate: Any) -> MessageResponse:
        """
        Validate and persist a new message.

        Args:
            db: Async database session (injected by FastAPI)
            candidate: Raw submission with name, message, latitude, longitude

        Returns:
            MessageResponse including the assigned identifier

        Raises:
            ValidationError: Submission violates the schema; nothing is written
            DatabaseError: Insert failed
        """
        submission = self.validate(candidate)

        record = Message(
            id=uuid.uuid4(),
            name=submission.name,
            message=submission.message,
            latitude=submission.latitude,
            longitude=submission.longitude,
            created_at=datetime.now(timezone.utc) if self.stamp_created_at else None,
        )

        try:
            db.add(record)
            await db.flush()
        except Exception as e:
            logger.error("Database error inserting message: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not save your message. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info(
            "Message %s stored at (%.4f, %.4f)",
            record.id, record.latitude, record.longitude,
        )
        return self._to_response(record)

    @staticmethod
    def _to_response(message: Message) -> MessageResponse:
        created_at = message.created_at
        # SQLite hands back naive datetimes; every stored timestamp is UTC
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return MessageResponse(
            id=message.id,
            name=message.name,
            message=message.message,
            latitude=message.latitude,
            longitude=message.longitude,
            date=created_at,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
message_service = MessageService()
