"""
Memory Map Backend — Message SQLAlchemy Model
===============================================

What:  ORM model representing the `messages` table.
How:   Inherits from SQLAlchemy's DeclarativeBase; Alembic reads this for migrations.
Who:   Used by MessageService for insert and find-all, and by Alembic.

Table Design:
    - UUID primary key, generated in Python so SQLite and PostgreSQL agree
    - name / message: bounded by the message schema, stored as given
    - latitude / longitude: double precision degrees (WGS84)
    - created_at: nullable; only populated when STAMP_CREATED_AT is enabled

Rows are append-only: nothing in the application updates or deletes them.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Float, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from memorymap.database import Base


class Message(Base):
    """A memory left on the map by a visitor."""

    __tablename__ = "messages"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Opaque store-assigned identifier",
    )

    name: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
        comment="Display name of the author",
    )

    message: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Alphanumeric memory text",
    )

    latitude: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment="Degrees north, -90..90",
    )

    longitude: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        comment="Degrees east, -180..180",
    )

    # TIMESTAMP WITH TIME ZONE on PostgreSQL; always written in UTC
    created_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        comment="Server time at insert (UTC), when stamping is enabled",
    )

    __table_args__ = (
        CheckConstraint("latitude BETWEEN -90 AND 90", name="ck_messages_latitude"),
        CheckConstraint("longitude BETWEEN -180 AND 180", name="ck_messages_longitude"),
    )

    def __repr__(self) -> str:
        return (
            f"<Message(id={self.id}, name='{self.name}', "
            f"lat={self.latitude}, lng={self.longitude})>"
        )
