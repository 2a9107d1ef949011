"""Create messages table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `messages` table holding every memory left on the map.
Rollback: downgrade() drops the table (all messages are lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the messages table; column notes live in memorymap/models/message.py."""
    op.create_table(
        "messages",
        sa.Column(
            "id",
            sa.Uuid(as_uuid=True),
            nullable=False,
            comment="Opaque store-assigned identifier",
        ),
        sa.Column(
            "name",
            sa.String(500),
            nullable=False,
            comment="Display name of the author",
        ),
        sa.Column(
            "message",
            sa.String(100),
            nullable=False,
            comment="Alphanumeric memory text",
        ),
        sa.Column(
            "latitude",
            sa.Float(),
            nullable=False,
            comment="Degrees north, -90..90",
        ),
        sa.Column(
            "longitude",
            sa.Float(),
            nullable=False,
            comment="Degrees east, -180..180",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="Server time at insert (UTC), when stamping is enabled",
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("latitude BETWEEN -90 AND 90", name="ck_messages_latitude"),
        sa.CheckConstraint("longitude BETWEEN -180 AND 180", name="ck_messages_longitude"),
    )


def downgrade() -> None:
    op.drop_table("messages")
