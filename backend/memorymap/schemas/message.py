"""
Memory Map Backend — Pydantic Request/Response Schemas
========================================================

What:  Pydantic models defining the message contract shared by the API and
       the map view client.
How:   MessageService validates raw submissions against MessageCreate; the
       map view validates its draft against MessageText, the same rules
       without coordinates; routes serialize MessageResponse.

Validation rules:
    name       1-500 characters, required, not trimmed
    message    1-100 ASCII letters or digits, required
    latitude   number in [-90, 90]; numeric strings are coerced
    longitude  number in [-180, 180]; numeric strings are coerced
    Unknown keys are rejected.
"""

import uuid
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

ALPHANUMERIC_PATTERN = r"^[A-Za-z0-9]+$"


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class MessageText(BaseModel):
    """The human-entered part of a message: who wrote it and what it says."""

    name: str = Field(min_length=1, max_length=500, description="Display name")
    message: str = Field(
        min_length=1,
        max_length=100,
        pattern=ALPHANUMERIC_PATTERN,
        description="Alphanumeric memory text",
    )

    model_config = {"extra": "forbid"}


class MessageCreate(MessageText):
    """A complete submission for POST /api/v1/messages."""

    latitude: float = Field(ge=-90, le=90, allow_inf_nan=False, description="Degrees north")
    longitude: float = Field(ge=-180, le=180, allow_inf_nan=False, description="Degrees east")

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def reject_booleans(cls, v: Any) -> Any:
        """Pydantic would coerce True to 1.0; a boolean is not a coordinate."""
        if isinstance(v, bool):
            raise ValueError("must be a number")
        return v


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class MessageResponse(BaseModel):
    """
    A stored message as returned by GET and POST /api/v1/messages.

    The identifier is exposed as `_id` on the wire. `date` is null for
    messages stored while timestamping was disabled.
    """

    id: uuid.UUID = Field(alias="_id", description="Store-assigned identifier")
    name: str = Field(description="Display name")
    message: str = Field(description="Memory text")
    latitude: float = Field(description="Degrees north")
    longitude: float = Field(description="Degrees east")
    date: Optional[datetime] = Field(default=None, description="Server creation time (UTC)")

    model_config = {"populate_by_name": True}


class ErrorResponse(BaseModel):
    """
    Standardized error response format for all API errors.

    Example:
        {
            "error": "validation_error",
            "message": "Message failed validation",
            "details": {"errors": [{"field": "latitude", "reason": "..."}]},
            "request_id": "550e8400"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and database status."""
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
