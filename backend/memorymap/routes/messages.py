"""
Memory Map Backend — Messages Route Handlers
==============================================

What:  Handles GET /api/v1/messages (list) and POST /api/v1/messages (create).
How:   Delegates to MessageService and returns JSON.
Who:   Called by the map view on mount and on form submission.

The POST body is accepted as raw JSON and validated by the service, so a
malformed submission surfaces as a ValidationError through the global
exception handlers rather than FastAPI's built-in 422 response.
"""

import logging
from typing import Any, List

from fastapi import APIRouter, Body, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from memorymap.database import get_db_session
from memorymap.schemas.message import ErrorResponse, MessageResponse
from memorymap.services.message_service import message_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Messages"])


@router.get(
    "/messages",
    response_model=List[MessageResponse],
    responses={
        200: {"description": "Every stored message"},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="List all messages",
)
async def list_messages(
    db: AsyncSession = Depends(get_db_session),
) -> List[MessageResponse]:
    """Returns every message in store order; no pagination or filtering."""
    return await message_service.list_messages(db)


@router.post(
    "/messages",
    response_model=MessageResponse,
    responses={
        200: {"description": "The stored message", "model": MessageResponse},
        400: {"description": "Submission failed validation", "model": ErrorResponse},
        429: {"description": "Rate limit exceeded", "model": ErrorResponse},
        500: {"description": "Server error", "model": ErrorResponse},
    },
    summary="Leave a message on the map",
    description=(
        "Stores a message with a name (1-500 characters), an alphanumeric message "
        "(1-100 characters), and a latitude/longitude. Returns the stored record "
        "with its identifier."
    ),
)
async def create_message(
    candidate: Any = Body(
        ...,
        openapi_examples={
            "valid": {
                "summary": "A valid memory",
                "value": {
                    "name": "Alex",
                    "message": "Hello2024",
                    "latitude": 43.1,
                    "longitude": -77.6,
                },
            },
        },
    ),
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    return await message_service.create_message(db, candidate)
