"""
Memory Map Backend — Map Page Route
=====================================

What:  GET / serves the world map with every stored message as a marker.
How:   Loads the messages, folds them into a fresh MapViewState and renders
       it through LeafletPage. The server does not know where the visitor
       is, so the page is centred on the default location with no user marker.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from memorymap.database import get_db_session
from memorymap.mapview.state import MapViewState, MessagesLoaded, reduce
from memorymap.mapview.surface import LeafletPage
from memorymap.services.message_service import message_service

router = APIRouter(tags=["Map"])


@router.get("/", response_class=HTMLResponse, summary="World map of messages")
async def map_page(db: AsyncSession = Depends(get_db_session)) -> HTMLResponse:
    messages = await message_service.list_messages(db)
    state = reduce(MapViewState(), MessagesLoaded(tuple(messages)))
    page = LeafletPage(center=state.location)
    return HTMLResponse(page.render(state))
