"""
Memory Map — Map View Controller
==================================

What:  Ties the state store, the message API, location acquisition and the
       rendering surface together.
How:   mount() runs two independent tasks with asyncio.gather: fetch the
       messages and acquire the user's location. Each dispatches into the
       store when it finishes; a failure in one is logged and does not
       cancel the other.

Submission:
    submit() posts the draft with the resolved location when the form is
    valid, then clears the draft whatever happened. A failed POST is logged
    and not reported back to the visitor.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
from pydantic import ValidationError as PydanticValidationError

from memorymap.config import settings
from memorymap.mapview.api_client import MessageApiClient, api_base_url
from memorymap.mapview.location import DeviceGeolocator, IpGeolocator, LocationResolver
from memorymap.mapview.state import (
    DraftCleared,
    DraftEdited,
    LocationResolved,
    MapViewState,
    MessagesLoaded,
    form_is_valid,
)
from memorymap.mapview.store import MapViewStore
from memorymap.mapview.surface import LeafletPage, MapSurface, RecenterObserver
from memorymap.schemas.message import MessageResponse

logger = logging.getLogger(__name__)


class MapView:
    """
    One visitor's map: state, startup fetches, draft editing and submission.

    The surface is built from the store's initial location unless one is
    supplied; afterwards it only moves through RecenterObserver.
    """

    def __init__(
        self,
        api: MessageApiClient,
        locator: LocationResolver,
        surface: Optional[MapSurface] = None,
        store: Optional[MapViewStore] = None,
    ):
        self.store = store or MapViewStore()
        self.surface = surface or LeafletPage(center=self.store.state.location)
        self._api = api
        self._locator = locator
        self._unsubscribe = self.store.subscribe(RecenterObserver(self.surface))

    @property
    def state(self) -> MapViewState:
        return self.store.state

    @property
    def form_is_valid(self) -> bool:
        return form_is_valid(self.store.state)

    async def mount(self) -> None:
        """Fetch messages and locate the user concurrently."""
        results = await asyncio.gather(
            self._load_messages(),
            self._locate_user(),
            return_exceptions=True,
        )
        for task, result in zip(("load messages", "locate user"), results):
            if isinstance(result, Exception):
                logger.error("Map view could not %s: %s", task, result, exc_info=result)

    async def _load_messages(self) -> None:
        messages = await self._api.list_messages()
        self.store.dispatch(MessagesLoaded(tuple(messages)))

    async def _locate_user(self) -> None:
        position = await self._locator.resolve()
        if position is not None:
            self.store.dispatch(LocationResolved(*position))

    def edit(self, field: str, value: str) -> MapViewState:
        return self.store.dispatch(DraftEdited(field, value))

    async def submit(self) -> Optional[MessageResponse]:
        """
        Send the draft if the form is valid; always clear the draft.

        Returns:
            The stored message, or None when nothing was sent or the send failed.
        """
        state = self.store.state
        created: Optional[MessageResponse] = None

        try:
            if form_is_valid(state):
                created = await self._api.create_message(
                    name=state.draft.name,
                    message=state.draft.message,
                    latitude=state.location.lat,
                    longitude=state.location.lng,
                )
                logger.info("Message %s submitted", created.id)
        except (httpx.HTTPError, PydanticValidationError, ValueError) as e:
            # TODO: surface submission failures in the form once there is
            # product copy for it; the draft is already gone by then.
            logger.warning("Message submission failed: %s", e)
        except Exception:
            logger.exception("Message submission failed unexpectedly")
        finally:
            self.store.dispatch(DraftCleared())

        return created

    def render(self) -> str:
        return self.surface.render(self.store.state)

    def close(self) -> None:
        self._unsubscribe()


@asynccontextmanager
async def open_map_view(
    hostname: str,
    device: Optional[DeviceGeolocator] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> AsyncIterator[MapView]:
    """
    Build a MapView sharing one httpx client for the API and IP geolocation.

    Usage:
        async with open_map_view("localhost") as view:
            await view.mount()
            html = view.render()
    """
    async with httpx.AsyncClient(timeout=settings.client_timeout, transport=transport) as client:
        view = MapView(
            api=MessageApiClient(client, api_base_url(hostname)),
            locator=LocationResolver(IpGeolocator(client), device=device),
        )
        try:
            yield view
        finally:
            view.close()
