"""HTTP client for /api/v1/messages as used by the map view."""

import logging
from typing import List, Optional

import httpx

from memorymap.config import settings
from memorymap.schemas.message import MessageResponse

logger = logging.getLogger(__name__)


def api_base_url(
    hostname: str,
    local_url: Optional[str] = None,
    production_url: Optional[str] = None,
) -> str:
    """Pick the messages endpoint for the host the view is served from."""
    if hostname == "localhost":
        return local_url or settings.local_api_url
    return production_url or settings.production_api_url


class MessageApiClient:
    """
    Thin wrapper over an httpx.AsyncClient.

    Both calls raise httpx.HTTPError on network failure or a non-2xx status,
    and pydantic.ValidationError if the server returns a malformed record.
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str):
        self._client = client
        self.base_url = base_url

    async def list_messages(self) -> List[MessageResponse]:
        response = await self._client.get(self.base_url)
        response.raise_for_status()
        messages = [MessageResponse.model_validate(item) for item in response.json()]
        logger.debug("Fetched %d messages from %s", len(messages), self.base_url)
        return messages

    async def create_message(
        self,
        name: str,
        message: str,
        latitude: float,
        longitude: float,
    ) -> MessageResponse:
        response = await self._client.post(
            self.base_url,
            json={
                "name": name,
                "message": message,
                "latitude": latitude,
                "longitude": longitude,
            },
        )
        response.raise_for_status()
        return MessageResponse.model_validate(response.json())
