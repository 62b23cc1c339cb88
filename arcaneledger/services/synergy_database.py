"""
Synergy database client.

Fetches the EDHREC commander page JSON for a slugified commander name.
"""

import logging
from typing import Any

import httpx

from arcaneledger.config import Settings
from arcaneledger.models.failure import SynergyLookupError

logger = logging.getLogger(__name__)


class SynergyClient:
    """Read-only EDHREC JSON client."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self._base_url = settings.edhrec_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.http_timeout)

    async def fetch_commander(self, slug: str, commander_name: str = "") -> dict[str, Any]:
        """
        Fetch the commander page.

        Args:
            slug: Slugified commander name
            commander_name: Display name used in error messages

        Returns:
            The page JSON object

        Raises:
            SynergyLookupError: On a non-success response, network failure
                or a body that is not a JSON object
        """
        name = commander_name or slug
        url = f"{self._base_url}/{slug}.json"
        try:
            response = await self._client.get(url)
        except httpx.RequestError as e:
            raise SynergyLookupError(name, None, str(e)) from e
        if not response.is_success:
            raise SynergyLookupError(name, response.status_code, f"HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise SynergyLookupError(name, response.status_code, "invalid JSON") from e
        if not isinstance(data, dict):
            raise SynergyLookupError(name, response.status_code, "unexpected payload")

        logger.debug("Loaded synergy page %s", slug)
        return data

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
