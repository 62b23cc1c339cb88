"""
Combo database client.

Queries Commander Spellbook variants by card name, optionally restricted
to a color identity, following the "next" cursor until it runs out.

API docs: https://backend.commanderspellbook.com/
"""

import logging
from typing import Any
from urllib.parse import urlsplit

import httpx

from arcaneledger.config import Settings
from arcaneledger.models.failure import ComboLookupError

logger = logging.getLogger(__name__)


def build_query(card_name: str, ci_filter: str = "") -> str:
    """
    Spellbook search query for one card.

    Args:
        card_name: Exact card name
        ci_filter: Lowercase color letters, e.g. "bg"; empty for no filter

    Returns:
        'card="Name"' plus ' coloridentity<=bg' when a filter is given
    """
    query = f'card="{card_name}"'
    if ci_filter:
        query += f" coloridentity<={ci_filter}"
    return query


class ComboDatabaseClient:
    """Read-only Spellbook client."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self._base_url = settings.spellbook_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=settings.http_timeout)

    async def fetch_combos_for_card(
        self, card_name: str, ci_filter: str = ""
    ) -> list[dict[str, Any]]:
        """
        Fetch every variant that uses a card.

        The next-page cursor is an absolute URL; only its query string is
        kept and re-applied to the configured base URL.

        Args:
            card_name: Exact card name
            ci_filter: Lowercase color letters for the color-identity clause

        Returns:
            Raw variant objects from all pages, in page order

        Raises:
            ComboLookupError: On a non-success response or network failure
        """
        variants: list[dict[str, Any]] = []
        url: str | None = self._base_url
        params: dict[str, str] | None = {"q": build_query(card_name, ci_filter)}

        while url:
            try:
                response = await self._client.get(url, params=params)
            except httpx.RequestError as e:
                raise ComboLookupError(None, str(e)) from e
            if not response.is_success:
                raise ComboLookupError(response.status_code, response.text or "Unknown error")

            try:
                data = response.json()
            except ValueError as e:
                raise ComboLookupError(response.status_code, "response is not valid JSON") from e

            variants.extend(data.get("results") or [])

            next_url = data.get("next")
            if next_url:
                query = urlsplit(next_url).query
                url = f"{self._base_url}?{query}" if query else None
                params = None
                logger.debug("Following combo page cursor for %r", card_name)
            else:
                url = None

        logger.debug("Found %d combo variants for %r", len(variants), card_name)
        return variants

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
