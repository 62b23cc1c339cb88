"""
Card reference client.

Thin wrapper over the Scryfall REST API plus uniform accessors for the
two card shapes (single-faced and multi-faced).

API docs: https://scryfall.com/docs/api
"""

import logging
from collections.abc import Iterable
from typing import Any
from urllib.parse import quote

import httpx

from arcaneledger.config import Settings
from arcaneledger.models.card import CardReference, MultiFacedCard, card_from_payload

logger = logging.getLogger(__name__)

USER_AGENT = "ArcaneLedger/0.1"


# =============================================================================
# ACCESSORS
# =============================================================================


def get_price(card: CardReference) -> float:
    """Primary USD price, falling back to the foil price, else 0.0."""
    prices = card.prices
    raw = prices.get("usd") or prices.get("usd_foil") or 0
    try:
        return float(raw)
    except (TypeError, ValueError):
        return 0.0


def get_price_label(card: CardReference) -> str:
    """Display label for the price: "$1.23", "$4.56 (foil)" or "N/A"."""
    prices = card.prices
    try:
        if prices.get("usd"):
            return f"${float(prices['usd']):.2f}"
        if prices.get("usd_foil"):
            return f"${float(prices['usd_foil']):.2f} (foil)"
    except (TypeError, ValueError):
        pass
    return "N/A"


def get_image(card: CardReference) -> str | None:
    """
    Front-face image URL.

    Top-level "normal" then "small"; for multi-faced cards without top-level
    images, the first face's "normal" image.
    """
    if card.image_uris:
        return card.image_uris.get("normal") or card.image_uris.get("small")
    if isinstance(card, MultiFacedCard) and card.faces and card.faces[0].image_uris:
        return card.faces[0].image_uris.get("normal")
    return None


def get_small_image(card: CardReference) -> str | None:
    """Thumbnail URL used in result lists."""
    if card.image_uris.get("small"):
        return card.image_uris["small"]
    if isinstance(card, MultiFacedCard) and card.faces:
        return card.faces[0].image_uris.get("small")
    return None


def get_oracle_text(card: CardReference) -> str:
    """
    Rules text.

    Multi-faced cards without top-level text get each face's text under a
    "[Face Name]" header, faces separated by a blank line.
    """
    text = card.oracle_text
    if text:
        return text
    if isinstance(card, MultiFacedCard) and card.faces:
        return "\n\n".join(f"[{face.name}]\n{face.oracle_text}" for face in card.faces)
    return ""


def tcgplayer_link(card: CardReference) -> str:
    """TCGplayer purchase link, or a search URL when Scryfall has none."""
    link = card.purchase_uris.get("tcgplayer")
    if link:
        return link
    return f"https://www.tcgplayer.com/search/magic/product?q={quote(card.name, safe='')}"


def cardkingdom_link(card: CardReference) -> str:
    """Card Kingdom search URL using the front-face name."""
    name = card.name.split(" // ")[0]
    return (
        "https://www.cardkingdom.com/catalog/search?search=header"
        f"&filter%5Bname%5D={quote(name, safe='')}"
    )


def image_url_for_id(card_id: str) -> str:
    """Scryfall CDN image URL derived from a printing id."""
    if len(card_id) < 2:
        return ""
    return f"https://cards.scryfall.io/normal/front/{card_id[0]}/{card_id[1]}/{card_id}.jpg"


# =============================================================================
# CLIENT
# =============================================================================


class CardReferenceClient:
    """Read-only Scryfall client."""

    def __init__(self, settings: Settings, client: httpx.AsyncClient | None = None) -> None:
        self._settings = settings
        self._base_url = settings.scryfall_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=settings.http_timeout,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json"},
        )

    async def search_cards(self, query: str) -> list[CardReference]:
        """
        Search printings by name.

        Args:
            query: Scryfall search query, usually a card name

        Returns:
            One record per distinct printing, oldest release first.
            Empty list on any non-success response.
        """
        try:
            response = await self._client.get(
                f"{self._base_url}/cards/search",
                params={"q": query, "unique": "prints", "order": "released"},
            )
        except httpx.RequestError as e:
            logger.warning("Card search for %r failed: %s", query, e)
            return []
        if not response.is_success:
            logger.info("Card search for %r returned HTTP %d", query, response.status_code)
            return []

        cards: list[CardReference] = []
        for payload in response.json().get("data", []):
            try:
                cards.append(card_from_payload(payload))
            except ValueError as e:
                logger.warning("Skipping malformed card in search results: %s", e)
        return cards

    async def fetch_color_identities(self, names: Iterable[str]) -> dict[str, list[str]]:
        """
        Batch lookup of color identity by exact card name.

        Names are deduplicated and sent in chunks of at most
        color_identity_batch_size. Best effort: a failed chunk is skipped
        and the others still contribute.

        Args:
            names: Card names (empty names are ignored)

        Returns:
            Dict mapping lowercased card name to its color identity letters
        """
        unique = list(dict.fromkeys(n for n in names if n))
        batch_size = self._settings.color_identity_batch_size
        mapping: dict[str, list[str]] = {}

        for start in range(0, len(unique), batch_size):
            batch = unique[start : start + batch_size]
            try:
                response = await self._client.post(
                    f"{self._base_url}/cards/collection",
                    json={"identifiers": [{"name": name} for name in batch]},
                )
            except httpx.RequestError as e:
                logger.warning("Color identity batch at %d failed: %s", start, e)
                continue
            if not response.is_success:
                logger.warning(
                    "Color identity batch at %d returned HTTP %d", start, response.status_code
                )
                continue

            try:
                data: dict[str, Any] = response.json()
            except ValueError:
                logger.warning("Color identity batch at %d returned invalid JSON", start)
                continue

            for card in data.get("data", []):
                name = card.get("name")
                if name:
                    mapping[name.lower()] = list(card.get("color_identity") or [])

        return mapping

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
