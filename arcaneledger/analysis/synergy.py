"""
Commander synergy recommendations.

Loads the commander's EDHREC page, resolves color identities for every
recommended card through the card database (best effort) and builds a
per-category report filtered to the deck's colors.
"""

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from arcaneledger.analysis.deck_view import commander_card, deck_color_identity, resolve_deck_cards
from arcaneledger.models.collection import CollectionCard
from arcaneledger.models.deck import Deck
from arcaneledger.models.failure import InvalidOperationError, KnownError
from arcaneledger.models.sync import LookupStatus
from arcaneledger.services.card_reference import CardReferenceClient, image_url_for_id
from arcaneledger.services.synergy_database import SynergyClient

logger = logging.getLogger(__name__)

# (tag, label) in display order
SYNERGY_CATEGORIES: tuple[tuple[str, str], ...] = (
    ("highsynergycards", "High Synergy"),
    ("newcards", "New Cards"),
    ("topcards", "Top Cards"),
    ("creatures", "Creatures"),
    ("instants", "Instants"),
    ("sorceries", "Sorceries"),
    ("enchantments", "Enchantments"),
    ("utilityartifacts", "Artifacts"),
    ("planeswalkers", "Planeswalkers"),
    ("manaartifacts", "Mana Artifacts"),
    ("utilitylands", "Utility Lands"),
)

_SLUG_STRIP = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")


def to_slug(name: str) -> str:
    """
    EDHREC slug for a card name.

    "Atraxa, Praetors' Voice" -> "atraxa-praetors-voice"
    """
    return _WHITESPACE.sub("-", _SLUG_STRIP.sub("", name.lower()).strip())


@dataclass(frozen=True)
class SynergyCard:
    """One recommended card."""

    name: str
    id: str = ""
    synergy: float | None = None
    num_decks: int = 0
    potential_decks: int = 0
    owned: bool = False
    in_deck: bool = False

    @property
    def synergy_percent(self) -> float | None:
        return self.synergy * 100 if self.synergy is not None else None

    @property
    def inclusion_percent(self) -> float:
        if self.potential_decks <= 0:
            return 0.0
        return self.num_decks / self.potential_decks * 100

    @property
    def image_url(self) -> str:
        return image_url_for_id(self.id)


@dataclass(frozen=True)
class SynergyCategory:
    tag: str
    label: str
    cards: tuple[SynergyCard, ...]

    @property
    def owned_count(self) -> int:
        return sum(1 for c in self.cards if c.owned)

    @property
    def in_deck_count(self) -> int:
        return sum(1 for c in self.cards if c.in_deck)


@dataclass(frozen=True)
class SynergyReport:
    """Synergy lookup result; empty categories are left out."""

    status: LookupStatus
    commander_name: str = ""
    error: str = ""
    decks_analyzed: int = 0
    categories: tuple[SynergyCategory, ...] = ()


def _number(value: Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _synergy(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def parse_cardlists(page: Mapping[str, Any]) -> dict[str, list[dict[str, Any]]]:
    """Card views of a commander page keyed by category tag."""
    container = page.get("container")
    json_dict = container.get("json_dict") if isinstance(container, Mapping) else None
    if not isinstance(json_dict, Mapping):
        return {}
    by_tag: dict[str, list[dict[str, Any]]] = {}
    for cardlist in json_dict.get("cardlists") or []:
        if not isinstance(cardlist, Mapping):
            continue
        views = [
            v for v in cardlist.get("cardviews") or [] if isinstance(v, Mapping) and v.get("name")
        ]
        by_tag[str(cardlist.get("tag", ""))] = views
    return by_tag


def is_identity_allowed(
    card_identity: Sequence[str] | None, deck_identity: Iterable[str], color_only: bool = True
) -> bool:
    """
    True unless the card's known identity leaves the deck's identity.

    Cards without a known identity are always allowed.
    """
    allowed = set(deck_identity)
    if not color_only or not allowed or card_identity is None:
        return True
    return set(card_identity) <= allowed


def build_synergy_report(
    page: Mapping[str, Any],
    identities: Mapping[str, Sequence[str]],
    deck_identity: Iterable[str],
    collection_names: Iterable[str],
    deck_names: Iterable[str],
    commander_name: str = "",
    color_only: bool = True,
    name_filter: str = "",
) -> SynergyReport:
    """
    Build the per-category report from a commander page.

    Args:
        page: Commander page JSON
        identities: Lowercased card name to color identity letters
        deck_identity: The deck's resolved color identity
        collection_names: Names in the collection, for the owned flag
        deck_names: Names in the deck, for the in-deck flag
        commander_name: Shown in the report
        color_only: Drop cards whose identity leaves the deck's colors
        name_filter: Case-insensitive name substring filter

    Returns:
        SynergyReport with status DONE
    """
    deck_ci = set(deck_identity)
    owned = {n.lower() for n in collection_names}
    in_deck = {n.lower() for n in deck_names}
    query = name_filter.lower()
    by_tag = parse_cardlists(page)

    categories: list[SynergyCategory] = []
    for tag, label in SYNERGY_CATEGORIES:
        cards: list[SynergyCard] = []
        for view in by_tag.get(tag, []):
            name = str(view["name"])
            key = name.lower()
            if query and query not in key:
                continue
            if not is_identity_allowed(identities.get(key), deck_ci, color_only):
                continue
            cards.append(
                SynergyCard(
                    name=name,
                    id=str(view.get("id") or ""),
                    synergy=_synergy(view.get("synergy")),
                    num_decks=_number(view.get("num_decks")),
                    potential_decks=_number(view.get("potential_decks")),
                    owned=key in owned,
                    in_deck=key in in_deck,
                )
            )
        if cards:
            categories.append(SynergyCategory(tag=tag, label=label, cards=tuple(cards)))

    return SynergyReport(
        status=LookupStatus.DONE,
        commander_name=commander_name,
        decks_analyzed=_number(page.get("num_decks_avg")),
        categories=tuple(categories),
    )


async def load_synergies(
    deck: Deck,
    collection: Sequence[CollectionCard],
    synergy_client: SynergyClient,
    card_client: CardReferenceClient,
    color_only: bool = True,
    name_filter: str = "",
) -> SynergyReport:
    """
    Load recommendations for a deck's commander.

    Upstream failures are returned as an error report, never raised.

    Raises:
        InvalidOperationError: If the deck has no commander
    """
    commander = commander_card(deck, collection)
    if commander is None:
        raise InvalidOperationError("Set a commander on this deck to load synergies")

    try:
        page = await synergy_client.fetch_commander(to_slug(commander.name), commander.name)
        names = list(
            dict.fromkeys(v["name"] for views in parse_cardlists(page).values() for v in views)
        )
        identities = await card_client.fetch_color_identities(names)
    except (KnownError, httpx.HTTPError) as e:
        logger.warning("Synergy lookup for %r failed: %s", commander.name, e)
        return SynergyReport(
            status=LookupStatus.ERROR, commander_name=commander.name, error=str(e)
        )

    report = build_synergy_report(
        page,
        identities,
        deck_color_identity(deck, collection),
        (c.name for c in collection),
        (c.name for c in resolve_deck_cards(deck, collection)),
        commander_name=commander.name,
        color_only=color_only,
        name_filter=name_filter,
    )
    logger.info("Loaded %d synergy categories for %r", len(report.categories), commander.name)
    return report
