"""
Deck combo matching.

Queries the combo database once per unique deck card name through a
bounded pool, deduplicates variants by id and scores each by how many of
its required cards the deck already holds.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

import httpx

from arcaneledger.analysis.deck_view import (
    commander_card,
    deck_color_identity,
    resolve_deck_cards,
    sort_colors,
)
from arcaneledger.config import Settings
from arcaneledger.models.collection import CollectionCard
from arcaneledger.models.deck import Deck
from arcaneledger.models.failure import KnownError
from arcaneledger.models.sync import LookupStatus
from arcaneledger.services.card_reference import CardReferenceClient
from arcaneledger.services.combo_database import ComboDatabaseClient
from arcaneledger.services.pool import bounded_gather

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComboCard:
    """One required card of a combo variant."""

    id: str
    name: str
    image_url: str = ""


@dataclass(frozen=True)
class ComboVariant:
    """
    A combo variant as returned by the combo database.

    Attributes:
        id: Variant identifier
        uses: Required cards
        produces: Names of the produced effects
        prerequisites: Free-text prerequisites
        description: Free-text steps
        popularity: Popularity metric, higher is more popular
        identity: Color identity letters, e.g. "BG"
    """

    id: str
    uses: tuple[ComboCard, ...] = ()
    produces: tuple[str, ...] = ()
    prerequisites: str = ""
    description: str = ""
    popularity: float = 0.0
    identity: str = ""


@dataclass(frozen=True)
class ScoredCombo:
    """A variant with its deck coverage."""

    variant: ComboVariant
    owned: int
    total: int

    @property
    def ratio(self) -> float:
        return self.owned / self.total if self.total else 0.0

    @property
    def is_complete(self) -> bool:
        return self.total > 0 and self.owned == self.total

    @property
    def is_partial(self) -> bool:
        return 0 < self.owned < self.total


@dataclass(frozen=True)
class ComboReport:
    """
    Result of a combo scan for one deck.

    combos holds every scored variant; complete and partial apply the
    color-legality filter first.
    """

    status: LookupStatus
    error: str = ""
    combos: tuple[ScoredCombo, ...] = ()
    color_identity: tuple[str, ...] = ()
    color_only: bool = True

    @property
    def legal(self) -> list[ScoredCombo]:
        return [
            c for c in self.combos
            if is_color_legal(c.variant, self.color_identity, self.color_only)
        ]

    @property
    def complete(self) -> list[ScoredCombo]:
        return [c for c in self.legal if c.is_complete]

    @property
    def partial(self) -> list[ScoredCombo]:
        return [c for c in self.legal if c.is_partial]


def _float(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def parse_variant(payload: Mapping[str, Any]) -> ComboVariant:
    """
    Build a ComboVariant from a raw variant object.

    Missing fields fall back to empty values.
    """
    uses = []
    for use in payload.get("uses") or []:
        card = use.get("card") or {}
        uses.append(
            ComboCard(
                id=str(card.get("id", "")),
                name=card.get("name") or "",
                image_url=card.get("imageUriFrontNormal") or "",
            )
        )
    produces = tuple(
        (p.get("feature") or {}).get("name") or "" for p in payload.get("produces") or []
    )
    return ComboVariant(
        id=str(payload.get("id", "")),
        uses=tuple(uses),
        produces=produces,
        prerequisites=payload.get("notablePrerequisites") or "",
        description=payload.get("description") or "",
        popularity=_float(payload.get("popularity")),
        identity=payload.get("identity") or "",
    )


def score_combos(
    variants: Iterable[ComboVariant], deck_names: Iterable[str]
) -> list[ScoredCombo]:
    """
    Deduplicate by variant id and rank by deck coverage.

    Sort order is descending on (owned count, owned ratio, popularity),
    so fully satisfiable combos come before larger partial ones.

    Args:
        variants: Variants from all per-card queries, possibly repeated
        deck_names: Card names in the deck (case-insensitive)
    """
    names = {n.lower() for n in deck_names}
    seen: set[str] = set()
    scored: list[ScoredCombo] = []
    for variant in variants:
        if variant.id in seen:
            continue
        seen.add(variant.id)
        owned = sum(1 for card in variant.uses if card.name.lower() in names)
        scored.append(ScoredCombo(variant=variant, owned=owned, total=len(variant.uses)))

    scored.sort(key=lambda c: (c.owned, c.ratio, c.variant.popularity), reverse=True)
    return scored


def color_filter_string(color_identity: Iterable[str]) -> str:
    """Lowercase sorted color letters for the coloridentity<= clause."""
    return "".join(sorted(c.lower() for c in set(color_identity)))


def is_color_legal(
    variant: ComboVariant, deck_identity: Iterable[str], color_only: bool = True
) -> bool:
    """
    True if every letter of the variant's identity is in the deck identity.

    Always True when color filtering is off or the deck identity is empty.
    """
    allowed = set(deck_identity)
    if not color_only or not allowed:
        return True
    return all(letter.upper() in allowed for letter in variant.identity)


async def resolve_combo_identity(
    deck: Deck,
    collection: Sequence[CollectionCard],
    names: Sequence[str],
    card_client: CardReferenceClient,
) -> tuple[str, ...]:
    """
    Deck color identity for combo filtering.

    A Commander deck with a commander looks up only the commander's name.
    Other decks look up every name. Either way the lookup result is merged
    with the identity computed from the collection.
    """
    commander = commander_card(deck, collection)
    lookup_names = [commander.name] if commander is not None else list(names)
    mapping = await card_client.fetch_color_identities(lookup_names)

    letters = set(deck_color_identity(deck, collection))
    for identity in mapping.values():
        letters.update(identity)
    return sort_colors(letters)


async def find_combos(
    deck: Deck,
    collection: Sequence[CollectionCard],
    settings: Settings,
    combo_client: ComboDatabaseClient,
    card_client: CardReferenceClient,
    color_only: bool = True,
) -> ComboReport:
    """
    Scan a deck for combos.

    Upstream failures are returned as an error report, never raised.

    Args:
        deck: Deck to scan
        collection: Collection snapshot the deck's entries refer to
        settings: Supplies the pool size and the name limit
        combo_client: Combo database client
        card_client: Card database client for the identity lookup
        color_only: Restrict results to the deck's color identity

    Returns:
        ComboReport with status DONE or ERROR
    """
    cards = resolve_deck_cards(deck, collection)
    names = list(dict.fromkeys(c.name for c in cards if c.name))[: settings.combo_lookup_limit]
    if not names:
        return ComboReport(status=LookupStatus.DONE, color_only=color_only)

    try:
        identity = await resolve_combo_identity(deck, collection, names, card_client)
        ci_filter = color_filter_string(identity) if color_only else ""

        pages = await bounded_gather(
            [
                lambda name=name: combo_client.fetch_combos_for_card(name, ci_filter)
                for name in names
            ],
            settings.combo_concurrency,
        )
    except (KnownError, httpx.HTTPError) as e:
        logger.warning("Combo scan for deck %r failed: %s", deck.name, e)
        return ComboReport(status=LookupStatus.ERROR, error=str(e), color_only=color_only)

    variants = [parse_variant(raw) for page in pages for raw in page]
    combos = score_combos(variants, (c.name for c in cards))
    logger.info("Found %d combos for deck %r", len(combos), deck.name)
    return ComboReport(
        status=LookupStatus.DONE,
        combos=tuple(combos),
        color_identity=identity,
        color_only=color_only,
    )
