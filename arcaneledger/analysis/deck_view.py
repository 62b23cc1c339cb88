"""
Deck views and statistics.

Resolves a deck's entries against the collection and derives its color
identity, commander candidates and per-type counts.
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from arcaneledger.analysis.type_groups import get_type_permutation, type_group_sort_key
from arcaneledger.models.collection import CollectionCard, find_card
from arcaneledger.models.deck import Deck
from arcaneledger.services.card_reference import get_price

COLOR_ORDER = "WUBRG"


@dataclass(frozen=True)
class DeckCard:
    """A deck entry joined with its collection card."""

    entry: CollectionCard
    quantity: int

    @property
    def id(self) -> str:
        return self.entry.id

    @property
    def name(self) -> str:
        return self.entry.name

    @property
    def type_line(self) -> str:
        return self.entry.type_line


@dataclass(frozen=True)
class DeckStats:
    """Summary numbers for one deck."""

    total_cards: int
    total_value: float
    type_counts: tuple[tuple[str, int], ...]
    commander_candidates: tuple[CollectionCard, ...]


@dataclass(frozen=True)
class CollectionStats:
    """Summary numbers for the whole collection."""

    total_cards: int
    unique_cards: int
    total_value: float


def sort_colors(letters: Iterable[str]) -> tuple[str, ...]:
    """Color letters in WUBRG order, unknown letters last."""

    def rank(letter: str) -> tuple[int, str]:
        index = COLOR_ORDER.find(letter)
        return (index if index >= 0 else len(COLOR_ORDER), letter)

    return tuple(sorted(set(letters), key=rank))


def resolve_deck_cards(deck: Deck, collection: Sequence[CollectionCard]) -> list[DeckCard]:
    """
    Join deck entries with the collection.

    Entries whose card is no longer in the collection are skipped.
    """
    by_id = {card.id: card for card in collection}
    return [
        DeckCard(entry=by_id[entry.card_id], quantity=entry.quantity)
        for entry in deck.entries
        if entry.card_id in by_id
    ]


def commander_card(deck: Deck, collection: Sequence[CollectionCard]) -> CollectionCard | None:
    """The deck's commander, or None for Standard decks and unset commanders."""
    if not deck.is_commander or not deck.commander_id:
        return None
    return find_card(tuple(collection), deck.commander_id)


def deck_color_identity(deck: Deck, collection: Sequence[CollectionCard]) -> tuple[str, ...]:
    """
    Resolved color identity of a deck.

    A Commander deck with a commander takes the commander's identity only.
    Every other deck takes the union over its cards.

    Returns:
        Color letters in WUBRG order
    """
    commander = commander_card(deck, collection)
    if commander is not None:
        return sort_colors(commander.color_identity)
    cards = resolve_deck_cards(deck, collection)
    return sort_colors(letter for card in cards for letter in card.entry.color_identity)


def commander_candidates(deck: Deck, collection: Sequence[CollectionCard]) -> list[CollectionCard]:
    """Legendary creatures among the deck's cards."""
    cards = resolve_deck_cards(deck, collection)
    return [card.entry for card in cards if card.entry.card.is_legendary_creature]


def deck_stats(deck: Deck, collection: Sequence[CollectionCard]) -> DeckStats:
    """Total cards, value, per-permutation counts and commander candidates."""
    cards = resolve_deck_cards(deck, collection)
    counts: dict[str, int] = {}
    for card in cards:
        perm = get_type_permutation(card.type_line)
        counts[perm] = counts.get(perm, 0) + card.quantity

    return DeckStats(
        total_cards=deck.total_cards(),
        total_value=sum(get_price(c.entry.card) * c.quantity for c in cards),
        type_counts=tuple((k, counts[k]) for k in sorted(counts, key=type_group_sort_key)),
        commander_candidates=tuple(c.entry for c in cards if c.entry.card.is_legendary_creature),
    )


def collection_stats(collection: Sequence[CollectionCard]) -> CollectionStats:
    return CollectionStats(
        total_cards=sum(c.quantity for c in collection),
        unique_cards=len(collection),
        total_value=sum(get_price(c.card) * c.quantity for c in collection),
    )
