"""
Collection filter pipeline.

A card passes when it matches every active predicate (AND across
categories); within a multi-select category one match is enough (OR).
Inactive predicates (empty text, no selection, None) pass everything.

Predicates:
- text: substring of name, oracle text or type line (case-insensitive)
- color: the card's colors contain this letter
- supertypes: any selected word is among the type line's pre-separator words
- types: any selected key equals the card's type permutation or is one of
  its words ("Creature" matches "Artifact Creature")
- subtype: substring of the text after the subtype separator
- mana_value: exact mana value
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from arcaneledger.analysis.type_groups import SUPERTYPES, get_type_permutation
from arcaneledger.models.collection import CollectionCard
from arcaneledger.services.card_reference import get_oracle_text, get_price


class SortKey(str, Enum):
    """Collection sort orders."""

    NAME = "name"
    PRICE = "price"
    COLOR = "color"
    MANA_VALUE = "mv"


@dataclass(frozen=True)
class CollectionFilter:
    """Active filter settings; the defaults let every card through."""

    text: str = ""
    color: str | None = None
    supertypes: frozenset[str] = field(default_factory=frozenset)
    types: frozenset[str] = field(default_factory=frozenset)
    subtype: str = ""
    mana_value: int | None = None


def _matches_text(card: CollectionCard, query: str) -> bool:
    q = query.lower()
    return (
        q in card.name.lower()
        or q in get_oracle_text(card.card).lower()
        or q in card.type_line.lower()
    )


def _matches_types(card: CollectionCard, selected: frozenset[str]) -> bool:
    permutation = get_type_permutation(card.type_line)
    words = permutation.split()
    return any(key == permutation or key in words for key in selected)


def matches(card: CollectionCard, criteria: CollectionFilter) -> bool:
    """True if the card passes every active predicate."""
    if criteria.text and not _matches_text(card, criteria.text):
        return False
    if criteria.color and criteria.color not in card.card.colors:
        return False
    if criteria.supertypes and not any(s in card.card.type_words for s in criteria.supertypes):
        return False
    if criteria.types and not _matches_types(card, criteria.types):
        return False
    if criteria.subtype and criteria.subtype.lower() not in card.card.subtype_part.lower():
        return False
    if criteria.mana_value is not None and card.card.cmc != criteria.mana_value:
        return False
    return True


def filter_cards(
    cards: Iterable[CollectionCard], criteria: CollectionFilter
) -> list[CollectionCard]:
    """Cards passing the filter, in their original order."""
    return [card for card in cards if matches(card, criteria)]


def sort_cards(cards: Sequence[CollectionCard], key: SortKey) -> list[CollectionCard]:
    """
    Sort by exactly one key; ties keep their input order.

    - name: case-insensitive lexicographic
    - price: highest first
    - color: by first color letter, colorless last
    - mana value: lowest first
    """
    if key is SortKey.NAME:
        return sorted(cards, key=lambda c: c.name.casefold())
    if key is SortKey.PRICE:
        return sorted(cards, key=lambda c: get_price(c.card), reverse=True)
    if key is SortKey.COLOR:
        return sorted(cards, key=lambda c: c.card.colors[0] if c.card.colors else "Z")
    return sorted(cards, key=lambda c: c.card.cmc)


# =============================================================================
# FILTER OPTIONS
# =============================================================================


def available_supertypes(cards: Iterable[CollectionCard]) -> list[str]:
    """Supertype words present in the collection."""
    return sorted({w for c in cards for w in c.card.type_words if w in SUPERTYPES})


def available_types(cards: Iterable[CollectionCard]) -> list[str]:
    """Single main-type words present in the collection."""
    return sorted({w for c in cards for w in c.card.type_words if w not in SUPERTYPES})


def available_permutations(cards: Iterable[CollectionCard]) -> list[str]:
    """Multi-word type permutations present in the collection."""
    return sorted(
        {p for p in (get_type_permutation(c.type_line) for c in cards) if " " in p}
    )


def available_subtypes(cards: Iterable[CollectionCard]) -> list[str]:
    """Subtype words present in the collection."""
    return sorted({w for c in cards for w in c.card.subtype_part.split()})
