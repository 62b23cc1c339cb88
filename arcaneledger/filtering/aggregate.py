"""
Unique-names aggregation.

Collapses every printing of the same card name into one row with the
summed quantity, the number of editions, and the printings themselves.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from arcaneledger.models.card import CardReference
from arcaneledger.models.collection import CollectionCard


@dataclass(frozen=True)
class AggregatedCard:
    """All owned printings of one card name, first printing first."""

    editions: tuple[CollectionCard, ...]

    @property
    def representative(self) -> CollectionCard:
        return self.editions[0]

    @property
    def id(self) -> str:
        return self.representative.id

    @property
    def name(self) -> str:
        return self.representative.name

    @property
    def card(self) -> CardReference:
        return self.representative.card

    @property
    def quantity(self) -> int:
        return sum(e.quantity for e in self.editions)

    @property
    def editions_count(self) -> int:
        return len(self.editions)

    @property
    def edition_ids(self) -> tuple[str, ...]:
        return tuple(e.id for e in self.editions)


def aggregate_unique_names(cards: Iterable[CollectionCard]) -> list[AggregatedCard]:
    """
    Group entries by name, keeping the order in which names first appear.

    Args:
        cards: Entries that already passed filtering and sorting

    Returns:
        One AggregatedCard per distinct name
    """
    by_name: dict[str, list[CollectionCard]] = {}
    for card in cards:
        by_name.setdefault(card.name, []).append(card)
    return [AggregatedCard(editions=tuple(group)) for group in by_name.values()]
