from dataclasses import dataclass

from arcaneledger.models.card import CardReference


@dataclass(frozen=True)
class CollectionCard:
    """
    One owned printing of a card.

    At most one CollectionCard exists per printing id in a collection;
    adding the same printing again raises its quantity instead.

    Attributes:
        card: Card reference payload for the printing
        quantity: Copies owned, always >= 1
        added_at: Acquisition timestamp (epoch milliseconds), None if unknown
    """

    card: CardReference
    quantity: int = 1
    added_at: int | None = None

    @property
    def id(self) -> str:
        return self.card.id

    @property
    def name(self) -> str:
        return self.card.name

    @property
    def type_line(self) -> str:
        return self.card.type_line

    @property
    def color_identity(self) -> tuple[str, ...]:
        return self.card.color_identity


def find_card(collection: tuple[CollectionCard, ...], card_id: str) -> CollectionCard | None:
    """Return the collection entry for a printing id, or None."""
    for entry in collection:
        if entry.id == card_id:
            return entry
    return None
