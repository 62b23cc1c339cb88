from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class DeckFormat(str, Enum):
    """Supported deck formats."""

    STANDARD = "Standard"
    COMMANDER = "Commander"

    @classmethod
    def parse(cls, value: str | None) -> "DeckFormat":
        """Parse a stored format name, defaulting to Standard."""
        for member in cls:
            if member.value == value:
                return member
        return cls.STANDARD


@dataclass(frozen=True)
class DeckEntry:
    """A collection card in a deck with its copy count (always >= 1)."""

    card_id: str
    quantity: int = 1


@dataclass(frozen=True)
class Deck:
    """
    A user-built deck.

    Attributes:
        id: Locally generated unique identifier
        name: Display name, never empty
        format: Standard or Commander
        commander_id: Collection card id of the commander; only set on
            Commander decks and only for legendary creatures
        entries: One entry per collection card id, order irrelevant
    """

    id: str
    name: str
    format: DeckFormat = DeckFormat.STANDARD
    commander_id: str | None = None
    entries: tuple[DeckEntry, ...] = ()

    @property
    def is_commander(self) -> bool:
        return self.format is DeckFormat.COMMANDER

    def entry_for(self, card_id: str) -> DeckEntry | None:
        """Return the entry for a collection card id, or None."""
        for entry in self.entries:
            if entry.card_id == card_id:
                return entry
        return None

    def contains_any(self, card_ids: Iterable[str]) -> bool:
        """True if any of the given collection card ids has an entry."""
        wanted = set(card_ids)
        return any(entry.card_id in wanted for entry in self.entries)

    def total_cards(self) -> int:
        """Sum of entry quantities."""
        return sum(entry.quantity for entry in self.entries)
