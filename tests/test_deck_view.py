import pytest

from arcaneledger.analysis.deck_view import (
    collection_stats,
    commander_candidates,
    deck_color_identity,
    deck_stats,
    resolve_deck_cards,
    sort_colors,
)
from arcaneledger.models.deck import Deck, DeckEntry, DeckFormat


@pytest.fixture
def collection(make_entry):
    return [
        make_entry(
            "cmd",
            "Meren of Clan Nel Toth",
            "Legendary Creature — Human Shaman",
            quantity=1,
            color_identity=["B", "G"],
            prices={"usd": "2.00"},
        ),
        make_entry(
            "bolt",
            "Lightning Bolt",
            "Instant",
            quantity=4,
            color_identity=["R"],
            prices={"usd": "1.50"},
        ),
        make_entry("elf", "Llanowar Elves", "Creature — Elf Druid", color_identity=["G"]),
    ]


def _deck(deck_format: DeckFormat, commander_id: str | None = "cmd") -> Deck:
    return Deck(
        id="d1",
        name="Meren",
        format=deck_format,
        commander_id=commander_id if deck_format is DeckFormat.COMMANDER else None,
        entries=(DeckEntry("cmd", 1), DeckEntry("bolt", 2), DeckEntry("gone", 1)),
    )


class TestDeckColorIdentity:
    """Tests for deck color identity resolution."""

    def test_commander_only(self, collection) -> None:
        assert deck_color_identity(_deck(DeckFormat.COMMANDER), collection) == ("B", "G")

    def test_union_for_standard(self, collection) -> None:
        assert deck_color_identity(_deck(DeckFormat.STANDARD), collection) == ("B", "R", "G")

    def test_commander_deck_without_commander_uses_union(self, collection) -> None:
        deck = _deck(DeckFormat.COMMANDER, commander_id=None)

        assert deck_color_identity(deck, collection) == ("B", "R", "G")

    def test_sort_colors(self) -> None:
        assert sort_colors(["G", "W", "X", "U", "G"]) == ("W", "U", "G", "X")


class TestDeckCards:
    """Tests for resolving deck entries."""

    def test_missing_cards_skipped(self, collection) -> None:
        cards = resolve_deck_cards(_deck(DeckFormat.STANDARD), collection)

        assert [(c.id, c.quantity) for c in cards] == [("cmd", 1), ("bolt", 2)]

    def test_commander_candidates(self, collection) -> None:
        candidates = commander_candidates(_deck(DeckFormat.STANDARD), collection)

        assert [c.id for c in candidates] == ["cmd"]


class TestStats:
    """Tests for deck and collection statistics."""

    def test_deck_stats(self, collection) -> None:
        stats = deck_stats(_deck(DeckFormat.STANDARD), collection)

        assert stats.total_cards == 4
        assert stats.total_value == pytest.approx(5.0)
        assert stats.type_counts == (("Creature", 1), ("Instant", 2))
        assert [c.id for c in stats.commander_candidates] == ["cmd"]

    def test_collection_stats(self, collection) -> None:
        stats = collection_stats(collection)

        assert stats.total_cards == 6
        assert stats.unique_cards == 3
        assert stats.total_value == pytest.approx(2.0 + 6.0 + 1.0)
