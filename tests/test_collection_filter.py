"""Tests for collection filtering, sorting and aggregation."""

import pytest

from arcaneledger.filtering.aggregate import aggregate_unique_names
from arcaneledger.filtering.collection_filter import (
    CollectionFilter,
    SortKey,
    available_permutations,
    available_subtypes,
    available_supertypes,
    available_types,
    filter_cards,
    sort_cards,
)


@pytest.fixture
def collection(make_entry):
    return [
        make_entry(
            "elf",
            "Llanowar Elves",
            "Creature — Elf Druid",
            colors=["G"],
            cmc=1,
            oracle_text="{T}: Add {G}.",
            prices={"usd": "0.30"},
        ),
        make_entry(
            "bolt",
            "Lightning Bolt",
            "Instant",
            colors=["R"],
            cmc=1,
            oracle_text="Lightning Bolt deals 3 damage to any target.",
            prices={"usd": "2.00"},
        ),
        make_entry(
            "golem",
            "Solemn Simulacrum",
            "Artifact Creature — Golem",
            colors=[],
            cmc=4,
            prices={"usd": "1.00"},
        ),
        make_entry(
            "tamiyo",
            "Tamiyo, Field Researcher",
            "Legendary Planeswalker — Tamiyo",
            colors=["G", "W", "U"],
            cmc=4,
            prices={"usd": None, "usd_foil": "5.00"},
        ),
        make_entry("forest", "Forest", "Basic Land — Forest", cmc=0, prices={}),
    ]


def _ids(cards) -> list[str]:
    return [c.id for c in cards]


class TestFilterCards:
    """Tests for the filter pipeline."""

    def test_no_filter_passes_everything(self, collection) -> None:
        assert filter_cards(collection, CollectionFilter()) == collection

    def test_text_matches_name_oracle_and_type(self, collection) -> None:
        assert _ids(filter_cards(collection, CollectionFilter(text="bolt"))) == ["bolt"]
        assert _ids(filter_cards(collection, CollectionFilter(text="ADD {G}"))) == ["elf"]
        assert _ids(filter_cards(collection, CollectionFilter(text="golem"))) == ["golem"]

    def test_color(self, collection) -> None:
        assert _ids(filter_cards(collection, CollectionFilter(color="G"))) == ["elf", "tamiyo"]

    def test_supertypes_any_of(self, collection) -> None:
        criteria = CollectionFilter(supertypes=frozenset({"Legendary", "Basic"}))

        assert _ids(filter_cards(collection, criteria)) == ["tamiyo", "forest"]

    def test_type_matches_component_word(self, collection) -> None:
        criteria = CollectionFilter(types=frozenset({"Creature"}))

        assert _ids(filter_cards(collection, criteria)) == ["elf", "golem"]

    def test_type_matches_exact_permutation(self, collection) -> None:
        criteria = CollectionFilter(types=frozenset({"Artifact Creature", "Instant"}))

        assert _ids(filter_cards(collection, criteria)) == ["bolt", "golem"]

    def test_subtype_substring(self, collection) -> None:
        assert _ids(filter_cards(collection, CollectionFilter(subtype="dru"))) == ["elf"]

    def test_mana_value(self, collection) -> None:
        assert _ids(filter_cards(collection, CollectionFilter(mana_value=4))) == ["golem", "tamiyo"]

    def test_categories_combine_with_and(self, collection) -> None:
        criteria = CollectionFilter(types=frozenset({"Creature"}), mana_value=1)

        assert _ids(filter_cards(collection, criteria)) == ["elf"]


class TestSortCards:
    """Tests for sort orders."""

    def test_by_name(self, collection) -> None:
        assert _ids(sort_cards(collection, SortKey.NAME)) == [
            "forest",
            "bolt",
            "elf",
            "golem",
            "tamiyo",
        ]

    def test_by_price_descending(self, collection) -> None:
        assert _ids(sort_cards(collection, SortKey.PRICE)) == [
            "tamiyo",
            "bolt",
            "golem",
            "elf",
            "forest",
        ]

    def test_by_color_colorless_last(self, collection) -> None:
        assert _ids(sort_cards(collection, SortKey.COLOR)) == [
            "elf",
            "tamiyo",
            "bolt",
            "golem",
            "forest",
        ]

    def test_by_mana_value_is_stable(self, collection) -> None:
        assert _ids(sort_cards(collection, SortKey.MANA_VALUE)) == [
            "forest",
            "elf",
            "bolt",
            "golem",
            "tamiyo",
        ]


class TestFilterOptions:
    """Tests for the option lists offered by the filter controls."""

    def test_option_lists(self, collection) -> None:
        assert available_supertypes(collection) == ["Basic", "Legendary"]
        assert available_types(collection) == [
            "Artifact",
            "Creature",
            "Instant",
            "Land",
            "Planeswalker",
        ]
        assert available_permutations(collection) == ["Artifact Creature"]
        assert available_subtypes(collection) == ["Druid", "Elf", "Forest", "Golem", "Tamiyo"]


class TestAggregateUniqueNames:
    """Tests for unique-name aggregation."""

    def test_forest_printings_collapse(self, make_entry) -> None:
        cards = [
            make_entry("f1", "Forest", "Basic Land — Forest", quantity=3),
            make_entry("opt", "Opt"),
            make_entry("f2", "Forest", "Basic Land — Forest", quantity=2),
        ]

        rows = aggregate_unique_names(cards)

        assert [r.name for r in rows] == ["Forest", "Opt"]
        forest = rows[0]
        assert forest.quantity == 5
        assert forest.editions_count == 2
        assert forest.edition_ids == ("f1", "f2")
        assert forest.id == "f1"
