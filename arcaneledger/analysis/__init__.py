from arcaneledger.analysis.combos import ComboReport, find_combos, score_combos
from arcaneledger.analysis.deck_view import (
    collection_stats,
    deck_color_identity,
    deck_stats,
    resolve_deck_cards,
)
from arcaneledger.analysis.synergy import SynergyReport, load_synergies, to_slug
from arcaneledger.analysis.type_groups import get_type_permutation, group_by_type

__all__ = [
    "ComboReport",
    "SynergyReport",
    "collection_stats",
    "deck_color_identity",
    "deck_stats",
    "find_combos",
    "get_type_permutation",
    "group_by_type",
    "load_synergies",
    "resolve_deck_cards",
    "score_combos",
    "to_slug",
]
