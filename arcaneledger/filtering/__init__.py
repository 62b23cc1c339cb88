"""Collection filtering, sorting and unique-names aggregation."""

from arcaneledger.filtering.aggregate import AggregatedCard, aggregate_unique_names
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

__all__ = [
    "AggregatedCard",
    "CollectionFilter",
    "SortKey",
    "aggregate_unique_names",
    "available_permutations",
    "available_subtypes",
    "available_supertypes",
    "available_types",
    "filter_cards",
    "sort_cards",
]
