"""
Type permutations and deck grouping.

A type permutation is the main-type part of a type line with supertypes
removed: "Legendary Artifact Creature — Equipment" -> "Artifact Creature".
"""

from collections.abc import Callable, Iterable
from typing import TypeVar

from arcaneledger.models.card import TYPE_SEPARATOR

T = TypeVar("T")

SUPERTYPES = frozenset({"Legendary", "Basic", "Snow", "World", "Token", "Elite", "Ongoing"})

OTHER_GROUP = "Other"

# Display order of deck sections; anything else follows alphabetically
TYPE_GROUP_ORDER: tuple[str, ...] = (
    "Creature",
    "Artifact Creature",
    "Enchantment Creature",
    "Artifact Enchantment Creature",
    "Planeswalker",
    "Battle",
    "Instant",
    "Sorcery",
    "Artifact",
    "Enchantment",
    "Artifact Enchantment",
    "Land",
    OTHER_GROUP,
)

_ORDER_INDEX = {name: i for i, name in enumerate(TYPE_GROUP_ORDER)}


def get_type_permutation(type_line: str | None) -> str:
    """
    Main types of a type line, in printed order.

    Everything from the first subtype separator on is dropped, then every
    supertype word. An empty result is "Other".
    """
    super_part = (type_line or "").split(TYPE_SEPARATOR)[0]
    main_types = [word for word in super_part.split() if word not in SUPERTYPES]
    return " ".join(main_types) or OTHER_GROUP


def type_group_sort_key(permutation: str) -> tuple[int, str]:
    """Known groups by their display position, unknown ones after them by name."""
    return (_ORDER_INDEX.get(permutation, len(TYPE_GROUP_ORDER)), permutation)


def group_by_type(
    items: Iterable[T], type_line_of: Callable[[T], str | None]
) -> list[tuple[str, list[T]]]:
    """
    Partition items by type permutation.

    Args:
        items: Cards to group, in the order they should appear within a group
        type_line_of: Extracts the type line from an item

    Returns:
        (permutation, items) pairs in display order
    """
    groups: dict[str, list[T]] = {}
    for item in items:
        groups.setdefault(get_type_permutation(type_line_of(item)), []).append(item)
    return [(key, groups[key]) for key in sorted(groups, key=type_group_sort_key)]
