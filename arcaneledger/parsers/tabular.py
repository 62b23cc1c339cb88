"""
Tabular codec for the spreadsheet store.

Collection sheet columns (8):
    id | name | set_name | set | collector_number | qty | prices_json | card_json

Decks sheet columns (5):
    id | name | format | commander (card name) | cards_json

card_json is the full card payload with "qty" and "addedAt" merged in, so a
row alone is enough to rebuild the entry. cards_json is a list of
{"collectionId": ..., "qty": ...} objects.

Decoding is row-scoped: a bad collection row is dropped, a bad cards_json
field degrades to an empty deck, neither aborts a load.
"""

import json
import logging
import math
import re
from collections.abc import Sequence
from typing import Any

from arcaneledger.models.card import card_from_payload
from arcaneledger.models.collection import CollectionCard
from arcaneledger.models.deck import Deck, DeckEntry, DeckFormat

logger = logging.getLogger(__name__)

COLLECTION_COLUMNS = 8
DECK_COLUMNS = 5

# Leading integer of a cell, e.g. "3" or "3 copies"
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _dumps(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def _cell(row: Sequence[str], index: int) -> str:
    if index < len(row) and row[index] is not None:
        return str(row[index])
    return ""


def _parse_quantity(cell: str) -> int:
    """Quantity cell to an int >= 1; unreadable or non-positive values become 1."""
    match = _LEADING_INT.match(cell)
    if not match:
        return 1
    quantity = int(match.group(1))
    return quantity if quantity >= 1 else 1


def _timestamp(value: Any) -> int | None:
    """Stored addedAt to epoch milliseconds; non-numeric or non-finite values become None."""
    if isinstance(value, bool) or not isinstance(value, int | float):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return int(value)


# =============================================================================
# COLLECTION ROWS
# =============================================================================


def encode_card(entry: CollectionCard) -> list[str]:
    """Encode a collection entry as an 8-column row."""
    card = entry.card
    payload = dict(card.raw) if card.raw else {"id": card.id, "name": card.name}
    payload["qty"] = entry.quantity
    if entry.added_at is not None:
        payload["addedAt"] = entry.added_at

    return [
        card.id,
        card.name,
        card.set_name,
        card.set_code,
        card.collector_number,
        str(entry.quantity),
        _dumps(dict(card.prices)),
        _dumps(payload),
    ]


def decode_card(row: Sequence[str]) -> CollectionCard | None:
    """
    Decode an 8-column collection row.

    The entry is rebuilt from the embedded card payload; the quantity column
    overrides whatever quantity the payload carries.

    Returns:
        CollectionCard, or None if the payload is unreadable or has no id
    """
    try:
        payload = json.loads(_cell(row, 7) or "{}")
        if not isinstance(payload, dict):
            raise ValueError("card payload is not an object")

        payload.pop("qty", None)
        added_at = _timestamp(payload.pop("addedAt", None))
        card = card_from_payload(payload)
    except (ValueError, TypeError, OverflowError, RecursionError) as e:
        logger.warning("Dropping collection row %r: %s", _cell(row, 0), e)
        return None

    return CollectionCard(
        card=card,
        quantity=_parse_quantity(_cell(row, 5)),
        added_at=added_at,
    )


# =============================================================================
# DECK ROWS
# =============================================================================


def encode_deck(deck: Deck, collection: Sequence[CollectionCard]) -> list[str]:
    """
    Encode a deck as a 5-column row.

    The commander is written as its card name, looked up in the collection;
    a commander missing from the collection is written as an empty cell.
    """
    commander_name = ""
    if deck.commander_id:
        commander_name = next((c.name for c in collection if c.id == deck.commander_id), "")

    cards = [{"collectionId": e.card_id, "qty": e.quantity} for e in deck.entries]
    return [deck.id, deck.name, deck.format.value, commander_name, _dumps(cards)]


def _decode_entries(cell: str, deck_id: str) -> tuple[DeckEntry, ...]:
    try:
        raw_entries = json.loads(cell or "[]")
    except (ValueError, RecursionError) as e:
        logger.warning("Deck %s has unreadable cards field, loading it empty: %s", deck_id, e)
        return ()
    if not isinstance(raw_entries, list):
        logger.warning("Deck %s cards field is not a list, loading it empty", deck_id)
        return ()

    entries: dict[str, DeckEntry] = {}
    for item in raw_entries:
        if not isinstance(item, dict):
            continue
        card_id = item.get("collectionId")
        quantity = item.get("qty")
        if not card_id or isinstance(quantity, bool) or not isinstance(quantity, int):
            continue
        if quantity < 1:
            continue
        # First entry wins for a repeated card id
        entries.setdefault(str(card_id), DeckEntry(card_id=str(card_id), quantity=quantity))
    return tuple(entries.values())


def resolve_commander(
    commander_name: str,
    entries: Sequence[DeckEntry],
    collection: Sequence[CollectionCard],
) -> str | None:
    """
    Resolve a stored commander name back to a collection card id.

    Only legendary creatures qualify. When several printings share the
    name, a printing that is already in the deck wins, then the first in
    collection order.
    """
    if not commander_name:
        return None
    candidates = [
        c for c in collection if c.name == commander_name and c.card.is_legendary_creature
    ]
    if not candidates:
        return None
    in_deck = {e.card_id for e in entries}
    for candidate in candidates:
        if candidate.id in in_deck:
            return candidate.id
    return candidates[0].id


def decode_deck(row: Sequence[str], collection: Sequence[CollectionCard]) -> Deck | None:
    """
    Decode a 5-column deck row against the live collection.

    Returns:
        Deck, or None if the row has no id or no name. An unreadable cards
        field yields a deck with no entries. A commander name that is not in
        the collection yields no commander.
    """
    deck_id = _cell(row, 0)
    name = _cell(row, 1)
    if not deck_id or not name:
        logger.warning("Dropping deck row without id or name: %r", list(row)[:2])
        return None

    deck_format = DeckFormat.parse(_cell(row, 2) or None)
    entries = _decode_entries(_cell(row, 4), deck_id)

    commander_id = None
    if deck_format is DeckFormat.COMMANDER:
        commander_id = resolve_commander(_cell(row, 3), entries, collection)

    return Deck(
        id=deck_id,
        name=name,
        format=deck_format,
        commander_id=commander_id,
        entries=entries,
    )


def decode_rows(
    collection_rows: Sequence[Sequence[str]],
    deck_rows: Sequence[Sequence[str]],
) -> tuple[tuple[CollectionCard, ...], tuple[Deck, ...]]:
    """
    Decode both sheets, dropping unreadable rows.

    Decks are decoded against the freshly decoded collection.
    """
    cards: list[CollectionCard] = []
    seen: set[str] = set()
    for row in collection_rows:
        entry = decode_card(row)
        if entry is None:
            continue
        if entry.id in seen:
            logger.warning("Dropping duplicate collection row for %s", entry.id)
            continue
        seen.add(entry.id)
        cards.append(entry)

    collection = tuple(cards)
    decks = tuple(d for d in (decode_deck(row, collection) for row in deck_rows) if d is not None)
    return collection, decks
