"""
Card reference payloads.

A Scryfall card object comes in two shapes: single-faced cards carry
image_uris and oracle_text at the top level, multi-faced cards (transform,
modal DFC, split, adventure...) carry a card_faces list and may omit one or
both top-level fields. card_from_payload() turns either shape into a tagged
variant so callers never probe optional nesting themselves.

The raw payload is kept verbatim so it can be written back to the store.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

# Separator between the supertype/type part and the subtype part of a type line
TYPE_SEPARATOR = "—"


@dataclass(frozen=True)
class Face:
    """One face of a multi-faced card."""

    name: str
    mana_cost: str = ""
    type_line: str = ""
    oracle_text: str = ""
    image_uris: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CardReference:
    """
    Fields of a card printing shared by both shapes.

    Attributes:
        id: Scryfall printing identifier (stable, globally unique)
        name: Full card name ("Front // Back" for multi-faced cards)
        set_name: Set display name
        set_code: Set code, lowercase as Scryfall returns it
        collector_number: Collector number within the set
        mana_cost: Mana cost string, e.g. "{2}{B}{G}"
        type_line: Full type line, e.g. "Legendary Creature — Elf Druid"
        cmc: Mana value
        colors: Colors of the card
        color_identity: Color identity letters (W, U, B, R, G)
        prices: Price fields as Scryfall strings (usd, usd_foil, ...)
        image_uris: Top-level image URIs, empty for most multi-faced cards
        purchase_uris: Vendor links
        oracle_text: Top-level rules text, often empty for multi-faced cards
        raw: The complete payload as received
    """

    id: str
    name: str
    set_name: str = ""
    set_code: str = ""
    collector_number: str = ""
    mana_cost: str = ""
    type_line: str = ""
    cmc: float = 0.0
    colors: tuple[str, ...] = ()
    color_identity: tuple[str, ...] = ()
    prices: Mapping[str, str | None] = field(default_factory=dict)
    image_uris: Mapping[str, str] = field(default_factory=dict)
    purchase_uris: Mapping[str, str] = field(default_factory=dict)
    oracle_text: str = ""
    raw: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def supertype_part(self) -> str:
        """Type line text before the subtype separator."""
        return self.type_line.split(TYPE_SEPARATOR)[0]

    @property
    def subtype_part(self) -> str:
        """Type line text after the first subtype separator, empty if none."""
        parts = self.type_line.split(TYPE_SEPARATOR)
        return parts[1] if len(parts) > 1 else ""

    @property
    def type_words(self) -> list[str]:
        """Words of the type line before the subtype separator."""
        return self.supertype_part.split()

    @property
    def is_legendary_creature(self) -> bool:
        """True if the card can be a commander (Legendary supertype + Creature type)."""
        words = self.type_words
        return "Legendary" in words and "Creature" in words


@dataclass(frozen=True)
class SingleFacedCard(CardReference):
    """A card with one face; text and images live at the top level."""


@dataclass(frozen=True)
class MultiFacedCard(CardReference):
    """A card with two or more faces, in printed order."""

    faces: tuple[Face, ...] = ()


def _string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _mapping(value: Any) -> dict[str, Any]:
    return dict(value) if isinstance(value, Mapping) else {}


def _letters(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list | tuple):
        return ()
    return tuple(v for v in value if isinstance(v, str))


def _cmc(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _face_from_payload(payload: Mapping[str, Any]) -> Face:
    return Face(
        name=_string(payload.get("name")),
        mana_cost=_string(payload.get("mana_cost")),
        type_line=_string(payload.get("type_line")),
        oracle_text=_string(payload.get("oracle_text")),
        image_uris=_mapping(payload.get("image_uris")),
    )


def card_from_payload(payload: Mapping[str, Any]) -> CardReference:
    """
    Build a card reference from a Scryfall card object.

    Args:
        payload: Card JSON object

    Returns:
        MultiFacedCard if the payload has a non-empty card_faces list,
        SingleFacedCard otherwise.

    Raises:
        ValueError: If the payload has no identifier
    """
    card_id = payload.get("id")
    if not card_id:
        raise ValueError("Card payload has no id")

    common: dict[str, Any] = {
        "id": str(card_id),
        "name": _string(payload.get("name")),
        "set_name": _string(payload.get("set_name")),
        "set_code": _string(payload.get("set")),
        "collector_number": _string(payload.get("collector_number")),
        "mana_cost": _string(payload.get("mana_cost")),
        "type_line": _string(payload.get("type_line")),
        "cmc": _cmc(payload.get("cmc", 0)),
        "colors": _letters(payload.get("colors")),
        "color_identity": _letters(payload.get("color_identity")),
        "prices": _mapping(payload.get("prices")),
        "image_uris": _mapping(payload.get("image_uris")),
        "purchase_uris": _mapping(payload.get("purchase_uris")),
        "oracle_text": _string(payload.get("oracle_text")),
        "raw": dict(payload),
    }

    raw_faces = payload.get("card_faces")
    if isinstance(raw_faces, list) and raw_faces:
        faces = tuple(_face_from_payload(f) for f in raw_faces if isinstance(f, Mapping))
        return MultiFacedCard(faces=faces, **common)

    return SingleFacedCard(**common)
