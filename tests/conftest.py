from collections.abc import Callable
from typing import Any

import pytest

from arcaneledger.config import Settings
from arcaneledger.models.card import CardReference, card_from_payload
from arcaneledger.models.collection import CollectionCard

PayloadFactory = Callable[..., dict[str, Any]]
CardFactory = Callable[..., CardReference]
EntryFactory = Callable[..., CollectionCard]


@pytest.fixture
def settings() -> Settings:
    """Fully configured settings with a short debounce."""
    return Settings(
        _env_file=None,
        spreadsheet_id="sheet-123",
        api_key="api-key",
        client_id="client-id",
        save_debounce_seconds=0.02,
    )


@pytest.fixture
def unconfigured_settings() -> Settings:
    """Settings with no store connection parameters."""
    return Settings(_env_file=None, spreadsheet_id="", api_key="", client_id="")


@pytest.fixture
def make_payload() -> PayloadFactory:
    """Build a Scryfall-shaped card payload."""

    def factory(
        card_id: str,
        name: str,
        type_line: str = "Instant",
        **extra: Any,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": card_id,
            "name": name,
            "set_name": "Test Set",
            "set": "tst",
            "collector_number": "1",
            "mana_cost": "{1}",
            "type_line": type_line,
            "cmc": 1.0,
            "colors": [],
            "color_identity": [],
            "prices": {"usd": "1.00", "usd_foil": None},
            "image_uris": {
                "normal": f"https://img.test/{card_id}/normal.jpg",
                "small": f"https://img.test/{card_id}/small.jpg",
            },
            "purchase_uris": {},
            "oracle_text": "",
        }
        payload.update(extra)
        return payload

    return factory


@pytest.fixture
def make_card(make_payload: PayloadFactory) -> CardFactory:
    """Build a CardReference through the payload parser."""

    def factory(card_id: str, name: str, type_line: str = "Instant", **extra: Any) -> CardReference:
        return card_from_payload(make_payload(card_id, name, type_line, **extra))

    return factory


@pytest.fixture
def make_entry(make_card: CardFactory) -> EntryFactory:
    """Build a CollectionCard."""

    def factory(
        card_id: str,
        name: str,
        type_line: str = "Instant",
        quantity: int = 1,
        **extra: Any,
    ) -> CollectionCard:
        return CollectionCard(
            card=make_card(card_id, name, type_line, **extra),
            quantity=quantity,
            added_at=1700000000000,
        )

    return factory
