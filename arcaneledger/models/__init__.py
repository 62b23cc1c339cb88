from arcaneledger.models.card import (
    CardReference,
    Face,
    MultiFacedCard,
    SingleFacedCard,
    card_from_payload,
)
from arcaneledger.models.collection import CollectionCard, find_card
from arcaneledger.models.deck import Deck, DeckEntry, DeckFormat
from arcaneledger.models.failure import (
    AuthorizationRequired,
    ComboLookupError,
    ConfigurationError,
    DeckNotFoundError,
    FailureKind,
    InvalidOperationError,
    KnownError,
    StoreError,
    SynergyLookupError,
)
from arcaneledger.models.sync import LookupStatus, SyncState, SyncStatus

__all__ = [
    "AuthorizationRequired",
    "CardReference",
    "CollectionCard",
    "ComboLookupError",
    "ConfigurationError",
    "Deck",
    "DeckEntry",
    "DeckFormat",
    "DeckNotFoundError",
    "Face",
    "FailureKind",
    "InvalidOperationError",
    "KnownError",
    "LookupStatus",
    "MultiFacedCard",
    "SingleFacedCard",
    "StoreError",
    "SyncState",
    "SyncStatus",
    "SynergyLookupError",
    "card_from_payload",
    "find_card",
]
