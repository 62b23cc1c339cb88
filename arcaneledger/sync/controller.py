"""
Sync controller.

Owns the authoritative collection and deck set for one session and is the
only thing that mutates them. Every mutating operation replaces the whole
tuple it touches and then schedules a debounced save; the save reads the
latest state when the timer fires, so a burst of mutations is persisted
once, as its final state.

Saves rewrite both sheets in full (clear + write per sheet). There is no
locking or version check: overlapping saves are possible and whichever
finishes last determines what the store holds.
"""

import asyncio
import logging
import time
import uuid
from collections.abc import Callable, Sequence
from dataclasses import replace
from datetime import datetime

from arcaneledger.config import Settings
from arcaneledger.filtering.aggregate import AggregatedCard
from arcaneledger.models.card import CardReference
from arcaneledger.models.collection import CollectionCard, find_card
from arcaneledger.models.deck import Deck, DeckEntry, DeckFormat
from arcaneledger.models.failure import (
    AuthorizationRequired,
    DeckNotFoundError,
    InvalidOperationError,
    KnownError,
    StoreError,
)
from arcaneledger.models.sync import SyncState, SyncStatus
from arcaneledger.parsers.tabular import decode_rows, encode_card, encode_deck
from arcaneledger.store.auth import AuthorizationFlow
from arcaneledger.store.sheets import RemoteStoreClient
from arcaneledger.sync.debounce import Debouncer

logger = logging.getLogger(__name__)

StatusListener = Callable[[SyncState], None]

# Anything toggle_deck_membership accepts as "a card"
DeckMember = CollectionCard | AggregatedCard | CardReference | str


def _member_ids(card: DeckMember) -> tuple[str, list[str]]:
    """(id to insert, ids that count as already present) for a toggle."""
    if isinstance(card, str):
        return card, [card]
    if isinstance(card, AggregatedCard):
        return card.id, [edition.id for edition in card.editions]
    return card.id, [card.id]


class SyncController:
    """
    Mediates every change to the collection and decks.

    Args:
        settings: Connection parameters and sync tuning
        store: Spreadsheet client; built from settings when configured
        auth: Token acquisition flow; built from settings when omitted
        navigate: Receives the authorization URL when a redirect is needed
        clock: Epoch-seconds clock used for acquisition timestamps
    """

    def __init__(
        self,
        settings: Settings,
        *,
        store: RemoteStoreClient | None = None,
        auth: AuthorizationFlow | None = None,
        navigate: Callable[[str], None] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings
        self._configured = settings.is_configured
        self._owns_store = store is None and self._configured
        self._store = store or (RemoteStoreClient(settings) if self._configured else None)
        self.auth = auth or AuthorizationFlow(settings, navigate=navigate)
        self._clock = clock

        self._collection: tuple[CollectionCard, ...] = ()
        self._decks: tuple[Deck, ...] = ()
        self._state = SyncState(SyncStatus.IDLE if self._configured else SyncStatus.UNCONFIGURED)
        self._listeners: list[StatusListener] = []
        self._debouncer = Debouncer(settings.save_debounce_seconds, self._save_latest)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def configured(self) -> bool:
        return self._configured

    @property
    def collection(self) -> tuple[CollectionCard, ...]:
        return self._collection

    @property
    def decks(self) -> tuple[Deck, ...]:
        return self._decks

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def status(self) -> SyncStatus:
        return self._state.status

    @property
    def save_pending(self) -> bool:
        """True while a debounced save is waiting for its quiet period."""
        return self._debouncer.pending

    def get_deck(self, deck_id: str) -> Deck:
        """
        Raises:
            DeckNotFoundError: If no deck has this id
        """
        for deck in self._decks:
            if deck.id == deck_id:
                return deck
        raise DeckNotFoundError(deck_id)

    def add_listener(self, listener: StatusListener) -> None:
        """Register a callback for every status change."""
        self._listeners.append(listener)

    def _set_state(self, status: SyncStatus, message: str) -> None:
        if self._state.status is SyncStatus.UNCONFIGURED:
            return
        self._state = SyncState(status, message)
        for listener in self._listeners:
            listener(self._state)

    # -------------------------------------------------------------------------
    # Session lifecycle
    # -------------------------------------------------------------------------

    async def start(self, fragment: str | None = None) -> None:
        """
        Begin a session.

        Stores a token carried by an authorization redirect fragment, loads
        both sheets, and if a save was pending when the redirect started,
        replays it once after a successful load.

        The pending marker is read from self.auth, so the flow that issued
        the redirect (or one built with pending_save=True) must be the one
        passed to this controller.
        """
        if not self._configured:
            logger.info("Google Sheets not configured, remote sync disabled")
            return

        token = self.auth.consume_fragment(fragment)
        replay = self.auth.take_pending_save() if token else False

        await self.load()
        if replay and self.status is SyncStatus.IDLE:
            logger.info("Replaying save interrupted by authorization redirect")
            await self.save()

    async def resume_authorization(self, fragment: str) -> bool:
        """
        Accept a redirect fragment on a live session.

        Returns:
            True if a pending save was replayed
        """
        if not self._configured or self.auth.consume_fragment(fragment) is None:
            return False
        if not self.auth.take_pending_save():
            return False
        await self.save()
        return True

    async def flush(self) -> None:
        """Run a pending debounced save now and wait for saves in flight."""
        await self._debouncer.flush()

    async def close(self) -> None:
        """Drop any pending save timer, wait for running saves, release the client."""
        self._debouncer.cancel()
        await self._debouncer.wait()
        if self._owns_store and self._store is not None:
            await self._store.aclose()

    # -------------------------------------------------------------------------
    # Remote sync
    # -------------------------------------------------------------------------

    async def load(self) -> None:
        """
        Replace in-memory state with the store's contents.

        Both ranges are read concurrently. Unreadable rows are dropped. On
        failure the status becomes error and the current state is kept.
        """
        if not self._configured or self._store is None:
            return

        self._set_state(SyncStatus.LOADING, "Loading from Google Sheets...")
        try:
            collection_rows, deck_rows = await asyncio.gather(
                self._store.read_range(self._settings.collection_range),
                self._store.read_range(self._settings.decks_range),
            )
        except KnownError as e:
            logger.warning("Load failed: %s", e.message)
            self._set_state(SyncStatus.ERROR, f"Load failed: {e.message}")
            return

        collection, decks = decode_rows(collection_rows, deck_rows)
        self._collection = collection
        self._decks = decks
        logger.info("Loaded %d cards and %d decks", len(collection), len(decks))
        self._set_state(SyncStatus.IDLE, f"Loaded {len(collection)} cards")

    async def save(
        self,
        collection: Sequence[CollectionCard] | None = None,
        decks: Sequence[Deck] | None = None,
    ) -> None:
        """
        Rewrite both sheets from the given (default: current) state.

        Each sheet is cleared first so deletions propagate; the write is
        skipped for an empty sheet. Failures end in the error status.
        """
        if not self._configured or self._store is None:
            return

        collection = self._collection if collection is None else tuple(collection)
        decks = self._decks if decks is None else tuple(decks)
        card_rows = [encode_card(c) for c in collection]
        deck_rows = [encode_deck(d, collection) for d in decks]

        self._set_state(SyncStatus.SAVING, "Saving...")
        try:
            token = self.auth.request_token()
        except AuthorizationRequired as e:
            self._set_state(SyncStatus.ERROR, e.message)
            return

        settings = self._settings
        try:
            await self._store.clear_range(settings.collection_range, token)
            if card_rows:
                await self._store.write_range(settings.collection_anchor, card_rows, token)
            await self._store.clear_range(settings.decks_range, token)
            if deck_rows:
                await self._store.write_range(settings.decks_anchor, deck_rows, token)
        except StoreError as e:
            if e.status_code == 401:
                # Revoked token: the next save goes through the redirect again
                self.auth.cache.clear()
            logger.warning("Save failed: %s", e.message)
            self._set_state(SyncStatus.ERROR, f"Save failed: {e.message}")
            return

        logger.info("Saved %d cards and %d decks", len(card_rows), len(deck_rows))
        self._set_state(SyncStatus.IDLE, f"Saved {datetime.now().strftime('%H:%M:%S')}")

    async def _save_latest(self) -> None:
        await self.save(self._collection, self._decks)

    def _schedule_save(self) -> None:
        if self._configured:
            self._debouncer.schedule()

    # -------------------------------------------------------------------------
    # Collection mutations
    # -------------------------------------------------------------------------

    def add_card(self, card: CardReference) -> CollectionCard:
        """
        Add one copy of a printing.

        An existing entry gains one copy; otherwise a new entry with
        quantity 1 and a fresh acquisition timestamp is appended.
        """
        existing = find_card(self._collection, card.id)
        if existing is not None:
            entry = replace(existing, quantity=existing.quantity + 1)
            self._collection = tuple(entry if c.id == card.id else c for c in self._collection)
        else:
            entry = CollectionCard(card=card, quantity=1, added_at=int(self._clock() * 1000))
            self._collection = (*self._collection, entry)
        self._schedule_save()
        return entry

    def remove_card(self, card_id: str) -> None:
        """Remove a printing and every deck entry (or commander reference) to it."""
        self._collection = tuple(c for c in self._collection if c.id != card_id)
        self._decks = tuple(_without_card(deck, card_id) for deck in self._decks)
        self._schedule_save()

    def set_quantity(self, card_id: str, delta: int) -> None:
        """Change a collection entry's quantity by delta, never below 1."""
        if find_card(self._collection, card_id) is None:
            return
        self._collection = tuple(
            replace(c, quantity=max(1, c.quantity + delta)) if c.id == card_id else c
            for c in self._collection
        )
        self._schedule_save()

    # -------------------------------------------------------------------------
    # Deck mutations
    # -------------------------------------------------------------------------

    def _replace_deck(self, deck_id: str, update: Callable[[Deck], Deck]) -> Deck:
        deck = self.get_deck(deck_id)
        updated = update(deck)
        self._decks = tuple(updated if d.id == deck_id else d for d in self._decks)
        self._schedule_save()
        return updated

    def create_deck(self, name: str) -> Deck:
        """Create an empty Standard deck."""
        name = name.strip()
        if not name:
            raise InvalidOperationError("Deck name must not be empty")
        deck = Deck(id=uuid.uuid4().hex, name=name)
        self._decks = (*self._decks, deck)
        self._schedule_save()
        return deck

    def delete_deck(self, deck_id: str) -> None:
        """Delete a deck; the collection is untouched."""
        self.get_deck(deck_id)
        self._decks = tuple(d for d in self._decks if d.id != deck_id)
        self._schedule_save()

    def rename_deck(self, deck_id: str, name: str) -> Deck:
        name = name.strip()
        if not name:
            raise InvalidOperationError("Deck name must not be empty")
        return self._replace_deck(deck_id, lambda d: replace(d, name=name))

    def set_deck_format(self, deck_id: str, deck_format: DeckFormat | str) -> Deck:
        """Switch format; leaving Commander clears the commander."""
        try:
            fmt = DeckFormat(deck_format)
        except ValueError as e:
            raise InvalidOperationError(f"Unknown deck format: {deck_format}") from e

        def update(deck: Deck) -> Deck:
            commander = deck.commander_id if fmt is DeckFormat.COMMANDER else None
            return replace(deck, format=fmt, commander_id=commander)

        return self._replace_deck(deck_id, update)

    def set_commander(self, deck_id: str, card_id: str | None) -> Deck:
        """
        Set or clear a Commander deck's commander.

        Raises:
            InvalidOperationError: If the deck is not a Commander deck, or the
                card is not a legendary creature in the collection
        """
        deck = self.get_deck(deck_id)
        if card_id is not None:
            if not deck.is_commander:
                raise InvalidOperationError(f"Deck {deck.name!r} is not a Commander deck")
            entry = find_card(self._collection, card_id)
            if entry is None:
                raise InvalidOperationError(f"Card {card_id} is not in the collection")
            if not entry.card.is_legendary_creature:
                raise InvalidOperationError(f"{entry.name} is not a legendary creature")
        return self._replace_deck(deck_id, lambda d: replace(d, commander_id=card_id))

    def add_to_deck(self, deck_id: str, card_id: str) -> Deck:
        """Add one copy of a collection card to a deck."""

        def update(deck: Deck) -> Deck:
            if deck.entry_for(card_id) is not None:
                entries = tuple(
                    replace(e, quantity=e.quantity + 1) if e.card_id == card_id else e
                    for e in deck.entries
                )
            else:
                entries = (*deck.entries, DeckEntry(card_id=card_id, quantity=1))
            return replace(deck, entries=entries)

        return self._replace_deck(deck_id, update)

    def remove_from_deck(self, deck_id: str, card_id: str) -> Deck:
        return self._replace_deck(
            deck_id,
            lambda d: replace(d, entries=tuple(e for e in d.entries if e.card_id != card_id)),
        )

    def set_deck_quantity(self, deck_id: str, card_id: str, delta: int) -> Deck:
        """Change a deck entry's quantity by delta; reaching 0 removes the entry."""

        def update(deck: Deck) -> Deck:
            entries: list[DeckEntry] = []
            for entry in deck.entries:
                if entry.card_id == card_id:
                    quantity = max(0, entry.quantity + delta)
                    if quantity == 0:
                        continue
                    entry = replace(entry, quantity=quantity)
                entries.append(entry)
            return replace(deck, entries=tuple(entries))

        return self._replace_deck(deck_id, update)

    def toggle_deck_membership(self, card: DeckMember, deck_id: str) -> bool:
        """
        Put a card in a deck, or take it out if it is already there.

        For an aggregated unique-name row, any of its printings counts as
        present and all of them are removed.

        Returns:
            True if the card is in the deck afterwards
        """
        insert_id, match_ids = _member_ids(card)
        in_deck = self.get_deck(deck_id).contains_any(match_ids)

        def update(deck: Deck) -> Deck:
            if in_deck:
                wanted = set(match_ids)
                return replace(
                    deck, entries=tuple(e for e in deck.entries if e.card_id not in wanted)
                )
            return replace(deck, entries=(*deck.entries, DeckEntry(card_id=insert_id)))

        self._replace_deck(deck_id, update)
        return not in_deck


def _without_card(deck: Deck, card_id: str) -> Deck:
    """Deck with every reference to card_id removed; the same object if there is none."""
    has_entry = deck.entry_for(card_id) is not None
    is_commander = deck.commander_id == card_id
    if not has_entry and not is_commander:
        return deck
    return replace(
        deck,
        entries=tuple(e for e in deck.entries if e.card_id != card_id),
        commander_id=None if is_commander else deck.commander_id,
    )
