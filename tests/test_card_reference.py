"""Tests for the card reference client and accessors."""

import httpx
import pytest
import respx

from arcaneledger.config import Settings
from arcaneledger.services.card_reference import (
    CardReferenceClient,
    cardkingdom_link,
    get_image,
    get_oracle_text,
    get_price,
    get_price_label,
    get_small_image,
    image_url_for_id,
    tcgplayer_link,
)

SEARCH_URL = "https://api.scryfall.com/cards/search"
COLLECTION_URL = "https://api.scryfall.com/cards/collection"


class TestPrice:
    """Tests for price accessors."""

    def test_primary_price(self, make_card) -> None:
        card = make_card("c1", "Opt", prices={"usd": "0.25", "usd_foil": "1.50"})

        assert get_price(card) == 0.25
        assert get_price_label(card) == "$0.25"

    def test_foil_fallback(self, make_card) -> None:
        card = make_card("c1", "Opt", prices={"usd": None, "usd_foil": "1.5"})

        assert get_price(card) == 1.5
        assert get_price_label(card) == "$1.50 (foil)"

    def test_no_price(self, make_card) -> None:
        card = make_card("c1", "Opt", prices={})

        assert get_price(card) == 0.0
        assert get_price_label(card) == "N/A"


class TestImagesAndText:
    """Tests for image and oracle text accessors on both card shapes."""

    def test_single_faced_image(self, make_card) -> None:
        card = make_card("c1", "Opt")

        assert get_image(card) == "https://img.test/c1/normal.jpg"
        assert get_small_image(card) == "https://img.test/c1/small.jpg"

    def test_multi_faced_image_from_first_face(self, make_card) -> None:
        card = make_card(
            "c2",
            "Front // Back",
            image_uris=None,
            card_faces=[
                {"name": "Front", "image_uris": {"normal": "front.jpg", "small": "front-s.jpg"}},
                {"name": "Back", "image_uris": {"normal": "back.jpg"}},
            ],
        )

        assert get_image(card) == "front.jpg"
        assert get_small_image(card) == "front-s.jpg"

    def test_no_image(self, make_card) -> None:
        assert get_image(make_card("c3", "Opt", image_uris=None)) is None

    def test_oracle_text_single(self, make_card) -> None:
        card = make_card("c1", "Opt", oracle_text="Scry 1. Draw a card.")

        assert get_oracle_text(card) == "Scry 1. Draw a card."

    def test_oracle_text_faces_joined_with_headers(self, make_card) -> None:
        card = make_card(
            "c2",
            "Front // Back",
            card_faces=[
                {"name": "Front", "oracle_text": "Do a thing."},
                {"name": "Back", "oracle_text": "Do another."},
            ],
        )

        assert get_oracle_text(card) == "[Front]\nDo a thing.\n\n[Back]\nDo another."


class TestLinks:
    """Tests for purchase links."""

    def test_tcgplayer_uses_purchase_uri(self, make_card) -> None:
        card = make_card("c1", "Opt", purchase_uris={"tcgplayer": "https://tcg.test/opt"})

        assert tcgplayer_link(card) == "https://tcg.test/opt"

    def test_tcgplayer_search_fallback(self, make_card) -> None:
        link = tcgplayer_link(make_card("c1", "Sol Ring"))

        assert link.endswith("q=Sol%20Ring")

    def test_cardkingdom_uses_front_face_name(self, make_card) -> None:
        link = cardkingdom_link(make_card("c1", "Fire // Ice"))

        assert link.endswith("filter%5Bname%5D=Fire")

    def test_image_url_for_id(self) -> None:
        assert (
            image_url_for_id("abcdef")
            == "https://cards.scryfall.io/normal/front/a/b/abcdef.jpg"
        )
        assert image_url_for_id("") == ""


class TestSearchCards:
    """Tests for card search."""

    @respx.mock
    async def test_returns_printings(self, settings, make_payload) -> None:
        route = respx.get(SEARCH_URL).mock(
            return_value=httpx.Response(
                200,
                json={
                    "data": [
                        make_payload("p1", "Sol Ring", "Artifact"),
                        make_payload("p2", "Sol Ring", "Artifact"),
                        {"name": "No Id"},
                    ]
                },
            )
        )
        client = CardReferenceClient(settings)

        cards = await client.search_cards("Sol Ring")
        await client.aclose()

        assert [c.id for c in cards] == ["p1", "p2"]
        params = route.calls.last.request.url.params
        assert params["q"] == "Sol Ring"
        assert params["unique"] == "prints"
        assert params["order"] == "released"

    @respx.mock
    async def test_non_success_returns_empty(self, settings) -> None:
        respx.get(SEARCH_URL).mock(return_value=httpx.Response(404, json={"object": "error"}))
        client = CardReferenceClient(settings)

        assert await client.search_cards("Nonexistent Card") == []
        await client.aclose()

    @respx.mock
    async def test_network_failure_returns_empty(self, settings) -> None:
        respx.get(SEARCH_URL).mock(side_effect=httpx.ConnectError("down"))
        client = CardReferenceClient(settings)

        assert await client.search_cards("Opt") == []
        await client.aclose()


class TestFetchColorIdentities:
    """Tests for batched color identity lookup."""

    @respx.mock
    async def test_chunks_and_lowercases(self) -> None:
        small_batches = Settings(_env_file=None, color_identity_batch_size=2)
        route = respx.post(COLLECTION_URL).mock(
            side_effect=[
                httpx.Response(
                    200,
                    json={
                        "data": [
                            {"name": "Sol Ring", "color_identity": []},
                            {"name": "Llanowar Elves", "color_identity": ["G"]},
                        ]
                    },
                ),
                httpx.Response(
                    200, json={"data": [{"name": "Doom Blade", "color_identity": ["B"]}]}
                ),
            ]
        )
        client = CardReferenceClient(small_batches)

        mapping = await client.fetch_color_identities(
            ["Sol Ring", "Llanowar Elves", "Sol Ring", "Doom Blade", ""]
        )
        await client.aclose()

        assert route.call_count == 2
        assert mapping == {"sol ring": [], "llanowar elves": ["G"], "doom blade": ["B"]}

    @respx.mock
    async def test_failed_chunk_is_skipped(self) -> None:
        small_batches = Settings(_env_file=None, color_identity_batch_size=1)
        respx.post(COLLECTION_URL).mock(
            side_effect=[
                httpx.Response(500),
                httpx.Response(200, json={"data": [{"name": "Opt", "color_identity": ["U"]}]}),
            ]
        )
        client = CardReferenceClient(small_batches)

        mapping = await client.fetch_color_identities(["Broken", "Opt"])
        await client.aclose()

        assert mapping == {"opt": ["U"]}

    @pytest.mark.asyncio
    async def test_no_names_makes_no_calls(self, settings) -> None:
        client = CardReferenceClient(settings)

        assert await client.fetch_color_identities([]) == {}
        await client.aclose()
