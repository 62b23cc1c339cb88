"""Tests for card name recognition."""

import base64
from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest
from anthropic.types import TextBlock

from arcaneledger.config import Settings
from arcaneledger.services.card_recognition import RECOGNITION_PROMPT, recognize_card_name

JPEG = b"\xff\xd8\xff\xe0fake-jpeg"


def _client_replying(*texts: str) -> MagicMock:
    blocks = []
    for text in texts:
        block = MagicMock(spec=TextBlock)
        block.text = text
        blocks.append(block)
    response = MagicMock()
    response.content = blocks

    client = MagicMock()
    client.messages.create = AsyncMock(return_value=response)
    return client


@pytest.fixture
def recognition_settings() -> Settings:
    return Settings(_env_file=None, anthropic_api_key="sk-test")


class TestRecognizeCardName:
    async def test_returns_trimmed_name(self, recognition_settings) -> None:
        """Reply text is trimmed and returned."""
        client = _client_replying("  Sol Ring\n")

        name = await recognize_card_name(JPEG, recognition_settings, client)

        assert name == "Sol Ring"
        kwargs = client.messages.create.await_args.kwargs
        assert kwargs["model"] == recognition_settings.recognition_model
        assert kwargs["max_tokens"] == 200
        image, prompt = kwargs["messages"][0]["content"]
        assert image["source"]["media_type"] == "image/jpeg"
        assert base64.b64decode(image["source"]["data"]) == JPEG
        assert prompt["text"] == RECOGNITION_PROMPT

    async def test_unknown_reply(self, recognition_settings) -> None:
        """UNKNOWN means the card was not recognized."""
        client = _client_replying("UNKNOWN")

        assert await recognize_card_name(JPEG, recognition_settings, client) is None

    async def test_empty_reply(self, recognition_settings) -> None:
        client = _client_replying("   ")

        assert await recognize_card_name(JPEG, recognition_settings, client) is None

    async def test_no_api_key(self) -> None:
        """Without a key no request is made."""
        settings = Settings(_env_file=None, anthropic_api_key="")

        assert await recognize_card_name(JPEG, settings) is None

    async def test_api_error(self, recognition_settings) -> None:
        """API failures degrade to None."""
        client = MagicMock()
        client.messages.create = AsyncMock(
            side_effect=anthropic.APIConnectionError(
                request=httpx.Request("POST", "https://api.anthropic.com/v1/messages")
            )
        )

        assert await recognize_card_name(JPEG, recognition_settings, client) is None
