"""
Card name recognition from a photo.

Sends a captured JPEG to Claude and returns the card name it reads. Used
only to fill in a search query, so every failure degrades to None.
"""

import base64
import logging

import anthropic
from anthropic.types import MessageParam, TextBlock

from arcaneledger.config import Settings

logger = logging.getLogger(__name__)

RECOGNITION_PROMPT = (
    "What is the exact name of this Magic: The Gathering card? "
    "Reply with ONLY the card name, nothing else. "
    "If you cannot identify it, reply UNKNOWN."
)

UNKNOWN = "UNKNOWN"


async def recognize_card_name(
    image_bytes: bytes,
    settings: Settings,
    client: anthropic.AsyncAnthropic | None = None,
) -> str | None:
    """
    Identify the card in a photo.

    Args:
        image_bytes: JPEG image data
        settings: Supplies the API key and model
        client: Optional preconfigured client (tests inject a mock)

    Returns:
        The trimmed card name, or None if the card was not recognized,
        no API key is configured, or the call failed
    """
    if client is None:
        if not settings.anthropic_api_key:
            logger.info("Card recognition skipped: no Anthropic API key configured")
            return None
        client = anthropic.AsyncAnthropic(api_key=settings.anthropic_api_key)

    messages: list[MessageParam] = [
        {
            "role": "user",
            "content": [
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": "image/jpeg",
                        "data": base64.b64encode(image_bytes).decode("ascii"),
                    },
                },
                {"type": "text", "text": RECOGNITION_PROMPT},
            ],
        }
    ]

    try:
        response = await client.messages.create(
            model=settings.recognition_model,
            max_tokens=200,
            messages=messages,
        )
    except anthropic.APIError as e:
        logger.warning("Card recognition failed: %s", e)
        return None

    text = "".join(b.text for b in response.content if isinstance(b, TextBlock)).strip()
    if not text or text.upper() == UNKNOWN:
        return None
    return text
