"""
Arcane Ledger services.

HTTP clients for the read-only upstreams: card database, combo database,
synergy database and the image recognizer.
"""

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
from arcaneledger.services.card_recognition import recognize_card_name
from arcaneledger.services.combo_database import ComboDatabaseClient
from arcaneledger.services.pool import bounded_gather
from arcaneledger.services.synergy_database import SynergyClient

__all__ = [
    "CardReferenceClient",
    "ComboDatabaseClient",
    "SynergyClient",
    "bounded_gather",
    "cardkingdom_link",
    "get_image",
    "get_oracle_text",
    "get_price",
    "get_price_label",
    "get_small_image",
    "image_url_for_id",
    "recognize_card_name",
    "tcgplayer_link",
]
