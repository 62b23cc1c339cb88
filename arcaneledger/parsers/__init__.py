from arcaneledger.parsers.tabular import (
    decode_card,
    decode_deck,
    decode_rows,
    encode_card,
    encode_deck,
    resolve_commander,
)

__all__ = [
    "decode_card",
    "decode_deck",
    "decode_rows",
    "encode_card",
    "encode_deck",
    "resolve_commander",
]
