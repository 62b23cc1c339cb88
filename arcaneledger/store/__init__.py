from arcaneledger.store.auth import AuthorizationFlow, TokenCache, parse_fragment
from arcaneledger.store.sheets import RemoteStoreClient

__all__ = [
    "AuthorizationFlow",
    "RemoteStoreClient",
    "TokenCache",
    "parse_fragment",
]
