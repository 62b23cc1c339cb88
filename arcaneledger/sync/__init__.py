from arcaneledger.sync.controller import SyncController
from arcaneledger.sync.debounce import Debouncer

__all__ = [
    "Debouncer",
    "SyncController",
]
