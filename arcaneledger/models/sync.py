from dataclasses import dataclass
from enum import Enum


class SyncStatus(str, Enum):
    """
    Sync status state machine.

    unconfigured is terminal. Otherwise: loading -> idle | error on start,
    and any save from idle or error goes saving -> idle | error.
    """

    IDLE = "idle"
    LOADING = "loading"
    SAVING = "saving"
    ERROR = "error"
    UNCONFIGURED = "unconfigured"


@dataclass(frozen=True)
class SyncState:
    """Current status and the message shown next to it."""

    status: SyncStatus
    message: str = ""


class LookupStatus(str, Enum):
    """Outcome of a combo or synergy lookup."""

    DONE = "done"
    ERROR = "error"
