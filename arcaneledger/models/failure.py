"""
Failure taxonomy.

Every error the sync engine can meet is classified by a FailureKind so
callers can turn it into a status + message pair for display.

- configuration: connection parameters absent, remote operations suppressed
- upstream_error: non-2xx HTTP status or network failure, never retried
- decode_error: malformed stored row, scoped to that row
- authorization_required: no valid bearer token, save blocked
- invalid_input / not_found: rejected controller operations
"""

from enum import Enum


class FailureKind(str, Enum):
    """Classification of failure types."""

    CONFIGURATION = "configuration"
    UPSTREAM_ERROR = "upstream_error"
    DECODE_ERROR = "decode_error"
    AUTHORIZATION_REQUIRED = "authorization_required"
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        super().__init__(message)


class ConfigurationError(KnownError):
    """Raised when a remote operation is attempted without store configuration."""

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.CONFIGURATION,
            message="Google Sheets is not configured",
            detail=detail,
        )


class StoreError(KnownError):
    """
    Non-success response (or network failure) from the spreadsheet store.

    The message embeds the status code and the upstream error message,
    e.g. "Sheets write failed: 403 - The caller does not have permission".
    """

    def __init__(self, operation: str, status_code: int | None, upstream_message: str = ""):
        self.operation = operation
        self.status_code = status_code
        self.upstream_message = upstream_message
        status = status_code if status_code is not None else "network error"
        super().__init__(
            kind=FailureKind.UPSTREAM_ERROR,
            message=f"Sheets {operation} failed: {status} - {upstream_message}",
        )


class AuthorizationRequired(KnownError):
    """
    No valid bearer token is cached.

    Raised after the redirect to the authorization service has been issued;
    the save that needed the token is abandoned.
    """

    def __init__(self, redirect_url: str):
        self.redirect_url = redirect_url
        super().__init__(
            kind=FailureKind.AUTHORIZATION_REQUIRED,
            message="Sign in required to save",
            detail=redirect_url,
        )


class ComboLookupError(KnownError):
    """Non-success response from the combo database."""

    def __init__(self, status_code: int | None, body: str):
        self.status_code = status_code
        status = status_code if status_code is not None else "network error"
        super().__init__(
            kind=FailureKind.UPSTREAM_ERROR,
            message=f"API error ({status}): {body[:100]}",
        )


class SynergyLookupError(KnownError):
    """Non-success response from the synergy database."""

    def __init__(self, commander_name: str, status_code: int | None, detail: str | None = None):
        self.commander_name = commander_name
        self.status_code = status_code
        super().__init__(
            kind=FailureKind.UPSTREAM_ERROR,
            message=(
                f"Failed to load EDHREC data for {commander_name}. "
                "Commander name may not match EDHREC's format."
            ),
            detail=detail,
        )


class InvalidOperationError(KnownError):
    """A controller operation was called with arguments that break a model invariant."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(kind=FailureKind.INVALID_INPUT, message=message, detail=detail)


class DeckNotFoundError(KnownError):
    """The referenced deck does not exist."""

    def __init__(self, deck_id: str):
        self.deck_id = deck_id
        super().__init__(kind=FailureKind.NOT_FOUND, message=f"Deck not found: {deck_id}")
