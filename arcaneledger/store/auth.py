"""
Bearer token acquisition for spreadsheet writes.

Two-phase implicit-grant flow:

1. request_token() returns a cached, unexpired token. Otherwise it marks a
   save as pending, hands the authorization URL to the navigator and raises
   AuthorizationRequired. The save that asked for the token is abandoned.
2. consume_fragment() reads access_token / expires_in from the URL fragment
   the authorization service redirects back with and caches the token.
   take_pending_save() then tells the caller whether exactly one save should
   be replayed.

Tokens are never refreshed ahead of expiry.
"""

import logging
import time
from collections.abc import Callable
from urllib.parse import parse_qs, urlencode

from arcaneledger.config import Settings
from arcaneledger.models.failure import AuthorizationRequired

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIFETIME = 3600


class TokenCache:
    """Session-scoped bearer token with an expiry timestamp."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._token: str | None = None
        self._expires_at: float | None = None

    @property
    def expires_at(self) -> float | None:
        return self._expires_at

    def get(self) -> str | None:
        """Cached token, or None if absent or expired (an expired token is dropped)."""
        if self._token is None or self._expires_at is None:
            return None
        if self._clock() > self._expires_at:
            logger.info("Cached token expired")
            self.clear()
            return None
        return self._token

    def set(self, token: str, expires_in: int = DEFAULT_TOKEN_LIFETIME) -> None:
        """Cache a token valid for expires_in seconds from now."""
        self._token = token
        self._expires_at = self._clock() + expires_in

    def clear(self) -> None:
        self._token = None
        self._expires_at = None


def parse_fragment(
    fragment: str, default_lifetime: int = DEFAULT_TOKEN_LIFETIME
) -> tuple[str, int] | None:
    """
    Read the token and its lifetime from a redirect fragment.

    Args:
        fragment: URL fragment with or without the leading "#"

    Returns:
        (token, expires_in) or None when the fragment carries no token.
        A missing or non-integer expires_in becomes default_lifetime.
    """
    params = parse_qs(fragment.lstrip("#"))
    tokens = params.get("access_token")
    if not tokens or not tokens[0]:
        return None
    try:
        expires_in = int(params.get("expires_in", [""])[0])
    except ValueError:
        expires_in = default_lifetime
    return tokens[0], expires_in or default_lifetime


class AuthorizationFlow:
    """
    Redirect-based token acquisition with an explicit pending-save marker.

    The marker lives on this object. A host that builds a new flow after the
    redirect returns (a new process, for example) passes the stored marker
    back in as pending_save.
    """

    def __init__(
        self,
        settings: Settings,
        cache: TokenCache | None = None,
        navigate: Callable[[str], None] | None = None,
        pending_save: bool = False,
    ) -> None:
        self._settings = settings
        self.cache = cache or TokenCache()
        self._navigate = navigate
        self._pending_save = pending_save

    @property
    def pending_save(self) -> bool:
        return self._pending_save

    def authorization_url(self) -> str:
        params = {
            "client_id": self._settings.client_id,
            "redirect_uri": self._settings.redirect_uri,
            "response_type": "token",
            "scope": self._settings.auth_scope,
            "include_granted_scopes": "true",
        }
        return f"{self._settings.auth_url}?{urlencode(params)}"

    def request_token(self) -> str:
        """
        Phase 1: return a valid cached token or start the redirect.

        Raises:
            AuthorizationRequired: After the redirect has been issued
        """
        token = self.cache.get()
        if token:
            return token

        url = self.authorization_url()
        self._pending_save = True
        logger.info("No valid token, redirecting to authorization service")
        if self._navigate is not None:
            self._navigate(url)
        raise AuthorizationRequired(url)

    def consume_fragment(self, fragment: str | None) -> str | None:
        """
        Phase 2: cache the token carried by a redirect fragment.

        Returns:
            The token, or None if the fragment has none
        """
        if not fragment:
            return None
        parsed = parse_fragment(fragment, self._settings.token_lifetime_seconds)
        if parsed is None:
            return None
        token, expires_in = parsed
        self.cache.set(token, expires_in)
        logger.info("Stored token from redirect, valid for %ds", expires_in)
        return token

    def take_pending_save(self) -> bool:
        """Return and clear the pending-save marker."""
        pending = self._pending_save
        self._pending_save = False
        return pending
