"""Tests for token caching and the redirect authorization flow."""

from urllib.parse import parse_qs, urlsplit

import pytest

from arcaneledger.models.failure import AuthorizationRequired
from arcaneledger.store.auth import AuthorizationFlow, TokenCache, parse_fragment


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestTokenCache:
    """Tests for the session token cache."""

    def test_returns_token_until_expiry(self) -> None:
        clock = FakeClock()
        cache = TokenCache(clock=clock)
        cache.set("tok", expires_in=60)

        clock.now += 59
        assert cache.get() == "tok"

        clock.now += 2
        assert cache.get() is None
        assert cache.expires_at is None

    def test_clear(self) -> None:
        cache = TokenCache()
        cache.set("tok")
        cache.clear()

        assert cache.get() is None


class TestParseFragment:
    """Tests for redirect fragment parsing."""

    def test_token_and_lifetime(self) -> None:
        assert parse_fragment("#access_token=abc&expires_in=120&token_type=Bearer") == (
            "abc",
            120,
        )

    def test_default_lifetime(self) -> None:
        assert parse_fragment("access_token=abc") == ("abc", 3600)
        assert parse_fragment("access_token=abc&expires_in=soon", 900) == ("abc", 900)

    def test_no_token(self) -> None:
        assert parse_fragment("#state=xyz") is None


class TestAuthorizationFlow:
    """Tests for the two-phase token flow."""

    def test_cached_token_returned(self, settings) -> None:
        flow = AuthorizationFlow(settings)
        flow.cache.set("tok")

        assert flow.request_token() == "tok"
        assert not flow.pending_save

    def test_redirect_marks_pending(self, settings) -> None:
        visited: list[str] = []
        flow = AuthorizationFlow(settings, navigate=visited.append)

        with pytest.raises(AuthorizationRequired) as exc_info:
            flow.request_token()

        assert flow.pending_save
        assert visited == [exc_info.value.redirect_url]
        query = parse_qs(urlsplit(visited[0]).query)
        assert query["client_id"] == ["client-id"]
        assert query["response_type"] == ["token"]
        assert query["scope"] == ["https://www.googleapis.com/auth/spreadsheets"]
        assert query["include_granted_scopes"] == ["true"]

    def test_consume_fragment_then_take_pending_once(self, settings) -> None:
        flow = AuthorizationFlow(settings)
        with pytest.raises(AuthorizationRequired):
            flow.request_token()

        assert flow.consume_fragment("#access_token=new&expires_in=3600") == "new"
        assert flow.request_token() == "new"
        assert flow.take_pending_save() is True
        assert flow.take_pending_save() is False

    def test_seeded_pending_marker(self, settings) -> None:
        flow = AuthorizationFlow(settings, pending_save=True)

        assert flow.pending_save
        assert flow.take_pending_save() is True
        assert not flow.pending_save

    def test_fragment_without_token_ignored(self, settings) -> None:
        flow = AuthorizationFlow(settings)

        assert flow.consume_fragment("#error=access_denied") is None
        assert flow.consume_fragment(None) is None
        assert flow.cache.get() is None
