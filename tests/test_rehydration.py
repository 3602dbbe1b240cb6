"""
Tests for startup rehydration of the session from stored credentials.
"""

import httpx
import pytest

from sacco_portal.api.errors import TransportError, UnauthorizedError
from sacco_portal.models import Member
from sacco_portal.session import ANONYMOUS, CredentialStore, SessionState, rehydrate
from sacco_portal.session.credentials import (
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    MemoryCredentialBackend,
)

from conftest import MEMBER


class UnusedAuthenticator:
    async def login(self, identifier, secret):
        raise AssertionError("login should not be called during rehydration")

    async def refresh(self, refresh_token):
        raise AssertionError("refresh should not be called during rehydration")


class ProfileFetcher:
    """Records tokens it was called with and returns or raises a canned result."""

    def __init__(self, result):
        self.result = result
        self.tokens = []

    async def __call__(self, token):
        self.tokens.append(token)
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


@pytest.fixture
def store(durable, volatile):
    return CredentialStore(durable=durable, volatile=volatile)


@pytest.fixture
def state(store):
    return SessionState(store, UnusedAuthenticator())


class TestRehydrate:
    @pytest.mark.asyncio
    async def test_durable_token_restores_session(self, state, store, durable):
        durable.set(ACCESS_TOKEN_KEY, "AT1")
        durable.set(REFRESH_TOKEN_KEY, "RT1")
        fetch = ProfileFetcher(Member.model_validate(MEMBER))

        session = await rehydrate(state, store, fetch)

        assert fetch.tokens == ["AT1"]
        assert session.is_authenticated is True
        assert session.member.member_id == "MEM-1"
        assert session.access_token == "AT1"
        assert session.refresh_token == "RT1"
        assert session.remember_me is True

    @pytest.mark.asyncio
    async def test_volatile_token_means_session_only(self, state, store, volatile):
        volatile.set(ACCESS_TOKEN_KEY, "AT1")
        volatile.set(REFRESH_TOKEN_KEY, "RT1")

        session = await rehydrate(state, store, ProfileFetcher(Member.model_validate(MEMBER)))

        assert session.is_authenticated is True
        assert session.remember_me is False
        assert session.refresh_token == "RT1"

    @pytest.mark.asyncio
    async def test_expired_token_logs_out_quietly(self, state, store, durable, volatile):
        durable.set(ACCESS_TOKEN_KEY, "EXPIRED")
        durable.set(REFRESH_TOKEN_KEY, "RT1")
        fetch = ProfileFetcher(UnauthorizedError())

        session = await rehydrate(state, store, fetch)

        assert session == ANONYMOUS
        assert durable.get(ACCESS_TOKEN_KEY) is None
        assert durable.get(REFRESH_TOKEN_KEY) is None
        assert volatile.get(ACCESS_TOKEN_KEY) is None

    @pytest.mark.asyncio
    async def test_transport_failure_never_raises(self, state, store, durable):
        durable.set(ACCESS_TOKEN_KEY, "AT1")

        session = await rehydrate(state, store, ProfileFetcher(TransportError("Request timed out")))

        assert session == ANONYMOUS

    @pytest.mark.asyncio
    async def test_unexpected_failure_never_raises(self, state, store, durable):
        durable.set(ACCESS_TOKEN_KEY, "AT1")

        session = await rehydrate(state, store, ProfileFetcher(RuntimeError("bad payload")))

        assert session == ANONYMOUS

    @pytest.mark.asyncio
    async def test_no_tokens_stays_anonymous(self, state, store):
        fetch = ProfileFetcher(Member.model_validate(MEMBER))

        session = await rehydrate(state, store, fetch)

        assert session == ANONYMOUS
        assert fetch.tokens == []

    @pytest.mark.asyncio
    async def test_authenticated_without_token_is_reset(self, state, store):
        state.establish(Member.model_validate(MEMBER), "GONE", "RT", remember_me=True)
        fetch = ProfileFetcher(Member.model_validate(MEMBER))

        session = await rehydrate(state, store, fetch)

        assert session == ANONYMOUS
        assert fetch.tokens == []

    @pytest.mark.asyncio
    async def test_already_authenticated_with_token_is_noop(self, state, store):
        store.write("AT1", "RT1", durable=True)
        state.establish(Member.model_validate(MEMBER), "AT1", "RT1", remember_me=True)
        before = state.current
        fetch = ProfileFetcher(Member.model_validate(MEMBER))

        session = await rehydrate(state, store, fetch)

        assert session is before
        assert fetch.tokens == []

    @pytest.mark.asyncio
    async def test_idempotent(self, state, store, durable):
        durable.set(ACCESS_TOKEN_KEY, "AT1")
        durable.set(REFRESH_TOKEN_KEY, "RT1")
        fetch = ProfileFetcher(Member.model_validate(MEMBER))

        first = await rehydrate(state, store, fetch)
        second = await rehydrate(state, store, fetch)

        assert first == second
        assert fetch.tokens == ["AT1"]

    @pytest.mark.asyncio
    async def test_idempotent_after_failure(self, state, store, durable):
        durable.set(ACCESS_TOKEN_KEY, "EXPIRED")
        fetch = ProfileFetcher(UnauthorizedError())

        first = await rehydrate(state, store, fetch)
        second = await rehydrate(state, store, fetch)

        assert first == second == ANONYMOUS
        assert fetch.tokens == ["EXPIRED"]


class ReadOnlyBackend(MemoryCredentialBackend):
    """Backend whose storage can be read but not modified."""

    def remove(self, key):
        raise OSError("read-only filesystem")


class TestRehydrateStorageFailures:
    @pytest.mark.asyncio
    async def test_unwritable_store_after_rejected_token(self, volatile):
        durable = ReadOnlyBackend("durable")
        durable._items[ACCESS_TOKEN_KEY] = "EXPIRED"
        store = CredentialStore(durable=durable, volatile=volatile)
        state = SessionState(store, UnusedAuthenticator())

        session = await rehydrate(state, store, ProfileFetcher(UnauthorizedError()))

        assert session == ANONYMOUS
        assert state.current == ANONYMOUS

    @pytest.mark.asyncio
    async def test_unwritable_store_without_token(self, durable):
        volatile = ReadOnlyBackend("volatile")
        store = CredentialStore(durable=durable, volatile=volatile)
        state = SessionState(store, UnusedAuthenticator())
        state.establish(Member.model_validate(MEMBER), "GONE", "RT", remember_me=False)

        session = await rehydrate(state, store, ProfileFetcher(Member.model_validate(MEMBER)))

        assert session == ANONYMOUS


class TestPortalStartup:
    @pytest.mark.asyncio
    async def test_expired_token_against_backend(self, backend, durable, make_portal):
        durable.set(ACCESS_TOKEN_KEY, "EXPIRED")
        backend.add("GET", "/client/me", status=401, json={"message": "Token expired"})
        portal = make_portal()

        session = await portal.startup()
        await portal.aclose()

        assert session.is_authenticated is False
        assert durable.get(ACCESS_TOKEN_KEY) is None
        # 401 is never retried
        assert len(backend.calls("GET", "/client/me")) == 1
        assert backend.requests[0].headers["Authorization"] == "Bearer EXPIRED"

    @pytest.mark.asyncio
    async def test_valid_token_against_backend(self, backend, volatile, make_portal):
        volatile.set(ACCESS_TOKEN_KEY, "AT1")
        volatile.set(REFRESH_TOKEN_KEY, "RT1")
        backend.add("GET", "/client/me", json={"member": MEMBER})
        portal = make_portal()

        session = await portal.startup()
        await portal.aclose()

        assert session.is_authenticated is True
        assert session.remember_me is False
        assert session.member.full_name == "Abebe Kebede Tadesse"

    @pytest.mark.asyncio
    async def test_unreachable_backend(self, durable, tmp_path, volatile, config):
        from sacco_portal.app import PortalApp

        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        durable.set(ACCESS_TOKEN_KEY, "AT1")
        portal = PortalApp(
            config=config,
            data_dir=tmp_path,
            durable=durable,
            volatile=volatile,
            transport=httpx.MockTransport(refuse),
        )

        session = await portal.startup()
        await portal.aclose()

        assert session.is_authenticated is False
