"""
Unit tests for SessionState: login, logout, member updates and refresh.
"""

import pytest

from sacco_portal.api.errors import RequestFailedError, SessionError, TransportError
from sacco_portal.models import AuthResponse, Member, TokenPair
from sacco_portal.session import ANONYMOUS, CredentialStore, SessionState
from sacco_portal.session.credentials import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY
from sacco_portal.session.credentials import StoredCredentials

from conftest import MEMBER


class FakeAuthenticator:
    """Authenticator returning canned results and counting calls."""

    def __init__(self, login_result=None, refresh_result=None):
        self.login_result = login_result
        self.refresh_result = refresh_result
        self.login_calls = []
        self.refresh_calls = []

    async def login(self, identifier, secret):
        self.login_calls.append((identifier, secret))
        if isinstance(self.login_result, Exception):
            raise self.login_result
        return self.login_result

    async def refresh(self, refresh_token):
        self.refresh_calls.append(refresh_token)
        if isinstance(self.refresh_result, Exception):
            raise self.refresh_result
        return self.refresh_result


def auth_response(access="AT1", refresh="RT1", member=None):
    return AuthResponse.model_validate(
        {
            "accessToken": access,
            "refreshToken": refresh,
            "member": member or {"id": "1", "member_id": "MEM-1"},
        }
    )


@pytest.fixture
def store(durable, volatile):
    return CredentialStore(durable=durable, volatile=volatile)


def no_tokens(*backends):
    return all(
        b.get(ACCESS_TOKEN_KEY) is None and b.get(REFRESH_TOKEN_KEY) is None
        for b in backends
    )


class TestLogin:
    @pytest.mark.asyncio
    async def test_login_remember_me(self, store, durable, volatile):
        auth = FakeAuthenticator(login_result=auth_response())
        state = SessionState(store, auth)

        await state.login("+251911234567", "password123", True)

        session = state.current
        assert session.is_authenticated is True
        assert session.member.id == "1"
        assert session.access_token == "AT1"
        assert session.refresh_token == "RT1"
        assert session.remember_me is True
        assert durable.get(ACCESS_TOKEN_KEY) == "AT1"
        assert no_tokens(volatile)
        assert auth.login_calls == [("+251911234567", "password123")]

    @pytest.mark.asyncio
    async def test_login_session_only(self, store, durable, volatile):
        state = SessionState(store, FakeAuthenticator(login_result=auth_response()))

        await state.login("+251911234567", "password123", remember_me=False)

        assert state.current.remember_me is False
        assert volatile.get(ACCESS_TOKEN_KEY) == "AT1"
        assert no_tokens(durable)

    @pytest.mark.asyncio
    async def test_login_defaults_to_remember(self, store, durable):
        state = SessionState(store, FakeAuthenticator(login_result=auth_response()))
        await state.login("+251911234567", "password123")
        assert state.current.remember_me is True
        assert durable.get(ACCESS_TOKEN_KEY) == "AT1"

    @pytest.mark.asyncio
    async def test_login_failure_rolls_back(self, store, durable, volatile):
        durable.set(ACCESS_TOKEN_KEY, "STALE")
        error = RequestFailedError("Invalid credentials", 401)
        state = SessionState(store, FakeAuthenticator(login_result=error))

        with pytest.raises(RequestFailedError) as exc_info:
            await state.login("+251911234567", "wrong-password")

        assert exc_info.value is error
        assert exc_info.value.silent is False
        assert state.current == ANONYMOUS
        assert no_tokens(durable, volatile)

    @pytest.mark.asyncio
    async def test_login_after_failed_login_in_other_backend(self, store, durable, volatile):
        state = SessionState(store, FakeAuthenticator(login_result=auth_response()))
        await state.login("+251911234567", "password123", remember_me=False)

        state._authenticator.login_result = auth_response(access="AT2", refresh="RT2")
        await state.login("+251911234567", "password123", remember_me=True)

        assert durable.get(ACCESS_TOKEN_KEY) == "AT2"
        assert no_tokens(volatile)


class TestLogout:
    @pytest.mark.asyncio
    async def test_logout_clears_everything(self, store, durable, volatile):
        state = SessionState(store, FakeAuthenticator(login_result=auth_response()))
        await state.login("+251911234567", "password123", remember_me=False)

        state.logout()

        session = state.current
        assert session.is_authenticated is False
        assert session.member is None
        assert session.access_token is None
        assert session.refresh_token is None
        assert session.remember_me is True
        assert no_tokens(durable, volatile)

    def test_logout_when_anonymous(self, store):
        state = SessionState(store, FakeAuthenticator())
        state.logout()
        assert state.current == ANONYMOUS


class TestUpdateMember:
    def test_noop_when_anonymous(self, store):
        state = SessionState(store, FakeAuthenticator())
        seen = []
        state.subscribe(seen.append)

        state.update_member({"first_name": "Someone"})

        assert state.current == ANONYMOUS
        assert state.member is None
        assert seen == []

    @pytest.mark.asyncio
    async def test_merges_into_member(self, store):
        state = SessionState(
            store, FakeAuthenticator(login_result=auth_response(member=MEMBER))
        )
        await state.login("+251911234567", "password123")

        state.update_member({"email": "new@example.com", "address": "Bole"})

        member = state.member
        assert member.email == "new@example.com"
        assert member.address == "Bole"
        assert member.first_name == "Abebe"
        assert state.access_token == "AT1"
        assert state.is_authenticated is True

    @pytest.mark.asyncio
    async def test_alias_keys_override_current_value(self, store):
        state = SessionState(
            store, FakeAuthenticator(login_result=auth_response(member=MEMBER))
        )
        await state.login("+251911234567", "password123")

        state.update_member({"phone_primary": "+251922000000"})

        assert state.member.phone == "+251922000000"
        assert "phone_primary" not in state.member.model_dump()


class TestRefreshAuth:
    @pytest.mark.asyncio
    async def test_no_refresh_token(self, store):
        auth = FakeAuthenticator()
        state = SessionState(store, auth)

        with pytest.raises(SessionError, match="No refresh token available"):
            await state.refresh_auth()

        assert auth.refresh_calls == []
        assert state.current == ANONYMOUS

    @pytest.mark.asyncio
    async def test_refresh_updates_tokens_only(self, store, durable, volatile):
        auth = FakeAuthenticator(
            login_result=auth_response(member=MEMBER),
            refresh_result=TokenPair.model_validate(
                {"accessToken": "AT2", "refreshToken": "RT2"}
            ),
        )
        state = SessionState(store, auth)
        await state.login("+251911234567", "password123", remember_me=False)
        before = state.current

        await state.refresh_auth()

        after = state.current
        assert auth.refresh_calls == ["RT1"]
        assert after.access_token == "AT2"
        assert after.refresh_token == "RT2"
        assert after.member == before.member
        assert after.is_authenticated is before.is_authenticated
        assert after.remember_me is False
        assert volatile.get(ACCESS_TOKEN_KEY) == "AT2"
        assert no_tokens(durable)

    @pytest.mark.asyncio
    async def test_refresh_failure_logs_out_before_raising(self, store, durable):
        auth = FakeAuthenticator(
            login_result=auth_response(),
            refresh_result=TransportError("Request timed out"),
        )
        state = SessionState(store, auth)
        await state.login("+251911234567", "password123")

        observed = {}
        try:
            await state.refresh_auth()
        except TransportError:
            observed["session"] = state.current

        assert observed["session"] == ANONYMOUS
        assert durable.get(ACCESS_TOKEN_KEY) is None


class TestObservers:
    @pytest.mark.asyncio
    async def test_listeners_see_each_change(self, store):
        state = SessionState(store, FakeAuthenticator(login_result=auth_response()))
        seen = []
        unsubscribe = state.subscribe(seen.append)

        await state.login("+251911234567", "password123")
        state.logout()
        unsubscribe()
        state.logout()

        assert [s.is_authenticated for s in seen] == [True, False]

    def test_failing_listener_does_not_block_others(self, store):
        state = SessionState(store, FakeAuthenticator())
        seen = []

        def broken(_session):
            raise RuntimeError("boom")

        state.subscribe(broken)
        state.subscribe(seen.append)
        state.logout()

        assert len(seen) == 1


class TestRestore:
    def test_restore_with_tokens(self, store):
        state = SessionState(store, FakeAuthenticator())
        state.restore(
            {"isAuthenticated": True, "member": MEMBER, "rememberMe": True},
            StoredCredentials("AT1", "RT1", durable=False),
        )
        session = state.current
        assert session.is_authenticated is True
        assert session.member.member_id == "MEM-1"
        assert session.access_token == "AT1"
        assert session.remember_me is False

    def test_restore_without_member_is_anonymous(self, store):
        state = SessionState(store, FakeAuthenticator())
        state.restore({"isAuthenticated": True, "member": None}, None)
        assert state.is_authenticated is False

    def test_restore_nothing(self, store):
        state = SessionState(store, FakeAuthenticator())
        state.restore(None, None)
        assert state.current == ANONYMOUS

    def test_member_model_round_trip(self):
        member = Member.model_validate(MEMBER)
        assert member.full_name == "Abebe Kebede Tadesse"
