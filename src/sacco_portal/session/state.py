"""
In-memory session state for the logged-in member.

SessionState is the single source of truth for authentication status. It is
created unauthenticated by the application root and handed to whatever needs
it; observers subscribe to be told about every change.
"""

from dataclasses import dataclass, replace
from typing import Any, Callable, Optional, Protocol

from pydantic import ValidationError

from sacco_portal.api.errors import SessionError
from sacco_portal.logger import get_logger
from sacco_portal.models import AuthResponse, Member, TokenPair
from sacco_portal.session.credentials import CredentialStore, StoredCredentials

logger = get_logger(__name__)


@dataclass(frozen=True)
class Session:
    """Immutable snapshot of the session. Replaced wholesale on every change."""

    is_authenticated: bool = False
    member: Optional[Member] = None
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    remember_me: bool = True

    def to_record(self) -> dict[str, Any]:
        """Non-token metadata persisted between runs."""
        return {
            "isAuthenticated": self.is_authenticated,
            "member": self.member.model_dump(mode="json") if self.member else None,
            "rememberMe": self.remember_me,
        }


ANONYMOUS = Session()

SessionListener = Callable[[Session], None]


class Authenticator(Protocol):
    """Backend calls the session needs: login and token refresh."""

    async def login(self, identifier: str, secret: str) -> AuthResponse: ...

    async def refresh(self, refresh_token: str) -> TokenPair: ...


class SessionState:
    """Observable session with login/logout/refresh operations."""

    def __init__(self, store: CredentialStore, authenticator: Authenticator):
        self._store = store
        self._authenticator = authenticator
        self._session = ANONYMOUS
        self._listeners: list[SessionListener] = []

    # ─── Observation ─────────────────────────────────────────────────

    @property
    def current(self) -> Session:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        return self._session.is_authenticated

    @property
    def member(self) -> Optional[Member]:
        return self._session.member

    @property
    def access_token(self) -> Optional[str]:
        return self._session.access_token

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a listener called with the new snapshot after each change.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, session: Session) -> None:
        self._session = session
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception as e:
                logger.warning(f"Session listener {listener!r} failed: {e}")

    # ─── Operations ──────────────────────────────────────────────────

    async def login(self, identifier: str, secret: str, remember_me: bool = True) -> None:
        """
        Authenticate against the backend and persist the issued tokens.

        On any failure the stored credentials are cleared, the session is
        reset and the backend error is re-raised for the caller to display.
        """
        try:
            response = await self._authenticator.login(identifier, secret)
            self._store.write(
                response.access_token, response.refresh_token, durable=remember_me
            )
        except Exception:
            self._store.clear()
            self._set(ANONYMOUS)
            raise

        self._set(
            Session(
                is_authenticated=True,
                member=response.member,
                access_token=response.access_token,
                refresh_token=response.refresh_token,
                remember_me=remember_me,
            )
        )
        logger.info(f"Member {response.member.member_id or response.member.id} logged in")

    def logout(self) -> None:
        """Forget all credentials and return to the anonymous state."""
        self._store.clear()
        self._set(ANONYMOUS)

    def discard(self) -> None:
        """Return to the anonymous state without touching stored credentials."""
        self._set(ANONYMOUS)

    def update_member(self, partial: dict[str, Any]) -> None:
        """Merge profile fields into the current member; no-op when anonymous."""
        member = self._session.member
        if member is None:
            return
        merged = Member.model_validate(
            {**member.model_dump(), **Member.to_field_names(partial)}
        )
        self._set(replace(self._session, member=merged))

    async def refresh_auth(self) -> None:
        """
        Exchange the refresh token for a new token pair.

        Raises:
            SessionError: If no refresh token is held (no backend call is made).
        On backend failure the session is logged out before the error propagates.
        """
        refresh_token = self._session.refresh_token
        if not refresh_token:
            raise SessionError("No refresh token available")

        try:
            tokens = await self._authenticator.refresh(refresh_token)
            self._store.write(
                tokens.access_token,
                tokens.refresh_token,
                durable=self._session.remember_me,
            )
        except Exception:
            self.logout()
            raise

        self._set(
            replace(
                self._session,
                access_token=tokens.access_token,
                refresh_token=tokens.refresh_token,
            )
        )
        logger.debug("Access token refreshed")

    # ─── Boot-time helpers ───────────────────────────────────────────

    def establish(
        self,
        member: Member,
        access_token: str,
        refresh_token: Optional[str],
        remember_me: bool,
    ) -> None:
        """Adopt credentials that were validated against the backend."""
        self._set(
            Session(
                is_authenticated=True,
                member=member,
                access_token=access_token,
                refresh_token=refresh_token,
                remember_me=remember_me,
            )
        )

    def restore(
        self,
        record: Optional[dict[str, Any]],
        credentials: Optional[StoredCredentials],
    ) -> None:
        """
        Seed the session from the persisted metadata record and stored tokens.

        The result is not validated here; rehydration reconciles it.
        """
        record = record or {}
        member = None
        if record.get("member"):
            try:
                member = Member.model_validate(record["member"])
            except ValidationError as e:
                logger.warning(f"Discarding unreadable member snapshot: {e}")

        if credentials is not None:
            remember_me = credentials.durable
        else:
            remember_me = bool(record.get("rememberMe", True))

        self._set(
            Session(
                is_authenticated=bool(record.get("isAuthenticated")) and member is not None,
                member=member,
                access_token=credentials.access_token if credentials else None,
                refresh_token=credentials.refresh_token if credentials else None,
                remember_me=remember_me,
            )
        )
