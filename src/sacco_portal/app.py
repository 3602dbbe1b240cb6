"""
Application root for the SACCO portal client.

PortalApp owns the session, the credential store, the metadata record and
the API client, and wires them together. Create one per process (or per
test), call ``startup()`` before anything that needs the member to be logged
in, and ``aclose()`` when done.
"""

from pathlib import Path
from typing import Optional

import httpx

from sacco_portal.api import ApiClient, AuthApi, MemberApi, PublicApi
from sacco_portal.config import CONFIG, DATA_DIR, Config
from sacco_portal.logger import get_logger
from sacco_portal.session import (
    CredentialBackend,
    CredentialStore,
    FileCredentialBackend,
    Session,
    SessionState,
    rehydrate,
)
from sacco_portal.session.credentials import volatile_credentials_path
from sacco_portal.session.records import PendingLoanRequest, SessionRecord

logger = get_logger(__name__)


class PortalApp:
    """Wires session state, storage and backend endpoints together."""

    def __init__(
        self,
        config: Optional[Config] = None,
        data_dir: Optional[Path] = None,
        durable: Optional[CredentialBackend] = None,
        volatile: Optional[CredentialBackend] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or CONFIG
        self.data_dir = Path(data_dir or DATA_DIR)

        self.store = CredentialStore(
            durable=durable
            or FileCredentialBackend(self.data_dir / "credentials.json", name="durable"),
            volatile=volatile
            or FileCredentialBackend(volatile_credentials_path(), name="volatile"),
        )
        self.record = SessionRecord(self.data_dir / "session.json")
        self.pending_loan_request = PendingLoanRequest(
            self.data_dir / "pending_loan_request.json"
        )

        self.client = ApiClient(
            self.config.api_base_url,
            token_provider=self._current_token,
            timeout=self.config.timeout,
            read_retries=self.config.read_retries,
            transport=transport,
        )
        self.auth = AuthApi(self.client)
        self.member = MemberApi(self.client)
        self.public = PublicApi(self.client)

        self.session = SessionState(self.store, self.auth)
        self.session.subscribe(self.record.write_session)
        self._started = False

    def _current_token(self) -> Optional[str]:
        return self.session.access_token

    async def startup(self) -> Session:
        """
        Restore persisted metadata and validate stored credentials.

        Never raises; an invalid or expired token leaves the session anonymous.
        """
        if not self._started:
            self.session.restore(self.record.load(), self.store.read())
            self._started = True
        return await rehydrate(
            self.session,
            self.store,
            lambda token: self.auth.get_profile(token=token, quiet=True),
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> "PortalApp":
        await self.startup()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
