"""
Session management for the SACCO portal.

- credentials: durable/volatile token storage
- state: observable session and its login/logout/refresh operations
- rehydration: startup validation of stored tokens
- records: non-token metadata persisted between runs
"""

from sacco_portal.session.credentials import (
    CredentialBackend,
    CredentialStore,
    FileCredentialBackend,
    MemoryCredentialBackend,
    StoredCredentials,
)
from sacco_portal.session.rehydration import rehydrate
from sacco_portal.session.state import ANONYMOUS, Session, SessionState

__all__ = [
    "ANONYMOUS",
    "CredentialBackend",
    "CredentialStore",
    "FileCredentialBackend",
    "MemoryCredentialBackend",
    "Session",
    "SessionState",
    "StoredCredentials",
    "rehydrate",
]
