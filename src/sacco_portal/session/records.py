"""
Durable JSON records kept next to the credentials.

- session.json: non-token session metadata (isAuthenticated, member, rememberMe)
- pending_loan_request.json: a loan request composed before logging in

Tokens are never written here; their lifetime is managed by the credential
store alone.
"""

import json
from pathlib import Path
from typing import Any, Optional

from sacco_portal.logger import get_logger
from sacco_portal.session.state import Session

logger = get_logger(__name__)


class JsonRecord:
    """A single JSON document on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> Optional[dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable record {self.path}: {e}")
            return None
        return data if isinstance(data, dict) else None

    def save(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(
            json.dumps(data, indent=2, ensure_ascii=False, default=str),
            encoding="utf-8",
        )

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class SessionRecord(JsonRecord):
    """Mirrors session metadata to disk after each change."""

    def write_session(self, session: Session) -> None:
        try:
            self.save(session.to_record())
        except OSError as e:
            logger.warning(f"Failed to persist session metadata to {self.path}: {e}")


class PendingLoanRequest(JsonRecord):
    """Loan request saved while anonymous, submitted after the next login."""
