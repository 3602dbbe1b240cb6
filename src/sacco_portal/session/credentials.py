"""
Credential persistence across two mutually exclusive backends.

A login with "remember me" stores tokens in the durable backend, which
survives restarts; otherwise they go to the volatile backend, which only
lives as long as the terminal session. Whichever backend is written, the
other one is cleared first so a stale token never outlives a change of
preference.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from sacco_portal.logger import get_logger

logger = get_logger(__name__)

ACCESS_TOKEN_KEY = "accessToken"
REFRESH_TOKEN_KEY = "refreshToken"
TOKEN_KEYS = (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY)


class CredentialBackend(ABC):
    """Key-value storage for token strings."""

    name: str = "backend"

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass


class MemoryCredentialBackend(CredentialBackend):
    """Process-scoped backend. Contents vanish with the process."""

    def __init__(self, name: str = "memory"):
        self.name = name
        self._items: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._items.get(key)

    def set(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class FileCredentialBackend(CredentialBackend):
    """JSON file backend. The file is removed once it holds no keys."""

    def __init__(self, path: Path, name: str = "file"):
        self.path = Path(path)
        self.name = name

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
            logger.warning(f"Ignoring unreadable credential file {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, data: dict[str, str]) -> None:
        if not data:
            self.path.unlink(missing_ok=True)
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Owner-only from creation; the mode argument is ignored for existing files.
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(json.dumps(data))
        try:
            os.chmod(self.path, 0o600)
        except OSError:
            pass

    def get(self, key: str) -> str | None:
        value = self._load().get(key)
        return value if isinstance(value, str) and value else None

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def remove(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)


def terminal_session_id() -> int:
    """Identifier of the current terminal session (falls back to the parent pid)."""
    getsid = getattr(os, "getsid", None)
    if getsid is not None:
        try:
            return getsid(0)
        except OSError:
            pass
    return os.getppid()


def volatile_credentials_path() -> Path:
    """Per-terminal-session credential file under the system temp directory."""
    return (
        Path(tempfile.gettempdir())
        / "sacco_portal"
        / f"session-{terminal_session_id()}.json"
    )


@dataclass(frozen=True)
class StoredCredentials:
    """Tokens found in storage and where they came from."""

    access_token: str
    refresh_token: str | None
    durable: bool


class CredentialStore:
    """
    Reads and writes tokens across the durable and volatile backends.

    Only session state operations (login, logout, refresh) write here.
    """

    def __init__(self, durable: CredentialBackend, volatile: CredentialBackend):
        self.durable = durable
        self.volatile = volatile

    def write(self, access_token: str, refresh_token: str, durable: bool) -> None:
        """
        Persist both tokens to one backend after clearing the other.

        Args:
            access_token: Bearer credential.
            refresh_token: Credential used to mint new access tokens.
            durable: True for the durable backend, False for the volatile one.
        """
        target, other = (
            (self.durable, self.volatile) if durable else (self.volatile, self.durable)
        )
        for key in TOKEN_KEYS:
            other.remove(key)
        target.set(ACCESS_TOKEN_KEY, access_token)
        target.set(REFRESH_TOKEN_KEY, refresh_token)
        logger.debug(f"Stored credentials in {target.name} backend")

    def read(self) -> StoredCredentials | None:
        """Return tokens from the durable backend, else the volatile one."""
        for backend, durable in ((self.durable, True), (self.volatile, False)):
            access_token = backend.get(ACCESS_TOKEN_KEY)
            if access_token:
                return StoredCredentials(
                    access_token=access_token,
                    refresh_token=backend.get(REFRESH_TOKEN_KEY),
                    durable=durable,
                )
        return None

    def read_access_tokens(self) -> tuple[str | None, str | None]:
        """Raw (durable, volatile) access tokens, read independently."""
        return self.durable.get(ACCESS_TOKEN_KEY), self.volatile.get(ACCESS_TOKEN_KEY)

    def refresh_token_for(self, durable: bool) -> str | None:
        backend = self.durable if durable else self.volatile
        return backend.get(REFRESH_TOKEN_KEY)

    def clear(self) -> None:
        """Remove both token keys from both backends."""
        for backend in (self.durable, self.volatile):
            for key in TOKEN_KEYS:
                backend.remove(key)
        logger.debug("Cleared stored credentials")
