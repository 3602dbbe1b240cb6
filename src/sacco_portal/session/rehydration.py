"""
Startup reconciliation of persisted credentials with the in-memory session.

An expired token at startup is routine, so every failure here ends in a
quiet logout instead of an error.
"""

from typing import Awaitable, Callable

from sacco_portal.logger import get_logger
from sacco_portal.models import Member
from sacco_portal.session.credentials import CredentialStore
from sacco_portal.session.state import Session, SessionState

logger = get_logger(__name__)

ProfileFetcher = Callable[[str], Awaitable[Member]]


def _reset(state: SessionState) -> None:
    try:
        state.logout()
    except OSError as e:
        logger.debug(f"Could not clear stored credentials: {e}")
        state.discard()


async def rehydrate(
    state: SessionState, store: CredentialStore, fetch_profile: ProfileFetcher
) -> Session:
    """
    Validate stored tokens and populate the session. Safe to call repeatedly.

    Args:
        state: Session to reconcile.
        store: Credential store to read tokens from.
        fetch_profile: Calls the profile endpoint with the given bearer token.

    Returns:
        The resulting session snapshot. Never raises.
    """
    durable_token, volatile_token = store.read_access_tokens()
    token = durable_token or volatile_token

    if not token:
        if state.is_authenticated:
            logger.debug("Session claimed authentication without a stored token; resetting")
            _reset(state)
        return state.current

    if state.is_authenticated:
        return state.current

    try:
        member = await fetch_profile(token)
    except Exception:
        _reset(state)
        return state.current

    durable = token == durable_token
    state.establish(
        member=member,
        access_token=token,
        refresh_token=store.refresh_token_for(durable),
        remember_me=durable,
    )
    logger.debug(f"Rehydrated session from {'durable' if durable else 'volatile'} backend")
    return state.current
