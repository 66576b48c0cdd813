"""Browser session helpers.

Browser sessions are signed cookies managed by Starlette's
``SessionMiddleware`` (itsdangerous signatures keyed by ``SECRET_KEY``). This
module is the only place that knows which keys live in the cookie.
"""

from typing import Optional

from fastapi import Request

from src.utils.clock import utcnow

_USER_ID_KEY = "user_id"
_ISSUED_AT_KEY = "issued_at"
_OAUTH_STATE_KEY = "oauth_state"


def _session(request: Request) -> Optional[dict]:
    # Absent when SessionMiddleware is not installed.
    if "session" not in request.scope:
        return None
    return request.session


def read_browser_user_id(request: Request) -> Optional[int]:
    """User id stored in the browser session, or None."""
    session = _session(request)
    if not session:
        return None
    value = session.get(_USER_ID_KEY)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return None
    return value


def establish_browser_session(request: Request, user_id: int) -> None:
    """Start a fresh browser session for ``user_id``, dropping any previous state."""
    session = _session(request)
    if session is None:
        return
    session.clear()
    session[_USER_ID_KEY] = user_id
    session[_ISSUED_AT_KEY] = utcnow().isoformat()


def clear_browser_session(request: Request) -> None:
    session = _session(request)
    if session is not None:
        session.clear()


def store_oauth_state(request: Request, provider: str, state: str) -> None:
    """Remember the ``state`` sent to ``provider`` for the callback check."""
    session = _session(request)
    if session is None:
        return
    states = dict(session.get(_OAUTH_STATE_KEY) or {})
    states[provider] = state
    session[_OAUTH_STATE_KEY] = states


def pop_oauth_state(request: Request, provider: str) -> Optional[str]:
    """Return and forget the stored ``state`` for ``provider``."""
    session = _session(request)
    if session is None:
        return None
    states = dict(session.get(_OAUTH_STATE_KEY) or {})
    state = states.pop(provider, None)
    session[_OAUTH_STATE_KEY] = states
    return state
