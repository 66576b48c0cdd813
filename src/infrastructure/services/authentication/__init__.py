"""Infrastructure Authentication Services.

Concrete adapters used by the authentication core:

- OAuth provider client: authorization URLs and authorization-code exchange
  for Google and GitHub.
- Browser session helpers: reading and writing the signed session cookie.
"""

from .browser_session import (
    clear_browser_session,
    establish_browser_session,
    pop_oauth_state,
    read_browser_user_id,
    store_oauth_state,
)
from .oauth import OAuthProviderClient

__all__ = [
    "OAuthProviderClient",
    "clear_browser_session",
    "establish_browser_session",
    "pop_oauth_state",
    "read_browser_user_id",
    "store_oauth_state",
]
