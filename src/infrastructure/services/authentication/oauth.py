"""OAuth provider client.

Performs the two-step authorization-code protocol against Google and GitHub
with Authlib's ``AsyncOAuth2Client`` (an ``httpx.AsyncClient``):

1. exchange the authorization code for a provider access token;
2. fetch the account profile with that token (GitHub also needs the
   ``/user/emails`` listing to find a verified address).

Every failure mode (non-success status, transport error, OAuth error
response or malformed JSON) is reported as ``OAuthExchangeFailedError``
tagged with the provider. Raw provider bodies are only logged, truncated,
at debug level.
"""

import secrets
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import httpx
from authlib.common.errors import AuthlibBaseError
from authlib.integrations.httpx_client import AsyncOAuth2Client
from structlog import get_logger
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.core.config.settings import settings
from src.core.exceptions import OAuthExchangeFailedError, ValidationError
from src.domain.value_objects.oauth_provider import Provider, ProviderProfile

logger = get_logger(__name__)

_MAX_LOGGED_BODY = 200


@dataclass(frozen=True)
class ProviderEndpoints:
    authorize_url: str
    token_url: str
    profile_url: str
    scope: str
    emails_url: Optional[str] = None


PROVIDER_ENDPOINTS: Dict[Provider, ProviderEndpoints] = {
    Provider.GOOGLE: ProviderEndpoints(
        authorize_url="https://accounts.google.com/o/oauth2/v2/auth",
        token_url="https://oauth2.googleapis.com/token",
        profile_url="https://www.googleapis.com/oauth2/v2/userinfo",
        scope="openid email profile",
    ),
    Provider.GITHUB: ProviderEndpoints(
        authorize_url="https://github.com/login/oauth/authorize",
        token_url="https://github.com/login/oauth/access_token",
        profile_url="https://api.github.com/user",
        emails_url="https://api.github.com/user/emails",
        scope="read:user user:email",
    ),
}


def _credentials(provider: Provider) -> Tuple[str, str]:
    if provider is Provider.GOOGLE:
        return settings.GOOGLE_CLIENT_ID, settings.GOOGLE_CLIENT_SECRET.get_secret_value()
    return settings.GITHUB_CLIENT_ID, settings.GITHUB_CLIENT_SECRET.get_secret_value()


class OAuthProviderClient:
    """
    Client for provider authorization URLs and authorization-code exchange.

    Attributes:
        transport (Optional[httpx.AsyncBaseTransport]): Custom transport, used
            by tests to stub provider endpoints.
        timeout (float): Per-request timeout in seconds.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None, timeout: Optional[float] = None):
        self.transport = transport
        self.timeout = timeout if timeout is not None else settings.OAUTH_HTTP_TIMEOUT_SECONDS

    def _client(self, provider: Provider, redirect_uri: str) -> AsyncOAuth2Client:
        client_id, client_secret = _credentials(provider)
        if not client_id or not client_secret:
            raise ValidationError(f"{provider.value} sign-in is not configured")
        kwargs: Dict[str, Any] = {"timeout": self.timeout}
        if self.transport is not None:
            kwargs["transport"] = self.transport
        return AsyncOAuth2Client(
            client_id=client_id,
            client_secret=client_secret,
            scope=PROVIDER_ENDPOINTS[provider].scope,
            redirect_uri=redirect_uri,
            token_endpoint_auth_method="client_secret_post",
            **kwargs,
        )

    def create_authorization_url(self, provider: Provider, redirect_uri: str) -> Tuple[str, str]:
        """
        Build the provider consent URL.

        Args:
            provider (Provider): Target provider.
            redirect_uri (str): Where the provider sends the user back.

        Returns:
            Tuple[str, str]: The authorization URL and the random ``state`` it embeds.
        """
        client = self._client(provider, redirect_uri)
        state = secrets.token_urlsafe(24)
        url, state = client.create_authorization_url(PROVIDER_ENDPOINTS[provider].authorize_url, state=state)
        return url, state

    async def exchange_authorization_code(self, provider: Provider, code: str, redirect_uri: str) -> ProviderProfile:
        """
        Exchange an authorization code for the provider profile.

        Args:
            provider (Provider): The provider that issued ``code``.
            code (str): Authorization code from the provider callback.
            redirect_uri (str): The redirect URI used for the authorization request.

        Returns:
            ProviderProfile: The validated profile, carrying the provider access token.

        Raises:
            OAuthExchangeFailedError: If any step fails.
            ValidationError: If the provider is not configured.
        """
        endpoints = PROVIDER_ENDPOINTS[provider]
        try:
            async with self._client(provider, redirect_uri) as client:
                token = await client.fetch_token(
                    endpoints.token_url,
                    code=code,
                    headers={"Accept": "application/json"},
                )
                access_token = token.get("access_token") if isinstance(token, dict) else None
                if not access_token:
                    raise ValueError("token response carries no access_token")

                user_payload = await self._get_json(client, endpoints.profile_url)
                if provider is Provider.GITHUB:
                    emails_payload = await self._get_json(client, endpoints.emails_url)
                    profile = ProviderProfile.from_github(user_payload, emails_payload, access_token=access_token)
                else:
                    profile = ProviderProfile.from_google(user_payload, access_token=access_token)
        except (AuthlibBaseError, httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            await logger.awarning(
                "OAuth exchange failed",
                provider=provider.value,
                error_type=type(e).__name__,
            )
            if isinstance(e, httpx.HTTPStatusError):
                await logger.adebug(
                    "OAuth provider error body",
                    provider=provider.value,
                    status=e.response.status_code,
                    body=e.response.text[:_MAX_LOGGED_BODY],
                )
            raise OAuthExchangeFailedError(provider.value) from e

        await logger.ainfo("OAuth exchange succeeded", provider=provider.value, email_verified=profile.email_verified)
        return profile

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.2, max=2),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _get_json(self, client: AsyncOAuth2Client, url: str) -> Any:
        """
        GET a provider resource with the access token, retrying transport errors.

        Raises:
            httpx.HTTPStatusError: On a non-success status.
            ValueError: If the body is not JSON.
        """
        response = await client.get(url, headers={"Accept": "application/json"})
        response.raise_for_status()
        return response.json()
