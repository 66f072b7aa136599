"""OAuth2 refresh-token grant against the STACKIT token endpoint"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import requests

from ..utils.config import Config
from .exceptions import RefreshError
from .models import Credential

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenRefresher:
    """Exchanges a refresh token for a new access token.

    The refresher only talks to the token endpoint. Persisting the returned
    credential is left to the caller.
    """

    def __init__(
        self,
        token_url: str = Config.TOKEN_URL,
        client_id: str = Config.CLIENT_ID,
        timeout: float = Config.REFRESH_TIMEOUT,
        session: Optional[requests.Session] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize token refresher

        Args:
            token_url: OAuth2 token endpoint
            client_id: Public client ID the CLI logs in with
            timeout: Request timeout in seconds
            session: HTTP session to use (a new one per refresh when None)
            clock: Returns the current UTC time, used to compute the new expiry
        """
        self.token_url = token_url
        self.client_id = client_id
        self.timeout = timeout
        self.session = session
        self.clock = clock

    def refresh(self, credential: Credential) -> Credential:
        """
        Refresh the access token of a credential

        Args:
            credential: Credential holding the refresh token

        Returns:
            Copy of the credential with the new tokens and expiry

        Raises:
            RefreshError: If the request fails or the endpoint rejects the refresh token
        """
        if not credential.refresh_token:
            raise RefreshError(f"refresh token is empty. {Config.LOGIN_HINT}")

        data = {
            'grant_type': 'refresh_token',
            'refresh_token': credential.refresh_token,
            'client_id': self.client_id,
        }

        logger.info(f"Refreshing access token for {credential.email}...")
        session = self.session or requests.Session()
        try:
            response = session.post(
                self.token_url,
                data=data,
                headers={'Accept': 'application/json'},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise RefreshError(f"token refresh request failed: {e}") from e
        finally:
            if self.session is None:
                session.close()

        if not 200 <= response.status_code < 300:
            raise RefreshError(
                f"token refresh failed with status {response.status_code}: {response.text}. "
                f"{Config.LOGIN_HINT}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            tokens = response.json()
        except ValueError as e:
            raise RefreshError(
                f"decode token response: {e}",
                status_code=response.status_code,
                body=response.text,
            ) from e

        if not isinstance(tokens, dict) or not tokens.get('access_token'):
            raise RefreshError(
                "token response did not contain an access_token",
                status_code=response.status_code,
                body=response.text,
            )

        expires_at = None
        expires_in = tokens.get('expires_in')
        if isinstance(expires_in, (int, float)) and not isinstance(expires_in, bool) and expires_in > 0:
            expires_at = self.clock() + timedelta(seconds=expires_in)

        # The endpoint may or may not rotate the refresh token
        refreshed = credential.with_refreshed_tokens(
            access_token=tokens['access_token'],
            refresh_token=tokens.get('refresh_token') or None,
            expires_at=expires_at,
        )
        logger.info(f"Token refresh successful. Expires in: {expires_in or 'unknown'}s")
        return refreshed
