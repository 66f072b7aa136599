"""requests integration for consumers calling STACKIT APIs with CLI credentials"""
import logging
from typing import Optional

import requests
from requests.auth import AuthBase

from ..auth.resolver import CredentialResolver

logger = logging.getLogger(__name__)


class CredentialAuth(AuthBase):
    """Attaches a CLI access token to every request.

    The token is resolved per request, so long-running consumers pick up
    refreshed tokens without rebuilding their session.
    """

    def __init__(self, resolver: CredentialResolver, profile: Optional[str] = None):
        self.resolver = resolver
        self.profile = profile

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        access_token = self.resolver.resolve(self.profile)
        request.headers['Authorization'] = f'Bearer {access_token}'
        return request


def build_session(resolver: Optional[CredentialResolver] = None,
                  profile: Optional[str] = None) -> requests.Session:
    """
    Create an HTTP session authenticated with CLI provider credentials

    Args:
        resolver: Credential resolver (a default one when None)
        profile: Profile to use instead of the configured one

    Returns:
        requests.Session whose requests carry a valid bearer token
    """
    session = requests.Session()
    session.auth = CredentialAuth(resolver or CredentialResolver(), profile)
    logger.debug(f"Created session using CLI credentials (profile override: {profile})")
    return session
