"""Entry point for consumers that need a valid CLI access token"""
import logging
import threading
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Dict, Optional

from ..utils.config import AuthEnvironment, Config
from .credential_store import CredentialStore
from .exceptions import AuthError
from .models import Credential
from .profile import ProfileResolver
from .token_refresher import TokenRefresher, utc_now

logger = logging.getLogger(__name__)


class _RefreshFlight:
    """A refresh in progress for one profile, shared by all waiting callers"""

    def __init__(self):
        self.done = threading.Event()
        self.credential: Optional[Credential] = None
        self.error: Optional[BaseException] = None


class CredentialResolver:
    """Resolves, refreshes and writes back CLI provider credentials.

    Safe to call from several threads. Concurrent callers that find the same
    profile's token expired share a single refresh.
    """

    def __init__(
        self,
        environment: Optional[AuthEnvironment] = None,
        store: Optional[CredentialStore] = None,
        refresher: Optional[TokenRefresher] = None,
        profile_resolver: Optional[ProfileResolver] = None,
        clock: Callable[[], datetime] = utc_now,
        refresh_margin: timedelta = Config.REFRESH_MARGIN,
    ):
        if environment is None:
            environment = AuthEnvironment.from_os()
        self.store = store or CredentialStore(environment)
        self.refresher = refresher or TokenRefresher()
        self.profile_resolver = profile_resolver or ProfileResolver(environment)
        self.clock = clock
        self.refresh_margin = refresh_margin

        self._flights_lock = threading.Lock()
        self._flights: Dict[str, _RefreshFlight] = {}

    def resolve(self, profile_override: Optional[str] = None) -> str:
        """
        Get a valid access token, refreshing if necessary

        Args:
            profile_override: Profile to use instead of the configured one

        Returns:
            Valid access token

        Raises:
            AuthError: If no credential can be read, refreshed or persisted
        """
        return self.get_credential(profile_override).access_token

    def get_credential(self, profile_override: Optional[str] = None) -> Credential:
        """Same as resolve(), returning the whole credential"""
        profile = self.profile_resolver.resolve(profile_override)
        credential = self.store.read(profile)

        if not self._is_expired(credential):
            return credential

        logger.info(f"Access token for profile '{profile}' is expired or about to expire")
        return self._refresh_once(profile)

    def is_authenticated(self, profile_override: Optional[str] = None) -> bool:
        """Check if a valid (or refreshable) credential is available"""
        try:
            self.resolve(profile_override)
        except AuthError as e:
            logger.debug(f"Not authenticated: {e}")
            return False
        return True

    def _is_expired(self, credential: Credential) -> bool:
        return credential.is_expired(now=self.clock(), margin=self.refresh_margin)

    def _refresh_once(self, profile: str) -> Credential:
        with self._flights_lock:
            flight = self._flights.get(profile)
            leader = flight is None
            if leader:
                flight = _RefreshFlight()
                self._flights[profile] = flight

        if not leader:
            logger.debug(f"Waiting for refresh of profile '{profile}' already in progress")
            flight.done.wait()
            if flight.error is not None:
                raise flight.error
            return flight.credential

        try:
            flight.credential = self._refresh_and_store(profile)
            return flight.credential
        except BaseException as e:
            flight.error = e
            raise
        finally:
            with self._flights_lock:
                del self._flights[profile]
            flight.done.set()

    def _refresh_and_store(self, profile: str) -> Credential:
        # Double-check: another caller may have refreshed before this flight started
        credential = self.store.read(profile)
        if not self._is_expired(credential):
            return credential

        refreshed = self.refresher.refresh(credential)
        location = self.store.write(profile, refreshed, prefer=credential.storage_location)
        if credential.storage_location is not None and location != credential.storage_location:
            logger.warning(
                f"Refreshed credentials for profile '{profile}' were stored in "
                f"{location.value} instead of {credential.storage_location.value}"
            )
        return replace(refreshed, storage_location=location)
