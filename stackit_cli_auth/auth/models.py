"""Credential data types shared by the storage backends and the resolver"""
import enum
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from .exceptions import MalformedCredentialError

logger = logging.getLogger(__name__)

# Field names used by both the keyring entries and the file schema
ACCESS_TOKEN = "access_token"
REFRESH_TOKEN = "refresh_token"
USER_EMAIL = "user_email"
SESSION_EXPIRES_AT = "session_expires_at_unix"
AUTH_FLOW_TYPE = "auth_flow_type"

REQUIRED_FIELDS = (ACCESS_TOKEN, REFRESH_TOKEN, USER_EMAIL)
OPTIONAL_FIELDS = (SESSION_EXPIRES_AT, AUTH_FLOW_TYPE)


class StorageLocation(str, enum.Enum):
    """Backend that satisfied a read"""
    KEYRING = "keyring"
    FILE = "file"


@dataclass(frozen=True)
class Credential:
    """OAuth session created by the CLI login flow.

    ``source_profile`` and ``storage_location`` describe where the record was
    read from; they are never written to storage.
    """

    access_token: str
    refresh_token: str
    email: str
    expires_at: Optional[datetime] = None
    auth_flow_type: Optional[str] = None
    source_profile: str = ""
    storage_location: Optional[StorageLocation] = None

    def is_expired(self, now: Optional[datetime] = None,
                   margin: timedelta = timedelta(0)) -> bool:
        """Check if the access token expires within ``margin`` of ``now``.

        A credential without an expiry never counts as expired.
        """
        if self.expires_at is None:
            return False
        if now is None:
            now = datetime.now(timezone.utc)
        return now + margin >= self.expires_at

    def with_refreshed_tokens(self, access_token: str,
                              refresh_token: Optional[str],
                              expires_at: Optional[datetime]) -> "Credential":
        """Return a copy carrying the result of a refresh grant"""
        return replace(
            self,
            access_token=access_token,
            refresh_token=refresh_token or self.refresh_token,
            expires_at=expires_at,
        )

    def __repr__(self) -> str:
        return (
            f"Credential(email={self.email!r}, expires_at={self.expires_at!r}, "
            f"source_profile={self.source_profile!r}, "
            f"storage_location={self.storage_location!r})"
        )


def format_expiry(expires_at: Optional[datetime]) -> Optional[str]:
    """Encode an expiry as decimal Unix seconds"""
    if expires_at is None:
        return None
    return str(int(expires_at.timestamp()))


def parse_expiry(value: Optional[str]) -> Optional[datetime]:
    """Decode decimal Unix seconds; unparsable values are ignored"""
    if value is None or value == "":
        return None
    try:
        return datetime.fromtimestamp(int(value.strip()), tz=timezone.utc)
    except (ValueError, OverflowError, OSError):
        logger.warning(f"Ignoring unparsable {SESSION_EXPIRES_AT} value")
        return None


@dataclass
class StoredCredentialRecord:
    """The JSON object held by the credential file.

    Missing keys decode to None. Keys this package does not know about are
    kept in ``extra`` so a write does not drop fields owned by the CLI.
    """

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    user_email: Optional[str] = None
    session_expires_at_unix: Optional[str] = None
    auth_flow_type: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StoredCredentialRecord":
        """
        Build a record from the decoded JSON object

        Raises:
            MalformedCredentialError: If a known field holds a non-string value
        """
        known = {}
        for name in REQUIRED_FIELDS + OPTIONAL_FIELDS:
            value = data.get(name)
            if value is not None and not isinstance(value, str):
                raise MalformedCredentialError(
                    f"{name} in credentials file is a {type(value).__name__}, expected a string"
                )
            known[name] = value
        extra = {k: v for k, v in data.items() if k not in known}
        return cls(extra=extra, **known)

    @classmethod
    def from_credential(cls, credential: Credential,
                        extra: Optional[Dict[str, Any]] = None) -> "StoredCredentialRecord":
        return cls(
            access_token=credential.access_token,
            refresh_token=credential.refresh_token,
            user_email=credential.email,
            session_expires_at_unix=format_expiry(credential.expires_at),
            auth_flow_type=credential.auth_flow_type,
            extra=dict(extra or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        data = dict(self.extra)
        for name in REQUIRED_FIELDS + OPTIONAL_FIELDS:
            value = getattr(self, name)
            if value:
                data[name] = value
            else:
                data.pop(name, None)
        return data

    def to_credential(self) -> Credential:
        """
        Convert to a Credential

        Raises:
            MalformedCredentialError: If a required field is missing or empty
        """
        for name in REQUIRED_FIELDS:
            if not getattr(self, name):
                raise MalformedCredentialError(f"{name} not found in credentials file")

        return Credential(
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            email=self.user_email,
            expires_at=parse_expiry(self.session_expires_at_unix),
            auth_flow_type=self.auth_flow_type or None,
        )
