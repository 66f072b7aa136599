"""Errors raised while resolving CLI credentials"""
from typing import Dict, Optional


class AuthError(Exception):
    """Base class for all credential resolution failures."""
    pass


class ProfileResolutionError(AuthError):
    """Raised when the profile pointer file exists but cannot be read."""
    pass


class CredentialsNotFoundError(AuthError):
    """Raised when no usable credential could be read.

    When raised by the credential store, ``reasons`` maps each backend
    name that was tried to the exception it failed with.
    """

    def __init__(
        self,
        message: str,
        profile: Optional[str] = None,
        reasons: Optional[Dict[str, Exception]] = None,
    ):
        super().__init__(message)
        self.profile = profile
        self.reasons = reasons or {}


class MalformedCredentialError(CredentialsNotFoundError):
    """Raised when a stored record exists but is corrupt or incomplete."""
    pass


class RefreshError(AuthError):
    """Raised when the refresh-token grant fails."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class PersistError(AuthError):
    """Raised when a refreshed credential could not be written to any backend."""

    def __init__(
        self,
        message: str,
        profile: Optional[str] = None,
        reasons: Optional[Dict[str, Exception]] = None,
    ):
        super().__init__(message)
        self.profile = profile
        self.reasons = reasons or {}
