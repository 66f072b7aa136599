"""Reuse STACKIT CLI provider credentials from other tools"""
from .auth import (
    AuthError,
    Credential,
    CredentialResolver,
    CredentialsNotFoundError,
    MalformedCredentialError,
    PersistError,
    ProfileResolutionError,
    RefreshError,
)
from .api import CredentialAuth, build_session
from .utils import AuthEnvironment, Config

__version__ = "0.1.0"

__all__ = [
    'AuthEnvironment',
    'AuthError',
    'Config',
    'Credential',
    'CredentialAuth',
    'CredentialResolver',
    'CredentialsNotFoundError',
    'MalformedCredentialError',
    'PersistError',
    'ProfileResolutionError',
    'RefreshError',
    'build_session',
]
