"""Authentication package for reusing STACKIT CLI provider credentials"""
from .credential_store import CredentialStore, FileBackend, KeyringBackend
from .exceptions import (
    AuthError,
    CredentialsNotFoundError,
    MalformedCredentialError,
    PersistError,
    ProfileResolutionError,
    RefreshError,
)
from .models import Credential, StorageLocation
from .profile import ProfileResolver
from .resolver import CredentialResolver
from .secret_storage import SecretStorage, SystemKeyring
from .token_refresher import TokenRefresher

__all__ = [
    'AuthError',
    'Credential',
    'CredentialResolver',
    'CredentialStore',
    'CredentialsNotFoundError',
    'FileBackend',
    'KeyringBackend',
    'MalformedCredentialError',
    'PersistError',
    'ProfileResolutionError',
    'ProfileResolver',
    'RefreshError',
    'SecretStorage',
    'StorageLocation',
    'SystemKeyring',
    'TokenRefresher',
]
