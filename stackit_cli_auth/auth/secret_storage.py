"""Access to the OS secret store"""
from typing import Optional

import keyring
from keyring.errors import PasswordDeleteError


class SecretStorage:
    """Minimal key/value interface over a secure secret store.

    ``get`` returns None for a missing entry. Any other failure (no backend
    available, locked keychain, ...) is raised to the caller.
    """

    def get(self, service: str, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, service: str, key: str, value: str) -> None:
        raise NotImplementedError

    def delete(self, service: str, key: str) -> None:
        raise NotImplementedError


class SystemKeyring(SecretStorage):
    """SecretStorage backed by the ``keyring`` library.

    ``keyring`` selects the platform backend (macOS Keychain, Secret Service,
    Windows Credential Locker) when first used.
    """

    def get(self, service: str, key: str) -> Optional[str]:
        return keyring.get_password(service, key)

    def set(self, service: str, key: str, value: str) -> None:
        keyring.set_password(service, key, value)

    def delete(self, service: str, key: str) -> None:
        try:
            keyring.delete_password(service, key)
        except PasswordDeleteError:
            pass  # already absent
