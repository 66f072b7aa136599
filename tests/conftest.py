"""Shared fixtures for credential resolution tests."""

from pathlib import Path

import pytest

from stackit_cli_auth.auth.credential_store import CredentialStore
from stackit_cli_auth.utils.config import AuthEnvironment
from tests.helpers import MemorySecretStorage


@pytest.fixture
def environment(tmp_path: Path) -> AuthEnvironment:
    """Environment rooted in a temporary home directory."""
    home = tmp_path / "home"
    home.mkdir()
    return AuthEnvironment(home_dir=home, config_dir=home / ".config" / "stackit")


@pytest.fixture
def secret_storage() -> MemorySecretStorage:
    return MemorySecretStorage()


@pytest.fixture
def failing_secret_storage() -> MemorySecretStorage:
    return MemorySecretStorage(fail=True)


@pytest.fixture
def store(environment: AuthEnvironment, secret_storage: MemorySecretStorage) -> CredentialStore:
    return CredentialStore(environment, secret_storage=secret_storage)


@pytest.fixture
def file_only_store(
    environment: AuthEnvironment, failing_secret_storage: MemorySecretStorage
) -> CredentialStore:
    return CredentialStore(environment, secret_storage=failing_secret_storage)


@pytest.fixture
def default_file(environment: AuthEnvironment) -> Path:
    return environment.home_dir / ".stackit" / "cli-provider-auth-storage.txt"
