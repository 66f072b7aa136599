"""Credential storage shared with the STACKIT CLI (OS keyring or encoded file)"""
import base64
import binascii
import json
import logging
import os
import stat
import time
from dataclasses import replace
from pathlib import Path
from typing import Dict, Optional

from ..utils.config import AuthEnvironment, Config
from .exceptions import CredentialsNotFoundError, MalformedCredentialError, PersistError
from .models import (
    ACCESS_TOKEN,
    AUTH_FLOW_TYPE,
    OPTIONAL_FIELDS,
    REFRESH_TOKEN,
    REQUIRED_FIELDS,
    SESSION_EXPIRES_AT,
    USER_EMAIL,
    Credential,
    StorageLocation,
    StoredCredentialRecord,
    format_expiry,
    parse_expiry,
)
from .secret_storage import SecretStorage, SystemKeyring

logger = logging.getLogger(__name__)


def keyring_service_name(profile: str) -> str:
    """Keyring service for a profile; the default profile uses the bare name"""
    if profile == Config.DEFAULT_PROFILE:
        return Config.KEYRING_SERVICE
    return f"{Config.KEYRING_SERVICE}/{profile}"


def credentials_file_path(environment: AuthEnvironment, profile: str) -> Path:
    """Credential file for a profile"""
    if profile == Config.DEFAULT_PROFILE:
        return environment.storage_dir / Config.STORAGE_FILE_NAME
    return environment.storage_dir / "profiles" / profile / Config.STORAGE_FILE_NAME


class KeyringBackend:
    """Credentials stored as one keyring entry per field"""

    location = StorageLocation.KEYRING

    def __init__(self, secret_storage: SecretStorage):
        self.secret_storage = secret_storage

    def read(self, profile: str) -> Credential:
        """
        Read a credential from the keyring

        Raises:
            CredentialsNotFoundError: If no entries exist or the keyring fails
            MalformedCredentialError: If only some required entries exist
        """
        service = keyring_service_name(profile)

        values: Dict[str, Optional[str]] = {}
        for name in REQUIRED_FIELDS:
            try:
                values[name] = self.secret_storage.get(service, name)
            except Exception as e:
                raise CredentialsNotFoundError(f"get {name}: {e}") from e

        missing = [name for name in REQUIRED_FIELDS if not values[name]]
        if len(missing) == len(REQUIRED_FIELDS):
            raise CredentialsNotFoundError(f"no entries for service {service}")
        if missing:
            raise MalformedCredentialError(
                f"incomplete entries for service {service}, missing: {', '.join(missing)}"
            )

        return Credential(
            access_token=values[ACCESS_TOKEN],
            refresh_token=values[REFRESH_TOKEN],
            email=values[USER_EMAIL],
            expires_at=parse_expiry(self._get_optional(service, SESSION_EXPIRES_AT)),
            auth_flow_type=self._get_optional(service, AUTH_FLOW_TYPE) or None,
        )

    def _get_optional(self, service: str, name: str) -> Optional[str]:
        try:
            return self.secret_storage.get(service, name)
        except Exception as e:
            logger.debug(f"Optional keyring entry {name} unavailable: {e}")
            return None

    def write(self, profile: str, credential: Credential) -> None:
        """
        Write a credential to the keyring

        A failure on a required field removes the service's entries, so a
        later read falls back to the file instead of a mixed record.

        Raises:
            Exception: Whatever the secret storage raised for a required field
        """
        service = keyring_service_name(profile)

        try:
            self.secret_storage.set(service, REFRESH_TOKEN, credential.refresh_token)
            self.secret_storage.set(service, ACCESS_TOKEN, credential.access_token)
            self.secret_storage.set(service, USER_EMAIL, credential.email)
        except Exception:
            self._discard(service)
            raise

        expiry = format_expiry(credential.expires_at)
        self._write_optional(service, SESSION_EXPIRES_AT, expiry)
        if credential.auth_flow_type:
            self._write_optional(service, AUTH_FLOW_TYPE, credential.auth_flow_type)

    def _write_optional(self, service: str, name: str, value: Optional[str]) -> None:
        try:
            if value is None:
                self.secret_storage.delete(service, name)
            else:
                self.secret_storage.set(service, name, value)
        except Exception as e:
            logger.warning(f"Could not update optional keyring entry {name}: {e}")

    def _discard(self, service: str) -> None:
        for name in REQUIRED_FIELDS + OPTIONAL_FIELDS:
            try:
                self.secret_storage.delete(service, name)
            except Exception as e:
                logger.warning(f"Could not remove keyring entry {name} after failed write: {e}")


def _make_private_dirs(directory: Path) -> None:
    """Create ``directory`` and any missing parents, each owner-only"""
    missing = []
    while not directory.exists():
        missing.append(directory)
        directory = directory.parent
    for path in reversed(missing):
        path.mkdir(mode=0o700, exist_ok=True)


class FileBackend:
    """Credentials stored as a base64-encoded JSON object in a file"""

    location = StorageLocation.FILE

    def __init__(self, environment: AuthEnvironment):
        self.environment = environment

    def path_for(self, profile: str) -> Path:
        return credentials_file_path(self.environment, profile)

    def read(self, profile: str) -> Credential:
        """
        Read a credential from the credentials file

        Raises:
            CredentialsNotFoundError: If the file is missing or unreadable
            MalformedCredentialError: If the content cannot be decoded or lacks required fields
        """
        path = self.path_for(profile)
        try:
            encoded = path.read_bytes()
        except FileNotFoundError as e:
            raise CredentialsNotFoundError(f"credentials file not found at {path}") from e
        except OSError as e:
            raise CredentialsNotFoundError(f"read file {path}: {e}") from e

        return self._decode_record(encoded, path).to_credential()

    def _decode_record(self, encoded: bytes, path: Path) -> StoredCredentialRecord:
        try:
            content = base64.b64decode(encoded.strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise MalformedCredentialError(f"decode base64 in {path}: {e}") from e

        try:
            data = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise MalformedCredentialError(f"unmarshal json in {path}: {e}") from e

        if not isinstance(data, dict):
            raise MalformedCredentialError(f"unexpected json in {path}: expected an object")

        return StoredCredentialRecord.from_dict(data)

    def write(self, profile: str, credential: Credential) -> None:
        """
        Write a credential, keeping unrelated fields already in the file.

        The file is replaced atomically so a concurrent reader in another
        process never sees a partial write.

        Raises:
            OSError: If the existing file cannot be read or the new one written
        """
        path = self.path_for(profile)

        extra = {}
        try:
            extra = self._decode_record(path.read_bytes(), path).extra
        except FileNotFoundError:
            pass
        except MalformedCredentialError as e:
            logger.debug(f"Replacing corrupt credentials file: {e}")

        record = StoredCredentialRecord.from_credential(credential, extra=extra)
        encoded = base64.b64encode(json.dumps(record.to_dict()).encode("utf-8"))

        _make_private_dirs(path.parent)
        tmp_path = path.parent / f".{path.name}.{os.getpid()}.{time.time_ns()}.tmp"
        try:
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, stat.S_IRUSR | stat.S_IWUSR)
            with os.fdopen(fd, "wb") as tmp_file:
                tmp_file.write(encoded)
                tmp_file.flush()
                os.fsync(tmp_file.fileno())
            os.replace(tmp_path, path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()


class CredentialStore:
    """Reads and writes CLI credentials, trying the keyring before the file"""

    def __init__(self, environment: AuthEnvironment,
                 secret_storage: Optional[SecretStorage] = None):
        """
        Initialize the store

        Args:
            environment: Resolved home/config directories
            secret_storage: Keyring access (defaults to the system keyring)
        """
        self.keyring_backend = KeyringBackend(secret_storage or SystemKeyring())
        self.file_backend = FileBackend(environment)

    def _backends(self, prefer: Optional[StorageLocation] = None):
        if prefer == StorageLocation.FILE:
            return [self.file_backend, self.keyring_backend]
        return [self.keyring_backend, self.file_backend]

    def read(self, profile: str) -> Credential:
        """
        Read the credential for a profile

        Returns:
            Credential with source_profile and storage_location set

        Raises:
            CredentialsNotFoundError: If neither backend holds a usable credential
            MalformedCredentialError: If a backend holds a corrupt record and the other none
        """
        reasons: Dict[str, Exception] = {}
        for backend in self._backends():
            try:
                credential = backend.read(profile)
            except CredentialsNotFoundError as e:
                logger.debug(f"Reading profile '{profile}' from {backend.location.value} failed: {e}")
                reasons[backend.location.value] = e
                continue
            return replace(credential, source_profile=profile,
                           storage_location=backend.location)

        keyring_error = reasons[StorageLocation.KEYRING.value]
        file_error = reasons[StorageLocation.FILE.value]
        message = (
            f"failed to read CLI credentials for profile '{profile}' from keyring "
            f"({keyring_error}) or file ({file_error}). {Config.LOGIN_HINT}"
        )
        if any(isinstance(e, MalformedCredentialError) for e in reasons.values()):
            raise MalformedCredentialError(message, profile=profile, reasons=reasons) from file_error
        raise CredentialsNotFoundError(message, profile=profile, reasons=reasons) from file_error

    def write(self, profile: str, credential: Credential,
              prefer: Optional[StorageLocation] = None) -> StorageLocation:
        """
        Write the credential for a profile

        Args:
            profile: Profile name
            credential: Credential to store
            prefer: Backend to try first (the keyring when None)

        Returns:
            The backend that accepted the write

        Raises:
            PersistError: If both backends failed
        """
        reasons: Dict[str, Exception] = {}
        for backend in self._backends(prefer):
            try:
                backend.write(profile, credential)
            except Exception as e:
                logger.debug(f"Writing profile '{profile}' to {backend.location.value} failed: {e}")
                reasons[backend.location.value] = e
                continue
            logger.info(f"Stored credentials for profile '{profile}' in {backend.location.value}")
            return backend.location

        raise PersistError(
            f"failed to write CLI credentials for profile '{profile}' to keyring "
            f"({reasons[StorageLocation.KEYRING.value]}) or file "
            f"({reasons[StorageLocation.FILE.value]})",
            profile=profile,
            reasons=reasons,
        ) from reasons[StorageLocation.FILE.value]
