"""Test doubles and builders shared by the test modules."""

import base64
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, Optional, Tuple
from unittest.mock import MagicMock

from stackit_cli_auth.auth.secret_storage import SecretStorage

NOW = datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)


class MemorySecretStorage(SecretStorage):
    """In-memory keyring. Set ``fail`` to simulate an unavailable backend.

    ``fail_on_set`` names keys whose ``set`` raises while everything else works.
    """

    def __init__(self, fail: bool = False, fail_on_set: Tuple[str, ...] = ()):
        self.entries: Dict[Tuple[str, str], str] = {}
        self.fail = fail
        self.fail_on_set = fail_on_set

    def get(self, service: str, key: str) -> Optional[str]:
        if self.fail:
            raise RuntimeError("no keyring backend available")
        return self.entries.get((service, key))

    def set(self, service: str, key: str, value: str) -> None:
        if self.fail or key in self.fail_on_set:
            raise RuntimeError("no keyring backend available")
        self.entries[(service, key)] = value

    def delete(self, service: str, key: str) -> None:
        if self.fail:
            raise RuntimeError("no keyring backend available")
        self.entries.pop((service, key), None)


def encode_file(data) -> bytes:
    return base64.b64encode(json.dumps(data).encode("utf-8"))


def decode_file(path: Path) -> dict:
    return json.loads(base64.b64decode(path.read_bytes()))


def write_credentials_file(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(encode_file(data))


def expiry_in(delta: timedelta) -> str:
    return str(int((NOW + delta).timestamp()))


def token_response(status_code: int = 200, payload=None, text: str = "") -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text or json.dumps(payload)
    if payload is None:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response
