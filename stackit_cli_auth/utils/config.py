"""Configuration management"""
import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Mapping, Optional


class Config:
    """Constants shared with the STACKIT CLI"""

    # OAuth2 refresh grant
    TOKEN_URL = "https://accounts.stackit.cloud/oauth2/token"
    CLIENT_ID = "stackit-cli-0000-0000-000000000001"
    REFRESH_TIMEOUT = 30  # seconds

    # Tokens expiring within this window are refreshed proactively
    REFRESH_MARGIN = timedelta(minutes=5)

    # Profiles
    DEFAULT_PROFILE = "default"
    PROFILE_ENV = "STACKIT_CLI_PROFILE"
    CONFIG_DIR_ENV = "STACKIT_CLI_CONFIG_DIR"
    PROFILE_FILE_NAME = "cli-profile.txt"

    # Storage
    KEYRING_SERVICE = "stackit-cli-provider"
    STORAGE_DIR_NAME = ".stackit"
    STORAGE_FILE_NAME = "cli-provider-auth-storage.txt"

    LOGIN_HINT = "Please run 'stackit auth provider login' first."


@dataclass(frozen=True)
class AuthEnvironment:
    """Process environment values the credential lookup depends on.

    Resolved once and passed to the profile resolver and the credential
    store so neither reads environment variables or the home directory
    on its own.
    """

    home_dir: Path
    config_dir: Path
    profile_env: Optional[str] = None

    @classmethod
    def from_os(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        home_dir: Optional[Path] = None,
    ) -> "AuthEnvironment":
        """
        Build the environment from the current process

        Args:
            environ: Mapping to read variables from (defaults to os.environ)
            home_dir: Home directory (defaults to Path.home())

        Returns:
            Resolved AuthEnvironment
        """
        if environ is None:
            environ = os.environ
        if home_dir is None:
            home_dir = Path.home()

        config_dir_override = environ.get(Config.CONFIG_DIR_ENV, "").strip()
        if config_dir_override:
            config_dir = Path(config_dir_override).expanduser()
        else:
            config_dir = home_dir / ".config" / "stackit"

        profile_env = environ.get(Config.PROFILE_ENV, "").strip() or None

        return cls(home_dir=home_dir, config_dir=config_dir, profile_env=profile_env)

    @property
    def profile_file(self) -> Path:
        return self.config_dir / Config.PROFILE_FILE_NAME

    @property
    def storage_dir(self) -> Path:
        return self.home_dir / Config.STORAGE_DIR_NAME
