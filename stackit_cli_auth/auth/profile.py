"""Selection of the CLI profile whose credentials are used"""
import logging
from typing import Optional

from ..utils.config import AuthEnvironment, Config
from .exceptions import ProfileResolutionError

logger = logging.getLogger(__name__)


class ProfileResolver:
    """Determines the active CLI profile.

    Priority, first non-empty value wins:
    1. explicit override from the caller
    2. the STACKIT_CLI_PROFILE environment variable
    3. the contents of ``cli-profile.txt`` in the CLI config directory
    4. the default profile
    """

    def __init__(self, environment: AuthEnvironment):
        self.environment = environment

    def resolve(self, override: Optional[str] = None) -> str:
        """
        Resolve the profile name

        Args:
            override: Profile requested explicitly by the caller

        Returns:
            Profile name

        Raises:
            ProfileResolutionError: If the profile file exists but cannot be read
        """
        if override and override.strip():
            return override.strip()

        if self.environment.profile_env:
            return self.environment.profile_env

        profile = self._read_profile_file()
        if profile:
            return profile

        return Config.DEFAULT_PROFILE

    def _read_profile_file(self) -> Optional[str]:
        path = self.environment.profile_file
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise ProfileResolutionError(f"read profile file {path}: {e}") from e

        profile = content.strip()
        if profile:
            logger.debug(f"Using profile '{profile}' from {path}")
        return profile or None
