"""Tests for active profile selection."""

from pathlib import Path

import pytest

from stackit_cli_auth.auth.exceptions import ProfileResolutionError
from stackit_cli_auth.auth.profile import ProfileResolver
from stackit_cli_auth.utils.config import AuthEnvironment, Config


def make_environment(tmp_path: Path, profile_env=None, pointer=None) -> AuthEnvironment:
    config_dir = tmp_path / "config"
    config_dir.mkdir(exist_ok=True)
    if pointer is not None:
        (config_dir / "cli-profile.txt").write_text(pointer)
    return AuthEnvironment(home_dir=tmp_path, config_dir=config_dir, profile_env=profile_env)


class TestProfileResolver:
    """Test the profile priority chain."""

    def test_override_beats_everything(self, tmp_path: Path) -> None:
        env = make_environment(tmp_path, profile_env="from-env", pointer="from-file\n")
        assert ProfileResolver(env).resolve("from-override") == "from-override"

    def test_env_beats_pointer_file(self, tmp_path: Path) -> None:
        env = make_environment(tmp_path, profile_env="from-env", pointer="from-file\n")
        assert ProfileResolver(env).resolve() == "from-env"

    def test_pointer_file_beats_default(self, tmp_path: Path) -> None:
        env = make_environment(tmp_path, pointer="  from-file \n")
        assert ProfileResolver(env).resolve() == "from-file"

    def test_default_when_nothing_is_set(self, tmp_path: Path) -> None:
        env = make_environment(tmp_path)
        assert ProfileResolver(env).resolve() == Config.DEFAULT_PROFILE

    def test_empty_override_is_ignored(self, tmp_path: Path) -> None:
        env = make_environment(tmp_path, profile_env="from-env")
        assert ProfileResolver(env).resolve("") == "from-env"
        assert ProfileResolver(env).resolve("   ") == "from-env"

    def test_blank_pointer_file_falls_through_to_default(self, tmp_path: Path) -> None:
        env = make_environment(tmp_path, pointer="\n  \n")
        assert ProfileResolver(env).resolve() == Config.DEFAULT_PROFILE

    def test_missing_config_dir_is_not_an_error(self, tmp_path: Path) -> None:
        env = AuthEnvironment(home_dir=tmp_path, config_dir=tmp_path / "does-not-exist")
        assert ProfileResolver(env).resolve() == Config.DEFAULT_PROFILE

    def test_unreadable_pointer_file_raises(self, tmp_path: Path) -> None:
        env = make_environment(tmp_path)
        # A directory in place of the file cannot be read
        (env.config_dir / "cli-profile.txt").mkdir()

        with pytest.raises(ProfileResolutionError) as exc_info:
            ProfileResolver(env).resolve()
        assert "cli-profile.txt" in str(exc_info.value)

    def test_unreadable_pointer_file_ignored_when_env_set(self, tmp_path: Path) -> None:
        env = make_environment(tmp_path, profile_env="from-env")
        (env.config_dir / "cli-profile.txt").mkdir()
        assert ProfileResolver(env).resolve() == "from-env"


class TestAuthEnvironment:
    """Test resolution of the process environment."""

    def test_defaults(self, tmp_path: Path) -> None:
        env = AuthEnvironment.from_os(environ={}, home_dir=tmp_path)

        assert env.profile_env is None
        assert env.profile_file == tmp_path / ".config" / "stackit" / "cli-profile.txt"
        assert env.storage_dir == tmp_path / ".stackit"

    def test_overrides(self, tmp_path: Path) -> None:
        environ = {
            "STACKIT_CLI_PROFILE": " staging ",
            "STACKIT_CLI_CONFIG_DIR": str(tmp_path / "custom"),
        }
        env = AuthEnvironment.from_os(environ=environ, home_dir=tmp_path)

        assert env.profile_env == "staging"
        assert env.profile_file == tmp_path / "custom" / "cli-profile.txt"

    def test_blank_profile_variable_is_unset(self, tmp_path: Path) -> None:
        env = AuthEnvironment.from_os(environ={"STACKIT_CLI_PROFILE": "  "}, home_dir=tmp_path)
        assert env.profile_env is None
