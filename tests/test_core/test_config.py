"""Tests for globrun configuration."""

import pytest
from pydantic import ValidationError


def test_config_default_values(monkeypatch):
    """Config has the documented defaults."""
    from globrun.core.config import GlobrunConfig
    from globrun.dispatch.keys import DebounceKey

    monkeypatch.delenv("GLOBRUN_DEBOUNCE_KEY", raising=False)
    config = GlobrunConfig(_env_file=None)
    assert config.debounce_key == "pattern"
    assert config.debounce_policy is DebounceKey.PER_PATTERN
    assert config.debounce_seconds == 1.0
    assert config.file_env_var == "FILE"
    assert config.kill_grace_seconds == 5.0
    assert config.log_level == "WARNING"


def test_config_env_override(monkeypatch):
    """GLOBRUN_ prefixed environment variables override defaults."""
    from globrun.core.config import GlobrunConfig
    from globrun.dispatch.keys import DebounceKey

    monkeypatch.setenv("GLOBRUN_DEBOUNCE_KEY", "FILE")
    monkeypatch.setenv("GLOBRUN_DEBOUNCE_SECONDS", "0.25")
    config = GlobrunConfig(_env_file=None)
    assert config.debounce_key == "file"
    assert config.debounce_policy is DebounceKey.PER_FILE
    assert config.debounce_seconds == 0.25


def test_config_explicit_values_win(monkeypatch):
    """Keyword arguments (CLI options) take precedence over the environment."""
    from globrun.core.config import GlobrunConfig

    monkeypatch.setenv("GLOBRUN_DEBOUNCE_KEY", "file")
    config = GlobrunConfig(_env_file=None, debounce_key="command")
    assert config.debounce_key == "command"


def test_config_env_file(tmp_path):
    """Values are read from a .env file."""
    from globrun.core.config import GlobrunConfig

    env_file = tmp_path / ".env"
    env_file.write_text("GLOBRUN_FILE_ENV_VAR=CHANGED_PATH\n")
    config = GlobrunConfig(_env_file=env_file)
    assert config.file_env_var == "CHANGED_PATH"


def test_config_rejects_unknown_key():
    """An unknown debounce key fails at construction."""
    from globrun.core.config import GlobrunConfig

    with pytest.raises(ValidationError, match="Unrecognized debounce key"):
        GlobrunConfig(_env_file=None, debounce_key="sometimes")


@pytest.mark.parametrize("field", ["debounce_seconds", "kill_grace_seconds"])
def test_config_rejects_negative_durations(field):
    from globrun.core.config import GlobrunConfig

    with pytest.raises(ValidationError):
        GlobrunConfig(_env_file=None, **{field: -0.5})


def test_config_zero_debounce_allowed():
    from globrun.core.config import GlobrunConfig

    assert GlobrunConfig(_env_file=None, debounce_seconds=0).debounce_seconds == 0


def test_config_log_level_normalised():
    from globrun.core.config import GlobrunConfig

    assert GlobrunConfig(_env_file=None, log_level="debug").log_level == "DEBUG"
