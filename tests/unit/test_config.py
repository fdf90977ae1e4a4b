"""Unit tests for config module."""

from healthdesk.config import Settings

# Env vars that CI sets which override Pydantic Settings defaults.
_CI_ENV_VARS = [
    "ANTHROPIC_API_KEY",
    "GROQ_API_KEY",
    "DB_PATH",
    "MAX_STEPS",
    "RESUMABLE_STREAMS",
    "VAPID_PRIVATE_KEY",
]


def test_default_settings(monkeypatch):
    for var in _CI_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    s = Settings(_env_file=None, anthropic_api_key="test-key")
    assert s.max_steps == 5
    assert s.tool_timeout_seconds == 30.0
    assert s.resumable_streams is True
    assert s.guest_max_messages_per_day == 20
    assert s.regular_max_messages_per_day == 100
    assert s.db_path == "data/healthdesk.db"


def test_settings_override(monkeypatch):
    for var in _CI_ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    s = Settings(
        _env_file=None,
        anthropic_api_key="test-key",
        max_steps=3,
        resumable_streams=False,
        tool_timeout_seconds=60.0,
    )
    assert s.max_steps == 3
    assert s.resumable_streams is False
    assert s.tool_timeout_seconds == 60.0


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("RESUMABLE_STREAMS", "false")
    monkeypatch.setenv("GUEST_MAX_MESSAGES_PER_DAY", "5")
    s = Settings(_env_file=None)
    assert s.resumable_streams is False
    assert s.guest_max_messages_per_day == 5
