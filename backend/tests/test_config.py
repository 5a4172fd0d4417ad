import pytest
from dotenv import load_dotenv

from config import Config


@pytest.fixture
def fresh_config(monkeypatch):
    """Build a new Config singleton from the patched environment."""
    monkeypatch.setattr(Config, "_instance", None)
    return Config


def test_defaults(monkeypatch, fresh_config):
    for name in ("PORT", "SPEECH_RATE", "PARALLEL_FEEDBACK", "START_MUTED", "OPENAI_API_KEY", "CHAT_URL"):
        monkeypatch.delenv(name, raising=False)

    cfg = fresh_config()

    assert cfg.port == 5000
    assert cfg.speech_rate == 0.85
    assert cfg.parallel_feedback is True
    assert cfg.start_muted is False
    assert cfg.openai_api_key is None
    assert cfg.chat_url == "http://localhost:5000"


def test_speech_rate_is_clamped(monkeypatch, fresh_config):
    monkeypatch.setenv("SPEECH_RATE", "1.5")
    assert fresh_config().speech_rate == 0.9


def test_flags_from_env(monkeypatch, fresh_config):
    monkeypatch.setenv("PARALLEL_FEEDBACK", "false")
    monkeypatch.setenv("START_MUTED", "yes")

    cfg = fresh_config()

    assert cfg.parallel_feedback is False
    assert cfg.start_muted is True


def test_as_dict_redacts_api_key(monkeypatch, fresh_config):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-secret")

    data = fresh_config().as_dict()

    assert data["has_openai_api_key"] is True
    assert "sk-secret" not in data.values()


def test_dotenv_file_values_are_read(monkeypatch, tmp_path, fresh_config):
    env_file = tmp_path / ".env"
    env_file.write_text("CHAT_URL=http://chat.example:8080\nSTART_MUTED=1\n")
    for name in ("CHAT_URL", "START_MUTED"):
        # setenv first so teardown also removes what load_dotenv writes
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)

    load_dotenv(env_file)
    cfg = fresh_config()

    assert cfg.chat_url == "http://chat.example:8080"
    assert cfg.start_muted is True
