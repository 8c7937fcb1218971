"""
Unit tests for AppConfig environment variable loading.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from localchat.config import AppConfig

ENV_VARS = [
    "MODEL_BACKEND", "MODEL_PATH", "MODEL_DEVICE", "LLM_BASE_URL", "LLM_MODEL",
    "LLM_API_KEY", "MAX_TOKENS", "LLM_TEMPERATURE", "GENERATION_TIMEOUT",
    "HISTORY_WINDOW", "HISTORY_DIR", "HISTORY_FILE", "LOG_DIR", "PLUGIN_DIR",
    "MAX_RETAINED_HISTORY", "TTS_ENABLED", "TTS_RATE", "TTS_VOICE",
    "TTS_INTERRUPT", "STT_ENGINE", "LISTEN_TIMEOUT", "PHRASE_TIME_LIMIT",
    "SERVER_HOST", "SERVER_PORT", "CORS_ORIGINS", "LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestAppConfig:
    """Tests for AppConfig.from_env()."""

    def test_default_values(self):
        """Config should have sensible defaults without env vars."""
        config = AppConfig()
        assert config.model.backend == "gpt4all"
        assert config.model.model_path.endswith("ggml-gpt4all-l13b-snoozy.bin")
        assert config.model.max_tokens == 512
        assert config.model.generation_timeout is None
        assert config.history_window == 20
        assert config.server.port == 5000
        assert config.storage.history_file == "session_history.txt"

    def test_paths_are_expanded(self):
        """Default storage paths should not contain '~'."""
        config = AppConfig()
        assert "~" not in config.storage.history_dir
        assert "~" not in config.storage.log_dir
        assert "~" not in config.model.model_path

    def test_history_path_joins_dir_and_file(self, tmp_path):
        config = AppConfig()
        config.storage.history_dir = str(tmp_path)
        assert config.storage.history_path == os.path.join(str(tmp_path), "session_history.txt")

    def test_from_env_model(self, monkeypatch):
        """Model config should load from environment variables."""
        monkeypatch.setenv("MODEL_BACKEND", "openai")
        monkeypatch.setenv("LLM_BASE_URL", "http://localhost:8080/v1")
        monkeypatch.setenv("LLM_MODEL", "mistral")
        monkeypatch.setenv("MAX_TOKENS", "256")
        monkeypatch.setenv("GENERATION_TIMEOUT", "30")
        config = AppConfig.from_env()
        assert config.model.backend == "openai"
        assert config.model.base_url == "http://localhost:8080/v1"
        assert config.model.model == "mistral"
        assert config.model.max_tokens == 256
        assert config.model.generation_timeout == 30.0

    def test_from_env_storage(self, monkeypatch, tmp_path):
        """Storage config should load from environment variables."""
        monkeypatch.setenv("HISTORY_DIR", str(tmp_path / "history"))
        monkeypatch.setenv("LOG_DIR", str(tmp_path / "logs"))
        monkeypatch.setenv("MAX_RETAINED_HISTORY", "50")
        monkeypatch.setenv("HISTORY_WINDOW", "6")
        config = AppConfig.from_env()
        assert config.storage.history_dir == str(tmp_path / "history")
        assert config.storage.log_dir == str(tmp_path / "logs")
        assert config.storage.max_retained == 50
        assert config.history_window == 6

    def test_from_env_speech(self, monkeypatch):
        """Speech config should parse booleans and numbers."""
        monkeypatch.setenv("TTS_ENABLED", "false")
        monkeypatch.setenv("TTS_INTERRUPT", "yes")
        monkeypatch.setenv("TTS_RATE", "180")
        monkeypatch.setenv("STT_ENGINE", "whisper")
        config = AppConfig.from_env()
        assert config.speech.tts_enabled is False
        assert config.speech.tts_interrupt is True
        assert config.speech.tts_rate == 180
        assert config.speech.stt_engine == "whisper"

    def test_from_env_server(self, monkeypatch):
        """Server config should load from environment variables."""
        monkeypatch.setenv("SERVER_HOST", "127.0.0.1")
        monkeypatch.setenv("SERVER_PORT", "9999")
        monkeypatch.setenv("CORS_ORIGINS", "http://a.local, http://b.local")
        config = AppConfig.from_env()
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 9999
        assert config.server.cors_origins == ["http://a.local", "http://b.local"]

    def test_invalid_number_raises(self, monkeypatch):
        monkeypatch.setenv("HISTORY_WINDOW", "many")
        with pytest.raises(ValueError):
            AppConfig.from_env()

    def test_from_env_defaults_without_env(self):
        """Without env vars set, from_env should return defaults."""
        config = AppConfig.from_env()
        assert config.server.host == "0.0.0.0"
        assert config.speech.tts_enabled is True
        assert config.log_level == "INFO"
