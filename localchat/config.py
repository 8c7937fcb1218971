"""
Centralized configuration for the local chat assistant.
All settings loaded from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv


def _expand(path: str) -> str:
    return os.path.expanduser(path)


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class ModelConfig:
    """Text generation backend configuration."""
    backend: str = "gpt4all"  # "gpt4all" or "openai"
    model_path: str = _expand("~/.gpt4all_models/ggml-gpt4all-l13b-snoozy.bin")
    device: str = "cpu"
    max_tokens: int = 512
    temperature: float = 0.7
    generation_timeout: Optional[float] = None  # seconds; None = wait forever

    # OpenAI-compatible HTTP endpoint (Ollama, llama.cpp server, ...)
    base_url: str = "http://127.0.0.1:11434/v1"
    model: str = "llama3.1:8b"
    api_key: str = ""
    request_timeout: float = 120.0


@dataclass
class SpeechConfig:
    """Speech input/output configuration."""
    tts_enabled: bool = True
    tts_rate: int = 0  # words per minute; 0 = engine default
    tts_voice: str = ""  # substring of the voice name; empty = engine default
    tts_interrupt: bool = False  # new reply cuts off the previous one

    stt_engine: str = "google"  # any speech_recognition recognize_<name>
    listen_timeout: float = 5.0
    phrase_time_limit: Optional[float] = None


@dataclass
class StorageConfig:
    """On-disk locations for history, transcripts and plugins."""
    history_dir: str = _expand("~/chatgpt_chat_history")
    history_file: str = "session_history.txt"
    log_dir: str = _expand("~/chatgpt_ai_logs")
    plugin_dir: str = _expand("~/chatgpt_plugins")
    max_retained: int = 200  # utterances kept in history; 0 = unlimited

    @property
    def history_path(self) -> str:
        return os.path.join(self.history_dir, self.history_file)


@dataclass
class ServerConfig:
    """HTTP API server configuration."""
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class AppConfig:
    """Top-level application configuration."""
    model: ModelConfig = field(default_factory=ModelConfig)
    speech: SpeechConfig = field(default_factory=SpeechConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    history_window: int = 20  # utterances included in each prompt
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "AppConfig":
        """Load configuration from environment variables (including .env file)."""
        load_dotenv()
        config = cls()

        # Model config
        config.model.backend = os.getenv("MODEL_BACKEND", config.model.backend)
        config.model.model_path = _expand(os.getenv("MODEL_PATH", config.model.model_path))
        config.model.device = os.getenv("MODEL_DEVICE", config.model.device)
        config.model.base_url = os.getenv("LLM_BASE_URL", config.model.base_url)
        config.model.model = os.getenv("LLM_MODEL", config.model.model)
        config.model.api_key = os.getenv("LLM_API_KEY", config.model.api_key)

        max_tokens = os.getenv("MAX_TOKENS")
        if max_tokens:
            config.model.max_tokens = int(max_tokens)
        temperature = os.getenv("LLM_TEMPERATURE")
        if temperature:
            config.model.temperature = float(temperature)
        timeout = os.getenv("GENERATION_TIMEOUT")
        if timeout:
            config.model.generation_timeout = float(timeout)

        window = os.getenv("HISTORY_WINDOW")
        if window:
            config.history_window = int(window)

        # Storage config
        config.storage.history_dir = _expand(os.getenv("HISTORY_DIR", config.storage.history_dir))
        config.storage.history_file = os.getenv("HISTORY_FILE", config.storage.history_file)
        config.storage.log_dir = _expand(os.getenv("LOG_DIR", config.storage.log_dir))
        config.storage.plugin_dir = _expand(os.getenv("PLUGIN_DIR", config.storage.plugin_dir))
        retained = os.getenv("MAX_RETAINED_HISTORY")
        if retained:
            config.storage.max_retained = int(retained)

        # Speech config
        config.speech.tts_enabled = _env_bool("TTS_ENABLED", config.speech.tts_enabled)
        config.speech.tts_interrupt = _env_bool("TTS_INTERRUPT", config.speech.tts_interrupt)
        config.speech.tts_voice = os.getenv("TTS_VOICE", config.speech.tts_voice)
        rate = os.getenv("TTS_RATE")
        if rate:
            config.speech.tts_rate = int(rate)
        config.speech.stt_engine = os.getenv("STT_ENGINE", config.speech.stt_engine)
        listen_timeout = os.getenv("LISTEN_TIMEOUT")
        if listen_timeout:
            config.speech.listen_timeout = float(listen_timeout)
        phrase_limit = os.getenv("PHRASE_TIME_LIMIT")
        if phrase_limit:
            config.speech.phrase_time_limit = float(phrase_limit)

        # Server config
        config.server.host = os.getenv("SERVER_HOST", config.server.host)
        port = os.getenv("SERVER_PORT")
        if port:
            config.server.port = int(port)
        origins = os.getenv("CORS_ORIGINS")
        if origins:
            config.server.cors_origins = [o.strip() for o in origins.split(",") if o.strip()]

        config.log_level = os.getenv("LOG_LEVEL", config.log_level).upper()

        return config
