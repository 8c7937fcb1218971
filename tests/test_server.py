"""
Tests for the FastAPI HTTP front-end.
"""

import os
import sys
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from localchat.config import ServerConfig
from localchat.context.history import SessionHistory
from localchat.context.transcript import TranscriptStore
from localchat.intelligence.engine import ConversationEngine
from localchat.presentation.server import ChatServer

from test_engine import EchoGenerator, snapshot


@pytest.fixture
def generator():
    return EchoGenerator()


@pytest.fixture
def speech():
    return MagicMock()


@pytest.fixture
def engine(tmp_path, generator):
    history = SessionHistory(tmp_path / "history" / "session_history.txt")
    transcript = TranscriptStore(
        tmp_path / "logs", prefix="api_chat_log_", clock=lambda: datetime(2024, 5, 1)
    )
    return ConversationEngine(generator, history, transcript)


@pytest.fixture
def client(engine, speech):
    server = ChatServer(ServerConfig(), engine, speech)
    with TestClient(server.app) as test_client:
        yield test_client


class TestChatEndpoint:
    """Tests for POST /api/chat."""

    def test_chat_returns_reply(self, client, engine):
        response = client.post("/api/chat", json={"prompt": "hi"})
        assert response.status_code == 200
        assert response.json() == {"response": "re: hi"}
        assert len(engine.history) == 2

    def test_chat_uses_shared_history(self, client, generator):
        client.post("/api/chat", json={"prompt": "hi"})
        client.post("/api/chat", json={"prompt": "how are you"})
        assert generator.prompts[-1] == "User: hi\nAI: re: hi\nUser: how are you\nAI:"

    def test_chat_writes_api_transcript(self, client, tmp_path):
        client.post("/api/chat", json={"prompt": "hi"})
        assert (tmp_path / "logs" / "api_chat_log_2024-05-01.txt").exists()

    @pytest.mark.parametrize("body", [{"prompt": ""}, {"prompt": "   "}, {}, {"prompt": 42}])
    def test_missing_prompt_is_400(self, client, tmp_path, generator, body):
        response = client.post("/api/chat", json=body)
        assert response.status_code == 400
        assert response.json() == {"error": "No prompt provided"}
        assert generator.prompts == []
        assert snapshot(tmp_path) == {}

    def test_non_json_body_is_400(self, client):
        response = client.post(
            "/api/chat", content=b"not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert response.json() == {"error": "No prompt provided"}

    def test_generation_failure_is_502(self, client, engine, generator):
        generator.error = RuntimeError("boom")
        response = client.post("/api/chat", json={"prompt": "hi"})
        assert response.status_code == 502
        assert response.json() == {"error": "Generation failed"}
        assert len(engine.history) == 0


class TestTTSEndpoint:
    """Tests for POST /api/tts."""

    def test_tts_dispatches_speech(self, client, speech):
        response = client.post("/api/tts", json={"text": "read this"})
        assert response.status_code == 200
        assert response.json() == {"status": "speaking"}
        speech.speak.assert_called_once_with("read this")

    def test_tts_without_text_is_400(self, client, speech):
        response = client.post("/api/tts", json={"text": ""})
        assert response.status_code == 400
        assert response.json() == {"error": "No text provided"}
        speech.speak.assert_not_called()

    def test_tts_disabled_is_503(self, engine):
        server = ChatServer(ServerConfig(), engine, None)
        with TestClient(server.app) as client:
            response = client.post("/api/tts", json={"text": "hello"})
        assert response.status_code == 503


class TestPages:

    def test_index_serves_html(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "/api/chat" in response.text

    def test_health(self, client):
        client.post("/api/chat", json={"prompt": "hi"})
        assert client.get("/health").json() == {"status": "ok", "state": "idle", "history": 2}
