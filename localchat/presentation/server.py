"""
FastAPI HTTP server exposing the conversation engine as a JSON API plus a
minimal browser chat page.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse, JSONResponse

from ..audio.dispatcher import SpeechDispatcher
from ..config import ServerConfig
from ..errors import EmptyInput, GenerationFailed
from ..intelligence.engine import ConversationEngine

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


async def _json_body(request: Request) -> dict:
    """Parse the request body as a JSON object; anything else reads as {}."""
    try:
        data = await request.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


class ChatServer:
    """
    HTTP front-end. The engine (and its history lock) is shared by all
    requests; overlapping /api/chat calls queue on the engine's turn lock.
    """

    def __init__(
        self,
        config: ServerConfig,
        engine: ConversationEngine,
        speech: Optional[SpeechDispatcher] = None,
    ):
        self.config = config
        self.engine = engine
        self.speech = speech
        self.app = FastAPI(title="Local Chat Assistant", docs_url=None)
        self.app.add_middleware(
            CORSMiddleware,
            allow_origins=config.cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

        self._setup_routes()

    def _setup_routes(self):
        """Configure FastAPI routes."""

        @self.app.get("/")
        async def index():
            html_path = STATIC_DIR / "index.html"
            if html_path.exists():
                return FileResponse(html_path, media_type="text/html")
            return HTMLResponse("<h1>Local Chat</h1><p>Static files not found.</p>")

        @self.app.get("/health")
        async def health():
            return {
                "status": "ok",
                "state": self.engine.state.value,
                "history": len(self.engine.history),
            }

        @self.app.post("/api/chat")
        async def api_chat(request: Request):
            data = await _json_body(request)
            prompt = data.get("prompt")
            if not isinstance(prompt, str) or not prompt.strip():
                return _error("No prompt provided", 400)

            try:
                reply = await self.engine.submit(prompt)
            except EmptyInput:
                return _error("No prompt provided", 400)
            except GenerationFailed as e:
                logger.error("Chat request failed: %s", e)
                return _error("Generation failed", 502)
            return {"response": reply}

        @self.app.post("/api/tts")
        async def api_tts(request: Request):
            data = await _json_body(request)
            text = data.get("text")
            if not isinstance(text, str) or not text.strip():
                return _error("No text provided", 400)
            if self.speech is None:
                return _error("Speech output disabled", 503)

            self.speech.speak(text)
            return {"status": "speaking"}

    async def start(self):
        """Start the uvicorn server."""
        import uvicorn
        config = uvicorn.Config(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level="warning",
            access_log=False,
        )
        server = uvicorn.Server(config)
        logger.info(
            "HTTP server starting on %s:%d",
            self.config.host, self.config.port
        )
        await server.serve()
