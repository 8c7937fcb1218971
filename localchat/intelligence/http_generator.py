"""
HTTP text generation against an OpenAI-compatible completions endpoint
(Ollama, llama.cpp server, LM Studio, ...).
"""

import logging
from typing import Optional

import httpx

from ..errors import GeneratorNotReady
from .base_generator import BaseGenerator

logger = logging.getLogger(__name__)

STOP_SEQUENCES = ["\nUser:"]


class OpenAICompatGenerator(BaseGenerator):
    """
    Async completion client using httpx.
    """

    def __init__(self, config, transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__(config)
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def initialize(self):
        """Create the HTTP client."""
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        self._client = httpx.AsyncClient(
            base_url=self.config.base_url,
            headers=headers,
            timeout=httpx.Timeout(self.config.request_timeout, connect=10.0),
            transport=self._transport,
        )
        logger.info(
            "HTTP generator initialized (model=%s, url=%s)",
            self.config.model, self.config.base_url,
        )

    async def close(self):
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def generate(self, prompt: str, max_tokens: int) -> str:
        if not self._client:
            raise GeneratorNotReady("HTTP generator not initialized")

        payload = {
            "model": self.config.model,
            "prompt": prompt,
            "max_tokens": max_tokens,
            "temperature": self.config.temperature,
            "stop": STOP_SEQUENCES,
            "stream": False,
        }
        response = await self._client.post("/completions", json=payload)
        response.raise_for_status()
        data = response.json()
        try:
            text = data["choices"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ValueError(f"Unexpected completion payload: {data!r:.200}") from e

        logger.debug("Completion received (%d chars)", len(text))
        return text
