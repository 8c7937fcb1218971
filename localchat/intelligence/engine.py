"""
Conversation engine. Runs one exchange at a time:
compose prompt → generate → record history, transcript and speech.
"""

import asyncio
import logging
from enum import Enum
from typing import List, Optional

from ..audio.dispatcher import SpeechDispatcher
from ..context.composer import DEFAULT_WINDOW_SIZE, compose
from ..context.history import SessionHistory
from ..context.schema import Utterance
from ..context.transcript import TranscriptStore
from ..errors import EmptyInput, GenerationFailed, HistoryWriteFailed, LogWriteFailed
from ..plugins import MessageHook, apply_plugins
from .base_generator import BaseGenerator

logger = logging.getLogger(__name__)


class EngineState(Enum):
    IDLE = "idle"
    PROCESSING = "processing"


class ConversationEngine:
    """
    Owns the session history and serializes turns against it.

    One instance is built at startup and shared by every front-end; the
    turn lock covers the whole compose → generate → record sequence so
    concurrent callers never interleave history appends or file rewrites.
    """

    def __init__(
        self,
        generator: BaseGenerator,
        history: SessionHistory,
        transcript: TranscriptStore,
        speech: Optional[SpeechDispatcher] = None,
        window_size: int = DEFAULT_WINDOW_SIZE,
        max_tokens: int = 512,
        generation_timeout: Optional[float] = None,
        plugins: Optional[List[MessageHook]] = None,
    ):
        if window_size < 0:
            raise ValueError(f"window_size must be >= 0, got {window_size}")
        self.generator = generator
        self.history = history
        self.transcript = transcript
        self.speech = speech
        self.window_size = window_size
        self.max_tokens = max_tokens
        self.generation_timeout = generation_timeout
        self.plugins = list(plugins or [])
        self.state = EngineState.IDLE
        self._turn_lock = asyncio.Lock()

    async def submit(self, raw_text: str, speak: bool = False) -> str:
        """
        Run one exchange and return the assistant's reply.

        Raises:
            EmptyInput: the utterance is blank; nothing was touched.
            GenerationFailed: the model call failed; history and transcript
                              are unchanged.
        """
        text = (raw_text or "").strip()
        if text and self.plugins:
            text = apply_plugins(self.plugins, text).strip()
        if not text:
            raise EmptyInput()

        async with self._turn_lock:
            self.state = EngineState.PROCESSING
            try:
                reply = await self._generate(text)
                self._record(text, reply)
            finally:
                self.state = EngineState.IDLE

            if speak and self.speech is not None:
                self.speech.speak(reply)
        return reply

    async def _generate(self, text: str) -> str:
        prompt = compose(self.history, text, self.window_size)
        logger.debug("Prompt (%d chars, %d history utterances)", len(prompt), len(self.history))
        try:
            call = self.generator.generate(prompt, self.max_tokens)
            if self.generation_timeout:
                response = await asyncio.wait_for(call, timeout=self.generation_timeout)
            else:
                response = await call
        except asyncio.TimeoutError as e:
            logger.error("Generation timed out after %.1fs", self.generation_timeout)
            raise GenerationFailed(e) from e
        except Exception as e:
            logger.error("Generation failed: %s: %s", type(e).__name__, e)
            raise GenerationFailed(e) from e
        return (response or "").strip()

    def _record(self, user_text: str, reply: str) -> None:
        self.history.append(Utterance.user(user_text))
        self.history.append(Utterance.assistant(reply))
        try:
            self.history.persist()
        except HistoryWriteFailed as e:
            logger.warning("Session history not saved: %s", e)
        try:
            self.transcript.append(user_text, reply)
        except LogWriteFailed as e:
            logger.warning("Transcript not written: %s", e)

    async def reset(self) -> None:
        """Forget the current conversation and rewrite the history file."""
        async with self._turn_lock:
            self.history.clear()
            try:
                self.history.persist()
            except HistoryWriteFailed as e:
                logger.warning("Session history not saved: %s", e)
        logger.info("Session history cleared")
