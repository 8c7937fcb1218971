"""
Local text generation with a GPT4All model file.
Runs inference in a thread executor to avoid blocking the async loop.
"""

import asyncio
import logging
import os
import threading

from ..errors import GeneratorNotReady
from .base_generator import BaseGenerator

logger = logging.getLogger(__name__)


class GPT4AllGenerator(BaseGenerator):
    """
    Wraps gpt4all.GPT4All for non-blocking completion.

    The model is not thread-safe. A worker thread left running by a
    timed-out call still holds ``_model_lock``, so the next call waits
    for it instead of entering the model alongside it.
    """

    def __init__(self, config):
        super().__init__(config)
        self._model = None
        self._model_lock = threading.Lock()

    async def initialize(self):
        """Load the model file (run in executor since it's heavy)."""
        loop = asyncio.get_running_loop()
        self._model = await loop.run_in_executor(None, self._load_model)
        logger.info("GPT4All model loaded (%s)", self.config.model_path)

    def _load_model(self):
        from gpt4all import GPT4All

        model_dir, model_file = os.path.split(self.config.model_path)
        return GPT4All(
            model_name=model_file,
            model_path=model_dir or None,
            allow_download=False,
            device=self.config.device,
        )

    async def generate(self, prompt: str, max_tokens: int) -> str:
        if self._model is None:
            raise GeneratorNotReady("GPT4All model not loaded. Call initialize() first.")

        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._do_generate, prompt, max_tokens)

    def _do_generate(self, prompt: str, max_tokens: int) -> str:
        """Synchronous generation (runs in thread pool)."""
        with self._model_lock:
            if self._model is None:
                raise GeneratorNotReady("GPT4All model was closed")
            return self._model.generate(
                prompt,
                max_tokens=max_tokens,
                temp=self.config.temperature,
            )

    def _close_model(self):
        with self._model_lock:
            if self._model is not None:
                self._model.close()
                self._model = None

    async def close(self):
        if self._model is not None:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._close_model)
