"""
Speech output dispatcher: fire-and-forget text-to-speech jobs that never
block or fail the conversation turn that requested them.
"""

import asyncio
import logging
from typing import Optional, Set

from .base_tts import BaseSynthesizer

logger = logging.getLogger(__name__)


class SpeechDispatcher:
    """
    Schedules synthesis on the running event loop and returns at once.

    By default jobs are independent and may overlap. With ``interrupt=True``
    only one job is live: a new one cancels the previous task and stops the
    synthesizer.
    """

    def __init__(self, synthesizer: BaseSynthesizer, interrupt: bool = False):
        self.synthesizer = synthesizer
        self.interrupt = interrupt
        self._tasks: Set[asyncio.Task] = set()
        self._current: Optional[asyncio.Task] = None

    @property
    def pending(self) -> int:
        """Number of jobs not yet finished."""
        return len(self._tasks)

    def speak(self, text: str) -> Optional[asyncio.Task]:
        """
        Schedule ``text`` to be spoken. Must be called from within a running
        event loop. Returns the job's task handle, or None for empty text.
        """
        text = (text or "").strip()
        if not text:
            return None

        loop = asyncio.get_running_loop()
        if self.interrupt:
            self._cancel_current()

        task = loop.create_task(self._run(text))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        self._current = task
        return task

    def _cancel_current(self) -> None:
        if self._current is None or self._current.done():
            return
        self._current.cancel()
        try:
            self.synthesizer.stop()
        except Exception as e:
            logger.warning("Could not stop speech in progress: %s", e)

    async def _run(self, text: str) -> None:
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self.synthesizer.say, text)
        except asyncio.CancelledError:
            logger.debug("Speech job cancelled")
            raise
        except Exception as e:
            logger.warning("Speech failed: %s", e)
        else:
            logger.debug("Spoke %d chars", len(text))

    async def shutdown(self) -> None:
        """Cancel outstanding jobs."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            try:
                self.synthesizer.stop()
            except Exception as e:
                logger.warning("Could not stop speech in progress: %s", e)
            await asyncio.gather(*tasks, return_exceptions=True)
        self._current = None
