"""
Speech-to-text capture using the SpeechRecognition package.
Microphone capture blocks, so it runs in a thread executor.
"""

import asyncio
import logging

from ..config import SpeechConfig
from ..errors import SpeechCaptureFailed

logger = logging.getLogger(__name__)


class SpeechListener:
    """
    Records one phrase from the default microphone and transcribes it with
    the recognizer named by ``config.stt_engine`` (``recognize_<name>``).
    """

    def __init__(self, config: SpeechConfig):
        self.config = config
        self._recognizer = None

    def _get_recognizer(self):
        if self._recognizer is None:
            import speech_recognition as sr

            self._recognizer = sr.Recognizer()
            self._recognizer.dynamic_energy_threshold = True
        return self._recognizer

    async def listen(self) -> str:
        """Capture and transcribe one utterance. Raises SpeechCaptureFailed."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._do_listen)

    def _do_listen(self) -> str:
        import speech_recognition as sr

        recognizer = self._get_recognizer()
        recognize = getattr(recognizer, f"recognize_{self.config.stt_engine}", None)
        if recognize is None:
            raise SpeechCaptureFailed(f"Unknown speech recognizer: {self.config.stt_engine}")

        try:
            with sr.Microphone() as source:
                audio = recognizer.listen(
                    source,
                    timeout=self.config.listen_timeout,
                    phrase_time_limit=self.config.phrase_time_limit,
                )
        except sr.WaitTimeoutError as e:
            raise SpeechCaptureFailed("No speech detected") from e
        except (OSError, AttributeError) as e:
            # AttributeError: PyAudio missing; OSError: no input device
            raise SpeechCaptureFailed(f"Microphone unavailable: {e}") from e

        try:
            text = recognize(audio)
        except sr.UnknownValueError as e:
            raise SpeechCaptureFailed("Could not understand audio") from e
        except sr.RequestError as e:
            raise SpeechCaptureFailed(f"Recognition service error: {e}") from e

        text = (text or "").strip()
        if not text:
            raise SpeechCaptureFailed("Could not understand audio")
        logger.info("Recognized speech: %s", text[:80])
        return text
