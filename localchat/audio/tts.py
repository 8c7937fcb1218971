"""
Offline text-to-speech using pyttsx3 (SAPI5 / NSSpeechSynthesizer / eSpeak).
"""

import logging
import threading

from ..config import SpeechConfig
from ..errors import SpeechFailed
from .base_tts import BaseSynthesizer

logger = logging.getLogger(__name__)


class Pyttsx3Synthesizer(BaseSynthesizer):
    """
    Lazily initialised pyttsx3 engine.

    pyttsx3 owns a single run loop per driver, so playback calls are
    serialized here; ``stop`` is left unlocked so it can cut a running job.
    """

    def __init__(self, config: SpeechConfig):
        self.config = config
        self._engine = None
        self._init_lock = threading.Lock()
        self._play_lock = threading.Lock()

    def _get_engine(self):
        with self._init_lock:
            if self._engine is None:
                import pyttsx3

                engine = pyttsx3.init()
                if self.config.tts_voice:
                    wanted = self.config.tts_voice.lower()
                    for voice in engine.getProperty("voices"):
                        if wanted in (voice.name or "").lower():
                            engine.setProperty("voice", voice.id)
                            break
                    else:
                        logger.warning("TTS voice %r not found, using default", self.config.tts_voice)
                if self.config.tts_rate:
                    engine.setProperty("rate", self.config.tts_rate)
                self._engine = engine
                logger.info("pyttsx3 engine initialized")
            return self._engine

    def say(self, text: str) -> None:
        try:
            engine = self._get_engine()
            with self._play_lock:
                engine.say(text)
                engine.runAndWait()
        except Exception as e:  # driver errors are not typed
            raise SpeechFailed(f"{type(e).__name__}: {e}") from e

    def stop(self) -> None:
        if self._engine is not None:
            self._engine.stop()
