"""
Base abstract class for speech synthesis backends.
"""

from abc import ABC, abstractmethod


class BaseSynthesizer(ABC):
    """
    Blocking text-to-speech backend. The dispatcher runs ``say`` in a
    worker thread, so implementations may block until playback ends.
    """

    @abstractmethod
    def say(self, text: str) -> None:
        """Speak ``text``. Raises SpeechFailed on backend errors."""
        pass

    def stop(self) -> None:
        """Interrupt playback in progress, if the backend supports it."""
        pass
