"""
Factory for the speech output side channel.
"""

from typing import Optional

from ..config import SpeechConfig
from .dispatcher import SpeechDispatcher
from .tts import Pyttsx3Synthesizer


def create_speech_dispatcher(config: SpeechConfig) -> Optional[SpeechDispatcher]:
    """
    Build the dispatcher for the configured synthesizer, or None when
    speech output is disabled.
    """
    if not config.tts_enabled:
        return None
    return SpeechDispatcher(Pyttsx3Synthesizer(config), interrupt=config.tts_interrupt)
