from .composer import compose
from .history import SessionHistory
from .schema import Role, Utterance
from .transcript import TranscriptStore

__all__ = ["compose", "SessionHistory", "Role", "Utterance", "TranscriptStore"]
