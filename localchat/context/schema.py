from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class Role(str, Enum):
    """Who spoke an utterance."""
    USER = "user"
    ASSISTANT = "assistant"

    @property
    def label(self) -> str:
        """Prefix used in prompts and in the history file."""
        return "User" if self is Role.USER else "AI"


@dataclass(frozen=True)
class Utterance:
    """A single turn's text attributed to the user or the assistant."""
    role: Role
    text: str
    timestamp: datetime = field(default_factory=datetime.now, compare=False)

    @classmethod
    def user(cls, text: str) -> "Utterance":
        return cls(Role.USER, text)

    @classmethod
    def assistant(cls, text: str) -> "Utterance":
        return cls(Role.ASSISTANT, text)
