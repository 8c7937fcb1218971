"""
Error types for the conversation core.

Only EmptyInput and GenerationFailed reach the front-ends as turn failures;
the storage and speech errors are reported and swallowed by their callers.
"""


class AssistantError(Exception):
    """Base exception for all assistant errors."""


class EmptyInput(AssistantError):
    """The utterance was empty or whitespace-only."""

    def __init__(self, message: str = "Empty input"):
        super().__init__(message)


class GenerationFailed(AssistantError):
    """The text-generation backend errored or timed out."""

    def __init__(self, cause: BaseException):
        self.cause = cause
        detail = str(cause) or type(cause).__name__
        super().__init__(f"Generation failed: {detail}")


class GeneratorNotReady(AssistantError):
    """A generator was used before initialize() completed."""


class LogWriteFailed(AssistantError):
    """A transcript entry could not be written."""


class HistoryWriteFailed(AssistantError):
    """The session history file could not be rewritten."""


class CorruptHistory(AssistantError):
    """The session history file cannot be parsed into well-formed turns."""

    def __init__(self, path: str, line_no: int, line: str):
        self.path = path
        self.line_no = line_no
        super().__init__(f"{path}:{line_no}: unreadable history line {line[:60]!r}")


class SpeechFailed(AssistantError):
    """The speech synthesis backend failed."""


class SpeechCaptureFailed(AssistantError):
    """Microphone capture or recognition produced no text."""
