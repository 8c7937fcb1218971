"""
Base abstract class for text-generation backends.
"""

from abc import ABC, abstractmethod

from ..config import ModelConfig


class BaseGenerator(ABC):
    """
    Abstract base class for all text-generation backends.
    """

    def __init__(self, config: ModelConfig):
        self.config = config

    @abstractmethod
    async def initialize(self) -> None:
        """Load the model or open the client connection."""
        pass

    @abstractmethod
    async def generate(self, prompt: str, max_tokens: int) -> str:
        """
        Complete a prompt.

        Args:
            prompt: the fully composed prompt, ending with the assistant cue.
            max_tokens: upper bound on generated tokens.

        Returns:
            The raw completion text. Raises on any backend failure.
        """
        pass

    async def close(self) -> None:
        """Release backend resources."""
        pass
