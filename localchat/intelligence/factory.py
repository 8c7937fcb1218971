"""
Factory for creating text-generation backends based on configuration.
"""

from ..config import ModelConfig
from .base_generator import BaseGenerator
from .gpt4all_generator import GPT4AllGenerator


def create_generator(config: ModelConfig) -> BaseGenerator:
    """
    Instantiate the generator named by ``config.backend``.
    """
    backend = config.backend.lower()

    if backend == "gpt4all":
        return GPT4AllGenerator(config)
    elif backend in ("openai", "ollama", "http"):
        from .http_generator import OpenAICompatGenerator
        return OpenAICompatGenerator(config)
    else:
        raise ValueError(f"Unknown model backend: {backend}")
