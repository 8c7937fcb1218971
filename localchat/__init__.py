"""Local conversational assistant built on a locally-hosted language model."""

__version__ = "0.1.0"
