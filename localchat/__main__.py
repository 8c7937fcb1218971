"""
Entry point for running the assistant as a module:
    python -m localchat [cli|serve|init]
"""

from .main import cli

if __name__ == "__main__":
    cli()
