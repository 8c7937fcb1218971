"""
Prompt composer: renders a bounded window of history plus the new user
utterance into a plain-text completion prompt.
"""

from typing import Iterable, List

from .schema import Role, Utterance

DEFAULT_WINDOW_SIZE = 20
ASSISTANT_CUE = f"{Role.ASSISTANT.label}:"


def render(utterance: Utterance) -> str:
    return f"{utterance.role.label}: {utterance.text}"


def compose(
    history: Iterable[Utterance],
    new_utterance: str,
    window_size: int = DEFAULT_WINDOW_SIZE,
) -> str:
    """
    Build the prompt for the next model call.

    Only the last ``window_size`` utterances of history are included, oldest
    first. Anything older is left out of the prompt.
    """
    if window_size < 0:
        raise ValueError(f"window_size must be >= 0, got {window_size}")

    turns: List[Utterance] = list(history)
    window = turns[-window_size:] if window_size else []

    lines = [render(u) for u in window]
    lines.append(f"{Role.USER.label}: {new_utterance}")
    lines.append(ASSISTANT_CUE)
    return "\n".join(lines)
