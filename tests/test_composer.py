"""
Unit tests for prompt composition.
"""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from localchat.context.composer import compose
from localchat.context.schema import Utterance


def conversation(turns):
    history = []
    for i in range(turns):
        history.append(Utterance.user(f"q{i}"))
        history.append(Utterance.assistant(f"a{i}"))
    return history


class TestCompose:
    """Tests for compose()."""

    def test_two_utterance_window(self):
        history = [Utterance.user("hi"), Utterance.assistant("hello")]
        prompt = compose(history, "how are you", window_size=2)
        assert prompt == "User: hi\nAI: hello\nUser: how are you\nAI:"

    def test_empty_history(self):
        assert compose([], "hi") == "User: hi\nAI:"

    def test_zero_window_drops_history(self):
        assert compose(conversation(3), "hi", window_size=0) == "User: hi\nAI:"

    def test_window_bound_holds_for_long_history(self):
        """Never more than window_size prior utterances, newest kept."""
        for window in (1, 3, 20):
            prompt = compose(conversation(50), "next", window_size=window)
            lines = prompt.split("\n")
            assert len(lines) == window + 2
            assert lines[-3] == "AI: a49"

    def test_odd_window_starts_mid_turn(self):
        prompt = compose(conversation(2), "next", window_size=3)
        assert prompt == "AI: a0\nUser: q1\nAI: a1\nUser: next\nAI:"

    def test_window_larger_than_history(self):
        prompt = compose(conversation(1), "next", window_size=20)
        assert prompt == "User: q0\nAI: a0\nUser: next\nAI:"

    def test_is_deterministic(self):
        history = conversation(10)
        assert compose(history, "x", 5) == compose(list(history), "x", 5)

    def test_does_not_mutate_history(self):
        history = conversation(3)
        snapshot = list(history)
        compose(history, "x", 2)
        assert history == snapshot

    def test_negative_window_rejected(self):
        with pytest.raises(ValueError):
            compose([], "x", window_size=-1)
