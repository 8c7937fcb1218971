"""
Interactive console front-end.

Reads lines from stdin (on a daemon thread, so replies can keep speaking
while the next message is typed) and feeds them to the conversation engine.
"""

import asyncio
import contextlib
import logging
import threading
from typing import Callable, Optional

from ..audio.stt import SpeechListener
from ..errors import EmptyInput, GenerationFailed, SpeechCaptureFailed
from ..intelligence.engine import ConversationEngine

logger = logging.getLogger(__name__)

EXIT_COMMANDS = ("exit", "quit")
VOICE_COMMAND = "voice"
RESET_COMMAND = "reset"


class ChatConsole:
    """Read-eval-print loop over a ConversationEngine."""

    def __init__(
        self,
        engine: ConversationEngine,
        listener: Optional[SpeechListener] = None,
        speak_replies: bool = True,
        input_func: Callable[[str], str] = input,
        output: Callable[[str], None] = print,
    ):
        self.engine = engine
        self.listener = listener
        self.speak_replies = speak_replies
        self._input = input_func
        self._output = output

    def _banner(self):
        self._output("Welcome to the local chat assistant!")
        self._output("Type 'exit' or 'quit' to leave.")
        if self.listener is not None:
            self._output(f"Type '{VOICE_COMMAND}' to speak your next message.")
        self._output(f"Type '{RESET_COMMAND}' to start a new conversation.")

    async def _read_line(self) -> Optional[str]:
        """
        Prompt for one line on a daemon thread. An interrupted read leaves
        the thread blocked in input(), which must not hold up shutdown.
        """
        loop = asyncio.get_running_loop()
        future = loop.create_future()
        threading.Thread(
            target=self._read_into, args=(loop, future), name="console-input", daemon=True
        ).start()
        return await future

    def _read_into(self, loop: asyncio.AbstractEventLoop, future: asyncio.Future) -> None:
        try:
            line = self._input("You: ")
        except EOFError:
            line = None
        except Exception as e:
            self._deliver(loop, future.set_exception, future, e)
            return
        self._deliver(loop, future.set_result, future, line)

    @staticmethod
    def _deliver(loop, setter, future, value) -> None:
        def _set():
            if not future.done():
                setter(value)

        # the loop is gone once the console has exited
        with contextlib.suppress(RuntimeError):
            loop.call_soon_threadsafe(_set)

    async def _capture_voice(self) -> Optional[str]:
        if self.listener is None:
            self._output("Voice input is not available.")
            return None
        self._output("Listening...")
        try:
            text = await self.listener.listen()
        except SpeechCaptureFailed as e:
            self._output(f"Voice recognition error: {e}")
            return None
        self._output(f"You said: {text}")
        return text

    async def run(self):
        """Loop until exit/quit or end of input."""
        self._banner()
        while True:
            line = await self._read_line()
            if line is None:
                self._output("Goodbye!")
                break

            user_input = line.strip()
            command = user_input.lower()
            if command in EXIT_COMMANDS:
                self._output("Goodbye!")
                break
            if command == RESET_COMMAND:
                await self.engine.reset()
                self._output("Conversation history cleared.")
                continue
            if command == VOICE_COMMAND:
                user_input = await self._capture_voice()
                if not user_input:
                    continue

            try:
                reply = await self.engine.submit(user_input, speak=self.speak_replies)
            except EmptyInput:
                continue
            except GenerationFailed as e:
                self._output(f"Error: {e}")
                continue
            self._output(f"AI: {reply}")
