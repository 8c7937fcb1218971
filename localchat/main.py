"""
Main orchestrator: builds the engine once and hands it to a front-end.
Entry point: python -m localchat [cli|serve|init]
"""

import argparse
import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from .audio.dispatcher import SpeechDispatcher
from .audio.factory import create_speech_dispatcher
from .audio.stt import SpeechListener
from .config import AppConfig
from .context.history import SessionHistory
from .context.transcript import TranscriptStore
from .errors import CorruptHistory
from .intelligence.engine import ConversationEngine
from .intelligence.factory import create_generator
from .plugins import load_plugins, write_sample_plugin
from .presentation.cli import ChatConsole
from .presentation.server import ChatServer

logger = logging.getLogger("localchat")

CLI_LOG_PREFIX = "chat_log_"
API_LOG_PREFIX = "api_chat_log_"


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def load_history(config: AppConfig) -> SessionHistory:
    """Load the session history, setting an unreadable file aside."""
    history = SessionHistory(config.storage.history_path, config.storage.max_retained)
    try:
        history.load()
    except CorruptHistory as e:
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
        backup = history.path.with_name(f"{history.path.name}.corrupt-{stamp}")
        try:
            history.path.rename(backup)
        except OSError as rename_error:
            logger.error("%s; could not move it aside (%s)", e, rename_error)
        else:
            logger.error("%s; moved to %s", e, backup)
        logger.warning("Starting with an empty session history")
    return history


def build_engine(
    config: AppConfig,
    generator,
    log_prefix: str,
    speech: Optional[SpeechDispatcher] = None,
) -> ConversationEngine:
    return ConversationEngine(
        generator=generator,
        history=load_history(config),
        transcript=TranscriptStore(config.storage.log_dir, prefix=log_prefix),
        speech=speech,
        window_size=config.history_window,
        max_tokens=config.model.max_tokens,
        generation_timeout=config.model.generation_timeout,
        plugins=load_plugins(config.storage.plugin_dir),
    )


async def run(config: AppConfig, mode: str) -> None:
    """Bootstrap the core and run the chosen front-end until it exits."""
    generator = create_generator(config.model)
    logger.info("Loading %s model...", config.model.backend)
    await generator.initialize()

    speech = create_speech_dispatcher(config.speech)
    log_prefix = API_LOG_PREFIX if mode == "serve" else CLI_LOG_PREFIX
    engine = build_engine(config, generator, log_prefix, speech)

    try:
        if mode == "serve":
            server = ChatServer(config.server, engine, speech)
            await server.start()
        else:
            console = ChatConsole(
                engine,
                listener=SpeechListener(config.speech),
                speak_replies=speech is not None,
            )
            await console.run()
    finally:
        if speech is not None:
            await speech.shutdown()
        await generator.close()
        logger.info("Bye!")


def init_dirs(config: AppConfig) -> None:
    """Create the history, log and plugin directories plus a sample plugin."""
    for directory in (config.storage.history_dir, config.storage.log_dir):
        Path(directory).mkdir(parents=True, exist_ok=True)
    sample = write_sample_plugin(config.storage.plugin_dir)
    print(f"History: {config.storage.history_path}")
    print(f"Logs:    {config.storage.log_dir}")
    print(f"Plugins: {sample.parent}")


def cli(argv=None) -> None:
    parser = argparse.ArgumentParser(
        prog="localchat",
        description="Local conversational assistant on a locally-hosted language model.",
    )
    parser.add_argument(
        "mode", nargs="?", default="cli", choices=("cli", "serve", "init"),
        help="cli: interactive console (default); serve: HTTP API and web page; "
             "init: create data directories and a sample plugin",
    )
    parser.add_argument("--host", help="override SERVER_HOST")
    parser.add_argument("--port", type=int, help="override SERVER_PORT")
    parser.add_argument("--no-tts", action="store_true", help="disable spoken replies")
    args = parser.parse_args(argv)

    config = AppConfig.from_env()
    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    if args.no_tts:
        config.speech.tts_enabled = False
    setup_logging(config.log_level)

    if args.mode == "init":
        init_dirs(config)
        return

    try:
        asyncio.run(run(config, args.mode))
    except KeyboardInterrupt:
        logger.info("Interrupted")


if __name__ == "__main__":
    cli()
