"""
Message plugins: ``*.py`` files in the plugin directory that define
``on_message(message) -> message``. Each user utterance is passed through
them in file-name order before it reaches the model.
"""

import importlib.util
import logging
from pathlib import Path
from typing import Callable, List

logger = logging.getLogger(__name__)

MessageHook = Callable[[str], str]

SAMPLE_PLUGIN = '''\
# Sample plugin for the chat assistant
def on_message(message):
    # Modify or analyze message here
    return message
'''


def load_plugins(plugin_dir) -> List[MessageHook]:
    """Import every plugin module in ``plugin_dir`` and collect its hook."""
    directory = Path(plugin_dir)
    if not directory.is_dir():
        return []

    hooks: List[MessageHook] = []
    for path in sorted(directory.glob("*.py")):
        if path.name.startswith("_"):
            continue
        module_name = f"localchat_plugin_{path.stem}"
        try:
            spec = importlib.util.spec_from_file_location(module_name, path)
            module = importlib.util.module_from_spec(spec)
            spec.loader.exec_module(module)
        except Exception:
            logger.exception("Failed to load plugin %s", path)
            continue

        hook = getattr(module, "on_message", None)
        if callable(hook):
            hooks.append(hook)
            logger.info("Loaded plugin %s", path.name)
        else:
            logger.debug("Plugin %s has no on_message(), skipped", path.name)
    return hooks


def apply_plugins(hooks: List[MessageHook], message: str) -> str:
    """Run ``message`` through each hook; a failing hook is logged and skipped."""
    for hook in hooks:
        try:
            result = hook(message)
        except Exception:
            logger.exception("Plugin %s raised", getattr(hook, "__module__", hook))
            continue
        if isinstance(result, str):
            message = result
    return message


def write_sample_plugin(plugin_dir) -> Path:
    """Create the plugin directory with a pass-through sample plugin."""
    directory = Path(plugin_dir)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / "sample_plugin.py"
    if not path.exists():
        path.write_text(SAMPLE_PLUGIN, encoding="utf-8")
    return path
