"""Keybindings manager and keybinding configuration files."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Literal, Union, get_args

from cm.tui.keys import KeyId, KeyIdError, KeyStroke, parse_key_id

logger = logging.getLogger(__name__)

Action = Literal[
    # String list commands
    "insertAfter",
    "insertBefore",
    "duplicateAfter",
    "duplicateBefore",
    "startEdit",
    "confirm",
    "abort",
    # Item list navigation and reordering
    "cursorUp",
    "cursorDown",
    "cursorTop",
    "cursorBottom",
    "pageUp",
    "pageDown",
    "moveItemUp",
    "moveItemDown",
    "deleteItem",
    # Edit field cursor movement
    "cursorLeft",
    "cursorRight",
    "cursorWordLeft",
    "cursorWordRight",
    "cursorLineStart",
    "cursorLineEnd",
    # Edit field deletion
    "deleteCharBackward",
    "deleteCharForward",
    "deleteWordBackward",
    "deleteToLineStart",
    "deleteToLineEnd",
    # Global
    "quit",
]

ACTIONS: frozenset[str] = frozenset(get_args(Action))

KeybindingsConfig = dict[Action, Union[KeyId, list[KeyId]]]

DEFAULT_KEYBINDINGS: dict[Action, KeyId | list[KeyId]] = {
    # String list commands
    "insertAfter": "i",
    "insertBefore": "I",
    "duplicateAfter": "alt+i",
    "duplicateBefore": "alt+I",
    "startEdit": "f2",
    "confirm": "enter",
    "abort": "escape",
    # Item list navigation and reordering
    "cursorUp": ["up", "k"],
    "cursorDown": ["down", "j"],
    "cursorTop": ["home", "g"],
    "cursorBottom": ["end", "G"],
    "pageUp": "pageUp",
    "pageDown": "pageDown",
    "moveItemUp": "K",
    "moveItemDown": "J",
    "deleteItem": ["D", "delete"],
    # Edit field cursor movement
    "cursorLeft": ["left", "ctrl+b"],
    "cursorRight": ["right", "ctrl+f"],
    "cursorWordLeft": ["alt+b", "alt+left"],
    "cursorWordRight": ["alt+f", "alt+right"],
    "cursorLineStart": ["home", "ctrl+a"],
    "cursorLineEnd": ["end", "ctrl+e"],
    # Edit field deletion
    "deleteCharBackward": "backspace",
    "deleteCharForward": ["delete", "ctrl+d"],
    "deleteWordBackward": ["ctrl+w", "alt+backspace"],
    "deleteToLineStart": "ctrl+u",
    "deleteToLineEnd": "ctrl+k",
    # Global
    "quit": ["q", "ctrl+c"],
}

CONFIG_DIR_NAME = ".cm"
KEYBINDINGS_FILE_NAME = "keybindings.json"
KEYBINDINGS_ENV_VAR = "CM_KEYBINDINGS"


class KeybindingsManager:
    """Maps actions to the keystrokes bound to them."""

    def __init__(self, config: KeybindingsConfig | None = None) -> None:
        self._action_to_strokes: dict[Action, list[KeyStroke]] = {}
        self._build_maps(config or {})

    def _build_maps(self, config: KeybindingsConfig) -> None:
        self._action_to_strokes.clear()

        # Start with defaults
        for action, keys in DEFAULT_KEYBINDINGS.items():
            self._action_to_strokes[action] = _parse_keys(keys)

        # Override with user config
        for action, keys in config.items():
            self._action_to_strokes[action] = _parse_keys(keys)

    def matches(self, stroke: KeyStroke, action: Action) -> bool:
        """Check if *stroke* is bound to *action*."""
        return stroke in self._action_to_strokes.get(action, ())

    def get_keys(self, action: Action) -> list[KeyStroke]:
        """Get keystrokes bound to an action."""
        return list(self._action_to_strokes.get(action, []))

    def set_config(self, config: KeybindingsConfig) -> None:
        """Update configuration."""
        self._build_maps(config)


def _parse_keys(keys: KeyId | list[KeyId]) -> list[KeyStroke]:
    key_array = keys if isinstance(keys, list) else [keys]
    return [parse_key_id(key) for key in key_array]


# ---------------------------------------------------------------------------
# Config files
# ---------------------------------------------------------------------------


def default_keybindings_path() -> str:
    """Return ``$CM_KEYBINDINGS`` or ``~/.cm/keybindings.json``."""
    env_path = os.environ.get(KEYBINDINGS_ENV_VAR)
    if env_path:
        return env_path
    return str(Path.home() / CONFIG_DIR_NAME / KEYBINDINGS_FILE_NAME)


def _load_from_file(path: str) -> tuple[dict[str, Any], Exception | None]:
    """Load a JSON object from *path*. Returns (data, error)."""
    if not os.path.exists(path):
        return {}, None
    try:
        with open(path, encoding="utf-8") as f:
            data = json.loads(f.read())
    except (OSError, json.JSONDecodeError) as e:
        return {}, e
    if not isinstance(data, dict):
        return {}, ValueError("keybindings file must contain a JSON object")
    return data, None


def validate_keybindings_config(raw: dict[str, Any]) -> KeybindingsConfig:
    """Keep the entries of *raw* that name a known action and valid keys."""
    config: KeybindingsConfig = {}
    for action, keys in raw.items():
        if action not in ACTIONS:
            logger.warning("Ignoring keybinding for unknown action %r", action)
            continue
        if isinstance(keys, str):
            keys = [keys]
        if not isinstance(keys, list) or not all(isinstance(k, str) for k in keys):
            logger.warning("Ignoring keybinding for %r: expected a key id or list of key ids", action)
            continue
        try:
            for key in keys:
                parse_key_id(key)
        except KeyIdError as e:
            logger.warning("Ignoring keybinding for %r: %s", action, e)
            continue
        config[action] = list(keys)  # type: ignore[index]
    return config


def load_keybindings_config(path: str | None = None) -> KeybindingsConfig:
    """Read keybinding overrides from a JSON file.

    A missing file yields an empty config. Unreadable or malformed files
    are logged and also yield an empty config.
    """
    path = path or default_keybindings_path()
    raw, error = _load_from_file(path)
    if error is not None:
        logger.warning("Could not load keybindings from %s: %s", path, error)
        return {}
    return validate_keybindings_config(raw)


# ---------------------------------------------------------------------------
# Process-wide manager
# ---------------------------------------------------------------------------

_global_keybindings: KeybindingsManager | None = None


def get_keybindings() -> KeybindingsManager:
    global _global_keybindings
    if _global_keybindings is None:
        _global_keybindings = KeybindingsManager()
    return _global_keybindings


def set_keybindings(manager: KeybindingsManager) -> None:
    global _global_keybindings
    _global_keybindings = manager
