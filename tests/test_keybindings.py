"""Tests for cm.tui.keybindings -- keybindings manager and config files."""

from __future__ import annotations

import json
import logging

import pytest

import cm.tui.keybindings as kb_module
from cm.tui.keybindings import (
    ACTIONS,
    DEFAULT_KEYBINDINGS,
    KEYBINDINGS_ENV_VAR,
    KeybindingsManager,
    default_keybindings_path,
    get_keybindings,
    load_keybindings_config,
    set_keybindings,
    validate_keybindings_config,
)
from cm.tui.keys import KeyIdError, KeyStroke, parse_input, parse_key_id


def _stroke(data: str) -> KeyStroke:
    (stroke,) = parse_input(data)
    return stroke


# ---------------------------------------------------------------------------
# DEFAULT_KEYBINDINGS constant
# ---------------------------------------------------------------------------


class TestDefaultKeybindings:
    """DEFAULT_KEYBINDINGS binds every action to valid key ids."""

    def test_every_action_has_a_default(self):
        assert set(DEFAULT_KEYBINDINGS) == ACTIONS

    def test_every_default_parses(self):
        for keys in DEFAULT_KEYBINDINGS.values():
            for key in keys if isinstance(keys, list) else [keys]:
                parse_key_id(key)

    def test_widget_commands(self):
        assert DEFAULT_KEYBINDINGS["insertAfter"] == "i"
        assert DEFAULT_KEYBINDINGS["insertBefore"] == "I"
        assert DEFAULT_KEYBINDINGS["duplicateAfter"] == "alt+i"
        assert DEFAULT_KEYBINDINGS["duplicateBefore"] == "alt+I"
        assert DEFAULT_KEYBINDINGS["startEdit"] == "f2"
        assert DEFAULT_KEYBINDINGS["confirm"] == "enter"
        assert DEFAULT_KEYBINDINGS["abort"] == "escape"


# ---------------------------------------------------------------------------
# KeybindingsManager
# ---------------------------------------------------------------------------


class TestKeybindingsManager:
    """The manager resolves actions to keystrokes and matches input."""

    def test_default_construction(self):
        mgr = KeybindingsManager()
        assert mgr.get_keys("startEdit") == [KeyStroke("f2")]

    def test_multi_key_action(self):
        mgr = KeybindingsManager()
        assert mgr.get_keys("cursorUp") == [KeyStroke("up"), KeyStroke("k")]

    def test_unknown_action_returns_empty(self):
        mgr = KeybindingsManager()
        assert mgr.get_keys("nonExistentAction") == []  # type: ignore[arg-type]
        assert mgr.matches(KeyStroke("i"), "nonExistentAction") is False  # type: ignore[arg-type]

    @pytest.mark.parametrize(
        "data, action",
        [
            ("i", "insertAfter"),
            ("I", "insertBefore"),
            ("\x1bi", "duplicateAfter"),
            ("\x1bI", "duplicateBefore"),
            ("\x1bOQ", "startEdit"),
            ("\r", "confirm"),
            ("\x1b", "abort"),
            ("\x1b[A", "cursorUp"),
            ("j", "cursorDown"),
            ("G", "cursorBottom"),
            ("\x1b[6~", "pageDown"),
            ("K", "moveItemUp"),
            ("D", "deleteItem"),
            ("\x02", "cursorLeft"),
            ("\x1b[1;3C", "cursorWordRight"),
            ("\x1b\x7f", "deleteWordBackward"),
            ("\x0b", "deleteToLineEnd"),
            ("\x03", "quit"),
        ],
    )
    def test_raw_input_matches_action(self, data, action):
        mgr = KeybindingsManager()
        assert mgr.matches(_stroke(data), action) is True

    def test_case_distinguishes_actions(self):
        mgr = KeybindingsManager()
        assert mgr.matches(KeyStroke("i"), "insertBefore") is False
        assert mgr.matches(KeyStroke("I"), "insertAfter") is False
        assert mgr.matches(KeyStroke("i", alt=True), "insertAfter") is False

    def test_override_replaces_default(self):
        mgr = KeybindingsManager(config={"insertAfter": "a"})
        assert mgr.matches(KeyStroke("a"), "insertAfter") is True
        assert mgr.matches(KeyStroke("i"), "insertAfter") is False

    def test_override_preserves_other_defaults(self):
        mgr = KeybindingsManager(config={"insertAfter": "a"})
        assert mgr.matches(KeyStroke("I"), "insertBefore") is True

    def test_override_with_list(self):
        mgr = KeybindingsManager(config={"confirm": ["enter", "tab"]})
        assert mgr.matches(KeyStroke("enter"), "confirm") is True
        assert mgr.matches(KeyStroke("tab"), "confirm") is True

    def test_invalid_override_raises(self):
        with pytest.raises(KeyIdError):
            KeybindingsManager(config={"confirm": "hyper+enter"})

    def test_set_config(self):
        mgr = KeybindingsManager()
        mgr.set_config({"startEdit": "e"})
        assert mgr.matches(KeyStroke("e"), "startEdit") is True
        assert mgr.matches(KeyStroke("f2"), "startEdit") is False
        assert mgr.matches(KeyStroke("enter"), "confirm") is True


# ---------------------------------------------------------------------------
# Global singleton -- get_keybindings / set_keybindings
# ---------------------------------------------------------------------------


class TestGlobalKeybindings:
    """get_keybindings / set_keybindings manage a process-wide instance."""

    def teardown_method(self):
        kb_module._global_keybindings = None

    def test_get_returns_same_instance(self):
        assert get_keybindings() is get_keybindings()

    def test_set_replaces_global(self):
        custom = KeybindingsManager(config={"quit": "x"})
        set_keybindings(custom)
        assert get_keybindings() is custom
        assert get_keybindings().matches(KeyStroke("x"), "quit") is True

    def test_reset_to_none_creates_new_default(self):
        first = get_keybindings()
        kb_module._global_keybindings = None
        second = get_keybindings()
        assert second is not first
        assert second.matches(KeyStroke("q"), "quit") is True


# ---------------------------------------------------------------------------
# Config files
# ---------------------------------------------------------------------------


class TestValidateKeybindingsConfig:
    """Bad entries are logged and dropped; good ones are kept."""

    def test_keeps_valid_entries(self):
        config = validate_keybindings_config({"insertAfter": "a", "quit": ["x", "ctrl+q"]})
        assert config == {"insertAfter": ["a"], "quit": ["x", "ctrl+q"]}

    def test_drops_unknown_action(self, caplog):
        with caplog.at_level(logging.WARNING, logger="cm.tui.keybindings"):
            config = validate_keybindings_config({"launchRockets": "x"})
        assert config == {}
        assert "launchRockets" in caplog.text

    def test_drops_bad_key_id(self, caplog):
        with caplog.at_level(logging.WARNING, logger="cm.tui.keybindings"):
            config = validate_keybindings_config({"confirm": ["enter", "hyper+x"], "abort": "q"})
        assert config == {"abort": ["q"]}
        assert "confirm" in caplog.text

    def test_drops_wrong_type(self):
        assert validate_keybindings_config({"confirm": 13, "abort": [None]}) == {}


class TestLoadKeybindingsConfig:
    """load_keybindings_config reads overrides from JSON files."""

    def test_missing_file(self, tmp_path):
        assert load_keybindings_config(str(tmp_path / "nope.json")) == {}

    def test_reads_file(self, tmp_path):
        path = tmp_path / "keybindings.json"
        path.write_text(json.dumps({"startEdit": "e", "bogus": "x"}))
        assert load_keybindings_config(str(path)) == {"startEdit": ["e"]}

    def test_invalid_json(self, tmp_path, caplog):
        path = tmp_path / "keybindings.json"
        path.write_text("{not json")
        with caplog.at_level(logging.WARNING, logger="cm.tui.keybindings"):
            assert load_keybindings_config(str(path)) == {}
        assert "Could not load keybindings" in caplog.text

    def test_non_object(self, tmp_path, caplog):
        path = tmp_path / "keybindings.json"
        path.write_text(json.dumps(["i", "I"]))
        with caplog.at_level(logging.WARNING, logger="cm.tui.keybindings"):
            assert load_keybindings_config(str(path)) == {}
        assert "JSON object" in caplog.text

    def test_env_var_selects_file(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.json"
        path.write_text(json.dumps({"quit": "ctrl+q"}))
        monkeypatch.setenv(KEYBINDINGS_ENV_VAR, str(path))
        assert default_keybindings_path() == str(path)
        assert load_keybindings_config() == {"quit": ["ctrl+q"]}

    def test_default_path_under_home(self, tmp_path, monkeypatch):
        monkeypatch.delenv(KEYBINDINGS_ENV_VAR, raising=False)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert default_keybindings_path() == str(tmp_path / ".cm" / "keybindings.json")

    def test_loaded_config_feeds_manager(self, tmp_path):
        path = tmp_path / "keybindings.json"
        path.write_text(json.dumps({"insertAfter": ["a", "alt+a"]}))
        mgr = KeybindingsManager(load_keybindings_config(str(path)))
        assert mgr.matches(_stroke("\x1ba"), "insertAfter") is True
        assert mgr.matches(_stroke("i"), "insertAfter") is False
