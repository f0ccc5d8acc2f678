"""Keymap parsing and classification tests"""

import json

import pytest

from schemaui.app import KeyAction, Keymap, KeyPattern
from schemaui.app.input import (
    AppDispatch,
    FormDispatch,
    InputDispatch,
    ListMove,
    Save,
    resolve,
)
from schemaui.enums import ActionKind, KeyCode, KeymapContext
from schemaui.errors import KeymapException
from schemaui.form import FocusNextSection, FocusPrevField
from schemaui.form.keys import KeyEvent


@pytest.fixture(scope="module")
def keymap():
    return Keymap.builtin()


class TestKeyPattern:
    """Tests for combo parsing"""

    def test_parse_modifiers(self):
        pattern = KeyPattern.parse("Ctrl+Shift+Tab")

        assert pattern.code == KeyCode.TAB
        assert (pattern.ctrl, pattern.shift, pattern.alt) == (True, True, False)
        assert pattern.display == "Ctrl+Shift+Tab"

    def test_parse_char_is_lowercased(self):
        pattern = KeyPattern.parse("  Ctrl+S ")

        assert pattern.code == KeyCode.CHAR
        assert pattern.char == "s"
        assert pattern.display == "Ctrl+S"

    def test_parse_plus_key(self):
        pattern = KeyPattern.parse("Ctrl++")

        assert pattern.char == "+"
        assert pattern.ctrl is True

    @pytest.mark.parametrize(
        "spec,message",
        [
            ("", "combo cannot be empty"),
            ("Ctrl+F13", "unsupported key 'F13'"),
            ("Super+S", "unsupported modifier 'super'"),
        ],
    )
    def test_parse_errors(self, spec, message):
        with pytest.raises(ValueError, match=message):
            KeyPattern.parse(spec)

    def test_char_patterns_tolerate_extra_shift(self):
        pattern = KeyPattern.parse("Ctrl+S")

        assert pattern.matches(KeyEvent.of_char("S", ctrl=True, shift=True))
        assert not pattern.matches(KeyEvent.of_char("s"))
        assert not pattern.matches(KeyEvent.of_char("s", ctrl=True, alt=True))

    def test_named_patterns_need_exact_shift(self):
        pattern = KeyPattern.parse("Tab")

        assert pattern.matches(KeyEvent.of(KeyCode.TAB))
        assert not pattern.matches(KeyEvent.of(KeyCode.TAB, shift=True))
        assert KeyPattern.parse("BackTab").matches(KeyEvent.of(KeyCode.BACKTAB, shift=True))


class TestKeymap:
    """Tests for keymap documents"""

    def test_builtin_classification(self, keymap):
        assert keymap.classify(KeyEvent.of_char("s", ctrl=True)) == KeyAction(ActionKind.SAVE)
        assert keymap.classify(KeyEvent.of(KeyCode.DOWN, ctrl=True)) == KeyAction(ActionKind.LIST_MOVE, 1)
        assert keymap.classify(KeyEvent.of(KeyCode.DOWN)) == KeyAction(ActionKind.FIELD_STEP, 1)
        assert keymap.classify(KeyEvent.of_char("a")) is None

    def test_help_text_per_context(self, keymap):
        overlay_help = keymap.help_text(KeymapContext.OVERLAY)

        assert overlay_help.startswith("Ctrl+S -> Save • Esc -> Cancel")
        assert "Ctrl+Q/Ctrl+C -> Quit" in keymap.help_text(KeymapContext.DEFAULT)
        assert "Ctrl+N -> Add entry" not in keymap.help_text(KeymapContext.DEFAULT)

    def test_first_matching_entry_wins(self):
        document = [
            {"id": "a", "description": "A", "contexts": ["default"], "action": {"kind": "save"}, "combos": ["Ctrl+X"]},
            {"id": "b", "description": "B", "contexts": ["default"], "action": {"kind": "quit"}, "combos": ["Ctrl+X"]},
        ]

        keymap = Keymap.from_json(json.dumps(document))
        assert keymap.classify(KeyEvent.of_char("x", ctrl=True)).kind == ActionKind.SAVE

    def test_unknown_contexts_are_skipped(self):
        document = [
            {"id": "a", "description": "A", "contexts": ["popup", "overlay"], "action": {"kind": "save"}, "combos": ["F"]}
        ]

        keymap = Keymap.from_json(json.dumps(document))
        assert keymap.bindings[0].contexts == (KeymapContext.OVERLAY,)

    @pytest.mark.parametrize(
        "document,message",
        [
            ("not json", "invalid keymap JSON"),
            ('{"id": "x"}', "must be a list"),
            ('[{"id": "x"}]', "invalid keymap entry"),
            (
                '[{"id": "x", "description": "X", "contexts": ["popup"], "action": {"kind": "save"}, "combos": ["F"]}]',
                "must declare contexts",
            ),
            (
                '[{"id": "x", "description": "X", "contexts": ["default"], "action": {"kind": "save"}, "combos": []}]',
                "must declare combos",
            ),
            (
                '[{"id": "x", "description": "X", "contexts": ["default"], "action": {"kind": "save"}, "combos": ["Hyper+A"]}]',
                "failed to parse combo 'Hyper\\+A' for x",
            ),
            (
                '[{"id": "x", "description": "X", "contexts": ["default"], "action": {"kind": "listMove"}, "combos": ["F"]}]',
                "invalid keymap entry",
            ),
        ],
    )
    def test_invalid_documents(self, document, message):
        with pytest.raises(KeymapException, match=message):
            Keymap.from_json(document)

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(KeymapException, match="keymap file not found"):
            Keymap.load(str(tmp_path / "missing.json"))

    def test_load_custom_file(self, tmp_path):
        path = tmp_path / "keys.json"
        path.write_text(
            json.dumps(
                [{"id": "s", "description": "Store", "contexts": ["default"], "action": {"kind": "save"}, "combos": ["F"]}]
            )
        )

        keymap = Keymap.load(str(path))
        assert keymap.help_text(KeymapContext.DEFAULT) == "F -> Store"
        assert keymap.help_text(KeymapContext.OVERLAY) is None


def test_resolve_maps_actions_to_commands():
    key = KeyEvent.of_char("x")

    assert resolve(None, key) == InputDispatch(key)
    assert resolve(KeyAction(ActionKind.SAVE), key) == AppDispatch(Save())
    assert resolve(KeyAction(ActionKind.FIELD_STEP, -1), key) == FormDispatch(FocusPrevField())
    assert resolve(KeyAction(ActionKind.SECTION_STEP, 1), key) == FormDispatch(FocusNextSection(1))
    assert resolve(KeyAction(ActionKind.LIST_MOVE, -1), key) == AppDispatch(ListMove(-1))
