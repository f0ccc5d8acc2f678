"""Field component behaviour tests"""

import pytest

from schemaui.enums import ComponentKind, KeyCode
from schemaui.errors import FieldCoercionError
from schemaui.form import FieldState
from schemaui.form.keys import KeyEvent
from schemaui.form.palette import BoolTogglePresentation, ComponentPalette, EnumBehaviour, configure
from schemaui.schema import build_form_schema


@pytest.fixture(autouse=True)
def default_palette():
    configure(None)
    yield
    configure(None)


def make_field(prop, required=False):
    schema = {"properties": {"f": prop}}
    if required:
        schema["required"] = ["f"]
    field_schema = next(build_form_schema(schema).iter_fields())
    return FieldState.from_schema(field_schema)


def press(field_state, *keys):
    return [field_state.handle_key(key) for key in keys]


def chars(text):
    return [KeyEvent.of_char(ch) for ch in text]


class TestText:
    """Tests for text buffers"""

    def test_typing_and_backspace(self):
        field_state = make_field({"type": "string"})
        press(field_state, *chars("abc"), KeyEvent.of(KeyCode.BACKSPACE))

        assert field_state.current_value() == "ab"
        assert field_state.dirty is True

    def test_delete_clears_buffer(self):
        field_state = make_field({"type": "string", "default": "seed"})
        press(field_state, KeyEvent.of(KeyCode.DELETE))

        assert field_state.current_value() is None

    def test_ctrl_chars_are_ignored(self):
        field_state = make_field({"type": "string"})

        assert press(field_state, KeyEvent.of_char("x", ctrl=True)) == [False]
        assert field_state.dirty is False

    def test_integer_arrows_step(self):
        field_state = make_field({"type": "integer", "default": 5})
        press(field_state, KeyEvent.of(KeyCode.RIGHT), KeyEvent.of(KeyCode.RIGHT, shift=True))

        assert field_state.current_value() == 16

    def test_integer_arrow_on_garbage_starts_from_zero(self):
        field_state = make_field({"type": "integer"})
        press(field_state, *chars("zz"), KeyEvent.of(KeyCode.LEFT))

        assert field_state.current_value() == -1

    def test_number_step_keeps_integral_rendering(self):
        field_state = make_field({"type": "number", "default": 1.5})
        press(field_state, KeyEvent.of(KeyCode.RIGHT))
        assert field_state.display_value() == "2.5"

        field_state.seed_value(2.0)
        press(field_state, KeyEvent.of(KeyCode.LEFT))
        assert field_state.display_value() == "1"

    def test_number_rejects_non_finite(self):
        field_state = make_field({"type": "number"})
        press(field_state, *chars("inf"))

        with pytest.raises(FieldCoercionError, match="expected number"):
            field_state.current_value()

    @pytest.mark.parametrize("text", ["1_000", "\u0661\u0662", "0x10", "1.0", "9223372036854775808x"])
    def test_integer_accepts_ascii_digits_only(self, text):
        field_state = make_field({"type": "integer"})
        press(field_state, *chars(text))

        with pytest.raises(FieldCoercionError, match="expected integer"):
            field_state.current_value()

    def test_integer_signed_and_padded(self):
        field_state = make_field({"type": "integer"})
        press(field_state, *chars(" -042 "))

        assert field_state.current_value() == -42

    def test_integer_limited_to_64_bits(self):
        field_state = make_field({"type": "integer"})
        press(field_state, *chars("9223372036854775807"))
        assert field_state.current_value() == 2**63 - 1

        press(field_state, KeyEvent.of(KeyCode.BACKSPACE), *chars("8"))
        with pytest.raises(FieldCoercionError, match="integer out of range"):
            field_state.current_value()

        field_state = make_field({"type": "integer"})
        press(field_state, *chars("-9223372036854775809"))
        with pytest.raises(FieldCoercionError, match="integer out of range"):
            field_state.current_value()

    @pytest.mark.parametrize("text", ["1_0", "\u0661.5", "nan", "1e", "."])
    def test_number_rejects_python_only_spellings(self, text):
        field_state = make_field({"type": "number"})
        press(field_state, *chars(text))

        with pytest.raises(FieldCoercionError, match="expected number"):
            field_state.current_value()

    @pytest.mark.parametrize("text, expected", [("-1.5", -1.5), (".5", 0.5), ("2.", 2.0), ("1e3", 1000.0)])
    def test_number_accepts_decimal_and_exponent(self, text, expected):
        field_state = make_field({"type": "number"})
        press(field_state, *chars(text))

        assert field_state.current_value() == expected

    def test_arrows_do_nothing_for_strings(self):
        field_state = make_field({"type": "string"})

        assert press(field_state, KeyEvent.of(KeyCode.RIGHT)) == [False]

    def test_json_field_parses_json(self):
        field_state = make_field({"type": "object"})
        field_state.seed_value({"a": 1})
        assert field_state.display_value() == '{"a": 1}'
        assert field_state.current_value() == {"a": 1}

        press(field_state, KeyEvent.of(KeyCode.BACKSPACE))
        with pytest.raises(FieldCoercionError, match="expected JSON value"):
            field_state.current_value()


class TestBool:
    def test_space_and_arrows_toggle(self):
        field_state = make_field({"type": "boolean"})
        press(field_state, KeyEvent.of_char(" "))
        assert field_state.current_value() is True
        press(field_state, KeyEvent.of(KeyCode.LEFT))
        assert field_state.current_value() is False

    def test_palette_labels_and_toggle_switches(self):
        configure(
            ComponentPalette(
                boolean=BoolTogglePresentation(true_label="on", false_label="off", toggle_with_space=False)
            )
        )
        field_state = make_field({"type": "boolean", "default": True})

        assert field_state.display_value() == "on"
        assert press(field_state, KeyEvent.of_char(" ")) == [False]


class TestEnum:
    def test_arrows_cycle_with_wrap(self):
        field_state = make_field({"enum": ["a", "b", "c"], "default": "c"})
        press(field_state, KeyEvent.of(KeyCode.DOWN))

        assert field_state.current_value() == "a"

    def test_without_wrap_clamps(self):
        configure(ComponentPalette(enum=EnumBehaviour(wrap_around=False)))
        field_state = make_field({"enum": ["a", "b"]})

        assert press(field_state, KeyEvent.of(KeyCode.UP)) == [False]
        assert field_state.current_value() == "a"

    def test_returns_original_json_values(self):
        field_state = make_field({"enum": [1, 2]})
        field_state.set_enum_index(1)

        assert field_state.current_value() == 2


class TestMultiSelect:
    def test_flags_map_to_values(self):
        field_state = make_field({"type": "array", "items": {"enum": ["x", "y", "z"]}, "default": ["z"]})
        assert field_state.component.kind == ComponentKind.MULTI_SELECT
        assert field_state.current_value() == ["z"]

        assert field_state.set_multi_state([True, False, True]) is True
        assert field_state.current_value() == ["x", "z"]
        assert field_state.display_value() == "[x, z]"

    def test_wrong_flag_count_is_ignored(self):
        field_state = make_field({"type": "array", "items": {"enum": ["x", "y"]}})

        assert field_state.set_multi_state([True]) is False


class TestArrayBuffer:
    def test_requires_json_array(self):
        field_state = make_field({"type": "array"})
        press(field_state, *chars('{"a": 1}'))

        with pytest.raises(FieldCoercionError, match="expected JSON array"):
            field_state.current_value()

    def test_empty_buffer(self):
        assert make_field({"type": "array"}).current_value() is None
        assert make_field({"type": "array"}, required=True).current_value() == []

    def test_parses_array(self):
        field_state = make_field({"type": "array"})
        press(field_state, *chars("[1, {}]"))

        assert field_state.current_value() == [1, {}]
