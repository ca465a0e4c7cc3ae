"""Format-level guarantees and reference examples."""

import re

import pytest

from toonkit import ArrayFormat, DecodeError, ErrorReason, classify_array, decode, encode
from toonkit.primitives import parse_delimited

AWKWARD_STRINGS = [
    "",
    " ",
    "true",
    "false",
    "null",
    "007",
    "0",
    "-1.5e3",
    "-",
    "- item",
    ":",
    "a: b",
    "[3]: x",
    "{x}",
    "(x)",
    '"quoted"',
    "back\\slash",
    "a,b",
    "a|b",
    "a\tb",
    "a\n",
    "line\r\n",
    "".join(chr(c) for c in range(0x20)) + "\x7f",
    ":,[]{}()\"\\",
]


class TestReferenceExamples:
    """Reference encode/decode examples."""

    def test_object_keys_alphabetical(self):
        assert encode({"name": "Alice", "age": 30}) == "age: 30\nname: Alice"

    def test_inline_array(self):
        assert encode({"tags": ["a", "b", "c"]}) == "tags[3]: a,b,c"

    def test_empty_array(self):
        assert encode({"items": []}) == "items[0]:"

    def test_decode_inline_array(self):
        assert decode("tags[3]: a,b,c") == {"tags": ["a", "b", "c"]}

    def test_unparseable_line(self):
        with pytest.raises(DecodeError):
            decode("invalid: : syntax")

    def test_tabular_array(self):
        users = [{"name": "Alice", "age": 30}, {"name": "Bob", "age": 25}]
        assert encode({"users": users}) == "users[2]{age,name}:\n  30,Alice\n  25,Bob"


class TestRoundTrip:
    """decode(encode(v)) == v."""

    @pytest.mark.parametrize(
        "value",
        [
            None,
            True,
            0,
            -12,
            "plain",
            {"a": None, "b": [True, False], "c": {"d": 1, "e": "text"}},
            [{"id": 1, "ok": True}, {"id": 2, "ok": False}],
            {"deep": [[[1]], [{"x": [{"y": "z"}]}]]},
        ],
    )
    def test_safe_values(self, value):
        assert decode(encode(value)) == value

    @pytest.mark.parametrize("text", AWKWARD_STRINGS)
    def test_strings_needing_quotes(self, text):
        assert decode(encode({"k": text})) == {"k": text}

    @pytest.mark.parametrize("text", AWKWARD_STRINGS)
    def test_strings_in_arrays(self, text):
        data = {"inline": [text, text], "rows": [{"v": text}, {"v": text}], "list": [text, {"v": text}]}
        assert decode(encode(data)) == data

    @pytest.mark.parametrize("text", AWKWARD_STRINGS)
    def test_strings_as_keys(self, text):
        assert decode(encode({text: 1})) == {text: 1}


class TestArrayLengthInvariant:
    """The bracketed count always equals the element count."""

    @pytest.mark.parametrize(
        "values",
        [[], [1, 2, 3], [{"a": 1}] * 4, [{"a": 1}, {"b": 2}], [[1], [2, 3]], list(range(25))],
    )
    def test_header_count(self, values):
        first_line = encode({"arr": values}).split("\n")[0]
        assert int(re.search(r"\[(\d+)", first_line).group(1)) == len(values)

    def test_with_length_marker(self):
        assert encode({"arr": [1, 2]}, {"length_marker": "#"}).startswith("arr[#2]")


class TestFormatSelection:
    """Array format choice is a function of shape only."""

    def test_uniform_objects_are_tabular(self):
        assert classify_array([{"a": 1, "b": "x"}, {"a": 2, "b": None}]) is ArrayFormat.TABULAR

    def test_non_uniform_keys_are_list(self):
        assert classify_array([{"a": 1, "b": "x"}, {"a": 2}]) is ArrayFormat.LIST

    def test_non_primitive_field_is_list(self):
        assert classify_array([{"a": 1}, {"a": [2]}]) is ArrayFormat.LIST

    def test_empty(self):
        assert classify_array([]) is ArrayFormat.EMPTY

    def test_primitive_only(self):
        assert classify_array(["a", 1, None]) is ArrayFormat.INLINE


class TestDelimiterAwareSplit:
    def test_quoted_delimiter(self):
        assert parse_delimited('a,"b,c",d', ",") == ["a", "b,c", "d"]


class TestStrictIndentation:
    @pytest.mark.parametrize("indent", [2, 4])
    def test_rejects_non_multiple(self, indent):
        text = "a:\n" + " " * (indent + 1) + "b: 1"
        with pytest.raises(DecodeError) as exc_info:
            decode(text, {"indent": indent})
        assert exc_info.value.reason is ErrorReason.INDENTATION
