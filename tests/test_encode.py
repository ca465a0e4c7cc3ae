"""Tests for TOON encoder."""

from dataclasses import dataclass
from datetime import date, datetime

import pytest

from toonkit import EncodeError, EncodeOptions, ErrorReason, OptionsError, decode, encode, encode_lines, try_encode


class TestPrimitives:
    """Test encoding of primitive values."""

    def test_null(self):
        assert encode(None) == "null"

    def test_true(self):
        assert encode(True) == "true"

    def test_false(self):
        assert encode(False) == "false"

    def test_integer(self):
        assert encode(42) == "42"
        assert encode(-17) == "-17"
        assert encode(0) == "0"

    def test_float(self):
        assert encode(3.14) == "3.14"
        assert encode(-2.5) == "-2.5"
        assert encode(0.0) == "0"

    def test_whole_float_renders_as_integer(self):
        assert encode(30.0) == "30"
        assert encode(-0.0) == "0"

    def test_small_float_avoids_exponent(self):
        assert encode(1e-07) == "0.0000001"

    def test_float_special_values(self):
        assert encode(float("nan")) == "null"
        assert encode(float("inf")) == "null"
        assert encode(float("-inf")) == "null"

    def test_simple_string(self):
        assert encode("hello") == "hello"

    def test_string_with_spaces(self):
        assert encode("hello world") == "hello world"

    def test_string_needs_quotes(self):
        # Contains colon
        assert encode("key: value") == '"key: value"'
        # Contains brackets
        assert encode("array[0]") == '"array[0]"'
        # Contains newline
        assert encode("line1\nline2") == '"line1\\nline2"'
        # Contains tab
        assert encode("col1\tcol2") == '"col1\\tcol2"'

    def test_reserved_literals(self):
        assert encode("true") == '"true"'
        assert encode("false") == '"false"'
        assert encode("null") == '"null"'

    def test_reserved_literals_are_case_sensitive(self):
        assert encode("True") == "True"

    def test_numeric_strings(self):
        assert encode("123") == '"123"'
        assert encode("-45") == '"-45"'
        assert encode("3.14") == '"3.14"'
        assert encode("05") == '"05"'

    def test_leading_dash(self):
        assert encode("-dash") == '"-dash"'

    def test_empty_string(self):
        assert encode("") == '""'

    def test_surrounding_whitespace(self):
        assert encode(" padded ") == '" padded "'


class TestObjects:
    """Test encoding of objects."""

    def test_empty_object(self):
        assert encode({}) == ""

    def test_simple_object(self):
        assert encode({"name": "Alice", "age": 30}) == "age: 30\nname: Alice"

    def test_keys_sorted(self):
        assert encode({"b": 1, "a": 2, "c": 3}) == "a: 2\nb: 1\nc: 3"

    def test_nested_object(self):
        result = encode({"user": {"name": "Bob", "role": "admin"}})
        assert result == "user:\n  name: Bob\n  role: admin"

    def test_empty_nested_object(self):
        assert encode({"data": {}}) == "data:"

    def test_quoted_key(self):
        assert encode({"key with spaces": "value"}) == '"key with spaces": value'

    def test_dotted_key_is_bare(self):
        assert encode({"a.b": 1}) == "a.b: 1"

    def test_numeric_key_is_quoted(self):
        assert encode({"123": "x"}) == '"123": x'

    def test_key_with_trailing_newline_is_quoted(self):
        result = encode({"a\n": 1})
        assert result == '"a\\n": 1'
        assert decode(result) == {"a\n": 1}


class TestArraysInline:
    """Test inline primitive array encoding."""

    def test_string_array(self):
        assert encode({"tags": ["a", "b", "c"]}) == "tags[3]: a,b,c"

    def test_number_array(self):
        assert encode({"nums": [1, 2, 3]}) == "nums[3]: 1,2,3"

    def test_mixed_primitives(self):
        assert encode({"mix": [1, "two", True, None]}) == "mix[4]: 1,two,true,null"

    def test_empty_array(self):
        assert encode({"items": []}) == "items[0]:"

    def test_values_with_delimiter_are_quoted(self):
        assert encode({"items": ["a,b", "c"]}) == 'items[2]: "a,b",c'


class TestArraysTabular:
    """Test tabular array encoding."""

    def test_simple_tabular(self):
        result = encode({"users": [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]})
        assert result.split("\n") == ["users[2]{id,name}:", "  1,Alice", "  2,Bob"]

    def test_fields_sorted(self):
        users = [{"name": "Alice", "age": 30}, {"name": "Bob", "age": 25}]
        assert encode({"users": users}) == "users[2]{age,name}:\n  30,Alice\n  25,Bob"

    def test_tabular_with_quoted_values(self):
        result = encode({"data": [{"key": "a,b"}, {"key": "c,d"}]})
        assert result.split("\n") == ["data[2]{key}:", '  "a,b"', '  "c,d"']

    def test_differing_keys_fall_back_to_list(self):
        result = encode({"items": [{"a": 1}, {"b": 2}]})
        assert result == "items[2]:\n  - a: 1\n  - b: 2"

    def test_nested_values_fall_back_to_list(self):
        result = encode({"items": [{"a": [1]}, {"a": [2]}]})
        assert result.split("\n")[0] == "items[2]:"

    def test_empty_objects_are_not_tabular(self):
        assert encode({"items": [{}, {}]}) == "items[2]:\n  -\n  -"


class TestArraysList:
    """Test list format array encoding."""

    def test_nested_objects(self):
        result = encode({"items": [{"a": {"b": 1}}, {"a": {"b": 2}}]})
        assert result.split("\n") == [
            "items[2]:",
            "  - a:",
            "      b: 1",
            "  - a:",
            "      b: 2",
        ]

    def test_mixed_types(self):
        result = encode({"items": [1, {"x": 2}, "three"]})
        assert result.split("\n") == ["items[3]:", "  - 1", "  - x: 2", "  - three"]

    def test_object_item_fields_align_under_first(self):
        result = encode({"items": [{"a": 1, "b": [1, 2]}, 3]})
        assert result.split("\n") == ["items[2]:", "  - a: 1", "    b[2]: 1,2", "  - 3"]

    def test_tabular_field_inside_item(self):
        result = encode({"items": [{"rows": [{"x": 1}, {"x": 2}]}, 0]})
        assert result.split("\n") == ["items[2]:", "  - rows[2]{x}:", "      1", "      2", "  - 0"]

    def test_nested_array_items(self):
        result = encode({"matrix": [[1, 2], [3, 4]]})
        assert result == "matrix[2]:\n  - [2]: 1,2\n  - [2]: 3,4"

    def test_nested_list_inside_list(self):
        result = encode({"items": [[{"a": 1}, 2]]})
        assert result.split("\n") == ["items[1]:", "  - [2]:", "      - a: 1", "      - 2"]


class TestRootArray:
    """Test root-level array encoding."""

    def test_root_inline(self):
        assert encode([1, 2, 3]) == "[3]: 1,2,3"

    def test_root_empty(self):
        assert encode([]) == "[0]:"

    def test_root_tabular(self):
        assert encode([{"a": 1}, {"a": 2}]).split("\n") == ["[2]{a}:", "  1", "  2"]

    def test_root_tabular_fields_with_newline_are_quoted(self):
        data = [{"\\B": False, "m5\n": None}, {"\\B": True, "m5\n": 1}]
        result = encode(data)
        assert result.split("\n") == ['[2]{"\\\\B","m5\\n"}:', "  false,null", "  true,1"]
        assert decode(result) == data

    def test_root_list(self):
        result = encode([{"a": {"b": 1}}, {"a": {"b": 2}}])
        lines = result.split("\n")
        assert lines[0] == "[2]:"
        assert lines[1] == "  - a:"


class TestEscapeSequences:
    """Test string escape sequence encoding."""

    def test_newline_escape(self):
        assert encode({"content": "line1\nline2"}) == 'content: "line1\\nline2"'

    def test_tab_escape(self):
        assert encode({"content": "col1\tcol2"}) == 'content: "col1\\tcol2"'

    def test_carriage_return_escape(self):
        assert encode({"content": "line1\rline2"}) == 'content: "line1\\rline2"'

    def test_backslash_escape(self):
        assert encode({"path": "C:\\Users\\name"}) == 'path: "C:\\\\Users\\\\name"'

    def test_quote_escape(self):
        assert encode({"msg": 'He said "hello"'}) == 'msg: "He said \\"hello\\""'

    def test_multiple_escapes(self):
        result = encode({"text": 'Line 1\nLine 2\twith "quotes"'})
        assert result == 'text: "Line 1\\nLine 2\\twith \\"quotes\\""'

    def test_multiline_content(self):
        content = 'def hello():\n    print("Hello, World!")\n    return True'
        result = encode({"code": content})
        assert "\n" not in result
        assert "\\n" in result


class TestDelimiters:
    """Test delimiter options."""

    def test_tab_delimiter(self):
        result = encode({"items": [1, 2, 3]}, EncodeOptions(delimiter="\t"))
        assert result == "items[3\t]: 1\t2\t3"

    def test_pipe_delimiter(self):
        result = encode({"items": [1, 2, 3]}, EncodeOptions(delimiter="|"))
        assert result == "items[3|]: 1|2|3"

    def test_pipe_delimiter_still_quotes_commas(self):
        assert encode({"items": ["a,b", "c"]}, {"delimiter": "|"}) == 'items[2|]: "a,b"|c'

    def test_pipe_delimiter_quotes_pipes(self):
        assert encode({"items": ["a|b"]}, {"delimiter": "|"}) == 'items[1|]: "a|b"'

    def test_tabular_header_uses_delimiter(self):
        result = encode({"rows": [{"a": 1, "b": 2}]}, {"delimiter": "|"})
        assert result == "rows[1|]{a|b}:\n  1|2"


class TestLengthMarker:
    """Test the optional length marker."""

    def test_inline(self):
        assert encode({"tags": ["a"]}, {"length_marker": "#"}) == "tags[#1]: a"

    def test_tabular(self):
        result = encode({"rows": [{"a": 1}]}, {"length_marker": "#"})
        assert result == "rows[#1]{a}:\n  1"

    def test_empty(self):
        assert encode({"items": []}, {"length_marker": "#"}) == "items[#0]:"


class TestIndentation:
    """Test indentation options."""

    def test_default_indent(self):
        assert encode({"a": {"b": 1}}) == "a:\n  b: 1"

    def test_custom_indent(self):
        assert encode({"a": {"b": 1}}, EncodeOptions(indent=4)) == "a:\n    b: 1"

    def test_indent_width_alias(self):
        assert encode({"a": {"b": 1}}, {"indent_width": 3}) == "a:\n   b: 1"


class TestNormalization:
    """Test value normalization before encoding."""

    def test_tuple_to_list(self):
        assert encode({"items": (1, 2, 3)}) == "items[3]: 1,2,3"

    def test_set_to_sorted_list(self):
        assert encode({"items": {3, 1, 2}}) == "items[3]: 1,2,3"

    def test_datetime_to_isoformat(self):
        dt = datetime(2024, 1, 15, 10, 30, 0)
        assert encode({"timestamp": dt}) == 'timestamp: "2024-01-15T10:30:00"'

    def test_date_to_isoformat(self):
        # Dates read as plain strings, no structural characters
        assert encode({"day": date(2024, 1, 15)}) == "day: 2024-01-15"

    def test_dataclass(self):
        @dataclass
        class Point:
            x: int
            y: int

        assert encode({"p": Point(1, 2)}) == "p:\n  x: 1\n  y: 2"


class TestErrors:
    """Test encoding failures."""

    def test_unsupported_value(self):
        with pytest.raises(EncodeError) as exc_info:
            encode({"blob": b"bytes"})
        assert exc_info.value.reason is ErrorReason.UNSUPPORTED_VALUE

    def test_unsupported_object(self):
        with pytest.raises(EncodeError):
            encode({"thing": object()})

    def test_circular_reference(self):
        data: dict = {}
        data["self"] = data
        with pytest.raises(EncodeError) as exc_info:
            encode(data)
        assert exc_info.value.reason is ErrorReason.CIRCULAR_REFERENCE

    def test_invalid_options(self):
        with pytest.raises(OptionsError):
            encode({"a": 1}, {"indent": 0})

    def test_unknown_option(self):
        with pytest.raises(OptionsError):
            encode({"a": 1}, {"compact": True})

    def test_encode_error_is_type_error(self):
        with pytest.raises(TypeError):
            encode({"blob": b"bytes"})


class TestTryEncode:
    """Test the Result-returning entry point."""

    def test_success(self):
        result = try_encode({"a": 1})
        assert result.success
        assert result.data == "a: 1"

    def test_failure(self):
        result = try_encode({"blob": b"bytes"})
        assert not result.success
        assert isinstance(result.error, EncodeError)

    def test_invalid_options_come_back_as_result(self):
        result = try_encode({"a": 1}, {"delimiter": ";"})
        assert isinstance(result.error, OptionsError)


class TestEncodeLines:
    """Test line-by-line encoding."""

    def test_lines(self):
        assert list(encode_lines({"a": {"b": 1}, "c": [1, 2]})) == ["a:", "  b: 1", "c[2]: 1,2"]

    def test_empty_object_yields_nothing(self):
        assert list(encode_lines({})) == []
