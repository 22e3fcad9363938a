import logging

import pytest

from urlref.query import (
    InvalidKeyPathError,
    KeyLengthExceededError,
    QueryError,
    assign,
    decode,
    encode,
    scan,
    split_key,
)


class TestEncode:
    def test_simple(self):
        assert encode({"foo": "bar"}) == "foo=bar"

    def test_array(self):
        assert encode({"tags": ["ruby", "http"]}) == "tags[]=ruby&tags[]=http"

    def test_nested(self):
        assert encode({"user": {"name": "Alice", "role": "admin"}}) == "user[name]=Alice&user[role]=admin"

    def test_array_of_objects(self):
        assert encode({"items": [{"name": "a"}, {"name": "b"}]}) == "items[][name]=a&items[][name]=b"

    def test_escapes_keys_and_values(self):
        assert encode({"my name": "Bob Dole"}) == "my%20name=Bob%20Dole"

    def test_non_string_values(self):
        assert encode({"x": 10, "array": [1, 2, 3]}) == "x=10&array[]=1&array[]=2&array[]=3"

    def test_none_is_a_bare_key(self):
        assert encode(None, "prefix") == "prefix"
        assert encode({"flag": None, "a": "1"}) == "flag&a=1"

    def test_empty_renderings_are_dropped(self):
        assert encode({"empty": {}, "a": "1"}) == "a=1"

    def test_top_level_scalar_is_rejected(self):
        with pytest.raises(ValueError, match="must be a mapping"):
            encode("value")


class TestScan:
    def test_pairs(self):
        assert list(scan("a=1&b=2")) == [("a", "1"), ("b", "2")]

    def test_skips_empty_assignments(self):
        assert list(scan("a=1&&b=2&")) == [("a", "1"), ("b", "2")]

    def test_missing_value(self):
        assert list(scan("flag&a=")) == [("flag", None), ("a", "")]

    def test_splits_on_first_equals(self):
        assert list(scan("expr=a=b")) == [("expr", "a=b")]

    def test_unescapes_key_and_value(self):
        assert list(scan("my%20name=Bob%20Dole%26Co")) == [("my name", "Bob Dole&Co")]


class TestSplitKey:
    def test_plain(self):
        assert split_key("foo") == ["foo"]

    def test_nested(self):
        assert split_key("a[b][c]") == ["a", "b", "c"]

    def test_array(self):
        assert split_key("a[]") == ["a", ""]

    def test_array_of_objects(self):
        assert split_key("items[][name]") == ["items", "", "name"]

    def test_empty(self):
        assert split_key("") == []


class TestAssign:
    def test_simple(self):
        parameters = {}
        assign(split_key("foo"), "bar", parameters)
        assert parameters == {"foo": "bar"}

    def test_array(self):
        parameters = {}
        keys = split_key("tags[]")
        assign(keys, "ruby", parameters)
        assign(keys, "http", parameters)
        assert parameters == {"tags": ["ruby", "http"]}

    def test_nested(self):
        parameters = {}
        assign(split_key("user[name]"), "Alice", parameters)
        assert parameters == {"user": {"name": "Alice"}}

    def test_array_of_objects_with_one_property(self):
        parameters = {}
        keys = split_key("items[][name]")
        assign(keys, "a", parameters)
        assign(keys, "b", parameters)
        assert parameters == {"items": [{"name": "a"}, {"name": "b"}]}

    def test_array_of_objects_with_several_properties(self):
        parameters = {}
        name = split_key("items[][name]")
        value = split_key("items[][value]")
        assign(name, "a", parameters)
        assign(value, "1", parameters)
        assign(name, "b", parameters)
        assign(value, "2", parameters)
        assert parameters == {"items": [{"name": "a", "value": "1"}, {"name": "b", "value": "2"}]}

    def test_conflicting_types(self):
        parameters = {}
        assign(split_key("a"), "1", parameters)
        with pytest.raises(InvalidKeyPathError):
            assign(split_key("a[b]"), "2", parameters)


class TestDecode:
    def test_simple(self):
        assert decode("name=Alice&age=30") == {"name": "Alice", "age": "30"}

    def test_array(self):
        assert decode("tags[]=ruby&tags[]=http") == {"tags": ["ruby", "http"]}

    def test_nested(self):
        assert decode("user[name]=Alice&user[role]=admin") == {"user": {"name": "Alice", "role": "admin"}}

    def test_groups_array_of_objects(self):
        assert decode("items[][name]=a&items[][value]=1&items[][name]=b&items[][value]=2") == {
            "items": [{"name": "a", "value": "1"}, {"name": "b", "value": "2"}]
        }

    def test_deeply_nested(self):
        assert decode("a[b][][c]=1") == {"a": {"b": [{"c": "1"}]}}

    def test_bare_key(self):
        assert decode("flag") == {"flag": None}

    def test_key_factory(self):
        assert decode("foo=bar&a[]=1", key_factory=str.upper) == {"FOO": "bar", "A": ["1"]}

    def test_key_length_exceeded(self):
        with pytest.raises(KeyLengthExceededError, match="Key length exceeded"):
            decode("a[b][c][d][e][f][g][h][i]=value")

    def test_key_length_at_limit(self):
        assert decode("a[b][c][d][e][f][g][h]=value")["a"]["b"]["c"]["d"]["e"]["f"]["g"]["h"] == "value"

    def test_custom_maximum(self):
        with pytest.raises(KeyLengthExceededError):
            decode("a[b][c]=1", maximum=2)

    def test_empty_key_path(self):
        with pytest.raises(InvalidKeyPathError, match="Invalid key path"):
            decode("=value")

    def test_errors_are_value_errors(self):
        assert issubclass(InvalidKeyPathError, QueryError)
        assert issubclass(KeyLengthExceededError, ValueError)

    def test_stops_at_offending_assignment(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="urlref.query"):
            with pytest.raises(InvalidKeyPathError):
                decode("a=1&=2&b=3")
        assert "rejecting empty key path" in caplog.text

    def test_roundtrip_through_encode(self):
        parameters = {"user": {"name": "Alice Smith"}, "tags": ["a", "b"]}
        assert decode(encode(parameters)) == parameters
