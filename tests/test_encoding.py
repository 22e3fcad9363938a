import pytest

from urlref.encoding import escape, escape_fragment, escape_path, unescape, unescape_path


class TestEscape:
    def test_special_characters(self):
        assert escape("hello world!") == "hello%20world%21"

    def test_unicode(self):
        assert escape("café") == "caf%C3%A9"

    def test_unreserved_characters_untouched(self):
        assert escape("Az09_.-") == "Az09_.-"

    def test_tilde_is_encoded(self):
        assert escape("~user") == "%7Euser"

    def test_structural_characters(self):
        assert escape("a=b&c/d") == "a%3Db%26c%2Fd"


class TestUnescape:
    def test_percent_encoded(self):
        assert unescape("hello%20world%21") == "hello world!"

    def test_unicode(self):
        assert unescape("caf%C3%A9") == "café"

    def test_path_separators(self):
        assert unescape("safe%2Fname") == "safe/name"
        assert unescape("name%5Cfile") == "name\\file"

    def test_malformed_sequence_left_alone(self):
        assert unescape("100%zz") == "100%zz"

    def test_invalid_utf8_is_replaced(self):
        assert unescape("%FF") == "�"
        assert unescape("a%C3b") == "a�b"


class TestUnescapePath:
    def test_percent_encoded(self):
        assert unescape_path("hello%20world%21") == "hello world!"

    def test_unicode(self):
        assert unescape_path("caf%C3%A9") == "café"

    def test_preserves_encoded_forward_slash(self):
        assert unescape_path("safe%2Fname") == "safe%2Fname"

    def test_preserves_encoded_backslash(self):
        assert unescape_path("name%5Cfile") == "name%5Cfile"

    def test_decodes_around_separators(self):
        assert unescape_path("My%20File%2Fname") == "My File%2Fname"
        assert unescape_path("folder%5Cname%20with%20spaces") == "folder%5Cname with spaces"

    @pytest.mark.parametrize("string", ["file%2fname", "file%2Fname", "file%5cname", "file%5Cname"])
    def test_separator_case_is_preserved(self, string):
        assert unescape_path(string) == string

    def test_unicode_next_to_separator(self):
        assert unescape_path("%E2%9D%A4%2F%E2%9D%A4") == "❤%2F❤"


class TestEscapePath:
    def test_spaces(self):
        assert escape_path("/path/with spaces/file.html") == "/path/with%20spaces/file.html"

    def test_separators_untouched(self):
        assert escape_path("/foo/bar") == "/foo/bar"

    def test_pchar_untouched(self):
        assert escape_path("/a:b@c!$&'()*+,;=~-") == "/a:b@c!$&'()*+,;=~-"

    def test_query_and_fragment_delimiters(self):
        assert escape_path("a?b#c") == "a%3Fb%23c"

    def test_percent_sign(self):
        assert escape_path("100%") == "100%25"

    def test_unicode(self):
        assert escape_path("I/❤️/UNICODE") == "I/%E2%9D%A4%EF%B8%8F/UNICODE"


class TestEscapeFragment:
    def test_allows_slash_and_question_mark(self):
        assert escape_fragment("section/1.2?query") == "section/1.2?query"

    def test_hash_is_encoded(self):
        assert escape_fragment("section#subsection") == "section%23subsection"

    def test_spaces(self):
        assert escape_fragment("All Your Base") == "All%20Your%20Base"
